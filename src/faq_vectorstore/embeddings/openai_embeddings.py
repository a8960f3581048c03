"""
Embeddings Module - Single Responsibility: Generate text embeddings.

It has ONE job: convert text to vector embeddings.
- No storage logic, no document handling
- Failures from the underlying SDK surface as ProviderFailure
- Easy to swap for different embedding providers
"""

from __future__ import annotations

import hashlib
import logging
import os

import numpy as np
from openai import OpenAI, OpenAIError

from faq_vectorstore.core.errors import ProviderFailure
from faq_vectorstore.core.protocols import EmbeddingProvider

logger = logging.getLogger(__name__)

MODEL_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class OpenAIEmbeddings:
    """
    OpenAI-based embedding provider.

    Uses text-embedding-3-small by default (1536 dimensions).
    Does not retry: a failed call raises ProviderFailure and the caller
    decides what to do about it.
    """

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: str | None = None,
    ):
        self.model = model
        try:
            self._client = OpenAI(api_key=api_key or os.environ.get("OPENAI_API_KEY"))
        except OpenAIError as e:
            raise ProviderFailure(f"Could not create OpenAI client: {e}") from e

    @property
    def dimensions(self) -> int:
        """Return embedding dimensions for the model."""
        return MODEL_DIMENSIONS.get(self.model, 1536)

    def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        try:
            response = self._client.embeddings.create(input=text, model=self.model)
        except OpenAIError as e:
            logger.error(f"Embedding request failed for model {self.model}: {e}")
            raise ProviderFailure(f"Embedding request failed: {e}") from e
        return np.array(response.data[0].embedding, dtype=np.float64)

    def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Generate embeddings for multiple texts in one request."""
        if not texts:
            return []

        try:
            response = self._client.embeddings.create(input=texts, model=self.model)
        except OpenAIError as e:
            logger.error(
                f"Batch embedding request failed for {len(texts)} texts: {e}"
            )
            raise ProviderFailure(f"Batch embedding request failed: {e}") from e

        # The API tags each vector with its input index
        items = sorted(response.data, key=lambda item: item.index)
        if len(items) != len(texts):
            raise ProviderFailure(
                f"Provider returned {len(items)} embeddings for {len(texts)} texts"
            )
        return [np.array(item.embedding, dtype=np.float64) for item in items]


class MockEmbeddings:
    """
    Mock embedding provider for testing without API calls.

    Generates deterministic pseudo-embeddings seeded from text hashes.
    NOT for production use - only for testing/development.
    """

    def __init__(self, dimensions: int = 1536):
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed(self, text: str) -> np.ndarray:
        """Generate deterministic pseudo-embedding from text hash."""
        seed = int.from_bytes(hashlib.sha256(text.encode()).digest()[:8], "big")
        rng = np.random.default_rng(seed)
        return rng.standard_normal(self._dimensions)

    def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Generate embeddings for multiple texts."""
        return [self.embed(text) for text in texts]


def get_embedding_provider(
    use_mock: bool = False,
    model: str = "text-embedding-3-small",
    dimensions: int | None = None,
) -> EmbeddingProvider:
    """
    Factory function to get the appropriate embedding provider.

    Args:
        use_mock: If True, return MockEmbeddings (for testing)
        model: OpenAI embedding model name
        dimensions: Vector length for MockEmbeddings (defaults to the model's)
    """
    if use_mock:
        return MockEmbeddings(dimensions or MODEL_DIMENSIONS.get(model, 1536))
    return OpenAIEmbeddings(model=model)
