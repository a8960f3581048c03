"""
Text splitter - breaks long fragments into bounded chunks before embedding.

Token counts are approximated by whitespace-separated words. This is
deterministic and conservative enough for embedding model limits, and
needs no provider-specific tokenizer.

Within a full window of `chunk_size` tokens, the chunk is cut after the
last sentence boundary past `min_chunk_size_chars`, so chunks tend to end
on whole sentences. Chunks are contiguous, trimmed slices of the input:
joining them gives back the input, modulo whitespace at the cuts.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from faq_vectorstore.core.errors import InvalidArgument
from faq_vectorstore.retrieval.document import Fragment

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_MIN_CHUNK_SIZE_CHARS = 350

_TOKEN = re.compile(r"\S+")
_SENTENCE_END = (".", "!", "?")


def count_tokens(text: str) -> int:
    """Approximate token count used by the splitter."""
    return sum(1 for _ in _TOKEN.finditer(text))


class TokenTextSplitter:
    """Split fragments into chunks of at most `chunk_size` approximate tokens."""

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        min_chunk_size_chars: int = DEFAULT_MIN_CHUNK_SIZE_CHARS,
    ):
        if not isinstance(chunk_size, int) or chunk_size < 1:
            raise InvalidArgument(f"chunk_size must be a positive integer, got {chunk_size!r}")
        if not isinstance(min_chunk_size_chars, int) or min_chunk_size_chars < 0:
            raise InvalidArgument(
                f"min_chunk_size_chars must be >= 0, got {min_chunk_size_chars!r}"
            )
        self.chunk_size = chunk_size
        self.min_chunk_size_chars = min_chunk_size_chars

    def split(self, fragment: Fragment) -> list[Fragment]:
        """
        Split one fragment.

        Returns [] for blank content and [fragment] when it already fits.
        Every chunk keeps the input metadata; if the input had an id, chunk
        ids become "<id>-<index>".
        """
        content = fragment.content
        tokens = list(_TOKEN.finditer(content))
        if not tokens:
            return []
        if len(tokens) <= self.chunk_size:
            return [fragment]

        texts = []
        position = 0
        while position < len(tokens):
            window = tokens[position : position + self.chunk_size]
            taken = len(window)
            if position + taken < len(tokens):
                taken = self._sentence_cut(content, window, tokens[position + taken])
            texts.append(content[window[0].start() : window[taken - 1].end()])
            position += taken

        logger.debug(f"Split {len(tokens)} tokens into {len(texts)} chunks")
        return [
            Fragment(
                content=text,
                metadata=fragment.metadata,
                id=f"{fragment.id}-{index}" if fragment.id is not None else None,
            )
            for index, text in enumerate(texts)
        ]

    def split_all(self, fragments: Iterable[Fragment]) -> list[Fragment]:
        """Split every fragment, preserving order."""
        chunks: list[Fragment] = []
        for fragment in fragments:
            chunks.extend(self.split(fragment))
        return chunks

    def _sentence_cut(self, content: str, window: list[re.Match], following: re.Match) -> int:
        """Number of window tokens to keep so the chunk ends on a sentence."""
        start = window[0].start()
        for i in range(len(window) - 1, -1, -1):
            end = window[i].end()
            if end - start <= self.min_chunk_size_chars:
                break
            next_start = window[i + 1].start() if i + 1 < len(window) else following.start()
            if content[end - 1] in _SENTENCE_END or "\n" in content[end:next_start]:
                return i + 1
        return len(window)
