"""
FAQ source data for the retrieval system.

Reads the line-oriented FAQ file and turns each entry into a Fragment
ready for ingestion. Expected line format:

    Q: Question text | A: Answer text | Category: Category name

The "Q:", "A:" and "Category:" prefixes are optional; the category
defaults to "General". Blank lines and lines without an answer part are
skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel

from faq_vectorstore.retrieval.document import Document, Fragment

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "General"


def _extract_value(text: str, prefix: str) -> str:
    trimmed = text.strip()
    if trimmed.startswith(prefix):
        return trimmed[len(prefix):].strip()
    return trimmed


class FaqItem(BaseModel):
    """A question/answer pair with a category."""

    question: str
    answer: str
    category: str = DEFAULT_CATEGORY

    @classmethod
    def from_text_line(cls, line: str) -> FaqItem | None:
        """Parse one FAQ line. Returns None when the line holds no entry."""
        if not line or not line.strip():
            return None
        parts = line.split("|")
        if len(parts) < 2:
            return None
        return cls(
            question=_extract_value(parts[0], "Q:"),
            answer=_extract_value(parts[1], "A:"),
            category=_extract_value(parts[2], "Category:") if len(parts) > 2 else DEFAULT_CATEGORY,
        )

    @classmethod
    def from_metadata(cls, metadata: Mapping[str, str]) -> FaqItem:
        return cls(
            question=metadata.get("question", ""),
            answer=metadata.get("answer", ""),
            category=metadata.get("category", DEFAULT_CATEGORY),
        )

    @classmethod
    def from_document(cls, document: Document) -> FaqItem:
        """Rebuild the FAQ item from a stored document's metadata."""
        return cls.from_metadata(document.metadata)

    @property
    def content(self) -> str:
        """Text that gets embedded: question and answer together."""
        return f"Question: {self.question}\nAnswer: {self.answer}"

    def to_fragment(self) -> Fragment:
        return Fragment(
            content=self.content,
            metadata={
                "question": self.question,
                "answer": self.answer,
                "category": self.category,
            },
        )


def load_faq_items(path: Path | str) -> list[FaqItem]:
    """
    Read FAQ items from a text file.

    Raises:
        FileNotFoundError: the file does not exist
    """
    path = Path(path)
    logger.info(f"Loading FAQ items from file: {path}")
    if not path.is_file():
        raise FileNotFoundError(f"FAQ file not found: {path}")

    items = []
    with open(path, encoding="utf-8") as f:
        for number, line in enumerate(f, start=1):
            item = FaqItem.from_text_line(line)
            if item is None:
                continue
            if not item.question:
                logger.warning(f"Skipping FAQ line {number} with no question")
                continue
            items.append(item)

    logger.info(f"Loaded {len(items)} FAQ items from file")
    return items


def load_faq_fragments(path: Path | str) -> list[Fragment]:
    """FAQ file -> one fragment per item."""
    return [item.to_fragment() for item in load_faq_items(path)]


def read_text_fragment(path: Path | str, source: str | None = None) -> Fragment:
    """Whole file as a single fragment tagged with its source name."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    return Fragment(content=text, metadata={"source": source or path.name})
