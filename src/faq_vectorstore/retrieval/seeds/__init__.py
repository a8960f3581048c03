"""
Seed data for the retrieval system.

Separating source data from infrastructure enables:
- Content updates without code changes
- Different datasets for different collections
- Easy testing with controlled data
"""

from faq_vectorstore.retrieval.seeds.faq import (
    FaqItem,
    load_faq_items,
    load_faq_fragments,
    read_text_fragment,
)

__all__ = ["FaqItem", "load_faq_items", "load_faq_fragments", "read_text_fragment"]
