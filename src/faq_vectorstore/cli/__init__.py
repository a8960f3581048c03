"""
CLI module - command-line interface for the FAQ vector store.

Provides entry points for:
- Building a collection and its snapshot
- Running similarity searches
"""

from faq_vectorstore.cli.commands import (
    main,
    run_build_cli,
    run_search_cli,
)

__all__ = [
    "main",
    "run_build_cli",
    "run_search_cli",
]
