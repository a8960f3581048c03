"""
CLI commands - entry points for building and querying the FAQ store.

Each command follows a consistent pattern:
1. Parse arguments
2. Load environment
3. Run the operation through a RetrievalService
4. Print results
5. Return exit code

CLI commands are thin wrappers: argument parsing and output formatting
live here, the actual work lives in the retrieval package.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from dotenv import load_dotenv

from faq_vectorstore.config import VectorStoreConfig, build_service
from faq_vectorstore.core.errors import VectorStoreError
from faq_vectorstore.retrieval.seeds import FaqItem, load_faq_fragments
from faq_vectorstore.retrieval.store import DEFAULT_COLLECTION


def _load_env() -> None:
    """Load environment variables from .env file."""
    load_dotenv()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--faq-file", help="FAQ source file (default: from config)")
    parser.add_argument(
        "--collection",
        default=DEFAULT_COLLECTION,
        help=f"Collection name (default: {DEFAULT_COLLECTION})",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")


def run_build_cli(argv: list[str] | None = None) -> int:
    """CLI entry point for building (or loading) a collection."""
    _load_env()

    parser = argparse.ArgumentParser(description="Build the FAQ vector store")
    _common_arguments(parser)
    parser.add_argument(
        "--rebuild",
        action="store_true",
        help="Re-embed even if a snapshot exists",
    )
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    config = VectorStoreConfig.from_env()
    faq_file = args.faq_file or config.faq_file_path

    print("=" * 60)
    print("BUILD FAQ VECTOR STORE")
    print("=" * 60)

    try:
        with build_service(config) as service:
            collection = service.initialize(
                lambda: load_faq_fragments(faq_file),
                collection=args.collection,
                rebuild=args.rebuild,
            )
            snapshot = service.snapshot_path(args.collection)
    except (VectorStoreError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Collection: {collection.name}")
    print(f"Documents:  {len(collection)}")
    print(f"Dimension:  {collection.dimension}")
    print(f"Snapshot:   {snapshot}")
    return 0


def run_search_cli(argv: list[str] | None = None) -> int:
    """CLI entry point for similarity search."""
    _load_env()

    parser = argparse.ArgumentParser(description="Search the FAQ vector store")
    parser.add_argument("query", help="Search query")
    _common_arguments(parser)
    parser.add_argument("--top-k", type=int, default=None, help="Maximum results")
    parser.add_argument("--threshold", type=float, default=None, help="Minimum score (0-1)")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    config = VectorStoreConfig.from_env()
    faq_file = args.faq_file or config.faq_file_path

    try:
        with build_service(config) as service:
            service.initialize(
                lambda: load_faq_fragments(faq_file),
                collection=args.collection,
            )
            results = service.query(
                args.query,
                top_k=args.top_k,
                threshold=args.threshold,
                collection=args.collection,
            )
    except (VectorStoreError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps([result.to_dict() for result in results], indent=2))
        return 0

    if not results:
        print("No matching FAQ entries found.")
        return 0

    for rank, result in enumerate(results, start=1):
        item = FaqItem.from_document(result.document)
        print(f"{rank}. [{result.score:.3f}] ({item.category}) {item.question}")
        print(f"   {item.answer}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        description="FAQ vector store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  build       Embed the FAQ file and save a snapshot (loads it if present)
  search      Rank FAQ entries by similarity to a query

Examples:
  faq-store build --faq-file docs/faq.txt
  faq-store build --rebuild
  faq-store search "How do I reset my password?" --top-k 3
        """,
    )
    parser.add_argument(
        "command",
        choices=["build", "search"],
        help="Operation to run",
    )

    args, remaining = parser.parse_known_args(argv)

    commands = {
        "build": run_build_cli,
        "search": run_search_cli,
    }

    try:
        return commands[args.command](remaining)
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
