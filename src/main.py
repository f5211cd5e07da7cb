# src/main.py — v1
"""CLI entry point — search and rebuild commands.

Usage:
    docsearch search <collection> <query> --fields title,body [options]
    docsearch rebuild <collection> --fields title,body

Stores and cache come from Settings (.env / environment).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from docsearch.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        from docsearch.config.settings import load_settings

        settings = load_settings()
        _setup_logging(settings, args.verbose)
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="docsearch",
        description=f"docsearch v{__version__} — keyword search over document collections",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- search ---
    p_search = subparsers.add_parser("search", help="Search a collection")
    p_search.add_argument("collection", help="Collection name")
    p_search.add_argument("query", help="Free-text query")
    _add_fields_argument(p_search)
    p_search.add_argument("--limit", type=int, default=None, help="Page size")
    p_search.add_argument("--skip", type=int, default=None, help="Results to skip")
    p_search.add_argument(
        "--conditions", type=_json_argument, default=None,
        help='Extra filter as JSON, e.g. \'{"status": "published"}\'',
    )
    p_search.add_argument(
        "--sort", type=_json_argument, default=None,
        help='External sort as JSON, e.g. \'{"created": -1}\' (disables ranking)',
    )
    p_search.add_argument(
        "--project", type=_json_argument, default=None,
        help='Projection as JSON, e.g. \'{"title": 1}\'',
    )
    p_search.set_defaults(func=_cmd_search)

    # --- rebuild ---
    p_rebuild = subparsers.add_parser(
        "rebuild", help="Recompute keywords for every document",
    )
    p_rebuild.add_argument("collection", help="Collection name")
    _add_fields_argument(p_rebuild)
    p_rebuild.set_defaults(func=_cmd_rebuild)

    return parser


def _add_fields_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--fields", required=True, type=_csv_argument,
        help="Comma-separated source fields for keywords",
    )


def _csv_argument(value: str) -> list[str]:
    fields = [f.strip() for f in value.split(",") if f.strip()]
    if not fields:
        raise argparse.ArgumentTypeError("at least one field is required")
    return fields


def _json_argument(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"invalid JSON: {e}") from e


def _build_model(collection: str, fields: list[str], settings: Any) -> type:
    """Create a searchable Document model bound to the configured stores."""
    from docsearch.cache.cache_factory import create_search_cache
    from docsearch.search.plugin import searchable
    from docsearch.store.document import Document
    from docsearch.store.store_factory import create_document_store

    model = type(
        f"{collection.title().replace('_', '')}Document",
        (Document,),
        {"collection": collection},
    )
    searchable(
        fields,
        stemmer=settings.search_default_stemmer,
        distance=settings.search_default_distance,
        relevance_threshold=settings.search_relevance_threshold,
        cache_store=create_search_cache(settings),
    )(model)
    model.bind(create_document_store(settings))
    return model


async def _cmd_search(args: argparse.Namespace, settings: Any) -> int:
    """Run one search and print the page as JSON."""
    model = _build_model(args.collection, args.fields, settings)
    options = {
        "limit": args.limit,
        "skip": args.skip,
        "conditions": args.conditions,
        "sort": args.sort,
    }
    result = await model.search(args.query, args.project, options)
    payload = {
        "total_count": result.total_count,
        "results": [_jsonable(doc) for doc in result.results],
    }
    print(json.dumps(payload, indent=2, default=str, ensure_ascii=False))
    return 0


async def _cmd_rebuild(args: argparse.Namespace, settings: Any) -> int:
    """Rebuild keywords for the whole collection."""
    model = _build_model(args.collection, args.fields, settings)
    await model.ensure_indexes()
    processed = await model.rebuild_all_keywords()
    print(f"Rebuilt keywords for {processed} documents in {args.collection}")
    return 0


def _jsonable(document: Any) -> Any:
    return document.to_dict() if hasattr(document, "to_dict") else document


def _setup_logging(settings: Any, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from docsearch.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
