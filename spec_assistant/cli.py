"""
Command line entrypoint for indexing and searching specs.

Usage:
    spec-search index specs.json --project-root /path/to/project
    spec-search query "user login" --tag smoke
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from spec_assistant.search import (
    ConfigurationError,
    IndexNotFoundError,
    SearchConfig,
    SearchError,
    SearchResult,
    SearchSubsystemError,
    initialize,
    load_collection,
    search,
)

logger = logging.getLogger("spec_assistant")


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spec-search", description="Search for text in specs.")
    parser.add_argument("--project-root", type=Path, default=None, help="Project root (default: $GAUGE_PROJECT_ROOT or cwd)")
    parser.add_argument("--workers", type=int, default=None, help="Indexing worker threads")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file")
    sub = parser.add_subparsers(dest="command", required=True)

    index_cmd = sub.add_parser("index", help="Index gauge specs")
    index_cmd.add_argument("collection", type=Path, help="JSON dump of the parsed spec collection")

    query_cmd = sub.add_parser("query", help="Search indexed specs")
    query_cmd.add_argument("text", help="Free text to search for")
    query_cmd.add_argument("--tag", default=None, help="Only return documents with this exact tag")
    query_cmd.add_argument("--limit", type=int, default=None, help="Maximum number of hits")
    return parser


def _config_from(args: argparse.Namespace) -> SearchConfig:
    config = SearchConfig.from_env()
    if args.project_root:
        config.project_root = args.project_root
    if args.workers:
        config.max_workers = args.workers
    return config


def format_result(result: SearchResult) -> str:
    lines = [f"{result.total} matches for {result.query!r} ({result.runtime:.4f}s)"]
    for position, hit in enumerate(result.hits, start=1):
        lines.append(f"{position:3d}. {hit.id} [{hit.doc_type}] (score {hit.score:.3f})")
        for fieldname, fragment in hit.highlights.items():
            lines.append(f"       {fieldname}: {fragment}")
    if result.tag_facets:
        lines.append("Tags:")
        for tag, count in result.tag_facets.items():
            lines.append(f"  {tag} ({count})")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, log_file=args.log_file)
    try:
        config = _config_from(args)
    except ConfigurationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    if args.command == "index":
        if not args.collection.exists():
            logger.error("Spec collection not found: %s", args.collection)
            return 1
        try:
            stats = initialize(load_collection(args.collection), config)
        except SearchSubsystemError as exc:
            logger.error("Unable to open index : %s. %s", config.index_path, exc)
            return 1
        print(f"Indexed {stats.indexed}/{stats.total} documents into {stats.index_path}")
        return 0

    try:
        result = search(args.text, config, tag=args.tag, limit=args.limit)
    except IndexNotFoundError as exc:
        logger.warning("%s", exc)
        return 1
    except SearchError as exc:
        print(f"Error searching : {exc}")
        return 1
    except SearchSubsystemError as exc:
        logger.error("Unable to open index : %s. %s", config.index_path, exc)
        return 1
    print(format_result(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
