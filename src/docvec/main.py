"""Main entry point for docvec: CLI and MCP server."""

import argparse
import logging
import sys

from fastmcp import FastMCP

from docvec.config import Config, ConfigError
from docvec.indexer import DegenerateVectorError, EmbeddingError, Indexer
from docvec.tools import register_tools

logger = logging.getLogger(__name__)


def create_server(config: Config, indexer: Indexer | None = None) -> FastMCP:
    """Create and configure the MCP server.

    Args:
        config: Configuration instance with all settings.
        indexer: Optional indexer to serve (built from config if omitted).
    """
    mcp = FastMCP(
        name="docvec",
        instructions=(
            "docvec indexes local documents as embedded text chunks. Use the search "
            "tool to find passages similar to a question, file_chunks to read a "
            "file's indexed text, and scan to pick up new or changed files."
        ),
    )

    if indexer is None:
        logger.info("Initializing database at %s", config.db_path)
        indexer = Indexer(config)
    indexer.initialize()

    logger.info("Registering tools...")
    register_tools(mcp, indexer)

    logger.info("Server configured successfully")
    return mcp


def _run_scan(config: Config) -> int:
    indexer = Indexer(config)
    indexer.initialize()
    try:
        stats = indexer.scan()
    finally:
        indexer.close()

    print(
        f"{stats.seen} files: {stats.indexed} indexed, {stats.tracked} tracked, "
        f"{stats.skipped} unchanged, {stats.failed} failed, {stats.pruned} pruned"
    )
    return 1 if stats.failed else 0


def _run_search(config: Config, query: str, limit: int) -> int:
    indexer = Indexer(config)
    indexer.initialize()
    try:
        results = indexer.search(query, limit=limit)
    except (EmbeddingError, DegenerateVectorError) as e:
        logger.error("Cannot embed query: %s", e)
        return 1
    finally:
        indexer.close()

    if not results:
        print("No results.")
    for rank, result in enumerate(results, start=1):
        preview = result.content[:120].replace("\n", " ")
        print(f"{rank}. {result.file_name} [chunk {result.chunk_index}] {result.score:.4f}")
        print(f"   {preview}")
    return 0


def _run_server(config: Config, scan_first: bool) -> int:
    indexer = Indexer(config)
    indexer.initialize()

    if scan_first:
        logger.info("Initial scan requested...")
        indexer.scan()

    try:
        mcp = create_server(config, indexer)
        logger.info("Starting MCP server on port %s...", config.port)
        mcp.run(transport="sse", host="0.0.0.0", port=config.port)
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Server error")
        return 1
    finally:
        indexer.close()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docvec", description="docvec - incremental vector index for local documents"
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to the YAML config file (default: $DOCVEC_CONFIG or ~/.docvec/config.yaml)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("scan", help="Index new and changed files")

    search_parser = subparsers.add_parser("search", help="Search indexed chunks")
    search_parser.add_argument("query", help="Free-text query")
    search_parser.add_argument(
        "-k", "--limit", type=int, default=5, help="Number of results (default: 5)"
    )

    serve_parser = subparsers.add_parser("serve", help="Run the MCP server")
    serve_parser.add_argument(
        "--scan", action="store_true", help="Run an indexing pass before starting"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main function - parses arguments and dispatches the command."""
    args = build_parser().parse_args(argv)

    # Configure logging here to avoid side effects on import
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = Config.load(args.config)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 2

    logger.info("docvec %s", args.command)
    logger.info("  ROOTS:      %s", ", ".join(str(p) for p in config.scan_paths))
    logger.info("  EXTENSIONS: %s", ", ".join(sorted(config.extensions)))
    logger.info("  DB:         %s", config.db_path)
    logger.info("  EMBEDDING:  %s (%s)", config.embedding.url, config.embedding.model)

    if args.command == "scan":
        return _run_scan(config)
    if args.command == "search":
        return _run_search(config, args.query, args.limit)
    return _run_server(config, args.scan)


if __name__ == "__main__":
    sys.exit(main())
