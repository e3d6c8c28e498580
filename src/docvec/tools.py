"""MCP tools for the docvec server.

This module defines the tools exposed by the MCP server:
- search: Similarity search over all indexed chunks
- scan: Run an indexing pass over the configured directories
- list_files: List indexed file names
- file_chunks: Read the stored chunks of one file
"""

import asyncio

from fastmcp import FastMCP

from docvec.indexer import Indexer


def register_tools(mcp: FastMCP, indexer: Indexer) -> None:
    """Register all tools with the FastMCP server.

    Blocking work runs in a worker thread so the server's event loop stays
    free while the indexer talks to SQLite and the embedding service.

    Args:
        mcp: FastMCP server instance
        indexer: Indexer used for queries and scans
    """

    @mcp.tool()
    async def search(query: str, limit: int = 5) -> list[dict]:
        """Find the indexed text chunks most similar to a query.

        Args:
            query: Free-text query
            limit: Maximum number of results to return (default: 5)

        Returns:
            List of results, best first, with:
            - file_name: Name of the file the chunk belongs to
            - chunk_index: Position of the chunk within the file
            - content: Chunk text (preprocessed)
            - score: Cosine similarity to the query
        """
        results = await asyncio.to_thread(indexer.search, query, limit)
        return [
            {
                "file_name": result.file_name,
                "chunk_index": result.chunk_index,
                "content": result.content,
                "score": round(result.score, 4),
            }
            for result in results
        ]

    @mcp.tool()
    async def scan() -> dict:
        """Index new and changed files in the configured directories.

        Returns:
            Counts of files seen, indexed, tracked, unchanged (skipped),
            failed and pruned during the pass.
        """
        stats = await asyncio.to_thread(indexer.scan)
        return stats.as_dict()

    @mcp.tool()
    async def list_files() -> list[str]:
        """List the names of all indexed files."""
        return await asyncio.to_thread(indexer.list_files)

    @mcp.tool()
    async def file_chunks(file_name: str) -> dict:
        """Read the stored chunks of a file.

        Args:
            file_name: Bare file name as stored (e.g., "report.pdf")

        Returns:
            Dict with file_name, fingerprint, exists and the chunk texts in order.
        """
        chunks = await asyncio.to_thread(indexer.get_chunks, file_name)
        if not chunks:
            return {"file_name": file_name, "exists": False, "fingerprint": None, "chunks": []}

        return {
            "file_name": file_name,
            "exists": True,
            "file_type": chunks[0].file_type,
            "modified_at": chunks[0].modified_at,
            "size": chunks[0].size,
            "fingerprint": chunks[0].fingerprint,
            "chunks": [chunk.content for chunk in chunks],
        }
