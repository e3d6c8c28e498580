"""
docvec - incremental vector index for local documents.

Walks configured directories, embeds the text of new or changed files
chunk by chunk, and serves similarity search over the stored chunks.

Stack:
- Python + httpx (embedding service client)
- SQLite (chunk store)
- numpy (vector math)
- FastMCP (search server)
"""

__version__ = "0.1.0"
