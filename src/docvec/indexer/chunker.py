"""Chunking logic for splitting preprocessed text into fixed-size segments."""

# Maximum characters per chunk
DEFAULT_CHUNK_SIZE = 1000


def chunk_text(text: str, max_chars: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """
    Split text into consecutive, non-overlapping chunks.

    Rules:
    1. Every chunk has at most max_chars characters
    2. Only the last chunk may be shorter
    3. Joining the chunks gives back the input exactly

    A chunk's position in the returned list is its chunk index.
    """
    if max_chars < 1:
        raise ValueError(f"max_chars must be positive, got {max_chars}")

    return [text[start : start + max_chars] for start in range(0, len(text), max_chars)]
