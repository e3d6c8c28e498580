"""Text normalization applied before chunking and embedding."""

import re

TOKEN_PATTERN = re.compile(r"\w+")

# High-frequency words that carry little meaning (Spanish and English)
STOPWORDS = frozenset(
    {
        # Spanish
        "el", "la", "los", "las", "un", "una", "unos", "unas", "y", "o", "u",
        "de", "del", "al", "a", "en", "con", "por", "para", "que", "se", "su",
        "sus", "es", "lo", "le", "les", "como", "pero", "mas", "más", "sin",
        "sobre", "este", "esta", "estos", "estas", "ese", "esa", "ni",
        # English
        "the", "a", "an", "and", "or", "of", "to", "in", "on", "at", "for",
        "with", "by", "from", "is", "are", "was", "were", "be", "been", "it",
        "its", "this", "that", "these", "those", "as", "but", "not",
    }
)


def tokenize(text: str) -> list[str]:
    """Split text into word tokens."""
    return TOKEN_PATTERN.findall(text)


def strip_stopwords(text: str) -> str:
    """Lower-case and tokenize text, dropping stopwords; token order is preserved."""
    return " ".join(token for token in tokenize(text.lower()) if token not in STOPWORDS)


def preprocess_text(text: str, file_name: str) -> str:
    """
    Normalize raw text for embedding.

    The file name is prepended so it contributes context to every chunk's
    source text, then everything is lower-cased, tokenized, and stripped of
    stopwords.
    """
    return strip_stopwords(f"{file_name} {text}")
