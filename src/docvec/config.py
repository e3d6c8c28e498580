"""Configuration module for docvec.

Loads configuration from a YAML document, with a few environment variable
overrides. JSON documents are accepted too, since JSON is valid YAML.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from docvec.indexer.chunker import DEFAULT_CHUNK_SIZE
from docvec.indexer.embeddings import (
    DEFAULT_EMBEDDING_MODEL,
    DEFAULT_EMBEDDING_URL,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TIMEOUT,
)
from docvec.indexer.walker import normalize_extensions

DEFAULT_CONFIG_PATH = Path.home() / ".docvec" / "config.yaml"
DEFAULT_DB_PATH = Path.home() / ".docvec" / "index.db"
DEFAULT_PORT = 8080


class ConfigError(ValueError):
    """Raised when the configuration is missing or invalid."""


@dataclass
class EmbeddingConfig:
    """Embedding service settings."""

    url: str = DEFAULT_EMBEDDING_URL
    model: str = DEFAULT_EMBEDDING_MODEL
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    timeout: float = DEFAULT_TIMEOUT
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY


@dataclass
class Config:
    """Application configuration."""

    scan_paths: list[Path]
    extensions: set[str]
    db_path: Path = DEFAULT_DB_PATH
    chunk_size: int = DEFAULT_CHUNK_SIZE
    prune_missing: bool = False
    port: int = DEFAULT_PORT
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "Config":
        """Load configuration from a YAML file.

        Args:
            path: Config file path. Defaults to $DOCVEC_CONFIG, then
                ~/.docvec/config.yaml.

        Raises:
            ConfigError: If the file is missing, unreadable or invalid.
        """
        if path is None:
            path = os.getenv("DOCVEC_CONFIG", str(DEFAULT_CONFIG_PATH))
        config_path = Path(path).expanduser()

        try:
            raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise ConfigError(f"Config file not found: {config_path}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")

        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Config":
        """Build a Config from a parsed document, applying env overrides."""
        scan = raw.get("scan")
        if not isinstance(scan, dict):
            raise ConfigError("Missing 'scan' section")

        scan_paths = _string_list(scan.get("paths"), "scan.paths")
        extensions = normalize_extensions(_string_list(scan.get("extensions"), "scan.extensions"))
        if not extensions:
            raise ConfigError("scan.extensions must contain at least one extension")

        db_value = os.getenv("DOCVEC_DB") or raw.get("database") or str(DEFAULT_DB_PATH)
        if not isinstance(db_value, str):
            raise ConfigError(f"database must be a path string, got {db_value!r}")

        chunk_size = _int(raw.get("chunk_size", DEFAULT_CHUNK_SIZE), "chunk_size", minimum=1)

        prune_missing = raw.get("prune_missing", False)
        if not isinstance(prune_missing, bool):
            raise ConfigError(f"prune_missing must be true or false, got {prune_missing!r}")

        server = raw.get("server") or {}
        if not isinstance(server, dict):
            raise ConfigError("'server' must be a mapping")
        port_value = os.getenv("DOCVEC_PORT", server.get("port", DEFAULT_PORT))
        try:
            port = int(port_value)
            if not 1 <= port <= 65535:
                raise ValueError(f"Port must be between 1 and 65535, got {port}")
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid port value '{port_value}': {e}") from e

        return cls(
            scan_paths=[Path(p).expanduser() for p in scan_paths],
            extensions=extensions,
            db_path=Path(db_value).expanduser(),
            chunk_size=chunk_size,
            prune_missing=prune_missing,
            port=port,
            embedding=_embedding_config(raw.get("embedding") or {}),
        )


def _embedding_config(section: Any) -> EmbeddingConfig:
    if not isinstance(section, dict):
        raise ConfigError("'embedding' must be a mapping")

    url = os.getenv("DOCVEC_EMBEDDING_URL") or section.get("url", DEFAULT_EMBEDDING_URL)
    if not isinstance(url, str) or not url.startswith(("http://", "https://")):
        raise ConfigError(f"embedding.url must be an http(s) URL, got {url!r}")

    model = os.getenv("DOCVEC_EMBEDDING_MODEL") or section.get("model", DEFAULT_EMBEDDING_MODEL)
    if not isinstance(model, str) or not model:
        raise ConfigError("embedding.model must be a non-empty string")

    return EmbeddingConfig(
        url=url,
        model=model,
        max_retries=_int(
            section.get("max_retries", DEFAULT_MAX_RETRIES), "embedding.max_retries", minimum=1
        ),
        retry_delay=_float(section.get("retry_delay", DEFAULT_RETRY_DELAY), "embedding.retry_delay"),
        timeout=_float(section.get("timeout", DEFAULT_TIMEOUT), "embedding.timeout"),
        max_concurrency=_int(
            section.get("max_concurrency", DEFAULT_MAX_CONCURRENCY),
            "embedding.max_concurrency",
            minimum=0,
        ),
    )


def _string_list(value: Any, name: str) -> list[str]:
    if not isinstance(value, list) or not value:
        raise ConfigError(f"{name} must be a non-empty list")
    if not all(isinstance(v, str) and v for v in value):
        raise ConfigError(f"{name} must only contain non-empty strings")
    return value


def _int(value: Any, name: str, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


def _float(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{name} must be a number, got {value!r}")
    if value < 0:
        raise ConfigError(f"{name} must be >= 0, got {value}")
    return float(value)
