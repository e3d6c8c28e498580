"""Tests for config module."""

from pathlib import Path

import pytest

from docvec.config import DEFAULT_DB_PATH, Config, ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "DOCVEC_CONFIG",
        "DOCVEC_DB",
        "DOCVEC_PORT",
        "DOCVEC_EMBEDDING_URL",
        "DOCVEC_EMBEDDING_MODEL",
    ):
        monkeypatch.delenv(name, raising=False)


def write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return path


MINIMAL = """
scan:
  paths: [/data/docs]
  extensions: [pdf, TXT, .sql]
"""


def test_config_defaults(tmp_path):
    """Test config fills defaults for optional settings."""
    config = Config.load(write_config(tmp_path, MINIMAL))

    assert config.scan_paths == [Path("/data/docs")]
    assert config.extensions == {"pdf", "txt", "sql"}
    assert config.db_path == DEFAULT_DB_PATH
    assert config.chunk_size == 1000
    assert config.prune_missing is False
    assert config.port == 8080
    assert config.embedding.url == "http://127.0.0.1:11434/api/embeddings"
    assert config.embedding.model == "mxbai-embed-large"
    assert config.embedding.max_retries == 3
    assert config.embedding.retry_delay == 1.0


def test_config_full_document(tmp_path):
    config = Config.load(
        write_config(
            tmp_path,
            """
scan:
  paths: [~/docs, /srv/shared]
  extensions: [md]
database: /var/lib/docvec/index.db
chunk_size: 500
prune_missing: true
embedding:
  url: https://embed.example.com/api/embeddings
  model: nomic-embed-text
  max_retries: 5
  retry_delay: 0.5
  timeout: 10
  max_concurrency: 0
server:
  port: 9000
""",
        )
    )

    assert config.scan_paths == [Path.home() / "docs", Path("/srv/shared")]
    assert config.db_path == Path("/var/lib/docvec/index.db")
    assert config.chunk_size == 500
    assert config.prune_missing is True
    assert config.port == 9000
    assert config.embedding.model == "nomic-embed-text"
    assert config.embedding.max_retries == 5
    assert config.embedding.timeout == 10.0
    assert config.embedding.max_concurrency == 0


def test_config_accepts_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text('{"scan": {"paths": ["/a"], "extensions": ["pdf"]}}')
    config = Config.load(path)
    assert config.extensions == {"pdf"}


def test_config_path_from_env(tmp_path, monkeypatch):
    path = write_config(tmp_path, MINIMAL)
    monkeypatch.setenv("DOCVEC_CONFIG", str(path))
    assert Config.load().scan_paths == [Path("/data/docs")]


def test_config_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("DOCVEC_DB", "/custom/db.sqlite")
    monkeypatch.setenv("DOCVEC_PORT", "9100")
    monkeypatch.setenv("DOCVEC_EMBEDDING_URL", "http://gpu-box:11434/api/embeddings")
    monkeypatch.setenv("DOCVEC_EMBEDDING_MODEL", "all-minilm")

    config = Config.load(write_config(tmp_path, MINIMAL))
    assert config.db_path == Path("/custom/db.sqlite")
    assert config.port == 9100
    assert config.embedding.url == "http://gpu-box:11434/api/embeddings"
    assert config.embedding.model == "all-minilm"


def test_config_creates_new_instances(tmp_path):
    path = write_config(tmp_path, MINIMAL)
    assert Config.load(path) is not Config.load(path)


def test_config_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Config file not found"):
        Config.load(tmp_path / "missing.yaml")


def test_config_invalid_yaml(tmp_path):
    with pytest.raises(ConfigError, match="Invalid YAML"):
        Config.load(write_config(tmp_path, "scan: [unclosed"))


def test_config_not_a_mapping(tmp_path):
    with pytest.raises(ConfigError, match="must contain a mapping"):
        Config.load(write_config(tmp_path, "- just\n- a list\n"))


def test_config_missing_scan_section(tmp_path):
    with pytest.raises(ConfigError, match="Missing 'scan' section"):
        Config.load(write_config(tmp_path, "database: /tmp/x.db\n"))


@pytest.mark.parametrize(
    "scan,message",
    [
        ("paths: []\n  extensions: [pdf]", "scan.paths must be a non-empty list"),
        ("paths: /not/a/list\n  extensions: [pdf]", "scan.paths must be a non-empty list"),
        ("paths: [/a]\n  extensions: [1, 2]", "scan.extensions must only contain"),
        ("paths: [/a]\n  extensions: ['.']", "at least one extension"),
    ],
)
def test_config_invalid_scan_values(tmp_path, scan, message):
    with pytest.raises(ConfigError, match=message):
        Config.load(write_config(tmp_path, f"scan:\n  {scan}\n"))


@pytest.mark.parametrize(
    "extra,message",
    [
        ("chunk_size: 0", "chunk_size must be >= 1"),
        ("chunk_size: big", "chunk_size must be an integer"),
        ("prune_missing: maybe", "prune_missing must be true or false"),
        ("server:\n  port: 70000", "Port must be between 1 and 65535"),
        ("server:\n  port: http", "Invalid port value"),
        ("embedding:\n  url: ftp://x", "embedding.url must be an http"),
        ("embedding:\n  max_retries: 0", "embedding.max_retries must be >= 1"),
        ("embedding:\n  retry_delay: -1", "embedding.retry_delay must be >= 0"),
        ("embedding:\n  max_concurrency: -2", "embedding.max_concurrency must be >= 0"),
    ],
)
def test_config_invalid_values(tmp_path, extra, message):
    with pytest.raises(ConfigError, match=message):
        Config.load(write_config(tmp_path, MINIMAL + extra + "\n"))


def test_config_error_is_value_error():
    assert issubclass(ConfigError, ValueError)
