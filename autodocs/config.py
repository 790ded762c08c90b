"""Configuration paths and defaults for autodocs."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("AUTODOCS_HOME", str(Path.home() / ".autodocs"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

# Per-project output locations (relative to the scanned project root)
DOCS_DIR = ".docs"
EMBEDDINGS_FILE = "embeddings.json"
PROJECT_CONFIG_FILE = "docs.config.json"
DEFAULT_OUTPUT_DIR = "./docs"

SUPPORTED_EXTENSIONS = (".ts", ".js", ".tsx", ".jsx")
EXCLUDED_DIRS = {"node_modules", "dist", "build"}
EXCLUDED_MARKERS = (".test.", ".spec.")

EMBEDDING_BATCH_SIZE = 100
DEFAULT_SEARCH_LIMIT = 10

# Load configuration from TOML file (if available)
try:
    from .config_manager import load_config, load_embedding_config
    _toml_config = load_config()
    _emb_config = load_embedding_config()
except ImportError:
    _toml_config = {}
    _emb_config = {}

# Completion provider used by the documentation generator
LLM_PROVIDER = _toml_config.get("provider", "openai")
LLM_API_KEY = _toml_config.get("api_key", "")
LLM_MODEL = _toml_config.get("model", "gpt-4")
LLM_ENDPOINT = _toml_config.get("endpoint", "")

# Embedding provider used by the search index ("openai" or "hash")
EMBEDDING_PROVIDER = _emb_config.get("provider", "openai")
EMBEDDING_MODEL = _emb_config.get("model", "text-embedding-3-small")
EMBEDDING_ENDPOINT = _emb_config.get("endpoint", "https://api.openai.com/v1/embeddings")


def index_path_for(project_path: Path) -> Path:
    """Return the durable embeddings file for a project root."""
    return Path(project_path) / DOCS_DIR / EMBEDDINGS_FILE


def resolve_api_key(explicit: str | None = None) -> str:
    """Pick the API key: explicit value, then ``OPENAI_API_KEY``, then TOML."""
    return explicit or os.environ.get("OPENAI_API_KEY", "") or LLM_API_KEY



def resolve_llm_api_key(explicit: str | None = None) -> str:
    """Completion-provider key: explicit value, then TOML ``[llm]``.

    ``OPENAI_API_KEY`` is only consulted when the completion provider is OpenAI.
    """
    key = explicit or LLM_API_KEY
    if not key and LLM_PROVIDER.lower() == "openai":
        key = os.environ.get("OPENAI_API_KEY", "")
    return key
