"""Configuration manager for autodocs using TOML and JSON files.

Two layers of configuration exist:

- **User level**: ``~/.autodocs/config.toml`` with ``[llm]`` and
  ``[embeddings]`` sections, read at import time by :mod:`autodocs.config`.
- **Project level**: ``docs.config.json`` in the project root, falling
  back to the metadata in ``package.json``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from .models import ProjectConfig

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when required configuration cannot be found or parsed."""


# Default configurations for each completion provider
DEFAULT_CONFIGS = {
    "openai": {
        "provider": "openai",
        "model": "gpt-4",
        "api_key": "",
    },
    "anthropic": {
        "provider": "anthropic",
        "model": "claude-3-5-sonnet-20241022",
        "api_key": "",
    },
    "ollama": {
        "provider": "ollama",
        "model": "qwen2.5-coder:7b",
        "endpoint": "http://127.0.0.1:11434/api/generate",
    },
}


def _config_file() -> Path:
    from . import config

    return config.CONFIG_FILE


def load_full_config() -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    path = _config_file()
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}


def load_config() -> Dict[str, Any]:
    """Load the ``[llm]`` section, falling back to OpenAI defaults."""
    full = load_full_config()
    return full.get("llm", DEFAULT_CONFIGS["openai"].copy())


def _save_full_config(config: Dict[str, Any]) -> bool:
    """Write entire config dict to TOML file, preserving all sections."""
    path = _config_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(path, "w", encoding="utf-8") as f:
            toml.dump(config, f)
        return True
    except OSError as exc:
        logger.warning("Could not write config %s: %s", path, exc)
        return False


def save_config(provider: str, model: str, api_key: str = "", endpoint: str = "") -> bool:
    """Save completion-provider configuration.

    Preserves other sections (e.g. ``[embeddings]``) in the file.
    """
    config = load_full_config()
    config["llm"] = {
        "provider": provider,
        "model": model,
    }
    if api_key:
        config["llm"]["api_key"] = api_key
    if endpoint:
        config["llm"]["endpoint"] = endpoint
    return _save_full_config(config)


def load_embedding_config() -> Dict[str, Any]:
    """Load the ``[embeddings]`` section, or an empty dict."""
    return load_full_config().get("embeddings", {})


def save_embedding_config(provider: str, model: str = "") -> bool:
    """Save the embedding provider choice, preserving ``[llm]``."""
    config = load_full_config()
    config["embeddings"] = {"provider": provider}
    if model:
        config["embeddings"]["model"] = model
    return _save_full_config(config)


def get_provider_config(provider: str) -> Dict[str, Any]:
    """Get default configuration for a completion provider."""
    return DEFAULT_CONFIGS.get(provider, DEFAULT_CONFIGS["openai"]).copy()


# ------------------------------------------------------------------
# Project configuration
# ------------------------------------------------------------------

def _read_json(path: Path) -> Dict[str, Any]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Could not read {path}: {exc}") from exc


def _url_field(value: Any) -> Optional[str]:
    # package.json allows either "url" strings or {"url": ...} objects
    if isinstance(value, dict):
        return value.get("url")
    return value


def project_config_from_package_json(package_json: Dict[str, Any]) -> ProjectConfig:
    """Build a :class:`ProjectConfig` from parsed ``package.json`` data."""
    author = package_json.get("author") or "Unknown"
    if isinstance(author, dict):
        author = author.get("name") or "Unknown"
    return ProjectConfig(
        name=package_json.get("name") or "My Project",
        description=package_json.get("description") or "A wonderful project",
        version=package_json.get("version") or "1.0.0",
        author=author,
        license=package_json.get("license") or "MIT",
        repository=_url_field(package_json.get("repository")),
        homepage=package_json.get("homepage"),
        bugs=_url_field(package_json.get("bugs")),
        keywords=list(package_json.get("keywords") or []),
    )


def load_project_config(project_path: Path, config_name: str = "docs.config.json") -> ProjectConfig:
    """Load project metadata for documentation generation.

    Resolution order:

    1. ``<project>/<config_name>`` (written by ``autodocs init``).
    2. ``<project>/package.json``.

    Raises:
        ConfigError: if neither file exists or a file is unreadable.
    """
    config_path = Path(project_path) / config_name
    if config_path.exists():
        logger.info("Loaded project configuration from %s", config_path)
        return ProjectConfig.from_dict(_read_json(config_path))

    package_path = Path(project_path) / "package.json"
    if not package_path.exists():
        raise ConfigError("No package.json found and no configuration file provided")
    logger.warning("No configuration file found, using package.json")
    return project_config_from_package_json(_read_json(package_path))


def init_project_config(project_path: Path, config_name: str = "docs.config.json") -> Optional[Path]:
    """Write a starter project config.

    Returns the written path, or ``None`` when the file already exists.
    """
    config_path = Path(project_path) / config_name
    if config_path.exists():
        return None

    package_path = Path(project_path) / "package.json"
    if package_path.exists():
        project = project_config_from_package_json(_read_json(package_path))
    else:
        project = ProjectConfig()

    config_path.write_text(json.dumps(project.to_dict(), indent=2), encoding="utf-8")
    return config_path
