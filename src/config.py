"""Unified configuration loaded from .worklog.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".worklog.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "worklog" / "config.toml"
DEFAULT_DATA_DIR = Path.home() / ".local" / "share" / "worklog"


class StorageConfig(BaseModel):
    """[storage] section."""

    data_dir: str = str(DEFAULT_DATA_DIR)
    document_name: str = "worklog.md"


class LLMConfig(BaseModel):
    """[llm] section."""

    provider: str = "openai"  # openai | claude-cli
    model: str | None = None
    base_url: str = "https://api.openai.com/v1"
    timeout: int = 30
    temperature: float = 0.1
    max_tokens: int = 4000


class VaultConfig(BaseModel):
    """[vault] section."""

    credential_file: str = ""
    api_key_env: str = ""


class OrganizerConfig(BaseModel):
    """[organizer] section."""

    max_entries: int = 3


class WorklogConfig(BaseModel):
    """Top-level configuration for the worklog engine."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    vault: VaultConfig = Field(default_factory=VaultConfig)
    organizer: OrganizerConfig = Field(default_factory=OrganizerConfig)

    @property
    def data_dir(self) -> Path:
        return Path(self.storage.data_dir).expanduser()

    @property
    def document_path(self) -> Path:
        return self.data_dir / self.storage.document_name

    @property
    def credential_path(self) -> Path:
        """Credential file location, defaulting to the data directory."""
        if self.vault.credential_file:
            return Path(self.vault.credential_file).expanduser()
        return self.data_dir / "credential"


def load_config(path: str | Path | None = None) -> WorklogConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .worklog.toml in CWD
    3. ~/.config/worklog/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged WorklogConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = WorklogConfig.model_validate(data) if data else WorklogConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: WorklogConfig, **cli_kwargs: object) -> WorklogConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).

    Args:
        config: Base config.
        **cli_kwargs: CLI flag values, e.g. ``data_dir``, ``model``,
            ``provider``.

    Returns:
        Updated config with CLI overrides applied.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "data_dir": ("storage", "data_dir"),
        "provider": ("llm", "provider"),
        "model": ("llm", "model"),
        "timeout": ("llm", "timeout"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = str(value) if isinstance(value, Path) else value

    return WorklogConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: WorklogConfig) -> WorklogConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "WORKLOG_DATA_DIR": ("storage", "data_dir"),
        "WORKLOG_PROVIDER": ("llm", "provider"),
        "WORKLOG_MODEL": ("llm", "model"),
        "WORKLOG_BASE_URL": ("llm", "base_url"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    timeout_raw = os.environ.get("WORKLOG_TIMEOUT")
    if timeout_raw is not None:
        try:
            data["llm"]["timeout"] = int(timeout_raw)
        except ValueError:
            logger.warning("Ignoring non-integer WORKLOG_TIMEOUT=%r", timeout_raw)

    return WorklogConfig.model_validate(data)
