"""Workflow configuration loading."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any, Literal, cast

from ruamel.yaml import YAML

CONFIG_FILENAME = "painflow.yaml"

DEFAULT_BACKEND_URL = "http://localhost:3000"
DEFAULT_TIMEOUT = 120.0
DEFAULT_PROVIDER = "openai/gpt-4o-mini"
DEFAULT_FRAME_INTERVAL = 1 / 60
DEFAULT_PROJECT_ID = "ai-agent-platform"
DEFAULT_REGION = "asia-northeast1"

BackendMode = Literal["http", "llm"]
_BACKEND_MODES: frozenset[str] = frozenset({"http", "llm"})


@dataclass
class BackendConfig:
    """Where the stage collaborators live.

    Resolution order for ``mode`` and ``base_url``:
    1. Environment variable (PAINFLOW_BACKEND, PAINFLOW_BACKEND_URL)
    2. painflow.yaml
    3. Defaults

    Attributes:
        mode: "http" posts to a running web backend, "llm" calls the
            chat model directly.
        base_url: Root URL of the web backend.
        timeout: Per-request timeout in seconds.
    """

    mode: BackendMode = "http"
    base_url: str = DEFAULT_BACKEND_URL
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BackendConfig:
        mode = os.getenv("PAINFLOW_BACKEND") or data.get("mode", "http")
        if mode not in _BACKEND_MODES:
            raise ValueError(f"Unknown backend mode '{mode}' (expected http or llm)")
        return cls(
            mode=cast("BackendMode", mode),
            base_url=os.getenv("PAINFLOW_BACKEND_URL") or data.get("base_url", DEFAULT_BACKEND_URL),
            timeout=float(data.get("timeout", DEFAULT_TIMEOUT)),
        )


@dataclass
class ProviderConfig:
    """Chat model used by the llm backend and by chat streaming."""

    default: str = DEFAULT_PROVIDER

    def get_provider(self) -> str:
        """Effective provider string, PAINFLOW_PROVIDER overriding config."""
        return os.getenv("PAINFLOW_PROVIDER") or self.default

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProviderConfig:
        return cls(default=data.get("default", DEFAULT_PROVIDER))


@dataclass
class LiveConfig:
    """Live text streaming settings."""

    frame_interval: float = DEFAULT_FRAME_INTERVAL


@dataclass
class DeploymentConfig:
    """Target of the generated deployment script."""

    project_id: str = DEFAULT_PROJECT_ID
    region: str = DEFAULT_REGION


@dataclass
class WorkflowConfig:
    """Configuration for a painflow workspace."""

    name: str = "unnamed"
    backend: BackendConfig = field(default_factory=BackendConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    live: LiveConfig = field(default_factory=LiveConfig)
    deployment: DeploymentConfig = field(default_factory=DeploymentConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkflowConfig:
        """Create config from a parsed painflow.yaml mapping."""
        live_data = dict(data.get("live") or {})
        deployment_data = dict(data.get("deployment") or {})
        frame_interval = float(live_data.get("frame_interval", DEFAULT_FRAME_INTERVAL))
        if frame_interval < 0:
            raise ValueError("live.frame_interval must not be negative")

        return cls(
            name=data.get("name", "unnamed"),
            backend=BackendConfig.from_dict(dict(data.get("backend") or {})),
            provider=ProviderConfig.from_dict(dict(data.get("provider") or {})),
            live=LiveConfig(frame_interval=frame_interval),
            deployment=DeploymentConfig(
                project_id=deployment_data.get("project_id", DEFAULT_PROJECT_ID),
                region=deployment_data.get("region", DEFAULT_REGION),
            ),
        )


class ConfigError(Exception):
    """Raised when configuration cannot be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load config at {path}: {reason}")


def load_config(path: Path) -> WorkflowConfig:
    """Load configuration from a painflow.yaml file or a directory holding one.

    Args:
        path: File path, or directory containing painflow.yaml.

    Returns:
        WorkflowConfig instance.

    Raises:
        ConfigError: If the file is missing, empty, or invalid.
    """
    config_path = path / CONFIG_FILENAME if path.is_dir() else path

    if not config_path.exists():
        raise ConfigError(config_path, "File not found")

    yaml = YAML(typ="safe")
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)

        if data is None:
            raise ConfigError(config_path, "Empty file")

        return WorkflowConfig.from_dict(dict(data))
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(config_path, str(e)) from e


def resolve_config(path: Path | None) -> WorkflowConfig:
    """Load ``path`` if given, else ./painflow.yaml if present, else defaults.

    Environment overrides still apply to the defaults.

    Raises:
        ConfigError: If an explicitly given path cannot be loaded.
    """
    if path is not None:
        return load_config(path)
    try:
        return load_config(Path.cwd())
    except ConfigError as e:
        if e.reason != "File not found":
            raise
        return WorkflowConfig.from_dict({})
