"""Configuration helpers for the now-playing renderer."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from core.errors import ConfigurationError
from utils.logger import get_logger

logger = get_logger(__name__)

_DEFAULT_CONFIG_PATH = Path("config.yaml")

DEFAULT_PLEX_HOST = "http://plex.local:32400"
DEFAULT_WEBHOOK_PORT = 8080
DEFAULT_STATIC_PORT = 8081
DEFAULT_CANVAS_WIDTH = 1080
DEFAULT_CANVAS_HEIGHT = 1920
DEFAULT_OUTPUT_PATH = "output/now-playing.png"
DEFAULT_PLACEHOLDER_PATH = "assets/transparent.png"
DEFAULT_FETCH_TIMEOUT = 15.0


@dataclass(frozen=True)
class AppConfig:
    """Immutable settings, built once at startup and passed around explicitly."""
    plex_host: str
    plex_token: str
    canvas_width: int = DEFAULT_CANVAS_WIDTH
    canvas_height: int = DEFAULT_CANVAS_HEIGHT
    output_path: Path = Path(DEFAULT_OUTPUT_PATH)
    placeholder_path: Path = Path(DEFAULT_PLACEHOLDER_PATH)
    listen_host: str = "0.0.0.0"
    webhook_port: int = DEFAULT_WEBHOOK_PORT
    static_port: int = DEFAULT_STATIC_PORT
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    log_dir: str = "logs"

    @property
    def output_dir(self) -> Path:
        return self.output_path.parent


def load_yaml(path: str | Path = _DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """Load raw settings from YAML. A missing file yields an empty mapping."""
    path = Path(path)
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Config file {path} is not valid YAML: {exc}") from exc
    except OSError as exc:
        raise ConfigurationError(f"Config file {path} is not readable: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def load_config(
    path: str | Path = _DEFAULT_CONFIG_PATH,
    env: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """
    Build the AppConfig from an optional YAML file, with environment
    variables taking precedence (PLEX_HOST, PLEX_TOKEN, WEBHOOK_PORT,
    STATIC_PORT, CANVAS_WIDTH, CANVAS_HEIGHT).
    """
    env = os.environ if env is None else env
    raw = load_yaml(path)
    plex_cfg = _section(raw, "plex")
    canvas_cfg = _section(raw, "canvas")
    server_cfg = _section(raw, "server")
    paths_cfg = _section(raw, "paths")

    token = env.get("PLEX_TOKEN") or plex_cfg.get("token") or ""
    if not token:
        raise ConfigurationError("PLEX_TOKEN is not set")

    config = AppConfig(
        plex_host=str(env.get("PLEX_HOST") or plex_cfg.get("url") or DEFAULT_PLEX_HOST).rstrip("/"),
        plex_token=str(token),
        canvas_width=_get_int(env, "CANVAS_WIDTH", canvas_cfg.get("width"), DEFAULT_CANVAS_WIDTH),
        canvas_height=_get_int(env, "CANVAS_HEIGHT", canvas_cfg.get("height"), DEFAULT_CANVAS_HEIGHT),
        output_path=Path(paths_cfg.get("output", DEFAULT_OUTPUT_PATH)),
        placeholder_path=Path(paths_cfg.get("placeholder", DEFAULT_PLACEHOLDER_PATH)),
        listen_host=str(server_cfg.get("host", "0.0.0.0")),
        webhook_port=_get_int(env, "WEBHOOK_PORT", server_cfg.get("webhook_port"), DEFAULT_WEBHOOK_PORT),
        static_port=_get_int(env, "STATIC_PORT", server_cfg.get("static_port"), DEFAULT_STATIC_PORT),
        fetch_timeout=_get_float(raw.get("fetch_timeout"), DEFAULT_FETCH_TIMEOUT),
        log_dir=str(raw.get("log_dir", "logs")),
    )

    if config.canvas_width <= 0 or config.canvas_height <= 0:
        raise ConfigurationError(
            f"Canvas size must be positive, got {config.canvas_width}x{config.canvas_height}"
        )
    if config.fetch_timeout <= 0:
        raise ConfigurationError(f"fetch_timeout must be positive, got {config.fetch_timeout}")
    return config


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = raw.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Config section '{name}' must be a mapping, got {section!r}")
    return section


def _get_int(env: Mapping[str, str], key: str, file_value: Any, fallback: int) -> int:
    value = env.get(key)
    source = key
    if not value:
        if file_value is None:
            return fallback
        value = file_value
        source = f"config value for {key}"
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid int for {source}: {value!r} (using fallback {fallback})")
        return fallback


def _get_float(value: Any, fallback: float) -> float:
    if value is None:
        return fallback
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"fetch_timeout must be a number, got {value!r}") from exc
