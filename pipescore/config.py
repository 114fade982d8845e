"""Run settings from the environment and an optional YAML config file."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from .probes.base import ProbeDefinition
from .probes.deployed import DEPLOY_TIMEOUT_MS
from .probes.yaml_loader import load_extra_probes
from .scanner.github import DEFAULT_API_BASE

TOKEN_ENV = "GITHUB_TOKEN"
API_BASE_ENV = "GITHUB_API_BASE"
LOG_LEVEL_ENV = "PIPESCORE_LOG_LEVEL"


class ConfigError(Exception):
    """Fatal configuration problem, raised before any audit starts."""


@dataclass
class Settings:
    token: str
    api_base: str = DEFAULT_API_BASE
    concurrency: int = 4
    probe_workers: int = 1
    request_timeout: float = 15.0  # seconds, per API call
    deploy_timeout_ms: int = DEPLOY_TIMEOUT_MS
    deadline: Optional[float] = None  # seconds for the whole run
    retries: int = 3
    log_level: str = "INFO"
    extra_probes: list[ProbeDefinition] = field(default_factory=list)


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping")
    return data


def _number(data: dict, key: str, default, kind=int, minimum=1):
    value = data.get(key, default)
    if value is None:
        return None
    try:
        value = kind(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be a number, got {value!r}") from None
    if value < minimum:
        raise ConfigError(f"{key} must be >= {minimum}, got {value}")
    return value


def load_settings(
    config_path: Optional[Path] = None,
    env: Optional[dict[str, str]] = None,
    **overrides: Any,
) -> Settings:
    """
    Build Settings. Precedence: overrides (CLI flags) > YAML file > defaults.
    GITHUB_TOKEN must be set; it is checked first so no network call happens
    without credentials.
    """
    env = os.environ if env is None else env
    token = (env.get(TOKEN_ENV) or "").strip()
    if not token:
        raise ConfigError(f"{TOKEN_ENV} required: export a token with repo, actions and packages read access")

    data = _load_yaml(Path(config_path)) if config_path else {}
    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        extra = load_extra_probes(data.get("extra_probes"))
    except ValueError as e:
        raise ConfigError(str(e)) from e

    return Settings(
        token=token,
        api_base=str(data.get("api_base") or env.get(API_BASE_ENV) or DEFAULT_API_BASE),
        concurrency=_number(data, "concurrency", 4),
        probe_workers=_number(data, "probe_workers", 1),
        request_timeout=_number(data, "request_timeout", 15.0, kind=float, minimum=0.1),
        deploy_timeout_ms=_number(data, "deploy_timeout_ms", DEPLOY_TIMEOUT_MS, minimum=100),
        deadline=_number(data, "deadline", None, kind=float, minimum=0.1),
        retries=_number(data, "retries", 3, minimum=0),
        log_level=str(data.get("log_level") or env.get(LOG_LEVEL_ENV) or "INFO").upper(),
        extra_probes=extra,
    )
