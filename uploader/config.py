"""Uploader configuration.

Loads from config.yaml if present, with environment variable overrides.
Environment variables use the pattern: UPLOADER_<SECTION>_<KEY> (uppercase).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000
    env: str = "dev"  # "dev" or "prod"


@dataclass
class StorageConfig:
    backend: str = "file"  # "file" or "memory"
    path: str = "data/reports.jsonl"


@dataclass
class SubmitConfig:
    endpoint: str = "https://location.services.mozilla.com/v2/geosubmit"
    timeout_seconds: float = 30.0
    user_agent: str = "geosubmit-uploader/0.1.0"


@dataclass
class SchedulerConfig:
    enabled: bool = True
    interval_seconds: float = 3600.0
    periodic_send_all: bool = False
    min_reports_to_send: int = 100
    retry_initial_seconds: float = 30.0
    retry_max_seconds: float = 18_000.0


@dataclass
class LoggingConfig:
    level: str = "info"
    format: str = "console"  # "console" or "json"


@dataclass
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    submit: SubmitConfig = field(default_factory=SubmitConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(config: AppConfig) -> None:
    """Override config values from environment variables."""
    mapping = {
        "UPLOADER_SERVER_HOST": lambda v: setattr(config.server, "host", v),
        "UPLOADER_SERVER_PORT": lambda v: setattr(config.server, "port", int(v)),
        "UPLOADER_SERVER_ENV": lambda v: setattr(config.server, "env", v),
        "UPLOADER_STORAGE_BACKEND": lambda v: setattr(config.storage, "backend", v),
        "UPLOADER_STORAGE_PATH": lambda v: setattr(config.storage, "path", v),
        "UPLOADER_SUBMIT_ENDPOINT": lambda v: setattr(config.submit, "endpoint", v),
        "UPLOADER_SUBMIT_TIMEOUT": lambda v: setattr(config.submit, "timeout_seconds", float(v)),
        "UPLOADER_SUBMIT_USER_AGENT": lambda v: setattr(config.submit, "user_agent", v),
        "UPLOADER_SCHEDULER_ENABLED": lambda v: setattr(config.scheduler, "enabled", _parse_bool(v)),
        "UPLOADER_SCHEDULER_INTERVAL": lambda v: setattr(config.scheduler, "interval_seconds", float(v)),
        "UPLOADER_SCHEDULER_SEND_ALL": lambda v: setattr(config.scheduler, "periodic_send_all", _parse_bool(v)),
        "UPLOADER_SCHEDULER_MIN_REPORTS": lambda v: setattr(config.scheduler, "min_reports_to_send", int(v)),
        "UPLOADER_SCHEDULER_RETRY_INITIAL": lambda v: setattr(config.scheduler, "retry_initial_seconds", float(v)),
        "UPLOADER_SCHEDULER_RETRY_MAX": lambda v: setattr(config.scheduler, "retry_max_seconds", float(v)),
        "UPLOADER_LOG_LEVEL": lambda v: setattr(config.logging, "level", v),
        "UPLOADER_LOG_FORMAT": lambda v: setattr(config.logging, "format", v),
    }
    for env_key, setter in mapping.items():
        val = os.environ.get(env_key)
        if val is not None:
            setter(val)


def _validate(config: AppConfig) -> None:
    """Reject values the uploader cannot run with."""
    if config.scheduler.min_reports_to_send < 1:
        raise ValueError(
            f"scheduler.min_reports_to_send must be at least 1, got {config.scheduler.min_reports_to_send}"
        )


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load configuration from YAML file + environment overrides."""
    config = AppConfig()

    if config_path is None:
        config_path = Path(os.environ.get("UPLOADER_CONFIG", "config.yaml"))
    else:
        config_path = Path(config_path)

    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}

        for section in ("server", "storage", "submit", "scheduler", "logging"):
            if section not in raw:
                continue
            target = getattr(config, section)
            for k, v in raw[section].items():
                if hasattr(target, k):
                    setattr(target, k, v)

    # Environment overrides always win
    _apply_env_overrides(config)
    _validate(config)
    return config
