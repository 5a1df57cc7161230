"""Server configuration.

Loads from config.yaml if present, with environment variable overrides.
Environment variables use the pattern: EDGESTATS_<SECTION>_<KEY> (uppercase).
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
    backend: str = "memory"  # "memory" or "file"
    base_dir: str = "data/stats"


@dataclass
class TrackingConfig:
    list_limit: int = 1000
    default_window_ms: int = 300_000
    request_timeout_seconds: float = 10.0


@dataclass
class RoutingConfig:
    stats_identifier: str = "stats"
    max_route_length: int = 512


@dataclass
class LoggingConfig:
    level: str = "info"
    format: str = "console"  # "console" or "json"


@dataclass
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    routing: RoutingConfig = field(default_factory=RoutingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _apply_env_overrides(config: AppConfig) -> None:
    """Override config values from environment variables."""
    mapping = {
        "EDGESTATS_SERVER_HOST": lambda v: setattr(config.server, "host", v),
        "EDGESTATS_SERVER_PORT": lambda v: setattr(config.server, "port", int(v)),
        "EDGESTATS_SERVER_ENV": lambda v: setattr(config.server, "env", v),
        "EDGESTATS_STORAGE_BACKEND": lambda v: setattr(config.storage, "backend", v),
        "EDGESTATS_STORAGE_BASE_DIR": lambda v: setattr(config.storage, "base_dir", v),
        "EDGESTATS_TRACKING_LIST_LIMIT": lambda v: setattr(config.tracking, "list_limit", int(v)),
        "EDGESTATS_TRACKING_DEFAULT_WINDOW_MS": lambda v: setattr(config.tracking, "default_window_ms", int(v)),
        "EDGESTATS_TRACKING_REQUEST_TIMEOUT": lambda v: setattr(config.tracking, "request_timeout_seconds", float(v)),
        "EDGESTATS_ROUTING_STATS_IDENTIFIER": lambda v: setattr(config.routing, "stats_identifier", v),
        "EDGESTATS_ROUTING_MAX_ROUTE_LENGTH": lambda v: setattr(config.routing, "max_route_length", int(v)),
        "EDGESTATS_LOG_LEVEL": lambda v: setattr(config.logging, "level", v),
        "EDGESTATS_LOG_FORMAT": lambda v: setattr(config.logging, "format", v),
    }
    for env_key, setter in mapping.items():
        val = os.environ.get(env_key)
        if val is not None:
            setter(val)


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load configuration from YAML file + environment overrides."""
    config = AppConfig()

    if config_path is None:
        config_path = Path(os.environ.get("EDGESTATS_CONFIG", "config.yaml"))
    else:
        config_path = Path(config_path)

    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}

        for section in ("server", "storage", "tracking", "routing", "logging"):
            target = getattr(config, section)
            for k, v in (raw.get(section) or {}).items():
                if hasattr(target, k):
                    setattr(target, k, v)

    # Environment overrides always win
    _apply_env_overrides(config)
    return config
