# src/taskdeck/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing here talks to the network; the service client is built from these values
  in the composition root (cli/bootstrap.py).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .service.client import ClientConfig

ENV_PREFIX = "TASKDECK"

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_TIMEOUT_MS = 10_000
DEFAULT_METRICS_PATH = "/metrics"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# Local .env never overrides variables already set in the process environment.
load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path

    # ---- Task / metrics service ----
    api_base_url: str
    api_timeout_ms: int
    metrics_path: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskdeck").strip() or "taskdeck"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        log_dir = _env_path(_k("LOG_DIR"), Path(".local/taskdeck"))

        api_base_url = _env(_k("API_BASE_URL"), DEFAULT_BASE_URL).strip() or DEFAULT_BASE_URL
        api_timeout_ms = _env_int(_k("API_TIMEOUT_MS"), DEFAULT_TIMEOUT_MS)
        if api_timeout_ms <= 0:
            api_timeout_ms = DEFAULT_TIMEOUT_MS

        # The reference backend serves metrics at /metrices; keep the path overridable.
        metrics_path = _env(_k("METRICS_PATH"), DEFAULT_METRICS_PATH).strip() or DEFAULT_METRICS_PATH
        if not metrics_path.startswith("/"):
            metrics_path = "/" + metrics_path

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_dir=log_dir,
            api_base_url=api_base_url,
            api_timeout_ms=api_timeout_ms,
            metrics_path=metrics_path,
        )

    def client_config(self) -> ClientConfig:
        return ClientConfig(
            base_url=self.api_base_url,
            timeout_ms=self.api_timeout_ms,
            metrics_path=self.metrics_path,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
