from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import os

import yaml


DEFAULT_SETTINGS_PATH = "config/settings.yaml"


@dataclass(frozen=True)
class Settings:
    # Runtime environment name; `client_only` contracts run only when it equals client_env.
    env: str = "client"
    client_env: str = "client"
    log_level: str = "INFO"

    @property
    def is_client(self) -> bool:
        return self.env == self.client_env


def load_settings(path: str | Path = DEFAULT_SETTINGS_PATH) -> Settings:
    p = Path(path)

    data: Dict[str, Any] = {}
    if p.exists():
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{p}: settings must be a mapping")

    runtime = data.get("runtime", {}) or {}
    logging_section = data.get("logging", {}) or {}

    # Env overrides (used to mark server-side processes).
    env = os.getenv("STATEBUS_ENV") or runtime.get("env") or Settings.env
    client_env = os.getenv("STATEBUS_CLIENT_ENV") or runtime.get("client_env") or Settings.client_env
    log_level = os.getenv("STATEBUS_LOG_LEVEL") or logging_section.get("level") or Settings.log_level
    return Settings(
        env=str(env),
        client_env=str(client_env),
        log_level=str(log_level).upper(),
    )
