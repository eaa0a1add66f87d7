"""Application configuration loaded from config.yaml + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def _config_path() -> Path:
    return Path(os.environ.get("HELPDESK_CONFIG", _DEFAULT_CONFIG_PATH))


def _load_yaml(path: Path) -> dict:
    if path.exists():
        with open(path) as f:
            return yaml.safe_load(f) or {}
    return {}


class StoreConfig(BaseSettings):
    url: str = "sqlite+aiosqlite:///data/helpdesk.db"
    echo: bool = False
    busy_timeout_seconds: float = 15.0
    max_attempts: int = 3
    retry_backoff_seconds: float = 0.05

    model_config = {"env_prefix": "HELPDESK_STORE_"}


class AssignmentConfig(BaseSettings):
    tolerance_minutes: int = 30
    timezone: str = "UTC"
    default_availability: list[str] = Field(default_factory=lambda: [
        "08:00", "09:00", "10:00", "11:00",
        "14:00", "15:00", "16:00", "17:00",
    ])

    model_config = {"env_prefix": "HELPDESK_ASSIGNMENT_"}


class AuthConfig(BaseSettings):
    session_max_age_days: int = 7
    cookie_name: str = "session_token"

    model_config = {"env_prefix": "HELPDESK_AUTH_"}


class PaginationConfig(BaseSettings):
    default_per_page: int = 10
    max_per_page: int = 50

    model_config = {"env_prefix": "HELPDESK_PAGINATION_"}


class Settings(BaseSettings):
    store: StoreConfig = Field(default_factory=StoreConfig)
    assignment: AssignmentConfig = Field(default_factory=AssignmentConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "HELPDESK_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


def _yaml_section(section: dict, config_cls: type[BaseSettings]) -> dict:
    """YAML keys of one section, minus those an environment variable sets.

    Init kwargs outrank the environment in pydantic-settings, so keys with a
    matching ``<env_prefix><KEY>`` variable are left for the env source.
    """
    prefix = config_cls.model_config.get("env_prefix", "")
    env = {name.upper() for name in os.environ}
    return {k: v for k, v in section.items() if f"{prefix}{k}".upper() not in env}


def get_settings() -> Settings:
    """Build Settings from config.yaml.

    Precedence per key: HELPDESK_* environment variable, then config.yaml,
    then the defaults above.
    """
    y = _load_yaml(_config_path())
    store = StoreConfig(**_yaml_section(y.get("store") or {}, StoreConfig))
    assignment = AssignmentConfig(**_yaml_section(y.get("assignment") or {}, AssignmentConfig))
    auth = AuthConfig(**_yaml_section(y.get("auth") or {}, AuthConfig))
    pagination = PaginationConfig(**_yaml_section(y.get("pagination") or {}, PaginationConfig))
    extra = _yaml_section({"log_level": y["log_level"]}, Settings) if "log_level" in y else {}
    return Settings(
        store=store,
        assignment=assignment,
        auth=auth,
        pagination=pagination,
        **extra,
    )
