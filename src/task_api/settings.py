from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - ENABLE_BASIC_AUTH: 'true' to enable optional HTTP Basic Auth (default: false)
    - BASIC_AUTH_USERNAME: username for basic auth (required when ENABLE_BASIC_AUTH=true)
    - BASIC_AUTH_PASSWORD: password for basic auth (required when ENABLE_BASIC_AUTH=true)
    - USER_ID_HEADER: request header carrying the owner identity. Default 'X-User-Id'
    - DEFAULT_USER_ID: owner used when the header is absent. Default 'anonymous'
    - LOG_LEVEL: logging level name for the task_api loggers. Default 'INFO'
    """

    cors_allow_origins: List[str]
    enable_basic_auth: bool
    basic_auth_username: Optional[str]
    basic_auth_password: Optional[str]
    user_id_header: str = "X-User-Id"
    default_user_id: str = "anonymous"
    log_level: int = logging.INFO


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


def _parse_log_level(value: str) -> int:
    level = logging.getLevelName(value.strip().upper())
    # getLevelName returns a string like "Level FOO" for unknown names
    return level if isinstance(level, int) else logging.INFO


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    origins = _parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*"))

    enable_basic_auth = _parse_bool(_get_env("ENABLE_BASIC_AUTH", "false"), False)
    basic_user = os.getenv("BASIC_AUTH_USERNAME") if enable_basic_auth else None
    basic_pass = os.getenv("BASIC_AUTH_PASSWORD") if enable_basic_auth else None

    # DEFAULT_USER_ID may legitimately be set to an empty string
    default_user = os.getenv("DEFAULT_USER_ID")

    return Settings(
        cors_allow_origins=origins,
        enable_basic_auth=enable_basic_auth,
        basic_auth_username=basic_user,
        basic_auth_password=basic_pass,
        user_id_header=_get_env("USER_ID_HEADER", "X-User-Id").strip(),
        default_user_id="anonymous" if default_user is None else default_user,
        log_level=_parse_log_level(_get_env("LOG_LEVEL", "INFO")),
    )
