from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, TypeVar

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://parkingservers.vercel.app/"
DEFAULT_APP_NAME = "parkdesk"
DEFAULT_TIMEOUT_SECONDS = 15.0
MAX_CONNECT_TIMEOUT_SECONDS = 5.0

N = TypeVar("N", int, float)


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ClientConfig:
    """Where the parking backend lives, how long to wait for it, and where the session is kept."""

    env_name: str
    api_base_url: str
    connect_timeout_seconds: float = MAX_CONNECT_TIMEOUT_SECONDS
    read_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    verify_ssl: bool = True
    max_connections: int = 10
    app_name: str = DEFAULT_APP_NAME
    session_dir: Path | None = None


def _env(name: str) -> str:
    return (os.getenv(name) or "").strip()


def _positive(name: str, cast: Callable[[str], N], default: N) -> N:
    raw = _env(name)
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid {name}: expected a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"Invalid {name}: expected > 0, got {value}")
    return value


def _base_url(env_name: str) -> str:
    # a per-environment origin (PARKDESK_API_BASE_URL_STAGING) beats the shared one
    return _env(f"PARKDESK_API_BASE_URL_{env_name.upper()}") or _env("PARKDESK_API_BASE_URL") or DEFAULT_BASE_URL


def load_config(env_file: str | None = None) -> ClientConfig:
    """Load config from environment with optional .env override."""
    load_dotenv(env_file)

    env_name = _env("PARKDESK_ENV") or "dev"

    # one overall timeout; the connect phase is capped, reads get the rest
    timeout = _positive("PARKDESK_TIMEOUT_SECONDS", float, DEFAULT_TIMEOUT_SECONDS)
    connect_timeout = _positive(
        "PARKDESK_CONNECT_TIMEOUT_SECONDS", float, min(timeout, MAX_CONNECT_TIMEOUT_SECONDS)
    )
    read_timeout = _positive("PARKDESK_READ_TIMEOUT_SECONDS", float, max(timeout, connect_timeout))

    session_dir = _env("PARKDESK_SESSION_DIR")
    return ClientConfig(
        env_name=env_name,
        api_base_url=_base_url(env_name).rstrip("/"),
        connect_timeout_seconds=connect_timeout,
        read_timeout_seconds=read_timeout,
        verify_ssl=_env("PARKDESK_VERIFY_SSL").lower() not in {"0", "false", "no", "off"},
        max_connections=_positive("PARKDESK_MAX_CONNECTIONS", int, 10),
        app_name=_env("PARKDESK_APP_NAME") or DEFAULT_APP_NAME,
        session_dir=Path(session_dir).expanduser() if session_dir else None,
    )
