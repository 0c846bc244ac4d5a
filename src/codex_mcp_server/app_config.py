from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from importlib import metadata
from pathlib import Path

from loguru import logger

SERVER_NAME = "codex-mcp-server"


@dataclass
class AppConfig:
    codex_executable: str
    command_timeout_seconds: float
    default_page_size: int
    min_page_size: int
    max_page_size: int
    session_ttl_minutes: float
    max_sessions: int
    cursor_ttl_minutes: float
    default_model: str | None
    codex_home: str | None
    enable_resume: bool
    echo_page_token: bool
    log_level: str
    log_consumers: list | None


def load_json_config(path: Path | None = None) -> dict:
    config_path = path or Path.cwd() / "config.json"
    if config_path.exists():
        with open(config_path) as f:
            return json.load(f)
    return {}


def _to_bool(value: object, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return bool(value)


def _positive_number(env: Mapping[str, str], name: str, fallback: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return fallback
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={raw!r}")
        return fallback
    if value <= 0:
        logger.warning(f"Ignoring non-positive {name}={raw!r}")
        return fallback
    return value


def parse_app_config(config: dict, environ: Mapping[str, str] | None = None) -> AppConfig:
    env = os.environ if environ is None else environ

    timeout_ms = _positive_number(env, "CODEX_CMD_TIMEOUT_MS", float(config.get("CommandTimeoutMs", 180_000)))
    page_size = _positive_number(env, "CODEX_PAGE_SIZE", float(config.get("PageSize", 40_000)))
    session_ttl = _positive_number(
        env, "CODEX_SESSION_TTL_MINUTES", float(config.get("SessionTtlMinutes", 24 * 60))
    )
    cursor_ttl = _positive_number(env, "CODEX_CURSOR_TTL_MINUTES", float(config.get("CursorTtlMinutes", 10)))

    default_model = str(env.get("CODEX_DEFAULT_MODEL") or config.get("DefaultModel") or "").strip() or None
    log_level = "DEBUG" if _to_bool(env.get("DEBUG"), default=False) else config.get("LogLevel", "INFO")

    return AppConfig(
        codex_executable=env.get("CODEX_EXECUTABLE") or config.get("CodexExecutable", "codex"),
        command_timeout_seconds=timeout_ms / 1000.0,
        default_page_size=int(page_size),
        min_page_size=int(config.get("MinPageSize", 1_000)),
        max_page_size=int(config.get("MaxPageSize", 200_000)),
        session_ttl_minutes=session_ttl,
        max_sessions=int(config.get("MaxSessions", 500)),
        cursor_ttl_minutes=cursor_ttl,
        default_model=default_model,
        codex_home=config.get("CodexHome"),
        enable_resume=_to_bool(config.get("EnableResume", True), default=True),
        echo_page_token=_to_bool(config.get("EchoPageTokenInContent", True), default=True),
        log_level=log_level,
        log_consumers=config.get("LogConsumers"),
    )


def server_version() -> str:
    try:
        return metadata.version(SERVER_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"
