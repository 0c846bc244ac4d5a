"""Log sinks for the stdio server.

stdout carries MCP frames, so no consumer may write there: the console consumer
is bound to stderr and file paths that alias stdout are refused. A rejected or
unknown consumer is reported once logging is up; if nothing valid remains the
server still logs to stderr.
"""

import sys
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from loguru import logger

_CONSOLE_FORMAT = "{level:<8} | {name}:{function}:{line} - {message}"
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} - {message}"

_STDOUT_ALIASES = {"-", "/dev/stdout", "/dev/fd/1", "/proc/self/fd/1"}


@runtime_checkable
class LogConsumer(Protocol):
    def register(self, level: str) -> None: ...
    def describe(self, level: str) -> str: ...


class ConsoleLogConsumer:
    def __init__(self, stream: str = "stderr"):
        if stream != "stderr":
            raise ValueError(f"console logging must use stderr, not {stream!r} (stdout is the MCP transport)")

    def register(self, level: str) -> None:
        logger.add(sys.stderr, level=level, colorize=False, format=_CONSOLE_FORMAT)

    def describe(self, level: str) -> str:
        return f"console (stderr, {level})"


class FileLogConsumer:
    def __init__(
        self,
        path: str = "codex-mcp-server.log",
        rotation: str = "10 MB",
        retention: int = 3,
    ):
        if str(path).strip() in _STDOUT_ALIASES:
            raise ValueError(f"log file {path!r} would write to stdout (the MCP transport)")
        self._path = Path(path).expanduser()
        self._rotation = rotation
        self._retention = retention

    def register(self, level: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(self._path),
            level=level,
            format=_FILE_FORMAT,
            rotation=self._rotation,
            retention=self._retention,
        )

    def describe(self, level: str) -> str:
        return f"file ({self._path}, {level})"


_CONSUMER_TYPES: dict[str, type] = {
    "console": ConsoleLogConsumer,
    "file": FileLogConsumer,
}


def _build(config: dict[str, Any]) -> LogConsumer:
    sink_type = config.get("type", "")
    cls = _CONSUMER_TYPES.get(sink_type)
    if cls is None:
        raise ValueError(f"unknown log consumer type {sink_type!r}")
    options = {k: v for k, v in config.items() if k not in ("type", "level")}
    try:
        return cls(**options)
    except TypeError as ex:
        raise ValueError(f"bad options for {sink_type!r} log consumer: {ex}") from ex


def setup_logging(
    level: str = "INFO",
    consumers: list[dict[str, Any]] | None = None,
) -> list[str]:
    """Replace all loguru sinks with ``consumers`` (console on stderr by default).

    Returns a description of each registered consumer.
    """
    logger.remove()

    rejected: list[str] = []
    descriptions: list[str] = []
    for config in consumers if consumers is not None else [{"type": "console"}]:
        try:
            consumer = _build(config)
        except ValueError as ex:
            rejected.append(str(ex))
            continue
        sink_level = config.get("level", level)
        consumer.register(sink_level)
        descriptions.append(consumer.describe(sink_level))

    if not descriptions:
        fallback = ConsoleLogConsumer()
        fallback.register(level)
        descriptions.append(fallback.describe(level))

    for reason in rejected:
        logger.warning("Ignoring log consumer: {reason}", reason=reason)
    return descriptions
