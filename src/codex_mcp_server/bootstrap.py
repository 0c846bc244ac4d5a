from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from codex_mcp_server.app_config import SERVER_NAME, AppConfig, server_version
from codex_mcp_server.command import CommandRunner
from codex_mcp_server.logging_config import setup_logging
from codex_mcp_server.memory import CursorStore, SessionStore
from codex_mcp_server.server import CodexMcpServer
from codex_mcp_server.services.codex_orchestrator import CodexOrchestrator, PagingConfig
from codex_mcp_server.tool import Tool
from codex_mcp_server.tool_registry import get_all


@dataclass
class AppRuntime:
    server: CodexMcpServer
    orchestrator: CodexOrchestrator
    sessions: SessionStore
    cursors: CursorStore
    runner: CommandRunner
    tools: list[Tool]
    version: str
    log_descriptions: list[str]


def bootstrap_runtime(app: AppConfig, *, configure_logging: bool = True) -> AppRuntime:
    log_descriptions = setup_logging(level=app.log_level, consumers=app.log_consumers) if configure_logging else []
    version = server_version()

    sessions = SessionStore(
        ttl=timedelta(minutes=app.session_ttl_minutes),
        max_sessions=app.max_sessions,
    )
    cursors = CursorStore(ttl=timedelta(minutes=app.cursor_ttl_minutes))
    runner = CommandRunner(timeout_seconds=app.command_timeout_seconds)
    orchestrator = CodexOrchestrator(
        sessions,
        cursors,
        runner,
        executable=app.codex_executable,
        paging=PagingConfig(
            default_page_size=app.default_page_size,
            min_page_size=app.min_page_size,
            max_page_size=app.max_page_size,
        ),
        default_model=app.default_model,
    )

    tools = get_all(
        orchestrator,
        sessions,
        runner,
        executable=app.codex_executable,
        version=version,
        codex_home=Path(app.codex_home).expanduser() if app.codex_home else None,
        enable_resume=app.enable_resume,
    )
    server = CodexMcpServer(SERVER_NAME, version, tools, echo_page_token=app.echo_page_token)

    return AppRuntime(
        server=server,
        orchestrator=orchestrator,
        sessions=sessions,
        cursors=cursors,
        runner=runner,
        tools=tools,
        version=version,
        log_descriptions=log_descriptions,
    )
