from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from codex_mcp_server.command import CommandRunner
from codex_mcp_server.memory.session_store import SessionStore
from codex_mcp_server.services.codex_orchestrator import CodexOrchestrator
from codex_mcp_server.services.session_controller import SessionController
from codex_mcp_server.tool import Tool
from codex_mcp_server.tools.cli_tools import HelpTool, ResumeTool
from codex_mcp_server.tools.codex_tool import CodexTool
from codex_mcp_server.tools.list_models_tool import ListModelsTool
from codex_mcp_server.tools.list_tools_tool import ListToolsTool
from codex_mcp_server.tools.ping_tool import PingTool
from codex_mcp_server.tools.session_tools import DeleteSessionTool, ListSessionsTool, SessionStatsTool


@dataclass(frozen=True)
class ToolGroup:
    enabled: Callable[[dict], bool]
    build: Callable[[dict], list[Tool]]


def _always(_: dict) -> bool:
    return True


def _conversation_tools(ctx: dict) -> list[Tool]:
    sessions = ctx["sessions"]
    controller = SessionController()
    return [
        CodexTool(ctx["orchestrator"]),
        ListSessionsTool(sessions, controller),
        SessionStatsTool(sessions, controller),
        DeleteSessionTool(sessions),
    ]


def _cli_tools(ctx: dict) -> list[Tool]:
    runner = ctx["runner"]
    executable = ctx["executable"]
    return [
        HelpTool(runner, executable),
        ListModelsTool(ctx.get("codex_home")),
    ]


def _resume_enabled(ctx: dict) -> bool:
    return bool(ctx.get("enable_resume", True))


def _resume_tools(ctx: dict) -> list[Tool]:
    return [ResumeTool(ctx["runner"], ctx["executable"])]


def _diagnostic_tools(ctx: dict) -> list[Tool]:
    return [PingTool(ctx["version"])]


_GROUPS = [
    ToolGroup(enabled=_always, build=_conversation_tools),
    ToolGroup(enabled=_always, build=_cli_tools),
    ToolGroup(enabled=_resume_enabled, build=_resume_tools),
    ToolGroup(enabled=_always, build=_diagnostic_tools),
]


def get_all(
    orchestrator: CodexOrchestrator,
    sessions: SessionStore,
    runner: CommandRunner,
    *,
    executable: str = "codex",
    version: str = "0.0.0",
    codex_home: Path | None = None,
    enable_resume: bool = True,
) -> list[Tool]:
    ctx = {
        "orchestrator": orchestrator,
        "sessions": sessions,
        "runner": runner,
        "executable": executable,
        "version": version,
        "codex_home": codex_home,
        "enable_resume": enable_resume,
    }

    tools: list[Tool] = []
    for group in _GROUPS:
        if group.enabled(ctx):
            tools.extend(group.build(ctx))
    # listTools reports the final catalogue, itself included.
    tools.insert(0, ListToolsTool(lambda: tools))
    return tools
