from __future__ import annotations

from pathlib import Path
from typing import Any

from loguru import logger

from codex_mcp_server.codex_config import codex_home, extract_models, load_codex_config
from codex_mcp_server.tool import ToolResult
from codex_mcp_server.tools.arguments import NoArgs, parse_arguments


class ListModelsTool:
    def __init__(self, home: Path | None = None):
        self._home = home

    @property
    def name(self) -> str:
        return "listModels"

    @property
    def description(self) -> str:
        return (
            "List Codex CLI models discovered from ~/.codex/config.(toml|yaml|json). "
            "Use this to see models your local CLI is configured for."
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}, "required": []}

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult:
        parse_arguments(NoArgs, self.name, tool_input)
        home = self._home or codex_home()
        lookup = load_codex_config(home)

        if lookup.config is None:
            if lookup.found_any and lookup.parse_error_path is not None:
                logger.warning("Could not parse {path}: {err}", path=lookup.parse_error_path, err=lookup.parse_error)
                return ToolResult.text(
                    f"Failed to parse Codex config file at {lookup.parse_error_path}: {lookup.parse_error}",
                    is_error=True,
                )
            return ToolResult.text(
                f"No Codex config file found in {home} (config.toml, config.yaml, config.json). "
                "Please create one to enable dynamic model listing.",
                is_error=True,
            )

        models = extract_models(lookup.config)
        if not models:
            return ToolResult.text(f"No models found in Codex config file {lookup.path}.", is_error=True)
        return ToolResult.text("\n".join(m.format() for m in models))
