from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass
class ToolResult:
    content: list[dict[str, str]] = field(default_factory=list)
    meta: dict[str, Any] | None = None
    is_error: bool = False

    @classmethod
    def text(cls, text: str, *, meta: dict[str, Any] | None = None, is_error: bool = False) -> ToolResult:
        return cls(content=[{"type": "text", "text": text}], meta=meta, is_error=is_error)

    @property
    def first_text(self) -> str:
        return self.content[0]["text"] if self.content else ""


@runtime_checkable
class Tool(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str: ...

    @property
    def input_schema(self) -> dict[str, Any]: ...

    async def execute(self, tool_input: dict[str, Any]) -> ToolResult: ...
