from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from codex_mcp_server.errors import ValidationError

ArgsT = TypeVar("ArgsT", bound=BaseModel)


class ToolArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class NoArgs(ToolArgs):
    pass


class CodexArgs(ToolArgs):
    prompt: str | None = None
    page_size: int | None = Field(default=None, alias="pageSize")
    page_token: str | None = Field(default=None, alias="pageToken")
    session_id: str | None = Field(default=None, alias="sessionId")
    reset_session: bool = Field(default=False, alias="resetSession")
    model: str | None = None
    image: str | list[str] | None = None
    approval_policy: str | None = Field(default=None, alias="approvalPolicy")
    sandbox: bool = False
    working_directory: str | None = Field(default=None, alias="workingDirectory")
    base_instructions: str | None = Field(default=None, alias="baseInstructions")

    @property
    def images(self) -> tuple[str, ...]:
        if self.image is None:
            return ()
        if isinstance(self.image, str):
            return (self.image,)
        return tuple(self.image)


class SessionIdArgs(ToolArgs):
    session_id: str = Field(alias="sessionId", min_length=1)


class PingArgs(ToolArgs):
    message: str = "pong"


def _format_errors(ex: PydanticValidationError) -> str:
    parts = []
    for err in ex.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


def parse_arguments(model: type[ArgsT], tool_name: str, tool_input: dict[str, Any] | None) -> ArgsT:
    try:
        return model.model_validate(tool_input or {})
    except PydanticValidationError as ex:
        raise ValidationError(tool_name, _format_errors(ex)) from ex
