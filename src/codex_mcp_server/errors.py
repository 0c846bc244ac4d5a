from __future__ import annotations


class CodexMcpError(Exception):
    """Base class for errors raised by the server."""


class ValidationError(CodexMcpError):
    """A tool was called with missing or malformed arguments."""

    def __init__(self, tool_name: str, message: str):
        super().__init__(f"Invalid arguments for tool '{tool_name}': {message}")
        self.tool_name = tool_name
        self.detail = message


class ToolExecutionError(CodexMcpError):
    def __init__(self, tool_name: str, message: str, cause: BaseException | None = None):
        text = f"{message}: {cause}" if cause is not None else message
        super().__init__(text)
        self.tool_name = tool_name
        self.cause = cause


class CommandExecutionError(CodexMcpError):
    def __init__(self, command: str, message: str, cause: object = None):
        super().__init__(f"Command failed: {command} ({message})")
        self.command = command
        self.reason = message
        self.cause = cause
