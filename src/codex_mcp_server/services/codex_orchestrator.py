from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from loguru import logger

from codex_mcp_server.command import CommandResult
from codex_mcp_server.errors import CommandExecutionError, ToolExecutionError, ValidationError
from codex_mcp_server.memory.cursor_store import CursorStore
from codex_mcp_server.memory.session_store import SessionStore
from codex_mcp_server.prompt_framing import RunFrame, render_transcript
from codex_mcp_server.run_id import make_run_id
from codex_mcp_server.tool import ToolResult

CODEX_TOOL_NAME = "codex"
NO_OUTPUT_PLACEHOLDER = "No output from Codex"
EXPIRED_TOKEN_MESSAGE = "No data found for pageToken (it may have expired)."
STDIN_PROMPT_ARG = "-"


class StreamingRunner(Protocol):
    async def run_streamed(
        self,
        executable: str,
        args: list[str] | None = None,
        on_chunk: Callable[[str], None] | None = None,
        input_text: str | None = None,
    ) -> CommandResult: ...


@dataclass(frozen=True)
class PagingConfig:
    default_page_size: int = 40_000
    min_page_size: int = 1_000
    max_page_size: int = 200_000

    def __post_init__(self) -> None:
        if not 0 < self.min_page_size <= self.max_page_size:
            raise ValueError("min_page_size must be positive and not exceed max_page_size")

    def clamp(self, page_size: int | None) -> int:
        size = self.default_page_size if page_size is None else page_size
        return max(self.min_page_size, min(size, self.max_page_size))


@dataclass(frozen=True)
class CodexInvocationOptions:
    """Pass-through flags for ``codex exec``."""

    model: str | None = None
    images: tuple[str, ...] = ()
    approval_policy: str | None = None
    sandbox: bool = False
    working_directory: str | None = None
    base_instructions: str | None = None

    def to_cli_args(self, default_model: str | None = None) -> list[str]:
        args: list[str] = []
        model = self.model or default_model
        if model:
            args.extend(["-m", model])
        if self.images:
            args.extend(["--image", ",".join(self.images)])
        if self.approval_policy:
            args.extend(["--approval-policy", self.approval_policy])
        if self.sandbox:
            args.append("--sandbox")
        if self.working_directory:
            args.extend(["--working-directory", self.working_directory])
        if self.base_instructions:
            args.extend(["--base-instructions", self.base_instructions])
        return args


@dataclass(frozen=True)
class CodexRequest:
    prompt: str | None = None
    page_token: str | None = None
    session_id: str | None = None
    reset_session: bool = False
    page_size: int | None = None
    options: CodexInvocationOptions = field(default_factory=CodexInvocationOptions)


class CodexOrchestrator:
    """Serves continuation pages or runs codex with session context, paging the answer."""

    def __init__(
        self,
        sessions: SessionStore,
        cursors: CursorStore,
        runner: StreamingRunner,
        *,
        executable: str = "codex",
        paging: PagingConfig | None = None,
        default_model: str | None = None,
        run_id_factory: Callable[[], str] = make_run_id,
    ):
        self._sessions = sessions
        self._cursors = cursors
        self._runner = runner
        self._executable = executable
        self._paging = paging or PagingConfig()
        self._default_model = default_model
        self._run_id_factory = run_id_factory

    async def handle(self, request: CodexRequest) -> ToolResult:
        page_len = self._paging.clamp(request.page_size)

        if request.session_id and request.reset_session:
            # No early return: a prompt in the same call runs against the empty session.
            self._sessions.clear_session(request.session_id)

        if request.page_token:
            return self._next_page(request.page_token, page_len)

        prompt = (request.prompt or "").strip()
        if not prompt:
            raise ValidationError(CODEX_TOOL_NAME, "Missing required 'prompt' (or provide a 'pageToken').")

        answer = await self._invoke(prompt, request)

        if request.session_id:
            # The full answer is kept so later stitched context is complete.
            self._sessions.append_turn(request.session_id, "user", prompt)
            self._sessions.append_turn(request.session_id, "assistant", answer)

        if len(answer) <= page_len:
            return ToolResult.text(answer)

        head, tail = answer[:page_len], answer[page_len:]
        token = self._cursors.save_chunk(tail)
        logger.debug(
            "Paged answer: {total} chars, page={page}, token={token}, pending={pending}",
            total=len(answer),
            page=page_len,
            token=token,
            pending=len(self._cursors),
        )
        return ToolResult.text(head, meta={"nextPageToken": token})

    def _next_page(self, token: str, page_len: int) -> ToolResult:
        remaining = self._cursors.peek_chunk(token)
        if not remaining:
            logger.debug("No pending data for token {token}", token=token)
            return ToolResult.text(EXPIRED_TOKEN_MESSAGE)

        head = remaining[:page_len]
        self._cursors.advance_chunk(token, len(head))
        # The token stays stable so a retried call can pick up where it left off.
        if len(remaining) > len(head):
            return ToolResult.text(head, meta={"nextPageToken": token})
        return ToolResult.text(head)

    async def _invoke(self, prompt: str, request: CodexRequest) -> str:
        transcript = self._sessions.get_transcript(request.session_id) if request.session_id else []
        frame = RunFrame(
            run_id=self._run_id_factory(),
            stitched_context=render_transcript(transcript),
            user_text=prompt,
        )

        # The prompt goes over stdin; a single argv entry is size-limited.
        cli_args = ["exec", *request.options.to_cli_args(self._default_model), STDIN_PROMPT_ARG]
        received = 0

        def on_chunk(text: str) -> None:
            nonlocal received
            received += len(text)
            logger.trace("codex run {rid}: {chars} chars received", rid=frame.run_id, chars=received)

        logger.debug(
            "codex run {rid}: session={sid}, history_turns={turns}",
            rid=frame.run_id,
            sid=request.session_id or "-",
            turns=len(transcript),
        )
        try:
            result = await self._runner.run_streamed(
                self._executable, cli_args, on_chunk, input_text=frame.render()
            )
        except CommandExecutionError as ex:
            raise ToolExecutionError(CODEX_TOOL_NAME, "Failed to execute codex command", ex) from ex

        return frame.extract(result.stdout or "") or NO_OUTPUT_PLACEHOLDER
