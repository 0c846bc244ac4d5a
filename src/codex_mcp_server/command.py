from __future__ import annotations

import asyncio
import codecs
import platform
import subprocess
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from codex_mcp_server.errors import CommandExecutionError

_IS_WINDOWS = platform.system() == "Windows"

DEFAULT_TIMEOUT_SECONDS = 180.0
_READ_SIZE = 64 * 1024
_KILL_GRACE_SECONDS = 5.0


@dataclass(frozen=True)
class CommandResult:
    stdout: str
    stderr: str


def resolve_executable(file: str) -> str:
    if _IS_WINDOWS and file == "codex":
        return "codex.cmd"
    return file


def _describe(executable: str, args: list[str], max_arg_chars: int = 80) -> str:
    # Framed prompts can be huge; keep error messages readable.
    shown = [a if len(a) <= max_arg_chars else a[: max_arg_chars - 3] + "..." for a in args]
    return " ".join([executable, *shown])


class CommandRunner:
    """Runs external commands without a shell, bounded by a timeout."""

    def __init__(self, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self._timeout = timeout_seconds

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    async def run(self, executable: str, args: list[str] | None = None) -> CommandResult:
        args = list(args or [])
        exe = resolve_executable(executable)
        logger.debug("Executing: {cmd}", cmd=_describe(exe, args))
        proc = await self._spawn(exe, args)

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError as ex:
            await self._kill(proc)
            logger.warning("Command timed out after {t}s: {cmd}", t=self._timeout, cmd=exe)
            raise CommandExecutionError(
                _describe(exe, args), f"timed out after {self._timeout:g}s"
            ) from ex

        result = CommandResult(
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
        return self._check(exe, args, proc.returncode, result)

    async def run_streamed(
        self,
        executable: str,
        args: list[str] | None = None,
        on_chunk: Callable[[str], None] | None = None,
        input_text: str | None = None,
    ) -> CommandResult:
        """Like :meth:`run`, but decodes stdout as it arrives and reports each fragment.

        ``input_text`` is written to the child's stdin, which is then closed.
        Use it for payloads too large for a single command-line argument.
        """
        args = list(args or [])
        exe = resolve_executable(executable)
        logger.debug(
            "Executing (streamed): {cmd} (stdin={chars} chars)",
            cmd=_describe(exe, args),
            chars=len(input_text) if input_text is not None else 0,
        )
        proc = await self._spawn(exe, args, feed_stdin=input_text is not None)

        try:
            stdout, stderr = await asyncio.wait_for(
                self._collect(proc, on_chunk, input_text), timeout=self._timeout
            )
        except asyncio.TimeoutError as ex:
            await self._kill(proc)
            logger.warning("Command timed out after {t}s: {cmd}", t=self._timeout, cmd=exe)
            raise CommandExecutionError(
                _describe(exe, args), f"timed out after {self._timeout:g}s"
            ) from ex

        return self._check(exe, args, proc.returncode, CommandResult(stdout=stdout, stderr=stderr))

    async def _spawn(self, exe: str, args: list[str], *, feed_stdin: bool = False) -> asyncio.subprocess.Process:
        try:
            return await asyncio.create_subprocess_exec(
                exe,
                *args,
                stdin=asyncio.subprocess.PIPE if feed_stdin else subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as ex:
            logger.warning("Spawn failed for {cmd}: {err}", cmd=exe, err=ex)
            raise CommandExecutionError(_describe(exe, args), "Spawn failed", ex) from ex

    async def _collect(
        self,
        proc: asyncio.subprocess.Process,
        on_chunk: Callable[[str], None] | None,
        input_text: str | None = None,
    ) -> tuple[str, str]:
        stderr_task = asyncio.create_task(proc.stderr.read())
        stdin_task = asyncio.create_task(self._feed(proc, input_text)) if input_text is not None else None
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        parts: list[str] = []

        def emit(text: str) -> None:
            if not text:
                return
            parts.append(text)
            if on_chunk is None:
                return
            try:
                on_chunk(text)
            except Exception as ex:
                logger.warning("on_chunk callback failed: {err}", err=ex)

        try:
            while True:
                data = await proc.stdout.read(_READ_SIZE)
                if not data:
                    break
                emit(decoder.decode(data))
            emit(decoder.decode(b"", final=True))
            if stdin_task is not None:
                await stdin_task
            stderr = await stderr_task
            await proc.wait()
        finally:
            for task in (stderr_task, stdin_task):
                if task is not None and not task.done():
                    task.cancel()
        return "".join(parts), stderr.decode("utf-8", errors="replace")

    async def _feed(self, proc: asyncio.subprocess.Process, input_text: str) -> None:
        try:
            proc.stdin.write(input_text.encode("utf-8"))
            await proc.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as ex:
            # The exit status decides whether the run failed.
            logger.debug("Child closed stdin early: {err}", err=ex)
        finally:
            proc.stdin.close()

    async def _kill(self, proc: asyncio.subprocess.Process) -> None:
        try:
            proc.kill()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(proc.wait(), timeout=_KILL_GRACE_SECONDS)
        except asyncio.TimeoutError:
            logger.warning("Process {pid} did not exit after kill", pid=proc.pid)

    def _check(self, exe: str, args: list[str], returncode: int | None, result: CommandResult) -> CommandResult:
        if result.stderr:
            logger.debug("Command stderr: {stderr}", stderr=result.stderr[:2000])
        if returncode != 0:
            logger.warning("Command exited with code {code}: {cmd}", code=returncode, cmd=exe)
            raise CommandExecutionError(
                _describe(exe, args),
                f"Exited with code {returncode}",
                result.stderr or returncode,
            )
        logger.debug("Command finished: {cmd} (stdout={chars} chars)", cmd=exe, chars=len(result.stdout))
        return result
