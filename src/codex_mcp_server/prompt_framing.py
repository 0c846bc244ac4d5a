"""Sentinel framing for prompts sent to the codex CLI.

Each invocation wraps its inputs in markers tagged with a unique run id::

    <<CTX:{run_id}:START>>
    User: ...
    Assistant: ...
    <<CTX:{run_id}:END>>
    <<USR:{run_id}:START>>
    the new request
    <<USR:{run_id}:END>>
    Reply to the request above. Write only your reply after the next line.
    <<ANS:{run_id}:START>>

The CLI frequently echoes some or all of its input before answering. Since the
answer marker is the last line of the payload, whatever follows its last
occurrence in the output is the new answer, whether the assistant repeated the
marker itself or echoed the whole prompt.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from codex_mcp_server.memory.models import Turn

Tag = Literal["CTX", "USR", "ANS"]
Edge = Literal["START", "END"]

REPLY_INSTRUCTION = "Reply to the request above. Write only your reply after the next line."


def sentinel(tag: Tag, run_id: str, edge: Edge) -> str:
    return f"<<{tag}:{run_id}:{edge}>>"


def neutralize_sentinels(text: str, run_id: str) -> str:
    """Break any copy of this run's sentinels embedded in caller-supplied text."""
    pattern = re.compile(r"<<((?:CTX|USR|ANS):" + re.escape(run_id) + r":(?:START|END)>>)")
    return pattern.sub(r"< <\1", text)


def frame_prompt(run_id: str, stitched_context: str | None, user_text: str) -> str:
    parts: list[str] = []
    if stitched_context is not None:
        parts.extend(
            [
                sentinel("CTX", run_id, "START"),
                neutralize_sentinels(stitched_context, run_id),
                sentinel("CTX", run_id, "END"),
            ]
        )
    parts.extend(
        [
            sentinel("USR", run_id, "START"),
            neutralize_sentinels(user_text, run_id),
            sentinel("USR", run_id, "END"),
            REPLY_INSTRUCTION,
            sentinel("ANS", run_id, "START"),
        ]
    )
    return "\n".join(parts)


def extract_answer(run_id: str, stitched_context: str | None, raw_output: str) -> str:
    """Return only the newly generated answer from raw CLI output.

    Never raises. Output without any sentinel of this run is returned trimmed.
    ``stitched_context`` is taken so callers can pass the frame inputs as-is;
    only the markers decide what counts as echo.
    """
    text = raw_output or ""

    answer_marker = sentinel("ANS", run_id, "START")
    idx = text.rfind(answer_marker)
    if idx != -1:
        return text[idx + len(answer_marker):].strip()

    # Echoed input without the answer marker: drop everything up to the end of
    # the echoed request, plus the echoed instruction line if present.
    user_end = sentinel("USR", run_id, "END")
    idx = text.rfind(user_end)
    if idx != -1:
        tail = text[idx + len(user_end):].strip()
        if tail.startswith(REPLY_INSTRUCTION):
            tail = tail[len(REPLY_INSTRUCTION):]
        return tail.strip()

    return text.strip()


def render_transcript(turns: Sequence[Turn]) -> str | None:
    if not turns:
        return None
    return "\n".join(f"{'User' if t.role == 'user' else 'Assistant'}: {t.text}" for t in turns)


@dataclass(frozen=True)
class RunFrame:
    run_id: str
    stitched_context: str | None
    user_text: str

    def render(self) -> str:
        return frame_prompt(self.run_id, self.stitched_context, self.user_text)

    def extract(self, raw_output: str) -> str:
        return extract_answer(self.run_id, self.stitched_context, raw_output)
