from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

Role = Literal["user", "assistant"]

ROLES: tuple[str, ...] = ("user", "assistant")


@dataclass(frozen=True)
class Turn:
    role: Role
    text: str
    at: datetime


@dataclass
class Session:
    session_id: str
    created_at: datetime
    last_used_at: datetime
    expires_at: datetime
    turns: list[Turn] = field(default_factory=list)
    byte_count: int = 0

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def to_meta(self) -> SessionMeta:
        return SessionMeta(
            session_id=self.session_id,
            turns=len(self.turns),
            bytes=self.byte_count,
            created_at=self.created_at,
            last_used_at=self.last_used_at,
            expires_at=self.expires_at,
        )


@dataclass(frozen=True)
class SessionMeta:
    session_id: str
    turns: int
    bytes: int
    created_at: datetime
    last_used_at: datetime
    expires_at: datetime


@dataclass
class PendingChunk:
    token: str
    remaining: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
