from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from app.promohub.db.models import CarouselAuditEntry


@dataclass
class AuditContext:
    user_id: str
    ip_address: str | None = None
    user_agent: str | None = None


class CarouselAuditLog:
    """Bounded history of carousel replacements, newest entry first."""

    def __init__(self, max_entries: int = 200):
        self._entries: deque[CarouselAuditEntry] = deque(maxlen=max(1, max_entries))

    def record(
        self,
        *,
        action: str,
        context: AuditContext,
        previous_state: list[str],
        new_state: list[str],
        metadata: dict | None = None,
    ) -> CarouselAuditEntry:
        entry = CarouselAuditEntry(
            action=action,
            user_id=context.user_id,
            previous_state=list(previous_state),
            new_state=list(new_state),
            ip_address=context.ip_address,
            user_agent=context.user_agent,
            metadata=dict(metadata or {}),
        )
        self._entries.appendleft(entry)
        return entry

    def list(self, *, limit: int = 50, offset: int = 0) -> list[CarouselAuditEntry]:
        entries = list(self._entries)
        return entries[offset : offset + limit]

    def get(self, version_id: str) -> CarouselAuditEntry | None:
        for entry in self._entries:
            if entry.id == version_id:
                return entry
        return None

    def clear(self) -> None:
        self._entries.clear()
