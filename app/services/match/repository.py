"""Match storage boundary.

The engine never touches storage. Callers load a match, run the engine and
save the result while holding the per-match lock, so writes to one match
are serialized.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol

from app.schemas.snooker import Match, MatchStatus

logger = logging.getLogger(__name__)


class MatchRepository(Protocol):
    """Document store for Match aggregates."""

    async def get(self, match_id: str) -> Match | None: ...

    async def save(self, match: Match) -> None: ...

    async def list_by_status(self, status: MatchStatus) -> list[Match]: ...

    async def list_recent(self, limit: int) -> list[Match]: ...

    def lock(self, match_id: str) -> AbstractAsyncContextManager[None]: ...


class InMemoryMatchRepository:
    """Process-local repository keeping matches as serialized documents.

    Every save goes through Match.to_document() and every load through
    Match.model_validate(), the same round trip a real document store forces.
    """

    def __init__(self) -> None:
        self._documents: dict[str, dict] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def get(self, match_id: str) -> Match | None:
        document = self._documents.get(match_id)
        if document is None:
            logger.debug("Match not found: %s", match_id)
            return None
        return Match.model_validate(document)

    async def save(self, match: Match) -> None:
        self._documents[match.id] = match.to_document()
        logger.debug(
            "Match saved: id=%s, status=%s, history=%d",
            match.id,
            match.status.value,
            len(match.history),
        )

    async def list_by_status(self, status: MatchStatus) -> list[Match]:
        matches = [
            Match.model_validate(doc)
            for doc in self._documents.values()
            if doc.get("status") == status.value
        ]
        return sorted(matches, key=lambda m: m.updated_at, reverse=True)

    async def list_recent(self, limit: int) -> list[Match]:
        matches = [Match.model_validate(doc) for doc in self._documents.values()]
        matches.sort(key=lambda m: m.updated_at, reverse=True)
        return matches[:limit]

    @asynccontextmanager
    async def lock(self, match_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(match_id, asyncio.Lock())
        async with lock:
            yield

