"""Match service - load, score and store matches.

Sits between callers (HTTP routes) and the engine. It owns the parts the
engine leaves out: role checks, the per-match write lock and persistence.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from app.config import get_settings
from app.schemas.auth import AuthUser
from app.schemas.snooker import Match, MatchFormat, MatchPlayer, MatchStatus
from app.services.snooker.engine import (
    MatchEventData,
    ReplayError,
    apply_event,
    create_new_match,
    undo_last_event,
)

from .repository import InMemoryMatchRepository, MatchRepository

logger = logging.getLogger(__name__)


@dataclass
class MatchServiceResult:
    """Result of a match service operation."""

    success: bool
    match: Match | None = None
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls, match: Match) -> "MatchServiceResult":
        return cls(success=True, match=match)

    @classmethod
    def failure(cls, code: str, message: str, match: Match | None = None) -> "MatchServiceResult":
        return cls(success=False, match=match, error_code=code, error_message=message)


class MatchService:
    """Service for creating and scoring snooker matches.

    Every write is a read-modify-write under the repository's per-match lock.
    """

    def __init__(
        self,
        repository: MatchRepository,
        scoring_roles: list[str] | None = None,
        strict_replay: bool | None = None,
    ):
        settings = get_settings()
        self._repository = repository
        self._scoring_roles = scoring_roles or settings.SCORING_ROLES
        self._strict_replay = settings.STRICT_REPLAY if strict_replay is None else strict_replay

    def _can_score(self, user: AuthUser) -> bool:
        return user.has_any_role(self._scoring_roles)

    def _forbidden(self, user: AuthUser, operation: str) -> MatchServiceResult:
        logger.warning("%s denied for user %s (roles=%s)", operation, user.id, user.roles)
        return MatchServiceResult.failure(
            "FORBIDDEN",
            f"User must have one of the roles: {', '.join(self._scoring_roles)}",
        )

    @staticmethod
    def _not_found(match_id: str) -> MatchServiceResult:
        logger.warning("Match not found: %s", match_id)
        return MatchServiceResult.failure("MATCH_NOT_FOUND", "Match not found")

    async def create_match(
        self,
        user: AuthUser,
        player1: MatchPlayer,
        player2: MatchPlayer,
        match_format: MatchFormat,
        venue: str | None = None,
        referee: str | None = None,
    ) -> MatchServiceResult:
        """Create a scheduled match.

        Returns INVALID_MATCH when players or format are rejected.
        """
        if not self._can_score(user):
            return self._forbidden(user, "create_match")

        try:
            match = create_new_match(
                player1,
                player2,
                match_format,
                created_by=user.id,
                venue=venue,
                referee=referee,
            )
        except ValueError as e:
            logger.warning("Match creation rejected for user %s: %s", user.id, e)
            return MatchServiceResult.failure("INVALID_MATCH", str(e))

        await self._repository.save(match)
        logger.info(
            "Match %s created by %s: %s vs %s",
            match.id,
            user.id,
            player1.name,
            player2.name,
        )
        return MatchServiceResult.ok(match)

    async def get_match(self, match_id: str) -> MatchServiceResult:
        match = await self._repository.get(match_id)
        if match is None:
            return self._not_found(match_id)
        return MatchServiceResult.ok(match)

    async def list_live_matches(self) -> list[Match]:
        return await self._repository.list_by_status(MatchStatus.LIVE)

    async def list_matches_by_status(self, status: MatchStatus) -> list[Match]:
        return await self._repository.list_by_status(status)

    async def list_recent_matches(self, limit: int | None = None) -> list[Match]:
        return await self._repository.list_recent(limit or get_settings().RECENT_MATCHES_LIMIT)

    async def start_match(self, match_id: str, user: AuthUser) -> MatchServiceResult:
        """Move a scheduled match to live."""
        if not self._can_score(user):
            return self._forbidden(user, "start_match")

        async with self._repository.lock(match_id):
            match = await self._repository.get(match_id)
            if match is None:
                return self._not_found(match_id)

            if match.status != MatchStatus.SCHEDULED:
                logger.warning("Cannot start match %s in status %s", match_id, match.status.value)
                return MatchServiceResult.failure(
                    "INVALID_STATE",
                    f"Match is {match.status.value}, only scheduled matches can be started",
                    match,
                )

            match = self._stamp(match, user, status=MatchStatus.LIVE)
            await self._repository.save(match)

        logger.info("Match %s started by %s", match_id, user.id)
        return MatchServiceResult.ok(match)

    async def apply_match_event(
        self,
        match_id: str,
        event_data: MatchEventData,
        user: AuthUser,
    ) -> MatchServiceResult:
        """Run one scoring event through the engine and store the result.

        Engine rejections come back with the engine's error code and message
        and nothing is saved.
        """
        if not self._can_score(user):
            return self._forbidden(user, "apply_match_event")

        async with self._repository.lock(match_id):
            match = await self._repository.get(match_id)
            if match is None:
                return self._not_found(match_id)

            result = apply_event(match, event_data)
            if not result.valid:
                logger.info(
                    "Event rejected for match %s by %s: %s - %s",
                    match_id,
                    user.id,
                    result.error_code,
                    result.error,
                )
                return MatchServiceResult.failure(
                    result.error_code or "INVALID_EVENT",
                    result.error or "Invalid event",
                    match,
                )

            updated = result.match.model_copy(update={"updated_by": user.id})
            await self._repository.save(updated)

        logger.info(
            "Event %s applied to match %s by %s (history=%d)",
            event_data.action,
            match_id,
            user.id,
            len(updated.history),
        )
        return MatchServiceResult.ok(updated)

    async def undo_last_event(self, match_id: str, user: AuthUser) -> MatchServiceResult:
        """Drop the last history entry and rebuild the match from the rest."""
        if not self._can_score(user):
            return self._forbidden(user, "undo_last_event")

        async with self._repository.lock(match_id):
            match = await self._repository.get(match_id)
            if match is None:
                return self._not_found(match_id)

            if not match.history:
                return MatchServiceResult.failure("NO_EVENTS", "No events to undo", match)

            try:
                rebuilt = undo_last_event(match, strict=self._strict_replay)
            except ReplayError as e:
                logger.error("Strict replay failed for match %s: %s", match_id, e)
                return MatchServiceResult.failure("REPLAY_FAILED", str(e), match)

            rebuilt = self._stamp(rebuilt, user)
            await self._repository.save(rebuilt)

        logger.info(
            "Undo applied to match %s by %s (history=%d)",
            match_id,
            user.id,
            len(rebuilt.history),
        )
        return MatchServiceResult.ok(rebuilt)

    async def abandon_match(self, match_id: str, user: AuthUser) -> MatchServiceResult:
        """Mark a match abandoned. The engine itself never produces this status."""
        if not self._can_score(user):
            return self._forbidden(user, "abandon_match")

        async with self._repository.lock(match_id):
            match = await self._repository.get(match_id)
            if match is None:
                return self._not_found(match_id)

            if match.status == MatchStatus.COMPLETED:
                return MatchServiceResult.failure(
                    "INVALID_STATE", "Completed matches cannot be abandoned", match
                )

            match = self._stamp(match, user, status=MatchStatus.ABANDONED)
            await self._repository.save(match)

        logger.info("Match %s abandoned by %s", match_id, user.id)
        return MatchServiceResult.ok(match)

    @staticmethod
    def _stamp(match: Match, user: AuthUser, status: MatchStatus | None = None) -> Match:
        update: dict = {
            "updated_at": datetime.now(timezone.utc),
            "updated_by": user.id,
        }
        if status is not None:
            update["status"] = status
        return match.model_copy(update=update)


_match_service: MatchService | None = None


def get_match_service() -> MatchService:
    """Get the singleton match service backed by the in-memory repository."""
    global _match_service
    if _match_service is None:
        logger.info("Initializing match service")
        _match_service = MatchService(InMemoryMatchRepository())
    return _match_service
