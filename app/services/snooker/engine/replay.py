"""Rebuild a match from its event history.

Undo is "drop the last history entry and replay the rest" - history is
never edited in place.
"""

import logging

logger = logging.getLogger(__name__)

from app.schemas.snooker import Match, MatchEvent, MatchStatus

from .actions import MatchEventData
from .process import apply_event
from .setup import create_new_match


class ReplayError(Exception):
    """A historical event no longer applies cleanly (strict replay only)."""

    def __init__(self, index: int, event: MatchEvent, reason: str):
        self.index = index
        self.event = event
        self.reason = reason
        super().__init__(f"Replay failed at event {index} ({event.action.value}): {reason}")


def reconstruct_match_state(
    original: Match,
    events_to_replay: list[MatchEvent],
    *,
    strict: bool = False,
) -> Match:
    """Replay events on a fresh copy of a match.

    The fresh match reuses the original's static fields (id, format, players,
    venue, referee, audit fields). Each event is replayed with its original id
    and timestamp, so a clean replay reproduces the history exactly.

    Args:
        original: Match whose static fields seed the rebuild.
        events_to_replay: Events to apply, in order.
        strict: Raise ReplayError on the first event that fails instead of
            logging and skipping it.

    Returns:
        The rebuilt match.
    """
    rebuilt = create_new_match(
        original.players[0],
        original.players[1],
        original.format,
        original.created_by,
        match_id=original.id,
        venue=original.venue,
        referee=original.referee,
        clock=lambda: original.created_at,
    )

    skipped = 0
    for index, event in enumerate(events_to_replay):
        event_data = MatchEventData(action=event.action.value, ball=event.ball, note=event.note)
        result = apply_event(
            rebuilt,
            event_data,
            clock=lambda event=event: event.timestamp,
            id_factory=lambda event=event: event.id,
        )
        if not result.valid:
            if strict:
                raise ReplayError(index, event, result.error or "invalid event")
            skipped += 1
            logger.warning(
                "Skipping event during replay: match=%s, index=%d, action=%s, error=%s",
                original.id,
                index,
                event.action.value,
                result.error,
            )
            continue
        rebuilt = result.match

    status = rebuilt.status
    if original.status == MatchStatus.ABANDONED:
        status = MatchStatus.ABANDONED
    elif status == MatchStatus.SCHEDULED and original.status != MatchStatus.SCHEDULED:
        # started explicitly before any event was scored
        status = MatchStatus.LIVE

    logger.info(
        "Match reconstructed: match=%s, replayed=%d, skipped=%d",
        original.id,
        len(events_to_replay) - skipped,
        skipped,
    )
    return rebuilt.model_copy(
        update={
            "status": status,
            "updated_at": original.updated_at,
            "updated_by": original.updated_by,
        }
    )


def undo_last_event(match: Match, *, strict: bool = False) -> Match:
    """Reverse the last applied event by replaying everything before it.

    Raises:
        ValueError: If the match has no history.
        ReplayError: In strict mode, if an earlier event fails to replay.
    """
    if not match.history:
        raise ValueError("No events to undo")

    logger.info(
        "Undoing last event: match=%s, action=%s",
        match.id,
        match.history[-1].action.value,
    )
    return reconstruct_match_state(match, match.history[:-1], strict=strict)
