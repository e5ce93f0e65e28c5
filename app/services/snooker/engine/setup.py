from collections.abc import Callable
from datetime import datetime, timezone
from uuid import uuid4

from app.schemas.snooker import (
    FrameScore,
    Match,
    MatchFormat,
    MatchPlayer,
    MatchScore,
    MatchState,
    MatchStatus,
    MatchTotals,
)

from .rules import INITIAL_REDS, initial_points_on_table


def validate_match_setup(
    player1: MatchPlayer,
    player2: MatchPlayer,
    match_format: MatchFormat,
) -> None:
    """Validate players and format before creating a match."""
    if not player1.player_id or not player2.player_id:
        raise ValueError("Both players need an id.")
    if player1.player_id == player2.player_id:
        raise ValueError(f"A player cannot play against themselves: {player1.player_id}")
    if not player1.name.strip() or not player2.name.strip():
        raise ValueError("Both players need a name.")
    if match_format.best_of_sets < 1:
        raise ValueError("best_of_sets must be at least 1.")
    if match_format.frames_per_set < 1:
        raise ValueError("frames_per_set must be at least 1.")


def create_initial_state(first_player_id: str) -> MatchState:
    """Cursor for the first frame of a match, with player 1 at the table."""
    return MatchState(
        active_player_id=first_player_id,
        set_number=1,
        frame_number=1,
        break_points=0,
        reds_remaining=INITIAL_REDS,
        colors_phase=False,
        colors_order_index=0,
        points_on_table=initial_points_on_table(),
        freeball_active=False,
        snookers_required=False,
        last_ball_potted_in_break=None,
    )


def create_new_match(
    player1: MatchPlayer,
    player2: MatchPlayer,
    match_format: MatchFormat,
    created_by: str,
    *,
    match_id: str | None = None,
    venue: str | None = None,
    referee: str | None = None,
    clock: Callable[[], datetime] | None = None,
) -> Match:
    """Create a scheduled match with one empty frame.

    Raises:
        ValueError: If players or format are invalid.
    """
    validate_match_setup(player1, player2, match_format)
    now = clock() if clock else datetime.now(timezone.utc)

    return Match(
        id=match_id or str(uuid4()),
        status=MatchStatus.SCHEDULED,
        format=match_format,
        players=[player1, player2],
        current=create_initial_state(player1.player_id),
        score=MatchScore(
            frames=[FrameScore(set_no=1, frame_no=1)],
            sets=[],
            match=MatchTotals(),
        ),
        history=[],
        venue=venue,
        referee=referee,
        created_at=now,
        updated_at=now,
        created_by=created_by,
        updated_by=created_by,
    )
