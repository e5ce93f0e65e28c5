"""Shared fixtures for snooker engine tests."""

from datetime import datetime, timedelta, timezone

import pytest

from app.schemas.snooker import Ball, Match, MatchFormat, MatchPlayer
from app.services.snooker.engine import MatchEventData, apply_event, create_new_match

# Fixed ids for deterministic testing
PLAYER_1_ID = "player1"
PLAYER_2_ID = "player2"
MATCH_ID = "test-match"
CREATED_AT = datetime(2026, 1, 10, 19, 30, tzinfo=timezone.utc)

# Red followed by black, fifteen times, then the colors in order
MAXIMUM_BREAK = [Ball.RED, Ball.BLACK] * 15 + [
    Ball.YELLOW,
    Ball.GREEN,
    Ball.BROWN,
    Ball.BLUE,
    Ball.PINK,
    Ball.BLACK,
]


class TickingClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime = CREATED_AT):
        self._now = start

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


def create_match(
    sets_enabled: bool = False,
    best_of_sets: int = 1,
    frames_per_set: int = 1,
) -> Match:
    """Helper to create a fresh scheduled match."""
    return create_new_match(
        MatchPlayer(player_id=PLAYER_1_ID, name="Player 1"),
        MatchPlayer(player_id=PLAYER_2_ID, name="Player 2"),
        MatchFormat(
            sets_enabled=sets_enabled,
            best_of_sets=best_of_sets,
            frames_per_set=frames_per_set,
        ),
        created_by="creator",
        match_id=MATCH_ID,
        venue="Crucible",
        clock=lambda: CREATED_AT,
    )


def apply_ok(match: Match, action: str, ball: Ball | None = None, note: str | None = None) -> Match:
    """Apply an event that must succeed and return the new match."""
    result = apply_event(match, MatchEventData(action=action, ball=ball, note=note))
    assert result.valid, result.error
    return result.match


def pot_sequence(match: Match, balls: list[Ball]) -> Match:
    for ball in balls:
        match = apply_ok(match, "pot", ball)
    return match


def with_frame_points(match: Match, p1_points: int, p2_points: int) -> Match:
    """Copy of the match with the current frame's points overwritten."""
    frames = [f.model_copy() for f in match.score.frames]
    frames[-1] = frames[-1].model_copy(update={"p1_points": p1_points, "p2_points": p2_points})
    score = match.score.model_copy(update={"frames": frames})
    return match.model_copy(update={"score": score})


def win_frame(match: Match, winner_id: str) -> Match:
    """Finish the current frame in favour of winner_id via a concession."""
    if match.current.active_player_id == winner_id:
        match = apply_ok(match, "endTurn")
    return apply_ok(match, "concede")


@pytest.fixture
def new_match() -> Match:
    """Single-frame match, player 1 at the table."""
    return create_match()


@pytest.fixture
def best_of_three_frames() -> Match:
    """Frames-only match over three frames."""
    return create_match(best_of_sets=3)


@pytest.fixture
def best_of_three_sets() -> Match:
    """Best of three sets, each best of three frames."""
    return create_match(sets_enabled=True, best_of_sets=3, frames_per_set=3)


@pytest.fixture
def colors_phase_match(new_match: Match) -> Match:
    """All reds gone, yellow on."""
    state = new_match.current.model_copy(
        update={
            "reds_remaining": 0,
            "colors_phase": True,
            "colors_order_index": 0,
            "points_on_table": 27,
        }
    )
    return new_match.model_copy(update={"current": state})


@pytest.fixture
def free_ball_match(new_match: Match) -> Match:
    """Player 1 at the table with a free ball."""
    state = new_match.current.model_copy(update={"freeball_active": True})
    return new_match.model_copy(update={"current": state})
