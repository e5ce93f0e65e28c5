"""Main entry point for scoring event processing.

This module provides the primary interface for scoring a match:
- apply_event(): validates and applies any scoring event
- Dispatches to one handler per action on a working copy of the match
- Returns ApplyResult with the new match, or the untouched match on failure
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from uuid import uuid4

logger = logging.getLogger(__name__)

from pydantic import ValidationError

from app.schemas.snooker import ActionType, Ball, Match, MatchEvent, MatchStatus

from .actions import MatchEventData, build_event_data
from .progression import (
    add_points_to_player,
    apply_match_winner,
    finalize_frame,
    get_current_frame,
    get_opponent_id,
    is_frame_over,
    player_frame_points,
    reset_frame_state,
)
from .rules import (
    FREE_BALL_POINTS,
    ball_value,
    foul_value,
    is_color,
    is_red,
    is_snooker_required,
    points_on_table,
)
from .validation import ApplyResult, validate_event

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_event_id() -> str:
    return str(uuid4())


def apply_event(
    match: Match,
    event_data: MatchEventData | dict,
    *,
    clock: Clock | None = None,
    id_factory: IdFactory | None = None,
) -> ApplyResult:
    """Apply one scoring event to a match and return the result.

    This is the single mutation entry point of the engine. It:
    1. Validates the event against the current state
    2. Applies the action to a working copy of the match
    3. Appends a history entry with a snapshot of the resulting state
    4. Returns ApplyResult with the new match

    The input match is never modified. On failure the result carries the
    input match unchanged.

    Args:
        match: Current match.
        event_data: The event, as MatchEventData or a raw payload dict.
        clock: Timestamp source for the history entry (defaults to UTC now).
        id_factory: Id source for the history entry (defaults to uuid4).

    Returns:
        ApplyResult containing:
        - match: The new match (or the original one on failure)
        - valid: Whether the event was applied
        - error/error_code: Failure details

    Example:
        >>> result = apply_event(match, {"action": "pot", "ball": "R"})
        >>> if result.valid:
        ...     save(result.match)
        ... else:
        ...     show_to_scorer(result.error)
    """
    if isinstance(event_data, dict):
        try:
            event_data = build_event_data(event_data)
        except ValidationError as e:
            logger.warning("Rejected malformed event payload: match=%s, errors=%d", match.id, e.error_count())
            return ApplyResult.failure(match, "INVALID_INPUT", f"Invalid event data: {e.errors()[0]['msg']}")

    logger.info(
        "Processing event: match=%s, action=%s, ball=%s, player=%s",
        match.id,
        event_data.action,
        event_data.ball.value if event_data.ball else None,
        match.current.active_player_id,
    )

    validation = validate_event(match, event_data)
    if not validation.is_valid:
        logger.warning(
            "Event rejected: match=%s, code=%s, message=%s",
            match.id,
            validation.error_code,
            validation.error_message,
        )
        return ApplyResult.failure(
            match,
            validation.error_code or "VALIDATION_ERROR",
            validation.error_message or "Invalid event",
        )

    working = _working_copy(match)
    acting_player_id = working.current.active_player_id
    action = event_data.action_type

    if working.status == MatchStatus.SCHEDULED:
        working.status = MatchStatus.LIVE
        logger.info("Match is now live: match=%s", match.id)

    if action == ActionType.POT:
        _process_pot(working, event_data.ball)

    elif action == ActionType.FOUL:
        _process_foul(working, event_data.ball, event_data.note)

    elif action == ActionType.FREE_BALL_POT:
        _process_free_ball_pot(working)

    elif action in (ActionType.END_TURN, ActionType.MISS):
        _process_end_turn(working)

    elif action == ActionType.CONCEDE:
        _process_concede(working)

    elif action == ActionType.END_FRAME:
        finalize_frame(working)

    elif action == ActionType.END_MATCH:
        _process_end_match(working)

    elif action == ActionType.RE_RACK:
        _process_re_rack(working)

    else:
        logger.error("No handler for action: %s", event_data.action)
        return ApplyResult.failure(match, "UNKNOWN_ACTION", f"Unknown action: {event_data.action}")

    _refresh_snookers_required(working)

    now = (clock or utc_now)()
    event = MatchEvent(
        id=(id_factory or new_event_id)(),
        timestamp=now,
        player_id=acting_player_id,
        action=action,
        ball=event_data.ball,
        points_delta=calculate_points_delta(action, event_data.ball),
        note=event_data.note,
        state_snapshot=working.current.model_copy(),
    )
    working.history.append(event)
    working.updated_at = now

    logger.info(
        "Event applied: match=%s, action=%s, points_delta=%d, history=%d",
        match.id,
        action.value,
        event.points_delta,
        len(working.history),
    )
    logger.debug("State after event: %s", working.current)
    return ApplyResult.ok(working)


def calculate_points_delta(action: ActionType, ball: Ball | None) -> int:
    """Points awarded by a single event, whoever receives them."""
    if action == ActionType.POT:
        return ball_value(ball) if ball is not None else 0
    if action == ActionType.FOUL:
        return foul_value(ball)
    if action == ActionType.FREE_BALL_POT:
        return FREE_BALL_POINTS
    return 0


def _working_copy(match: Match) -> Match:
    """Copy of the parts an event can change.

    Past history entries are shared, they are never modified.
    """
    return match.model_copy(
        update={
            "current": match.current.model_copy(),
            "score": match.score.model_copy(deep=True),
            "history": list(match.history),
        }
    )


def _record_break(match: Match) -> None:
    frame = get_current_frame(match)
    if frame is None:
        return
    if frame.highest_break is None or match.current.break_points > frame.highest_break:
        frame.highest_break = match.current.break_points


def _process_pot(match: Match, ball: Ball) -> None:
    """Score a legally potted ball and move the ball on along."""
    state = match.current

    # pointsOnTable is corrected from its value before the shot
    prev_points = state.points_on_table
    was_colors_phase = state.colors_phase
    prev_last = state.last_ball_potted_in_break

    points = ball_value(ball)
    add_points_to_player(match, state.active_player_id, points)
    state.break_points += points
    _record_break(match)
    state.freeball_active = False

    if is_red(ball):
        # on a color now
        state.reds_remaining -= 1
        state.last_ball_potted_in_break = Ball.RED
        if state.reds_remaining == 0:
            state.colors_phase = True
            state.colors_order_index = 0
            logger.info("Last red potted, colors phase: match=%s", match.id)
    elif state.colors_phase and prev_last != Ball.RED:
        state.colors_order_index += 1
        state.last_ball_potted_in_break = None
    else:
        # color respotted, next ball on is a red (or yellow after the final red)
        state.last_ball_potted_in_break = None

    computed = points_on_table(
        state.reds_remaining,
        state.colors_phase,
        state.colors_order_index,
        state.last_ball_potted_in_break,
    )
    if is_red(ball) and not was_colors_phase:
        state.points_on_table = max(0, prev_points - points)
    elif is_color(ball) and prev_last == Ball.RED:
        state.points_on_table = max(0, prev_points - points)
    else:
        state.points_on_table = computed

    logger.debug(
        "Pot processed: ball=%s, break=%d, reds=%d, colors_phase=%s, colors_index=%d, on_table=%d",
        ball.value,
        state.break_points,
        state.reds_remaining,
        state.colors_phase,
        state.colors_order_index,
        state.points_on_table,
    )

    if is_frame_over(state):
        finalize_frame(match)


def _process_foul(match: Match, ball: Ball | None, note: str | None) -> None:
    """Award the foul to the opponent and hand them the table."""
    state = match.current
    foul_points = foul_value(ball)
    opponent_id = get_opponent_id(match, state.active_player_id)
    add_points_to_player(match, opponent_id, foul_points)

    state.break_points = 0
    state.last_ball_potted_in_break = None
    state.active_player_id = opponent_id

    if note and "snooker" in note.lower():
        state.freeball_active = True
        logger.info("Free ball awarded: match=%s, player=%s", match.id, opponent_id)

    logger.debug("Foul processed: points=%d, awarded_to=%s", foul_points, opponent_id)

    # A foul on the respotted black ends the frame
    frame = get_current_frame(match)
    if frame is not None and frame.decided_on_black and frame.winner_player_id is None:
        finalize_frame(match)


def _process_free_ball_pot(match: Match) -> None:
    """A nominated free ball scores 1 whichever ball it was."""
    state = match.current
    add_points_to_player(match, state.active_player_id, FREE_BALL_POINTS)
    state.break_points += FREE_BALL_POINTS
    _record_break(match)
    state.freeball_active = False
    state.last_ball_potted_in_break = None
    state.points_on_table = points_on_table(
        state.reds_remaining,
        state.colors_phase,
        state.colors_order_index,
        state.last_ball_potted_in_break,
    )


def _process_end_turn(match: Match) -> None:
    state = match.current
    state.break_points = 0
    state.last_ball_potted_in_break = None
    state.active_player_id = get_opponent_id(match, state.active_player_id)


def _process_concede(match: Match) -> None:
    winner_id = get_opponent_id(match, match.current.active_player_id)
    logger.info("Frame conceded: match=%s, winner=%s", match.id, winner_id)
    finalize_frame(match, winner_id)


def _process_end_match(match: Match) -> None:
    # Make sure a winner is on record before the match is closed
    apply_match_winner(match)
    match.status = MatchStatus.COMPLETED
    logger.info(
        "Match ended: match=%s, winner=%s",
        match.id,
        match.score.match.winner_player_id,
    )


def _process_re_rack(match: Match) -> None:
    reset_frame_state(match.current)
    frame = get_current_frame(match)
    if frame is not None:
        frame.p1_points = 0
        frame.p2_points = 0
        frame.winner_player_id = None
        frame.highest_break = None
        frame.decided_on_black = False
    logger.info(
        "Frame re-racked: match=%s, set=%d, frame=%d",
        match.id,
        match.current.set_number,
        match.current.frame_number,
    )


def _refresh_snookers_required(match: Match) -> None:
    state = match.current
    player_points, opponent_points = player_frame_points(match, state.active_player_id)
    state.snookers_required = is_snooker_required(
        player_points, opponent_points, state.points_on_table
    )
