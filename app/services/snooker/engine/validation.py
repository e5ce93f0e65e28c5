"""Validation layer for scoring events and the ApplyResult pattern.

Separates validation from processing logic:
- validate_event() checks an event against the current match before anything changes
- ApplyResult replaces exceptions for control flow
"""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

from app.schemas.snooker import ActionType, Match

from .actions import MatchEventData
from .sequence import is_valid_ball_sequence


@dataclass
class ApplyResult:
    """Result of applying a scoring event to a match.

    On failure, match is the untouched input match.
    """

    match: Match
    valid: bool = True
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def ok(cls, match: Match) -> "ApplyResult":
        """Create a successful result carrying the new match."""
        return cls(match=match, valid=True)

    @classmethod
    def failure(cls, match: Match, code: str, message: str) -> "ApplyResult":
        """Create a failure result that hands back the original match."""
        return cls(match=match, valid=False, error=message, error_code=code)


@dataclass
class ValidationResult:
    """Result of validating an event before processing."""

    is_valid: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def error(cls, code: str, message: str) -> "ValidationResult":
        return cls(
            is_valid=False,
            error_code=code,
            error_message=message,
        )


def validate_event(match: Match, event_data: MatchEventData) -> ValidationResult:
    """Validate an event before processing.

    Checks:
    - The action is one of the known actions
    - pot and freeBallPot name a ball
    - A potted ball is the ball on
    - A free ball pot is only accepted while a free ball is active

    Args:
        match: Current match.
        event_data: The submitted event.

    Returns:
        ValidationResult indicating success or failure with error details.
    """
    action = event_data.action_type
    state = match.current

    if action is None:
        logger.warning("Validation failed: UNKNOWN_ACTION, action=%s", event_data.action)
        return ValidationResult.error(
            "UNKNOWN_ACTION",
            f"Unknown action: {event_data.action}",
        )

    if action == ActionType.POT:
        if event_data.ball is None:
            logger.warning("Validation failed: BALL_REQUIRED (pot)")
            return ValidationResult.error("BALL_REQUIRED", "Ball required for pot")

        if not is_valid_ball_sequence(
            event_data.ball,
            state.reds_remaining,
            state.colors_phase,
            state.colors_order_index,
            state.freeball_active,
            state.last_ball_potted_in_break,
        ):
            logger.warning(
                "Validation failed: INVALID_BALL_SEQUENCE, ball=%s, reds=%d, "
                "colors_phase=%s, colors_index=%d, last=%s",
                event_data.ball.value,
                state.reds_remaining,
                state.colors_phase,
                state.colors_order_index,
                state.last_ball_potted_in_break,
            )
            return ValidationResult.error(
                "INVALID_BALL_SEQUENCE",
                f"Invalid ball sequence: {event_data.ball.value}",
            )

    elif action == ActionType.FREE_BALL_POT:
        if event_data.ball is None:
            logger.warning("Validation failed: BALL_REQUIRED (freeBallPot)")
            return ValidationResult.error(
                "BALL_REQUIRED",
                "Ball required for free ball pot",
            )

        if not state.freeball_active:
            logger.warning("Validation failed: FREE_BALL_NOT_ACTIVE")
            return ValidationResult.error(
                "FREE_BALL_NOT_ACTIVE",
                "Free ball not active",
            )

    logger.debug("Event validated successfully: action=%s", action.value)
    return ValidationResult.ok()
