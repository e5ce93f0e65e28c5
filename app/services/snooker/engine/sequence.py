"""Ball-on sequence checks."""

from app.schemas.snooker import Ball, MatchState

from .rules import COLORS_ORDER, is_color


def is_valid_ball_sequence(
    ball: Ball,
    reds_remaining: int,
    colors_phase: bool,
    colors_order_index: int = 0,
    freeball_active: bool = False,
    last_ball_potted_in_break: Ball | None = None,
) -> bool:
    """Decide whether a ball may legally be potted next.

    - Free ball: any ball may be nominated.
    - Red phase: reds and colors alternate. After a red only a color is on,
      after a color (or at the start of a break) only a red is on.
    - Colors phase: Yellow, Green, Brown, Blue, Pink, Black in strict order.
      The one exception is the color taken straight after the final red,
      which may be any color.
    A red can never be on once the last red has gone, free ball or not.
    """
    if ball == Ball.RED and reds_remaining <= 0:
        return False

    if freeball_active:
        return True

    if not colors_phase and reds_remaining > 0:
        if last_ball_potted_in_break == Ball.RED:
            return is_color(ball)
        return ball == Ball.RED

    if colors_phase:
        if last_ball_potted_in_break == Ball.RED:
            return is_color(ball)
        if colors_order_index >= len(COLORS_ORDER):
            return False
        return ball == COLORS_ORDER[colors_order_index]

    return False


def ball_on(state: MatchState) -> list[Ball]:
    """Balls that may be potted next from the given state."""
    return [
        ball
        for ball in Ball
        if is_valid_ball_sequence(
            ball,
            state.reds_remaining,
            state.colors_phase,
            state.colors_order_index,
            state.freeball_active,
            state.last_ball_potted_in_break,
        )
    ]
