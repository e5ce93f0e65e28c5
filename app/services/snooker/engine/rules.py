"""Rules table - ball values, color order and table arithmetic.

Pure functions and constants, no state.
"""

from app.schemas.snooker import Ball

BALL_VALUES: dict[Ball, int] = {
    Ball.RED: 1,
    Ball.YELLOW: 2,
    Ball.GREEN: 3,
    Ball.BROWN: 4,
    Ball.BLUE: 5,
    Ball.PINK: 6,
    Ball.BLACK: 7,
}

COLORS_ORDER: list[Ball] = [
    Ball.YELLOW,
    Ball.GREEN,
    Ball.BROWN,
    Ball.BLUE,
    Ball.PINK,
    Ball.BLACK,
]

INITIAL_REDS = 15
MIN_FOUL_POINTS = 4
FREE_BALL_POINTS = 1

# 2 + 3 + 4 + 5 + 6 + 7
ALL_COLORS_VALUE = sum(BALL_VALUES[color] for color in COLORS_ORDER)
# Red followed by the black
MAX_POINTS_PER_RED = BALL_VALUES[Ball.RED] + BALL_VALUES[Ball.BLACK]


def ball_value(ball: Ball) -> int:
    return BALL_VALUES[ball]


def foul_value(ball: Ball | None = None) -> int:
    """Points awarded to the non-offending player, never fewer than 4."""
    if ball is None:
        return MIN_FOUL_POINTS
    return max(ball_value(ball), MIN_FOUL_POINTS)


def is_red(ball: Ball) -> bool:
    return ball == Ball.RED


def is_color(ball: Ball) -> bool:
    return ball != Ball.RED


def points_on_table(
    reds_remaining: int,
    colors_phase: bool,
    colors_order_index: int = 0,
    last_ball_potted_in_break: Ball | None = None,
) -> int:
    """Maximum points still available in the current phase and position.

    Red phase: every red can be followed by the black (8 each) plus all six
    colors at the end. Straight after a red the player is on a color, so the
    black's value is added on top until that color is resolved. The same
    adjustment applies after the final red, which leaves the table in the
    colors phase while the player is still on a color.

    Colors phase: sum of the colors from colors_order_index to the black.
    """
    on_a_color = last_ball_potted_in_break == Ball.RED
    if not colors_phase:
        total = reds_remaining * MAX_POINTS_PER_RED + ALL_COLORS_VALUE
        if on_a_color:
            total += ball_value(Ball.BLACK)
        return total

    if colors_order_index >= len(COLORS_ORDER):
        return 0
    total = sum(ball_value(color) for color in COLORS_ORDER[colors_order_index:])
    if on_a_color:
        total += ball_value(Ball.BLACK)
    return total



def is_snooker_required(
    player_points: int,
    opponent_points: int,
    points_remaining: int,
) -> bool:
    """True when clearing the table still would not put the player ahead."""
    return player_points + points_remaining <= opponent_points


def should_respot_black(p1_points: int, p2_points: int) -> bool:
    """A tied frame is decided on a respotted black."""
    return p1_points == p2_points


def initial_points_on_table() -> int:
    return points_on_table(INITIAL_REDS, False, 0, None)
