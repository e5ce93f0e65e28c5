"""Snooker match engine - pure scoring logic.

This module provides the core match engine with:
- A rules table of ball values, color order and table arithmetic
- The ball-on sequence check
- apply_event() with the ApplyResult pattern for error handling
- Frame/set/match progression
- Replay-based reconstruction and undo

Usage:
    from app.services.snooker.engine import (
        apply_event,
        ApplyResult,
        MatchEventData,
        create_new_match,
    )

    # Apply an event
    result = apply_event(match, MatchEventData(action="pot", ball="R"))

    if result.valid:
        new_match = result.match  # Persist this
    else:
        # Hand the message back to the scorer
        print(f"Error: {result.error_code} - {result.error}")
"""

# Inputs
from .actions import MatchEventData, build_event_data

# Main processing
from .process import apply_event, calculate_points_delta

# Progression
from .progression import (
    derive_match_winner,
    finalize_frame,
    get_current_frame,
    is_match_complete,
    is_set_complete,
)

# Replay
from .replay import ReplayError, reconstruct_match_state, undo_last_event

# Rules
from .rules import (
    BALL_VALUES,
    COLORS_ORDER,
    INITIAL_REDS,
    MIN_FOUL_POINTS,
    ball_value,
    foul_value,
    is_snooker_required,
    points_on_table,
    should_respot_black,
)

# Sequence
from .sequence import ball_on, is_valid_ball_sequence

# Setup
from .setup import create_new_match, validate_match_setup

# Result types
from .validation import ApplyResult, ValidationResult, validate_event

__all__ = [
    # Inputs
    "MatchEventData",
    "build_event_data",
    # Processing
    "apply_event",
    "calculate_points_delta",
    # Progression
    "derive_match_winner",
    "finalize_frame",
    "get_current_frame",
    "is_match_complete",
    "is_set_complete",
    # Replay
    "ReplayError",
    "reconstruct_match_state",
    "undo_last_event",
    # Rules
    "BALL_VALUES",
    "COLORS_ORDER",
    "INITIAL_REDS",
    "MIN_FOUL_POINTS",
    "ball_value",
    "foul_value",
    "is_snooker_required",
    "points_on_table",
    "should_respot_black",
    # Sequence
    "ball_on",
    "is_valid_ball_sequence",
    # Setup
    "create_new_match",
    "validate_match_setup",
    # Validation
    "ApplyResult",
    "ValidationResult",
    "validate_event",
]
