"""Snooker scoring service module.

Provides:
- Match creation (engine/setup.py)
- Match engine processing and replay (engine/)
"""

# Re-export from engine for convenience
from .engine import (
    ApplyResult,
    MatchEventData,
    ReplayError,
    apply_event,
    create_new_match,
    reconstruct_match_state,
    undo_last_event,
)

__all__ = [
    "ApplyResult",
    "MatchEventData",
    "ReplayError",
    "apply_event",
    "create_new_match",
    "reconstruct_match_state",
    "undo_last_event",
]
