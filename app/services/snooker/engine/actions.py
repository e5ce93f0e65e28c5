"""Scoring event input - what a scorer submits to the engine."""

from pydantic import BaseModel, Field

from app.schemas.snooker import ActionType, Ball

KNOWN_ACTIONS = frozenset(action.value for action in ActionType)


class MatchEventData(BaseModel):
    """A single scoring event submitted against a match.

    action stays a plain string so unknown actions reach the engine and are
    rejected there with a readable message.
    """

    action: str = Field(..., description="One of the nine scoring actions")
    ball: Ball | None = Field(None, description="Ball potted or fouled on")
    note: str | None = Field(None, description="Free text, e.g. 'snooker foul'")

    @property
    def action_type(self) -> ActionType | None:
        if self.action in KNOWN_ACTIONS:
            return ActionType(self.action)
        return None


def build_event_data(payload: dict) -> MatchEventData:
    """Build event data from a raw payload dict.

    Args:
        payload: Dict with an 'action' key and optional 'ball' and 'note'.

    Returns:
        The validated MatchEventData.

    Raises:
        pydantic.ValidationError: If the ball code is unknown or action is missing.
    """
    return MatchEventData.model_validate(payload)
