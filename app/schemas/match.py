"""Pydantic schemas for match operations."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.schemas.snooker import Ball, MatchFormat


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlayerEntry(RequestModel):
    """One of the two players in a new match."""

    player_id: str = Field(..., min_length=1, description="Player id")
    name: str = Field(..., min_length=1, max_length=100, description="Display name")


class CreateMatchRequest(RequestModel):
    """Request body for creating a match."""

    player1: PlayerEntry
    player2: PlayerEntry
    format: MatchFormat = Field(default_factory=MatchFormat)
    venue: str | None = Field(None, max_length=200)
    referee: str | None = Field(None, max_length=200)


class MatchEventRequest(RequestModel):
    """Request body for a scoring event.

    action is left as free text; the engine rejects unknown actions itself.
    """

    action: str = Field(..., min_length=1, description="Scoring action, e.g. 'pot'")
    ball: Ball | None = Field(None, description="Ball code: R, Y, G, Br, Bl, P or Bk")
    note: str | None = Field(None, max_length=500)


class MatchListResponse(RequestModel):
    matches: list[dict] = Field(..., description="Match documents, newest first")
