from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DocumentModel(BaseModel):
    """Base for persisted match documents.

    Attributes are snake_case in Python and camelCase in the stored document.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Ball identities, persisted as their short codes
class Ball(str, Enum):
    RED = "R"
    YELLOW = "Y"
    GREEN = "G"
    BROWN = "Br"
    BLUE = "Bl"
    PINK = "P"
    BLACK = "Bk"


class MatchStatus(str, Enum):
    SCHEDULED = "scheduled"
    LIVE = "live"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


# Scoring actions accepted by the engine
class ActionType(str, Enum):
    POT = "pot"
    FOUL = "foul"
    FREE_BALL_POT = "freeBallPot"
    MISS = "miss"
    END_TURN = "endTurn"
    RE_RACK = "reRack"
    CONCEDE = "concede"
    END_FRAME = "endFrame"
    END_MATCH = "endMatch"


class MatchFormat(DocumentModel):
    """Fixed at match creation.

    When sets are disabled, best_of_sets is read as "best of N frames".
    """

    model_config = ConfigDict(frozen=True)

    sets_enabled: bool = False
    best_of_sets: int = Field(1, ge=1)
    frames_per_set: int = Field(1, ge=1)


class MatchPlayer(DocumentModel):
    player_id: str
    name: str


class MatchState(DocumentModel):
    """The live cursor of a match - only the engine writes it."""

    active_player_id: str
    set_number: int = Field(1, ge=1)
    frame_number: int = Field(1, ge=1)
    break_points: int = Field(0, ge=0)
    reds_remaining: int = Field(15, ge=0, le=15)
    colors_phase: bool = False
    colors_order_index: int = Field(0, ge=0, le=6)
    points_on_table: int = Field(0, ge=0)
    freeball_active: bool = False
    snookers_required: bool = False
    last_ball_potted_in_break: Ball | None = None


class FrameScore(DocumentModel):
    set_no: int
    frame_no: int
    p1_points: int = 0
    p2_points: int = 0
    winner_player_id: str | None = None
    highest_break: int | None = None
    decided_on_black: bool = False


class SetScore(DocumentModel):
    set_no: int
    p1_frames: int = 0
    p2_frames: int = 0
    winner_player_id: str | None = None


class MatchTotals(DocumentModel):
    p1_sets: int = 0
    p2_sets: int = 0
    winner_player_id: str | None = None


class MatchScore(DocumentModel):
    frames: list[FrameScore] = []
    sets: list[SetScore] = []
    match: MatchTotals = Field(default_factory=MatchTotals)


class MatchEvent(DocumentModel):
    """One entry of the append-only match history."""

    id: str
    timestamp: datetime
    player_id: str = Field(..., description="Player active when the event was submitted")
    action: ActionType
    ball: Ball | None = None
    points_delta: int = 0
    note: str | None = None
    state_snapshot: MatchState


class Match(DocumentModel):
    """Aggregate root for a scored match."""

    id: str
    status: MatchStatus = MatchStatus.SCHEDULED
    format: MatchFormat
    players: list[MatchPlayer] = Field(..., min_length=2, max_length=2)
    current: MatchState
    score: MatchScore
    history: list[MatchEvent] = []
    venue: str | None = None
    referee: str | None = None
    created_at: datetime
    updated_at: datetime
    created_by: str
    updated_by: str

    @property
    def player1_id(self) -> str:
        return self.players[0].player_id

    @property
    def player2_id(self) -> str:
        return self.players[1].player_id

    def to_document(self) -> dict:
        """Serialize for the document store, dropping unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
