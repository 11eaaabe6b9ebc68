# Pydantic models for the persisted round document and API IO.
# Wire and storage use camelCase keys; Python code uses snake_case names.

from __future__ import annotations
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from typing import Dict, List, Literal, Optional
from .config import LETTER_COUNT

RoundStatus = Literal["waiting", "active", "finished"]

class WordEntry(BaseModel):
    word: str
    points: int

class PlayerDocument(BaseModel):
    name: str
    words: List[WordEntry] = Field(default_factory=list)
    score: int = 0

class RoundDocument(BaseModel):
    """Flat document stored per round code."""
    model_config = ConfigDict(populate_by_name=True)

    code: str
    letters: str
    status: RoundStatus = "waiting"
    start_time: Optional[int] = Field(None, alias="startTime", description="Epoch ms, set on start")
    duration: int = Field(..., description="Round length in seconds")
    created_at: int = Field(..., alias="createdAt", description="Epoch ms")
    players: Dict[str, PlayerDocument] = Field(default_factory=dict)

    @field_validator("letters")
    @classmethod
    def validate_letters(cls, v: str) -> str:
        if len(v) != LETTER_COUNT or not v.isalpha() or not v.isupper():
            raise ValueError(f"letters must be {LETTER_COUNT} uppercase letters")
        return v

class CreateRoundResponse(BaseModel):
    code: str
    letters: str

class JoinRequest(BaseModel):
    # Missing names are reported by the game as InvalidInput, not by validation.
    player_name: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("playerName", "player_name", "name"),
        description="Display name"
    )

class JoinResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    player_id: str = Field(..., alias="playerId")
    game: RoundDocument

class WordRequest(BaseModel):
    player_id: str = Field(..., validation_alias=AliasChoices("playerId", "player_id"))
    word: str = Field(..., description="Word as typed by the player")

class SubmitWordResponse(BaseModel):
    accepted: bool
    word: Optional[str] = None
    points: Optional[int] = None
    reason: Optional[str] = None

class RetractWordResponse(BaseModel):
    success: bool = True

class StandingEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    rank: int
    player_id: str = Field(..., alias="playerId")
    name: str
    score: int
    word_count: int = Field(..., alias="wordCount")

class StandingsResponse(BaseModel):
    code: str
    status: RoundStatus
    standings: List[StandingEntry]

class DictionaryInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    loaded: bool
    count: int
    seed_count: int = Field(..., alias="seedCount")
