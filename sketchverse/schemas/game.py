# sketchverse/schemas/game.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from ..config import Config
from .message import MessageOut
from .room import ROOM_CODE_PATTERN

StatusLiteral = Literal["waiting", "playing", "ended"]


class GameSettings(BaseModel):
    turn_duration_sec: int = Field(default=Config.TURN_DURATION_SEC, ge=10, le=600)
    total_rounds: int = Field(default=Config.TOTAL_ROUNDS, ge=1, le=20)


class GameCreate(BaseModel):
    room_code: str = Field(pattern=ROOM_CODE_PATTERN)
    player_id: str
    settings: Optional[GameSettings] = None


class HostAction(BaseModel):
    player_id: str


class AdvanceRequest(HostAction):
    # Only advance while this turn is still current
    expected_turn: Optional[int] = None


class GameOut(BaseModel):
    id: str
    room_code: str
    status: StatusLiteral
    round: int
    total_rounds: int
    turn_no: int
    current_drawer_id: Optional[str]
    turn_started_at: Optional[datetime]
    turn_ends_at: datetime
    turn_duration_sec: int
    seconds_left: float
    correct_guessers: list[str]
    # Secret word, only for the drawer, players who solved it, or once ended
    word: Optional[str] = None
    word_mask: Optional[str] = None


class ActionOut(BaseModel):
    applied: bool
    reason: Optional[str] = None
    game: Optional[GameOut] = None


class GuessCreate(BaseModel):
    player_id: str
    text: str
    turn_no: Optional[int] = None


class GuessOut(BaseModel):
    applied: bool
    correct: bool
    reason: Optional[str] = None
    guesser_points: int = 0
    drawer_points: int = 0
    all_guessed: bool = False
    turn_advanced: bool = False
    message: Optional[MessageOut] = None
    game: Optional[GameOut] = None


class TurnScoreItem(BaseModel):
    player_id: str
    name: str
    avatar: str
    points: int


class TurnScoresOut(BaseModel):
    room_code: str
    turn_no: int
    items: list[TurnScoreItem]
