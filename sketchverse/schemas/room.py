# sketchverse/schemas/room.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# Six letters or digits; lower case is accepted and upper-cased on use
ROOM_CODE_PATTERN = r"^[A-Za-z0-9]{6}$"


class RoomJoinRequest(BaseModel):
    """Body for creating or joining a room. Name/avatar are generated when omitted."""
    player_id: str = Field(min_length=1)
    name: Optional[str] = None
    avatar: Optional[str] = None


class RoomOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    host_id: str
    created_at: datetime
    player_count: int


class PlayerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    avatar: str
    score: int
    is_host: bool
    joined_at: datetime


class JoinOut(BaseModel):
    room: RoomOut
    player: PlayerOut
    room_created: bool
    player_created: bool


class PlayerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=32)
    avatar: Optional[str] = None


class StandingsOut(BaseModel):
    room_code: str
    winner: Optional[PlayerOut]
    players: list[PlayerOut]
