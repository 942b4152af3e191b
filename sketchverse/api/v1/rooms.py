# sketchverse/api/v1/rooms.py

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...api.deps import RoomCode, get_db_dep
from ...schemas.message import MessageOut
from ...schemas.room import (
    JoinOut,
    PlayerOut,
    PlayerUpdate,
    RoomJoinRequest,
    RoomOut,
    StandingsOut,
)
from ...services import chat, membership

router = APIRouter(
    prefix="/rooms",
    tags=["rooms"],
)


def _join_out(db: Session, result: membership.JoinResult) -> JoinOut:
    room = membership.get_room(db, result.player.room_code)
    return JoinOut(
        room=RoomOut.model_validate(room),
        player=PlayerOut.model_validate(result.player),
        room_created=result.room_created,
        player_created=result.player_created,
    )


# -----------------------------
# Create / join
# -----------------------------

@router.post("", response_model=JoinOut)
def create_room(
    data: RoomJoinRequest,
    db: Session = Depends(get_db_dep),
):
    """Open a room under a fresh code with the caller as host."""
    result = membership.create_room(db, data.player_id, name=data.name, avatar=data.avatar)
    return _join_out(db, result)


@router.post("/{code}/join", response_model=JoinOut)
def join_room(
    code: RoomCode,
    data: RoomJoinRequest,
    db: Session = Depends(get_db_dep),
):
    """Join (or rejoin) a room; the room is created if nobody has used the code yet."""
    result = membership.join_room(db, code, data.player_id, name=data.name, avatar=data.avatar)
    return _join_out(db, result)


@router.get("/{code}", response_model=RoomOut)
def get_room(code: RoomCode, db: Session = Depends(get_db_dep)):
    return membership.get_room(db, code)


# -----------------------------
# Players
# -----------------------------

@router.get("/{code}/players", response_model=list[PlayerOut])
def list_players(
    code: RoomCode,
    db: Session = Depends(get_db_dep),
):
    """Players in join order (the drawing order)."""
    membership.get_room(db, code)
    return [PlayerOut.model_validate(p) for p in membership.ordered_players(db, code)]


@router.patch("/{code}/players/{player_id}", response_model=PlayerOut)
def update_player(
    code: RoomCode,
    player_id: str,
    data: PlayerUpdate,
    db: Session = Depends(get_db_dep),
):
    """Edit name/avatar. Scores cannot be changed here."""
    player = membership.update_profile(db, code, player_id, name=data.name, avatar=data.avatar)
    return PlayerOut.model_validate(player)


@router.get("/{code}/standings", response_model=StandingsOut)
def get_standings(
    code: RoomCode,
    db: Session = Depends(get_db_dep),
):
    players = [PlayerOut.model_validate(p) for p in membership.standings(db, code)]
    return StandingsOut(
        room_code=membership.normalize_code(code),
        winner=players[0] if players else None,
        players=players,
    )


# -----------------------------
# Chat log
# -----------------------------

@router.get("/{code}/messages", response_model=list[MessageOut])
def list_messages(
    code: RoomCode,
    after: Optional[int] = None,
    limit: int = 200,
    db: Session = Depends(get_db_dep),
):
    """Chat log in order; pass the last seen id as `after` to poll for new entries."""
    room = membership.get_room(db, code)
    return [MessageOut.model_validate(m) for m in chat.list_messages(db, room.code, after=after, limit=limit)]
