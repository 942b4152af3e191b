# sketchverse/api/v1/debug.py

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ...api.deps import get_db_dep, get_turn_scheduler
from ...db import Base, engine
from ...schemas.room import ROOM_CODE_PATTERN
from ...services import membership, turns
from ...services.scheduler import TurnScheduler
from ...services.transactions import run_in_transaction
from ...timeutils import seconds_from_now
from .games import game_out

router = APIRouter(prefix="/debug", tags=["debug"])


class DebugSeedRequest(BaseModel):
    room_code: Optional[str] = Field(default=None, pattern=ROOM_CODE_PATTERN)
    player_names: Optional[list[str]] = None
    player_count: Optional[int] = Field(default=None, ge=1)
    start_game: bool = True


class DebugSetTurnRequest(BaseModel):
    room_code: str = Field(pattern=ROOM_CODE_PATTERN)
    word: Optional[str] = None
    seconds_left: Optional[float] = Field(default=None, ge=0)


@router.post("/reset_and_seed")
def reset_and_seed(
    data: DebugSeedRequest,
    db: Session = Depends(get_db_dep),
    scheduler: TurnScheduler = Depends(get_turn_scheduler),
):
    """Wipe the database and seed one room (development only)."""
    scheduler.shutdown()
    db.close()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    if data.player_names:
        names = data.player_names
    else:
        count = data.player_count or 3
        names = [f"Player{i + 1}" for i in range(count)]

    code = membership.normalize_code(data.room_code or membership.generate_room_code())

    players = []
    for idx, name in enumerate(names):
        result = membership.join_room(db, code, f"debug-player-{idx + 1}", name=name)
        players.append({"id": result.player.id, "name": result.player.name, "is_host": result.player.is_host})

    game = None
    if data.start_game:
        host_id = players[0]["id"]
        turns.create_game(db, code, host_id)
        outcome = turns.start_game(db, code, host_id)
        scheduler.track(outcome.game)
        game = game_out(outcome.game, host_id)

    return {
        "room_code": code,
        "players": players,
        "game": game,
    }


@router.post("/set_turn")
def set_turn(
    data: DebugSetTurnRequest,
    db: Session = Depends(get_db_dep),
    scheduler: TurnScheduler = Depends(get_turn_scheduler),
):
    """Force the current word and/or remaining time of the running turn."""

    def work(db: Session):
        game = turns.get_game(db, data.room_code)
        if data.word is not None:
            game.current_word = data.word
        if data.seconds_left is not None:
            game.turn_ends_at = seconds_from_now(data.seconds_left)
        return game

    game = run_in_transaction(db, work, label="debug set_turn")
    db.refresh(game)
    # Deadline moved: drop the old timer so track() arms a new one
    scheduler.cancel(game.room_code)
    scheduler.track(game)
    return game_out(game, game.current_drawer_id)
