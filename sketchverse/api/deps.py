# sketchverse/api/deps.py

from collections.abc import Generator
from typing import Annotated

from fastapi import Path
from sqlalchemy.orm import Session

from ..db import SessionLocal
from ..schemas.room import ROOM_CODE_PATTERN
from ..services.hints import HintService, hint_service
from ..services.scheduler import TurnScheduler, turn_scheduler

# Path parameter for room-scoped routes; malformed codes are rejected with 422
RoomCode = Annotated[str, Path(pattern=ROOM_CODE_PATTERN)]


def get_db_dep() -> Generator[Session, None, None]:
    """
    DB session dependency.
    Endpoints use it as `db: Session = Depends(get_db_dep)`.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_hint_service() -> HintService:
    return hint_service


def get_turn_scheduler() -> TurnScheduler:
    return turn_scheduler
