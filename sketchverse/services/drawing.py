# sketchverse/services/drawing.py
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.drawing import DrawingPoint
from ..models.game import Game
from .membership import get_room, normalize_code


@dataclass
class DrawOutcome:
    applied: bool
    point: DrawingPoint | None = None
    reason: str | None = None


def add_clear(db: Session, code: str) -> DrawingPoint:
    """Stage a clear tombstone; the caller owns the commit."""
    point = DrawingPoint(room_code=code, type="clear")
    db.add(point)
    return point


def append_point(
    db: Session,
    code: str,
    player_id: str,
    type: str,
    x: float | None = None,
    y: float | None = None,
    color: str | None = None,
    brush_size: float | None = None,
) -> DrawOutcome:
    """Append one stroke event. Only the current drawer of a running game may draw."""
    code = normalize_code(code)
    get_room(db, code)

    game = db.query(Game).filter(Game.room_code == code).one_or_none()
    if game is None or game.status != "playing":
        return DrawOutcome(applied=False, reason="not_playing")
    if game.current_drawer_id != player_id:
        return DrawOutcome(applied=False, reason="not_drawer")

    if type == "clear":
        point = add_clear(db, code)
    else:
        point = DrawingPoint(
            room_code=code,
            type=type,
            x=x,
            y=y,
            color=color,
            brush_size=brush_size,
        )
        db.add(point)
    db.commit()
    db.refresh(point)
    return DrawOutcome(applied=True, point=point)


def replay(db: Session, code: str) -> list[DrawingPoint]:
    """Stroke events since the most recent clear, in append order."""
    code = normalize_code(code)
    get_room(db, code)

    last_clear = (
        db.query(func.max(DrawingPoint.id))
        .filter(DrawingPoint.room_code == code, DrawingPoint.type == "clear")
        .scalar()
    )
    q = db.query(DrawingPoint).filter(DrawingPoint.room_code == code)
    if last_clear is not None:
        q = q.filter(DrawingPoint.id > last_clear)
    return q.order_by(DrawingPoint.id.asc()).all()
