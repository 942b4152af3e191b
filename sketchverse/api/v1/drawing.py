# sketchverse/api/v1/drawing.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...api.deps import RoomCode, get_db_dep
from ...schemas.drawing import DrawingPointCreate, DrawingPointOut, DrawOut
from ...services import drawing

router = APIRouter(prefix="/rooms/{code}/drawing", tags=["drawing"])


@router.post("", response_model=DrawOut)
def append_point(
    code: RoomCode,
    data: DrawingPointCreate,
    db: Session = Depends(get_db_dep),
):
    outcome = drawing.append_point(
        db,
        code,
        data.player_id,
        data.type,
        x=data.x,
        y=data.y,
        color=data.color,
        brush_size=data.brush_size,
    )
    return DrawOut(
        applied=outcome.applied,
        reason=outcome.reason,
        point=DrawingPointOut.model_validate(outcome.point) if outcome.point else None,
    )


@router.get("", response_model=list[DrawingPointOut])
def replay(
    code: RoomCode,
    db: Session = Depends(get_db_dep),
):
    """Everything drawn since the last clear, oldest first."""
    return [DrawingPointOut.model_validate(p) for p in drawing.replay(db, code)]
