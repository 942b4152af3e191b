# sketchverse/schemas/drawing.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

PointType = Literal["start", "draw", "end", "clear"]


class DrawingPointCreate(BaseModel):
    """One stroke event. Coordinates are normalized to the unit square."""
    player_id: str
    type: PointType
    x: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    y: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    color: Optional[str] = None
    brush_size: Optional[float] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _stroke_needs_coords(self):
        if self.type != "clear":
            missing = [f for f in ("x", "y", "color", "brush_size") if getattr(self, f) is None]
            if missing:
                raise ValueError(f"{self.type} point requires {', '.join(missing)}")
        return self


class DrawingPointOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: PointType
    x: Optional[float] = None
    y: Optional[float] = None
    color: Optional[str] = None
    brush_size: Optional[float] = None
    created_at: datetime


class DrawOut(BaseModel):
    applied: bool
    reason: Optional[str] = None
    point: Optional[DrawingPointOut] = None
