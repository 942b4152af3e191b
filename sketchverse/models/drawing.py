# sketchverse/models/drawing.py
from sqlalchemy import Column, String, Integer, Float, DateTime, ForeignKey

from ..db import Base
from ..timeutils import utcnow


class DrawingPoint(Base):
    __tablename__ = "drawing_points"

    id = Column(Integer, primary_key=True, autoincrement=True)
    room_code = Column(String(6), ForeignKey("rooms.code"), nullable=False, index=True)

    type = Column(String, nullable=False)  # start / draw / end / clear

    # Unit-square coordinates; NULL for clear
    x = Column(Float, nullable=True)
    y = Column(Float, nullable=True)
    color = Column(String, nullable=True)
    brush_size = Column(Float, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
