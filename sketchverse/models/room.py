# sketchverse/models/room.py
from sqlalchemy import Column, String, DateTime, ForeignKey, Boolean, Integer
from sqlalchemy.orm import relationship

from ..db import Base
from ..timeutils import utcnow


class Room(Base):
    __tablename__ = "rooms"

    code = Column(String(6), primary_key=True)
    host_id = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Kept in step with the players table inside the join transaction,
    # so two simultaneous joins cannot both slip under the cap.
    player_count = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False)

    players = relationship(
        "Player",
        back_populates="room",
        cascade="all, delete-orphan",
        order_by="Player.joined_at",
    )

    __mapper_args__ = {"version_id_col": version}


class Player(Base):
    __tablename__ = "players"

    room_code = Column(String(6), ForeignKey("rooms.code"), primary_key=True)
    id = Column(String, primary_key=True)

    name = Column(String, nullable=False)
    avatar = Column(String, nullable=False)
    score = Column(Integer, nullable=False, default=0)
    is_host = Column(Boolean, nullable=False, default=False)
    # Only used to fix the drawer rotation order
    joined_at = Column(DateTime, default=utcnow, nullable=False)
    # Tie-break for identical joined_at values
    join_order = Column(Integer, nullable=False, default=0)

    room = relationship("Room", back_populates="players")
