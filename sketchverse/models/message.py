# sketchverse/models/message.py
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text

from ..db import Base
from ..timeutils import utcnow


class Message(Base):
    __tablename__ = "messages"

    # Sequence number; gives the total order of the chat log
    id = Column(Integer, primary_key=True, autoincrement=True)
    room_code = Column(String(6), ForeignKey("rooms.code"), nullable=False, index=True)

    # Absent for system and hint messages
    player_id = Column(String, nullable=True)
    player_name = Column(String, nullable=True)

    text = Column(Text, nullable=False)
    type = Column(String, nullable=False)  # guess / system / hint / correct
    created_at = Column(DateTime, default=utcnow, nullable=False)
