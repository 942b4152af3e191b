# sketchverse/models/game.py
from sqlalchemy import (
    Column,
    String,
    Integer,
    ForeignKey,
    DateTime,
    JSON,
    UniqueConstraint,
)

from ..db import Base
from ..timeutils import utcnow


class Game(Base):
    __tablename__ = "games"

    id = Column(String, primary_key=True)
    # One game document per room
    room_code = Column(String(6), ForeignKey("rooms.code"), nullable=False, unique=True)

    status = Column(String, nullable=False, default="waiting")  # waiting / playing / ended
    round = Column(Integer, nullable=False, default=1)
    turn_no = Column(Integer, nullable=False, default=0)

    current_word = Column(String, nullable=True)
    current_drawer_id = Column(String, nullable=True)
    turn_started_at = Column(DateTime, nullable=True)
    turn_ends_at = Column(DateTime, nullable=True)
    correct_guessers = Column(JSON, nullable=False, default=list)

    turn_duration_sec = Column(Integer, nullable=False, default=90)
    total_rounds = Column(Integer, nullable=False, default=5)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    finished_at = Column(DateTime, nullable=True)

    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}


class CorrectGuess(Base):
    """Ledger of points awarded for each solved turn."""

    __tablename__ = "correct_guesses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    game_id = Column(String, ForeignKey("games.id"), nullable=False, index=True)
    turn_no = Column(Integer, nullable=False)
    round = Column(Integer, nullable=False)

    player_id = Column(String, nullable=False)
    drawer_id = Column(String, nullable=False)
    guesser_points = Column(Integer, nullable=False)
    drawer_points = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    # A player is credited at most once per turn
    __table_args__ = (
        UniqueConstraint(
            "game_id", "turn_no", "player_id",
            name="uq_correct_guess_once_per_turn",
        ),
    )
