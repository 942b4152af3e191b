# sketchverse/services/chat.py
from sqlalchemy.orm import Session

from ..models.message import Message
from ..models.room import Player

MESSAGE_TYPES = ("guess", "system", "hint", "correct")


def add_message(
    db: Session,
    code: str,
    text: str,
    type: str,
    player: Player | None = None,
) -> Message:
    """Stage a chat log entry on ``db``; the caller owns the commit."""
    if type not in MESSAGE_TYPES:
        raise ValueError(f"unknown message type: {type}")
    msg = Message(
        room_code=code,
        player_id=player.id if player else None,
        player_name=player.name if player else None,
        text=text,
        type=type,
    )
    db.add(msg)
    return msg


def list_messages(db: Session, code: str, after: int | None = None, limit: int = 200) -> list[Message]:
    q = db.query(Message).filter(Message.room_code == code)
    if after is not None:
        q = q.filter(Message.id > after)
    return q.order_by(Message.id.asc()).limit(limit).all()


def recent_guesses(db: Session, code: str, limit: int = 5) -> list[str]:
    """Texts of the last ``limit`` wrong guesses, oldest first."""
    rows = (
        db.query(Message.text)
        .filter(Message.room_code == code, Message.type == "guess")
        .order_by(Message.id.desc())
        .limit(limit)
        .all()
    )
    return [text for (text,) in reversed(rows)]
