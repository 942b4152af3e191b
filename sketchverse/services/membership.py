# sketchverse/services/membership.py
import logging
import random
import string
from dataclasses import dataclass

from sqlalchemy.orm import Session

from ..config import Config
from ..models.room import Room, Player
from ..timeutils import utcnow
from .errors import RoomNotFound, PlayerNotFound, RoomFull
from .transactions import run_in_transaction

logger = logging.getLogger(__name__)

AVATARS = [f"avatar-{i}.svg" for i in range(1, 11)]

_ADJECTIVES = ["Silly", "Goofy", "Wacky", "Zany", "Dizzy", "Bizarre", "Funky", "Quirky"]
_NOUNS = ["Panda", "Unicorn", "Dinosaur", "Alien", "Robot", "Pirate", "Ninja", "Wizard"]

ROOM_CODE_LENGTH = 6
_ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits


@dataclass
class JoinResult:
    player: Player
    room_created: bool
    player_created: bool


def generate_username() -> str:
    return f"{random.choice(_ADJECTIVES)}{random.choice(_NOUNS)}{random.randrange(100)}"


def generate_room_code() -> str:
    return "".join(random.choice(_ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def get_room(db: Session, code: str) -> Room:
    room = db.get(Room, normalize_code(code))
    if room is None:
        raise RoomNotFound()
    return room


def get_player(db: Session, code: str, player_id: str) -> Player:
    player = db.get(Player, (normalize_code(code), player_id))
    if player is None:
        raise PlayerNotFound()
    return player


def ordered_players(db: Session, code: str) -> list[Player]:
    """Players of a room in join order (the drawer rotation order)."""
    return (
        db.query(Player)
        .filter(Player.room_code == normalize_code(code))
        .order_by(Player.joined_at.asc(), Player.join_order.asc())
        .all()
    )


def is_host(db: Session, code: str, player_id: str | None) -> bool:
    if not player_id:
        return False
    player = db.get(Player, (normalize_code(code), player_id))
    return bool(player and player.is_host)


def join_room(
    db: Session,
    code: str,
    player_id: str,
    name: str | None = None,
    avatar: str | None = None,
) -> JoinResult:
    """
    Put ``player_id`` into room ``code``.

    - The room is created on first join and the first joiner becomes host.
    - Rejoining returns the existing player untouched (score, name, host flag).
    - A new player is refused with ``RoomFull`` once the cap is reached.
    """
    code = normalize_code(code)
    display_name = (name or "").strip() or generate_username()
    avatar_ref = (avatar or "").strip() or random.choice(AVATARS)

    def work(db: Session) -> JoinResult:
        room = db.get(Room, code)
        room_created = False
        if room is None:
            room = Room(code=code, host_id=player_id, player_count=0)
            db.add(room)
            room_created = True

        player = db.get(Player, (code, player_id))
        if player is not None:
            return JoinResult(player=player, room_created=False, player_created=False)

        if room.player_count >= Config.MAX_PLAYERS:
            raise RoomFull()

        room.player_count += 1
        player = Player(
            room_code=code,
            id=player_id,
            name=display_name,
            avatar=avatar_ref,
            score=0,
            is_host=room_created,
            joined_at=utcnow(),
            join_order=room.player_count,
        )
        db.add(player)
        db.flush()
        return JoinResult(player=player, room_created=room_created, player_created=True)

    result = run_in_transaction(db, work, label=f"join {code}")
    if result.room_created:
        logger.info("Room %s created by %s", code, player_id)
    if result.player_created:
        logger.info("Player %s joined room %s", player_id, code)
    db.refresh(result.player)
    return result


def create_room(
    db: Session,
    player_id: str,
    name: str | None = None,
    avatar: str | None = None,
) -> JoinResult:
    """Pick an unused room code and join it as host."""
    for _ in range(20):
        code = generate_room_code()
        if db.get(Room, code) is None:
            break
    else:
        raise RuntimeError("Could not allocate a free room code")
    return join_room(db, code, player_id, name=name, avatar=avatar)


def update_profile(
    db: Session,
    code: str,
    player_id: str,
    name: str | None = None,
    avatar: str | None = None,
) -> Player:
    """Change a player's name and/or avatar. The score is never touched here."""
    code = normalize_code(code)

    def work(db: Session) -> Player:
        player = get_player(db, code, player_id)
        if name is not None and name.strip():
            player.name = name.strip()
        if avatar is not None and avatar.strip():
            player.avatar = avatar.strip()
        return player

    player = run_in_transaction(db, work, label=f"profile {code}")
    db.refresh(player)
    return player


def standings(db: Session, code: str) -> list[Player]:
    """Players by score, highest first; join order breaks ties."""
    get_room(db, code)
    players = ordered_players(db, code)
    return sorted(players, key=lambda p: -p.score)
