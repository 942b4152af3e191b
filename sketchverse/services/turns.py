# sketchverse/services/turns.py
"""Turn engine.

Game status is a three-state machine::

    waiting --start_game--> playing --advance_turn (rounds exhausted)--> ended

While ``playing`` every call to ``advance_turn`` starts a new turn: the
next player in join order draws a fresh word until the deadline passes or
every other player has solved it. All transitions run inside one
optimistic transaction on the game row, so concurrent callers (a host
click racing the deadline timer, two timers after a restart, ...) can
never advance the same turn twice.
"""
import datetime
import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import Config
from ..models.game import Game
from ..models.room import Player
from ..timeutils import utcnow, seconds_from_now
from .chat import add_message
from .drawing import add_clear
from .errors import GameNotFound, GameAlreadyExists, NotEnoughPlayers
from .membership import get_room, is_host, normalize_code, ordered_players, standings
from .transactions import run_in_transaction
from .words import pick_word

logger = logging.getLogger(__name__)

WAITING = "waiting"
PLAYING = "playing"
ENDED = "ended"

# A new turn inside ``playing`` is not a status change.
TRANSITIONS = {
    WAITING: {PLAYING},
    PLAYING: {ENDED},
    ENDED: set(),
}


@dataclass
class TurnOutcome:
    applied: bool
    game: Game | None = None
    reason: str | None = None
    ended: bool = False


def set_status(game: Game, new_status: str) -> None:
    if new_status not in TRANSITIONS.get(game.status, set()):
        raise ValueError(f"illegal status change {game.status} -> {new_status}")
    game.status = new_status


def next_drawer_index(current_index: int, player_count: int) -> tuple[int, bool]:
    """
    Index of the next drawer and whether the rotation wrapped.

    ``current_index`` is -1 when the current drawer is not in the list;
    the first player then draws and the round does not advance.
    """
    if player_count <= 0:
        raise ValueError("no players to rotate through")
    nxt = (current_index + 1) % player_count
    return nxt, nxt <= current_index


def find_game(db: Session, code: str) -> Game | None:
    return db.query(Game).filter(Game.room_code == normalize_code(code)).one_or_none()


def get_game(db: Session, code: str) -> Game:
    game = find_game(db, code)
    if game is None:
        raise GameNotFound()
    return game


def can_see_word(game: Game, viewer_id: str | None) -> bool:
    if game.status == ENDED:
        return True
    if not viewer_id:
        return False
    return viewer_id == game.current_drawer_id or viewer_id in (game.correct_guessers or [])


def _begin_turn(game: Game, drawer_id: str, round_no: int, now: datetime.datetime) -> None:
    game.current_word = pick_word()
    game.current_drawer_id = drawer_id
    game.round = round_no
    game.turn_no = (game.turn_no or 0) + 1
    game.turn_started_at = now
    game.turn_ends_at = seconds_from_now(game.turn_duration_sec, now)
    game.correct_guessers = []


def _announce(db: Session, code: str, text: str, clear_canvas: bool) -> None:
    """Best-effort side effects after a committed transition."""
    try:
        if clear_canvas:
            add_clear(db, code)
        add_message(db, code, text, "system")
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not post turn announcement in room %s", code)


def _announce_outcome(db: Session, code: str, game: Game) -> None:
    if game.status == ENDED:
        ranking = standings(db, code)
        if ranking:
            _announce(db, code, f"Game over! {ranking[0].name} wins with {ranking[0].score} points!", False)
        else:
            _announce(db, code, "Game over!", False)
        return

    drawer = db.get(Player, (code, game.current_drawer_id))
    name = drawer.name if drawer else "Someone"
    _announce(db, code, f"{name} is now drawing!", True)


# -----------------------------
# Lobby
# -----------------------------

def create_game(
    db: Session,
    code: str,
    player_id: str,
    turn_duration_sec: int | None = None,
    total_rounds: int | None = None,
) -> TurnOutcome:
    """Create the room's game document in ``waiting``. Host only."""
    code = normalize_code(code)
    get_room(db, code)

    def work(db: Session) -> TurnOutcome:
        if not is_host(db, code, player_id):
            return TurnOutcome(applied=False, reason="not_host")
        if find_game(db, code) is not None:
            raise GameAlreadyExists()

        game = Game(
            id=str(uuid.uuid4()),
            room_code=code,
            status=WAITING,
            round=1,
            turn_no=0,
            correct_guessers=[],
            turn_duration_sec=turn_duration_sec or Config.TURN_DURATION_SEC,
            total_rounds=total_rounds or Config.TOTAL_ROUNDS,
        )
        db.add(game)
        db.flush()
        return TurnOutcome(applied=True, game=game)

    outcome = run_in_transaction(db, work, label=f"create game {code}")
    if outcome.applied:
        db.refresh(outcome.game)
        logger.info("Game %s created in room %s", outcome.game.id, code)
    return outcome


def start_game(
    db: Session,
    code: str,
    player_id: str,
    now: datetime.datetime | None = None,
) -> TurnOutcome:
    """waiting -> playing. The first player to have joined draws first."""
    code = normalize_code(code)

    def work(db: Session) -> TurnOutcome:
        game = get_game(db, code)
        if not is_host(db, code, player_id):
            return TurnOutcome(applied=False, game=game, reason="not_host")
        if game.status != WAITING:
            return TurnOutcome(applied=False, game=game, reason="already_started")

        players = ordered_players(db, code)
        if len(players) < Config.MIN_PLAYERS:
            raise NotEnoughPlayers(f"Need at least {Config.MIN_PLAYERS} players")

        started_at = now or utcnow()
        _begin_turn(game, players[0].id, 1, started_at)
        set_status(game, PLAYING)
        return TurnOutcome(applied=True, game=game)

    outcome = run_in_transaction(db, work, label=f"start game {code}")
    if outcome.applied:
        db.refresh(outcome.game)
        logger.info("Game started in room %s, %s draws first", code, outcome.game.current_drawer_id)
        _announce_outcome(db, code, outcome.game)
    return outcome


# -----------------------------
# Turn advancement
# -----------------------------

def advance_turn(
    db: Session,
    code: str,
    caller_id: str | None = None,
    expected_turn: int | None = None,
    now: datetime.datetime | None = None,
) -> TurnOutcome:
    """
    End the current turn and start the next one, or end the game.

    ``caller_id`` must be the host when given; internal callers (the
    deadline timer, the all-guessed signal) act on the host's behalf and
    pass ``None``. With ``expected_turn`` the call only applies while that
    turn is still the current one, so repeated timer firings are no-ops.
    """
    code = normalize_code(code)

    def work(db: Session) -> TurnOutcome:
        game = get_game(db, code)
        if caller_id is not None and not is_host(db, code, caller_id):
            return TurnOutcome(applied=False, game=game, reason="not_host")
        if game.status != PLAYING:
            return TurnOutcome(applied=False, game=game, reason="not_playing")
        if expected_turn is not None and game.turn_no != expected_turn:
            return TurnOutcome(applied=False, game=game, reason="stale_turn")

        player_ids = [p.id for p in ordered_players(db, code)]
        if not player_ids:
            return TurnOutcome(applied=False, game=game, reason="no_players")

        if game.current_drawer_id in player_ids:
            current = player_ids.index(game.current_drawer_id)
        else:
            current = -1
        nxt, wrapped = next_drawer_index(current, len(player_ids))
        round_no = game.round + 1 if wrapped else game.round

        at = now or utcnow()
        if round_no > game.total_rounds:
            # Word, drawer and deadline of the last turn stay as they were.
            game.round = round_no
            game.finished_at = at
            set_status(game, ENDED)
            return TurnOutcome(applied=True, game=game, ended=True)

        _begin_turn(game, player_ids[nxt], round_no, at)
        return TurnOutcome(applied=True, game=game)

    outcome = run_in_transaction(db, work, label=f"advance turn {code}")
    if outcome.applied:
        db.refresh(outcome.game)
        if outcome.ended:
            logger.info("Game in room %s ended after round %d", code, outcome.game.round - 1)
        else:
            logger.info(
                "Room %s: turn %d, round %d, %s drawing",
                code, outcome.game.turn_no, outcome.game.round, outcome.game.current_drawer_id,
            )
        _announce_outcome(db, code, outcome.game)
    else:
        logger.debug("advance_turn in room %s ignored: %s", code, outcome.reason)
    return outcome
