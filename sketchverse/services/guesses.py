# sketchverse/services/guesses.py
import datetime
import logging
import math
from dataclasses import dataclass

from sqlalchemy.orm import Session

from ..config import Config
from ..models.game import CorrectGuess
from ..models.message import Message
from ..models.room import Player
from ..timeutils import seconds_until, utcnow
from .chat import add_message
from .errors import ContentionError, PlayerNotFound
from .membership import get_player, normalize_code, ordered_players
from .transactions import run_in_transaction
from .turns import PLAYING, TurnOutcome, advance_turn, get_game

logger = logging.getLogger(__name__)


@dataclass
class GuessOutcome:
    applied: bool
    correct: bool = False
    reason: str | None = None
    turn_no: int | None = None
    guesser_points: int = 0
    drawer_points: int = 0
    all_guessed: bool = False
    message: Message | None = None
    advance: TurnOutcome | None = None


@dataclass
class TurnScore:
    player_id: str
    name: str
    avatar: str
    points: int


def is_correct_guess(text: str, word: str | None) -> bool:
    """Case-insensitive exact match; only surrounding whitespace is ignored."""
    if not word:
        return False
    return (text or "").strip().lower() == word.strip().lower()


def score_guess(
    remaining_sec: float,
    duration_sec: float,
    base_points: int | None = None,
    max_bonus: int | None = None,
) -> int:
    """
    Points for a correct guess: a flat base plus a time bonus that decays
    linearly from ``max_bonus`` at turn start to 0 at the deadline.
    """
    base = Config.BASE_POINTS if base_points is None else base_points
    bonus_cap = Config.MAX_TIME_BONUS if max_bonus is None else max_bonus
    if duration_sec <= 0:
        return base
    remaining = min(max(remaining_sec, 0.0), float(duration_sec))
    return base + math.floor(remaining / duration_sec * bonus_cap)


def submit_guess(
    db: Session,
    code: str,
    player_id: str,
    text: str,
    turn_no: int | None = None,
    now: datetime.datetime | None = None,
) -> GuessOutcome:
    """
    Evaluate a guess from ``player_id``.

    A wrong guess is only appended to the chat. A right one credits the
    guesser and the drawer, marks the guesser as solved, and ends the
    turn straight away once every non-drawer has solved it. The check
    that the guesser has not been credited yet lives in the same
    transaction as the score changes.
    """
    code = normalize_code(code)
    guess = (text or "").strip()
    if not guess:
        return GuessOutcome(applied=False, reason="empty")

    game = get_game(db, code)
    guesser = get_player(db, code, player_id)

    if game.status != PLAYING:
        return GuessOutcome(applied=False, reason="not_playing")
    if player_id == game.current_drawer_id:
        return GuessOutcome(applied=False, reason="drawer_cannot_guess")
    if turn_no is not None and turn_no != game.turn_no:
        return GuessOutcome(applied=False, reason="stale_turn")

    if not is_correct_guess(guess, game.current_word):
        msg = add_message(db, code, guess, "guess", guesser)
        db.commit()
        db.refresh(msg)
        return GuessOutcome(applied=True, correct=False, turn_no=game.turn_no, message=msg)

    at = now or utcnow()

    def work(db: Session) -> GuessOutcome:
        game = get_game(db, code)
        if game.status != PLAYING:
            return GuessOutcome(applied=False, reason="not_playing")
        if player_id == game.current_drawer_id:
            return GuessOutcome(applied=False, reason="drawer_cannot_guess")
        # The turn moved on between the first read and this one.
        if (turn_no is not None and turn_no != game.turn_no) or not is_correct_guess(guess, game.current_word):
            return GuessOutcome(applied=False, reason="stale_turn")
        if player_id in (game.correct_guessers or []):
            return GuessOutcome(applied=False, correct=True, reason="already_guessed", turn_no=game.turn_no)

        guesser = get_player(db, code, player_id)
        drawer = db.get(Player, (code, game.current_drawer_id))
        if drawer is None:
            raise PlayerNotFound("Drawer not found")

        remaining = seconds_until(game.turn_ends_at, at) if game.turn_ends_at else 0.0
        guesser_points = score_guess(remaining, game.turn_duration_sec)
        drawer_points = Config.DRAWER_POINTS

        guesser.score = Player.score + guesser_points
        drawer.score = Player.score + drawer_points
        solved = [*(game.correct_guessers or []), player_id]
        game.correct_guessers = solved

        db.add(
            CorrectGuess(
                game_id=game.id,
                turn_no=game.turn_no,
                round=game.round,
                player_id=player_id,
                drawer_id=drawer.id,
                guesser_points=guesser_points,
                drawer_points=drawer_points,
            )
        )
        msg = add_message(db, code, f"{guesser.name} guessed the word!", "correct", guesser)

        non_drawers = {p.id for p in ordered_players(db, code) if p.id != game.current_drawer_id}
        all_guessed = bool(non_drawers) and non_drawers.issubset(solved)

        return GuessOutcome(
            applied=True,
            correct=True,
            turn_no=game.turn_no,
            guesser_points=guesser_points,
            drawer_points=drawer_points,
            all_guessed=all_guessed,
            message=msg,
        )

    outcome = run_in_transaction(db, work, label=f"correct guess {code}")
    if not outcome.applied:
        logger.debug("Guess by %s in room %s ignored: %s", player_id, code, outcome.reason)
        return outcome

    db.refresh(outcome.message)
    logger.info(
        "Room %s: %s solved turn %d for %d points",
        code, player_id, outcome.turn_no, outcome.guesser_points,
    )

    if outcome.all_guessed:
        try:
            outcome.advance = advance_turn(db, code, expected_turn=outcome.turn_no)
        except ContentionError:
            # The points are already committed; the deadline timer ends the turn.
            logger.warning("Room %s: early advance after turn %d gave up under contention", code, outcome.turn_no)
            outcome.advance = TurnOutcome(applied=False, reason="contention")
    return outcome


def turn_scores(db: Session, code: str, turn_no: int) -> list[TurnScore]:
    """Points each player gained during one turn, best first."""
    code = normalize_code(code)
    game = get_game(db, code)

    rows = (
        db.query(CorrectGuess)
        .filter(CorrectGuess.game_id == game.id, CorrectGuess.turn_no == turn_no)
        .all()
    )
    points: dict[str, int] = {}
    for row in rows:
        points[row.player_id] = points.get(row.player_id, 0) + row.guesser_points
        points[row.drawer_id] = points.get(row.drawer_id, 0) + row.drawer_points

    scores = []
    for p in ordered_players(db, code):
        if points.get(p.id):
            scores.append(TurnScore(player_id=p.id, name=p.name, avatar=p.avatar, points=points[p.id]))
    return sorted(scores, key=lambda s: -s.points)

