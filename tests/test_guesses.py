# tests/test_guesses.py
import datetime

import pytest
from sqlalchemy.orm import Session

from sketchverse.models.game import CorrectGuess
from sketchverse.models.message import Message
from sketchverse.models.room import Player
from sketchverse.services import guesses, membership, turns
from sketchverse.services.errors import ContentionError, GameNotFound, PlayerNotFound

T0 = datetime.datetime(2026, 1, 1, 12, 0, 0)


def _setup_game(db: Session, player_ids=("a", "b", "c"), word: str = "Star", code: str = "ROOM01"):
    """Running game, `a` drawing `word`, turn started at T0 with 90s on the clock."""
    for pid in player_ids:
        membership.join_room(db, code, pid, name=pid.upper())
    turns.create_game(db, code, player_ids[0])
    turns.start_game(db, code, player_ids[0], now=T0)
    game = turns.get_game(db, code)
    game.current_word = word
    db.commit()
    return code


def _score(db: Session, code: str, player_id: str) -> int:
    db.expire_all()
    return db.get(Player, (code, player_id)).score


def _at(seconds: float) -> datetime.datetime:
    return T0 + datetime.timedelta(seconds=seconds)


# -----------------------------
# Pure helpers
# -----------------------------

def test_score_guess_with_half_the_time_left():
    # 45s of 90s remaining -> floor(45/90 * 50) + 50
    assert guesses.score_guess(45, 90, base_points=50, max_bonus=50) == 75


def test_score_guess_bounds():
    assert guesses.score_guess(90, 90, base_points=50, max_bonus=50) == 100
    assert guesses.score_guess(0, 90, base_points=50, max_bonus=50) == 50
    assert guesses.score_guess(-5, 90, base_points=50, max_bonus=50) == 50
    assert guesses.score_guess(500, 90, base_points=50, max_bonus=50) == 100
    assert guesses.score_guess(30, 90, base_points=50, max_bonus=50) == 66


def test_score_guess_uses_configured_defaults():
    assert guesses.score_guess(45, 90) == 75


@pytest.mark.parametrize(
    "text, expected",
    [
        ("star", True),
        ("  STAR  ", True),
        ("Star", True),
        ("stars", False),
        ("st ar", False),
        ("", False),
    ],
)
def test_is_correct_guess(text, expected):
    assert guesses.is_correct_guess(text, "Star") is expected


def test_is_correct_guess_without_word():
    assert guesses.is_correct_guess("star", None) is False


# -----------------------------
# submit_guess
# -----------------------------

def test_wrong_guess_only_appends_message(db: Session):
    code = _setup_game(db)
    outcome = guesses.submit_guess(db, code, "b", "  moon ", now=_at(10))

    assert outcome.applied is True
    assert outcome.correct is False
    assert outcome.message.type == "guess"
    assert outcome.message.text == "moon"
    assert outcome.message.player_name == "B"

    assert _score(db, code, "b") == 0
    assert turns.get_game(db, code).correct_guessers == []


def test_correct_guess_scores_guesser_and_drawer(db: Session):
    code = _setup_game(db)
    outcome = guesses.submit_guess(db, code, "b", "STAR", now=_at(45))

    assert outcome.applied is True
    assert outcome.correct is True
    assert outcome.guesser_points == 75
    assert outcome.drawer_points == 25
    assert outcome.all_guessed is False
    assert outcome.message.type == "correct"
    assert outcome.message.text == "B guessed the word!"

    assert _score(db, code, "b") == 75
    assert _score(db, code, "a") == 25
    assert _score(db, code, "c") == 0
    assert turns.get_game(db, code).correct_guessers == ["b"]


def test_duplicate_correct_guess_credits_once(db: Session):
    code = _setup_game(db)
    guesses.submit_guess(db, code, "b", "star", now=_at(45))
    again = guesses.submit_guess(db, code, "b", "star", now=_at(46))

    assert again.applied is False
    assert again.reason == "already_guessed"
    assert _score(db, code, "b") == 75
    assert _score(db, code, "a") == 25
    assert db.query(CorrectGuess).count() == 1
    assert db.query(Message).filter(Message.type == "correct").count() == 1


def test_drawer_cannot_guess(db: Session):
    code = _setup_game(db)
    before = db.query(Message).count()

    outcome = guesses.submit_guess(db, code, "a", "star", now=_at(10))
    assert outcome.applied is False
    assert outcome.reason == "drawer_cannot_guess"

    outcome = guesses.submit_guess(db, code, "a", "anything", now=_at(10))
    assert outcome.applied is False

    assert db.query(Message).count() == before
    assert _score(db, code, "a") == 0


def test_empty_guess_is_ignored(db: Session):
    code = _setup_game(db)
    before = db.query(Message).count()
    outcome = guesses.submit_guess(db, code, "b", "   ")
    assert outcome.applied is False
    assert outcome.reason == "empty"
    assert db.query(Message).count() == before


def test_every_drawer_award_counts(db: Session):
    code = _setup_game(db, player_ids=("a", "b", "c", "d"))
    guesses.submit_guess(db, code, "b", "star", now=_at(0))
    guesses.submit_guess(db, code, "c", "star", now=_at(45))

    assert _score(db, code, "b") == 100
    assert _score(db, code, "c") == 75
    assert _score(db, code, "a") == 50


def test_all_guessed_advances_turn(db: Session):
    code = _setup_game(db)
    first = guesses.submit_guess(db, code, "b", "star", now=_at(10))
    assert first.all_guessed is False
    assert first.advance is None

    second = guesses.submit_guess(db, code, "c", "star", now=_at(20))
    assert second.all_guessed is True
    assert second.advance is not None
    assert second.advance.applied is True

    game = turns.get_game(db, code)
    assert game.turn_no == 2
    assert game.current_drawer_id == "b"
    assert game.correct_guessers == []


def test_guess_after_turn_moved_on_is_rejected(db: Session):
    code = _setup_game(db)
    turns.advance_turn(db, code)

    outcome = guesses.submit_guess(db, code, "c", "star", turn_no=1)
    assert outcome.applied is False
    assert outcome.reason == "stale_turn"
    assert _score(db, code, "c") == 0


def test_guess_when_not_playing_is_ignored(db: Session):
    membership.join_room(db, "ROOM02", "a")
    membership.join_room(db, "ROOM02", "b")
    turns.create_game(db, "ROOM02", "a")

    outcome = guesses.submit_guess(db, "ROOM02", "b", "star")
    assert outcome.applied is False
    assert outcome.reason == "not_playing"


def test_guess_without_game_raises(db: Session):
    membership.join_room(db, "ROOM02", "a")
    with pytest.raises(GameNotFound):
        guesses.submit_guess(db, "ROOM02", "a", "star")


def test_guess_from_unknown_player_raises(db: Session):
    code = _setup_game(db)
    with pytest.raises(PlayerNotFound):
        guesses.submit_guess(db, code, "zed", "star")


def test_late_correct_guess_gets_base_points(db: Session):
    code = _setup_game(db)
    outcome = guesses.submit_guess(db, code, "b", "star", now=_at(120))
    assert outcome.guesser_points == 50


def test_turn_scores_summary(db: Session):
    code = _setup_game(db, player_ids=("a", "b", "c", "d"))
    guesses.submit_guess(db, code, "c", "star", now=_at(0))
    guesses.submit_guess(db, code, "b", "star", now=_at(45))

    scores = guesses.turn_scores(db, code, 1)
    assert [(s.player_id, s.points) for s in scores] == [("c", 100), ("b", 75), ("a", 50)]
    assert guesses.turn_scores(db, code, 2) == []


def test_last_guess_keeps_points_when_early_advance_is_contended(db: Session, monkeypatch):
    code = _setup_game(db)
    guesses.submit_guess(db, code, "b", "star", now=_at(10))

    def contended_advance(*args, **kwargs):
        raise ContentionError()

    monkeypatch.setattr(guesses, "advance_turn", contended_advance)
    outcome = guesses.submit_guess(db, code, "c", "star", now=_at(45))

    assert outcome.applied is True
    assert outcome.correct is True
    assert outcome.all_guessed is True
    assert outcome.advance.applied is False
    assert outcome.advance.reason == "contention"

    assert _score(db, code, "c") == 75
    game = turns.get_game(db, code)
    assert game.turn_no == 1
    assert game.correct_guessers == ["b", "c"]
