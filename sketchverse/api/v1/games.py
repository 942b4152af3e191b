# sketchverse/api/v1/games.py

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...api.deps import RoomCode, get_db_dep, get_hint_service, get_turn_scheduler
from ...models.game import Game
from ...schemas.game import (
    ActionOut,
    AdvanceRequest,
    GameCreate,
    GameOut,
    GuessCreate,
    GuessOut,
    HostAction,
    TurnScoreItem,
    TurnScoresOut,
)
from ...schemas.message import HintOut, MessageOut
from ...services import guesses, hints, turns
from ...services.hints import HintService
from ...services.scheduler import TurnScheduler
from ...services.words import mask_word
from ...timeutils import seconds_from_now, seconds_until

router = APIRouter(prefix="/games", tags=["games"])


def game_out(game: Game, viewer_id: str | None = None) -> GameOut:
    """Game document as one player sees it."""
    # Older or not yet started games have no deadline
    turn_ends_at = game.turn_ends_at or seconds_from_now(game.turn_duration_sec)
    seconds_left = seconds_until(turn_ends_at) if game.status == turns.PLAYING else 0.0

    word = game.current_word if turns.can_see_word(game, viewer_id) else None
    return GameOut(
        id=game.id,
        room_code=game.room_code,
        status=game.status,
        round=game.round,
        total_rounds=game.total_rounds,
        turn_no=game.turn_no,
        current_drawer_id=game.current_drawer_id,
        turn_started_at=game.turn_started_at,
        turn_ends_at=turn_ends_at,
        turn_duration_sec=game.turn_duration_sec,
        seconds_left=seconds_left,
        correct_guessers=list(game.correct_guessers or []),
        word=word,
        word_mask=None if word else mask_word(game.current_word),
    )


def _action_out(outcome: turns.TurnOutcome, viewer_id: str | None) -> ActionOut:
    return ActionOut(
        applied=outcome.applied,
        reason=outcome.reason,
        game=game_out(outcome.game, viewer_id) if outcome.game is not None else None,
    )


# -----------------------------
# Lobby
# -----------------------------

@router.post("", response_model=ActionOut)
def create_game(
    payload: GameCreate,
    db: Session = Depends(get_db_dep),
):
    """Create the room's game in `waiting`. Host only."""
    settings = payload.settings
    outcome = turns.create_game(
        db,
        payload.room_code,
        payload.player_id,
        turn_duration_sec=settings.turn_duration_sec if settings else None,
        total_rounds=settings.total_rounds if settings else None,
    )
    return _action_out(outcome, payload.player_id)


@router.get("/{code}", response_model=GameOut)
def get_game(
    code: RoomCode,
    viewer_id: Optional[str] = None,
    db: Session = Depends(get_db_dep),
):
    return game_out(turns.get_game(db, code), viewer_id)


@router.post("/{code}/start", response_model=ActionOut)
def start_game(
    code: RoomCode,
    data: HostAction,
    db: Session = Depends(get_db_dep),
    scheduler: TurnScheduler = Depends(get_turn_scheduler),
):
    outcome = turns.start_game(db, code, data.player_id)
    if outcome.applied:
        scheduler.track(outcome.game)
    return _action_out(outcome, data.player_id)


# -----------------------------
# Turns
# -----------------------------

@router.post("/{code}/advance", response_model=ActionOut)
def advance_turn(
    code: RoomCode,
    data: AdvanceRequest,
    db: Session = Depends(get_db_dep),
    scheduler: TurnScheduler = Depends(get_turn_scheduler),
):
    """Host skips to the next turn (or ends the game after the last round)."""
    outcome = turns.advance_turn(
        db,
        code,
        caller_id=data.player_id,
        expected_turn=data.expected_turn,
    )
    if outcome.applied:
        scheduler.track(outcome.game)
    return _action_out(outcome, data.player_id)


@router.post("/{code}/guess", response_model=GuessOut)
def submit_guess(
    code: RoomCode,
    data: GuessCreate,
    db: Session = Depends(get_db_dep),
    scheduler: TurnScheduler = Depends(get_turn_scheduler),
):
    outcome = guesses.submit_guess(db, code, data.player_id, data.text, turn_no=data.turn_no)

    advanced = outcome.advance is not None and outcome.advance.applied
    if advanced:
        scheduler.track(outcome.advance.game)

    game = turns.find_game(db, code)
    return GuessOut(
        applied=outcome.applied,
        correct=outcome.correct,
        reason=outcome.reason,
        guesser_points=outcome.guesser_points,
        drawer_points=outcome.drawer_points,
        all_guessed=outcome.all_guessed,
        turn_advanced=advanced,
        message=MessageOut.model_validate(outcome.message) if outcome.message else None,
        game=game_out(game, data.player_id) if game is not None else None,
    )


@router.get("/{code}/turns/{turn_no}/scores", response_model=TurnScoresOut)
def get_turn_scores(
    code: RoomCode,
    turn_no: int,
    db: Session = Depends(get_db_dep),
):
    """Points gained by each player in one turn (round-end summary)."""
    items = [
        TurnScoreItem(player_id=s.player_id, name=s.name, avatar=s.avatar, points=s.points)
        for s in guesses.turn_scores(db, code, turn_no)
    ]
    game = turns.get_game(db, code)
    return TurnScoresOut(room_code=game.room_code, turn_no=turn_no, items=items)


# -----------------------------
# Hints
# -----------------------------

@router.post("/{code}/hint", response_model=HintOut)
def request_hint(
    code: RoomCode,
    db: Session = Depends(get_db_dep),
    service: HintService = Depends(get_hint_service),
):
    msg = hints.request_hint(db, code, service=service)
    return HintOut(
        applied=msg is not None,
        message=MessageOut.model_validate(msg) if msg else None,
    )
