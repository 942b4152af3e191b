# sketchverse/services/scheduler.py
import logging
import threading
from collections.abc import Callable

from sqlalchemy.orm import Session

from ..config import Config
from ..db import SessionLocal
from ..models.game import Game
from ..timeutils import seconds_until
from .turns import PLAYING, TurnOutcome, advance_turn

logger = logging.getLogger(__name__)


class TurnScheduler:
    """
    One cancellable deadline timer per room.

    A timer is armed for a specific turn number. When it fires it calls
    ``advance_turn(expected_turn=...)``, so a timer that outlived its turn
    (rescheduled, duplicated after a restart, raced by the all-guessed
    signal) does nothing. A firing that fails (lock contention, a dropped
    connection) is re-armed for the same turn a bounded number of times.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        advance: Callable[..., TurnOutcome] = advance_turn,
        enabled: bool = True,
        retry_delay_sec: float | None = None,
        max_fire_attempts: int | None = None,
    ):
        self._session_factory = session_factory
        self._advance = advance
        self._timers: dict[str, tuple[int, threading.Timer]] = {}
        self._lock = threading.Lock()
        self.enabled = enabled
        self.retry_delay_sec = Config.TIMER_RETRY_SEC if retry_delay_sec is None else retry_delay_sec
        self.max_fire_attempts = max_fire_attempts or Config.TRANSACTION_RETRIES

    def track(self, game: Game | None) -> None:
        """Arm, re-arm or cancel the room's timer to match the game document."""
        if game is None or not self.enabled:
            return
        if game.status != PLAYING or game.turn_ends_at is None:
            self.cancel(game.room_code)
            return
        self.schedule(game.room_code, game.turn_no, seconds_until(game.turn_ends_at))

    def schedule(self, code: str, turn_no: int, delay_sec: float) -> None:
        self._arm(code, turn_no, delay_sec, attempt=1, replace=True)

    def _arm(self, code: str, turn_no: int, delay_sec: float, attempt: int, replace: bool) -> None:
        with self._lock:
            current = self._timers.get(code)
            if current is not None:
                if current[0] == turn_no or not replace:
                    return
                current[1].cancel()

            timer = threading.Timer(delay_sec, self._fire, args=(code, turn_no, attempt))
            timer.daemon = True
            self._timers[code] = (turn_no, timer)
            timer.start()
        logger.debug("Room %s: turn %d deadline in %.1fs", code, turn_no, delay_sec)

    def cancel(self, code: str) -> None:
        with self._lock:
            current = self._timers.pop(code, None)
        if current is not None:
            current[1].cancel()

    def scheduled_turn(self, code: str) -> int | None:
        with self._lock:
            current = self._timers.get(code)
        return current[0] if current else None

    def resume(self, db: Session) -> None:
        """Re-arm timers for every running game, e.g. after a restart."""
        for game in db.query(Game).filter(Game.status == PLAYING).all():
            self.track(game)

    def shutdown(self) -> None:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for _, timer in timers:
            timer.cancel()

    def _fire(self, code: str, turn_no: int, attempt: int = 1) -> None:
        with self._lock:
            current = self._timers.get(code)
            if current is not None and current[0] == turn_no:
                del self._timers[code]

        db = self._session_factory()
        try:
            outcome = self._advance(db, code, expected_turn=turn_no)
            if outcome.applied:
                self.track(outcome.game)
        except Exception:
            if attempt >= self.max_fire_attempts:
                logger.exception(
                    "Deadline timer for room %s turn %d failed, giving up after %d attempts",
                    code, turn_no, attempt,
                )
                return
            logger.warning(
                "Deadline timer for room %s turn %d failed (attempt %d/%d), retrying in %.1fs",
                code, turn_no, attempt, self.max_fire_attempts, self.retry_delay_sec,
                exc_info=True,
            )
            # A timer armed for a newer turn in the meantime wins.
            self._arm(code, turn_no, self.retry_delay_sec, attempt=attempt + 1, replace=False)
        finally:
            db.close()


turn_scheduler = TurnScheduler(enabled=Config.AUTO_ADVANCE)
