# tests/test_scheduler.py
import threading
import time
from types import SimpleNamespace

from sqlalchemy.orm import Session

from sketchverse.db import SessionLocal
from sketchverse.services import membership, turns
from sketchverse.services.errors import ContentionError
from sketchverse.services.scheduler import TurnScheduler
from sketchverse.services.turns import TurnOutcome
from sketchverse.timeutils import seconds_from_now


class _NullSession:
    def close(self):
        pass


def _recording_scheduler():
    calls = []
    fired = threading.Event()

    def fake_advance(db, code, expected_turn=None):
        calls.append((code, expected_turn))
        fired.set()
        return TurnOutcome(applied=False, reason="stale_turn")

    scheduler = TurnScheduler(session_factory=_NullSession, advance=fake_advance)
    return scheduler, calls, fired


def _game(code="ROOM01", status="playing", turn_no=1, ends_in=0.01):
    return SimpleNamespace(
        room_code=code,
        status=status,
        turn_no=turn_no,
        turn_ends_at=seconds_from_now(ends_in) if ends_in is not None else None,
    )


def test_timer_fires_for_its_turn():
    scheduler, calls, fired = _recording_scheduler()
    scheduler.schedule("ROOM01", 3, 0.01)

    assert fired.wait(2)
    assert calls == [("ROOM01", 3)]
    assert scheduler.scheduled_turn("ROOM01") is None


def test_rescheduling_replaces_the_old_timer():
    scheduler, calls, fired = _recording_scheduler()
    scheduler.schedule("ROOM01", 1, 0.05)
    scheduler.schedule("ROOM01", 2, 0.05)
    assert scheduler.scheduled_turn("ROOM01") == 2

    assert fired.wait(2)
    time.sleep(0.15)
    assert calls == [("ROOM01", 2)]


def test_same_turn_is_not_armed_twice():
    scheduler, calls, fired = _recording_scheduler()
    scheduler.schedule("ROOM01", 1, 0.05)
    scheduler.schedule("ROOM01", 1, 0.05)

    assert fired.wait(2)
    time.sleep(0.15)
    assert calls == [("ROOM01", 1)]


def test_cancel_stops_the_timer():
    scheduler, calls, _ = _recording_scheduler()
    scheduler.schedule("ROOM01", 1, 0.05)
    scheduler.cancel("ROOM01")

    time.sleep(0.2)
    assert calls == []
    assert scheduler.scheduled_turn("ROOM01") is None


def test_track_cancels_when_game_is_not_playing():
    scheduler, calls, _ = _recording_scheduler()
    scheduler.schedule("ROOM01", 1, 0.1)
    scheduler.track(_game(status="ended"))

    time.sleep(0.25)
    assert calls == []


def test_disabled_scheduler_arms_nothing():
    scheduler, calls, _ = _recording_scheduler()
    scheduler.enabled = False
    scheduler.track(_game())

    assert scheduler.scheduled_turn("ROOM01") is None
    time.sleep(0.1)
    assert calls == []


def test_shutdown_cancels_everything():
    scheduler, calls, _ = _recording_scheduler()
    scheduler.schedule("ROOM01", 1, 0.05)
    scheduler.schedule("ROOM02", 1, 0.05)
    scheduler.shutdown()

    time.sleep(0.2)
    assert calls == []


def test_expired_deadline_advances_the_real_game(db: Session):
    code = "ROOM01"
    for pid in ("a", "b"):
        membership.join_room(db, code, pid, name=pid.upper())
    turns.create_game(db, code, "a")
    turns.start_game(db, code, "a")

    game = turns.get_game(db, code)
    game.turn_ends_at = seconds_from_now(-1)
    db.commit()

    scheduler = TurnScheduler(session_factory=SessionLocal)
    try:
        scheduler.track(game)

        deadline = time.monotonic() + 5
        while time.monotonic() < deadline:
            db.expire_all()
            if turns.get_game(db, code).turn_no == 2 and scheduler.scheduled_turn(code) == 2:
                break
            time.sleep(0.05)

        game = turns.get_game(db, code)
        assert game.turn_no == 2
        assert game.current_drawer_id == "b"
        # re-armed for the new turn
        assert scheduler.scheduled_turn(code) == 2
    finally:
        scheduler.shutdown()


def test_resume_arms_running_games(db: Session):
    for pid in ("a", "b"):
        membership.join_room(db, "ROOM01", pid)
    turns.create_game(db, "ROOM01", "a")
    turns.start_game(db, "ROOM01", "a")

    scheduler, calls, _ = _recording_scheduler()
    try:
        scheduler.resume(db)
        assert scheduler.scheduled_turn("ROOM01") == 1
    finally:
        scheduler.shutdown()
    assert calls == []


def _flaky_scheduler(failures: int, **kwargs):
    """Scheduler whose advance raises ContentionError `failures` times, then succeeds."""
    calls = []
    done = threading.Event()

    def flaky_advance(db, code, expected_turn=None):
        calls.append(expected_turn)
        if len(calls) <= failures:
            raise ContentionError()
        done.set()
        return TurnOutcome(applied=False, reason="stale_turn")

    scheduler = TurnScheduler(
        session_factory=_NullSession,
        advance=flaky_advance,
        retry_delay_sec=0.01,
        **kwargs,
    )
    return scheduler, calls, done


def test_failed_firing_is_retried_for_the_same_turn():
    scheduler, calls, done = _flaky_scheduler(failures=1)
    try:
        scheduler.schedule("ROOM01", 1, 0.01)

        assert done.wait(2)
        assert calls == [1, 1]
    finally:
        scheduler.shutdown()


def test_failed_firing_gives_up_after_max_attempts():
    scheduler, calls, done = _flaky_scheduler(failures=10, max_fire_attempts=3)
    try:
        scheduler.schedule("ROOM01", 1, 0.01)

        time.sleep(0.3)
        assert calls == [1, 1, 1]
        assert not done.is_set()
        assert scheduler.scheduled_turn("ROOM01") is None
    finally:
        scheduler.shutdown()


def test_retry_does_not_replace_a_newer_turn():
    calls = []
    first_failed = threading.Event()

    def advance(db, code, expected_turn=None):
        calls.append(expected_turn)
        if expected_turn == 1:
            # turn 2 gets armed while turn 1's firing is failing
            scheduler.schedule(code, 2, 0.5)
            first_failed.set()
            raise ContentionError()
        return TurnOutcome(applied=False, reason="stale_turn")

    scheduler = TurnScheduler(session_factory=_NullSession, advance=advance, retry_delay_sec=0.01)
    try:
        scheduler.schedule("ROOM01", 1, 0.01)
        assert first_failed.wait(2)
        time.sleep(0.1)

        assert calls == [1]
        assert scheduler.scheduled_turn("ROOM01") == 2
    finally:
        scheduler.shutdown()
