"""Exceptions raised by the game engines.

Precondition violations (guessing as the drawer, acting without host
privilege, ...) are not errors: the engines report them through the
``applied``/``reason`` fields of their outcome objects instead.
"""


class SketchVerseError(Exception):
    status_code = 400
    detail = "Request failed"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.detail)
        self.detail = detail or self.detail


class RoomNotFound(SketchVerseError):
    status_code = 404
    detail = "Room not found"


class GameNotFound(SketchVerseError):
    status_code = 404
    detail = "Game not found"


class PlayerNotFound(SketchVerseError):
    status_code = 404
    detail = "Player not found"


class RoomFull(SketchVerseError):
    status_code = 409
    detail = "Room is full"


class GameAlreadyExists(SketchVerseError):
    status_code = 409
    detail = "Game already exists"


class NotEnoughPlayers(SketchVerseError):
    status_code = 400
    detail = "Need at least 2 players"


class ContentionError(SketchVerseError):
    """Every transaction attempt lost against a concurrent writer."""

    status_code = 409
    detail = "Too many concurrent updates, please retry"
