from .room import Room, Player
from .game import Game, CorrectGuess
from .message import Message
from .drawing import DrawingPoint

__all__ = [
    "Room",
    "Player",
    "Game",
    "CorrectGuess",
    "Message",
    "DrawingPoint",
]
