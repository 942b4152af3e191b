# sketchverse/api/v1/__init__.py

from fastapi import APIRouter

from . import rooms, games, drawing, debug

api_router = APIRouter()

# Each router carries its own prefix
api_router.include_router(rooms.router)    # /rooms
api_router.include_router(games.router)    # /games
api_router.include_router(drawing.router)  # /rooms/{code}/drawing
api_router.include_router(debug.router)    # /debug
