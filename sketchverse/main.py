import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import models  # noqa: F401  (registers tables on Base)
from .api.v1 import api_router as api_v1_router
from .config import Config
from .db import Base, SessionLocal, engine
from .services.errors import SketchVerseError
from .services.scheduler import turn_scheduler

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create tables from the models (development setup)
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Games that were running before a restart get their deadline timers back
    db = SessionLocal()
    try:
        turn_scheduler.resume(db)
    finally:
        db.close()
    yield
    turn_scheduler.shutdown()


app = FastAPI(
    title="SketchVerse API",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(SketchVerseError)
async def sketchverse_error_handler(request: Request, exc: SketchVerseError):
    logger.info("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


app.include_router(api_v1_router, prefix="/api")


@app.get("/")
def read_root():
    return {"message": "SketchVerse API is running"}
