# tests/conftest.py
import os

# Must be set before the app (and its Config) is imported
os.environ.setdefault("SKETCHVERSE_DATABASE_URL", "sqlite:///./test_sketchverse.db")
os.environ.setdefault("SKETCHVERSE_AUTO_ADVANCE", "0")

import pytest
from sqlalchemy.orm import Session
from fastapi.testclient import TestClient

from sketchverse.db import Base, engine, SessionLocal
from sketchverse.main import app


@pytest.fixture(scope="function")
def db() -> Session:
    """
    Clean database per test, on the same engine the app uses.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client() -> TestClient:
    """
    TestClient on the real app, no dependency overrides.
    """
    with TestClient(app) as c:
        yield c
