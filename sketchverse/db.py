# sketchverse/db.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import Config

DATABASE_URL = Config.DATABASE_URL

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # Timer threads open their own sessions on the same SQLite file
    connect_args = {"check_same_thread": False, "timeout": 15}

engine = create_engine(DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
