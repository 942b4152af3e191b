# sketchverse/config.py
import os


def _env(name: str, default: str) -> str:
    return os.environ.get(f"SKETCHVERSE_{name}", default)


class Config:
    # Storage
    DATABASE_URL = _env("DATABASE_URL", "sqlite:///./sketchverse.db")
    TRANSACTION_RETRIES = int(_env("TRANSACTION_RETRIES", "5"))

    # Room
    MAX_PLAYERS = int(_env("MAX_PLAYERS", "5"))
    MIN_PLAYERS = int(_env("MIN_PLAYERS", "2"))

    # Turns
    TURN_DURATION_SEC = int(_env("TURN_DURATION_SEC", "90"))
    TOTAL_ROUNDS = int(_env("TOTAL_ROUNDS", "5"))
    # Server-side timer that advances a turn when its deadline passes
    AUTO_ADVANCE = _env("AUTO_ADVANCE", "1") == "1"
    # Delay before a failed deadline timer tries again
    TIMER_RETRY_SEC = float(_env("TIMER_RETRY_SEC", "1"))

    # Scoring
    BASE_POINTS = int(_env("BASE_POINTS", "50"))
    MAX_TIME_BONUS = int(_env("MAX_TIME_BONUS", "50"))
    DRAWER_POINTS = int(_env("DRAWER_POINTS", "25"))

    # Hint service (OpenAI-compatible chat completions endpoint)
    HINT_API_URL = _env("HINT_API_URL", "https://api.groq.com/openai/v1/chat/completions")
    HINT_API_KEY = _env("HINT_API_KEY", "")
    HINT_MODEL = _env("HINT_MODEL", "llama-3.1-8b-instant")
    HINT_TIMEOUT_SEC = float(_env("HINT_TIMEOUT_SEC", "10"))

    LOG_LEVEL = _env("LOG_LEVEL", "INFO")
