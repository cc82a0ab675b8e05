# FILE: config.py
import os


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_seed():
    raw = os.getenv("QUESTION_SHUFFLE_SEED", "").strip()
    return int(raw) if raw else None


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///interview.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Empty key means fallback-only mode, not an error.
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    AI_TIMEOUT_SECONDS = float(os.getenv("AI_TIMEOUT_SECONDS", "30"))

    # Deferred job scheduling (seconds).
    FEEDBACK_DELAY_SECONDS = float(os.getenv("FEEDBACK_DELAY_SECONDS", "3"))
    RETRY_FEEDBACK_DELAY_SECONDS = float(os.getenv("RETRY_FEEDBACK_DELAY_SECONDS", "5"))
    SYNTHESIS_MAX_DEFERRALS = int(os.getenv("SYNTHESIS_MAX_DEFERRALS", "2"))
    WORKER_POLL_SECONDS = float(os.getenv("WORKER_POLL_SECONDS", "0.5"))
    START_WORKER = _env_flag("START_WORKER", "1")

    MAX_TOTAL_QUESTIONS = int(os.getenv("MAX_TOTAL_QUESTIONS", "20"))
    QUESTION_POOL = os.getenv("QUESTION_POOL", "balanced")
    QUESTION_SHUFFLE_SEED = _env_seed()


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    GEMINI_API_KEY = ""
    START_WORKER = False
    QUESTION_SHUFFLE_SEED = 7
