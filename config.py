import os
from dotenv import load_dotenv
load_dotenv()


def _csv(value):
    return [v.strip() for v in (value or "").split(",") if v.strip()]


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///recruiting.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    TOKEN_MAX_AGE = int(os.getenv("TOKEN_MAX_AGE", "86400"))
    # JSON API: forms are validated from request bodies, not HTML posts
    WTF_CSRF_ENABLED = False

    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    OPENAI_TIMEOUT = float(os.getenv("OPENAI_TIMEOUT", "60"))
    OPENAI_MAX_ATTEMPTS = int(os.getenv("OPENAI_MAX_ATTEMPTS", "3"))

    SHORTLIST_MODELS = _csv(os.getenv("SHORTLIST_MODELS", "gpt-4o,gpt-4-turbo,gpt-4,gpt-3.5-turbo"))
    SHORTLIST_FALLBACK_MODEL = os.getenv("SHORTLIST_FALLBACK_MODEL", "gpt-4o")
    SHORTLIST_TEMPERATURE = float(os.getenv("SHORTLIST_TEMPERATURE", "0.3"))
    SHORTLIST_MAX_WORKERS = int(os.getenv("SHORTLIST_MAX_WORKERS", "1"))
    SHORTLIST_LOCK_TIMEOUT = int(os.getenv("SHORTLIST_LOCK_TIMEOUT", "900"))
