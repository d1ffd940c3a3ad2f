import os

from dotenv import load_dotenv

load_dotenv()


def _int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name) or default)
    except ValueError:
        return default


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./link.db")

# Handle Render's postgres:// -> postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

SESSION_SECRET = os.getenv("SESSION_SECRET", "dev-secret")
SESSION_EXPIRE_MINUTES = _int("SESSION_EXPIRE_MINUTES", 60 * 24 * 30)
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "link_session")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")]
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
PUBLIC_URL = os.getenv("PUBLIC_URL", "http://localhost:8000")

GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")

MEDIA_ROOT = os.getenv("MEDIA_ROOT", "./media")
MEDIA_URL = os.getenv("MEDIA_URL", "/media")

SENTRY_DSN = os.getenv("SENTRY_DSN")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
