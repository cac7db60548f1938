import os

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite+aiosqlite:///./linkforge.db")
DATABASE_URL_ASYNC = DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")
SQL_ECHO = os.environ.get("SQL_ECHO", "false").lower() in ("1", "true", "yes")
REDIS_URL = os.environ.get("REDIS_URL", "redis://redis:6379/0")
STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "sql")

BASE_DOMAIN = os.environ.get("BASE_DOMAIN", "https://short.ly")
SHORTEN_DELAY_SECONDS = float(os.environ.get("SHORTEN_DELAY_SECONDS", 0.5))
ACTIVITY_LOG_LIMIT = int(os.environ.get("ACTIVITY_LOG_LIMIT", 100))

URLS_KEY = "linkforge_urls"
ACTIVITIES_KEY = "linkforge_activities"
DARK_MODE_KEY = "linkforge_dark_mode"
