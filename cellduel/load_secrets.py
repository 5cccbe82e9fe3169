import os
import pathlib
from dotenv import load_dotenv

load_dotenv()

user = os.getenv("DB_USER")
password = os.getenv("DB_PASSWORD")
host = os.getenv("DB_HOST")
port = os.getenv("DB_PORT", "5432")
db_name = os.getenv("DB_NAME")

redis_host = os.getenv("REDIS_HOST", "redis")
redis_port = int(os.getenv("REDIS_PORT", "6379"))
redis_enabled = os.getenv("REDIS_ENABLED", "true").lower() in ("1", "true", "yes")

auto_tick_interval_seconds = float(os.getenv("AUTO_TICK_INTERVAL_SECONDS", "1.0"))
log_level = os.getenv("LOG_LEVEL", "INFO").upper()


def get_database_url() -> str:
    """DATABASE_URL, else PostgreSQL from DB_* settings, else a local sqlite file."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    if host:
        return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db_name}"
    file_path = pathlib.Path(__file__).parents[1] / "cellduel.sqlite3"
    return f"sqlite+aiosqlite:///{file_path}"


database_url = get_database_url()

if __name__ == "__main__":
    print(database_url, redis_host, redis_port, auto_tick_interval_seconds)
