from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url

# Resolve .env from the project root (one level above server/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

VERSION = "1.0.0"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = "development"

    # Storage
    database_url: str = "sqlite+aiosqlite:///./data/music_library.db"
    db_timeout_seconds: float = 3.0
    db_echo: bool = False

    # External music info API used to enrich new songs
    music_info_api_url: str = ""
    music_info_timeout_seconds: float = 10.0

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 4000

    # App settings
    cors_origins: str = "http://localhost:5173"
    log_level: str = "INFO"
    log_json: bool = True

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.database_url).get_backend_name() == "sqlite"

    @property
    def sqlite_path(self) -> Path | None:
        """Database file for SQLite URLs, None for in-memory or other backends."""
        if not self.is_sqlite:
            return None
        database = make_url(self.database_url).database
        if not database or database == ":memory:":
            return None
        return Path(database)


settings = Settings()
