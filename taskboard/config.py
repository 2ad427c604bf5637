"""Application settings read from the environment."""

import os
from dataclasses import dataclass, field


def _split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the API server and the client adapter."""

    database_url: str = "sqlite+aiosqlite:///./taskboard.db"
    db_echo: bool = False
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 5000
    api_url: str = "http://localhost:5000"
    storage_path: str = ".taskboard/local_storage.json"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            db_echo=os.getenv("DB_ECHO", "false").lower() == "true",
            cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "*")),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            host=os.getenv("HOST", cls.host),
            port=int(os.getenv("PORT", str(cls.port))),
            api_url=os.getenv("TASKBOARD_API_URL", cls.api_url),
            storage_path=os.getenv("TASKBOARD_STORAGE_PATH", cls.storage_path),
        )
