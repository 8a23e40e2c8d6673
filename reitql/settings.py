from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass
class Settings:
    database_url: str = "sqlite+aiosqlite:///:memory:"
    walking_meters_per_minute: int = 80
    default_page_limit: int = 10
    sql_echo: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()

        def _bool(name: str, default: str) -> bool:
            return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}

        return cls(
            database_url=os.getenv("REITQL_DATABASE_URL", cls.database_url).strip(),
            walking_meters_per_minute=int(os.getenv("REITQL_WALKING_METERS_PER_MINUTE", "80")),
            default_page_limit=int(os.getenv("REITQL_DEFAULT_PAGE_LIMIT", "10")),
            sql_echo=_bool("SQL_ECHO", "false"),
        )
