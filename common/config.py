from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _default_env_file() -> str:
    # .env next to pyproject.toml, shared by the relay and local tooling.
    repo_root = Path(__file__).resolve().parents[1]
    return str(repo_root / ".env")


@dataclass(frozen=True)
class Settings:
    database_url: str
    readings_table: str

    host: str
    port: int
    log_level: str


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("RELAY_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    database_url = os.getenv("DATABASE_URL", "sqlite:///./tank_relay.db")
    readings_table = os.getenv("READINGS_TABLE", "tank_readings")

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3000"))
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    return Settings(
        database_url=database_url,
        readings_table=readings_table,
        host=host,
        port=port,
        log_level=log_level,
    )
