from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from infrastructure.db.ledger_repository_sqlite import DEFAULT_LEDGER_KEY


@dataclass(frozen=True)
class Settings:
    discord_token: Optional[str]
    telegram_token: Optional[str]
    db_path: str
    ledger_key: str
    export_dir: str
    log_level: str


def load_settings() -> Settings:
    """Read configuration from the environment (and a `.env` file, if any)."""

    load_dotenv()

    return Settings(
        discord_token=os.environ.get("DISCORD_TOKEN"),
        telegram_token=os.environ.get("TELEGRAM_TOKEN"),
        db_path=os.environ.get("DB_PATH", "poker.db"),
        ledger_key=os.environ.get("LEDGER_KEY", DEFAULT_LEDGER_KEY),
        export_dir=os.environ.get("EXPORT_DIR", "exports"),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
    )
