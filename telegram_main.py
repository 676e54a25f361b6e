import logging

from application.services import attach_persistence, load_ledger
from infrastructure.db.ledger_repository_sqlite import SqliteLedgerRepository
from infrastructure.export.json_export_writer import JsonExportWriter
from infrastructure.logging_setup import setup_logging
from interfaces.telegram.handlers import create_telegram_bot
from settings import load_settings


logger = logging.getLogger(__name__)


def main() -> None:
    settings = load_settings()
    if not settings.telegram_token:
        raise RuntimeError("TELEGRAM_TOKEN environment variable is not set.")

    setup_logging(settings.log_level)

    repo = SqliteLedgerRepository(settings.db_path, settings.ledger_key)
    ledger = load_ledger(repo)
    attach_persistence(ledger, repo)

    bot = create_telegram_bot(
        settings.telegram_token,
        ledger,
        JsonExportWriter(settings.export_dir),
    )
    logger.info("Telegram bot polling")
    bot.infinity_polling()


if __name__ == "__main__":
    main()
