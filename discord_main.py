from application.services import attach_persistence, load_ledger
from infrastructure.db.ledger_repository_sqlite import SqliteLedgerRepository
from infrastructure.export.json_export_writer import JsonExportWriter
from infrastructure.logging_setup import setup_logging
from interfaces.discord.handlers import create_discord_bot
from settings import load_settings


def main() -> None:
    settings = load_settings()
    if not settings.discord_token:
        raise RuntimeError("DISCORD_TOKEN environment variable is not set.")

    setup_logging(settings.log_level)

    repo = SqliteLedgerRepository(settings.db_path, settings.ledger_key)
    ledger = load_ledger(repo)
    attach_persistence(ledger, repo)

    bot = create_discord_bot(ledger, JsonExportWriter(settings.export_dir))
    # discord.py installs its own handler unless told not to; ours is already set.
    bot.run(settings.discord_token, log_handler=None)


if __name__ == "__main__":
    main()
