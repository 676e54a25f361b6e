from __future__ import annotations

import logging
from typing import Optional

import telebot
from telebot.types import InlineKeyboardButton, InlineKeyboardMarkup

from application.services import (
    add_player,
    export_session,
    remove_player,
    render_table,
    reset_all,
    update_player_field,
    verify_table,
)
from domain.ledger import SettlementLedger
from domain.repositories import ExportWriter
from interfaces.telegram.callback_data import (
    encode_remove_confirmation,
    encode_reset_confirmation,
    name_tag,
    parse_remove_confirmation,
    parse_reset_confirmation,
)


logger = logging.getLogger(__name__)

HELP_TEXT = (
    "/add <name>              - add a player to the table\n"
    "/remove <id>             - remove a player\n"
    "/buyin <id> <amount>     - set a player's total buy-in\n"
    "/stack <id> <amount>     - set a player's final chip stack\n"
    "/list                    - show the table and profit/loss\n"
    "/verify                  - check that the table balances\n"
    "/reset                   - clear all players\n"
    "/export                  - download the settlement as JSON\n"
)

_FIELD_BY_COMMAND = {"buyin": "buyIn", "stack": "finalStack"}


def _command_args(message) -> list[str]:
    """Split a command message into its arguments, dropping the '/cmd' part."""

    return message.text.split()[1:]


def _parse_player_id(raw: str) -> Optional[int]:
    try:
        return int(raw)
    except ValueError:
        return None


def _yes_no_markup(yes_data: str, no_data: str) -> InlineKeyboardMarkup:
    markup = InlineKeyboardMarkup(row_width=2)
    markup.add(
        InlineKeyboardButton("yes", callback_data=yes_data),
        InlineKeyboardButton("no", callback_data=no_data),
    )
    return markup


def create_telegram_bot(
    bot_token: str,
    ledger: SettlementLedger,
    export_writer: ExportWriter,
) -> telebot.TeleBot:
    """
    Configure and return a TeleBot instance wired to the settlement services.

    This module contains only Telegram-specific concerns: parsing Telegram
    messages/callbacks and mapping them to/from application services.
    """

    bot = telebot.TeleBot(bot_token)

    @bot.message_handler(commands=["start", "hello"])
    def handle_start(message):
        bot.send_message(
            message.chat.id,
            "Welcome to the poker settlement bot!\n"
            "Add players, enter buy-ins and final stacks, then /verify.\n"
            "Type /help to see available commands.",
        )

    @bot.message_handler(commands=["help"])
    def handle_help(message):
        bot.send_message(message.chat.id, HELP_TEXT)

    @bot.message_handler(commands=["list"])
    def handle_list(message):
        bot.send_message(message.chat.id, render_table(ledger))

    @bot.message_handler(commands=["verify"])
    def handle_verify(message):
        bot.send_message(message.chat.id, verify_table(ledger).text)

    @bot.message_handler(commands=["add"])
    def handle_add(message):
        name = " ".join(_command_args(message))
        result = add_player(ledger, name)
        if not result.success:
            bot.send_message(message.chat.id, result.error_message)
            return

        bot.send_message(
            message.chat.id,
            f"Added {result.player.name} as player #{result.player.id}.",
        )

    @bot.message_handler(commands=["buyin", "stack"])
    def handle_amount(message):
        args = _command_args(message)
        if not args:
            bot.send_message(message.chat.id, "Usage: /buyin <id> <amount> or /stack <id> <amount>")
            return

        player_id = _parse_player_id(args[0])
        if player_id is None:
            bot.send_message(message.chat.id, "Player id must be a number.")
            return

        op = message.text.split()[0][1:].split("@")[0].lower()  # strip leading "/" and "@botname"
        raw_value = args[1] if len(args) > 1 else None

        result = update_player_field(ledger, player_id, _FIELD_BY_COMMAND[op], raw_value)
        if not result.success:
            bot.send_message(message.chat.id, result.error_message)
            return

        lines = []
        if result.warning:
            lines.append(f"Warning: {result.warning}")
        lines.append(render_table(ledger))
        bot.send_message(message.chat.id, "\n".join(lines))

    @bot.message_handler(commands=["remove"])
    def handle_remove(message):
        args = _command_args(message)
        player_id = _parse_player_id(args[0]) if args else None
        if player_id is None:
            bot.send_message(message.chat.id, "Usage: /remove <id>")
            return

        player = ledger.get_player(player_id)
        if player is None:
            bot.send_message(message.chat.id, f"Player {player_id} not found.")
            return

        bot.send_message(
            message.chat.id,
            f"Remove {player.name} (#{player.id}) from the table?",
            reply_markup=_yes_no_markup(
                encode_remove_confirmation(player.id, player.name, accepted=True),
                encode_remove_confirmation(player.id, player.name, accepted=False),
            ),
        )

    @bot.message_handler(commands=["reset"])
    def handle_reset(message):
        if ledger.is_empty:
            bot.send_message(message.chat.id, "Nothing to reset.")
            return

        bot.send_message(
            message.chat.id,
            "Clear all players? This cannot be undone.",
            reply_markup=_yes_no_markup(
                encode_reset_confirmation(accepted=True),
                encode_reset_confirmation(accepted=False),
            ),
        )

    @bot.message_handler(commands=["export"])
    def handle_export(message):
        try:
            result = export_session(ledger, export_writer)
        except (OSError, ValueError):
            logger.exception("Export failed")
            bot.send_message(message.chat.id, "Export failed, please try again.")
            return

        if not result.success:
            bot.send_message(message.chat.id, result.error_message)
            return

        with open(result.path, "rb") as fh:
            bot.send_document(message.chat.id, fh, visible_file_name=result.filename)

    @bot.callback_query_handler(func=lambda call: call.data.startswith("rm:"))
    def handle_remove_confirmation(call):
        try:
            accepted, player_id, tag = parse_remove_confirmation(call.data)
        except ValueError:
            bot.answer_callback_query(call.id, "Invalid confirmation.")
            return

        try:
            if not accepted:
                bot.answer_callback_query(call.id, "Cancelled.")
                return

            # Ids are reused after a reset; only remove the player the prompt named.
            player = ledger.get_player(player_id)
            if player is not None and name_tag(player.name) != tag:
                bot.answer_callback_query(call.id, "The table changed, nothing was removed.")
                bot.send_message(
                    call.message.chat.id,
                    f"Player #{player_id} is now {player.name}; nothing was removed.",
                )
                return

            remove_player(ledger, player_id)
            bot.answer_callback_query(call.id, "Removed.")
            bot.send_message(call.message.chat.id, render_table(ledger))
        finally:
            bot.delete_message(call.message.chat.id, call.message.id)

    @bot.callback_query_handler(func=lambda call: call.data.startswith("reset:"))
    def handle_reset_confirmation(call):
        try:
            accepted = parse_reset_confirmation(call.data)
        except ValueError:
            bot.answer_callback_query(call.id, "Invalid confirmation.")
            return

        try:
            if not accepted:
                bot.answer_callback_query(call.id, "Cancelled.")
                return

            result = reset_all(ledger)
            text = "All players cleared." if result.success else result.error_message
            bot.answer_callback_query(call.id, text)
            bot.send_message(call.message.chat.id, text)
        finally:
            bot.delete_message(call.message.chat.id, call.message.id)

    return bot
