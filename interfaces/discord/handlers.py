from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

import discord
from discord.ext import commands

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


logger = logging.getLogger(__name__)

CONFIRM_EMOJI = "✅"
DECLINE_EMOJI = "❌"


def create_discord_bot(
    ledger: SettlementLedger,
    export_writer: ExportWriter,
) -> commands.Bot:
    """
    Configure and return a Discord bot with behaviour analogous to
    the Telegram interface: add/remove players, record amounts, verify,
    reset and export.
    """

    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.reactions = True

    # Disable the default help command so we can provide our own `!help`.
    bot = commands.Bot(command_prefix="!", intents=intents, help_command=None)

    # In-memory store of pending destructive actions keyed by the
    # confirmation message ID.
    pending_confirmations: Dict[int, Tuple[str, Optional[int], Optional[str], int]] = {}
    # value: (action, player_id, player_name, requester_discord_id)

    async def _ask_confirmation(
        ctx: commands.Context,
        text: str,
        action: str,
        player_id: Optional[int] = None,
        player_name: Optional[str] = None,
    ) -> None:
        message = await ctx.send(
            f"{text}\nReact with {CONFIRM_EMOJI} to confirm or {DECLINE_EMOJI} to cancel."
        )
        await message.add_reaction(CONFIRM_EMOJI)
        await message.add_reaction(DECLINE_EMOJI)
        pending_confirmations[message.id] = (action, player_id, player_name, ctx.author.id)

    async def _set_amount(ctx: commands.Context, player_id: int, field: str, amount: Optional[str]):
        result = update_player_field(ledger, player_id, field, amount)
        if not result.success:
            await ctx.send(result.error_message)
            return

        lines = []
        if result.warning:
            lines.append(f"Warning: {result.warning}")
        lines.append(render_table(ledger))
        await ctx.send("\n".join(lines))

    @bot.event
    async def on_ready():
        logger.info("Discord bot logged in as %s (id=%s)", bot.user, bot.user.id)

    @bot.event
    async def on_command_error(ctx: commands.Context, error: commands.CommandError):
        if isinstance(error, (commands.BadArgument, commands.MissingRequiredArgument)):
            await ctx.send(f"{error}\nType !help to see available commands.")
            return
        if isinstance(error, commands.CommandNotFound):
            return
        logger.error("Command %s failed", ctx.command, exc_info=error)

    @bot.command(name="start")
    async def start_cmd(ctx: commands.Context):
        await ctx.send(
            "Welcome to the poker settlement bot (Discord)!\n"
            "Add players, enter buy-ins and final stacks, then !verify.\n"
            "Type !help to see available commands."
        )

    @bot.command(name="help")
    async def help_cmd(ctx: commands.Context):
        await ctx.send(
            "!add <name>              - add a player to the table\n"
            "!remove <id>             - remove a player\n"
            "!buyin <id> <amount>     - set a player's total buy-in\n"
            "!stack <id> <amount>     - set a player's final chip stack\n"
            "!list                    - show the table and profit/loss\n"
            "!verify                  - check that the table balances\n"
            "!reset                   - clear all players\n"
            "!export                  - download the settlement as JSON\n"
        )

    @bot.command(name="list")
    async def list_cmd(ctx: commands.Context):
        await ctx.send(render_table(ledger))

    @bot.command(name="verify")
    async def verify_cmd(ctx: commands.Context):
        await ctx.send(verify_table(ledger).text)

    @bot.command(name="add")
    async def add_cmd(ctx: commands.Context, *, name: str = ""):
        result = add_player(ledger, name)
        if not result.success:
            await ctx.send(result.error_message)
            return
        await ctx.send(f"Added {result.player.name} as player #{result.player.id}.")

    @bot.command(name="buyin")
    async def buyin_cmd(ctx: commands.Context, player_id: int, amount: Optional[str] = None):
        await _set_amount(ctx, player_id, "buyIn", amount)

    @bot.command(name="stack")
    async def stack_cmd(ctx: commands.Context, player_id: int, amount: Optional[str] = None):
        await _set_amount(ctx, player_id, "finalStack", amount)

    @bot.command(name="remove")
    async def remove_cmd(ctx: commands.Context, player_id: int):
        player = ledger.get_player(player_id)
        if player is None:
            await ctx.send(f"Player {player_id} not found.")
            return
        await _ask_confirmation(
            ctx,
            f"Remove {player.name} (#{player.id}) from the table?",
            "remove",
            player.id,
            player.name,
        )

    @bot.command(name="reset")
    async def reset_cmd(ctx: commands.Context):
        if ledger.is_empty:
            await ctx.send("Nothing to reset.")
            return
        await _ask_confirmation(ctx, "Clear all players? This cannot be undone.", "reset")

    @bot.command(name="export")
    async def export_cmd(ctx: commands.Context):
        try:
            result = export_session(ledger, export_writer)
        except (OSError, ValueError):
            logger.exception("Export failed")
            await ctx.send("Export failed, please try again.")
            return

        if not result.success:
            await ctx.send(result.error_message)
            return
        await ctx.send(file=discord.File(result.path, filename=result.filename))

    @bot.event
    async def on_reaction_add(reaction: discord.Reaction, user: discord.abc.User):
        # Ignore bot reactions and reactions not on tracked messages.
        if user.bot:
            return

        message_id = reaction.message.id
        if message_id not in pending_confirmations:
            return

        action, player_id, player_name, requester_id = pending_confirmations[message_id]

        # Only the member who asked can confirm/cancel.
        if user.id != requester_id:
            return

        emoji = str(reaction.emoji)
        if emoji not in (CONFIRM_EMOJI, DECLINE_EMOJI):
            return

        # Once reacted, remove the pending confirmation.
        pending_confirmations.pop(message_id, None)
        channel = reaction.message.channel

        if emoji == DECLINE_EMOJI:
            await channel.send("Cancelled.")
            return

        if action == "remove":
            # Ids are reused after a reset; only remove the player the prompt named.
            result = remove_player(ledger, player_id, expected_name=player_name)
            await channel.send(render_table(ledger) if result.success else result.error_message)
        elif action == "reset":
            result = reset_all(ledger)
            await channel.send("All players cleared." if result.success else result.error_message)

    return bot
