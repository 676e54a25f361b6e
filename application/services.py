from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from domain.errors import LedgerError
from domain.formatting import format_amount, format_profit_loss, is_valid_amount
from domain.ledger import SettlementLedger
from domain.models import ZERO, Player
from domain.repositories import ExportWriter, LedgerRepository


logger = logging.getLogger(__name__)

EMPTY_TABLE_TEXT = "Add players and enter their numbers."


@dataclass
class OperationResult:
    """Generic result type for simple operations."""

    success: bool
    error_message: Optional[str] = None


@dataclass
class PlayerResult:
    """Result of a command that creates or changes a single player."""

    success: bool
    error_message: Optional[str] = None
    player: Optional[Player] = None
    warning: Optional[str] = None


@dataclass
class VerificationResult:
    """Balance verdict plus the text a front-end should show for it."""

    balanced: bool
    total: Decimal
    status: str
    text: str


@dataclass
class ExportResult:
    success: bool
    error_message: Optional[str] = None
    path: Optional[str] = None
    filename: Optional[str] = None


def add_player(ledger: SettlementLedger, name: str) -> PlayerResult:
    try:
        player = ledger.add_player(name)
    except LedgerError as exc:
        return PlayerResult(success=False, error_message=str(exc))
    return PlayerResult(success=True, player=player)


def remove_player(
    ledger: SettlementLedger,
    player_id: int,
    expected_name: Optional[str] = None,
) -> OperationResult:
    """
    Remove a player from the table.

    Removing an id that is not at the table is not an error; it simply
    does nothing. When `expected_name` is given (the name shown in a
    confirmation prompt), a player holding that id under a different name
    is left alone: ids are handed out again after a reset.
    """

    current = ledger.get_player(player_id)
    if current is not None and expected_name is not None and current.name != expected_name:
        return OperationResult(
            success=False,
            error_message=(
                f"Player #{player_id} is now {current.name}, not {expected_name}; "
                "nothing was removed."
            ),
        )

    if not ledger.remove_player(player_id):
        logger.debug("remove_player: no player with id=%s", player_id)
    return OperationResult(success=True)


def update_player_field(
    ledger: SettlementLedger,
    player_id: int,
    field: str,
    raw_value: Any,
) -> PlayerResult:
    """
    Record a player's buy-in or final stack.

    Junk input is stored as zero and negative input is stored as given,
    matching the ledger. Either case is reported back as a `warning` so a
    front-end can highlight it, but the update itself still succeeds.
    """

    try:
        player = ledger.update_player_field(player_id, field, raw_value)
    except LedgerError as exc:
        return PlayerResult(success=False, error_message=str(exc))

    warning = None
    if not is_valid_amount(raw_value):
        warning = f"'{raw_value}' is not a valid non-negative amount."
    return PlayerResult(success=True, player=player, warning=warning)


def reset_all(ledger: SettlementLedger) -> OperationResult:
    if not ledger.reset_all():
        return OperationResult(success=False, error_message="Nothing to reset.")
    return OperationResult(success=True)


def verify_table(ledger: SettlementLedger) -> VerificationResult:
    verification = ledger.verify()

    if ledger.is_empty:
        status, text = "empty", EMPTY_TABLE_TEXT
    elif verification.balanced:
        status, text = "balanced", "Settlement verified: the table is balanced."
    else:
        status = "unbalanced"
        text = (
            "Settlement does not balance, difference: "
            f"{format_profit_loss(verification.total)}"
        )

    return VerificationResult(
        balanced=verification.balanced,
        total=verification.total,
        status=status,
        text=text,
    )


def format_player_line(player: Player) -> str:
    return (
        f"#{player.id} {player.name}: "
        f"buy-in {format_amount(player.buy_in)}, "
        f"final {format_amount(player.final_stack)}, "
        f"P/L {format_profit_loss(player.profit_loss)}"
    )


def render_table(ledger: SettlementLedger) -> str:
    if ledger.is_empty:
        return EMPTY_TABLE_TEXT

    lines = [format_player_line(p) for p in ledger.players]
    lines.append(verify_table(ledger).text)
    return "\n".join(lines)


def export_filename(now: datetime) -> str:
    return f"poker-settlement-{now.date().isoformat()}.json"


def build_export_record(
    ledger: SettlementLedger,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    players = ledger.players
    total = sum((p.profit_loss for p in players), ZERO)
    return {
        "timestamp": now.isoformat(),
        "players": [p.to_record() for p in players],
        "totalProfitLoss": float(total),
    }


def export_session(
    ledger: SettlementLedger,
    writer: ExportWriter,
    now: Optional[datetime] = None,
) -> ExportResult:
    if ledger.is_empty:
        return ExportResult(success=False, error_message="No data to export.")

    now = now or datetime.now(timezone.utc)
    filename = export_filename(now)
    record = build_export_record(ledger, now)
    path = writer.write_export(filename, record)
    logger.info("Exported %d players to %s", len(record["players"]), path)
    return ExportResult(success=True, path=path, filename=filename)


def load_ledger(repo: LedgerRepository) -> SettlementLedger:
    """Build a ledger restored from the last saved snapshot, if any."""

    ledger = SettlementLedger()
    record = repo.load_snapshot()
    if record is not None:
        ledger.restore(record)
        logger.info("Restored %d players from saved state", len(ledger))
    return ledger


def attach_persistence(
    ledger: SettlementLedger,
    repo: LedgerRepository,
) -> Callable[[], None]:
    """
    Save a snapshot after every ledger change.

    Returns the unsubscribe callable. Saving is best-effort; a failing
    repository is logged by the ledger and never fails the mutation.
    """

    def _save(changed: SettlementLedger) -> None:
        repo.save_snapshot(changed.serialize().to_record())

    return ledger.subscribe(_save)
