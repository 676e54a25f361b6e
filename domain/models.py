from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, List


ZERO = Decimal("0")


def _to_json_number(value: Decimal) -> float:
    return float(value)


@dataclass
class Player:
    """
    A seat at the table for one settlement session.

    `profit_loss` is derived from `buy_in` and `final_stack`; callers
    should go through the ledger rather than assigning it themselves.
    """

    id: int
    name: str
    buy_in: Decimal = ZERO
    final_stack: Decimal = ZERO
    profit_loss: Decimal = ZERO

    def recompute(self) -> None:
        self.profit_loss = self.final_stack - self.buy_in

    def copy(self) -> "Player":
        return replace(self)

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "buyIn": _to_json_number(self.buy_in),
            "finalStack": _to_json_number(self.final_stack),
            "profitLoss": _to_json_number(self.profit_loss),
        }


@dataclass
class LedgerSnapshot:
    """Point-in-time copy of a ledger, the unit of persistence."""

    players: List[Player] = field(default_factory=list)
    next_id: int = 0

    def to_record(self) -> Dict[str, Any]:
        return {
            "players": [p.to_record() for p in self.players],
            "nextId": self.next_id,
        }


@dataclass(frozen=True)
class Verification:
    """Table-wide balance verdict."""

    balanced: bool
    total: Decimal
