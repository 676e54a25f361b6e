from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any, Callable, List, Optional, Tuple

from .errors import DuplicateNameError, EmptyNameError, UnknownFieldError, UnknownPlayerError
from .formatting import parse_amount
from .models import ZERO, LedgerSnapshot, Player, Verification


logger = logging.getLogger(__name__)

# Absorbs rounding noise from repeated decimal arithmetic. Do not tune.
BALANCE_TOLERANCE = Decimal("0.01")

_FIELD_ATTRS = {
    "buyIn": "buy_in",
    "buy_in": "buy_in",
    "finalStack": "final_stack",
    "final_stack": "final_stack",
}

Listener = Callable[["SettlementLedger"], None]


class SettlementLedger:
    """
    Roster of players for one settlement session plus the id counter.

    All mutations are synchronous. Subscribed listeners (rendering,
    persistence) are notified after every successful state change; the
    ledger itself knows nothing about them.
    """

    def __init__(self) -> None:
        self._players: List[Player] = []
        self._next_id = 0
        self._listeners: List[Listener] = []

    # -- queries -----------------------------------------------------------

    @property
    def players(self) -> Tuple[Player, ...]:
        return tuple(p.copy() for p in self._players)

    @property
    def next_id(self) -> int:
        return self._next_id

    @property
    def is_empty(self) -> bool:
        return not self._players

    def __len__(self) -> int:
        return len(self._players)

    def get_player(self, player_id: int) -> Optional[Player]:
        player = self._find(player_id)
        return player.copy() if player is not None else None

    def verify(self) -> Verification:
        total = sum((p.profit_loss for p in self._players), ZERO)
        return Verification(balanced=abs(total) < BALANCE_TOLERANCE, total=total)

    def serialize(self) -> LedgerSnapshot:
        return LedgerSnapshot(players=[p.copy() for p in self._players], next_id=self._next_id)

    # -- commands ----------------------------------------------------------

    def add_player(self, name: str) -> Player:
        name = (name or "").strip()
        if not name:
            raise EmptyNameError()
        if any(p.name == name for p in self._players):
            raise DuplicateNameError(name)

        self._next_id += 1
        player = Player(id=self._next_id, name=name)
        self._players.append(player)
        logger.debug("Added player %s (id=%d)", name, player.id)
        self._notify()
        return player.copy()

    def remove_player(self, player_id: int) -> bool:
        player = self._find(player_id)
        if player is None:
            return False

        self._players.remove(player)
        logger.debug("Removed player %s (id=%d)", player.name, player.id)
        self._notify()
        return True

    def update_player_field(self, player_id: int, field: str, raw_value: Any) -> Player:
        """
        Set `buyIn` or `finalStack` for a player and recompute profit/loss.

        `raw_value` is parsed permissively: junk becomes zero. Negative
        amounts are stored as given.
        """

        attr = _FIELD_ATTRS.get(field)
        if attr is None:
            raise UnknownFieldError(field)

        player = self._find(player_id)
        if player is None:
            raise UnknownPlayerError(player_id)

        updated = replace(player, **{attr: parse_amount(raw_value)})
        updated.recompute()
        player.buy_in, player.final_stack, player.profit_loss = (
            updated.buy_in,
            updated.final_stack,
            updated.profit_loss,
        )
        logger.debug("Set %s=%s for player id=%d", attr, getattr(player, attr), player_id)
        self._notify()
        return player.copy()

    def reset_all(self) -> bool:
        if not self._players:
            return False

        self._players = []
        self._next_id = 0
        logger.debug("Ledger reset")
        self._notify()
        return True

    def restore(self, snapshot: Any) -> None:
        """
        Replace the whole ledger with `snapshot`.

        Accepts a `LedgerSnapshot` or its record form. Anything missing or
        malformed leaves an empty ledger; this method never raises.
        """

        try:
            players, next_id = _load_snapshot(snapshot)
        except (ValueError, ArithmeticError) as exc:
            logger.warning("Discarding malformed ledger snapshot: %s", exc)
            players, next_id = [], 0

        self._players = players
        self._next_id = next_id
        self._notify()

    # -- observers ---------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                # A broken listener must not undo or fail the mutation.
                logger.warning("Ledger listener %r failed", listener, exc_info=True)

    def _find(self, player_id: int) -> Optional[Player]:
        for player in self._players:
            if player.id == player_id:
                return player
        return None


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _player_from_record(item: Any) -> Player:
    if not isinstance(item, dict):
        raise ValueError(f"player entry is not an object: {item!r}")

    player_id = item.get("id")
    if not _is_int(player_id) or player_id < 1:
        raise ValueError(f"invalid player id: {player_id!r}")

    name = item.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"invalid player name: {name!r}")

    player = Player(
        id=player_id,
        name=name.strip(),
        buy_in=parse_amount(item.get("buyIn")),
        final_stack=parse_amount(item.get("finalStack")),
    )
    player.recompute()
    return player


def _load_snapshot(snapshot: Any) -> Tuple[List[Player], int]:
    if snapshot is None:
        return [], 0

    if isinstance(snapshot, LedgerSnapshot):
        players = []
        for p in snapshot.players:
            if not isinstance(p, Player) or not _is_int(p.id) or p.id < 1 or not p.name:
                raise ValueError(f"invalid player: {p!r}")
            player = replace(
                p,
                buy_in=parse_amount(p.buy_in),
                final_stack=parse_amount(p.final_stack),
            )
            player.recompute()
            players.append(player)
        next_id = snapshot.next_id
    elif isinstance(snapshot, dict):
        raw_players = snapshot.get("players")
        if raw_players is None:
            raw_players = []
        if not isinstance(raw_players, list):
            raise ValueError("'players' is not a list")
        players = [_player_from_record(item) for item in raw_players]
        next_id = snapshot.get("nextId")
        if next_id is None:
            next_id = 0
    else:
        raise ValueError(f"unsupported snapshot type: {type(snapshot).__name__}")

    if not _is_int(next_id) or next_id < 0:
        raise ValueError(f"invalid nextId: {next_id!r}")

    seen_ids = set()
    seen_names = set()
    for player in players:
        if player.id in seen_ids:
            raise ValueError(f"duplicate player id {player.id}")
        if player.name in seen_names:
            raise ValueError(f"duplicate player name {player.name!r}")
        seen_ids.add(player.id)
        seen_names.add(player.name)

    # Never hand out an id that a restored player already holds.
    if seen_ids:
        next_id = max(next_id, max(seen_ids))

    return players, next_id
