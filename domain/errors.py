from __future__ import annotations


class LedgerError(Exception):
    """Base class for recoverable settlement ledger errors."""


class EmptyNameError(LedgerError):
    def __init__(self) -> None:
        super().__init__("Player name must not be empty.")


class DuplicateNameError(LedgerError):
    def __init__(self, name: str) -> None:
        super().__init__(f"A player named '{name}' already exists, please use a different name.")
        self.name = name


class UnknownPlayerError(LedgerError):
    def __init__(self, player_id: int) -> None:
        super().__init__(f"Player {player_id} not found.")
        self.player_id = player_id


class UnknownFieldError(LedgerError, ValueError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Unknown player field: {field!r}.")
        self.field = field
