from __future__ import annotations

from typing import Any, Dict, Optional, Protocol


class LedgerRepository(Protocol):
    """
    Abstraction over best-effort ledger persistence.

    Implementations store a single snapshot record under a fixed key and
    are responsible for:
    - Serialising the record to whatever the backing store needs.
    - Treating absent or corrupt data as "no prior state" rather than failing.
    """

    def load_snapshot(self) -> Optional[Dict[str, Any]]:
        """Return the last saved snapshot record, or None if there is none."""

        ...

    def save_snapshot(self, record: Dict[str, Any]) -> None:
        """
        Persist `record`, replacing any previous snapshot.

        Failures must be logged and swallowed: an in-memory mutation is
        never failed by its persistence side effect.
        """

        ...


class ExportWriter(Protocol):
    """Write-only sink for settlement export files."""

    def write_export(self, filename: str, record: Dict[str, Any]) -> str:
        """Write `record` under `filename` and return the path written."""

        ...
