from __future__ import annotations

import json
import os
from typing import Any, Dict

from domain.repositories import ExportWriter


class JsonExportWriter(ExportWriter):
    """
    Writes settlement exports as pretty-printed JSON files.

    Export files are write-only from the application's point of view;
    nothing in the project reads them back.
    """

    def __init__(self, export_dir: str) -> None:
        self._export_dir = export_dir

    def write_export(self, filename: str, record: Dict[str, Any]) -> str:
        # Serialise first so a bad record never leaves a truncated file behind.
        payload = json.dumps(record, indent=2, ensure_ascii=False, allow_nan=False)
        os.makedirs(self._export_dir, exist_ok=True)
        path = os.path.join(self._export_dir, filename)
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(payload)
        return path
