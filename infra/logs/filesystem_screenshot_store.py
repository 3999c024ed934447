from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path


class FileSystemScreenshotStore:
    """Stores diagnostic screenshots as ``<base_dir>/<label>-<epoch_ms>.png``."""

    def __init__(self, base_dir: str = "screenshots") -> None:
        self._base_dir = Path(base_dir)

    def save_screenshot(
        self,
        label: str,
        image_bytes: bytes,
        taken_at: datetime,
    ) -> str:
        self._base_dir.mkdir(parents=True, exist_ok=True)
        epoch_ms = int(taken_at.timestamp() * 1000)
        path = self._base_dir / f"{self._safe(label)}-{epoch_ms}.png"
        path.write_bytes(image_bytes)
        return str(path)

    @staticmethod
    def _safe(label: str) -> str:
        cleaned = re.sub(r"[^A-Za-z0-9_-]+", "_", label).strip("_")
        return cleaned or "screenshot"
