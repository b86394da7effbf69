"""Placement manifest: persisted sheet placements for incremental runs."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from spritely.model.image import Placement


@dataclass
class ManifestEntry:
    fingerprint: str
    placement: Placement


@dataclass
class Manifest:
    """Image path -> where it was drawn, as of the last run that wrote sheets."""

    timestamp: str = ""
    entries: dict[str, ManifestEntry] = field(default_factory=dict)

    # --- lookup ---------------------------------------------------------------

    def lookup(self, path: Path, fingerprint: str, sheet_dir: Path) -> Placement | None:
        """Return the recorded placement for *path* if it is still usable.

        The image must be unchanged (same fingerprint) and its sheet file
        must still exist.
        """
        entry = self.entries.get(str(path))
        if entry is None or entry.fingerprint != fingerprint:
            return None
        if not (sheet_dir / entry.placement.sheet).is_file():
            return None
        return entry.placement

    def record(self, path: Path, fingerprint: str, placement: Placement) -> None:
        self.entries[str(path)] = ManifestEntry(fingerprint=fingerprint, placement=placement)

    def max_index(self, prefix: str) -> int:
        """Highest sheet index referenced by the manifest, -1 when none."""
        pattern = re.compile(re.escape(prefix) + r"(\d+)\.")
        indices = [
            int(match.group(1))
            for entry in self.entries.values()
            if (match := pattern.match(entry.placement.sheet))
        ]
        return max(indices, default=-1)

    # --- persistence ----------------------------------------------------------

    def save(self, path: Path) -> None:
        """Serialise to JSON and write to *path*."""
        path.parent.mkdir(parents=True, exist_ok=True)
        self.timestamp = datetime.now(timezone.utc).isoformat()
        data = {
            "timestamp": self.timestamp,
            "images": {
                key: {
                    "fingerprint": entry.fingerprint,
                    "sheet": entry.placement.sheet,
                    "url": entry.placement.url,
                    "x": entry.placement.x,
                    "y": entry.placement.y,
                    "width": entry.placement.width,
                    "height": entry.placement.height,
                }
                for key, entry in self.entries.items()
            },
        }
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> Manifest:
        """Read a manifest from *path*; a missing or unreadable file gives an empty one."""
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return cls()
        if not isinstance(data, dict):
            return cls()
        entries = {}
        for key, item in data.get("images", {}).items():
            try:
                placement = Placement(
                    sheet=item["sheet"],
                    url=item["url"],
                    x=int(item["x"]),
                    y=int(item["y"]),
                    width=int(item["width"]),
                    height=int(item["height"]),
                )
            except (KeyError, TypeError, ValueError):
                continue
            entries[key] = ManifestEntry(fingerprint=item.get("fingerprint", ""), placement=placement)
        return cls(timestamp=data.get("timestamp", ""), entries=entries)
