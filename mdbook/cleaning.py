"""Removing a built book and summarising what was removed."""

from __future__ import annotations

import math
import shutil
from dataclasses import dataclass
from pathlib import Path

_UNITS = ("B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB")


def human_readable_bytes(num_bytes: int) -> tuple[float, str]:
    """Express a byte count as ``(quantity, unit)`` with binary prefixes."""
    value = float(num_bytes)
    index = 0
    if value > 0:
        index = max(0, min(int(math.log2(value) / 10.0), len(_UNITS) - 1))
    return value / 1024.0**index, _UNITS[index]


@dataclass
class CleanSummary:
    """Counts of what a clean removed."""

    num_files_removed: int = 0
    num_dirs_removed: int = 0
    total_bytes_removed: int = 0

    @classmethod
    def from_directory(cls, directory) -> CleanSummary:
        """Delete ``directory`` recursively, returning what was removed."""
        directory = Path(directory)
        summary = cls()
        if not directory.exists():
            return summary

        pending = [directory]
        while pending:
            children: list[Path] = []
            for path in pending:
                try:
                    summary.total_bytes_removed += path.stat().st_size
                except OSError:
                    pass
                if path.is_file():
                    summary.num_files_removed += 1
                elif path.is_dir():
                    summary.num_dirs_removed += 1
                    children.extend(path.iterdir())
            pending = children

        try:
            shutil.rmtree(directory)
        except OSError as exc:
            raise OSError(f"Unable to remove the build directory: {exc}") from exc
        return summary

    def __str__(self) -> str:
        files, dirs = self.num_files_removed, self.num_dirs_removed
        if files == 0:
            if dirs == 0:
                text = "Removed 0 files"
            elif dirs == 1:
                text = "Removed 1 directory"
            else:
                text = f"Removed {dirs} directories"
        elif files == 1:
            text = "Removed 1 file"
        else:
            text = f"Removed {files} files"

        total = self.total_bytes_removed
        if total == 0:
            return text
        if total < 1024:
            return f"{text}, {total}B total"
        quantity, unit = human_readable_bytes(total)
        return f"{text}, {quantity:.2f}{unit} total"