"""A simple poll-based watcher that reports changed files under a set of roots."""

from __future__ import annotations

import enum
import logging
import os
import stat
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from mdbook.ignore import Gitignore, find_gitignore

log = logging.getLogger(__name__)


class WatcherKind(enum.Enum):
    """The filesystem watching technique."""

    POLL = "poll"
    NATIVE = "native"

    @classmethod
    def from_str(cls, name: str) -> WatcherKind:
        """Look up a watcher kind by its command-line name."""
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"unsupported watcher {name}") from None


@dataclass(frozen=True)
class _PathData:
    file_type: int
    mtime_ns: int
    size: int


class PollWatcher:
    """Scans root paths and reports files that were added, changed or removed."""

    def __init__(self, book_root) -> None:
        self.root_paths: list[Path] = []
        self.path_data: dict[Path, _PathData] = {}
        gitignore_path = find_gitignore(Path(book_root))
        self.ignore: Gitignore | None = (
            Gitignore.from_file(gitignore_path) if gitignore_path is not None else None
        )

    def set_roots(self, roots: Iterable) -> None:
        """Set the files and directories where scanning starts."""
        self.root_paths = [Path(root) for root in roots]

    def _is_ignored(self, path: Path, is_dir: bool) -> bool:
        if self.ignore is None:
            return False
        if self.ignore.is_ignored(path, is_dir):
            log.debug("ignoring %s", path)
            return True
        return False

    def _visit(
        self, path: Path, ancestors: frozenset[tuple[int, int]]
    ) -> Iterator[tuple[Path, _PathData]]:
        try:
            info = path.stat()
        except OSError as exc:
            log.debug("failed to scan %s: %s", path, exc)
            return
        is_dir = stat.S_ISDIR(info.st_mode)
        if self._is_ignored(path, is_dir):
            return
        if not is_dir:
            yield path, _PathData(stat.S_IFMT(info.st_mode), info.st_mtime_ns, info.st_size)
            return

        identity = (info.st_dev, info.st_ino)
        if identity in ancestors:
            log.debug("failed to scan %s: filesystem loop", path)
            return
        try:
            children = sorted(path.iterdir())
        except OSError as exc:
            log.debug("failed to scan %s: %s", path, exc)
            return
        inner = ancestors | {identity}
        for child in children:
            yield from self._visit(child, inner)

    def scan(self) -> list[Path]:
        """Rescan the roots and return the paths that changed since the last scan."""
        current: dict[Path, _PathData] = {}
        for root in self.root_paths:
            if os.path.exists(root):
                current.update(self._visit(root, frozenset()))

        changed = [path for path, data in current.items() if self.path_data.get(path) != data]
        changed.extend(path for path in self.path_data if path not in current)
        self.path_data = current
        return changed