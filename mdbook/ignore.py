"""Matching paths against ``.gitignore`` rules."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path, PurePath, PurePosixPath

log = logging.getLogger(__name__)

_TRAILING_SPACES = re.compile(r"(?<!\\) +$")
_GLOB_PIECE = re.compile(r"\[!?\]?[^\]]*\]|\\.|\*+|.", re.DOTALL)


@dataclass(frozen=True)
class _Rule:
    pattern: re.Pattern
    negated: bool
    dir_only: bool


def _translate_component(part: str) -> str:
    """Translate one path component of a glob into a regular expression."""
    pieces = []
    for match in _GLOB_PIECE.finditer(part):
        chunk = match.group(0)
        if chunk.startswith("*"):
            pieces.append("[^/]*")
        elif chunk == "?":
            pieces.append("[^/]")
        elif chunk.startswith("\\"):
            pieces.append(re.escape(chunk[1:]))
        elif chunk.startswith("[") and len(chunk) > 2:
            body = chunk[1:-1]
            negate = body.startswith("!")
            if negate:
                body = body[1:]
            body = body.replace("\\", "\\\\").replace("[", "\\[")
            pieces.append(f"[{'^' if negate else ''}{body}]")
        else:
            pieces.append(re.escape(chunk))
    return "".join(pieces)


def _translate(glob: str) -> str:
    parts = glob.split("/")
    regex = []
    last = len(parts) - 1
    for position, part in enumerate(parts):
        if part == "**":
            regex.append(".*" if position == last else "(?:.*/)?")
        else:
            regex.append(_translate_component(part))
            if position != last:
                regex.append("/")
    return "".join(regex)


def _parse_line(line: str) -> _Rule | None:
    if not line or line.startswith("#"):
        return None
    line = _TRAILING_SPACES.sub("", line)
    negated = line.startswith("!")
    if negated:
        line = line[1:]
    dir_only = line.endswith("/")
    if dir_only:
        line = line[:-1]
    anchored = line.startswith("/")
    if anchored:
        line = line[1:]
    if not line:
        return None
    if "/" in line:
        anchored = True
    regex = _translate(line)
    if not anchored:
        regex = "(?:.*/)?" + regex
    return _Rule(re.compile(regex, re.DOTALL), negated, dir_only)


def _absolute(path: Path) -> Path:
    try:
        return path.resolve()
    except (OSError, RuntimeError):
        return Path(os.path.abspath(path))


@dataclass
class Gitignore:
    """A set of gitignore rules whose patterns are relative to ``root``."""

    root: Path
    rules: list[_Rule] = field(default_factory=list)

    @classmethod
    def from_file(cls, path) -> Gitignore:
        """Read rules from a gitignore file; a file that cannot be read yields no rules."""
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("error reading gitignore `%s`: %s", path, exc)
            text = ""
        return cls.from_lines(path.parent, text.splitlines())

    @classmethod
    def from_lines(cls, root, lines: Iterable[str]) -> Gitignore:
        """Build rules from gitignore lines, anchored at ``root``."""
        rules = [rule for rule in map(_parse_line, lines) if rule is not None]
        return cls(Path(root), rules)

    def _matched(self, relative: str, is_dir: bool) -> bool | None:
        for rule in reversed(self.rules):
            if rule.dir_only and not is_dir:
                continue
            if rule.pattern.fullmatch(relative):
                return not rule.negated
        return None

    def is_ignored(self, path, is_dir: bool = False) -> bool:
        """Whether ``path`` or any of its parent directories is ignored.

        Absolute paths are made relative to the root; relative ones are taken
        as already relative to it.
        """
        raw = os.fspath(path)
        if os.path.isabs(raw):
            raw = os.path.relpath(_absolute(Path(raw)), _absolute(self.root))
        candidate = PurePosixPath(PurePath(raw).as_posix())

        result = self._matched(str(candidate), is_dir)
        if result is not None:
            return result
        for parent in candidate.parents:
            if str(parent) in ("", "."):
                continue
            result = self._matched(str(parent), True)
            if result is not None:
                return result
        return False


def find_gitignore(book_root) -> Path | None:
    """The nearest ``.gitignore`` in ``book_root`` or one of its ancestors."""
    start = Path(book_root)
    for directory in (start, *start.parents):
        candidate = directory / ".gitignore"
        if candidate.exists():
            return candidate
    return None


def filter_ignored_files(ignore: Gitignore, paths: Iterable) -> list[Path]:
    """The paths that the rules do not ignore, in their original order."""
    kept = []
    for path in map(Path, paths):
        if not ignore.is_ignored(_absolute(path), path.is_dir()):
            kept.append(path)
    return kept