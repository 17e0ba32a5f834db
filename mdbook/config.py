"""The in-memory form of ``book.toml``: typed tables plus free-form data for plugins."""

from __future__ import annotations

import copy
import dataclasses
import enum
import json
import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from mdbook.settings import (
    BookConfig,
    BuildConfig,
    ConfigError,
    ConfigSection,
    HtmlConfig,
    RustConfig,
)

log = logging.getLogger(__name__)

_ENV_PREFIX = "MDBOOK_"
_VALID_TOP_LEVEL = ("book", "build", "rust", "output", "preprocessor")
_LEGACY_KEYS = ("title", "authors", "source", "description", "output.html.destination")
_MISSING = object()


def parse_env(key: str) -> str | None:
    """Turn an ``MDBOOK_`` environment variable name into a dotted config key."""
    if not key.startswith(_ENV_PREFIX):
        return None
    return key[len(_ENV_PREFIX):].lower().replace("__", ".").replace("_", "-")


def _read(table: Any, key: str) -> Any:
    node = table
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return _MISSING
        node = node[part]
    return node


def _insert(table: dict, key: str, value: Any) -> None:
    *parents, last = key.split(".")
    for part in parents:
        child = table.get(part)
        if not isinstance(child, dict):
            child = {}
            table[part] = child
        table = child
    table[last] = value


def _delete(table: dict, key: str) -> Any:
    *parents, last = key.split(".")
    node = _read(table, ".".join(parents)) if parents else table
    if not isinstance(node, dict) or last not in node:
        return _MISSING
    return node.pop(last)


def _to_value(value: Any) -> Any:
    """Convert a Python value into TOML-representable data."""
    if value is None:
        raise ConfigError("Unable to represent the item as a TOML value: None")
    if isinstance(value, ConfigSection):
        return value.to_dict()
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_to_value(item) for item in value]
    if isinstance(value, Mapping):
        return {str(k): _to_value(v) for k, v in value.items() if v is not None}
    if isinstance(value, (str, int, float, bool)):
        return value
    raise ConfigError(f"Unable to represent the item as a TOML value: {value!r}")


def _deserialize(value: Any, kind: Any) -> Any:
    value = copy.deepcopy(value)
    if kind is None:
        return value
    if isinstance(kind, type) and issubclass(kind, ConfigSection):
        return kind.from_dict(value)
    if kind is Path:
        if not isinstance(value, str):
            raise ConfigError(f"Couldn't deserialize the value: expected a path, found {value!r}")
        return Path(value)
    if kind is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"Couldn't deserialize the value: expected an integer, found {value!r}")
        return value
    if kind is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"Couldn't deserialize the value: expected a float, found {value!r}")
        return float(value)
    if isinstance(kind, type) and issubclass(kind, enum.Enum):
        try:
            return kind(value)
        except ValueError:
            raise ConfigError(f"Couldn't deserialize the value: unknown variant {value!r}") from None
    if dataclasses.is_dataclass(kind) and isinstance(kind, type):
        if not isinstance(value, dict):
            raise ConfigError(f"Couldn't deserialize the value: expected a table, found {value!r}")
        names = {f.name for f in dataclasses.fields(kind)}
        kwargs = {k.replace("-", "_"): v for k, v in value.items()}
        try:
            return kind(**{k: v for k, v in kwargs.items() if k in names})
        except TypeError as exc:
            raise ConfigError(f"Couldn't deserialize the value: {exc}") from None
    if isinstance(kind, type):
        if not isinstance(value, kind):
            raise ConfigError(
                f"Couldn't deserialize the value: expected {kind.__name__}, found {value!r}"
            )
        return value
    raise ConfigError(f"Couldn't deserialize the value: unsupported type {kind!r}")


def _is_legacy_format(raw: Any) -> bool:
    return any(_read(raw, item) is not _MISSING for item in _LEGACY_KEYS)


@dataclass
class Config:
    """A book's whole configuration: typed tables plus arbitrary other data."""

    book: BookConfig = field(default_factory=BookConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    rust: RustConfig = field(default_factory=RustConfig)
    rest: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_str(cls, src: str) -> Config:
        """Parse a configuration from TOML text."""
        try:
            return cls.from_dict(tomllib.loads(src))
        except (tomllib.TOMLDecodeError, ConfigError) as exc:
            raise ConfigError(f"Invalid configuration file: {exc}") from exc

    @classmethod
    def from_disk(cls, config_file) -> Config:
        """Load the configuration file from disk."""
        try:
            text = Path(config_file).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Unable to open the configuration file: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise ConfigError(f"Couldn't read the file: {exc}") from exc
        return cls.from_str(text)

    @classmethod
    def from_dict(cls, raw: Any) -> Config:
        """Build a configuration from parsed TOML data, accepting the legacy layout too."""
        raw = copy.deepcopy(raw)
        if _is_legacy_format(raw):
            log.warning("It looks like you are using the legacy book.toml format.")
            log.warning(
                "Move top level entries like `title`, `authors` and `description` under "
                "a `[book]` table, and `destination` from `[output.html]` to "
                "`build-dir` under a `[build]` table."
            )
            return cls._from_legacy(raw)
        if not isinstance(raw, dict):
            raise ConfigError("A config file should always be a toml table")
        for item in raw:
            if item not in _VALID_TOP_LEVEL:
                log.warning("Invalid field %r in book.toml", item)

        book = BookConfig.from_dict(raw.pop("book")) if "book" in raw else BookConfig()
        build = BuildConfig.from_dict(raw.pop("build")) if "build" in raw else BuildConfig()
        rust = RustConfig.from_dict(raw.pop("rust")) if "rust" in raw else RustConfig()
        return cls(book=book, build=build, rust=rust, rest=raw)

    @classmethod
    def _from_legacy(cls, table: dict) -> Config:
        cfg = cls()
        for key, attr in (
            ("title", "title"),
            ("authors", "authors"),
            ("source", "src"),
            ("description", "description"),
        ):
            value = table.pop(key, _MISSING)
            if value is _MISSING:
                continue
            try:
                parsed = BookConfig.from_dict({attr: value})
            except ConfigError:
                continue
            setattr(cfg.book, attr, getattr(parsed, attr))

        destination = _delete(table, "output.html.destination")
        if destination is not _MISSING:
            try:
                cfg.build.build_dir = BuildConfig.from_dict({"build-dir": destination}).build_dir
            except ConfigError:
                pass

        cfg.rest = table
        return cfg

    def update_from_env(self, environ: Mapping[str, str] | None = None) -> None:
        """Apply ``MDBOOK_*`` variables; values are parsed as JSON, else taken as strings."""
        log.debug("Updating the config from environment variables")
        env = os.environ if environ is None else environ
        for name, value in list(env.items()):
            key = parse_env(name)
            if key is None:
                continue
            log.debug("%s => %s", key, value)
            try:
                parsed = json.loads(value)
            except ValueError:
                parsed = value

            if key in ("book", "build") and isinstance(parsed, dict):
                for sub_key, sub_value in parsed.items():
                    self.set(f"{key}.{sub_key}", sub_value)
                return

            self.set(key, parsed)

    def get(self, key: str) -> Any:
        """Fetch an item by dotted key from the free-form tables, or ``None``."""
        value = _read(self.rest, key)
        return None if value is _MISSING else value

    def get_deserialized_opt(self, name: str, kind: Any = None) -> Any:
        """Fetch a copy of an item converted to ``kind``; ``None`` when the key is absent."""
        value = _read(self.rest, name)
        if value is _MISSING:
            return None
        return _deserialize(value, kind)

    def set(self, index: str, value: Any) -> None:
        """Set a dotted key, clobbering anything in the way."""
        value = _to_value(value)
        if index.startswith("book."):
            self.book.update_value(index[len("book."):], value)
        elif index.startswith("build."):
            self.build.update_value(index[len("build."):], value)
        else:
            _insert(self.rest, index, value)

    def get_renderer(self, name: str) -> dict | None:
        """The table for a renderer under ``[output.<name>]``."""
        table = self.get(f"output.{name}")
        return table if isinstance(table, dict) else None

    def get_preprocessor(self, name: str) -> dict | None:
        """The table for a preprocessor under ``[preprocessor.<name>]``."""
        table = self.get(f"preprocessor.{name}")
        return table if isinstance(table, dict) else None

    def html_config(self) -> HtmlConfig | None:
        """The HTML renderer's settings; ``None`` if absent or invalid."""
        try:
            return self.get_deserialized_opt("output.html", HtmlConfig)
        except ConfigError as exc:
            log.error("Parsing configuration [output.html]: %s", exc)
            return None

    def to_dict(self) -> dict[str, Any]:
        """The configuration as plain TOML data; default build and rust tables are left out."""
        table = copy.deepcopy(self.rest)
        table["book"] = self.book.to_dict()
        if self.build != BuildConfig():
            table["build"] = self.build.to_dict()
        if self.rust != RustConfig():
            table["rust"] = self.rust.to_dict()
        return table

    def to_toml(self) -> str:
        """The configuration as TOML text."""
        return tomli_w.dumps(self.to_dict())