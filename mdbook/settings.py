"""Typed sections of a book's configuration (``[book]``, ``[build]``, ``[output.html]``...)."""

import dataclasses
import enum
import types
import typing
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_U8_MAX = 255
_U32_MAX = 2**32 - 1

_RTL_LANGUAGES = frozenset(
    {
        "ar", "ara", "arc", "ae", "ave", "egy", "he", "heb", "nqo", "pal", "phn",
        "sam", "syc", "syr", "fa", "per", "fas", "ku", "kur", "ur", "urd",
        "pus", "ps", "yi", "yid",
    }
)


class ConfigError(ValueError):
    """Raised when configuration data has the wrong shape or type."""


class TextDirection(enum.Enum):
    """Text direction to use for HTML output."""

    LEFT_TO_RIGHT = "ltr"
    RIGHT_TO_LEFT = "rtl"

    @classmethod
    def from_lang_code(cls, code: str) -> "TextDirection":
        """Derive the text direction from a language code."""
        if code in _RTL_LANGUAGES:
            return cls.RIGHT_TO_LEFT
        return cls.LEFT_TO_RIGHT


class RustEdition(enum.Enum):
    """Rust edition used for code in the book."""

    E2024 = "2024"
    E2021 = "2021"
    E2018 = "2018"
    E2015 = "2015"


def _kebab(name: str) -> str:
    return name.replace("_", "-")


def _describe(value: Any) -> str:
    return f"{type(value).__name__} {value!r}"


def _plain(value: Any) -> Any:
    """Turn a value into plain TOML-like data."""
    if isinstance(value, ConfigSection):
        return value.to_dict()
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    return value


def _insert(table: dict, key: str, value: Any) -> None:
    """Insert ``value`` at a dotted ``key``, replacing anything in the way."""
    *parents, last = key.split(".")
    for part in parents:
        child = table.get(part)
        if not isinstance(child, dict):
            child = {}
            table[part] = child
        table = child
    table[last] = value


def _convert(tp: Any, value: Any, key: str, maximum: int | None = None) -> Any:
    origin = typing.get_origin(tp)
    if origin in (typing.Union, types.UnionType):
        if value is None:
            return None
        inner = [arg for arg in typing.get_args(tp) if arg is not type(None)]
        return _convert(inner[0], value, key, maximum)
    if origin is list:
        if not isinstance(value, list):
            raise ConfigError(f"{key}: expected an array, found {_describe(value)}")
        (item_type,) = typing.get_args(tp)
        return [_convert(item_type, item, key, maximum) for item in value]
    if origin is dict:
        if not isinstance(value, dict):
            raise ConfigError(f"{key}: expected a table, found {_describe(value)}")
        _, item_type = typing.get_args(tp)
        return {
            str(k): _convert(item_type, v, f"{key}.{k}", maximum)
            for k, v in value.items()
        }
    if tp is bool:
        if not isinstance(value, bool):
            raise ConfigError(f"{key}: expected a boolean, found {_describe(value)}")
        return value
    if tp is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"{key}: expected an integer, found {_describe(value)}")
        if value < 0 or (maximum is not None and value > maximum):
            raise ConfigError(f"{key}: integer {value} out of range")
        return value
    if tp is str:
        if not isinstance(value, str):
            raise ConfigError(f"{key}: expected a string, found {_describe(value)}")
        return value
    if tp is Path:
        if not isinstance(value, (str, Path)):
            raise ConfigError(f"{key}: expected a path, found {_describe(value)}")
        return Path(value)
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        if isinstance(value, tp):
            return value
        try:
            return tp(value)
        except (ValueError, TypeError):
            allowed = ", ".join(repr(member.value) for member in tp)
            raise ConfigError(
                f"{key}: unknown variant {value!r}, expected one of {allowed}"
            ) from None
    if isinstance(tp, type) and issubclass(tp, ConfigSection):
        if isinstance(value, tp):
            return value
        return tp.from_dict(value)
    raise TypeError(f"unsupported configuration type {tp!r}")


class ConfigSection:
    """Base for configuration tables that map kebab-case keys onto fields."""

    @classmethod
    def from_dict(cls, data: Any):
        """Build the section from a table, using defaults for missing keys."""
        if not isinstance(data, dict):
            raise ConfigError(
                f"expected a table for {cls.__name__}, found {_describe(data)}"
            )
        kwargs = {}
        for f in dataclasses.fields(cls):
            keys = [_kebab(f.name), *f.metadata.get("aliases", ())]
            for key in keys:
                if key in data:
                    kwargs[f.name] = _convert(
                        f.type, data[key], key, f.metadata.get("max")
                    )
                    break
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Return the section as a table with kebab-case keys; unset values are left out."""
        table: dict[str, Any] = {}
        for f in dataclasses.fields(self):
            if not f.metadata.get("serialize", True):
                continue
            value = getattr(self, f.name)
            if value is None:
                continue
            table[_kebab(f.name)] = _plain(value)
        return table

    def update_value(self, key: str, value: Any) -> None:
        """Set a (dotted) key in place; a value of the wrong type leaves the section unchanged."""
        raw = self.to_dict()
        _insert(raw, key, _plain(value))
        try:
            updated = type(self).from_dict(raw)
        except ConfigError:
            return
        for f in dataclasses.fields(self):
            setattr(self, f.name, getattr(updated, f.name))


@dataclass
class BookConfig(ConfigSection):
    """Metadata about the book."""

    title: str | None = None
    authors: list[str] = field(default_factory=list)
    description: str | None = None
    src: Path = field(default_factory=lambda: Path("src"))
    multilingual: bool = field(default=False, metadata={"serialize": False})
    language: str | None = "en"
    text_direction: TextDirection | None = None

    def realized_text_direction(self) -> TextDirection:
        """The explicit text direction, or the one derived from the language."""
        if self.text_direction is not None:
            return self.text_direction
        return TextDirection.from_lang_code(self.language or "")


@dataclass
class BuildConfig(ConfigSection):
    """Information about the build environment."""

    build_dir: Path = field(default_factory=lambda: Path("book"))
    create_missing: bool = True
    use_default_preprocessors: bool = True
    extra_watch_dirs: list[Path] = field(default_factory=list)


@dataclass
class RustConfig(ConfigSection):
    """Rust language support settings."""

    edition: RustEdition | None = None


@dataclass
class Print(ConfigSection):
    """Settings for the print page and icon."""

    enable: bool = True
    page_break: bool = True


@dataclass
class Fold(ConfigSection):
    """Settings for folding chapters in the sidebar."""

    enable: bool = False
    level: int = field(default=0, metadata={"max": _U8_MAX})


@dataclass
class Playground(ConfigSection):
    """Settings for playground code snippets."""

    editable: bool = False
    copyable: bool = True
    copy_js: bool = True
    line_numbers: bool = False
    runnable: bool = True


@dataclass
class Code(ConfigSection):
    """Settings for code blocks."""

    hidelines: dict[str, str] = field(default_factory=dict)


@dataclass
class SearchChapterSettings(ConfigSection):
    """Search options for a chapter or directory."""

    enable: bool | None = None


@dataclass
class Search(ConfigSection):
    """Settings for the in-browser search."""

    enable: bool = True
    limit_results: int = field(default=30, metadata={"max": _U32_MAX})
    teaser_word_count: int = field(default=30, metadata={"max": _U32_MAX})
    use_boolean_and: bool = False
    boost_title: int = field(default=2, metadata={"max": _U8_MAX})
    boost_hierarchy: int = field(default=1, metadata={"max": _U8_MAX})
    boost_paragraph: int = field(default=1, metadata={"max": _U8_MAX})
    expand: bool = True
    heading_split_level: int = field(default=3, metadata={"max": _U8_MAX})
    copy_js: bool = True
    chapter: dict[str, SearchChapterSettings] = field(default_factory=dict)


@dataclass
class HtmlConfig(ConfigSection):
    """Settings for the HTML renderer."""

    theme: Path | None = None
    default_theme: str | None = None
    preferred_dark_theme: str | None = None
    smart_punctuation: bool = False
    curly_quotes: bool = False
    mathjax_support: bool = False
    copy_fonts: bool = True
    google_analytics: str | None = None
    additional_css: list[Path] = field(default_factory=list)
    additional_js: list[Path] = field(default_factory=list)
    fold: Fold = field(default_factory=Fold)
    playground: Playground = field(
        default_factory=Playground, metadata={"aliases": ("playpen",)}
    )
    code: Code = field(default_factory=Code)
    print: Print = field(default_factory=Print)
    no_section_label: bool = False
    search: Search | None = None
    git_repository_url: str | None = None
    git_repository_icon: str | None = None
    input_404: str | None = None
    site_url: str | None = None
    cname: str | None = None
    edit_url_template: str | None = None
    live_reload_endpoint: str | None = None
    redirect: dict[str, str] = field(default_factory=dict)
    hash_files: bool = False

    def theme_dir(self, root) -> Path:
        """The theme directory under ``root``, ``theme`` when none is configured."""
        return Path(root) / (self.theme if self.theme is not None else "theme")

    def uses_smart_punctuation(self) -> bool:
        """Whether smart punctuation is on, via either option name."""
        return self.smart_punctuation or self.curly_quotes