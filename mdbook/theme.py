"""Theme files for the HTML output, with per-file overrides from a theme directory."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path

log = logging.getLogger(__name__)

_OVERRIDABLE_FILES = (
    ("index.hbs", "index"),
    ("head.hbs", "head"),
    ("redirect.hbs", "redirect"),
    ("header.hbs", "header"),
    ("toc.js.hbs", "toc_js"),
    ("toc.html.hbs", "toc_html"),
    ("book.js", "js"),
    ("css/chrome.css", "chrome_css"),
    ("css/general.css", "general_css"),
    ("css/print.css", "print_css"),
    ("css/variables.css", "variables_css"),
    ("highlight.js", "highlight_js"),
    ("clipboard.min.js", "clipboard_js"),
    ("highlight.css", "highlight_css"),
    ("tomorrow-night.css", "tomorrow_night_css"),
    ("ayu-highlight.css", "ayu_highlight_css"),
)


def _load_with_warn(filename: Path) -> bytes | None:
    """Read a file if it exists; warn and return ``None`` if reading fails."""
    if not filename.exists():
        return None
    try:
        return filename.read_bytes()
    except OSError as exc:
        log.warning("Couldn't load custom file, %s: %s", filename, exc)
        return None


@dataclass
class Theme:
    """The templates, stylesheets and scripts that make up the HTML theme."""

    index: bytes = b""
    head: bytes = b""
    redirect: bytes = b""
    header: bytes = b""
    toc_js: bytes = b""
    toc_html: bytes = b""
    chrome_css: bytes = b""
    general_css: bytes = b""
    print_css: bytes = b""
    variables_css: bytes = b""
    fonts_css: bytes | None = None
    font_files: list[Path] = field(default_factory=list)
    favicon_png: bytes | None = b""
    favicon_svg: bytes | None = b""
    js: bytes = b""
    highlight_css: bytes = b""
    tomorrow_night_css: bytes = b""
    ayu_highlight_css: bytes = b""
    highlight_js: bytes = b""
    clipboard_js: bytes = b""

    @classmethod
    def load(cls, theme_dir, defaults: Theme | None = None) -> Theme:
        """Start from ``defaults`` and replace each file found in ``theme_dir``."""
        base = defaults if defaults is not None else cls()
        theme = dataclasses.replace(base, font_files=list(base.font_files))
        theme_dir = Path(theme_dir)

        if not theme_dir.is_dir():
            return theme

        for relative, attr in _OVERRIDABLE_FILES:
            contents = _load_with_warn(theme_dir / relative)
            if contents is not None:
                setattr(theme, attr, contents)

        fonts_dir = theme_dir / "fonts"
        if fonts_dir.exists():
            fonts_css = _load_with_warn(fonts_dir / "fonts.css")
            if fonts_css is not None:
                theme.fonts_css = fonts_css
            try:
                entries = sorted(fonts_dir.iterdir())
            except OSError:
                entries = None
            if entries is not None:
                font_files = []
                for entry in entries:
                    if entry.name == "fonts.css":
                        continue
                    if entry.is_dir():
                        log.info("skipping font directory %s", entry)
                        continue
                    font_files.append(entry)
                theme.font_files = font_files

        # Overriding one favicon but not the other drops the default for the other.
        png = _load_with_warn(theme_dir / "favicon.png")
        svg = _load_with_warn(theme_dir / "favicon.svg")
        if png is not None:
            theme.favicon_png = png
        if svg is not None:
            theme.favicon_svg = svg
        if png is not None and svg is None:
            theme.favicon_svg = None
        elif svg is not None and png is None:
            theme.favicon_png = None

        return theme