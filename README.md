# mdbook

A library for working with a markdown book on disk. It reads and edits the
book's `book.toml`, loads HTML theme files with per-file overrides, removes
built output, and finds changed source files by polling.

## Installation

```
pip install .
```

To install the test dependencies as well, add the `test` extra:

```
pip install ".[test]"
```

## Configuration (`mdbook.config`, `mdbook.settings`)

`Config` holds the contents of `book.toml` in memory. The `[book]`, `[build]`
and `[rust]` tables become typed sections: `BookConfig`, `BuildConfig` and
`RustConfig`. Every other table, such as `[output.*]` and `[preprocessor.*]`,
is kept as plain data and read with dotted keys.

```python
from mdbook.config import Config
from mdbook.settings import HtmlConfig

cfg = Config.from_str('''
[book]
title = "My Book"
authors = ["Jane Doe"]

[build]
build-dir = "out"

[output.random]
foo = 5
''')

cfg.book.title                      # "My Book"
cfg.build.build_dir                 # Path("out")
cfg.get("output.random.foo")        # 5
cfg.set("output.html.theme", "./themes")
html = cfg.html_config()            # HtmlConfig, or None if [output.html] is absent or invalid
html.theme_dir("/books/mine")       # Path("/books/mine/themes")
```

- `Config.from_str(text)` and `Config.from_disk(path)` raise
  `mdbook.settings.ConfigError` when the TOML is invalid or a typed value has
  the wrong type. Examples are a non-string title, or a `rust.edition` other
  than `2015`, `2018`, `2021` or `2024`.
- Top-level keys other than `book`, `build`, `rust`, `output` and
  `preprocessor` are kept in the configuration and produce a logged warning.
- The legacy layout is still accepted. In that layout `title`, `authors`,
  `source` and `description` sit at the top level, and the build directory is
  set by `output.html.destination`. A warning is logged when it is read.
- `get(key)` returns the stored value, or `None` when the key is absent.
- `get_deserialized_opt(key, kind)` returns a copy converted to `kind`. `kind`
  can be a settings section, `Path`, `int`, `float`, an enum or a dataclass.
- `get_renderer(name)` and `get_preprocessor(name)` return the table under
  `output.<name>` and `preprocessor.<name>` respectively.
- `set(key, value)` works as follows:
  - Keys under `book.` and `build.` update the typed sections.
  - If the new value has the wrong type, the section is left as it was.
  - Any other key is written into the free-form data. Tables that are in the
    way are replaced.
- `to_dict()` and `to_toml()` write the configuration back out. A `[build]`
  or `[rust]` table that still has its default values is left out.

`update_from_env(environ=None)` applies overrides from `MDBOOK_*` variables.
It reads `os.environ` unless you pass a mapping. Each variable name becomes a
dotted key through `parse_env`:

1. The prefix is removed and the name is lower-cased.
2. `__` becomes `.` and `_` becomes `-`.

For example, `MDBOOK_BOOK__TITLE` becomes `book.title`. Each value is parsed
as JSON first, and is used as a plain string if that fails. A JSON object
given for `MDBOOK_BOOK` or `MDBOOK_BUILD` sets each of its keys within that
section.

`BookConfig.realized_text_direction()` returns `TextDirection.RIGHT_TO_LEFT`
or `TextDirection.LEFT_TO_RIGHT`. It uses the explicit `text-direction` when
there is one. Otherwise it derives the direction from the language through
`TextDirection.from_lang_code`, so `"ar"` and `"he"` give right-to-left.

`HtmlConfig.uses_smart_punctuation()` is true when either `smart-punctuation`
or the older `curly-quotes` option is set.

## Themes (`mdbook.theme`)

```python
from mdbook.theme import Theme

theme = Theme.load("path/to/book/theme", defaults=my_default_theme)
```

`Theme.load` starts from `defaults`, or from an empty `Theme()` when you pass
none. It then replaces every file that exists in the theme directory:
templates (`index.hbs`, `head.hbs`, …), the `css/` files, scripts, and the
highlight styles. If the directory does not exist, the defaults are returned
unchanged.

- **Favicons.** If only one of `favicon.png` and `favicon.svg` is overridden,
  the other is set to `None`. It is not taken from the defaults.
- **Fonts.** `fonts/fonts.css` fills `fonts_css`. The other files in `fonts/`
  are listed in `font_files`, sorted. Subdirectories are skipped.

## Cleaning build output (`mdbook.cleaning`)

```python
from mdbook.cleaning import CleanSummary

summary = CleanSummary.from_directory("book")
print(summary)   # e.g. "Removed 12 files, 3.41KiB total"
```

The directory is deleted recursively. The summary counts the files and
directories removed and the bytes they held. A missing directory gives
`Removed 0 files`. `human_readable_bytes(n)` returns a `(quantity, unit)`
pair that uses binary prefixes from `B` up to `EiB`.

## Gitignore rules and watching (`mdbook.ignore`, `mdbook.watcher`)

```python
from mdbook.ignore import Gitignore, filter_ignored_files
from mdbook.watcher import PollWatcher

rules = Gitignore.from_lines("/books/mine", ["*.html", "!keep.html"])
filter_ignored_files(rules, ["/books/mine/a.md", "/books/mine/b.html"])  # [Path("/books/mine/a.md")]

watcher = PollWatcher("path/to/book")
watcher.set_roots(["path/to/book/src", "path/to/book/book.toml"])
watcher.scan()             # the first scan records the current state
changed = watcher.scan()   # paths added, modified or removed since the previous scan
```

- **Rule loading.** `Gitignore.from_file(path)` reads rules from a file.
  `find_gitignore(book_root)` finds the nearest `.gitignore` in the book root
  or one of its parent directories.
- **Matching.** `Gitignore.is_ignored(path, is_dir)` checks the path and each
  of its parent directories.
- **What the watcher ignores.** `PollWatcher` ignores paths that match the
  book's nearest `.gitignore`. It compares file type, modification time and
  size.
- **Watcher kinds.** `WatcherKind.from_str("poll")` and
  `WatcherKind.from_str("native")` name the two kinds. Any other name raises
  `ValueError`.

## What this package does not do

- It has no command-line program.
- It does not build, render, serve or test a book.
- It ships no built-in theme files. A bare `Theme()` holds empty contents.
- It has no native file-system notification watcher. `PollWatcher` only
  reports changes when `scan()` is called, and it does not rebuild anything
  itself.