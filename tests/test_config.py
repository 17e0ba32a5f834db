import dataclasses
from pathlib import Path

import pytest

from mdbook.config import Config, parse_env
from mdbook.settings import (
    BookConfig,
    BuildConfig,
    ConfigError,
    HtmlConfig,
    Playground,
    RustConfig,
    RustEdition,
    TextDirection,
)

COMPLEX_CONFIG = """
[book]
title = "Some Book"
authors = ["Jane Doe <jane@example.com>"]
description = "A completely useless book"
multilingual = true
src = "source"
language = "ja"

[build]
build-dir = "outputs"
create-missing = false
use-default-preprocessors = true

[output.html]
theme = "./themedir"
default-theme = "rust"
smart-punctuation = true
google-analytics = "123456"
additional-css = ["./foo/bar/baz.css"]
git-repository-url = "https://example.com/"
git-repository-icon = "fa-code-fork"

[output.html.playground]
editable = true
editor = "ace"

[output.html.redirect]
"index.html" = "overview.html"
"nexted/page.md" = "https://example.com/"

[preprocessor.first]

[preprocessor.second]
"""

BOOK_HEADER = """
[book]
title = "mdBook Documentation"
description = "Create book from markdown files."
authors = ["Jane Doe"]
src = "./source"
"""


def encode_env_var(key):
    return "MDBOOK_" + key.upper().replace(".", "__").replace("-", "_")


def test_load_a_complex_config_file():
    got = Config.from_str(COMPLEX_CONFIG)
    assert got.book == BookConfig(
        title="Some Book",
        authors=["Jane Doe <jane@example.com>"],
        description="A completely useless book",
        multilingual=True,
        src=Path("source"),
        language="ja",
        text_direction=None,
    )
    assert got.build == BuildConfig(
        build_dir=Path("outputs"),
        create_missing=False,
        use_default_preprocessors=True,
        extra_watch_dirs=[],
    )
    assert got.rust == RustConfig(edition=None)
    assert got.html_config() == HtmlConfig(
        smart_punctuation=True,
        google_analytics="123456",
        additional_css=[Path("./foo/bar/baz.css")],
        theme=Path("./themedir"),
        default_theme="rust",
        playground=Playground(editable=True),
        git_repository_url="https://example.com/",
        git_repository_icon="fa-code-fork",
        redirect={
            "index.html": "overview.html",
            "nexted/page.md": "https://example.com/",
        },
    )


def test_disable_runnable():
    src = """
    [book]
    title = "Some Book"
    authors = ["Jane Doe"]

    [output.html.playground]
    runnable = false
    """
    assert Config.from_str(src).html_config().playground.runnable is False


@pytest.mark.parametrize(
    "edition, expected",
    [
        ("2015", RustEdition.E2015),
        ("2018", RustEdition.E2018),
        ("2021", RustEdition.E2021),
        ("2024", RustEdition.E2024),
    ],
)
def test_editions(edition, expected):
    src = BOOK_HEADER + f'[rust]\nedition = "{edition}"\n'
    got = Config.from_str(src)
    assert got.rust == RustConfig(edition=expected)
    assert got.book == BookConfig(
        title="mdBook Documentation",
        description="Create book from markdown files.",
        authors=["Jane Doe"],
        src=Path("./source"),
    )


def test_load_arbitrary_output_type():
    @dataclasses.dataclass
    class RandomOutput:
        foo: int
        bar: str
        baz: list

    src = """
    [output.random]
    foo = 5
    bar = "Hello World"
    baz = [true, true, false]
    """
    cfg = Config.from_str(src)
    got = cfg.get_deserialized_opt("output.random", RandomOutput)
    assert got == RandomOutput(foo=5, bar="Hello World", baz=[True, True, False])
    assert cfg.get_deserialized_opt("output.random.baz", list) == [True, True, False]


def test_deserialize_wrong_kind_raises():
    cfg = Config.from_str('[output.random]\nfoo = 5\n')
    with pytest.raises(ConfigError):
        cfg.get_deserialized_opt("output.random.foo", str)


def test_mutate_some_stuff():
    config = Config.from_str(COMPLEX_CONFIG)
    key = "output.html.playground.editable"
    assert config.get(key) is True
    config.set(key, False)
    assert config.get(key) is False


def test_can_still_load_the_previous_format():
    src = """
    title = "mdBook Documentation"
    description = "Create book from markdown files."
    authors = ["Jane Doe"]
    source = "./source"

    [output.html]
    destination = "my-book"
    theme = "my-theme"
    smart-punctuation = true
    google-analytics = "123456"
    additional-css = ["custom.css", "custom2.css"]
    additional-js = ["custom.js"]
    """
    got = Config.from_str(src)
    assert got.book == BookConfig(
        title="mdBook Documentation",
        description="Create book from markdown files.",
        authors=["Jane Doe"],
        src=Path("./source"),
    )
    assert got.build == BuildConfig(build_dir=Path("my-book"))
    assert got.html_config() == HtmlConfig(
        theme=Path("my-theme"),
        smart_punctuation=True,
        google_analytics="123456",
        additional_css=[Path("custom.css"), Path("custom2.css")],
        additional_js=[Path("custom.js")],
    )
    assert got.get("output.html.destination") is None


def test_set_a_config_item():
    cfg = Config()
    key = "foo.bar.baz"
    assert cfg.get(key) is None
    cfg.set(key, "Something Interesting")
    assert cfg.get_deserialized_opt(key, str) == "Something Interesting"


def test_set_book_field_updates_typed_table():
    cfg = Config()
    cfg.set("book.title", "A Title")
    cfg.set("build.build-dir", "out")
    assert cfg.book.title == "A Title"
    assert cfg.build.build_dir == Path("out")
    assert cfg.get("book") is None


def test_set_none_raises():
    with pytest.raises(ConfigError):
        Config().set("foo", None)


@pytest.mark.parametrize(
    "src, expected",
    [
        ("FOO", None),
        ("MDBOOK_foo", "foo"),
        ("MDBOOK_FOO__bar__baz", "foo.bar.baz"),
        ("MDBOOK_FOO_bar__baz", "foo-bar.baz"),
    ],
)
def test_parse_env_vars(src, expected):
    assert parse_env(src) == expected


def test_update_config_using_env_var():
    cfg = Config()
    key = "foo.bar"
    assert cfg.get(key) is None
    cfg.update_from_env({encode_env_var(key): "baz"})
    assert cfg.get_deserialized_opt(key, str) == "baz"


def test_update_config_using_env_var_and_complex_value():
    cfg = Config()
    key = "foo-bar.baz"
    assert cfg.get(key) is None
    cfg.update_from_env({encode_env_var(key): '{"array": [1, 2, 3], "number": 13.37}'})
    assert cfg.get_deserialized_opt(key) == {"array": [1, 2, 3], "number": 13.37}


def test_update_book_title_via_env():
    cfg = Config()
    assert cfg.book.title != "Something else"
    cfg.update_from_env({"MDBOOK_BOOK__TITLE": "Something else"})
    assert cfg.book.title == "Something else"


def test_update_book_via_env_object():
    cfg = Config()
    cfg.update_from_env({"MDBOOK_BOOK": '{"title": "My Awesome Book", "authors": ["Jane Doe"]}'})
    assert cfg.book.title == "My Awesome Book"
    assert cfg.book.authors == ["Jane Doe"]


def test_update_from_process_environment(monkeypatch):
    monkeypatch.setenv("MDBOOK_OUTPUT__CUSTOM__LEVEL", "7")
    cfg = Config()
    cfg.update_from_env()
    assert cfg.get("output.custom.level") == 7


def test_file_404_default():
    got = Config.from_str('[output.html]\ndestination = "my-book"\n')
    assert got.html_config().input_404 is None


def test_file_404_custom():
    got = Config.from_str('[output.html]\ninput-404= "missing.md"\noutput-404= "missing.html"\n')
    assert got.html_config().input_404 == "missing.md"


@pytest.mark.parametrize(
    "src, expected",
    [
        ('[book]\ntext-direction = "ltr"\n', TextDirection.LEFT_TO_RIGHT),
        ('[book]\ntext-direction = "rtl"\n', TextDirection.RIGHT_TO_LEFT),
        ("[book]\n", None),
    ],
)
def test_text_direction(src, expected):
    assert Config.from_str(src).book.text_direction == expected


@pytest.mark.parametrize(
    "src",
    [
        BOOK_HEADER.replace('src = "./source"', 'language = ["en", "pt-br"]'),
        '[book]\ntitle = 20\nlanguage = "en"\n',
        "[build]\nbuild-dir = 99\ncreate-missing = false\n",
        '[rust]\nedition = "1999"\n',
        "not = [valid toml",
    ],
)
def test_invalid_configurations(src):
    with pytest.raises(ConfigError, match="Invalid configuration file"):
        Config.from_str(src)


def test_print_config():
    html = Config.from_str("[output.html.print]\nenable = false\n").html_config()
    assert html.print.enable is False
    assert html.print.page_break is True
    html = Config.from_str("[output.html.print]\npage-break = false\n").html_config()
    assert html.print.enable is True
    assert html.print.page_break is False


def test_curly_quotes_or_smart_punctuation():
    src = '[book]\ntitle = "T"\n\n[output.html]\nsmart-punctuation = true\n'
    assert Config.from_str(src).html_config().uses_smart_punctuation() is True
    src = '[book]\ntitle = "T"\n\n[output.html]\ncurly-quotes = true\n'
    assert Config.from_str(src).html_config().uses_smart_punctuation() is True
    config = Config.from_str('[book]\ntitle = "T"\n')
    assert config.html_config() is None
    assert (config.html_config() or HtmlConfig()).uses_smart_punctuation() is False


def test_invalid_html_config_gives_none():
    config = Config.from_str("[output.html]\nsmart-punctuation = 3\n")
    assert config.html_config() is None


def test_renderer_and_preprocessor_tables():
    cfg = Config.from_str(COMPLEX_CONFIG)
    assert cfg.get_renderer("html")["theme"] == "./themedir"
    assert cfg.get_preprocessor("first") == {}
    assert cfg.get_renderer("epub") is None


def test_to_dict_omits_default_tables():
    table = Config().to_dict()
    assert table == {"book": {"authors": [], "src": "src", "language": "en"}}


def test_toml_round_trip():
    src = BOOK_HEADER + '[rust]\nedition = "2018"\n[build]\nbuild-dir = "out"\n[output.html]\nhash-files = true\n'
    cfg = Config.from_str(src)
    again = Config.from_str(cfg.to_toml())
    assert again == cfg
    assert again.to_dict()["rust"] == {"edition": "2018"}


def test_from_disk(tmp_path):
    path = tmp_path / "book.toml"
    path.write_text('[book]\ntitle = "On Disk"\n', encoding="utf-8")
    assert Config.from_disk(path).book.title == "On Disk"
    with pytest.raises(ConfigError):
        Config.from_disk(tmp_path / "missing.toml")


def test_from_dict_rejects_non_table():
    with pytest.raises(ConfigError):
        Config.from_dict(["not", "a", "table"])