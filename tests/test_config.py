"""Tests for configuration and navigation loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from docsite.config import DEFAULT_SETTINGS, deep_merge, load_config, load_site_config
from docsite.errors import ConfigError
from docsite.navigation import NavBranch, NavLeaf, load_navigation, transform_document_path


def test_missing_file_uses_supplied_default(tmp_path: Path) -> None:
    """Test that a caller-supplied default stands in for a missing file."""
    default = {"menu": []}

    data = load_config(tmp_path / "missing.yaml", default)

    assert data == default
    assert data is not default


def test_missing_file_without_default_raises(tmp_path: Path) -> None:
    """Test that a missing file without default is an error."""
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    ("name", "text"),
    [
        ("site.yaml", "site: [unclosed"),
        ("site.toml", "site = "),
        ("site.json", "{not json"),
        ("list.yaml", "- a\n- b"),
    ],
)
def test_invalid_file_raises_even_with_default(tmp_path: Path, name: str, text: str) -> None:
    """Test that broken files are reported rather than replaced by defaults."""
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path, {})


def test_formats_by_suffix(tmp_path: Path) -> None:
    """Test TOML, YAML and JSON decoding."""
    (tmp_path / "a.toml").write_text('[site]\ntitle = "T"\n', encoding="utf-8")
    (tmp_path / "a.yml").write_text("site:\n  title: T\n", encoding="utf-8")
    (tmp_path / "a.json").write_text('{"site": {"title": "T"}}', encoding="utf-8")

    for name in ("a.toml", "a.yml", "a.json"):
        assert load_config(tmp_path / name) == {"site": {"title": "T"}}


def test_empty_yaml_is_empty_mapping(tmp_path: Path) -> None:
    """Test an empty YAML file."""
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(path) == {}


def test_deep_merge_does_not_mutate() -> None:
    """Test nested merging without touching the inputs."""
    base = {"site": {"title": "A", "lang": "en"}}

    merged = deep_merge(base, {"site": {"title": "B"}})

    assert merged == {"site": {"title": "B", "lang": "en"}}
    assert base["site"]["title"] == "A"


def test_load_site_config(tmp_path: Path) -> None:
    """Test settings defaults, paths relative to the settings file and navigation."""
    settings = tmp_path / "docsite.yaml"
    settings.write_text("site:\n  title: Manual\n  baseUrl: /manual/\nbuild:\n  sourceDir: content\n", encoding="utf-8")
    sidebars = tmp_path / "sidebars.yaml"
    sidebars.write_text("menu:\n  - intro.md\n", encoding="utf-8")

    config = load_site_config(settings, sidebars)

    assert config.title == "Manual"
    assert config.base_url == "/manual/"
    assert config.source_dir == tmp_path / "content"
    assert config.output_dir == tmp_path / "dist"
    assert config.include_root == tmp_path / "content"
    assert config.search_enabled is True
    assert config.settings["search"]["placeholder"] == DEFAULT_SETTINGS["search"]["placeholder"]
    assert config.navigation.menu[0].href == "/manual/intro.html"


def test_page_href_friendly(tmp_path: Path) -> None:
    """Test page links with friendly URLs."""
    settings = tmp_path / "docsite.yaml"
    settings.write_text("site:\n  baseUrl: /docs/\n  friendlyUrls: true\n", encoding="utf-8")

    config = load_site_config(settings, tmp_path / "sidebars.yaml", navigation_default={})

    assert config.page_href("/guide/setup.html") == "/docs/guide/setup"
    assert config.page_href("/index.html") == "/docs/"
    assert config.page_href("/guide/setup.html#step-2") == "/docs/guide/setup#step-2"


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("guide/setup.md", "guide/setup.html"),
        ("guide/setup", "guide/setup.html"),
        ("guide/setup.html", "guide/setup.html"),
        ("guide/setup.md#install", "guide/setup.html#install"),
    ],
)
def test_transform_document_path(path: str, expected: str) -> None:
    """Test mapping of navigation references onto page paths."""
    assert transform_document_path(path) == expected


def test_navigation_entries() -> None:
    """Test leaf and branch parsing."""
    navigation = load_navigation(
        {
            "menu": [
                "quickstart.md",
                {"label": "Reference", "open": True, "items": [{"title": "API", "document": "ref/api"}]},
                {"title": "Blog", "url": "https://blog.example.com"},
            ],
            "navbar": [{"title": "Home", "document": "index.md", "badge": "v2", "badgeVariant": "accent"}],
        },
        base_url="/docs/",
    )

    quickstart, reference, blog = navigation.menu
    assert isinstance(quickstart, NavLeaf)
    assert quickstart.href == "/docs/quickstart.html"
    assert isinstance(reference, NavBranch)
    assert reference.title == "Reference"
    assert reference.open is True
    assert reference.entries[0].href == "/docs/ref/api.html"
    assert reference.entries[0].document == "/ref/api.html"
    assert blog.external is True
    assert blog.href == "https://blog.example.com"
    assert navigation.navbar[0].badge == "v2"
    assert navigation.navbar[0].badge_variant == "accent"
    assert navigation.footer == []


def test_navigation_find_prefers_menu() -> None:
    """Test lookup of the entry that references a page."""
    navigation = load_navigation(
        {
            "menu": [{"title": "Deep", "items": [{"title": "In Menu", "document": "page.md"}]}],
            "navbar": [{"title": "In Navbar", "document": "page.md"}],
        }
    )

    assert navigation.find("/page.html").title == "In Menu"
    assert navigation.find("/other.html") is None


def test_invalid_navigation_entry() -> None:
    """Test that unsupported entry types are rejected."""
    with pytest.raises(ConfigError):
        load_navigation({"menu": [42]})
    with pytest.raises(ConfigError):
        load_navigation({"menu": {"not": "a list"}})
