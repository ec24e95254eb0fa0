"""Tests for sitemap generation."""

from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Callable

from docsite.config import SiteConfig
from docsite.content import Document
from docsite.sitemap import document_url, generate_sitemap, last_modified, resolve_site_url

DOCUMENTS = [
    Document(id=0, path="/index.html", source="index.md"),
    Document(id=1, path="/guides/setup.html", source="guides/setup.md"),
]


def test_absolute_site_url(make_config: Callable[..., SiteConfig], site_root: Path) -> None:
    """Test sitemap locations under an absolute site URL."""
    config = make_config({"site": {"siteUrl": "https://example.com/"}})

    xml = generate_sitemap(DOCUMENTS, config, site_root / "docs")

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert "<loc>https://example.com/</loc>" in xml
    assert "<loc>https://example.com/guides/setup.html</loc>" in xml
    assert xml.count("<changefreq>weekly</changefreq>") == 2
    assert xml.count("<priority>0.5</priority>") == 2


def test_friendly_urls(make_config: Callable[..., SiteConfig], site_root: Path) -> None:
    """Test that friendly URLs drop the page extension."""
    config = make_config({"site": {"siteUrl": "https://example.com", "friendlyUrls": True}})

    xml = generate_sitemap(DOCUMENTS, config, site_root / "docs")

    assert "<loc>https://example.com/</loc>" in xml
    assert "<loc>https://example.com/guides/setup</loc>" in xml


def test_site_url_from_absolute_base_url(make_config: Callable[..., SiteConfig]) -> None:
    """Test falling back to an absolute base URL."""
    config = make_config({"site": {"baseUrl": "https://docs.example.com/index.html"}})

    assert resolve_site_url(config) == "https://docs.example.com"


def test_relative_base_url_collapses_slashes() -> None:
    """Test that relative site URLs never produce doubled slashes."""
    assert document_url(DOCUMENTS[1], "/docs/", False) == "/docs/guides/setup.html"
    assert document_url(DOCUMENTS[0], "/docs/", False) == "/docs/"
    assert document_url(DOCUMENTS[1], "/", False) == "/guides/setup.html"


def test_last_modified_uses_file_time(site_root: Path) -> None:
    """Test the last modification date of an existing source."""
    source = site_root / "docs" / "index.md"
    source.write_text("# Home", encoding="utf-8")

    expected = dt.date.fromtimestamp(source.stat().st_mtime).isoformat()

    assert last_modified(DOCUMENTS[0], site_root / "docs") == expected


def test_last_modified_falls_back_to_today(site_root: Path) -> None:
    """Test the fallback for sources that cannot be read."""
    today = dt.date(2024, 1, 31)

    assert last_modified(DOCUMENTS[1], site_root / "docs", today=today) == "2024-01-31"
