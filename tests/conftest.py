"""Shared fixtures for docsite tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import pytest

from docsite.config import DEFAULT_SETTINGS, SiteConfig, deep_merge
from docsite.content import DocumentParser
from docsite.navigation import load_navigation
from docsite.render import create_environment


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """Create a project directory with an empty ``docs`` source tree.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        Path to the project root.
    """
    (tmp_path / "docs").mkdir()
    return tmp_path


@pytest.fixture
def make_config(site_root: Path) -> Callable[..., SiteConfig]:
    """Build SiteConfig objects rooted at the test project.

    Args:
        site_root: Project directory fixture.

    Returns:
        Factory taking partial settings and navigation mappings.
    """

    def factory(settings: Optional[dict] = None, navigation: Optional[dict] = None) -> SiteConfig:
        merged = deep_merge(DEFAULT_SETTINGS, settings or {})
        site = merged["site"]
        nav = load_navigation(navigation or {}, base_url=site["baseUrl"], friendly=bool(site["friendlyUrls"]))
        return SiteConfig(settings=merged, navigation=nav, root=site_root)

    return factory


@pytest.fixture
def config(make_config: Callable[..., SiteConfig]) -> SiteConfig:
    """Create the default configuration.

    Args:
        make_config: SiteConfig factory fixture.

    Returns:
        SiteConfig with default settings and empty navigation.
    """
    return make_config()


@pytest.fixture
def parser(config: SiteConfig) -> DocumentParser:
    """Create a DocumentParser for the default configuration.

    Args:
        config: Default configuration fixture.

    Returns:
        DocumentParser instance.
    """
    return DocumentParser(config, create_environment(config))
