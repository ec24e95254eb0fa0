from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from importlib import metadata
from pathlib import Path
from typing import Optional

import yaml

from .errors import ConfigError
from .navigation import Navigation, load_navigation
from .utils import page_href, parse_bool, parse_int

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

logger = logging.getLogger(__name__)

try:
    PACKAGE_VERSION = metadata.version("docsite")
except metadata.PackageNotFoundError:
    PACKAGE_VERSION = "0.0.0"

DEFAULT_SETTINGS: dict = {
    "site": {
        "title": "Documentation",
        "description": "Documentation generated with docsite",
        "baseUrl": "/",
        "siteUrl": "",
        "friendlyUrls": False,
        "favicon": "/favicon.ico",
        "logo": "",
        "lang": "en",
        "theme": {"light": "light", "dark": "night"},
        "copyright": {"name": ""},
        "assets": None,
        "templates": None,
        "includes": None,
    },
    "build": {
        "sourceDir": "docs",
        "outputDir": "dist",
        "clean": True,
        "minify": True,
    },
    "search": {
        "enabled": True,
        "maxResults": 10,
        "minSearchLength": 2,
        "placeholder": "Search documentation...",
    },
    "globals": {},
}


def load_config(path: Path, default: Optional[dict] = None) -> dict:
    """Read a TOML, YAML or JSON mapping, picked by file suffix.

    A missing file returns a copy of ``default`` when the caller supplies one;
    otherwise it is an error, like any unreadable or non-mapping file.
    """
    if not path.exists():
        if default is None:
            raise ConfigError(f"Config file not found: {path}")
        logger.info("Config file %s not found, using defaults.", path)
        return copy.deepcopy(default)
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            data = {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a mapping: {path}")
    return data


def deep_merge(target: dict, source: dict) -> dict:
    result = copy.deepcopy(target)
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


@dataclass
class SiteConfig:
    settings: dict = field(default_factory=lambda: copy.deepcopy(DEFAULT_SETTINGS))
    navigation: Navigation = field(default_factory=Navigation)
    root: Path = field(default_factory=Path.cwd)

    @property
    def site(self) -> dict:
        return self.settings.get("site") or {}

    @property
    def title(self) -> str:
        return str(self.site.get("title") or "")

    @property
    def description(self) -> str:
        return str(self.site.get("description") or "")

    @property
    def base_url(self) -> str:
        return str(self.site.get("baseUrl") or "/")

    @property
    def site_url(self) -> str:
        return str(self.site.get("siteUrl") or "")

    @property
    def friendly_urls(self) -> bool:
        return parse_bool(self.site.get("friendlyUrls"))

    @property
    def search_enabled(self) -> bool:
        return parse_bool((self.settings.get("search") or {}).get("enabled", True))

    @property
    def search(self) -> dict:
        search = self.settings.get("search") or {}
        return {
            "enabled": self.search_enabled,
            "maxResults": parse_int(search.get("maxResults"), 10),
            "minSearchLength": parse_int(search.get("minSearchLength"), 2),
            "placeholder": str(search.get("placeholder") or ""),
        }

    @property
    def minify(self) -> bool:
        return parse_bool((self.settings.get("build") or {}).get("minify", True))

    @property
    def globals(self) -> dict:
        return self.settings.get("globals") or {}

    def resolve_path(self, value: object) -> Optional[Path]:
        if not value:
            return None
        path = Path(str(value))
        if not path.is_absolute():
            path = self.root / path
        return path

    @property
    def source_dir(self) -> Path:
        return self.resolve_path((self.settings.get("build") or {}).get("sourceDir") or "docs")

    @property
    def output_dir(self) -> Path:
        return self.resolve_path((self.settings.get("build") or {}).get("outputDir") or "dist")

    @property
    def assets_dir(self) -> Optional[Path]:
        return self.resolve_path(self.site.get("assets"))

    @property
    def templates_dir(self) -> Optional[Path]:
        return self.resolve_path(self.site.get("templates"))

    @property
    def include_root(self) -> Path:
        return self.resolve_path(self.site.get("includes")) or self.source_dir

    def page_href(self, path: str) -> str:
        return page_href(path, self.base_url, self.friendly_urls)


def load_settings(path: Path, default: Optional[dict] = None) -> dict:
    return deep_merge(DEFAULT_SETTINGS, load_config(path, default))


def load_site_config(
    settings_path: Path,
    navigation_path: Path,
    settings_default: Optional[dict] = None,
    navigation_default: Optional[dict] = None,
) -> SiteConfig:
    settings = load_settings(settings_path, settings_default)
    site = settings.get("site") or {}
    navigation = load_navigation(
        load_config(navigation_path, navigation_default),
        base_url=str(site.get("baseUrl") or "/"),
        friendly=parse_bool(site.get("friendlyUrls")),
    )
    return SiteConfig(settings=settings, navigation=navigation, root=settings_path.resolve().parent)
