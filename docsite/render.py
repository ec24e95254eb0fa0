from __future__ import annotations

import datetime as dt
import re
from pathlib import Path
from typing import Optional

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from .config import PACKAGE_VERSION, SiteConfig
from .content import Document
from .helpers import register_helpers
from .utils import parse_bool

TEMPLATES_DIR = Path(__file__).parent / "templates"
TAG_RE = re.compile(r"<[^>]+>")
LAYOUT_FLAGS = {
    "hide_menu": ("hideMenu", "hideSidebar"),
    "hide_breadcrumbs": ("hideBreadcrumbs",),
    "hide_footer": ("hideFooter",),
    "full_width": ("fullWidth", "hideMenu", "hideSidebar"),
}


def strip_tags(html_text: str) -> str:
    return TAG_RE.sub("", html_text)


def create_environment(config: SiteConfig) -> Environment:
    loaders = []
    if config.templates_dir is not None and config.templates_dir.exists():
        loaders.append(FileSystemLoader(str(config.templates_dir)))
    loaders.append(FileSystemLoader(str(TEMPLATES_DIR)))
    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    register_helpers(
        env,
        include_root=config.include_root,
        base_url=config.base_url,
        search_placeholder=config.search["placeholder"],
    )
    return env


class PageRenderer:
    """Renders documents through a named page template and the shared layout."""

    def __init__(self, config: SiteConfig, env: Optional[Environment] = None) -> None:
        self.config = config
        self.env = env or create_environment(config)

    def base_context(self) -> dict:
        settings = self.config.settings
        navigation = self.config.navigation
        copyright_name = (self.config.site.get("copyright") or {}).get("name") or self.config.title
        return {
            "settings": settings,
            "site": self.config.site,
            "search": self.config.search,
            "navigation": {"menu": navigation.menu, "navbar": navigation.navbar},
            "footer": navigation.footer,
            "title": self.config.title,
            "base_url": self.config.base_url,
            "copyright": {"year": dt.date.today().year, "name": copyright_name},
            "version": PACKAGE_VERSION,
            "layout": {key: False for key in LAYOUT_FLAGS},
            "breadcrumbs": [],
            "props": {},
        }

    def layout_flags(self, document: Document) -> dict:
        entry = self.config.navigation.find(document.path)
        options = entry.options if entry is not None else {}
        flags = {}
        for key, names in LAYOUT_FLAGS.items():
            flags[key] = any(parse_bool(document.metadata.get(name)) or parse_bool(options.get(name)) for name in names)
        return flags

    def page_context(self, document: Document) -> dict:
        context = self.base_context()
        context.update(
            {
                "html": Markup(document.body_html),
                "props": document.props,
                "page": {
                    "id": document.id,
                    "path": document.path,
                    "url": self.config.page_href(document.path),
                    "title": document.title,
                    "description": str(document.metadata.get("description") or ""),
                },
                "breadcrumbs": [part for part in document.path.split("/") if part],
                "layout": self.layout_flags(document),
            }
        )
        return context

    def render(self, page_kind: str, document: Document) -> str:
        template = self.env.get_template(f"{page_kind}.html")
        return template.render(self.page_context(document))

    def render_source(self, source: str, path: str) -> str:
        """Render a hand-written HTML page from the source tree with the site context."""
        context = self.base_context()
        context["page"] = {"path": path, "url": self.config.page_href(path), "title": self.config.title}
        context["breadcrumbs"] = [part for part in path.split("/") if part]
        return self.env.from_string(source).render(context)
