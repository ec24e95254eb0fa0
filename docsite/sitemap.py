from __future__ import annotations

import datetime as dt
import html
import re
from pathlib import Path
from typing import Optional

from .config import SiteConfig
from .content import Document
from .utils import is_absolute_url

CHANGE_FREQUENCY = "weekly"
PRIORITY = "0.5"
REPEATED_SLASH_RE = re.compile(r"/{2,}")


def resolve_site_url(config: SiteConfig) -> str:
    if config.site_url:
        return config.site_url.rstrip("/")
    base_url = config.base_url
    if is_absolute_url(base_url):
        if base_url.endswith("index.html"):
            base_url = base_url[: -len("index.html")]
        return base_url.rstrip("/")
    return base_url


def document_url(document: Document, site_url: str, friendly: bool) -> str:
    clean_path = document.path.lstrip("/")
    if friendly and clean_path.endswith(".html"):
        clean_path = clean_path[: -len(".html")]
    is_root = clean_path in ("index", "index.html") or document.path == "/index.html"
    if is_root:
        return f"{site_url.rstrip('/')}/"
    url = f"{site_url}/{clean_path}"
    if not is_absolute_url(site_url):
        url = REPEATED_SLASH_RE.sub("/", url)
    return url


def last_modified(document: Document, source_root: Path, today: Optional[dt.date] = None) -> str:
    source = source_root / document.source
    try:
        return dt.date.fromtimestamp(source.stat().st_mtime).isoformat()
    except OSError:
        return (today or dt.date.today()).isoformat()


def generate_sitemap(documents: list[Document], config: SiteConfig, source_root: Path) -> str:
    site_url = resolve_site_url(config)
    items = []
    for document in documents:
        url = document_url(document, site_url, config.friendly_urls)
        items.append(
            "\n".join(
                [
                    "<url>",
                    f"<loc>{html.escape(url)}</loc>",
                    f"<lastmod>{last_modified(document, source_root)}</lastmod>",
                    f"<changefreq>{CHANGE_FREQUENCY}</changefreq>",
                    f"<priority>{PRIORITY}</priority>",
                    "</url>",
                ]
            )
        )
    return "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
            *items,
            "</urlset>",
        ]
    )
