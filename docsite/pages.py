from __future__ import annotations

import logging
import shutil
from pathlib import Path

from jinja2 import TemplateError

from .config import SiteConfig
from .content import Document
from .minify import minify_html
from .render import PageRenderer
from .search import SearchIndex
from .sitemap import generate_sitemap
from .utils import copy_tree, walk_tree, write_text

logger = logging.getLogger(__name__)

INDEX_FILE = "lunr-index.json"
DATA_FILE = "search-data.json"
META_FILE = "search-meta.json"
SITEMAP_FILE = "sitemap.xml"


def output_path(output_dir: Path, path: str) -> Path:
    return output_dir / path.lstrip("/")


def build_pages(
    documents: list[Document],
    renderer: PageRenderer,
    output_dir: Path,
    minify: bool = True,
    page_kind: str = "docpage",
) -> None:
    for document in documents:
        html_doc = renderer.render(page_kind, document)
        if minify:
            html_doc = minify_html(html_doc)
        target = output_path(output_dir, document.path)
        write_text(target, html_doc)
        logger.debug("Generated: %s", target)


def is_custom_page(path: Path) -> bool:
    return path.suffix.lower() in {".html", ".htm"}


def build_custom_pages(source_dir: Path, output_dir: Path, renderer: PageRenderer, minify: bool = True) -> int:
    """Render hand-written HTML pages in the source tree; failures are copied verbatim."""
    count = 0
    for path in walk_tree(source_dir, is_custom_page):
        rel = path.relative_to(source_dir).as_posix()
        target = output_dir / rel
        source = path.read_text(encoding="utf-8")
        try:
            html_doc = renderer.render_source(source, f"/{rel}")
        except TemplateError as exc:
            logger.error("Failed to render custom page %s: %s. Copying source as-is.", rel, exc)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(path, target)
            count += 1
            continue
        if minify:
            html_doc = minify_html(html_doc)
        write_text(target, html_doc)
        count += 1
    return count


def build_search_files(output_dir: Path, search_index: SearchIndex) -> None:
    write_text(output_dir / INDEX_FILE, search_index.index_json)
    write_text(output_dir / DATA_FILE, search_index.display_json)
    write_text(output_dir / META_FILE, search_index.meta_json)


def build_sitemap(output_dir: Path, documents: list[Document], config: SiteConfig, source_dir: Path) -> None:
    write_text(output_dir / SITEMAP_FILE, generate_sitemap(documents, config, source_dir))


def is_static_file(path: Path) -> bool:
    return path.suffix.lower() not in {".md", ".html", ".htm"}


def copy_assets(source_dir: Path, output_dir: Path, config: SiteConfig) -> int:
    copied = copy_tree(source_dir, output_dir, is_static_file)
    assets_dir = config.assets_dir
    if assets_dir is not None:
        if assets_dir.exists():
            copied += copy_tree(assets_dir, output_dir / assets_dir.name)
        else:
            logger.warning("Assets directory not found: %s", assets_dir)
    return copied
