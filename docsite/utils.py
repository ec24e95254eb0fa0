from __future__ import annotations

import datetime as dt
import logging
import re
import shutil
from pathlib import Path
from typing import Callable, Iterator, Optional

from .errors import DocsiteError

logger = logging.getLogger(__name__)

SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def parse_int(value: object, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def is_absolute_url(value: str) -> bool:
    return bool(SCHEME_RE.match(value)) or value.startswith("//")


def join_url(base: str, path: str) -> str:
    if is_absolute_url(path):
        return path
    base = base.rstrip("/")
    path = path.lstrip("/")
    if not path:
        return base or "/"
    return f"{base}/{path}"


def iso_date(value: dt.datetime) -> str:
    value = value.astimezone(dt.timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def walk_tree(root: Path, accept: Optional[Callable[[Path], bool]] = None) -> Iterator[Path]:
    """Yield files under ``root`` in a stable, sorted order.

    ``accept`` filters on the file path; directories are always descended.
    """
    if not root.exists():
        return
    for path in sorted(root.rglob("*"), key=lambda p: p.relative_to(root).as_posix()):
        if not path.is_file():
            continue
        if accept is not None and not accept(path):
            continue
        yield path


def copy_tree(src: Path, dest: Path, accept: Optional[Callable[[Path], bool]] = None) -> int:
    copied = 0
    for path in walk_tree(src, accept):
        target = dest / path.relative_to(src)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, target)
        logger.debug("Copied %s", target)
        copied += 1
    return copied


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def clean_output_dir(output_dir: Path, project_root: Path) -> None:
    if not output_dir.exists():
        return
    output_resolved = output_dir.resolve()
    root_resolved = project_root.resolve()
    if output_resolved == root_resolved:
        raise DocsiteError("Refusing to clean project root.")
    if not output_resolved.is_relative_to(root_resolved):
        raise DocsiteError("Refusing to clean output directory outside project root.")
    shutil.rmtree(output_dir)


def page_href(path: str, base_url: str, friendly: bool) -> str:
    """Link to a generated page, honoring the base URL and friendly-URL mode."""
    path, _, anchor = path.partition("#")
    if friendly:
        if path.endswith("/index.html") or path == "index.html":
            path = path[: -len("index.html")]
        elif path.endswith(".html"):
            path = path[: -len(".html")]
    href = join_url(base_url, path)
    if path.endswith("/") and not href.endswith("/"):
        href += "/"
    return f"{href}#{anchor}" if anchor else href


def search_excluded(values: object) -> bool:
    """True when a metadata or navigation mapping opts out of the search index."""
    if not isinstance(values, dict):
        return False
    if parse_bool(values.get("excludeFromSearch")):
        return True
    return "searchable" in values and not parse_bool(values.get("searchable"))
