from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Union

from .errors import ConfigError
from .utils import is_absolute_url, join_url, page_href, parse_bool, search_excluded


@dataclass
class NavLeaf:
    title: str
    href: str
    document: Optional[str] = None
    external: bool = False
    icon: str = ""
    badge: str = ""
    badge_variant: str = "primary"
    options: dict = field(default_factory=dict)

    is_branch = False

    @property
    def exclude_from_search(self) -> bool:
        return search_excluded(self.options)


@dataclass
class NavBranch:
    title: str
    entries: list = field(default_factory=list)
    open: bool = False
    options: dict = field(default_factory=dict)

    is_branch = True


NavEntry = Union[NavLeaf, NavBranch]


@dataclass
class Navigation:
    menu: list = field(default_factory=list)
    navbar: list = field(default_factory=list)
    footer: list = field(default_factory=list)

    def find(self, path: str) -> Optional[NavLeaf]:
        """First leaf, depth-first through the menu and then the navbar, targeting ``path``."""
        for tree in (self.menu, self.navbar):
            for leaf in iter_leaves(tree):
                if leaf.document == path:
                    return leaf
        return None


def transform_document_path(path: str) -> str:
    """Map a navigation document reference onto the generated page path."""
    if not path:
        return path
    base, _, anchor = path.partition("#")
    if base.endswith(".md"):
        base = base[: -len(".md")] + ".html"
    elif not base.endswith(".html"):
        base = f"{base}.html"
    return f"{base}#{anchor}" if anchor else base


def document_key(path: str) -> str:
    target = transform_document_path(path).partition("#")[0]
    return "/" + target.lstrip("/")


def iter_leaves(entries: list) -> Iterator[NavLeaf]:
    for entry in entries:
        if entry.is_branch:
            yield from iter_leaves(entry.entries)
        else:
            yield entry


def parse_entry(item: object, base_url: str, friendly: bool) -> NavEntry:
    if isinstance(item, str):
        if is_absolute_url(item):
            return NavLeaf(title=item, href=item, external=True)
        target = "/" + transform_document_path(item).lstrip("/")
        return NavLeaf(title=item, href=page_href(target, base_url, friendly), document=document_key(item))
    if not isinstance(item, dict):
        raise ConfigError(f"Navigation entry must be a string or mapping, got {item!r}")

    title = str(item.get("title") or item.get("label") or "")
    if "items" in item:
        children = item.get("items") or []
        if not isinstance(children, list):
            raise ConfigError(f"Navigation items of {title!r} must be a list")
        return NavBranch(
            title=title,
            entries=[parse_entry(child, base_url, friendly) for child in children],
            open=parse_bool(item.get("open")),
            options=item,
        )

    leaf = NavLeaf(
        title=title,
        href="#",
        icon=str(item.get("icon") or ""),
        badge=str(item.get("badge") or ""),
        badge_variant=str(item.get("badgeVariant") or "primary"),
        options=item,
    )
    document = item.get("document")
    url = item.get("url")
    if document:
        document = str(document)
        target = "/" + transform_document_path(document).lstrip("/")
        leaf.document = document_key(document)
        leaf.href = page_href(target, base_url, friendly)
    elif url:
        url = str(url)
        if is_absolute_url(url):
            leaf.href = url
            leaf.external = True
        else:
            leaf.href = join_url(base_url, transform_document_path(url))
    return leaf


def parse_entries(items: object, base_url: str = "/", friendly: bool = False) -> list:
    if items is None:
        return []
    if not isinstance(items, list):
        raise ConfigError("Navigation tree must be a list")
    return [parse_entry(item, base_url, friendly) for item in items]


def load_navigation(data: dict, base_url: str = "/", friendly: bool = False) -> Navigation:
    return Navigation(
        menu=parse_entries(data.get("menu"), base_url, friendly),
        navbar=parse_entries(data.get("navbar"), base_url, friendly),
        footer=parse_entries(data.get("footer"), base_url, friendly),
    )
