from __future__ import annotations

import logging
import re
import textwrap
from pathlib import Path
from typing import Optional

from jinja2 import Environment, pass_context
from jinja2.runtime import Context
from markupsafe import Markup, escape

from .includes import STASH_KEY
from .markup import render_markdown, unwrap_paragraph
from .utils import join_url

logger = logging.getLogger(__name__)

TEMPLATE_SYNTAX_RE = re.compile(r"\{\{|\{%|\{#")

ALERT_ICONS = {
    "success": (
        '<svg xmlns="http://www.w3.org/2000/svg" class="h-6 w-6 shrink-0 stroke-current" fill="none" '
        'viewBox="0 0 24 24"><path stroke-linecap="round" stroke-linejoin="round" stroke-width="2" '
        'd="M9 12l2 2 4-4m6 2a9 9 0 11-18 0 9 9 0 0118 0z"/></svg>'
    ),
    "warning": (
        '<svg xmlns="http://www.w3.org/2000/svg" class="h-6 w-6 shrink-0 stroke-current" fill="none" '
        'viewBox="0 0 24 24"><path stroke-linecap="round" stroke-linejoin="round" stroke-width="2" '
        'd="M12 9v2m0 4h.01m-6.938 4h13.856c1.54 0 2.502-1.667 1.732-3L13.732 4c-.77-1.333-2.694-1.333'
        '-3.464 0L3.34 16c-.77 1.333.192 3 1.732 3z"/></svg>'
    ),
    "error": (
        '<svg xmlns="http://www.w3.org/2000/svg" class="h-6 w-6 shrink-0 stroke-current" fill="none" '
        'viewBox="0 0 24 24"><path stroke-linecap="round" stroke-linejoin="round" stroke-width="2" '
        'd="M10 14l2-2m0 0l2-2m-2 2l-2-2m2 2l2 2m7-2a9 9 0 11-18 0 9 9 0 0118 0z"/></svg>'
    ),
    "info": (
        '<svg xmlns="http://www.w3.org/2000/svg" class="h-6 w-6 shrink-0 stroke-current" fill="none" '
        'viewBox="0 0 24 24"><path stroke-linecap="round" stroke-linejoin="round" stroke-width="2" '
        'd="M13 16h-1v-4h-1m1-4h.01M21 12a9 9 0 11-18 0 9 9 0 0118 0z"/></svg>'
    ),
}

SEARCH_VARIANTS = {
    "desktop": ("search-desktop", "search-results", "search-widget-desktop"),
    "mobile-navbar": ("search-mobile-navbar", "search-results-mobile-navbar", "search-widget-mobile-navbar"),
    "mobile-sidebar": ("search-mobile", "search-results-mobile", "search-widget-mobile-sidebar"),
}


def eq(a: object, b: object, ignore_case: bool = False) -> bool:
    if ignore_case and isinstance(a, str) and isinstance(b, str):
        return a.lower() == b.lower()
    return a == b


def is_list(value: object) -> bool:
    return isinstance(value, (list, tuple))


def is_mapping(value: object) -> bool:
    return isinstance(value, dict)


def badge(text: object, variant: str = "primary") -> Markup:
    variant = variant or "primary"
    return Markup('<span class="badge badge-{}">{}</span>').format(variant, text)


def alert_html(body: str, variant: str = "info", base_url: str = "/") -> str:
    variant = variant if variant in ALERT_ICONS else "info"
    content = unwrap_paragraph(render_markdown(textwrap.dedent(body).strip(), base_url))
    return f'<div role="alert" class="alert alert-{variant}">{ALERT_ICONS[variant]}<div>{content}</div></div>'


def search_widget_html(variant: str = "desktop", placeholder: str = "", width: Optional[str] = None) -> str:
    if variant not in SEARCH_VARIANTS:
        logger.warning("Unknown search widget variant %r, using desktop.", variant)
        variant = "desktop"
    input_id, results_id, css_class = SEARCH_VARIANTS[variant]
    style = f' style="width: {escape(width)}"' if width else ""
    return (
        f'<div class="search-widget {css_class}">'
        f'<input id="{input_id}" type="search" class="input input-bordered search-input" '
        f'placeholder="{escape(placeholder)}" autocomplete="off"{style}/>'
        f'<div id="{results_id}" class="search-results hidden"></div>'
        "</div>"
    )


def resolve_include(root: Path, filename: str) -> Optional[Path]:
    """Path of ``filename`` inside ``root``, or ``None`` when it is missing or escapes it."""
    root = root.resolve()
    target = (root / filename).resolve()
    if not target.is_relative_to(root):
        logger.warning("Include %s resolves outside %s, skipped.", filename, root)
        return None
    if not target.is_file():
        logger.warning("Include file not found: %s", target)
        return None
    return target


def register_helpers(env: Environment, include_root: Path, base_url: str = "/", search_placeholder: str = "") -> None:
    @pass_context
    def include_raw(context: Context, filename: str, **data: object) -> str:
        target = resolve_include(include_root, filename)
        if target is None:
            return ""
        text = target.read_text(encoding="utf-8")
        if TEMPLATE_SYNTAX_RE.search(text):
            values = {**context.get_all(), **data}
            text = context.environment.from_string(text).render(values)
        stash = context.get(STASH_KEY)
        if stash is None:
            return Markup(text)
        return stash.store(text)

    def alert(body: object = None, variant: str = "info", caller=None) -> Markup:
        text = caller() if caller is not None else (body or "")
        return Markup(alert_html(str(text), variant, base_url))

    def search_widget(variant: str = "desktop", placeholder: Optional[str] = None, width: Optional[str] = None) -> Markup:
        return Markup(search_widget_html(variant, search_placeholder if placeholder is None else placeholder, width))

    env.globals.update(
        eq=eq,
        is_list=is_list,
        is_mapping=is_mapping,
        alert=alert,
        badge=badge,
        url_join=join_url,
        include_raw=include_raw,
        search_widget=search_widget,
    )
    env.tests["list"] = is_list
    env.tests["mapping"] = is_mapping
