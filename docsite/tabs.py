"""Grouped code samples written as a ``:::tabs`` block.

    :::tabs
    :::tab Python
    ```python
    x = 42
    ```
    :::
    :::tab JavaScript
    ...
    :::
    :::

Each tab body goes through its own Markdown pass; the group is emitted as a
single raw HTML block with the first tab checked.
"""
from __future__ import annotations

import html
import re
import textwrap
import uuid
from typing import Callable, Optional

from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor

TABS_OPEN = ":::tabs"
BLOCK_CLOSE = ":::"
TAB_OPEN_RE = re.compile(r"^:::tab\s+(?P<title>.+?)\s*$")
FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(`{3,}|~{3,})")


def normalize_indentation(text: str) -> str:
    lines = text.split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    text = textwrap.dedent("\n".join(lines))
    return re.sub(r"\n{3,}", "\n\n", text)


def render_tab_group(tabs: list[tuple[str, str]], group: Optional[str] = None) -> str:
    group = group or f"tabs_{uuid.uuid4().hex[:9]}"
    parts = ['<div class="tabs tabs-bordered">']
    for index, (title, body) in enumerate(tabs):
        css_class = "tab tab-active" if index == 0 else "tab"
        checked = ' checked="checked"' if index == 0 else ""
        label = html.escape(title, quote=True)
        parts.append(f'<input type="radio" name="{group}" class="{css_class}" aria-label="{label}"{checked}/>')
        parts.append(f'<div class="tab-content border-base-300 bg-base-100 p-2">\n{body}\n</div>')
    parts.append("</div>")
    return "\n".join(parts)


class TabsPreprocessor(Preprocessor):
    def __init__(self, md, render: Callable[[str], str]):
        super().__init__(md)
        self.render = render

    def collect(self, lines: list[str], start: int) -> Optional[tuple[int, list[tuple[str, list[str]]]]]:
        """Gather the raw tab bodies of one group; ``None`` when it is never closed."""
        tabs: list[tuple[str, list[str]]] = []
        current: Optional[tuple[str, list[str]]] = None
        fence = ""
        for index in range(start, len(lines)):
            line = lines[index]
            stripped = line.strip()
            fence_match = FENCE_RE.match(line)
            if fence_match:
                marker = fence_match.group(2)
                if not fence:
                    fence = marker
                elif marker == fence:
                    fence = ""
            elif not fence:
                tab_match = TAB_OPEN_RE.match(stripped)
                if tab_match:
                    current = (tab_match.group("title"), [])
                    tabs.append(current)
                    continue
                if stripped == BLOCK_CLOSE:
                    if current is not None:
                        current = None
                        continue
                    return index, tabs
            if current is not None:
                current[1].append(line)
        return None

    def run(self, lines: list[str]) -> list[str]:
        out: list[str] = []
        index = 0
        while index < len(lines):
            if lines[index].strip() == TABS_OPEN:
                collected = self.collect(lines, index + 1)
                if collected is not None:
                    end, raw_tabs = collected
                    rendered = []
                    for title, body_lines in raw_tabs:
                        body = normalize_indentation("\n".join(body_lines))
                        if body:
                            rendered.append((title, self.render(body)))
                    if rendered:
                        out.extend(["", self.md.htmlStash.store(render_tab_group(rendered)), ""])
                        index = end + 1
                        continue
            out.append(lines[index])
            index += 1
        return out


class TabsExtension(Extension):
    def __init__(self, render: Callable[[str], str], **kwargs):
        super().__init__(**kwargs)
        self.render = render

    def extendMarkdown(self, md):
        md.preprocessors.register(TabsPreprocessor(md, self.render), "docsite_tabs", 27)
