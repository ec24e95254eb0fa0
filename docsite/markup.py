from __future__ import annotations

import html
import re
import xml.etree.ElementTree as etree

import markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor
from markdown.treeprocessors import Treeprocessor

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .includes import TOKEN_RE
from .tabs import TabsExtension
from .utils import is_absolute_url, join_url

RESPONSIVE_IMAGE_CLASS = "max-w-full h-auto"
FENCED_BLOCK_RE = re.compile(
    r"^(?P<fence>`{3,}|~{3,})[ \t]*(?P<lang>[\w#+.-]*)[^\n]*\n"
    r"(?P<code>.*?)(?<=\n)(?P=fence)[ \t]*$",
    re.MULTILINE | re.DOTALL,
)
MD_LINK_RE = re.compile(r"^(?P<path>[^#?]*)\.md(?P<rest>[#?].*)?$")
ESCAPED_CHAR_RE = re.compile(r"\x02(\d+)\x03")
STASHED_RE = re.compile(r"\x02[^\x03]*\x03")
PARAGRAPH_RE = re.compile(r"^<p>(?P<inner>.*)</p>$", re.DOTALL)
CODE_BLOCK_RE = re.compile(r"<pre><code(?P<attrs>[^>]*)>(?P<code>.*?)</code></pre>", re.DOTALL)
COPY_ICON = (
    '<svg class="w-4 h-4" fill="none" stroke="currentColor" viewBox="0 0 24 24">'
    '<path stroke-linecap="round" stroke-linejoin="round" stroke-width="2" '
    'd="M8 16H6a2 2 0 01-2-2V6a2 2 0 012-2h8a2 2 0 012 2v2m-6 12h8a2 2 0 002-2v-8a2 2 0 00-2-2h-8a2 2 0 00-2 2v8a2 2 0 002 2z">'
    "</path></svg>"
)


def slugify(text: str) -> str:
    text = text.lower()
    text = re.sub(r"\W+", "-", text, flags=re.UNICODE)
    return text.rstrip("-")


def render_code_block(code: str, lang: str = "") -> str:
    lang = (lang or "").strip()
    if not lang:
        return f"<pre><code>{html.escape(code)}</code></pre>"
    css_lang = html.escape(lang, quote=True)
    try:
        lexer = get_lexer_by_name(lang)
    except ClassNotFound:
        return f'<pre><code class="language-{css_lang}">{html.escape(code)}</code></pre>'
    highlighted = highlight(code, lexer, HtmlFormatter(nowrap=True))
    return f'<pre><code class="highlight language-{css_lang}">{highlighted}</code></pre>'


def unwrap_paragraph(html_text: str) -> str:
    """Drop the ``<p>`` wrapper when the fragment is exactly one paragraph."""
    html_text = html_text.strip()
    match = PARAGRAPH_RE.match(html_text)
    if not match:
        return html_text
    inner = match.group("inner")
    if "<p>" in inner or "</p>" in inner:
        return html_text
    return inner


def add_copy_buttons(html_text: str) -> str:
    """Wrap each code block with a copy-to-clipboard button; ids are numbered per page."""
    count = 0

    def wrap(match: re.Match) -> str:
        nonlocal count
        count += 1
        copy_id = f"copy-{count}"
        onclick = f"copyCodeToClipboard('{copy_id}')"
        return (
            '<div class="code-block-container relative">'
            '<button class="copy-button absolute top-2 right-2 btn btn-xs btn-ghost opacity-70 hover:opacity-100" '
            f'onclick="{onclick}" title="Copy to clipboard">{COPY_ICON}</button>'
            f'<pre id="{copy_id}"><code{match.group("attrs")}>{match.group("code")}</code></pre>'
            "</div>"
        )

    return CODE_BLOCK_RE.sub(wrap, html_text)


class FencedCodePreprocessor(Preprocessor):
    def run(self, lines: list[str]) -> list[str]:
        text = "\n".join(lines)
        while True:
            match = FENCED_BLOCK_RE.search(text)
            if not match:
                break
            placeholder = self.md.htmlStash.store(render_code_block(match.group("code"), match.group("lang")))
            text = f"{text[:match.start()]}\n\n{placeholder}\n\n{text[match.end():]}"
        return text.split("\n")


class HeadingAnchorTreeprocessor(Treeprocessor):
    HEADINGS = {"h1", "h2", "h3", "h4", "h5", "h6"}

    def run(self, root: etree.Element) -> None:
        for el in [node for node in root.iter() if node.tag in self.HEADINGS]:
            text = "".join(el.itertext())
            text = ESCAPED_CHAR_RE.sub(lambda m: chr(int(m.group(1))), text)
            slug = slugify(TOKEN_RE.sub("", STASHED_RE.sub("", text)).strip())
            el.set("id", slug)
            anchor = etree.Element("a")
            anchor.set("class", "header-anchor")
            anchor.set("href", f"#{slug}")
            anchor.text = el.text
            for child in list(el):
                el.remove(child)
                anchor.append(child)
            el.text = None
            el.append(anchor)


class UrlTreeprocessor(Treeprocessor):
    """Responsive images, base-URL prefixes and ``.md`` -> ``.html`` links."""

    def __init__(self, md: markdown.Markdown, base_url: str):
        super().__init__(md)
        self.base_url = base_url

    def prefix(self, url: str) -> str:
        if self.base_url in ("", "/") or not url.startswith("/") or url.startswith("//"):
            return url
        clean_base = self.base_url.rstrip("/")
        if url == clean_base or url.startswith(f"{clean_base}/"):
            return url
        return join_url(clean_base, url)

    def run(self, root: etree.Element) -> None:
        for img in root.iter("img"):
            classes = (img.get("class") or "").split()
            for name in RESPONSIVE_IMAGE_CLASS.split():
                if name not in classes:
                    classes.append(name)
            img.set("class", " ".join(classes))
            src = img.get("src")
            if src:
                img.set("src", self.prefix(src))
        for link in root.iter("a"):
            href = link.get("href")
            if not href or href.startswith("#") or is_absolute_url(href):
                continue
            match = MD_LINK_RE.match(href)
            if match:
                href = f"{match.group('path')}.html{match.group('rest') or ''}"
            link.set("href", self.prefix(href))


class DocsiteExtension(Extension):
    def __init__(self, base_url: str = "/", **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url

    def extendMarkdown(self, md):
        md.preprocessors.register(FencedCodePreprocessor(md), "docsite_fenced_code", 25)
        md.treeprocessors.register(HeadingAnchorTreeprocessor(md), "docsite_heading_anchor", 6)
        md.treeprocessors.register(UrlTreeprocessor(md, self.base_url), "docsite_urls", 5)


def create_markdown(base_url: str = "/") -> markdown.Markdown:
    return markdown.Markdown(
        extensions=[
            "tables",
            DocsiteExtension(base_url=base_url),
            TabsExtension(render=lambda text: render_markdown(text, base_url)),
        ]
    )


def render_markdown(text: str, base_url: str = "/") -> str:
    return create_markdown(base_url).convert(text)


def render_inline(text: str) -> str:
    """Render a short metadata string (emphasis, links) without block wrapping."""
    return unwrap_paragraph(markdown.markdown(text))
