from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

import yaml
from jinja2 import Environment, TemplateError
from markupsafe import Markup

from .config import PACKAGE_VERSION, SiteConfig
from .errors import FatalParseError
from .includes import STASH_KEY, IncludeStash
from .markup import add_copy_buttons, render_inline, render_markdown
from .utils import parse_bool, walk_tree

logger = logging.getLogger(__name__)

FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(`{3,}|~{3,})")
HEADING_RE = re.compile(r"^#{1,6}[ \t]+(?P<text>.+?)(?:[ \t]+#+)?[ \t]*$")
RAW_PROPERTIES = {"api_base_url", "base_url", "baseUrl", "url", "api_url", "endpoint", "path", "link", "href"}
DEFAULT_TITLE = "Home"


@dataclass
class Document:
    id: int
    path: str
    source: str
    metadata: dict = field(default_factory=dict)
    body_markup: str = ""
    body_html: str = ""
    props: dict = field(default_factory=dict)
    title: str = DEFAULT_TITLE


def parse_front_matter(text: str, source: str = "<string>") -> tuple[dict, str]:
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            end = i
            break
    if end is None:
        return {}, clean_text

    try:
        meta = yaml.safe_load("\n".join(lines[1:end]))
    except yaml.YAMLError as exc:
        raise FatalParseError(source, f"invalid metadata block: {exc}") from exc
    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise FatalParseError(source, "metadata block must be a mapping")
    body = "\n".join(lines[end + 1 :])
    return meta, body


def source_to_path(source: str) -> str:
    return "/" + PurePosixPath(source).with_suffix(".html").as_posix().lstrip("/")


def first_heading(body: str) -> str:
    in_fence = False
    fence_marker = ""
    for line in body.splitlines():
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(2)
            if not in_fence:
                in_fence = True
                fence_marker = marker
            elif marker == fence_marker:
                in_fence = False
                fence_marker = ""
            continue
        if in_fence:
            continue
        match = HEADING_RE.match(line)
        if match:
            return match.group("text").strip()
    return ""


def resolve_title(metadata: dict, body: str, path: str) -> str:
    """Metadata title, else first heading, else the file name, else ``Home``."""
    title = metadata.get("title")
    if title is not None and str(title).strip():
        return str(title).strip()
    heading = first_heading(body)
    if heading:
        return heading
    stem = PurePosixPath(path).stem
    if stem and stem.lower() != "index":
        return stem.replace("-", " ").replace("_", " ").title()
    return DEFAULT_TITLE


def build_props(metadata: dict, config: SiteConfig) -> dict:
    merged = {**config.settings, **config.globals, **metadata, "version": PACKAGE_VERSION}
    props = {}
    for key, value in merged.items():
        if isinstance(value, str) and key not in RAW_PROPERTIES:
            props[key] = Markup(render_inline(value))
        else:
            props[key] = value
    return props


class DocumentParser:
    def __init__(self, config: SiteConfig, env: Environment) -> None:
        self.config = config
        self.env = env

    def render_body_template(self, body: str, props: dict, stash: IncludeStash, source: str) -> str:
        try:
            return self.env.from_string(body).render({**props, STASH_KEY: stash})
        except TemplateError as exc:
            logger.warning("Template error in %s: %s. Rendering body without template data.", source, exc)
            stash.clear()
            return body

    def parse(self, raw_source: str, source: str, doc_id: int) -> Document:
        metadata, body = parse_front_matter(raw_source, source)
        path = source_to_path(source)
        props = build_props(metadata, self.config)
        stash = IncludeStash()
        markup = body
        if parse_bool(metadata.get("template", True)):
            markup = self.render_body_template(body, props, stash, source)
        try:
            body_html = render_markdown(markup, self.config.base_url)
        except Exception as exc:
            raise FatalParseError(source, f"markdown rendering failed: {exc}") from exc
        body_html = add_copy_buttons(body_html)
        body_html = stash.substitute(body_html)
        return Document(
            id=doc_id,
            path=path,
            source=source,
            metadata=metadata,
            body_markup=body,
            body_html=body_html,
            props=props,
            title=resolve_title(metadata, body, path),
        )


def is_markdown(path: Path) -> bool:
    return path.suffix.lower() == ".md"


def discover_documents(source_dir: Path, parser: DocumentParser) -> list[Document]:
    """Parse every Markdown file under ``source_dir``; ids follow discovery order.

    The first document that fails to parse aborts the whole pass.
    """
    documents: list[Document] = []
    seen: dict[str, str] = {}
    for doc_id, file_path in enumerate(walk_tree(source_dir, is_markdown)):
        source = file_path.relative_to(source_dir).as_posix()
        logger.debug("Processing markdown file: %s", source)
        try:
            raw_source = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise FatalParseError(source, f"unreadable source file: {exc}") from exc
        document = parser.parse(raw_source, source, doc_id)
        if document.path in seen:
            raise FatalParseError(source, f"output path {document.path} already produced by {seen[document.path]}")
        seen[document.path] = source
        documents.append(document)
    return documents
