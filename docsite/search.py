from __future__ import annotations

import datetime as dt
import html
import logging
import re
from dataclasses import dataclass
from typing import Optional

from lunr import __TARGET_JS_VERSION__, lunr
from lunr.index import Index

from .cache import dump_json, hash_text
from .content import Document
from .navigation import Navigation
from .render import strip_tags
from .utils import iso_date, search_excluded

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 200
INDEX_FIELDS = [
    {"field_name": "title", "boost": 10},
    "content",
    "path",
]
WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class SearchIndex:
    index: Index
    display: dict
    meta: dict

    @property
    def index_json(self) -> str:
        return dump_json(self.index.serialize())

    @property
    def display_json(self) -> str:
        return dump_json(self.display)

    @property
    def meta_json(self) -> str:
        return dump_json(self.meta)


def empty_index() -> Index:
    """An index with no documents; lunr cannot build one from an empty corpus."""
    fields = [field["field_name"] if isinstance(field, dict) else field for field in INDEX_FIELDS]
    return Index.load(
        {
            "version": __TARGET_JS_VERSION__,
            "fields": fields,
            "fieldVectors": [],
            "invertedIndex": [],
            "pipeline": ["stemmer"],
        }
    )


def is_excluded(document: Document, navigation: Navigation) -> bool:
    if search_excluded(document.metadata):
        return True
    entry = navigation.find(document.path)
    return entry is not None and entry.exclude_from_search


def preview(document: Document) -> str:
    text = html.unescape(strip_tags(document.body_html))
    text = WHITESPACE_RE.sub(" ", text).strip()
    return text[:PREVIEW_LENGTH] + ("..." if len(text) > PREVIEW_LENGTH else "")


def display_record(document: Document) -> dict:
    return {
        "title": document.title,
        "content": preview(document),
        "description": str(document.metadata.get("description") or ""),
        "path": document.path,
    }


def build_search_index(
    documents: list[Document], navigation: Navigation, now: Optional[dt.datetime] = None
) -> SearchIndex:
    records = []
    display = {}
    for document in documents:
        if is_excluded(document, navigation):
            logger.debug("Excluded from search: %s", document.path)
            continue
        ref = str(document.id)
        records.append(
            {
                "id": ref,
                "title": document.title,
                "content": document.body_markup,
                "path": document.path,
            }
        )
        display[ref] = display_record(document)

    index = lunr(ref="id", fields=INDEX_FIELDS, documents=records) if records else empty_index()
    meta = {
        "timestamp": iso_date(now or dt.datetime.now(dt.timezone.utc)),
        "indexHash": hash_text(dump_json(index.serialize())),
        "dataHash": hash_text(dump_json(display)),
        "documentCount": len(records),
    }
    logger.info("Search index built with %d documents.", len(records))
    return SearchIndex(index=index, display=display, meta=meta)
