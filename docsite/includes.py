from __future__ import annotations

import re
import uuid

STASH_KEY = "include_stash"
TOKEN_PREFIX = "docsiteinclude"
TOKEN_RE = re.compile(rf"{TOKEN_PREFIX}[0-9a-f]{{32}}")


class IncludeStash:
    """Raw HTML held back from the Markdown pass of a single document.

    Templates store HTML here and emit only an opaque token; ``substitute``
    puts the HTML back once Markdown rendering is done and empties the stash.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def store(self, html: str) -> str:
        token = f"{TOKEN_PREFIX}{uuid.uuid4().hex}"
        self._entries[token] = html
        return token

    def clear(self) -> None:
        self._entries.clear()

    def substitute(self, text: str) -> str:
        # Newest first: an outer include's HTML may carry the token of an inner one.
        for token, html in reversed(list(self._entries.items())):
            text = text.replace(f"<p>{token}</p>", html)
            text = text.replace(token, html)
        self.clear()
        return text
