from __future__ import annotations

import re

PROTECTED_RE = re.compile(
    r"<pre\b[^>]*>.*?</pre>|<textarea\b[^>]*>.*?</textarea>|<script\b[^>]*>.*?</script>|<code\b[^>]*>.*?</code>",
    re.IGNORECASE | re.DOTALL,
)
COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
WHITESPACE_RUN_RE = re.compile(r"\s{2,}")
PLACEHOLDER = "@@PRESERVE_{}@@"


def minify_html(html: str) -> str:
    """Collapse whitespace outside of ``<pre>``, ``<code>``, ``<textarea>`` and ``<script>``.

    Protected regions are swapped for numbered placeholders first and put back
    verbatim at the end, so their bytes never change.
    """
    kept: list[str] = []

    def stash(match: re.Match) -> str:
        kept.append(match.group(0))
        return PLACEHOLDER.format(len(kept) - 1)

    text = PROTECTED_RE.sub(stash, html)
    text = COMMENT_RE.sub("", text)
    text = WHITESPACE_RUN_RE.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = text.strip()
    for index, block in enumerate(kept):
        text = text.replace(PLACEHOLDER.format(index), block)
    return text
