"""Tests for HTML minification."""

from __future__ import annotations

from docsite.minify import minify_html

PAGE = """<!DOCTYPE html>
<html>
  <head>
    <!-- comment -->
    <title>  Page  </title>
  </head>
  <body>
    <p>Some     text
       over lines</p>
    <pre><code class="language-python">def f():
    return   1
</code></pre>
    <p>Inline <code>a  =  b</code> code</p>
    <script>
      var  x = 1;
    </script>
  </body>
</html>
"""


def test_whitespace_and_comments_are_removed() -> None:
    """Test collapsing of insignificant whitespace."""
    out = minify_html(PAGE)

    assert "<!-- comment -->" not in out
    assert "<title> Page </title>" in out
    assert "Some text" in out
    assert len(out) < len(PAGE)


def test_preformatted_content_is_preserved() -> None:
    """Test that pre, code and script contents stay byte-identical."""
    out = minify_html(PAGE)

    assert '<pre><code class="language-python">def f():\n    return   1\n</code></pre>' in out
    assert "<code>a  =  b</code>" in out
    assert "<script>\n      var  x = 1;\n    </script>" in out


def test_minify_is_idempotent() -> None:
    """Test that minifying twice changes nothing more."""
    once = minify_html(PAGE)

    assert minify_html(once) == once


def test_textarea_is_preserved() -> None:
    """Test textarea contents."""
    html = "<form>\n   <textarea>  keep\n\n  this </textarea>\n</form>"

    assert "<textarea>  keep\n\n  this </textarea>" in minify_html(html)
