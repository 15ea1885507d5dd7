# html_render.py
# SPDX-License-Identifier: MIT
"""Markdown to HTML rendering with Pygments highlighting of code blocks."""

from __future__ import annotations

import html
import re

import markdown
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name

from ..log import get_logger

log = get_logger(__name__)

# Python-Markdown's fenced_code extension emits this shape for tagged fences.
_RENDERED_CODE_BLOCK = re.compile(r'<pre><code class="language-([\w+#.-]+)">([\s\S]*?)</code></pre>')

MARKDOWN_EXTENSIONS: tuple[str, ...] = ("fenced_code", "tables")


def markdown_to_html(text: str) -> str:
    """Render Markdown text to an HTML fragment."""
    return markdown.markdown(text, extensions=list(MARKDOWN_EXTENSIONS))


def highlight_code_blocks(rendered: str, *, css_class: str = "highlight") -> str:
    """Apply Pygments highlighting to every tagged ``<pre><code>`` block.

    A block whose language has no lexer, or whose highlighting fails for
    any other reason, is left exactly as rendered.

    Args:
        rendered (str): HTML produced by :func:`markdown_to_html`.
        css_class (str): Extra class added to highlighted ``<code>``
            elements so a stylesheet can target them.

    Returns:
        str: HTML with highlighted code blocks.
    """
    formatter = HtmlFormatter(nowrap=True)

    def _replace(match: re.Match[str]) -> str:
        lang, body = match.group(1), match.group(2)
        try:
            lexer = get_lexer_by_name(lang)
            highlighted = highlight(html.unescape(body), lexer, formatter)
        except Exception as exc:  # noqa: BLE001 - any highlighter failure keeps the block
            log.debug("Highlighting skipped for language %r: %s", lang, exc)
            return match.group(0)
        return f'<pre><code class="language-{lang} {css_class}">{highlighted}</code></pre>'

    return _RENDERED_CODE_BLOCK.sub(_replace, rendered)


def render_html(text: str, *, highlight_code: bool = True) -> str:
    """Render Markdown to HTML, optionally highlighting code blocks.

    Args:
        text (str): Markdown source.
        highlight_code (bool): Whether to run :func:`highlight_code_blocks`.

    Returns:
        str: HTML fragment.
    """
    rendered = markdown_to_html(text)
    if highlight_code:
        rendered = highlight_code_blocks(rendered)
    return rendered


__all__ = ["MARKDOWN_EXTENSIONS", "markdown_to_html", "highlight_code_blocks", "render_html"]
