# normalize.py
# SPDX-License-Identifier: MIT
"""Readability rewrites for assistant output.

The rewrites are pure string transforms: fenced code blocks get a
language tag when one is missing, ``function_results`` regions become a
collapsible details block, ``augment_code_snippet`` tags are reduced to
their canonical ``path``/``mode`` attributes, and the ``html`` format
renders the body with highlighted code.
"""

from __future__ import annotations

import re
from typing import Optional

from .errors import InvalidConfigurationError
from .language_id import CodeLanguageDetector, HeuristicCodeLanguageDetector
from .log import get_logger

log = get_logger(__name__)

# ```lang? <whitespace> body ``` ; lang is a single word glued to the fence.
_CODE_BLOCK = re.compile(r'```(\w+)?\s*([\s\S]*?)```')
_FUNCTION_RESULTS = re.compile(r'<function_results>([\s\S]*?)</function_results>')
_CODE_SNIPPET = re.compile(r'<augment_code_snippet([^>]*)>([\s\S]*?)</augment_code_snippet>')
_PATH_ATTR = re.compile(r'\bpath="([^"]*)"', re.IGNORECASE)
_MODE_ATTR = re.compile(r'\bmode="([^"]*)"', re.IGNORECASE)
_LEADING_INDENT = re.compile(r'^[ \t]+', re.MULTILINE)
_EXCESS_BLANK_LINES = re.compile(r'\n{3,}')

DEFAULT_SNIPPET_PATH = "unknown"
DEFAULT_SNIPPET_MODE = "EXCERPT"
DEFAULT_DETECTOR: CodeLanguageDetector = HeuristicCodeLanguageDetector()


class OutputFormat:
    """Supported output formats.

    Formats:
    * ``DEFAULT``: leave the text untouched.
    * ``MARKDOWN`` / ``ENHANCED``: apply the three markdown rewrites.
    * ``HTML``: render to HTML and highlight code blocks.
    """

    DEFAULT = "default"
    MARKDOWN = "markdown"
    ENHANCED = "enhanced"
    HTML = "html"
    ALL = {DEFAULT, MARKDOWN, ENHANCED, HTML}

    @classmethod
    def normalize(cls, value: Optional[str]) -> str:
        fmt = (value or cls.ENHANCED).strip().lower()
        if fmt not in cls.ALL:
            raise InvalidConfigurationError(
                f"Invalid output format: {value!r}. Expected one of {sorted(cls.ALL)}"
            )
        return fmt

    @classmethod
    def rewrites_markdown(cls, fmt: str) -> bool:
        return fmt in (cls.MARKDOWN, cls.ENHANCED)


def _detect(code: str, detector: Optional[CodeLanguageDetector]) -> str:
    if detector is None:
        return ""
    pred = detector.detect_code(code)
    return pred.lang if pred else ""


def tag_code_blocks(text: str, *, detector: Optional[CodeLanguageDetector] = DEFAULT_DETECTOR) -> str:
    """Backfill missing fence languages and trim block bodies.

    Every fenced block is re-emitted as ``lang`` fence, trimmed body,
    closing fence, each on its own line. Blocks that already carry a tag
    keep it; untagged blocks get the detector's guess, or stay untagged
    when the guess is unknown.

    Args:
        text (str): Text containing fenced blocks.
        detector (CodeLanguageDetector | None): Detector used for
            untagged blocks; None disables detection.

    Returns:
        str: Rewritten text.
    """
    def _replace(match: re.Match[str]) -> str:
        lang = match.group(1) or _detect(match.group(2), detector)
        return f"```{lang}\n{match.group(2).strip()}\n```"

    return _CODE_BLOCK.sub(_replace, text)


def format_function_results(text: str) -> str:
    """Wrap ``function_results`` regions in a collapsible details block."""
    def _replace(match: re.Match[str]) -> str:
        content = match.group(1).strip()
        return f"<details>\n<summary>Function Results</summary>\n\n```\n{content}\n```\n</details>\n"

    return _FUNCTION_RESULTS.sub(_replace, text)


def format_code_snippets(text: str) -> str:
    """Rewrite ``augment_code_snippet`` tags with canonical attributes.

    Only ``path`` (default ``"unknown"``) and ``mode`` (default
    ``"EXCERPT"``) survive; attribute names match case-insensitively and
    any other attribute is dropped.
    """
    def _replace(match: re.Match[str]) -> str:
        attrs = match.group(1)
        path_match = _PATH_ATTR.search(attrs)
        mode_match = _MODE_ATTR.search(attrs)
        path = path_match.group(1) if path_match else DEFAULT_SNIPPET_PATH
        mode = mode_match.group(1) if mode_match else DEFAULT_SNIPPET_MODE
        return (
            f'<augment_code_snippet path="{path}" mode="{mode}">\n'
            f"{match.group(2).strip()}\n</augment_code_snippet>"
        )

    return _CODE_SNIPPET.sub(_replace, text)


def tidy_code_blocks(text: str, *, detector: Optional[CodeLanguageDetector] = DEFAULT_DETECTOR) -> str:
    """Tag and tidy fenced blocks for pasting back into a prompt.

    Like :func:`tag_code_blocks`, and additionally turns each leading
    indentation character into a single space and collapses three or more
    consecutive newlines into one blank line.
    """
    def _replace(match: re.Match[str]) -> str:
        lang = match.group(1) or _detect(match.group(2), detector)
        code = match.group(2).strip()
        code = _LEADING_INDENT.sub(lambda m: " " * len(m.group(0)), code)
        code = _EXCESS_BLANK_LINES.sub("\n\n", code)
        return f"```{lang}\n{code}\n```"

    return _CODE_BLOCK.sub(_replace, text)


def normalize_output(
    text: str,
    fmt: Optional[str] = OutputFormat.ENHANCED,
    *,
    detector: Optional[CodeLanguageDetector] = DEFAULT_DETECTOR,
    highlight_code: bool = True,
) -> str:
    """Rewrite assistant output for the requested format.

    Args:
        text (str): Output text.
        fmt (str | None): One of :class:`OutputFormat`; None means
            ``"enhanced"``.
        detector (CodeLanguageDetector | None): Detector for untagged
            fences in the markdown formats.
        highlight_code (bool): Whether the html format highlights code.

    Returns:
        str: Rewritten text; unchanged for ``"default"``.

    Raises:
        InvalidConfigurationError: If ``fmt`` is not a known format.
    """
    fmt = OutputFormat.normalize(fmt)
    if fmt == OutputFormat.DEFAULT or not text:
        return text
    if OutputFormat.rewrites_markdown(fmt):
        out = tag_code_blocks(text, detector=detector)
        out = format_function_results(out)
        return format_code_snippets(out)

    from .extras.html_render import render_html

    log.debug("Rendering %d chars to HTML", len(text))
    return render_html(text, highlight_code=highlight_code)


__all__ = [
    "OutputFormat",
    "DEFAULT_DETECTOR",
    "DEFAULT_SNIPPET_PATH",
    "DEFAULT_SNIPPET_MODE",
    "tag_code_blocks",
    "format_function_results",
    "format_code_snippets",
    "tidy_code_blocks",
    "normalize_output",
]
