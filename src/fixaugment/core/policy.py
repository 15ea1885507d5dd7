# policy.py
# SPDX-License-Identifier: MIT
"""Advisory checks and light-touch fixes for outgoing prompts.

Nothing here blocks the caller: the size and complexity checks only
produce messages, and the fixes return new strings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from .log import get_logger

log = get_logger(__name__)

MAX_SAFE_SIZE = 8000
COMPLEXITY_MIN_LENGTH = 2000

# Two keywords separated by anything: phrasing of a task too broad for one request.
COMPLEXITY_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"write.*documentation", re.IGNORECASE),
    re.compile(r"create.*complete", re.IGNORECASE),
    re.compile(r"implement.*entire", re.IGNORECASE),
    re.compile(r"build.*full", re.IGNORECASE),
    re.compile(r"generate.*all", re.IGNORECASE),
)

BREAKDOWN_ADVICE = (
    "This looks like a complex task. Consider breaking it down:\n"
    "1. Start with the main structure\n"
    "2. Ask for specific sections one by one\n"
    "3. Use 'continue from where you left off' for incomplete responses\n"
    "This prevents 'too large input' errors and credit loss."
)

# Markers that show up in assistant replies pasted into an editor.
OUTPUT_MARKERS: tuple[str, ...] = (
    "```",
    "function_results",
    "<augment_code_snippet",
    "Agent:",
    "Next Edit:",
    "Instructions:",
    "Chat:",
)

_UNESCAPED_QUOTE = re.compile(r'(?<!\\)"')
_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass(slots=True, frozen=True)
class SizeCheck:
    """Outcome of :func:`check_input_size`.

    Attributes:
        is_over_threshold (bool): True when the text is longer than the
            limit.
        advisory_message (str | None): Explanation naming the length and
            the limit; None when the size is fine.
    """
    is_over_threshold: bool
    advisory_message: str | None = None


@dataclass(slots=True)
class PromptReview:
    """Result of :func:`review_prompt`."""

    text: str
    issues: list[str] = field(default_factory=list)
    size: SizeCheck = field(default_factory=lambda: SizeCheck(False))
    breakdown: str | None = None


def check_input_size(text: str, limit: int = MAX_SAFE_SIZE) -> SizeCheck:
    """Flag text longer than ``limit`` characters.

    Args:
        text (str): Prompt text.
        limit (int): Largest size considered safe.

    Returns:
        SizeCheck: Threshold flag and advisory message.
    """
    size = len(text)
    if size > limit:
        return SizeCheck(
            True,
            f"Input is {size} characters (recommended max: {limit}). "
            "Consider breaking this into smaller tasks to avoid \"too large input\" "
            "errors and credit consumption.",
        )
    return SizeCheck(False)


def suggest_task_breakdown(text: str, min_length: int = COMPLEXITY_MIN_LENGTH) -> str | None:
    """Return breakdown advice for long prompts that ask for too much at once.

    Args:
        text (str): Prompt text.
        min_length (int): Prompts at or below this length never trigger.

    Returns:
        str | None: :data:`BREAKDOWN_ADVICE`, or None.
    """
    if len(text) <= min_length:
        return None
    if any(pattern.search(text) for pattern in COMPLEXITY_PATTERNS):
        return BREAKDOWN_ADVICE
    return None


def fix_double_quotes(text: str) -> str:
    """Backslash-escape every double quote that is not escaped already."""
    return _UNESCAPED_QUOTE.sub(r'\\"', text)


def optimize_input(text: str) -> str:
    """Tidy a short prompt into a single polite sentence.

    Whitespace runs collapse to one space, the text is trimmed, "Please"
    is prepended unless the prompt already asks politely, and a period is
    appended unless it ends with sentence punctuation.
    """
    optimized = _WHITESPACE_RUN.sub(" ", text).strip()
    if not optimized:
        return optimized
    lowered = optimized.lower()
    if "please" not in lowered and "could you" not in lowered:
        optimized = "Please " + optimized[0].lower() + optimized[1:]
    if not optimized.endswith((".", "?", "!")):
        optimized += "."
    return optimized


def looks_like_assistant_output(text: str) -> bool:
    """Return True when ``text`` carries markers of an assistant reply."""
    return any(marker in text for marker in OUTPUT_MARKERS)


def review_prompt(
    text: str,
    *,
    size_limit: int = MAX_SAFE_SIZE,
    complexity_min_length: int = COMPLEXITY_MIN_LENGTH,
) -> PromptReview:
    """Apply prompt fixes and collect advisories.

    Double quotes are escaped first; the size and breakdown checks then
    run on the fixed text.

    Args:
        text (str): Prompt text.
        size_limit (int): Limit passed to :func:`check_input_size`.
        complexity_min_length (int): Length passed to
            :func:`suggest_task_breakdown`.

    Returns:
        PromptReview: Fixed text and the list of issues found.
    """
    review = PromptReview(text=text)
    fixed = fix_double_quotes(text)
    if fixed != text:
        review.text = fixed
        review.issues.append("Fixed double quotes")

    review.size = check_input_size(review.text, size_limit)
    if review.size.is_over_threshold:
        review.issues.append(f"Input size warning: {review.size.advisory_message}")

    review.breakdown = suggest_task_breakdown(review.text, complexity_min_length)
    if review.breakdown:
        review.issues.append("Task breakdown suggested")

    log.debug("Prompt review found %d issue(s)", len(review.issues))
    return review


__all__ = [
    "MAX_SAFE_SIZE",
    "COMPLEXITY_MIN_LENGTH",
    "COMPLEXITY_PATTERNS",
    "BREAKDOWN_ADVICE",
    "OUTPUT_MARKERS",
    "SizeCheck",
    "PromptReview",
    "check_input_size",
    "suggest_task_breakdown",
    "fix_double_quotes",
    "optimize_input",
    "looks_like_assistant_output",
    "review_prompt",
]
