# language_id.py
# SPDX-License-Identifier: MIT
"""Code-language identification for untagged fenced blocks.

This module holds the substring heuristics used to backfill missing fence
annotations, the prediction type shared by all detector backends, and a
small factory for picking a backend by name. It intentionally avoids
importing higher-level modules to keep dependencies minimal.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal, Protocol, runtime_checkable

from .errors import InvalidConfigurationError

# ScoreKind describes how to interpret the `score` field:
# - "probability": calibrated probability in [0.0, 1.0] (higher is better).
# - "heuristic": arbitrary heuristic score; only comparable within the same backend.
ScoreKind = Literal["probability", "heuristic"]

# Closed set of tags produced by the heuristic detector.
LANGUAGE_TAGS: tuple[str, ...] = (
    "javascript",
    "typescript",
    "python",
    "java",
    "html",
    "go",
    "c",
    "cpp",
)


@dataclass(slots=True)
class CodeLanguagePrediction:
    """Prediction for a fenced block's language tag.

    `lang` is the tag written after the opening fence (e.g. "python").
    """

    lang: str
    score: float
    reliable: bool = False
    score_kind: ScoreKind = "heuristic"
    backend: str | None = None


@runtime_checkable
class CodeLanguageDetector(Protocol):
    """Interface for code-language detectors."""

    def detect_code(self, text: str) -> CodeLanguagePrediction | None:
        ...

    def detect_topk(self, text: str, k: int = 3) -> Sequence[CodeLanguagePrediction]:
        ...


# -----------------------
# Substring heuristics
# -----------------------

def _is_typescript(code: str) -> bool:
    return "import" in code and "from" in code and "const" in code


def _is_javascript(code: str) -> bool:
    return "function" in code and ("{" in code or "=>" in code)


def _is_python(code: str) -> bool:
    return "def " in code and ":" in code


def _is_java(code: str) -> bool:
    return "class" in code and "{" in code and "public" in code


def _is_html(code: str) -> bool:
    return "<html" in code or "<!DOCTYPE" in code


def _is_go(code: str) -> bool:
    return "package " in code and "import " in code and "func " in code


def _c_family(code: str) -> str | None:
    if "#include" in code and ("<stdio.h>" in code or "<iostream>" in code):
        return "cpp" if "cout" in code else "c"
    return None


# Order matters: the patterns overlap, and the three-way typescript check
# has to run before the looser javascript one.
_ORDERED_CHECKS: tuple[tuple[str, Any], ...] = (
    ("typescript", _is_typescript),
    ("javascript", _is_javascript),
    ("python", _is_python),
    ("java", _is_java),
    ("html", _is_html),
    ("go", _is_go),
)


def detect_code_language(code: str) -> str | None:
    """Guess the language of a code snippet from substring patterns.

    The first matching rule wins. Snippets that match nothing return None
    so callers leave the fence untagged rather than mistagged.

    Args:
        code (str): Raw code between the fences.

    Returns:
        str | None: One of :data:`LANGUAGE_TAGS`, or None when unknown.
    """
    code = code or ""
    for lang, check in _ORDERED_CHECKS:
        if check(code):
            return lang
    return _c_family(code)


# -----------------------
# Detector backends
# -----------------------

class HeuristicCodeLanguageDetector:
    """Substring-rule detector; deterministic and dependency free."""

    def detect_code(self, text: str) -> CodeLanguagePrediction | None:
        lang = detect_code_language(text)
        if lang is None:
            return None
        return CodeLanguagePrediction(lang=lang, score=0.6, reliable=False, score_kind="heuristic", backend="heuristic")

    def detect_topk(self, text: str, k: int = 3) -> Sequence[CodeLanguagePrediction]:
        pred = self.detect_code(text)
        return [pred] if pred else []


def make_code_language_detector(backend: str) -> CodeLanguageDetector | None:
    """Factory for code-language detectors.

    Args:
        backend (str): ``"none"``, ``"heuristic"`` or ``"pygments"``.

    Returns:
        CodeLanguageDetector | None: Detector instance, or None when
            detection is disabled.

    Raises:
        InvalidConfigurationError: If the backend name is unknown.
    """
    backend = (backend or "none").strip().lower()
    if backend == "none":
        return None
    if backend == "heuristic":
        return HeuristicCodeLanguageDetector()
    if backend == "pygments":
        from .extras.langid_pygments import PygmentsCodeLanguageDetector

        return PygmentsCodeLanguageDetector()
    raise InvalidConfigurationError(f"Unknown code language detector backend: {backend}")


__all__ = [
    "ScoreKind",
    "LANGUAGE_TAGS",
    "CodeLanguagePrediction",
    "CodeLanguageDetector",
    "detect_code_language",
    "HeuristicCodeLanguageDetector",
    "make_code_language_detector",
]
