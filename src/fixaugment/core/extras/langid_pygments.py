# langid_pygments.py
# SPDX-License-Identifier: MIT
"""Pygments backend for code-language detection."""

from __future__ import annotations

from collections.abc import Sequence

from ..language_id import CodeLanguagePrediction


class PygmentsCodeLanguageDetector:
    """Guess a fence tag using pygments' lexer analysers."""

    def __init__(self) -> None:
        try:
            from pygments.lexers import guess_lexer
            from pygments.util import ClassNotFound
        except Exception as exc:  # pragma: no cover - dependency missing
            raise ImportError(
                "Pygments backend requires the 'pygments' package."
            ) from exc
        self._guess_lexer = guess_lexer
        self._not_found = ClassNotFound

    def detect_code(self, text: str) -> CodeLanguagePrediction | None:
        if not (text or "").strip():
            return None
        try:
            lexer = self._guess_lexer(text)
        except self._not_found:
            return None
        aliases = getattr(lexer, "aliases", None) or []
        lang = aliases[0] if aliases else lexer.name.lower()
        # The plain-text lexer is pygments' way of saying "no idea".
        if lang == "text":
            return None
        return CodeLanguagePrediction(
            lang=lang,
            score=0.7,
            reliable=False,
            score_kind="probability",
            backend="pygments",
        )

    def detect_topk(self, text: str, k: int = 3) -> Sequence[CodeLanguagePrediction]:
        pred = self.detect_code(text)
        return [pred] if pred else []


__all__ = ["PygmentsCodeLanguageDetector"]
