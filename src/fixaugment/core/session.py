# session.py
# SPDX-License-Identifier: MIT
"""Session object tying configuration, detector and host callbacks together.

A :class:`Session` owns the per-host state of an editor integration: the
enhancement toggle, usage counters and the background worker are created
when the host starts and released by :meth:`Session.close`.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from threading import Lock
from typing import Any

from .chunk import CHUNK_SEPARATOR, ChunkPolicy, iter_chunks, join_chunks
from .config import FixAugmentConfig
from .errors import ChunkingCancelled
from .interfaces import CancelCheck, Notifier, ProgressCallback
from .language_id import CodeLanguageDetector, make_code_language_detector
from .log import get_logger
from .normalize import normalize_output, tidy_code_blocks
from .policy import (
    PromptReview,
    SizeCheck,
    check_input_size,
    fix_double_quotes,
    looks_like_assistant_output,
    optimize_input,
    review_prompt,
    suggest_task_breakdown,
)

log = get_logger(__name__)


@dataclass(slots=True)
class ChunkRun:
    """Chunks produced by one chunking request.

    Attributes:
        chunks (list[str]): Chunks in original order.
        separator (str): Boundary marker used by :attr:`joined`.
        smart (bool): Whether smart chunking produced the chunks.
    """
    chunks: list[str]
    separator: str
    smart: bool

    @property
    def joined(self) -> str:
        return join_chunks(self.chunks, self.separator)

    def __len__(self) -> int:
        return len(self.chunks)


@dataclass(slots=True)
class SessionStats:
    """Per-session usage counters."""

    chunk_runs: int = 0
    chunks_created: int = 0
    inputs_optimized: int = 0
    outputs_formatted: int = 0
    prompts_reviewed: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "chunk_runs": self.chunk_runs,
            "chunks_created": self.chunks_created,
            "inputs_optimized": self.inputs_optimized,
            "outputs_formatted": self.outputs_formatted,
            "prompts_reviewed": self.prompts_reviewed,
        }


class Session:
    """Explicit state for one host integration.

    Attributes:
        cfg (FixAugmentConfig): Validated configuration.
        detector (CodeLanguageDetector | None): Detector for untagged
            fences, built from ``cfg.output.code_lang_backend``.
        enhancement_active (bool): When False, incoming text is passed
            through untouched.
        stats (SessionStats): Usage counters.
    """

    def __init__(self, cfg: FixAugmentConfig | None = None, *, notifier: Notifier | None = None):
        self.cfg = cfg or FixAugmentConfig()
        self.cfg.validate()
        self.detector: CodeLanguageDetector | None = make_code_language_detector(self.cfg.output.code_lang_backend)
        self.notifier = notifier
        self.enhancement_active = True
        self.stats = SessionStats()
        self._stats_lock = Lock()
        self._executor: ThreadPoolExecutor | None = None
        self._closed = False
        log.debug("Session started (max_chunk_size=%d)", self.cfg.chunk.policy.max_chunk_size)

    # -------------------------
    # Lifecycle
    # -------------------------
    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the background worker; safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        log.debug("Session closed: %s", self.stats.as_dict())

    def toggle_enhancement(self) -> bool:
        """Flip :attr:`enhancement_active` and return the new state."""
        self.enhancement_active = not self.enhancement_active
        self._notify("info", f"Fix Augment is now {'active' if self.enhancement_active else 'inactive'}")
        return self.enhancement_active

    # -------------------------
    # Input side
    # -------------------------
    def chunk_input(
        self,
        text: str,
        *,
        policy: ChunkPolicy | None = None,
        progress: ProgressCallback | None = None,
        is_cancelled: CancelCheck | None = None,
    ) -> ChunkRun:
        """Chunk text with the session's policy.

        Cancellation is polled before each chunk is kept; a chunk that is
        being split is always finished first, and a run whose last chunk
        has been kept is never cancelled.

        Args:
            text (str): Input text.
            policy (ChunkPolicy | None): Override for ``cfg.chunk.policy``.
            progress (ProgressCallback | None): Receives status lines.
            is_cancelled (CancelCheck | None): Returns True to stop.

        Returns:
            ChunkRun: Chunks and the separator used to join them.

        Raises:
            ChunkingCancelled: If ``is_cancelled`` returned True.
            InvalidConfigurationError: If the policy size is not positive.
        """
        self._ensure_open()
        pol = policy or self.cfg.chunk.policy
        _report(progress, "Analyzing content...")
        chunks: list[str] = []
        for chunk in iter_chunks(text, pol):
            if is_cancelled is not None and is_cancelled():
                log.info("Chunking cancelled after %d chunk(s)", len(chunks))
                raise ChunkingCancelled(len(chunks))
            chunks.append(chunk)
        label = "smart chunks" if pol.smart_chunking else "chunks"
        _report(progress, f"Created {len(chunks)} {label}")

        self._count(chunk_runs=1, chunks_created=len(chunks))
        log.info("Chunked %d chars into %d %s", len(text), len(chunks), label)
        return ChunkRun(chunks=chunks, separator=pol.separator, smart=pol.smart_chunking)

    def submit_chunking(self, text: str, **kwargs: Any) -> Future[ChunkRun]:
        """Run :meth:`chunk_input` on the session's single background worker.

        Only one chunking job runs at a time; further submissions queue
        behind it.
        """
        self._ensure_open()
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fixaugment")
        return self._executor.submit(self.chunk_input, text, **kwargs)

    def enhance_input(
        self,
        text: str,
        *,
        progress: ProgressCallback | None = None,
        is_cancelled: CancelCheck | None = None,
    ) -> str:
        """Prepare a prompt: plain-chunk it when too large, otherwise tidy it.

        Text longer than the configured maximum is split with the plain
        chunker and joined with :data:`CHUNK_SEPARATOR`; shorter text goes
        through :func:`optimize_input`.
        """
        max_size = self.cfg.chunk.policy.max_chunk_size
        if len(text) > max_size:
            plain = replace(self.cfg.chunk.policy, smart_chunking=False, preserve_code_blocks=False)
            run = self.chunk_input(text, policy=plain, progress=progress, is_cancelled=is_cancelled)
            self._notify("info", f"Input processed into {len(run)} chunks")
            return join_chunks(run.chunks, CHUNK_SEPARATOR)
        self._count(inputs_optimized=1)
        self._notify("info", "Input optimized")
        return optimize_input(text)

    def check_size(self, text: str) -> SizeCheck:
        result = check_input_size(text, self.cfg.policy.size_limit)
        if result.is_over_threshold and result.advisory_message:
            self._notify("warning", result.advisory_message)
        return result

    def suggest_breakdown(self, text: str) -> str | None:
        return suggest_task_breakdown(text, self.cfg.policy.complexity_min_length)

    def fix_quotes(self, text: str) -> str:
        return fix_double_quotes(text)

    def review_prompt(self, text: str) -> PromptReview:
        """Run :func:`fixaugment.core.policy.review_prompt` with session thresholds."""
        review = review_prompt(
            text,
            size_limit=self.cfg.policy.size_limit,
            complexity_min_length=self.cfg.policy.complexity_min_length,
        )
        self._count(prompts_reviewed=1)
        if review.issues:
            self._notify("info", f"Optimized prompt: {', '.join(review.issues)}")
        return review

    # -------------------------
    # Output side
    # -------------------------
    def format_output(self, text: str, fmt: str | None = None) -> str:
        """Normalize assistant output in ``fmt`` (defaults to the configured format)."""
        self._ensure_open()
        out = normalize_output(
            text,
            fmt or self.cfg.output.format,
            detector=self.detector,
            highlight_code=self.cfg.output.highlight,
        )
        self._count(outputs_formatted=1)
        return out

    def tidy_code(self, text: str) -> str:
        return tidy_code_blocks(text, detector=self.detector)

    def handle_incoming_text(self, text: str) -> str:
        """Format text arriving from the assistant when enhancement is on.

        Text is returned unchanged when enhancement is off, auto-format is
        disabled, or the text does not look like assistant output.
        """
        if not (self.enhancement_active and self.cfg.output.auto_format):
            return text
        if not looks_like_assistant_output(text):
            return text
        return self.format_output(text)

    # -------------------------
    # Helpers
    # -------------------------
    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Session is closed")

    def _count(self, **increments: int) -> None:
        # Background chunking and foreground calls share the counters.
        with self._stats_lock:
            for name, amount in increments.items():
                setattr(self.stats, name, getattr(self.stats, name) + amount)

    def _notify(self, level: str, message: str) -> None:
        if self.notifier is None:
            return
        getattr(self.notifier, level)(message)


def _report(progress: ProgressCallback | None, message: str) -> None:
    if progress is not None:
        progress(message)


__all__ = ["ChunkRun", "SessionStats", "Session"]
