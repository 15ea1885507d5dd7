# errors.py
# SPDX-License-Identifier: MIT
"""Exception types raised by fixaugment.

Recoverable conditions (missing fence languages, missing snippet
attributes, failed highlighting, unterminated fences) never raise; only
configuration-level violations and caller-requested cancellation do.
"""

from __future__ import annotations

__all__ = ["FixAugmentError", "InvalidConfigurationError", "ChunkingCancelled"]


class FixAugmentError(Exception):
    """Base class for fixaugment errors."""


class InvalidConfigurationError(FixAugmentError, ValueError):
    """A configuration value violates an invariant (e.g. a non-positive chunk size)."""


class ChunkingCancelled(FixAugmentError):
    """The caller cancelled a chunking run; raised between whole chunks.

    Attributes:
        completed (int): Number of chunks produced before cancellation.
    """

    def __init__(self, completed: int = 0):
        super().__init__(f"Chunking cancelled after {completed} chunk(s)")
        self.completed = completed
