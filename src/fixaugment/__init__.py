# __init__.py
# SPDX-License-Identifier: MIT
"""
Top-level package exports for :mod:`fixaugment`.

Public surface and stability
----------------------------
The symbols listed in :data:`PRIMARY_API` are the recommended public surface
and are exported via :data:`__all__`. In general, callers should:

- Build a configuration via :class:`FixAugmentConfig` or load one from
  TOML/JSON with :func:`load_config_from_path`.
- Open a :class:`Session` and route prompts through
  :meth:`Session.chunk_input` / :meth:`Session.enhance_input` and assistant
  replies through :meth:`Session.format_output`.

The pure functions (:func:`chunk_input`, :func:`normalize_output`,
:func:`review_prompt` and friends) can also be used directly without a
session.

Examples:
    Chunk a long prompt::

        >>> from fixaugment import ChunkPolicy, chunk_input
        >>> chunks = chunk_input(long_text, ChunkPolicy(max_chunk_size=4000))

    Tidy an assistant reply::

        >>> from fixaugment import normalize_output
        >>> print(normalize_output("```\\ndef f():\\n    pass\\n```"))
"""

from __future__ import annotations

try:
    from importlib.metadata import version as _pkg_version

    __version__ = _pkg_version("fixaugment")
except Exception:  # PackageNotFoundError or runtime env oddities
    __version__ = "0.0.0+unknown"


from .core.chunk import (
    CHUNK_SEPARATOR,
    SMART_CHUNK_SEPARATOR,
    ChunkPolicy,
    Segment,
    chunk_input,
    chunk_text,
    chunk_with_code_blocks,
    iter_chunks,
    join_chunks,
    partition_code_blocks,
    smart_chunk_text,
)
from .core.config import FixAugmentConfig, load_config_from_path
from .core.errors import ChunkingCancelled, FixAugmentError, InvalidConfigurationError
from .core.interfaces import ConfigProvider, MappingConfigProvider, Notifier
from .core.language_id import (
    CodeLanguageDetector,
    CodeLanguagePrediction,
    HeuristicCodeLanguageDetector,
    detect_code_language,
    make_code_language_detector,
)
from .core.log import configure_logging, get_logger, temp_level
from .core.normalize import (
    OutputFormat,
    format_code_snippets,
    format_function_results,
    normalize_output,
    tag_code_blocks,
    tidy_code_blocks,
)
from .core.policy import (
    PromptReview,
    SizeCheck,
    check_input_size,
    fix_double_quotes,
    optimize_input,
    review_prompt,
    suggest_task_breakdown,
)
from .core.session import ChunkRun, Session, SessionStats

PRIMARY_API = [
    "__version__",
    "FixAugmentConfig",
    "load_config_from_path",
    "Session",
    "ChunkRun",
    "ChunkPolicy",
    "chunk_input",
    "chunk_text",
    "smart_chunk_text",
    "chunk_with_code_blocks",
    "partition_code_blocks",
    "join_chunks",
    "OutputFormat",
    "normalize_output",
    "tidy_code_blocks",
    "detect_code_language",
    "check_input_size",
    "suggest_task_breakdown",
    "fix_double_quotes",
    "optimize_input",
    "review_prompt",
    "FixAugmentError",
    "InvalidConfigurationError",
    "ChunkingCancelled",
]

__all__ = list(PRIMARY_API)
