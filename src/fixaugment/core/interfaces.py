# interfaces.py
# SPDX-License-Identifier: MIT
"""Protocols for the collaborators fixaugment talks to.

The chunking and normalization code is pure; everything that belongs to
the host (an editor bridge, the CLI, a test) reaches it through the
narrow contracts below.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol, runtime_checkable

__all__ = [
    "ProgressCallback",
    "CancelCheck",
    "ConfigProvider",
    "Notifier",
    "MappingConfigProvider",
]

# Receives human-readable status lines such as "Created 4 smart chunks".
ProgressCallback = Callable[[str], None]
# Polled between whole chunks; returning True stops the run.
CancelCheck = Callable[[], bool]


@runtime_checkable
class ConfigProvider(Protocol):
    """Source of scalar options (numbers, booleans, strings)."""

    def get(self, key: str, default: Any = None) -> Any:  # pragma: no cover - interface
        """Return the option stored under ``key`` or ``default``."""


@runtime_checkable
class Notifier(Protocol):
    """Sink for user-facing outcome messages."""

    def info(self, message: str) -> None:  # pragma: no cover - interface
        ...

    def warning(self, message: str) -> None:  # pragma: no cover - interface
        ...


class MappingConfigProvider:
    """Adapt a plain mapping (e.g. editor settings JSON) to :class:`ConfigProvider`.

    Missing keys and explicit ``None`` values fall back to the default.
    """

    def __init__(self, values: Mapping[str, Any] | None = None):
        self._values = dict(values or {})

    def get(self, key: str, default: Any = None) -> Any:
        value = self._values.get(key)
        return default if value is None else value
