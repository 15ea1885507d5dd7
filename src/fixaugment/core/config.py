# config.py
# SPDX-License-Identifier: MIT
"""Configuration models and helpers for fixaugment.

This module defines declarative dataclasses for chunking, output
formatting, prompt policy and logging, a ``get(key, default)`` view that
speaks the editor's setting names, and helpers for serializing and
loading configurations from JSON and TOML.
"""
from __future__ import annotations

import json
try:  # pragma: no cover - depends on interpreter version
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar, Union, get_args, get_origin, get_type_hints

from .chunk import ChunkPolicy
from .errors import InvalidConfigurationError
from .interfaces import ConfigProvider
from .log import PACKAGE_LOGGER_NAME, configure_logging
from .normalize import OutputFormat
from .policy import COMPLEXITY_MIN_LENGTH, MAX_SAFE_SIZE

CODE_LANG_BACKENDS = {"none", "heuristic", "pygments"}


@dataclass(slots=True)
class ChunkConfig:
    """Configuration for input chunking.

    Attributes:
        policy (ChunkPolicy): Size limit and code/context behavior.
    """
    policy: ChunkPolicy = field(default_factory=ChunkPolicy)


@dataclass(slots=True)
class OutputConfig:
    """Settings for rewriting assistant output.

    Attributes:
        format (str): One of ``default``, ``markdown``, ``enhanced`` or
            ``html``.
        code_lang_backend (str): Detector used for untagged fences:
            ``heuristic``, ``pygments`` or ``none``.
        highlight (bool): Highlight code blocks in the html format.
        auto_format (bool): Let :meth:`Session.handle_incoming_text`
            rewrite text that looks like assistant output.
    """
    format: str = OutputFormat.ENHANCED
    code_lang_backend: str = "heuristic"
    highlight: bool = True
    auto_format: bool = True


@dataclass(slots=True)
class PolicyConfig:
    """Thresholds for the advisory prompt checks."""

    size_limit: int = MAX_SAFE_SIZE
    complexity_min_length: int = COMPLEXITY_MIN_LENGTH


@dataclass(slots=True)
class LoggingConfig:
    """Controls the package logger; set propagate/logger_name to
    integrate with host apps.
    """
    level: int | str = "INFO"
    propagate: bool = False
    fmt: Optional[str] = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    logger_name: str = PACKAGE_LOGGER_NAME

    def apply(self) -> None:
        """Apply this logging configuration to the package logger."""
        configure_logging(
            level=self.level,
            propagate=self.propagate,
            fmt=self.fmt,
            logger_name=self.logger_name or PACKAGE_LOGGER_NAME,
        )


# ---------------------------------------------------------------------------
# Master config
# ---------------------------------------------------------------------------

T = TypeVar("T")

# Editor setting names (and their snake_case spellings) -> attribute path.
_PROVIDER_KEYS: Dict[str, Tuple[str, ...]] = {
    "maxInputSize": ("chunk", "policy", "max_chunk_size"),
    "preserveCodeBlocks": ("chunk", "policy", "preserve_code_blocks"),
    "smartChunking": ("chunk", "policy", "smart_chunking"),
    "outputFormat": ("output", "format"),
    "codeLanguageBackend": ("output", "code_lang_backend"),
    "safeSizeLimit": ("policy", "size_limit"),
    "complexityMinLength": ("policy", "complexity_min_length"),
}
_PROVIDER_KEYS.update({
    "max_input_size": _PROVIDER_KEYS["maxInputSize"],
    "preserve_code_blocks": _PROVIDER_KEYS["preserveCodeBlocks"],
    "smart_chunking": _PROVIDER_KEYS["smartChunking"],
    "output_format": _PROVIDER_KEYS["outputFormat"],
    "code_lang_backend": _PROVIDER_KEYS["codeLanguageBackend"],
    "size_limit": _PROVIDER_KEYS["safeSizeLimit"],
    "complexity_min_length": _PROVIDER_KEYS["complexityMinLength"],
})


@dataclass(slots=True)
class FixAugmentConfig:
    """Declarative settings for a fixaugment session.

    This object holds configuration knobs only; runtime state (the
    enhancement toggle, counters, the background executor) lives on
    :class:`fixaugment.core.session.Session`.
    """
    chunk: ChunkConfig = field(default_factory=ChunkConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self) -> None:
        """Accept plain mappings for nested sections."""
        if not isinstance(self.chunk, ChunkConfig):
            self.chunk = _dataclass_from_dict(ChunkConfig, dict(self.chunk or {}))
        if not isinstance(self.output, OutputConfig):
            self.output = _dataclass_from_dict(OutputConfig, dict(self.output or {}))
        if not isinstance(self.policy, PolicyConfig):
            self.policy = _dataclass_from_dict(PolicyConfig, dict(self.policy or {}))
        if not isinstance(self.logging, LoggingConfig):
            self.logging = _dataclass_from_dict(LoggingConfig, dict(self.logging or {}))

    def validate(self) -> None:
        """Validate the configuration, normalizing enum-like strings.

        Raises:
            InvalidConfigurationError: On a non-positive chunk size, an
                unknown output format or detector backend, or non-positive
                policy thresholds.
        """
        self.chunk.policy.validate()
        self.output.format = OutputFormat.normalize(self.output.format)
        backend = (self.output.code_lang_backend or "none").strip().lower()
        if backend not in CODE_LANG_BACKENDS:
            raise InvalidConfigurationError(
                f"output.code_lang_backend must be one of {sorted(CODE_LANG_BACKENDS)}; got {self.output.code_lang_backend!r}."
            )
        self.output.code_lang_backend = backend
        if self.policy.size_limit <= 0:
            raise InvalidConfigurationError("policy.size_limit must be positive.")
        if self.policy.complexity_min_length < 0:
            raise InvalidConfigurationError("policy.complexity_min_length must not be negative.")

    # -------------------------
    # Config provider view
    # -------------------------
    def get(self, key: str, default: Any = None) -> Any:
        """Return a setting by its editor name (``maxInputSize``, ...).

        Args:
            key (str): Setting name in camelCase or snake_case.
            default (Any, optional): Returned for unknown keys.

        Returns:
            Any: Current value of the setting.
        """
        path = _PROVIDER_KEYS.get(key)
        if path is None:
            return default
        obj: Any = self
        for attr in path:
            obj = getattr(obj, attr)
        return obj

    def set(self, key: str, value: Any) -> None:
        """Update a setting by its editor name.

        Raises:
            KeyError: If ``key`` is not a known setting.
        """
        path = _PROVIDER_KEYS[key]
        obj: Any = self
        for attr in path[:-1]:
            obj = getattr(obj, attr)
        setattr(obj, path[-1], value)

    @classmethod
    def from_provider(cls, provider: ConfigProvider) -> "FixAugmentConfig":
        """Build a config from any ``get(key, default)`` provider.

        Keys the provider does not know keep their defaults. Values are
        taken as given, so an explicit ``False`` disables a flag.
        """
        cfg = cls()
        for key in ("maxInputSize", "preserveCodeBlocks", "smartChunking", "outputFormat",
                    "codeLanguageBackend", "safeSizeLimit", "complexityMinLength"):
            value = provider.get(key, None)
            if value is not None:
                cfg.set(key, value)
        return cfg

    # -------------------------
    # Serialization helpers
    # -------------------------
    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation of this configuration."""
        return _dataclass_to_dict(self)

    def to_json(self, path: Path | str, *, indent: int = 2) -> str:
        """Serialize the configuration to JSON and write it to disk.

        Args:
            path (Path | str): Target file path.
            indent (int): Indentation level passed to ``json.dumps``.

        Returns:
            str: String path to the written file.
        """
        target = Path(path)
        target.write_text(json.dumps(self.to_dict(), indent=indent, sort_keys=True), encoding="utf-8")
        return str(target)

    @classmethod
    def from_dict(cls: Type[T], data: Mapping[str, Any]) -> T:
        """Instantiate a FixAugmentConfig from a mapping."""
        return _dataclass_from_dict(cls, data)

    @classmethod
    def from_json(cls: Type[T], path: Path | str) -> T:
        """Load a configuration from a JSON file."""
        try:
            payload = json.loads(Path(path).read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidConfigurationError(f"Malformed JSON config {str(path)!r}: {exc}") from exc
        if not isinstance(payload, Mapping):
            raise InvalidConfigurationError(f"Top-level JSON document must be an object; got {type(payload).__name__}.")
        return cls.from_dict(payload)

    @classmethod
    def from_toml(cls: Type[T], path: Path | str) -> T:
        """
        Load a FixAugmentConfig from a TOML file.

        The TOML layout mirrors this dataclass: tables ``[chunk.policy]``,
        ``[output]``, ``[policy]`` and ``[logging]``.
        """
        try:
            data = tomllib.loads(Path(path).read_bytes().decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise InvalidConfigurationError(f"Malformed TOML config {str(path)!r}: {exc}") from exc
        return cls.from_dict(data)


def load_config_from_path(path: str | Path) -> FixAugmentConfig:
    """Load and validate a FixAugmentConfig from a JSON or TOML file.

    Args:
        path (Path | str): Path to a ``.toml`` or ``.json`` config file.

    Returns:
        FixAugmentConfig: Parsed, validated configuration.

    Raises:
        InvalidConfigurationError: If the extension is unsupported or the
            contents fail validation.
    """
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".toml":
        cfg = FixAugmentConfig.from_toml(p)
    elif suffix == ".json":
        cfg = FixAugmentConfig.from_json(p)
    else:
        raise InvalidConfigurationError(f"Unsupported config extension {p.suffix!r}; expected .toml or .json.")
    cfg.validate()
    return cfg


def _dataclass_to_dict(obj: Any) -> Dict[str, Any]:
    """Serialize dataclasses to JSON-friendly dicts, skipping None fields."""
    result: Dict[str, Any] = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        if value is None:
            continue
        result[f.name] = _dataclass_to_dict(value) if is_dataclass(value) else value
    return result


def _dataclass_from_dict(cls: Type[T], data: Mapping[str, Any] | None) -> T:
    """Instantiate a dataclass of type `cls` from a mapping.

    Unknown keys are rejected so that typos in config files surface
    instead of silently falling back to defaults.
    """
    if data is None:
        return cls()  # type: ignore[call-arg]
    type_hints = get_type_hints(cls)
    known = {f.name for f in fields(cls)}
    unknown = sorted(k for k in data if k not in known)
    if unknown:
        raise InvalidConfigurationError(
            f"Unsupported options for {cls.__name__}: {', '.join(unknown)}. "
            f"Allowed keys: {', '.join(sorted(known))}"
        )

    kwargs: Dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in data:
            continue
        kwargs[f.name] = _coerce_value(type_hints.get(f.name, f.type), data[f.name])
    return cls(**kwargs)  # type: ignore[arg-type]


def _coerce_value(expected_type: Any, value: Any) -> Any:
    """Coerce `value` into the shape implied by `expected_type`."""
    base_type, _ = _strip_optional(expected_type)
    if value is None:
        return None
    if is_dataclass_type(base_type):
        if not isinstance(value, Mapping):
            raise InvalidConfigurationError(f"Expected a table for {base_type.__name__}; got {value!r}.")
        return _dataclass_from_dict(base_type, value)
    if base_type is bool:
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)
    if base_type in {str, int, float}:
        try:
            return base_type(value)
        except (TypeError, ValueError) as exc:
            raise InvalidConfigurationError(f"Cannot interpret {value!r} as {base_type.__name__}.") from exc
    return value


def _strip_optional(typ: Any) -> Tuple[Any, bool]:
    """Strip Optional from a type annotation.

    Returns:
        tuple[Any, bool]: ``(base_type, is_optional)``.
    """
    origin = get_origin(typ)
    if origin is Union:
        args = [arg for arg in get_args(typ) if arg is not type(None)]
        if len(args) == 1:
            base, _ = _strip_optional(args[0])
            return base, True
    return typ, False


def is_dataclass_type(typ: Any) -> bool:
    """Return True if `typ` is a dataclass type (not an instance)."""
    return isinstance(typ, type) and is_dataclass(typ)


__all__ = [
    "CODE_LANG_BACKENDS",
    "ChunkConfig",
    "OutputConfig",
    "PolicyConfig",
    "LoggingConfig",
    "FixAugmentConfig",
    "load_config_from_path",
]
