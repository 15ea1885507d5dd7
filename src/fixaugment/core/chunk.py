# chunk.py
# SPDX-License-Identifier: MIT
"""Boundary-aware chunking of conversational text.

Provides the paragraph packer used by the plain and smart chunkers, the
sentence/line/hard-cut fallback that enforces the size limit, a fenced
code block partitioner, and the policy-driven dispatcher that combines
them so that code blocks stay intact whenever they fit.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List
import re

from .errors import InvalidConfigurationError
from .log import get_logger

log = get_logger(__name__)

# Blank-line boundary: a newline, any whitespace-only run, then a newline.
_PARA_SPLITTER = re.compile(r'\n\s*\n')
# Fenced code block, non-greedy: the first ``` closes at the next ```.
_FENCED_BLOCK = re.compile(r'```[\s\S]*?```')

FENCE = "```"
PARAGRAPH_JOINER = "\n\n"
CONTEXT_MAX_CHARS = 200
CONTEXT_MARKER = "--- CONTEXT FROM PREVIOUS CHUNK ---"
CONTINUATION_MARKER = "--- CONTINUATION ---"
CHUNK_SEPARATOR = "\n\n--- CHUNK BOUNDARY ---\n\n"
SMART_CHUNK_SEPARATOR = "\n\n--- SMART CHUNK BOUNDARY ---\n\n"


# ---------------
# Data types
# ---------------
@dataclass(slots=True, frozen=True)
class Segment:
    """Piece of a text produced by :func:`partition_code_blocks`.

    Attributes:
        kind (str): ``"code"`` for a fenced block (fences included) or
            ``"prose"`` for the material between blocks.
        content (str): Segment text, unmodified.
    """
    kind: str
    content: str

    @property
    def is_code(self) -> bool:
        return self.kind == "code"


@dataclass(slots=True)
class ChunkPolicy:
    """Configuration for splitting text into size-bounded chunks.

    Attributes:
        max_chunk_size (int): Maximum characters per chunk. Must be
            positive.
        preserve_code_blocks (bool): Keep fenced code blocks whole when
            they fit, and split oversized ones on line boundaries only.
        smart_chunking (bool): Carry a short tail of the previous chunk
            into the next one as labelled context.
    """
    max_chunk_size: int = 10000
    preserve_code_blocks: bool = True
    smart_chunking: bool = True

    def validate(self) -> None:
        """Raise :class:`InvalidConfigurationError` for a non-positive size."""
        _require_positive(self.max_chunk_size)

    @property
    def separator(self) -> str:
        """Separator placed between chunks when they are joined for display."""
        return SMART_CHUNK_SEPARATOR if self.smart_chunking else CHUNK_SEPARATOR


def _require_positive(max_size: int) -> int:
    """Validate a chunk size limit.

    Args:
        max_size (int): Candidate limit.

    Returns:
        int: The same limit.

    Raises:
        InvalidConfigurationError: If the limit is not a positive integer.
    """
    if isinstance(max_size, bool) or not isinstance(max_size, int) or max_size <= 0:
        raise InvalidConfigurationError(f"max chunk size must be a positive integer; got {max_size!r}")
    return max_size


# -----------------
# Forced splitting
# -----------------
def _find_break(text: str, max_size: int) -> int:
    """Return the cut position for an oversized piece of text.

    The last sentence end (``.``) before ``max_size`` is preferred, then
    the last newline; a break that falls in the first half of the window
    is too early to be useful and is skipped. Without a usable break the
    text is cut exactly at ``max_size``.

    Args:
        text (str): Text longer than ``max_size``.
        max_size (int): Size limit.

    Returns:
        int: Number of leading characters to emit; a used terminator is
            included.
    """
    half = max_size / 2
    for terminator in (".", "\n"):
        idx = text.rfind(terminator, 0, max_size)
        if idx != -1 and idx >= half:
            return idx + 1
    return max_size


def force_split(chunk: str, max_size: int) -> List[str]:
    """Split one chunk until every piece fits.

    Pieces after the first have surrounding whitespace trimmed.

    Args:
        chunk (str): Text to split.
        max_size (int): Size limit.

    Returns:
        list[str]: Pieces in order, each at most ``max_size`` long.
    """
    _require_positive(max_size)
    pieces: List[str] = []
    remaining = chunk
    while len(remaining) > max_size:
        cut = _find_break(remaining, max_size)
        pieces.append(remaining[:cut])
        remaining = remaining[cut:].strip()
    if remaining:
        pieces.append(remaining)
    return pieces


def _enforce_limit(chunks: List[str], max_size: int) -> List[str]:
    out: List[str] = []
    for chunk in chunks:
        if len(chunk) <= max_size:
            out.append(chunk)
        else:
            out.extend(force_split(chunk, max_size))
    return out


# -----------------
# Paragraph packing
# -----------------
def split_paragraphs(text: str) -> List[str]:
    """Split text on blank-line boundaries, preserving order."""
    return _PARA_SPLITTER.split(text)


def _tail_context(buffer: str) -> str:
    """Return the trailing context carried into the next chunk."""
    size = min(CONTEXT_MAX_CHARS, len(buffer) // 4)
    if size <= 0:
        return ""
    return buffer[-size:]


def _seed_with_context(context: str, paragraph: str) -> str:
    return (
        f"{CONTEXT_MARKER}\n{context}{PARAGRAPH_JOINER}"
        f"{CONTINUATION_MARKER}{PARAGRAPH_JOINER}{paragraph}"
    )


def _pack_paragraphs(text: str, max_size: int, *, carry_context: bool) -> List[str]:
    """Greedily pack paragraphs into buffers near ``max_size``.

    Args:
        text (str): Input text.
        max_size (int): Size limit used for the overflow test.
        carry_context (bool): When True, the buffer started after a flush
            is seeded with the tail of the flushed buffer between the
            context and continuation markers.

    Returns:
        list[str]: Packed buffers; some may still exceed ``max_size``.
    """
    packed: List[str] = []
    buf = ""
    for paragraph in split_paragraphs(text):
        if buf and len(buf) + len(paragraph) > max_size:
            context = _tail_context(buf) if carry_context else ""
            packed.append(buf)
            buf = _seed_with_context(context, paragraph) if context else paragraph
        elif buf:
            buf += PARAGRAPH_JOINER + paragraph
        else:
            buf = paragraph
    if buf:
        packed.append(buf)
    return packed


def chunk_text(text: str, max_size: int = 10000) -> List[str]:
    """Split text into chunks of at most ``max_size`` characters.

    Paragraphs are packed greedily; any chunk that is still too large is
    cut at a sentence end, then a line break, then exactly at the limit.

    Args:
        text (str): Input text.
        max_size (int): Maximum characters per chunk.

    Returns:
        list[str]: Chunks in original order; empty for empty input.

    Raises:
        InvalidConfigurationError: If ``max_size`` is not positive.
    """
    _require_positive(max_size)
    return _enforce_limit(_pack_paragraphs(text, max_size, carry_context=False), max_size)


def smart_chunk_text(text: str, max_size: int = 10000) -> List[str]:
    """Split text like :func:`chunk_text`, carrying context across chunks.

    Each chunk that starts after an overflow begins with up to 200
    trailing characters of the previous chunk, wrapped in
    :data:`CONTEXT_MARKER` / :data:`CONTINUATION_MARKER` lines. The
    forced-split pass runs after the context has been injected.

    Args:
        text (str): Input text.
        max_size (int): Maximum characters per chunk.

    Returns:
        list[str]: Chunks in original order; empty for empty input.

    Raises:
        InvalidConfigurationError: If ``max_size`` is not positive.
    """
    _require_positive(max_size)
    return _enforce_limit(_pack_paragraphs(text, max_size, carry_context=True), max_size)


# ----------------------
# Code block partitioning
# ----------------------
def partition_code_blocks(text: str) -> List[Segment]:
    """Separate fenced code blocks from the prose around them.

    An unterminated fence does not match and stays part of the prose.
    Prose segments that are blank after trimming are dropped.

    Args:
        text (str): Input text.

    Returns:
        list[Segment]: Code and prose segments in original order.
    """
    segments: List[Segment] = []

    def add_prose(part: str) -> None:
        if part.strip():
            segments.append(Segment("prose", part))

    last = 0
    for match in _FENCED_BLOCK.finditer(text):
        add_prose(text[last:match.start()])
        segments.append(Segment("code", match.group(0)))
        last = match.end()
    add_prose(text[last:])
    return segments


def split_code_block_lines(block: str, max_size: int) -> List[str]:
    """Split a fenced block on line boundaries.

    A block that fits is returned whole. Otherwise lines are accumulated
    and flushed whenever the next line (plus its newline) would overflow;
    only a single line longer than ``max_size`` is cut mid-line.

    Args:
        block (str): Fenced block text, fences included.
        max_size (int): Maximum characters per chunk.

    Returns:
        list[str]: Line-aligned pieces of the block.
    """
    _require_positive(max_size)
    if len(block) <= max_size:
        return [block]

    groups: List[str] = []
    buf = ""
    for line in block.split("\n"):
        if buf and len(buf) + len(line) + 1 > max_size:
            groups.append(buf)
            buf = line
        elif buf:
            buf += "\n" + line
        else:
            buf = line
    if buf:
        groups.append(buf)

    out: List[str] = []
    for group in groups:
        if len(group) <= max_size:
            out.append(group)
        else:
            out.extend(group[i:i + max_size] for i in range(0, len(group), max_size))
    return out


def iter_code_aware_chunks(text: str, policy: ChunkPolicy) -> Iterator[str]:
    """Yield chunks for text that mixes prose and fenced code.

    Code segments go through :func:`split_code_block_lines`; prose
    segments through :func:`smart_chunk_text` or :func:`chunk_text`
    depending on ``policy.smart_chunking``.

    Args:
        text (str): Input text.
        policy (ChunkPolicy): Chunking policy.

    Yields:
        str: Chunks in original order.
    """
    prose_chunker = smart_chunk_text if policy.smart_chunking else chunk_text
    for segment in partition_code_blocks(text):
        if segment.is_code:
            yield from split_code_block_lines(segment.content, policy.max_chunk_size)
        else:
            yield from prose_chunker(segment.content, policy.max_chunk_size)


def chunk_with_code_blocks(text: str, policy: ChunkPolicy) -> List[str]:
    """List form of :func:`iter_code_aware_chunks`."""
    policy.validate()
    return list(iter_code_aware_chunks(text, policy))


# -------------
# Dispatcher
# -------------
def iter_chunks(text: str, policy: ChunkPolicy | None = None) -> Iterator[str]:
    """Yield chunks for ``text`` according to ``policy``.

    Code-aware partitioning is used only when ``preserve_code_blocks`` is
    on and the text actually contains a fence; otherwise the whole text
    is handed to the smart or plain chunker.

    Args:
        text (str): Input text.
        policy (ChunkPolicy | None): Chunking policy; defaults apply when
            omitted.

    Yields:
        str: Chunks in original order.

    Raises:
        InvalidConfigurationError: If the policy's size is not positive.
    """
    pol = policy or ChunkPolicy()
    pol.validate()
    if pol.preserve_code_blocks and FENCE in text:
        yield from iter_code_aware_chunks(text, pol)
        return
    chunker = smart_chunk_text if pol.smart_chunking else chunk_text
    yield from chunker(text, pol.max_chunk_size)


def chunk_input(text: str, policy: ChunkPolicy | None = None) -> List[str]:
    """Chunk text into a list according to ``policy``.

    Args:
        text (str): Input text.
        policy (ChunkPolicy | None): Chunking policy; defaults apply when
            omitted.

    Returns:
        list[str]: Chunks in original order.
    """
    chunks = list(iter_chunks(text, policy))
    log.debug("Chunked %d chars into %d chunk(s)", len(text), len(chunks))
    return chunks


def join_chunks(chunks: List[str], separator: str = CHUNK_SEPARATOR) -> str:
    """Join chunks with a visible boundary marker."""
    return separator.join(chunks)


__all__ = [
    "CHUNK_SEPARATOR",
    "SMART_CHUNK_SEPARATOR",
    "CONTEXT_MARKER",
    "CONTINUATION_MARKER",
    "CONTEXT_MAX_CHARS",
    "Segment",
    "ChunkPolicy",
    "force_split",
    "split_paragraphs",
    "chunk_text",
    "smart_chunk_text",
    "partition_code_blocks",
    "split_code_block_lines",
    "iter_code_aware_chunks",
    "chunk_with_code_blocks",
    "iter_chunks",
    "chunk_input",
    "join_chunks",
]
