import pytest

from fixaugment.core.chunk import (
    CHUNK_SEPARATOR,
    CONTEXT_MARKER,
    CONTINUATION_MARKER,
    SMART_CHUNK_SEPARATOR,
    ChunkPolicy,
    chunk_input,
    chunk_text,
    force_split,
    join_chunks,
    partition_code_blocks,
    smart_chunk_text,
    split_code_block_lines,
)
from fixaugment.core.errors import InvalidConfigurationError


def _three_paragraphs() -> list[str]:
    return ["a" * 100, "b" * 100, "c" * 100]


def test_chunk_text_packs_paragraphs_greedily() -> None:
    paras = _three_paragraphs()
    text = "\n\n".join(paras)

    chunks = chunk_text(text, 250)

    assert chunks == [paras[0] + "\n\n" + paras[1], paras[2]]


def test_smart_chunk_text_carries_context_into_next_chunk() -> None:
    paras = _three_paragraphs()
    text = "\n\n".join(paras)

    chunks = smart_chunk_text(text, 250)

    assert len(chunks) == 2
    assert chunks[0] == paras[0] + "\n\n" + paras[1]
    second = chunks[1]
    assert second.startswith(CONTEXT_MARKER + "\n")
    assert CONTINUATION_MARKER in second
    # Tail of the previous chunk: a quarter of 202 chars.
    assert "\n" + "b" * 50 + "\n\n" + CONTINUATION_MARKER in second
    assert second.endswith(paras[2])
    assert len(second) <= 250


def test_chunks_never_exceed_limit_without_break_points() -> None:
    text = "x" * 1000

    chunks = chunk_text(text, 300)

    assert [len(c) for c in chunks] == [300, 300, 300, 100]
    assert "".join(chunks) == text


def test_force_split_prefers_sentence_end() -> None:
    text = "Sentence one is here. " * 30

    pieces = force_split(text, 100)

    assert all(len(p) <= 100 for p in pieces)
    assert pieces[0].endswith(".")
    assert pieces[1].startswith("Sentence")


def test_force_split_ignores_break_in_first_half() -> None:
    text = "Hi. " + "y" * 200

    pieces = force_split(text, 100)

    assert pieces[0] == text[:100]


def test_smart_chunks_respect_limit_after_context_injection() -> None:
    paragraphs = [("word " * 40).strip() for _ in range(20)]
    text = "\n\n".join(paragraphs)

    chunks = smart_chunk_text(text, 300)

    assert len(chunks) > 1
    assert all(len(c) <= 300 for c in chunks)


def test_code_block_split_on_line_boundaries() -> None:
    lines = ["y" * 30] * 50
    block = "```\n" + "\n".join(lines) + "\n```"

    chunks = chunk_input(block, ChunkPolicy(max_chunk_size=500))

    assert len(chunks) > 1
    assert all(len(c) <= 500 for c in chunks)
    assert "\n".join(chunks) == block
    for chunk in chunks:
        for line in chunk.split("\n"):
            assert line in ("```", "y" * 30)


def test_code_block_kept_whole_between_prose() -> None:
    text = "Intro paragraph.\n\n```python\nprint('hi')\n```\n\nOutro."

    chunks = chunk_input(text, ChunkPolicy(max_chunk_size=1000))

    assert len(chunks) == 3
    assert chunks[0].strip() == "Intro paragraph."
    assert chunks[1] == "```python\nprint('hi')\n```"
    assert chunks[2].strip() == "Outro."


def test_oversized_code_line_is_hard_cut() -> None:
    block = "```\n" + "z" * 50 + "\n```"

    pieces = split_code_block_lines(block, 20)

    assert pieces == ["```", "z" * 20, "z" * 20, "z" * 10, "```"]


def test_preserve_code_blocks_off_treats_fences_as_prose() -> None:
    text = "a\n```\ncode\n```"
    policy = ChunkPolicy(max_chunk_size=1000, preserve_code_blocks=False, smart_chunking=False)

    assert chunk_input(text, policy) == [text]


def test_partition_code_blocks_segments_in_order() -> None:
    text = "before\n```js\nlet a = 1;\n```\nafter"

    segments = partition_code_blocks(text)

    assert [s.kind for s in segments] == ["prose", "code", "prose"]
    assert segments[1].content == "```js\nlet a = 1;\n```"
    assert segments[1].is_code


def test_unterminated_fence_stays_prose() -> None:
    text = "text\n```python\nx = 1"

    segments = partition_code_blocks(text)

    assert len(segments) == 1
    assert segments[0].kind == "prose"
    assert segments[0].content == text


def test_blank_prose_between_blocks_is_dropped() -> None:
    text = "```\na\n```\n\n   \n```\nb\n```"

    segments = partition_code_blocks(text)

    assert [s.kind for s in segments] == ["code", "code"]


def test_empty_input_yields_no_chunks() -> None:
    assert chunk_text("") == []
    assert smart_chunk_text("") == []
    assert chunk_input("") == []


@pytest.mark.parametrize("bad", [0, -5, True, "10"])
def test_invalid_max_size_rejected(bad) -> None:
    with pytest.raises(InvalidConfigurationError):
        chunk_text("abc", bad)


def test_invalid_policy_rejected_by_dispatcher() -> None:
    with pytest.raises(InvalidConfigurationError):
        chunk_input("abc", ChunkPolicy(max_chunk_size=-1))


def test_policy_separator_and_join() -> None:
    assert ChunkPolicy().separator == SMART_CHUNK_SEPARATOR
    assert ChunkPolicy(smart_chunking=False).separator == CHUNK_SEPARATOR
    assert join_chunks(["one", "two"]) == "one" + CHUNK_SEPARATOR + "two"


def test_chunks_rejoin_to_input_modulo_paragraph_whitespace() -> None:
    paragraphs = [f"Paragraph {i} " + "text " * (i % 7 + 3) for i in range(20)]
    text = "\n  \n".join(paragraphs)

    chunks = chunk_text(text, 120)

    assert len(chunks) > 1
    assert " ".join("\n\n".join(chunks).split()) == " ".join(text.split())
