from fixaugment.core.policy import (
    BREAKDOWN_ADVICE,
    check_input_size,
    fix_double_quotes,
    looks_like_assistant_output,
    optimize_input,
    review_prompt,
    suggest_task_breakdown,
)

COMPLEX_PROMPT = (
    "Please write complete documentation for this module covering every API "
    "endpoint in detail across all subsystems..."
)


def test_check_input_size_over_threshold() -> None:
    result = check_input_size("a" * 8001)

    assert result.is_over_threshold
    assert "8001" in result.advisory_message
    assert "8000" in result.advisory_message


def test_check_input_size_at_limit_is_fine() -> None:
    result = check_input_size("a" * 8000)

    assert not result.is_over_threshold
    assert result.advisory_message is None


def test_check_input_size_custom_limit() -> None:
    assert check_input_size("abcdef", limit=5).is_over_threshold


def test_task_breakdown_depends_on_length() -> None:
    assert suggest_task_breakdown(COMPLEX_PROMPT.ljust(2001, "x")) == BREAKDOWN_ADVICE
    assert suggest_task_breakdown(COMPLEX_PROMPT.ljust(1999, "x")) is None


def test_task_breakdown_needs_a_pattern() -> None:
    assert suggest_task_breakdown("z" * 5000) is None


def test_fix_double_quotes_skips_escaped() -> None:
    assert fix_double_quotes('say "hi" and \\"ok\\"') == 'say \\"hi\\" and \\"ok\\"'
    assert fix_double_quotes("no quotes") == "no quotes"


def test_optimize_input() -> None:
    assert optimize_input("  Fix   the\n bug  ") == "Please fix the bug."
    assert optimize_input("Could you fix this?") == "Could you fix this?"
    assert optimize_input("please help") == "please help."
    assert optimize_input("   ") == ""


def test_looks_like_assistant_output() -> None:
    assert looks_like_assistant_output("Agent: done")
    assert looks_like_assistant_output("<function_results>x</function_results>")
    assert not looks_like_assistant_output("just a note")


def test_review_prompt_collects_issues() -> None:
    review = review_prompt('Say "hi"')

    assert review.text == 'Say \\"hi\\"'
    assert review.issues == ["Fixed double quotes"]
    assert not review.size.is_over_threshold
    assert review.breakdown is None


def test_review_prompt_size_and_breakdown() -> None:
    review = review_prompt(COMPLEX_PROMPT.ljust(2500, "x"), size_limit=2000)

    assert review.issues[0].startswith("Input size warning: Input is 2500 characters")
    assert review.issues[1] == "Task breakdown suggested"
    assert review.breakdown == BREAKDOWN_ADVICE


def test_review_prompt_clean_input() -> None:
    review = review_prompt("short and fine")

    assert review.issues == []
    assert review.text == "short and fine"
