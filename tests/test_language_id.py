import pytest

from fixaugment.core.errors import InvalidConfigurationError
from fixaugment.core.language_id import (
    CodeLanguageDetector,
    HeuristicCodeLanguageDetector,
    detect_code_language,
    make_code_language_detector,
)


@pytest.mark.parametrize(
    "code, expected",
    [
        ("def foo():\n    return 1", "python"),
        ("import { x } from './x';\nconst y: number = 1;", "typescript"),
        ("function add(a, b) { return a + b; }", "javascript"),
        ("const f = function() => 1", "javascript"),
        ("public class Foo { }", "java"),
        ("<!DOCTYPE html><html></html>", "html"),
        ('package main\nimport "fmt"\nfunc main() { fmt.Println(1) }', "go"),
        ('#include <stdio.h>\nint main() { printf("hi"); }', "c"),
        ("#include <iostream>\nint main() { std::cout << 1; }", "cpp"),
    ],
)
def test_detect_code_language_heuristics(code: str, expected: str) -> None:
    assert detect_code_language(code) == expected


def test_unknown_snippet_returns_none() -> None:
    assert detect_code_language("hello world") is None
    assert detect_code_language("") is None


def test_typescript_rule_wins_over_javascript() -> None:
    code = "import { a } from 'b';\nconst f = function() { return a; };"

    assert detect_code_language(code) == "typescript"


def test_detection_is_deterministic() -> None:
    code = "def run(x):\n    return x"

    assert {detect_code_language(code) for _ in range(5)} == {"python"}


def test_heuristic_detector_prediction() -> None:
    detector = HeuristicCodeLanguageDetector()

    pred = detector.detect_code("def f():\n    pass")

    assert isinstance(detector, CodeLanguageDetector)
    assert pred is not None
    assert pred.lang == "python"
    assert pred.backend == "heuristic"
    assert detector.detect_code("plain words") is None
    assert detector.detect_topk("plain words") == []


def test_make_code_language_detector() -> None:
    assert make_code_language_detector("none") is None
    assert isinstance(make_code_language_detector("Heuristic"), HeuristicCodeLanguageDetector)
    with pytest.raises(InvalidConfigurationError):
        make_code_language_detector("lingua")


def test_pygments_detector() -> None:
    pytest.importorskip("pygments")
    detector = make_code_language_detector("pygments")

    assert detector.detect_code("   ") is None
    pred = detector.detect_code("#!/usr/bin/env python\nprint('x')\n")
    assert pred is not None
    assert pred.lang == "python"
    assert pred.backend == "pygments"
