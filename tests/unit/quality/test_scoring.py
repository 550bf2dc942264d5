"""Tests for the heuristic code quality scoring."""

import pytest

from code_review_agent.quality import grade_for_score, score
from code_review_agent.quality.scoring import (
    SUGGESTION_ADD_EXPORTS,
    SUGGESTION_AVOID_INNER_HTML,
    SUGGESTION_MORE_COMMENTS,
    SUGGESTION_REDUCE_EMPTY_LINES,
    SUGGESTION_REMOVE_CONSOLE_LOG,
    SUGGESTION_REMOVE_EVAL,
    round_half_up,
)

WELL_COMMENTED_MODULE = "\n".join([
    "// Utility helpers",
    "// Adds two numbers",
    "export function add(a: number, b: number): number {",
    "  const sum = a + b;",
    "  return sum;",
    "}",
    "",
    "const x = 1;",
    "const y = 2;",
    "const z = x + y;",
])

UNSAFE_SNIPPET = "\n".join([
    "const el = document.body;",
    "el.innerHTML = eval(input);",
    "console.log(el);",
])


def test_well_commented_module_metrics() -> None:
    report = score(WELL_COMMENTED_MODULE)

    assert report.metrics.total_lines == 10
    assert report.metrics.non_empty_lines == 9
    assert report.metrics.comment_lines == 2
    assert report.metrics.comment_ratio == 20.0
    assert report.metrics.empty_line_ratio == 10.0
    assert report.structure.has_exports
    assert report.structure.has_functions
    assert not report.structure.has_imports
    assert not report.structure.has_classes


def test_well_commented_module_scores() -> None:
    report = score(WELL_COMMENTED_MODULE)

    # 10 - 1 + 4 = 13 is clamped to the ceiling
    assert report.breakdown.readability == 10.0
    assert report.breakdown.maintainability == 7.0
    assert report.breakdown.security == 10.0
    assert report.breakdown.performance == 8.0
    assert report.overall_score == 8.8
    assert report.grade == "A"
    assert report.suggestions == []
    assert report.language == "typescript"


def test_security_issues_lower_scores_and_order_suggestions() -> None:
    report = score(UNSAFE_SNIPPET)

    assert report.security_flags.has_eval
    assert report.security_flags.has_inner_html
    assert report.security_flags.has_console_log
    assert report.breakdown.security == 1.0
    assert report.breakdown.performance == 1.0
    assert report.overall_score == 4.3
    assert report.grade == "C"
    assert report.suggestions == [
        SUGGESTION_MORE_COMMENTS,
        SUGGESTION_ADD_EXPORTS,
        SUGGESTION_REMOVE_EVAL,
        SUGGESTION_REMOVE_CONSOLE_LOG,
        SUGGESTION_AVOID_INNER_HTML,
    ]


def test_empty_input_has_zero_lines_and_no_division_error() -> None:
    report = score("")

    assert report.metrics.total_lines == 0
    assert report.metrics.comment_ratio == 0.0
    assert report.metrics.empty_line_ratio == 0.0
    assert report.breakdown.readability == 10.0
    assert report.breakdown.maintainability == 5.0
    assert report.overall_score == 8.3
    assert report.suggestions == [SUGGESTION_MORE_COMMENTS, SUGGESTION_ADD_EXPORTS]


def test_readability_is_clamped_to_floor() -> None:
    report = score("\n\n\n")

    assert report.metrics.total_lines == 4
    assert report.metrics.empty_line_ratio == 100.0
    assert report.breakdown.readability == 1.0
    assert report.overall_score == 6.0
    assert report.grade == "B"
    assert report.suggestions == [
        SUGGESTION_MORE_COMMENTS,
        SUGGESTION_REDUCE_EMPTY_LINES,
        SUGGESTION_ADD_EXPORTS,
    ]


@pytest.mark.parametrize(
    "code",
    [
        WELL_COMMENTED_MODULE,
        UNSAFE_SNIPPET,
        "",
        "\n\n\n",
        "import os\n# comment\nclass A:\n    pass\n",
    ],
)
def test_scores_stay_within_bounds(code: str) -> None:
    report = score(code)

    for value in report.breakdown.model_dump().values():
        assert 1.0 <= value <= 10.0
    assert 1.0 <= report.overall_score <= 10.0


def test_scoring_is_deterministic() -> None:
    first = score(UNSAFE_SNIPPET, "javascript")
    second = score(UNSAFE_SNIPPET, "javascript")

    assert first == second
    assert first.model_dump() == second.model_dump()


def test_hash_comments_counted_for_python() -> None:
    code = "# comment\nimport os\n"

    python_report = score(code, "python")
    typescript_report = score(code, "typescript")

    assert python_report.metrics.total_lines == 3
    assert python_report.metrics.comment_lines == 1
    assert python_report.metrics.comment_ratio == 33.3
    assert python_report.metrics.empty_line_ratio == 33.3
    assert typescript_report.metrics.comment_lines == 0
    assert python_report.language == "python"


def test_structure_flags() -> None:
    code = "\n".join([
        "import { x } from './x';",
        "export interface Shape {}",
        "export type Id = string;",
        "class Circle {}",
        "const f = () => 1;",
    ])

    report = score(code)

    assert report.structure.model_dump() == {
        "has_imports": True,
        "has_exports": True,
        "has_functions": True,
        "has_classes": True,
        "has_interfaces": True,
        "has_types": True,
    }
    assert report.breakdown.maintainability == 10.0


class TestSelfReferentialMarkers:
    """Text naming a security flag is exempt from that flag.

    Known edge case: this also hides real findings in any code that merely
    mentions the marker.
    """

    def test_camel_case_marker_suppresses_eval(self) -> None:
        report = score("const hasEval = true;\neval(code);")

        assert not report.security_flags.has_eval
        assert report.breakdown.security == 10.0

    def test_snake_case_marker_suppresses_inner_html(self) -> None:
        report = score("has_inner_html = 'el.innerHTML = x'", "python")

        assert not report.security_flags.has_inner_html

    def test_marker_only_suppresses_its_own_flag(self) -> None:
        report = score("// hasConsoleLog\nconsole.log(x);\neval(y);")

        assert not report.security_flags.has_console_log
        assert report.security_flags.has_eval


@pytest.mark.parametrize(
    ("overall", "expected"),
    [
        (10.0, "A"),
        (8.0, "A"),
        (7.9999, "B"),
        (6.0, "B"),
        (5.9999, "C"),
        (4.0, "C"),
        (3.9999, "D"),
        (1.0, "D"),
    ],
)
def test_grade_boundaries(overall: float, expected: str) -> None:
    assert grade_for_score(overall) == expected


def test_round_half_up() -> None:
    assert round_half_up(0.25) == 0.3
    assert round_half_up(8.75) == 8.8
    assert round_half_up(2.675, 2) == 2.68
    assert round_half_up(33.333333) == 33.3
