"""
Heuristic code quality scoring.

``score`` turns raw source text into a ``QualityReport``: line metrics,
structural and security flags, four dimension scores in [1, 10], their mean,
suggestions and a letter grade. The result depends only on the input text and
language, so repeated calls return identical reports.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict

Grade = Literal["A", "B", "C", "D"]

MIN_SCORE = 1.0
MAX_SCORE = 10.0

SLASH_COMMENT_MARKERS: tuple[str, ...] = ("//", "/*")
HASH_COMMENT_MARKERS: tuple[str, ...] = ("#",)

HASH_COMMENT_LANGUAGES = frozenset(
    {"python", "py", "shell", "sh", "bash", "zsh", "ruby", "rb", "yaml", "yml"}
)

# A flag is not raised when the text names the flag itself, so analyzing the
# analyzer's own output does not report it.
SECURITY_PATTERNS: dict[str, tuple[str, tuple[str, ...]]] = {
    "has_console_log": ("console.log", ("hasConsoleLog", "has_console_log")),
    "has_eval": ("eval(", ("hasEval", "has_eval")),
    "has_inner_html": ("innerHTML", ("hasInnerHTML", "has_inner_html")),
}

SUGGESTION_MORE_COMMENTS = "Consider adding more comments to explain complex logic"
SUGGESTION_REDUCE_EMPTY_LINES = "Reduce excessive empty lines for better readability"
SUGGESTION_ADD_EXPORTS = "Consider exporting functions or classes for reusability"
SUGGESTION_REMOVE_EVAL = "Avoid using eval() as it poses security risks"
SUGGESTION_REMOVE_CONSOLE_LOG = "Remove console.log statements before production"
SUGGESTION_AVOID_INNER_HTML = (
    "Use textContent or safe DOM methods instead of innerHTML to prevent XSS"
)


class QualityBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    readability: float
    maintainability: float
    security: float
    performance: float


class QualityMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_lines: int
    non_empty_lines: int
    comment_lines: int
    comment_ratio: float
    empty_line_ratio: float


class StructureFlags(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_imports: bool
    has_exports: bool
    has_functions: bool
    has_classes: bool
    has_interfaces: bool
    has_types: bool


class SecurityFlags(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_console_log: bool
    has_eval: bool
    has_inner_html: bool


class QualityReport(BaseModel):
    """Result of scoring one piece of code."""

    model_config = ConfigDict(frozen=True)

    language: str
    overall_score: float
    breakdown: QualityBreakdown
    metrics: QualityMetrics
    structure: StructureFlags
    security_flags: SecurityFlags
    suggestions: list[str]
    grade: Grade


def round_half_up(value: float, places: int = 1) -> float:
    """Round to ``places`` decimals, with ties going away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def clamp_score(value: float) -> float:
    return max(MIN_SCORE, min(MAX_SCORE, value))


def grade_for_score(overall: float) -> Grade:
    if overall >= 8:
        return "A"
    if overall >= 6:
        return "B"
    if overall >= 4:
        return "C"
    return "D"


def comment_markers_for(language: str) -> tuple[str, ...]:
    if language.strip().lower() in HASH_COMMENT_LANGUAGES:
        return HASH_COMMENT_MARKERS
    return SLASH_COMMENT_MARKERS


def _measure_lines(code_content: str, language: str) -> QualityMetrics:
    lines = code_content.split("\n") if code_content else []
    markers = comment_markers_for(language)

    total_lines = len(lines)
    stripped = [line.strip() for line in lines]
    non_empty_lines = sum(1 for line in stripped if line)
    comment_lines = sum(1 for line in stripped if line.startswith(markers))

    if total_lines:
        comment_ratio = comment_lines / total_lines * 100
        empty_line_ratio = (total_lines - non_empty_lines) / total_lines * 100
    else:
        comment_ratio = empty_line_ratio = 0.0

    return QualityMetrics(
        total_lines=total_lines,
        non_empty_lines=non_empty_lines,
        comment_lines=comment_lines,
        comment_ratio=comment_ratio,
        empty_line_ratio=empty_line_ratio,
    )


def _detect_structure(code_content: str) -> StructureFlags:
    return StructureFlags(
        has_imports="import " in code_content,
        has_exports="export " in code_content,
        has_functions="function " in code_content or "=>" in code_content,
        has_classes="class " in code_content,
        has_interfaces="interface " in code_content,
        has_types="type " in code_content,
    )


def _detect_security_issues(code_content: str) -> SecurityFlags:
    flags = {
        name: pattern in code_content
        and not any(marker in code_content for marker in markers)
        for name, (pattern, markers) in SECURITY_PATTERNS.items()
    }
    return SecurityFlags(**flags)


def _suggestions(
    metrics: QualityMetrics, structure: StructureFlags, security: SecurityFlags
) -> list[str]:
    suggestions = []
    if metrics.comment_ratio < 10:
        suggestions.append(SUGGESTION_MORE_COMMENTS)
    if metrics.empty_line_ratio > 30:
        suggestions.append(SUGGESTION_REDUCE_EMPTY_LINES)
    if not structure.has_exports:
        suggestions.append(SUGGESTION_ADD_EXPORTS)
    if security.has_eval:
        suggestions.append(SUGGESTION_REMOVE_EVAL)
    if security.has_console_log:
        suggestions.append(SUGGESTION_REMOVE_CONSOLE_LOG)
    if security.has_inner_html:
        suggestions.append(SUGGESTION_AVOID_INNER_HTML)
    return suggestions


def score(code_content: str, language: str = "typescript") -> QualityReport:
    """Score ``code_content`` and return the full quality report."""
    metrics = _measure_lines(code_content, language)
    structure = _detect_structure(code_content)
    security = _detect_security_issues(code_content)

    readability = (
        10
        - metrics.empty_line_ratio / 10
        + metrics.comment_ratio / 5
        + (1 if structure.has_imports else 0)
    )
    maintainability = 5 + sum(
        [
            structure.has_exports,
            structure.has_functions,
            structure.has_classes,
            structure.has_interfaces,
            structure.has_types,
        ]
    )
    security_score = (
        10
        - (5 if security.has_eval else 0)
        - (3 if security.has_inner_html else 0)
        - (1 if security.has_console_log else 0)
    )
    performance = 8 - (2 if security.has_console_log else 0) - (
        5 if security.has_eval else 0
    )

    breakdown = QualityBreakdown(
        readability=round_half_up(clamp_score(readability)),
        maintainability=round_half_up(clamp_score(maintainability)),
        security=round_half_up(clamp_score(security_score)),
        performance=round_half_up(clamp_score(performance)),
    )
    overall = round_half_up(
        clamp_score(
            (
                breakdown.readability
                + breakdown.maintainability
                + breakdown.security
                + breakdown.performance
            )
            / 4
        )
    )

    return QualityReport(
        language=language,
        overall_score=overall,
        breakdown=breakdown,
        metrics=metrics.model_copy(
            update={
                "comment_ratio": round_half_up(metrics.comment_ratio),
                "empty_line_ratio": round_half_up(metrics.empty_line_ratio),
            }
        ),
        structure=structure,
        security_flags=security,
        suggestions=_suggestions(metrics, structure, security),
        grade=grade_for_score(overall),
    )
