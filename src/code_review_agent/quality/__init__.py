"""Deterministic code quality scoring."""

from code_review_agent.quality.scoring import (
    QualityReport,
    grade_for_score,
    score,
)

__all__ = ["QualityReport", "grade_for_score", "score"]
