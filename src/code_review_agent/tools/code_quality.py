"""Tool exposing the quality scoring engine to the model."""

from __future__ import annotations

import logging
from typing import Any

from code_review_agent.quality import score

logger = logging.getLogger(__name__)


async def analyze_code_quality(
    code_content: str, language: str = "typescript"
) -> dict[str, Any]:
    report = score(code_content, language)
    logger.info(
        f"Scored {report.metrics.total_lines} lines of {language}: "
        f"{report.overall_score} ({report.grade})"
    )
    return report.model_dump()
