"""
Comparative Scorer — Original vs Enhanced Prompt

Asks the external judge how much an enhanced prompt improves on the
original across four criteria plus an overall score. Used to grade
prompt rewrites, not to route analysis.

Every failure (no judge, transport error, timeout, bad JSON) yields
None rather than an exception.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from promptclear.config import settings
from promptclear.errors import JudgeError
from promptclear.judge import ExternalJudge, call_judge
from promptclear.judge.parse import build_comparison_instructions, parse_comparison
from promptclear.schemas.judge import ComparisonVerdict

logger = logging.getLogger(__name__)


class ComparativeScorer:
    """Judge-backed comparison of a prompt and its rewrite."""

    def __init__(
        self,
        judge: Optional[ExternalJudge] = None,
        timeout: float = settings.JUDGE_TIMEOUT,
    ):
        self._judge = judge
        self._timeout = timeout

    async def compare(
        self,
        original: str,
        enhanced: str,
        cancel: Optional[asyncio.Event] = None,
    ) -> Optional[ComparisonVerdict]:
        if self._judge is None:
            logger.warning("No judge configured for comparison")
            return None

        try:
            text = await call_judge(
                self._judge,
                original,
                build_comparison_instructions(original, enhanced),
                cancel,
                self._timeout,
            )
        except JudgeError as e:
            logger.warning(
                "Comparison failed: %s", e, extra={"error_type": type(e).__name__},
            )
            return None

        parsed = parse_comparison(text)
        if not parsed.ok:
            logger.warning("Comparison response rejected: %s", parsed.error)
            return None

        logger.debug(
            "Comparison complete",
            extra={"score": parsed.value.overall_score},
        )
        return parsed.value

    async def get_confidence(
        self,
        original: str,
        enhanced: str,
        cancel: Optional[asyncio.Event] = None,
    ) -> float:
        """Overall score normalised to 0-1, or 0.0 when comparison fails."""
        verdict = await self.compare(original, enhanced, cancel)
        if verdict is None:
            return 0.0
        return verdict.overall_score / 100
