"""
Comparative Scorer Tests — original vs enhanced prompt.
"""

import json

import pytest

from promptclear.comparative import ComparativeScorer
from promptclear.errors import JudgeUnavailableError
from promptclear.judge import ExternalJudge

ORIGINAL = "fix it"
ENHANCED = "Fix the TypeError thrown by parseUser in src/auth/login.ts when email is missing"

VERDICT = json.dumps({
    "overallScore": 85,
    "specificityGain": 90,
    "actionability": 80,
    "issueCoverage": 75,
    "relevance": 95,
    "reasoning": "Names the file, the function and the failure.",
})


class ScriptedJudge(ExternalJudge):
    def __init__(self, response=VERDICT, error=None):
        self.response = response
        self.error = error
        self.instructions = []

    async def judge(self, original, instructions):
        self.instructions.append(instructions)
        if self.error is not None:
            raise self.error
        return self.response


class TestCompare:

    @pytest.mark.asyncio
    async def test_success(self):
        judge = ScriptedJudge()
        verdict = await ComparativeScorer(judge).compare(ORIGINAL, ENHANCED)
        assert verdict.overall_score == 85
        assert verdict.specificity_gain == 90
        assert verdict.issue_coverage == 75
        assert ENHANCED in judge.instructions[0]

    @pytest.mark.asyncio
    async def test_confidence(self):
        assert await ComparativeScorer(ScriptedJudge()).get_confidence(ORIGINAL, ENHANCED) == 0.85

    @pytest.mark.asyncio
    @pytest.mark.parametrize("judge", [
        None,
        ScriptedJudge(error=JudgeUnavailableError("down")),
        ScriptedJudge(error=RuntimeError("boom")),
        ScriptedJudge(response="Looks better to me."),
        ScriptedJudge(response='{"overallScore": 80, "reasoning": "partial"}'),
    ])
    async def test_failures_yield_none(self, judge):
        scorer = ComparativeScorer(judge)
        assert await scorer.compare(ORIGINAL, ENHANCED) is None
        assert await scorer.get_confidence(ORIGINAL, ENHANCED) == 0.0
