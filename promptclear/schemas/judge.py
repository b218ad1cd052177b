"""
Judge Verdict Schemas

Pydantic models for the JSON an external judge is asked to return.
Scores must be JSON numbers (booleans and numeric strings are rejected)
and are rounded and clamped into [0, 100] rather than refused, since
judges drift slightly out of range more often than they are wrong.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator


def clamp_score(value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"score must be a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ValueError("score must be finite")
    return max(0, min(100, int(round(value))))


class VaguenessVerdict(BaseModel):
    """Judge rating of a single prompt."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    vagueness_score: int = Field(..., alias="vaguenessScore")
    reasoning: str

    @field_validator("vagueness_score", mode="before")
    @classmethod
    def _clamp(cls, v):
        return clamp_score(v)


class ComparisonVerdict(BaseModel):
    """Judge rating of an enhanced prompt against its original."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    overall_score: int = Field(..., alias="overallScore")
    specificity_gain: int = Field(..., alias="specificityGain")
    actionability: int
    issue_coverage: int = Field(..., alias="issueCoverage")
    relevance: int
    reasoning: str

    @field_validator(
        "overall_score", "specificity_gain", "actionability",
        "issue_coverage", "relevance",
        mode="before",
    )
    @classmethod
    def _clamp(cls, v):
        return clamp_score(v)
