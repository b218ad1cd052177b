"""
Training Corpus Schema

Pydantic model for one labeled training record. Field names follow the
corpus JSON format (camelCase) so a dataset loads without remapping.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IntentCategory(str, Enum):
    BUILD = "build"
    FIX = "fix"
    LEARN = "learn"
    IMPROVE = "improve"
    CONFIGURE = "configure"
    UNKNOWN = "unknown"


class TrainingSample(BaseModel):
    """One labeled prompt from the training corpus."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    prompt: str = Field(..., min_length=1)
    vagueness_score: int = Field(..., alias="vaguenessScore", ge=0, le=100, strict=True)
    intent_category: IntentCategory = Field(..., alias="intentCategory")
    missing_elements: list[str] = Field(default_factory=list, alias="missingElements")
    reasoning: str = Field(..., min_length=1)

    @field_validator("prompt", "reasoning")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    def label(self, threshold: int) -> int:
        """Binary training label: 1 (vague) when the score reaches `threshold`."""
        return 1 if self.vagueness_score >= threshold else 0

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
