"""
Result Types

The value objects every scorer returns. An AnalysisResult is created
fresh per call and carries its provenance in `source`, so degraded
(fallback) results stay distinguishable from confident ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class IssueType(str, Enum):
    VAGUE_VERB = "VAGUE_VERB"
    MISSING_CONTEXT = "MISSING_CONTEXT"
    UNCLEAR_SCOPE = "UNCLEAR_SCOPE"


class IssueSeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class AnalysisSource(str, Enum):
    RULES = "rules"
    ML = "ml"
    LLM = "llm"
    HYBRID_FALLBACK = "hybrid-fallback"


@dataclass(frozen=True)
class HeuristicIssue:
    """A single problem the rule engine found in a prompt."""
    type: IssueType
    severity: IssueSeverity
    description: str
    suggestion: str

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Final answer for one prompt."""
    score: int                  # 0-100, higher = more vague
    confidence: float           # 0.0 to 1.0
    is_vague: bool
    source: AnalysisSource
    issues: tuple[HeuristicIssue, ...] = ()
    reasoning: Optional[str] = None
    specificity_score: int = 0

    @property
    def has_vague_verb(self) -> bool:
        return self._has(IssueType.VAGUE_VERB)

    @property
    def has_missing_context(self) -> bool:
        return self._has(IssueType.MISSING_CONTEXT)

    @property
    def has_unclear_scope(self) -> bool:
        return self._has(IssueType.UNCLEAR_SCOPE)

    def _has(self, issue_type: IssueType) -> bool:
        return any(i.type == issue_type for i in self.issues)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "confidence": round(self.confidence, 3),
            "is_vague": self.is_vague,
            "source": self.source.value,
            "issues": [i.to_dict() for i in self.issues],
            "reasoning": self.reasoning,
            "specificity_score": self.specificity_score,
        }


@dataclass(frozen=True)
class MLResult:
    """Output of the statistical scorer alone."""
    score: int
    confidence: float
    is_vague: bool


@dataclass
class TrainingReport:
    """Summary of one StatisticalScorer.train() call."""
    samples_used: int
    final_loss: float
    vocabulary_size: int
    losses: list[float] = field(default_factory=list)
