"""
Heuristic Scorer — Deterministic Rule Engine

The cheap first opinion on every prompt. Zero cost, no model, no I/O.

Scoring has two halves:
  1. A raw vagueness total from weighted rules (vague verbs, learning
     verbs, missing context, broad scope, very short prompts).
  2. A specificity score from concrete technical detail (file paths,
     line references, routes, named technologies, requirements).

The specificity score offsets the raw total, which is what lets
"build a REST API with JWT auth, rate limiting and error handling"
score low despite its vague verb.

The scorer holds no mutable state and never raises: an empty prompt
is a defined result, not an error.
"""

from __future__ import annotations

from promptclear import patterns as p
from promptclear.config import settings
from promptclear.results import (
    AnalysisResult,
    AnalysisSource,
    HeuristicIssue,
    IssueSeverity,
    IssueType,
)

# Rule-based confidence for non-empty prompts
RULES_CONFIDENCE = 0.7


# ============================================================
# ISSUE TEMPLATES
# ============================================================

EMPTY_PROMPT_ISSUE = HeuristicIssue(
    type=IssueType.MISSING_CONTEXT,
    severity=IssueSeverity.HIGH,
    description="Prompt is empty",
    suggestion="Please describe what you need help with",
)

VAGUE_VERB_ISSUE = HeuristicIssue(
    type=IssueType.VAGUE_VERB,
    severity=IssueSeverity.MEDIUM,
    description='Prompt uses vague action verbs like "make", "fix", "do"',
    suggestion="Use specific verbs: implement, refactor, debug, optimize, design",
)

MISSING_CONTEXT_ISSUE = HeuristicIssue(
    type=IssueType.MISSING_CONTEXT,
    severity=IssueSeverity.MEDIUM,
    description="Prompt lacks specific context (file paths, code references, project details)",
    suggestion="Specify: Which file? Which function? What technology stack? Current code?",
)

_LEARNING_REASON = "learning/explanation request lacks structure or learning objectives"
_BROAD_REASON = "request is too broad without clear requirements or constraints"

_LEARNING_SUGGESTION = "Specify: What aspects? How deep? What format? Examples needed?"
_BROAD_SUGGESTION = "Define: What features? What technologies? Success criteria? Constraints?"


class HeuristicScorer:
    """
    Rule-based vagueness scorer.

    Instantiated once as a module singleton; every call is a pure
    function of its input.
    """

    def __init__(self, vagueness_threshold: int = settings.VAGUENESS_THRESHOLD):
        self.vagueness_threshold = vagueness_threshold

    def score(self, prompt: str) -> AnalysisResult:
        """
        Score a prompt from 0 (fully specific) to 100 (fully vague).

        Returns:
            AnalysisResult tagged source=rules, with one issue per
            detected problem category.
        """
        trimmed = prompt.strip()
        if not trimmed:
            return AnalysisResult(
                score=p.MAX_SCORE,
                confidence=1.0,
                is_vague=True,
                source=AnalysisSource.RULES,
                issues=(EMPTY_PROMPT_ISSUE,),
                specificity_score=0,
            )

        text = trimmed.lower()
        word_count = len(text.split())
        issues: list[HeuristicIssue] = []
        raw = 0

        # --- Rule 1: vague verbs ---
        if p.VAGUE_VERB_PATTERN.search(text):
            raw += p.WEIGHT_VAGUE_VERB
            issues.append(VAGUE_VERB_ISSUE)

        # --- Rule 2: learning verbs ---
        has_learning_verb = bool(p.LEARNING_VERB_PATTERN.search(text))
        if has_learning_verb:
            raw += p.WEIGHT_LEARNING_VERB

        # --- Rule 3: missing context ---
        has_context = any(pat.search(text) for pat in p.CONTEXT_PATTERNS)
        if not has_context and word_count < p.CONTEXT_NEEDED_WORDS:
            raw += p.WEIGHT_MISSING_CONTEXT
            issues.append(MISSING_CONTEXT_ISSUE)

        # --- Rule 4: broad scope ---
        has_broad_scope = bool(p.BROAD_TERM_PATTERN.search(text)) and (
            word_count < p.SHORT_WORDS or not self._has_specific_details(text)
        )
        if has_broad_scope:
            raw += p.WEIGHT_BROAD_SCOPE

        # Learning verbs and broad scope share one UNCLEAR_SCOPE entry
        scope_issue = self._scope_issue(has_learning_verb, has_broad_scope)
        if scope_issue is not None:
            issues.append(scope_issue)

        # --- Rule 5: very short prompts ---
        if word_count <= p.VERY_SHORT_WORDS:
            raw += p.WEIGHT_VERY_SHORT

        raw = min(p.MAX_SCORE, raw)

        specificity = self.specificity_score(trimmed)
        offset = specificity * p.SPECIFICITY_OFFSET_MULTIPLIER
        final = int(round(max(0.0, raw - offset)))
        final = max(0, min(p.MAX_SCORE, final))

        return AnalysisResult(
            score=final,
            confidence=RULES_CONFIDENCE,
            is_vague=final >= self.vagueness_threshold,
            source=AnalysisSource.RULES,
            issues=tuple(issues),
            specificity_score=specificity,
        )

    def specificity_score(self, prompt: str) -> int:
        """
        Points for concrete technical detail, 0-100.

        Each tier contributes `points` per matched pattern up to its own
        maximum; technical nouns count once per distinct noun; longer
        prompts earn a small length bonus.
        """
        text = prompt.strip().lower()
        if not text:
            return 0

        total = 0
        for tier in (p.HIGH_VALUE, p.MEDIUM_VALUE, p.REQUIREMENTS):
            hits = sum(1 for pat in tier.patterns if pat.search(text))
            total += min(tier.maximum, hits * tier.points)

        nouns = {m.group(1) for m in p.TECH_OBJECT_PATTERN.finditer(text)}
        total += min(p.TECH_OBJECT_MAX, len(nouns) * p.TECH_OBJECT_POINTS)

        steps = len(text.split()) // p.LENGTH_BONUS_WORDS_PER_STEP
        total += min(p.LENGTH_BONUS_MAX, steps * p.LENGTH_BONUS_PER_STEP)

        return min(p.SPECIFICITY_MAX, total)

    @staticmethod
    def _has_specific_details(text: str) -> bool:
        return "?" in text or any(pat.search(text) for pat in p.DETAIL_INDICATORS)

    @staticmethod
    def _scope_issue(learning: bool, broad: bool) -> HeuristicIssue | None:
        if not (learning or broad):
            return None
        reasons = []
        suggestions = []
        if learning:
            reasons.append(_LEARNING_REASON)
            suggestions.append(_LEARNING_SUGGESTION)
        if broad:
            reasons.append(_BROAD_REASON)
            suggestions.append(_BROAD_SUGGESTION)
        description = "; ".join(reasons)
        return HeuristicIssue(
            type=IssueType.UNCLEAR_SCOPE,
            severity=IssueSeverity.MEDIUM,
            description=description[0].upper() + description[1:],
            suggestion=" ".join(suggestions),
        )


# ============================================================
# SINGLETON: stateless, safe to share
# ============================================================

heuristic_scorer = HeuristicScorer()
