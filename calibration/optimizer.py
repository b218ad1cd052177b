"""
Threshold Optimizer — Scoring Calibration

Takes benchmark results and recommends a vagueness threshold and rule
adjustments that maximise agreement with human labels.

The optimizer does NOT auto-apply changes. It produces recommendations
that a human reviews before updating config or patterns.py.

Optimization targets:
  1. Maximize F1 on the vague/specific call
  2. Vague samples should average ≥ 60
  3. Specific samples should average ≤ 25
  4. Score separation ≥ 35 points
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from calibration.benchmark import BenchmarkResult, ScorerMetrics

TARGET_VAGUE_AVG = 60.0
TARGET_SPECIFIC_AVG = 25.0
TARGET_SEPARATION = 35.0


@dataclass
class ThresholdRecommendation:
    """A single recommended adjustment."""
    parameter: str
    current_value: float
    recommended_value: float
    reason: str
    impact: str


@dataclass
class OptimizationReport:
    """Full optimization output."""
    scorer: str
    current_threshold: int
    best_threshold: int
    best_f1: float
    current_f1: float
    recommendations: list[ThresholdRecommendation]
    summary: str


def pick_threshold_max_f1(labels: Sequence[int], scores: Sequence[int]) -> tuple[int, float]:
    """
    Integer threshold in [0, 100] that maximises F1 for `score >= threshold`.

    Ties resolve to the lowest threshold.
    """
    y_true = np.asarray(labels, dtype=bool)
    y_score = np.asarray(scores, dtype=np.float64)
    if y_true.size == 0:
        return 50, 0.0

    thresholds = np.arange(0, 101)
    predicted = y_score[None, :] >= thresholds[:, None]

    tp = np.sum(predicted & y_true[None, :], axis=1).astype(np.float64)
    fp = np.sum(predicted & ~y_true[None, :], axis=1).astype(np.float64)
    fn = np.sum(~predicted & y_true[None, :], axis=1).astype(np.float64)

    denom = 2.0 * tp + fp + fn
    f1 = np.divide(2.0 * tp, denom, out=np.zeros_like(denom), where=denom != 0)

    best_idx = int(np.argmax(f1))
    return int(thresholds[best_idx]), float(f1[best_idx])


def optimize_threshold(result: BenchmarkResult, scorer: str = "heuristic") -> OptimizationReport:
    """
    Analyze one scorer's benchmark results and produce recommendations.

    Strategy:
    - Recommend the F1-maximising threshold when it beats the current one
    - If specific prompts score too high → rules are over-penalizing (FP problem)
    - If vague prompts score too low → rules are missing vagueness (FN problem)
    - If separation is < 35 → the scorer barely distinguishes the classes
    """
    m: ScorerMetrics = result.scorers[scorer]
    recommendations: list[ThresholdRecommendation] = []

    best_threshold, best_f1 = pick_threshold_max_f1(result.labels, m.scores)
    current = result.vagueness_threshold

    # --- Threshold ---
    if best_threshold != current and best_f1 > m.f1:
        recommendations.append(ThresholdRecommendation(
            parameter="PROMPTCLEAR_VAGUENESS_THRESHOLD",
            current_value=current,
            recommended_value=best_threshold,
            reason=f"F1 is {m.f1:.0%} at threshold {current}, "
                   f"{best_f1:.0%} at {best_threshold}.",
            impact=f"Moves the vague/specific cut from {current} to {best_threshold}.",
        ))

    # --- Specific samples ---
    if m.specific_scores and m.avg_specific_score > TARGET_SPECIFIC_AVG:
        recommendations.append(ThresholdRecommendation(
            parameter="specificity_offset",
            current_value=round(m.avg_specific_score, 1),
            recommended_value=TARGET_SPECIFIC_AVG,
            reason=f"Specific prompts avg {m.avg_specific_score:.0f} "
                   f"(target ≤{TARGET_SPECIFIC_AVG:.0f}). "
                   f"{m.false_positives} specific prompt(s) flagged vague.",
            impact="Review the false alarms for technical detail the "
                   "specificity patterns do not recognise.",
        ))

    # --- Vague samples ---
    if m.vague_scores and m.avg_vague_score < TARGET_VAGUE_AVG:
        recommendations.append(ThresholdRecommendation(
            parameter="rule_weights",
            current_value=round(m.avg_vague_score, 1),
            recommended_value=TARGET_VAGUE_AVG,
            reason=f"Vague prompts avg {m.avg_vague_score:.0f} "
                   f"(target ≥{TARGET_VAGUE_AVG:.0f}). "
                   f"{m.false_negatives} vague prompt(s) missed.",
            impact="Review the misses for vague phrasing the rule "
                   "vocabulary does not cover.",
        ))

    # --- Separation ---
    if m.vague_scores and m.specific_scores and m.separation < TARGET_SEPARATION:
        recommendations.append(ThresholdRecommendation(
            parameter="score_separation",
            current_value=round(m.separation, 1),
            recommended_value=TARGET_SEPARATION,
            reason=f"Score separation is {m.separation:.0f} points "
                   f"(target ≥{TARGET_SEPARATION:.0f}). Vague and specific "
                   f"prompts aren't sufficiently distinguished.",
            impact="Apply the above recommendations to widen the gap.",
        ))

    if not recommendations:
        summary = (
            f"Calibration looks good for {scorer}. F1: {m.f1:.0%} at threshold {current}. "
            f"Separation: {m.separation:.0f} points. No adjustments recommended."
        )
    else:
        summary = (
            f"Found {len(recommendations)} adjustment(s) for {scorer}. "
            f"F1: {m.f1:.0%} at threshold {current} "
            f"(best {best_f1:.0%} at {best_threshold}). "
            f"Separation: {m.separation:.0f} points (target ≥{TARGET_SEPARATION:.0f})."
        )

    return OptimizationReport(
        scorer=scorer,
        current_threshold=current,
        best_threshold=best_threshold,
        best_f1=round(best_f1, 4),
        current_f1=round(m.f1, 4),
        recommendations=recommendations,
        summary=summary,
    )


def format_optimization_report(report: OptimizationReport) -> str:
    """Format optimization report for human review."""
    lines = [
        "=" * 60,
        f"PROMPTCLEAR THRESHOLD OPTIMIZATION REPORT ({report.scorer})",
        "=" * 60,
        "",
        report.summary,
        "",
    ]

    if report.recommendations:
        lines.append("--- RECOMMENDATIONS ---")
        lines.append("")
        for i, rec in enumerate(report.recommendations, 1):
            lines.append(f"{i}. {rec.parameter}")
            lines.append(f"   Current: {rec.current_value}")
            lines.append(f"   Recommended: {rec.recommended_value}")
            lines.append(f"   Reason: {rec.reason}")
            lines.append(f"   Impact: {rec.impact}")
            lines.append("")
    else:
        lines.append("No adjustments needed.")

    lines.extend(["", "=" * 60])
    return "\n".join(lines)
