"""
Benchmark Runner — Precision/Recall/F1 per Scorer

Runs a labeled corpus through the heuristic scorer and (when a model
is supplied) the statistical scorer, and compares their output against
the human vagueness scores. Produces:

  1. Per-scorer precision, recall, F1 and accuracy on the vague/specific call
  2. Mean absolute error between engine score and human score
  3. Score separation (avg score on vague samples - avg on specific ones)
  4. Specific misses and false alarms for manual review

This is the tool that tells you if the scorers are accurate.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Sequence

from promptclear.config import settings
from promptclear.heuristic import heuristic_scorer
from promptclear.ml.statistical import StatisticalModel
from promptclear.schemas.training import TrainingSample


@dataclass
class ScorerMetrics:
    """Classification and regression metrics for one scorer."""
    name: str
    true_positives: int = 0   # Engine vague, human vague
    false_positives: int = 0  # Engine vague, human specific
    false_negatives: int = 0  # Engine specific, human vague
    true_negatives: int = 0   # Both specific
    absolute_errors: list[float] = field(default_factory=list)
    vague_scores: list[int] = field(default_factory=list)
    specific_scores: list[int] = field(default_factory=list)
    misses: list[dict] = field(default_factory=list)
    false_alarms: list[dict] = field(default_factory=list)
    scores: list[int] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.true_positives + self.false_positives + self.false_negatives + self.true_negatives

    @property
    def precision(self) -> float:
        denom = self.true_positives + self.false_positives
        return self.true_positives / denom if denom > 0 else 0.0

    @property
    def recall(self) -> float:
        denom = self.true_positives + self.false_negatives
        return self.true_positives / denom if denom > 0 else 0.0

    @property
    def f1(self) -> float:
        p, r = self.precision, self.recall
        return 2 * p * r / (p + r) if (p + r) > 0 else 0.0

    @property
    def accuracy(self) -> float:
        return (self.true_positives + self.true_negatives) / self.total if self.total else 0.0

    @property
    def mean_absolute_error(self) -> float:
        errs = self.absolute_errors
        return sum(errs) / len(errs) if errs else 0.0

    @property
    def avg_vague_score(self) -> float:
        return sum(self.vague_scores) / len(self.vague_scores) if self.vague_scores else 0.0

    @property
    def avg_specific_score(self) -> float:
        return sum(self.specific_scores) / len(self.specific_scores) if self.specific_scores else 0.0

    @property
    def separation(self) -> float:
        return self.avg_vague_score - self.avg_specific_score

    def to_dict(self) -> dict:
        return {
            "accuracy": round(self.accuracy, 4),
            "precision": round(self.precision, 4),
            "recall": round(self.recall, 4),
            "f1": round(self.f1, 4),
            "mae": round(self.mean_absolute_error, 2),
            "avg_vague_score": round(self.avg_vague_score, 1),
            "avg_specific_score": round(self.avg_specific_score, 1),
            "separation": round(self.separation, 1),
            "tp": self.true_positives,
            "fp": self.false_positives,
            "fn": self.false_negatives,
            "tn": self.true_negatives,
        }


@dataclass
class BenchmarkResult:
    """Full benchmark output."""
    total_samples: int
    vague_samples: int
    specific_samples: int
    vagueness_threshold: int
    label_threshold: int
    scorers: dict[str, ScorerMetrics]
    human_scores: list[int] = field(default_factory=list)
    labels: list[int] = field(default_factory=list)


def _evaluate(
    name: str,
    score_fn: Callable[[str], int],
    samples: Sequence[TrainingSample],
    vagueness_threshold: int,
    label_threshold: int,
) -> ScorerMetrics:
    m = ScorerMetrics(name=name)
    for sample in samples:
        score = score_fn(sample.prompt)
        m.scores.append(score)
        human_vague = sample.vagueness_score >= label_threshold
        engine_vague = score >= vagueness_threshold
        m.absolute_errors.append(abs(score - sample.vagueness_score))

        detail = {
            "prompt": sample.prompt[:100],
            "engine_score": score,
            "human_score": sample.vagueness_score,
        }
        if human_vague:
            m.vague_scores.append(score)
        else:
            m.specific_scores.append(score)

        if engine_vague and human_vague:
            m.true_positives += 1
        elif engine_vague:
            m.false_positives += 1
            m.false_alarms.append(detail)
        elif human_vague:
            m.false_negatives += 1
            m.misses.append(detail)
        else:
            m.true_negatives += 1
    return m


def run_benchmark(
    samples: Sequence[TrainingSample],
    model: Optional[StatisticalModel] = None,
    vagueness_threshold: int = settings.VAGUENESS_THRESHOLD,
    label_threshold: int = settings.TRAINING_THRESHOLD,
) -> BenchmarkResult:
    """
    Run the calibration benchmark.

    Args:
        samples: Labeled samples (ideally held out from training).
        model: Trained statistical model to evaluate alongside the rules.
        vagueness_threshold: Engine score at or above which a prompt is vague.
        label_threshold: Human score at or above which a prompt is vague.

    Returns:
        BenchmarkResult with per-scorer metrics.
    """
    if not samples:
        raise ValueError("No samples to benchmark")

    scorers = {
        "heuristic": _evaluate(
            "heuristic",
            lambda p: heuristic_scorer.score(p).score,
            samples, vagueness_threshold, label_threshold,
        ),
    }
    if model is not None:
        scorers["ml"] = _evaluate(
            "ml",
            lambda p: model.analyze(p, vagueness_threshold).score,
            samples, vagueness_threshold, label_threshold,
        )

    labels = [1 if s.vagueness_score >= label_threshold else 0 for s in samples]
    return BenchmarkResult(
        total_samples=len(samples),
        vague_samples=sum(labels),
        specific_samples=len(samples) - sum(labels),
        vagueness_threshold=vagueness_threshold,
        label_threshold=label_threshold,
        scorers=scorers,
        human_scores=[s.vagueness_score for s in samples],
        labels=labels,
    )


def format_report(result: BenchmarkResult) -> str:
    """Format benchmark results as a human-readable report."""
    lines = [
        "=" * 60,
        "PROMPTCLEAR CALIBRATION REPORT",
        "=" * 60,
        "",
        f"Samples: {result.total_samples} "
        f"({result.vague_samples} vague, {result.specific_samples} specific)",
        f"Vague when engine score >= {result.vagueness_threshold}; "
        f"human label vague when score >= {result.label_threshold}",
        "",
        f"{'Scorer':<12} {'Acc':>6} {'Prec':>6} {'Recall':>6} {'F1':>6} {'MAE':>6} {'Sep':>6}",
        "-" * 56,
    ]

    for m in result.scorers.values():
        lines.append(
            f"{m.name:<12} {m.accuracy:>5.0%} {m.precision:>6.0%} {m.recall:>6.0%} "
            f"{m.f1:>5.0%} {m.mean_absolute_error:>6.1f} {m.separation:>6.1f}"
        )

    for m in result.scorers.values():
        if m.misses:
            lines.extend(["", f"--- MISSES ({m.name}: human vague, engine specific) ---"])
            for miss in m.misses[:10]:
                lines.append(
                    f"  [{miss['engine_score']:>3} vs {miss['human_score']:>3}] {miss['prompt'][:80]}"
                )
        if m.false_alarms:
            lines.extend(["", f"--- FALSE ALARMS ({m.name}: human specific, engine vague) ---"])
            for fa in m.false_alarms[:10]:
                lines.append(
                    f"  [{fa['engine_score']:>3} vs {fa['human_score']:>3}] {fa['prompt'][:80]}"
                )

    lines.extend(["", "=" * 60])
    return "\n".join(lines)


def report_to_dict(result: BenchmarkResult) -> dict:
    return {
        "total_samples": result.total_samples,
        "vague_samples": result.vague_samples,
        "specific_samples": result.specific_samples,
        "vagueness_threshold": result.vagueness_threshold,
        "label_threshold": result.label_threshold,
        "scorers": {name: m.to_dict() for name, m in result.scorers.items()},
        "misses": {name: m.misses for name, m in result.scorers.items()},
        "false_alarms": {name: m.false_alarms for name, m in result.scorers.items()},
    }


def save_report(result: BenchmarkResult, output_dir: str | Path = "calibration/reports"):
    """Save benchmark results as both human-readable report and JSON."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    report_path = output_dir / "calibration_report.txt"
    report_path.write_text(format_report(result), encoding="utf-8")

    json_path = output_dir / "calibration_report.json"
    json_path.write_text(json.dumps(report_to_dict(result), indent=2), encoding="utf-8")

    return report_path, json_path
