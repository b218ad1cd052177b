"""
Tests for the calibration framework.

Tests cover:
  - Benchmark runner (metric calculation, report generation)
  - Threshold optimizer (F1 sweep, recommendation logic)
"""

import json
from pathlib import Path

import pytest

from calibration.benchmark import (
    BenchmarkResult,
    ScorerMetrics,
    format_report,
    report_to_dict,
    run_benchmark,
    save_report,
)
from calibration.optimizer import (
    format_optimization_report,
    optimize_threshold,
    pick_threshold_max_f1,
)
from promptclear.schemas.training import TrainingSample


def _sample(prompt, score):
    return TrainingSample(
        prompt=prompt,
        vagueness_score=score,
        intent_category="unknown",
        reasoning="test",
    )


# Heuristic scores: 85, 85, 0, 0, 90, 0
SAMPLES = [
    _sample("fix it", 90),
    _sample("help", 95),
    _sample("fix the TypeError in src/auth/login.ts on line 42", 10),
    _sample(
        "In src/components/LoginForm.tsx, refactor handleSubmit to use async/await, "
        "add try/catch, and display validation errors",
        5,
    ),
    _sample("explain the app", 20),                                  # false alarm
    _sample("what database should I use for this project?", 70),     # miss
]


# ============================================================
# Benchmark Tests
# ============================================================

class TestScorerMetrics:

    def test_empty_metrics(self):
        m = ScorerMetrics(name="x")
        assert m.precision == 0.0
        assert m.recall == 0.0
        assert m.f1 == 0.0
        assert m.accuracy == 0.0
        assert m.mean_absolute_error == 0.0

    def test_perfect(self):
        m = ScorerMetrics(name="x", true_positives=5, true_negatives=5)
        assert m.precision == 1.0
        assert m.recall == 1.0
        assert m.f1 == 1.0
        assert m.accuracy == 1.0


class TestRunBenchmark:

    def test_heuristic_counts(self):
        result = run_benchmark(SAMPLES, vagueness_threshold=30, label_threshold=50)
        assert isinstance(result, BenchmarkResult)
        assert result.total_samples == 6
        assert result.vague_samples == 3
        assert result.specific_samples == 3
        assert set(result.scorers) == {"heuristic"}

        m = result.scorers["heuristic"]
        assert (m.true_positives, m.false_positives, m.false_negatives, m.true_negatives) == (2, 1, 1, 2)
        assert m.precision == pytest.approx(2 / 3)
        assert m.recall == pytest.approx(2 / 3)
        assert m.f1 == pytest.approx(2 / 3)
        assert m.mean_absolute_error == pytest.approx(170 / 6)
        assert m.separation == pytest.approx(170 / 3 - 30)

    def test_misses_and_false_alarms_recorded(self):
        m = run_benchmark(SAMPLES).scorers["heuristic"]
        assert [x["prompt"] for x in m.false_alarms] == ["explain the app"]
        assert m.misses[0]["human_score"] == 70

    def test_labels_follow_threshold(self):
        result = run_benchmark(SAMPLES, label_threshold=95)
        assert result.labels == [0, 1, 0, 0, 0, 0]

    def test_with_model(self, trained_scorer, seed_samples):
        result = run_benchmark(seed_samples, model=trained_scorer.current())
        assert set(result.scorers) == {"heuristic", "ml"}
        assert result.scorers["ml"].total == len(seed_samples)
        assert len(result.scorers["ml"].scores) == len(seed_samples)

    def test_empty(self):
        with pytest.raises(ValueError):
            run_benchmark([])


class TestReports:

    def test_format(self):
        text = format_report(run_benchmark(SAMPLES))
        assert "PROMPTCLEAR CALIBRATION REPORT" in text
        assert "heuristic" in text
        assert "FALSE ALARMS" in text
        assert "MISSES" in text

    def test_to_dict(self):
        data = report_to_dict(run_benchmark(SAMPLES))
        assert data["total_samples"] == 6
        assert data["scorers"]["heuristic"]["tp"] == 2

    def test_save(self, tmp_path):
        txt, js = save_report(run_benchmark(SAMPLES), tmp_path / "reports")
        assert txt.exists()
        assert json.loads(js.read_text(encoding="utf-8"))["vague_samples"] == 3


# ============================================================
# Optimizer Tests
# ============================================================

class TestPickThreshold:

    def test_lowest_perfect_threshold(self):
        assert pick_threshold_max_f1([1, 1, 0, 0], [90, 80, 20, 10]) == (21, 1.0)

    def test_empty(self):
        assert pick_threshold_max_f1([], []) == (50, 0.0)

    def test_all_negative(self):
        threshold, f1 = pick_threshold_max_f1([0, 0], [10, 90])
        assert f1 == 0.0
        assert threshold == 0


class TestOptimizeThreshold:

    def test_recommendations(self):
        report = optimize_threshold(run_benchmark(SAMPLES))
        params = {r.parameter for r in report.recommendations}
        assert {"specificity_offset", "rule_weights", "score_separation"} <= params
        assert report.current_threshold == 30
        assert report.current_f1 == pytest.approx(0.6667, abs=1e-4)

    def test_recommends_better_threshold(self):
        # Heuristic scores 85 and 65
        samples = [_sample("fix it", 90), _sample("help me please", 20)]
        report = optimize_threshold(run_benchmark(samples, vagueness_threshold=30))
        assert report.best_threshold == 66
        assert report.best_f1 == 1.0
        rec = report.recommendations[0]
        assert rec.parameter == "PROMPTCLEAR_VAGUENESS_THRESHOLD"
        assert rec.recommended_value == 66

    def test_unknown_scorer(self):
        with pytest.raises(KeyError):
            optimize_threshold(run_benchmark(SAMPLES), scorer="ml")

    def test_format(self):
        text = format_optimization_report(optimize_threshold(run_benchmark(SAMPLES)))
        assert "THRESHOLD OPTIMIZATION REPORT (heuristic)" in text
        assert "RECOMMENDATIONS" in text


# ============================================================
# Training Runner Tests
# ============================================================

class TestTrainingRunner:

    def test_split_is_seeded_and_disjoint(self, seed_samples):
        from run_training import split_samples
        train_a, held_a = split_samples(seed_samples, 0.2, seed=1)
        train_b, held_b = split_samples(seed_samples, 0.2, seed=1)
        assert held_a == held_b
        assert len(held_a) == 8
        assert len(train_a) + len(held_a) == len(seed_samples)
        assert not {s.prompt for s in held_a} & {s.prompt for s in train_a}

    def test_zero_test_size_reuses_training_set(self, seed_samples):
        from run_training import split_samples
        train, held_out = split_samples(seed_samples, 0.0, seed=1)
        assert train == held_out == list(seed_samples)

    def test_main_writes_snapshot_and_reports(self, tmp_path, monkeypatch, capsys):
        import run_training

        monkeypatch.setattr(run_training, "setup_logging", lambda: None)
        corpus = Path(__file__).resolve().parent.parent / "calibration" / "corpus" / "seed.json"
        output = tmp_path / "models" / "model.json"
        monkeypatch.setattr("sys.argv", [
            "run_training.py",
            "--corpus", str(corpus),
            "--output", str(output),
            "--report-dir", str(tmp_path / "reports"),
            "--epochs", "50",
            "--json",
        ])
        with pytest.raises(SystemExit) as exc_info:
            run_training.main()
        assert exc_info.value.code in (0, 2)
        assert output.exists()
        out = json.loads(capsys.readouterr().out)
        assert out["training"]["samples_used"] == 32
        assert set(out["benchmark"]["scorers"]) == {"heuristic", "ml"}
