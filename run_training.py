#!/usr/bin/env python3
"""
run_training.py — Train the statistical model and run calibration.

Usage:
    python run_training.py                               # Seed corpus, default paths
    python run_training.py --corpus data/corpus.json     # Custom corpus
    python run_training.py --output models/model.json    # Snapshot location
    python run_training.py --optimize                    # Include threshold recommendations
    python run_training.py --json                        # Output JSON only (for CI)
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import numpy as np

from calibration.benchmark import format_report, report_to_dict, run_benchmark, save_report
from calibration.optimizer import format_optimization_report, optimize_threshold
from promptclear.config import settings
from promptclear.errors import PromptClearError
from promptclear.logging import setup_logging
from promptclear.ml.classifier import TrainingConfig
from promptclear.ml.corpus import load_corpus
from promptclear.ml.statistical import StatisticalScorer


def split_samples(samples, test_size: float, seed: int):
    """Seeded train/evaluation split. test_size 0 evaluates on the training set."""
    if test_size <= 0:
        return list(samples), list(samples)
    rng = np.random.default_rng(seed)
    perm = rng.permutation(len(samples))
    eval_n = max(1, int(round(len(samples) * test_size)))
    eval_idx = set(int(i) for i in perm[:eval_n])
    train = [s for i, s in enumerate(samples) if i not in eval_idx]
    held_out = [s for i, s in enumerate(samples) if i in eval_idx]
    return train, held_out


def main():
    parser = argparse.ArgumentParser(description="PromptClear Training Runner")
    parser.add_argument(
        "--corpus",
        default="calibration/corpus/seed.json",
        help="Path to training corpus JSON (default: calibration/corpus/seed.json)",
    )
    parser.add_argument(
        "--output",
        default=settings.MODEL_PATH or "models/model.json",
        help="Where to write the model snapshot (default: models/model.json)",
    )
    parser.add_argument("--epochs", type=int, default=settings.EPOCHS)
    parser.add_argument("--learning-rate", type=float, default=settings.LEARNING_RATE)
    parser.add_argument("--regularization", type=float, default=settings.REGULARIZATION)
    parser.add_argument(
        "--label-threshold",
        type=int,
        default=settings.TRAINING_THRESHOLD,
        help="Human score at or above which a sample is labeled vague",
    )
    parser.add_argument(
        "--test-size",
        type=float,
        default=0.2,
        help="Fraction of samples held out for evaluation (0 = evaluate on training set)",
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed for split and init")
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Drop invalid corpus records instead of failing",
    )
    parser.add_argument(
        "--optimize",
        action="store_true",
        help="Include threshold optimization recommendations",
    )
    parser.add_argument(
        "--report-dir",
        default="calibration/reports",
        help="Directory for output reports (default: calibration/reports)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON only (for CI/automation)",
    )
    args = parser.parse_args()

    setup_logging()

    if not (0.0 <= args.test_size < 1.0):
        print("Error: --test-size must be in [0, 1)")
        sys.exit(1)

    corpus_path = Path(args.corpus)
    if not corpus_path.is_file():
        print(f"Error: Corpus not found: {corpus_path}")
        sys.exit(1)

    # Step 1: Load and split
    try:
        samples = load_corpus(corpus_path, strict=not args.lenient)
    except PromptClearError as e:
        print(f"Error: {e}")
        sys.exit(1)

    train, held_out = split_samples(samples, args.test_size, args.seed)

    # Step 2: Train
    config = TrainingConfig(
        learning_rate=args.learning_rate,
        epochs=args.epochs,
        regularization=args.regularization,
        seed=args.seed,
    )
    scorer = StatisticalScorer(training_threshold=args.label_threshold)
    try:
        training = scorer.train(train, config)
    except PromptClearError as e:
        print(f"Error: {e}")
        sys.exit(1)

    snapshot_path = scorer.save(args.output)

    # Step 3: Benchmark on held-out samples
    result = run_benchmark(
        held_out,
        model=scorer.current(),
        label_threshold=args.label_threshold,
    )

    if args.json:
        out = {
            "training": {
                "samples_used": training.samples_used,
                "vocabulary_size": training.vocabulary_size,
                "final_loss": training.final_loss,
                "snapshot": str(snapshot_path),
            },
            "benchmark": report_to_dict(result),
        }
        if args.optimize:
            out["optimization"] = {
                name: {
                    "summary": rep.summary,
                    "best_threshold": rep.best_threshold,
                    "best_f1": rep.best_f1,
                    "recommendations": [
                        {
                            "parameter": r.parameter,
                            "current": r.current_value,
                            "recommended": r.recommended_value,
                            "reason": r.reason,
                        }
                        for r in rep.recommendations
                    ],
                }
                for name, rep in (
                    (n, optimize_threshold(result, n)) for n in result.scorers
                )
            }
        print(json.dumps(out, indent=2))
    else:
        print(
            f"Trained on {training.samples_used} samples "
            f"(vocabulary {training.vocabulary_size}, final loss {training.final_loss:.4f})"
        )
        print(f"Snapshot saved to: {snapshot_path}")
        print()
        print(format_report(result))

        report_path, json_path = save_report(result, args.report_dir)
        print(f"\nReport saved to: {report_path}")
        print(f"JSON saved to:   {json_path}")

        if args.optimize:
            for name in result.scorers:
                print()
                print(format_optimization_report(optimize_threshold(result, name)))

    # Step 4: Exit code for CI
    ml = result.scorers.get("ml")
    if ml is not None and ml.f1 < 0.5 and result.vague_samples > 5:
        print("\n⚠️  ML F1 below 0.5 — calibration failing", file=sys.stderr)
        sys.exit(2)

    sys.exit(0)


if __name__ == "__main__":
    main()
