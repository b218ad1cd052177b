from __future__ import annotations

from pathlib import Path

import pytest

from promptclear.ml.classifier import TrainingConfig
from promptclear.ml.corpus import load_corpus
from promptclear.ml.statistical import StatisticalScorer

SEED_CORPUS = Path(__file__).resolve().parent.parent / "calibration" / "corpus" / "seed.json"


@pytest.fixture(scope="session")
def seed_samples():
    return load_corpus(SEED_CORPUS)


@pytest.fixture(scope="session")
def training_config():
    return TrainingConfig(learning_rate=0.5, epochs=200, regularization=0.01, seed=7)


@pytest.fixture
def trained_scorer(seed_samples, training_config):
    scorer = StatisticalScorer()
    scorer.train(seed_samples, training_config)
    return scorer
