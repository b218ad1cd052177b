"""
Statistical scoring: tokenizer, TF-IDF vectorizer, logistic regression.
"""

from promptclear.ml.features import TfIdfVectorizer, tokenize
from promptclear.ml.classifier import (
    LogisticRegressionClassifier,
    TrainingConfig,
    TrainingHistory,
    sigmoid,
)
from promptclear.ml.statistical import StatisticalModel, StatisticalScorer
from promptclear.ml.corpus import load_corpus, parse_samples

__all__ = [
    "TfIdfVectorizer",
    "tokenize",
    "LogisticRegressionClassifier",
    "TrainingConfig",
    "TrainingHistory",
    "sigmoid",
    "StatisticalModel",
    "StatisticalScorer",
    "load_corpus",
    "parse_samples",
]
