"""
Feature Extraction — Tokenizer and TF-IDF Vectorizer

Turns prompts into dense numeric vectors for the classifier.

  tf(term, doc)  = count(term in doc) / tokens(doc)
  idf(term)      = ln(N / df(term)) + 1
  feature[i]     = tf(vocab[i], doc) * idf(vocab[i])

A vectorizer is immutable once fitted. fit() returns a new instance,
so a vectorizer already paired with a trained classifier can never
drift out from under it.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from typing import Iterable, Mapping, Optional

import numpy as np

from promptclear.config import settings
from promptclear.errors import SerializationError

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
MIN_TOKEN_LENGTH = 2


def tokenize(text: str) -> list[str]:
    """Lowercase, split on anything not [a-z0-9], drop tokens under 2 chars."""
    if not text:
        return []
    return [
        tok for tok in _NON_ALNUM.sub(" ", text.lower()).split()
        if len(tok) >= MIN_TOKEN_LENGTH
    ]


class TfIdfVectorizer:
    """TF-IDF vectorizer over a sorted vocabulary."""

    def __init__(
        self,
        vocabulary: Iterable[str] = (),
        idf_values: Optional[Mapping[str, float]] = None,
    ):
        self._vocabulary: tuple[str, ...] = tuple(vocabulary)
        self._index: dict[str, int] = {t: i for i, t in enumerate(self._vocabulary)}
        idf_values = idf_values or {}
        self._idf = np.array(
            [float(idf_values.get(t, 0.0)) for t in self._vocabulary],
            dtype=np.float64,
        )

    # ----------------------------------------------------------------
    # Fitting
    # ----------------------------------------------------------------

    @classmethod
    def fitted_on(cls, corpus: Iterable[str]) -> "TfIdfVectorizer":
        """Build a vectorizer from a corpus of documents."""
        docs = list(corpus)
        if not docs:
            return cls()

        df: Counter[str] = Counter()
        for doc in docs:
            df.update(set(tokenize(doc)))

        n = len(docs)
        vocabulary = sorted(df)
        idf = {term: math.log(n / df[term]) + 1.0 for term in vocabulary}
        return cls(vocabulary, idf)

    def fit(self, corpus: Iterable[str]) -> "TfIdfVectorizer":
        """Return a new vectorizer fitted on `corpus`. The receiver is unchanged."""
        return type(self).fitted_on(corpus)

    def fit_transform(self, corpus: Iterable[str]) -> tuple["TfIdfVectorizer", np.ndarray]:
        docs = list(corpus)
        fitted = self.fit(docs)
        return fitted, fitted.transform_many(docs)

    # ----------------------------------------------------------------
    # Transform
    # ----------------------------------------------------------------

    def transform(self, text: str) -> np.ndarray:
        """Feature vector for one document. Unseen terms contribute nothing."""
        vec = np.zeros(len(self._vocabulary), dtype=np.float64)
        tokens = tokenize(text)
        if not tokens or not self._vocabulary:
            return vec

        total = len(tokens)
        for term, count in Counter(tokens).items():
            idx = self._index.get(term)
            if idx is not None:
                vec[idx] = (count / total) * self._idf[idx]
        return vec

    def transform_many(self, texts: Iterable[str]) -> np.ndarray:
        rows = [self.transform(t) for t in texts]
        if not rows:
            return np.zeros((0, len(self._vocabulary)), dtype=np.float64)
        return np.vstack(rows)

    # ----------------------------------------------------------------
    # Introspection
    # ----------------------------------------------------------------

    @property
    def vocabulary(self) -> tuple[str, ...]:
        return self._vocabulary

    @property
    def vocabulary_size(self) -> int:
        return len(self._vocabulary)

    def get_idf(self, term: str) -> float:
        idx = self._index.get(term)
        return 0.0 if idx is None else float(self._idf[idx])

    # ----------------------------------------------------------------
    # Serialization
    # ----------------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "version": settings.MODEL_FORMAT_VERSION,
            "vocabulary": list(self._vocabulary),
            "idfValues": {t: float(v) for t, v in zip(self._vocabulary, self._idf)},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TfIdfVectorizer":
        if not isinstance(data, dict):
            raise SerializationError("Vectorizer snapshot must be an object")

        vocabulary = data.get("vocabulary")
        idf_values = data.get("idfValues")
        if not isinstance(vocabulary, list) or not all(isinstance(t, str) for t in vocabulary):
            raise SerializationError("Vectorizer vocabulary must be a list of strings")
        if not isinstance(idf_values, dict):
            raise SerializationError("Vectorizer idfValues must be an object")
        if len(set(vocabulary)) != len(vocabulary):
            raise SerializationError("Vectorizer vocabulary contains duplicate terms")

        missing = [t for t in vocabulary if t not in idf_values]
        if missing:
            raise SerializationError(
                f"Vectorizer idfValues missing {len(missing)} term(s), e.g. {missing[0]!r}"
            )
        for term in vocabulary:
            val = idf_values[term]
            if isinstance(val, bool) or not isinstance(val, (int, float)) or not math.isfinite(val):
                raise SerializationError(f"Invalid idf value for term {term!r}: {val!r}")

        return cls(vocabulary, idf_values)

    def __repr__(self) -> str:
        return f"TfIdfVectorizer(vocabulary_size={self.vocabulary_size})"
