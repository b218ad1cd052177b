"""
Logistic Regression Classifier

Binary vague/specific classifier trained with full-batch gradient
descent and L2 regularization. Vectorised with numpy; float64 throughout.

Training is a pure function of (features, labels, config): fit()
returns a new trained classifier and never touches the receiver.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from promptclear.config import settings
from promptclear.errors import SerializationError, ValidationError

LOSS_EPSILON = 1e-15
SIGMOID_CLIP = 500.0
INIT_WEIGHT_RANGE = 0.05


def sigmoid(x):
    """Logistic function, input clipped to [-500, 500] to avoid overflow."""
    return 1.0 / (1.0 + np.exp(-np.clip(x, -SIGMOID_CLIP, SIGMOID_CLIP)))


@dataclass(frozen=True)
class TrainingConfig:
    learning_rate: float = settings.LEARNING_RATE
    epochs: int = settings.EPOCHS
    regularization: float = settings.REGULARIZATION
    seed: Optional[int] = None

    def validate(self) -> None:
        if not (self.learning_rate > 0) or not math.isfinite(self.learning_rate):
            raise ValidationError(f"learning_rate must be > 0, got {self.learning_rate}")
        if isinstance(self.epochs, bool) or not isinstance(self.epochs, int):
            raise ValidationError(f"epochs must be an integer, got {self.epochs!r}")
        if self.epochs < 1:
            raise ValidationError(f"epochs must be >= 1, got {self.epochs}")
        if not (self.regularization >= 0) or not math.isfinite(self.regularization):
            raise ValidationError(f"regularization must be >= 0, got {self.regularization}")


@dataclass
class TrainingHistory:
    losses: list[float] = field(default_factory=list)

    @property
    def final_loss(self) -> float:
        return self.losses[-1] if self.losses else 0.0


class LogisticRegressionClassifier:
    """Weights + bias over a fixed feature width."""

    def __init__(self, weights: Optional[Sequence[float]] = None, bias: float = 0.0):
        if weights is None:
            self._weights: Optional[np.ndarray] = None
        else:
            self._weights = np.asarray(weights, dtype=np.float64).copy()
            self._weights.setflags(write=False)
        self._bias = float(bias)

    # ----------------------------------------------------------------
    # Training
    # ----------------------------------------------------------------

    @classmethod
    def trained_on(
        cls,
        features,
        labels,
        config: Optional[TrainingConfig] = None,
    ) -> tuple["LogisticRegressionClassifier", TrainingHistory]:
        """
        Train a new classifier.

        Args:
            features: 2-D array-like, one row per sample.
            labels: 0/1 per sample.
            config: Learning rate, epochs, L2 strength, optional seed.

        Raises:
            ValidationError: on empty/mismatched input, non-binary labels
                or an out-of-range config.
        """
        config = config or TrainingConfig()
        config.validate()
        X, y = _check_training_input(features, labels)

        n, width = X.shape
        rng = np.random.default_rng(config.seed)
        w = rng.uniform(-INIT_WEIGHT_RANGE, INIT_WEIGHT_RANGE, size=width)
        b = 0.0
        lr = config.learning_rate
        lam = config.regularization
        history = TrainingHistory()

        for _ in range(config.epochs):
            p = sigmoid(X @ w + b)
            pc = np.clip(p, LOSS_EPSILON, 1.0 - LOSS_EPSILON)
            loss = float(-np.mean(y * np.log(pc) + (1.0 - y) * np.log(1.0 - pc)))

            err = p - y
            grad_w = X.T @ err / n + lam * w
            grad_b = float(np.mean(err))
            w = w - lr * grad_w
            b = b - lr * grad_b

            if lam > 0:
                loss += (lam / 2.0) * float(w @ w)
            history.losses.append(loss)

        return cls(w, b), history

    def fit(self, features, labels, config: Optional[TrainingConfig] = None):
        """Return (new trained classifier, history). The receiver is unchanged."""
        return type(self).trained_on(features, labels, config)

    def train(self, features, labels, config: Optional[TrainingConfig] = None) -> TrainingHistory:
        """
        Train in place and return the history.

        The new weights replace the old ones in a single assignment after
        the final epoch, so readers never observe a partially trained model.
        """
        trained, history = self.fit(features, labels, config)
        self._weights, self._bias = trained._weights, trained._bias
        return history

    # ----------------------------------------------------------------
    # Prediction
    # ----------------------------------------------------------------

    @property
    def is_trained(self) -> bool:
        return self._weights is not None

    @property
    def feature_count(self) -> int:
        return 0 if self._weights is None else int(self._weights.shape[0])

    @property
    def weights(self) -> np.ndarray:
        if self._weights is None:
            return np.zeros(0, dtype=np.float64)
        return self._weights

    @property
    def bias(self) -> float:
        return self._bias

    def predict(self, features) -> float:
        """Probability the prompt is vague. 0.5 when untrained."""
        if self._weights is None:
            return 0.5
        x = np.asarray(features, dtype=np.float64)
        if x.shape != self._weights.shape:
            raise ValidationError(
                f"Feature vector has length {x.shape[-1] if x.ndim else 0}, "
                f"model expects {self._weights.shape[0]}"
            )
        return float(sigmoid(float(x @ self._weights) + self._bias))

    def predict_score(self, features) -> int:
        return int(round(self.predict(features) * 100))

    def get_confidence(self, features) -> float:
        return abs(self.predict(features) - 0.5) * 2.0

    # ----------------------------------------------------------------
    # Serialization
    # ----------------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "version": settings.MODEL_FORMAT_VERSION,
            "weights": [float(v) for v in self.weights],
            "bias": self._bias,
            "featureCount": self.feature_count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LogisticRegressionClassifier":
        if not isinstance(data, dict):
            raise SerializationError("Classifier snapshot must be an object")

        weights = data.get("weights")
        bias = data.get("bias")
        feature_count = data.get("featureCount")

        if not isinstance(weights, list):
            raise SerializationError("Classifier weights must be a list")
        if not all(_is_finite_number(v) for v in weights):
            raise SerializationError("Classifier weights must be finite numbers")
        if not _is_finite_number(bias):
            raise SerializationError(f"Classifier bias must be a finite number, got {bias!r}")
        if isinstance(feature_count, bool) or not isinstance(feature_count, int):
            raise SerializationError(f"Classifier featureCount must be an integer, got {feature_count!r}")
        if len(weights) != feature_count:
            raise SerializationError(
                f"Classifier has {len(weights)} weights but featureCount={feature_count}"
            )

        return cls(weights, bias)

    def __repr__(self) -> str:
        return f"LogisticRegressionClassifier(feature_count={self.feature_count}, trained={self.is_trained})"


def _is_finite_number(v) -> bool:
    return not isinstance(v, bool) and isinstance(v, (int, float)) and math.isfinite(v)


def _check_training_input(features, labels) -> tuple[np.ndarray, np.ndarray]:
    rows = list(features) if not isinstance(features, np.ndarray) else features
    if len(rows) == 0:
        raise ValidationError("Cannot train on an empty feature set")
    if len(rows) != len(labels):
        raise ValidationError(
            f"Feature/label count mismatch: {len(rows)} features, {len(labels)} labels"
        )

    if not isinstance(rows, np.ndarray):
        widths = {len(r) for r in rows}
        if len(widths) != 1:
            raise ValidationError(f"Feature rows differ in length: {sorted(widths)}")
    X = np.asarray(rows, dtype=np.float64)
    if X.ndim != 2:
        raise ValidationError(f"Features must be 2-dimensional, got shape {X.shape}")
    if X.shape[1] == 0:
        raise ValidationError("Feature rows are empty (vocabulary has no terms)")

    y = np.asarray(labels, dtype=np.float64)
    if not np.all((y == 0.0) | (y == 1.0)):
        raise ValidationError("Labels must be 0 or 1")
    return X, y
