"""
Statistical Scorer — TF-IDF + Logistic Regression

Composes the vectorizer and classifier into one trainable scorer.

The vectorizer and classifier are a matched pair: a weight vector is
meaningless against any vocabulary but the one it was trained on. They
are therefore published together as a single immutable StatisticalModel
and replaced by one reference assignment on retraining or restore.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence, Union

from promptclear.config import settings
from promptclear.errors import NotTrainedError, SerializationError, ValidationError
from promptclear.ml.classifier import LogisticRegressionClassifier, TrainingConfig
from promptclear.ml.features import TfIdfVectorizer
from promptclear.results import MLResult, TrainingReport
from promptclear.schemas.training import TrainingSample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatisticalModel:
    """A fitted vectorizer and the classifier trained against it."""
    vectorizer: TfIdfVectorizer
    classifier: LogisticRegressionClassifier
    trained_at: datetime

    def __post_init__(self):
        if self.vectorizer.vocabulary_size != self.classifier.feature_count:
            raise SerializationError(
                f"Vocabulary size {self.vectorizer.vocabulary_size} does not match "
                f"classifier featureCount {self.classifier.feature_count}"
            )

    def analyze(self, prompt: str, threshold: int = settings.VAGUENESS_THRESHOLD) -> MLResult:
        features = self.vectorizer.transform(prompt)
        probability = self.classifier.predict(features)
        score = int(round(probability * 100))
        return MLResult(
            score=score,
            confidence=abs(probability - 0.5) * 2.0,
            is_vague=score >= threshold,
        )

    def to_dict(self) -> dict:
        return {
            "version": settings.MODEL_FORMAT_VERSION,
            "vectorizer": self.vectorizer.to_dict(),
            "classifier": self.classifier.to_dict(),
            "trainedAt": self.trained_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StatisticalModel":
        if not isinstance(data, dict):
            raise SerializationError("Model snapshot must be an object")
        for key in ("vectorizer", "classifier", "trainedAt"):
            if key not in data:
                raise SerializationError(f"Model snapshot missing '{key}'")

        vectorizer = TfIdfVectorizer.from_dict(data["vectorizer"])
        classifier = LogisticRegressionClassifier.from_dict(data["classifier"])
        try:
            trained_at = datetime.fromisoformat(str(data["trainedAt"]).replace("Z", "+00:00"))
        except ValueError as e:
            raise SerializationError(f"Invalid trainedAt timestamp: {data['trainedAt']!r}") from e

        return cls(vectorizer=vectorizer, classifier=classifier, trained_at=trained_at)


class StatisticalScorer:
    """
    Trainable scorer holding at most one StatisticalModel.

    Readers call current() once and work with that snapshot; train()
    and load() build a complete new model before publishing it.
    """

    def __init__(
        self,
        model: Optional[StatisticalModel] = None,
        training_threshold: int = settings.TRAINING_THRESHOLD,
    ):
        self._model = model
        self.training_threshold = training_threshold

    def current(self) -> Optional[StatisticalModel]:
        return self._model

    def is_trained(self) -> bool:
        return self._model is not None

    # ----------------------------------------------------------------
    # Training
    # ----------------------------------------------------------------

    def build_model(
        self,
        samples: Sequence[TrainingSample],
        config: Optional[TrainingConfig] = None,
        threshold: Optional[int] = None,
    ) -> tuple[StatisticalModel, TrainingReport]:
        """Fit a new model without publishing it."""
        if not samples:
            raise ValidationError("Cannot train on an empty corpus")
        threshold = self.training_threshold if threshold is None else threshold
        if not 0 <= threshold <= 100:
            raise ValidationError(f"Training threshold must be in [0, 100], got {threshold}")

        prompts = [s.prompt for s in samples]
        labels = [s.label(threshold) for s in samples]

        vectorizer, features = TfIdfVectorizer().fit_transform(prompts)
        classifier, history = LogisticRegressionClassifier().fit(features, labels, config)

        model = StatisticalModel(
            vectorizer=vectorizer,
            classifier=classifier,
            trained_at=datetime.now(timezone.utc),
        )
        report = TrainingReport(
            samples_used=len(samples),
            final_loss=history.final_loss,
            vocabulary_size=vectorizer.vocabulary_size,
            losses=list(history.losses),
        )
        return model, report

    def train(
        self,
        samples: Sequence[TrainingSample],
        config: Optional[TrainingConfig] = None,
        threshold: Optional[int] = None,
    ) -> TrainingReport:
        """
        Train on labeled samples and publish the new model.

        Raises:
            ValidationError: empty corpus, bad threshold or bad config.
                The previously published model is left in place.
        """
        start = time.monotonic()
        model, report = self.build_model(samples, config, threshold)
        self._model = model

        logger.info(
            "Statistical model trained on %d samples", report.samples_used,
            extra={
                "samples": report.samples_used,
                "vocabulary_size": report.vocabulary_size,
                "final_loss": round(report.final_loss, 6),
                "duration_ms": round((time.monotonic() - start) * 1000, 1),
            },
        )
        return report

    # ----------------------------------------------------------------
    # Scoring
    # ----------------------------------------------------------------

    def analyze(self, prompt: str, threshold: int = settings.VAGUENESS_THRESHOLD) -> MLResult:
        model = self._model
        if model is None:
            raise NotTrainedError("Statistical scorer has no trained model")
        return model.analyze(prompt, threshold)

    # ----------------------------------------------------------------
    # Persistence
    # ----------------------------------------------------------------

    def to_dict(self) -> dict:
        model = self._model
        if model is None:
            raise NotTrainedError("Nothing to export: no trained model")
        return model.to_dict()

    @classmethod
    def from_dict(cls, data: dict, **kwargs) -> "StatisticalScorer":
        return cls(model=StatisticalModel.from_dict(data), **kwargs)

    def save(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict()), encoding="utf-8")
        logger.info("Model snapshot saved to %s", path, extra={"path": str(path)})
        return path

    @staticmethod
    def read_snapshot(path: Union[str, Path]) -> StatisticalModel:
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise SerializationError(f"Model snapshot {path} is not valid JSON: {e}") from e
        return StatisticalModel.from_dict(data)

    def load(self, path: Union[str, Path]) -> StatisticalModel:
        """Restore a snapshot and publish it. Raises SerializationError if corrupt."""
        model = self.read_snapshot(path)
        self._model = model
        logger.info(
            "Model snapshot loaded from %s", path,
            extra={"path": str(path), "trained_at": model.trained_at.isoformat()},
        )
        return model

    def publish(self, model: Optional[StatisticalModel]) -> None:
        self._model = model
