"""
Hybrid Decision Engine — Scoring Orchestrator

Routes every prompt through up to three opinions:
  - rules:  HeuristicScorer. Always computed first. Zero cost.
  - ml:     StatisticalScorer, when a model is trained.
  - llm:    External judge, only when the model is unsure.

Routing per call:
  1. No trained model           → heuristic result (source=rules)
  2. ML confidence >= threshold → ML score (source=ml)
  3. Otherwise ask the judge    → judge score (source=llm)
     Judge failure, timeout, bad JSON or cancellation → ML score (source=ml)

In hybrid mode the ML (or judge) score is blended 70/30 with the
heuristic score and tagged hybrid-fallback.

analyze() never raises for judge problems. The engine never retries
the judge; retries belong to the judge itself.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence, Union

from promptclear.cache import VerdictCache, verdict_cache
from promptclear.config import settings
from promptclear.errors import (
    JudgeError,
    JudgeParseError,
    JudgeUnavailableError,
    NotTrainedError,
    ValidationError,
)
from promptclear.heuristic import HeuristicScorer, heuristic_scorer
from promptclear.judge import ExternalJudge, call_judge
from promptclear.judge.parse import build_vagueness_instructions, parse_verdict
from promptclear.ml.classifier import TrainingConfig
from promptclear.ml.statistical import StatisticalModel, StatisticalScorer
from promptclear.results import AnalysisResult, AnalysisSource, TrainingReport
from promptclear.schemas.judge import VaguenessVerdict
from promptclear.schemas.training import TrainingSample

logger = logging.getLogger(__name__)

# Blend weights for hybrid mode
ML_BLEND_WEIGHT = 0.7
RULES_BLEND_WEIGHT = 0.3


class EngineState(str, Enum):
    NO_MODEL = "NO_MODEL"
    ML_READY = "ML_READY"


class AnalysisMode(str, Enum):
    FALLBACK = "fallback"   # strict precedence: ml, then judge, then ml again
    HYBRID = "hybrid"       # blend the winning score with the heuristic score


@dataclass(frozen=True)
class EngineConfig:
    confidence_threshold: float = settings.CONFIDENCE_THRESHOLD
    vagueness_threshold: int = settings.VAGUENESS_THRESHOLD
    judge_timeout: float = settings.JUDGE_TIMEOUT
    mode: AnalysisMode = AnalysisMode.FALLBACK

    def validate(self) -> None:
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValidationError(
                f"confidence_threshold must be in [0, 1], got {self.confidence_threshold}"
            )
        if not 0 <= self.vagueness_threshold <= 100:
            raise ValidationError(
                f"vagueness_threshold must be in [0, 100], got {self.vagueness_threshold}"
            )
        if not self.judge_timeout > 0:
            raise ValidationError(f"judge_timeout must be > 0, got {self.judge_timeout}")

    def to_dict(self) -> dict:
        return {
            "confidence_threshold": self.confidence_threshold,
            "vagueness_threshold": self.vagueness_threshold,
            "judge_timeout": self.judge_timeout,
            "mode": self.mode.value,
        }


def blend(primary: int, rules: int) -> int:
    return int(round(primary * ML_BLEND_WEIGHT + rules * RULES_BLEND_WEIGHT))


class HybridDecisionEngine:
    """
    Owns one StatisticalScorer and an optional judge.

    Each analyze() call reads the published model reference once and
    uses that snapshot throughout. Writers (train, load, import) build
    a complete model first and publish it under a lock that readers
    never take.
    """

    def __init__(
        self,
        scorer: Optional[StatisticalScorer] = None,
        judge: Optional[ExternalJudge] = None,
        config: Optional[EngineConfig] = None,
        heuristic: Optional[HeuristicScorer] = None,
        cache: Optional[VerdictCache] = None,
    ):
        self._scorer = scorer or StatisticalScorer()
        self._judge = judge
        self._config = config or EngineConfig()
        self._config.validate()
        self._heuristic = heuristic or heuristic_scorer
        self._cache = cache
        self._write_lock = threading.Lock()

    # ----------------------------------------------------------------
    # State & configuration
    # ----------------------------------------------------------------

    @property
    def state(self) -> EngineState:
        return EngineState.ML_READY if self._scorer.is_trained() else EngineState.NO_MODEL

    @property
    def judge(self) -> Optional[ExternalJudge]:
        return self._judge

    def set_judge(self, judge: Optional[ExternalJudge]) -> None:
        self._judge = judge

    def get_config(self) -> EngineConfig:
        return self._config

    def set_config(self, **changes) -> EngineConfig:
        """
        Update configuration fields. Unknown fields or out-of-range
        values raise ValidationError and leave the config unchanged.
        """
        if "mode" in changes:
            changes["mode"] = _coerce_mode(changes["mode"])
        try:
            updated = dataclasses.replace(self._config, **changes)
        except TypeError as e:
            raise ValidationError(f"Unknown engine config field: {e}") from e
        updated.validate()
        self._config = updated
        return updated

    # ----------------------------------------------------------------
    # Model lifecycle (writers)
    # ----------------------------------------------------------------

    def train(
        self,
        samples: Sequence[TrainingSample],
        config: Optional[TrainingConfig] = None,
        threshold: Optional[int] = None,
    ) -> TrainingReport:
        """Train a new model and swap it in. The old model serves until then."""
        model, report = self._scorer.build_model(samples, config, threshold)
        self._publish(model, reason="train")
        logger.info(
            "Engine retrained on %d samples", report.samples_used,
            extra={
                "samples": report.samples_used,
                "vocabulary_size": report.vocabulary_size,
                "final_loss": round(report.final_loss, 6),
            },
        )
        return report

    def load_model(self, path: Union[str, Path]) -> StatisticalModel:
        """Restore a snapshot file. SerializationError leaves the current model in place."""
        model = StatisticalScorer.read_snapshot(path)
        self._publish(model, reason="load")
        return model

    def import_model(self, data: dict) -> StatisticalModel:
        model = StatisticalModel.from_dict(data)
        self._publish(model, reason="import")
        return model

    def export_model(self) -> dict:
        model = self._scorer.current()
        if model is None:
            raise NotTrainedError("Nothing to export: no trained model")
        return model.to_dict()

    def clear_model(self) -> None:
        with self._write_lock:
            self._scorer.publish(None)
        logger.info("Statistical model cleared")

    def _publish(self, model: StatisticalModel, reason: str) -> None:
        with self._write_lock:
            self._scorer.publish(model)
        logger.info(
            "Statistical model published (%s)", reason,
            extra={
                "vocabulary_size": model.vectorizer.vocabulary_size,
                "trained_at": model.trained_at.isoformat(),
            },
        )

    # ----------------------------------------------------------------
    # Scoring
    # ----------------------------------------------------------------

    async def analyze(
        self,
        prompt: str,
        *,
        mode: Union[AnalysisMode, str, None] = None,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> AnalysisResult:
        """
        Score a prompt using the routing policy above.

        Args:
            prompt: The request to score.
            mode: "fallback" or "hybrid". Defaults to the engine config.
            cancel: Set to abandon a pending judge call.
            timeout: Seconds to wait for the judge. Defaults to the engine config.

        Returns:
            A complete AnalysisResult. Never raises for judge failures.
        """
        start = time.monotonic()
        config = self._config
        mode = _coerce_mode(mode) if mode is not None else config.mode
        rules = self._rules(prompt, config)

        # Empty prompt is a terminal result
        model = self._scorer.current()
        if model is None or not prompt.strip():
            logger.debug("Routed to rules", extra={"score": rules.score, "source": "rules"})
            return rules

        ml = model.analyze(prompt, config.vagueness_threshold)

        if ml.confidence >= config.confidence_threshold:
            if mode == AnalysisMode.HYBRID:
                result = self._build(
                    blend(ml.score, rules.score), ml.confidence,
                    AnalysisSource.HYBRID_FALLBACK, rules, config,
                )
            else:
                result = self._build(ml.score, ml.confidence, AnalysisSource.ML, rules, config)
            self._log_route(result, start, ml_confidence=ml.confidence)
            return result

        try:
            verdict = await self._consult_judge(
                prompt, cancel, config.judge_timeout if timeout is None else timeout,
            )
        except JudgeError as e:
            logger.warning(
                "Judge unavailable, using ML result: %s", e,
                extra={"error_type": type(e).__name__, "ml_score": ml.score},
            )
            result = self._build(ml.score, ml.confidence, AnalysisSource.ML, rules, config)
            self._log_route(result, start, ml_confidence=ml.confidence)
            return result

        if mode == AnalysisMode.HYBRID:
            result = self._build(
                blend(verdict.vagueness_score, rules.score), 1.0,
                AnalysisSource.HYBRID_FALLBACK, rules, config, reasoning=verdict.reasoning,
            )
        else:
            result = self._build(
                verdict.vagueness_score, 1.0, AnalysisSource.LLM, rules, config,
                reasoning=verdict.reasoning,
            )
        self._log_route(result, start, ml_confidence=ml.confidence)
        return result

    def analyze_heuristic_only(self, prompt: str) -> AnalysisResult:
        return self._rules(prompt, self._config)

    def analyze_ml_only(self, prompt: str) -> AnalysisResult:
        """
        Statistical score with heuristic issues attached, no judge.

        Raises:
            NotTrainedError: when no model is published.
        """
        config = self._config
        model = self._scorer.current()
        if model is None:
            raise NotTrainedError("ML model not available. Train or load a model first.")
        rules = self._rules(prompt, config)
        ml = model.analyze(prompt, config.vagueness_threshold)
        return self._build(ml.score, ml.confidence, AnalysisSource.ML, rules, config)

    async def analyze_with_judge(
        self,
        prompt: str,
        *,
        cancel: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> AnalysisResult:
        """
        Skip the model and ask the judge directly.

        Raises:
            JudgeError: any judge failure, for debugging.
        """
        config = self._config
        rules = self._rules(prompt, config)
        verdict = await self._consult_judge(
            prompt, cancel, config.judge_timeout if timeout is None else timeout,
        )
        return self._build(
            verdict.vagueness_score, 1.0, AnalysisSource.LLM, rules, config,
            reasoning=verdict.reasoning,
        )

    # ----------------------------------------------------------------
    # Judge
    # ----------------------------------------------------------------

    async def _consult_judge(
        self,
        prompt: str,
        cancel: Optional[asyncio.Event],
        timeout: float,
    ) -> VaguenessVerdict:
        judge = self._judge
        if judge is None:
            raise JudgeUnavailableError("No external judge configured")

        judge_id = _judge_identity(judge)
        if self._cache is not None:
            cached = await self._cache.get(prompt, judge_id)
            if cached is not None:
                return cached

        text = await call_judge(
            judge, prompt, build_vagueness_instructions(prompt), cancel, timeout,
        )

        parsed = parse_verdict(text)
        if not parsed.ok:
            raise JudgeParseError(parsed.error)

        if self._cache is not None:
            await self._cache.put(prompt, judge_id, parsed.value)
        return parsed.value

    # ----------------------------------------------------------------
    # Helpers
    # ----------------------------------------------------------------

    def _rules(self, prompt: str, config: EngineConfig) -> AnalysisResult:
        result = self._heuristic.score(prompt)
        is_vague = result.score >= config.vagueness_threshold
        if is_vague != result.is_vague:
            result = dataclasses.replace(result, is_vague=is_vague)
        return result

    @staticmethod
    def _build(
        score: int,
        confidence: float,
        source: AnalysisSource,
        rules: AnalysisResult,
        config: EngineConfig,
        reasoning: Optional[str] = None,
    ) -> AnalysisResult:
        score = max(0, min(100, int(score)))
        return AnalysisResult(
            score=score,
            confidence=max(0.0, min(1.0, float(confidence))),
            is_vague=score >= config.vagueness_threshold,
            source=source,
            issues=rules.issues,
            reasoning=reasoning,
            specificity_score=rules.specificity_score,
        )

    @staticmethod
    def _log_route(result: AnalysisResult, start: float, ml_confidence: float) -> None:
        logger.debug(
            "Routed to %s", result.source.value,
            extra={
                "score": result.score,
                "source": result.source.value,
                "ml_confidence": round(ml_confidence, 3),
                "duration_ms": round((time.monotonic() - start) * 1000, 1),
            },
        )


def _judge_identity(judge: ExternalJudge) -> str:
    model = getattr(judge, "model", "")
    return f"{judge.name}:{model}" if model else judge.name


def _coerce_mode(mode: Union[AnalysisMode, str]) -> AnalysisMode:
    try:
        return AnalysisMode(mode)
    except ValueError as e:
        raise ValidationError(f"Unknown analysis mode: {mode!r}") from e


def build_engine(
    judge: Optional[ExternalJudge] = None,
    model_path: Optional[str] = None,
) -> HybridDecisionEngine:
    """
    Engine wired from settings: judge from PROMPTCLEAR_JUDGE_PROVIDER,
    snapshot from PROMPTCLEAR_MODEL_PATH when set.
    """
    from promptclear.judge.factory import get_judge

    engine = HybridDecisionEngine(
        judge=judge if judge is not None else get_judge(),
        cache=verdict_cache,
    )
    path = model_path if model_path is not None else settings.MODEL_PATH
    if path:
        engine.load_model(path)
    return engine
