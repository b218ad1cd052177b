"""
PromptClear — Prompt Vagueness Scoring Engine

Scores how vague a developer request is (0 = fully specific,
100 = fully vague) and explains why.

Public API:
  - heuristic_scorer:      Deterministic rule engine (zero cost, never fails)
  - StatisticalScorer:     TF-IDF + logistic regression, trainable
  - HybridDecisionEngine:  Routes between rules, model and external judge
  - build_engine:          Engine wired from environment settings
  - ComparativeScorer:     Judge-graded original vs enhanced comparison
  - ExternalJudge:         Abstract judge interface for provider swapping
  - load_corpus:           Validated training corpus loader

Usage:
    from promptclear import build_engine
    engine = build_engine()
    result = await engine.analyze("fix it")
"""

__version__ = "1.0.0"

from promptclear.results import (
    AnalysisResult,
    AnalysisSource,
    HeuristicIssue,
    IssueSeverity,
    IssueType,
    MLResult,
    TrainingReport,
)
from promptclear.errors import (
    PromptClearError,
    ValidationError,
    NotTrainedError,
    SerializationError,
    JudgeError,
    JudgeUnavailableError,
    JudgeParseError,
    JudgeTimeoutError,
)
from promptclear.heuristic import HeuristicScorer, heuristic_scorer
from promptclear.ml import (
    LogisticRegressionClassifier,
    StatisticalModel,
    StatisticalScorer,
    TfIdfVectorizer,
    TrainingConfig,
    load_corpus,
    tokenize,
)
from promptclear.engine import (
    AnalysisMode,
    EngineConfig,
    EngineState,
    HybridDecisionEngine,
    build_engine,
)
from promptclear.comparative import ComparativeScorer
from promptclear.judge import ExternalJudge
from promptclear.judge.factory import get_judge
from promptclear.schemas.training import IntentCategory, TrainingSample

__all__ = [
    "AnalysisResult",
    "AnalysisSource",
    "HeuristicIssue",
    "IssueSeverity",
    "IssueType",
    "MLResult",
    "TrainingReport",
    "PromptClearError",
    "ValidationError",
    "NotTrainedError",
    "SerializationError",
    "JudgeError",
    "JudgeUnavailableError",
    "JudgeParseError",
    "JudgeTimeoutError",
    "HeuristicScorer",
    "heuristic_scorer",
    "LogisticRegressionClassifier",
    "StatisticalModel",
    "StatisticalScorer",
    "TfIdfVectorizer",
    "TrainingConfig",
    "load_corpus",
    "tokenize",
    "AnalysisMode",
    "EngineConfig",
    "EngineState",
    "HybridDecisionEngine",
    "build_engine",
    "ComparativeScorer",
    "ExternalJudge",
    "get_judge",
    "IntentCategory",
    "TrainingSample",
]
