"""
Error Taxonomy

Every failure the scoring engine can surface. Heuristic scoring never
raises; statistical scoring raises NotTrainedError when asked to run
without a model; the hybrid engine absorbs every JudgeError; a corrupted
snapshot raises SerializationError on restore.
"""

from __future__ import annotations


class PromptClearError(Exception):
    """Base class for all PromptClear errors."""


class ValidationError(PromptClearError):
    """Invalid training input or configuration (empty corpus, bad labels, bad config)."""


class NotTrainedError(PromptClearError):
    """Scoring requested against a statistical component with no trained model."""


class SerializationError(PromptClearError):
    """A model snapshot could not be restored. Never score with a partial model."""


class JudgeError(PromptClearError):
    """Base class for external judge failures. Recovered by the engine."""


class JudgeUnavailableError(JudgeError):
    """The judge is not configured, failed in transport, or was cancelled."""


class JudgeParseError(JudgeError):
    """The judge answered, but not with a usable JSON verdict."""


class JudgeTimeoutError(JudgeError):
    """The judge did not answer within the allotted time."""
