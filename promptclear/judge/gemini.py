"""
Gemini Judge — Google Gemini API implementation.

Uses the google.genai SDK. Client is lazily initialized, so the engine
loads without an API key and only reports the judge unavailable when a
prompt actually needs one.

Features:
- Model fallback chain: primary model → gemini-2.5-flash on failure
- Circuit breaker: after consecutive failures, skip the judge for 60s
- Exponential backoff retry on transient errors
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional

from google import genai
from google.genai import types

from promptclear.config import settings
from promptclear.errors import JudgeUnavailableError
from promptclear.judge import ExternalJudge

logger = logging.getLogger(__name__)

FALLBACK_MODEL = "gemini-2.5-flash"
JUDGE_TEMPERATURE = 0.3

# Circuit breaker settings
_CB_FAILURE_THRESHOLD = 3   # Open after this many consecutive failures
_CB_RECOVERY_TIMEOUT = 60   # Seconds before trying again (half-open)

_TRANSIENT_MARKERS = (
    "429", "503", "500", "rate", "quota", "timeout",
    "connection", "unavailable", "overloaded",
)


class CircuitBreaker:
    """Simple circuit breaker: closed → open → half-open → closed.

    When open, judge() raises CircuitOpenError immediately so the engine
    falls back to the statistical score instead of waiting for the
    judge to time out.
    """

    def __init__(
        self,
        failure_threshold: int = _CB_FAILURE_THRESHOLD,
        recovery_timeout: float = _CB_RECOVERY_TIMEOUT,
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._failures = 0
        self._last_failure_time: float = 0
        self._state = "closed"  # closed | open | half-open

    @property
    def state(self) -> str:
        if self._state == "open":
            if time.monotonic() - self._last_failure_time >= self.recovery_timeout:
                self._state = "half-open"
        return self._state

    def record_success(self) -> None:
        self._failures = 0
        self._state = "closed"

    def record_failure(self) -> None:
        self._failures += 1
        self._last_failure_time = time.monotonic()
        if self._failures >= self.failure_threshold:
            self._state = "open"
            logger.warning(
                "Circuit breaker OPEN — %d consecutive judge failures. "
                "Statistical-only routing for %ds.",
                self._failures, self.recovery_timeout,
            )

    @property
    def is_open(self) -> bool:
        return self.state == "open"


class CircuitOpenError(JudgeUnavailableError):
    """Raised when the circuit breaker is open."""


def _is_transient(error: Exception) -> bool:
    error_str = str(error).lower()
    return any(k in error_str for k in _TRANSIENT_MARKERS)


class GeminiJudge(ExternalJudge):
    """Google Gemini judge with fallback and circuit breaker."""

    name = "gemini"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self._api_key = api_key or settings.GEMINI_API_KEY
        self._model = model or settings.GEMINI_MODEL
        self._client: Optional[genai.Client] = None
        self.circuit_breaker = CircuitBreaker()

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self._api_key:
                raise JudgeUnavailableError(
                    "GEMINI_API_KEY not set. Get one from "
                    "https://aistudio.google.com/apikey"
                )
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def _call_model(
        self,
        model: str,
        prompt: str,
        config: types.GenerateContentConfig,
        max_retries: int = 3,
    ) -> str:
        """Call a specific model with retry logic."""
        client = self._get_client()
        for attempt in range(max_retries):
            try:
                response = await client.aio.models.generate_content(
                    model=model,
                    contents=prompt,
                    config=config,
                )
                return response.text or ""
            except Exception as e:
                if _is_transient(e) and attempt < max_retries - 1:
                    await asyncio.sleep(2 ** attempt)
                    continue
                raise
        raise JudgeUnavailableError(f"{model}: no attempts made")

    async def judge(self, original: str, instructions: str) -> str:
        # Fast-fail while the judge is known to be down
        if self.circuit_breaker.is_open:
            raise CircuitOpenError(
                "Judge circuit breaker is open — too many consecutive failures."
            )

        config = types.GenerateContentConfig(
            temperature=JUDGE_TEMPERATURE,
            response_mime_type="application/json",
        )

        try:
            return await self._generate(instructions, config)
        except JudgeUnavailableError:
            raise
        except Exception as e:
            raise JudgeUnavailableError(f"Gemini judge failed: {e}") from e

    async def _generate(self, prompt: str, config: types.GenerateContentConfig) -> str:
        # Try primary model
        try:
            result = await self._call_model(self._model, prompt, config, max_retries=2)
            self.circuit_breaker.record_success()
            return result
        except JudgeUnavailableError:
            raise
        except Exception as primary_err:
            if self._model == FALLBACK_MODEL:
                self.circuit_breaker.record_failure()
                raise
            logger.warning(
                "Primary model %s failed (%s), falling back to %s",
                self._model, primary_err, FALLBACK_MODEL,
            )
            try:
                result = await self._call_model(FALLBACK_MODEL, prompt, config, max_retries=1)
                self.circuit_breaker.record_success()
                return result
            except Exception as fallback_err:
                logger.error(
                    "Fallback model %s also failed: %s", FALLBACK_MODEL, fallback_err,
                )
                self.circuit_breaker.record_failure()
                raise fallback_err from primary_err
