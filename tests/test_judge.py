"""
Judge Tests — response parsing, factory and the Gemini judge's
failure handling. No network calls.
"""

import asyncio

import pytest

from promptclear.errors import JudgeTimeoutError, JudgeUnavailableError, ValidationError
from promptclear.judge import ExternalJudge, call_judge
from promptclear.judge.factory import get_judge
from promptclear.judge.gemini import CircuitBreaker, CircuitOpenError, GeminiJudge
from promptclear.judge.parse import (
    build_comparison_instructions,
    build_vagueness_instructions,
    extract_json_object,
    parse_comparison,
    parse_verdict,
)


class SlowJudge(ExternalJudge):
    def __init__(self, delay: float, response: str = '{"vaguenessScore": 10, "reasoning": "ok"}'):
        self.delay = delay
        self.response = response

    async def judge(self, original, instructions):
        await asyncio.sleep(self.delay)
        return self.response


class BrokenJudge(ExternalJudge):
    async def judge(self, original, instructions):
        raise RuntimeError("socket closed")


# ============================================================
# EXTRACTION
# ============================================================

class TestExtractJsonObject:

    def test_plain(self):
        assert extract_json_object('{"a": 1}') == '{"a": 1}'

    def test_markdown_fence(self):
        text = 'Here you go:\n```json\n{"a": 1}\n```\nHope that helps'
        assert extract_json_object(text) == '{"a": 1}'

    def test_chatter_around_object(self):
        assert extract_json_object('Sure! {"a": {"b": 2}} done.') == '{"a": {"b": 2}}'

    def test_braces_inside_strings(self):
        text = '{"reasoning": "uses } and { freely", "x": 1} trailing }'
        assert extract_json_object(text) == '{"reasoning": "uses } and { freely", "x": 1}'

    def test_first_of_two_objects(self):
        assert extract_json_object('{"a": 1} {"b": 2}') == '{"a": 1}'

    @pytest.mark.parametrize("text", ["", "no json here", "{unclosed"])
    def test_nothing_found(self, text):
        assert extract_json_object(text) is None


# ============================================================
# VERDICT PARSING
# ============================================================

class TestParseVerdict:

    def test_valid(self):
        result = parse_verdict('{"vaguenessScore": 72, "reasoning": "No file named."}')
        assert result.ok
        assert result.value.vagueness_score == 72
        assert result.value.reasoning == "No file named."
        assert result.error is None

    @pytest.mark.parametrize("raw,expected", [(150, 100), (-5, 0), (72.6, 73), (0, 0), (100.0, 100)])
    def test_clamped_and_rounded(self, raw, expected):
        result = parse_verdict(f'{{"vaguenessScore": {raw}, "reasoning": "r"}}')
        assert result.ok
        assert result.value.vagueness_score == expected

    @pytest.mark.parametrize("text", [
        "",
        "I think it is quite vague.",
        "{not json}",
        '["vaguenessScore", 50]',
        '{"vaguenessScore": 50}',
        '{"reasoning": "missing score"}',
        '{"vaguenessScore": "50", "reasoning": "r"}',
        '{"vaguenessScore": true, "reasoning": "r"}',
        '{"vaguenessScore": null, "reasoning": "r"}',
        '{"vaguenessScore": 50, "reasoning": 7}',
    ])
    def test_failures_are_values_not_exceptions(self, text):
        result = parse_verdict(text)
        assert result.ok is False
        assert result.value is None
        assert result.error

    def test_fenced_with_extra_fields(self):
        text = '```json\n{"vaguenessScore": 40, "reasoning": "ok", "extra": [1, 2]}\n```'
        assert parse_verdict(text).value.vagueness_score == 40


class TestParseComparison:

    VALID = (
        '{"overallScore": 80, "specificityGain": 90, "actionability": 75, '
        '"issueCoverage": 70, "relevance": 120, "reasoning": "Much clearer."}'
    )

    def test_valid(self):
        result = parse_comparison(self.VALID)
        assert result.ok
        assert result.value.overall_score == 80
        assert result.value.relevance == 100

    def test_missing_criterion(self):
        result = parse_comparison('{"overallScore": 80, "reasoning": "r"}')
        assert result.ok is False


class TestPromptBuilders:

    def test_vagueness_instructions_embed_prompt(self):
        text = build_vagueness_instructions("fix it")
        assert '"fix it"' in text
        assert '"vaguenessScore"' in text

    def test_comparison_instructions_embed_both(self):
        text = build_comparison_instructions("fix it", "fix the TypeError in app.ts")
        assert '"fix it"' in text
        assert "app.ts" in text
        assert '"overallScore"' in text


# ============================================================
# CALL BOUNDARY
# ============================================================

class TestCallJudge:

    @pytest.mark.asyncio
    async def test_returns_text(self):
        text = await call_judge(SlowJudge(0), "p", "i", timeout=1.0)
        assert "vaguenessScore" in text

    @pytest.mark.asyncio
    async def test_timeout(self):
        with pytest.raises(JudgeTimeoutError):
            await call_judge(SlowJudge(5.0), "p", "i", timeout=0.05)

    @pytest.mark.asyncio
    async def test_cancel_before_start(self):
        cancel = asyncio.Event()
        cancel.set()
        with pytest.raises(JudgeUnavailableError):
            await call_judge(SlowJudge(0), "p", "i", cancel=cancel, timeout=1.0)

    @pytest.mark.asyncio
    async def test_cancel_in_flight_returns_promptly(self):
        cancel = asyncio.Event()
        loop = asyncio.get_running_loop()
        loop.call_later(0.02, cancel.set)
        start = loop.time()
        with pytest.raises(JudgeUnavailableError):
            await call_judge(SlowJudge(5.0), "p", "i", cancel=cancel, timeout=10.0)
        assert loop.time() - start < 1.0

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self):
        with pytest.raises(JudgeUnavailableError):
            await call_judge(BrokenJudge(), "p", "i", timeout=1.0)


# ============================================================
# FACTORY & GEMINI
# ============================================================

class TestFactory:

    @pytest.mark.parametrize("name", ["none", "off", "NONE"])
    def test_disabled(self, name):
        assert get_judge(name) is None

    def test_gemini(self):
        judge = get_judge("gemini")
        assert isinstance(judge, GeminiJudge)

    def test_unknown(self):
        with pytest.raises(ValidationError):
            get_judge("oracle")


class TestCircuitBreaker:

    def test_opens_after_threshold(self):
        cb = CircuitBreaker(failure_threshold=3, recovery_timeout=60)
        for _ in range(2):
            cb.record_failure()
        assert cb.is_open is False
        cb.record_failure()
        assert cb.is_open is True

    def test_half_open_after_recovery(self):
        cb = CircuitBreaker(failure_threshold=1, recovery_timeout=0)
        cb.record_failure()
        assert cb.state == "half-open"

    def test_success_closes(self):
        cb = CircuitBreaker(failure_threshold=1, recovery_timeout=60)
        cb.record_failure()
        cb.record_success()
        assert cb.state == "closed"


class TestGeminiJudge:

    @pytest.mark.asyncio
    async def test_missing_api_key_is_unavailable(self):
        judge = GeminiJudge(api_key="unused")
        judge._api_key = ""
        with pytest.raises(JudgeUnavailableError):
            await judge.judge("fix it", build_vagueness_instructions("fix it"))

    @pytest.mark.asyncio
    async def test_open_circuit_fails_fast(self):
        judge = GeminiJudge(api_key="unused")
        judge.circuit_breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=60)
        judge.circuit_breaker.record_failure()
        with pytest.raises(CircuitOpenError):
            await judge.judge("fix it", "instructions")

    def test_circuit_open_is_unavailable(self):
        assert issubclass(CircuitOpenError, JudgeUnavailableError)
