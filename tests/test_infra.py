"""
Tests for logging, configuration and the error taxonomy.
"""

import json
import logging
import sys

import pytest

from promptclear import errors
from promptclear.config import Settings, settings
from promptclear.logging import JSONFormatter, get_logger, setup_logging


class TestLogging:

    def _record(self, **extra):
        record = logging.LogRecord(
            name="promptclear.engine", level=logging.INFO, pathname=__file__,
            lineno=1, msg="Routed to %s", args=("ml",), exc_info=None,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_formatter_fields(self):
        entry = json.loads(JSONFormatter().format(self._record(score=72, source="ml")))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "promptclear.engine"
        assert entry["message"] == "Routed to ml"
        assert entry["score"] == 72
        assert entry["source"] == "ml"
        assert "timestamp" in entry

    def test_json_formatter_skips_unknown_extras(self):
        entry = json.loads(JSONFormatter().format(self._record(secret="x")))
        assert "secret" not in entry

    def test_json_formatter_exception(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = self._record()
            record.exc_info = sys.exc_info()
        entry = json.loads(JSONFormatter().format(record))
        assert "ValueError" in entry["exception"]

    def test_get_logger_namespace(self):
        assert get_logger("engine").name == "promptclear.engine"

    def test_setup_logging_is_idempotent(self):
        root = logging.getLogger("promptclear")
        handlers, level = list(root.handlers), root.level
        try:
            assert setup_logging() is root
            setup_logging()
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, JSONFormatter)
        finally:
            root.handlers[:] = handlers
            root.setLevel(level)


class TestSettings:

    def test_types(self):
        assert isinstance(settings.CONFIDENCE_THRESHOLD, float)
        assert isinstance(settings.VAGUENESS_THRESHOLD, int)
        assert isinstance(settings.TRAINING_THRESHOLD, int)
        assert isinstance(settings.JUDGE_TIMEOUT, float)

    def test_ranges(self):
        assert 0.0 <= settings.CONFIDENCE_THRESHOLD <= 1.0
        assert 0 <= settings.VAGUENESS_THRESHOLD <= 100
        assert settings.JUDGE_TIMEOUT > 0

    def test_immutable(self):
        with pytest.raises(Exception):
            settings.VAGUENESS_THRESHOLD = 10

    def test_frozen_dataclass(self):
        assert Settings.__dataclass_params__.frozen


class TestErrors:

    @pytest.mark.parametrize("cls", [
        errors.ValidationError,
        errors.NotTrainedError,
        errors.SerializationError,
        errors.JudgeError,
    ])
    def test_base(self, cls):
        assert issubclass(cls, errors.PromptClearError)

    @pytest.mark.parametrize("cls", [
        errors.JudgeUnavailableError,
        errors.JudgeParseError,
        errors.JudgeTimeoutError,
    ])
    def test_judge_errors(self, cls):
        assert issubclass(cls, errors.JudgeError)

    def test_judge_errors_distinct_from_training_errors(self):
        assert not issubclass(errors.ValidationError, errors.JudgeError)
