"""
Training Corpus Loader

Reads a JSON array of TrainingSample records and validates every one
before anything is trained on it. Invalid records are never silently
used: strict mode rejects the whole corpus, lenient mode drops them
and logs what was dropped.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Union

from pydantic import ValidationError as PydanticValidationError

from promptclear.errors import ValidationError
from promptclear.schemas.training import TrainingSample

logger = logging.getLogger(__name__)


def parse_samples(records: Iterable, strict: bool = True) -> list[TrainingSample]:
    """
    Validate raw records into TrainingSample objects.

    Raises:
        ValidationError: in strict mode, when any record is invalid.
            The message lists the offending indices.
    """
    samples: list[TrainingSample] = []
    rejected: list[tuple[int, str]] = []

    for idx, record in enumerate(records):
        if isinstance(record, TrainingSample):
            samples.append(record)
            continue
        try:
            samples.append(TrainingSample.model_validate(record))
        except PydanticValidationError as e:
            first = e.errors()[0]
            loc = ".".join(str(part) for part in first.get("loc", ())) or "record"
            rejected.append((idx, f"{loc}: {first.get('msg', 'invalid')}"))

    if rejected:
        summary = "; ".join(f"[{i}] {reason}" for i, reason in rejected[:10])
        if strict:
            raise ValidationError(
                f"{len(rejected)} invalid training record(s) at indices "
                f"{[i for i, _ in rejected]}: {summary}"
            )
        logger.warning(
            "Dropped %d invalid training record(s): %s",
            len(rejected), summary,
            extra={"rejected": len(rejected)},
        )

    return samples


def load_corpus(path: Union[str, Path], strict: bool = True) -> list[TrainingSample]:
    """Load and validate a training corpus file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValidationError(f"Corpus {path} is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ValidationError(f"Corpus {path} must be a JSON array of samples")

    samples = parse_samples(data, strict=strict)
    logger.info(
        "Loaded %d training samples from %s", len(samples), path,
        extra={"samples": len(samples), "path": str(path)},
    )
    return samples
