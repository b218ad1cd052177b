"""
External Judge — Abstract Interface

The engine consults a judge (an LLM) for prompts the statistical
model is unsure about. Swap judges by changing
PROMPTCLEAR_JUDGE_PROVIDER in env.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

from promptclear.errors import JudgeError, JudgeTimeoutError, JudgeUnavailableError


class ExternalJudge(ABC):
    """Abstract base for external judges."""

    name: str = "judge"

    @abstractmethod
    async def judge(self, original: str, instructions: str) -> str:
        """
        Return the judge's raw text answer.

        Args:
            original: The prompt under evaluation.
            instructions: The full rating instructions, which already
                embed `original`.

        Raises:
            JudgeError subclasses on any failure.
        """
        ...


async def call_judge(
    judge: ExternalJudge,
    original: str,
    instructions: str,
    cancel: Optional[asyncio.Event] = None,
    timeout: Optional[float] = None,
) -> str:
    """
    Run one judge call bounded by `timeout` and the `cancel` event.

    Cancellation and timeouts abandon the judge task and surface as
    JudgeError subclasses; non-judge exceptions become JudgeUnavailableError.
    """
    if cancel is not None and cancel.is_set():
        raise JudgeUnavailableError("Judge call cancelled before it started")

    judge_task = asyncio.ensure_future(judge.judge(original, instructions))
    waiters = {judge_task}
    cancel_task = None
    if cancel is not None:
        cancel_task = asyncio.ensure_future(cancel.wait())
        waiters.add(cancel_task)

    try:
        done, _ = await asyncio.wait(
            waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        for task in waiters:
            if not task.done():
                task.cancel()

    if judge_task in done:
        try:
            return judge_task.result()
        except JudgeError:
            raise
        except Exception as e:
            raise JudgeUnavailableError(f"Judge failed: {e}") from e
    if cancel_task is not None and cancel_task in done:
        raise JudgeUnavailableError("Judge call cancelled")
    raise JudgeTimeoutError(f"Judge did not respond within {timeout}s")
