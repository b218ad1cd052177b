"""
Judge factory.
"""

from __future__ import annotations

from typing import Optional

from promptclear.config import settings
from promptclear.errors import ValidationError
from promptclear.judge import ExternalJudge


def get_judge(provider_name: Optional[str] = None) -> Optional[ExternalJudge]:
    """Factory — returns the configured judge, or None when disabled."""
    name = (provider_name or settings.JUDGE_PROVIDER).strip().lower()
    if name in ("none", "off", ""):
        return None
    if name == "gemini":
        from promptclear.judge.gemini import GeminiJudge
        return GeminiJudge()
    raise ValidationError(f"Unknown judge provider: {name}")
