"""
Judge Prompts and Response Parsing

Builds the instructions sent to a judge and turns its free-text answer
back into a validated verdict.

Judges wrap JSON in markdown fences, prepend chatter, or append
commentary. Parsing strips fences, takes the first balanced {...}
object, decodes it and validates it against a pydantic schema.
It never raises: every failure is reported as a ParseResult error.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Generic, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from promptclear.schemas.judge import ComparisonVerdict, VaguenessVerdict

T = TypeVar("T", bound=BaseModel)

_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


# ============================================================
# PROMPT BUILDERS
# ============================================================

def build_vagueness_instructions(prompt: str) -> str:
    return f"""Analyze this prompt that a developer might send to a coding assistant.

PROMPT TO ANALYZE:
"{prompt}"

Rate the vagueness from 0-100:
- 0-20: Very specific (has file paths, line numbers, exact error messages)
- 20-40: Specific (clear intent, mentions specific technologies/components)
- 40-60: Moderate (has topic but missing important context)
- 60-80: Vague (uses generic terms like "fix it", no specifics)
- 80-100: Very vague (no clear intent, like "help" or "do something")

Respond with ONLY valid JSON:
{{"vaguenessScore": <number 0-100>, "reasoning": "<1 sentence explanation>"}}"""


def build_comparison_instructions(original: str, enhanced: str) -> str:
    return f"""You are evaluating how well a prompt enhancement improves on the original.

ORIGINAL PROMPT:
"{original}"

ENHANCED PROMPT:
"{enhanced}"

Rate the enhancement quality on these criteria (0-100 each):

1. specificityGain: How much more specific is the enhanced prompt?
   - 0-20: No improvement, still vague
   - 40-60: Moderate improvements (added context, technology)
   - 80-100: Excellent (complete specification with constraints)

2. actionability: Can a developer act on this without clarifying questions?
   - 0-20: Still needs many clarifications
   - 40-60: Reasonably actionable
   - 80-100: Fully specified, ready to implement

3. issueCoverage: Does it address what made the original vague?
   - 0-20: Ignores the problems
   - 40-60: Addresses some issues
   - 80-100: Comprehensively addresses all issues

4. relevance: Does the enhancement stay true to the original intent?
   - 0-20: Completely off-topic
   - 40-60: Related but adds unasked features
   - 80-100: Perfect expansion of original intent

5. overallScore: Your overall assessment

Respond with ONLY valid JSON, no other text:
{{"overallScore": <0-100>, "specificityGain": <0-100>, "actionability": <0-100>, "issueCoverage": <0-100>, "relevance": <0-100>, "reasoning": "<1-2 sentence explanation>"}}"""


# ============================================================
# PARSING
# ============================================================

@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """Either a validated value or an error message."""
    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: T) -> "ParseResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> "ParseResult[T]":
        return cls(ok=False, error=error)


def extract_json_object(text: str) -> Optional[str]:
    """
    First balanced {...} object in `text`, after stripping markdown fences.

    Braces inside JSON string literals are ignored when balancing.
    """
    if not text:
        return None
    fenced = _FENCE.search(text)
    body = fenced.group(1) if fenced else text

    start = body.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(body)):
            ch = body[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return body[start:i + 1]
        # Unbalanced from this brace; try the next one
        start = body.find("{", start + 1)
    return None


def parse_json_response(text: str, schema: Type[T]) -> ParseResult[T]:
    raw = extract_json_object(text)
    if raw is None:
        return ParseResult.failure("No JSON object found in judge response")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        return ParseResult.failure(f"Judge returned invalid JSON: {e}")
    if not isinstance(data, dict):
        return ParseResult.failure("Judge JSON is not an object")
    try:
        return ParseResult.success(schema.model_validate(data))
    except PydanticValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(p) for p in first.get("loc", ()))
        return ParseResult.failure(
            f"Judge verdict failed validation at '{loc}': {first.get('msg', 'invalid')}"
        )


def parse_verdict(text: str) -> ParseResult[VaguenessVerdict]:
    return parse_json_response(text, VaguenessVerdict)


def parse_comparison(text: str) -> ParseResult[ComparisonVerdict]:
    return parse_json_response(text, ComparisonVerdict)
