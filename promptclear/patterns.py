"""
Rule Tables — Vocabulary of the Heuristic Scorer

Everything the rule engine matches against lives here: the vague and
learning verbs, the context and detail indicators, and the weighted
specificity patterns that offset a raw vagueness total.

All patterns are applied to the lowercased prompt, so detection is
case-insensitive and independent of locale.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


# ============================================================
# SCORE WEIGHTS
# ============================================================

WEIGHT_VAGUE_VERB = 30
WEIGHT_LEARNING_VERB = 25
WEIGHT_MISSING_CONTEXT = 35
WEIGHT_BROAD_SCOPE = 30
WEIGHT_VERY_SHORT = 20

# Word-count cut-offs
VERY_SHORT_WORDS = 2      # <= this gets the extra penalty
SHORT_WORDS = 5           # < this is "very short" for scope checks
CONTEXT_NEEDED_WORDS = 20  # < this needs a context pattern to be specific

# specificity 50 removes 40 vagueness points
SPECIFICITY_OFFSET_MULTIPLIER = 0.8

MAX_SCORE = 100


# ============================================================
# VAGUE TERMS
# ============================================================

VAGUE_VERBS = ("make", "create", "do", "fix", "help", "change", "update", "build")

LEARNING_VERBS = ("show", "tell", "teach", "explain", "learn", "understand")

BROAD_TERMS = ("website", "app", "application", "system", "project", "api", "database")


def _word_alternation(words: tuple[str, ...]) -> re.Pattern:
    return re.compile(r"\b(?:" + "|".join(re.escape(w) for w in words) + r")\b")


VAGUE_VERB_PATTERN = _word_alternation(VAGUE_VERBS)
LEARNING_VERB_PATTERN = _word_alternation(LEARNING_VERBS)
BROAD_TERM_PATTERN = _word_alternation(BROAD_TERMS)


# ============================================================
# CONTEXT PATTERNS (presence means the prompt is anchored)
# ============================================================

_FILE_EXTENSIONS = (
    "ts|tsx|js|jsx|mjs|py|java|kt|cpp|cc|c|h|go|rs|rb|php|cs|swift|"
    "css|scss|html|json|ya?ml|toml|md|sql|sh"
)

# Matches start only at a token boundary, so each token is scanned once
FILE_WITH_EXTENSION = rf"(?<![\w\-/])[\w\-/]+\.(?:{_FILE_EXTENSIONS})\b"

CONTEXT_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"\bin\s+\.{0,2}/?[\w.\-]+/[\w/.\-]*"),          # in src/auth
    re.compile(r"\bfile:\s*[\w/.\-]+"),                          # file: app.js
    re.compile(FILE_WITH_EXTENSION),                             # login.ts
    re.compile(r"\b(?:react|vue|angular|node|python|java|typescript|javascript)\b"),
    re.compile(r"\b(?:authentication|database|api|component|function|class|interface)\b"),
    re.compile(r"(?:\bsecurity\+|\b(?:comptia|aws|azure|certification|exam)\b)"),
    re.compile(r"\w\s+(?:fundamentals|basics|advanced|tutorial|guide|concepts)\b"),
)


# ============================================================
# DETAIL INDICATORS (a broad term is fine when these are present)
# ============================================================

HTTP_VERB_WITH_TARGET = r"\b(?:get|post|put|patch|delete)\s+(?:/|request|endpoint|route|call)"

DETAIL_INDICATORS: tuple[re.Pattern, ...] = (
    re.compile(r"\b(?:function|class|method|endpoint|route|component)\b"),
    re.compile(HTTP_VERB_WITH_TARGET),
    re.compile(r"\b(?:async|await|promise|callback)\b"),
    re.compile(r"\b(?:jwt|auth|token|session|cookie)\b"),
    re.compile(r"\b(?:database|sql|query|table|schema)\b"),
    re.compile(r"\{[^{}]+\}"),
)


# ============================================================
# SPECIFICITY PATTERNS
# ============================================================

@dataclass(frozen=True)
class SpecificityTier:
    """A group of patterns worth `points` each, capped at `maximum`."""
    name: str
    points: int
    maximum: int
    patterns: tuple[re.Pattern, ...]


HIGH_VALUE = SpecificityTier(
    name="high_value",
    points=15,
    maximum=45,
    patterns=(
        re.compile(FILE_WITH_EXTENSION),
        re.compile(r"(?:^|\s)\.{0,2}/?(?:[\w.\-]+/){2,}[\w.\-]*"),        # src/auth/login
        re.compile(r"\b(?:line|ln)\s*#?\d+\b|\.\w+:\d+\b"),               # line 42, app.ts:42
        re.compile(HTTP_VERB_WITH_TARGET),
        re.compile(r"(?:^|\s)/[\w\-]+/[\w\-/:{}*]*"),                      # /api/users
        re.compile(r"(?<![\w.])[a-z_][\w.]*\(\)"),                        # handlesubmit()
        re.compile(r"\b\w+(?:error|exception)\b"),                         # typeerror
        re.compile(r"\"[^\"]{8,}\""),                                      # "quoted message"
    ),
)

MEDIUM_VALUE = SpecificityTier(
    name="medium_value",
    points=10,
    maximum=40,
    patterns=(
        # auth
        re.compile(r"\b(?:jwt|oauth2?|auth\w*|bcrypt|password|login|token|session|cookie|sso|rbac)\b"),
        # database
        re.compile(
            r"\b(?:sql|postgres(?:ql)?|mysql|sqlite|mongo(?:db)?|redis|prisma|orm|"
            r"quer(?:y|ies)|schema|migrations?|indexes)\b"
        ),
        # frameworks & languages
        re.compile(
            r"\b(?:react|vue|angular|svelte|nextjs|next\.js|nuxt|express|nest|fastify|"
            r"django|flask|fastapi|spring|rails|laravel|typescript|javascript|python|"
            r"java|golang|rust|ruby|php|swift|kotlin|cpp|node)\b"
        ),
        # testing
        re.compile(r"\b(?:tests?|jest|pytest|vitest|mocha|mock\w*|coverage|e2e)\b"),
        # async & concurrency
        re.compile(r"\b(?:async|await|promises?|callbacks?|concurren\w+|threads?|websockets?)\b"),
        # error handling
        re.compile(r"\btry\s*/\s*catch\b|\berror\s+handling\b|\bretr(?:y|ies)\b|\bbackoff\b|\btimeouts?\b"),
    ),
)

REQUIREMENTS = SpecificityTier(
    name="requirements",
    points=8,
    maximum=16,
    patterns=(
        re.compile(r",\s*(?:and|or)\s+\w+|,[^,]+,"),                       # enumerations
        re.compile(
            r"\b(?:must|should|required?|requires|ensure|only|at\s+(?:least|most)|"
            r"no\s+more\s+than|max(?:imum)?|min(?:imum)?)\b"
        ),
        re.compile(
            r"\b\d+\s*(?:ms|s|sec|seconds?|minutes?|hours?|days?|px|%|kb|mb|gb|"
            r"chars?|characters?|items?|rows?|requests?|retries|times)\b"
        ),
        re.compile(r"\b(?:using|with|via|instead\s+of)\s+\w+"),
    ),
)

# Technical nouns: 5 points per distinct noun, up to 20
TECH_OBJECTS = (
    # UI elements
    "form", "button", "component", "modal", "dialog", "table", "list", "card",
    "menu", "header", "footer", "input", "field", "panel", "grid", "layout",
    "view", "screen", "dashboard",
    # data concepts
    "user", "admin", "role", "permission", "session", "token", "cookie",
    "cache", "storage", "database", "api", "endpoint", "route", "path",
    "url", "query", "request", "response", "error", "message",
    # code concepts
    "event", "callback", "promise", "hook", "state", "prop", "context",
    "reducer", "action", "store", "middleware", "plugin", "module", "package",
    "service", "controller", "model", "schema", "interface", "class",
    "function", "method", "type",
    # task targets
    "bug", "issue", "feature", "test", "config", "setting", "authentication",
    "authorization", "security", "validation",
)

TECH_OBJECT_PATTERN = re.compile(
    r"\b(" + "|".join(re.escape(t) for t in TECH_OBJECTS) + r")s?\b"
)
TECH_OBJECT_POINTS = 5
TECH_OBJECT_MAX = 20

LENGTH_BONUS_PER_STEP = 2
LENGTH_BONUS_WORDS_PER_STEP = 5
LENGTH_BONUS_MAX = 10

SPECIFICITY_MAX = 100
