"""
PromptClear Configuration

Central settings loaded from environment variables.
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    # --- Versioning ---
    MODEL_FORMAT_VERSION: str = "1.0.0"

    # --- External Judge ---
    JUDGE_PROVIDER: str = os.getenv("PROMPTCLEAR_JUDGE_PROVIDER", "gemini")
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    JUDGE_TIMEOUT: float = float(os.getenv("PROMPTCLEAR_JUDGE_TIMEOUT", "30"))

    # --- Routing ---
    CONFIDENCE_THRESHOLD: float = float(
        os.getenv("PROMPTCLEAR_CONFIDENCE_THRESHOLD", "0.6")
    )
    VAGUENESS_THRESHOLD: int = int(
        os.getenv("PROMPTCLEAR_VAGUENESS_THRESHOLD", "30")
    )

    # --- Training ---
    TRAINING_THRESHOLD: int = int(
        os.getenv("PROMPTCLEAR_TRAINING_THRESHOLD", "50")
    )
    LEARNING_RATE: float = float(os.getenv("PROMPTCLEAR_LEARNING_RATE", "0.5"))
    EPOCHS: int = int(os.getenv("PROMPTCLEAR_EPOCHS", "100"))
    REGULARIZATION: float = float(
        os.getenv("PROMPTCLEAR_REGULARIZATION", "0.01")
    )

    # --- Model Snapshot ---
    MODEL_PATH: str = os.getenv("PROMPTCLEAR_MODEL_PATH", "")


settings = Settings()
