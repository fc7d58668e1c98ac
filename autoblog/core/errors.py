"""
Exception types for the autoblog pipeline.
"""
from typing import Optional


class AutoblogError(Exception):
    """Base class for all pipeline errors."""


class StageError(AutoblogError):
    """
    A pipeline stage could not produce a usable result for this attempt.

    The orchestrator treats it as a failed attempt and moves on.
    """
    def __init__(self, stage: str, message: str):
        super().__init__(f"{stage}: {message}")
        self.stage = stage
        self.message = message


class QualityGateError(StageError):
    """The quality gate rejected a draft."""
    def __init__(self, report, message: Optional[str] = None):
        reasons = " | ".join(report.reasons) or "no reasons recorded"
        super().__init__('gating', message or f"quality gate failed: {reasons}")
        self.report = report


class PublishError(AutoblogError):
    """A post could not be written to the content directory."""


class BatchExhaustedError(AutoblogError):
    """The attempt budget ran out before enough posts were published."""
    def __init__(self, attempts: int, successes: int, target: int):
        super().__init__(
            f"Batch exhausted after {attempts} attempts: "
            f"published {successes}/{target} posts"
        )
        self.attempts = attempts
        self.successes = successes
        self.target = target
