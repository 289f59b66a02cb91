"""Metrics collection for the classification module."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass
class ClassificationMetrics:
    """Process-wide counters for classification runs.

    Attributes:
        model_calls_total: Model calls made by the retry loop.
        repair_attempts_total: Calls beyond the first attempt of a run.
        exhausted_total: Retry runs that ended without a result.
        sanitization_rejections_total: Inputs rejected before any call.
        descriptions_scored_total: Descriptions that produced a score map.
    """

    model_calls_total: int = 0
    repair_attempts_total: int = 0
    exhausted_total: int = 0
    sanitization_rejections_total: int = 0
    descriptions_scored_total: int = 0

    _instance: ClassVar["ClassificationMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "ClassificationMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_run(self, attempts: int, succeeded: bool) -> None:
        """Record one retry loop run.

        Args:
            attempts: Model calls made by the run.
            succeeded: Whether the run ended in SUCCESS.
        """
        self.model_calls_total += attempts
        self.repair_attempts_total += max(0, attempts - 1)
        if not succeeded:
            self.exhausted_total += 1

    def record_rejection(self) -> None:
        """Record an input rejected by sanitization."""
        self.sanitization_rejections_total += 1

    def record_scored(self) -> None:
        """Record a successfully scored description."""
        self.descriptions_scored_total += 1

    def to_dict(self) -> dict[str, int]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "model_calls_total": self.model_calls_total,
            "repair_attempts_total": self.repair_attempts_total,
            "exhausted_total": self.exhausted_total,
            "sanitization_rejections_total": self.sanitization_rejections_total,
            "descriptions_scored_total": self.descriptions_scored_total,
        }
