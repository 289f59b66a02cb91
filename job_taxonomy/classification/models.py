"""Data models for classification results."""

from dataclasses import dataclass, field
from typing import NamedTuple


class ScoredEntry(NamedTuple):
    """A relevance score paired with the description it belongs to."""

    score: int
    description: str


ScoredDescription = dict[str, ScoredEntry]
TopKResult = dict[str, list[ScoredEntry]]


@dataclass
class ScoringStats:
    """Counters for one ``score_all`` run.

    Attributes:
        submitted: Descriptions passed in.
        scored: Descriptions that produced a score map.
        rejected: Descriptions dropped by sanitization before any call.
        exhausted: Descriptions dropped after the retry budget was spent.
        cancelled: Descriptions never attempted because the batch was aborted.
        model_calls: Model calls made across all descriptions.
    """

    submitted: int = 0
    scored: int = 0
    rejected: int = 0
    exhausted: int = 0
    cancelled: int = 0
    model_calls: int = 0

    @property
    def dropped(self) -> int:
        """Descriptions that contributed nothing to the output."""
        return self.rejected + self.exhausted + self.cancelled

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary for serialization."""
        return {
            "submitted": self.submitted,
            "scored": self.scored,
            "rejected": self.rejected,
            "exhausted": self.exhausted,
            "cancelled": self.cancelled,
            "dropped": self.dropped,
            "model_calls": self.model_calls,
        }


@dataclass
class ClassificationReport:
    """Result of classifying one designation's descriptions.

    Attributes:
        designation: The designation (job title) classified.
        categories: Sub-categories discovered for the designation.
        scored: One score map per successfully scored description.
        top_k: Highest-scoring descriptions per category.
        k: The K used for ``top_k``.
        discovery_calls: Model calls spent on category discovery.
        stats: Scoring counters.
    """

    designation: str
    categories: list[str]
    scored: list[ScoredDescription] = field(default_factory=list)
    top_k: TopKResult = field(default_factory=dict)
    k: int = 0
    discovery_calls: int = 0
    stats: ScoringStats = field(default_factory=ScoringStats)

    @property
    def model_calls(self) -> int:
        """Total model calls for this designation."""
        return self.discovery_calls + self.stats.model_calls

    def to_json_dict(self) -> dict[str, object]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "designation": self.designation,
            "categories": list(self.categories),
            "k": self.k,
            "top_k": {
                category: [
                    {"score": entry.score, "description": entry.description}
                    for entry in entries
                ]
                for category, entries in self.top_k.items()
            },
            "stats": {
                **self.stats.to_dict(),
                "discovery_calls": self.discovery_calls,
                "model_calls": self.model_calls,
            },
        }
