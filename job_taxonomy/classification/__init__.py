"""Job description classification: discovery, scoring, top-K ranking.

Descriptions grouped under a designation are used to discover the
designation's sub-categories, every description is scored against those
sub-categories, and the highest-scoring descriptions are kept per
sub-category.
"""

from job_taxonomy.classification.aggregator import top_k
from job_taxonomy.classification.discovery import discover_categories
from job_taxonomy.classification.errors import CategoryDiscoveryError
from job_taxonomy.classification.metrics import ClassificationMetrics
from job_taxonomy.classification.models import (
    ClassificationReport,
    ScoredDescription,
    ScoredEntry,
    ScoringStats,
    TopKResult,
)
from job_taxonomy.classification.pipeline import classify_designation
from job_taxonomy.classification.scorer import RelevanceScorer, score_all


__all__ = [
    "CategoryDiscoveryError",
    "ClassificationMetrics",
    "ClassificationReport",
    "RelevanceScorer",
    "ScoredDescription",
    "ScoredEntry",
    "ScoringStats",
    "TopKResult",
    "classify_designation",
    "discover_categories",
    "score_all",
    "top_k",
]
