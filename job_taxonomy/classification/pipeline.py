"""End-to-end classification of one designation's descriptions."""

import threading
from collections.abc import Sequence

import structlog

from job_taxonomy.classification.aggregator import top_k
from job_taxonomy.classification.discovery import discover_categories_outcome
from job_taxonomy.classification.errors import CategoryDiscoveryError
from job_taxonomy.classification.models import ClassificationReport
from job_taxonomy.classification.scorer import RelevanceScorer
from job_taxonomy.features.llm.errors import InvalidArgumentError
from job_taxonomy.features.llm.models import ModelSettings
from job_taxonomy.features.llm.protocols import LlmClient


logger = structlog.get_logger()


def classify_designation(  # noqa: PLR0913
    client: LlmClient,
    settings: ModelSettings,
    designation: str,
    descriptions: Sequence[str],
    *,
    max_retries: int,
    k: int,
    max_workers: int = 1,
    sample_size: int | None = None,
    cancel_event: threading.Event | None = None,
) -> ClassificationReport:
    """Discover categories, score every description, keep the top K.

    Arguments are validated before any model call.

    Args:
        client: Model client.
        settings: Model settings.
        designation: Designation (job title).
        descriptions: Descriptions filed under the designation.
        max_retries: Repair rounds per model request.
        k: Descriptions kept per category.
        max_workers: Descriptions scored concurrently.
        sample_size: Descriptions merged into the discovery prompt.
        cancel_event: Aborts scoring, keeping completed results.

    Returns:
        ClassificationReport for the designation.

    Raises:
        InvalidArgumentError: On invalid ``k`` or ``max_retries``.
        SanitizationRejectedError: If the designation contains a URL.
        CategoryDiscoveryError: If no categories could be discovered.
    """
    if isinstance(k, bool) or k <= 0:
        msg = f"k must be a positive integer, got {k}"
        raise InvalidArgumentError(msg)

    log = logger.bind(
        component="classification",
        subcomponent="pipeline",
        designation=designation,
    )
    scorer = RelevanceScorer(client, settings, max_retries, max_workers)

    outcome = discover_categories_outcome(
        client, settings, designation, descriptions, max_retries, sample_size
    )
    if not outcome.succeeded or outcome.value is None:
        raise CategoryDiscoveryError(
            designation, outcome.attempts, str(outcome.last_error)
        )
    categories = outcome.value

    scored = scorer.score_all(descriptions, categories, cancel_event)
    report = ClassificationReport(
        designation=designation,
        categories=categories,
        scored=scored,
        top_k=top_k(scored, k),
        k=k,
        discovery_calls=outcome.attempts,
        stats=scorer.stats,
    )

    log.info(
        "designation_classified",
        categories=len(categories),
        scored=report.stats.scored,
        dropped=report.stats.dropped,
        model_calls=report.model_calls,
    )
    return report
