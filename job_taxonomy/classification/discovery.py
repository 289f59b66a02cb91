"""Sub-category discovery for a designation."""

from collections.abc import Sequence

import structlog

from job_taxonomy.classification.errors import CategoryDiscoveryError
from job_taxonomy.classification.metrics import ClassificationMetrics
from job_taxonomy.features.llm.errors import InvalidArgumentError
from job_taxonomy.features.llm.models import ModelSettings
from job_taxonomy.features.llm.parser import parse_subcategories
from job_taxonomy.features.llm.prompts import (
    DISCOVERY_EXAMPLE_SCHEMA,
    build_category_discovery_prompt,
)
from job_taxonomy.features.llm.protocols import LlmClient
from job_taxonomy.features.llm.retry import RetryOutcome, invoke_and_parse
from job_taxonomy.features.sanitize import SanitizedString


logger = structlog.get_logger()

_MERGE_SEPARATOR = "\n\n"


def merge_descriptions(
    descriptions: Sequence[str],
    sample_size: int | None = None,
) -> SanitizedString | None:
    """Sanitize descriptions and merge the survivors into one text.

    Rejected descriptions are skipped without being counted; the scorer
    records them when it sees them. The merged text is re-validated
    because a URL may form across a separator.

    Args:
        descriptions: Job description texts.
        sample_size: Maximum number of surviving descriptions to merge.

    Returns:
        The merged text, or None if nothing survived.
    """
    accepted: list[str] = []
    for description in descriptions:
        if sample_size is not None and len(accepted) >= sample_size:
            break
        sanitized = SanitizedString.try_create(description)
        if sanitized is None:
            continue
        accepted.append(sanitized.value)

    if not accepted:
        return None
    return SanitizedString.try_create(_MERGE_SEPARATOR.join(accepted))


def discover_categories_outcome(
    client: LlmClient,
    settings: ModelSettings,
    designation: str,
    descriptions: Sequence[str],
    max_retries: int,
    sample_size: int | None = None,
) -> RetryOutcome[list[str]]:
    """Ask the model for a designation's sub-categories.

    Args:
        client: Model client.
        settings: Model settings.
        designation: Designation (job title).
        descriptions: Descriptions filed under the designation.
        max_retries: Repair rounds allowed.
        sample_size: Maximum number of descriptions merged into the prompt.

    Returns:
        The retry loop outcome.

    Raises:
        SanitizationRejectedError: If the designation contains a URL.
        CategoryDiscoveryError: If no usable prompt can be built.
        InvalidArgumentError: If ``sample_size`` is not positive.
    """
    if sample_size is not None and sample_size <= 0:
        msg = f"sample_size must be positive, got {sample_size}"
        raise InvalidArgumentError(msg)

    log = logger.bind(
        component="classification",
        subcomponent="discovery",
        designation=designation,
    )

    sanitized_designation = SanitizedString.create(designation)
    merged = merge_descriptions(descriptions, sample_size)
    if merged is None:
        raise CategoryDiscoveryError(designation, 0, "no usable descriptions")

    prompt = SanitizedString.try_create(
        build_category_discovery_prompt(
            sanitized_designation,
            merged,
            DISCOVERY_EXAMPLE_SCHEMA,
            settings.truncate_length,
        )
    )
    if prompt is None:
        raise CategoryDiscoveryError(designation, 0, "prompt rejected by sanitizer")

    log.info("category_discovery_started", descriptions=len(descriptions))
    outcome = invoke_and_parse(
        client, settings, prompt, parse_subcategories, max_retries
    )
    ClassificationMetrics.get_instance().record_run(
        outcome.attempts, outcome.succeeded
    )
    log.info(
        "category_discovery_complete",
        succeeded=outcome.succeeded,
        attempts=outcome.attempts,
        categories=len(outcome.value or []),
    )
    return outcome


def discover_categories(
    client: LlmClient,
    settings: ModelSettings,
    designation: str,
    descriptions: Sequence[str],
    max_retries: int,
    sample_size: int | None = None,
) -> list[str]:
    """Discover a designation's sub-categories.

    Returns:
        Sub-category names in the order the model listed them.

    Raises:
        SanitizationRejectedError: If the designation contains a URL.
        CategoryDiscoveryError: If the retry budget is spent.
    """
    outcome = discover_categories_outcome(
        client, settings, designation, descriptions, max_retries, sample_size
    )
    if not outcome.succeeded or outcome.value is None:
        raise CategoryDiscoveryError(
            designation, outcome.attempts, str(outcome.last_error)
        )
    return outcome.value
