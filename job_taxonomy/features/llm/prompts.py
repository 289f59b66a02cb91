"""Prompt templates for job description taxonomy classification."""

import json
from collections.abc import Iterable

from job_taxonomy.features.llm.parser import (
    MAX_RELEVANCE_SCORE,
    MIN_RELEVANCE_SCORE,
    SUBCATEGORIES_KEY,
)
from job_taxonomy.features.sanitize import SanitizedString


SYSTEM_INSTRUCTION = (
    "You are a helpful assistant that classifies job descriptions. "
    "Respond in JSON only, with no markdown fences or extra text."
)

DISCOVERY_EXAMPLE_SCHEMA = json.dumps(
    {SUBCATEGORIES_KEY: ["<sub-category 1>", "<sub-category 2>"]}
)

_DISCOVERY_TEMPLATE = """## Designation
{designation}

## Job Descriptions
{descriptions}

## Task
The job descriptions above all belong to the designation "{designation}".
List the distinct sub-categories of work that this designation covers,
based only on the descriptions. Use short, human-readable names.

## Output Format
Return a JSON object with exactly this shape, without extra values:
{schema}
"""

_RELEVANCE_TEMPLATE = """## Job Description
{description}

## Categories
{categories}

## Task
Rate how relevant the job description is to each category above, as an
integer from {min_score} (not relevant) to {max_score} (highly relevant).
Use only the category names listed; do not add new ones.

## Output Format
Respond with only a JSON object mapping each category name to its integer
score, for example: {example}
"""

_REPAIR_TEMPLATE = """

## Previous Attempt Rejected
Your previous response:
{response}

It was rejected because: {error}
Return only corrected JSON that follows the output format above.
"""

_NO_RESPONSE = "(no response was received)"


def build_category_discovery_prompt(
    designation: SanitizedString,
    merged_description: SanitizedString,
    example_schema_json: str,
    truncate_length: int,
) -> str:
    """Build the prompt asking for a designation's sub-categories.

    Args:
        designation: Sanitized designation (job title).
        merged_description: Sanitized, merged sample of descriptions.
        example_schema_json: JSON example of the expected response shape.
        truncate_length: Character budget for each free-text input.

    Returns:
        Prompt text. The caller must sanitize it before invoking a model.
    """
    return _DISCOVERY_TEMPLATE.format(
        designation=designation.truncate(truncate_length).value,
        descriptions=merged_description.truncate(truncate_length).value,
        schema=example_schema_json,
    )


def build_category_map_json(categories: Iterable[str]) -> str:
    """Render the categories to score as a JSON object skeleton.

    Args:
        categories: Category names in display order.

    Returns:
        JSON object mapping each category to a score placeholder.
    """
    placeholder = f"<integer {MIN_RELEVANCE_SCORE}-{MAX_RELEVANCE_SCORE}>"
    return json.dumps(dict.fromkeys(categories, placeholder), indent=2)


def build_relevance_prompt(
    description: SanitizedString,
    category_map_json: str,
    truncate_length: int,
) -> str:
    """Build the prompt asking for per-category relevance scores.

    Args:
        description: Sanitized job description.
        category_map_json: Output of ``build_category_map_json``.
        truncate_length: Character budget for the description.

    Returns:
        Prompt text. The caller must sanitize it before invoking a model.
    """
    return _RELEVANCE_TEMPLATE.format(
        description=description.truncate(truncate_length).value,
        categories=category_map_json,
        min_score=MIN_RELEVANCE_SCORE,
        max_score=MAX_RELEVANCE_SCORE,
        example='{"Category A": 4, "Category B": 1}',
    )


def build_repair_feedback(response_text: str | None, error: Exception) -> str:
    """Build corrective context for the next attempt.

    Args:
        response_text: What the model returned, or None if the call failed.
        error: Why the attempt was rejected.

    Returns:
        Text to append to the current prompt.
    """
    return _REPAIR_TEMPLATE.format(
        response=response_text if response_text is not None else _NO_RESPONSE,
        error=str(error),
    )
