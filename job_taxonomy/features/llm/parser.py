"""Typed parsing and validation of model responses."""

from collections.abc import Collection

from job_taxonomy.features.llm.errors import ParseError, ParseErrorKind
from job_taxonomy.features.llm.json_utils import decode_llm_json
from job_taxonomy.features.sanitize import find_url


MIN_RELEVANCE_SCORE = 1
MAX_RELEVANCE_SCORE = 5
SUBCATEGORIES_KEY = "subcategories"

_PREVIEW_CHARS = 200


def _decode(response_text: str) -> object:
    """Decode response text or raise MALFORMED_JSON."""
    decoded, value = decode_llm_json(response_text)
    if not decoded:
        msg = f"Response is not valid JSON: {response_text[:_PREVIEW_CHARS]}"
        raise ParseError(ParseErrorKind.MALFORMED_JSON, msg)
    return value


def _is_score(value: object) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and MIN_RELEVANCE_SCORE <= value <= MAX_RELEVANCE_SCORE
    )


def parse_category_map(
    response_text: str,
    known_categories: Collection[str],
) -> dict[str, int]:
    """Parse a relevance response into a category -> score mapping.

    The mapping is accepted only as a whole: a single key outside
    ``known_categories`` rejects the response.

    Args:
        response_text: Raw model output.
        known_categories: Categories the model was asked to score.

    Returns:
        Mapping of category name to an integer score from 1 to 5.

    Raises:
        ParseError: MALFORMED_JSON if the text does not decode,
            INVALID_SHAPE if it is not an object of integer scores,
            UNKNOWN_KEYS if it names undeclared categories.
    """
    value = _decode(response_text)

    if not isinstance(value, dict):
        msg = f"Expected a JSON object, got {type(value).__name__}"
        raise ParseError(ParseErrorKind.INVALID_SHAPE, msg)

    bad_scores = {key: score for key, score in value.items() if not _is_score(score)}
    if bad_scores:
        msg = (
            f"Scores must be integers from {MIN_RELEVANCE_SCORE} to "
            f"{MAX_RELEVANCE_SCORE}; invalid values: {bad_scores}"
        )
        raise ParseError(ParseErrorKind.INVALID_SHAPE, msg)

    known = set(known_categories)
    unknown = frozenset(key for key in value if key not in known)
    if unknown:
        msg = f"Response contains unknown categories: {sorted(unknown)}"
        raise ParseError(ParseErrorKind.UNKNOWN_KEYS, msg, unknown_keys=unknown)

    return dict(value)


def parse_subcategories(response_text: str) -> list[str]:
    """Parse a category-discovery response.

    The only accepted shape is ``{"subcategories": ["...", ...]}``. A bare
    JSON array is rejected rather than silently accepted.

    Names end up in relevance prompts, so a name containing a URL is
    rejected like any other malformed entry.

    Args:
        response_text: Raw model output.

    Returns:
        Stripped, de-duplicated sub-category names in response order.

    Raises:
        ParseError: MALFORMED_JSON or INVALID_SHAPE.
    """
    value = _decode(response_text)

    if not isinstance(value, dict) or set(value) != {SUBCATEGORIES_KEY}:
        msg = (
            f'Expected an object with the single key "{SUBCATEGORIES_KEY}", '
            f"got {type(value).__name__}"
        )
        raise ParseError(ParseErrorKind.INVALID_SHAPE, msg)

    entries = value[SUBCATEGORIES_KEY]
    if not isinstance(entries, list) or not entries:
        msg = f'"{SUBCATEGORIES_KEY}" must be a non-empty list of strings'
        raise ParseError(ParseErrorKind.INVALID_SHAPE, msg)

    names: list[str] = []
    for entry in entries:
        if not isinstance(entry, str) or not entry.strip():
            msg = f'"{SUBCATEGORIES_KEY}" entries must be non-empty strings: {entry!r}'
            raise ParseError(ParseErrorKind.INVALID_SHAPE, msg)
        name = entry.strip()
        url = find_url(name)
        if url is not None:
            msg = f"Sub-category names must not contain URLs: {url}"
            raise ParseError(ParseErrorKind.INVALID_SHAPE, msg)
        if name not in names:
            names.append(name)
    return names
