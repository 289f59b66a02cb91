"""Validation gate for untrusted text entering LLM prompts."""

from job_taxonomy.features.sanitize.errors import SanitizationRejectedError
from job_taxonomy.features.sanitize.sanitized_string import (
    URL_PATTERN,
    SanitizedString,
    find_url,
)


__all__ = [
    "URL_PATTERN",
    "SanitizationRejectedError",
    "SanitizedString",
    "find_url",
]
