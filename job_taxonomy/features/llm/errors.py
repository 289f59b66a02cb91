"""Domain-specific error types for the LLM module."""

from enum import Enum


class LlmAuthError(Exception):
    """No usable credentials for the model endpoint."""


class LlmApiError(Exception):
    """Model endpoint call failure (transport, auth, quota, timeout).

    Attributes:
        status_code: HTTP status code from the API response, 0 when the
            request never produced one.
    """

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code


ModelCallError = LlmApiError


class LlmProcessingError(Exception):
    """Response parsing or processing failure."""


class ParseErrorKind(Enum):
    """Why a model response was rejected."""

    MALFORMED_JSON = "malformed_json"
    INVALID_SHAPE = "invalid_shape"
    UNKNOWN_KEYS = "unknown_keys"


class ParseError(LlmProcessingError):
    """Model output did not match the expected schema.

    Attributes:
        kind: Failure category.
        unknown_keys: Keys outside the known category set, for UNKNOWN_KEYS.
    """

    def __init__(
        self,
        kind: ParseErrorKind,
        message: str,
        unknown_keys: frozenset[str] = frozenset(),
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.unknown_keys = unknown_keys


class InvalidArgumentError(ValueError):
    """Programmer error at a call site, never retried."""
