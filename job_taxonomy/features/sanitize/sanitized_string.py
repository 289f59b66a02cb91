"""Validated, immutable text wrapper for prompt construction.

A ``SanitizedString`` can only be obtained through its factory methods,
which reject any text containing a URL-like substring. This is a single
regex heuristic that reduces the risk of prompt-injected exfiltration
links; it is not a general prompt-injection defense.
"""

from __future__ import annotations

import re
from typing import NoReturn

import structlog

from job_taxonomy.features.sanitize.errors import SanitizationRejectedError


logger = structlog.get_logger()

URL_PATTERN = re.compile(
    r"https?://[\w.-]+(?:\.[\w.-]+)+[\w\-._~:/?#\[\]@!$&'()*+,;=%]+"
)

_FACTORY_TOKEN = object()


def find_url(text: str) -> str | None:
    """Return the first URL-like substring of ``text``, if any.

    Args:
        text: Candidate text.

    Returns:
        The matched substring, or None when the text is clean.
    """
    match = URL_PATTERN.search(text)
    return match.group(0) if match else None


class SanitizedString:
    """Text guaranteed at construction to contain no URL-like substring.

    Instances are created with ``try_create`` or ``create``. Calling the
    class directly raises ``TypeError``.
    """

    __slots__ = ("_value",)

    _value: str

    def __init__(self, value: str, *, _token: object = None) -> None:
        if _token is not _FACTORY_TOKEN:
            msg = "SanitizedString must be created with SanitizedString.try_create"
            raise TypeError(msg)
        object.__setattr__(self, "_value", value)

    @classmethod
    def try_create(cls, raw: str) -> SanitizedString | None:
        """Validate ``raw`` and wrap it.

        Args:
            raw: Untrusted text.

        Returns:
            A new instance, or None if ``raw`` contains a URL.
        """
        matched = find_url(raw)
        if matched is not None:
            logger.warning(
                "sanitization_rejected",
                component="sanitize",
                matched_url=matched,
            )
            return None
        return cls(raw, _token=_FACTORY_TOKEN)

    @classmethod
    def create(cls, raw: str) -> SanitizedString:
        """Validate ``raw`` and wrap it, raising on rejection.

        Raises:
            SanitizationRejectedError: If ``raw`` contains a URL.
        """
        sanitized = cls.try_create(raw)
        if sanitized is None:
            raise SanitizationRejectedError(find_url(raw) or "")
        return sanitized

    @property
    def value(self) -> str:
        """The wrapped text, unchanged."""
        return self._value

    def concat(self, other: SanitizedString) -> SanitizedString | None:
        """Join two sanitized strings, re-validating the combined text.

        Both halves being clean does not make the join clean: a URL may
        span the boundary (``"http://ex"`` + ``"ample.com/x"``).

        Args:
            other: Text appended after this one.

        Returns:
            A new instance, or None if the combined text contains a URL.
        """
        return SanitizedString.try_create(self._value + other.value)

    def truncate(self, limit: int) -> SanitizedString:
        """Return the first ``limit`` characters as a new instance.

        Any prefix of URL-free text is URL-free, so this never fails.
        """
        if limit < 0:
            msg = f"limit must be non-negative, got {limit}"
            raise ValueError(msg)
        if len(self._value) <= limit:
            return self
        return SanitizedString(self._value[:limit], _token=_FACTORY_TOKEN)

    def __setattr__(self, name: str, value: object) -> NoReturn:
        msg = "SanitizedString is immutable"
        raise AttributeError(msg)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SanitizedString):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __len__(self) -> int:
        return len(self._value)

    def __repr__(self) -> str:
        preview = self._value if len(self._value) <= 40 else self._value[:37] + "..."
        return f"SanitizedString({preview!r})"
