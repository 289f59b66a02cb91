"""Domain-specific error types for the sanitize module."""


class SanitizationRejectedError(Exception):
    """Text contains a URL-like substring and cannot enter a prompt.

    Attributes:
        matched_url: The URL-like substring that triggered the rejection.
    """

    def __init__(self, matched_url: str) -> None:
        super().__init__(f"Text contains a disallowed URL: {matched_url}")
        self.matched_url = matched_url
