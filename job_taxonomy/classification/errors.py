"""Domain-specific error types for the classification module."""


class CategoryDiscoveryError(Exception):
    """The model never produced a usable sub-category list.

    Attributes:
        designation: Designation whose categories could not be discovered.
        attempts: Model calls made before giving up.
    """

    def __init__(self, designation: str, attempts: int, reason: str) -> None:
        super().__init__(
            f"Category discovery failed for {designation!r} "
            f"after {attempts} attempt(s): {reason}"
        )
        self.designation = designation
        self.attempts = attempts
