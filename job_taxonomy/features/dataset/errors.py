"""Domain-specific error types for the dataset module."""


class DatasetError(Exception):
    """Input dataset cannot be read or lacks required columns."""
