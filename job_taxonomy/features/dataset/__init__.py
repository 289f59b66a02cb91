"""Job description dataset loading."""

from job_taxonomy.features.dataset.errors import DatasetError
from job_taxonomy.features.dataset.loader import (
    DEFAULT_DESIGNATION_COLUMN,
    DEFAULT_DETAILS_COLUMN,
    load_grouped_descriptions,
)


__all__ = [
    "DEFAULT_DESIGNATION_COLUMN",
    "DEFAULT_DETAILS_COLUMN",
    "DatasetError",
    "load_grouped_descriptions",
]
