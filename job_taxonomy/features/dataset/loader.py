"""CSV loading and grouping of job descriptions by designation."""

from pathlib import Path

import pandas as pd
import structlog

from job_taxonomy.features.dataset.errors import DatasetError


logger = structlog.get_logger()

DEFAULT_DESIGNATION_COLUMN = "designation"
DEFAULT_DETAILS_COLUMN = "job details"


def load_grouped_descriptions(
    path: Path,
    designation_column: str = DEFAULT_DESIGNATION_COLUMN,
    details_column: str = DEFAULT_DETAILS_COLUMN,
) -> dict[str, list[str]]:
    """Read a CSV and group description texts by designation.

    Rows with a blank designation or blank text are skipped. Groups and
    the descriptions within them keep file order.

    Args:
        path: CSV file path.
        designation_column: Column holding the grouping key.
        details_column: Column holding the free-text description.

    Returns:
        Designation -> description texts.

    Raises:
        DatasetError: If the file cannot be parsed or a column is missing.
    """
    log = logger.bind(component="dataset", subcomponent="loader", path=str(path))

    try:
        frame = pd.read_csv(path, dtype=str, keep_default_na=False)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        msg = f"Failed to read dataset {path}: {exc}"
        raise DatasetError(msg) from exc

    missing = [c for c in (designation_column, details_column) if c not in frame]
    if missing:
        msg = f"Dataset {path} is missing column(s): {', '.join(missing)}"
        raise DatasetError(msg)

    frame = frame[[designation_column, details_column]].apply(
        lambda column: column.str.strip()
    )
    usable = frame[(frame[designation_column] != "") & (frame[details_column] != "")]

    grouped: dict[str, list[str]] = {
        str(designation): group[details_column].tolist()
        for designation, group in usable.groupby(designation_column, sort=False)
    }

    log.info(
        "dataset_loaded",
        rows=len(frame),
        skipped=len(frame) - len(usable),
        designations=len(grouped),
    )
    return grouped
