"""CLI commands for job description classification."""

import json
import logging
import sys
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import click
import structlog

from job_taxonomy.classification import (
    CategoryDiscoveryError,
    ClassificationMetrics,
    ClassificationReport,
    classify_designation,
)
from job_taxonomy.features.dataset import (
    DEFAULT_DESIGNATION_COLUMN,
    DEFAULT_DETAILS_COLUMN,
    DatasetError,
    load_grouped_descriptions,
)
from job_taxonomy.features.llm import (
    InvalidArgumentError,
    LlmAuthError,
    LlmClient,
    ModelSettings,
)
from job_taxonomy.features.llm.factory import create_llm_client
from job_taxonomy.features.sanitize import SanitizationRejectedError
from job_taxonomy.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
)
from job_taxonomy.settings import AppSettings, get_settings


logger = structlog.get_logger()


@dataclass
class RunOptions:
    """Options for the classify command, after merging the environment."""

    csv_path: Path
    designations: tuple[str, ...]
    designation_column: str
    details_column: str
    model_settings: ModelSettings
    max_retries: int
    top_k: int
    max_workers: int
    sample_size: int | None
    output: Path | None


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _resolve_options(  # noqa: PLR0913
    settings: AppSettings,
    csv_path: Path,
    designations: tuple[str, ...],
    designation_column: str,
    details_column: str,
    model: str | None,
    truncate_length: int | None,
    max_retries: int | None,
    top_k: int | None,
    max_workers: int | None,
    sample_size: int | None,
    output: Path | None,
) -> RunOptions:
    """Merge command-line values over environment settings.

    Exits with status 1 when a required value is missing or invalid.
    """
    resolved_model = model or settings.llm_model
    resolved_truncate = truncate_length or settings.truncate_length
    resolved_retries = max_retries if max_retries is not None else settings.max_retries
    resolved_top_k = top_k or settings.top_k

    missing = [
        name
        for name, value in (
            ("--model / JOB_TAXONOMY_MODEL", resolved_model),
            ("--truncate-length / JOB_TAXONOMY_TRUNCATE_LENGTH", resolved_truncate),
            ("--max-retries / JOB_TAXONOMY_MAX_RETRIES", resolved_retries),
            ("--top-k / JOB_TAXONOMY_TOP_K", resolved_top_k),
        )
        if value is None
    ]
    if missing:
        _fail(f"Missing configuration: {', '.join(missing)}")

    try:
        model_settings = settings.to_model_settings(model, truncate_length)
    except InvalidArgumentError as exc:
        _fail(str(exc))

    return RunOptions(
        csv_path=csv_path,
        designations=designations,
        designation_column=designation_column,
        details_column=details_column,
        model_settings=model_settings,
        max_retries=int(resolved_retries or 0),
        top_k=int(resolved_top_k or 0),
        max_workers=max_workers or settings.max_workers,
        sample_size=sample_size,
        output=output,
    )


def _select_groups(
    groups: dict[str, list[str]], designations: tuple[str, ...]
) -> dict[str, list[str]]:
    """Restrict groups to the requested designations, in request order."""
    if not designations:
        return groups
    unknown = [d for d in designations if d not in groups]
    if unknown:
        _fail(f"Designation(s) not found in dataset: {', '.join(unknown)}")
    return {d: groups[d] for d in designations}


def _classify_groups(
    client: LlmClient,
    options: RunOptions,
    groups: dict[str, list[str]],
    run_id: str,
) -> tuple[list[ClassificationReport], list[dict[str, str]]]:
    """Classify each designation, isolating per-designation failures."""
    reports: list[ClassificationReport] = []
    failures: list[dict[str, str]] = []
    log = logger.bind(component="cli", command="classify", run_id=run_id)

    for designation, descriptions in groups.items():
        bind_run_context(run_id, designation)
        try:
            reports.append(
                classify_designation(
                    client,
                    options.model_settings,
                    designation,
                    descriptions,
                    max_retries=options.max_retries,
                    k=options.top_k,
                    max_workers=options.max_workers,
                    sample_size=options.sample_size,
                )
            )
        except (CategoryDiscoveryError, SanitizationRejectedError) as exc:
            log.warning(
                "designation_failed",
                designation=designation,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            failures.append({"designation": designation, "error": str(exc)})

    clear_run_context()
    return reports, failures


@click.group()
def main() -> None:
    """Job description taxonomy classification."""


@main.command()
@click.argument(
    "csv_path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--designation",
    "designations",
    multiple=True,
    help="Designation to classify (repeatable). Defaults to all.",
)
@click.option(
    "--designation-column",
    default=DEFAULT_DESIGNATION_COLUMN,
    show_default=True,
    help="CSV column holding the designation.",
)
@click.option(
    "--details-column",
    default=DEFAULT_DETAILS_COLUMN,
    show_default=True,
    help="CSV column holding the job description text.",
)
@click.option("--model", default=None, help="Model name [env: JOB_TAXONOMY_MODEL].")
@click.option(
    "--truncate-length",
    type=click.IntRange(min=1),
    default=None,
    help="Character budget for prompt text [env: JOB_TAXONOMY_TRUNCATE_LENGTH].",
)
@click.option(
    "--max-retries",
    type=click.IntRange(min=0),
    default=None,
    help="Repair rounds per request [env: JOB_TAXONOMY_MAX_RETRIES].",
)
@click.option(
    "--top-k",
    type=click.IntRange(min=1),
    default=None,
    help="Descriptions kept per category [env: JOB_TAXONOMY_TOP_K].",
)
@click.option(
    "--max-workers",
    type=click.IntRange(min=1),
    default=None,
    help="Descriptions scored concurrently [env: JOB_TAXONOMY_MAX_WORKERS].",
)
@click.option(
    "--sample-size",
    type=click.IntRange(min=1),
    default=None,
    help="Descriptions merged into the category discovery prompt.",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the JSON report here instead of stdout.",
)
@click.option(
    "--json-logs/--console-logs",
    default=True,
    help="Log format (default: JSON).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def classify(  # noqa: PLR0913
    csv_path: Path,
    designations: tuple[str, ...],
    designation_column: str,
    details_column: str,
    model: str | None,
    truncate_length: int | None,
    max_retries: int | None,
    top_k: int | None,
    max_workers: int | None,
    sample_size: int | None,
    output: Path | None,
    json_logs: bool,
    verbose: bool,
) -> None:
    """Classify job descriptions in CSV_PATH and rank them per category."""
    configure_logging(
        level=logging.DEBUG if verbose else logging.INFO,
        output=sys.stderr,
        json_format=json_logs,
    )
    run_id = uuid.uuid4().hex[:12]
    log = logger.bind(component="cli", command="classify", run_id=run_id)

    settings = get_settings()
    options = _resolve_options(
        settings,
        csv_path,
        designations,
        designation_column,
        details_column,
        model,
        truncate_length,
        max_retries,
        top_k,
        max_workers,
        sample_size,
        output,
    )

    try:
        client = create_llm_client(
            options.model_settings,
            api_key=settings.gemini_api_key,
            min_request_interval=settings.min_request_interval,
        )
    except LlmAuthError as exc:
        _fail(str(exc))

    try:
        groups = load_grouped_descriptions(
            options.csv_path, options.designation_column, options.details_column
        )
    except DatasetError as exc:
        _fail(str(exc))

    groups = _select_groups(groups, options.designations)
    log.info("classify_started", designations=len(groups))

    reports, failures = _classify_groups(client, options, groups, run_id)

    payload = {
        "run_id": run_id,
        "model": options.model_settings.model_name,
        "reports": [report.to_json_dict() for report in reports],
        "failures": failures,
        "metrics": ClassificationMetrics.get_instance().to_dict(),
    }
    rendered = json.dumps(payload, indent=2, ensure_ascii=False)

    if options.output is None:
        click.echo(rendered)
    else:
        options.output.write_text(rendered + "\n", encoding="utf-8")

    log.info(
        "classify_complete",
        classified=len(reports),
        failed=len(failures),
        output=str(options.output) if options.output else "stdout",
    )


if __name__ == "__main__":
    main()
