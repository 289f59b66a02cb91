"""Per-description relevance scoring against a fixed category set."""

import threading
from collections.abc import Iterable, Sequence
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum

import structlog

from job_taxonomy.classification.metrics import ClassificationMetrics
from job_taxonomy.classification.models import (
    ScoredDescription,
    ScoredEntry,
    ScoringStats,
)
from job_taxonomy.features.llm.errors import InvalidArgumentError
from job_taxonomy.features.llm.models import ModelSettings
from job_taxonomy.features.llm.parser import parse_category_map
from job_taxonomy.features.llm.prompts import (
    build_category_map_json,
    build_relevance_prompt,
)
from job_taxonomy.features.llm.protocols import LlmClient
from job_taxonomy.features.llm.retry import invoke_and_parse
from job_taxonomy.features.sanitize import SanitizedString


logger = structlog.get_logger()

_CANCEL_POLL_SECONDS = 0.1


class ItemStatus(Enum):
    """How a single description left the scorer."""

    SCORED = "scored"
    REJECTED = "rejected"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class _ItemResult:
    index: int
    status: ItemStatus
    scored: ScoredDescription | None = None
    attempts: int = 0


class RelevanceScorer:
    """Scores job descriptions against a category set, one retry loop each.

    Descriptions that are rejected by sanitization or exhaust their retry
    budget are dropped from the output; the batch always completes.
    """

    def __init__(
        self,
        client: LlmClient,
        settings: ModelSettings,
        max_retries: int,
        max_workers: int = 1,
    ) -> None:
        """Initialize the scorer.

        Args:
            client: Model client.
            settings: Model settings.
            max_retries: Repair rounds per description.
            max_workers: Descriptions scored concurrently; 1 is sequential.

        Raises:
            InvalidArgumentError: If a count is out of range.
        """
        if isinstance(max_retries, bool) or max_retries < 0:
            msg = f"max_retries must be a non-negative integer, got {max_retries}"
            raise InvalidArgumentError(msg)
        if max_workers < 1:
            msg = f"max_workers must be at least 1, got {max_workers}"
            raise InvalidArgumentError(msg)

        self._client = client
        self._settings = settings
        self._max_retries = max_retries
        self._max_workers = max_workers
        self._stats = ScoringStats()
        self._metrics = ClassificationMetrics.get_instance()
        self._log = logger.bind(component="classification", subcomponent="scorer")

    @property
    def stats(self) -> ScoringStats:
        """Counters from the most recent ``score_all`` call."""
        return self._stats

    def score_all(
        self,
        descriptions: Sequence[str],
        category_map: Iterable[str],
        cancel_event: threading.Event | None = None,
    ) -> list[ScoredDescription]:
        """Score every description against the categories.

        Args:
            descriptions: Job description texts.
            category_map: Known categories; a mapping contributes its keys.
            cancel_event: When set, unstarted descriptions are abandoned and
                the results collected so far are returned.

        Returns:
            One score map per surviving description, in input order.

        Raises:
            InvalidArgumentError: If the category set is empty.
        """
        categories = list(dict.fromkeys(category_map))
        if not categories:
            msg = "category_map must contain at least one category"
            raise InvalidArgumentError(msg)

        self._stats = ScoringStats(submitted=len(descriptions))
        category_map_json = build_category_map_json(categories)
        known = frozenset(categories)

        self._log.info(
            "scoring_started",
            descriptions=len(descriptions),
            categories=len(categories),
            max_workers=self._max_workers,
        )

        if self._max_workers <= 1:
            item_results = self._run_sequential(
                descriptions, known, category_map_json, cancel_event
            )
        else:
            item_results = self._run_parallel(
                descriptions, known, category_map_json, cancel_event
            )

        scored: list[ScoredDescription] = []
        for item in sorted(item_results, key=lambda r: r.index):
            self._record(item)
            if item.scored is not None:
                scored.append(item.scored)

        self._stats.cancelled = len(descriptions) - len(item_results)

        self._log.info(
            "scoring_complete",
            scored=self._stats.scored,
            dropped=self._stats.dropped,
            model_calls=self._stats.model_calls,
        )
        return scored

    def _run_sequential(
        self,
        descriptions: Sequence[str],
        known: frozenset[str],
        category_map_json: str,
        cancel_event: threading.Event | None,
    ) -> list[_ItemResult]:
        results: list[_ItemResult] = []
        for index, description in enumerate(descriptions):
            if cancel_event is not None and cancel_event.is_set():
                self._log.warning("scoring_cancelled", completed=len(results))
                break
            results.append(
                self._score_one(index, description, known, category_map_json)
            )
        return results

    def _run_parallel(
        self,
        descriptions: Sequence[str],
        known: frozenset[str],
        category_map_json: str,
        cancel_event: threading.Event | None,
    ) -> list[_ItemResult]:
        results: list[_ItemResult] = []
        executor = ThreadPoolExecutor(max_workers=self._max_workers)
        try:
            pending: set[Future[_ItemResult]] = {
                executor.submit(
                    self._score_one, index, description, known, category_map_json
                )
                for index, description in enumerate(descriptions)
            }
            while pending:
                if cancel_event is not None and cancel_event.is_set():
                    self._log.warning(
                        "scoring_cancelled",
                        completed=len(results),
                        abandoned=len(pending),
                    )
                    break
                done, pending = wait(
                    pending,
                    timeout=_CANCEL_POLL_SECONDS,
                    return_when=FIRST_COMPLETED,
                )
                results.extend(future.result() for future in done)
        finally:
            # In-flight calls are abandoned, not awaited.
            executor.shutdown(wait=False, cancel_futures=True)
        return results

    def _score_one(
        self,
        index: int,
        description: str,
        known: frozenset[str],
        category_map_json: str,
    ) -> _ItemResult:
        """Score one description. Safe to run on a worker thread."""
        sanitized = SanitizedString.try_create(description)
        if sanitized is None:
            return _ItemResult(index=index, status=ItemStatus.REJECTED)

        truncated = sanitized.truncate(self._settings.truncate_length)
        prompt = SanitizedString.try_create(
            build_relevance_prompt(
                truncated, category_map_json, self._settings.truncate_length
            )
        )
        if prompt is None:
            return _ItemResult(index=index, status=ItemStatus.REJECTED)

        outcome = invoke_and_parse(
            self._client,
            self._settings,
            prompt,
            lambda text: parse_category_map(text, known),
            self._max_retries,
        )
        if outcome.value is None or not outcome.succeeded:
            return _ItemResult(
                index=index,
                status=ItemStatus.EXHAUSTED,
                attempts=outcome.attempts,
            )

        scored = {
            category: ScoredEntry(score, description)
            for category, score in outcome.value.items()
        }
        return _ItemResult(
            index=index,
            status=ItemStatus.SCORED,
            scored=scored,
            attempts=outcome.attempts,
        )

    def _record(self, item: _ItemResult) -> None:
        """Fold one item into stats and metrics (caller's thread only)."""
        self._stats.model_calls += item.attempts
        if item.status == ItemStatus.REJECTED:
            self._stats.rejected += 1
            self._metrics.record_rejection()
            self._log.info("description_dropped", index=item.index, reason="rejected")
            return

        self._metrics.record_run(item.attempts, item.status == ItemStatus.SCORED)
        if item.status == ItemStatus.EXHAUSTED:
            self._stats.exhausted += 1
            self._log.info(
                "description_dropped",
                index=item.index,
                reason="exhausted",
                attempts=item.attempts,
            )
        else:
            self._stats.scored += 1
            self._metrics.record_scored()


def score_all(
    client: LlmClient,
    settings: ModelSettings,
    descriptions: Sequence[str],
    category_map: Iterable[str],
    max_retries: int,
    max_workers: int = 1,
) -> list[ScoredDescription]:
    """Score descriptions with a one-off ``RelevanceScorer``.

    Args:
        client: Model client.
        settings: Model settings.
        descriptions: Job description texts.
        category_map: Known categories; a mapping contributes its keys.
        max_retries: Repair rounds per description.
        max_workers: Descriptions scored concurrently.

    Returns:
        One score map per surviving description, in input order.
    """
    scorer = RelevanceScorer(client, settings, max_retries, max_workers)
    return scorer.score_all(descriptions, category_map)
