"""Top-K aggregation of per-description score maps."""

from collections.abc import Iterable, Mapping

from job_taxonomy.classification.models import ScoredEntry, TopKResult
from job_taxonomy.features.llm.errors import InvalidArgumentError


def top_k(
    results: Iterable[Mapping[str, tuple[int, str]]],
    k: int,
) -> TopKResult:
    """Merge score maps into the K highest-scoring entries per category.

    Entries are grouped by category in first-encounter order and sorted
    by score descending. The sort is stable, so equal scores keep their
    encounter order. Categories with no entries are absent from the
    output.

    Args:
        results: One category -> (score, description) map per description.
        k: Entries to keep per category.

    Returns:
        Category -> entries, highest score first, at most ``k`` each.

    Raises:
        InvalidArgumentError: If ``k`` is not a positive integer.
    """
    if isinstance(k, bool) or k <= 0:
        msg = f"k must be a positive integer, got {k}"
        raise InvalidArgumentError(msg)

    grouped: dict[str, list[ScoredEntry]] = {}
    for scored in results:
        for category, (score, description) in scored.items():
            grouped.setdefault(category, []).append(ScoredEntry(score, description))

    return {
        category: sorted(entries, key=lambda entry: entry.score, reverse=True)[:k]
        for category, entries in grouped.items()
    }
