"""Duration estimation from historical completed work.

Closed items are turned into duration samples keyed by (scope, type). An
estimate for a key walks a fixed tier ladder - exact key, scope only, global -
and falls back to a default when no tier has enough samples.
"""

from collections.abc import Iterable
from datetime import timedelta

from roadmap_scheduler.logger import get_logger
from roadmap_scheduler.models import Scope, WorkItem, WorkType

from .core import DurationEstimate, EstimateBasis, HistoricalSample, inclusive_days

logger = get_logger()

DEFAULT_DURATION_DAYS = 2

# Minimum sample counts for each tier
MIN_EXACT_KEY_SAMPLES = 5
MIN_SCOPE_SAMPLES = 3
MIN_GLOBAL_SAMPLES = 10

def median(values: list[float] | list[int]) -> float:
    """Standard median; the mean of the two middle values for even counts.

    Returns 0.0 for an empty list.
    """
    if not values:
        return 0.0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return float(ordered[mid])
    return (ordered[mid - 1] + ordered[mid]) / 2


def sample_from_item(item: WorkItem) -> HistoricalSample | None:
    """Derive a duration sample from a closed item, if it has the data.

    Uses the inclusive start..finish span when both dates are recorded,
    otherwise the whole days elapsed between creation and closure.
    """
    if not item.is_closed:
        return None

    if item.start is not None and item.finish is not None:
        duration = inclusive_days(item.start, item.finish)
    elif item.created_at is not None and item.closed_at is not None:
        elapsed = (item.closed_at - item.created_at) / timedelta(days=1)
        duration = max(1, int(elapsed + 0.5))
    else:
        return None

    return HistoricalSample(scope=item.scope, work_type=item.work_type, duration_days=duration)


def build_historical_samples(items: Iterable[WorkItem]) -> list[HistoricalSample]:
    """Collect samples from every closed item that has duration data."""
    samples: list[HistoricalSample] = []
    for item in items:
        sample = sample_from_item(item)
        if sample is not None:
            samples.append(sample)
    return samples


class DurationEstimator:
    """Tiered duration estimates over a fixed set of historical samples.

    The sample groupings are built once, so a single estimator can serve
    every item in a scheduling pass. Unclassified samples only count towards
    the global tier, and an unclassified key skips the tiers it cannot match.
    """

    def __init__(
        self,
        samples: list[HistoricalSample],
        fallback_days: float = DEFAULT_DURATION_DAYS,
    ):
        self.samples = list(samples)
        self.fallback_days = fallback_days

        self._by_key: dict[tuple[Scope, WorkType], list[int]] = {}
        self._by_scope: dict[Scope, list[int]] = {}
        self._all: list[int] = []
        for sample in self.samples:
            if sample.scope is not None:
                self._by_scope.setdefault(sample.scope, []).append(sample.duration_days)
                if sample.work_type is not None:
                    key = (sample.scope, sample.work_type)
                    self._by_key.setdefault(key, []).append(sample.duration_days)
            self._all.append(sample.duration_days)

    @classmethod
    def from_items(
        cls, items: Iterable[WorkItem], fallback_days: float = DEFAULT_DURATION_DAYS
    ) -> "DurationEstimator":
        """Build an estimator from the closed items of a snapshot."""
        return cls(build_historical_samples(items), fallback_days)

    def estimate(self, scope: Scope | None, work_type: WorkType | None) -> DurationEstimate:
        """Estimate the duration for a (scope, type) classification."""
        exact: list[int] = []
        scoped: list[int] = []
        if scope is not None:
            scoped = self._by_scope.get(scope, [])
            if work_type is not None:
                exact = self._by_key.get((scope, work_type), [])
        everything = self._all

        exact_median = median(exact) if exact else None
        scope_median = median(scoped) if scoped else None
        global_median = median(everything) if everything else None

        if len(exact) >= MIN_EXACT_KEY_SAMPLES and exact_median is not None:
            duration, basis, size = exact_median, EstimateBasis.SCOPE_TYPE, len(exact)
        elif len(scoped) >= MIN_SCOPE_SAMPLES and scope_median is not None:
            duration, basis, size = scope_median, EstimateBasis.SCOPE, len(scoped)
        elif len(everything) >= MIN_GLOBAL_SAMPLES and global_median is not None:
            duration, basis, size = global_median, EstimateBasis.GLOBAL, len(everything)
        else:
            duration, basis, size = float(self.fallback_days), EstimateBasis.FALLBACK, 0

        logger.debug(
            f"    Estimate {_key_str(scope, work_type)}: {duration}d via {basis.value} "
            f"(exact={len(exact)}, scope={len(scoped)}, global={len(everything)})"
        )

        return DurationEstimate(
            duration_days=duration,
            basis=basis,
            sample_size=size,
            exact_key_sample_count=len(exact),
            scope_sample_count=len(scoped),
            global_sample_count=len(everything),
            exact_key_median=exact_median,
            scope_median=scope_median,
            global_median=global_median,
        )

    def estimate_item(self, item: WorkItem) -> DurationEstimate:
        """Estimate the duration for an item's classification."""
        return self.estimate(item.scope, item.work_type)


def estimate_duration(
    samples: list[HistoricalSample],
    scope: Scope | None,
    work_type: WorkType | None,
    fallback_days: float = DEFAULT_DURATION_DAYS,
) -> DurationEstimate:
    """One-shot estimate over a sample list."""
    return DurationEstimator(samples, fallback_days).estimate(scope, work_type)


def _key_str(scope: Scope | None, work_type: WorkType | None) -> str:
    scope_str = scope.value if scope else "-"
    type_str = work_type.value if work_type else "-"
    return f"{scope_str}|{type_str}"
