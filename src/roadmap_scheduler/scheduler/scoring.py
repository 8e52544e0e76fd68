"""Priority scoring for backlog items."""

from collections import deque
from collections.abc import Iterable

from roadmap_scheduler.models import Scope, WorkItem, WorkType, milestone_number

from .core import Confidence

SCOPE_BASE_WEIGHT = 100
SCOPE_WEIGHT_STEP = 8
MILESTONE_BASE_WEIGHT = 120
MILESTONE_WEIGHT_STEP = 10

SCOPE_WEIGHTS: dict[Scope, int] = {
    scope: SCOPE_BASE_WEIGHT - index * SCOPE_WEIGHT_STEP for index, scope in enumerate(Scope)
}

TYPE_WEIGHTS: dict[WorkType, int] = {
    WorkType.FEATURE: 50,
    WorkType.INFRA: 40,
    WorkType.SECURITY: 45,
    WorkType.ENHANCEMENT: 30,
    WorkType.SPIKE: 25,
    WorkType.REFACTOR: 20,
    WorkType.DOCS: 10,
    WorkType.TEST: 10,
}


def scope_weight(scope: Scope | None) -> int:
    return SCOPE_WEIGHTS[scope] if scope is not None else 0


def type_weight(work_type: WorkType | None) -> int:
    return TYPE_WEIGHTS[work_type] if work_type is not None else 0


def milestone_weight(milestone: str | None) -> int:
    """M0=120, M1=110, ...; missing or unparsable tags weigh 0."""
    number = milestone_number(milestone)
    if number is None:
        return 0
    return MILESTONE_BASE_WEIGHT - number * MILESTONE_WEIGHT_STEP


def score(item: WorkItem) -> int:
    """Priority score: scope + type + milestone weight."""
    return scope_weight(item.scope) + type_weight(item.work_type) + milestone_weight(item.milestone)


def rank_items(items: Iterable[WorkItem]) -> list[WorkItem]:
    """Sort items for full reordering: score descending, then the tie-break.

    Two equal-score items that both have a recorded order keep it; any other
    pair goes by id. Within a run of equal scores the ordered items (by order)
    and the unordered items (by id) are merged, so an unordered item lands
    before the next ordered item with a larger id.
    """
    by_score: dict[int, list[WorkItem]] = {}
    for item in items:
        by_score.setdefault(score(item), []).append(item)

    ranked: list[WorkItem] = []
    for value in sorted(by_score, reverse=True):
        ranked.extend(_merge_ties(by_score[value]))
    return ranked


def _merge_ties(items: list[WorkItem]) -> list[WorkItem]:
    ordered = deque(
        sorted(
            (item for item in items if item.order is not None),
            key=lambda item: (item.order, item.id),
        )
    )
    unordered = deque(
        sorted((item for item in items if item.order is None), key=lambda item: item.id)
    )

    merged: list[WorkItem] = []
    while ordered and unordered:
        if unordered[0].id < ordered[0].id:
            merged.append(unordered.popleft())
        else:
            merged.append(ordered.popleft())
    merged.extend(ordered)
    merged.extend(unordered)
    return merged


def classification_confidence(item: WorkItem) -> Confidence:
    """How fully an item is classified, for reporting ordering decisions.

    High: scope, type and milestone. Medium: scope plus one of the others.
    Low: anything less.
    """
    has_scope = item.scope is not None
    has_type = item.work_type is not None
    has_milestone = bool(item.milestone)

    if has_scope and has_type and has_milestone:
        return Confidence.HIGH
    if has_scope and (has_type or has_milestone):
        return Confidence.MEDIUM
    return Confidence.LOW
