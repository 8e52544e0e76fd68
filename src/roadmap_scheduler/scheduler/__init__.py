"""Scheduler package - backlog ordering and single-resource date assignment.

Main entry points:
- RoadmapService: High-level service over one backlog snapshot
- OrderingPlanner: Place a target item and compute minimal position moves
- SequentialDateAssigner: Forward pass assigning start/finish windows
- DurationEstimator: Tiered estimates from completed work
"""

# Core dataclasses
from .core import (
    Confidence,
    DurationEstimate,
    EstimateBasis,
    HistoricalSample,
    OrderChange,
    PlacementStrategy,
    ScheduleChange,
    ScheduleReason,
    apply_order_changes,
    apply_schedule_changes,
)

# Date assignment
from .dates import SequentialDateAssigner, assign_dates

# Estimation
from .estimation import (
    DEFAULT_DURATION_DAYS,
    DurationEstimator,
    build_historical_samples,
    estimate_duration,
    median,
)

# Integrity
from .integrity import IntegrityReport, PositionMismatch, check_integrity

# Ordering
from .ordering import OrderingPlan, OrderingPlanner, PlanEntry, plan_order

# Protocols
from .protocols import ChangeSink, SnapshotProvider

# Scoring
from .scoring import classification_confidence, rank_items, score

# High-level service
from .service import RoadmapService, RunResult

__all__ = [
    # Core dataclasses
    "Confidence",
    "DurationEstimate",
    "EstimateBasis",
    "HistoricalSample",
    "OrderChange",
    "PlacementStrategy",
    "ScheduleChange",
    "ScheduleReason",
    "apply_order_changes",
    "apply_schedule_changes",
    # Date assignment
    "SequentialDateAssigner",
    "assign_dates",
    # Estimation
    "DEFAULT_DURATION_DAYS",
    "DurationEstimator",
    "build_historical_samples",
    "estimate_duration",
    "median",
    # Integrity
    "IntegrityReport",
    "PositionMismatch",
    "check_integrity",
    # Ordering
    "OrderingPlan",
    "OrderingPlanner",
    "PlanEntry",
    "plan_order",
    # Protocols
    "ChangeSink",
    "SnapshotProvider",
    # Scoring
    "classification_confidence",
    "rank_items",
    "score",
    # High-level service
    "RoadmapService",
    "RunResult",
]
