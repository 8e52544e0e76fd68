"""Roadmap implementation scheduler.

Estimates durations from completed work, orders the backlog by priority and
assigns sequential start/finish dates.
"""

__version__ = "0.1.0"
