"""
Scheduler module.

Computes when the join loop should wake up next.
"""

from .wait_duration import (
    compute_wait_duration,
    parse_time_range,
    parse_time_of_day,
    split_time_range,
)

__all__ = [
    "compute_wait_duration",
    "parse_time_range",
    "parse_time_of_day",
    "split_time_range",
]
