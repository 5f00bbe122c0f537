"""Timeline building - chronological order and per-deal partitioning."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta

from leadpath.attribution.schema import Touchpoint
from leadpath.contacts import Deal


def build_timeline(touchpoints: Iterable[Touchpoint]) -> list[Touchpoint]:
    """Order touchpoints by timestamp, oldest first.

    The sort is stable: touchpoints sharing a timestamp keep their input
    order, since upstream platforms do not guarantee sub-second ordering.
    """
    return sorted(touchpoints, key=lambda t: t.timestamp)


def prior_to_deal(timeline: list[Touchpoint], deal: Deal) -> list[Touchpoint]:
    """Touchpoints that happened at or before the deal was created.

    Args:
        timeline: Chronologically ordered touchpoints.
        deal: The deal whose created_at is the cutoff.

    Returns:
        Ordered subsequence eligible for credit. May be empty.
    """
    return [t for t in timeline if t.timestamp <= deal.created_at]


def timeline_span(timeline: list[Touchpoint]) -> timedelta:
    """Time between the earliest and latest touchpoint."""
    if len(timeline) < 2:
        return timedelta(0)
    timestamps = [t.timestamp for t in timeline]
    return max(timestamps) - min(timestamps)
