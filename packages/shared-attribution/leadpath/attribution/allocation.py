"""
Credit allocation - split deal credit across a journey's touchpoints.

Supports the attribution models:
- First-touch: Credit to the earliest touchpoint
- Last-touch: Credit to the latest touchpoint
- Linear: Equal credit to all touchpoints
- U-shaped: 40% first, 40% last, 20% middle
- W-shaped: 30% first, 30% middle, 30% last, 10% to the rest
- Multi-touch: Type weight x linear time decay, normalized

Weights over a non-empty timeline always sum to 1.0.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta

from leadpath.attribution.schema import (
    AttributionModel,
    ChannelInfluence,
    ChannelShare,
    InfluenceStat,
    Touchpoint,
    TouchpointType,
)

# Multi-touch weight by touchpoint type
TYPE_WEIGHTS: dict[TouchpointType, float] = {
    TouchpointType.MEETING: 2.0,
    TouchpointType.FORM_SUBMISSION: 1.5,
    TouchpointType.ACTIVITY: 1.0,
}

# Channel influence multiplier by touchpoint type
INFLUENCE_MULTIPLIERS: dict[TouchpointType, float] = {
    TouchpointType.MEETING: 1.5,
    TouchpointType.FORM_SUBMISSION: 1.2,
    TouchpointType.ACTIVITY: 1.0,
}

DECAY_WINDOW = timedelta(days=90)
DECAY_FLOOR = 0.5  # Multiplier reached at DECAY_WINDOW and beyond

DEFAULT_MATERIALITY_THRESHOLD = 0.1


def allocate_credit(
    timeline: list[Touchpoint],
    model: AttributionModel,
    cutoff: datetime | None = None,
) -> dict[str, float]:
    """
    Distribute credit across touchpoints according to a model.

    Args:
        timeline: Chronologically ordered touchpoints
        model: Attribution model to apply
        cutoff: Conversion instant (deal creation) for time decay. Defaults
            to the latest touchpoint.

    Returns:
        Mapping of touchpoint id to weight; empty for an empty timeline
    """
    if not timeline:
        return {}

    if model == AttributionModel.FIRST_TOUCH:
        credits = _first_touch(timeline)
    elif model == AttributionModel.LAST_TOUCH:
        credits = _last_touch(timeline)
    elif model == AttributionModel.LINEAR:
        credits = _linear(timeline)
    elif model == AttributionModel.U_SHAPED:
        credits = _u_shaped(timeline)
    elif model == AttributionModel.W_SHAPED:
        credits = _w_shaped(timeline)
    elif model == AttributionModel.MULTI_TOUCH:
        credits = _multi_touch(timeline, cutoff)
    else:
        raise ValueError(f"Unsupported attribution model: {model}")

    # Accumulate so that duplicate ids still conserve total credit
    weights: dict[str, float] = {}
    for touchpoint, credit in zip(timeline, credits, strict=True):
        weights[touchpoint.id] = weights.get(touchpoint.id, 0.0) + credit
    return weights


def _first_touch(timeline: list[Touchpoint]) -> list[float]:
    return [1.0] + [0.0] * (len(timeline) - 1)


def _last_touch(timeline: list[Touchpoint]) -> list[float]:
    return [0.0] * (len(timeline) - 1) + [1.0]


def _linear(timeline: list[Touchpoint]) -> list[float]:
    return [1.0 / len(timeline)] * len(timeline)


def _u_shaped(timeline: list[Touchpoint]) -> list[float]:
    """
    40% to first, 40% to last, 20% distributed to middle.

    Journeys without middle touchpoints fall back to a 50/50 split.
    """
    n = len(timeline)
    if n <= 2:
        return _linear(timeline)

    middle = 0.2 / (n - 2)
    return [0.4] + [middle] * (n - 2) + [0.4]


def _w_shaped(timeline: list[Touchpoint]) -> list[float]:
    """
    30% to first, middle (index n // 2) and last; 10% to the rest.

    With exactly three touchpoints there is no rest, so the three anchors
    split credit evenly.
    """
    n = len(timeline)
    if n <= 3:
        return _linear(timeline)

    anchors = {0, n // 2, n - 1}
    rest = 0.1 / (n - len(anchors))
    return [0.3 if i in anchors else rest for i in range(n)]


def time_decay(moment: datetime, cutoff: datetime) -> float:
    """Linear decay from 1.0 at the cutoff to DECAY_FLOOR at 90+ days."""
    distance = abs(cutoff - moment) / DECAY_WINDOW
    return 1.0 - min(distance, 1.0) * (1.0 - DECAY_FLOOR)


def _multi_touch(timeline: list[Touchpoint], cutoff: datetime | None) -> list[float]:
    """Type weight times time decay, normalized to sum to 1.0."""
    if cutoff is None:
        cutoff = max(t.timestamp for t in timeline)

    raw = [TYPE_WEIGHTS[t.type] * time_decay(t.timestamp, cutoff) for t in timeline]
    total = sum(raw)
    return [w / total for w in raw]


def significant_touchpoints(
    timeline: list[Touchpoint],
    weights: dict[str, float],
    threshold: float = DEFAULT_MATERIALITY_THRESHOLD,
) -> list[Touchpoint]:
    """Touchpoints whose weight clears the materiality threshold."""
    return [t for t in timeline if weights.get(t.id, 0.0) >= threshold]


def channel_influence(timeline: list[Touchpoint]) -> ChannelInfluence:
    """
    Relative influence of meetings, forms and activities in a journey.

    Each type's share of the timeline is scaled by its influence multiplier
    and the three values are normalized to sum to 1.0.
    """
    if not timeline:
        return ChannelInfluence()

    counts = Counter(t.type for t in timeline)
    total = len(timeline)
    raw = {
        touchpoint_type: counts[touchpoint_type] * multiplier / total
        for touchpoint_type, multiplier in INFLUENCE_MULTIPLIERS.items()
    }
    raw_total = sum(raw.values())

    def stat(touchpoint_type: TouchpointType) -> InfluenceStat:
        return InfluenceStat(
            count=counts[touchpoint_type],
            strength=raw[touchpoint_type] / raw_total,
        )

    return ChannelInfluence(
        meeting_influence=stat(TouchpointType.MEETING),
        form_influence=stat(TouchpointType.FORM_SUBMISSION),
        activity_influence=stat(TouchpointType.ACTIVITY),
    )


def channel_breakdown(timeline: list[Touchpoint]) -> dict[str, ChannelShare]:
    """Touchpoint count and share per platform."""
    counts = Counter(t.source.value for t in timeline)
    total = len(timeline)
    return {
        source: ChannelShare(count=count, percentage=count / total)
        for source, count in counts.items()
    }
