"""Journey classification - pick an attribution model for a timeline."""

from __future__ import annotations

from leadpath.attribution.schema import AttributionModel, Touchpoint

# Journeys at least this long with mixed touchpoint types get W-shaped credit
W_SHAPED_MIN_TOUCHPOINTS = 5
U_SHAPED_MIN_TOUCHPOINTS = 3


def classify_journey(timeline: list[Touchpoint]) -> AttributionModel:
    """
    Select the attribution model that fits a journey's shape.

    Rules, first match wins:
    - 0 or 1 touchpoints: FIRST_TOUCH
    - 5+ touchpoints spanning 2+ touchpoint types: W_SHAPED
    - 3+ touchpoints: U_SHAPED
    - 2 touchpoints: LINEAR

    Only the touchpoint count and type mix are consulted, never the deal.
    LAST_TOUCH and MULTI_TOUCH are never selected here; callers request them
    explicitly.
    """
    count = len(timeline)

    if count <= 1:
        return AttributionModel.FIRST_TOUCH

    distinct_types = len({t.type for t in timeline})
    if count >= W_SHAPED_MIN_TOUCHPOINTS and distinct_types >= 2:
        return AttributionModel.W_SHAPED

    if count >= U_SHAPED_MIN_TOUCHPOINTS:
        return AttributionModel.U_SHAPED

    return AttributionModel.LINEAR
