"""
Attribution certainty - how far an attribution result can be trusted.

Certainty blends six independent factors. Each starts from a base of 0.70 and
gains bounded bonuses from the evidence available:

- data_completeness: identity fields and activity recency of the contact
- channel_diversity: distinct touchpoint types in the journey
- timeline_clarity: journey length and time span
- touchpoint_signal: high-signal meetings and form submissions
- cross_platform_confirmation: channel types confirming each other
- base_certainty: deal evidence and the richness of the selected model

The blend is a weighted mean capped at 0.98. Total certainty is never
reported, and an empty journey still produces a valid (baseline) score.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass
from datetime import timedelta

from leadpath.attribution.config import DEFAULT_FACTOR_WEIGHTS
from leadpath.attribution.schema import (
    AttributionModel,
    ChannelInfluence,
    Touchpoint,
    TouchpointType,
)
from leadpath.attribution.timeline import timeline_span
from leadpath.contacts import Contact, Deal

FACTOR_BASE = 0.70
DEFAULT_CERTAINTY_CAP = 0.98

# (threshold, bonus) pairs; every threshold passed adds its bonus
SPAN_BONUSES = (
    (timedelta(days=1), 0.05),
    (timedelta(days=7), 0.05),
    (timedelta(days=30), 0.05),
)

MODEL_BONUSES: dict[AttributionModel, float] = {
    AttributionModel.W_SHAPED: 0.05,
    AttributionModel.MULTI_TOUCH: 0.05,
    AttributionModel.U_SHAPED: 0.03,
}


@dataclass
class CertaintyFactors:
    """The six certainty factors, each in [0.70, 1.0]."""

    data_completeness: float = FACTOR_BASE
    channel_diversity: float = FACTOR_BASE
    timeline_clarity: float = FACTOR_BASE
    touchpoint_signal: float = FACTOR_BASE
    cross_platform_confirmation: float = FACTOR_BASE
    base_certainty: float = FACTOR_BASE

    def blend(self, weights: dict[str, float] | None = None) -> float:
        """Weighted mean of the factors. Factors missing from weights get 0."""
        weights = weights or DEFAULT_FACTOR_WEIGHTS
        values = asdict(self)
        total_weight = sum(weights.get(name, 0.0) for name in values)
        if total_weight <= 0:
            raise ValueError("Certainty factor weights must sum to a positive value")
        return sum(values[name] * weights.get(name, 0.0) for name in values) / total_weight

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def _data_completeness(contact: Contact) -> float:
    bonus = min(0.15, 0.03 * len(contact.present_identity_fields))
    if contact.last_activity_date:
        bonus += 0.05
    return FACTOR_BASE + bonus


def _channel_diversity(timeline: list[Touchpoint]) -> float:
    distinct_types = len({t.type for t in timeline})
    return FACTOR_BASE + min(0.30, 0.10 * distinct_types)


def _timeline_clarity(timeline: list[Touchpoint]) -> float:
    bonus = min(0.15, 0.01 * len(timeline))
    span = timeline_span(timeline)
    for threshold, span_bonus in SPAN_BONUSES:
        if span > threshold:
            bonus += span_bonus
    return FACTOR_BASE + bonus


def _touchpoint_signal(timeline: list[Touchpoint]) -> float:
    counts = Counter(t.type for t in timeline)
    meeting_bonus = min(0.15, 0.05 * counts[TouchpointType.MEETING])
    form_bonus = min(0.09, 0.03 * counts[TouchpointType.FORM_SUBMISSION])
    return FACTOR_BASE + meeting_bonus + form_bonus


def _cross_platform_confirmation(influence: ChannelInfluence) -> float:
    channels = influence.distinct_types
    bonus = 0.0
    if channels >= 2:
        bonus += 0.15
    if channels >= 3:
        bonus += 0.05
    return FACTOR_BASE + bonus


def _base_certainty(deals: list[Deal], model: AttributionModel) -> float:
    bonus = 0.0
    if deals:
        bonus += 0.10 + min(0.08, 0.02 * (len(deals) - 1))
    bonus += MODEL_BONUSES.get(model, 0.0)
    return FACTOR_BASE + bonus


def compute_certainty_factors(
    contact: Contact,
    timeline: list[Touchpoint],
    influence: ChannelInfluence,
    model: AttributionModel,
    deals: list[Deal],
) -> CertaintyFactors:
    """Evaluate each certainty factor for one attribution."""
    return CertaintyFactors(
        data_completeness=_data_completeness(contact),
        channel_diversity=_channel_diversity(timeline),
        timeline_clarity=_timeline_clarity(timeline),
        touchpoint_signal=_touchpoint_signal(timeline),
        cross_platform_confirmation=_cross_platform_confirmation(influence),
        base_certainty=_base_certainty(deals, model),
    )


def estimate_certainty(
    contact: Contact,
    timeline: list[Touchpoint],
    influence: ChannelInfluence,
    model: AttributionModel,
    deals: list[Deal],
    weights: dict[str, float] | None = None,
    cap: float = DEFAULT_CERTAINTY_CAP,
) -> float:
    """
    Certainty score in [0, cap] for an attribution.

    Args:
        contact: The attributed contact
        timeline: Touchpoints the attribution was computed from
        influence: Channel influence of that timeline
        model: Attribution model that was applied
        deals: The contact's deals
        weights: Per-factor weights for the blend (equal by default)
        cap: Upper bound of the score

    Returns:
        Certainty between 0 and cap
    """
    factors = compute_certainty_factors(contact, timeline, influence, model, deals)
    return max(0.0, min(cap, factors.blend(weights)))
