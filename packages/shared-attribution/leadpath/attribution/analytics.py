"""Aggregate analytics over per-contact attribution results."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from leadpath.attribution.schema import (
    SOURCE_FOR_TYPE,
    AttributionFailure,
    AttributionModel,
    AttributionResult,
    AttributionStats,
    BulkAttributionResult,
    TouchpointSource,
    TouchpointType,
)
from leadpath.contacts import IDENTITY_FIELDS

DEFAULT_HIGH_CERTAINTY_THRESHOLD = 0.9


def _ratio(part: float, whole: float) -> float:
    return part / whole if whole else 0.0


def _percent(part: float, whole: float) -> float:
    return round(_ratio(part, whole) * 100, 2)


def summarize_results(
    results: Iterable[AttributionResult],
    failures: Iterable[AttributionFailure] = (),
    sample_size: int = 0,
    high_certainty_threshold: float = DEFAULT_HIGH_CERTAINTY_THRESHOLD,
) -> BulkAttributionResult:
    """
    Fold per-contact results into bulk analytics.

    Args:
        results: Successful per-contact attributions
        failures: Contacts whose attribution failed; only listed, never counted
        sample_size: Number of contacts that were sampled
        high_certainty_threshold: Certainty at or above which a contact
            counts as high-certainty

    Returns:
        BulkAttributionResult with channel, model, touchpoint and deal stats
    """
    results = list(results)
    bulk = BulkAttributionResult(sample_size=sample_size, failures=list(failures))
    bulk.total_contacts = len(results)

    model_usage = {model.value: 0 for model in AttributionModel}
    channel_touchpoints: Counter[str] = Counter()
    channel_influence = {source.value: 0.0 for source in TouchpointSource}
    touchpoints_by_type = {t.value: 0 for t in TouchpointType}
    deals_by_status: Counter[str] = Counter()

    total_certainty = 0.0
    total_touchpoints = 0
    max_touchpoints = 0
    total_deals = 0
    attributed_deals = 0
    total_deal_value = 0.0
    coverage_sum = 0.0

    for result in results:
        contact = result.contact

        total_certainty += result.attribution_certainty
        if result.attribution_certainty >= high_certainty_threshold:
            bulk.high_certainty_contacts += 1

        if result.attribution_chains:
            bulk.contacts_with_deals += 1
        for chain in result.attribution_chains:
            model_usage[chain.attribution_model.value] += 1
            total_deals += 1
            total_deal_value += chain.deal_value
            deals_by_status[chain.deal_status] += 1
            if chain.is_attributed:
                attributed_deals += 1

        timeline = result.timeline
        total_touchpoints += len(timeline)
        max_touchpoints = max(max_touchpoints, len(timeline))
        for touchpoint in timeline:
            channel_touchpoints[touchpoint.source.value] += 1
            touchpoints_by_type[touchpoint.type.value] += 1
        if any(t.type == TouchpointType.MEETING for t in timeline):
            bulk.contacts_with_meetings += 1

        for touchpoint_type, stat in result.channel_influence.by_type().items():
            channel_influence[SOURCE_FOR_TYPE[touchpoint_type].value] += stat.strength

        if contact.is_multi_source:
            bulk.multi_source_contacts += 1
        coverage_sum += len(contact.present_identity_fields) / len(IDENTITY_FIELDS)

    contacts = bulk.total_contacts
    bulk.average_certainty = _ratio(total_certainty, contacts)
    bulk.high_certainty_rate = _ratio(bulk.high_certainty_contacts, contacts)
    bulk.field_coverage = _ratio(coverage_sum, contacts)
    bulk.model_usage = model_usage

    bulk.channel_stats = {
        source: {
            "touchpoints": channel_touchpoints[source],
            "percentage": _ratio(channel_touchpoints[source], total_touchpoints),
            "influence": influence,
        }
        for source, influence in channel_influence.items()
    }

    best_channel, best_influence = max(channel_influence.items(), key=lambda item: item[1])
    bulk.most_effective_channel = best_channel if best_influence > 0 else None

    bulk.touchpoint_stats = {
        "total": total_touchpoints,
        "average_per_contact": _ratio(total_touchpoints, contacts),
        "max": max_touchpoints,
        "by_type": touchpoints_by_type,
    }
    bulk.deal_stats = {
        "total_deals": total_deals,
        "attributed_deals": attributed_deals,
        "total_value": total_deal_value,
        "average_value": _ratio(total_deal_value, total_deals),
        "by_status": dict(deals_by_status),
    }

    return bulk


def project_stats(bulk: BulkAttributionResult) -> AttributionStats:
    """Project bulk analytics into dashboard percentages."""
    contacts = bulk.total_contacts
    deal_stats = bulk.deal_stats

    stats = {
        "total_contacts": contacts,
        "failed_contacts": bulk.failed_contacts,
        "contacts_with_deals": bulk.contacts_with_deals,
        "conversion_rate": _percent(bulk.contacts_with_deals, contacts),
        "multi_source_rate": _percent(bulk.multi_source_contacts, contacts),
        "deal_attribution_rate": _percent(
            deal_stats.get("attributed_deals", 0), deal_stats.get("total_deals", 0)
        ),
        "field_coverage": round(bulk.field_coverage * 100, 2),
        "high_certainty_rate": round(bulk.high_certainty_rate * 100, 2),
        "total_touchpoints": bulk.touchpoint_stats.get("total", 0),
        "most_effective_channel": bulk.most_effective_channel,
        "model_usage": dict(bulk.model_usage),
        "channel_breakdown": {
            source: channel["touchpoints"] for source, channel in bulk.channel_stats.items()
        },
    }

    return AttributionStats(
        attribution_accuracy=round(bulk.average_certainty * 100, 2),
        stats=stats,
    )
