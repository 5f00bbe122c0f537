"""
LeadPath Attribution - Multi-touch attribution of deals to touchpoints.

Provides:
- Touchpoint normalizers for scheduler meetings, CRM activities and forms
- Journey classification and credit allocation (first/last touch, linear,
  U-shaped, W-shaped, multi-touch with time decay)
- Channel influence and attribution certainty scoring
- Bulk analytics and dashboard statistics over contact samples

A deal only gives credit to touchpoints that happened at or before its
creation, and the weights of every attributed deal sum to 1.0.

Usage:
    from leadpath.attribution import AttributionOrchestrator
    from leadpath.contacts import InMemoryContactStore

    store = InMemoryContactStore.from_json_file("contacts.json")
    orchestrator = AttributionOrchestrator(store)

    result = orchestrator.attribute_contact("C-100")
    stats = orchestrator.get_attribution_stats()
"""

from leadpath.attribution.allocation import (
    allocate_credit,
    channel_breakdown,
    channel_influence,
    significant_touchpoints,
    time_decay,
)
from leadpath.attribution.analytics import project_stats, summarize_results
from leadpath.attribution.certainty import (
    CertaintyFactors,
    compute_certainty_factors,
    estimate_certainty,
)
from leadpath.attribution.classifier import classify_journey
from leadpath.attribution.config import AttributionConfig
from leadpath.attribution.exceptions import (
    AttributionError,
    ContactNotFoundError,
    MalformedTouchpointError,
)
from leadpath.attribution.normalizer import (
    ActivityNormalizer,
    FormNormalizer,
    MeetingNormalizer,
    RecordNormalizer,
    TouchpointNormalizer,
)
from leadpath.attribution.orchestrator import AttributionOrchestrator
from leadpath.attribution.schema import (
    AttributionChain,
    AttributionFailure,
    AttributionModel,
    AttributionResult,
    AttributionStats,
    BulkAttributionResult,
    ChannelInfluence,
    ChannelShare,
    DateRange,
    InfluenceStat,
    Touchpoint,
    TouchpointSource,
    TouchpointType,
)
from leadpath.attribution.timeline import build_timeline, prior_to_deal, timeline_span

__all__ = [
    # Schema
    "Touchpoint",
    "TouchpointType",
    "TouchpointSource",
    "AttributionModel",
    "AttributionChain",
    "AttributionResult",
    "AttributionFailure",
    "BulkAttributionResult",
    "AttributionStats",
    "ChannelInfluence",
    "ChannelShare",
    "InfluenceStat",
    "DateRange",
    # Normalizers
    "RecordNormalizer",
    "MeetingNormalizer",
    "ActivityNormalizer",
    "FormNormalizer",
    "TouchpointNormalizer",
    # Pipeline
    "build_timeline",
    "prior_to_deal",
    "timeline_span",
    "classify_journey",
    "allocate_credit",
    "time_decay",
    "significant_touchpoints",
    "channel_influence",
    "channel_breakdown",
    "CertaintyFactors",
    "compute_certainty_factors",
    "estimate_certainty",
    # Orchestration
    "AttributionOrchestrator",
    "AttributionConfig",
    "summarize_results",
    "project_stats",
    # Exceptions
    "AttributionError",
    "ContactNotFoundError",
    "MalformedTouchpointError",
]
