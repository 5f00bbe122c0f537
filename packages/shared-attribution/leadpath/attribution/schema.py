"""
Attribution schema - touchpoints, models and attribution results.

Touchpoints normalize interactions from the three source platforms:
- Scheduler meetings
- CRM activities
- Form tool submissions

The result types carry everything a dashboard needs to show how a deal was
reached and how much the attribution can be trusted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from leadpath.contacts import Contact, parse_timestamp


class TouchpointType(str, Enum):
    """Kind of customer interaction."""

    MEETING = "meeting"
    ACTIVITY = "activity"
    FORM_SUBMISSION = "form_submission"


class TouchpointSource(str, Enum):
    """Platform a touchpoint originated from."""

    CRM = "crm"
    SCHEDULER = "scheduler"
    FORM_TOOL = "form_tool"


# Each touchpoint type is produced by exactly one platform
SOURCE_FOR_TYPE: dict[TouchpointType, TouchpointSource] = {
    TouchpointType.MEETING: TouchpointSource.SCHEDULER,
    TouchpointType.ACTIVITY: TouchpointSource.CRM,
    TouchpointType.FORM_SUBMISSION: TouchpointSource.FORM_TOOL,
}


class AttributionModel(str, Enum):
    """Rule used to split deal credit across touchpoints."""

    FIRST_TOUCH = "first_touch"
    LAST_TOUCH = "last_touch"
    LINEAR = "linear"  # Equal credit to all touchpoints
    U_SHAPED = "u_shaped"  # 40% first, 40% last, 20% middle
    W_SHAPED = "w_shaped"  # 30% first, 30% middle, 30% last, 10% rest
    MULTI_TOUCH = "multi_touch"  # Type weight x time decay


@dataclass
class Touchpoint:
    """
    One normalized customer interaction.

    Example:
        touchpoint = Touchpoint(
            id="meeting_M-1",
            type=TouchpointType.MEETING,
            source=TouchpointSource.SCHEDULER,
            timestamp=datetime(2025, 1, 10, 15, 0, tzinfo=UTC),
            reference="evt_abc123",
        )
    """

    id: str
    type: TouchpointType
    source: TouchpointSource
    timestamp: datetime
    reference: str | None = None  # Pointer to the originating record

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "type": self.type.value,
            "source": self.source.value,
            "timestamp": self.timestamp.isoformat(),
            "reference": self.reference,
        }


@dataclass
class InfluenceStat:
    """Count and normalized strength of one touchpoint type."""

    count: int = 0
    strength: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"count": self.count, "strength": self.strength}


@dataclass
class ChannelInfluence:
    """Per-type influence of a timeline. Strengths sum to 1.0 unless empty."""

    meeting_influence: InfluenceStat = field(default_factory=InfluenceStat)
    form_influence: InfluenceStat = field(default_factory=InfluenceStat)
    activity_influence: InfluenceStat = field(default_factory=InfluenceStat)

    def by_type(self) -> dict[TouchpointType, InfluenceStat]:
        """Influence keyed by touchpoint type."""
        return {
            TouchpointType.MEETING: self.meeting_influence,
            TouchpointType.FORM_SUBMISSION: self.form_influence,
            TouchpointType.ACTIVITY: self.activity_influence,
        }

    @property
    def distinct_types(self) -> int:
        """Number of touchpoint types with at least one touchpoint."""
        return sum(1 for stat in self.by_type().values() if stat.count > 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "meeting_influence": self.meeting_influence.to_dict(),
            "form_influence": self.form_influence.to_dict(),
            "activity_influence": self.activity_influence.to_dict(),
        }


@dataclass
class ChannelShare:
    """Touchpoint count and share of one platform in a timeline."""

    count: int
    percentage: float  # Fraction of the timeline, 0.0 - 1.0

    def to_dict(self) -> dict[str, Any]:
        return {"count": self.count, "percentage": self.percentage}


@dataclass
class AttributionChain:
    """Attribution of one deal to the touchpoints that preceded it."""

    contact_id: str
    deal_id: str
    deal_value: float
    deal_status: str
    attribution_model: AttributionModel
    touchpoint_weights: dict[str, float] = field(default_factory=dict)
    significant_touchpoints: list[Touchpoint] = field(default_factory=list)
    channel_influence: ChannelInfluence = field(default_factory=ChannelInfluence)
    attribution_certainty: float = 0.0
    total_touchpoints: int = 0

    @property
    def is_attributed(self) -> bool:
        """Return True if at least one touchpoint received credit."""
        return bool(self.touchpoint_weights)

    def to_dict(self) -> dict[str, Any]:
        return {
            "contact_id": self.contact_id,
            "deal_id": self.deal_id,
            "deal_value": self.deal_value,
            "deal_status": self.deal_status,
            "attribution_model": self.attribution_model.value,
            "touchpoint_weights": dict(self.touchpoint_weights),
            "significant_touchpoints": [t.to_dict() for t in self.significant_touchpoints],
            "channel_influence": self.channel_influence.to_dict(),
            "attribution_certainty": self.attribution_certainty,
            "total_touchpoints": self.total_touchpoints,
        }


@dataclass
class AttributionResult:
    """Attribution of every deal of one contact."""

    contact: Contact
    timeline: list[Touchpoint]
    attribution_model: AttributionModel
    channel_influence: ChannelInfluence
    channel_breakdown: dict[str, ChannelShare]
    attribution_chains: list[AttributionChain] = field(default_factory=list)
    attribution_certainty: float = 0.0

    @property
    def first_touch(self) -> Touchpoint | None:
        """Earliest touchpoint of the contact, if any."""
        return self.timeline[0] if self.timeline else None

    @property
    def last_touch(self) -> Touchpoint | None:
        """Latest touchpoint of the contact, if any."""
        return self.timeline[-1] if self.timeline else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "contact": self.contact.to_dict(),
            "timeline": [t.to_dict() for t in self.timeline],
            "first_touch": self.first_touch.to_dict() if self.first_touch else None,
            "last_touch": self.last_touch.to_dict() if self.last_touch else None,
            "attribution_model": self.attribution_model.value,
            "channel_influence": self.channel_influence.to_dict(),
            "channel_breakdown": {k: v.to_dict() for k, v in self.channel_breakdown.items()},
            "attribution_chains": [c.to_dict() for c in self.attribution_chains],
            "attribution_certainty": self.attribution_certainty,
        }


@dataclass
class AttributionFailure:
    """A contact whose attribution failed during a bulk run."""

    contact_id: str
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"contact_id": self.contact_id, "error": self.error}


@dataclass
class BulkAttributionResult:
    """Aggregate analytics over a sample of contacts.

    Failed contacts are listed in ``failures`` and excluded from every other
    figure. Rates are fractions (0.0 - 1.0).
    """

    sample_size: int
    total_contacts: int = 0
    failures: list[AttributionFailure] = field(default_factory=list)

    contacts_with_deals: int = 0
    contacts_with_meetings: int = 0
    multi_source_contacts: int = 0

    average_certainty: float = 0.0
    high_certainty_contacts: int = 0
    high_certainty_rate: float = 0.0

    channel_stats: dict[str, dict[str, float]] = field(default_factory=dict)
    model_usage: dict[str, int] = field(default_factory=dict)
    touchpoint_stats: dict[str, Any] = field(default_factory=dict)
    deal_stats: dict[str, Any] = field(default_factory=dict)

    most_effective_channel: str | None = None
    field_coverage: float = 0.0

    @property
    def failed_contacts(self) -> int:
        return len(self.failures)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sample_size": self.sample_size,
            "total_contacts": self.total_contacts,
            "failed_contacts": self.failed_contacts,
            "failures": [f.to_dict() for f in self.failures],
            "contacts_with_deals": self.contacts_with_deals,
            "contacts_with_meetings": self.contacts_with_meetings,
            "multi_source_contacts": self.multi_source_contacts,
            "average_certainty": self.average_certainty,
            "high_certainty_contacts": self.high_certainty_contacts,
            "high_certainty_rate": self.high_certainty_rate,
            "channel_stats": self.channel_stats,
            "model_usage": self.model_usage,
            "touchpoint_stats": self.touchpoint_stats,
            "deal_stats": self.deal_stats,
            "most_effective_channel": self.most_effective_channel,
            "field_coverage": self.field_coverage,
        }


@dataclass
class AttributionStats:
    """Dashboard-ready projection of a bulk run. Rates are percentages."""

    attribution_accuracy: float
    stats: dict[str, Any] = field(default_factory=dict)
    timed_out: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "attribution_accuracy": self.attribution_accuracy,
            "stats": self.stats,
            "timed_out": self.timed_out,
        }


@dataclass
class DateRange:
    """Inclusive time window. Either bound may be open (None)."""

    start: datetime | None = None
    end: datetime | None = None

    def __post_init__(self):
        # Naive bounds are treated as UTC, like every other timestamp
        if self.start is not None:
            self.start = parse_timestamp(self.start)
        if self.end is not None:
            self.end = parse_timestamp(self.end)
        if self.start and self.end and self.start > self.end:
            raise ValueError(f"start ({self.start}) must not be after end ({self.end})")

    def contains(self, moment: datetime) -> bool:
        """Return True if moment falls inside the window."""
        if self.start and moment < self.start:
            return False
        if self.end and moment > self.end:
            return False
        return True

    @property
    def cache_key(self) -> str:
        """Stable key for caching results per window."""
        if not self.start and not self.end:
            return "all-time"
        start = self.start.isoformat() if self.start else "open"
        end = self.end.isoformat() if self.end else "open"
        return f"{start}-{end}"
