"""
Touchpoint normalizers - transform raw platform records into Touchpoints.

Each normalizer handles a specific platform:
- MeetingNormalizer: Scheduler meetings (Calendly and similar)
- ActivityNormalizer: CRM activities (Close and similar)
- FormNormalizer: Form tool submissions (Typeform and similar)

TouchpointNormalizer runs all three for one contact.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import pandas as pd
from leadpath.attribution.exceptions import MalformedTouchpointError
from leadpath.attribution.schema import (
    Touchpoint,
    TouchpointSource,
    TouchpointType,
)
from leadpath.contacts import TouchpointSources, parse_timestamp

logger = logging.getLogger(__name__)

RawRecords = pd.DataFrame | list[dict[str, Any]] | None


def _is_missing(value: Any) -> bool:
    """Return True for None, NaN and NaT."""
    if value is None:
        return True
    return bool(pd.api.types.is_scalar(value) and pd.isna(value))


def _clean_id(value: Any) -> str:
    """Render a record id as string, undoing pandas float upcasting."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


class RecordNormalizer(ABC):
    """Base class for per-platform touchpoint normalizers."""

    touchpoint_type: TouchpointType
    source: TouchpointSource
    id_prefix: str

    def __init__(self, field_map: dict[str, str] | None = None):
        """
        Initialize normalizer.

        Args:
            field_map: Mapping of source fields to touchpoint fields
                ("id", "reference", "timestamp"). When several source fields
                map to the same target, the first one present wins.
        """
        self.field_map = field_map or self._default_field_map()

    @abstractmethod
    def _default_field_map(self) -> dict[str, str]:
        """Default field mappings for this platform."""
        pass  # pragma: no cover

    def _to_dataframe(self, data: RawRecords) -> pd.DataFrame:
        """Convert input to DataFrame."""
        if data is None:
            return pd.DataFrame()
        if isinstance(data, pd.DataFrame):
            return data
        return pd.DataFrame(data)

    def _map_fields(self, row_dict: dict[str, Any]) -> dict[str, Any]:
        mapped: dict[str, Any] = {}
        for source_field, target_field in self.field_map.items():
            if target_field in mapped:
                continue
            value = row_dict.get(source_field)
            if not _is_missing(value):
                mapped[target_field] = value
        return mapped

    def to_touchpoint(self, row_dict: dict[str, Any], position: int) -> Touchpoint:
        """Build a touchpoint from one raw record.

        Args:
            row_dict: The raw record.
            position: Index of the record in its batch, used as id when the
                record carries none.

        Raises:
            MalformedTouchpointError: If the record has no resolvable timestamp.
        """
        mapped = self._map_fields(row_dict)

        timestamp = parse_timestamp(mapped.get("timestamp"))
        if timestamp is None:
            raise MalformedTouchpointError(
                f"{self.touchpoint_type.value} record at position {position} "
                f"has no resolvable timestamp: {mapped.get('timestamp')!r}"
            )

        record_id = _clean_id(mapped["id"]) if "id" in mapped else str(position)
        reference = _clean_id(mapped["reference"]) if "reference" in mapped else None

        return Touchpoint(
            id=f"{self.id_prefix}_{record_id}",
            type=self.touchpoint_type,
            source=self.source,
            timestamp=timestamp,
            reference=reference,
        )

    def normalize(self, data: RawRecords) -> list[Touchpoint]:
        """Normalize raw records, dropping those without a timestamp."""
        df = self._to_dataframe(data)
        touchpoints = []

        for position, (_, row) in enumerate(df.iterrows()):
            try:
                touchpoints.append(self.to_touchpoint(row.to_dict(), position))
            except MalformedTouchpointError as e:
                logger.debug(f"Dropping malformed touchpoint: {e}")

        return touchpoints


class MeetingNormalizer(RecordNormalizer):
    """
    Normalize scheduler meetings.

    The touchpoint timestamp is the meeting's scheduled start time, not the
    time it was booked.

    Example:
        normalizer = MeetingNormalizer()
        touchpoints = normalizer.normalize([
            {"id": 42, "calendly_event_id": "evt_1", "start_time": "2025-01-10T15:00:00Z"},
        ])
        touchpoints[0].id  # "meeting_42"
    """

    touchpoint_type = TouchpointType.MEETING
    source = TouchpointSource.SCHEDULER
    id_prefix = "meeting"

    def _default_field_map(self) -> dict[str, str]:
        return {
            # IDs
            "id": "id",
            "meeting_id": "id",
            # Reference to the scheduler event
            "calendly_event_id": "reference",
            "event_id": "reference",
            "uri": "reference",
            # Scheduled start
            "start_time": "timestamp",
            "scheduled_time": "timestamp",
            "startTime": "timestamp",
            "scheduledTime": "timestamp",
        }


class ActivityNormalizer(RecordNormalizer):
    """Normalize CRM activities (calls, emails, notes, ...)."""

    touchpoint_type = TouchpointType.ACTIVITY
    source = TouchpointSource.CRM
    id_prefix = "activity"

    def _default_field_map(self) -> dict[str, str]:
        return {
            # IDs
            "id": "id",
            "activity_id": "id",
            # Reference to the CRM record
            "close_id": "reference",
            "source_id": "reference",
            "sourceId": "reference",
            # Occurrence date
            "date": "timestamp",
            "occurred_at": "timestamp",
            "activity_at": "timestamp",
            "activity_date": "timestamp",
        }


class FormNormalizer(RecordNormalizer):
    """Normalize form tool submissions."""

    touchpoint_type = TouchpointType.FORM_SUBMISSION
    source = TouchpointSource.FORM_TOOL
    id_prefix = "form"

    def _default_field_map(self) -> dict[str, str]:
        return {
            # IDs
            "id": "id",
            "form_id": "id",
            # Reference to the form response
            "typeform_response_id": "reference",
            "response_id": "reference",
            "token": "reference",
            # Submission time
            "submitted_at": "timestamp",
            "submittedAt": "timestamp",
            "submission_date": "timestamp",
        }


class TouchpointNormalizer:
    """
    Normalize all raw records of one contact into touchpoints.

    Output keeps meetings first, then activities, then forms, each in input
    order. No deduplication is performed.

    Example:
        normalizer = TouchpointNormalizer()
        touchpoints = normalizer.normalize(meetings, activities, forms)
    """

    def __init__(
        self,
        meetings: RecordNormalizer | None = None,
        activities: RecordNormalizer | None = None,
        forms: RecordNormalizer | None = None,
    ):
        self.meetings = meetings or MeetingNormalizer()
        self.activities = activities or ActivityNormalizer()
        self.forms = forms or FormNormalizer()

    def normalize(
        self,
        raw_meetings: RawRecords = None,
        raw_activities: RawRecords = None,
        raw_forms: RawRecords = None,
    ) -> list[Touchpoint]:
        """Normalize meetings, activities and forms to touchpoints."""
        return [
            *self.meetings.normalize(raw_meetings),
            *self.activities.normalize(raw_activities),
            *self.forms.normalize(raw_forms),
        ]

    def normalize_sources(self, sources: TouchpointSources) -> list[Touchpoint]:
        """Normalize a contact store bundle."""
        return self.normalize(sources.meetings, sources.activities, sources.forms)
