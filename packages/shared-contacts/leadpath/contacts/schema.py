"""
Contact records shared by the sync layer and the attribution engine.

A Contact is the deduplicated person identity that the sync layer maintains
across the three source platforms:
- CRM (activities and deals)
- Scheduler (meetings)
- Form tool (form submissions)

All timestamps are stored as timezone-aware datetime objects in UTC so that
records coming from different platforms can be ordered against each other.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time
from typing import Any

import pandas as pd

# Canonical platform names. These match TouchpointSource values.
PLATFORM_CRM = "crm"
PLATFORM_SCHEDULER = "scheduler"
PLATFORM_FORM_TOOL = "form_tool"

# Vendor names written into lead_source by the sync layer
PLATFORM_ALIASES: dict[str, str] = {
    PLATFORM_CRM: PLATFORM_CRM,
    "close": PLATFORM_CRM,
    PLATFORM_SCHEDULER: PLATFORM_SCHEDULER,
    "calendly": PLATFORM_SCHEDULER,
    PLATFORM_FORM_TOOL: PLATFORM_FORM_TOOL,
    "typeform": PLATFORM_FORM_TOOL,
}

# Identity fields that count towards data completeness
IDENTITY_FIELDS = ("name", "email", "phone", "company", "title")

_NON_NUMERIC = re.compile(r"[^0-9.\-]+")


def parse_timestamp(value: Any) -> datetime | None:
    """Resolve a raw timestamp value to a UTC datetime.

    Accepts datetime objects, pandas Timestamps, dates and ISO-8601 strings
    (including a trailing ``Z``). Naive values are assumed to be UTC.

    Returns:
        A timezone-aware datetime, or None when the value cannot be resolved.
    """
    if value is None or value is pd.NaT:
        return None

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None

    if isinstance(value, pd.Timestamp):
        if pd.isna(value):
            return None
        value = value.to_pydatetime()

    if not isinstance(value, datetime):
        if isinstance(value, date):
            return datetime.combine(value, time.min, tzinfo=UTC)
        return None

    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _optional_str(value: Any) -> str | None:
    """Return a stripped string, or None for missing/blank values."""
    if value is None:
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _parse_value(value: Any) -> float:
    """Coerce a monetary amount such as ``"$1,200.50"`` to float."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, (int, float)):
        return 0.0 if pd.isna(value) else float(value)
    cleaned = _NON_NUMERIC.sub("", str(value))
    try:
        return float(cleaned)
    except ValueError as e:
        raise ValueError(f"Invalid deal value: {value}") from e


@dataclass
class Contact:
    """
    Deduplicated person identity.

    Example:
        contact = Contact(
            id="C-100",
            name="Dana Reyes",
            email="dana@example.com",
            company="Acme",
            lead_source="close,calendly",
        )
        contact.lead_sources  # {"crm", "scheduler"}
    """

    id: str
    name: str
    email: str
    phone: str | None = None
    company: str | None = None
    title: str | None = None

    # Comma-joined platforms that have contributed data to this contact
    lead_source: str | None = None
    last_activity_date: datetime | None = None

    # Set by the sync layer when this contact was merged into another one
    merged_into: str | None = None

    @property
    def lead_sources(self) -> set[str]:
        """Canonical platform names found in lead_source."""
        if not self.lead_source:
            return set()
        platforms = set()
        for token in self.lead_source.lower().split(","):
            platform = PLATFORM_ALIASES.get(token.strip())
            if platform:
                platforms.add(platform)
        return platforms

    @property
    def is_multi_source(self) -> bool:
        """Return True if at least two platforms contributed data."""
        return len(self.lead_sources) >= 2

    @property
    def is_merged(self) -> bool:
        """Return True if this contact was merged into another contact."""
        return self.merged_into is not None

    @property
    def present_identity_fields(self) -> list[str]:
        """Identity fields that carry a non-blank value."""
        return [name for name in IDENTITY_FIELDS if _optional_str(getattr(self, name))]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "company": self.company,
            "title": self.title,
            "lead_source": self.lead_source,
            "last_activity_date": (
                self.last_activity_date.isoformat() if self.last_activity_date else None
            ),
            "merged_into": self.merged_into,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Contact:
        """Create Contact from dictionary.

        Args:
            data: Dictionary containing contact data.

        Returns:
            Contact instance.

        Raises:
            ValueError: If one of the required fields 'id', 'name' or 'email'
                is missing.
        """
        for required in ("id", "name", "email"):
            if _optional_str(data.get(required)) is None:
                raise ValueError(f"Missing required field: {required}")

        return cls(
            id=str(data["id"]),
            name=str(data["name"]).strip(),
            email=str(data["email"]).strip(),
            phone=_optional_str(data.get("phone")),
            company=_optional_str(data.get("company")),
            title=_optional_str(data.get("title")),
            lead_source=_optional_str(data.get("lead_source")),
            last_activity_date=parse_timestamp(data.get("last_activity_date")),
            merged_into=_optional_str(data.get("merged_into")),
        )


@dataclass
class Deal:
    """
    Sales outcome (opportunity) owned by a contact.

    The deal's created_at is the attribution cutoff: only touchpoints at or
    before it can receive credit.
    """

    id: str
    contact_id: str
    created_at: datetime
    value: float = 0.0
    status: str = "open"  # Platform-defined: open, won, lost, ...
    title: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "contact_id": self.contact_id,
            "created_at": self.created_at.isoformat(),
            "value": self.value,
            "status": self.status,
            "title": self.title,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Deal:
        """Create Deal from dictionary.

        Raises:
            ValueError: If 'id' or 'contact_id' is missing, if created_at
                cannot be resolved, or if value is not numeric.
        """
        for required in ("id", "contact_id"):
            if _optional_str(data.get(required)) is None:
                raise ValueError(f"Missing required field: {required}")

        created_at = parse_timestamp(data.get("created_at"))
        if created_at is None:
            raise ValueError(f"Invalid created_at for deal {data['id']}: {data.get('created_at')}")

        return cls(
            id=str(data["id"]),
            contact_id=str(data["contact_id"]),
            created_at=created_at,
            value=_parse_value(data.get("value")),
            status=_optional_str(data.get("status")) or "open",
            title=_optional_str(data.get("title")),
        )


@dataclass
class TouchpointSources:
    """Raw per-platform records for one contact, as held by the contact store."""

    meetings: list[dict[str, Any]] = field(default_factory=list)
    activities: list[dict[str, Any]] = field(default_factory=list)
    forms: list[dict[str, Any]] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Total number of raw records across platforms."""
        return len(self.meetings) + len(self.activities) + len(self.forms)
