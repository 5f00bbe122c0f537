"""Shared pytest fixtures for LeadPath packages."""

from datetime import UTC, datetime

import pytest
from leadpath.contacts import Contact, Deal, InMemoryContactStore


def utc(year, month, day, hour=0, minute=0):
    """Build a UTC datetime."""
    return datetime(year, month, day, hour, minute, tzinfo=UTC)


@pytest.fixture
def sample_contact():
    """Contact with every identity field populated."""
    return Contact(
        id="C-100",
        name="Dana Reyes",
        email="dana@example.com",
        phone="+1-555-0100",
        company="Acme",
        title="VP Marketing",
        lead_source="close,calendly,typeform",
        last_activity_date=utc(2025, 2, 1),
    )


@pytest.fixture
def sample_meeting_data():
    """Raw scheduler meetings."""
    return [
        {
            "id": "M-1",
            "calendly_event_id": "evt_001",
            "start_time": "2025-01-10T15:00:00Z",
        },
        {
            "id": "M-2",
            "calendly_event_id": "evt_002",
            "start_time": "2025-01-25T16:30:00Z",
        },
    ]


@pytest.fixture
def sample_activity_data():
    """Raw CRM activities."""
    return [
        {
            "id": "A-1",
            "close_id": "acti_001",
            "date": "2025-01-05T09:00:00Z",
        },
        {
            "id": "A-2",
            "close_id": "acti_002",
            "date": "2025-01-18T11:00:00Z",
        },
    ]


@pytest.fixture
def sample_form_data():
    """Raw form tool submissions."""
    return [
        {
            "id": "F-1",
            "typeform_response_id": "resp_001",
            "submitted_at": "2025-01-12T08:15:00Z",
        },
    ]


@pytest.fixture
def contact_store():
    """Store holding one contact per attribution scenario.

    - C-1: one meeting, one later deal
    - C-2: one activity and one form, one later deal
    - C-3: five touchpoints across all three types, one later deal
    - C-4: no touchpoints, no deals
    - C-5: three touchpoints, one deal created before all of them
    - C-9: merged into C-1, never sampled
    """
    store = InMemoryContactStore(seed=7)

    store.add_contact(Contact(id="C-1", name="Ana", email="ana@example.com", lead_source="calendly"))
    store.add_meeting("C-1", {"id": "M-10", "start_time": "2025-01-10T15:00:00Z"})
    store.add_deal(Deal(id="D-1", contact_id="C-1", created_at=utc(2025, 1, 20), value=1000.0, status="won"))

    store.add_contact(
        Contact(id="C-2", name="Ben", email="ben@example.com", lead_source="close,typeform")
    )
    store.add_activity("C-2", {"id": "A-20", "date": "2025-01-05T09:00:00Z"})
    store.add_form("C-2", {"id": "F-20", "submitted_at": "2025-01-08T10:00:00Z"})
    store.add_deal(Deal(id="D-2", contact_id="C-2", created_at=utc(2025, 1, 15), value=500.0))

    store.add_contact(
        Contact(
            id="C-3",
            name="Cleo",
            email="cleo@example.com",
            phone="+1-555-0103",
            company="Globex",
            title="CMO",
            lead_source="close,calendly,typeform",
            last_activity_date=utc(2025, 3, 1),
        )
    )
    store.add_meeting("C-3", {"id": "M-30", "start_time": "2025-01-01T10:00:00Z"})
    store.add_activity("C-3", {"id": "A-30", "date": "2025-01-10T10:00:00Z"})
    store.add_form("C-3", {"id": "F-30", "submitted_at": "2025-01-20T10:00:00Z"})
    store.add_activity("C-3", {"id": "A-31", "date": "2025-02-01T10:00:00Z"})
    store.add_meeting("C-3", {"id": "M-31", "start_time": "2025-02-15T10:00:00Z"})
    store.add_deal(
        Deal(id="D-3", contact_id="C-3", created_at=utc(2025, 3, 1), value=12000.0, status="won")
    )

    store.add_contact(Contact(id="C-4", name="Dev", email="dev@example.com"))

    store.add_contact(Contact(id="C-5", name="Eli", email="eli@example.com", lead_source="close"))
    store.add_activity("C-5", {"id": "A-50", "date": "2025-02-01T10:00:00Z"})
    store.add_activity("C-5", {"id": "A-51", "date": "2025-02-05T10:00:00Z"})
    store.add_activity("C-5", {"id": "A-52", "date": "2025-02-10T10:00:00Z"})
    store.add_deal(Deal(id="D-5", contact_id="C-5", created_at=utc(2025, 1, 1), status="lost"))

    store.add_contact(
        Contact(id="C-9", name="Ana", email="ana@example.com", merged_into="C-1")
    )

    return store
