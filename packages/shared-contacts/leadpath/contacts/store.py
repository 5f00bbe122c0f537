"""Contact store contract and an in-memory implementation.

The attribution engine only reads from the store. Populating it (platform API
calls, record matching and merging) is the sync layer's job.
"""

from __future__ import annotations

import json
import logging
import random
from abc import ABC, abstractmethod
from collections import defaultdict
from pathlib import Path
from typing import Any

from leadpath.contacts.schema import Contact, Deal, TouchpointSources

logger = logging.getLogger(__name__)


class ContactStore(ABC):
    """Read-only view of contacts, their raw touchpoint records and deals.

    Implementations must be safe to call from several threads at once; the
    bulk attribution run may fetch contacts in small concurrent batches.
    """

    @abstractmethod
    def get_contact(self, contact_id: str) -> Contact | None:
        """Return the contact, or None if it does not exist."""
        pass  # pragma: no cover

    @abstractmethod
    def get_touchpoint_sources(self, contact_id: str) -> TouchpointSources:
        """Return raw meeting, activity and form records for a contact."""
        pass  # pragma: no cover

    @abstractmethod
    def get_deals_by_contact(self, contact_id: str) -> list[Deal]:
        """Return all deals owned by a contact."""
        pass  # pragma: no cover

    @abstractmethod
    def get_contact_sample(self, n: int) -> list[Contact]:
        """Return at most n representative contacts for bulk runs."""
        pass  # pragma: no cover


class InMemoryContactStore(ContactStore):
    """Dictionary-backed contact store.

    Example:
        >>> store = InMemoryContactStore()
        >>> store.add_contact(Contact(id="C-1", name="Dana", email="dana@example.com"))
        >>> store.add_meeting("C-1", {"id": "M-1", "start_time": "2025-01-10T15:00:00Z"})
        >>> store.add_deal(Deal.from_dict({
        ...     "id": "D-1", "contact_id": "C-1", "created_at": "2025-01-20T00:00:00Z",
        ... }))
        >>> store.get_contact_sample(10)
        [Contact(id='C-1', ...)]
    """

    def __init__(self, seed: int = 0):
        """Initialize an empty store.

        Args:
            seed: Seed for the sampling RNG. Samples are deterministic for a
                given seed and store content.
        """
        self.seed = seed
        self._contacts: dict[str, Contact] = {}
        self._meetings: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self._activities: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self._forms: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self._deals: dict[str, list[Deal]] = defaultdict(list)

    def __len__(self) -> int:
        return len(self._contacts)

    def add_contact(self, contact: Contact) -> None:
        """Add or replace a contact."""
        self._contacts[contact.id] = contact

    def add_meeting(self, contact_id: str, record: dict[str, Any]) -> None:
        """Attach a raw scheduler meeting record to a contact."""
        self._meetings[contact_id].append(record)

    def add_activity(self, contact_id: str, record: dict[str, Any]) -> None:
        """Attach a raw CRM activity record to a contact."""
        self._activities[contact_id].append(record)

    def add_form(self, contact_id: str, record: dict[str, Any]) -> None:
        """Attach a raw form submission record to a contact."""
        self._forms[contact_id].append(record)

    def add_deal(self, deal: Deal) -> None:
        """Attach a deal to its owning contact."""
        self._deals[deal.contact_id].append(deal)

    def get_contact(self, contact_id: str) -> Contact | None:
        return self._contacts.get(contact_id)

    def get_touchpoint_sources(self, contact_id: str) -> TouchpointSources:
        return TouchpointSources(
            meetings=list(self._meetings.get(contact_id, [])),
            activities=list(self._activities.get(contact_id, [])),
            forms=list(self._forms.get(contact_id, [])),
        )

    def get_deals_by_contact(self, contact_id: str) -> list[Deal]:
        return list(self._deals.get(contact_id, []))

    def get_contact_sample(self, n: int) -> list[Contact]:
        """Return a deterministic sample of at most n unmerged contacts.

        Contacts keep their insertion order within the sample.
        """
        if n <= 0:
            return []

        candidates = [c for c in self._contacts.values() if not c.is_merged]
        if len(candidates) <= n:
            return candidates

        rng = random.Random(self.seed)
        picked = set(rng.sample(range(len(candidates)), n))
        return [c for i, c in enumerate(candidates) if i in picked]

    @classmethod
    def from_dict(cls, data: dict[str, Any], seed: int = 0) -> InMemoryContactStore:
        """Build a store from an exported dictionary.

        Expected shape::

            {
                "contacts": [{"id": "C-1", "name": "...", "email": "..."}],
                "meetings": [{"contact_id": "C-1", "id": "M-1", "start_time": "..."}],
                "activities": [{"contact_id": "C-1", "id": "A-1", "date": "..."}],
                "forms": [{"contact_id": "C-1", "id": "F-1", "submitted_at": "..."}],
                "deals": [{"id": "D-1", "contact_id": "C-1", "created_at": "..."}],
            }

        Raises:
            ValueError: If a contact or deal record is invalid, or if a raw
                touchpoint record has no contact_id.
        """
        store = cls(seed=seed)

        for record in data.get("contacts", []):
            store.add_contact(Contact.from_dict(record))

        adders = {
            "meetings": store.add_meeting,
            "activities": store.add_activity,
            "forms": store.add_form,
        }
        for key, add in adders.items():
            for record in data.get(key, []):
                contact_id = record.get("contact_id")
                if contact_id is None:
                    raise ValueError(f"Missing contact_id in {key} record: {record}")
                add(str(contact_id), record)

        for record in data.get("deals", []):
            store.add_deal(Deal.from_dict(record))

        logger.info(
            f"Loaded contact store: {len(store._contacts)} contacts, "
            f"{sum(len(d) for d in store._deals.values())} deals"
        )
        return store

    @classmethod
    def from_json_file(cls, path: str | Path, seed: int = 0) -> InMemoryContactStore:
        """Build a store from a JSON export file (see from_dict)."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data, seed=seed)
