"""
LeadPath Contacts - Contact identities and the contact store contract.

Provides:
- Contact and Deal records with normalized UTC timestamps
- TouchpointSources bundle of raw per-platform records
- ContactStore contract consumed by the attribution engine
- InMemoryContactStore for tests, demos and JSON exports

Usage:
    from leadpath.contacts import Contact, Deal, InMemoryContactStore

    store = InMemoryContactStore.from_json_file("contacts.json")
    contact = store.get_contact("C-100")
    deals = store.get_deals_by_contact("C-100")
"""

from leadpath.contacts.schema import (
    IDENTITY_FIELDS,
    PLATFORM_ALIASES,
    Contact,
    Deal,
    TouchpointSources,
    parse_timestamp,
)
from leadpath.contacts.store import (
    ContactStore,
    InMemoryContactStore,
)

__all__ = [
    # Schema
    "Contact",
    "Deal",
    "TouchpointSources",
    "parse_timestamp",
    "IDENTITY_FIELDS",
    "PLATFORM_ALIASES",
    # Store
    "ContactStore",
    "InMemoryContactStore",
]
