"""Custom exceptions for the attribution engine."""

from __future__ import annotations


class AttributionError(Exception):
    """Base exception for attribution errors."""

    pass


class ContactNotFoundError(AttributionError):
    """Raised when the requested contact does not exist."""

    def __init__(self, contact_id: str):
        super().__init__(f"Contact not found: {contact_id}")
        self.contact_id = contact_id


class MalformedTouchpointError(AttributionError):
    """Raised when a raw record cannot become a touchpoint.

    Normalizers catch this and drop the record; it never reaches callers.
    """

    pass
