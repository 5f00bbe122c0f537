"""Tests for leadpath.attribution package exports."""

import leadpath.attribution as attribution


def test_all_exports_resolve():
    """Test every name in __all__ is importable."""
    for name in attribution.__all__:
        assert hasattr(attribution, name), name


def test_core_exports():
    """Test the main entry points are exported."""
    from leadpath.attribution import (
        AttributionModel,
        AttributionOrchestrator,
        ContactNotFoundError,
        TouchpointNormalizer,
        allocate_credit,
        classify_journey,
        estimate_certainty,
    )

    assert AttributionOrchestrator is not None
    assert TouchpointNormalizer is not None
    assert callable(allocate_credit)
    assert callable(classify_journey)
    assert callable(estimate_certainty)
    assert issubclass(ContactNotFoundError, Exception)
    assert AttributionModel.W_SHAPED.value == "w_shaped"
