"""Tests for timeline building."""

from datetime import UTC, datetime, timedelta

from leadpath.attribution.schema import SOURCE_FOR_TYPE, Touchpoint, TouchpointType
from leadpath.attribution.timeline import build_timeline, prior_to_deal, timeline_span
from leadpath.contacts import Deal


def _touchpoint(touchpoint_id, timestamp, touchpoint_type=TouchpointType.ACTIVITY):
    return Touchpoint(
        id=touchpoint_id,
        type=touchpoint_type,
        source=SOURCE_FOR_TYPE[touchpoint_type],
        timestamp=timestamp,
    )


def _deal(created_at):
    return Deal(id="D-1", contact_id="C-1", created_at=created_at)


class TestBuildTimeline:
    """Test build_timeline function."""

    def test_sorts_by_timestamp(self):
        """Test touchpoints are ordered oldest first."""
        touchpoints = [
            _touchpoint("c", datetime(2025, 1, 3, tzinfo=UTC)),
            _touchpoint("a", datetime(2025, 1, 1, tzinfo=UTC)),
            _touchpoint("b", datetime(2025, 1, 2, tzinfo=UTC)),
        ]

        assert [t.id for t in build_timeline(touchpoints)] == ["a", "b", "c"]

    def test_ties_keep_input_order(self):
        """Test the sort is stable for equal timestamps."""
        moment = datetime(2025, 1, 1, tzinfo=UTC)
        touchpoints = [
            _touchpoint("meeting_1", moment, TouchpointType.MEETING),
            _touchpoint("activity_1", moment),
            _touchpoint("form_1", moment, TouchpointType.FORM_SUBMISSION),
        ]

        assert [t.id for t in build_timeline(touchpoints)] == [
            "meeting_1",
            "activity_1",
            "form_1",
        ]

    def test_empty(self):
        """Test empty input gives an empty timeline."""
        assert build_timeline([]) == []

    def test_does_not_mutate_input(self):
        """Test the input list is left untouched."""
        touchpoints = [
            _touchpoint("b", datetime(2025, 1, 2, tzinfo=UTC)),
            _touchpoint("a", datetime(2025, 1, 1, tzinfo=UTC)),
        ]

        build_timeline(touchpoints)

        assert [t.id for t in touchpoints] == ["b", "a"]


class TestPriorToDeal:
    """Test prior_to_deal function."""

    def test_includes_touchpoint_at_deal_creation(self):
        """Test the cutoff is inclusive."""
        created_at = datetime(2025, 1, 10, tzinfo=UTC)
        timeline = [
            _touchpoint("a", datetime(2025, 1, 1, tzinfo=UTC)),
            _touchpoint("b", created_at),
            _touchpoint("c", created_at + timedelta(seconds=1)),
        ]

        assert [t.id for t in prior_to_deal(timeline, _deal(created_at))] == ["a", "b"]

    def test_deal_before_all_touchpoints(self):
        """Test an early deal has no prior touchpoints."""
        timeline = [_touchpoint("a", datetime(2025, 2, 1, tzinfo=UTC))]

        assert prior_to_deal(timeline, _deal(datetime(2025, 1, 1, tzinfo=UTC))) == []


class TestTimelineSpan:
    """Test timeline_span function."""

    def test_span(self):
        """Test span between first and last touchpoint."""
        timeline = [
            _touchpoint("a", datetime(2025, 1, 1, tzinfo=UTC)),
            _touchpoint("b", datetime(2025, 1, 11, tzinfo=UTC)),
        ]

        assert timeline_span(timeline) == timedelta(days=10)

    def test_short_timelines(self):
        """Test fewer than two touchpoints have no span."""
        assert timeline_span([]) == timedelta(0)
        assert timeline_span([_touchpoint("a", datetime(2025, 1, 1, tzinfo=UTC))]) == timedelta(0)
