"""Unit tests for the feed processing pipeline."""
import pytest

from processor.event_processor import EventProcessor

TEAMS_URL = "https://teams.microsoft.com/l/meetup-join/19%3ameeting_abc%40thread.v2/0?context=%7b%7d"


def build_feed(*events: str) -> str:
    """Wrap VEVENT bodies in a VCALENDAR, CRLF separated."""
    parts = ["BEGIN:VCALENDAR", "VERSION:2.0", "PRODID:-//Microsoft Corporation//Outlook 16.0//EN"]
    for body in events:
        parts.append("BEGIN:VEVENT")
        parts.extend(body.strip().splitlines())
        parts.append("END:VEVENT")
    parts.append("END:VCALENDAR")
    return "\r\n".join(parts) + "\r\n"


ALL_DAY = """
UID:all-day-1
SUMMARY:Company Holiday
DTSTART;VALUE=DATE:20240115
DTEND;VALUE=DATE:20240116
"""

TIMED = f"""
UID:timed-2
SUMMARY:Design Sync
DESCRIPTION:Microsoft Teams meeting Join: {TEAMS_URL} Meeting ID: 123 456 789
DTSTART;TZID=Pacific Standard Time:20240116T143000
DTEND;TZID=Pacific Standard Time:20240116T151500
"""

CANCELLED = """
UID:cancelled-3
SUMMARY:Canceled: Budget Review
DTSTART:20240117T100000
DTEND:20240117T110000
LOCATION:Conference Room A
STATUS:CANCELLED
"""

NO_TITLE = """
UID:untitled-4
DTSTART:20240118T100000
"""

BAD_START = """
UID:bad-5
SUMMARY:Broken
DTSTART:2024-01-19
"""


@pytest.fixture
def processor():
    return EventProcessor()


class TestEventProcessor:
    """Test cases for EventProcessor.process_feed."""

    def test_all_day_and_timed_in_order(self, processor):
        """Test a two-entry feed: order kept, all-day entry has no time."""
        result = processor.process_feed(build_feed(ALL_DAY, TIMED))

        assert result.blocks_seen == 2
        assert len(result.events) == 2

        all_day, timed = result.events
        assert all_day.id == 'outlook-all-day-1'
        assert all_day.time is None
        assert all_day.date == '2024-01-15'
        assert timed.id == 'outlook-timed-2'
        assert timed.time == '14:30'
        assert timed.date == '2024-01-16'
        assert timed.duration_minutes == 45

    def test_join_url_detected(self, processor):
        """Test that the join link is carried through exactly."""
        result = processor.process_feed(build_feed(TIMED))

        event = result.events[0]
        assert event.is_conference_meeting is True
        assert event.join_url == TEAMS_URL
        assert event.meeting_type == 'video_call'

    def test_block_missing_title_is_dropped(self, processor):
        """Test that a block without a title is skipped while siblings remain."""
        result = processor.process_feed(build_feed(ALL_DAY, NO_TITLE, CANCELLED))

        assert result.blocks_seen == 3
        assert len(result.events) == 2
        assert [event.id for event in result.events] == [
            'outlook-all-day-1',
            'outlook-cancelled-3',
        ]
        assert len(result.skipped) == 1
        assert result.skipped[0].index == 1

    def test_bad_start_token_is_skipped(self, processor):
        """Test that an entry with an unreadable start is skipped, not fatal."""
        result = processor.process_feed(build_feed(BAD_START, ALL_DAY))

        assert result.blocks_seen == 2
        assert [event.id for event in result.events] == ['outlook-all-day-1']
        assert len(result.skipped) == 1
        assert result.skipped[0].uid == 'bad-5'
        assert result.skipped[0].index is None

    def test_cancelled_and_scheduled_status(self, processor):
        """Test status mapping for cancelled and status-less entries."""
        result = processor.process_feed(build_feed(CANCELLED, ALL_DAY))

        assert result.events[0].status == 'cancelled'
        assert result.events[0].meeting_type == 'in_person'
        assert result.events[1].status == 'scheduled'

    def test_source_label(self, processor):
        """Test that the source name flows into ids and labels."""
        result = processor.process_feed(build_feed(ALL_DAY), source='google')

        assert result.events[0].id == 'google-all-day-1'
        assert result.events[0].source_label == '[GOOGLE]'

    def test_pipeline_is_deterministic(self, processor):
        """Test that identical input gives deep-equal output."""
        feed = build_feed(ALL_DAY, TIMED, CANCELLED, NO_TITLE)

        first = processor.process_feed(feed, source='outlook')
        second = EventProcessor().process_feed(feed, source='outlook')

        assert first.events == second.events
        assert [e.to_dict() for e in first.events] == [e.to_dict() for e in second.events]

    def test_feed_without_events(self, processor):
        """Test that a calendar with no events yields nothing."""
        result = processor.process_feed(build_feed())

        assert result.blocks_seen == 0
        assert result.events == []
        assert result.skipped == []
