"""Normalization of parsed calendar entries into display-ready events."""
import logging
import math
from datetime import datetime
from typing import Optional

from processor.date_normalizer import InvalidDateToken, normalize_date_token
from processor.meeting_links import extract_conference_info
from processor.models import ConferenceMetadata, NormalizedEvent, ParsedEntry

logger = logging.getLogger(__name__)

VIDEO_CALL = 'video_call'
IN_PERSON = 'in_person'

STATUS_SCHEDULED = 'scheduled'
STATUS_CANCELLED = 'cancelled'

VIDEO_PLATFORM_KEYWORDS = ('zoom', 'webex')

MIDNIGHT = '00:00'


class EventNormalizer:
    """Builds NormalizedEvent objects from ParsedEntry objects."""

    def normalize(self, entry: ParsedEntry, source: str) -> NormalizedEvent:
        """
        Normalize a single parsed entry.

        Args:
            entry: ParsedEntry from the parser
            source: Feed source name (e.g. "outlook")

        Returns:
            NormalizedEvent

        Raises:
            InvalidDateToken: If the start token cannot be read
        """
        start = normalize_date_token(entry.start_token)
        conference = extract_conference_info(entry.location, entry.description)

        time_text = start.strftime('%H:%M')

        return NormalizedEvent(
            id=f"{source}-{entry.uid}",
            title=entry.summary,
            date=start.date().isoformat(),
            time=time_text if time_text != MIDNIGHT else None,
            duration_minutes=self._duration_minutes(start, entry.end_token),
            location=entry.location,
            meeting_type=self._meeting_type(entry.location, conference),
            status=self._status(entry.status_token),
            source_label=f"[{source.upper()}]",
            join_url=conference.join_url,
            is_conference_meeting=conference.is_conference_meeting
        )

    def _duration_minutes(
        self, start: datetime, end_token: Optional[str]
    ) -> Optional[int]:
        """
        Whole minutes between start and end, or None if not positive.

        A missing or unreadable end token counts as zero duration.
        """
        if not end_token:
            return None

        try:
            end = normalize_date_token(end_token)
        except InvalidDateToken as e:
            logger.warning(f"Ignoring end token: {e}")
            return None

        # Halves round up
        minutes = math.floor((end - start).total_seconds() / 60 + 0.5)
        return minutes if minutes > 0 else None

    def _meeting_type(
        self, location: Optional[str], conference: ConferenceMetadata
    ) -> str:
        if conference.is_conference_meeting:
            return VIDEO_CALL

        if location:
            lowered = location.lower()
            if any(keyword in lowered for keyword in VIDEO_PLATFORM_KEYWORDS):
                return VIDEO_CALL
            return IN_PERSON

        # No location: assume a virtual meeting
        return VIDEO_CALL

    def _status(self, status_token: Optional[str]) -> str:
        if status_token and status_token.lower() == STATUS_CANCELLED:
            return STATUS_CANCELLED
        return STATUS_SCHEDULED
