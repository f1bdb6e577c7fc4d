"""Data models for calendar feed processing."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


EXTERNAL_EVENT_KIND = 'external'


@dataclass
class ContentLine:
    """One unfolded iCalendar content line split into its parts."""
    name: str
    params: Dict[str, str]
    value: str


@dataclass
class ParsedEntry:
    """Properties captured from a single VEVENT block."""
    uid: str
    summary: str
    start_token: str
    description: Optional[str] = None
    end_token: Optional[str] = None
    location: Optional[str] = None
    organizer: Optional[str] = None
    attendees: List[str] = field(default_factory=list)
    status_token: Optional[str] = None


@dataclass
class ConferenceMetadata:
    """Conferencing details detected in an event's location/description."""
    join_url: Optional[str] = None
    meeting_id: Optional[str] = None
    conference_id: Optional[str] = None
    platform: Optional[str] = None
    is_conference_meeting: bool = False


@dataclass
class NormalizedEvent:
    """Display-ready external calendar event."""
    id: str
    title: str
    date: str
    meeting_type: str
    status: str
    source_label: str
    is_conference_meeting: bool
    kind: str = EXTERNAL_EVENT_KIND
    time: Optional[str] = None
    duration_minutes: Optional[int] = None
    location: Optional[str] = None
    join_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the wire shape consumed by the display layer.

        Optional fields are left out entirely when absent.
        """
        item = {
            'id': self.id,
            'title': self.title,
            'date': self.date,
            'kind': self.kind,
            'meetingType': self.meeting_type,
            'status': self.status,
            'sourceLabel': self.source_label,
            'isConferenceMeeting': self.is_conference_meeting
        }

        if self.time is not None:
            item['time'] = self.time
        if self.duration_minutes is not None:
            item['durationMinutes'] = self.duration_minutes
        if self.location is not None:
            item['location'] = self.location
        if self.join_url is not None:
            item['joinUrl'] = self.join_url

        return item

    @classmethod
    def from_dict(cls, item: Dict[str, Any]) -> 'NormalizedEvent':
        """Rebuild an event from its wire shape."""
        return cls(
            id=item['id'],
            title=item['title'],
            date=item['date'],
            kind=item.get('kind', EXTERNAL_EVENT_KIND),
            meeting_type=item['meetingType'],
            status=item['status'],
            source_label=item['sourceLabel'],
            is_conference_meeting=bool(item['isConferenceMeeting']),
            time=item.get('time'),
            duration_minutes=item.get('durationMinutes'),
            location=item.get('location'),
            join_url=item.get('joinUrl')
        )


@dataclass
class SkippedBlock:
    """A block that did not make it into the output, and why."""
    index: Optional[int]
    reason: str
    uid: Optional[str] = None


@dataclass
class ParseResult:
    """Result of parsing a raw feed."""
    blocks_seen: int
    entries: List[ParsedEntry]
    skipped: List[SkippedBlock]


@dataclass
class ProcessResult:
    """Result of running the full parse and normalize pipeline."""
    blocks_seen: int
    events: List[NormalizedEvent]
    skipped: List[SkippedBlock]


@dataclass
class CacheEntry:
    """Contents of the single cache slot."""
    events: List[NormalizedEvent]
    captured_at: float
