"""Heuristic detection of conferencing join links and IDs."""
import re
from typing import List, Optional, Tuple

from processor.models import ConferenceMetadata


# Evaluated in order; the first match wins.
JOIN_URL_PATTERNS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r'https://teams\.microsoft\.com/l/meetup-join/[^\s]+', re.IGNORECASE),
     'teams'),
    (re.compile(r'https://teams\.live\.com/meet/[^\s]+', re.IGNORECASE),
     'teams_live'),
    # Host label excludes whitespace so a match cannot span words
    (re.compile(r'https://[^.\s]+\.teams\.microsoft\.com/[^\s]+', re.IGNORECASE),
     'teams_tenant'),
]

MEETING_ID_PATTERN = re.compile(r'Meeting ID[:\s]+(\d+[\s\d]*)', re.IGNORECASE)
CONFERENCE_ID_PATTERN = re.compile(r'Conference ID[:\s]+(\d+[\s\d]*)', re.IGNORECASE)

CONFERENCE_INDICATORS = [
    'microsoft teams meeting',
    'teams meeting',
    'join microsoft teams',
    'join teams meeting',
    'teams.microsoft.com',
]


def find_join_url(text: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Find the first known join link in text.

    Returns:
        Tuple of (matched URL, pattern kind), or (None, None)
    """
    for pattern, kind in JOIN_URL_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(0), kind
    return None, None


def _extract_digits(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    if not match:
        return None
    return re.sub(r'\s', '', match.group(1))


def has_conference_indicator(text: str) -> bool:
    """Check text for a conferencing phrase, ignoring case."""
    lowered = text.lower()
    return any(indicator in lowered for indicator in CONFERENCE_INDICATORS)


def extract_conference_info(
    location: Optional[str] = None,
    description: Optional[str] = None
) -> ConferenceMetadata:
    """
    Detect conferencing details from an event's location and description.

    A join URL marks the event as a conference meeting. Without one, a
    textual indicator phrase is enough to mark it, but no URL is set.
    Meeting and conference IDs are extracted either way.

    Args:
        location: LOCATION text, if any
        description: DESCRIPTION text, if any

    Returns:
        ConferenceMetadata (is_conference_meeting is False when nothing matched)
    """
    search_text = f"{location or ''} {description or ''}"
    metadata = ConferenceMetadata()

    join_url, kind = find_join_url(search_text)
    if join_url:
        metadata.join_url = join_url
        metadata.platform = kind
        metadata.is_conference_meeting = True

    metadata.meeting_id = _extract_digits(MEETING_ID_PATTERN, search_text)
    metadata.conference_id = _extract_digits(CONFERENCE_ID_PATTERN, search_text)

    if not metadata.is_conference_meeting:
        metadata.is_conference_meeting = has_conference_indicator(search_text)

    return metadata
