"""Property extraction from iCalendar VEVENT blocks."""
import logging
import re
from typing import Callable, Dict, List, Optional

from icalendar.parser import Contentlines, unescape_char

from processor.models import ContentLine, ParsedEntry, ParseResult, SkippedBlock
from processor.tokenizer import split_event_blocks

logger = logging.getLogger(__name__)

MAILTO_PREFIX = re.compile(r'^mailto:', re.IGNORECASE)

REQUIRED_FIELDS = ('uid', 'summary', 'start_token')


def unfold_lines(block: str) -> List[str]:
    """
    Split a block into logical lines.

    Accepts CRLF or LF endings and joins folded continuation lines (lines
    starting with a space or tab) onto the previous line. Blank lines are
    dropped.
    """
    return [str(line) for line in Contentlines.from_ical(block) if line]


def parse_content_line(line: str) -> Optional[ContentLine]:
    """
    Split a content line into name, parameters and value.

    The value is everything after the first colon. Parameters sit between
    the name and that colon, separated by semicolons.

    Returns:
        ContentLine, or None if the line has no colon
    """
    colon_index = line.find(':')
    if colon_index == -1:
        return None

    head = line[:colon_index]
    value = line[colon_index + 1:].strip()

    name, *raw_params = head.split(';')
    params = {}
    for raw_param in raw_params:
        key, _, param_value = raw_param.partition('=')
        params[key.strip().upper()] = param_value

    return ContentLine(name=name.strip().upper(), params=params, value=value)


def unescape_text(value: str) -> str:
    """Decode iCalendar TEXT escapes such as \\n and \\,."""
    return unescape_char(value)


def strip_mailto(value: str) -> str:
    """Remove a leading mailto: scheme from a calendar address."""
    return MAILTO_PREFIX.sub('', value)


def _set(field_name: str, convert: Optional[Callable[[str], str]] = None):
    def handler(fields: dict, value: str) -> None:
        fields[field_name] = convert(value) if convert else value
    return handler


def _append_attendee(fields: dict, value: str) -> None:
    fields['attendees'].append(strip_mailto(value))


# Property name -> handler. Parameters are never consulted.
PROPERTY_HANDLERS: Dict[str, Callable[[dict, str], None]] = {
    'UID': _set('uid'),
    'SUMMARY': _set('summary', unescape_text),
    'DESCRIPTION': _set('description', unescape_text),
    'DTSTART': _set('start_token'),
    'DTEND': _set('end_token'),
    'LOCATION': _set('location', unescape_text),
    'ORGANIZER': _set('organizer', strip_mailto),
    'ATTENDEE': _append_attendee,
    'STATUS': _set('status_token'),
}


def missing_required_fields(fields: dict) -> List[str]:
    """List the required fields that are absent or empty."""
    return [name for name in REQUIRED_FIELDS if not fields.get(name)]


def _collect_fields(block: str) -> dict:
    fields = {'attendees': []}

    for line in unfold_lines(block):
        content_line = parse_content_line(line)
        if content_line is None:
            continue

        handler = PROPERTY_HANDLERS.get(content_line.name)
        if handler is None:
            continue

        logger.debug(f"Dispatching property {content_line.name}")
        handler(fields, content_line.value)

    return fields


def _entry_from_fields(fields: dict) -> Optional[ParsedEntry]:
    if missing_required_fields(fields):
        return None
    return ParsedEntry(**fields)


def parse_event_block(block: str) -> Optional[ParsedEntry]:
    """
    Extract a ParsedEntry from one VEVENT block body.

    Args:
        block: Text between BEGIN:VEVENT and END:VEVENT

    Returns:
        ParsedEntry, or None if uid, summary or start token is missing
    """
    return _entry_from_fields(_collect_fields(block))


class IcalParser:
    """Parser turning raw feed text into ParsedEntry objects."""

    def parse(self, raw_text: str) -> ParseResult:
        """
        Parse every VEVENT block in a feed.

        Blocks missing a required property are skipped and reported in
        ``ParseResult.skipped``; the remaining blocks are still parsed.

        Args:
            raw_text: Full feed text

        Returns:
            ParseResult with entries in input order
        """
        blocks = split_event_blocks(raw_text)
        entries = []
        skipped = []

        for index, block in enumerate(blocks):
            fields = _collect_fields(block)
            entry = _entry_from_fields(fields)

            if entry is None:
                missing = missing_required_fields(fields)
                reason = f"missing required properties: {', '.join(missing)}"
                logger.warning(
                    f"Skipping event block {index} "
                    f"(uid={fields.get('uid')!r}): {reason}"
                )
                skipped.append(
                    SkippedBlock(index=index, reason=reason, uid=fields.get('uid'))
                )
                continue

            entries.append(entry)

        logger.info(
            f"Parsed {len(entries)} entries out of {len(blocks)} event blocks"
        )
        return ParseResult(blocks_seen=len(blocks), entries=entries, skipped=skipped)
