"""Pipeline turning raw feed text into normalized events."""
import logging

from processor.date_normalizer import InvalidDateToken
from processor.event_normalizer import EventNormalizer
from processor.ical_parser import IcalParser
from processor.models import ProcessResult, SkippedBlock

logger = logging.getLogger(__name__)


class EventProcessor:
    """Runs the parse and normalize stages over a raw feed."""

    DEFAULT_SOURCE = 'outlook'

    def __init__(self, parser: IcalParser = None, normalizer: EventNormalizer = None):
        """
        Initialize the processor.

        Args:
            parser: IcalParser to use (default: new instance)
            normalizer: EventNormalizer to use (default: new instance)
        """
        self.parser = parser or IcalParser()
        self.normalizer = normalizer or EventNormalizer()

    def process_feed(self, raw_text: str, source: str = DEFAULT_SOURCE) -> ProcessResult:
        """
        Parse and normalize a raw feed.

        Blocks missing required properties and entries with an unreadable
        start token are skipped; the rest are returned in input order.

        Args:
            raw_text: Full feed text
            source: Feed source name, used in event IDs and labels

        Returns:
            ProcessResult with normalized events and skipped blocks
        """
        parse_result = self.parser.parse(raw_text)
        skipped = list(parse_result.skipped)
        events = []

        for entry in parse_result.entries:
            try:
                events.append(self.normalizer.normalize(entry, source))
            except InvalidDateToken as e:
                logger.warning(
                    f"Failed to normalize event '{entry.summary}' "
                    f"(uid={entry.uid}): {e}"
                )
                skipped.append(SkippedBlock(index=None, reason=str(e), uid=entry.uid))
                continue

        logger.info(
            f"Processed {len(events)} events out of "
            f"{parse_result.blocks_seen} event blocks"
        )
        return ProcessResult(
            blocks_seen=parse_result.blocks_seen,
            events=events,
            skipped=skipped
        )
