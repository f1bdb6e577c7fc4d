"""Split raw iCalendar text into VEVENT block bodies."""
from typing import List


BEGIN_MARKER = 'BEGIN:VEVENT'
END_MARKER = 'END:VEVENT'


def split_event_blocks(raw_text: str) -> List[str]:
    """
    Split feed text into the bodies of its VEVENT blocks.

    Text before the first begin marker is discarded. A block whose end
    marker never appears is dropped. Nested components (VALARM etc.) are
    not tracked and stay inside the enclosing block body.

    Args:
        raw_text: Full feed text

    Returns:
        Block bodies in input order
    """
    blocks = []

    for segment in raw_text.split(BEGIN_MARKER)[1:]:
        end_index = segment.find(END_MARKER)
        if end_index == -1:
            continue
        blocks.append(segment[:end_index])

    return blocks
