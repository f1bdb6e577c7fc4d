"""DynamoDB-backed slot for the event cache."""
import json
import logging
import time
from decimal import Decimal
from typing import Callable, Optional

import boto3
from botocore.exceptions import ClientError

from processor.models import CacheEntry, NormalizedEvent
from storage.event_cache import EventCache

logger = logging.getLogger(__name__)


class DynamoDBEventCache(EventCache):
    """EventCache storing its single slot as one DynamoDB item."""

    DEFAULT_CACHE_KEY = 'ical-events'

    def __init__(
        self,
        table_name: str,
        cache_key: str = DEFAULT_CACHE_KEY,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize DynamoDB client and table reference.

        Args:
            table_name: Name of the DynamoDB table (hash key "cache_key")
            cache_key: Key of the item holding the cached events
            clock: Returns the current time in epoch seconds
        """
        super().__init__(clock=clock)
        self.table_name = table_name
        self.cache_key = cache_key
        self.dynamodb = boto3.resource('dynamodb')
        self.table = self.dynamodb.Table(table_name)
        logger.info(f"Initialized DynamoDBEventCache for table: {table_name}")

    def _load_entry(self) -> Optional[CacheEntry]:
        try:
            response = self.table.get_item(Key={'cache_key': self.cache_key})
        except ClientError as e:
            logger.error(f"Error reading cache item from DynamoDB: {e}")
            raise

        item = response.get('Item')
        if not item:
            return None
        return self._item_to_entry(item)

    def _save_entry(self, entry: CacheEntry) -> None:
        try:
            self.table.put_item(Item=self._entry_to_item(entry))
        except ClientError as e:
            logger.error(f"Error writing cache item to DynamoDB: {e}")
            raise

    def _delete_entry(self) -> None:
        try:
            self.table.delete_item(Key={'cache_key': self.cache_key})
        except ClientError as e:
            logger.error(f"Error deleting cache item from DynamoDB: {e}")
            raise

    def _entry_to_item(self, entry: CacheEntry) -> dict:
        """
        Convert a CacheEntry to a DynamoDB item.

        Events are kept as one JSON string so optional fields need no
        attribute mapping.
        """
        return {
            'cache_key': self.cache_key,
            'events': json.dumps([event.to_dict() for event in entry.events]),
            'captured_at': Decimal(str(entry.captured_at))
        }

    def _item_to_entry(self, item: dict) -> Optional[CacheEntry]:
        """
        Convert a DynamoDB item to a CacheEntry.

        Returns:
            CacheEntry, or None if the item is unreadable
        """
        try:
            events = [
                NormalizedEvent.from_dict(record)
                for record in json.loads(item['events'])
            ]
            return CacheEntry(events=events, captured_at=float(item['captured_at']))
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Failed to convert cache item to CacheEntry: {e}")
            return None
