"""AWS Lambda handler for external calendar feed sync."""
import json
import logging
import os
import time
from typing import Any, Dict, Optional

from feed.ical_feed import FeedFetchError, ICalFeedClient
from processor.event_processor import EventProcessor
from processor.models import ProcessResult
from storage.dynamodb_cache import DynamoDBEventCache
from storage.event_cache import EventCache


# Attributes every LogRecord has; anything else came in through `extra`.
_RESERVED_LOG_ATTRS = set(vars(logging.makeLogRecord({}))) | {'message', 'asctime'}


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in vars(record).items():
            if key not in _RESERVED_LOG_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def sync_feed(
    client: ICalFeedClient,
    processor: EventProcessor,
    cache: EventCache,
    feed_url: str,
    token: Optional[str] = None,
    source: str = EventProcessor.DEFAULT_SOURCE
) -> ProcessResult:
    """
    Fetch a feed, normalize its events and replace the cache with them.

    A fetch failure propagates unchanged; nothing is parsed and the cache
    keeps its previous contents.

    Args:
        client: Feed retrieval client
        processor: Parse/normalize pipeline
        cache: Cache receiving the normalized events
        feed_url: Published ICS feed URL
        token: Credential for the feed request
        source: Feed source name

    Returns:
        ProcessResult of the pipeline run
    """
    raw_text = client.fetch(feed_url, token=token)
    result = processor.process_feed(raw_text, source=source)
    cache.store(result.events)
    return result


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {'statusCode': status_code, 'body': json.dumps(body)}


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler function for calendar feed sync.

    Actions:
        sync: fetch and normalize the feed, then cache the events
        cached: return the cached events if still fresh

    Args:
        event: Request payload (action, feed_url, token, source)
        context: Lambda context object

    Returns:
        Response dict with statusCode and JSON body
    """
    # Read configuration from environment variables
    table_name = os.environ.get('TABLE_NAME', 'ical-event-cache')
    log_level = os.environ.get('LOG_LEVEL', 'INFO')
    timeout_seconds = int(os.environ.get('TIMEOUT_SECONDS', '30'))
    default_source = os.environ.get('FEED_SOURCE', EventProcessor.DEFAULT_SOURCE)
    default_feed_url = os.environ.get('FEED_URL')

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    event = event or {}
    action = event.get('action', 'sync')
    start_time = time.time()
    logger.info(
        "Lambda execution started",
        extra={'action': action, 'table_name': table_name}
    )

    try:
        cache = DynamoDBEventCache(table_name=table_name)

        if action == 'cached':
            events = cache.read()
            if events is None:
                return _response(404, {'message': 'No cached events'})
            return _response(200, {
                'message': 'Cached events',
                'events': [e.to_dict() for e in events]
            })

        if action != 'sync':
            return _response(400, {'message': f'Unknown action: {action}'})

        feed_url = event.get('feed_url') or default_feed_url
        if not feed_url:
            return _response(400, {'message': 'Feed URL is required'})

        source = event.get('source') or default_source
        client = ICalFeedClient(timeout=timeout_seconds)
        processor = EventProcessor()

        try:
            result = sync_feed(
                client, processor, cache, feed_url,
                token=event.get('token'), source=source
            )
        except FeedFetchError as e:
            logger.error(
                f"Failed to fetch calendar feed: {e}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            duration = time.time() - start_time
            return _response(502, {
                'message': 'Failed to fetch calendar feed',
                'error': str(e),
                'error_type': type(e).__name__,
                'note': 'Previously cached events were left untouched',
                'duration_seconds': round(duration, 2)
            })

        duration = time.time() - start_time
        logger.info(
            "Lambda execution completed successfully",
            extra={
                'duration_seconds': round(duration, 2),
                'blocks_seen': result.blocks_seen,
                'events_normalized': len(result.events),
                'blocks_skipped': len(result.skipped)
            }
        )

        return _response(200, {
            'message': 'Sync completed successfully',
            'statistics': {
                'blocks_seen': result.blocks_seen,
                'events_normalized': len(result.events),
                'blocks_skipped': len(result.skipped),
                'duration_seconds': round(duration, 2)
            },
            'skipped': [
                {'index': s.index, 'uid': s.uid, 'reason': s.reason}
                for s in result.skipped
            ],
            'events': [e.to_dict() for e in result.events]
        })

    except Exception as e:
        duration = time.time() - start_time
        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )
        return _response(500, {
            'message': 'Sync failed',
            'error': str(e),
            'error_type': type(e).__name__,
            'duration_seconds': round(duration, 2)
        })
