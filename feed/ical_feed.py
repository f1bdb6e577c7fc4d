"""HTTP client fetching published iCalendar feeds."""
import logging
import time
from typing import Optional
from urllib.parse import urlparse

import requests

logger = logging.getLogger(__name__)


class FeedFetchError(Exception):
    """Raised when a calendar feed cannot be retrieved."""


class InvalidFeedUrl(FeedFetchError):
    """Raised when the feed URL is not an absolute http(s) URL."""


class NotCalendarData(FeedFetchError):
    """Raised when the URL answers with something other than iCalendar text."""


class ICalFeedClient:
    """Client for published ICS calendar feeds (e.g. Outlook published calendars)."""

    USER_AGENT = 'ical-feed-sync/1.0'
    ACCEPT = 'text/calendar, application/ics, text/plain'
    CALENDAR_MARKER = 'BEGIN:VCALENDAR'

    def __init__(self, timeout: int = 30, max_retries: int = 3):
        """
        Initialize the feed client.

        Args:
            timeout: HTTP request timeout in seconds (default: 30)
            max_retries: Attempts before giving up (default: 3)
        """
        self.timeout = timeout
        self.max_retries = max(1, max_retries)

    def fetch(self, feed_url: str, token: Optional[str] = None) -> str:
        """
        Fetch the raw text of a calendar feed.

        Args:
            feed_url: Published ICS feed URL
            token: Bearer credential sent with the request, if any

        Returns:
            Raw iCalendar text

        Raises:
            InvalidFeedUrl: If feed_url is not an http(s) URL
            NotCalendarData: If the response is HTML or lacks a VCALENDAR
            FeedFetchError: If all retry attempts fail
        """
        self._validate_url(feed_url)
        logger.info(f"Fetching calendar feed: {feed_url}")

        response = self._get_with_retries(feed_url, token)

        content_type = response.headers.get('Content-Type', '')
        text = response.text
        if self.CALENDAR_MARKER not in text or 'text/html' in content_type:
            raise NotCalendarData(
                "The URL returned HTML instead of calendar data. Use the public "
                "ICS link from the calendar's publishing settings."
            )

        logger.info(f"Fetched {len(text)} characters of calendar data")
        return text

    def _validate_url(self, feed_url: str) -> None:
        parsed = urlparse(feed_url or '')
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise InvalidFeedUrl(f"Invalid feed URL: {feed_url!r}")

    def _get_with_retries(self, feed_url: str, token: Optional[str]) -> requests.Response:
        """
        GET the feed with exponential backoff between attempts.

        Raises:
            FeedFetchError: If all retry attempts fail
        """
        headers = {'User-Agent': self.USER_AGENT, 'Accept': self.ACCEPT}
        if token:
            headers['Authorization'] = f'Bearer {token}'

        base_delay = 1  # seconds

        for attempt in range(self.max_retries):
            try:
                logger.info(f"Requesting feed (attempt {attempt + 1}/{self.max_retries})")
                response = requests.get(feed_url, headers=headers, timeout=self.timeout)
                response.raise_for_status()
                return response

            except requests.RequestException as e:
                if attempt < self.max_retries - 1:
                    delay = base_delay * (2 ** attempt)
                    logger.warning(
                        f"Request failed (attempt {attempt + 1}/{self.max_retries}): {e}. "
                        f"Retrying in {delay} seconds..."
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"All {self.max_retries} retry attempts failed. Last error: {e}"
                    )
                    raise FeedFetchError(f"Failed to fetch calendar feed: {e}") from e
