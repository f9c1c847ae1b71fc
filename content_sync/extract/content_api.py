import logging
import time
from typing import List, Optional

import requests
from pydantic import ValidationError

from ..errors import ContentApiError
from ..models import ContentEntry, ContentListResponse

logger = logging.getLogger(__name__)


class ContentApiClient:
    def __init__(self, api_url: str, retry_attempts: int = 5, retry_delay_ms: int = 1000):
        self.api_url = api_url
        self.retry_attempts = max(1, retry_attempts)
        self.retry_delay_ms = retry_delay_ms
        self.headers = {"Accept": "application/json"}

    def fetch_page(self, cursor: Optional[str] = None) -> ContentListResponse:
        params = {"cursor": cursor} if cursor else None
        last_error = None

        for attempt in range(1, self.retry_attempts + 1):
            try:
                response = requests.get(self.api_url, headers=self.headers, params=params, timeout=30)
                if response.status_code != 200:
                    raise ContentApiError(f"{response.status_code} {response.text[:200]}")
                return ContentListResponse.model_validate(response.json())
            except (requests.RequestException, ValueError, ValidationError, ContentApiError) as e:
                last_error = e
                logger.warning(f"Content API fetch failed (attempt {attempt}/{self.retry_attempts}): {e}")
                if attempt < self.retry_attempts:
                    time.sleep(self.retry_delay_ms / 1000)

        raise ContentApiError(f"Could not fetch {self.api_url}: {last_error}")

    def fetch_all_entries(self) -> List[ContentEntry]:
        """Follows nextCursor until the API reports no more pages."""
        entries = []
        cursor = None
        seen_cursors = set()

        while True:
            page = self.fetch_page(cursor)
            entries.extend(page.entries)
            if not page.has_more or not page.next_cursor or page.next_cursor in seen_cursors:
                break
            seen_cursors.add(page.next_cursor)
            cursor = page.next_cursor
            time.sleep(self.retry_delay_ms / 1000)

        logger.info(f"Fetched {len(entries)} entries from content API")
        return entries
