"""Request throttling for the Contentful Management API.

The throttle is a coarse, process-wide gate rather than a token bucket:
every outbound call increments a shared counter and is delayed by
``floor(request_count / requests_per_second) * interval`` seconds. The delay
grows with the number of calls made during the run and never shrinks.
"""

import threading
import time
from typing import Any, Dict, Mapping, Optional

from ..exceptions import UploadAborted

DEFAULT_REQUESTS_PER_SECOND = 10
DEFAULT_INTERVAL = 4.0

SECOND_LIMIT_HEADER = "X-Contentful-RateLimit-Second-Limit"
SECOND_REMAINING_HEADER = "X-Contentful-RateLimit-Second-Remaining"


def _parse_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class RateThrottle:
    """Shared request counter that spaces out API calls."""

    def __init__(
        self,
        requests_per_second: int = DEFAULT_REQUESTS_PER_SECOND,
        request_count: int = 0,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        """Initialize the throttle.

        Args:
            requests_per_second: Allowed requests per second
            request_count: Requests already spent when the throttle starts
            interval: Seconds added to the delay per full second of quota used
        """
        self.requests_per_second = max(1, requests_per_second)
        self.request_count = max(0, request_count)
        self.interval = interval
        self._lock = threading.Lock()

    def seed(self, requests_per_second: int, remaining: int) -> None:
        """Seed the counter from the quota reported by the API.

        Args:
            requests_per_second: Limit reported by the API
            remaining: Requests remaining in the current second
        """
        with self._lock:
            self.requests_per_second = max(1, requests_per_second)
            self.request_count = max(0, requests_per_second - remaining)

    def seed_from_headers(self, headers: Mapping[str, str]) -> bool:
        """Seed the counter from Contentful rate limit headers.

        Args:
            headers: Response headers of the content type request

        Returns:
            True if both headers were present and numeric
        """
        limit = _parse_int(headers.get(SECOND_LIMIT_HEADER))
        remaining = _parse_int(headers.get(SECOND_REMAINING_HEADER))
        if limit is None or remaining is None or limit <= 0:
            return False

        self.seed(limit, remaining)
        return True

    def compute_delay(self, request_count: int) -> float:
        """Delay in seconds for the call with the given sequence number."""
        return (request_count // self.requests_per_second) * self.interval

    def next_delay(self) -> float:
        """Count one more request and return how long it must wait."""
        with self._lock:
            self.request_count += 1
            return self.compute_delay(self.request_count)

    def wait(self, abort: Optional[threading.Event] = None) -> float:
        """Block until the next request may be sent.

        Args:
            abort: Event that cancels the wait when set

        Returns:
            The delay that was applied, in seconds

        Raises:
            UploadAborted: If ``abort`` is set before or during the wait
        """
        delay = self.next_delay()

        if abort is None:
            if delay > 0:
                time.sleep(delay)
            return delay

        if abort.is_set() or abort.wait(delay):
            raise UploadAborted("Request cancelled after an earlier failure")
        return delay

    def get_state(self) -> Dict[str, int]:
        """Get the current counter state."""
        with self._lock:
            return {
                "request_count": self.request_count,
                "requests_per_second": self.requests_per_second,
            }
