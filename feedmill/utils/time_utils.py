import re
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from feedmill.errors import BatchTimeoutError

# Twitter's created_at, e.g. "Sun May 23 19:30:00 +0200 2021". Names are always
# English, so they are matched here rather than through the locale-bound %a/%b.
TWITTER_DATE_RE = re.compile(
    r"^(?:Mon|Tue|Wed|Thu|Fri|Sat|Sun) ([A-Z][a-z]{2}) (\d{1,2}) (\d{2}):(\d{2}):(\d{2}) ([+-])(\d{2})(\d{2}) (\d{4})$"
)
MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def parse_twitter_date(value: str) -> datetime:
    """Parse Twitter's created_at. Raises ValueError on malformed input."""
    m = TWITTER_DATE_RE.match(value.strip())
    if not m or m.group(1) not in MONTHS:
        raise ValueError(f"not a Twitter timestamp: {value!r}")
    month = MONTHS.index(m.group(1)) + 1
    day, hour, minute, second = (int(m.group(i)) for i in range(2, 6))
    offset = timedelta(hours=int(m.group(7)), minutes=int(m.group(8)))
    if m.group(6) == "-":
        offset = -offset
    return datetime(int(m.group(9)), month, day, hour, minute, second, tzinfo=timezone(offset))


def from_unix(ts: int) -> datetime:
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Deadline:
    """Absolute point on the monotonic clock shared by one batch."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.expires_at = clock() + seconds

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    def expired(self) -> bool:
        return self.remaining() <= 0.0

    def timeout(self, cap: Optional[float] = None) -> float:
        """Remaining time as a requests timeout; raises once the deadline has passed."""
        left = self.remaining()
        if left <= 0.0:
            raise BatchTimeoutError("batch deadline exceeded")
        if cap is not None:
            left = min(left, cap)
        return left
