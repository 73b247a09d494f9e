"""
Fetch telemetry and request pacing for Dcard Thread Relay.

Counts comment-page and reply fetches separately, along with the
rate-limit responses and exhausted retries seen along the way, so the
end-of-run log shows where the Dcard API pushed back.
"""

import random
from collections import Counter
from dataclasses import dataclass, field

COMMENT_PAGE = "comment_page"
REPLIES = "replies"


@dataclass
class FetchStats:
    """
    Outcome counts for the Dcard API fetches of one run.

    Attributes:
        fetched: Successful fetches keyed by kind (``comment_page`` / ``replies``)
        failed: Failed fetches keyed by kind
        status_codes: Every HTTP status seen, including retried ones
        rate_limited: Number of 429 responses
        retry_reasons: Exhausted-retry failures keyed by last error
    """
    fetched: Counter = field(default_factory=Counter)
    failed: Counter = field(default_factory=Counter)
    status_codes: Counter = field(default_factory=Counter)
    rate_limited: int = 0
    retry_reasons: Counter = field(default_factory=Counter)

    def record_status(self, status_code: int):
        self.status_codes[status_code] += 1
        if status_code == 429:
            self.rate_limited += 1

    def record_fetch(self, kind: str, ok: bool):
        """Record the final outcome of one comment-page or replies fetch."""
        if ok:
            self.fetched[kind] += 1
        else:
            self.failed[kind] += 1

    def record_retry_exhausted(self, reason: str):
        self.retry_reasons[reason] += 1

    @property
    def retry_exhausted(self) -> int:
        return sum(self.retry_reasons.values())

    def get_summary(self) -> str:
        lines = [
            f"Comment pages: {self.fetched[COMMENT_PAGE]} fetched, {self.failed[COMMENT_PAGE]} failed",
            f"Reply fetches: {self.fetched[REPLIES]} fetched, {self.failed[REPLIES]} failed",
        ]
        if self.rate_limited:
            lines.append(f"Rate limited (429): {self.rate_limited}")
        for reason, count in sorted(self.retry_reasons.items()):
            lines.append(f"Gave up after retries ({reason}): {count}")
        return "\n".join(lines)


def add_jitter(base_delay: float, jitter: float) -> float:
    """
    Add up to ``jitter`` seconds of random delay on top of ``base_delay``.

    Example:
        # Returns a value between 1.0 and 1.5
        delay = add_jitter(1.0, 0.5)
    """
    if jitter <= 0:
        return max(0.0, base_delay)
    return max(0.0, base_delay + random.uniform(0, jitter))
