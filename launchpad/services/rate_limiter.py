"""
Per-requester launch cooldown.

There is no table of its own: the most recent ``Token.deployed_at`` for a
requester is the checkpoint, so the limiter is a read-only view over the
deployment ledger.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from launchpad.config import settings
from launchpad.services.token_store import TokenStore
from launchpad.utils.timeutils import isoformat_utc, utcnow


@dataclass
class RateLimitStatus:
    allowed: bool
    next_allowed_at: Optional[datetime]
    remaining_ms: int

    @property
    def cooldown(self) -> Optional[str]:
        return format_cooldown(self.remaining_ms) if self.remaining_ms > 0 else None

    def to_dict(self) -> dict:
        return {
            "allowed": self.allowed,
            "next_allowed_at": isoformat_utc(self.next_allowed_at),
            "remaining_ms": self.remaining_ms,
            "cooldown": self.cooldown,
        }


def format_cooldown(ms: int) -> str:
    """Render a remaining cooldown as ``"5h 12m"`` or ``"12m"``"""
    hours = ms // (60 * 60 * 1000)
    minutes = (ms % (60 * 60 * 1000)) // (60 * 1000)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


class RateLimiter:
    def __init__(self, token_store: TokenStore, cooldown: Optional[timedelta] = None):
        self.token_store = token_store
        self.cooldown = cooldown or timedelta(hours=settings.LAUNCH_COOLDOWN_HOURS)

    @property
    def cooldown_ms(self) -> int:
        return int(self.cooldown / timedelta(milliseconds=1))

    def check(self, address: str, now: Optional[datetime] = None) -> RateLimitStatus:
        last_launch = self.token_store.latest_launch_at(address)
        if last_launch is None:
            return RateLimitStatus(allowed=True, next_allowed_at=None, remaining_ms=0)

        now = now or utcnow()
        elapsed_ms = int((now - last_launch) / timedelta(milliseconds=1))

        if elapsed_ms >= self.cooldown_ms:
            return RateLimitStatus(allowed=True, next_allowed_at=None, remaining_ms=0)

        return RateLimitStatus(
            allowed=False,
            next_allowed_at=last_launch + self.cooldown,
            remaining_ms=self.cooldown_ms - elapsed_ms,
        )
