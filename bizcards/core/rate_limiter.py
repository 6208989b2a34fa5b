"""
In-process rate limiting.

Counters live in this process only, so limits are exact for a single
instance; a horizontally scaled deployment needs a shared store (e.g. Redis)
behind the same interface.
"""
import asyncio
import math
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from fastapi import Request

from bizcards.core.logging_config import logger


@dataclass(frozen=True)
class RateLimitConfig:
    max_attempts: int
    window_seconds: float


RATE_LIMIT_CONFIG: Dict[str, RateLimitConfig] = {
    # Authentication endpoints: 5 attempts per 15 minutes
    "auth": RateLimitConfig(max_attempts=5, window_seconds=15 * 60),
    # General API: 100 requests per minute
    "api": RateLimitConfig(max_attempts=100, window_seconds=60),
}

SWEEP_INTERVAL_SECONDS = 60


@dataclass
class RateLimitEntry:
    count: int
    reset_time: float


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_time: float


class RateLimiter:
    """
    Fixed-window counter keyed by ``{limit_type}:{identifier}``.

    Args:
        clock: Returns the current time in seconds
        configs: Limit classes by name
        sweep_interval: Seconds between evictions of expired windows
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        configs: Optional[Dict[str, RateLimitConfig]] = None,
        sweep_interval: float = SWEEP_INTERVAL_SECONDS,
    ):
        self.clock = clock
        self.configs = configs or RATE_LIMIT_CONFIG
        self.sweep_interval = sweep_interval
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()
        self._sweep_task: Optional[asyncio.Task] = None

    def check(self, identifier: str, limit_type: str = "api") -> RateLimitResult:
        config = self.configs[limit_type]
        now = self.clock()
        key = f"{limit_type}:{identifier}"

        with self._lock:
            entry = self._entries.get(key)

            if entry is None or entry.reset_time < now:
                reset_time = now + config.window_seconds
                self._entries[key] = RateLimitEntry(count=1, reset_time=reset_time)
                return RateLimitResult(allowed=True, remaining=config.max_attempts - 1, reset_time=reset_time)

            if entry.count >= config.max_attempts:
                return RateLimitResult(allowed=False, remaining=0, reset_time=entry.reset_time)

            entry.count += 1
            return RateLimitResult(
                allowed=True,
                remaining=config.max_attempts - entry.count,
                reset_time=entry.reset_time,
            )

    def reset(self, identifier: str, limit_type: str = "api") -> None:
        with self._lock:
            self._entries.pop(f"{limit_type}:{identifier}", None)

    def sweep(self) -> int:
        """Evict expired windows; returns how many were removed."""
        now = self.clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.reset_time < now]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            removed = self.sweep()
            if removed:
                logger.debug(f"Rate limiter evicted {removed} expired entries")

    def start(self) -> None:
        """Start the periodic sweep on the running event loop."""
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.get_running_loop().create_task(self._sweep_forever())

    async def stop(self) -> None:
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None


# Delete confirmation: 5 wrong passwords within 7 minutes lock for 7 minutes
PASSWORD_MAX_ATTEMPTS = 5
PASSWORD_LOCKOUT_SECONDS = 7 * 60


@dataclass
class _AttemptState:
    failures: List[float] = field(default_factory=list)
    locked_until: Optional[float] = None


class PasswordAttemptTracker:
    """
    Lockout for password re-verification before destructive actions.

    This only shapes the user-facing countdown; the password check against
    the stored hash is what actually authorizes the action.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        max_attempts: int = PASSWORD_MAX_ATTEMPTS,
        lockout_seconds: float = PASSWORD_LOCKOUT_SECONDS,
    ):
        self.clock = clock
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds
        self._states: Dict[str, _AttemptState] = {}
        self._lock = threading.Lock()

    def lockout_remaining(self, key: str) -> Optional[float]:
        """Seconds left in an active lockout, or None."""
        now = self.clock()
        with self._lock:
            state = self._states.get(key)
            if state is None or state.locked_until is None:
                return None
            if now >= state.locked_until:
                # Lockout elapsed, start over
                self._states.pop(key, None)
                return None
            return state.locked_until - now

    def record_failure(self, key: str) -> Optional[float]:
        """
        Register a failed attempt.

        Returns:
            Lockout seconds if this failure triggered a lockout, else None
        """
        now = self.clock()
        with self._lock:
            state = self._states.setdefault(key, _AttemptState())
            window_start = now - self.lockout_seconds
            state.failures = [t for t in state.failures if t > window_start]
            state.failures.append(now)
            if len(state.failures) >= self.max_attempts:
                state.locked_until = now + self.lockout_seconds
                return self.lockout_seconds
            return None

    def reset(self, key: str) -> None:
        with self._lock:
            self._states.pop(key, None)


def minutes_left(seconds: float) -> int:
    return max(1, math.ceil(seconds / 60))


def get_client_ip(request: Request) -> str:
    """Best-effort client address behind proxies."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    return "unknown"


rate_limiter = RateLimiter()
password_attempts = PasswordAttemptTracker()
