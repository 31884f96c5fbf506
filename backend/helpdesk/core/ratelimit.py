# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Brute-force throttle for POST /auth/login.

Moving-window counter per client address, backed by the ``limits`` library.
Storage is in-process memory: counters reset when the process restarts and
are not shared between workers.
"""

from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter

from helpdesk.core.errors import RateLimited
from helpdesk.core.logger import logger


class LoginRateLimiter:
    def __init__(self, limit: str):
        self.item = parse(limit)
        self.storage = MemoryStorage()
        self._strategy = MovingWindowRateLimiter(self.storage)

    def hit(self, client_ip: str) -> None:
        """Count one attempt; raise :class:`RateLimited` past the limit."""
        if not self._strategy.hit(self.item, "login", client_ip):
            logger.warning("Login rate limit exceeded | client=%s", client_ip)
            raise RateLimited()

    def reset(self) -> None:
        self.storage.reset()
