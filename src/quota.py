"""
Quota policies.

Two explicit policies, picked by QUOTA_MODE:

- credit:  the upstream credit service is the authority and is asked fresh
           on every request. Two concurrent requests can both see a
           positive balance and both send; there is no reservation step
           upstream to prevent it.
- session: a process-lifetime counter against a fixed ceiling. Slots are
           claimed under a lock, so the counter itself never loses updates
           and never goes past the ceiling within one process.

Both follow the same protocol: reserve() returns how many sends were
available before this request (<= 0 means refuse), and release() hands
back a reservation when the dispatch did not happen.
"""

import threading
from typing import Any, Dict, Optional

from src.utils.logger import get_logger
from src.utils.sms_gateway import CreditClient

logger = get_logger("quota")


class CreditServiceQuota:
    def __init__(self, credit_client: CreditClient) -> None:
        self._credit_client = credit_client

    def reserve(self) -> int:
        # QuotaExhaustedError / UpstreamError propagate from the client
        return self._credit_client.check_remaining()

    def release(self) -> None:
        # Nothing was held locally; the credit service is only charged on send.
        return None

    def snapshot(self) -> Optional[Dict[str, Any]]:
        return None


class SessionQuota:
    def __init__(self, limit: int) -> None:
        self._limit = limit
        self._sent = 0
        self._lock = threading.Lock()

    @property
    def sent(self) -> int:
        with self._lock:
            return self._sent

    def reserve(self) -> int:
        with self._lock:
            remaining = self._limit - self._sent
            if remaining <= 0:
                logger.warning(
                    "quota.session_exhausted",
                    extra={"sent": self._sent, "limit": self._limit},
                )
                return 0
            self._sent += 1
            return remaining

    def release(self) -> None:
        with self._lock:
            if self._sent > 0:
                self._sent -= 1

    def snapshot(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            return {"sent": self._sent, "remaining": self._limit - self._sent}
