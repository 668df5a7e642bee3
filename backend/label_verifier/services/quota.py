"""Total-request quota protecting extraction API credits."""

import threading
import logging

logger = logging.getLogger(__name__)


class QuotaExceededError(RuntimeError):
    """Raised when the request quota for this process is used up."""

    def __init__(self, max_total: int):
        self.max_total = max_total
        super().__init__(
            f"Demo quota exceeded ({max_total} requests). This is a prototype with "
            "limited API credits. For production use, please contact the developer."
        )


class QuotaService:
    """
    Counts verification requests against a fixed maximum.

    One instance lives for the lifetime of the application; it starts at zero
    and is not persisted.
    """

    def __init__(self, max_total: int):
        self.max_total = max_total
        self._used = 0
        self._lock = threading.Lock()

    @property
    def used(self) -> int:
        return self._used

    @property
    def remaining(self) -> int:
        return max(0, self.max_total - self._used)

    def acquire(self) -> None:
        """
        Count one request.

        Raises:
            QuotaExceededError: If the quota is already used up
        """
        with self._lock:
            if self._used >= self.max_total:
                raise QuotaExceededError(self.max_total)
            self._used += 1
            used = self._used

        logger.info(f"Total API requests used: {used}/{self.max_total}")

    def reset(self) -> None:
        with self._lock:
            self._used = 0
