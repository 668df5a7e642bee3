"""Tests for the request quota."""

import threading

import pytest

from label_verifier.services import QuotaService, QuotaExceededError


class TestQuotaService:
    """Test total-request counting."""

    def test_counts_requests(self):
        quota = QuotaService(3)

        quota.acquire()
        quota.acquire()

        assert quota.used == 2
        assert quota.remaining == 1

    def test_rejects_past_limit(self):
        quota = QuotaService(2)
        quota.acquire()
        quota.acquire()

        with pytest.raises(QuotaExceededError) as exc_info:
            quota.acquire()

        assert exc_info.value.max_total == 2
        assert "Demo quota exceeded (2 requests)" in str(exc_info.value)
        assert quota.used == 2
        assert quota.remaining == 0

    def test_reset(self):
        quota = QuotaService(1)
        quota.acquire()

        quota.reset()

        assert quota.used == 0
        quota.acquire()

    def test_concurrent_acquire(self):
        """Test exactly max_total of many concurrent requests get through."""
        quota = QuotaService(30)
        accepted = []
        rejected = []

        def worker():
            try:
                quota.acquire()
                accepted.append(1)
            except QuotaExceededError:
                rejected.append(1)

        threads = [threading.Thread(target=worker) for _ in range(50)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(accepted) == 30
        assert len(rejected) == 20
        assert quota.remaining == 0
