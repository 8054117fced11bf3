"""Tests for sn_report/uploader.py (chunked upload with bounded retry)."""

import pytest

from sn_report.errors import BatchSendFailure
from sn_report.uploader import ChunkedUploader, RetryPolicy, chunk


def _sender(failures_by_batch):
    """Builds a sender failing `failures_by_batch[i]` times for the i-th distinct batch."""
    calls = []
    seen = []

    def send(batch):
        calls.append(list(batch))
        key = batch[0]
        if key not in seen:
            seen.append(key)
        batch_index = seen.index(key)
        attempts = sum(1 for c in calls if c[0] == key)
        if attempts <= failures_by_batch.get(batch_index, 0):
            raise ConnectionError(f"batch {batch_index} attempt {attempts} failed")

    send.calls = calls
    return send


class TestChunk:
    def test_sizes(self):
        assert [len(c) for c in chunk(list(range(1200)), 500)] == [500, 500, 200]

    def test_empty(self):
        assert chunk([], 500) == []


class TestUpload:
    def test_1200_records_three_batches(self, fake_sleep):
        records = list(range(1200))
        send = _sender({})
        progress = []

        sent = ChunkedUploader(sleep=fake_sleep).upload(
            records, send, on_progress=lambda *args: progress.append(args)
        )

        assert sent == 1200
        assert [len(c) for c in send.calls] == [500, 500, 200]
        assert progress == [(500, 1200, 42), (1000, 1200, 83), (1200, 1200, 100)]
        # Throttle between batches only.
        assert fake_sleep.calls == [0.5, 0.5]

    def test_batches_preserve_order(self, fake_sleep):
        records = list(range(7))
        send = _sender({})
        ChunkedUploader(RetryPolicy(batch_size=3), sleep=fake_sleep).upload(records, send)
        assert send.calls == [[0, 1, 2], [3, 4, 5], [6]]

    def test_fail_twice_then_succeed(self, fake_sleep):
        send = _sender({0: 2})
        progress = []

        sent = ChunkedUploader(sleep=fake_sleep).upload(
            list(range(10)), send, on_progress=lambda *args: progress.append(args)
        )

        assert sent == 10
        assert len(send.calls) == 3
        assert fake_sleep.calls == [2.0, 2.0]
        assert progress == [(10, 10, 100)]

    def test_three_failures_abort_upload(self, fake_sleep):
        send = _sender({1: 3})
        progress = []

        with pytest.raises(BatchSendFailure) as exc_info:
            ChunkedUploader(sleep=fake_sleep).upload(
                list(range(1200)), send, on_progress=lambda *args: progress.append(args)
            )

        error = exc_info.value
        assert error.batch_index == 1
        assert error.sent_count == 500
        assert error.attempts == 3
        assert isinstance(error.__cause__, ConnectionError)
        # First batch once, second batch three times, third batch never.
        assert [c[0] for c in send.calls] == [0, 500, 500, 500]
        assert progress == [(500, 1200, 42)]
        assert fake_sleep.calls == [0.5, 2.0, 2.0]

    def test_any_exception_is_retried(self, fake_sleep):
        attempts = []

        def send(batch):
            attempts.append(1)
            if len(attempts) == 1:
                raise ValueError("server rejected payload")

        ChunkedUploader(sleep=fake_sleep).upload([1, 2], send)
        assert len(attempts) == 2

    def test_custom_policy(self, fake_sleep):
        policy = RetryPolicy(batch_size=2, max_attempts=1, retry_delay=0, batch_delay=0)
        send = _sender({0: 1})
        with pytest.raises(BatchSendFailure):
            ChunkedUploader(policy, sleep=fake_sleep).upload([1, 2, 3], send)
        assert len(send.calls) == 1
        assert fake_sleep.calls == []

    def test_no_records(self, fake_sleep):
        send = _sender({})
        progress = []
        assert ChunkedUploader(sleep=fake_sleep).upload([], send, lambda *a: progress.append(a)) == 0
        assert send.calls == []
        assert progress == []

    def test_default_policy(self):
        policy = RetryPolicy()
        assert policy.batch_size == 500
        assert policy.max_attempts == 3
        assert policy.retry_delay == 2.0
        assert policy.batch_delay == 0.5
