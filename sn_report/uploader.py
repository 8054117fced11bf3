"""
Chunked upload of normalized records.

Batches are sent strictly one after another. A batch that keeps failing
aborts the whole upload, but batches already sent are NOT rolled back: the
upload is at-least-once and may leave a file partially committed.
"""

import logging
import time
from typing import Any, Callable, Optional, Sequence

from pydantic import BaseModel, Field

from . import settings
from .errors import BatchSendFailure

logger = logging.getLogger(__name__)

SendBatch = Callable[[list], Any]
ProgressSink = Callable[[int, int, int], None]


class RetryPolicy(BaseModel):
    batch_size: int = Field(default=settings.BATCH_SIZE, gt=0)
    max_attempts: int = Field(default=settings.MAX_SEND_ATTEMPTS, gt=0)
    retry_delay: float = Field(default=settings.RETRY_DELAY_SECONDS, ge=0)
    batch_delay: float = Field(default=settings.BATCH_DELAY_SECONDS, ge=0)


def chunk(records: Sequence, size: int) -> list[list]:
    return [list(records[i : i + size]) for i in range(0, len(records), size)]


class ChunkedUploader:
    def __init__(self, policy: Optional[RetryPolicy] = None, sleep: Callable[[float], None] = time.sleep):
        self.policy = policy or RetryPolicy()
        self.sleep = sleep

    def _send_with_retry(self, batch: list, send_batch: SendBatch, batch_index: int, sent: int):
        for attempt in range(1, self.policy.max_attempts + 1):
            try:
                return send_batch(batch)
            except Exception as e:
                # Any exception counts as a failed attempt.
                logger.warning(
                    f"⚠️ Batch {batch_index + 1} attempt {attempt}/{self.policy.max_attempts} failed: {e}"
                )
                if attempt == self.policy.max_attempts:
                    raise BatchSendFailure(batch_index, sent, attempt) from e
                self.sleep(self.policy.retry_delay)

    def upload(
        self,
        records: Sequence,
        send_batch: SendBatch,
        on_progress: Optional[ProgressSink] = None,
    ) -> int:
        """
        Sends `records` in batches and returns how many were sent.
        `on_progress(processed, total, percent)` fires after every completed batch.
        """
        total = len(records)
        batches = chunk(records, self.policy.batch_size)
        logger.info(f"🚀 Uploading {total} records in {len(batches)} batches.")

        processed = 0
        for batch_index, batch in enumerate(batches):
            self._send_with_retry(batch, send_batch, batch_index, processed)
            processed += len(batch)
            percent = round(processed / total * 100)
            logger.info(f"  > Batch {batch_index + 1}/{len(batches)} done ({processed}/{total}, {percent}%).")
            if on_progress:
                on_progress(processed, total, percent)

            if batch_index < len(batches) - 1:
                self.sleep(self.policy.batch_delay)

        logger.info(f"✅ Upload finished: {processed} records sent.")
        return processed
