from __future__ import annotations

import zlib

from .models import (
    Appended, AppendedAndFlushed, Batch, BatchAction, IngestLimits, Record, Skipped,
)
from .value_types import PartitionKey


def partition_key(payload: bytes) -> PartitionKey:
    """CRC-32 of the payload as 8 lowercase hex chars. Shard routing only, collisions are fine."""
    return PartitionKey(f"{zlib.crc32(payload):08x}")


class BatchAccumulator:
    """
    Turns input lines into put-records batches.

    Ceilings (see IngestLimits):
      - a line longer than max_record_bytes is skipped;
      - the byte ceiling is checked before appending: the pending batch is
        flushed first if the new record would push it over max_batch_bytes;
      - the count ceiling is checked after appending.
    A record at or above max_batch_bytes (only reachable with custom limits)
    is never skipped here; it ends up alone in its batch.
    """

    def __init__(self, limits: IngestLimits | None = None) -> None:
        self.limits = limits or IngestLimits()
        self._records: list[Record] = []
        self._bytes = 0
        self._seen = 0

    @property
    def pending(self) -> int:
        return len(self._records)

    @property
    def pending_bytes(self) -> int:
        return self._bytes

    def offer(self, line: bytes) -> BatchAction:
        self._seen += 1
        idx, size = self._seen, len(line)
        if size > self.limits.max_record_bytes:
            return Skipped(index=idx, size=size)

        record = Record(partition_key=partition_key(line), data=bytes(line))

        flushed: Batch | None = None
        if self._records and self._bytes + size > self.limits.max_batch_bytes:
            flushed = self._take()

        self._records.append(record)
        self._bytes += size

        if len(self._records) == self.limits.max_batch_records:
            # at most one flush per offer: a pre-check flush leaves a single record pending
            flushed = self._take()

        if flushed is not None:
            return AppendedAndFlushed(index=idx, batch=flushed)
        return Appended(index=idx)

    def finish(self) -> Batch | None:
        if not self._records:
            return None
        return self._take()

    def _take(self) -> Batch:
        batch = Batch(records=tuple(self._records))
        self._records = []
        self._bytes = 0
        return batch
