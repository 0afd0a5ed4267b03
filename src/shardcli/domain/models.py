from __future__ import annotations
from dataclasses import dataclass
from typing import Union
from .value_types import Cursor, PartitionKey

ONE_MIB = 1024 * 1024

@dataclass(slots=True, frozen=True)
class IngestLimits:
    max_record_bytes: int = ONE_MIB
    max_batch_bytes: int = 5 * ONE_MIB
    max_batch_records: int = 500

@dataclass(slots=True, frozen=True)
class Record:
    partition_key: PartitionKey
    data: bytes
    def size(self) -> int: return len(self.data)

@dataclass(slots=True, frozen=True)
class Batch:
    records: tuple[Record, ...]
    def __len__(self) -> int: return len(self.records)
    def byte_size(self) -> int: return sum(r.size() for r in self.records)

@dataclass(slots=True, frozen=True)
class PollResult:
    records: tuple[bytes, ...]
    next_cursor: Cursor | None
    millis_behind_latest: int | None = None

@dataclass(slots=True, frozen=True)
class PutResult:
    record_count: int
    failed_record_count: int = 0

# ---- accumulator actions ----

@dataclass(slots=True, frozen=True)
class Appended:
    index: int

@dataclass(slots=True, frozen=True)
class AppendedAndFlushed:
    index: int
    batch: Batch    # may not contain the record at `index` (byte pre-check flush)

@dataclass(slots=True, frozen=True)
class Skipped:
    index: int
    size: int

BatchAction = Union[Appended, AppendedAndFlushed, Skipped]
