# Shared fakes for the stream ports: scripted, in-memory, no network.
from __future__ import annotations

from collections import deque
from typing import Sequence

import pytest

from shardcli.application.polling import IntervalTicker
from shardcli.domain.errors import TransportError
from shardcli.domain.models import PollResult, PutResult, Record
from shardcli.domain.value_types import Cursor, ShardId, StreamName


class FakeStream:
    """
    `polls` is consumed one item per get_records call; an Exception item is
    raised instead of returned. `put_errors` maps a 1-based put call number to
    the exception that call raises.
    """

    def __init__(
        self,
        polls: Sequence[PollResult | Exception] = (),
        *,
        first_cursor: str = "it-0",
        positioning_error: Exception | None = None,
        put_errors: dict[int, Exception] | None = None,
        rejected_per_put: int = 0,
        streams: dict[str, list[str]] | None = None,
    ) -> None:
        self.polls = deque(polls)
        self.first_cursor = first_cursor
        self.positioning_error = positioning_error
        self.put_errors = put_errors or {}
        self.rejected_per_put = rejected_per_put
        self.streams = streams if streams is not None else {}
        self.iterator_calls: list[tuple[str, str, str]] = []
        self.cursors_seen: list[str] = []
        self.put_calls: list[tuple[str, tuple[Record, ...]]] = []

    async def get_shard_iterator(self, stream: StreamName, shard_id: ShardId, iterator_type="LATEST") -> Cursor:
        self.iterator_calls.append((stream, shard_id, iterator_type))
        if self.positioning_error is not None:
            raise self.positioning_error
        return Cursor(self.first_cursor)

    async def get_records(self, cursor: Cursor) -> PollResult:
        self.cursors_seen.append(cursor)
        item = self.polls.popleft()
        if isinstance(item, Exception):
            raise item
        return item

    async def put_records(self, stream: StreamName, records: Sequence[Record]) -> PutResult:
        self.put_calls.append((stream, tuple(records)))
        err = self.put_errors.get(len(self.put_calls))
        if err is not None:
            raise err
        return PutResult(record_count=len(records), failed_record_count=self.rejected_per_put)

    async def create_stream(self, stream: StreamName, shard_count: int) -> None:
        self.streams[stream] = [f"shardId-{i:012d}" for i in range(shard_count)]

    async def delete_stream(self, stream: StreamName) -> None:
        if stream not in self.streams:
            raise TransportError("DeleteStream", "ResourceNotFoundException", f"Stream {stream} not found")
        del self.streams[stream]

    async def list_streams(self) -> list[StreamName]:
        return [StreamName(s) for s in self.streams]

    async def list_shards(self, stream: StreamName) -> list[ShardId]:
        return [ShardId(s) for s in self.streams[stream]]


class ListSink:
    def __init__(self) -> None:
        self.lines: list[str] = []

    def write_line(self, line: str) -> None:
        self.lines.append(line)


def poll(*payloads: bytes, next_cursor: str | None) -> PollResult:
    return PollResult(records=tuple(payloads), next_cursor=Cursor(next_cursor) if next_cursor else None)


def throttled(op: str = "GetRecords") -> TransportError:
    return TransportError(op, "ProvisionedThroughputExceededException", "Rate exceeded for shard")


@pytest.fixture
def sink() -> ListSink:
    return ListSink()


@pytest.fixture
def no_wait() -> IntervalTicker:
    return IntervalTicker(0.0)
