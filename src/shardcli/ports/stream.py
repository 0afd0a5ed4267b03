# shardcli/ports/stream.py
from __future__ import annotations

from typing import Protocol, Sequence
from ..domain.models import PollResult, PutResult, Record
from ..domain.value_types import Cursor, IteratorType, ShardId, StreamName


class StreamDataAPI(Protocol):
    """Port for the record-level calls of a partitioned stream service."""

    async def get_shard_iterator(
        self,
        stream: StreamName,
        shard_id: ShardId,
        iterator_type: IteratorType = "LATEST",
    ) -> Cursor:
        """Return the initial cursor for `shard_id`."""

    async def get_records(self, cursor: Cursor) -> PollResult:
        """Return the records at `cursor` and the cursor to use next (None once the shard is drained)."""

    async def put_records(self, stream: StreamName, records: Sequence[Record]) -> PutResult:
        """Write `records` in one call. Any call-level failure raises TransportError."""


class StreamControlAPI(Protocol):
    """Port for stream provisioning."""

    async def create_stream(self, stream: StreamName, shard_count: int) -> None: ...

    async def delete_stream(self, stream: StreamName) -> None: ...

    async def list_streams(self) -> list[StreamName]:
        """Return every stream name, following pagination."""

    async def list_shards(self, stream: StreamName) -> list[ShardId]:
        """Return every shard id of `stream`, following pagination."""
