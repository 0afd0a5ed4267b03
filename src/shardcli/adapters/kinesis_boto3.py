from __future__ import annotations
import asyncio, logging
from typing import Any, Callable, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config import ClientConfig
from ..domain.errors import TransportError
from ..domain.models import PollResult, PutResult, Record
from ..domain.value_types import Cursor, IteratorType, ShardId, StreamName
from ..ports.stream import StreamControlAPI, StreamDataAPI

logger = logging.getLogger(__name__)


def _transport_error(op: str, e: Exception) -> TransportError:
    if isinstance(e, ClientError):
        err = e.response.get("Error", {})
        return TransportError(op, err.get("Code"), err.get("Message") or str(e))
    return TransportError(op, None, str(e))


class KinesisClient(StreamDataAPI, StreamControlAPI):
    """Both stream ports over a boto3 Kinesis client. Blocking calls run on a worker thread."""

    def __init__(self, client: Any) -> None:
        self.client = client

    @classmethod
    def from_config(cls, cfg: ClientConfig) -> "KinesisClient":
        session = boto3.Session(profile_name=cfg.profile, region_name=cfg.region)
        return cls(session.client("kinesis", endpoint_url=cfg.endpoint_url))

    async def _call(self, op: str, fn: Callable[..., Any], **kwargs: Any) -> Any:
        try:
            return await asyncio.to_thread(fn, **kwargs)
        except (ClientError, BotoCoreError) as e:
            raise _transport_error(op, e) from e

    # ---- data plane ----

    async def get_shard_iterator(self, stream: StreamName, shard_id: ShardId,
                                 iterator_type: IteratorType = "LATEST") -> Cursor:
        resp = await self._call(
            "GetShardIterator", self.client.get_shard_iterator,
            StreamName=stream, ShardId=shard_id, ShardIteratorType=iterator_type,
        )
        return Cursor(resp["ShardIterator"])

    async def get_records(self, cursor: Cursor) -> PollResult:
        resp = await self._call("GetRecords", self.client.get_records, ShardIterator=cursor)
        nxt = resp.get("NextShardIterator")
        return PollResult(
            records=tuple(r.get("Data") or b"" for r in resp.get("Records", [])),
            next_cursor=Cursor(nxt) if nxt else None,
            millis_behind_latest=resp.get("MillisBehindLatest"),
        )

    async def put_records(self, stream: StreamName, records: Sequence[Record]) -> PutResult:
        entries = [{"Data": r.data, "PartitionKey": r.partition_key} for r in records]
        resp = await self._call("PutRecords", self.client.put_records,
                                StreamName=stream, Records=entries)
        return PutResult(
            record_count=len(entries),
            failed_record_count=int(resp.get("FailedRecordCount") or 0),
        )

    # ---- control plane ----

    async def create_stream(self, stream: StreamName, shard_count: int) -> None:
        await self._call("CreateStream", self.client.create_stream,
                         StreamName=stream, ShardCount=shard_count)

    async def delete_stream(self, stream: StreamName) -> None:
        await self._call("DeleteStream", self.client.delete_stream, StreamName=stream)

    async def list_streams(self) -> list[StreamName]:
        return await self._call("ListStreams", self._list_streams_sync)

    async def list_shards(self, stream: StreamName) -> list[ShardId]:
        return await self._call("ListShards", self._list_shards_sync, stream=stream)

    def _list_streams_sync(self) -> list[StreamName]:
        out: list[StreamName] = []
        for page in self.client.get_paginator("list_streams").paginate():
            out.extend(StreamName(n) for n in page.get("StreamNames", []))
        return out

    def _list_shards_sync(self, stream: StreamName) -> list[ShardId]:
        # not the list_shards paginator: it resends StreamName with NextToken,
        # and the service rejects that pair
        out: list[ShardId] = []
        kwargs: dict[str, Any] = {"StreamName": stream}
        while True:
            resp = self.client.list_shards(**kwargs)
            out.extend(ShardId(s["ShardId"]) for s in resp.get("Shards", []))
            token = resp.get("NextToken")
            if not token:
                return out
            kwargs = {"NextToken": token}
