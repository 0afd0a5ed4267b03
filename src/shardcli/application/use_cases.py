from __future__ import annotations
import logging
from typing import Iterable

from ..domain.batching import BatchAccumulator
from ..domain.errors import OversizedRecord
from ..domain.models import AppendedAndFlushed, Batch, IngestLimits, Skipped
from ..domain.value_types import ShardId, StreamName
from ..ports.sink import LineSink
from ..ports.stream import StreamControlAPI, StreamDataAPI
from .dispatch import WriteDispatcher
from .polling import IntervalTicker, ShardTail, TailState

logger = logging.getLogger(__name__)


async def push_lines(
    *,
    api: StreamDataAPI,
    stream: StreamName,
    lines: Iterable[bytes],
    limits: IngestLimits | None = None,
) -> dict[str, int]:
    """
    Batch `lines` and write each batch before reading further input.
    Oversized lines are logged and dropped; the first failed write aborts.
    """
    acc = BatchAccumulator(limits)
    dispatcher = WriteDispatcher(api)
    seen = skipped = sent = sent_bytes = batches = failed = 0

    async def send(batch: Batch) -> None:
        nonlocal sent, sent_bytes, batches, failed
        res = await dispatcher.dispatch(stream, batch)
        batches += 1
        sent += len(batch)
        sent_bytes += batch.byte_size()
        failed += res.failed_record_count

    for line in lines:
        seen += 1
        action = acc.offer(line)
        if isinstance(action, Skipped):
            skipped += 1
            logger.warning("%s", OversizedRecord(action.index, action.size, acc.limits.max_record_bytes))
        elif isinstance(action, AppendedAndFlushed):
            await send(action.batch)

    last = acc.finish()
    if last is not None:
        await send(last)

    return {
        "lines_seen": seen,
        "lines_skipped": skipped,
        "records_sent": sent,
        "bytes_sent": sent_bytes,
        "batches": batches,
        "failed_records": failed,
    }


async def tail_shard(
    *,
    api: StreamDataAPI,
    stream: StreamName,
    shard_id: ShardId,
    sink: LineSink,
    ticker: IntervalTicker | None = None,
) -> TailState:
    return await ShardTail(api, stream, shard_id, sink, ticker=ticker).run()


# ---- provisioning ----

async def create_stream(api: StreamControlAPI, stream: StreamName, shard_count: int) -> None:
    if shard_count < 1:
        raise ValueError("shard_count must be >= 1")
    await api.create_stream(stream, shard_count)

async def delete_stream(api: StreamControlAPI, stream: StreamName) -> None:
    await api.delete_stream(stream)

async def list_streams(api: StreamControlAPI) -> list[StreamName]:
    return await api.list_streams()

async def list_shards(api: StreamControlAPI, stream: StreamName) -> list[ShardId]:
    return await api.list_shards(stream)
