from __future__ import annotations
import asyncio, enum, logging, time
from typing import Awaitable, Callable

from ..domain.decoding import decode_record
from ..domain.value_types import Cursor, ShardId, StreamName
from ..ports.sink import LineSink
from ..ports.stream import StreamDataAPI

logger = logging.getLogger(__name__)

# One GetRecords per slot keeps a single reader well under the per-shard 5 reads/s limit.
POLL_INTERVAL_S = 0.205


class IntervalTicker:
    """
    Fixed wall-clock cadence. The first tick returns immediately; later ticks
    wait for the next slot. A tick that is already late re-anchors the schedule
    on "now" rather than firing a burst of catch-up ticks.
    """

    def __init__(
        self,
        period_s: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.period_s = period_s
        self._clock = clock
        self._sleep = sleep
        self._next: float | None = None

    async def tick(self) -> None:
        now = self._clock()
        if self._next is None:
            self._next = now + self.period_s
            return
        delay = self._next - now
        if delay > 0:
            await self._sleep(delay)
            self._next += self.period_s
        else:
            self._next = now + self.period_s


class TailState(enum.Enum):
    POSITIONING = "positioning"
    POLLING = "polling"
    DRAINED = "drained"     # shard closed and fully read
    FAILED = "failed"


class ShardTail:
    """
    Follows one shard from its newest record onwards.

    POSITIONING -> POLLING -> (POLLING | DRAINED | FAILED). The cursor handed
    back by each poll replaces the current one; an absent cursor means the
    shard is closed and drained. Transport and decode errors move the tail to
    FAILED and are re-raised; retrying is left to the caller.
    """

    def __init__(
        self,
        api: StreamDataAPI,
        stream: StreamName,
        shard_id: ShardId,
        sink: LineSink,
        *,
        ticker: IntervalTicker | None = None,
    ) -> None:
        self.api = api
        self.stream = stream
        self.shard_id = shard_id
        self.sink = sink
        self.ticker = ticker or IntervalTicker(POLL_INTERVAL_S)
        self.state = TailState.POSITIONING
        self.cursor: Cursor | None = None
        self.error: Exception | None = None
        self.polls = 0
        self.records = 0

    async def run(self) -> TailState:
        if self.state is not TailState.POSITIONING:
            raise RuntimeError(f"tail already {self.state.value}")
        try:
            self.cursor = await self.api.get_shard_iterator(self.stream, self.shard_id, "LATEST")
            logger.debug("positioned on %s/%s", self.stream, self.shard_id)
            self.state = TailState.POLLING
            while self.state is TailState.POLLING:
                await self.ticker.tick()
                await self._poll(self.cursor)
        except Exception as e:
            self.state = TailState.FAILED
            self.error = e
            raise
        logger.debug("shard %s drained after %d polls, %d records", self.shard_id, self.polls, self.records)
        return self.state

    async def _poll(self, cursor: Cursor) -> None:
        res = await self.api.get_records(cursor)
        self.polls += 1
        if res.records:
            logger.debug("poll #%d: %d records, %s ms behind",
                         self.polls, len(res.records), res.millis_behind_latest)
        for payload in res.records:
            self.sink.write_line(decode_record(payload))
            self.records += 1
        self.cursor = res.next_cursor
        if self.cursor is None:
            self.state = TailState.DRAINED
