from __future__ import annotations
import logging

from ..domain.models import Batch, PutResult
from ..domain.value_types import StreamName
from ..ports.stream import StreamDataAPI

logger = logging.getLogger(__name__)


class WriteDispatcher:
    """One put_records call per batch. No retry: a failed call raises TransportError and ingestion stops."""

    def __init__(self, api: StreamDataAPI) -> None:
        self.api = api

    async def dispatch(self, stream: StreamName, batch: Batch) -> PutResult:
        logger.debug("put_records stream=%s records=%d bytes=%d", stream, len(batch), batch.byte_size())
        res = await self.api.put_records(stream, batch.records)
        if res.failed_record_count:
            logger.warning("%d of %d records rejected by stream `%s`",
                           res.failed_record_count, res.record_count, stream)
        return res
