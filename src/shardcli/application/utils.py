from typing import BinaryIO, Iterator

from ..domain.models import ONE_MIB
from ..domain.value_types import ShardId


def make_shard_id(index: int) -> ShardId:
    return ShardId(f"shardId-{index:012d}")


def iter_lines(stream: BinaryIO) -> Iterator[bytes]:
    """Yield lines without their trailing \\n or \\r\\n, read lazily."""
    for raw in stream:
        if raw.endswith(b"\n"):
            raw = raw[:-1]
            if raw.endswith(b"\r"):
                raw = raw[:-1]
        yield raw


def mib_per_s(n_bytes: int, elapsed_s: float) -> float:
    if elapsed_s <= 0:
        return 0.0
    return n_bytes / ONE_MIB / elapsed_s
