from __future__ import annotations
from typing import NewType, Literal

StreamName   = NewType("StreamName", str)
ShardId      = NewType("ShardId", str)        # shardId-000000000000
Cursor       = NewType("Cursor", str)         # opaque shard iterator
PartitionKey = NewType("PartitionKey", str)   # 8-char lowercase hex (crc32)
IteratorType = Literal["LATEST"]
