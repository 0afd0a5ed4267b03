# shardcli/ports/sink.py
from __future__ import annotations
from typing import Protocol

class LineSink(Protocol):
    """Port for where tailed lines go (stdout in the CLI, a list in tests)."""

    def write_line(self, line: str) -> None: ...
