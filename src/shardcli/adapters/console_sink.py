from __future__ import annotations
import click
from ..ports.sink import LineSink

class StdoutSink(LineSink):
    def write_line(self, line: str) -> None:
        # click.echo flushes, so a tail shows records as they arrive
        click.echo(line)
