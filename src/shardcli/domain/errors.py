from __future__ import annotations


class ShardCliError(Exception):
    """Base for every failure the CLI reports to the user."""


class OversizedRecord(ShardCliError):
    def __init__(self, index: int, size: int, limit: int) -> None:
        self.index = index
        self.size = size
        self.limit = limit
        super().__init__(f"Record #{index} is larger than {_human(limit)}, skipping.")


class TransportError(ShardCliError):
    """A remote call failed. The botocore exception is chained as __cause__."""

    def __init__(self, operation: str, code: str | None, message: str) -> None:
        self.operation = operation
        self.code = code
        label = f"{operation} failed"
        if code:
            label += f" ({code})"
        super().__init__(f"{label}: {message}")


class DecodeError(ShardCliError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Record payload is not valid UTF-8: {reason}")


def _human(n: int) -> str:
    if n % (1024 * 1024) == 0:
        return f"{n // (1024 * 1024)} MiB"
    return f"{n} bytes"
