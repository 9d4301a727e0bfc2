from __future__ import annotations

import pytest


class ScriptedTransport:
    """Replays peer bytes and records everything written back."""

    def __init__(self, inbound: bytes = b""):
        self.inbound = bytearray(inbound)
        self.reads: list[int] = []
        self.writes: list[bytes] = []

    def feed(self, data: bytes) -> None:
        self.inbound += data

    def read(self, size: int) -> bytes:
        self.reads.append(size)
        data = bytes(self.inbound[:size])
        del self.inbound[:size]
        return data

    def write(self, data: bytes) -> int:
        self.writes.append(bytes(data))
        return len(data)

    @property
    def written(self) -> bytes:
        return b"".join(self.writes)


@pytest.fixture
def transport() -> ScriptedTransport:
    return ScriptedTransport()


@pytest.fixture
def scripted():
    return ScriptedTransport


def range_request(name, offset: int, size: int) -> bytes:
    raw = name if isinstance(name, bytes) else name.encode("utf-8")
    return size.to_bytes(8, "little") + offset.to_bytes(8, "little") + len(raw).to_bytes(8, "little") + raw


@pytest.fixture
def make_range_request():
    return range_request
