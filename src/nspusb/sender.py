from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional

from .constants import CHUNK_SIZE, CMD_FILE_RANGE, RANGE_HEADER_SIZE
from .errors import FileOpenFailure, RangeBoundsViolation, RangeTransferFailure
from .packet import RangeRequest, decode_file_range_request, decode_range_header, encode_response_header
from .transport import Transport, read_exact, write_all


def iter_chunk_sizes(size: int, chunk_size: int = CHUNK_SIZE) -> Iterator[int]:
    """Yield the write lengths for a ``size``-byte transfer.

    Every chunk but the last is exactly ``chunk_size``; ``size == 0`` yields
    nothing.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk size must be positive: {chunk_size}")
    remaining = size
    while remaining > 0:
        n = min(chunk_size, remaining)
        yield n
        remaining -= n


def read_range_request(transport: Transport) -> RangeRequest:
    header = read_exact(transport, RANGE_HEADER_SIZE)
    _, _, name_length = decode_range_header(header)
    name = read_exact(transport, name_length)
    return decode_file_range_request(header + name)


@dataclass(slots=True)
class RangeSender:
    transport: Transport
    chunk_size: int = CHUNK_SIZE
    base_dir: Optional[str] = None

    def _resolve(self, name: str) -> str:
        if self.base_dir is None:
            return name
        return os.path.join(self.base_dir, name)

    def serve(self) -> RangeRequest:
        req = read_range_request(self.transport)
        logging.info(
            "range request: name=%s offset=%d size=%d (name length %d)",
            req.name,
            req.offset,
            req.size,
            req.name_length,
        )

        path = self._resolve(req.name)
        try:
            f = open(path, "rb")
        except OSError as exc:
            raise FileOpenFailure(f"cannot open {path}: {exc}") from exc

        with f:
            file_size = os.fstat(f.fileno()).st_size
            if req.end > file_size:
                raise RangeBoundsViolation(
                    f"{path}: range {req.offset}+{req.size} exceeds file size {file_size}"
                )
            write_all(self.transport, encode_response_header(CMD_FILE_RANGE, req.size))
            self._stream(f, req)

        return req

    def _stream(self, f: BinaryIO, req: RangeRequest) -> None:
        sent = 0
        try:
            f.seek(req.offset)
            for n in iter_chunk_sizes(req.size, self.chunk_size):
                data = f.read(n)
                if len(data) != n:
                    raise RangeTransferFailure(
                        f"{req.name}: short read at offset {req.offset + sent} ({len(data)} of {n} bytes)"
                    )
                written = self.transport.write(data)
                if written != n:
                    raise RangeTransferFailure(f"{req.name}: short write ({written} of {n} bytes)")
                sent += n
                logging.debug("sent %d/%d bytes of %s", sent, req.size, req.name)
        except OSError as exc:
            raise RangeTransferFailure(f"{req.name}: transfer failed after {sent} bytes: {exc}") from exc
