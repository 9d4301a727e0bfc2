from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from .constants import CHUNK_SIZE, COMMAND_FRAME_SIZE
from .manifest import Manifest
from .packet import CommandId, decode_command_frame, describe, encode_announcement
from .sender import RangeSender
from .transport import Transport, read_exact, write_all


class Phase(enum.Enum):
    AWAITING_COMMAND = "awaiting-command"
    SERVING_RANGE = "serving-range"
    TERMINATED = "terminated"


@dataclass(slots=True)
class Metrics:
    ranges_served: int = 0
    bytes_sent: int = 0
    frames_discarded: int = 0
    commands_ignored: int = 0
    start_ts: float = field(default_factory=time.monotonic)
    end_ts: float | None = None

    @property
    def duration_s(self) -> float:
        if self.end_ts is None:
            return 0.0
        return max(0.0, self.end_ts - self.start_ts)

    @property
    def throughput_mbps(self) -> float:
        if self.duration_s <= 0:
            return 0.0
        return (self.bytes_sent * 8 / 1_000_000) / self.duration_s


@dataclass(slots=True)
class Session:
    """One installer session: announce the manifest, then answer commands until EXIT."""

    transport: Transport
    manifest: Manifest
    chunk_size: int = CHUNK_SIZE
    base_dir: Optional[str] = None
    phase: Phase = Phase.AWAITING_COMMAND

    def announce(self) -> None:
        logging.info("sending file list: %s", ", ".join(self.manifest.paths))
        write_all(self.transport, encode_announcement(self.manifest))

    def serve(self) -> Metrics:
        self.announce()
        return self.run()

    def run(self) -> Metrics:
        metrics = Metrics()
        sender = RangeSender(self.transport, chunk_size=self.chunk_size, base_dir=self.base_dir)

        while self.phase is not Phase.TERMINATED:
            raw = read_exact(self.transport, COMMAND_FRAME_SIZE)
            frame = decode_command_frame(raw)
            logging.debug("command frame: %s", describe(frame, raw))

            if not frame.magic_ok:
                # drop the whole window; no byte-level resync
                metrics.frames_discarded += 1
                logging.warning("discarding frame with bad magic %r", raw[:4])
                continue

            command = frame.command
            if command is CommandId.EXIT:
                self.phase = Phase.TERMINATED
                logging.info("finished transfer, exiting")
            elif command is CommandId.FILE_RANGE:
                self.phase = Phase.SERVING_RANGE
                req = sender.serve()
                metrics.ranges_served += 1
                metrics.bytes_sent += req.size
                self.phase = Phase.AWAITING_COMMAND
            else:
                metrics.commands_ignored += 1
                logging.debug("ignoring unrecognized command id %d", frame.command_id)

        metrics.end_ts = time.monotonic()
        return metrics
