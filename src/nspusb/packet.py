from __future__ import annotations

import enum
import os
import struct
from dataclasses import dataclass
from typing import Tuple

from .constants import (
    ANNOUNCE_HEADER_FORMAT,
    CMD_EXIT,
    CMD_FILE_RANGE,
    COMMAND_FORMAT,
    COMMAND_FRAME_SIZE,
    COMMAND_MAGIC,
    LIST_MAGIC,
    RANGE_HEADER_FORMAT,
    RANGE_HEADER_SIZE,
    RESPONSE_TYPE,
)
from .errors import FrameDecodeError
from .manifest import Manifest

ANNOUNCE_HEADER = struct.Struct(ANNOUNCE_HEADER_FORMAT)
COMMAND = struct.Struct(COMMAND_FORMAT)
RANGE_HEADER = struct.Struct(RANGE_HEADER_FORMAT)


class CommandId(enum.IntEnum):
    EXIT = CMD_EXIT
    FILE_RANGE = CMD_FILE_RANGE
    UNRECOGNIZED = -1

    @classmethod
    def _missing_(cls, value: object) -> "CommandId":
        return cls.UNRECOGNIZED


@dataclass(frozen=True, slots=True)
class CommandFrame:
    magic_ok: bool
    frame_type: int
    command_id: int
    payload_size: int

    @property
    def command(self) -> CommandId:
        return CommandId(self.command_id)


@dataclass(frozen=True, slots=True)
class RangeRequest:
    size: int
    offset: int
    name_length: int
    name: str

    @property
    def end(self) -> int:
        return self.offset + self.size


def encode_announcement(manifest: Manifest) -> bytes:
    return ANNOUNCE_HEADER.pack(LIST_MAGIC, manifest.total_length) + manifest.payload


def encode_command_frame(frame_type: int, command_id: int, payload_size: int) -> bytes:
    return COMMAND.pack(COMMAND_MAGIC, frame_type, command_id, payload_size)


def encode_response_header(command_id: int, size: int) -> bytes:
    return encode_command_frame(RESPONSE_TYPE, command_id, size)


def decode_command_frame(raw: bytes) -> CommandFrame:
    """Decode one 32-byte command frame.

    A wrong magic tag is reported through ``magic_ok`` instead of raising, so
    the caller decides how to resynchronize. Only a buffer of the wrong size
    is an error.
    """
    if len(raw) != COMMAND_FRAME_SIZE:
        raise FrameDecodeError(f"command frame must be {COMMAND_FRAME_SIZE} bytes, got {len(raw)}")
    magic, frame_type, command_id, payload_size = COMMAND.unpack(raw)
    return CommandFrame(
        magic_ok=magic == COMMAND_MAGIC,
        frame_type=frame_type,
        command_id=command_id,
        payload_size=payload_size,
    )


def decode_range_header(raw: bytes) -> Tuple[int, int, int]:
    if len(raw) < RANGE_HEADER_SIZE:
        raise FrameDecodeError(f"range header too short: {len(raw)} bytes")
    size, offset, name_length = RANGE_HEADER.unpack_from(raw)
    return size, offset, name_length


def decode_file_range_request(raw: bytes) -> RangeRequest:
    size, offset, name_length = decode_range_header(raw)
    name_end = RANGE_HEADER_SIZE + name_length
    if len(raw) < name_end:
        raise FrameDecodeError(f"truncated file name: expected {name_length} bytes")
    # undecodable bytes survive as surrogate escapes, matching scan_directory
    name = os.fsdecode(raw[RANGE_HEADER_SIZE:name_end])
    return RangeRequest(size=size, offset=offset, name_length=name_length, name=name)


def describe(frame: CommandFrame, raw: bytes) -> str:
    return (
        f"magic={raw[:4]!r} type={frame.frame_type} "
        f"command={frame.command.name}({frame.command_id}) size={frame.payload_size}"
    )
