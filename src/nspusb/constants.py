from __future__ import annotations

LIST_MAGIC = b"TUL0"  # Tinfoil USB List 0
COMMAND_MAGIC = b"TUC0"  # Tinfoil USB Command 0

ANNOUNCE_HEADER_FORMAT = "<4sI8x"  # magic, manifest length
COMMAND_FORMAT = "<4sB3xIQ12x"  # magic, type, command id, payload size
RANGE_HEADER_FORMAT = "<QQQ"  # size, offset, name length

COMMAND_FRAME_SIZE = 32
RANGE_HEADER_SIZE = 24

CMD_EXIT = 0
CMD_FILE_RANGE = 1

REQUEST_TYPE = 0
RESPONSE_TYPE = 1

# matches the installer's buffered placeholder writer
CHUNK_SIZE = 8 * 1024 * 1024

DEFAULT_VENDOR_ID = 0x057E
DEFAULT_PRODUCT_ID = 0x3000
DEFAULT_EXTENSION = ".nsp"

USB_TIMEOUT_MS = 0  # libusb: wait forever
