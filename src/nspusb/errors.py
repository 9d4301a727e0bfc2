from __future__ import annotations


class NspUsbError(Exception):
    """Base class for every fatal condition the client reports."""


class UsageError(NspUsbError):
    pass


class DiscoveryError(NspUsbError):
    pass


class EmptyManifest(NspUsbError):
    pass


class NoFilesFound(NspUsbError):
    pass


class FrameDecodeError(NspUsbError):
    pass


class TransportError(NspUsbError):
    pass


class FileOpenFailure(NspUsbError):
    pass


class RangeBoundsViolation(NspUsbError):
    pass


class RangeTransferFailure(NspUsbError):
    pass
