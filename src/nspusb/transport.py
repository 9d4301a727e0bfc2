from __future__ import annotations

import logging
from typing import Any, Protocol

import usb.core
import usb.util

from .constants import DEFAULT_PRODUCT_ID, DEFAULT_VENDOR_ID, USB_TIMEOUT_MS
from .errors import DiscoveryError, TransportError


class Transport(Protocol):
    """Blocking duplex byte channel."""

    def read(self, size: int) -> bytes: ...

    def write(self, data: bytes) -> int: ...


def read_exact(transport: Transport, size: int) -> bytes:
    buf = bytearray()
    while len(buf) < size:
        chunk = transport.read(size - len(buf))
        if not chunk:
            raise TransportError(f"transport closed after {len(buf)} of {size} bytes")
        buf += chunk
    return bytes(buf)


def write_all(transport: Transport, data: bytes) -> None:
    written = transport.write(data)
    if written != len(data):
        raise TransportError(f"short write: {written} of {len(data)} bytes")


def _is_direction(direction: int):
    def match(ep: Any) -> bool:
        return usb.util.endpoint_direction(ep.bEndpointAddress) == direction

    return match


def _release(device: Any, interface: Any) -> None:
    try:
        usb.util.release_interface(device, interface)
    except usb.core.USBError as exc:
        logging.debug("release_interface failed: %s", exc)
    usb.util.dispose_resources(device)


class UsbTransport:
    def __init__(self, device: Any, interface: Any, ep_in: Any, ep_out: Any, timeout_ms: int = USB_TIMEOUT_MS):
        self.device = device
        self.interface = interface
        self.ep_in = ep_in
        self.ep_out = ep_out
        self.timeout_ms = timeout_ms

    @classmethod
    def open(
        cls,
        vendor_id: int = DEFAULT_VENDOR_ID,
        product_id: int = DEFAULT_PRODUCT_ID,
        timeout_ms: int = USB_TIMEOUT_MS,
    ) -> "UsbTransport":
        try:
            devices = list(usb.core.find(find_all=True, idVendor=vendor_id, idProduct=product_id))
        except usb.core.NoBackendError as exc:
            raise DiscoveryError(f"no libusb backend available: {exc}") from exc
        if not devices:
            raise DiscoveryError(f"no devices found matching VID {vendor_id:04x} and PID {product_id:04x}")
        if len(devices) > 1:
            logging.warning("%d matching devices; using the first", len(devices))
        device = devices[0]

        try:
            try:
                cfg = device.get_active_configuration()
            except usb.core.USBError:
                device.set_configuration()
                cfg = device.get_active_configuration()
            interface = cfg[(0, 0)]
            usb.util.claim_interface(device, interface)
        except usb.core.USBError as exc:
            usb.util.dispose_resources(device)
            raise TransportError(f"cannot claim default interface: {exc}") from exc

        try:
            ep_in = usb.util.find_descriptor(interface, custom_match=_is_direction(usb.util.ENDPOINT_IN))
            ep_out = usb.util.find_descriptor(interface, custom_match=_is_direction(usb.util.ENDPOINT_OUT))
            if ep_in is None or ep_out is None:
                raise TransportError("default interface lacks bulk IN/OUT endpoints")
        except Exception:
            _release(device, interface)
            raise

        logging.info(
            "claimed device %04x:%04x (in=0x%02x out=0x%02x)",
            vendor_id,
            product_id,
            ep_in.bEndpointAddress,
            ep_out.bEndpointAddress,
        )
        return cls(device, interface, ep_in, ep_out, timeout_ms=timeout_ms)

    def read(self, size: int) -> bytes:
        try:
            return bytes(self.ep_in.read(size, timeout=self.timeout_ms))
        except usb.core.USBError as exc:
            raise TransportError(f"USB read failed: {exc}") from exc

    def write(self, data: bytes) -> int:
        try:
            return int(self.ep_out.write(data, timeout=self.timeout_ms))
        except usb.core.USBError as exc:
            raise TransportError(f"USB write failed: {exc}") from exc

    def close(self) -> None:
        _release(self.device, self.interface)

    def __enter__(self) -> "UsbTransport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
