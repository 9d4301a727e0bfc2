from __future__ import annotations

import argparse
import json
import logging

from .constants import CHUNK_SIZE, DEFAULT_EXTENSION, DEFAULT_PRODUCT_ID, DEFAULT_VENDOR_ID
from .errors import NspUsbError
from .manifest import build_manifest, scan_directory
from .session import Session
from .transport import UsbTransport


def _usb_id(value: str) -> int:
    return int(value, 0)


def _positive_int(value: str) -> int:
    n = int(value)
    if n <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return n


def cmd_install(args: argparse.Namespace) -> int:
    manifest = build_manifest(scan_directory(args.directory, args.extension))

    with UsbTransport.open(args.vendor_id, args.product_id) as transport:
        metrics = Session(transport, manifest, chunk_size=args.chunk_size).serve()

    payload = {
        "files": len(manifest.paths),
        "ranges": metrics.ranges_served,
        "bytes": metrics.bytes_sent,
        "seconds": metrics.duration_s,
        "mbps": metrics.throughput_mbps,
        "discarded_frames": metrics.frames_discarded,
        "ignored_commands": metrics.commands_ignored,
    }
    print(json.dumps(payload, indent=2) if args.json else payload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="nspusb", description="Serve package files to a USB installer.")
    p.add_argument("directory", help="directory scanned recursively for package files")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    p.add_argument("--extension", default=DEFAULT_EXTENSION, help="package file extension")
    p.add_argument("--vendor-id", type=_usb_id, default=DEFAULT_VENDOR_ID)
    p.add_argument("--product-id", type=_usb_id, default=DEFAULT_PRODUCT_ID)
    p.add_argument("--chunk-size", type=_positive_int, default=CHUNK_SIZE, help=argparse.SUPPRESS)
    p.add_argument("--json", action="store_true")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")
    try:
        return cmd_install(args)
    except NspUsbError as exc:
        logging.critical("%s: %s", type(exc).__name__, exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
