from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple

from .constants import DEFAULT_EXTENSION
from .errors import EmptyManifest, NoFilesFound, UsageError


@dataclass(frozen=True, slots=True)
class Manifest:
    paths: Tuple[str, ...]

    @property
    def entries(self) -> Tuple[bytes, ...]:
        return tuple(os.fsencode(path) + b"\n" for path in self.paths)

    @property
    def total_length(self) -> int:
        return sum(len(entry) for entry in self.entries)

    @property
    def payload(self) -> bytes:
        return b"".join(self.entries)


def build_manifest(paths: Iterable[str]) -> Manifest:
    manifest = Manifest(tuple(paths))
    if not manifest.paths:
        raise EmptyManifest("manifest needs at least one file")
    logging.info("manifest: %d files, %d bytes", len(manifest.paths), manifest.total_length)
    return manifest


def _walk(path: str) -> Iterator[str]:
    # lexical order, subdirectories visited where they sort
    with os.scandir(path) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from _walk(entry.path)
        else:
            yield entry.path


def scan_directory(root: str, extension: str = DEFAULT_EXTENSION) -> list[str]:
    """Recursively list the package files under ``root``.

    Paths keep ``root`` as their prefix (normalised, so ``"."`` disappears),
    which is the form the peer later sends back in range requests.
    """
    if not os.path.exists(root):
        raise UsageError(f"directory does not exist: {root}")
    if not os.path.isdir(root):
        raise UsageError(f"supplied path is not a directory: {root}")

    try:
        files = [os.path.normpath(p) for p in _walk(root) if os.path.splitext(p)[1] == extension]
    except OSError as exc:
        raise UsageError(f"cannot list {root}: {exc}") from exc

    if not files:
        raise NoFilesFound(f"no {extension} files found under {root}")
    for path in files:
        logging.debug("found %s", path)
    return files
