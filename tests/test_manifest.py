from __future__ import annotations

import os
import sys

import pytest

from nspusb.errors import EmptyManifest, NoFilesFound, UsageError
from nspusb.manifest import build_manifest, scan_directory
from nspusb.packet import encode_announcement


@pytest.mark.parametrize(
    "paths",
    [
        ["/x.nsp"],
        ["/games/a.nsp", "/games/sub/b.nsp", "/c.nsp"],
        ["/café/d.nsp"],
    ],
)
def test_total_length(paths):
    m = build_manifest(paths)
    assert m.total_length == sum(len(p.encode("utf-8")) + 1 for p in paths)
    assert m.paths == tuple(paths)


def test_empty_manifest():
    with pytest.raises(EmptyManifest):
        build_manifest([])


def _populate(root):
    (root / "sub").mkdir()
    (root / "a.pkg").write_bytes(b"a" * 10)
    (root / "sub" / "b.pkg").write_bytes(b"b" * 20)
    (root / "notes.txt").write_text("skip me")


def test_scan_and_announce(tmp_path, monkeypatch):
    _populate(tmp_path)
    monkeypatch.chdir(tmp_path)

    files = scan_directory(".", ".pkg")
    assert files == ["a.pkg", "sub/b.pkg"]

    m = build_manifest(files)
    assert m.total_length == (len("a.pkg") + 1) + (len("sub/b.pkg") + 1)
    assert encode_announcement(m)[16:] == b"a.pkg\nsub/b.pkg\n"


def test_scan_lexical_order(tmp_path):
    (tmp_path / "b").mkdir()
    for name in ["c.nsp", "a.nsp", "b/z.nsp"]:
        (tmp_path / name).write_bytes(b"")
    files = scan_directory(str(tmp_path))
    assert files == [str(tmp_path / "a.nsp"), str(tmp_path / "b" / "z.nsp"), str(tmp_path / "c.nsp")]


def test_scan_no_files(tmp_path):
    (tmp_path / "readme.txt").write_text("x")
    with pytest.raises(NoFilesFound):
        scan_directory(str(tmp_path))


def test_scan_bad_root(tmp_path):
    with pytest.raises(UsageError):
        scan_directory(str(tmp_path / "missing"))
    f = tmp_path / "file.nsp"
    f.write_bytes(b"")
    with pytest.raises(UsageError):
        scan_directory(str(f))


@pytest.mark.skipif(not sys.platform.startswith("linux"), reason="needs a filesystem that accepts raw byte names")
def test_undecodable_name_keeps_raw_bytes(tmp_path, monkeypatch):
    os.mkdir(os.path.join(os.fsencode(tmp_path), b"d"))
    with open(os.path.join(os.fsencode(tmp_path), b"d", b"g\xe9.nsp"), "wb") as f:
        f.write(b"x" * 3)
    monkeypatch.chdir(tmp_path)

    m = build_manifest(scan_directory("d"))
    assert m.payload == b"d/g\xe9.nsp\n"
    assert m.total_length == len(b"d/g\xe9.nsp\n")
