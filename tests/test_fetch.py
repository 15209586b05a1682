"""Tests for downloading and extracting the origin package."""

import io
import tarfile
from pathlib import Path

import pytest

from _support import FakeNpmClient
from republish_core.errors import UnsafeArchiveError
from republish_core.fetch import SCRATCH_PREFIX, create_scratch_workspace, fetch_package
from republish_core.manifest import read_manifest


def test_scratch_workspaces_are_unique(tmp_path: Path) -> None:
    first = create_scratch_workspace(tmp_path / "scratch")
    second = create_scratch_workspace(tmp_path / "scratch")
    assert first != second
    assert first.is_dir() and second.is_dir()
    assert first.name.startswith(SCRATCH_PREFIX)
    assert first.parent == tmp_path / "scratch"


def test_fetch_packs_and_extracts(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    client = FakeNpmClient({"name": "foo", "version": "1.0.0"})

    package_dir = fetch_package(client, tmp_path, "foo@1.0.0", registry="https://from")

    assert client.pack_calls == [("foo@1.0.0", tmp_path, "https://from")]
    assert package_dir == tmp_path / "package"
    assert read_manifest(package_dir) == {"name": "foo", "version": "1.0.0"}
    assert (package_dir / "index.js").exists()
    assert (tmp_path / "foo-1.0.0.tgz").exists()
    assert "finished downloading and extracting" in capsys.readouterr().out


def test_fetch_rejects_path_traversal(tmp_path: Path) -> None:
    class _EvilClient(FakeNpmClient):
        def pack(self, identifier, cwd, *, registry=None):
            path = cwd / "evil.tgz"
            with tarfile.open(path, "w:gz") as tf:
                info = tarfile.TarInfo("../escaped.txt")
                info.size = 3
                tf.addfile(info, io.BytesIO(b"bad"))
            return path.name

    workspace = tmp_path / "ws"
    workspace.mkdir()
    with pytest.raises(UnsafeArchiveError):
        fetch_package(_EvilClient(), workspace, "foo@1.0.0")
    assert not (tmp_path / "escaped.txt").exists()


def test_fetch_propagates_corrupt_tarball(tmp_path: Path) -> None:
    class _BrokenClient(FakeNpmClient):
        def pack(self, identifier, cwd, *, registry=None):
            (cwd / "broken.tgz").write_bytes(b"not a tarball")
            return "broken.tgz"

    with pytest.raises(tarfile.TarError):
        fetch_package(_BrokenClient(), tmp_path, "foo@1.0.0")
