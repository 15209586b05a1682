"""Tests for the npm CLI wrapper against a scripted stand-in executable."""

from __future__ import annotations

import io
import os
import stat
import sys
import textwrap
from pathlib import Path

import pytest

from republish_core.errors import (
    CommandTimeoutError,
    NpmNotFoundError,
    PackCommandError,
    ShowCommandError,
)
from republish_core.npm import NpmClient, NpmClientConfig

pytestmark = pytest.mark.skipif(os.name == "nt", reason="scripted npm relies on a shebang")

_FAKE_NPM = textwrap.dedent(
    """\
    import json
    import os
    import sys
    import time

    mode = os.environ.get("FAKE_NPM_MODE", "ok")
    command = sys.argv[1]
    if command == "pack":
        if mode == "fail":
            sys.stderr.write("npm ERR! 404 Not Found\\n")
            sys.exit(1)
        print("npm notice tarball contents")
        print(" ".join(sys.argv[2:]))
        print("foo-1.0.0.tgz")
    elif command == "show":
        if mode == "empty":
            sys.exit(0)
        if mode == "list":
            print(json.dumps([{"version": "1.0.0"}, {"version": "2.0.0", "marker": "b"}]))
        else:
            print(json.dumps({"name": sys.argv[-1], "args": sys.argv[2:]}))
    elif command == "publish":
        if mode == "sleep":
            time.sleep(30)
        sys.stdout.write(" ".join(sys.argv[2:]) + "\\n")
        sys.stdout.write("x" * int(os.environ.get("FAKE_NPM_BYTES", "0")))
        sys.stdout.flush()
        sys.stderr.write("npm ERR! cannot publish over the previously published versions\\n")
        sys.exit(1 if mode == "conflict" else 0)
    """
)


def _fake_npm(tmp_path: Path) -> Path:
    script = tmp_path / "npm"
    script.write_text(f"#!{sys.executable}\n{_FAKE_NPM}", encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


def _client(tmp_path: Path, mode: str = "ok", **config) -> NpmClient:
    env = {"FAKE_NPM_MODE": mode, **config.pop("env", {})}
    return NpmClient(NpmClientConfig(executable=str(_fake_npm(tmp_path)), env=env, **config))


def test_pack_returns_last_output_line(tmp_path: Path) -> None:
    client = _client(tmp_path)
    assert client.pack("foo@1.0.0", tmp_path, registry="https://from") == "foo-1.0.0.tgz"


def test_pack_failure_raises(tmp_path: Path) -> None:
    client = _client(tmp_path, mode="fail")
    with pytest.raises(PackCommandError) as excinfo:
        client.pack("foo@9.9.9", tmp_path)
    assert excinfo.value.returncode == 1
    assert "404" in str(excinfo.value)


def test_show_passes_registry_and_parses_json(tmp_path: Path) -> None:
    client = _client(tmp_path)
    payload = client.show("foo", "2.0.0", registry="https://to")
    assert payload["name"] == "foo@2.0.0"
    assert payload["args"] == ["--json", "--registry=https://to", "foo@2.0.0"]


def test_show_takes_last_manifest_of_a_list(tmp_path: Path) -> None:
    assert _client(tmp_path, mode="list").show("foo", "2.0.0") == {"version": "2.0.0", "marker": "b"}


def test_show_without_output_raises(tmp_path: Path) -> None:
    with pytest.raises(ShowCommandError):
        _client(tmp_path, mode="empty").show("foo", "3.0.0")


def test_publish_tees_output_and_reports_exit_code(tmp_path: Path) -> None:
    out, err = io.BytesIO(), io.BytesIO()
    client = _client(tmp_path, mode="conflict")

    result = client.publish(tmp_path, ["--tag", "next"], stdout=out, stderr=err)

    assert result.returncode == 1
    assert not result.ok
    assert result.stdout.startswith("--ddd --ignore-scripts --tag next")
    assert "previously published versions" in result.stderr
    assert out.getvalue().decode() == result.stdout
    assert err.getvalue().decode() == result.stderr
    assert result.command[1:] == ("publish", "--ddd", "--ignore-scripts", "--tag", "next")


def test_publish_output_over_limit_is_truncated_but_forwarded(tmp_path: Path) -> None:
    out = io.BytesIO()
    client = _client(tmp_path, mode="conflict", max_buffer_bytes=1024, env={"FAKE_NPM_BYTES": "200000"})

    result = client.publish(tmp_path, stdout=out, stderr=io.BytesIO())

    assert result.truncated
    assert len(result.stdout) == 1024
    assert len(out.getvalue()) > 200000


def test_publish_timeout_kills_the_process(tmp_path: Path) -> None:
    client = _client(tmp_path, mode="sleep", timeout_seconds=0.5)
    with pytest.raises(CommandTimeoutError):
        client.publish(tmp_path, stdout=io.BytesIO(), stderr=io.BytesIO())


def test_missing_executable(tmp_path: Path) -> None:
    client = NpmClient(NpmClientConfig(executable=str(tmp_path / "no-such-npm")))
    with pytest.raises(NpmNotFoundError):
        client.pack("foo@1.0.0", tmp_path)
    with pytest.raises(NpmNotFoundError):
        client.publish(tmp_path)


def test_publish_forwards_to_text_streams(tmp_path: Path) -> None:
    out = io.StringIO()
    result = _client(tmp_path).publish(tmp_path, stdout=out, stderr=io.StringIO())
    assert result.ok
    assert out.getvalue() == result.stdout
