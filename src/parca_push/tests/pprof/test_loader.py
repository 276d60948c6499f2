from __future__ import annotations

import io
import sys

import pytest

from parca_push.core.errors import ReadError
from parca_push.pprof import read_profile


def test_read_profile_returns_file_content(tmp_path) -> None:
    path = tmp_path / "cpu.pb.gz"
    path.write_bytes(b"\x1f\x8bprofile")

    assert read_profile(str(path)) == b"\x1f\x8bprofile"


def test_dash_reads_stdin_not_a_file_named_dash(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "-").write_bytes(b"from file")
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"from stdin")))

    assert read_profile("-") == b"from stdin"


def test_file_named_dash_is_reachable_with_explicit_path(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "-").write_bytes(b"from file")

    assert read_profile("./-") == b"from file"


def test_missing_file_raises_read_error(tmp_path) -> None:
    with pytest.raises(ReadError, match="read profile file"):
        read_profile(str(tmp_path / "missing.pb.gz"))


def test_closed_stdin_raises_read_error(monkeypatch: pytest.MonkeyPatch) -> None:
    stream = io.TextIOWrapper(io.BytesIO(b""))
    stream.close()
    monkeypatch.setattr(sys, "stdin", stream)

    with pytest.raises(ReadError, match="stdin"):
        read_profile("-")
