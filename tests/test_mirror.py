"""Unit tests for the wget-backed site mirror and its success heuristic."""

from __future__ import annotations

import re
import typing as typ
from pathlib import Path
from types import SimpleNamespace

import pytest

from godoc_snapshot.mirror import (
    MirrorError,
    WgetMirror,
    _check_mirror_outcome,
    build_accept_regex,
)

MODULE = "github.com/acme/widgets"


def _fake_runner(
    calls: list[list[str]],
    *,
    returncode: int = 0,
    stdout: str = "",
    writes: typ.Iterable[str] = (),
) -> typ.Callable[..., SimpleNamespace]:
    def fake_run(cmd: list[str], **kwargs: typ.Any) -> SimpleNamespace:
        calls.append(cmd)
        build_dir = Path(cmd[cmd.index("-P") + 1])
        for name in writes:
            (build_dir / name).write_text("", encoding="utf-8")
        return SimpleNamespace(returncode=returncode, stdout=stdout)

    return fake_run


def test_accept_regex_covers_module_and_assets() -> None:
    pattern = re.compile(build_accept_regex(MODULE))
    assert pattern.search("http://localhost:6161/pkg/github.com/acme/widgets/sub/")
    assert pattern.search("http://localhost:6161/lib/godoc/style.css")
    assert pattern.search("http://localhost:6161/lib/godoc/jquery.js")
    assert pattern.search("http://localhost:6161/favicon.png")
    assert not pattern.search("http://localhost:6161/pkg/github.com/other/thing/")
    assert not pattern.search("http://localhost:6161/pkg/githubXcom/acme/widgets/")


def test_build_command_uses_fixed_flag_set(tmp_path: Path) -> None:
    command = WgetMirror().build_command("localhost:6161", MODULE, tmp_path)
    assert command[0] == "wget"
    for flag in ("-E", "-k", "-p", "-nd", "-r", "-np", "-erobots=off"):
        assert flag in command
    assert command[command.index("-l") + 1] == "50"
    assert command[command.index("-P") + 1] == str(tmp_path)
    assert command[command.index("--accept-regex") + 1] == build_accept_regex(MODULE)
    assert command[-1] == "http://localhost:6161/pkg/github.com/acme/widgets"


def test_mirror_logs_output_on_success(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    calls: list[list[str]] = []
    mirror = WgetMirror(runner=_fake_runner(calls, stdout="Downloaded: 12 files"))

    with caplog.at_level("INFO", logger="godoc_snapshot.mirror"):
        mirror.mirror("localhost:6161", MODULE, tmp_path)

    assert len(calls) == 1
    assert "Downloaded: 12 files" in caplog.text
    assert "WGET OUTPUT" in caplog.text


def test_mirror_tolerates_failure_when_stylesheet_exists(tmp_path: Path) -> None:
    calls: list[list[str]] = []
    mirror = WgetMirror(runner=_fake_runner(calls, returncode=8, writes=["style.css"]))
    mirror.mirror("localhost:6161", MODULE, tmp_path)
    assert calls


def test_mirror_tolerates_undecodable_output(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    raw = b"Saving '\xff\xfe.html'\n"

    def fake_run(cmd: list[str], **kwargs: typ.Any) -> SimpleNamespace:
        (tmp_path / "style.css").write_text("body {}", encoding="utf-8")
        # decode the way subprocess does for text=True
        stdout = raw.decode("utf-8", kwargs.get("errors") or "strict")
        return SimpleNamespace(returncode=8, stdout=stdout)

    with caplog.at_level("INFO", logger="godoc_snapshot.mirror"):
        WgetMirror(runner=fake_run).mirror("localhost:6161", MODULE, tmp_path)

    assert "\ufffd\ufffd.html" in caplog.text
    assert "exited with status 8" in caplog.text


def test_mirror_fails_without_stylesheet(tmp_path: Path) -> None:
    calls: list[list[str]] = []
    mirror = WgetMirror(runner=_fake_runner(calls, returncode=4, stdout="Connection refused"))
    with pytest.raises(MirrorError, match="Connection refused"):
        mirror.mirror("localhost:6161", MODULE, tmp_path)


def test_mirror_wraps_missing_executable(tmp_path: Path) -> None:
    def fake_run(cmd: list[str], **kwargs: typ.Any) -> SimpleNamespace:
        raise FileNotFoundError(2, "No such file or directory", "wget")

    with pytest.raises(MirrorError, match="wget"):
        WgetMirror(runner=fake_run).mirror("localhost:6161", MODULE, tmp_path)


@pytest.mark.parametrize(
    ("returncode", "has_stylesheet", "fails"),
    [
        (0, False, False),
        (0, True, False),
        (8, True, False),
        (8, False, True),
    ],
)
def test_check_mirror_outcome_policy(
    tmp_path: Path, returncode: int, has_stylesheet: bool, fails: bool
) -> None:
    if has_stylesheet:
        (tmp_path / "style.css").write_text("body {}", encoding="utf-8")
    if fails:
        with pytest.raises(MirrorError):
            _check_mirror_outcome(returncode, tmp_path)
    else:
        _check_mirror_outcome(returncode, tmp_path)
