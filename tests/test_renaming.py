"""Unit tests for renaming mirrored pages into the stable naming scheme."""

from __future__ import annotations

from pathlib import Path

import pytest

from godoc_snapshot.renaming import (
    RenameError,
    RenameRecord,
    entry_point_filename,
    plan_entry_point,
    rename_entry_point,
    rename_remaining,
)


def _touch(build_dir: Path, *names: str) -> None:
    for name in names:
        (build_dir / name).write_text(f"<html>{name}</html>", encoding="utf-8")


@pytest.mark.parametrize(
    ("module_name", "expected"),
    [
        ("module/path/to/pkg", "pkg.html"),
        ("github.com/acme/widgets", "widgets.html"),
        ("widgets", "widgets.html"),
        ("example.com/trailing/", "trailing.html"),
    ],
)
def test_entry_point_filename_uses_last_segment(module_name: str, expected: str) -> None:
    assert entry_point_filename(module_name) == expected


def test_plan_entry_point_is_pure() -> None:
    record = plan_entry_point("module/path/to/pkg", "godoc")
    assert record == RenameRecord(old_name="pkg.html", new_name="godoc-root.html")


def test_rename_entry_point_moves_file(tmp_path: Path) -> None:
    _touch(tmp_path, "pkg.html")
    new_path = rename_entry_point(tmp_path, "module/path/to/pkg", "godoc")
    assert new_path == tmp_path / "godoc-root.html"
    assert new_path.read_text(encoding="utf-8") == "<html>pkg.html</html>"
    assert not (tmp_path / "pkg.html").exists()


def test_rename_entry_point_missing_page_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(RenameError, match="entry file"):
        rename_entry_point(tmp_path, "module/path/to/pkg", "godoc")


def test_rename_remaining_numbers_contiguously_in_lexical_order(tmp_path: Path) -> None:
    _touch(tmp_path, "godoc-root.html", "zeta.html", "alpha.html", "mid.html")
    (tmp_path / "style.css").write_text("body {}", encoding="utf-8")

    records = rename_remaining(tmp_path, "godoc", tmp_path / "godoc-root.html")

    assert records == [
        RenameRecord("alpha.html", "godoc.1.html"),
        RenameRecord("mid.html", "godoc.2.html"),
        RenameRecord("zeta.html", "godoc.3.html"),
    ]
    assert (tmp_path / "godoc.1.html").read_text(encoding="utf-8") == "<html>alpha.html</html>"
    assert (tmp_path / "godoc.3.html").read_text(encoding="utf-8") == "<html>zeta.html</html>"
    assert (tmp_path / "godoc-root.html").exists()
    assert (tmp_path / "style.css").exists()
    assert sorted(p.name for p in tmp_path.glob("*.html")) == [
        "godoc-root.html",
        "godoc.1.html",
        "godoc.2.html",
        "godoc.3.html",
    ]


def test_rename_remaining_does_not_clobber_existing_target_names(tmp_path: Path) -> None:
    # "godoc.1.html" sorts after "a.html", so it must become godoc.2.html
    # without "a.html" overwriting it first.
    _touch(tmp_path, "godoc-root.html", "a.html", "godoc.1.html")

    records = rename_remaining(tmp_path, "godoc", tmp_path / "godoc-root.html")

    assert records == [
        RenameRecord("a.html", "godoc.1.html"),
        RenameRecord("godoc.1.html", "godoc.2.html"),
    ]
    assert (tmp_path / "godoc.1.html").read_text(encoding="utf-8") == "<html>a.html</html>"
    assert (tmp_path / "godoc.2.html").read_text(encoding="utf-8") == (
        "<html>godoc.1.html</html>"
    )
    assert not list(tmp_path.glob(".*.renaming"))


def test_rename_remaining_is_reproducible(tmp_path: Path) -> None:
    names = ("index.html", "pkg_a.html", "pkg_b.html", "pkg_c.html")
    runs = []
    for run in ("first", "second"):
        build_dir = tmp_path / run
        build_dir.mkdir()
        _touch(build_dir, "godoc-root.html", *reversed(names))
        runs.append(rename_remaining(build_dir, "godoc", build_dir / "godoc-root.html"))
    assert runs[0] == runs[1]


def test_rename_remaining_with_no_pages(tmp_path: Path) -> None:
    _touch(tmp_path, "godoc-root.html")
    assert rename_remaining(tmp_path, "godoc", tmp_path / "godoc-root.html") == []


def test_rename_remaining_wraps_os_errors(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _touch(tmp_path, "godoc-root.html", "a.html")

    def fail_rename(self: Path, target: Path) -> Path:
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "rename", fail_rename)
    with pytest.raises(RenameError, match="a.html"):
        rename_remaining(tmp_path, "godoc", tmp_path / "godoc-root.html")
