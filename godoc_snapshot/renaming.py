"""Rename mirrored pages into a stable, caller-chosen naming scheme.

wget names each mirrored page after the last segment of its URL, which makes
the output depend on package names. The snapshot instead publishes:

* ``<base>-root.html`` for the module's entry page, and
* ``<base>.1.html`` ... ``<base>.N.html`` for every other page, numbered in
  lexical order of the mirrored file names so unchanged docs produce
  identical output.

Every rename is returned as a :class:`RenameRecord`, which the link rewriter
turns into href substitutions.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from godoc_snapshot._constants import ENTRY_POINT_TEMPLATE, PAGE_TEMPLATE
from godoc_snapshot.errors import SnapshotError

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class RenameError(SnapshotError):
    """Raised when a mirrored file cannot be renamed."""


@dc.dataclass(frozen=True, slots=True)
class RenameRecord:
    """Original and new base name of one renamed file."""

    old_name: str
    new_name: str


def entry_point_filename(module_name: str) -> str:
    """Return the file name wget gives the module's entry page.

    >>> entry_point_filename("github.com/acme/widgets")
    'widgets.html'
    """
    segment = module_name.rstrip("/").rsplit("/", 1)[-1]
    return f"{segment}.html"


def plan_entry_point(module_name: str, base_name: str) -> RenameRecord:
    """Return the rename record of the entry page without touching the disk."""
    return RenameRecord(
        old_name=entry_point_filename(module_name),
        new_name=ENTRY_POINT_TEMPLATE.format(base=base_name),
    )


def rename_entry_point(build_dir: Path, module_name: str, base_name: str) -> Path:
    """Rename the mirrored entry page to ``<base>-root.html``.

    Returns
    -------
    Path
        Location of the renamed entry page.

    Raises
    ------
    RenameError
        If the entry page was not mirrored or cannot be renamed.
    """
    record = plan_entry_point(module_name, base_name)
    old_path = build_dir / record.old_name
    new_path = build_dir / record.new_name
    logger.debug("renaming entry point %s -> %s", old_path, new_path)
    try:
        old_path.rename(new_path)
    except OSError as exc:
        msg = f"Error while renaming entry file {old_path} to {new_path}: {exc}"
        raise RenameError(msg) from exc
    return new_path


def rename_remaining(build_dir: Path, base_name: str, entry_path: Path) -> list[RenameRecord]:
    """Number every other mirrored page as ``<base>.<index>.html``.

    Pages are sorted by path before numbering, and indices run from 1 without
    gaps. A mirrored page whose name is already one of the target names is
    first moved aside, so no rename overwrites a page that still has to be
    renamed itself.

    Raises
    ------
    RenameError
        If listing or renaming fails. Earlier renames are not rolled back.
    """
    sources = sorted(
        path for path in build_dir.glob("*.html") if path.name != entry_path.name
    )
    plan = [
        (source, build_dir / PAGE_TEMPLATE.format(base=base_name, index=index))
        for index, source in enumerate(sources, start=1)
    ]

    targets = {target for source, target in plan if source != target}
    moves: list[tuple[Path, Path]] = []
    for source, target in plan:
        if source == target:
            continue
        if source in targets:
            staged = source.with_name(f".{source.name}.renaming")
            _rename(source, staged)
            moves.append((staged, target))
        else:
            moves.append((source, target))

    for current, target in moves:
        _rename(current, target)

    records = [RenameRecord(old_name=source.name, new_name=target.name) for source, target in plan]
    logger.info("renamed %d mirrored pages.", len(records))
    return records


def _rename(old_path: Path, new_path: Path) -> None:
    logger.debug("renaming %s -> %s", old_path, new_path)
    try:
        old_path.rename(new_path)
    except OSError as exc:
        msg = f"Error renaming {str(old_path)!r} to {str(new_path)!r}: {exc}"
        raise RenameError(msg) from exc


__all__ = [
    "RenameError",
    "RenameRecord",
    "entry_point_filename",
    "plan_entry_point",
    "rename_entry_point",
    "rename_remaining",
]
