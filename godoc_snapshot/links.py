"""Rewrite intra-site hrefs after the mirrored pages have been renamed.

wget's ``-k`` option leaves links between mirrored pages as bare file names,
for example ``href="widgets.html#Widget"`` or ``href="widgets.html"``. Once
:mod:`godoc_snapshot.renaming` has moved ``widgets.html`` to
``godoc-root.html`` those links dangle; this module points them at the new
names.

Each :class:`~godoc_snapshot.renaming.RenameRecord` yields a
:class:`LinkRewriteRule` matching ``href="<old>`` immediately followed by
either ``#`` (anchored form) or ``"`` (bare form). The terminator is part of
the match, so the two forms never overlap and a name that merely starts with
another page's name is left alone. All rules of a file are applied in one
regex pass: a rewritten href is never re-matched, even when a new name equals
some other page's original name.

Files are rewritten as raw bytes so line endings and any non UTF-8 content
survive unchanged.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import re
import typing as typ

from godoc_snapshot.errors import SnapshotError

if typ.TYPE_CHECKING:
    from pathlib import Path

    from godoc_snapshot.renaming import RenameRecord

logger = logging.getLogger(__name__)


class LinkRewriteError(SnapshotError):
    """Raised when an output file cannot be read or written back."""


@dc.dataclass(frozen=True, slots=True)
class LinkRewriteRule:
    """Href substitution derived from one rename record."""

    old_name: str
    new_name: str

    @classmethod
    def from_record(cls, record: RenameRecord) -> LinkRewriteRule:
        return cls(old_name=record.old_name, new_name=record.new_name)

    def replacement(self, terminator: bytes) -> bytes:
        """Return the rewritten href prefix ending with ``terminator``."""
        return b'href="' + self.new_name.encode("utf-8") + terminator


class LinkRewriter:
    """Apply the href rules of a set of rename records to HTML content."""

    def __init__(self, records: cabc.Iterable[RenameRecord]) -> None:
        self.rules: dict[bytes, LinkRewriteRule] = {}
        for record in records:
            if record.old_name == record.new_name:
                continue
            rule = LinkRewriteRule.from_record(record)
            self.rules[rule.old_name.encode("utf-8")] = rule
        self._pattern = _compile_rules(self.rules)

    def rewrite_content(self, content: bytes) -> bytes:
        """Return ``content`` with every matching href pointing at its new name."""
        if self._pattern is None:
            return content

        def _substitute(match: re.Match[bytes]) -> bytes:
            rule = self.rules[match.group("name")]
            return rule.replacement(match.group("terminator"))

        return self._pattern.sub(_substitute, content)

    def rewrite_file(self, path: Path) -> bool:
        """Rewrite ``path`` in place; return whether its content changed."""
        try:
            original = path.read_bytes()
        except OSError as exc:
            msg = f"Error opening file '{path}': {exc}"
            raise LinkRewriteError(msg) from exc

        rewritten = self.rewrite_content(original)
        if rewritten == original:
            return False
        try:
            path.write_bytes(rewritten)
        except OSError as exc:
            msg = f"Error altering output file '{path}': {exc}"
            raise LinkRewriteError(msg) from exc
        return True


def rewrite_links(files: cabc.Iterable[Path], records: cabc.Iterable[RenameRecord]) -> int:
    """Rewrite every file against every record; return the number changed."""
    rewriter = LinkRewriter(records)
    changed = 0
    for path in files:
        if rewriter.rewrite_file(path):
            changed += 1
            logger.debug("rewrote links in %s", path)
    logger.info("rewrote links in %d files.", changed)
    return changed


def _compile_rules(names: cabc.Iterable[bytes]) -> re.Pattern[bytes] | None:
    ordered = sorted(names, key=len, reverse=True)
    if not ordered:
        return None
    alternatives = b"|".join(re.escape(name) for name in ordered)
    return re.compile(b'href="(?P<name>' + alternatives + b')(?P<terminator>[#"])')


__all__ = ["LinkRewriteError", "LinkRewriteRule", "LinkRewriter", "rewrite_links"]
