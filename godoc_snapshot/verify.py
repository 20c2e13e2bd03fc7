"""Report local page links in the snapshot that point at missing files."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import posixpath
import typing as typ
from urllib.parse import unquote, urlsplit

from bs4 import BeautifulSoup

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class BrokenLink:
    """An href in ``source`` whose local ``.html`` target does not exist."""

    source: str
    href: str


def _local_page_target(href: str) -> str | None:
    """Return the file an href refers to inside the flat build directory."""
    if href.startswith(("#", "//")):
        return None
    parsed = urlsplit(href)
    if parsed.scheme or parsed.netloc or not parsed.path:
        return None
    path = unquote(parsed.path)
    if not path.endswith(".html"):
        return None
    return posixpath.normpath(path)


def find_broken_links(build_dir: Path, files: cabc.Iterable[Path]) -> list[BrokenLink]:
    """Collect every ``<a href>`` in ``files`` whose local page is absent.

    Absolute URLs, in-page fragments and non-HTML assets are ignored; only
    relative ``*.html`` targets are checked against ``build_dir``. A page that
    cannot be read is skipped with a warning.
    """
    broken: list[BrokenLink] = []
    for path in files:
        try:
            content = path.read_bytes()
        except OSError as exc:
            logger.warning("could not check links in %s: %s", path, exc)
            continue
        soup = BeautifulSoup(content, "html.parser")
        for anchor in soup.find_all("a", href=True):
            href = str(anchor["href"])
            target = _local_page_target(href)
            if target is None or (build_dir / target).is_file():
                continue
            broken.append(BrokenLink(source=path.name, href=href))
    for link in broken:
        logger.warning("dangling link in %s: %s", link.source, link.href)
    return broken


__all__ = ["BrokenLink", "find_broken_links"]
