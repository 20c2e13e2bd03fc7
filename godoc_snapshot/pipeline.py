"""High-level orchestration of a godoc snapshot run.

:class:`SnapshotPipeline` is the only component that knows the whole
sequence:

1. wipe and recreate the build directory, reserving ``index.html``;
2. start the godoc server and keep it running while
3. the readiness probe waits for it and wget mirrors the module docs;
4. stop the server, on success and on failure alike;
5. rename the entry page and number the remaining pages;
6. rewrite hrefs so the renamed pages still link to each other;
7. report any local link that still dangles.

Any stage failure raises a :class:`~godoc_snapshot.errors.SnapshotError`
subclass and leaves the build directory in an unpublishable state; rerun
from scratch.

Example
-------
>>> from pathlib import Path
>>> from godoc_snapshot.config import PipelineConfig
>>> from godoc_snapshot.pipeline import SnapshotPipeline
>>> config = PipelineConfig(
...     server_host="localhost:6161",
...     module_name="github.com/acme/widgets",
...     build_dir=Path("zdocs/source/_static"),
...     html_base_name="godoc",
... )
>>> result = SnapshotPipeline(config).run()  # doctest: +SKIP
>>> result.entry_path  # doctest: +SKIP
PosixPath('zdocs/source/_static/godoc-root.html')
"""

from __future__ import annotations

import dataclasses as dc
import logging
import shutil
import typing as typ

from godoc_snapshot._constants import RESERVED_INDEX_FILE
from godoc_snapshot.config import ensure_build_dir_writable
from godoc_snapshot.errors import SnapshotError
from godoc_snapshot.links import rewrite_links
from godoc_snapshot.mirror import WgetMirror
from godoc_snapshot.readiness import ReadinessProbe
from godoc_snapshot.renaming import (
    plan_entry_point,
    rename_entry_point,
    rename_remaining,
)
from godoc_snapshot.server import GodocServer
from godoc_snapshot.verify import find_broken_links

if typ.TYPE_CHECKING:
    from pathlib import Path

    from godoc_snapshot.config import PipelineConfig
    from godoc_snapshot.mirror import SiteMirror
    from godoc_snapshot.renaming import RenameRecord
    from godoc_snapshot.verify import BrokenLink

logger = logging.getLogger(__name__)


class BuildDirectoryError(SnapshotError):
    """Raised when the build directory cannot be cleared or recreated."""


@dc.dataclass(slots=True)
class SnapshotResult:
    """Files produced by a successful run.

    Attributes
    ----------
    entry_path : Path
        The renamed entry page, ``<base>-root.html``.
    records : list[RenameRecord]
        Every rename applied, entry page first.
    html_files : list[Path]
        Entry page followed by the numbered pages, in numbering order.
    broken_links : list[BrokenLink]
        Local page links that still point at missing files.
    """

    entry_path: Path
    records: list[RenameRecord]
    html_files: list[Path]
    broken_links: list[BrokenLink] = dc.field(default_factory=list)


class SnapshotPipeline:
    """Mirror, rename, and relink the godoc pages of one module."""

    def __init__(
        self,
        config: PipelineConfig,
        *,
        server: GodocServer | None = None,
        probe: ReadinessProbe | None = None,
        mirror: SiteMirror | None = None,
    ) -> None:
        self.config = config
        self.server = server or GodocServer(config.server_host)
        self.probe = probe or ReadinessProbe(deadline=config.readiness_timeout)
        self.mirror = mirror or WgetMirror()

    def run(self) -> SnapshotResult:
        """Execute every stage in order and return the produced files."""
        config = self.config
        ensure_build_dir_writable(config.build_dir)
        self.setup_build_dir()
        self.scrape()

        entry_path = rename_entry_point(
            config.build_dir, config.module_name, config.html_base_name
        )
        records = [plan_entry_point(config.module_name, config.html_base_name)]
        renamed = rename_remaining(config.build_dir, config.html_base_name, entry_path)
        records.extend(renamed)

        html_files = [entry_path] + [config.build_dir / record.new_name for record in renamed]
        rewrite_links(html_files, records)
        broken = find_broken_links(config.build_dir, html_files)

        logger.info(
            "snapshot of %s written to %s (%d pages).",
            config.module_name,
            config.build_dir,
            len(html_files),
        )
        return SnapshotResult(
            entry_path=entry_path,
            records=records,
            html_files=html_files,
            broken_links=broken,
        )

    def setup_build_dir(self) -> None:
        """Clear the build directory and reserve ``index.html`` in it.

        wget cannot be told the output name of the crawl root, and a listing
        page it reaches on the way would claim ``index.html``. The empty
        placeholder makes wget store such a page under another name.
        """
        build_dir = self.config.build_dir
        try:
            if build_dir.exists():
                shutil.rmtree(build_dir)
            build_dir.mkdir(parents=True)
            (build_dir / RESERVED_INDEX_FILE).touch()
        except OSError as exc:
            msg = f"Error preparing build directory {build_dir}: {exc}"
            raise BuildDirectoryError(msg) from exc

    def scrape(self) -> None:
        """Mirror the docs while a godoc server is guaranteed to be running."""
        config = self.config
        with self.server.running() as handle:
            self.probe.wait_until_ready(config.readiness_url)
            handle.mark_ready()
            self.mirror.mirror(config.server_host, config.module_name, config.build_dir)


def run_snapshot(config: PipelineConfig) -> SnapshotResult:
    """Run the pipeline with the default server, probe, and mirror."""
    return SnapshotPipeline(config).run()


__all__ = ["BuildDirectoryError", "SnapshotPipeline", "SnapshotResult", "run_snapshot"]
