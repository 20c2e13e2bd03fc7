"""Mirror the godoc pages of a module into the build directory with wget.

``wget`` does the crawling: it follows links under ``/pkg/<module>`` plus the
stylesheet, images and scripts those pages need, localises the links, and
writes everything flat into the build directory. It routinely exits non-zero
on crawls that worked (godoc pages link to source views and other URLs wget
refuses), so the exit code alone does not decide success. A crawl counts as
failed only when godoc's stylesheet did not make it to disk.
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import re
import subprocess
import typing as typ

from godoc_snapshot._constants import (
    MAX_CRAWL_DEPTH,
    MIRROR_ASSET_EXTENSIONS,
    PACKAGE_PATH_PREFIX,
    STYLESHEET_MARKER,
)
from godoc_snapshot.errors import SnapshotError

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

Runner = cabc.Callable[..., subprocess.CompletedProcess[str]]


class MirrorError(SnapshotError):
    """Raised when the documentation pages could not be mirrored."""


class SiteMirror(typ.Protocol):
    """Anything that can populate ``build_dir`` from a running godoc server."""

    def mirror(self, server_host: str, module_name: str, build_dir: Path) -> None:
        """Download the module's pages and assets into ``build_dir``."""
        ...


def build_accept_regex(module_name: str) -> str:
    """Return the ``--accept-regex`` limiting the crawl to the module and assets."""
    module_path = re.escape(f"{PACKAGE_PATH_PREFIX}{module_name}")
    assets = "|".join(re.escape(ext) for ext in MIRROR_ASSET_EXTENSIONS)
    return f"{module_path}|{assets}"


class WgetMirror:
    """Run ``wget`` in recursive, link-converting, flat mirror mode."""

    def __init__(self, *, executable: str = "wget", runner: Runner = subprocess.run) -> None:
        self.executable = executable
        self._runner = runner

    def build_command(self, server_host: str, module_name: str, build_dir: Path) -> list[str]:
        return [
            self.executable,
            # save HTML/CSS documents with proper extensions
            "-E",
            # convert links to local files
            "-k",
            # get all images, etc. needed to display the pages
            "-p",
            # don't create directories
            "-nd",
            "-r",
            "-l",
            str(MAX_CRAWL_DEPTH),
            # don't ascend to the parent directory
            "-np",
            "--accept-regex",
            build_accept_regex(module_name),
            "-P",
            str(build_dir),
            "-erobots=off",
            f"http://{server_host}{PACKAGE_PATH_PREFIX}{module_name}",
        ]

    def mirror(self, server_host: str, module_name: str, build_dir: Path) -> None:
        """Crawl the module docs into ``build_dir``.

        Raises
        ------
        MirrorError
            If wget cannot be run, or it failed and the stylesheet is missing.
        """
        command = self.build_command(server_host, module_name, build_dir)
        logger.info("wget command: %s", command)
        try:
            completed = self._runner(
                command,
                check=False,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                # wget prints URL-decoded file names that need not be valid UTF-8
                errors="replace",
            )
        except OSError as exc:
            msg = f"Error running {self.executable!r}: {exc}"
            raise MirrorError(msg) from exc

        output = completed.stdout or ""
        logger.info(
            "\n\n##### WGET OUTPUT #####\n\n%s\n\n##### END OUTPUT #####\n", output
        )
        _check_mirror_outcome(completed.returncode, build_dir, command=command, output=output)


def _check_mirror_outcome(
    returncode: int,
    build_dir: Path,
    *,
    command: cabc.Sequence[str] = (),
    output: str = "",
) -> None:
    """Decide whether a finished crawl is usable.

    A zero exit always passes. A non-zero exit passes with a warning when the
    stylesheet was mirrored, and raises :class:`MirrorError` otherwise.
    """
    if returncode == 0:
        return
    marker = build_dir / STYLESHEET_MARKER
    if marker.is_file():
        logger.warning(
            "wget exited with status %s but %s was mirrored; continuing.",
            returncode,
            marker,
        )
        return
    msg = (
        f"Error scraping docs: {' '.join(command) or 'mirror'} exited with status "
        f"{returncode} and {marker} is missing. Output:\n{output}"
    )
    raise MirrorError(msg)


__all__ = ["MirrorError", "SiteMirror", "WgetMirror", "build_accept_regex"]
