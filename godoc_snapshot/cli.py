"""Cyclopts CLI entrypoint for snapshotting godoc HTML into a docs tree.

The ``godoc-snapshot`` console script defined here runs the whole pipeline
for the Go module in the current directory: it starts a temporary ``godoc``
server, mirrors the module's pages with ``wget``, and leaves
``<base>-root.html`` plus ``<base>.<n>.html`` pages in the build directory,
ready to be shipped as static files of another documentation site (for
example Sphinx's ``_static`` folder).

Every option can also be set through a ``GODOC_SNAPSHOT_*`` environment
variable or the ``snapshot`` section of ``godoc-snapshot.yaml``.

Examples
--------
Snapshot the current module with the default options:

>>> from godoc_snapshot.cli import main
>>> main()  # doctest: +SKIP

Write the pages into a custom folder with a custom base name:

>>> from godoc_snapshot.cli import app
>>> app(
...     ["--build-path", "docs/_static/api", "--html-file-name", "api"]
... )  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from ._constants import DEFAULT_CONFIG_FILE
from .config import resolve_pipeline_config
from .errors import SnapshotError
from .pipeline import run_snapshot

logger = logging.getLogger(__name__)

app = App(
    name="godoc-snapshot",
    help="Snapshot a Go module's godoc pages as static, relinked HTML files.",
    config=cyclopts.config.Env("GODOC_SNAPSHOT_", command=False),  # type: ignore[unknown-argument]
)


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )


@app.default
def snapshot(
    *,
    build_path: typ.Annotated[
        Path | None,
        Parameter(help="Path to place extracted html files [default: zdocs/source/_static]"),
    ] = None,
    godoc_host: typ.Annotated[
        str | None,
        Parameter(
            help="Host and port to use for temporarily running godoc server "
            "[default: localhost:6161]"
        ),
    ] = None,
    html_file_name: typ.Annotated[
        str | None,
        Parameter(help="Base name to use for extracted html files [default: godoc]"),
    ] = None,
    module_name: typ.Annotated[
        str | None,
        Parameter(help="Module path to document instead of the one in go.mod"),
    ] = None,
    ready_timeout: typ.Annotated[
        float | None,
        Parameter(help="Seconds to wait for the godoc server to answer [default: 10]"),
    ] = None,
    config: typ.Annotated[
        Path, Parameter(help="Path to an optional YAML defaults file")
    ] = Path(DEFAULT_CONFIG_FILE),
    verbose: typ.Annotated[bool, Parameter(help="Emit debug logging")] = False,
) -> None:
    """Snapshot the godoc pages of a Go module into the build directory.

    Parameters
    ----------
    build_path : Path or None, optional
        Destination folder; it is deleted and recreated on every run.
    godoc_host : str or None, optional
        ``host:port`` for the temporary godoc server.
    html_file_name : str or None, optional
        Base name of the produced files.
    module_name : str or None, optional
        Module path override; when ``None`` it is read from ``go.mod``.
    ready_timeout : float or None, optional
        Readiness deadline for the godoc server, in seconds.
    config : Path, optional
        YAML file supplying defaults for the options above.
    verbose : bool, optional
        Enable debug logging.

    Raises
    ------
    SystemExit
        With status 1 when any stage of the snapshot fails.
    """
    _configure_logging(verbose=verbose)
    try:
        pipeline_config = resolve_pipeline_config(
            build_path=build_path,
            godoc_host=godoc_host,
            html_file_name=html_file_name,
            module_name=module_name,
            ready_timeout=ready_timeout,
            config_path=config,
        )
        result = run_snapshot(pipeline_config)
    except SnapshotError as exc:
        logger.error("%s", exc)  # noqa: TRY400 - message already carries the context
        raise SystemExit(1) from exc

    for path in result.html_files:
        print(f"wrote {_format_path(path)}")
    if result.broken_links:
        print(f"warning: {len(result.broken_links)} dangling link(s) left in the snapshot")


def main() -> None:
    """Invoke the Cyclopts application that powers ``godoc-snapshot``."""
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
