"""Typed dataclasses describing a resolved snapshot configuration."""

from __future__ import annotations

import dataclasses as dc
import math
from pathlib import Path

from godoc_snapshot._constants import (
    ENTRY_POINT_TEMPLATE,
    PACKAGE_PATH_PREFIX,
    READINESS_DEADLINE_SECONDS,
)
from godoc_snapshot.errors import SnapshotError


class ConfigurationError(SnapshotError):
    """Raised when the Go environment or snapshot options are unusable."""


@dc.dataclass(frozen=True, slots=True)
class GoEnvironment:
    """Subset of ``go env -json`` needed to locate the current module."""

    goroot: str
    gopath: str
    gomod: Path | None

    @property
    def module_root(self) -> Path | None:
        """Return the directory holding ``go.mod`` when inside a module."""
        if self.gomod is None:
            return None
        return self.gomod.parent


@dc.dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Immutable options for a single snapshot run.

    Attributes
    ----------
    server_host : str
        ``host:port`` the godoc server binds to and the mirror crawls.
    module_name : str
        Go module path whose documentation is captured, e.g.
        ``github.com/acme/widgets``.
    build_dir : Path
        Directory that receives the mirrored and renamed files. It is wiped
        at the start of every run.
    html_base_name : str
        Prefix for renamed files (``<base>-root.html``, ``<base>.<n>.html``).
    readiness_timeout : float
        Seconds to wait for the server to answer before giving up.
    """

    server_host: str
    module_name: str
    build_dir: Path
    html_base_name: str
    readiness_timeout: float = READINESS_DEADLINE_SECONDS

    def __post_init__(self) -> None:
        for field_name in ("server_host", "module_name", "html_base_name"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value.strip():
                msg = f"Snapshot option '{field_name}' must be a non-empty string."
                raise ConfigurationError(msg)
        if not str(self.build_dir).strip():
            msg = "Snapshot option 'build_dir' must not be empty."
            raise ConfigurationError(msg)
        if "/" in self.html_base_name:
            msg = f"HTML base name {self.html_base_name!r} must not contain '/'."
            raise ConfigurationError(msg)
        if not math.isfinite(self.readiness_timeout) or self.readiness_timeout <= 0:
            msg = "Readiness timeout must be a positive, finite number of seconds."
            raise ConfigurationError(msg)

    @property
    def entry_page_name(self) -> str:
        """File name the entry page receives once renamed."""
        return ENTRY_POINT_TEMPLATE.format(base=self.html_base_name)

    @property
    def crawl_url(self) -> str:
        """Root URL handed to the mirroring tool."""
        return f"http://{self.server_host}{PACKAGE_PATH_PREFIX}{self.module_name}"

    @property
    def readiness_url(self) -> str:
        """Package listing URL polled until the server answers."""
        return f"http://{self.server_host}{PACKAGE_PATH_PREFIX}"


__all__ = ["ConfigurationError", "GoEnvironment", "PipelineConfig"]
