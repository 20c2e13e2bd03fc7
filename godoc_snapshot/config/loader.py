"""Resolve snapshot options from the Go toolchain, YAML defaults, and the CLI."""

from __future__ import annotations

import collections.abc as cabc
import json
import os
import re
import subprocess
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from godoc_snapshot._constants import (
    DEFAULT_BUILD_PATH,
    DEFAULT_GODOC_HOST,
    DEFAULT_HTML_BASE_NAME,
    READINESS_DEADLINE_SECONDS,
)

from .models import ConfigurationError, GoEnvironment, PipelineConfig

Runner = cabc.Callable[..., subprocess.CompletedProcess[str]]

MODULE_NAME_PATTERN = re.compile(r"^\s*module\s+(?P<name>\S+)", re.MULTILINE)
_SNAPSHOT_KEYS = frozenset(
    {"build_path", "godoc_host", "html_file_name", "module_name", "ready_timeout"}
)


def discover_go_environment(
    *, go_exe: str = "go", runner: Runner = subprocess.run
) -> GoEnvironment:
    """Inspect the Go toolchain via ``go env -json``.

    Parameters
    ----------
    go_exe : str, optional
        Go executable to invoke. Defaults to ``"go"`` on ``PATH``.
    runner : callable, optional
        ``subprocess.run`` compatible callable, replaced in tests.

    Returns
    -------
    GoEnvironment
        GOROOT, GOPATH and the ``go.mod`` path (``None`` outside a module).

    Raises
    ------
    ConfigurationError
        If ``go`` cannot be run or prints something other than a JSON object.
    """
    command = [go_exe, "env", "-json"]
    try:
        completed = runner(command, check=True, capture_output=True, text=True)
    except (OSError, subprocess.CalledProcessError) as exc:
        msg = f"Error inspecting go environment with {' '.join(command)!r}: {exc}"
        raise ConfigurationError(msg) from exc

    try:
        payload = json.loads(completed.stdout)
    except json.JSONDecodeError as exc:
        msg = f"Error parsing go environment JSON: {exc}"
        raise ConfigurationError(msg) from exc
    if not isinstance(payload, dict):
        msg = "Go environment report must be a JSON object."
        raise ConfigurationError(msg)

    gomod = str(payload.get("GOMOD") or "").strip()
    return GoEnvironment(
        goroot=str(payload.get("GOROOT") or ""),
        gopath=str(payload.get("GOPATH") or ""),
        gomod=Path(gomod) if gomod and gomod != os.devnull else None,
    )


def read_module_name(gomod_path: Path) -> str:
    """Return the module path declared by the ``module`` directive of go.mod."""
    try:
        content = gomod_path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Error reading go.mod at {gomod_path}: {exc}"
        raise ConfigurationError(msg) from exc

    match = MODULE_NAME_PATTERN.search(content)
    if match is None:
        msg = f"Could not find a module declaration in {gomod_path}"
        raise ConfigurationError(msg)
    name = match.group("name").strip('"`')
    if not name:
        msg = f"Module declaration in {gomod_path} is empty"
        raise ConfigurationError(msg)
    return name


def load_snapshot_defaults(path: Path) -> dict[str, typ.Any]:
    """Load the ``snapshot`` mapping from a YAML defaults file.

    A missing file yields an empty mapping so the file stays optional.
    Unknown keys are rejected to catch typos early.

    Examples
    --------
    A defaults file looks like::

        snapshot:
          build_path: docs/_static/api
          html_file_name: apidoc
          ready_timeout: 20
    """
    if not path.exists():
        return {}

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = loader.load(handle) or {}
    except YAMLError as exc:
        msg = f"Unable to parse snapshot config YAML at {path}: {exc}"
        raise ConfigurationError(msg) from exc
    if not isinstance(loaded, dict):
        msg = f"Top-level YAML structure in {path} must be a mapping."
        raise ConfigurationError(msg)

    section = loaded.get("snapshot") or {}
    if not isinstance(section, dict):
        msg = f"The 'snapshot' section in {path} must be a mapping."
        raise ConfigurationError(msg)
    unknown = sorted(set(section) - _SNAPSHOT_KEYS)
    if unknown:
        msg = f"Unknown snapshot option(s) in {path}: {', '.join(unknown)}"
        raise ConfigurationError(msg)
    return dict(section)


def resolve_pipeline_config(
    *,
    build_path: Path | None = None,
    godoc_host: str | None = None,
    html_file_name: str | None = None,
    module_name: str | None = None,
    ready_timeout: float | None = None,
    config_path: Path | None = None,
    environment: GoEnvironment | None = None,
    runner: Runner = subprocess.run,
) -> PipelineConfig:
    """Merge CLI options, YAML defaults, and Go module discovery.

    Explicit arguments win over the YAML file, which wins over the built-in
    defaults. The module name is only discovered through ``go env`` and
    ``go.mod`` when neither source provides one.
    """
    defaults = load_snapshot_defaults(config_path) if config_path else {}

    resolved_module = module_name or _optional_str(defaults.get("module_name"))
    if not resolved_module:
        env = environment or discover_go_environment(runner=runner)
        if env.gomod is None:
            msg = "Not inside a Go module: 'go env GOMOD' is empty."
            raise ConfigurationError(msg)
        resolved_module = read_module_name(env.gomod)

    timeout = ready_timeout
    if timeout is None:
        timeout = _optional_float(defaults.get("ready_timeout"))

    return PipelineConfig(
        server_host=godoc_host
        or _optional_str(defaults.get("godoc_host"))
        or DEFAULT_GODOC_HOST,
        module_name=resolved_module,
        build_dir=build_path
        or Path(_optional_str(defaults.get("build_path")) or DEFAULT_BUILD_PATH),
        html_base_name=html_file_name
        or _optional_str(defaults.get("html_file_name"))
        or DEFAULT_HTML_BASE_NAME,
        readiness_timeout=timeout if timeout is not None else READINESS_DEADLINE_SECONDS,
    )


def ensure_build_dir_writable(build_dir: Path) -> None:
    """Check that ``build_dir`` (or its nearest existing ancestor) is writable."""
    candidate = build_dir.absolute()
    while not candidate.exists():
        if candidate.parent == candidate:
            break
        candidate = candidate.parent
    if not candidate.is_dir() or not os.access(candidate, os.W_OK | os.X_OK):
        msg = f"Build directory {build_dir} is not writable (checked {candidate})."
        raise ConfigurationError(msg)


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_float(value: object | None) -> float | None:
    if value is None:
        return None
    try:
        return float(typ.cast(typ.Any, value))
    except (TypeError, ValueError) as exc:
        msg = f"ready_timeout must be a number, got {value!r}"
        raise ConfigurationError(msg) from exc


__all__ = [
    "MODULE_NAME_PATTERN",
    "discover_go_environment",
    "ensure_build_dir_writable",
    "load_snapshot_defaults",
    "read_module_name",
    "resolve_pipeline_config",
]
