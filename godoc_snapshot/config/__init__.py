"""Resolve the options of a snapshot run.

This subpackage inspects the Go toolchain (``go env -json``) to find the
current module's ``go.mod``, extracts the module path from its ``module``
directive, merges optional defaults from ``godoc-snapshot.yaml`` with CLI
overrides, and produces a frozen :class:`PipelineConfig` consumed by the
pipeline stages. The primary entry point is :func:`resolve_pipeline_config`.

Examples
--------
>>> from pathlib import Path
>>> from godoc_snapshot.config import resolve_pipeline_config
>>> config = resolve_pipeline_config(module_name="example.com/widgets")
>>> config.crawl_url
'http://localhost:6161/pkg/example.com/widgets'
>>> config.build_dir
PosixPath('zdocs/source/_static')
"""

from .loader import (
    discover_go_environment,
    ensure_build_dir_writable,
    load_snapshot_defaults,
    read_module_name,
    resolve_pipeline_config,
)
from .models import ConfigurationError, GoEnvironment, PipelineConfig

__all__ = [
    "ConfigurationError",
    "GoEnvironment",
    "PipelineConfig",
    "discover_go_environment",
    "ensure_build_dir_writable",
    "load_snapshot_defaults",
    "read_module_name",
    "resolve_pipeline_config",
]
