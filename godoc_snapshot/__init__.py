"""Snapshot the godoc pages of a Go module as static, relinked HTML.

This package exposes the ``godoc-snapshot`` CLI used to embed Go API
documentation into another docs site: it runs a temporary godoc server,
mirrors the module's pages with wget, renames them into a stable scheme, and
rewrites their links so the renamed pages still cross-reference correctly.

Exports
-------
- ``app``: Cyclopts application behind the console script.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from godoc_snapshot import main
>>> main()  # doctest: +SKIP
>>> from godoc_snapshot import app
>>> callable(app)
True
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
