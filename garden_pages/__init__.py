"""Publish an outline export as a static multi-page HTML site.

This package exposes the CLI entry points used by the ``garden`` console
script to turn an outline JSON export into one HTML document per published
page.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from garden_pages import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
