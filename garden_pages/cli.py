"""Cyclopts CLI entrypoint for publishing an outline export as a static site.

The ``garden`` console script defined here reads an outline JSON export,
applies optional YAML configuration overrides, and writes one HTML document
per published page. Every option can also be supplied through an ``INPUT_*``
environment variable, which keeps CI workflows free of long command lines.

Examples
--------
Publish an export into ``out/``:

>>> from garden_pages.cli import main
>>> main()  # doctest: +SKIP

Publish with overrides into a custom directory:

>>> from garden_pages.cli import app
>>> app.run(
...     ["generate", "--export", "export.json", "--output-dir", "site",
...      "--overrides", "garden.yaml"]
... )  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import SiteConfigError, load_overrides
from .generator import SiteGenerator
from .generator.renderer import DEFAULT_PYGMENTS_STYLE
from .source import DataSourceError, JsonExportSource

DEFAULT_OUTPUT_DIR = Path("out")
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

app = App(name="garden", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]


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
        level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT
    )


@app.command(help="Render every published outline page into static HTML.")
def generate(
    *,
    export: typ.Annotated[
        Path, Parameter(help="Path to the outline JSON export", env_var="INPUT_EXPORT")
    ],
    output_dir: typ.Annotated[
        Path, Parameter(help="Output folder", env_var="INPUT_OUTPUT_DIR")
    ] = DEFAULT_OUTPUT_DIR,
    overrides: typ.Annotated[
        Path | None,
        Parameter(
            help="YAML file with configuration overrides", env_var="INPUT_OVERRIDES"
        ),
    ] = None,
    workers: typ.Annotated[
        int, Parameter(help="Threads used for rendering", env_var="INPUT_WORKERS")
    ] = 1,
    pygments_style: typ.Annotated[
        str,
        Parameter(help="Pygments style for code blocks", env_var="INPUT_PYGMENTS_STYLE"),
    ] = DEFAULT_PYGMENTS_STYLE,
    verbose: typ.Annotated[
        bool, Parameter(help="Enable debug logging", env_var="INPUT_VERBOSE")
    ] = False,
) -> None:
    """Publish the outline export into ``output_dir``.

    Parameters
    ----------
    export : Path
        Outline JSON export to publish (``INPUT_EXPORT``).
    output_dir : Path, optional
        Directory receiving the HTML files; defaults to ``out``.
    overrides : Path or None, optional
        YAML mapping whose keys override the outline's configuration page.
    workers : int, optional
        Number of rendering threads; ``1`` (default) renders inline.
    pygments_style : str, optional
        Pygments style used to highlight fenced code.
    verbose : bool, optional
        Log at ``DEBUG`` instead of ``INFO``.

    Returns
    -------
    None
        Prints one ``wrote <path>`` line per page followed by a summary.

    Raises
    ------
    SystemExit
        With status ``1`` when the overrides or the export cannot be used.
    """
    _configure_logging(verbose=verbose)
    try:
        override_values = load_overrides(overrides) if overrides else None
        source = JsonExportSource.from_path(export)
        written = SiteGenerator(
            source,
            output_dir=output_dir,
            overrides=override_values,
            workers=workers,
            pygments_style=pygments_style,
        ).run()
    except (SiteConfigError, DataSourceError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    for path in written:
        print(f"wrote {_format_path(path)}")
    print(f"rendered {len(written)} pages")


def main() -> None:
    """Invoke the Cyclopts application that powers the `garden` console command.

    Returns
    -------
    None
        This function executes for its side effects of parsing CLI arguments
        and running the requested subcommand.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
