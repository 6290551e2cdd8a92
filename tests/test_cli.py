"""Tests for the ``garden generate`` command."""

from __future__ import annotations

import typing as typ

import pytest
from conftest import node, page

from garden_pages.cli import generate

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

ExportWriter = typ.Callable[[list[dict[str, typ.Any]]], "Path"]


def test_generate_reports_written_pages(
    tmp_path: Path,
    write_export: ExportWriter,
    garden_export: list[dict[str, typ.Any]],
    capsys: pytest.CaptureFixture[str],
) -> None:
    export = write_export(garden_export)
    out_dir = tmp_path / "site"
    generate(export=export, output_dir=out_dir)
    lines = capsys.readouterr().out.splitlines()
    assert lines[-1] == "rendered 3 pages"
    assert [line for line in lines if line.startswith("wrote ")] == [
        f"wrote {out_dir / name}" for name in ("About.html", "index.html", "Project.html")
    ]


def test_generate_applies_yaml_overrides(
    tmp_path: Path, write_export: ExportWriter, capsys: pytest.CaptureFixture[str]
) -> None:
    export = write_export(
        [page("Home", node("hi", "h1")), page("Blog/One", node("post", "b1"))]
    )
    overrides = tmp_path / "garden.yaml"
    overrides.write_text(
        "index: Home\nfilter:\n  - rule: starts with\n    values: [Blog/]\n",
        encoding="utf-8",
    )
    generate(export=export, output_dir=tmp_path / "out", overrides=overrides, workers=2)
    assert capsys.readouterr().out.splitlines()[-1] == "rendered 2 pages"
    assert (tmp_path / "out" / "index.html").exists()
    assert (tmp_path / "out" / "BlogOne.html").exists()


@pytest.mark.parametrize(
    "setup",
    [
        lambda tmp: {"export": tmp / "missing.json"},
        lambda tmp: {"export": tmp / "export.json", "overrides": tmp / "missing.yaml"},
    ],
    ids=["missing-export", "missing-overrides"],
)
def test_generate_fails_with_reason(
    tmp_path: Path,
    write_export: ExportWriter,
    capsys: pytest.CaptureFixture[str],
    setup: cabc.Callable[[Path], dict[str, Path]],
) -> None:
    write_export([page("Home", node("hi", "h1"))])
    with pytest.raises(SystemExit) as excinfo:
        generate(output_dir=tmp_path / "out", **setup(tmp_path))
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith("error: ")
    assert not (tmp_path / "out").exists()
