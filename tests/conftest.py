"""Shared fixtures for garden_pages tests.

The helpers here build outline exports in the JSON shape read by
:class:`~garden_pages.source.JsonExportSource`, and the ``write_export``
fixture persists them with ``msgspec`` so CLI and end-to-end tests exercise
the same loading path as a real build.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import msgspec.json as msgspec_json
import pytest

from garden_pages.generator.components import RenderContext, WidgetRenderer, inert_components
from garden_pages.paths import PathNamer

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from garden_pages.generator.components import ComponentExpander
    from garden_pages.outline import BlockLookup, BlockReference


def node(
    text: str,
    uid: str,
    *children: dict[str, typ.Any],
    heading: int | None = None,
    view_type: str | None = None,
) -> dict[str, typ.Any]:
    """Return an exported block entry."""
    entry: dict[str, typ.Any] = {"string": text, "uid": uid}
    if heading is not None:
        entry["heading"] = heading
    if view_type is not None:
        entry["view-type"] = view_type
    if children:
        entry["children"] = list(children)
    return entry


def page(
    title: str, *children: dict[str, typ.Any], view_type: str | None = None
) -> dict[str, typ.Any]:
    """Return an exported page entry."""
    entry: dict[str, typ.Any] = {"title": title, "children": list(children)}
    if view_type is not None:
        entry["view-type"] = view_type
    return entry


def make_context(
    published: cabc.Iterable[str] = (),
    *,
    index: str = "Home",
    blocks: cabc.Mapping[str, BlockLookup] | None = None,
    components: ComponentExpander = inert_components,
    block_references: cabc.Mapping[str, tuple[BlockReference, ...]] | None = None,
    inline_references: bool = False,
) -> RenderContext:
    """Return a render context backed by a :class:`PathNamer`."""
    namer = PathNamer(index, published)
    return RenderContext(
        published=namer.published,
        href=namer.href,
        components=components,
        blocks=blocks or {},
        widgets=WidgetRenderer(),
        block_references=block_references or {},
        inline_references=inline_references,
    )


@pytest.fixture
def write_export(tmp_path: Path) -> cabc.Callable[[list[dict[str, typ.Any]]], Path]:
    """Return a factory that writes an outline export and returns its path."""

    def _write(pages: list[dict[str, typ.Any]]) -> Path:
        path = tmp_path / "export.json"
        path.write_bytes(msgspec_json.encode(pages))
        return path

    return _write


@pytest.fixture
def garden_export() -> list[dict[str, typ.Any]]:
    """Return a small outline with configuration, tags, and daily pages."""
    return [
        page(
            "roam/js/static-site",
            node("Index", "cfg-index", node("[[Home]]", "cfg-index-1")),
            node(
                "Filter",
                "cfg-filter",
                node("Tagged With", "cfg-rule", node("#[[Published]]", "cfg-rule-1")),
            ),
            node(
                "Plugins",
                "cfg-plugins",
                node(
                    "header",
                    "cfg-header",
                    node("links", "cfg-links", node("[[About]]", "cfg-link-1")),
                ),
                node("inline-block-references", "cfg-inline"),
            ),
            node(
                "Theme",
                "cfg-theme",
                node("layout", "cfg-layout", node("width", "cfg-w", node("720", "cfg-w1"))),
                node("text", "cfg-text", node("font", "cfg-f", node("Georgia", "cfg-f1"))),
            ),
        ),
        page(
            "Home",
            node("Welcome to the garden", "home-1"),
            node("See [[About]] and [[Secret]]", "home-2"),
            node(
                "Draft idea #[[roam/js/static-site/ignore]]",
                "home-4",
                node("nested draft", "home-5"),
            ),
        ),
        page(
            "About",
            node("#Published", "about-1"),
            node("roam/js/static-site/title:: About Us", "about-2"),
            node("roam/js/static-site/description:: Who we are", "about-3"),
            node("Quote ((home-1))", "about-4"),
        ),
        page(
            "Project",
            node("#[[Published]]", "proj-1"),
            node("{{static site: daily log}}", "proj-2"),
        ),
        page("Secret", node("Hidden notes", "secret-1")),
        page("January 1st, 2021", node("Kicked off [[Project]]", "jan1-1")),
        page("January 3rd, 2021", node("Shipped [[Project]]", "jan3-1")),
    ]
