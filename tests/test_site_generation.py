"""End-to-end tests for publishing an outline export.

The ``garden_export`` fixture (see ``conftest.py``) describes a small garden:
a configuration page that sets ``Home`` as the index, publishes pages tagged
``Published``, enables the header and inline block reference plugins, and
sets a theme. These tests run :class:`SiteGenerator` over it and inspect the
written documents with BeautifulSoup.
"""

from __future__ import annotations

import typing as typ

import pytest
from bs4 import BeautifulSoup
from conftest import node, page

from garden_pages.generator import SiteGenerator, extract_page_metadata
from garden_pages.outline import Block
from garden_pages.source import DataSourceError, JsonExportSource

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def site(tmp_path: Path, garden_export: list[dict[str, typ.Any]]) -> dict[str, BeautifulSoup]:
    """Generate the fixture garden and return parsed documents by file name."""
    written = SiteGenerator(JsonExportSource(garden_export), output_dir=tmp_path / "out").run()
    return {
        path.name: BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")
        for path in written
    }


def test_only_selected_pages_are_written(
    tmp_path: Path, garden_export: list[dict[str, typ.Any]]
) -> None:
    written = SiteGenerator(JsonExportSource(garden_export), output_dir=tmp_path / "out").run()
    assert [path.name for path in written] == ["About.html", "index.html", "Project.html"]
    assert sorted(p.name for p in (tmp_path / "out").iterdir()) == [
        "About.html",
        "Project.html",
        "index.html",
    ]


def test_links_to_unpublished_pages_are_plain_text(site: dict[str, BeautifulSoup]) -> None:
    home = site["index.html"]
    item = home.select_one("#content li#home-2")
    assert [a["href"] for a in item.find_all("a")] == ["About.html"]
    assert "Secret" in item.get_text()


def test_ignored_blocks_are_not_rendered(site: dict[str, BeautifulSoup]) -> None:
    home = site["index.html"]
    assert home.select_one("#home-4") is None
    assert home.select_one("#home-5") is None
    assert "nested draft" not in home.get_text()


def test_metadata_overrides(site: dict[str, BeautifulSoup]) -> None:
    about = site["About.html"]
    assert about.title.get_text() == "About Us"
    assert about.select_one('meta[name="description"]')["content"] == "Who we are"
    assert site["Project.html"].title.get_text() == "Project"


def test_references_list_published_linking_pages(site: dict[str, BeautifulSoup]) -> None:
    refs = [(a["href"], a.get_text()) for a in site["About.html"].select("#references a")]
    assert refs == [("/", "Home")]
    assert site["Project.html"].select("#references a") == []


def test_header_theme_and_block_references(site: dict[str, BeautifulSoup]) -> None:
    home = site["index.html"]
    assert [a["href"] for a in home.select("#site-header .site-nav-link")] == ["About.html"]
    style = home.find("style").get_text()
    assert "width: 720px;" in style
    assert "font-family: Georgia;" in style
    inline = home.select_one("#home-1-inline-references a")
    assert inline["href"] == "About.html#about-4"
    call_out = site["About.html"].select_one("li#about-4 span.rm-block-ref a")
    assert call_out["href"] == "/#home-1"
    assert call_out.get_text() == "Welcome to the garden"


def test_daily_log_widget(site: dict[str, BeautifulSoup]) -> None:
    project = site["Project.html"]
    months = project.select(".daily-log details")
    assert [m.select_one("summary").get_text(strip=True) for m in months] == ["January 2021"]
    entries = [li.get_text(strip=True) for li in months[0].select("li")]
    assert entries == ["Shipped January 3rd, 2021", "Kicked off January 1st, 2021"]


def test_default_configuration_without_config_page(
    tmp_path: Path,
) -> None:
    export = [
        page("Website Index", node("Start at [[Alpha]]", "w1")),
        page("Alpha", node("Alpha text", "a1")),
        page("Beta", node("Beta text", "b1")),
    ]
    written = SiteGenerator(JsonExportSource(export), output_dir=tmp_path).run()
    assert [path.name for path in written] == ["Alpha.html", "Beta.html", "index.html"]
    index = BeautifulSoup((tmp_path / "index.html").read_text(encoding="utf-8"), "html.parser")
    assert index.select_one("#content a")["href"] == "Alpha.html"


def test_overrides_take_precedence(
    tmp_path: Path, garden_export: list[dict[str, typ.Any]]
) -> None:
    written = SiteGenerator(
        JsonExportSource(garden_export),
        output_dir=tmp_path,
        overrides={"index": "Secret", "filter": []},
    ).run()
    names = {path.name for path in written}
    assert "index.html" in names
    assert "Home.html" in names
    assert "Secret.html" not in names
    assert "roam_js_static-site.html" not in names


def test_parallel_rendering_matches_sequential(
    tmp_path: Path, garden_export: list[dict[str, typ.Any]]
) -> None:
    serial = SiteGenerator(JsonExportSource(garden_export), output_dir=tmp_path / "a").run()
    threaded = SiteGenerator(
        JsonExportSource(garden_export), output_dir=tmp_path / "b", workers=4
    ).run()
    assert [p.name for p in serial] == [p.name for p in threaded]
    for left, right in zip(serial, threaded, strict=True):
        assert left.read_text(encoding="utf-8") == right.read_text(encoding="utf-8")


class BrokenSource(JsonExportSource):
    """Source whose reference lookup fails for one page."""

    def get_inbound_references(self, page_name: str) -> tuple:  # type: ignore[override]
        if page_name == "Beta":
            msg = f"cannot load references for '{page_name}'"
            raise DataSourceError(msg)
        return super().get_inbound_references(page_name)


def test_data_source_failure_aborts_the_build(tmp_path: Path) -> None:
    source = BrokenSource([page("Alpha", node("a", "a1")), page("Beta", node("b", "b1"))])
    with pytest.raises(DataSourceError, match="Beta"):
        SiteGenerator(source, output_dir=tmp_path / "out").run()
    assert not (tmp_path / "out").exists()


def test_extract_page_metadata_defaults_and_head() -> None:
    blocks = (
        Block(
            text="roam/js/public-garden/head::",
            uid="h",
            children=(Block(text='```html\n<meta name="x">```', uid="h1"),),
        ),
    )
    metadata = extract_page_metadata("Page", blocks)
    assert metadata.title == "Page"
    assert metadata.description == ""
    assert metadata.head == '<meta name="x">'


def test_ignored_blocks_cannot_be_embedded(tmp_path: Path) -> None:
    export = [
        page("Website Index", node("Start", "w1")),
        page("Alpha", node("{{embed: ((b2))}} and ((b1))", "a1")),
        page(
            "Beta",
            node("Visible", "b0"),
            node("Draft #[[roam/js/static-site/ignore]]", "b1", node("secret plan", "b2")),
        ),
    ]
    SiteGenerator(JsonExportSource(export), output_dir=tmp_path).run()
    alpha = BeautifulSoup((tmp_path / "Alpha.html").read_text(encoding="utf-8"), "html.parser")
    item = alpha.select_one("#content li#a1")
    assert "secret plan" not in item.get_text()
    assert "Draft" not in item.get_text()
    assert item.select("blockquote.rm-embed") == []
    assert item.select("span.rm-block-ref") == []
