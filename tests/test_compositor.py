"""Tests for filling the page template."""

from __future__ import annotations

import typing as typ

from bs4 import BeautifulSoup

from garden_pages.config import SiteConfig
from garden_pages.generator.components import WidgetRenderer
from garden_pages.generator.compositor import TemplateCompositor, build_theme_css
from garden_pages.paths import PathNamer

PUBLISHED = ["Home", "About", "Blog Post"]


class CountingWidgets(WidgetRenderer):
    """Widget renderer that records every template it renders."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[str] = []

    def render(self, template: str, **context: typ.Any) -> str:
        self.calls.append(template)
        return super().render(template, **context)


def compositor(
    config: SiteConfig | None = None, widgets: WidgetRenderer | None = None
) -> TemplateCompositor:
    config = config or SiteConfig(index="Home")
    namer = PathNamer(config.index, PUBLISHED)
    return TemplateCompositor(config, namer, widgets or WidgetRenderer())


def test_default_template_is_filled() -> None:
    html = compositor().compose(
        title="About Us",
        description="Who we are",
        content="<ul><li>hello</li></ul>",
        references=["Blog Post", "Home", "Blog Post", "Secret"],
    )
    soup = BeautifulSoup(html, "html.parser")
    assert soup.title.get_text() == "About Us"
    assert soup.select_one('meta[name="description"]')["content"] == "Who we are"
    assert soup.select_one("#content li").get_text() == "hello"
    refs = [(a["href"], a.get_text()) for a in soup.select("#references a")]
    assert refs == [("Blog_Post.html", "Blog Post"), ("/", "Home")]
    assert "${" not in html


def test_substitution_is_literal() -> None:
    html = compositor().compose(
        title="$1 & ${PAGE_CONTENT}", description="", content="shows ${PAGE_NAME} verbatim"
    )
    assert "shows ${PAGE_NAME} verbatim" in html
    assert "<title>$1 & ${PAGE_CONTENT}</title>" in html


def test_custom_reference_template() -> None:
    config = SiteConfig(
        index="Home",
        template="<html><head></head><body>${REFERENCES}</body></html>",
        reference_template='<a class="ref" href="${LINK}">${REFERENCE}</a>',
    )
    html = compositor(config).compose(
        title="t", description="", content="", references=["About"]
    )
    assert '<a class="ref" href="About.html">About</a>' in html


def test_stylesheet_and_head_injection_precede_head_close() -> None:
    config = SiteConfig(theme={"text": {"font": "Georgia"}, "layout": {"width": "720"}})
    html = compositor(config).compose(
        title="t", description="", content="", head='<script id="extra"></script>'
    )
    head = html[: html.index("</head>")]
    assert ".rm-highlight" in head
    assert ".codehilite" in head
    assert "font-family: Georgia;" in head
    assert "width: 720px;" in head
    assert head.index("</style>") < head.index('<script id="extra">')


def test_theme_css() -> None:
    assert build_theme_css(SiteConfig()) == ""
    assert "width: 60%;" in build_theme_css(SiteConfig(theme={"layout": {"width": "60%"}}))
    assert "font-family" not in build_theme_css(SiteConfig(theme={"layout": {"width": "600"}}))


def test_header_is_rendered_once_and_placed_after_body() -> None:
    widgets = CountingWidgets()
    config = SiteConfig(
        index="Home",
        template='<html><head></head><body class="x"><main>${PAGE_CONTENT}</main></body></html>',
        plugins={"header": {"links": ["[[About]]", "#[[Blog Post]]"]}},
    )
    composer = compositor(config, widgets)
    pages = [composer.compose(title=n, description="", content=n) for n in ("a", "b", "c")]
    assert widgets.calls == ["header.jinja"]
    soup = BeautifulSoup(pages[0], "html.parser")
    first = soup.body.find(True)
    assert first["id"] == "site-header"
    assert soup.select_one(".site-home-link")["href"] == "/"
    links = [(a["href"], a.get_text()) for a in soup.select(".site-nav-link")]
    assert links == [("About.html", "About"), ("Blog_Post.html", "Blog Post")]


def test_no_header_without_plugin() -> None:
    html = compositor().compose(title="t", description="", content="")
    assert "site-header" not in html
