"""Fill the configured page template with rendered content and metadata.

Substitution is literal: placeholder tokens are swapped for values in a single
pass, so user-supplied text is inserted as-is and never re-scanned for further
placeholders.
"""

from __future__ import annotations

import re
import typing as typ

from garden_pages.markup import extract_tag

from .renderer import DEFAULT_PYGMENTS_STYLE, code_stylesheet

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from garden_pages.config import SiteConfig
    from garden_pages.paths import PathNamer

    from .components import WidgetRenderer

BASE_STYLE = """<style>
.rm-highlight {
  background-color: hsl(51, 98%, 81%);
  margin: -2px;
  padding: 2px;
}
.rm-bold {
  font-weight: bold;
}
.document-bullet {
  list-style: none;
}
.rm-embed {
  border-left: 3px solid #ccc;
  margin: 8px 0;
  padding-left: 12px;
}
.daily-log__month summary {
  cursor: pointer;
  user-select: none;
}
.daily-log__label {
  display: inline;
}
td {
  font-size: 12px;
  min-width: 100px;
  max-height: 20px;
  padding: 8px 16px;
  border: 1px solid grey;
}
table {
  border-spacing: 0;
  border-collapse: collapse;
}
</style>
"""
PAGE_PLACEHOLDERS = re.compile(r"\$\{(PAGE_NAME|PAGE_DESCRIPTION|PAGE_CONTENT|REFERENCES)\}")
REFERENCE_PLACEHOLDERS = re.compile(r"\$\{(REFERENCE|LINK)\}")
BODY_OPEN_PATTERN = re.compile(r"<body(.*?)>", re.DOTALL)
HEAD_CLOSE = "</head>"
STYLE_CLOSE = "</style>"


def _substitute(template: str, pattern: re.Pattern[str], values: dict[str, str]) -> str:
    return pattern.sub(lambda match: values[match.group(1)], template)


def build_theme_css(config: SiteConfig) -> str:
    """Return CSS rules for the configured theme, or ``""``."""
    rules: list[str] = []
    width = config.theme_value("layout", "width")
    if width:
        width_style = f"{width}px" if width[-1].isdigit() else width
        rules.append(
            "#content, #references {\n"
            "  margin: auto;\n"
            f"  width: {width_style};\n"
            "}\n"
        )
    font = config.theme_value("text", "font")
    if font:
        rules.append(f"body {{\n  font-family: {font};\n}}\n")
    return "".join(rules)


class TemplateCompositor:
    """Compose final page documents for one build.

    Build-invariant fragments (stylesheet, theme rules, site header) are
    computed once when the compositor is created and reused for every page.
    """

    def __init__(
        self,
        config: SiteConfig,
        namer: PathNamer,
        widgets: WidgetRenderer,
        *,
        pygments_style: str = DEFAULT_PYGMENTS_STYLE,
    ) -> None:
        """Initialize the compositor.

        Parameters
        ----------
        config : SiteConfig
            Resolved configuration supplying templates, theme, and plugins.
        namer : PathNamer
            Resolves links for published pages.
        widgets : WidgetRenderer
            Renders the site header markup.
        pygments_style : str, optional
            Pygments style whose CSS is appended to the base stylesheet.
        """
        self.config = config
        self.namer = namer
        self.stylesheet = self._build_stylesheet(pygments_style)
        self.header_html = self._render_header(widgets)

    def _build_stylesheet(self, pygments_style: str) -> str:
        theme_css = build_theme_css(self.config)
        code_css = code_stylesheet(pygments_style)
        return BASE_STYLE.replace(STYLE_CLOSE, f"{code_css}\n{theme_css}{STYLE_CLOSE}", 1)

    def _render_header(self, widgets: WidgetRenderer) -> str | None:
        if not self.config.has_plugin("header"):
            return None
        links = [
            {"title": title, "href": self.namer.path(title)}
            for title in (
                extract_tag(link.strip())
                for link in self.config.plugin_option("header", "links")
            )
            if title
        ]
        return widgets.render("header.jinja", home_href="/", links=links)

    def references_html(self, titles: cabc.Iterable[str]) -> str:
        """Render one reference-template instance per distinct published title."""
        published = sorted(set(titles) & self.namer.published)
        return "\n".join(
            _substitute(
                self.config.reference_template,
                REFERENCE_PLACEHOLDERS,
                {"REFERENCE": title, "LINK": self.namer.path(title)},
            )
            for title in published
        )

    def compose(
        self,
        *,
        title: str,
        description: str,
        content: str,
        head: str = "",
        references: cabc.Iterable[str] = (),
    ) -> str:
        """Return the complete HTML document for a page.

        Parameters
        ----------
        title : str
            Value for ``${PAGE_NAME}``.
        description : str
            Value for ``${PAGE_DESCRIPTION}``.
        content : str
            Rendered page fragment for ``${PAGE_CONTENT}``.
        head : str, optional
            Extra markup inserted before ``</head>`` after the stylesheet.
        references : Iterable[str]
            Titles of pages linking here; unpublished ones are dropped.
        """
        html = self.config.template.replace(HEAD_CLOSE, f"{self.stylesheet}{head}{HEAD_CLOSE}", 1)
        if self.header_html is not None:
            header = self.header_html
            html = BODY_OPEN_PATTERN.sub(lambda match: f"{match.group(0)}{header}", html, 1)
        return _substitute(
            html,
            PAGE_PLACEHOLDERS,
            {
                "PAGE_NAME": title,
                "PAGE_DESCRIPTION": description,
                "PAGE_CONTENT": content,
                "REFERENCES": self.references_html(references),
            },
        )


__all__ = ["BASE_STYLE", "TemplateCompositor", "build_theme_css"]
