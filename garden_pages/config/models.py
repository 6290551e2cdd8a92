"""Typed dataclasses describing the resolved site configuration."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from garden_pages._constants import DEFAULT_INDEX
from garden_pages.markup import referenced_titles
from garden_pages.outline import iter_blocks

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from garden_pages.outline import Block

DEFAULT_TEMPLATE = """<!doctype html>
<html>
<head>
<meta charset="utf-8"/>
<meta name="description" content="${PAGE_DESCRIPTION}"/>
<meta property="og:description" content="${PAGE_DESCRIPTION}">
<title>${PAGE_NAME}</title>
<meta property="og:title" content="${PAGE_NAME}">
<meta property="og:type" content="website">
</head>
<body>
<div id="content">
${PAGE_CONTENT}
</div>
<div id="references">
<ul>
${REFERENCES}
</ul>
</div>
</body>
</html>"""
DEFAULT_REFERENCE_TEMPLATE = '<li><a href="${LINK}">${REFERENCE}</a></li>'


class SiteConfigError(ValueError):
    """Raised when caller-supplied configuration overrides are unusable."""


@dc.dataclass(frozen=True, slots=True)
class StartsWith:
    """Publish pages whose name starts with ``prefix``."""

    prefix: str

    def matches(self, title: str) -> bool:
        """Return ``True`` when ``title`` starts with the configured prefix."""
        return title.startswith(self.prefix)


@dc.dataclass(frozen=True, slots=True)
class TaggedWith:
    """Publish pages where any block references ``tag``."""

    tag: str

    def matches(self, blocks: cabc.Iterable[Block]) -> bool:
        """Return ``True`` when a block links, tags, or keys on the tag."""
        return any(self.tag in referenced_titles(b.text) for b in iter_blocks(blocks))


FilterRule = StartsWith | TaggedWith


@dc.dataclass(frozen=True, slots=True)
class SiteConfig:
    """A fully resolved site configuration.

    Attributes
    ----------
    index : str
        Name of the page written as the site root document.
    filters : tuple[FilterRule, ...]
        Publication rules, in the order they were declared.
    template : str
        Page template with ``${PAGE_*}`` and ``${REFERENCES}`` placeholders.
    reference_template : str
        Per-reference template with ``${REFERENCE}`` and ``${LINK}``.
    plugins : dict[str, dict[str, list[str]]]
        Plugin name to option mapping; option values are always lists.
    theme : dict[str, dict[str, str]]
        Theme section to setting mapping (``text.font``, ``layout.width``).
    """

    index: str = DEFAULT_INDEX
    filters: tuple[FilterRule, ...] = ()
    template: str = DEFAULT_TEMPLATE
    reference_template: str = DEFAULT_REFERENCE_TEMPLATE
    plugins: dict[str, dict[str, list[str]]] = dc.field(default_factory=dict)
    theme: dict[str, dict[str, str]] = dc.field(default_factory=dict)

    @property
    def title_rules(self) -> tuple[StartsWith, ...]:
        """Return the name-based rules."""
        return tuple(rule for rule in self.filters if isinstance(rule, StartsWith))

    @property
    def content_rules(self) -> tuple[TaggedWith, ...]:
        """Return the content-based rules."""
        return tuple(rule for rule in self.filters if isinstance(rule, TaggedWith))

    def has_plugin(self, name: str) -> bool:
        """Return ``True`` when the named plugin is configured."""
        return name in self.plugins

    def plugin_option(self, plugin: str, key: str) -> list[str]:
        """Return the values configured for ``plugin.key`` (empty if unset)."""
        return list(self.plugins.get(plugin, {}).get(key, []))

    def theme_value(self, section: str, key: str) -> str | None:
        """Return a theme setting or ``None`` when unset."""
        return self.theme.get(section, {}).get(key) or None


__all__ = [
    "DEFAULT_REFERENCE_TEMPLATE",
    "DEFAULT_TEMPLATE",
    "FilterRule",
    "SiteConfig",
    "SiteConfigError",
    "StartsWith",
    "TaggedWith",
]
