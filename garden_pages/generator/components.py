"""Component directives, the per-page render context, and widget markup.

A directive is a ``{{name}}`` or ``{{name: argument}}`` marker inside a block.
The renderer handles the built-in directives itself and hands everything else
to the page's component expander (the digest widget lives there). Widget
markup is produced from Jinja templates in ``garden_pages/templates``.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from garden_pages.outline import BlockLookup, BlockReference

DIRECTIVE_PATTERN = r"\{\{(.+?)\}\}"
DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"


@dc.dataclass(frozen=True, slots=True)
class Directive:
    """A parsed ``{{name: argument}}`` marker.

    Attributes
    ----------
    name : str
        Lower-cased directive name (``"table"``, ``"static site"``, ...).
    argument : str or None
        Text after the first colon, stripped; ``None`` when absent.
    raw : str
        The text between the braces as written.
    """

    name: str
    argument: str | None
    raw: str

    @classmethod
    def parse(cls, raw: str) -> Directive:
        """Split ``raw`` on its first colon into name and argument."""
        name, sep, argument = raw.partition(":")
        return cls(
            name=name.strip().lower(),
            argument=argument.strip() if sep and argument.strip() else None,
            raw=raw,
        )

    def argument_mentions(self, word: str) -> bool:
        """Return ``True`` when the argument contains ``word``, ignoring case."""
        return self.argument is not None and word in self.argument.lower()


ComponentExpander = typ.Callable[[Directive], str | None]


def inert_components(directive: Directive) -> str | None:  # noqa: ARG001
    """Expand nothing; used where widgets must not nest."""
    return None


@dc.dataclass(frozen=True, slots=True)
class RenderContext:
    """Read-only inputs shared by every block rendered for one page.

    Attributes
    ----------
    published : frozenset[str]
        Names of pages that are part of the site.
    href : Callable[[str], str]
        Link target for a published page.
    components : ComponentExpander
        Page-level expander for directives the renderer does not handle.
    blocks : Mapping[str, BlockLookup]
        Text and owning page of every published block, keyed by uid.
    widgets : WidgetRenderer
        Template renderer for widget markup.
    block_references : Mapping[str, tuple[BlockReference, ...]]
        Blocks embedding a given uid; used by the inline references plugin.
    inline_references : bool
        Whether to list embedding pages beneath each block.
    """

    published: frozenset[str]
    href: cabc.Callable[[str], str]
    components: ComponentExpander
    blocks: cabc.Mapping[str, BlockLookup]
    widgets: WidgetRenderer
    block_references: cabc.Mapping[str, tuple[BlockReference, ...]] = dc.field(
        default_factory=dict
    )
    inline_references: bool = False

    def with_components(self, components: ComponentExpander) -> RenderContext:
        """Return a copy using a different page-level expander."""
        return dc.replace(self, components=components)


class WidgetRenderer:
    """Render widget markup (header, digest, inline references) from templates."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or DEFAULT_TEMPLATES_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, template: str, **context: typ.Any) -> str:
        """Render ``template`` with ``context`` and strip surrounding whitespace."""
        return self.env.get_template(template).render(**context).strip()


__all__ = [
    "DIRECTIVE_PATTERN",
    "ComponentExpander",
    "Directive",
    "RenderContext",
    "WidgetRenderer",
    "inert_components",
]
