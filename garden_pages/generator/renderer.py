"""Render prepared block trees into nested HTML.

Each block's text is converted with Python-Markdown plus
:class:`OutlineMarkupExtension`, which adds the outline-specific inline
syntax: ``^^highlight^^``, ``__italic__``, ``((uid))`` block references and
``{{directive}}`` components. Children are rendered recursively inside a
container chosen by the effective list mode.
"""

from __future__ import annotations

import re
import typing as typ
import xml.etree.ElementTree as etree
from html import escape

from markdown import Markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor
from pygments.formatters.html import HtmlFormatter

from garden_pages._constants import HTML_FENCE_PATTERN
from garden_pages.markup import BLOCK_REF_PATTERN, plain_text, split_class_tags
from garden_pages.outline import ListMode

from .components import DIRECTIVE_PATTERN, Directive
from .link_rewriter import rewrite_text

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from garden_pages.outline import Block

    from .components import RenderContext

CODE_BLOCK_PATTERN = re.compile(r"```([A-Za-z0-9_+#.-]+)?[^\n]*\n(.*?)```", re.DOTALL)
PARAGRAPH_PATTERN = re.compile(r"^<p>(.*)</p>$", re.DOTALL)
HIGHLIGHT_PATTERN = r"\^\^(.+?)\^\^"
ITALIC_PATTERN = r"(?<!\w)__(?!\s)(.+?)(?<!\s)__(?!\w)"
CONTAINER_TAGS: dict[ListMode, str] = {
    ListMode.BULLETED: "ul",
    ListMode.NUMBERED: "ol",
    ListMode.DOCUMENT: "div",
}
DOCUMENT_BULLET_CLASS = "document-bullet"
DEFAULT_PYGMENTS_STYLE = "default"


def code_stylesheet(pygments_style: str = DEFAULT_PYGMENTS_STYLE) -> str:
    """Return the CSS used for highlighted code blocks."""
    return HtmlFormatter(style=pygments_style).get_style_defs(".codehilite")


class _DirectiveProcessor(InlineProcessor):
    """Replace ``{{...}}`` with component markup when the renderer knows it."""

    def __init__(self, pattern: str, md: Markdown, renderer: OutlineRenderer) -> None:
        super().__init__(pattern, md)
        self.renderer = renderer

    def handleMatch(  # type: ignore[override]  # noqa: N802
        self, m: re.Match[str], data: str
    ) -> tuple[str, int, int]:
        html = self.renderer.expand(Directive.parse(m.group(1)))
        if html is None:
            return m.group(0), m.start(0), m.end(0)
        return self.md.htmlStash.store(html), m.start(0), m.end(0)


class _BlockReferenceProcessor(InlineProcessor):
    """Render ``((uid))`` as the referenced block's text."""

    def __init__(self, pattern: str, md: Markdown, renderer: OutlineRenderer) -> None:
        super().__init__(pattern, md)
        self.renderer = renderer

    def handleMatch(  # type: ignore[override]  # noqa: N802
        self, m: re.Match[str], data: str
    ) -> tuple[etree.Element | str, int, int]:
        element = self.renderer.block_reference(m.group(1))
        if element is None:
            return m.group(0), m.start(0), m.end(0)
        return element, m.start(0), m.end(0)


class _WrapProcessor(InlineProcessor):
    """Wrap the first group in ``tag`` with optional attributes."""

    def __init__(
        self, pattern: str, md: Markdown, tag: str, attrs: dict[str, str] | None = None
    ) -> None:
        super().__init__(pattern, md)
        self.tag = tag
        self.attrs = attrs or {}

    def handleMatch(  # type: ignore[override]  # noqa: N802
        self, m: re.Match[str], data: str
    ) -> tuple[etree.Element, int, int]:
        element = etree.Element(self.tag, dict(self.attrs))
        element.text = m.group(1)
        return element, m.start(0), m.end(0)


class OutlineMarkupExtension(Extension):
    """Register outline inline syntax on a ``markdown.Markdown`` instance."""

    def __init__(self, renderer: OutlineRenderer) -> None:
        super().__init__()
        self.renderer = renderer

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register directive, block reference, highlight, and italic patterns."""
        md.inlinePatterns.register(
            _DirectiveProcessor(DIRECTIVE_PATTERN, md, self.renderer),
            "garden_directive",
            175,
        )
        md.inlinePatterns.register(
            _BlockReferenceProcessor(BLOCK_REF_PATTERN.pattern, md, self.renderer),
            "garden_block_ref",
            165,
        )
        md.inlinePatterns.register(
            _WrapProcessor(HIGHLIGHT_PATTERN, md, "span", {"class": "rm-highlight"}),
            "garden_highlight",
            65,
        )
        md.inlinePatterns.register(
            _WrapProcessor(ITALIC_PATTERN, md, "em"), "garden_italic", 55
        )


def _normalize_code_fences(text: str) -> str:
    """Put fence markers on their own lines so ``fenced_code`` recognises them."""

    def _repl(match: re.Match[str]) -> str:
        language = match.group(1) or ""
        code = match.group(2).rstrip("\n")
        return f"\n\n```{language}\n{code}\n```\n\n"

    return CODE_BLOCK_PATTERN.sub(_repl, text).strip()


def _strip_paragraph(html: str) -> str:
    match = PARAGRAPH_PATTERN.match(html.strip())
    if match and "<p>" not in match.group(1):
        return match.group(1)
    return html


class OutlineRenderer:
    """Turn prepared blocks into nested list markup for one page.

    A renderer owns a ``Markdown`` instance and is not thread-safe; create
    one per page render.
    """

    def __init__(
        self,
        context: RenderContext,
        *,
        pygments_style: str = DEFAULT_PYGMENTS_STYLE,
        embedding: set[str] | None = None,
    ) -> None:
        """Initialize the renderer for a page.

        Parameters
        ----------
        context : RenderContext
            Published names, link resolution, component expansion, and block
            lookups shared across the page.
        pygments_style : str, optional
            Pygments style used for fenced code blocks.
        embedding : set[str], optional
            Uids of blocks whose embeds are being rendered; shared with
            nested renderers so an embed never re-enters itself.
        """
        self.context = context
        self.pygments_style = pygments_style
        self._embedding = set() if embedding is None else embedding
        self._md = Markdown(
            extensions=[
                "fenced_code",
                "tables",
                "codehilite",
                OutlineMarkupExtension(self),
            ],
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": pygments_style,
                }
            },
        )
        self._active: Block | None = None
        self._skip_children = False
        self._nested: OutlineRenderer | None = None

    def render(
        self, blocks: cabc.Sequence[Block], list_mode: ListMode, level: int = 0
    ) -> str:
        """Render one list level and everything beneath it.

        Parameters
        ----------
        blocks : Sequence[Block]
            Prepared sibling blocks.
        list_mode : ListMode
            Mode inherited from the parent; picks the container element.
        level : int, optional
            Nesting depth, ``0`` for the page root.

        Returns
        -------
        str
            HTML fragment, or ``""`` when ``blocks`` is empty.
        """
        if not blocks:
            return ""
        items = "\n".join(self._render_item(block, list_mode, level) for block in blocks)
        if level > 0 and list_mode is ListMode.DOCUMENT:
            container = "ul"
        else:
            container = CONTAINER_TAGS[list_mode]
        return f"<{container}>{items}</{container}>"

    def _render_item(self, block: Block, list_mode: ListMode, level: int) -> str:
        text, classes = split_class_tags(block.text)
        html, skip_children = self.markdown(text, block)
        children = (
            ""
            if skip_children
            else self.render(block.children, block.list_mode or list_mode, level + 1)
        )
        if level > 0 and list_mode is ListMode.DOCUMENT:
            classes.append(DOCUMENT_BULLET_CLASS)
        attrs = f'id="{escape(block.uid, quote=True)}"'
        if classes:
            attrs += f' class="{escape(" ".join(classes), quote=True)}"'
        inner = f"{html}{self._inline_references(block)}\n{children}"
        tag = "div" if level == 0 and list_mode is ListMode.DOCUMENT else "li"
        return f"<{tag} {attrs}>{inner}</{tag}>"

    def markdown(self, text: str, block: Block | None = None) -> tuple[str, bool]:
        """Convert block text to HTML.

        Returns
        -------
        tuple[str, bool]
            The HTML and whether a directive consumed the block's children.
        """
        self._active = block
        self._skip_children = False
        try:
            html = self._md.convert(_normalize_code_fences(text))
        finally:
            self._md.reset()
            self._active = None
        return html, self._skip_children

    def inline(self, text: str) -> str:
        """Convert a short snippet, dropping a single wrapping paragraph."""
        html, _ = self._nested_renderer().markdown(text)
        return _strip_paragraph(html)

    def expand(self, directive: Directive) -> str | None:
        """Expand a directive found in the active block, or return ``None``."""
        block = self._active
        match directive.name:
            case "table" if block is not None:
                self._skip_children = True
                return self._render_table(block)
            case "static site" if block is not None and directive.argument_mentions(
                "inject"
            ):
                return self._inject(block)
            case "embed" if directive.argument:
                return self._embed(directive.argument)
            case _:
                return self.context.components(directive)

    def block_reference(self, uid: str) -> etree.Element | None:
        """Return a call-out element for ``((uid))`` or ``None`` if unknown."""
        lookup = self.context.blocks.get(uid)
        if lookup is None:
            return None
        element = etree.Element("span", {"class": "rm-block-ref"})
        label = plain_text(split_class_tags(lookup.text)[0])
        href = self.context.href(lookup.page)
        if href:
            anchor = etree.SubElement(element, "a", {"href": f"{href}#{uid}"})
            anchor.text = label
        else:
            element.text = label
        return element

    def _nested_renderer(self) -> OutlineRenderer:
        if self._nested is None:
            self._nested = OutlineRenderer(
                self.context,
                pygments_style=self.pygments_style,
                embedding=self._embedding,
            )
        return self._nested

    def _render_table(self, block: Block) -> str:
        rows = []
        for row in block.children:
            cells = "".join(f"<td>{self.inline(cell.text)}</td>" for cell in row.walk())
            rows.append(f"<tr>{cells}</tr>")
        return f"<table><tbody>{''.join(rows)}</tbody></table>"

    def _inject(self, block: Block) -> str | None:
        for child in block.children:
            match = HTML_FENCE_PATTERN.search(child.text)
            if match:
                self._skip_children = True
                return match.group(1)
        return None

    def _embed(self, argument: str) -> str | None:
        found = BLOCK_REF_PATTERN.search(argument)
        uid = found.group(1) if found else argument.strip()
        lookup = self.context.blocks.get(uid)
        if lookup is None:
            return None
        if uid in self._embedding:
            return etree.tostring(self.block_reference(uid), encoding="unicode")
        text = rewrite_text(lookup.text, self.context.published, self.context.href)
        self._embedding.add(uid)
        try:
            body, _ = self._nested_renderer().markdown(split_class_tags(text)[0])
        finally:
            self._embedding.discard(uid)
        href = self.context.href(lookup.page)
        return self.context.widgets.render(
            "embed.jinja",
            uid=uid,
            body=body,
            page=lookup.page,
            href=f"{href}#{uid}" if href else "",
        )

    def _inline_references(self, block: Block) -> str:
        if not self.context.inline_references:
            return ""
        references = [
            {
                "title": reference.page,
                "href": f"{self.context.href(reference.page)}#{reference.uid}",
            }
            for reference in self.context.block_references.get(block.uid, ())
            if reference.page in self.context.published
        ]
        if not references:
            return ""
        return self.context.widgets.render(
            "inline_references.jinja", uid=block.uid, references=references
        )


__all__ = [
    "CODE_BLOCK_PATTERN",
    "OutlineMarkupExtension",
    "OutlineRenderer",
    "code_stylesheet",
]
