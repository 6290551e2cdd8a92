"""Immutable outline data model consumed by the publishing pipeline.

Pages are forests of :class:`Block` values. Inbound references from other
pages are modelled as separate records rather than parent pointers so a page
can be rendered without loading the pages that link to it.

Example
-------
>>> from garden_pages.outline import Block, ListMode, inherit_list_mode
>>> tree = inherit_list_mode((Block(text="a", uid="u1"),), ListMode.NUMBERED)
>>> tree[0].list_mode
<ListMode.NUMBERED: 'numbered'>
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class ListMode(enum.StrEnum):
    """How a block's children are laid out."""

    BULLETED = "bullet"
    NUMBERED = "numbered"
    DOCUMENT = "document"

    @classmethod
    def parse(cls, value: object) -> ListMode | None:
        """Return the mode named by ``value`` (``":document"`` style allowed)."""
        if not isinstance(value, str):
            return None
        normalized = value.strip().lstrip(":").lower()
        if normalized == "bulleted":
            normalized = "bullet"
        try:
            return cls(normalized)
        except ValueError:
            return None


@dc.dataclass(frozen=True, slots=True)
class Block:
    """A single outline node.

    Attributes
    ----------
    text : str
        Raw block text, including link and tag markup.
    uid : str
        Stable identifier, used as the rendered element id.
    order : int
        Position among siblings as reported by the data source.
    heading : int
        Heading level from 0 (paragraph) to 3.
    list_mode : ListMode or None
        Layout for this block's children; ``None`` inherits the parent's.
    children : tuple[Block, ...]
        Child blocks in display order.
    """

    text: str
    uid: str
    order: int = 0
    heading: int = 0
    list_mode: ListMode | None = None
    children: tuple[Block, ...] = ()

    def walk(self) -> cabc.Iterator[Block]:
        """Yield this block followed by its descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()


@dc.dataclass(frozen=True, slots=True)
class InboundReference:
    """A block on ``source_page_title`` that links to the host page."""

    source_page_title: str
    block: Block


@dc.dataclass(frozen=True, slots=True)
class BlockReference:
    """A block on ``page`` that embeds another block by uid."""

    page: str
    uid: str


@dc.dataclass(frozen=True, slots=True)
class BlockLookup:
    """Text and owning page of a block, keyed by uid in the render context."""

    text: str
    page: str


@dc.dataclass(frozen=True, slots=True)
class Page:
    """A named, independently publishable forest of blocks."""

    name: str
    blocks: tuple[Block, ...]
    references: tuple[InboundReference, ...] = ()
    list_mode: ListMode = ListMode.BULLETED


def iter_blocks(blocks: cabc.Iterable[Block]) -> cabc.Iterator[Block]:
    """Yield every block in ``blocks`` and their descendants, depth first."""
    for block in blocks:
        yield from block.walk()


def inherit_list_mode(
    blocks: cabc.Iterable[Block], mode: ListMode
) -> tuple[Block, ...]:
    """Fill unset list modes from the nearest ancestor, starting from ``mode``."""
    resolved: list[Block] = []
    for block in blocks:
        own = block.list_mode or mode
        resolved.append(
            dc.replace(
                block,
                list_mode=own,
                children=inherit_list_mode(block.children, own),
            )
        )
    return tuple(resolved)


__all__ = [
    "Block",
    "BlockLookup",
    "BlockReference",
    "InboundReference",
    "ListMode",
    "Page",
    "inherit_list_mode",
    "iter_blocks",
]
