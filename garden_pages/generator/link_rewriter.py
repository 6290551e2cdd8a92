"""Prepare block trees for rendering: drop ignored blocks and rewrite links.

Bracket links, hash tags, and attribute keys that point at a published page
become markdown links; references to unpublished pages collapse to their
plain name. The rewritten text only contains markdown links and plain text,
so preparing an already prepared tree changes nothing.

Example
-------
>>> href = lambda name: f"{name}.html"
>>> rewrite_text("see [[Meeting [[Bob]]]]", {"Bob"}, href)
'see Meeting [Bob](Bob.html)'
>>> rewrite_text("[[Meeting [[Bob]]]]:: at noon", set(), href)
'Meeting Bob&#58;: at noon'
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from garden_pages._constants import IGNORE_MARKERS
from garden_pages.markup import ATTRIBUTE_PATTERN, TokenKind, plain_text, tokenize

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from garden_pages.outline import Block

HrefResolver = typ.Callable[[str], str]


def is_ignored(block: Block) -> bool:
    """Return ``True`` when the block text carries an ignore marker."""
    text = block.text.strip()
    return any(marker in text for marker in IGNORE_MARKERS)


def drop_ignored(blocks: cabc.Iterable[Block]) -> tuple[Block, ...]:
    """Remove ignored blocks and their subtrees, top down."""
    return tuple(
        dc.replace(block, children=drop_ignored(block.children))
        for block in blocks
        if not is_ignored(block)
    )


def _escape_label(name: str) -> str:
    return name.replace("[", r"\[").replace("]", r"\]")


def _page_link(name: str, published: cabc.Container[str], href: HrefResolver) -> str:
    if name in published:
        target = href(name)
        if "(" in target or ")" in target:
            target = f"<{target}>"
        return f"[{_escape_label(plain_text(name))}]({target})"
    parts: list[str] = []
    for token in tokenize(name):
        match token.kind:
            case TokenKind.PAGE_LINK | TokenKind.TAG:
                parts.append(_page_link(token.value, published, href))
            case TokenKind.ATTRIBUTE:
                parts.append(f"{token.value}:")
            case _:
                parts.append(token.raw)
    return "".join(parts)


def _shield_attribute(text: str) -> str:
    """Keep a plain-text fallback at block start from parsing as ``Key::``."""
    found = ATTRIBUTE_PATTERN.match(text)
    if found is None or not found.group(1).strip():
        return text
    colon = found.end() - 2
    return f"{text[:colon]}&#58;{text[colon + 1 :]}"


def rewrite_text(
    text: str, published: cabc.Container[str], href: HrefResolver
) -> str:
    """Rewrite page references in ``text`` against the published set.

    Parameters
    ----------
    text : str
        Raw block text.
    published : Container[str]
        Names of pages that are part of the site.
    href : Callable[[str], str]
        Returns the link target for a published page.

    Returns
    -------
    str
        Markdown with references resolved. Code spans are left untouched,
        ``#.class`` tags are kept for the renderer, and directive markers
        have link markup stripped from their arguments.
    """
    parts: list[str] = []
    for token in tokenize(text):
        match token.kind:
            case TokenKind.PAGE_LINK | TokenKind.TAG:
                parts.append(_page_link(token.value, published, href))
            case TokenKind.ATTRIBUTE:
                parts.append(f"**{_page_link(token.value, published, href)}:**")
            case TokenKind.DIRECTIVE:
                parts.append(f"{{{{{plain_text(token.value)}}}}}")
            case _:
                parts.append(token.raw)
    return _shield_attribute("".join(parts))


def rewrite_block(
    block: Block, published: cabc.Container[str], href: HrefResolver
) -> Block:
    """Rewrite a block and its subtree; headings become markdown markers."""
    text = rewrite_text(block.text, published, href)
    if block.heading:
        text = _shield_attribute(f"{'#' * block.heading} {text}")
    return dc.replace(
        block,
        text=text,
        heading=0,
        children=tuple(
            rewrite_block(child, published, href) for child in block.children
        ),
    )


def prepare_content(
    blocks: cabc.Iterable[Block],
    published: cabc.Container[str],
    href: HrefResolver,
) -> tuple[Block, ...]:
    """Drop ignored subtrees, then rewrite every surviving block."""
    return tuple(
        rewrite_block(block, published, href) for block in drop_ignored(blocks)
    )


__all__ = [
    "HrefResolver",
    "drop_ignored",
    "is_ignored",
    "prepare_content",
    "rewrite_block",
    "rewrite_text",
]
