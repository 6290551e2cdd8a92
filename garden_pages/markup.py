r"""Tokenize outline block text into link, tag, and passthrough segments.

Block text mixes four reference syntaxes with ordinary markdown:

* ``[[Page]]`` bracket links (which may nest, ``[[a [[b]]]]``),
* ``#Page`` and ``#[[Page]]`` hash tags,
* ``Key::`` attribute keys at the start of a block,
* ``#.class`` inline class tags.

Inline code, fenced code and ``{{directive}}`` markers are kept as opaque
tokens so nothing inside them is treated as a reference.

Example
-------
>>> from garden_pages.markup import TokenKind, tokenize
>>> [token.kind for token in tokenize("see [[Team]] #news")]
[<TokenKind.TEXT: 'text'>, <TokenKind.PAGE_LINK: 'page_link'>, <TokenKind.TEXT: 'text'>, <TokenKind.TAG: 'tag'>]
>>> sorted(referenced_titles("Status:: #[[In Progress]] with [[Team]]"))
['In Progress', 'Status', 'Team']
"""

from __future__ import annotations

import dataclasses as dc
import enum
import re

ATTRIBUTE_PATTERN = re.compile(r"^([^:`\[\]{}\n]+?)::")
BLOCK_REF_PATTERN = re.compile(r"\(\(([\w-]+)\)\)")
TAG_BOUNDARY = frozenset(" \t\n(")
TAG_TERMINATORS = frozenset(" \t\n,.;:!?()[]{}\"'#`*^~<>")


class TokenKind(enum.StrEnum):
    """Kinds of segment produced by :func:`tokenize`."""

    TEXT = "text"
    CODE = "code"
    DIRECTIVE = "directive"
    PAGE_LINK = "page_link"
    TAG = "tag"
    ATTRIBUTE = "attribute"
    CLASS = "class"


@dc.dataclass(frozen=True, slots=True)
class Token:
    """A segment of block text.

    Attributes
    ----------
    kind : TokenKind
        Segment type.
    raw : str
        Exact source text covered by the token.
    value : str
        Page name for references, class name for class tags, inner text for
        directives; equal to ``raw`` otherwise.
    """

    kind: TokenKind
    raw: str
    value: str


def _scan_brackets(text: str, start: int) -> int | None:
    """Return the index just past the ``]]`` closing the ``[[`` at ``start``."""
    depth = 0
    index = start
    while index < len(text) - 1:
        pair = text[index : index + 2]
        if pair == "[[":
            depth += 1
            index += 2
        elif pair == "]]":
            depth -= 1
            index += 2
            if depth == 0:
                return index
        else:
            index += 1
    return None


def _scan_hash(text: str, index: int) -> Token | None:
    """Return the hash tag or class tag starting at ``index``, if any."""
    if index > 0 and text[index - 1] not in TAG_BOUNDARY:
        return None
    if text.startswith("#[[", index):
        end = _scan_brackets(text, index + 1)
        if end is None:
            return None
        return Token(TokenKind.TAG, text[index:end], text[index + 3 : end - 2])
    if text.startswith("#.", index):
        end = index + 2
        while end < len(text) and not text[end].isspace():
            end += 1
        if end == index + 2:
            return None
        return Token(TokenKind.CLASS, text[index:end], text[index + 2 : end])
    end = index + 1
    while end < len(text) and text[end] not in TAG_TERMINATORS:
        end += 1
    if end == index + 1:
        return None
    return Token(TokenKind.TAG, text[index:end], text[index + 1 : end])


def _scan_special(text: str, index: int) -> Token | None:
    """Return the non-text token starting at ``index``, or ``None``."""
    token: Token | None = None
    if text.startswith("```", index):
        end = text.find("```", index + 3)
        if end != -1:
            raw = text[index : end + 3]
            token = Token(TokenKind.CODE, raw, raw)
    elif text[index] == "`":
        end = text.find("`", index + 1)
        if end != -1:
            raw = text[index : end + 1]
            token = Token(TokenKind.CODE, raw, raw)
    elif text.startswith("{{", index):
        end = text.find("}}", index + 2)
        if end != -1:
            token = Token(
                TokenKind.DIRECTIVE, text[index : end + 2], text[index + 2 : end]
            )
    elif text.startswith("[[", index):
        end = _scan_brackets(text, index)
        if end is not None:
            token = Token(
                TokenKind.PAGE_LINK, text[index:end], text[index + 2 : end - 2]
            )
    elif text[index] == "#":
        token = _scan_hash(text, index)
    return token


def tokenize(text: str) -> list[Token]:
    """Split ``text`` into tokens; concatenating ``raw`` values restores it."""
    tokens: list[Token] = []
    buffer: list[str] = []

    def _flush() -> None:
        if buffer:
            chunk = "".join(buffer)
            tokens.append(Token(TokenKind.TEXT, chunk, chunk))
            buffer.clear()

    index = 0
    attribute = ATTRIBUTE_PATTERN.match(text)
    if attribute and attribute.group(1).strip():
        tokens.append(
            Token(TokenKind.ATTRIBUTE, attribute.group(0), attribute.group(1).strip())
        )
        index = attribute.end()

    while index < len(text):
        token = _scan_special(text, index)
        if token is None:
            buffer.append(text[index])
            index += 1
            continue
        _flush()
        tokens.append(token)
        index += len(token.raw)
    _flush()
    return tokens


def referenced_titles(text: str) -> set[str]:
    """Return the page names referenced by links, tags and attribute keys."""
    return {
        token.value
        for token in tokenize(text)
        if token.kind in {TokenKind.PAGE_LINK, TokenKind.TAG, TokenKind.ATTRIBUTE}
    }


def plain_text(text: str) -> str:
    """Replace reference markup with the bare page names it points at."""
    parts: list[str] = []
    for token in tokenize(text):
        match token.kind:
            case TokenKind.PAGE_LINK | TokenKind.TAG:
                parts.append(token.value)
            case TokenKind.ATTRIBUTE:
                parts.append(f"{token.value}:")
            case _:
                parts.append(token.raw)
    return "".join(parts)


def split_class_tags(text: str) -> tuple[str, list[str]]:
    """Remove ``#.class`` tags from ``text`` and return them separately."""
    classes: list[str] = []
    parts: list[str] = []
    for token in tokenize(text):
        if token.kind is TokenKind.CLASS:
            classes.append(token.value)
        else:
            parts.append(token.raw)
    return "".join(parts), classes


def extract_tag(tag: str) -> str:
    """Strip ``#[[...]]``, ``[[...]]`` or ``#`` markup from a tag reference."""
    if tag.startswith("#[[") and tag.endswith("]]"):
        return tag[3:-2]
    if tag.startswith("[[") and tag.endswith("]]"):
        return tag[2:-2]
    if tag.startswith("#"):
        return tag[1:]
    return tag


__all__ = [
    "ATTRIBUTE_PATTERN",
    "BLOCK_REF_PATTERN",
    "Token",
    "TokenKind",
    "extract_tag",
    "plain_text",
    "referenced_titles",
    "split_class_tags",
    "tokenize",
]
