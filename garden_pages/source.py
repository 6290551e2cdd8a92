"""Data sources that supply page trees and inbound references.

The pipeline only talks to the outline through the :class:`DataSource`
protocol. :class:`JsonExportSource` implements it over a JSON export of the
outline, a list of pages shaped like::

    [{"title": "Page", "view-type": "document",
      "children": [{"string": "text", "uid": "abc123", "heading": 1,
                    "children": [...]}]}]

Inbound references are derived from the link, tag and attribute markup in
every block; block embeds (``((uid))``) are indexed separately.
"""

from __future__ import annotations

import json
import logging
import typing as typ

from garden_pages.markup import BLOCK_REF_PATTERN, referenced_titles
from garden_pages.outline import (
    Block,
    BlockReference,
    InboundReference,
    ListMode,
    inherit_list_mode,
    iter_blocks,
)

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class DataSourceError(RuntimeError):
    """Raised when a page cannot be retrieved from the data source."""


class DataSource(typ.Protocol):
    """Read-only access to an outline snapshot."""

    def list_page_names(self) -> set[str]:
        """Return every page name in the outline."""
        ...

    def get_block_tree(self, page_name: str) -> tuple[Block, ...]:
        """Return the page's top-level blocks with list modes resolved."""
        ...

    def get_inbound_references(self, page_name: str) -> tuple[InboundReference, ...]:
        """Return the blocks on other pages that reference ``page_name``."""
        ...

    def get_list_mode(self, page_name: str) -> ListMode:
        """Return the list mode of the page root."""
        ...

    def get_block_references(self) -> dict[str, tuple[BlockReference, ...]]:
        """Return, per block uid, the blocks that embed it."""
        ...


class JsonExportSource:
    """Serve pages out of an outline JSON export held in memory."""

    def __init__(self, pages: list[dict[str, typ.Any]]) -> None:
        self._raw: dict[str, dict[str, typ.Any]] = {}
        for entry in pages:
            title = entry.get("title") if isinstance(entry, dict) else None
            if not isinstance(title, str) or not title:
                logger.warning("Skipping export entry without a title")
                continue
            self._raw[title] = entry
        self._trees: dict[str, tuple[Block, ...]] = {}
        self._references: dict[str, list[InboundReference]] | None = None
        self._block_references: dict[str, tuple[BlockReference, ...]] | None = None

    @classmethod
    def from_path(cls, path: Path) -> JsonExportSource:
        """Load an export file from disk.

        Raises
        ------
        DataSourceError
            If the file is missing, not valid JSON, or not a list of pages.
        """
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            msg = f"Unable to read outline export '{path}': {exc}"
            raise DataSourceError(msg) from exc
        except json.JSONDecodeError as exc:
            msg = f"Outline export '{path}' is not valid JSON: {exc}"
            raise DataSourceError(msg) from exc
        if not isinstance(payload, list):
            msg = f"Outline export '{path}' must contain a list of pages."
            raise DataSourceError(msg)
        return cls(payload)

    def list_page_names(self) -> set[str]:
        """Return every page title in the export."""
        return set(self._raw)

    def get_list_mode(self, page_name: str) -> ListMode:
        """Return the page-level list mode, defaulting to bulleted."""
        entry = self._entry(page_name)
        return ListMode.parse(entry.get("view-type")) or ListMode.BULLETED

    def get_block_tree(self, page_name: str) -> tuple[Block, ...]:
        """Return the page's blocks, with unset list modes inherited."""
        if page_name not in self._trees:
            entry = self._entry(page_name)
            blocks = _build_children(entry.get("children"), page_name)
            self._trees[page_name] = inherit_list_mode(
                blocks, self.get_list_mode(page_name)
            )
        return self._trees[page_name]

    def get_inbound_references(self, page_name: str) -> tuple[InboundReference, ...]:
        """Return referencing blocks from every page, ordered by source title."""
        self._entry(page_name)
        if self._references is None:
            self._index_references()
        references = self._references or {}
        return tuple(references.get(page_name, ()))

    def get_block_references(self) -> dict[str, tuple[BlockReference, ...]]:
        """Return the ``((uid))`` embed index for the whole export."""
        if self._block_references is None:
            self._index_references()
        return dict(self._block_references or {})

    def _entry(self, page_name: str) -> dict[str, typ.Any]:
        try:
            return self._raw[page_name]
        except KeyError as exc:
            msg = f"Page '{page_name}' is not present in the outline export."
            raise DataSourceError(msg) from exc

    def _index_references(self) -> None:
        """Scan every block once for page references and block embeds."""
        references: dict[str, list[InboundReference]] = {}
        embeds: dict[str, list[BlockReference]] = {}
        for title in sorted(self._raw):
            for block in iter_blocks(self.get_block_tree(title)):
                for target in sorted(referenced_titles(block.text)):
                    references.setdefault(target, []).append(
                        InboundReference(source_page_title=title, block=block)
                    )
                for uid in BLOCK_REF_PATTERN.findall(block.text):
                    embeds.setdefault(uid, []).append(
                        BlockReference(page=title, uid=block.uid)
                    )
        self._references = references
        self._block_references = {uid: tuple(refs) for uid, refs in embeds.items()}


def _build_children(raw: object, uid_prefix: str) -> tuple[Block, ...]:
    if not isinstance(raw, list):
        return ()
    blocks = [
        _build_block(entry, position, f"{uid_prefix}-{position}")
        for position, entry in enumerate(raw)
        if isinstance(entry, dict)
    ]
    return tuple(sorted(blocks, key=lambda block: block.order))


def _build_block(raw: dict[str, typ.Any], position: int, fallback_uid: str) -> Block:
    uid = raw.get("uid")
    if not isinstance(uid, str) or not uid:
        uid = fallback_uid
        logger.debug("Block without uid; using %s", uid)
    heading = raw.get("heading")
    order = raw.get("order")
    return Block(
        text=str(raw.get("string") or ""),
        uid=uid,
        order=order if isinstance(order, int) else position,
        heading=heading if isinstance(heading, int) and 0 <= heading <= 3 else 0,
        list_mode=ListMode.parse(raw.get("view-type")),
        children=_build_children(raw.get("children"), fallback_uid),
    )


__all__ = ["DataSource", "DataSourceError", "JsonExportSource"]
