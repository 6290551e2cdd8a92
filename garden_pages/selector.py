"""Decide which outline pages are published.

Title rules (:class:`~garden_pages.config.StartsWith`) and content rules
(:class:`~garden_pages.config.TaggedWith`) are evaluated independently: a
category with no rules places no constraint, otherwise at least one rule in
that category has to match. The index page is always published and the
reserved configuration pages never are.
"""

from __future__ import annotations

import logging
import typing as typ

from garden_pages._constants import CONFIG_PAGE_NAMES

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from garden_pages.config import SiteConfig
    from garden_pages.outline import Block

logger = logging.getLogger(__name__)


class PageSelector:
    """Apply the configured filter rules to page names and block trees."""

    def __init__(self, config: SiteConfig) -> None:
        self.index = config.index
        self.title_rules = config.title_rules
        self.content_rules = config.content_rules

    def title_matches(self, name: str) -> bool:
        """Return ``True`` if no title rules exist or one of them matches."""
        return not self.title_rules or any(
            rule.matches(name) for rule in self.title_rules
        )

    def content_matches(self, blocks: cabc.Sequence[Block]) -> bool:
        """Return ``True`` if no content rules exist or one of them matches."""
        return not self.content_rules or any(
            rule.matches(blocks) for rule in self.content_rules
        )

    def is_published(self, name: str, blocks: cabc.Sequence[Block]) -> bool:
        """Return whether ``name`` is published given its block tree."""
        if name in CONFIG_PAGE_NAMES:
            return False
        if name == self.index:
            return True
        return self.title_matches(name) and self.content_matches(blocks)

    def select(
        self,
        page_names: cabc.Iterable[str],
        load_blocks: cabc.Callable[[str], cabc.Sequence[Block]],
    ) -> list[str]:
        """Return the published page names in lexicographic order.

        Parameters
        ----------
        page_names : Iterable[str]
            Every page name known to the data source.
        load_blocks : Callable[[str], Sequence[Block]]
            Returns a page's block tree; only called for pages that pass the
            title rules while content rules exist.
        """
        names = sorted(set(page_names))
        selected: list[str] = []
        for name in names:
            if name in CONFIG_PAGE_NAMES:
                continue
            if name == self.index:
                selected.append(name)
                continue
            if not self.title_matches(name):
                continue
            if self.content_rules and not self.content_matches(load_blocks(name)):
                continue
            selected.append(name)
        logger.info("Selected %d of %d pages", len(selected), len(names))
        return selected


__all__ = ["PageSelector"]
