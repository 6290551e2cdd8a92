"""Group date-named inbound references into a month-by-month log widget.

A page that contains ``{{static site: daily log}}`` gets a collapsible digest
of every block on a daily page (``January 3rd, 2021``) that references it,
newest first and bucketed by month and year.

Example
-------
>>> from garden_pages.generator.digest import parse_daily_title
>>> parse_daily_title("January 3rd, 2021")
datetime.date(2021, 1, 3)
>>> parse_daily_title("Project Alpha") is None
True
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import logging
import re
import typing as typ

from .components import inert_components
from .link_rewriter import prepare_content
from .renderer import DEFAULT_PYGMENTS_STYLE, OutlineRenderer

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from garden_pages.outline import Block, InboundReference, Page

    from .components import Directive, RenderContext

logger = logging.getLogger(__name__)

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
DAILY_TITLE_PATTERN = re.compile(
    rf"({'|'.join(MONTH_NAMES)}) ([0-3]?[0-9])(?:st|nd|rd|th), ([0-9]{{4}})"
)


def parse_daily_title(title: str) -> dt.date | None:
    """Return the date named by a daily page title, or ``None``."""
    match = DAILY_TITLE_PATTERN.search(title)
    if match is None:
        return None
    month_name, day, year = match.groups()
    try:
        return dt.date(int(year), MONTH_NAMES.index(month_name) + 1, int(day))
    except ValueError:
        logger.debug("Ignoring impossible date in page title %r", title)
        return None


@dc.dataclass(slots=True)
class DigestBucket:
    """Referencing blocks from one calendar month, newest first."""

    month: int
    year: int
    blocks: list[Block] = dc.field(default_factory=list)
    html: str = ""

    @property
    def label(self) -> str:
        """Return the ``Month YYYY`` heading for the bucket."""
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"


def dated_references(
    references: cabc.Iterable[InboundReference],
) -> list[tuple[dt.date, InboundReference]]:
    """Keep references from daily pages, sorted newest first."""
    dated: list[tuple[dt.date, InboundReference]] = []
    for reference in references:
        date = parse_daily_title(reference.source_page_title)
        if date is not None:
            dated.append((date, reference))
    dated.sort(key=lambda item: item[0], reverse=True)
    return dated


def group_by_month(
    entries: cabc.Iterable[tuple[dt.date, Block]],
) -> list[DigestBucket]:
    """Fold date-sorted blocks into consecutive month buckets."""
    buckets: list[DigestBucket] = []
    for date, block in entries:
        current = buckets[-1] if buckets else None
        if current is None or (current.month, current.year) != (date.month, date.year):
            current = DigestBucket(month=date.month, year=date.year)
            buckets.append(current)
        current.blocks.append(block)
    return buckets


class DigestAggregator:
    """Component expander that renders the daily log widget for one page."""

    def __init__(
        self,
        page: Page,
        context: RenderContext,
        *,
        pygments_style: str = DEFAULT_PYGMENTS_STYLE,
    ) -> None:
        self.page = page
        self.context = context.with_components(inert_components)
        self.pygments_style = pygments_style

    def __call__(self, directive: Directive) -> str | None:
        """Render the widget for ``{{static site: daily log}}``; ignore others."""
        if directive.name != "static site" or not directive.argument_mentions(
            "daily log"
        ):
            return None
        return self.render()

    def buckets(self) -> list[DigestBucket]:
        """Return the page's dated references grouped by month."""
        entries: list[tuple[dt.date, Block]] = []
        for date, reference in dated_references(self.page.references):
            block = dc.replace(
                reference.block,
                text=reference.block.text.replace(
                    self.page.name, reference.source_page_title
                ),
            )
            prepared = prepare_content(
                (block,), self.context.published, self.context.href
            )
            if prepared:
                entries.append((date, prepared[0]))
        return group_by_month(entries)

    def render(self) -> str:
        """Return the widget markup, or ``""`` when nothing qualifies."""
        buckets = self.buckets()
        if not buckets:
            logger.debug("No daily references for '%s'", self.page.name)
            return ""
        renderer = OutlineRenderer(self.context, pygments_style=self.pygments_style)
        for bucket in buckets:
            bucket.html = renderer.render(bucket.blocks, self.page.list_mode)
        return self.context.widgets.render(
            "daily_log.jinja",
            widget_id=f"{self.page.name}-daily-log",
            buckets=buckets,
        )


__all__ = [
    "DAILY_TITLE_PATTERN",
    "DigestAggregator",
    "DigestBucket",
    "dated_references",
    "group_by_month",
    "parse_daily_title",
]
