"""High-level orchestration for publishing an outline as a static site.

:class:`SiteGenerator` resolves the configuration once, selects the published
pages, builds the shared block index, and then renders every page through the
content preparer, the outline renderer, and the template compositor before
writing ``<output_dir>/<file name>``. Pages are always written in
lexicographic order; with ``workers > 1`` the rendering step runs on a thread
pool.

Example
-------
>>> from pathlib import Path
>>> from garden_pages.generator import SiteGenerator
>>> from garden_pages.source import JsonExportSource
>>> source = JsonExportSource.from_path(Path("export.json"))  # doctest: +SKIP
>>> SiteGenerator(source, output_dir=Path("out")).run()  # doctest: +SKIP
[PosixPath('out/index.html'), ...]
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from concurrent.futures import ThreadPoolExecutor

from garden_pages._constants import (
    CONFIG_PAGE_NAMES,
    DESCRIPTION_PATTERN,
    HEAD_PATTERN,
    HTML_FENCE_PATTERN,
    TITLE_PATTERN,
)
from garden_pages.config import resolve_site_config
from garden_pages.outline import BlockLookup, Page, iter_blocks
from garden_pages.paths import PathNamer
from garden_pages.selector import PageSelector
from garden_pages.source import DataSourceError

from .compositor import TemplateCompositor
from .components import RenderContext, WidgetRenderer, inert_components
from .digest import DigestAggregator
from .link_rewriter import drop_ignored, prepare_content
from .renderer import DEFAULT_PYGMENTS_STYLE, OutlineRenderer

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from garden_pages.config import SiteConfig
    from garden_pages.outline import Block
    from garden_pages.source import DataSource

logger = logging.getLogger(__name__)

INLINE_REFERENCES_PLUGIN = "inline-block-references"


@dc.dataclass(frozen=True, slots=True)
class PageMetadata:
    """Per-page values that feed the document head."""

    title: str
    description: str = ""
    head: str = ""


def extract_page_metadata(name: str, blocks: cabc.Sequence[Block]) -> PageMetadata:
    """Read title, description, and head overrides from a page's blocks.

    The first block carrying each override wins. A head override only counts
    when its first child holds an HTML fence.

    Examples
    --------
    >>> from garden_pages.outline import Block
    >>> blocks = (Block(text="roam/js/static-site/title:: Welcome", uid="a"),)
    >>> extract_page_metadata("Home", blocks).title
    'Welcome'
    """
    title = name
    description = ""
    head = ""
    all_blocks = list(iter_blocks(blocks))
    for block in all_blocks:
        match = TITLE_PATTERN.search(block.text)
        if match:
            title = match.group(1).strip()
            break
    for block in all_blocks:
        match = DESCRIPTION_PATTERN.search(block.text)
        if match:
            description = match.group(1).strip()
            break
    for block in all_blocks:
        if HEAD_PATTERN.search(block.text):
            fence = (
                HTML_FENCE_PATTERN.search(block.children[0].text)
                if block.children
                else None
            )
            head = fence.group(1) if fence else ""
            break
    return PageMetadata(title=title, description=description, head=head)


class SiteGenerator:
    """Render every published page of an outline into ``output_dir``."""

    def __init__(
        self,
        source: DataSource,
        *,
        output_dir: Path,
        overrides: cabc.Mapping[str, typ.Any] | None = None,
        workers: int = 1,
        pygments_style: str = DEFAULT_PYGMENTS_STYLE,
        widgets: WidgetRenderer | None = None,
    ) -> None:
        """Initialize the generator.

        Parameters
        ----------
        source : DataSource
            Outline snapshot to publish.
        output_dir : Path
            Directory receiving the generated HTML files.
        overrides : Mapping[str, Any], optional
            Configuration values that win over the outline's configuration page.
        workers : int, optional
            Number of threads used for rendering; ``1`` renders inline.
        pygments_style : str, optional
            Pygments style for fenced code blocks.
        widgets : WidgetRenderer, optional
            Widget template renderer; defaults to the packaged templates.
        """
        self.source = source
        self.output_dir = output_dir
        self.overrides = dict(overrides or {})
        self.workers = max(1, workers)
        self.pygments_style = pygments_style
        self.widgets = widgets or WidgetRenderer()
        self._trees: dict[str, tuple[Block, ...]] = {}

    def run(self) -> list[Path]:
        """Publish the site and return the written paths in page order.

        Raises
        ------
        DataSourceError
            If a published page's data cannot be retrieved. Nothing further
            is written once this happens.
        """
        page_names = self.source.list_page_names()
        config = self.resolve_config(page_names)
        selector = PageSelector(config)
        published = selector.select(page_names, self._block_tree)
        pages = [self._load_page(name) for name in published]
        namer = PathNamer(config.index, published)
        context = self._build_context(config, namer, pages)
        compositor = TemplateCompositor(
            config, namer, self.widgets, pygments_style=self.pygments_style
        )

        def render(page: Page) -> str:
            return self.render_page(page, context, compositor)

        if self.workers > 1 and len(pages) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                documents = list(pool.map(render, pages))
        else:
            documents = [render(page) for page in pages]

        self.output_dir.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        for page, html in zip(pages, documents, strict=True):
            output_path = self.output_dir / namer.filename(page.name)
            output_path.write_text(html, encoding="utf-8")
            logger.debug("Wrote '%s' to %s", page.name, output_path)
            written.append(output_path)
        logger.info("Rendered %d pages into %s", len(written), self.output_dir)
        return written

    def resolve_config(self, page_names: cabc.Collection[str]) -> SiteConfig:
        """Resolve the configuration from the first reserved page present."""
        config_page = next(
            (name for name in CONFIG_PAGE_NAMES if name in page_names), None
        )
        if config_page is None:
            logger.info("No configuration page found; using defaults")
            return resolve_site_config(overrides=self.overrides)
        logger.debug("Reading configuration from '%s'", config_page)
        return resolve_site_config(self._block_tree(config_page), self.overrides)

    def render_page(
        self, page: Page, context: RenderContext, compositor: TemplateCompositor
    ) -> str:
        """Return the complete HTML document for one page."""
        metadata = extract_page_metadata(page.name, page.blocks)
        prepared = prepare_content(page.blocks, context.published, context.href)
        digest = DigestAggregator(page, context, pygments_style=self.pygments_style)
        renderer = OutlineRenderer(
            context.with_components(digest), pygments_style=self.pygments_style
        )
        content = renderer.render(prepared, page.list_mode)
        return compositor.compose(
            title=metadata.title,
            description=metadata.description,
            content=content,
            head=metadata.head,
            references=(ref.source_page_title for ref in page.references),
        )

    def _block_tree(self, name: str) -> tuple[Block, ...]:
        if name not in self._trees:
            self._trees[name] = self.source.get_block_tree(name)
        return self._trees[name]

    def _load_page(self, name: str) -> Page:
        try:
            return Page(
                name=name,
                blocks=self._block_tree(name),
                references=self.source.get_inbound_references(name),
                list_mode=self.source.get_list_mode(name),
            )
        except DataSourceError:
            logger.exception("Failed to load page '%s'", name)
            raise

    def _build_context(
        self, config: SiteConfig, namer: PathNamer, pages: cabc.Sequence[Page]
    ) -> RenderContext:
        blocks: dict[str, BlockLookup] = {}
        for page in pages:
            for block in iter_blocks(drop_ignored(page.blocks)):
                blocks[block.uid] = BlockLookup(text=block.text, page=page.name)
        inline_references = config.has_plugin(INLINE_REFERENCES_PLUGIN)
        block_references = (
            self.source.get_block_references() if inline_references else {}
        )
        return RenderContext(
            published=namer.published,
            href=namer.href,
            components=inert_components,
            blocks=blocks,
            widgets=self.widgets,
            block_references=block_references,
            inline_references=inline_references,
        )


__all__ = ["PageMetadata", "SiteGenerator", "extract_page_metadata"]
