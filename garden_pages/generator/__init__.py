"""Utilities for preparing, rendering, composing, and writing garden pages."""

from .components import Directive, RenderContext, WidgetRenderer
from .compositor import TemplateCompositor
from .digest import DigestAggregator
from .link_rewriter import prepare_content
from .renderer import OutlineRenderer
from .site_generator import PageMetadata, SiteGenerator, extract_page_metadata

__all__ = [
    "DigestAggregator",
    "Directive",
    "OutlineRenderer",
    "PageMetadata",
    "RenderContext",
    "SiteGenerator",
    "TemplateCompositor",
    "WidgetRenderer",
    "extract_page_metadata",
    "prepare_content",
]
