"""Resolve the site configuration for a garden build.

The configuration lives inside the outline on a reserved page (see
:data:`garden_pages._constants.CONFIG_PAGE_NAMES`). Its top-level blocks name
settings (``index``, ``filter``, ``template``, ``reference template``,
``plugins``, ``theme``) and their children hold the values. The primary entry
point is :func:`resolve_site_config`, which layers built-in defaults, the
outline values, and caller overrides (for example loaded from YAML with
:func:`load_overrides`) into a read-only :class:`SiteConfig`.

Examples
--------
>>> from garden_pages.config import resolve_site_config
>>> config = resolve_site_config(overrides={"index": "Home"})
>>> config.index
'Home'
>>> config.filters
()
"""

from .loader import config_from_blocks, load_overrides, resolve_site_config
from .models import (
    DEFAULT_REFERENCE_TEMPLATE,
    DEFAULT_TEMPLATE,
    FilterRule,
    SiteConfig,
    SiteConfigError,
    StartsWith,
    TaggedWith,
)

__all__ = [
    "DEFAULT_REFERENCE_TEMPLATE",
    "DEFAULT_TEMPLATE",
    "FilterRule",
    "SiteConfig",
    "SiteConfigError",
    "StartsWith",
    "TaggedWith",
    "config_from_blocks",
    "load_overrides",
    "resolve_site_config",
]
