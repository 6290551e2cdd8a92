"""Reserved names and markers shared across garden_pages.

The outline reserves a couple of page names for site configuration. Blocks can
reference ``<config page>/ignore`` to hide themselves from the published site,
and attribute blocks under ``<config page>/title``, ``/description`` and
``/head`` override per-page metadata.

Examples
--------
>>> from garden_pages import _constants
>>> _constants.IGNORE_MARKERS[0]
'roam/js/static-site/ignore'
>>> "roam/js/public-garden" in _constants.CONFIG_PAGE_NAMES
True
"""

from __future__ import annotations

import re

CONFIG_PAGE_NAMES: tuple[str, ...] = ("roam/js/static-site", "roam/js/public-garden")
IGNORE_MARKERS: tuple[str, ...] = tuple(f"{name}/ignore" for name in CONFIG_PAGE_NAMES)
DEFAULT_INDEX = "Website Index"

HTML_FENCE_PATTERN = re.compile(r"```html\n(.*)```", re.DOTALL)


def _config_attribute(key: str) -> str:
    names = "|".join(re.escape(name) for name in CONFIG_PAGE_NAMES)
    return rf"(?:{names})/{key}::"


TITLE_PATTERN = re.compile(_config_attribute("title") + r"(.*)")
DESCRIPTION_PATTERN = re.compile(_config_attribute("description") + r"(.*)")
HEAD_PATTERN = re.compile(_config_attribute("head"))
