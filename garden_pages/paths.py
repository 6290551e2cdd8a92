"""Map page names to output file names and link targets.

The mapping is a pure function of the page name and the configured index
page, so links generated while rendering always agree with the file that is
eventually written.

Example
-------
>>> from garden_pages.paths import page_name_to_path, output_filename
>>> page_name_to_path("Project Alpha: Notes", "Website Index")
'Project_Alpha_Notes.html'
>>> output_filename("Website Index", "Website Index")
'index.html'
"""

from __future__ import annotations

import logging
import re
import typing as typ
from urllib.parse import quote, unquote

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)

ROOT_PATH = "/"
INDEX_FILENAME = "index.html"
HTML_SUFFIX = ".html"
UNSAFE_CHARACTERS = re.compile(r"[\",?#:$;/@&=+']")


def _clean_name(name: str) -> str:
    return UNSAFE_CHARACTERS.sub("", name.replace(" ", "_"))


def page_name_to_path(name: str, index: str) -> str:
    """Return the site-relative path for ``name``; the index maps to ``/``."""
    if name == index:
        return ROOT_PATH
    return f"{quote(_clean_name(name), safe='!~*()')}{HTML_SUFFIX}"


def output_filename(name: str, index: str) -> str:
    """Return the file name written for ``name`` inside the output directory."""
    path = page_name_to_path(name, index)
    return INDEX_FILENAME if path == ROOT_PATH else path


class PathNamer:
    """Resolve hrefs for published pages and map file names back to pages."""

    def __init__(self, index: str, published: cabc.Iterable[str]) -> None:
        self.index = index
        self.published = frozenset(published)
        self._by_filename: dict[str, str] = {}
        for name in sorted(self.published):
            filename = output_filename(name, index)
            existing = self._by_filename.setdefault(filename, name)
            if existing != name:
                logger.warning(
                    "Pages '%s' and '%s' both map to %s; keeping '%s'",
                    existing,
                    name,
                    filename,
                    existing,
                )

    def path(self, name: str) -> str:
        """Return the path for ``name`` regardless of publication."""
        return page_name_to_path(name, self.index)

    def href(self, name: str) -> str:
        """Return the link target for a published page, or ``""``."""
        if name not in self.published:
            return ""
        return self.path(name)

    def filename(self, name: str) -> str:
        """Return the output file name for ``name``."""
        return output_filename(name, self.index)

    def lookup(self, filename: str) -> str | None:
        """Return the published page written to ``filename``, if any.

        Percent-escaped and unescaped spellings of the same file name are
        both accepted.
        """
        if filename in {ROOT_PATH, INDEX_FILENAME, ""}:
            return self.index if self.index in self.published else None
        direct = self._by_filename.get(filename)
        if direct is not None:
            return direct
        stem = unquote(filename.removesuffix(HTML_SUFFIX))
        return self._by_filename.get(
            f"{quote(stem, safe='!~*()')}{HTML_SUFFIX}"
        )


__all__ = [
    "INDEX_FILENAME",
    "ROOT_PATH",
    "PathNamer",
    "output_filename",
    "page_name_to_path",
]
