"""Utility helpers shared by the configuration resolver."""

from __future__ import annotations

import logging
import typing as typ

from garden_pages._constants import HTML_FENCE_PATTERN
from garden_pages.markup import extract_tag

from .models import FilterRule, StartsWith, TaggedWith

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from garden_pages.outline import Block

logger = logging.getLogger(__name__)


def _find_config_node(blocks: cabc.Sequence[Block], key: str) -> Block | None:
    """Return the first top-level block whose text equals ``key``, ignoring case."""
    wanted = key.upper()
    for block in blocks:
        if block.text.strip().upper() == wanted:
            return block
    return None


def _extract_html(node: Block | None) -> str | None:
    """Return the first fenced HTML snippet among ``node``'s descendants."""
    if node is None:
        return None
    for child in node.children:
        for block in child.walk():
            match = HTML_FENCE_PATTERN.search(block.text)
            if match:
                return match.group(1)
    return None


def _build_filter_rule(rule: str, values: cabc.Sequence[str]) -> FilterRule | None:
    """Compile a ``(rule, values)`` pair into a filter rule, if recognised."""
    match rule.strip().upper(), list(values):
        case "STARTS WITH", [first, *_]:
            return StartsWith(extract_tag(first.strip()))
        case "TAGGED WITH", [first, *_]:
            return TaggedWith(extract_tag(first.strip()))
        case _:
            logger.debug("Ignoring unrecognised filter rule %r", rule)
            return None


def _build_filters(
    entries: cabc.Iterable[tuple[str, cabc.Sequence[str]]],
) -> tuple[FilterRule, ...]:
    rules = (_build_filter_rule(rule, values) for rule, values in entries)
    return tuple(rule for rule in rules if rule is not None)


def _string_list(value: object) -> list[str] | None:
    """Return ``value`` as a list of strings, or ``None`` when malformed."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list | tuple):
        return [str(item) for item in value if item is not None]
    return None


def _plugin_mapping(value: object) -> dict[str, dict[str, list[str]]] | None:
    """Normalize a plugins mapping, dropping malformed entries."""
    if not isinstance(value, dict):
        return None
    plugins: dict[str, dict[str, list[str]]] = {}
    for name, options in value.items():
        match options:
            case dict():
                normalized = {
                    str(key).strip(): values
                    for key, raw in options.items()
                    if (values := _string_list(raw)) is not None
                }
            case None:
                normalized = {}
            case _:
                logger.debug("Ignoring malformed options for plugin %r", name)
                continue
        plugins[str(name).strip().lower()] = normalized
    return plugins


def _theme_mapping(value: object) -> dict[str, dict[str, str]] | None:
    """Normalize a theme mapping, dropping malformed entries."""
    if not isinstance(value, dict):
        return None
    theme: dict[str, dict[str, str]] = {}
    for section, settings in value.items():
        if not isinstance(settings, dict):
            logger.debug("Ignoring malformed theme section %r", section)
            continue
        theme[str(section).strip().lower()] = {
            str(key).strip().lower(): str(setting).strip()
            for key, setting in settings.items()
            if setting is not None and str(setting).strip()
        }
    return theme


__all__ = [
    "_build_filter_rule",
    "_build_filters",
    "_extract_html",
    "_find_config_node",
    "_plugin_mapping",
    "_string_list",
    "_theme_mapping",
]
