"""Resolve the site configuration from defaults, the outline, and overrides."""

from __future__ import annotations

import logging
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from garden_pages.markup import extract_tag

from .helpers import (
    _build_filter_rule,
    _build_filters,
    _extract_html,
    _find_config_node,
    _plugin_mapping,
    _theme_mapping,
)
from .models import SiteConfig, SiteConfigError, StartsWith, TaggedWith

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from garden_pages.outline import Block

logger = logging.getLogger(__name__)

OVERRIDE_KEYS: dict[str, str] = {
    "index": "index",
    "filter": "filters",
    "filters": "filters",
    "template": "template",
    "reference template": "reference_template",
    "reference_template": "reference_template",
    "referencetemplate": "reference_template",
    "plugins": "plugins",
    "theme": "theme",
}


def config_from_blocks(blocks: cabc.Sequence[Block]) -> dict[str, typ.Any]:
    """Read configuration keys out of the configuration page's block tree.

    Parameters
    ----------
    blocks : Sequence[Block]
        Top-level blocks of the configuration page.

    Returns
    -------
    dict[str, Any]
        Only the keys that were present and non-empty, named after
        :class:`SiteConfig` fields. Unrecognised or malformed blocks are
        skipped.
    """
    found: dict[str, typ.Any] = {}

    index_node = _find_config_node(blocks, "index")
    if index_node and index_node.children:
        index = extract_tag(index_node.children[0].text.strip())
        if index:
            found["index"] = index

    filter_node = _find_config_node(blocks, "filter")
    if filter_node and filter_node.children:
        found["filters"] = _build_filters(
            (child.text, [value.text for value in child.children])
            for child in filter_node.children
        )

    template = _extract_html(_find_config_node(blocks, "template"))
    if template:
        found["template"] = template
    reference_template = _extract_html(_find_config_node(blocks, "reference template"))
    if reference_template:
        found["reference_template"] = reference_template

    plugins_node = _find_config_node(blocks, "plugins")
    if plugins_node and plugins_node.children:
        found["plugins"] = {
            plugin.text.strip().lower(): {
                option.text.strip(): [value.text for value in option.children]
                for option in plugin.children
            }
            for plugin in plugins_node.children
        }

    theme_node = _find_config_node(blocks, "theme")
    if theme_node and theme_node.children:
        found["theme"] = {
            section.text.strip().lower(): {
                setting.text.strip().lower(): setting.children[0].text.strip()
                for setting in section.children
                if setting.children and setting.children[0].text.strip()
            }
            for section in theme_node.children
        }
    return found


def _normalize_filters(value: object) -> tuple[StartsWith | TaggedWith, ...] | None:
    if not isinstance(value, list | tuple):
        return None
    rules: list[StartsWith | TaggedWith] = []
    for entry in value:
        match entry:
            case StartsWith() | TaggedWith():
                rules.append(entry)
            case {"rule": str() as rule, "values": list() as values}:
                compiled = _build_filter_rule(rule, [str(v) for v in values])
                if compiled is not None:
                    rules.append(compiled)
            case _:
                logger.warning("Ignoring malformed filter override %r", entry)
    return tuple(rules)


def _normalize_overrides(overrides: cabc.Mapping[str, typ.Any]) -> dict[str, typ.Any]:
    """Translate caller overrides into :class:`SiteConfig` keyword arguments."""
    normalized: dict[str, typ.Any] = {}
    for raw_key, value in overrides.items():
        field = OVERRIDE_KEYS.get(str(raw_key).strip().lower())
        if field is None:
            logger.warning("Ignoring unknown configuration override %r", raw_key)
            continue
        match field:
            case "filters":
                converted = _normalize_filters(value)
            case "plugins":
                converted = _plugin_mapping(value)
            case "theme":
                converted = _theme_mapping(value)
            case _:
                converted = value if isinstance(value, str) and value else None
        if converted is None:
            logger.warning("Ignoring malformed configuration override %r", raw_key)
            continue
        normalized[field] = converted
    return normalized


def load_overrides(path: Path) -> dict[str, typ.Any]:
    """Load caller overrides from a YAML file.

    Raises
    ------
    SiteConfigError
        If the file is missing, unparsable, or not a mapping.
    """
    if not path.exists():
        msg = f"Override file '{path}' not found."
        raise SiteConfigError(msg)
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = loader.load(handle) or {}
    except YAMLError as exc:
        msg = f"Override file '{path}' is not valid YAML: {exc}"
        raise SiteConfigError(msg) from exc
    if not isinstance(loaded, dict):
        msg = f"Override file '{path}' must contain a mapping."
        raise SiteConfigError(msg)
    return dict(loaded)


def resolve_site_config(
    config_blocks: cabc.Sequence[Block] | None = None,
    overrides: cabc.Mapping[str, typ.Any] | None = None,
) -> SiteConfig:
    """Merge defaults, outline configuration, and caller overrides.

    Parameters
    ----------
    config_blocks : Sequence[Block], optional
        Top-level blocks of the configuration page, when one exists.
    overrides : Mapping[str, Any], optional
        Caller-supplied values; these win over both other sources.

    Returns
    -------
    SiteConfig
        Configuration with every field populated.

    Examples
    --------
    >>> resolve_site_config().index
    'Website Index'
    >>> resolve_site_config(overrides={"index": "Home"}).index
    'Home'
    """
    values: dict[str, typ.Any] = {}
    if config_blocks:
        values.update(config_from_blocks(config_blocks))
    if overrides:
        values.update(_normalize_overrides(overrides))
    config = SiteConfig(**values)
    logger.debug(
        "Resolved configuration: index=%r, %d filter rule(s), plugins=%s",
        config.index,
        len(config.filters),
        sorted(config.plugins),
    )
    return config


__all__ = ["config_from_blocks", "load_overrides", "resolve_site_config"]
