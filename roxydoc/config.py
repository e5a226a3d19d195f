from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ConfigError
from .scanner import DEFAULT_MARKER

# Tags roxygen understands without a value.
TAGS_NOPARAM: tuple[str, ...] = ("export", "noRd")

TAGS_PARAM: tuple[str, ...] = (
    "aliases", "author", "concept", "describeIn", "description", "details",
    "docType", "encoding", "evalRd", "example", "examples", "exportClass",
    "exportMethod", "exportPattern", "family", "field", "format", "import",
    "importClassesFrom", "importFrom", "importMethodsFrom", "include",
    "inherit", "inheritParams", "inheritSection", "keywords", "md", "method",
    "name", "note", "param", "rawRd", "rdname", "references", "return",
    "S3method", "section", "seealso", "slot", "source", "template",
    "templateVar", "title", "usage", "useDynLib",
)

DEFAULT_TEMPLATE: tuple[tuple[str, str], ...] = (
    ("description", ".. content for \\description{} (no empty lines) .."),
    ("details", ".. content for \\details{} .."),
    ("title", ""),
    ("param", ""),
    ("return", ""),
    ("author", ""),
    ("export", ""),
)

DEFAULT_TAGS: tuple[str, ...] = tuple(sorted(TAGS_PARAM + TAGS_NOPARAM, key=str.lower))


@dataclass(frozen=True)
class RoxyConfig:
    """Settings shared by the entry editing functions and the tools."""

    marker: str = DEFAULT_MARKER
    author: str = ""
    template: tuple[tuple[str, str], ...] = DEFAULT_TEMPLATE
    tags: tuple[str, ...] = DEFAULT_TAGS
    fill_column: int = 72
    fill_param: bool = True

    def __post_init__(self) -> None:
        if self.fill_column < 1:
            raise ConfigError(f"fill_column must be at least 1, got {self.fill_column}")

    def override(self, **changes: Any) -> "RoxyConfig":
        """Return a copy with the non-``None`` values in ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _parse_template(value: Any, path: Path) -> tuple[tuple[str, str], ...]:
    # Accept either a list of {tag: default} mappings or a single mapping.
    items: list[tuple[str, str]] = []
    if isinstance(value, dict):
        value = [{k: v} for k, v in value.items()]
    if not isinstance(value, list):
        raise ConfigError(f"{path}: 'template' must be a list of tag: default pairs")
    for item in value:
        if isinstance(item, str):
            items.append((item, ""))
        elif isinstance(item, dict) and len(item) == 1:
            (tag, default), = item.items()
            items.append((str(tag), "" if default is None else str(default)))
        else:
            raise ConfigError(f"{path}: bad template item {item!r}")
    return tuple(items)


def load_config(path: Optional[Path]) -> RoxyConfig:
    """Load a YAML config file; ``None`` gives the defaults.

    Unknown keys are ignored so one file can serve several tools.
    """
    config = RoxyConfig()
    if path is None:
        return config

    if not path.exists() or not path.is_file():
        raise ConfigError(f"config file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: invalid YAML: {e}") from e

    if data is None:
        return config
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    changes: dict[str, Any] = {}
    if "marker" in data:
        marker = str(data["marker"] or "").strip()
        if not marker:
            raise ConfigError(f"{path}: 'marker' must not be empty")
        changes["marker"] = marker
    if "author" in data:
        changes["author"] = str(data["author"] or "")
    if "template" in data:
        changes["template"] = _parse_template(data["template"], path)
    if "tags" in data:
        tags = data["tags"] or []
        if not isinstance(tags, list):
            raise ConfigError(f"{path}: 'tags' must be a list")
        changes["tags"] = tuple(str(t) for t in tags)
    if "fill_column" in data:
        try:
            changes["fill_column"] = int(data["fill_column"])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{path}: 'fill_column' must be an integer") from e
        if changes["fill_column"] < 1:
            raise ConfigError(f"{path}: 'fill_column' must be at least 1")
    if "fill_param" in data:
        changes["fill_param"] = bool(data["fill_param"])

    return replace(config, **changes)
