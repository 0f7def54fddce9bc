"""Shared data structures used across the navigator core.

Value objects only: settings, the validated mount point declaration and the
per-request context derived from it. No I/O happens here, so everything can
be built directly in unit tests.
"""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Tuple

from lxml.html import HtmlElement

from .exceptions import MountPointConfigError

logger = logging.getLogger(__name__)

__all__ = [
    "NavigationSettings",
    "NavigationState",
    "MountPointConfig",
    "RequestContext",
]


def _non_negative_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        raise TypeError(f"expected an integer, got {value!r}")
    number = int(value)
    if number < 0:
        raise ValueError(f"expected a non-negative integer, got {number}")
    return number


def _optional_positive_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise TypeError(f"expected seconds, got {value!r}")
    seconds = float(value)
    if seconds <= 0:
        raise ValueError(f"expected a positive number of seconds, got {seconds}")
    return seconds


def _setting(data: Mapping[str, Any], key: str, convert: Callable[[Any], Any], default: Any) -> Any:
    if key not in data:
        return default
    try:
        return convert(data[key])
    except (TypeError, ValueError) as exc:
        logger.warning("Ignoring invalid navigation setting '%s': %s; using %r", key, exc, default)
        return default


@dataclass(frozen=True)
class NavigationSettings:
    """Tunables read from the ``navigation`` config section.

    Attributes
    ----------
    expand_label / collapse_label
        Toggle labels used when a mount point does not declare its own.
    placeholder_count
        Skeleton blocks inserted while a request is in flight.
    request_timeout
        Seconds before the transport gives up; ``None`` waits forever.
    max_concurrent_requests
        Bound on simultaneous requests across engines; ``0`` is unbounded.
    base_url
        Joined with relative mount point paths by the HTTP fetcher.
    """

    expand_label: str = "Expand"
    collapse_label: str = "Collapse"
    placeholder_count: int = 3
    request_timeout: Optional[float] = None
    max_concurrent_requests: int = 0
    base_url: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NavigationSettings":
        """Build settings from a config mapping.

        Values that cannot be converted are logged and replaced by the default,
        so a bad user override never stops the navigator from starting.
        """
        defaults = cls()
        return cls(
            expand_label=str(data.get("expand_label") or defaults.expand_label),
            collapse_label=str(data.get("collapse_label") or defaults.collapse_label),
            placeholder_count=_setting(data, "placeholder_count", _non_negative_int, defaults.placeholder_count),
            request_timeout=_setting(data, "request_timeout", _optional_positive_float, defaults.request_timeout),
            max_concurrent_requests=_setting(
                data, "max_concurrent_requests", _non_negative_int, defaults.max_concurrent_requests
            ),
            base_url=str(data.get("base_url") or ""),
        )

    @classmethod
    def load(cls) -> "NavigationSettings":
        """Build settings from the packaged YAML merged with user overrides."""
        from arclight_navigator.config import ConfigManager

        return cls.from_mapping(ConfigManager().get_navigation_config())


class NavigationState(enum.Enum):
    """Lifecycle of one engine instance."""

    CONSTRUCTED = "constructed"
    PLACEHOLDER_SHOWN = "placeholder-shown"
    REQUESTING = "requesting"
    RECONCILING_SIBLINGS = "reconciling-siblings"
    RECONCILING_ANCESTORS = "reconciling-ancestors"
    RENDERED = "rendered"


_REQUIRED_KEYS = ("eadid", "level", "name", "path", "originalDocument")


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class MountPointConfig:
    """Validated ``data-arclight`` declaration of one mount point."""

    eadid: str
    level: int
    name: str
    path: str
    original_document: str
    original_parents: Optional[Tuple[str, ...]] = None
    access: Optional[str] = None
    search_field: Optional[str] = None
    parent: Optional[str] = None
    expand_label: str = "Expand"
    collapse_label: str = "Collapse"

    @classmethod
    def from_mapping(cls, data: Any, *, expand_label: str = "Expand",
                     collapse_label: str = "Collapse",
                     mount_point: Optional[str] = None) -> "MountPointConfig":
        if not isinstance(data, dict):
            raise MountPointConfigError("data-arclight must be a JSON object", mount_point)

        for key in _REQUIRED_KEYS:
            if data.get(key) is None:
                raise MountPointConfigError(f"Missing required key '{key}'", mount_point, field=key)

        level = data["level"]
        if isinstance(level, bool):
            raise MountPointConfigError("level must be an integer", mount_point, field="level")
        try:
            level = int(level)
        except (TypeError, ValueError) as exc:
            raise MountPointConfigError(
                f"level must be an integer, got {data['level']!r}", mount_point, field="level", cause=exc
            ) from exc
        if level < 0:
            raise MountPointConfigError("level must not be negative", mount_point, field="level")

        parents = data.get("originalParents")
        if parents is not None:
            if not isinstance(parents, list):
                raise MountPointConfigError(
                    "originalParents must be an array", mount_point, field="originalParents"
                )
            parents = tuple("" if p is None else str(p) for p in parents)

        return cls(
            eadid=str(data["eadid"]),
            level=level,
            name=str(data["name"]),
            path=str(data["path"]),
            original_document=str(data["originalDocument"]),
            original_parents=parents,
            access=_optional_str(data.get("access")),
            search_field=_optional_str(data.get("search_field")),
            parent=_optional_str(data.get("parent")),
            expand_label=expand_label,
            collapse_label=collapse_label,
        )

    @classmethod
    def from_element(cls, element: HtmlElement,
                     settings: Optional[NavigationSettings] = None) -> "MountPointConfig":
        """Read and validate the declaration carried by a mount point element."""
        settings = settings or NavigationSettings()
        label = element.get("id") or f"<{element.tag}>"
        raw = element.get("data-arclight")
        if raw is None:
            raise MountPointConfigError("Missing data-arclight attribute", label, field="data-arclight")
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise MountPointConfigError(
                f"data-arclight is not valid JSON: {exc}", label, field="data-arclight", cause=exc
            ) from exc
        return cls.from_mapping(
            data,
            expand_label=element.get("data-expand") or settings.expand_label,
            collapse_label=element.get("data-collapse") or settings.collapse_label,
            mount_point=label,
        )


@dataclass(frozen=True)
class RequestContext:
    """Declared configuration combined with the engine's effective ancestry.

    ``original_parents`` and ``original_document`` are what the engine was
    seeded with; they differ from the declaration for engines spawned by a
    "view children" click (parents discarded) or by recursion.
    """

    config: MountPointConfig
    original_parents: Optional[Tuple[str, ...]]
    original_document: str

    @property
    def level(self) -> int:
        return self.config.level

    def _parent_at(self, index: int) -> Optional[str]:
        parents = self.original_parents
        if not parents or index < 0 or index >= len(parents):
            return None
        return parents[index] or None

    @property
    def target_id(self) -> str:
        """Identity of the node to locate when the viewed node is not in the batch."""
        entry = self._parent_at(self.level)
        if entry is not None:
            return f"{self.config.eadid}{entry}"
        return self.config.original_document

    @property
    def request_parent(self) -> str:
        """Parent identity the query is scoped to."""
        # Component page: use the ancestor trail
        entry = self._parent_at(self.level - 1)
        if entry is not None:
            return entry
        # Top-level collection page, or a "view children" click
        return self.config.original_document.replace(self.config.eadid, "", 1)
