"""
Theme projection into a shared style-variable namespace.

A StyleNamespace is the document-level set of CSS custom properties
(--primary, --accent, ...). Exactly one owner may project into it at a time.
ThemeProjection is the acquisition: entering sets every theme color, exiting
removes exactly the variables it set and gives the namespace back. Nothing is
left behind for the next store.

Usage:
    projection = ThemeProjection(namespace, theme.colors, owner=context)
    with projection:
        ...  # namespace holds the store's colors
"""

import logging
from types import MappingProxyType
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)


class StyleNamespaceBusy(RuntimeError):
    """Raised when a second owner tries to project into a held namespace."""


class StyleNamespace:
    """Mutable map of CSS custom properties with single-owner projection."""

    def __init__(self, name: str = "root"):
        self.name = name
        self._properties: dict[str, str] = {}
        self._owner: Optional[object] = None

    @property
    def owner(self) -> Optional[object]:
        return self._owner

    def acquire(self, owner: object) -> None:
        if self._owner is not None and self._owner is not owner:
            raise StyleNamespaceBusy(f"Style namespace '{self.name}' is already projected by {self._owner!r}")
        self._owner = owner

    def release(self, owner: object) -> None:
        if self._owner is owner:
            self._owner = None

    def set_property(self, name: str, value: str) -> None:
        self._properties[name] = value

    def remove_property(self, name: str) -> None:
        self._properties.pop(name, None)

    def get(self, name: str) -> Optional[str]:
        return self._properties.get(name)

    def snapshot(self) -> Mapping[str, str]:
        return MappingProxyType(dict(self._properties))

    def as_css(self, selector: str = ":root") -> str:
        return render_css(self._properties, selector)

    def __len__(self) -> int:
        return len(self._properties)


# Process-wide namespace for callers that do not bring their own
ROOT_STYLES = StyleNamespace("root")


def css_variable(key: str) -> str:
    return key if key.startswith("--") else f"--{key}"


def theme_variables(colors: Mapping[str, Any]) -> dict[str, str]:
    """CSS custom properties for a theme's colors; unset colors are skipped."""
    return {css_variable(key): str(value) for key, value in colors.items() if value is not None}


def render_css(properties: Mapping[str, str], selector: str = ":root") -> str:
    body = "".join(f" {name}: {value};" for name, value in sorted(properties.items()))
    return f"{selector} {{{body} }}"


class ThemeProjection:
    """Scoped projection of theme colors into a StyleNamespace."""

    def __init__(self, namespace: StyleNamespace, colors: Mapping[str, Any], owner: object):
        self.namespace = namespace
        self.owner = owner
        self._colors = theme_variables(colors)
        self._applied: tuple[str, ...] = ()

    @property
    def active(self) -> bool:
        return bool(self._applied) or self.namespace.owner is self.owner

    def enter(self) -> "ThemeProjection":
        self.namespace.acquire(self.owner)
        for name, value in self._colors.items():
            self.namespace.set_property(name, value)
        self._applied = tuple(self._colors)
        logger.debug(f"Projected {len(self._applied)} theme variables into '{self.namespace.name}'")
        return self

    def exit(self) -> None:
        for name in self._applied:
            self.namespace.remove_property(name)
        if self._applied:
            logger.debug(f"Retracted {len(self._applied)} theme variables from '{self.namespace.name}'")
        self._applied = ()
        self.namespace.release(self.owner)

    def __enter__(self) -> "ThemeProjection":
        return self.enter()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.exit()
