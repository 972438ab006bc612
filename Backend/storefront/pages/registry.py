"""
Type-string -> renderer registry.

Section and page-type renderers are looked up by the type tag stored in the
database. Tags with no registered renderer are simply absent: get() returns
None and callers skip the entry.

Usage:
    sections = RendererRegistry("section")

    @sections.register("hero_banner")
    def hero_banner(section, context):
        return {...}
"""

import logging
from typing import Any, Callable, Iterator, Optional

logger = logging.getLogger(__name__)

Renderer = Callable[..., Optional[dict[str, Any]]]


class RendererRegistry:
    def __init__(self, kind: str):
        self.kind = kind
        self._renderers: dict[str, Renderer] = {}

    def register(self, type_name: str, renderer: Optional[Renderer] = None):
        """Register a renderer directly, or use as a decorator when `renderer` is omitted."""
        if renderer is None:
            def decorator(func: Renderer) -> Renderer:
                self.register(type_name, func)
                return func
            return decorator

        if type_name in self._renderers:
            logger.debug(f"Replacing {self.kind} renderer for '{type_name}'")
        self._renderers[type_name] = renderer
        return renderer

    def get(self, type_name: Optional[str]) -> Optional[Renderer]:
        if not type_name:
            return None
        return self._renderers.get(type_name)

    def copy(self) -> "RendererRegistry":
        clone = RendererRegistry(self.kind)
        clone._renderers = dict(self._renderers)
        return clone

    def types(self) -> tuple[str, ...]:
        return tuple(sorted(self._renderers))

    def __contains__(self, type_name: str) -> bool:
        return type_name in self._renderers

    def __iter__(self) -> Iterator[str]:
        return iter(self.types())

    def __len__(self) -> int:
        return len(self._renderers)
