"""
Page composition: ordered render output from a page and its sections.

Layout of a composed page:

    [sections with position "above"]   by sort_order
    [built-in page-type content]       category browser, product listing, ...
    [sections "below" or unset]        by sort_order

Sections are dispatched by type through a RendererRegistry; the built-in
content is a second, independent registry keyed by page_type. A section
whose type has no renderer contributes nothing. A renderer that chokes on
its config is logged and skipped; the rest of the page still renders.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from ..models import SectionPosition
from ..tenancy.context import TenantSnapshot
from ..tenancy.links import LinkBuilder
from .registry import RendererRegistry
from .resolver import Page, Section

logger = logging.getLogger(__name__)

SOURCE_SECTION = "section"
SOURCE_BUILTIN = "builtin"


@dataclass(frozen=True)
class RenderContext:
    """What a renderer may know about the request: the store snapshot, its links and query params."""

    snapshot: TenantSnapshot
    links: LinkBuilder
    query: Mapping[str, str] = field(default_factory=dict)

    @property
    def tenant_slug(self) -> str:
        return self.snapshot.tenant_slug

    @property
    def tenant_id(self):
        return self.snapshot.tenant_id


@dataclass(frozen=True)
class RenderedBlock:
    kind: str
    source: str
    props: dict[str, Any]
    section_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "source": self.source,
            "section_id": self.section_id,
            "props": self.props,
        }


@dataclass(frozen=True)
class ComposedPage:
    page: Page
    title: str
    blocks: tuple[RenderedBlock, ...]

    @property
    def kinds(self) -> tuple[str, ...]:
        return tuple(block.kind for block in self.blocks)


def page_title(page: Page, snapshot: TenantSnapshot) -> str:
    return page.seo_title or page.title or snapshot.tenant.name


def partition_sections(sections: Iterable[Section]) -> tuple[list[Section], list[Section]]:
    """Split visible sections into (above, below), each stable-sorted by sort_order."""
    above: list[Section] = []
    below: list[Section] = []
    for section in sections:
        if not section.is_visible:
            continue
        if section.position == SectionPosition.ABOVE.value:
            above.append(section)
        else:
            below.append(section)

    def by_order(section: Section) -> int:
        return section.sort_order

    return sorted(above, key=by_order), sorted(below, key=by_order)


class PageCompositionEngine:
    """
    Turns (page, sections) into an ordered list of RenderedBlocks.

    Usage:
        engine = PageCompositionEngine.default()
        composed = engine.render(resolved.page, resolved.sections, context)
    """

    def __init__(self, section_registry: RendererRegistry, page_type_registry: RendererRegistry):
        self.sections = section_registry
        self.page_types = page_type_registry

    @classmethod
    def default(cls) -> "PageCompositionEngine":
        from .builtin import PAGE_TYPE_RENDERERS
        from .sections import SECTION_RENDERERS

        return cls(SECTION_RENDERERS.copy(), PAGE_TYPE_RENDERERS.copy())

    def render(self, page: Page, sections: Iterable[Section], context: RenderContext) -> ComposedPage:
        above, below = partition_sections(sections)

        blocks: list[RenderedBlock] = []
        blocks.extend(self._render_sections(above, context))
        builtin = self._render_builtin(page, context)
        if builtin is not None:
            blocks.append(builtin)
        blocks.extend(self._render_sections(below, context))

        return ComposedPage(page=page, title=page_title(page, context.snapshot), blocks=tuple(blocks))

    def _render_sections(self, sections: list[Section], context: RenderContext) -> list[RenderedBlock]:
        blocks = []
        for section in sections:
            renderer = self.sections.get(section.type)
            if renderer is None:
                logger.debug(f"No renderer for section type '{section.type}' (section {section.id}), skipping")
                continue
            try:
                props = renderer(section, context)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.error(f"Section {section.id} ({section.type}) failed to render: {e}")
                continue
            if props is None:
                continue
            blocks.append(
                RenderedBlock(
                    kind=props.pop("kind", section.type),
                    source=SOURCE_SECTION,
                    props=props,
                    section_id=str(section.id),
                )
            )
        return blocks

    def _render_builtin(self, page: Page, context: RenderContext) -> Optional[RenderedBlock]:
        renderer = self.page_types.get(page.page_type)
        if renderer is None:
            return None
        try:
            props = renderer(page, context)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Built-in content for page {page.id} ({page.page_type}) failed to render: {e}")
            return None
        if props is None:
            return None
        return RenderedBlock(kind=props.pop("kind", page.page_type), source=SOURCE_BUILTIN, props=props)
