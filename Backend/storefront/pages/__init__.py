"""
Store pages: resolution by slug and composition into ordered render output.
"""
from .resolver import Page, PageResolver, ResolvedPage, Section
from .registry import RendererRegistry
from .composition import ComposedPage, PageCompositionEngine, RenderContext, RenderedBlock
from .sections import SECTION_RENDERERS
from .builtin import PAGE_TYPE_RENDERERS

__all__ = [
    "Page",
    "PageResolver",
    "ResolvedPage",
    "Section",
    "RendererRegistry",
    "ComposedPage",
    "PageCompositionEngine",
    "RenderContext",
    "RenderedBlock",
    "SECTION_RENDERERS",
    "PAGE_TYPE_RENDERERS",
]
