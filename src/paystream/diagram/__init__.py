"""Diagram sanitize/render pipeline.

Model-generated Mermaid text is normalized by ``sanitize`` and rendered by
``DiagramRenderer``, which degrades to the sanitized source text whenever
the engine rejects it.
"""

from paystream.diagram.config import (
    RenderConfig,
    RenderOptions,
    configure_once,
    get_config,
    reset_configuration,
)
from paystream.diagram.engine import MermaidCliEngine, RenderEngine
from paystream.diagram.renderer import (
    DiagramRenderer,
    DiagramView,
    FallbackRender,
    RenderResult,
    SvgRender,
    make_responsive,
    next_diagram_id,
)
from paystream.diagram.sanitizer import DIAGRAM_KEYWORDS, has_diagram_keyword, sanitize

__all__ = [
    "sanitize",
    "has_diagram_keyword",
    "DIAGRAM_KEYWORDS",
    "DiagramRenderer",
    "DiagramView",
    "RenderResult",
    "SvgRender",
    "FallbackRender",
    "make_responsive",
    "next_diagram_id",
    "RenderEngine",
    "MermaidCliEngine",
    "RenderConfig",
    "RenderOptions",
    "configure_once",
    "get_config",
    "reset_configuration",
]
