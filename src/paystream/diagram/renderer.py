"""Diagram rendering with a deterministic text fallback.

DiagramRenderer sanitizes the diagram text, renders it through an engine
under a fresh identifier, and turns any engine failure into a
FallbackRender carrying the sanitized source. Only task cancellation
escapes ``render``.

DiagramView binds renders to one display slot. Each ``show`` starts a
new render generation; a result is published only if its generation is
still the latest and the view has not been closed.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import re
from dataclasses import dataclass
from typing import Literal, Union

from paystream.diagram.config import RenderConfig, RenderOptions, get_config
from paystream.diagram.engine import MermaidCliEngine, RenderEngine
from paystream.diagram.sanitizer import sanitize
from paystream.exceptions import RenderError

logger = logging.getLogger(__name__)

DIAGRAM_ID_PREFIX = "paystream-diagram"

_diagram_ids = itertools.count(1)
_SVG_OPEN_TAG = re.compile(r"<svg\b([^>]*)>", re.IGNORECASE)
_STYLE_ATTR = re.compile(r'\sstyle="([^"]*)"')
_RESPONSIVE_STYLE = "max-width: 100%; height: auto;"


def next_diagram_id() -> str:
    """Return a process-unique, monotonically increasing diagram identifier."""
    return f"{DIAGRAM_ID_PREFIX}-{next(_diagram_ids)}"


@dataclass(frozen=True)
class SvgRender:
    """A successful render."""

    markup: str
    diagram_id: str
    kind: Literal["svg"] = "svg"


@dataclass(frozen=True)
class FallbackRender:
    """The engine rejected the diagram; display its sanitized source instead."""

    raw_text: str
    reason: str = ""
    kind: Literal["fallback"] = "fallback"


RenderResult = Union[SvgRender, FallbackRender]


def make_responsive(markup: str) -> str:
    """Let the root ``<svg>`` element scale down to its container width."""
    match = _SVG_OPEN_TAG.search(markup)
    if match is None:
        return markup
    attrs = match.group(1)
    style = _STYLE_ATTR.search(attrs)
    if style is not None:
        existing = style.group(1).strip().rstrip(";")
        merged = f"{existing}; {_RESPONSIVE_STYLE}" if existing else _RESPONSIVE_STYLE
        attrs = attrs[: style.start(1)] + merged + attrs[style.end(1) :]
    elif attrs.rstrip().endswith("/"):
        attrs = attrs.rstrip()[:-1] + f' style="{_RESPONSIVE_STYLE}"/'
    else:
        attrs = attrs + f' style="{_RESPONSIVE_STYLE}"'
    return markup[: match.start(1)] + attrs + markup[match.end(1) :]


class DiagramRenderer:
    """Render untrusted diagram text without ever raising.

    Args:
        engine: Engine that produces SVG. Defaults to MermaidCliEngine.
        config: Engine configuration. Defaults to the process-wide
            configuration from ``configure_once``.
    """

    def __init__(
        self,
        engine: RenderEngine | None = None,
        config: RenderConfig | None = None,
    ) -> None:
        self._engine = engine or MermaidCliEngine()
        self._config = config

    @property
    def config(self) -> RenderConfig:
        return self._config or get_config()

    async def render(
        self, text: str, *, options: RenderOptions | None = None
    ) -> RenderResult:
        """Render *text*, falling back to its sanitized source on failure."""
        if not isinstance(text, str):
            return FallbackRender(raw_text=sanitize(str(text)), reason="non-text diagram")
        source = sanitize(text)
        if not text.strip():
            return FallbackRender(raw_text=source, reason="empty diagram")

        options = options or RenderOptions()
        config = self.config
        diagram_id = next_diagram_id()
        try:
            markup = await asyncio.wait_for(
                self._engine.render(diagram_id, source, config, options),
                timeout=config.timeout,
            )
            if not markup or "<svg" not in markup.lower():
                raise RenderError("Engine returned no SVG markup", diagram_id)
        except Exception as exc:
            logger.warning("Diagram render %s failed: %s", diagram_id, exc or type(exc).__name__)
            return FallbackRender(raw_text=source, reason=str(exc) or type(exc).__name__)

        if options.fit_width:
            markup = make_responsive(markup)
        return SvgRender(markup=markup, diagram_id=diagram_id)


class DiagramView:
    """One display slot for a diagram.

    ``output`` is None while nothing has been rendered (or the text is
    blank), otherwise the latest current RenderResult.
    """

    def __init__(
        self, renderer: DiagramRenderer, *, options: RenderOptions | None = None
    ) -> None:
        self._renderer = renderer
        self._options = options
        self._generation = 0
        self._closed = False
        self.output: RenderResult | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def closed(self) -> bool:
        return self._closed

    async def show(self, text: str | None) -> RenderResult | None:
        """Render *text* into this view.

        Returns the published result, or None if the view was closed or a
        newer ``show`` superseded this one before the render finished.
        """
        if self._closed:
            return None
        self._generation += 1
        generation = self._generation
        if not text or not text.strip():
            self.output = None
            return None

        result = await self._renderer.render(text, options=self._options)
        if self._closed or generation != self._generation:
            logger.debug("Discarding stale render of generation %d", generation)
            return None
        self.output = result
        return result

    def close(self) -> None:
        """Tear the view down; renders still in flight are discarded."""
        self._closed = True
        self._generation += 1
        self.output = None
