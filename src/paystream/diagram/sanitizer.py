"""Normalization of model-generated Mermaid text.

Models often wrap diagrams in Markdown fences or omit the diagram-kind
header. ``sanitize`` strips the fence and makes sure the text starts
with a recognized keyword, defaulting to a top-down flow graph. It never
fails; text that is still invalid is left for the renderer's fallback.
"""

from __future__ import annotations

import re

DEFAULT_HEADER = "graph TD"

# Prefixes Mermaid accepts as the first token of a diagram.
DIAGRAM_KEYWORDS: tuple[str, ...] = (
    "graph ",
    "flowchart ",
    "sequenceDiagram",
    "classDiagram",
    "erDiagram",
    "timeline",
    "gantt",
    "pie",
)

_LEADING_FENCE = re.compile(r"^```[A-Za-z0-9_+-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"```\Z")


def has_diagram_keyword(text: str) -> bool:
    """Return True if *text* starts with a recognized diagram keyword."""
    return text.startswith(DIAGRAM_KEYWORDS)


def _normalize_once(text: str) -> str:
    cleaned = text.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1).strip()
    if has_diagram_keyword(cleaned):
        return cleaned
    # bare node/edge definitions are assumed to be a flow graph; a lone
    # "graph" or "flowchart" with no direction also gets the default header
    return f"{DEFAULT_HEADER}\n{cleaned}" if cleaned else DEFAULT_HEADER


def sanitize(raw: str) -> str:
    """Return a renderable version of *raw* Mermaid text.

    Trims whitespace, strips a leading fence (with optional language tag)
    and a trailing fence, and prepends ``graph TD`` when the text does not
    start with a recognized diagram keyword. The cleanup is repeated until
    the text stops changing, so ``sanitize(sanitize(x)) == sanitize(x)``.
    """
    text = raw if isinstance(raw, str) else str(raw)
    while True:
        cleaned = _normalize_once(text)
        if cleaned == text:
            return cleaned
        text = cleaned
