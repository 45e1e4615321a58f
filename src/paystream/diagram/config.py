"""Diagram engine configuration.

RenderConfig is the process-wide engine configuration (theme, fonts,
engine binary). It is set once with ``configure_once`` and then treated as
read-only. Anything that may differ between two renders (theme override,
background, diagram id) travels in an explicit RenderOptions instead.
"""

from __future__ import annotations

import logging
import threading
import types
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_THEME_VARIABLES: Mapping[str, str] = types.MappingProxyType({
    "primaryColor": "#0d1117",
    "primaryTextColor": "#e0e0e0",
    "primaryBorderColor": "#00ff8844",
    "lineColor": "#00ff88",
    "secondaryColor": "#0d1117",
    "tertiaryColor": "#161b22",
    "edgeLabelBackground": "#0d1117",
    "nodeTextColor": "#e0e0e0",
    "mainBkg": "#0d1117",
    "nodeBorder": "#00ff8844",
    "clusterBkg": "#161b22",
    "titleColor": "#00ff88",
    "fontFamily": "JetBrains Mono, monospace",
    "fontSize": "14px",
})


@dataclass(frozen=True)
class RenderConfig:
    """Process-wide diagram engine configuration.

    Attributes:
        theme: Mermaid theme name.
        theme_variables: Mermaid ``themeVariables`` overrides.
        flowchart_curve: Edge curve style for flowcharts.
        html_labels: Whether flowchart labels are rendered as HTML.
        security_level: Mermaid security level. Diagram text is untrusted,
            so scripts and click handlers are disabled by default.
        executable: Mermaid CLI binary used by MermaidCliEngine.
        timeout: Seconds a single render may take before it falls back.
    """

    theme: str = "dark"
    theme_variables: Mapping[str, str] = field(default_factory=lambda: DEFAULT_THEME_VARIABLES)
    flowchart_curve: str = "basis"
    html_labels: bool = True
    security_level: str = "strict"
    executable: str = "mmdc"
    timeout: float = 30.0

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "theme_variables", types.MappingProxyType(dict(self.theme_variables))
        )

    def mermaid_config(self, options: RenderOptions | None = None) -> dict[str, Any]:
        """Return the Mermaid config dict for one render.

        Per-render options override the process-wide values without
        changing them.
        """
        options = options or RenderOptions()
        variables = dict(self.theme_variables)
        if options.theme_variables:
            variables.update(options.theme_variables)
        return {
            "startOnLoad": False,
            "theme": options.theme or self.theme,
            "themeVariables": variables,
            "flowchart": {"curve": self.flowchart_curve, "htmlLabels": self.html_labels},
            "securityLevel": self.security_level,
        }


@dataclass(frozen=True)
class RenderOptions:
    """Options for a single render call.

    Attributes:
        theme: Theme override for this render only.
        theme_variables: Extra ``themeVariables`` for this render only.
        background: Background color passed to the engine.
        fit_width: Make the returned SVG scale to its container width.
    """

    theme: str | None = None
    theme_variables: Mapping[str, str] | None = None
    background: str = "transparent"
    fit_width: bool = True


_config: RenderConfig | None = None
_config_lock = threading.Lock()


def configure_once(config: RenderConfig | None = None) -> RenderConfig:
    """Set the process-wide engine configuration.

    The first call wins; later calls log a warning and return the
    configuration already in place.
    """
    global _config
    with _config_lock:
        if _config is None:
            _config = config or RenderConfig()
        elif config is not None and config != _config:
            logger.warning("Diagram engine already configured; ignoring new configuration")
        return _config


def get_config() -> RenderConfig:
    """Return the process-wide configuration, installing defaults if unset."""
    return configure_once()


def reset_configuration() -> None:
    """Forget the process-wide configuration. Intended for tests."""
    global _config
    with _config_lock:
        _config = None
