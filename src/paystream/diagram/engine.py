"""Diagram engines.

An engine turns sanitized Mermaid text into SVG markup or raises
RenderError. MermaidCliEngine shells out to the Mermaid CLI (``mmdc``),
feeding the diagram on stdin.
"""

from __future__ import annotations

import asyncio
import json
import logging
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from paystream.diagram.config import RenderConfig, RenderOptions
from paystream.exceptions import RenderError

logger = logging.getLogger(__name__)


@runtime_checkable
class RenderEngine(Protocol):
    """Protocol for pluggable diagram engines."""

    async def render(
        self,
        diagram_id: str,
        source: str,
        config: RenderConfig,
        options: RenderOptions,
    ) -> str:
        """Render *source* and return SVG markup.

        Raises:
            RenderError: If the engine rejects the diagram.
        """
        ...


class MermaidCliEngine:
    """Render diagrams with the Mermaid CLI in a subprocess.

    The binary comes from ``RenderConfig.executable`` unless one is given
    here. Each render uses its own temporary directory for the config file
    and the output SVG.
    """

    def __init__(self, executable: str | None = None) -> None:
        self._executable = executable

    async def render(
        self,
        diagram_id: str,
        source: str,
        config: RenderConfig,
        options: RenderOptions,
    ) -> str:
        executable = self._executable or config.executable
        with tempfile.TemporaryDirectory(prefix="paystream-mmdc-") as tmp:
            out_path = Path(tmp) / f"{diagram_id}.svg"
            config_path = Path(tmp) / "mermaid.json"
            config_path.write_text(
                json.dumps(config.mermaid_config(options)), encoding="utf-8"
            )
            args = [
                executable,
                "--input", "-",
                "--output", str(out_path),
                "--configFile", str(config_path),
                "--theme", options.theme or config.theme,
                "--backgroundColor", options.background,
                "--svgId", diagram_id,
                "--quiet",
            ]
            try:
                proc = await asyncio.create_subprocess_exec(
                    *args,
                    stdin=asyncio.subprocess.PIPE,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as exc:
                raise RenderError(
                    f"Cannot run Mermaid CLI {executable!r}: {exc}", diagram_id
                ) from exc

            try:
                _, stderr = await proc.communicate(
                    source.encode("utf-8", errors="replace")
                )
            except asyncio.CancelledError:
                proc.kill()
                await proc.wait()
                raise

            if proc.returncode != 0:
                detail = stderr.decode("utf-8", errors="replace").strip()
                raise RenderError(
                    detail or f"Mermaid CLI exited with status {proc.returncode}",
                    diagram_id,
                )
            if not out_path.exists():
                raise RenderError("Mermaid CLI produced no output", diagram_id)
            logger.debug("Rendered %s with %s", diagram_id, executable)
            return out_path.read_text(encoding="utf-8")
