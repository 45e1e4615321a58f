"""paystream diagram -- sanitize and render a Mermaid diagram."""

from __future__ import annotations

import asyncio
from typing import IO

import click

from paystream.cli.formatting import get_console


@click.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("-o", "--output", type=click.Path(dir_okay=False), default=None,
              help="Write the SVG here instead of stdout.")
@click.option("--sanitize-only", is_flag=True, help="Print the sanitized text and exit.")
@click.option("--theme", default=None, help="Theme for this render only.")
@click.option("--mmdc", "executable", default=None, envvar="PAYSTREAM_MMDC",
              help="Path to the Mermaid CLI binary.")
def diagram(
    source: IO[str],
    output: str | None,
    sanitize_only: bool,
    theme: str | None,
    executable: str | None,
) -> None:
    """Render the Mermaid diagram in SOURCE (default: stdin).

    When the diagram engine rejects it, the sanitized source is printed
    instead and the command exits with status 2.
    """
    from paystream.diagram import (
        DiagramRenderer,
        FallbackRender,
        MermaidCliEngine,
        RenderOptions,
        sanitize,
    )

    text = source.read()
    if sanitize_only:
        click.echo(sanitize(text))
        return

    renderer = DiagramRenderer(MermaidCliEngine(executable))
    result = asyncio.run(renderer.render(text, options=RenderOptions(theme=theme)))

    if isinstance(result, FallbackRender):
        console = get_console()
        console.print(
            "[yellow]DIAGRAM SOURCE — paste at mermaid.live to view[/yellow]",
            highlight=False,
        )
        click.echo(result.raw_text)
        raise SystemExit(2)

    if output:
        with open(output, "w", encoding="utf-8") as fh:
            fh.write(result.markup)
    else:
        click.echo(result.markup)
