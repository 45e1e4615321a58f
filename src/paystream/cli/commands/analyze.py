"""paystream analyze -- run a live analysis session."""

from __future__ import annotations

import click

from paystream.cli.formatting import get_console


@click.command()
@click.argument("repo")
@click.option("--budget", type=float, default=None, help="Budget in HBAR (0.5-5.0).")
@click.option("--json", "as_json", is_flag=True, help="Print the final snapshot as JSON.")
@click.pass_context
def analyze(ctx: click.Context, repo: str, budget: float | None, as_json: bool) -> None:
    """Analyze REPO (a GitHub URL) and follow the agents live."""
    from paystream.cli import _get_config, _run_session
    from paystream.controller import SessionController
    from paystream.stream.sse import HttpEventSource

    config = _get_config(ctx)
    controller = SessionController(HttpEventSource(config), config)
    _run_session(controller, repo, budget, get_console(), as_json=as_json)
