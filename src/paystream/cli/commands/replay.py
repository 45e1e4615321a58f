"""paystream replay -- replay a recorded event stream."""

from __future__ import annotations

import click

from paystream.cli.formatting import get_console

REPLAY_SUBJECT = "https://github.com/paystream/replay"


@click.command()
@click.argument("recording", type=click.Path(dir_okay=False))
@click.option("--repo", default=REPLAY_SUBJECT, show_default=True, help="Subject to report.")
@click.option("--budget", type=float, default=None, help="Budget the run started with.")
@click.option("--json", "as_json", is_flag=True, help="Print the final snapshot as JSON.")
@click.pass_context
def replay(
    ctx: click.Context,
    recording: str,
    repo: str,
    budget: float | None,
    as_json: bool,
) -> None:
    """Replay RECORDING (one JSON event per line) through a session."""
    from paystream.cli import _get_config, _run_session
    from paystream.controller import SessionController
    from paystream.stream.memory import FileEventSource

    config = _get_config(ctx)
    controller = SessionController(FileEventSource(recording), config)
    _run_session(controller, repo, budget, get_console(), as_json=as_json)
