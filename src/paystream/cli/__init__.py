"""PayStream CLI -- terminal interface for live analysis sessions.

This module is NEVER imported from paystream/__init__.py.
It is only loaded via the ``paystream`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING

try:
    import click
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install paystream[cli]"
    ) from None

from paystream.cli.formatting import (
    SessionPrinter,
    format_error,
    format_session_summary,
)
from paystream.models.config import SessionConfig

if TYPE_CHECKING:
    from rich.console import Console

    from paystream.controller import SessionController
    from paystream.session import Session


@click.group()
@click.option(
    "--server",
    default=None,
    envvar="PAYSTREAM_SERVER_URL",
    help="Base URL of the PayStream analysis service.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log session events to stderr.")
@click.pass_context
def cli(ctx: click.Context, server: str | None, verbose: bool) -> None:
    """PayStream: explain a codebase with four paid AI agents."""
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj["config"] = SessionConfig.from_env(server_url=server)


def _get_config(ctx: click.Context) -> SessionConfig:
    return ctx.obj["config"]


def _run_session(
    controller: SessionController,
    subject_ref: str,
    budget: float | None,
    console: Console,
    *,
    as_json: bool,
) -> Session:
    """Run one session to completion and print its outcome.

    Exits with status 1 when the request is rejected or the session ends
    with an error.
    """
    from paystream.exceptions import InputValidationError

    if not as_json:
        controller.add_listener(SessionPrinter(console))

    async def _drive() -> Session:
        await controller.start(subject_ref, budget)
        try:
            return await controller.wait()
        finally:
            await controller.stop()

    try:
        session = asyncio.run(_drive())
    except InputValidationError as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    if as_json:
        click.echo(json.dumps(session.to_dict(), indent=2, default=str))
    else:
        format_session_summary(session, console)
    if session.error is not None:
        raise SystemExit(1)
    return session


# Register subcommands after cli group is defined
from paystream.cli.commands.analyze import analyze  # noqa: E402
from paystream.cli.commands.replay import replay  # noqa: E402
from paystream.cli.commands.report import report  # noqa: E402
from paystream.cli.commands.diagram import diagram  # noqa: E402

cli.add_command(analyze)
cli.add_command(replay)
cli.add_command(report)
cli.add_command(diagram)
