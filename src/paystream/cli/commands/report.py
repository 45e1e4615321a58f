"""paystream report -- show a shared report."""

from __future__ import annotations

import click

from paystream.cli.formatting import format_error, format_report, get_console


@click.command()
@click.argument("share_id")
@click.pass_context
def report(ctx: click.Context, share_id: str) -> None:
    """Fetch and display the shared report SHARE_ID."""
    from paystream.cli import _get_config
    from paystream.exceptions import ReportNotFoundError, TransportError
    from paystream.reports import ReportClient, share_url

    config = _get_config(ctx)
    console = get_console()
    try:
        with ReportClient(config) as client:
            shared = client.fetch(share_id)
    except (ReportNotFoundError, TransportError) as e:
        format_error(str(e), console)
        raise SystemExit(1) from None
    format_report(shared, share_url(config.server_url, share_id), console)
