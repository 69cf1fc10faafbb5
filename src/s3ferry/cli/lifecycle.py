"""Deployment lifecycle commands for s3ferry CLI.

These are meant to be called by deployment scripts: they stay quiet on
success, honour noSync and treat a missing configuration as nothing to do.

Commands:
- deploy: Full sync after a deployment
- remove: Empty every target prefix before the stack is removed
"""

from __future__ import annotations

import click

from s3ferry.cli.context import CliContext, run_operation

no_sync_option = click.option(
    "--nos3ferry",
    "no_sync",
    is_flag=True,
    help="Skip this step (same as noSync in the configuration).",
)


@click.command()
@no_sync_option
@click.pass_obj
def deploy(ctx: CliContext, no_sync: bool) -> None:
    """Post-deploy step: sync files, metadata and tags."""
    run_operation(
        ctx,
        lambda orchestrator, buckets: orchestrator.full_sync(buckets),
        no_sync=no_sync,
        lifecycle=True,
    )


@click.command()
@no_sync_option
@click.pass_obj
def remove(ctx: CliContext, no_sync: bool) -> None:
    """Pre-remove step: delete every object under each target prefix."""
    run_operation(
        ctx,
        lambda orchestrator, buckets: orchestrator.clear(buckets),
        no_sync=no_sync,
        lifecycle=True,
    )
