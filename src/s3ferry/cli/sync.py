"""Sync commands for s3ferry CLI.

Commands:
- sync: Upload, sync metadata and merge tags
- upload: Upload changed files and delete orphans
- metadata: Re-apply param metadata to uploaded objects
- tags: Merge configured bucket tags
"""

from __future__ import annotations

import click

from s3ferry.cli.context import CliContext, run_operation

bucket_option = click.option(
    "--bucket",
    "-b",
    default=None,
    help="Only sync the target with this bucket name.",
)


@click.command()
@bucket_option
@click.pass_obj
def sync(ctx: CliContext, bucket: str | None) -> None:
    """Sync local directories to their buckets.

    Uploads new and changed files, deletes orphaned objects where
    deleteRemoved is set, then re-applies param metadata and bucket tags.
    """
    run_operation(
        ctx,
        lambda orchestrator, buckets: orchestrator.full_sync(buckets, invoked_as_command=True),
        bucket=bucket,
    )


@click.command()
@bucket_option
@click.pass_obj
def upload(ctx: CliContext, bucket: str | None) -> None:
    """Upload changed files only (no metadata or tag sync)."""
    run_operation(
        ctx,
        lambda orchestrator, buckets: orchestrator.sync(buckets, invoked_as_command=True),
        bucket=bucket,
    )


@click.command()
@bucket_option
@click.pass_obj
def metadata(ctx: CliContext, bucket: str | None) -> None:
    """Re-apply param metadata to already uploaded objects."""
    run_operation(
        ctx,
        lambda orchestrator, buckets: orchestrator.sync_metadata(buckets, invoked_as_command=True),
        bucket=bucket,
    )


@click.command()
@bucket_option
@click.pass_obj
def tags(ctx: CliContext, bucket: str | None) -> None:
    """Merge configured bucketTags into each bucket's tags."""
    run_operation(
        ctx,
        lambda orchestrator, buckets: orchestrator.sync_bucket_tags(buckets, invoked_as_command=True),
        bucket=bucket,
    )
