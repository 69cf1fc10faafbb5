"""Command-line interface for s3ferry.

This module provides the main CLI entry point and assembles all commands.

Commands:
- sync: Upload, metadata and tags for every target
- upload: Upload changed files only
- metadata: Re-apply param metadata
- tags: Merge bucket tags
- deploy: Post-deploy lifecycle step
- remove: Pre-remove lifecycle step
"""

from __future__ import annotations

from pathlib import Path

import click

from s3ferry.cli.context import CliContext, setup_logging
from s3ferry.cli.lifecycle import deploy, remove
from s3ferry.cli.sync import metadata, sync, tags, upload
from s3ferry.core.config import DEFAULT_CONFIG_FILE, DEFAULT_MAX_CONCURRENCY


@click.group()
@click.version_option(package_name="s3ferry")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG_FILE,
    show_default=True,
    help="Bucket configuration file (JSON).",
)
@click.option("--stage", "-s", default=None, help="Active stage for OnlyForStage params.")
@click.option("--profile", default=None, help="AWS profile.")
@click.option("--region", "-r", default=None, help="AWS region.")
@click.option("--stack-name", default=None, help="Stack whose outputs resolve bucketNameKey.")
@click.option("--offline", is_flag=True, help="Use the configured local endpoint.")
@click.option(
    "--max-concurrency",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_CONCURRENCY,
    show_default=True,
    help="Maximum object operations in flight per target.",
)
@click.option("--quiet", "-q", is_flag=True, help="Do not print progress.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path,
    stage: str | None,
    profile: str | None,
    region: str | None,
    stack_name: str | None,
    offline: bool,
    max_concurrency: int,
    quiet: bool,
    verbose: bool,
) -> None:
    """s3ferry - Sync local directories to S3 buckets."""
    setup_logging(verbose)
    ctx.obj = CliContext(
        config_path=config_path,
        stage=stage,
        profile=profile,
        region=region,
        stack_name=stack_name,
        offline=offline,
        max_concurrency=max_concurrency,
        verbose=verbose,
        quiet=quiet,
    )


# Sync commands
cli.add_command(sync)
cli.add_command(upload)
cli.add_command(metadata)
cli.add_command(tags)

# Lifecycle commands
cli.add_command(deploy)
cli.add_command(remove)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    "CliContext",
    "cli",
    "main",
]
