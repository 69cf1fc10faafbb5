"""Shared state and helpers for s3ferry CLI commands.

This module provides:
- CliContext: Global options collected by the ``s3ferry`` group
- setup_logging: Console logging for the ``s3ferry`` logger
- load_buckets / build_orchestrator / run_operation: Command plumbing
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn

import click
from botocore.exceptions import BotoCoreError, ClientError

from s3ferry.cli.progress import ConsoleProgressFactory
from s3ferry.core.config import DEFAULT_MAX_CONCURRENCY, FerryConfig, FerryOptions, load_config
from s3ferry.core.errors import S3FerryError
from s3ferry.storage.client import (
    create_cloudformation_client,
    create_s3_client,
    create_session,
    is_offline,
)
from s3ferry.storage.stack_output import resolve_stack_output
from s3ferry.sync.orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

Operation = Callable[[SyncOrchestrator, Sequence[Mapping[str, Any]]], None]


@dataclass
class CliContext:
    """Options given to the ``s3ferry`` group, shared by every command."""

    config_path: Path
    stage: str | None = None
    profile: str | None = None
    region: str | None = None
    stack_name: str | None = None
    offline: bool = False
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    verbose: bool = False
    quiet: bool = False

    @property
    def service_path(self) -> Path:
        """Directory holding the config file; local dirs are relative to it."""
        return self.config_path.resolve().parent

    def options(self, bucket: str | None = None, no_sync: bool = False) -> FerryOptions:
        """Build the FerryOptions of one command invocation."""
        return FerryOptions(
            service_path=self.service_path,
            stage=self.stage,
            bucket=bucket,
            offline=is_offline(self.offline),
            no_sync=no_sync,
            profile=self.profile,
            region=self.region,
            stack_name=self.stack_name,
            max_concurrency=self.max_concurrency,
        )


def setup_logging(verbose: bool = False) -> None:
    """Configure console logging for the s3ferry logger.

    Args:
        verbose: Log at DEBUG instead of INFO.
    """
    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger("s3ferry")
    # Replace handlers from a previous invocation in the same process
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    root_logger.addHandler(stdout_handler)
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    root_logger.propagate = False

    # botocore and s3transfer stay at WARNING
    for name in ("botocore", "s3transfer"):
        logging.getLogger(name).setLevel(logging.WARNING)


def load_buckets(ctx: CliContext) -> FerryConfig | None:
    """Load the configuration file.

    Returns:
        The parsed config, or None when the file does not exist or holds
        no bucket entries.

    Raises:
        ConfigValidationError: If the file exists but cannot be parsed.
    """
    if not ctx.config_path.exists():
        return None
    config = load_config(ctx.config_path)
    return config if config.buckets else None


def _needs_stack_output(raw: Any) -> bool:
    return isinstance(raw, Mapping) and not raw.get("bucketName") and bool(raw.get("bucketNameKey"))


def build_orchestrator(ctx: CliContext, config: FerryConfig, options: FerryOptions) -> SyncOrchestrator:
    """Create clients and wire a SyncOrchestrator for one command."""
    session = create_session(profile=ctx.profile, region=ctx.region)
    s3_client = create_s3_client(session, endpoint=config.endpoint, offline=options.offline)

    get_bucket_name: Callable[[str], str] | None = None
    if any(_needs_stack_output(raw) for raw in config.buckets):
        cf_client = create_cloudformation_client(session)

        def resolve(output_key: str) -> str:
            return resolve_stack_output(cf_client, options.stack_name, output_key)

        get_bucket_name = resolve

    progress_factory = None if ctx.quiet else ConsoleProgressFactory()
    return SyncOrchestrator(
        s3_client,
        options,
        progress_factory=progress_factory,
        get_bucket_name=get_bucket_name,
    )


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def run_operation(
    ctx: CliContext,
    operation: Operation,
    bucket: str | None = None,
    no_sync: bool = False,
    lifecycle: bool = False,
) -> None:
    """Load the config and run an orchestrator operation.

    Exits with status 1 on any s3ferry or AWS error.

    Args:
        ctx: CLI context.
        operation: Called with the orchestrator and the raw bucket entries.
        bucket: Only run the target with this bucket name.
        no_sync: Command-line request to skip a lifecycle step.
        lifecycle: Run as an automatic deploy/remove step: noSync is
            honoured and a missing configuration is only noted.
    """
    try:
        config = load_buckets(ctx)
    except S3FerryError as e:
        fail(str(e))

    if config is None:
        message = f"No s3ferry bucket configuration found in {ctx.config_path}"
        if not lifecycle:
            fail(message)
        logger.info(f"{message}, nothing to do")
        return

    options = ctx.options(bucket=bucket, no_sync=no_sync or config.no_sync)
    if lifecycle and options.no_sync:
        logger.info("Sync is disabled (noSync), skipping")
        return

    try:
        orchestrator = build_orchestrator(ctx, config, options)
        operation(orchestrator, config.buckets)
    except (S3FerryError, BotoCoreError, ClientError) as e:
        fail(str(e))
