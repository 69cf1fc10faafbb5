"""boto3 client construction.

Retries are delegated to botocore's adaptive retry mode; nothing in
s3ferry retries a store call on its own.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any

import boto3
from botocore.config import Config

from s3ferry.core.config import AWS_MAX_ATTEMPTS, AWS_RETRY_MODE, OFFLINE_ENV_VAR

if TYPE_CHECKING:
    from boto3.session import Session

logger = logging.getLogger(__name__)


def is_offline(flag: bool = False) -> bool:
    """Check whether offline mode is requested by flag or environment."""
    return flag or bool(os.environ.get(OFFLINE_ENV_VAR))


def create_session(profile: str | None = None, region: str | None = None) -> Session:
    """Create a boto3 session from the standard credential chain."""
    return boto3.Session(profile_name=profile, region_name=region)


def create_s3_client(
    session: Session | None = None,
    endpoint: str | None = None,
    offline: bool = False,
) -> Any:
    """Create an S3 client with adaptive retries.

    Args:
        session: boto3 session (default: a new session from the environment).
        endpoint: Custom endpoint, only used in offline mode.
        offline: Use ``endpoint`` with path-style addressing.

    Returns:
        A boto3 S3 client.
    """
    session = session or create_session()
    s3_config: dict[str, Any] = {}
    kwargs: dict[str, Any] = {}

    if endpoint and offline:
        logger.debug(f"Using offline S3 endpoint {endpoint}")
        kwargs["endpoint_url"] = endpoint
        s3_config["addressing_style"] = "path"

    config = Config(
        retries={"mode": AWS_RETRY_MODE, "max_attempts": AWS_MAX_ATTEMPTS},
        s3=s3_config or None,
    )
    return session.client("s3", config=config, **kwargs)


def create_cloudformation_client(session: Session | None = None) -> Any:
    """Create a CloudFormation client with the same retry policy."""
    session = session or create_session()
    config = Config(retries={"mode": AWS_RETRY_MODE, "max_attempts": AWS_MAX_ATTEMPTS})
    return session.client("cloudformation", config=config)
