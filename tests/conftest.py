"""Shared pytest fixtures.

S3 fixtures run against moto's in-memory AWS; the test is skipped when
moto is not installed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import pytest

BUCKET = "test-bucket"
REGION = "us-east-1"


@pytest.fixture(autouse=True)
def restore_s3ferry_logger() -> Iterator[None]:
    """Undo logging changes made by CLI invocations."""
    s3ferry_logger = logging.getLogger("s3ferry")
    handlers = s3ferry_logger.handlers[:]
    level = s3ferry_logger.level
    propagate = s3ferry_logger.propagate
    yield
    s3ferry_logger.handlers[:] = handlers
    s3ferry_logger.setLevel(level)
    s3ferry_logger.propagate = propagate


@pytest.fixture
def aws_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fake credentials so no test can reach a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.delenv("IS_OFFLINE", raising=False)


@pytest.fixture
def mock_aws_env(aws_credentials: None) -> Iterator[None]:
    """Activate moto for the duration of a test."""
    pytest.importorskip("moto")
    from moto import mock_aws

    with mock_aws():
        yield


@pytest.fixture
def bucket() -> str:
    """Name of the bucket created by s3_client."""
    return BUCKET


@pytest.fixture
def s3_client(mock_aws_env: None) -> Any:
    """S3 client with an empty test bucket."""
    import boto3

    client = boto3.client("s3", region_name=REGION)
    client.create_bucket(Bucket=BUCKET)
    return client
