"""Tests for boto3 client construction."""

import boto3
import pytest

from s3ferry.storage.client import create_s3_client, is_offline


@pytest.fixture
def session() -> boto3.Session:
    """Session with static fake credentials."""
    return boto3.Session(
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        region_name="us-east-1",
    )


class TestIsOffline:
    """Tests for is_offline()."""

    def test_flag(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The flag alone enables offline mode."""
        monkeypatch.delenv("IS_OFFLINE", raising=False)
        assert is_offline(True) is True

    def test_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """IS_OFFLINE in the environment enables offline mode."""
        monkeypatch.setenv("IS_OFFLINE", "1")
        assert is_offline() is True

    def test_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Online by default."""
        monkeypatch.delenv("IS_OFFLINE", raising=False)
        assert is_offline() is False


class TestCreateS3Client:
    """Tests for create_s3_client()."""

    def test_adaptive_retries(self, session: boto3.Session) -> None:
        """The client should use botocore's adaptive retry mode."""
        client = create_s3_client(session)
        assert client.meta.config.retries["mode"] == "adaptive"

    def test_offline_endpoint(self, session: boto3.Session) -> None:
        """Offline mode talks to the configured endpoint."""
        client = create_s3_client(session, endpoint="http://localhost:4569", offline=True)
        assert client.meta.endpoint_url == "http://localhost:4569"

    def test_endpoint_ignored_online(self, session: boto3.Session) -> None:
        """The endpoint is only used offline."""
        client = create_s3_client(session, endpoint="http://localhost:4569", offline=False)
        assert client.meta.endpoint_url != "http://localhost:4569"
