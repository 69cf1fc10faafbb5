"""Tests for paginated bucket listing."""

from typing import Any
from unittest.mock import MagicMock

from s3ferry.core.types import RemoteObject
from s3ferry.storage.listing import iter_objects, list_objects_by_key


class TestIterObjects:
    """Tests for iter_objects()."""

    def test_follows_continuation_tokens(self) -> None:
        """Should request pages until the listing is no longer truncated."""
        client = MagicMock()
        client.list_objects_v2.side_effect = [
            {
                "Contents": [{"Key": "a", "ETag": '"1"', "Size": 1}],
                "IsTruncated": True,
                "NextContinuationToken": "t1",
            },
            {
                "Contents": [{"Key": "b", "ETag": '"2"', "Size": 2}],
                "IsTruncated": False,
            },
        ]

        objects = list(iter_objects(client, "site", "assets/"))

        assert objects == [
            RemoteObject("a", '"1"', 1),
            RemoteObject("b", '"2"', 2),
        ]
        assert client.list_objects_v2.call_args_list[0].kwargs == {"Bucket": "site", "Prefix": "assets/"}
        assert client.list_objects_v2.call_args_list[1].kwargs == {
            "Bucket": "site",
            "Prefix": "assets/",
            "ContinuationToken": "t1",
        }

    def test_skips_entries_without_key(self) -> None:
        """Entries lacking a key are dropped."""
        client = MagicMock()
        client.list_objects_v2.return_value = {
            "Contents": [{"ETag": '"x"'}, {"Key": "a"}],
            "IsTruncated": False,
        }

        assert [obj.key for obj in iter_objects(client, "site")] == ["a"]

    def test_empty_bucket(self) -> None:
        """A page without Contents yields nothing."""
        client = MagicMock()
        client.list_objects_v2.return_value = {"KeyCount": 0, "IsTruncated": False}

        assert list(iter_objects(client, "site")) == []

    def test_is_lazy(self) -> None:
        """No request is made before iteration starts."""
        client = MagicMock()

        iter_objects(client, "site")

        client.list_objects_v2.assert_not_called()

    def test_lists_prefix_in_moto(self, s3_client: Any, bucket: str) -> None:
        """Should list only the keys under the prefix."""
        for key in ("assets/a.css", "assets/b.js", "index.html"):
            s3_client.put_object(Bucket=bucket, Key=key, Body=b"x")

        listed = list_objects_by_key(s3_client, bucket, "assets/")

        assert sorted(listed) == ["assets/a.css", "assets/b.js"]
        assert listed["assets/a.css"].size == 1
        assert listed["assets/a.css"].etag.startswith('"')
