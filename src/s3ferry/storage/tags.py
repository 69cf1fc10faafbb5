"""Bucket tag merging."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

NO_SUCH_TAG_SET = "NoSuchTagSet"


def merge_tags(existing: list[dict[str, str]], tags: Mapping[str, str]) -> list[dict[str, str]]:
    """Merge tags into an existing TagSet.

    Same-key tags are overwritten in place (keeping their position), new
    keys are appended in the order given.

    Returns:
        A new TagSet list; ``existing`` is not modified.
    """
    merged = [dict(tag) for tag in existing]
    index = {tag["Key"]: tag for tag in merged}
    for key, value in tags.items():
        if key in index:
            index[key]["Value"] = value
        else:
            tag = {"Key": key, "Value": value}
            merged.append(tag)
            index[key] = tag
    return merged


def get_bucket_tags(client: Any, bucket: str) -> list[dict[str, str]]:
    """Fetch a bucket's TagSet, treating "no tags" as an empty set."""
    try:
        response = client.get_bucket_tagging(Bucket=bucket)
    except ClientError as e:
        if e.response.get("Error", {}).get("Code") == NO_SUCH_TAG_SET:
            return []
        raise
    return list(response.get("TagSet") or [])


def update_bucket_tags(client: Any, bucket: str, tags: Mapping[str, Any]) -> list[dict[str, str]]:
    """Merge configured tags into a bucket's tags and write them back.

    Tags whose configured value is empty are dropped before merging.

    Returns:
        The TagSet that was written.
    """
    to_update = {str(key): str(value) for key, value in tags.items() if value}
    existing = get_bucket_tags(client, bucket)
    merged = merge_tags(existing, to_update)

    client.put_bucket_tagging(Bucket=bucket, Tagging={"TagSet": merged})
    logger.info(f"Updated {len(to_update)} tag(s) on bucket {bucket}")
    return merged
