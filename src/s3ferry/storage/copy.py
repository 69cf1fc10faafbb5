"""In-place object copies that replace metadata.

Objects below S3_MAX_SIMPLE_COPY_SIZE are copied onto themselves with one
CopyObject call. Larger objects go through a multipart copy: parts of
S3_MULTIPART_COPY_PART_SIZE bytes are copied in order with UploadPartCopy,
and the multipart upload is aborted if any step fails.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from s3ferry.core.config import (
    S3_COPY_METADATA_DIRECTIVE,
    S3_MAX_SIMPLE_COPY_SIZE,
    S3_MULTIPART_COPY_PART_SIZE,
)

logger = logging.getLogger(__name__)


def iter_part_ranges(size: int, part_size: int = S3_MULTIPART_COPY_PART_SIZE) -> Iterator[tuple[int, int, int]]:
    """Yield (part_number, first_byte, last_byte) covering ``size`` bytes.

    Part numbers start at 1; the last range is truncated to the object size.
    """
    if part_size <= 0:
        raise ValueError("part_size must be positive")
    part_number = 1
    for start in range(0, size, part_size):
        yield part_number, start, min(start + part_size, size) - 1
        part_number += 1


def get_object_size(client: Any, bucket: str, key: str) -> int:
    """Return the size of an existing object."""
    response = client.head_object(Bucket=bucket, Key=key)
    return int(response["ContentLength"])


def copy_object_with_metadata(
    client: Any,
    bucket: str,
    key: str,
    acl: str,
    content_type: str | None = None,
    extra_params: Mapping[str, Any] | None = None,
    size: int | None = None,
) -> None:
    """Copy an object onto itself, replacing its metadata.

    Args:
        client: boto3 S3 client.
        bucket: Bucket name.
        key: Object key (source and destination).
        acl: Canned ACL for the copy.
        content_type: Content-Type to set.
        extra_params: Additional request parameters (CacheControl, Metadata, ...).
        size: Known object size; looked up with HeadObject when omitted.
    """
    if size is None:
        size = get_object_size(client, bucket, key)

    if size < S3_MAX_SIMPLE_COPY_SIZE:
        _simple_copy(client, bucket, key, acl, content_type, extra_params or {})
    else:
        multipart_copy(client, bucket, key, size, acl, content_type, extra_params or {})


def _request_params(
    acl: str, content_type: str | None, extra_params: Mapping[str, Any]
) -> dict[str, Any]:
    # Configured params may override the ACL and content type
    params: dict[str, Any] = {"ACL": acl}
    if content_type:
        params["ContentType"] = content_type
    params.update(extra_params)
    return params


def _simple_copy(
    client: Any,
    bucket: str,
    key: str,
    acl: str,
    content_type: str | None,
    extra_params: Mapping[str, Any],
) -> None:
    params = _request_params(acl, content_type, extra_params)
    params.update(
        Bucket=bucket,
        Key=key,
        CopySource={"Bucket": bucket, "Key": key},
        MetadataDirective=S3_COPY_METADATA_DIRECTIVE,
    )

    client.copy_object(**params)
    logger.debug(f"Replaced metadata of s3://{bucket}/{key}")


def multipart_copy(
    client: Any,
    bucket: str,
    key: str,
    size: int,
    acl: str,
    content_type: str | None = None,
    extra_params: Mapping[str, Any] | None = None,
    part_size: int = S3_MULTIPART_COPY_PART_SIZE,
) -> None:
    """Copy a large object onto itself part by part with new metadata.

    Raises:
        Exception: Whatever the failing call raised, after the multipart
            upload has been aborted.
    """
    create_params = _request_params(acl, content_type, extra_params or {})
    create_params.update(Bucket=bucket, Key=key)

    upload_id = client.create_multipart_upload(**create_params)["UploadId"]
    logger.info(f"Started multipart copy of s3://{bucket}/{key} ({size} bytes)")

    try:
        parts: list[dict[str, Any]] = []
        for part_number, first, last in iter_part_ranges(size, part_size):
            response = client.upload_part_copy(
                Bucket=bucket,
                Key=key,
                UploadId=upload_id,
                PartNumber=part_number,
                CopySource={"Bucket": bucket, "Key": key},
                CopySourceRange=f"bytes={first}-{last}",
            )
            parts.append({"ETag": response["CopyPartResult"]["ETag"], "PartNumber": part_number})

        client.complete_multipart_upload(
            Bucket=bucket,
            Key=key,
            UploadId=upload_id,
            MultipartUpload={"Parts": parts},
        )
    except Exception:
        logger.error(f"Multipart copy of s3://{bucket}/{key} failed, aborting upload {upload_id}")
        try:
            client.abort_multipart_upload(Bucket=bucket, Key=key, UploadId=upload_id)
        except Exception:
            logger.exception(f"Failed to abort multipart upload {upload_id} for s3://{bucket}/{key}")
        raise

    logger.info(f"Completed multipart copy of s3://{bucket}/{key} in {len(parts)} part(s)")
