"""Storage module - S3 and CloudFormation operations."""

from s3ferry.storage.client import create_cloudformation_client, create_s3_client, create_session
from s3ferry.storage.copy import copy_object_with_metadata
from s3ferry.storage.delete import delete_directory, delete_objects_by_keys
from s3ferry.storage.listing import iter_objects
from s3ferry.storage.stack_output import resolve_stack_output
from s3ferry.storage.tags import update_bucket_tags

__all__ = [
    "copy_object_with_metadata",
    "create_cloudformation_client",
    "create_s3_client",
    "create_session",
    "delete_directory",
    "delete_objects_by_keys",
    "iter_objects",
    "resolve_stack_output",
    "update_bucket_tags",
]
