"""s3ferry - Sync local directories to S3 buckets."""

__version__ = "0.1.0"
