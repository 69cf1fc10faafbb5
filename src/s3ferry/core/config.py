"""Configuration classes and parsing for s3ferry.

Raw configuration (a JSON document, or the equivalent mapping) is parsed
once into frozen dataclasses. Everything past this module works with
SyncTarget / ParamRule / FerryOptions only.

Accepted shapes:

    [ {bucket entry}, ... ]

    {
        "buckets": [ {bucket entry}, ... ],
        "endpoint": "http://localhost:4569",
        "noSync": false
    }

A bucket entry:

    {
        "bucketName": "my-site",            # or "bucketNameKey": "SiteBucketOutput"
        "localDir": "dist",
        "bucketPrefix": "assets/",
        "acl": "public-read",
        "deleteRemoved": true,
        "enabled": true,
        "defaultContentType": "text/plain",
        "preCommand": "npm run build",
        "params": [
            {"*.html": {"CacheControl": "no-cache"}},
            {"**/*.js": {"CacheControl": "max-age=31536000", "OnlyForStage": "prod"}}
        ],
        "bucketTags": {"team": "web"}
    }
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from s3ferry.core.errors import ConfigValidationError

# Concurrency
DEFAULT_MAX_CONCURRENCY = 5

# S3 limits and defaults
S3_DELETE_BATCH_SIZE = 1000
S3_MAX_SIMPLE_COPY_SIZE = 5 * 1024 * 1024 * 1024  # 5 GiB
S3_MULTIPART_COPY_PART_SIZE = 500 * 1024 * 1024  # 500 MiB
S3_MULTIPART_UPLOAD_PART_SIZE = 5 * 1024 * 1024  # 5 MiB
S3_MULTIPART_UPLOAD_CONCURRENCY = 4
S3_COPY_METADATA_DIRECTIVE = "REPLACE"

# Client configuration
AWS_RETRY_MODE = "adaptive"
AWS_MAX_ATTEMPTS = 5

DEFAULT_PRE_COMMAND_TIMEOUT = 120.0  # seconds
DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_ACL = "private"
DEFAULT_CONFIG_FILE = "s3ferry.json"
OFFLINE_ENV_VAR = "IS_OFFLINE"
ONLY_FOR_STAGE_KEY = "OnlyForStage"
IGNORED_FILE_NAMES = frozenset({".DS_Store"})


@dataclass(frozen=True)
class ParamRule:
    """A glob pattern and the object parameters it attaches.

    Attributes:
        glob: Pattern matched against the path relative to the sync root.
        params: S3 request parameters (e.g. CacheControl, ContentEncoding,
            Metadata) plus the optional OnlyForStage restriction.
    """

    glob: str
    params: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SyncTarget:
    """A single directory-to-bucket sync target.

    Exactly one of bucket_name / bucket_name_key must be set (a direct
    name wins when both are present).
    """

    local_dir: str
    bucket_name: str | None = None
    bucket_name_key: str | None = None
    bucket_prefix: str = ""
    acl: str = DEFAULT_ACL
    enabled: bool = True
    delete_removed: bool = True
    default_content_type: str | None = None
    pre_command: str | None = None
    params: tuple[ParamRule, ...] = ()
    bucket_tags: Mapping[str, str] | None = None

    @property
    def label(self) -> str:
        """Human-readable name for logs and error reports."""
        return self.bucket_name or self.bucket_name_key or self.local_dir


@dataclass(frozen=True)
class FerryOptions:
    """Options of a single s3ferry invocation.

    Attributes:
        service_path: Directory that local_dir and pre-commands are relative to.
        stage: Active stage, compared against OnlyForStage rules.
        bucket: Only sync the target whose resolved bucket name matches.
        offline: Talk to the configured local endpoint instead of AWS.
        no_sync: Skip the automatic lifecycle steps.
        profile: AWS profile for the boto3 session.
        region: AWS region for the boto3 session.
        stack_name: Stack used to resolve bucketNameKey outputs.
        max_concurrency: Per-target bound on in-flight object operations.
    """

    service_path: Path = field(default_factory=Path.cwd)
    stage: str | None = None
    bucket: str | None = None
    offline: bool = False
    no_sync: bool = False
    profile: str | None = None
    region: str | None = None
    stack_name: str | None = None
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY


@dataclass(frozen=True)
class FerryConfig:
    """Top-level configuration document."""

    buckets: tuple[Mapping[str, Any], ...] = ()
    endpoint: str | None = None
    no_sync: bool = False


def normalize_prefix(prefix: str | None) -> str:
    """Normalize a bucket prefix to ``""`` or ``"some/path/"``.

    Leading slashes are dropped and exactly one trailing slash is kept, so
    ``prefix + relative_path`` always yields a key inside the prefix
    "directory" and listing the prefix never picks up sibling prefixes.
    """
    if not prefix:
        return ""
    cleaned = prefix.replace("\\", "/").strip("/")
    return f"{cleaned}/" if cleaned else ""


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().upper() == "TRUE"
    return bool(value)


def get_bucket_configs(raw: Any) -> list[Mapping[str, Any]] | None:
    """Return the list of raw bucket entries, or None if there is none.

    Supports both the array form and the object form with a ``buckets`` key.
    """
    if not raw:
        return None
    if isinstance(raw, list):
        return raw
    if isinstance(raw, Mapping) and isinstance(raw.get("buckets"), list):
        return list(raw["buckets"])
    return None


def get_no_sync(raw: Any, option_no_sync: bool = False) -> bool:
    """Check whether the automatic lifecycle sync should be skipped."""
    if option_no_sync:
        return True
    if not raw or isinstance(raw, list) or not isinstance(raw, Mapping):
        return False
    return _truthy(raw.get("noSync", False))


def get_endpoint(raw: Any) -> str | None:
    """Get the custom S3 endpoint used in offline mode, if any."""
    if not raw or not isinstance(raw, Mapping):
        return None
    endpoint = raw.get("endpoint")
    return str(endpoint) if endpoint else None


def extract_meta_params(entry: Mapping[str, Any]) -> dict[str, Any]:
    """Merge every value of a param entry into a single parameter map."""
    params: dict[str, Any] = {}
    for value in entry.values():
        if not isinstance(value, Mapping):
            raise ConfigValidationError(
                f"Invalid params entry {dict(entry)!r}: values must be mappings"
            )
        params.update(value)
    return params


def build_param_rules(entries: Sequence[Mapping[str, Any]] | None) -> tuple[ParamRule, ...]:
    """Transform raw ``[{glob: params}, ...]`` entries into ParamRules.

    The first key of each entry is its glob. Entries without any key are
    dropped.
    """
    rules: list[ParamRule] = []
    for entry in entries or []:
        if not isinstance(entry, Mapping):
            raise ConfigValidationError(f"Invalid params entry: {entry!r}")
        glob = next(iter(entry), None)
        if not glob:
            continue
        rules.append(ParamRule(glob=glob, params=extract_meta_params(entry)))
    return tuple(rules)


def parse_bucket_config(raw: Mapping[str, Any]) -> SyncTarget:
    """Validate and normalize a single raw bucket entry.

    Raises:
        ConfigValidationError: If required fields are missing.
    """
    if not isinstance(raw, Mapping):
        raise ConfigValidationError(f"Invalid bucket entry: {raw!r}")
    if not (raw.get("bucketName") or raw.get("bucketNameKey")) or not raw.get("localDir"):
        raise ConfigValidationError(
            "Invalid s3ferry configuration: each bucket entry must have "
            "(bucketName or bucketNameKey) and localDir"
        )

    tags = raw.get("bucketTags")
    if tags is not None and not isinstance(tags, Mapping):
        raise ConfigValidationError(f"bucketTags must be a mapping, got {tags!r}")

    return SyncTarget(
        bucket_name=raw.get("bucketName"),
        bucket_name_key=raw.get("bucketNameKey"),
        local_dir=str(raw["localDir"]),
        bucket_prefix=normalize_prefix(raw.get("bucketPrefix")),
        acl=raw.get("acl") or DEFAULT_ACL,
        enabled=_truthy(raw.get("enabled", True)),
        delete_removed=_truthy(raw.get("deleteRemoved", True)),
        default_content_type=raw.get("defaultContentType"),
        pre_command=raw.get("preCommand"),
        params=build_param_rules(raw.get("params")),
        bucket_tags=dict(tags) if tags is not None else None,
    )


def load_config(path: Path | str) -> FerryConfig:
    """Load and validate a configuration file.

    Args:
        path: Path to a JSON configuration file.

    Returns:
        Parsed FerryConfig (bucket entries stay raw until each target is run).

    Raises:
        ConfigValidationError: If the file is missing, unreadable or malformed.
    """
    config_file = Path(path)
    try:
        raw = json.loads(config_file.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigValidationError(f"Configuration file not found: {config_file}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigValidationError(f"Cannot read configuration file {config_file}: {e}") from e

    return config_from_raw(raw)


def config_from_raw(raw: Any) -> FerryConfig:
    """Build a FerryConfig from an already-decoded document.

    A document without bucket entries yields an empty ``buckets`` tuple;
    callers decide whether that is an error.
    """
    return FerryConfig(
        buckets=tuple(get_bucket_configs(raw) or ()),
        endpoint=get_endpoint(raw),
        no_sync=get_no_sync(raw),
    )
