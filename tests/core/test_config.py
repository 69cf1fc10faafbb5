"""Tests for configuration parsing."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from s3ferry.core.config import (
    FerryOptions,
    ParamRule,
    SyncTarget,
    build_param_rules,
    config_from_raw,
    get_bucket_configs,
    get_no_sync,
    load_config,
    normalize_prefix,
    parse_bucket_config,
)
from s3ferry.core.errors import ConfigValidationError


class TestNormalizePrefix:
    """Tests for normalize_prefix()."""

    @pytest.mark.parametrize(
        ("prefix", "expected"),
        [
            (None, ""),
            ("", ""),
            ("/", ""),
            ("assets", "assets/"),
            ("assets/", "assets/"),
            ("/assets/v1//", "assets/v1/"),
            ("assets\\v1", "assets/v1/"),
        ],
    )
    def test_normalize(self, prefix: str | None, expected: str) -> None:
        """Should produce an empty prefix or one ending in a single slash."""
        assert normalize_prefix(prefix) == expected


class TestGetBucketConfigs:
    """Tests for get_bucket_configs()."""

    def test_array_form(self) -> None:
        """A plain list is the list of buckets."""
        raw = [{"bucketName": "a", "localDir": "dist"}]
        assert get_bucket_configs(raw) == raw

    def test_object_form(self) -> None:
        """An object with a buckets key holds the list of buckets."""
        raw = {"buckets": [{"bucketName": "a", "localDir": "dist"}], "noSync": True}
        assert get_bucket_configs(raw) == raw["buckets"]

    @pytest.mark.parametrize("raw", [None, [], {}, {"endpoint": "http://x"}, "nope"])
    def test_no_buckets(self, raw: object) -> None:
        """Anything else means there is no configuration."""
        assert get_bucket_configs(raw) is None


class TestGetNoSync:
    """Tests for get_no_sync()."""

    def test_option_wins(self) -> None:
        """The command-line option always disables sync."""
        assert get_no_sync([{"bucketName": "a"}], option_no_sync=True) is True

    @pytest.mark.parametrize(("value", "expected"), [(True, True), ("true", True), ("TRUE", True), ("false", False), (False, False)])
    def test_config_value(self, value: object, expected: bool) -> None:
        """noSync accepts booleans and the string 'true' in any case."""
        assert get_no_sync({"buckets": [], "noSync": value}) is expected

    def test_array_form_never_disables(self) -> None:
        """The array form has nowhere to put noSync."""
        assert get_no_sync([{"bucketName": "a"}]) is False


class TestBuildParamRules:
    """Tests for build_param_rules()."""

    def test_builds_rules_in_order(self) -> None:
        """Each entry becomes one rule keyed by its glob."""
        rules = build_param_rules(
            [
                {"*.html": {"CacheControl": "no-cache"}},
                {"**/*.js": {"CacheControl": "max-age=60", "OnlyForStage": "prod"}},
            ]
        )
        assert rules == (
            ParamRule("*.html", {"CacheControl": "no-cache"}),
            ParamRule("**/*.js", {"CacheControl": "max-age=60", "OnlyForStage": "prod"}),
        )

    def test_skips_empty_entries(self) -> None:
        """Entries without a glob are dropped."""
        assert build_param_rules([{}]) == ()

    def test_rejects_non_mapping_params(self) -> None:
        """A glob must map to a parameter object."""
        with pytest.raises(ConfigValidationError):
            build_param_rules([{"*.html": "no-cache"}])


class TestParseBucketConfig:
    """Tests for parse_bucket_config()."""

    def test_defaults(self) -> None:
        """Optional fields get explicit defaults."""
        target = parse_bucket_config({"bucketName": "site", "localDir": "dist"})

        assert target == SyncTarget(local_dir="dist", bucket_name="site")
        assert target.acl == "private"
        assert target.delete_removed is True
        assert target.enabled is True
        assert target.bucket_prefix == ""
        assert target.params == ()

    def test_full_entry(self) -> None:
        """All supported fields are carried over and normalized."""
        target = parse_bucket_config(
            {
                "bucketNameKey": "SiteBucket",
                "localDir": "dist",
                "bucketPrefix": "/assets",
                "acl": "public-read",
                "deleteRemoved": False,
                "enabled": "false",
                "defaultContentType": "text/plain",
                "preCommand": "make build",
                "params": [{"*.html": {"CacheControl": "no-cache"}}],
                "bucketTags": {"team": "web"},
            }
        )

        assert target.bucket_name is None
        assert target.bucket_name_key == "SiteBucket"
        assert target.bucket_prefix == "assets/"
        assert target.acl == "public-read"
        assert target.delete_removed is False
        assert target.enabled is False
        assert target.default_content_type == "text/plain"
        assert target.pre_command == "make build"
        assert target.params == (ParamRule("*.html", {"CacheControl": "no-cache"}),)
        assert target.bucket_tags == {"team": "web"}
        assert target.label == "SiteBucket"

    @pytest.mark.parametrize(
        "raw",
        [
            {"localDir": "dist"},
            {"bucketName": "site"},
            {"bucketName": "", "bucketNameKey": "", "localDir": "dist"},
        ],
    )
    def test_missing_identity(self, raw: dict[str, str]) -> None:
        """A bucket identity and a local dir are required."""
        with pytest.raises(ConfigValidationError, match="bucketName or bucketNameKey"):
            parse_bucket_config(raw)

    def test_rejects_non_mapping_tags(self) -> None:
        """bucketTags must be an object."""
        with pytest.raises(ConfigValidationError, match="bucketTags"):
            parse_bucket_config({"bucketName": "a", "localDir": "d", "bucketTags": ["x"]})


class TestLoadConfig:
    """Tests for load_config()."""

    def test_loads_object_form(self, tmp_path: Path) -> None:
        """Should read buckets, endpoint and noSync."""
        path = tmp_path / "s3ferry.json"
        path.write_text(
            json.dumps(
                {
                    "buckets": [{"bucketName": "site", "localDir": "dist"}],
                    "endpoint": "http://localhost:4569",
                    "noSync": "true",
                }
            )
        )

        config = load_config(path)

        assert config.buckets == ({"bucketName": "site", "localDir": "dist"},)
        assert config.endpoint == "http://localhost:4569"
        assert config.no_sync is True

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file is a configuration error."""
        with pytest.raises(ConfigValidationError, match="not found"):
            load_config(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Malformed JSON is a configuration error."""
        path = tmp_path / "s3ferry.json"
        path.write_text("{not json")

        with pytest.raises(ConfigValidationError, match="Cannot read"):
            load_config(path)

    def test_no_buckets(self) -> None:
        """A document without buckets yields an empty bucket list."""
        assert config_from_raw({"endpoint": "http://x"}).buckets == ()


class TestFerryOptions:
    """Tests for FerryOptions defaults."""

    def test_defaults(self) -> None:
        """Should default to five concurrent operations and no filters."""
        options = FerryOptions()
        assert options.max_concurrency == 5
        assert options.bucket is None
        assert options.stage is None
        assert options.offline is False
