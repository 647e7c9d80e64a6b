# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for configuration key construction and parsing."""

import pytest

from logcontrol.keys import (
    ConfigType,
    MalformedKeyError,
    build_key,
    build_leaf_key,
    key_to_package,
    package_to_key,
    parse_watch_key,
)


class TestBuildKey:
    """Tests for build_key and build_leaf_key."""

    def test_config_type_strings(self):
        """Test that config types stringify to their key segments."""
        assert str(ConfigType.LOG_LEVEL) == "loglevel"
        assert str(ConfigType.KAFKA) == "kafka"

    def test_build_subtree_root(self):
        """Test the subtree root layout."""
        assert build_key("config/", "adapter", ConfigType.LOG_LEVEL) == "config/adapter/loglevel"

    def test_build_leaf(self):
        """Test the leaf key layout."""
        key = build_leaf_key("config/", "global", ConfigType.LOG_LEVEL, "default")
        assert key == "config/global/loglevel/default"

    def test_types_do_not_collide(self):
        """Test that different config types give different keys."""
        assert build_key("config/", "a", ConfigType.LOG_LEVEL) != build_key("config/", "a", ConfigType.KAFKA)


class TestParseWatchKey:
    """Tests for parse_watch_key."""

    @pytest.mark.parametrize("label", ["global", "adapter", "rw-core", "a.b"])
    def test_round_trip_subtree_root(self, label):
        """Test that a subtree root parses to an empty leaf and its owner."""
        key = build_key("config/", label, ConfigType.LOG_LEVEL)
        assert parse_watch_key("config/", ConfigType.LOG_LEVEL, key) == ("", label)

    @pytest.mark.parametrize("leaf", ["default", "pkgA", "github.com#opencord#voltha"])
    def test_round_trip_leaf(self, leaf):
        """Test that an appended leaf is recovered exactly."""
        key = build_leaf_key("config/", "adapter", ConfigType.LOG_LEVEL, leaf)
        assert parse_watch_key("config/", ConfigType.LOG_LEVEL, key) == (leaf, "adapter")

    def test_backend_path_prefix_is_tolerated(self):
        """Test that a store path prefix before the config prefix is skipped."""
        raw = "service/voltha/config/adapter/loglevel/pkgA"
        assert parse_watch_key("config/", ConfigType.LOG_LEVEL, raw) == ("pkgA", "adapter")

    def test_empty_prefix(self):
        """Test parsing with an empty prefix."""
        assert parse_watch_key("", ConfigType.KAFKA, "adapter/kafka/broker") == ("broker", "adapter")

    def test_missing_prefix(self):
        """Test that a key without the prefix is rejected."""
        with pytest.raises(MalformedKeyError, match="prefix"):
            parse_watch_key("config/", ConfigType.LOG_LEVEL, "other/adapter/loglevel/pkgA")

    def test_wrong_config_type(self):
        """Test that a key of another config type is rejected."""
        with pytest.raises(MalformedKeyError):
            parse_watch_key("config/", ConfigType.LOG_LEVEL, "config/adapter/kafka/broker")

    def test_missing_config_type(self):
        """Test that a key with only a component segment is rejected."""
        with pytest.raises(MalformedKeyError):
            parse_watch_key("config/", ConfigType.LOG_LEVEL, "config/adapter")

    def test_config_type_as_substring_is_rejected(self):
        """Test that a segment merely starting with the type name is rejected."""
        with pytest.raises(MalformedKeyError):
            parse_watch_key("config/", ConfigType.LOG_LEVEL, "config/adapter/loglevelX/pkgA")

    def test_empty_component(self):
        """Test that an empty component segment is rejected."""
        with pytest.raises(MalformedKeyError, match="empty component"):
            parse_watch_key("config/", ConfigType.LOG_LEVEL, "config//loglevel/pkgA")

    def test_repeated_delimiter_before_type(self):
        """Test that a doubled separator between component and type is rejected."""
        with pytest.raises(MalformedKeyError):
            parse_watch_key("config/", ConfigType.LOG_LEVEL, "config/adapter//loglevel/pkgA")

    def test_trailing_separator_without_leaf(self):
        """Test that a trailing separator with no leaf is rejected."""
        with pytest.raises(MalformedKeyError, match="leaf"):
            parse_watch_key("config/", ConfigType.LOG_LEVEL, "config/adapter/loglevel/")

    def test_repeated_delimiter_before_leaf(self):
        """Test that a doubled separator before the leaf is rejected."""
        with pytest.raises(MalformedKeyError):
            parse_watch_key("config/", ConfigType.LOG_LEVEL, "config/adapter/loglevel//pkgA")

    def test_nested_leaf(self):
        """Test that a leaf with more than one segment is rejected."""
        with pytest.raises(MalformedKeyError):
            parse_watch_key("config/", ConfigType.LOG_LEVEL, "config/adapter/loglevel/a/b")

    def test_malformed_key_is_value_error(self):
        """Test that MalformedKeyError can be handled as ValueError."""
        with pytest.raises(ValueError):
            parse_watch_key("config/", ConfigType.LOG_LEVEL, "")


class TestPackageKeys:
    """Tests for package name substitution."""

    def test_separator_replaced(self):
        """Test that package separators are made key-safe."""
        assert package_to_key("github.com/opencord/voltha") == "github.com#opencord#voltha"

    def test_placeholder_restored(self):
        """Test that the placeholder maps back to the separator."""
        assert key_to_package("github.com#opencord#voltha") == "github.com/opencord/voltha"

    def test_plain_names_unchanged(self):
        """Test that dotted Python package names pass through."""
        assert package_to_key("logcontrol.controller") == "logcontrol.controller"
        assert key_to_package("default") == "default"
