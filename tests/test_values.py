# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for stored value encoding."""

import pytest

from logcontrol.values import decode_level_value, encode_value


class TestDecodeLevelValue:
    """Tests for decode_level_value."""

    @pytest.mark.parametrize(
        "raw",
        [
            "DEBUG",
            '"DEBUG"',
            b'"DEBUG"',
            bytearray(b'"DEBUG"'),
            '"\\"DEBUG\\""',
            ' "DEBUG" ',
            '\\"DEBUG\\"',
        ],
    )
    def test_wrappings_are_stripped(self, raw):
        """Test that quoting and encoding variants decode to the bare level."""
        assert decode_level_value(raw) == "DEBUG"

    def test_encoded_value_decodes(self):
        """Test that values written by encode_value are read back."""
        assert encode_value("WARN") == '"WARN"'
        assert decode_level_value(encode_value("WARN")) == "WARN"

    def test_none_and_empty(self):
        """Test that missing payloads decode to an empty string."""
        assert decode_level_value(None) == ""
        assert decode_level_value(b"") == ""

    def test_non_string_json(self):
        """Test that non-string JSON is stringified."""
        assert decode_level_value("10") == "10"

    def test_deeply_nested_payload(self):
        """Test that a payload too deep to parse is returned as text."""
        raw = "[" * 100000 + "]" * 100000

        assert decode_level_value(raw) == raw
