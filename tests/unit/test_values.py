"""
Tests for structured values and config getters.
"""

import pytest

from datagraph.core.errors import InvalidStateError
from datagraph.core.values import check_structured, config_int, config_str, to_text


class TestCheckStructured:

    @pytest.mark.parametrize("value", [None, True, 3, 2.5, "s", [1, "a"], {"a": {"b": [None]}}])
    def test_accepts_structured_values(self, value):
        check_structured(value)

    def test_rejects_non_string_keys(self):
        with pytest.raises(ValueError, match="non-string key"):
            check_structured({1: "a"}, "config")

    def test_reports_nested_path(self):
        with pytest.raises(ValueError, match=r"config\.rows\[1\]"):
            check_structured({"rows": [1, object()]}, "config")


class TestToText:

    def test_strings_pass_through(self):
        assert to_text('already "text"') == 'already "text"'

    def test_structures_become_compact_json(self):
        assert to_text({"a": [1, 2]}) == '{"a":[1,2]}'

    def test_scalars(self):
        assert to_text(42) == "42"
        assert to_text(False) == "false"
        assert to_text(None) == "null"

    def test_non_ascii_preserved(self):
        assert to_text(["é"]) == '["é"]'


class TestConfigGetters:

    def test_config_str(self):
        assert config_str({"mode": "x"}, "mode") == "x"
        assert config_str({}, "mode") is None
        assert config_str({}, "mode", "fallback") == "fallback"

    def test_config_str_wrong_type(self):
        with pytest.raises(InvalidStateError, match="config.mode must be a string"):
            config_str({"mode": 3}, "mode")

    def test_config_int(self):
        assert config_int({"n": 5}, "n") == 5
        assert config_int({}, "n", 3) == 3

    def test_config_int_rejects_bool(self):
        with pytest.raises(InvalidStateError):
            config_int({"n": True}, "n")
