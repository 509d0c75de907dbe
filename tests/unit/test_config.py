"""
Tests for service configuration loading.
"""

import json
import logging
from pathlib import Path

import pytest

from datagraph.config import ServiceConfig


class TestServiceConfig:

    def test_defaults(self):
        config = ServiceConfig()
        assert config.port == 8080
        assert config.stage == "dev"
        assert config.store == "memory"
        assert config.resolve_timeout is None
        assert not config.is_production
        assert config.logging_level() == logging.INFO

    def test_validation(self):
        with pytest.raises(ValueError, match="port"):
            ServiceConfig(port=0)
        with pytest.raises(ValueError, match="store must be one of"):
            ServiceConfig(store="redis")
        with pytest.raises(ValueError, match="store_url is required"):
            ServiceConfig(store="http")
        with pytest.raises(ValueError, match="resolve_timeout"):
            ServiceConfig(resolve_timeout=0)
        with pytest.raises(ValueError, match="log_level"):
            ServiceConfig(log_level="loud")

    def test_log_level_is_normalized(self):
        assert ServiceConfig(log_level="debug").log_level == "DEBUG"

    def test_from_dict_accepts_camel_case_and_ignores_unknown(self):
        config = ServiceConfig.from_dict({
            "stage": "prod",
            "resolveTimeout": 2.5,
            "snapshotPath": "graph.json",
            "color": "blue",
        })
        assert config.is_production
        assert config.resolve_timeout == 2.5
        assert config.snapshot_path == Path("graph.json")

    def test_to_dict_round_trip(self):
        config = ServiceConfig(store="http", store_url="http://store:8080", port=9000)
        assert ServiceConfig.from_dict(config.to_dict()) == config


class TestLoad:

    def test_file_then_environment(self, tmp_path):
        path = tmp_path / "datagraph.json"
        path.write_text(json.dumps({"port": 9000, "stage": "staging"}), encoding="utf-8")

        config = ServiceConfig.load(path, environ={
            "DATAGRAPH_STAGE": "prod",
            "DATAGRAPH_RESOLVE_TIMEOUT": "1.5",
            "UNRELATED": "x",
        })

        assert config.port == 9000
        assert config.stage == "prod"
        assert config.resolve_timeout == 1.5

    def test_environment_only(self):
        config = ServiceConfig.load(environ={
            "DATAGRAPH_STORE": "http",
            "DATAGRAPH_STORE_URL": "http://store:8080",
            "DATAGRAPH_PORT": "8181",
        })
        assert config.store == "http"
        assert config.port == 8181

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ServiceConfig.load(tmp_path / "absent.json", environ={})

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("[1,", encoding="utf-8")
        with pytest.raises(ValueError, match="Failed to parse config"):
            ServiceConfig.load(path, environ={})

    def test_non_object_config(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid config format"):
            ServiceConfig.load(path, environ={})

    def test_bad_numeric_override(self):
        with pytest.raises(ValueError, match="Invalid numeric setting"):
            ServiceConfig.load(environ={"DATAGRAPH_PORT": "eighty"})
