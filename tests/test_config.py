"""tests for configuration management."""

import json
from unittest.mock import patch

from hashstatic.config import (
    Config, DEFAULTS, IMMUTABLE_CACHE_CONTROL,
    load_project, load_config, list_config,
    _env_overrides,
)


def _write_project(root, config: dict):
    (root / ".hashstatic.json").write_text(json.dumps(config))


class TestConfig:

    def test_defaults(self):
        c = Config()
        assert c.get("root") == DEFAULTS["root"]
        assert c.get("cache_control") == IMMUTABLE_CACHE_CONTROL

    def test_override(self):
        c = Config(values={"port": 9000})
        assert c.get("port") == 9000

    def test_missing_key(self):
        c = Config()
        assert c.get("nonexistent", "fallback") == "fallback"

    def test_contains(self):
        c = Config()
        assert "root" in c
        assert "nonexistent" not in c

    def test_getitem(self):
        c = Config(values={"host": "0.0.0.0"})
        assert c["host"] == "0.0.0.0"

    def test_to_dict(self):
        c = Config(values={"root": "public"})
        d = c.to_dict()
        assert d["root"] == "public"
        assert "port" in d  # defaults included


class TestProjectConfig:

    def test_load_missing(self, tmp_path):
        assert load_project(str(tmp_path)) == {}

    def test_load(self, tmp_path):
        _write_project(tmp_path, {"root": "public"})
        assert load_project(str(tmp_path)) == {"root": "public"}

    def test_corrupt_file(self, tmp_path):
        (tmp_path / ".hashstatic.json").write_text("{not json")
        assert load_project(str(tmp_path)) == {}

    def test_non_object(self, tmp_path):
        (tmp_path / ".hashstatic.json").write_text(json.dumps(["a"]))
        assert load_project(str(tmp_path)) == {}


class TestLoadConfig:

    def test_defaults_only(self, tmp_path):
        with patch.dict("os.environ", {}, clear=True):
            c = load_config(str(tmp_path))
        assert c.source == "defaults"
        assert c["port"] == DEFAULTS["port"]

    def test_project_layer(self, tmp_path):
        _write_project(tmp_path, {"port": 9000})
        with patch.dict("os.environ", {}, clear=True):
            c = load_config(str(tmp_path))
        assert c.source == "project"
        assert c["port"] == 9000

    def test_env_wins(self, tmp_path):
        _write_project(tmp_path, {"port": 9000})
        with patch.dict("os.environ", {"HASHSTATIC_PORT": "9100"}, clear=True):
            c = load_config(str(tmp_path))
        assert c.source == "env"
        assert c["port"] == 9100


class TestEnvOverrides:

    def test_int_coercion(self):
        with patch.dict("os.environ", {"HASHSTATIC_WORKERS": "4"}, clear=True):
            assert _env_overrides() == {"workers": 4}

    def test_bad_int_ignored(self):
        with patch.dict("os.environ", {"HASHSTATIC_PORT": "http"}, clear=True):
            assert _env_overrides() == {}

    def test_strings(self):
        env = {"HASHSTATIC_ROOT": "/srv/assets", "HASHSTATIC_CACHE_CONTROL": "no-cache"}
        with patch.dict("os.environ", env, clear=True):
            assert _env_overrides() == {"root": "/srv/assets", "cache_control": "no-cache"}


class TestListConfig:

    def test_sources(self, tmp_path):
        _write_project(tmp_path, {"root": "public"})
        with patch.dict("os.environ", {"HASHSTATIC_HOST": "0.0.0.0"}, clear=True):
            result = list_config(str(tmp_path))
        assert result["root"] == {"value": "public", "source": "project"}
        assert result["host"] == {"value": "0.0.0.0", "source": "env"}
        assert result["port"]["source"] == "default"
