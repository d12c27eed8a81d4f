"""
Configuration (config.py)

Tests AppConfig loaders, typed accessors and feature flags.
"""

import pytest

from modulary.config import AppConfig, ConfigError, DefaultAppConfig, parse_bool
from modulary.testing import StaticAppConfig


# ============================================================================
# Loading
# ============================================================================

class TestLoading:

    def test_load_env_file(self, tmp_path):
        env = tmp_path / "app.env"
        env.write_text('API_BASE_URL=https://api.example.com\nAPP_NAME="Demo App"\nDEBUG=true\n')
        config = DefaultAppConfig()
        assert config.load_env_file(str(env)) is True
        assert config.api_base_url == "https://api.example.com"
        assert config.app_name == "Demo App"
        assert config.is_debug_mode is True

    def test_env_file_fallback(self, tmp_path):
        fallback = tmp_path / ".env"
        fallback.write_text("APP_NAME=fallback\n")
        config = DefaultAppConfig()
        assert config.load_env_file(str(tmp_path / "missing.env"), fallback=str(fallback))
        assert config.app_name == "fallback"

    def test_env_file_missing_continues(self, tmp_path):
        config = DefaultAppConfig()
        assert config.load_env_file(str(tmp_path / "nope.env"), fallback=None) is False
        assert config.app_name == "Modulary App"

    def test_load_test_environment(self):
        config = DefaultAppConfig()
        config.load_test_environment("APP_NAME=from-text\n# comment\nDEBUG=1\n")
        assert config.app_name == "from-text"
        assert config.is_debug_mode is True

    def test_load_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "app_name: yaml-app\n"
            "api:\n"
            "  base_url: https://yaml.example.com\n"
            "  timeout: 2.5\n"
            "debug: false\n"
            "hosts: [a, b]\n"
        )
        config = DefaultAppConfig()
        config.load_yaml_file(str(path))
        assert config.app_name == "yaml-app"
        assert config.api_base_url == "https://yaml.example.com"
        assert config.get_float("API_TIMEOUT") == 2.5
        assert config.is_debug_mode is False
        assert config.get_maybe("HOSTS") == "a,b"

    def test_yaml_must_be_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            DefaultAppConfig().load_yaml_file(str(path))

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        config = DefaultAppConfig()
        config.load_yaml_file(str(path))
        assert dict(config.env_variables) == {}

    def test_load_os_environ_with_prefix(self, monkeypatch):
        monkeypatch.setenv("MODTEST_APP_NAME", "env-app")
        monkeypatch.setenv("OTHER_APP_NAME", "ignored")
        config = DefaultAppConfig()
        config.load_os_environ(prefix="MODTEST_")
        assert config.app_name == "env-app"

    def test_later_loads_override(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("APP_NAME=first\n")
        config = DefaultAppConfig(values={"APP_NAME": "initial"})
        config.load_env_file(str(env))
        assert config.app_name == "first"
        config.load_test_environment("APP_NAME=second")
        assert config.app_name == "second"


# ============================================================================
# Typed accessors
# ============================================================================

class TestAccessors:

    @pytest.fixture
    def config(self):
        return StaticAppConfig(values={
            "PORT": "8080",
            "RATIO": "0.75",
            "ENABLED": "yes",
            "BROKEN_INT": "eight",
            "NAME": "svc",
        })

    def test_get_config_value_cast_from_default(self, config):
        assert config.get_config_value("PORT", 0) == 8080
        assert config.get_config_value("PORT") == "8080"
        assert config.get_config_value("MISSING", "d") == "d"

    def test_explicit_cast(self, config):
        assert config.get_config_value("RATIO", cast=float) == 0.75

    def test_unsupported_cast_returns_default(self, config):
        assert config.get_config_value("NAME", ["x"]) == ["x"]

    def test_get_int(self, config):
        assert config.get_int("PORT") == 8080
        assert config.get_int("BROKEN_INT", fallback=3) == 3
        assert config.get_int("MISSING") == 0

    def test_get_float(self, config):
        assert config.get_float("RATIO") == 0.75

    def test_get_bool(self, config):
        assert config.get_bool("ENABLED") is True
        assert config.get_bool("NAME", fallback=True) is True
        assert config.get_bool("MISSING") is False

    def test_get_required(self, config):
        assert config.get_required("NAME") == "svc"
        assert config.get_required("MISSING", fallback="fb") == "fb"
        with pytest.raises(ConfigError, match="MISSING"):
            config.get_required("MISSING")

    def test_get_maybe(self, config):
        assert config.get_maybe("NAME") == "svc"
        assert config.get_maybe("MISSING") is None

    def test_env_variables_read_only(self, config):
        with pytest.raises(TypeError):
            config.env_variables["NAME"] = "changed"

    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("1", True), ("ON", True),
        ("false", False), ("0", False), ("no", False),
        ("maybe", None),
    ])
    def test_parse_bool(self, raw, expected):
        assert parse_bool(raw) is expected


# ============================================================================
# Feature flags
# ============================================================================

class TestFeatureFlags:

    def test_explicit_flag_wins(self):
        config = StaticAppConfig(
            values={"FEATURE_DARK_MODE": "true"},
            feature_flags={"dark_mode": False},
        )
        assert config.is_feature_enabled("dark_mode") is False

    def test_env_fallback(self):
        config = StaticAppConfig(values={"FEATURE_BETA": "1"})
        assert config.is_feature_enabled("beta") is True
        assert config.is_feature_enabled("gamma") is False

    def test_flags_read_only(self):
        config = StaticAppConfig(feature_flags={"a": True})
        with pytest.raises(TypeError):
            config.feature_flags["a"] = False


# ============================================================================
# AppConfig contract
# ============================================================================

class TestAppConfig:

    def test_abstract(self):
        with pytest.raises(TypeError):
            AppConfig()

    def test_defaults(self):
        config = DefaultAppConfig()
        assert config.api_base_url == "http://localhost:8000"
        assert config.is_debug_mode is False

    def test_to_dict_and_repr(self):
        config = StaticAppConfig(feature_flags={"x": True})
        data = config.to_dict()
        assert data["app_name"] == "test-app"
        assert data["feature_flags"] == {"x": True}
        assert "StaticAppConfig(" in repr(config)
