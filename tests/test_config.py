"""Tests for configuration defaults, validation and loading."""

from __future__ import annotations

import json

import pytest

from wintarget.config import (
    DEFAULT_TITLE_PATTERN,
    AcquisitionConfig,
    load_config,
    options_from_env,
)
from wintarget.errors import ConfigurationError, ExecutableNotFoundError

# ---------------------------------------------------------------------------
# AcquisitionConfig
# ---------------------------------------------------------------------------


class TestAcquisitionConfig:
    def test_defaults(self):
        cfg = AcquisitionConfig()
        assert cfg.window_title_pattern == DEFAULT_TITLE_PATTERN
        assert cfg.backend == "auto"
        assert cfg.wait_timeout == 10.0
        assert cfg.poll_interval == 0.2
        assert cfg.splash_duration == 5.0
        assert (cfg.splash_max_width, cfg.splash_max_height) == (600, 400)

    def test_pattern_compiled_case_insensitive(self):
        cfg = AcquisitionConfig(window_title_pattern=r"^Tool\s+Con(n)?trol.*")
        assert cfg.title_regex.search("tool CONNTROL panel")
        assert not cfg.title_regex.search("The Tool Control")

    def test_pattern_compiled_once(self):
        cfg = AcquisitionConfig()
        assert cfg.title_regex is cfg.title_regex

    def test_invalid_pattern(self):
        with pytest.raises(ConfigurationError, match="windowTitlePattern"):
            AcquisitionConfig(window_title_pattern="(unclosed")

    def test_zero_poll_interval_rejected(self):
        with pytest.raises(ConfigurationError, match="pollIntervalMs"):
            AcquisitionConfig(poll_interval_ms=0)

    def test_negative_timeout_rejected(self):
        with pytest.raises(ConfigurationError, match="waitTimeoutMs"):
            AcquisitionConfig(wait_timeout_ms=-1)

    def test_zero_timeout_allowed(self):
        assert AcquisitionConfig(wait_timeout_ms=0).wait_timeout == 0

    def test_negative_splash_limits_rejected(self):
        with pytest.raises(ConfigurationError):
            AcquisitionConfig(splash_max_width=-1)
        with pytest.raises(ConfigurationError):
            AcquisitionConfig(splash_duration_ms=-5)

    @pytest.mark.parametrize(
        "mode,expected",
        [("Auto", "auto"), ("UIA2", "win32"), ("UIA3", "uia"), ("win32", "win32"), ("BackendB", "uia")],
    )
    def test_backend_normalized(self, mode, expected):
        assert AcquisitionConfig(backend=mode).backend == expected

    def test_unknown_backend_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown backend"):
            AcquisitionConfig(backend="atspi")

    def test_immutable(self):
        cfg = AcquisitionConfig()
        with pytest.raises(AttributeError):
            cfg.wait_timeout_ms = 1

    def test_options_round_trip(self):
        cfg = AcquisitionConfig(executable_path="C:/x.exe", wait_timeout_ms=42)
        assert AcquisitionConfig.from_options(cfg.to_options()) == cfg


class TestValidateExecutable:
    @pytest.mark.parametrize("path", ["", "   "])
    def test_blank_path(self, path):
        with pytest.raises(ConfigurationError, match="executablePath is required"):
            AcquisitionConfig(executable_path=path).validate_executable()

    def test_missing_file(self, tmp_path):
        missing = str(tmp_path / "ToolControl.exe")
        with pytest.raises(ExecutableNotFoundError) as excinfo:
            AcquisitionConfig(executable_path=missing).validate_executable()
        assert excinfo.value.path == missing

    def test_existing_file(self, tmp_path):
        exe = tmp_path / "ToolControl.exe"
        exe.write_bytes(b"MZ")
        AcquisitionConfig(executable_path=str(exe)).validate_executable()

    def test_relative_path(self, tmp_path, monkeypatch):
        (tmp_path / "ToolControl.exe").write_bytes(b"MZ")
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigurationError, match="must be absolute"):
            AcquisitionConfig(executable_path="ToolControl.exe").validate_executable()


# ---------------------------------------------------------------------------
# from_options / schema
# ---------------------------------------------------------------------------


class TestFromOptions:
    def test_camel_case_options(self):
        cfg = AcquisitionConfig.from_options(
            {
                "executablePath": "C:/Tools/ToolControl.exe",
                "executableArguments": "/safe",
                "windowTitlePattern": "^Tool",
                "backend": "UIA3",
                "waitTimeoutMs": 2000,
                "pollIntervalMs": 50,
                "splashMaxWidth": 10,
                "splashMaxHeight": 20,
                "splashDurationMs": 30,
            }
        )
        assert cfg.executable_path == "C:/Tools/ToolControl.exe"
        assert cfg.executable_arguments == "/safe"
        assert cfg.backend == "uia"
        assert cfg.wait_timeout_ms == 2000
        assert cfg.poll_interval_ms == 50
        assert (cfg.splash_max_width, cfg.splash_max_height, cfg.splash_duration_ms) == (10, 20, 30)

    def test_unknown_keys_ignored(self):
        cfg = AcquisitionConfig.from_options({"Logging": {"Level": "Debug"}, "waitTimeoutMs": 5})
        assert cfg.wait_timeout_ms == 5

    def test_wrong_type_rejected(self):
        with pytest.raises(ConfigurationError, match="waitTimeoutMs"):
            AcquisitionConfig.from_options({"waitTimeoutMs": "soon"})

    def test_boolean_is_not_an_integer(self):
        with pytest.raises(ConfigurationError):
            AcquisitionConfig.from_options({"pollIntervalMs": True})

    def test_zero_poll_rejected_by_schema(self):
        with pytest.raises(ConfigurationError, match="pollIntervalMs"):
            AcquisitionConfig.from_options({"pollIntervalMs": 0})

    def test_unknown_backend_rejected_by_schema(self):
        with pytest.raises(ConfigurationError, match="backend"):
            AcquisitionConfig.from_options({"backend": "atspi"})


# ---------------------------------------------------------------------------
# load_config
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def _write(self, tmp_path, doc) -> str:
        path = tmp_path / "appsettings.json"
        path.write_text(json.dumps(doc), encoding="utf-8")
        return str(path)

    def test_defaults_without_sources(self):
        assert load_config(environ={}) == AcquisitionConfig()

    def test_automation_section(self, tmp_path):
        path = self._write(
            tmp_path,
            {"Automation": {"executablePath": "C:/t.exe", "pollIntervalMs": 100}, "Serilog": {}},
        )
        cfg = load_config(path, environ={})
        assert cfg.executable_path == "C:/t.exe"
        assert cfg.poll_interval_ms == 100

    def test_top_level_options(self, tmp_path):
        path = self._write(tmp_path, {"waitTimeoutMs": 1234})
        assert load_config(path, environ={}).wait_timeout_ms == 1234

    def test_env_overrides_file(self, tmp_path):
        path = self._write(tmp_path, {"waitTimeoutMs": 1234, "backend": "uia"})
        cfg = load_config(
            path,
            environ={"WINTARGET_WAIT_TIMEOUT_MS": "99", "WINTARGET_BACKEND": "win32"},
        )
        assert cfg.wait_timeout_ms == 99
        assert cfg.backend == "win32"

    def test_overrides_win_and_none_is_ignored(self, tmp_path):
        path = self._write(tmp_path, {"waitTimeoutMs": 1234, "windowTitlePattern": "^A"})
        cfg = load_config(
            path,
            environ={"WINTARGET_WAIT_TIMEOUT_MS": "99"},
            overrides={"waitTimeoutMs": 7, "windowTitlePattern": None},
        )
        assert cfg.wait_timeout_ms == 7
        assert cfg.window_title_pattern == "^A"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "nope.json", environ={})

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_config(path, environ={})

    def test_non_object_document(self, tmp_path):
        path = self._write(tmp_path, [1, 2, 3])
        with pytest.raises(ConfigurationError, match="JSON object"):
            load_config(path, environ={})


class TestOptionsFromEnv:
    def test_reads_prefixed_variables(self):
        env = {
            "WINTARGET_EXECUTABLE_PATH": "C:/x.exe",
            "WINTARGET_SPLASH_MAX_WIDTH": "320",
            "UNRELATED": "1",
        }
        assert options_from_env(env) == {"executablePath": "C:/x.exe", "splashMaxWidth": 320}

    def test_non_integer_rejected(self):
        with pytest.raises(ConfigurationError, match="WINTARGET_POLL_INTERVAL_MS"):
            options_from_env({"WINTARGET_POLL_INTERVAL_MS": "fast"})
