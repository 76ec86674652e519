"""Acquisition configuration: defaults, JSON file, environment, overrides.

Options use the camelCase names of the settings file::

    {
        "Automation": {
            "executablePath": "C:\\\\Tools\\\\ToolControl.exe",
            "windowTitlePattern": "^Tool\\\\s+Con(n)?trol.*",
            "backend": "Auto",
            "waitTimeoutMs": 10000
        }
    }

Each option can also be set from the environment as ``WINTARGET_`` plus
the upper snake-case name (``WINTARGET_WAIT_TIMEOUT_MS=20000``).
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field, fields
from typing import Any, Mapping

from jsonschema import ValidationError, validate

from wintarget._router import normalize_mode
from wintarget.errors import ConfigurationError, ExecutableNotFoundError

ENV_PREFIX = "WINTARGET_"
SECTION = "Automation"

DEFAULT_TITLE_PATTERN = r"^Tool\s+Con(n)?trol.*"

# camelCase option name -> AcquisitionConfig field
OPTION_FIELDS = {
    "executablePath": "executable_path",
    "executableArguments": "executable_arguments",
    "windowTitlePattern": "window_title_pattern",
    "backend": "backend",
    "waitTimeoutMs": "wait_timeout_ms",
    "pollIntervalMs": "poll_interval_ms",
    "splashMaxWidth": "splash_max_width",
    "splashMaxHeight": "splash_max_height",
    "splashDurationMs": "splash_duration_ms",
}

_INT_OPTIONS = {
    "waitTimeoutMs",
    "pollIntervalMs",
    "splashMaxWidth",
    "splashMaxHeight",
    "splashDurationMs",
}

CONFIG_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "executablePath": {"type": "string"},
        "executableArguments": {"type": "string"},
        "windowTitlePattern": {"type": "string", "minLength": 1},
        "backend": {
            "type": "string",
            "pattern": "(?i)^(auto|win32|uia|uia2|uia3|legacy|modern|backenda|backendb)$",
        },
        "waitTimeoutMs": {"type": "integer", "minimum": 0},
        "pollIntervalMs": {"type": "integer", "exclusiveMinimum": 0},
        "splashMaxWidth": {"type": "integer", "minimum": 0},
        "splashMaxHeight": {"type": "integer", "minimum": 0},
        "splashDurationMs": {"type": "integer", "minimum": 0},
    },
}


@dataclass(frozen=True)
class AcquisitionConfig:
    """Immutable settings for one acquisition run.

    The title pattern is compiled once, case-insensitively, and exposed
    as ``title_regex``.
    """

    executable_path: str = ""
    executable_arguments: str = ""
    window_title_pattern: str = DEFAULT_TITLE_PATTERN
    backend: str = "auto"
    wait_timeout_ms: int = 10_000
    poll_interval_ms: int = 200
    splash_max_width: int = 600
    splash_max_height: int = 400
    splash_duration_ms: int = 5_000
    title_regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "backend", normalize_mode(self.backend))
        if self.wait_timeout_ms < 0:
            raise ConfigurationError(f"waitTimeoutMs must be >= 0, got {self.wait_timeout_ms}")
        if self.poll_interval_ms <= 0:
            raise ConfigurationError(f"pollIntervalMs must be > 0, got {self.poll_interval_ms}")
        if self.splash_max_width < 0 or self.splash_max_height < 0:
            raise ConfigurationError("splashMaxWidth and splashMaxHeight must be >= 0")
        if self.splash_duration_ms < 0:
            raise ConfigurationError(
                f"splashDurationMs must be >= 0, got {self.splash_duration_ms}"
            )
        try:
            regex = re.compile(self.window_title_pattern, re.IGNORECASE)
        except re.error as exc:
            raise ConfigurationError(
                f"Invalid windowTitlePattern {self.window_title_pattern!r}: {exc}"
            ) from exc
        object.__setattr__(self, "title_regex", regex)

    # -- durations in seconds ------------------------------------------------

    @property
    def wait_timeout(self) -> float:
        return self.wait_timeout_ms / 1000

    @property
    def poll_interval(self) -> float:
        return self.poll_interval_ms / 1000

    @property
    def splash_duration(self) -> float:
        return self.splash_duration_ms / 1000

    # -- preconditions -------------------------------------------------------

    def validate_executable(self) -> None:
        """Check the executable precondition of a run.

        Raises:
            ConfigurationError: If executablePath is missing, blank or relative.
            ExecutableNotFoundError: If the file does not exist.
        """
        if not self.executable_path or not self.executable_path.strip():
            raise ConfigurationError("executablePath is required.")
        if not os.path.isabs(self.executable_path):
            raise ConfigurationError(
                f"executablePath must be absolute: {self.executable_path!r}"
            )
        if not os.path.isfile(self.executable_path):
            raise ExecutableNotFoundError(self.executable_path)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> AcquisitionConfig:
        """Build a config from camelCase options, validating them first."""
        options = {k: v for k, v in options.items() if k in OPTION_FIELDS}
        try:
            validate(options, CONFIG_SCHEMA)
        except ValidationError as exc:
            where = ".".join(str(p) for p in exc.absolute_path) or "<root>"
            raise ConfigurationError(f"Invalid configuration at {where}: {exc.message}") from exc
        return cls(**{OPTION_FIELDS[k]: v for k, v in options.items()})

    def to_options(self) -> dict[str, Any]:
        """Return the config as camelCase options (inverse of from_options)."""
        by_field = {f: k for k, f in OPTION_FIELDS.items()}
        return {
            by_field[f.name]: getattr(self, f.name) for f in fields(self) if f.name in by_field
        }


def _env_name(option: str) -> str:
    snake = re.sub(r"(?<!^)(?=[A-Z])", "_", option).upper()
    return ENV_PREFIX + snake


def options_from_env(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect options set through WINTARGET_* environment variables."""
    options: dict[str, Any] = {}
    for option in OPTION_FIELDS:
        raw = environ.get(_env_name(option))
        if raw is None:
            continue
        if option in _INT_OPTIONS:
            try:
                options[option] = int(raw)
            except ValueError:
                raise ConfigurationError(
                    f"{_env_name(option)} must be an integer, got {raw!r}"
                ) from None
        else:
            options[option] = raw
    return options


def options_from_file(path: str | os.PathLike) -> dict[str, Any]:
    """Read options from a JSON settings file.

    Options may sit at the top level or inside an ``"Automation"`` section.
    """
    try:
        with open(path, encoding="utf-8") as f:
            doc = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {path}") from None
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Configuration file {path} is not valid JSON: {exc}") from exc

    if not isinstance(doc, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a JSON object")
    section = doc.get(SECTION, doc)
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{SECTION}' in {path} must be a JSON object")
    return dict(section)


def load_config(
    path: str | os.PathLike | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> AcquisitionConfig:
    """Merge defaults, settings file, environment and overrides.

    Later sources win.  ``overrides`` uses camelCase option names; None
    values in it are ignored so argparse namespaces can be passed through.

    Raises:
        ConfigurationError: If any source is unreadable or a value is invalid.
    """
    if environ is None:
        environ = os.environ

    options: dict[str, Any] = {}
    if path is not None:
        options.update(options_from_file(path))
    options.update(options_from_env(environ))
    if overrides:
        options.update({k: v for k, v in overrides.items() if v is not None})
    return AcquisitionConfig.from_options(options)
