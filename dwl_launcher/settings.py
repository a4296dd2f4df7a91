import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

APP_NAME = "dwl-launcher"
DEFAULT_HOME_ROOT = Path("/home")
DEFAULT_SCRIPT_PATH = Path("/tmp/dwl_service")
DEFAULT_TARGET = Path("/usr/local/bin/dwl")
DEFAULT_STARTUP_FLAG = "-s"

# Environment variable -> settings field
ENV_OVERRIDES: Dict[str, str] = {
    "DWL_LAUNCHER_HOME_ROOT": "home_root",
    "DWL_LAUNCHER_CONFIG_DIR": "config_dir",
    "DWL_LAUNCHER_SCRIPT": "script_path",
    "DWL_LAUNCHER_TARGET": "target_executable",
}

_PATH_FIELDS = {"home_root", "config_dir", "script_path", "target_executable"}


@dataclass(frozen=True)
class LauncherSettings:
    """Locations and names used by a launcher run."""

    app_name: str = APP_NAME
    home_root: Path = DEFAULT_HOME_ROOT
    config_dir: Optional[Path] = None
    script_path: Path = DEFAULT_SCRIPT_PATH
    target_executable: Path = DEFAULT_TARGET
    startup_flag: str = DEFAULT_STARTUP_FLAG


def _expand(path: str) -> Path:
    """Expand '~' and environment variables in a path string."""
    return Path(os.path.expandvars(os.path.expanduser(path)))


def _coerce(name: str, value: Any) -> Any:
    if name in _PATH_FIELDS and value is not None:
        return _expand(str(value))
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> LauncherSettings:
    """Return the default settings with environment overrides applied."""
    env = os.environ if environ is None else environ
    overrides = {
        field_name: env[var]
        for var, field_name in ENV_OVERRIDES.items()
        if env.get(var)
    }
    return apply_cli_overrides(LauncherSettings(), overrides)


def apply_cli_overrides(
    settings: LauncherSettings, overrides: Mapping[str, Any]
) -> LauncherSettings:
    """Merge non-``None`` overrides into ``settings``."""
    known = {f.name for f in fields(LauncherSettings)}
    changes = {}
    for key, value in overrides.items():
        if key not in known:
            raise KeyError(f"Unknown setting: {key}")
        if value is not None:
            changes[key] = _coerce(key, value)
    return replace(settings, **changes)
