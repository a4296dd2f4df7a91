import getpass
import logging
import os
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List

from .errors import ConfigParseError, ConfigReadError, FileIOError, UserResolutionError
from .settings import LauncherSettings

logger = logging.getLogger(__name__)

SERVICES_FILENAME = "services"
ENVS_FILENAME = "envs"

Envs = Dict[str, str]


@dataclass
class Service:
    """A named command started in the background at session start."""

    name: str
    exec: str


@dataclass
class ServiceFile:
    service: List[Service] = field(default_factory=list)


def default_services() -> ServiceFile:
    return ServiceFile(
        service=[
            Service(
                name="Import environment",
                exec=(
                    "/sbin/systemctl --user import-environment "
                    "DISPLAY WAYLAND_DISPLAY XDG_CURRENT_DESKTOP"
                ),
            )
        ]
    )


def default_envs() -> Envs:
    return {
        "XDG_CURRENT_DESKTOP": "wlroots",
        "XDG_SESSION_TYPE": "wayland",
    }


# Serialization ---------------------------------------------------------------

_BARE_KEY = re.compile(r"^[A-Za-z0-9_-]+$")
_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}


def _toml_str(value: str) -> str:
    """Return ``value`` as a TOML basic string, quotes included."""
    out = []
    for char in value:
        if char in _ESCAPES:
            out.append(_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            out.append(f"\\u{ord(char):04X}")
        else:
            out.append(char)
    return '"' + "".join(out) + '"'


def _toml_key(key: str) -> str:
    return key if _BARE_KEY.match(key) else _toml_str(key)


def dump_services(service_file: ServiceFile) -> str:
    """Serialize a :class:`ServiceFile` as a TOML array of tables."""
    if not service_file.service:
        return "service = []\n"
    blocks = []
    for service in service_file.service:
        blocks.append(
            "[[service]]\n"
            f"name = {_toml_str(service.name)}\n"
            f"exec = {_toml_str(service.exec)}\n"
        )
    return "\n".join(blocks)


def dump_envs(envs: Envs) -> str:
    """Serialize an environment map as flat TOML key/value pairs."""
    return "".join(f"{_toml_key(key)} = {_toml_str(value)}\n" for key, value in envs.items())


# Parsing ---------------------------------------------------------------------

def _parse_services(data: Dict[str, Any]) -> ServiceFile:
    entries = data.get("service")
    if not isinstance(entries, list):
        raise ValueError("expected a 'service' array")
    services = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ValueError(f"service #{index} is not a table")
        name = entry.get("name")
        command = entry.get("exec")
        if not isinstance(name, str) or not isinstance(command, str):
            raise ValueError(f"service #{index} needs string 'name' and 'exec'")
        services.append(Service(name=name, exec=command))
    return ServiceFile(service=services)


def _parse_envs(data: Dict[str, Any]) -> Envs:
    for key, value in data.items():
        if not key or "=" in key or "\0" in key:
            raise ValueError(f"invalid environment variable name {key!r}")
        if not isinstance(value, str):
            raise ValueError(f"value of {key!r} must be a string")
        if "\0" in value:
            raise ValueError(f"value of {key!r} contains a null byte")
    return dict(data)


def _load(path: Path, parse: Callable[[Dict[str, Any]], Any]) -> Any:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ConfigReadError("Cannot read config file", path, exc) from exc
    try:
        data = tomllib.loads(raw.decode("utf-8"))
        return parse(data)
    except (UnicodeDecodeError, tomllib.TOMLDecodeError, ValueError) as exc:
        raise ConfigParseError("Invalid config file", path, exc) from exc


def load_services(path: Path) -> ServiceFile:
    """Load the service list from ``path``."""
    return _load(Path(path), _parse_services)


def load_envs(path: Path) -> Envs:
    """Load the environment map from ``path``."""
    return _load(Path(path), _parse_envs)


# Locations -------------------------------------------------------------------

def get_username() -> str:
    """Return the invoking user's name as a plain string."""
    try:
        username = getpass.getuser()
    except (KeyError, OSError, ImportError) as exc:
        raise UserResolutionError("Cannot get username", cause=exc) from exc
    try:
        username.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise UserResolutionError("Cannot translate username", cause=exc) from exc
    if not username or "/" in username or username in (".", ".."):
        raise UserResolutionError(f"Cannot translate username {username!r}")
    return username


def resolve_config_dir(settings: LauncherSettings) -> Path:
    """Return ``<home_root>/<username>/.config/<app_name>`` unless overridden."""
    if settings.config_dir is not None:
        return settings.config_dir
    return settings.home_root / get_username() / ".config" / settings.app_name


def services_path(config_dir: Path) -> Path:
    return config_dir / SERVICES_FILENAME


def envs_path(config_dir: Path) -> Path:
    return config_dir / ENVS_FILENAME


def _create_new(path: Path, content: str) -> bool:
    """Write ``content`` to ``path`` only if the file does not exist yet."""
    try:
        fd = os.open(str(path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
    except FileExistsError:
        return False
    except OSError as exc:
        raise FileIOError("Cannot create config file", path, exc) from exc
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fp:
            fp.write(content)
    except OSError as exc:
        raise FileIOError("Cannot write config file", path, exc) from exc
    return True


def ensure_defaults(config_dir: Path) -> List[Path]:
    """Create the config directory and any missing default files.

    Existing files are left untouched. Returns the files created by this call.
    """
    config_dir = Path(config_dir)
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FileIOError("Cannot create config directory", config_dir, exc) from exc

    created = []
    defaults = (
        (services_path(config_dir), dump_services(default_services())),
        (envs_path(config_dir), dump_envs(default_envs())),
    )
    for path, content in defaults:
        if _create_new(path, content):
            logger.info("Created default config file %s", path)
            created.append(path)
        else:
            logger.debug("Config file %s already exists", path)
    return created
