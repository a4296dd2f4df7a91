import logging
import os
import re
import shlex
import subprocess
from typing import Dict, List, Mapping, Optional

from .errors import SpawnError
from .settings import LauncherSettings

logger = logging.getLogger(__name__)


def build_command(settings: LauncherSettings) -> List[str]:
    """Return the target command line.

    The startup flag and the double-quoted script path travel as a single
    argument; the target passes it to ``/bin/sh -c`` when it starts.
    """
    quoted = re.sub(r"([\\\"$`])", r"\\\1", str(settings.script_path))
    startup = f"{settings.startup_flag} \"{quoted}\""
    return [str(settings.target_executable), startup]


def build_environment(
    envs: Mapping[str, str], base: Optional[Mapping[str, str]] = None
) -> Dict[str, str]:
    """Return ``base`` (the current environment by default) overridden by ``envs``."""
    env = dict(os.environ if base is None else base)
    env.update(envs)
    return env


def launch(envs: Mapping[str, str], settings: LauncherSettings) -> subprocess.Popen:
    """Spawn the target process and return without waiting for it."""
    command = build_command(settings)
    logger.debug("Spawning: %s", " ".join(shlex.quote(part) for part in command))
    try:
        process = subprocess.Popen(
            command,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            env=build_environment(envs),
        )
    except (OSError, ValueError) as exc:
        raise SpawnError(
            "Cannot start target executable", settings.target_executable, exc
        ) from exc
    logger.info("Started %s (pid=%s)", settings.target_executable, process.pid)
    return process
