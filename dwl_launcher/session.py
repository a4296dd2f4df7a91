"""
Session start-up pipeline.

Runs the fixed sequence: ensure the config defaults, load the service list
and environment, generate the startup script, write it, spawn the target.
The first failure aborts the run; files already written stay in place.
"""

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .launcher import build_command, launch
from .script import generate_script
from .settings import LauncherSettings
from .user_config import (
    Envs,
    ServiceFile,
    ensure_defaults,
    envs_path,
    load_envs,
    load_services,
    resolve_config_dir,
    services_path,
)
from .util import write_string

logger = logging.getLogger(__name__)


@dataclass
class SessionPlan:
    """Everything a run needs before the script is written."""
    config_dir: Path
    services: ServiceFile
    envs: Envs
    script: str
    created: List[Path] = field(default_factory=list)


def prepare_session(settings: LauncherSettings) -> SessionPlan:
    config_dir = resolve_config_dir(settings)
    created = ensure_defaults(config_dir)

    services = load_services(services_path(config_dir))
    envs = load_envs(envs_path(config_dir))
    logger.debug(
        "Loaded %d service(s) and %d environment variable(s) from %s",
        len(services.service),
        len(envs),
        config_dir,
    )

    return SessionPlan(
        config_dir=config_dir,
        services=services,
        envs=envs,
        script=generate_script(services),
        created=created,
    )


def start_session(
    settings: LauncherSettings, dry_run: bool = False
) -> Optional[subprocess.Popen]:
    """Run the whole pipeline and return the spawned target process.

    With ``dry_run`` the script is still written but nothing is spawned.
    """
    plan = prepare_session(settings)

    write_string(plan.script, settings.script_path)
    logger.info("Startup script written to %s", settings.script_path)

    if dry_run:
        logger.info("Dry run, not starting: %s", " ".join(build_command(settings)))
        return None
    return launch(plan.envs, settings)
