import logging

from .user_config import ServiceFile

logger = logging.getLogger(__name__)

SHEBANG = "#!/bin/bash"


def generate_script(service_file: ServiceFile) -> str:
    """Return a shell script that starts every service in the background.

    Services are emitted in list order, each preceded by its name as a
    comment. Names and commands are written verbatim.
    """
    parts = [SHEBANG, "\n\n"]
    for service in service_file.service:
        parts.append(f"# {service.name}\n")
        parts.append(f"{service.exec} &\n")
    script = "".join(parts)
    logger.debug("Generated startup script:\n%s", script)
    return script
