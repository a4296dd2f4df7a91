import logging
import os
from pathlib import Path
from typing import Union

from .errors import FileIOError

logger = logging.getLogger(__name__)

SCRIPT_MODE = 0o744


def write_string(content: str, path: Union[str, Path]) -> Path:
    """Write ``content`` to ``path`` and make the file executable.

    Parent directories are created as needed and an existing file is
    truncated. The mode is set explicitly so the umask does not apply.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as fp:
            fp.write(content)
        os.chmod(path, SCRIPT_MODE)
    except OSError as exc:
        raise FileIOError("Cannot write file", path, exc) from exc
    logger.debug("Wrote %d characters to %s", len(content), path)
    return path
