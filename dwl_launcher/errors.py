"""
Error taxonomy for the launcher pipeline.

Every failure in the pipeline is raised as one of the subclasses of
:class:`LauncherError` below and propagates to the CLI, which logs it
and exits non-zero. Nothing is recovered locally.
"""

from enum import Enum
from pathlib import Path
from typing import Optional, Union


class ErrorKind(Enum):
    """Closed set of failure categories."""
    USER_RESOLUTION = "user_resolution"
    CONFIG_READ = "config_read"
    CONFIG_PARSE = "config_parse"
    IO = "io"
    SPAWN = "spawn"


class LauncherError(Exception):
    """Base error carrying the failing path and the underlying cause."""

    kind: ErrorKind

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None
        self.cause = cause

    def __str__(self) -> str:
        text = self.message
        if self.path is not None:
            text = f"{text}: {self.path}"
        if self.cause is not None:
            text = f"{text} ({self.cause})"
        return text


class UserResolutionError(LauncherError):
    kind = ErrorKind.USER_RESOLUTION


class ConfigReadError(LauncherError):
    kind = ErrorKind.CONFIG_READ


class ConfigParseError(LauncherError):
    kind = ErrorKind.CONFIG_PARSE


class FileIOError(LauncherError):
    """Directory or file creation, write or permission change failed."""
    kind = ErrorKind.IO


class SpawnError(LauncherError):
    kind = ErrorKind.SPAWN
