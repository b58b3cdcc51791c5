"""
Custom exception classes for the psr CLI.

This module defines application-specific exceptions raised during project
detection, manifest parsing, script resolution, script execution and settings
handling. Each exception carries a human-readable message, the step that
failed, and the underlying exception (if any) so the CLI can print a single
line naming both the failed step and the filesystem/process detail.
"""

from pathlib import Path
from typing import Optional


class PsrError(Exception):
    """
    Base exception for all psr errors.

    Attributes:
        message: A human-readable error message describing what went wrong.
        step: Short name of the pipeline step that failed (e.g. "detection").
        original_exception: The underlying exception that caused this error, if any.
    """

    step = "psr"

    def __init__(
        self,
        message: Optional[str] = None,
        original_exception: Optional[BaseException] = None,
    ):
        self.message = message or "An unexpected psr error occurred"
        super().__init__(self.message)
        self.original_exception = original_exception

    @property
    def detail(self) -> str:
        """The message, followed by the underlying error when there is one."""
        if self.original_exception is None:
            return self.message
        reason = getattr(self.original_exception, "strerror", None) or str(
            self.original_exception
        )
        return f"{self.message} ({reason})"


class DetectionIOError(PsrError):
    """
    Raised when a directory on the ancestor chain cannot be read.

    Detection does not skip unreadable directories, since a directory that
    cannot be listed may hide the real project.
    """

    step = "detection"

    def __init__(
        self,
        directory: Path,
        original_exception: Optional[BaseException] = None,
    ):
        self.directory = directory
        super().__init__(
            message=f"Cannot read directory {directory}",
            original_exception=original_exception,
        )


class NoProjectFound(PsrError):
    """Raised when no directory between the start and the boundary matches any rule."""

    step = "detection"

    def __init__(self, start: Path, boundary: Path):
        self.start = start
        self.boundary = boundary
        super().__init__(
            message=f"No project found from {start} up to {boundary}",
        )


class ManifestParseError(PsrError):
    """
    Raised when a manifest cannot be read or does not have the expected shape.

    Attributes:
        manifest: Path of the manifest that failed to parse.
    """

    step = "manifest"

    def __init__(
        self,
        manifest: Path,
        message: Optional[str] = None,
        original_exception: Optional[BaseException] = None,
    ):
        self.manifest = manifest
        super().__init__(
            message=message or f"Failed to parse {manifest}",
            original_exception=original_exception,
        )


class NoScriptsFound(PsrError):
    """Raised when a manifest parses correctly but declares no scripts."""

    step = "catalog"

    def __init__(self, manifest: Path):
        self.manifest = manifest
        super().__init__(message=f"{manifest} is valid but declares no scripts")


class ScriptNotFound(PsrError):
    """
    Raised when neither the requested name nor any synonym is in the catalog.

    Attributes:
        name: The literal script name that was requested.
        suggestion: The closest catalog name, if one is close enough.
    """

    step = "resolve"

    def __init__(self, name: str, suggestion: Optional[str] = None):
        self.name = name
        self.suggestion = suggestion
        message = f"Script '{name}' not found"
        if suggestion:
            message += f"; did you mean '{suggestion}'?"
        super().__init__(message=message)


class ProcessSpawnError(PsrError):
    """Raised when the command for a script could not be started."""

    step = "run"

    def __init__(
        self,
        command: str,
        original_exception: Optional[BaseException] = None,
    ):
        self.command = command
        super().__init__(
            message=f"Failed to start '{command}'",
            original_exception=original_exception,
        )


class SettingsError(PsrError):
    """Raised when the settings file exists but cannot be read, parsed or written."""

    step = "settings"

    def __init__(
        self,
        message: Optional[str] = None,
        file_path: Optional[Path] = None,
        original_exception: Optional[BaseException] = None,
    ):
        self.file_path = file_path
        super().__init__(
            message=message or f"Invalid settings file: {file_path}",
            original_exception=original_exception,
        )


class ProjectStoreError(PsrError):
    """Raised for alias store misuse: duplicate names or unknown projects."""

    step = "projects"
