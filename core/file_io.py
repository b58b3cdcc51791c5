from pathlib import Path
from typing import Protocol


class ManifestReader(Protocol):
    """
    Protocol defining the read-only filesystem access used by detection and
    catalog building.

    This protocol allows different implementations for production (filesystem)
    and testing (in-memory trees). Implementations never write to the project.
    """

    def list_dir(self, directory: Path) -> frozenset[str]:
        """
        List the names of the files directly inside a directory.

        Subdirectories are not listed, so a directory that happens to be
        called "Makefile" never satisfies a detection rule.

        Args:
            directory: The directory to list.

        Returns:
            The names of the regular files (or symlinks to them) in the
            directory.

        Raises:
            OSError: If the directory does not exist or cannot be read.
        """

    def read_text(self, file_path: Path) -> str:
        """
        Read the text content of a file as UTF-8.

        Args:
            file_path: The path to the file to read.

        Returns:
            The decoded file content.

        Raises:
            OSError: If the file cannot be opened or read.
        """


class FilesystemManifestReader:

    def list_dir(self, directory: Path) -> frozenset[str]:
        """
        List the files of a directory in a single pass over its entries.

        Args:
            directory: The directory to list.

        Returns:
            The names of the regular files directly inside the directory.

        Raises:
            OSError: If the directory does not exist, is not a directory, or
                cannot be read (permissions, unmounted path).
        """
        return frozenset(child.name for child in directory.iterdir() if child.is_file())

    def read_text(self, file_path: Path) -> str:
        """
        Read the text content of a file as UTF-8.

        Invalid UTF-8 sequences are replaced rather than dropped so parse
        errors point at the real location.

        Raises:
            OSError: If the file cannot be opened or read.
        """
        with file_path.open("r", encoding="utf-8", errors="replace") as f:
            return f.read()


class MockManifestReader:
    """
    In-memory implementation of ManifestReader for testing.

    Holds a mapping of absolute file paths to contents; directories are
    derived from the file paths. Paths listed in ``unreadable`` raise
    PermissionError, mimicking a directory or file without read access.
    """

    def __init__(
        self,
        files: dict[Path, str] | None = None,
        unreadable: set[Path] | None = None,
    ):
        """
        Initialize MockManifestReader with a virtual file tree.

        Args:
            files: Mapping of absolute file paths to their text content.
            unreadable: Paths (files or directories) that raise PermissionError.

        Attributes (for test inspection):
            list_dir_calls: Directories passed to list_dir(), in call order.
            read_text_calls: Files passed to read_text(), in call order.
        """
        self.files: dict[Path, str] = dict(files or {})
        self.unreadable: set[Path] = set(unreadable or set())

        # Track calls for test inspection
        self.list_dir_calls: list[Path] = []
        self.read_text_calls: list[Path] = []

    def _directories(self) -> set[Path]:
        dirs: set[Path] = set()
        for path in self.files:
            dirs.update(path.parents)
        return dirs

    def list_dir(self, directory: Path) -> frozenset[str]:
        self.list_dir_calls.append(directory)
        if directory in self.unreadable:
            raise PermissionError(13, "Permission denied", str(directory))
        if directory not in self._directories():
            raise FileNotFoundError(2, "No such file or directory", str(directory))
        return frozenset(path.name for path in self.files if path.parent == directory)

    def read_text(self, file_path: Path) -> str:
        self.read_text_calls.append(file_path)
        if file_path in self.unreadable:
            raise PermissionError(13, "Permission denied", str(file_path))
        if file_path not in self.files:
            raise FileNotFoundError(2, "No such file or directory", str(file_path))
        return self.files[file_path]
