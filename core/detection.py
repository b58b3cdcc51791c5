"""
Project detection module.

This module walks upward from a starting directory looking for the manifest and
lockfile signatures listed in ``constants.DETECTION_RULES`` and selects exactly
one project type for the session.

Detection runs as two explicit passes over the same ancestor chain:

1.  **Lockfile pass**: every lockfile rule is tested against every directory,
    closest directory first. Lockfiles are generated by a single package
    manager, so a lockfile in a shallower ancestor beats a config file in a
    closer directory.
2.  **Fallback pass**: only if no lockfile matched, every config-fallback rule
    is tested the same way.

Within one directory the first rule in declared order wins. The walk never
leaves the boundary (the user's home directory by default): it stops after
visiting the boundary itself and never visits any directory above it.
"""

from pathlib import Path
from typing import Iterable

from constants import DETECTION_RULES
from core.exceptions import DetectionIOError, NoProjectFound
from core.file_io import FilesystemManifestReader, ManifestReader
from core.models import Project
from models import DetectionRule, PriorityClass
from utils import debug


def ancestor_chain(start: Path, boundary: Path) -> list[Path]:
    """
    Build the list of directories to search, closest first.

    The chain starts at ``start`` and climbs one parent at a time. It ends
    after ``boundary`` has been added, and it never contains a proper ancestor
    of ``boundary``. When ``start`` does not lie under ``boundary`` the climb
    stops at the first directory that is an ancestor of the boundary, so for
    a home boundary of ``/home/me`` neither ``/home`` nor ``/`` is searched.

    Args:
        start: Absolute starting directory.
        boundary: Absolute directory above which the search never goes.

    Returns:
        list[Path]: Directories to search, starting with ``start``.
    """
    chain: list[Path] = []
    boundary_ancestors = set(boundary.parents)
    current = start
    while True:
        if current in boundary_ancestors:
            break
        chain.append(current)
        if current == boundary or current.parent == current:
            break
        current = current.parent
    return chain


def list_chain(chain: Iterable[Path], reader: ManifestReader) -> dict[Path, frozenset[str]]:
    """
    List every directory of the chain once.

    Raises:
        DetectionIOError: If any directory cannot be read.
    """
    listings: dict[Path, frozenset[str]] = {}
    for directory in chain:
        try:
            listings[directory] = reader.list_dir(directory)
        except OSError as e:
            raise DetectionIOError(directory, original_exception=e) from e
    return listings


def rule_matches(
    rule: DetectionRule,
    directory: Path,
    names: frozenset[str],
    reader: ManifestReader,
) -> Path | None:
    """
    Test one rule against one directory.

    A rule matches when one of its signature files and one of its manifest
    files are present and, for rules with a marker, the first present
    signature file contains the marker text.

    Args:
        rule: The detection rule to test.
        directory: The directory being tested.
        names: The entry names of ``directory``.
        reader: Reader used to inspect signature contents for marker rules.

    Returns:
        Path | None: The manifest path when the rule matches, otherwise None.

    Raises:
        DetectionIOError: If a marker rule cannot read its signature file.
    """
    signature = next((s for s in rule["signatures"] if s in names), None)
    if signature is None:
        return None
    manifest = next((m for m in rule["manifests"] if m in names), None)
    if manifest is None:
        return None

    marker = rule["marker"]
    if marker is not None:
        signature_path = directory / signature
        try:
            content = reader.read_text(signature_path)
        except OSError as e:
            raise DetectionIOError(signature_path, original_exception=e) from e
        if marker not in content:
            return None

    return directory / manifest


def _scan_pass(
    priority: PriorityClass,
    chain: list[Path],
    listings: dict[Path, frozenset[str]],
    reader: ManifestReader,
) -> Project | None:
    rules = [rule for rule in DETECTION_RULES if rule["priority"] is priority]
    for directory in chain:
        for rule in rules:
            manifest = rule_matches(rule, directory, listings[directory], reader)
            if manifest is not None:
                debug(
                    f"Matched {priority.name.lower()} rule for {rule['project_type']} "
                    f"in {directory}"
                )
                return Project(rule["project_type"], directory, manifest)
    return None


def find_lockfile_match(
    chain: list[Path],
    listings: dict[Path, frozenset[str]],
    reader: ManifestReader,
) -> Project | None:
    """First pass: lockfile rules across the whole chain, closest directory first."""
    return _scan_pass(PriorityClass.LOCKFILE, chain, listings, reader)


def find_fallback_match(
    chain: list[Path],
    listings: dict[Path, frozenset[str]],
    reader: ManifestReader,
) -> Project | None:
    """Second pass: config-fallback rules across the whole chain, closest directory first."""
    return _scan_pass(PriorityClass.CONFIG_FALLBACK, chain, listings, reader)


def detect_project(
    start: Path,
    boundary: Path | None = None,
    reader: ManifestReader | None = None,
) -> Project:
    """
    Detect the project that owns ``start``.

    Args:
        start: Directory to start from. Relative paths are resolved against
            the current working directory.
        boundary: Directory above which the search never goes. Defaults to
            the user's home directory.
        reader: Filesystem access. Defaults to FilesystemManifestReader; tests
            pass a MockManifestReader.

    Returns:
        Project: The selected project type, its root directory and manifest.

    Raises:
        DetectionIOError: If a directory on the chain cannot be read.
        NoProjectFound: If no rule matches between ``start`` and the boundary.
    """
    reader = reader if reader is not None else FilesystemManifestReader()
    start = start.resolve()
    boundary = (boundary if boundary is not None else Path.home()).resolve()

    chain = ancestor_chain(start, boundary)
    debug(f"Searching {len(chain)} director{'y' if len(chain) == 1 else 'ies'} from {start}")
    listings = list_chain(chain, reader)

    project = find_lockfile_match(chain, listings, reader)
    if project is None:
        project = find_fallback_match(chain, listings, reader)
    if project is None:
        raise NoProjectFound(start, boundary)
    return project
