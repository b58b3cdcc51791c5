"""
Tests for project detection.

Tests cover:
- ancestor_chain: boundary handling, starts outside the boundary
- rule_matches: signatures, manifests and content markers
- find_lockfile_match / find_fallback_match: the two passes in isolation
- detect_project: precedence across directories and rule order, errors
"""

from pathlib import Path

import pytest

from core.detection import (
    ancestor_chain,
    detect_project,
    find_fallback_match,
    find_lockfile_match,
    list_chain,
    rule_matches,
)
from core.exceptions import DetectionIOError, NoProjectFound
from core.file_io import MockManifestReader
from constants import DETECTION_RULES
from models import PriorityClass, ProjectType


# ============================================================================
# ancestor_chain
# ============================================================================


@pytest.mark.unit
def test_ancestor_chain_stops_at_boundary(home):
    """The chain runs from start up to and including the boundary."""
    chain = ancestor_chain(home / "a" / "b", home)
    assert chain == [home / "a" / "b", home / "a", home]


@pytest.mark.unit
def test_ancestor_chain_start_is_boundary(home):
    """Starting at the boundary searches only the boundary."""
    assert ancestor_chain(home, home) == [home]


@pytest.mark.unit
def test_ancestor_chain_never_includes_boundary_ancestors(home):
    """Outside the boundary the climb stops before any ancestor of the boundary."""
    chain = ancestor_chain(Path("/srv/app/web"), home)
    assert chain == [Path("/srv/app/web"), Path("/srv/app"), Path("/srv")]
    assert Path("/") not in chain
    assert Path("/home") not in chain


@pytest.mark.unit
def test_ancestor_chain_start_above_boundary_is_empty(home):
    """A start that is itself an ancestor of the boundary yields no directories."""
    assert ancestor_chain(Path("/home"), home) == []


# ============================================================================
# rule_matches
# ============================================================================


def _rule(project_type: ProjectType, priority: PriorityClass, signature: str):
    return next(
        r
        for r in DETECTION_RULES
        if r["project_type"] is project_type
        and r["priority"] is priority
        and signature in r["signatures"]
    )


@pytest.mark.unit
def test_rule_requires_manifest(project_root):
    """A lockfile without its manifest does not match."""
    reader = MockManifestReader()
    rule = _rule(ProjectType.YARN, PriorityClass.LOCKFILE, "yarn.lock")
    assert rule_matches(rule, project_root, frozenset({"yarn.lock"}), reader) is None


@pytest.mark.unit
def test_rule_returns_manifest_path(project_root):
    """A matching rule returns the manifest it found."""
    reader = MockManifestReader()
    rule = _rule(ProjectType.YARN, PriorityClass.LOCKFILE, "yarn.lock")
    names = frozenset({"yarn.lock", "package.json"})
    assert rule_matches(rule, project_root, names, reader) == project_root / "package.json"


@pytest.mark.unit
def test_marker_rule_reads_signature(project_root):
    """Marker rules match only when the signature file contains the marker."""
    poetry = _rule(ProjectType.POETRY, PriorityClass.CONFIG_FALLBACK, "pyproject.toml")
    names = frozenset({"pyproject.toml"})

    with_marker = MockManifestReader(
        {project_root / "pyproject.toml": '[tool.poetry]\nname = "x"\n'}
    )
    without_marker = MockManifestReader(
        {project_root / "pyproject.toml": '[project]\nname = "x"\n'}
    )

    assert rule_matches(poetry, project_root, names, with_marker) == project_root / "pyproject.toml"
    assert rule_matches(poetry, project_root, names, without_marker) is None
    assert with_marker.read_text_calls == [project_root / "pyproject.toml"]


@pytest.mark.unit
def test_marker_rule_unreadable_signature(project_root):
    """An unreadable signature file is a detection error, not a silent miss."""
    poetry = _rule(ProjectType.POETRY, PriorityClass.CONFIG_FALLBACK, "pyproject.toml")
    reader = MockManifestReader(
        {project_root / "pyproject.toml": ""},
        unreadable={project_root / "pyproject.toml"},
    )
    with pytest.raises(DetectionIOError):
        rule_matches(poetry, project_root, frozenset({"pyproject.toml"}), reader)


# ============================================================================
# The two passes
# ============================================================================


@pytest.mark.unit
def test_lockfile_pass_ignores_config_files(home, project_root, make_reader):
    """The lockfile pass finds nothing in a tree with only config files."""
    reader = make_reader(project_root, {"package.json": "{}", ".npmrc": ""})
    chain = ancestor_chain(project_root, home)
    listings = list_chain(chain, reader)

    assert find_lockfile_match(chain, listings, reader) is None
    project = find_fallback_match(chain, listings, reader)
    assert project is not None
    assert project.project_type is ProjectType.NPM


@pytest.mark.unit
def test_fallback_pass_ignores_lockfiles(home, project_root, make_reader):
    """The fallback pass only applies config-fallback rules."""
    reader = make_reader(project_root, {"Cargo.lock": "", "Cargo.toml": ""})
    chain = ancestor_chain(project_root, home)
    listings = list_chain(chain, reader)

    lock_match = find_lockfile_match(chain, listings, reader)
    fallback_match = find_fallback_match(chain, listings, reader)

    assert lock_match is not None and lock_match.project_type is ProjectType.CARGO
    assert fallback_match is not None and fallback_match.project_type is ProjectType.CARGO


# ============================================================================
# detect_project
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "files, expected",
    [
        ({"package.json": "{}", "bun.lockb": ""}, ProjectType.BUN),
        ({"package.json": "{}", "bun.lock": ""}, ProjectType.BUN),
        ({"package.json": "{}", "pnpm-lock.yaml": ""}, ProjectType.PNPM),
        ({"package.json": "{}", "yarn.lock": ""}, ProjectType.YARN),
        ({"package.json": "{}", "package-lock.json": ""}, ProjectType.NPM),
        ({"package.json": "{}"}, ProjectType.NPM),
        ({"package.json": "{}", ".yarnrc.yml": ""}, ProjectType.YARN),
        ({"package.json": "{}", "pnpm-workspace.yaml": ""}, ProjectType.PNPM),
        ({"deno.json": "{}"}, ProjectType.DENO),
        ({"deno.json": "{}", "deno.lock": ""}, ProjectType.DENO),
        ({"pyproject.toml": "[tool.poetry]\n"}, ProjectType.POETRY),
        ({"pyproject.toml": "[project]\n", "poetry.lock": ""}, ProjectType.POETRY),
        ({"pyproject.toml": "[project]\n", "uv.lock": ""}, ProjectType.UV),
        ({"pyproject.toml": "[tool.uv]\n"}, ProjectType.UV),
        ({"uv.toml": ""}, ProjectType.UV),
        ({"requirements.txt": "pytest\n"}, ProjectType.PIP),
        ({"pyproject.toml": "[project]\n"}, ProjectType.PIP),
        ({"Cargo.toml": ""}, ProjectType.CARGO),
        ({"go.mod": "module x\n"}, ProjectType.GO),
        ({"go.mod": "module x\n", "go.sum": ""}, ProjectType.GO),
        ({"justfile": "build:\n"}, ProjectType.JUST),
        ({"Makefile": "all:\n"}, ProjectType.MAKE),
    ],
)
def test_detects_each_project_type(home, project_root, make_reader, files, expected):
    """Each supported layout is detected as its project type."""
    reader = make_reader(project_root, files)
    project = detect_project(project_root, boundary=home, reader=reader)
    assert project.project_type is expected
    assert project.root == project_root


@pytest.mark.unit
def test_lockfile_rule_order_within_directory(home, project_root, make_reader):
    """With several lockfiles in one directory, the first declared rule wins."""
    reader = make_reader(
        project_root,
        {"package.json": "{}", "yarn.lock": "", "package-lock.json": "", "bun.lockb": ""},
    )
    assert detect_project(project_root, home, reader).project_type is ProjectType.BUN


@pytest.mark.unit
def test_pip_with_requirements_and_pyproject(home, project_root, make_reader):
    """A plain pyproject.toml next to requirements.txt is Pip; adding poetry.lock makes it Poetry."""
    files = {"pyproject.toml": "[project]\nname = 'x'\n", "requirements.txt": "pytest\n"}
    reader = make_reader(project_root, files)
    assert detect_project(project_root, home, reader).project_type is ProjectType.PIP

    reader = make_reader(project_root, {**files, "poetry.lock": ""})
    assert detect_project(project_root, home, reader).project_type is ProjectType.POETRY


@pytest.mark.unit
def test_shallower_lockfile_beats_closer_config(home, make_reader):
    """A yarn.lock two levels up outranks a package.json-only subdirectory."""
    root = home / "mono"
    reader = make_reader(
        root,
        {
            "package.json": "{}",
            "yarn.lock": "",
            "packages/web/package.json": "{}",
        },
    )
    project = detect_project(root / "packages" / "web", home, reader)

    assert project.project_type is ProjectType.YARN
    assert project.root == root
    assert project.manifest == root / "package.json"


@pytest.mark.unit
def test_closest_directory_wins_within_class(home, make_reader):
    """Among lockfile matches the closest directory wins."""
    root = home / "mono"
    reader = make_reader(
        root,
        {
            "package.json": "{}",
            "yarn.lock": "",
            "packages/web/package.json": "{}",
            "packages/web/pnpm-lock.yaml": "",
        },
    )
    project = detect_project(root / "packages" / "web", home, reader)

    assert project.project_type is ProjectType.PNPM
    assert project.root == root / "packages" / "web"


@pytest.mark.unit
def test_does_not_look_above_boundary(home, make_reader):
    """A manifest above the boundary is never seen."""
    reader = MockManifestReader(
        {
            Path("/home/package.json"): "{}",
            Path("/home/package-lock.json"): "",
            home / "empty" / "notes.txt": "",
        }
    )
    with pytest.raises(NoProjectFound) as exc_info:
        detect_project(home / "empty", home, reader)

    assert exc_info.value.start == home / "empty"
    assert exc_info.value.boundary == home
    assert Path("/home") not in reader.list_dir_calls


@pytest.mark.unit
def test_lists_each_directory_once(home, make_reader):
    """Both passes share one listing per directory."""
    root = home / "a"
    reader = make_reader(root, {"b/c/notes.txt": "", "Makefile": "all:\n"})
    detect_project(root / "b" / "c", home, reader)

    assert reader.list_dir_calls == [root / "b" / "c", root / "b", root, home]


@pytest.mark.unit
def test_unreadable_directory_raises(home, make_reader):
    """A directory on the chain that cannot be listed aborts detection."""
    root = home / "a"
    reader = make_reader(
        root,
        {"package.json": "{}", "b/notes.txt": ""},
        unreadable={root},
    )
    with pytest.raises(DetectionIOError) as exc_info:
        detect_project(root / "b", home, reader)

    assert exc_info.value.directory == root
    assert isinstance(exc_info.value.original_exception, PermissionError)


@pytest.mark.unit
def test_missing_start_directory_raises(home):
    """A start directory that does not exist is a detection error."""
    with pytest.raises(DetectionIOError):
        detect_project(home / "missing", home, MockManifestReader({home / "x": ""}))


@pytest.mark.unit
def test_detects_real_filesystem(tmp_path):
    """The default reader works against a real directory tree."""
    root = tmp_path.resolve()
    (root / "app").mkdir()
    (root / "package.json").write_text("{}")
    (root / "pnpm-lock.yaml").write_text("")

    project = detect_project(root / "app", boundary=root)

    assert project.project_type is ProjectType.PNPM
    assert project.manifest == root / "package.json"


@pytest.mark.unit
def test_parent_references_do_not_reach_sibling(tmp_path):
    """A start path through ".." is searched from the directory it names, never its sibling."""
    home = tmp_path.resolve()
    (home / "a").mkdir()
    (home / "b").mkdir()
    (home / "a" / "package.json").write_text("{}")
    (home / "a" / "package-lock.json").write_text("{}")

    with pytest.raises(NoProjectFound):
        detect_project(home / "a" / ".." / "b", boundary=home)


@pytest.mark.unit
def test_directory_named_like_manifest_is_ignored(tmp_path):
    """A subdirectory called Makefile does not make the parent a make project."""
    root = tmp_path.resolve()
    (root / "Makefile").mkdir()

    with pytest.raises(NoProjectFound):
        detect_project(root, boundary=root)
