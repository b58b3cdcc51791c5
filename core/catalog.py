"""
Script catalog builder.

Turns a detected project into a typed, ordered, shortcut-assigned catalog of
scripts. Each manifest shape has one parse function, selected by a flat match
over ``ProjectType``:

- ``package.json`` (npm, yarn, pnpm, bun): the ``scripts`` mapping.
- ``deno.json``: the ``tasks`` mapping.
- ``pyproject.toml`` / ``requirements*.txt`` (pip, poetry, uv): declared entry
  points, scripts derived from well-known tool dependencies, and an install
  or sync step.
- ``Cargo.toml``: built-in cargo targets, ``[package.metadata.scripts]`` and
  one ``run:<bin>`` per ``[[bin]]``.
- ``go.mod``: built-in go targets plus ``make:<target>`` for a root Makefile.
- Makefiles and justfiles: their targets and recipes.

Every parse function returns an ordered ``dict`` of name to
``(command, description)``. Assigning to an existing key keeps its position,
which gives duplicate declarations last-write-wins semantics in place.
"""

import json
import re
import tomllib
from pathlib import Path
from typing import Any

from constants import CARGO_BUILTINS, GO_BUILTINS, PYTHON_TOOL_SCRIPTS
from core.categorization import infer_category
from core.exceptions import ManifestParseError, NoScriptsFound
from core.file_io import FilesystemManifestReader, ManifestReader
from core.models import Catalog, Project, ScriptEntry
from core.shortcuts import assign_shortcuts
from models import ProjectType
from utils import debug

ScriptTable = dict[str, tuple[str, str | None]]

MAKEFILE_NAMES = ("GNUmakefile", "makefile", "Makefile")

# "target another: deps ## description" or a double-colon rule "clean::",
# excluding ":=" / "::=" assignments.
MAKE_TARGET_RE = re.compile(
    r"^(?P<targets>[^\s:=#][^:=#]*?)\s*:(?!:?=):?(?P<rest>.*)$"
)
MAKE_TARGET_VARIABLE_RE = re.compile(r"^\s*[A-Za-z_][A-Za-z0-9_]*\s*[:+?]?=")
# "recipe arg='x' *rest: deps", optionally quiet ("@recipe").
JUST_RECIPE_RE = re.compile(
    r"^@?(?P<name>[A-Za-z_][A-Za-z0-9_-]*)(?P<params>[^:]*?)\s*:(?!=)"
)
JUST_KEYWORDS = ("alias", "export", "import", "mod", "set")
REQUIREMENT_NAME_RE = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


def build_catalog(project: Project, reader: ManifestReader | None = None) -> Catalog:
    """
    Build the script catalog of a detected project.

    Args:
        project: The project returned by detection.
        reader: Filesystem access. Defaults to FilesystemManifestReader.

    Returns:
        Catalog: Entries in declaration order with categories and shortcuts.

    Raises:
        ManifestParseError: If a manifest cannot be read, is malformed, or has
            an unexpected shape.
        NoScriptsFound: If the manifest is valid but yields no scripts.
    """
    reader = reader if reader is not None else FilesystemManifestReader()

    match project.project_type:
        case ProjectType.NPM | ProjectType.YARN | ProjectType.PNPM | ProjectType.BUN:
            scripts = parse_package_json(project.manifest, reader)
        case ProjectType.DENO:
            scripts = parse_deno_json(project.manifest, reader)
        case ProjectType.PIP:
            scripts = parse_pip_project(project.root, reader)
        case ProjectType.POETRY:
            scripts = parse_poetry_project(project.manifest, reader)
        case ProjectType.UV:
            scripts = parse_uv_project(project.root, reader)
        case ProjectType.CARGO:
            scripts = parse_cargo_toml(project.manifest, reader)
        case ProjectType.GO:
            scripts = parse_go_project(project.root, reader)
        case ProjectType.MAKE:
            scripts = parse_makefile(project.manifest, reader)
        case ProjectType.JUST:
            scripts = parse_justfile(project.manifest, reader)

    if not scripts:
        raise NoScriptsFound(project.manifest)

    debug(f"Found {len(scripts)} scripts in {project.manifest}")
    entries = [
        ScriptEntry(
            name=name,
            command=command,
            category=infer_category(name, command),
            description=description,
        )
        for name, (command, description) in scripts.items()
    ]
    return Catalog(assign_shortcuts(entries))


# ==========================================
# Manifest loading
# ==========================================


def _read(path: Path, reader: ManifestReader) -> str:
    try:
        return reader.read_text(path)
    except OSError as e:
        raise ManifestParseError(
            path, message=f"Cannot read {path}", original_exception=e
        ) from e


def load_json(path: Path, reader: ManifestReader) -> dict[str, Any]:
    """Read a JSON manifest whose top level must be an object."""
    try:
        data = json.loads(_read(path, reader))
    except json.JSONDecodeError as e:
        raise ManifestParseError(
            path, message=f"Invalid JSON in {path}", original_exception=e
        ) from e
    if not isinstance(data, dict):
        raise ManifestParseError(path, message=f"{path} must contain a JSON object")
    return data


def load_toml(path: Path, reader: ManifestReader) -> dict[str, Any]:
    """Read a TOML manifest."""
    try:
        return tomllib.loads(_read(path, reader))
    except tomllib.TOMLDecodeError as e:
        raise ManifestParseError(
            path, message=f"Invalid TOML in {path}", original_exception=e
        ) from e


def _list_root(root: Path, manifest: Path, reader: ManifestReader) -> frozenset[str]:
    try:
        return reader.list_dir(root)
    except OSError as e:
        raise ManifestParseError(
            manifest, message=f"Cannot read directory {root}", original_exception=e
        ) from e


def _table(data: dict[str, Any], path: Path, *keys: str) -> dict[str, Any]:
    """
    Walk nested tables, returning an empty dict when any key is missing.

    Raises:
        ManifestParseError: If a present value is not a table.
    """
    current: Any = data
    for key in keys:
        current = current.get(key, {})
        if not isinstance(current, dict):
            raise ManifestParseError(
                path, message=f"'{'.'.join(keys)}' in {path} must be a table"
            )
    return current


def _string_commands(mapping: dict[str, Any], path: Path, section: str) -> ScriptTable:
    scripts: ScriptTable = {}
    for name, command in mapping.items():
        if not isinstance(command, str):
            raise ManifestParseError(
                path,
                message=f"Command for '{name}' in '{section}' of {path} must be a string",
            )
        scripts[name] = (command, None)
    return scripts


# ==========================================
# JavaScript
# ==========================================


def parse_package_json(path: Path, reader: ManifestReader) -> ScriptTable:
    """
    Parse the ``scripts`` of a package.json.

    Descriptions are taken from a top-level ``descriptions`` or
    ``scripts-info`` mapping when one exists. Non-string descriptions are
    ignored.
    """
    data = load_json(path, reader)
    scripts = _string_commands(_table(data, path, "scripts"), path, "scripts")

    for key in ("descriptions", "scripts-info"):
        descriptions = data.get(key)
        if not isinstance(descriptions, dict):
            continue
        for name, description in descriptions.items():
            if name in scripts and isinstance(description, str):
                scripts[name] = (scripts[name][0], description)

    return scripts


def parse_deno_json(path: Path, reader: ManifestReader) -> ScriptTable:
    """Parse the ``tasks`` of a deno.json; a task is a string or a ``{command, description}`` table."""
    data = load_json(path, reader)
    scripts: ScriptTable = {}
    for name, task in _table(data, path, "tasks").items():
        if isinstance(task, str):
            scripts[name] = (task, None)
            continue
        if isinstance(task, dict) and isinstance(task.get("command"), str):
            description = task.get("description")
            scripts[name] = (
                task["command"],
                description if isinstance(description, str) else None,
            )
            continue
        raise ManifestParseError(
            path, message=f"Task '{name}' in {path} must be a string or have a string 'command'"
        )
    return scripts


# ==========================================
# Python
# ==========================================


def requirement_name(requirement: str) -> str | None:
    """
    Extract the normalized distribution name from a PEP 508 requirement.

    Example:
        >>> requirement_name("Ruff>=0.4; python_version >= '3.11'")
        'ruff'
    """
    match = REQUIREMENT_NAME_RE.match(requirement)
    if match is None:
        return None
    return re.sub(r"[-_.]+", "-", match.group(1)).lower()


def _names_from(value: Any) -> set[str]:
    """Collect dependency names from a list of requirement strings or a table keyed by name."""
    names: set[str] = set()
    if isinstance(value, dict):
        for key in value:
            name = requirement_name(key)
            if name:
                names.add(name)
    elif isinstance(value, list):
        # Non-string items are {include-group = "..."} references.
        for item in value:
            if isinstance(item, str):
                name = requirement_name(item)
                if name:
                    names.add(name)
    return names


def requirements_file_names(text: str) -> set[str]:
    """Collect dependency names from a requirements file, skipping options and comments."""
    names: set[str] = set()
    for line in text.splitlines():
        line = line.split("#", 1)[0].strip()
        if not line or line.startswith("-"):
            continue
        name = requirement_name(line)
        if name:
            names.add(name)
    return names


def pyproject_dependency_names(data: dict[str, Any]) -> set[str]:
    """
    Collect every dependency name a pyproject.toml declares.

    Covers ``[project]`` dependencies and optional dependencies, PEP 735
    ``[dependency-groups]``, ``[tool.uv] dev-dependencies`` and the Poetry
    dependency tables, including ``[tool.poetry.group.<name>.dependencies]``.
    """
    names: set[str] = set()

    project = data.get("project", {})
    if isinstance(project, dict):
        names |= _names_from(project.get("dependencies"))
        optional = project.get("optional-dependencies", {})
        if isinstance(optional, dict):
            for group in optional.values():
                names |= _names_from(group)

    groups = data.get("dependency-groups", {})
    if isinstance(groups, dict):
        for group in groups.values():
            names |= _names_from(group)

    tool = data.get("tool", {})
    if not isinstance(tool, dict):
        return names

    uv = tool.get("uv", {})
    if isinstance(uv, dict):
        names |= _names_from(uv.get("dev-dependencies"))

    poetry = tool.get("poetry", {})
    if isinstance(poetry, dict):
        names |= _names_from(poetry.get("dependencies"))
        names |= _names_from(poetry.get("dev-dependencies"))
        poetry_groups = poetry.get("group", {})
        if isinstance(poetry_groups, dict):
            for group in poetry_groups.values():
                if isinstance(group, dict):
                    names |= _names_from(group.get("dependencies"))

    names.discard("python")
    return names


def add_tool_scripts(scripts: ScriptTable, dependencies: set[str], prefix: str = "") -> None:
    """
    Add scripts for well-known Python tools found among the dependencies.

    A script name that is already defined is never replaced, so declared
    entry points win over tools and the first tool row for a name wins over
    later ones.
    """
    for distribution, name, command, description in PYTHON_TOOL_SCRIPTS:
        if distribution in dependencies and name not in scripts:
            scripts[name] = (f"{prefix}{command}", description)


def _entry_points(data: dict[str, Any], path: Path, *keys: str) -> list[str]:
    return list(_table(data, path, *keys))


def parse_pip_project(root: Path, reader: ManifestReader) -> ScriptTable:
    """
    Parse a pip-managed project.

    Yields ``[project.scripts]`` entry points (run by name), tool scripts from
    ``requirements*.txt`` and pyproject dependencies, and ``install``.
    """
    names = _list_root(root, root, reader)
    scripts: ScriptTable = {}
    dependencies: set[str] = set()

    if "pyproject.toml" in names:
        pyproject = root / "pyproject.toml"
        data = load_toml(pyproject, reader)
        for name in _entry_points(data, pyproject, "project", "scripts"):
            scripts[name] = (name, None)
        dependencies |= pyproject_dependency_names(data)

    for file_name in sorted(names):
        if file_name.startswith("requirements") and file_name.endswith(".txt"):
            dependencies |= requirements_file_names(_read(root / file_name, reader))

    add_tool_scripts(scripts, dependencies)

    if "requirements.txt" in names:
        scripts.setdefault("install", ("pip install -r requirements.txt", "Install requirements"))
    else:
        scripts.setdefault("install", ("pip install -e .", "Install the project in editable mode"))
    return scripts


def parse_poetry_project(path: Path, reader: ManifestReader) -> ScriptTable:
    """Parse a Poetry pyproject.toml into ``poetry run`` scripts, tool scripts and ``install``."""
    data = load_toml(path, reader)
    scripts: ScriptTable = {}

    for name in _entry_points(data, path, "tool", "poetry", "scripts"):
        scripts[name] = (f"poetry run {name}", None)
    # Poetry 2 projects may declare entry points under [project.scripts].
    for name in _entry_points(data, path, "project", "scripts"):
        scripts[name] = (f"poetry run {name}", None)

    add_tool_scripts(scripts, pyproject_dependency_names(data), prefix="poetry run ")
    scripts.setdefault("install", ("poetry install", "Install dependencies"))
    return scripts


def parse_uv_project(root: Path, reader: ManifestReader) -> ScriptTable:
    """
    Parse a uv-managed project.

    With a pyproject.toml: ``uv run`` entry points, tool scripts and ``sync``.
    A project configured only by uv.toml yields ``sync`` plus tool scripts
    from the dependency lists uv.toml declares.
    """
    names = _list_root(root, root, reader)
    scripts: ScriptTable = {}
    dependencies: set[str] = set()

    if "pyproject.toml" in names:
        pyproject = root / "pyproject.toml"
        data = load_toml(pyproject, reader)
        for name in _entry_points(data, pyproject, "project", "scripts"):
            scripts[name] = (f"uv run {name}", None)
        dependencies |= pyproject_dependency_names(data)

    if "uv.toml" in names:
        uv_config = load_toml(root / "uv.toml", reader)
        dependencies |= _names_from(uv_config.get("dependencies"))
        dependencies |= _names_from(uv_config.get("dev-dependencies"))

    add_tool_scripts(scripts, dependencies, prefix="uv run ")
    scripts.setdefault("sync", ("uv sync", "Sync the environment with the lockfile"))
    return scripts


# ==========================================
# Rust and Go
# ==========================================


def parse_cargo_toml(path: Path, reader: ManifestReader) -> ScriptTable:
    """Parse a Cargo.toml into built-in targets, metadata scripts and ``run:<bin>`` entries."""
    data = load_toml(path, reader)
    scripts: ScriptTable = {
        name: (command, description) for name, command, description in CARGO_BUILTINS
    }

    metadata_scripts = _table(data, path, "package", "metadata", "scripts")
    scripts.update(_string_commands(metadata_scripts, path, "package.metadata.scripts"))

    bins = data.get("bin", [])
    if not isinstance(bins, list):
        raise ManifestParseError(path, message=f"'bin' in {path} must be an array of tables")
    for binary in bins:
        if not isinstance(binary, dict) or not isinstance(binary.get("name"), str):
            raise ManifestParseError(path, message=f"Every [[bin]] in {path} needs a string 'name'")
        bin_name = binary["name"]
        scripts[f"run:{bin_name}"] = (
            f"cargo run --bin {bin_name}",
            f"Run the {bin_name} binary",
        )

    return scripts


def parse_go_project(root: Path, reader: ManifestReader) -> ScriptTable:
    """Built-in go targets, then ``make:<target>`` for each target of a root Makefile."""
    scripts: ScriptTable = {
        name: (command, description) for name, command, description in GO_BUILTINS
    }

    names = _list_root(root, root / "go.mod", reader)
    makefile = next((root / n for n in MAKEFILE_NAMES if n in names), None)
    if makefile is not None:
        for target, description in makefile_targets(_read(makefile, reader)):
            scripts[f"make:{target}"] = (
                f"make {target}",
                description or f"Run make target: {target}",
            )

    return scripts


# ==========================================
# Make and just
# ==========================================


def makefile_targets(text: str) -> list[tuple[str, str | None]]:
    """
    Extract simple targets from a makefile, in order of appearance.

    Skipped: recipe lines (indented), comments, variable assignments
    (``X = y``, ``X := y``, ``X ::= y``), special targets such as ``.PHONY``,
    pattern rules (``%.o: %.c``) and targets containing variable references.
    A ``## text`` suffix on a rule line becomes the description.
    """
    targets: list[tuple[str, str | None]] = []
    seen: set[str] = set()

    for line in text.splitlines():
        if not line or line[0] in " \t#":
            continue
        match = MAKE_TARGET_RE.match(line)
        if match is None:
            continue

        rest = match.group("rest")
        if MAKE_TARGET_VARIABLE_RE.match(rest):
            continue  # target-specific variable, e.g. "build: CFLAGS = -O2"
        description = None
        if "##" in rest:
            description = rest.split("##", 1)[1].strip() or None

        for target in match.group("targets").split():
            if target.startswith(".") or "%" in target or "$" in target:
                continue
            if target not in seen:
                seen.add(target)
                targets.append((target, description))

    return targets


def parse_makefile(path: Path, reader: ManifestReader) -> ScriptTable:
    """Each simple makefile target becomes ``make <target>``."""
    return {
        target: (f"make {target}", description)
        for target, description in makefile_targets(_read(path, reader))
    }


def justfile_recipes(text: str) -> list[tuple[str, str | None]]:
    """
    Extract public recipes from a justfile, in order of appearance.

    Recipes whose name starts with ``_`` or that carry a ``[private]``
    attribute are skipped. A ``# comment`` directly above a recipe (attribute
    lines may sit in between) becomes its description.
    """
    recipes: list[tuple[str, str | None]] = []
    comment: str | None = None
    private = False

    for line in text.splitlines():
        if not line.strip():
            comment, private = None, False
            continue
        if line[0] in " \t":
            continue  # recipe body
        stripped = line.strip()
        if stripped.startswith("#"):
            if not stripped.startswith("#!"):
                comment = stripped.lstrip("#").strip() or None
            continue
        if stripped.startswith("["):
            if "private" in stripped:
                private = True
            continue
        if stripped.split(maxsplit=1)[0] in JUST_KEYWORDS:
            comment, private = None, False
            continue

        match = JUST_RECIPE_RE.match(stripped)
        if match is not None:
            name = match.group("name")
            if not name.startswith("_") and not private:
                recipes.append((name, comment))
        comment, private = None, False

    return recipes


def parse_justfile(path: Path, reader: ManifestReader) -> ScriptTable:
    """Each public just recipe becomes ``just <recipe>``."""
    return {
        recipe: (f"just {recipe}", description)
        for recipe, description in justfile_recipes(_read(path, reader))
    }
