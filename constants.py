"""
Application-wide constants and configuration mappings.

This module defines the static heuristics used throughout the psr CLI: the
manifest/lockfile detection table, the category vocabulary used to classify
scripts, the shortcut letter table, the synonym groups, and the built-in
targets offered for tools whose manifests do not list scripts themselves.
"""

from typing import Final, Mapping
from models import DetectionRule, PriorityClass, ProjectType, ScriptCategory


# Detection table, in declared order.
# The detector runs two passes over the ancestor chain: first every LOCKFILE
# rule (closest directory first), then every CONFIG_FALLBACK rule. Within one
# directory and one pass, the first rule listed here wins. The ordering below
# is therefore the tie-break policy, e.g. a directory with a plain
# pyproject.toml and a requirements.txt resolves to Pip, while the same
# directory with a poetry.lock resolves to Poetry in the lockfile pass.
DETECTION_RULES: Final[tuple[DetectionRule, ...]] = (
    # Lockfiles
    {
        "project_type": ProjectType.BUN,
        "priority": PriorityClass.LOCKFILE,
        "signatures": ("bun.lockb", "bun.lock"),
        "manifests": ("package.json",),
        "marker": None,
    },
    {
        "project_type": ProjectType.PNPM,
        "priority": PriorityClass.LOCKFILE,
        "signatures": ("pnpm-lock.yaml",),
        "manifests": ("package.json",),
        "marker": None,
    },
    {
        "project_type": ProjectType.YARN,
        "priority": PriorityClass.LOCKFILE,
        "signatures": ("yarn.lock",),
        "manifests": ("package.json",),
        "marker": None,
    },
    {
        "project_type": ProjectType.NPM,
        "priority": PriorityClass.LOCKFILE,
        "signatures": ("package-lock.json",),
        "manifests": ("package.json",),
        "marker": None,
    },
    {
        "project_type": ProjectType.DENO,
        "priority": PriorityClass.LOCKFILE,
        "signatures": ("deno.lock",),
        "manifests": ("deno.json",),
        "marker": None,
    },
    {
        "project_type": ProjectType.POETRY,
        "priority": PriorityClass.LOCKFILE,
        "signatures": ("poetry.lock",),
        "manifests": ("pyproject.toml",),
        "marker": None,
    },
    {
        "project_type": ProjectType.UV,
        "priority": PriorityClass.LOCKFILE,
        "signatures": ("uv.lock",),
        "manifests": ("pyproject.toml",),
        "marker": None,
    },
    {
        "project_type": ProjectType.CARGO,
        "priority": PriorityClass.LOCKFILE,
        "signatures": ("Cargo.lock",),
        "manifests": ("Cargo.toml",),
        "marker": None,
    },
    {
        "project_type": ProjectType.GO,
        "priority": PriorityClass.LOCKFILE,
        "signatures": ("go.sum",),
        "manifests": ("go.mod",),
        "marker": None,
    },
    # Config fallbacks
    {
        "project_type": ProjectType.YARN,
        "priority": PriorityClass.CONFIG_FALLBACK,
        "signatures": (".yarnrc.yml", ".yarnrc"),
        "manifests": ("package.json",),
        "marker": None,
    },
    {
        "project_type": ProjectType.PNPM,
        "priority": PriorityClass.CONFIG_FALLBACK,
        "signatures": ("pnpm-workspace.yaml",),
        "manifests": ("package.json",),
        "marker": None,
    },
    {
        "project_type": ProjectType.NPM,
        "priority": PriorityClass.CONFIG_FALLBACK,
        "signatures": (".npmrc",),
        "manifests": ("package.json",),
        "marker": None,
    },
    {
        "project_type": ProjectType.DENO,
        "priority": PriorityClass.CONFIG_FALLBACK,
        "signatures": ("deno.json",),
        "manifests": ("deno.json",),
        "marker": None,
    },
    {
        "project_type": ProjectType.NPM,
        "priority": PriorityClass.CONFIG_FALLBACK,
        "signatures": ("package.json",),
        "manifests": ("package.json",),
        "marker": None,
    },
    {
        "project_type": ProjectType.CARGO,
        "priority": PriorityClass.CONFIG_FALLBACK,
        "signatures": ("Cargo.toml",),
        "manifests": ("Cargo.toml",),
        "marker": None,
    },
    {
        "project_type": ProjectType.GO,
        "priority": PriorityClass.CONFIG_FALLBACK,
        "signatures": ("go.mod",),
        "manifests": ("go.mod",),
        "marker": None,
    },
    {
        "project_type": ProjectType.POETRY,
        "priority": PriorityClass.CONFIG_FALLBACK,
        "signatures": ("pyproject.toml",),
        "manifests": ("pyproject.toml",),
        "marker": "[tool.poetry",
    },
    {
        "project_type": ProjectType.UV,
        "priority": PriorityClass.CONFIG_FALLBACK,
        "signatures": ("uv.toml",),
        "manifests": ("pyproject.toml", "uv.toml"),
        "marker": None,
    },
    {
        "project_type": ProjectType.UV,
        "priority": PriorityClass.CONFIG_FALLBACK,
        "signatures": ("pyproject.toml",),
        "manifests": ("pyproject.toml",),
        "marker": "[tool.uv",
    },
    {
        "project_type": ProjectType.PIP,
        "priority": PriorityClass.CONFIG_FALLBACK,
        "signatures": ("requirements.txt",),
        "manifests": ("requirements.txt",),
        "marker": None,
    },
    {
        "project_type": ProjectType.PIP,
        "priority": PriorityClass.CONFIG_FALLBACK,
        "signatures": ("pyproject.toml",),
        "manifests": ("pyproject.toml",),
        "marker": None,
    },
    {
        "project_type": ProjectType.JUST,
        "priority": PriorityClass.CONFIG_FALLBACK,
        "signatures": ("justfile", "Justfile"),
        "manifests": ("justfile", "Justfile"),
        "marker": None,
    },
    {
        "project_type": ProjectType.MAKE,
        "priority": PriorityClass.CONFIG_FALLBACK,
        "signatures": ("Makefile", "makefile", "GNUmakefile"),
        "manifests": ("Makefile", "makefile", "GNUmakefile"),
        "marker": None,
    },
)

# Ordered name vocabulary for category inference.
# Exact matches are tried first across the whole table, then substring
# matches in the same order, so "test:watch" is TEST and "prebuild" is BUILD.
CATEGORY_VOCABULARY: Final[tuple[tuple[str, ScriptCategory], ...]] = (
    ("test", ScriptCategory.TEST),
    ("build", ScriptCategory.BUILD),
    ("compile", ScriptCategory.BUILD),
    ("dev", ScriptCategory.DEV),
    ("start", ScriptCategory.START),
    ("serve", ScriptCategory.START),
    ("lint", ScriptCategory.LINT),
    ("check", ScriptCategory.LINT),
    ("fmt", ScriptCategory.FORMAT),
    ("format", ScriptCategory.FORMAT),
    ("watch", ScriptCategory.WATCH),
    ("clean", ScriptCategory.CLEAN),
    ("deploy", ScriptCategory.DEPLOY),
    ("release", ScriptCategory.DEPLOY),
)

# Tool words looked up in the command text when the name says nothing
# (e.g. a script called "unit" that runs "vitest run").
COMMAND_TOOL_CATEGORIES: Final[tuple[tuple[str, ScriptCategory], ...]] = (
    ("jest", ScriptCategory.TEST),
    ("vitest", ScriptCategory.TEST),
    ("mocha", ScriptCategory.TEST),
    ("pytest", ScriptCategory.TEST),
    ("webpack", ScriptCategory.BUILD),
    ("tsc", ScriptCategory.BUILD),
    ("vite build", ScriptCategory.BUILD),
    ("eslint", ScriptCategory.LINT),
    ("stylelint", ScriptCategory.LINT),
    ("clippy", ScriptCategory.LINT),
    ("ruff check", ScriptCategory.LINT),
    ("flake8", ScriptCategory.LINT),
    ("pylint", ScriptCategory.LINT),
    ("prettier", ScriptCategory.FORMAT),
    ("black", ScriptCategory.FORMAT),
    ("rimraf", ScriptCategory.CLEAN),
)

# Shortcut letters, in precedence order. Each letter goes to the first entry
# of its category in catalog order; categories not listed here (and second
# entries of a listed category) draw from NUMERIC_SHORTCUTS.
SHORTCUT_LETTERS: Final[tuple[tuple[ScriptCategory, str], ...]] = (
    (ScriptCategory.DEV, "d"),
    (ScriptCategory.START, "s"),
    (ScriptCategory.BUILD, "b"),
    (ScriptCategory.TEST, "t"),
    (ScriptCategory.WATCH, "w"),
    (ScriptCategory.FORMAT, "f"),
    (ScriptCategory.CLEAN, "c"),
)

NUMERIC_SHORTCUTS: Final[str] = "123456789"

# Groups of interchangeable script names. A request for a missing name is
# served by the first member of its group that the catalog defines.
SYNONYM_GROUPS: Final[tuple[tuple[str, ...], ...]] = (
    ("dev", "start", "run"),
    ("typecheck", "tc"),
    ("format", "fmt"),
)

# Environment injected when "dev" is served by a start/run script, so Node
# scripts that branch on NODE_ENV behave like a dev script would.
DEV_SYNONYM_ENV: Final[Mapping[str, str]] = {"NODE_ENV": "dev"}
DEV_SYNONYM_TARGETS: Final[frozenset[str]] = frozenset({"start", "run"})

# Built-in targets for tools whose manifest does not enumerate scripts.
# Each tuple is (name, command, description).
CARGO_BUILTINS: Final[tuple[tuple[str, str, str], ...]] = (
    ("build", "cargo build", "Compile the current package"),
    ("run", "cargo run", "Run the main binary of the current package"),
    ("test", "cargo test", "Run the tests"),
    (
        "check",
        "cargo check",
        "Analyze the current package and report errors, but don't build object files",
    ),
    ("lint", "cargo clippy", "Run the Rust linter (clippy)"),
    ("fix", "cargo clippy --fix", "Automatically fix linting issues"),
    ("fmt", "cargo fmt", "Format the code with rustfmt"),
    ("clean", "cargo clean", "Remove the target directory"),
    ("install", "cargo install --path .", "Install the current package"),
    ("publish", "cargo publish", "Publish the current package"),
)

GO_BUILTINS: Final[tuple[tuple[str, str, str], ...]] = (
    ("build", "go build ./...", "Compile the packages"),
    ("run", "go run .", "Run the main package"),
    ("test", "go test ./...", "Run package tests"),
    ("lint", "golangci-lint run", "Run linters"),
    ("vet", "go vet ./...", "Report suspicious constructs"),
    ("fmt", "go fmt ./...", "Format code"),
    ("tidy", "go mod tidy", "Clean up dependencies"),
    ("clean", "go clean", "Remove object files and cached files"),
)

# Python tools recognised in dependency lists.
# Each tuple is (distribution name, script name, command, description). Rows
# are applied in order and a script name is only defined once, so ruff wins
# "lint" over flake8 and "format" over black.
PYTHON_TOOL_SCRIPTS: Final[tuple[tuple[str, str, str, str], ...]] = (
    ("pytest", "test", "pytest", "Run the test suite with pytest"),
    ("ruff", "lint", "ruff check .", "Run Ruff linter"),
    ("ruff", "format", "ruff format .", "Format code with Ruff"),
    ("flake8", "lint", "flake8", "Run Flake8 linter"),
    ("pylint", "lint", "pylint **/*.py", "Run Pylint linter"),
    ("black", "format", "black .", "Format code with Black"),
    ("mypy", "typecheck", "mypy .", "Type-check with mypy"),
)

# Keys the interactive views bind themselves; these win over script shortcuts
# in the views that bind them.
KEY_QUIT: Final[frozenset[str]] = frozenset({"q", "ESC", "CTRL_C"})
KEY_UP: Final[frozenset[str]] = frozenset({"UP", "k"})
KEY_DOWN: Final[frozenset[str]] = frozenset({"DOWN", "j"})
KEY_ENTER: Final[frozenset[str]] = frozenset({"ENTER"})
KEY_SEARCH: Final[str] = "/"
KEY_TUI: Final[str] = "t"
