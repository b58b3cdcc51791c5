"""
Script execution adapter.

This module turns a catalog entry into an argument vector and runs it as a
child process attached to the user's terminal. Node package managers and Deno
run scripts through their own ``run``/``task`` commands so lifecycle hooks
(``prebuild``, ``postbuild``) and ``node_modules/.bin`` resolution behave as
they do from the shell; every other project type runs the command text
verbatim through ``sh -c``.
"""

import os
import shlex
import signal
import subprocess
from pathlib import Path
from typing import Mapping, Sequence

from core.exceptions import ProcessSpawnError
from core.models import ScriptEntry
from models import ProjectType
from utils import debug

FORWARDED_SIGNALS = (signal.SIGTERM,)
# The child shares the terminal's foreground process group, so Ctrl-C already
# reaches it; the runner only has to survive it.
IGNORED_SIGNALS = (signal.SIGINT,)


def build_invocation(
    project_type: ProjectType, entry: ScriptEntry, args: Sequence[str] = ()
) -> list[str]:
    """
    Build the argument vector that runs ``entry``.

    Args:
        project_type: Type of the detected project.
        entry: The script to run.
        args: Extra arguments passed through to the script.

    Returns:
        list[str]: The argv to execute.

    Example:
        >>> build_invocation(ProjectType.NPM, ScriptEntry("test", "jest"), ["--watch"])
        ['npm', 'run', 'test', '--', '--watch']
    """
    args = list(args)
    match project_type:
        case ProjectType.NPM:
            return ["npm", "run", entry.name, *(["--", *args] if args else [])]
        case ProjectType.YARN | ProjectType.PNPM | ProjectType.BUN:
            return [project_type.value, "run", entry.name, *args]
        case ProjectType.DENO:
            return ["deno", "task", entry.name, *args]
        case _:
            command = entry.command
            if args:
                command = f"{command} {shlex.join(args)}"
            return ["sh", "-c", command]


class ScriptExecutor:
    """
    Runs one script at a time in the foreground.

    The child inherits stdin, stdout and stderr, so it owns the terminal until
    it exits. While it runs, SIGTERM delivered to this process is forwarded to
    the child and SIGINT is ignored, since the terminal already sends Ctrl-C
    to the child directly. The previous handlers are restored afterwards.
    """

    def run(
        self,
        argv: Sequence[str],
        cwd: Path,
        env_overrides: Mapping[str, str] | None = None,
    ) -> int:
        """
        Run ``argv`` in ``cwd`` and wait for it.

        Args:
            argv: Command and arguments.
            cwd: Working directory, normally the project root.
            env_overrides: Variables added to (or replacing) the inherited
                environment.

        Returns:
            int: The child's exit code; a child killed by signal N gives
                ``128 + N``.

        Raises:
            ProcessSpawnError: If the command cannot be started.
        """
        env = {**os.environ, **(env_overrides or {})}
        debug(f"Running {shlex.join(argv)} in {cwd}")

        try:
            child = subprocess.Popen(list(argv), cwd=cwd, env=env)
        except OSError as e:
            raise ProcessSpawnError(shlex.join(argv), original_exception=e) from e

        def forward(signum, frame):
            child.send_signal(signum)

        previous = {sig: signal.signal(sig, forward) for sig in FORWARDED_SIGNALS}
        previous.update({sig: signal.signal(sig, signal.SIG_IGN) for sig in IGNORED_SIGNALS})
        try:
            returncode = child.wait()
        finally:
            for sig, handler in previous.items():
                # None means the handler was not installed from Python.
                signal.signal(sig, handler if handler is not None else signal.SIG_DFL)

        if returncode < 0:
            return 128 - returncode
        return returncode
