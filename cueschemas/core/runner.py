"""External tool execution.

Every cue, timoni and go invocation goes through ToolRunner. A Sandbox owns a
scratch directory for one pipeline step: the step loads its input snapshot
into it, runs its tools and captures an output snapshot before the directory
is removed.
"""

import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from cueschemas.core.errors import ToolExecutionError
from cueschemas.core.tree import SchemaTree

logger = logging.getLogger(__name__)


class ToolRunner:
    """Runs external commands and returns their standard output.

    Commands are executed without a shell. Environment overrides are merged
    over the current process environment and are never logged.

    Example:
        >>> runner = ToolRunner()
        >>> runner.run(["cue", "version"], cwd=Path("."))
    """

    def __init__(self, base_env: Optional[Mapping[str, str]] = None):
        """Initialize ToolRunner.

        Args:
            base_env: Extra environment applied to every command (default: none)
        """
        self.base_env = dict(base_env or {})

    def run(
        self,
        args: Sequence[str],
        cwd: Path,
        env: Optional[Mapping[str, str]] = None,
    ) -> str:
        """Run one command to completion.

        Args:
            args: Command line, program first
            cwd: Working directory
            env: Environment overrides for this command only

        Returns:
            Captured standard output

        Raises:
            ToolExecutionError: If the program is missing or exits non-zero
        """
        command = list(args)
        logger.info(f"Running: {' '.join(command)} (in {cwd})")

        merged_env = dict(os.environ)
        merged_env.update(self.base_env)
        if env:
            merged_env.update(env)

        try:
            result = subprocess.run(
                command,
                cwd=str(cwd),
                env=merged_env,
                capture_output=True,
                text=True,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise ToolExecutionError(
                f"Cannot execute {command[0]}: {e}", command=command
            ) from e

        if result.returncode != 0:
            stderr = result.stderr.strip()
            raise ToolExecutionError(
                f"{' '.join(command)} exited with status {result.returncode}: {stderr}",
                command=command,
                returncode=result.returncode,
                stderr=stderr,
            )

        return result.stdout


class Sandbox:
    """Scratch working directory for a chain of tool invocations.

    Used as a context manager; the directory and everything in it is removed
    on exit, so callers must capture what they need with ``tree()`` first.

    Example:
        >>> with Sandbox(runner) as sandbox:
        ...     sandbox.exec(["cue", "mod", "init"])
        ...     gen = sandbox.tree("cue.mod/gen")
    """

    def __init__(
        self,
        runner: ToolRunner,
        env: Optional[Mapping[str, str]] = None,
        prefix: str = "cueschemas-",
    ):
        """Initialize Sandbox.

        Args:
            runner: ToolRunner executing the commands
            env: Environment overrides applied to every command in this sandbox
            prefix: Prefix of the scratch directory name
        """
        self.runner = runner
        self.env: Dict[str, str] = dict(env or {})
        self.prefix = prefix
        self._root: Optional[Path] = None

    def __enter__(self) -> "Sandbox":
        self._root = Path(tempfile.mkdtemp(prefix=self.prefix))
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._root is not None:
            shutil.rmtree(self._root, ignore_errors=True)
            self._root = None

    @property
    def root(self) -> Path:
        if self._root is None:
            raise RuntimeError("Sandbox is not active; use it as a context manager")
        return self._root

    def path(self, rel_path: str = ".") -> Path:
        """Absolute path of ``rel_path`` inside the sandbox."""
        return self.root / rel_path

    def add_tree(self, tree: SchemaTree, dest: str = ".") -> None:
        """Materialize a snapshot at ``dest``."""
        tree.write_to_dir(str(self.path(dest)))

    def exec(self, args: Sequence[str], workdir: str = ".") -> str:
        """Run a command with ``workdir`` (relative to the sandbox) as cwd.

        Returns:
            Captured standard output

        Raises:
            ToolExecutionError: If the command fails
        """
        cwd = self.path(workdir)
        cwd.mkdir(parents=True, exist_ok=True)
        return self.runner.run(args, cwd=cwd, env=self.env)

    def tree(self, rel_path: str = ".") -> SchemaTree:
        """Capture a snapshot of ``rel_path``."""
        return SchemaTree.from_dir(str(self.path(rel_path)))

    def entries(self, rel_path: str = ".") -> List[str]:
        """Sorted names directly below ``rel_path`` (empty if it does not exist)."""
        directory = self.path(rel_path)
        if not directory.is_dir():
            return []
        return sorted(entry.name for entry in directory.iterdir())
