"""Command lines for the cue, timoni and go toolchain."""

import logging
from pathlib import Path
from typing import List

from cueschemas.core.config import PipelineConfig
from cueschemas.core.runner import ToolRunner

logger = logging.getLogger(__name__)

TIMONI_PACKAGE = "github.com/stefanprodan/timoni/cmd/timoni"
CUE_PACKAGE = "cuelang.org/go/cmd/cue"


class Toolchain:
    """Builds tool command lines from a PipelineConfig.

    Example:
        >>> toolchain = Toolchain(PipelineConfig())
        >>> toolchain.cue("mod", "tidy")
        ['cue', 'mod', 'tidy']
    """

    def __init__(self, config: PipelineConfig):
        self.config = config

    def cue(self, *args: str) -> List[str]:
        return [self.config.cue_bin, *args]

    def timoni(self, *args: str) -> List[str]:
        return [self.config.timoni_bin, *args]

    def install_commands(self) -> List[List[str]]:
        """The ``go install`` commands for the configured tool versions."""
        return [
            [self.config.go_bin, "install", f"{TIMONI_PACKAGE}@{self.config.timoni_version}"],
            [self.config.go_bin, "install", f"{CUE_PACKAGE}@{self.config.cue_version}"],
        ]

    def install(self, runner: ToolRunner, cwd: Path = Path(".")) -> str:
        """Install timoni and cue with ``go install``.

        Args:
            runner: ToolRunner executing the commands
            cwd: Working directory for go

        Returns:
            Concatenated output of the install commands

        Raises:
            ToolExecutionError: If go is missing or an install fails
        """
        output = ""
        for command in self.install_commands():
            logger.info(f"Installing {command[-1]}")
            output += runner.run(command, cwd=cwd)
        return output
