"""timoni.sh schemas bundled with the configured timoni release."""

import logging

from cueschemas.core.config import PipelineConfig
from cueschemas.core.runner import Sandbox, ToolRunner
from cueschemas.core.schema.vendored import VendoredSchema
from cueschemas.core.toolchain import Toolchain

logger = logging.getLogger(__name__)

TIMONI_MODULE = "timoni.sh"

# name of the throwaway module timoni scaffolds to obtain its schemas
SCAFFOLD_MODULE = "scaffold"


class TimoniResolver:
    """Vendors the timoni.sh schemas by scaffolding a timoni module.

    Depends on nothing but the configured timoni version, which is also the
    version of the resulting VendoredSchema.
    """

    def __init__(self, config: PipelineConfig, runner: ToolRunner):
        self.config = config
        self.toolchain = Toolchain(config)
        self.runner = runner

    def resolve(self) -> VendoredSchema:
        """Vendor the timoni.sh schemas.

        Raises:
            ToolExecutionError: If timoni fails
        """
        with Sandbox(self.runner, prefix="cueschemas-timoni-") as sandbox:
            sandbox.exec(self.toolchain.timoni("mod", "init", SCAFFOLD_MODULE))
            tree = sandbox.tree(f"{SCAFFOLD_MODULE}/cue.mod/pkg/{TIMONI_MODULE}")

        logger.info(f"Vendored {TIMONI_MODULE} {self.config.timoni_version} ({len(tree)} files)")
        return VendoredSchema(name=TIMONI_MODULE, version=self.config.timoni_version, tree=tree)
