"""Kubernetes core API schemas."""

import logging
from typing import List

from cueschemas.core.config import PipelineConfig
from cueschemas.core.runner import Sandbox, ToolRunner
from cueschemas.core.schema.vendored import VendoredSchema
from cueschemas.core.semver import parse_version
from cueschemas.core.toolchain import Toolchain

logger = logging.getLogger(__name__)

KUBERNETES_MODULE = "k8s.io"


class KubernetesResolver:
    """Vendors the Kubernetes API types for one API line with ``timoni mod vendor k8s``.

    Only major.minor of the requested version is passed to timoni; the
    VendoredSchema keeps the requested version unchanged.
    """

    def __init__(self, config: PipelineConfig, runner: ToolRunner):
        self.config = config
        self.toolchain = Toolchain(config)
        self.runner = runner

    def vendor_args(self, version: str) -> List[str]:
        """The timoni command line for a Kubernetes version.

        Raises:
            VersionError: If ``version`` is not a semantic version
        """
        api_line = parse_version(version).major_minor
        return self.toolchain.timoni("mod", "vendor", "k8s", "-v", api_line)

    def resolve(self, version: str) -> VendoredSchema:
        """Vendor the Kubernetes schemas for ``version``.

        Raises:
            VersionError: If ``version`` is not a semantic version
            ToolExecutionError: If cue or timoni fails
        """
        command = self.vendor_args(version)

        with Sandbox(self.runner, prefix="cueschemas-k8s-") as sandbox:
            sandbox.exec(self.toolchain.cue("mod", "init"))
            sandbox.exec(command)
            tree = sandbox.tree(f"cue.mod/gen/{KUBERNETES_MODULE}")

        logger.info(f"Vendored {KUBERNETES_MODULE} {version} ({len(tree)} files)")
        return VendoredSchema(name=KUBERNETES_MODULE, version=version, tree=tree)
