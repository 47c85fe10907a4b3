"""Import path rewriting for registry publication.

Vendored modules import each other by bare name (``"k8s.io/api/core/v1"``).
Before a module can be published under ``github.com/<owner>/<repo>/<name>``
every such import must carry the full registry prefix, and the module file
must declare the new module path.
"""

import logging
from typing import Dict, Mapping

from cueschemas.core.config import PipelineConfig
from cueschemas.core.errors import RewriteError, ToolExecutionError, VersionError
from cueschemas.core.runner import Sandbox, ToolRunner
from cueschemas.core.schema.vendored import RegistryCoordinate, VendoredSchema
from cueschemas.core.semver import parse_version
from cueschemas.core.toolchain import Toolchain
from cueschemas.core.tree import SchemaTree

logger = logging.getLogger(__name__)

MODULE_FILE = "cue.mod/module.cue"


def rewrite_imports(files: Mapping[str, str], name: str, prefix: str) -> Dict[str, str]:
    """Replace every ``"<name>`` with ``"<prefix>`` in every file.

    Only occurrences directly after a double quote are replaced, i.e. string
    literals that start with the bare module name. Nothing else is touched.

    Args:
        files: File path -> content mapping
        name: Bare module name, e.g. ``k8s.io``
        prefix: Full import prefix, e.g. ``github.com/acme/schemas/k8s.io``

    Returns:
        New mapping with rewritten contents
    """
    old = f'"{name}'
    new = f'"{prefix}'
    return {path: content.replace(old, new) for path, content in files.items()}


class ImportRewriter:
    """Moves a vendored schema under its registry coordinate.

    The rewrite happens on a fresh snapshot: the input schema is never
    modified, and on failure no rewritten snapshot exists to be published.
    """

    def __init__(self, config: PipelineConfig, runner: ToolRunner):
        self.config = config
        self.toolchain = Toolchain(config)
        self.runner = runner

    def coordinate(self, schema: VendoredSchema, owner: str, repo: str) -> RegistryCoordinate:
        """Compute the registry coordinate of a schema.

        Raises:
            RewriteError: If the schema version is not a semantic version
        """
        try:
            major = parse_version(schema.version).major
        except VersionError as e:
            raise RewriteError(
                f"Cannot compute registry coordinate of {schema.name}: {e}", schema=schema.name
            ) from e
        return RegistryCoordinate(
            host=self.config.registry_host, owner=owner, repo=repo, name=schema.name, major=major
        )

    def rewrite(self, schema: VendoredSchema, owner: str, repo: str) -> VendoredSchema:
        """Initialize the module file and rewrite imports for a schema.

        Args:
            schema: Schema to rewrite
            owner: Registry owner
            repo: Registry repository

        Returns:
            New VendoredSchema whose tree declares the coordinate's module path
            and imports through the coordinate's prefix

        Raises:
            RewriteError: If the version is invalid or ``cue mod init`` fails
        """
        coord = self.coordinate(schema, owner, repo)

        with Sandbox(self.runner, prefix="cueschemas-rewrite-") as sandbox:
            # cue mod init fails if a module file already exists
            sandbox.add_tree(SchemaTree(files={
                path: content for path, content in schema.tree.files.items() if path != MODULE_FILE
            }))
            try:
                sandbox.exec(self.toolchain.cue("mod", "init", coord.module_path, "--source=self"))
            except ToolExecutionError as e:
                raise RewriteError(
                    f"Failed to initialize module {coord.module_path}: {e}", schema=schema.name
                ) from e
            initialized = sandbox.tree()

        rewritten = rewrite_imports(initialized.files, schema.name, coord.import_prefix)
        logger.info(f"Rewrote {schema.name} imports to {coord.import_prefix} ({len(rewritten)} files)")
        return schema.with_tree(initialized.with_files(rewritten))
