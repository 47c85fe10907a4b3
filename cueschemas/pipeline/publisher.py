"""Publishing vendored schemas to the central CUE registry.

Publishing runs Validate → Aggregate, logs in once, then for each schema in
aggregation order: rewrite imports, ``cue mod tidy``, ``cue mod publish``.

Unlike aggregation, publishing is best-effort sequential: schemas published
before a failure stay published, and their output is returned on the
PublishError together with the name of the failing schema. Schemas after the
failing one are not attempted.
"""

import logging
import shlex
import tempfile
from typing import Dict, List, Optional

from cueschemas.core.config import PipelineConfig
from cueschemas.core.errors import CueSchemasError, PublishError, ToolExecutionError
from cueschemas.core.runner import Sandbox, ToolRunner
from cueschemas.core.schema.vendored import VendoredSchema
from cueschemas.core.secret import Secret
from cueschemas.core.toolchain import Toolchain
from cueschemas.pipeline.aggregator import VendorAggregator
from cueschemas.pipeline.rewriter import ImportRewriter
from cueschemas.pipeline.validator import RawManifest
from cueschemas.sources.github import GitHubClient

logger = logging.getLogger(__name__)

# environment variable carrying the registry token into ``cue login``
TOKEN_ENV = "CUE_TOKEN"


def publish_tag(version: str) -> str:
    """The tag passed to ``cue mod publish``; cue requires a leading ``v``."""
    return version if version.startswith("v") else f"v{version}"


class Publisher:
    """Publishes every schema of a manifest under a registry owner/repo.

    Example:
        >>> publisher = Publisher.from_config(PipelineConfig())
        >>> output = publisher.publish(raw, "acme", "schemas", Secret(token))
    """

    def __init__(
        self,
        config: PipelineConfig,
        runner: ToolRunner,
        aggregator: VendorAggregator,
        rewriter: ImportRewriter,
    ):
        self.config = config
        self.toolchain = Toolchain(config)
        self.runner = runner
        self.aggregator = aggregator
        self.rewriter = rewriter

    @classmethod
    def from_config(
        cls,
        config: PipelineConfig,
        runner: Optional[ToolRunner] = None,
        client: Optional[GitHubClient] = None,
    ) -> "Publisher":
        """Build a publisher with the default aggregator and rewriter."""
        runner = runner or ToolRunner()
        return cls(
            config=config,
            runner=runner,
            aggregator=VendorAggregator.from_config(config, runner=runner, client=client),
            rewriter=ImportRewriter(config, runner),
        )

    def publish(self, raw: RawManifest, owner: str, repo: str, token: Secret) -> str:
        """Vendor and publish everything a manifest lists.

        Args:
            raw: Manifest YAML
            owner: Registry owner
            repo: Registry repository
            token: Registry token

        Returns:
            Concatenated ``cue mod publish`` output of all schemas

        Raises:
            ManifestValidationError: If the manifest is invalid; nothing is fetched
            ResolutionError: If vendoring fails; nothing is published
            PublishError: If login or a schema's publish fails; ``output``
                          holds what was published before
        """
        schemas = self.aggregator.vendor(raw)

        # login state lives in CUE_CONFIG_DIR, owned by this run only
        with tempfile.TemporaryDirectory(prefix="cueschemas-session-") as config_dir:
            session_env = {"CUE_CONFIG_DIR": config_dir}
            self.login(token, session_env)
            return self.publish_schemas(schemas, owner, repo, session_env)

    def login(self, token: Secret, session_env: Dict[str, str]) -> None:
        """Log in to the registry once for the whole batch.

        The token reaches cue only through the environment, never the command line.

        Raises:
            PublishError: If ``cue login`` fails
        """
        env = dict(session_env)
        env[TOKEN_ENV] = token.reveal()
        command = f'{shlex.quote(self.config.cue_bin)} login --token "${TOKEN_ENV}"'

        with Sandbox(self.runner, env=env, prefix="cueschemas-login-") as sandbox:
            try:
                sandbox.exec(["sh", "-c", command])
            except ToolExecutionError as e:
                raise PublishError(f"Registry login failed: {e}", schema=None) from e

        logger.info("Logged in to the registry")

    def publish_schema(
        self, schema: VendoredSchema, owner: str, repo: str, session_env: Dict[str, str]
    ) -> str:
        """Rewrite, tidy and publish one schema.

        Returns:
            Output of ``cue mod publish``

        Raises:
            RewriteError: If the schema cannot be moved under its coordinate
            ToolExecutionError: If tidy or publish fails
        """
        rewritten = self.rewriter.rewrite(schema, owner, repo)

        with Sandbox(self.runner, env=session_env, prefix="cueschemas-publish-") as sandbox:
            sandbox.add_tree(rewritten.tree)
            sandbox.exec(self.toolchain.cue("mod", "tidy"))
            output = sandbox.exec(
                self.toolchain.cue("mod", "publish", publish_tag(schema.version), "--ignore", "--json")
            )

        logger.info(f"Published {schema.name}@{schema.version}")
        return output

    def publish_schemas(
        self,
        schemas: List[VendoredSchema],
        owner: str,
        repo: str,
        session_env: Dict[str, str],
    ) -> str:
        """Publish schemas in order, stopping at the first failure.

        Raises:
            PublishError: Naming the failing schema, with the output so far
        """
        output = ""
        for schema in schemas:
            try:
                output += self.publish_schema(schema, owner, repo, session_env)
            except CueSchemasError as e:
                logger.error(f"Publishing {schema.name}@{schema.version} failed: {e}")
                raise PublishError(
                    f"Failed to publish {schema.name}@{schema.version}: {e}",
                    schema=schema.name,
                    output=output,
                ) from e
        return output
