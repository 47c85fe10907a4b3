"""Vendor aggregation across all sources of a manifest."""

import logging
from typing import List, Optional

from cueschemas.core.config import PipelineConfig
from cueschemas.core.errors import CueSchemasError, ResolutionError
from cueschemas.core.runner import ToolRunner
from cueschemas.core.schema.manifest import Manifest
from cueschemas.core.schema.vendored import VendoredSchema
from cueschemas.pipeline.validator import RawManifest, load_manifest
from cueschemas.sources.github import GitHubClient, GithubResolver
from cueschemas.sources.kubernetes import KubernetesResolver
from cueschemas.sources.timoni import TimoniResolver

logger = logging.getLogger(__name__)


class VendorAggregator:
    """Runs every resolver a manifest calls for, in a fixed order.

    The result is, in order:
    1. the timoni.sh schemas (always, regardless of manifest content)
    2. one schema per Kubernetes source, in manifest order
    3. every schema of every GitHub source, in manifest order

    Aggregation is all-or-nothing: the first resolver failure is raised as a
    ResolutionError and everything resolved before it is dropped.

    Example:
        >>> aggregator = VendorAggregator.from_config(PipelineConfig())
        >>> schemas = aggregator.vendor(Path("sources.yaml").read_text())
    """

    def __init__(
        self,
        timoni: TimoniResolver,
        kubernetes: KubernetesResolver,
        github: GithubResolver,
    ):
        self.timoni = timoni
        self.kubernetes = kubernetes
        self.github = github

    @classmethod
    def from_config(
        cls,
        config: PipelineConfig,
        runner: Optional[ToolRunner] = None,
        client: Optional[GitHubClient] = None,
    ) -> "VendorAggregator":
        """Build an aggregator with the default resolvers."""
        runner = runner or ToolRunner()
        client = client or GitHubClient(config)
        return cls(
            timoni=TimoniResolver(config, runner),
            kubernetes=KubernetesResolver(config, runner),
            github=GithubResolver(config, runner, client),
        )

    def vendor(self, raw: RawManifest) -> List[VendoredSchema]:
        """Validate a raw manifest, then vendor everything it lists.

        Raises:
            ManifestValidationError: If the manifest is invalid; nothing is fetched
            ResolutionError: If any resolver fails
        """
        manifest = load_manifest(raw)
        return self.vendor_manifest(manifest)

    def vendor_manifest(self, manifest: Manifest) -> List[VendoredSchema]:
        """Vendor everything an already validated manifest lists.

        Raises:
            ResolutionError: If any resolver fails
        """
        result: List[VendoredSchema] = []

        try:
            result.append(self.timoni.resolve())
        except CueSchemasError as e:
            raise ResolutionError(f"Failed to vendor timoni.sh schemas: {e}", source="timoni.sh") from e

        for k8s in manifest.kubernetes:
            source = f"k8s.io@{k8s.version}"
            try:
                result.append(self.kubernetes.resolve(k8s.version))
            except CueSchemasError as e:
                raise ResolutionError(f"Failed to vendor {source}: {e}", source=source) from e

        for gh in manifest.github:
            source = gh.describe()
            try:
                result.extend(self.github.resolve(gh))
            except CueSchemasError as e:
                raise ResolutionError(f"Failed to vendor {source}: {e}", source=source) from e

        logger.info(f"Vendored {len(result)} schemas")
        return result
