"""Typed model of a sources manifest.

A manifest lists the schema sources to vendor, export or publish:

.. code-block:: yaml

    kubernetes:
      - version: "1.29.3"
    github:
      - owner: fluxcd
        repo: flux2
        tag: v2.3.0
        assets: [install.yaml]

Both lists are optional. Unknown keys are rejected at every level.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class KubernetesSource(BaseModel):
    """A Kubernetes API version to vendor; only major.minor is significant."""

    version: str = Field(description="Kubernetes version, e.g. 1.29.3")

    model_config = ConfigDict(extra="forbid", frozen=True, strict=True)


class GithubSource(BaseModel):
    """CRD documents published in a GitHub repository.

    Targets are taken from raw repository files, from every YAML file in a
    repository directory, and from release assets. All three lists may be
    empty, in which case the source yields nothing.
    """

    tag: str = Field(description="Release tag; also the version of the vendored schemas")
    ref: Optional[str] = Field(default=None, description="Git ref to fetch from (default: tag)")
    owner: str
    repo: str
    files: List[str] = Field(default_factory=list, description="Repository file paths")
    dirs: List[str] = Field(default_factory=list, description="Repository directory paths")
    assets: List[str] = Field(default_factory=list, description="Release asset names")

    model_config = ConfigDict(extra="forbid", frozen=True, strict=True)

    @property
    def effective_ref(self) -> str:
        """The ref used in every constructed URL: ``ref`` if set, else ``tag``."""
        return self.ref or self.tag

    def describe(self) -> str:
        return f"github.com/{self.owner}/{self.repo}@{self.tag}"


class Manifest(BaseModel):
    """Validated sources manifest."""

    kubernetes: List[KubernetesSource] = Field(default_factory=list)
    github: List[GithubSource] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True, strict=True)
