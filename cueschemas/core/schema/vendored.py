"""Vendored schema modules and their registry coordinates."""

from dataclasses import dataclass

from cueschemas.core.tree import SchemaTree


@dataclass(frozen=True)
class VendoredSchema:
    """A vendored CUE schema module.

    Attributes:
        name: Module namespace, e.g. ``k8s.io``, ``timoni.sh`` or a CRD API group
        version: Source tag, Kubernetes version or timoni version
        tree: Snapshot of the module's files
    """
    name: str
    version: str
    tree: SchemaTree

    def with_tree(self, tree: SchemaTree) -> "VendoredSchema":
        """Return a copy of this schema with a different file tree."""
        return VendoredSchema(name=self.name, version=self.version, tree=tree)


@dataclass(frozen=True)
class RegistryCoordinate:
    """Where a schema lives in the registry.

    Example:
        >>> coord = RegistryCoordinate("github.com", "acme", "app", "foo", 2)
        >>> coord.module_path
        'github.com/acme/app/foo@v2'
    """
    host: str
    owner: str
    repo: str
    name: str
    major: int

    @property
    def import_prefix(self) -> str:
        """Import path prefix that replaces the bare module name."""
        return f"{self.host}/{self.owner}/{self.repo}/{self.name}"

    @property
    def module_path(self) -> str:
        """Module identity passed to ``cue mod init``."""
        return f"{self.import_prefix}@v{self.major}"
