"""
Data model for manifests, vendored schemas and registry coordinates.
"""

from cueschemas.core.schema.manifest import GithubSource, KubernetesSource, Manifest
from cueschemas.core.schema.vendored import RegistryCoordinate, VendoredSchema

__all__ = [
    "GithubSource",
    "KubernetesSource",
    "Manifest",
    "RegistryCoordinate",
    "VendoredSchema",
]
