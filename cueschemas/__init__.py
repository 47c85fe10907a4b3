"""
cueschemas: CUE schema vendoring, publishing and CRD export.

Aggregates Kubernetes API types, CRDs fetched from GitHub release artifacts
and the timoni schema set into versioned CUE modules, rewrites their import
paths and publishes them to the central CUE registry.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
