"""
Core building blocks for cueschemas.

This package contains configuration, errors, version parsing, immutable
file-tree snapshots and the external tool runner used by every pipeline stage.
"""

__all__ = []
