"""Manifest-driven pipelines.

- validator: manifest parsing and schema validation
- aggregator: all-or-nothing vendoring across every source
- rewriter: import path rewriting under a registry coordinate
- publisher: best-effort sequential registry publishing
- exporter: flat CRD export, independent of the registry
"""

from cueschemas.pipeline.aggregator import VendorAggregator
from cueschemas.pipeline.exporter import CrdExporter
from cueschemas.pipeline.publisher import Publisher
from cueschemas.pipeline.rewriter import ImportRewriter, rewrite_imports
from cueschemas.pipeline.validator import load_manifest, read_manifest, validate_manifest

__all__ = [
    "CrdExporter",
    "ImportRewriter",
    "Publisher",
    "VendorAggregator",
    "load_manifest",
    "read_manifest",
    "rewrite_imports",
    "validate_manifest",
]
