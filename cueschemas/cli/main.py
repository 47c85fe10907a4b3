"""cueschemas CLI - vendor, publish and export CUE schemas.

This module provides the main CLI entrypoint for cueschemas, exposing the
manifest-driven pipelines and the individual source resolvers.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from cueschemas.core.config import PipelineConfig
from cueschemas.core.errors import CueSchemasError, ManifestValidationError, PublishError
from cueschemas.core.runner import ToolRunner
from cueschemas.core.schema.manifest import GithubSource
from cueschemas.core.schema.vendored import VendoredSchema
from cueschemas.core.secret import Secret
from cueschemas.core.toolchain import Toolchain
from cueschemas.pipeline.aggregator import VendorAggregator
from cueschemas.pipeline.exporter import CrdExporter, export_filename
from cueschemas.pipeline.publisher import TOKEN_ENV, Publisher
from cueschemas.pipeline.validator import read_manifest
from cueschemas.sources.github import GitHubClient, GithubResolver
from cueschemas.sources.kubernetes import KubernetesResolver
from cueschemas.sources.timoni import TimoniResolver

logger = logging.getLogger(__name__)


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--config",
        default="config.json",
        help="Path to config file (default: config.json)"
    )
    parser.add_argument(
        "--cue-version",
        help="cue version (default: from config.json or latest)"
    )
    parser.add_argument(
        "--timoni-version",
        help="timoni version (default: from config.json or latest)"
    )


def _add_github_source_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--owner", required=True, help="GitHub owner")
    parser.add_argument("--repo", required=True, help="GitHub repository")
    parser.add_argument("--tag", required=True, help="Release tag")
    parser.add_argument("--ref", help="Git ref to fetch from (default: --tag)")
    parser.add_argument("--file", action="append", default=[], help="Repository file (repeatable)")
    parser.add_argument("--dir", action="append", default=[], help="Repository directory (repeatable)")
    parser.add_argument("--asset", action="append", default=[], help="Release asset (repeatable)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cueschemas",
        description="cueschemas - vendor, publish and export CUE schemas",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check a sources manifest
  cueschemas validate sources.yaml

  # Vendor every source into schemas/<name>/<version>/
  cueschemas vendor sources.yaml --out schemas/

  # Publish to github.com/acme/schemas (token read from $CUE_TOKEN)
  # timoni.sh is published under the timoni version, so pin one
  cueschemas publish sources.yaml --owner acme --repo schemas --timoni-version v0.22.0

  # Export CRDs as one CUE file per GitHub source
  cueschemas export sources.yaml --out crds/

Note:
  Tool versions and GitHub settings are read from config.json, e.g.
  {'tools': {'cue_version': 'v0.10.0', 'timoni_version': 'v0.22.0'}}.
  publish needs a pinned timoni version: with the default "latest" the
  timoni.sh schema has no semantic version and its publish fails.
"""
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    validate_parser = subparsers.add_parser("validate", help="Validate a sources manifest")
    validate_parser.add_argument("manifest", help="Path to sources.yaml")
    _add_common_args(validate_parser)

    vendor_parser = subparsers.add_parser("vendor", help="Vendor all schemas of a manifest")
    vendor_parser.add_argument("manifest", help="Path to sources.yaml")
    vendor_parser.add_argument("--out", required=True, help="Output directory")
    _add_common_args(vendor_parser)

    k8s_parser = subparsers.add_parser("vendor-k8s", help="Vendor Kubernetes API schemas")
    k8s_parser.add_argument("version", help="Kubernetes version, e.g. 1.29.3")
    k8s_parser.add_argument("--out", required=True, help="Output directory")
    _add_common_args(k8s_parser)

    timoni_parser = subparsers.add_parser("vendor-timoni", help="Vendor timoni.sh schemas")
    timoni_parser.add_argument("--out", required=True, help="Output directory")
    _add_common_args(timoni_parser)

    github_parser = subparsers.add_parser("vendor-github", help="Vendor CRD schemas from GitHub")
    _add_github_source_args(github_parser)
    github_parser.add_argument("--out", required=True, help="Output directory")
    _add_common_args(github_parser)

    publish_parser = subparsers.add_parser("publish", help="Publish all schemas of a manifest")
    publish_parser.add_argument("manifest", help="Path to sources.yaml")
    publish_parser.add_argument("--owner", required=True, help="Registry owner")
    publish_parser.add_argument("--repo", required=True, help="Registry repository")
    publish_parser.add_argument(
        "--token-env",
        default=TOKEN_ENV,
        help=f"Environment variable holding the registry token (default: {TOKEN_ENV})"
    )
    _add_common_args(publish_parser)

    export_parser = subparsers.add_parser("export", help="Export CRDs of a manifest")
    export_parser.add_argument("manifest", help="Path to sources.yaml")
    export_parser.add_argument("--out", required=True, help="Output directory")
    _add_common_args(export_parser)

    export_github_parser = subparsers.add_parser("export-github", help="Export CRDs of one GitHub source")
    _add_github_source_args(export_github_parser)
    export_github_parser.add_argument("--out", required=True, help="Output directory")
    _add_common_args(export_github_parser)

    install_parser = subparsers.add_parser("install-tools", help="Install cue and timoni with go install")
    _add_common_args(install_parser)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entrypoint for cueschemas."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging
    if getattr(args, "verbose", False):
        logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
    else:
        logging.basicConfig(level=logging.WARNING, format='%(levelname)s: %(message)s')

    handlers = {
        "validate": cmd_validate,
        "vendor": cmd_vendor,
        "vendor-k8s": cmd_vendor_k8s,
        "vendor-timoni": cmd_vendor_timoni,
        "vendor-github": cmd_vendor_github,
        "publish": cmd_publish,
        "export": cmd_export,
        "export-github": cmd_export_github,
        "install-tools": cmd_install_tools,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        config = PipelineConfig.load(
            args.config,
            cue_version=args.cue_version,
            timoni_version=args.timoni_version,
        )
        return handler(args, config)
    except PublishError as e:
        if e.output:
            print(e.output, end="" if e.output.endswith("\n") else "\n")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except CueSchemasError as e:
        print(f"Error: {e}", file=sys.stderr)
        logger.debug("Command failed", exc_info=True)
        return 1


def _source_from_args(args) -> GithubSource:
    return GithubSource(
        owner=args.owner,
        repo=args.repo,
        tag=args.tag,
        ref=args.ref,
        files=args.file,
        dirs=args.dir,
        assets=args.asset,
    )


def _read_manifest_bytes(path: str) -> bytes:
    manifest_path = Path(path)
    if not manifest_path.is_file():
        raise ManifestValidationError(f"Manifest not found: {manifest_path}")
    return manifest_path.read_bytes()


def _write_schemas(schemas: List[VendoredSchema], out: Path) -> None:
    for schema in schemas:
        target = out / schema.name / schema.version
        schema.tree.write_to_dir(str(target))
        print(f"  {schema.name}@{schema.version}: {len(schema.tree)} files -> {target}")


def cmd_validate(args, config: PipelineConfig) -> int:
    """Handle validate command."""
    manifest = read_manifest(args.manifest)
    print(f"✓ {args.manifest} is valid "
          f"({len(manifest.kubernetes)} kubernetes, {len(manifest.github)} github sources)")
    return 0


def cmd_vendor(args, config: PipelineConfig) -> int:
    """Handle vendor command."""
    raw = _read_manifest_bytes(args.manifest)
    schemas = VendorAggregator.from_config(config).vendor(raw)
    print(f"Vendored {len(schemas)} schemas:")
    _write_schemas(schemas, Path(args.out))
    return 0


def cmd_vendor_k8s(args, config: PipelineConfig) -> int:
    """Handle vendor-k8s command."""
    schema = KubernetesResolver(config, ToolRunner()).resolve(args.version)
    _write_schemas([schema], Path(args.out))
    return 0


def cmd_vendor_timoni(args, config: PipelineConfig) -> int:
    """Handle vendor-timoni command."""
    schema = TimoniResolver(config, ToolRunner()).resolve()
    _write_schemas([schema], Path(args.out))
    return 0


def cmd_vendor_github(args, config: PipelineConfig) -> int:
    """Handle vendor-github command."""
    resolver = GithubResolver(config, ToolRunner(), GitHubClient(config))
    schemas = resolver.resolve(_source_from_args(args))
    _write_schemas(schemas, Path(args.out))
    return 0


def cmd_publish(args, config: PipelineConfig) -> int:
    """Handle publish command."""
    token_value = os.environ.get(args.token_env)
    if not token_value:
        print(f"Error: registry token not set; export {args.token_env}", file=sys.stderr)
        return 1

    raw = _read_manifest_bytes(args.manifest)
    publisher = Publisher.from_config(config)
    output = publisher.publish(raw, args.owner, args.repo, Secret(token_value))
    print(output, end="")
    return 0


def cmd_export(args, config: PipelineConfig) -> int:
    """Handle export command."""
    raw = _read_manifest_bytes(args.manifest)
    tree = CrdExporter.from_config(config).export(raw)
    tree.write_to_dir(args.out)
    for name in tree.entries():
        print(f"  {Path(args.out) / name}")
    return 0


def cmd_export_github(args, config: PipelineConfig) -> int:
    """Handle export-github command."""
    source = _source_from_args(args)
    content = CrdExporter.from_config(config).export_github(source)
    out = Path(args.out)
    out.mkdir(parents=True, exist_ok=True)
    target = out / export_filename(source)
    target.write_text(content, encoding="utf-8")
    print(f"  {target}")
    return 0


def cmd_install_tools(args, config: PipelineConfig) -> int:
    """Handle install-tools command."""
    print(f"Installing timoni {config.timoni_version} and cue {config.cue_version}...")
    Toolchain(config).install(ToolRunner())
    print("✓ Tools installed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
