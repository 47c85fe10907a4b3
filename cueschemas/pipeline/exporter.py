"""CRD export from GitHub sources.

Export is independent of vendoring and publishing: for each GitHub source the
CRD documents are downloaded, imported into one CUE package keyed by
lower-cased kind and metadata name, and exported as a single file named
``<owner>-<repo>.cue``.
"""

import logging
from pathlib import PurePosixPath
from typing import Dict, Optional
from urllib.parse import unquote, urlparse

from cueschemas.core.config import PipelineConfig
from cueschemas.core.runner import Sandbox, ToolRunner
from cueschemas.core.schema.manifest import GithubSource, Manifest
from cueschemas.core.toolchain import Toolchain
from cueschemas.core.tree import SchemaTree
from cueschemas.pipeline.validator import RawManifest, load_manifest
from cueschemas.sources.github import GitHubClient, build_fetch_targets

logger = logging.getLogger(__name__)

EXPORT_PACKAGE = "crds"
EXPORT_FILE = "crds.cue"

# scratch directory inside the sandbox that receives the downloaded documents
DOWNLOAD_DIR = "gen"


def export_filename(source: GithubSource) -> str:
    return f"{source.owner}-{source.repo}.cue"


def download_name(url: str, taken: Dict[str, int]) -> str:
    """Local file name for a download, unique within one export.

    Uses the last URL path segment. Repeated names get a numeric suffix
    before the extension so cue still recognizes the file type. Every name
    handed out is recorded in ``taken``, suffixed ones included.
    """
    name = PurePosixPath(unquote(urlparse(url).path)).name or "download.yaml"
    path = PurePosixPath(name)
    count = taken.get(name, 0)
    candidate = name
    while candidate in taken:
        count += 1
        candidate = f"{path.stem}-{count}{path.suffix}"
    taken[name] = count
    taken[candidate] = 0
    return candidate


class CrdExporter:
    """Exports GitHub-hosted CRDs as flat CUE files.

    Example:
        >>> exporter = CrdExporter.from_config(PipelineConfig())
        >>> exporter.export(raw).write_to_dir("crds/")
    """

    def __init__(self, config: PipelineConfig, runner: ToolRunner, client: GitHubClient):
        self.config = config
        self.toolchain = Toolchain(config)
        self.runner = runner
        self.client = client

    @classmethod
    def from_config(
        cls,
        config: PipelineConfig,
        runner: Optional[ToolRunner] = None,
        client: Optional[GitHubClient] = None,
    ) -> "CrdExporter":
        return cls(config, runner or ToolRunner(), client or GitHubClient(config))

    def export_github(self, source: GithubSource) -> str:
        """Export the CRDs of one GitHub source as CUE.

        Returns:
            Content of the exported CUE file

        Raises:
            GitHubError: If a listing or download fails
            ToolExecutionError: If cue import or export fails
        """
        targets = build_fetch_targets(source, self.client)

        with Sandbox(self.runner, prefix="cueschemas-export-") as sandbox:
            taken: Dict[str, int] = {}
            for url in targets:
                dest = sandbox.path(DOWNLOAD_DIR) / download_name(url, taken)
                self.client.download(url, dest)

            sandbox.exec(
                self.toolchain.cue(
                    "import", "-f",
                    "-l", "strings.ToLower(kind)",
                    "-l", "strings.ToLower(metadata.name)",
                    "-p", EXPORT_PACKAGE,
                ),
                workdir=DOWNLOAD_DIR,
            )
            sandbox.exec(
                self.toolchain.cue("export", "-e", "customresourcedefinition", "-o", EXPORT_FILE),
                workdir=DOWNLOAD_DIR,
            )
            content = sandbox.path(f"{DOWNLOAD_DIR}/{EXPORT_FILE}").read_text(encoding="utf-8")

        logger.info(f"Exported {len(targets)} documents from {source.describe()}")
        return content

    def export_manifest(self, manifest: Manifest) -> SchemaTree:
        """Export every GitHub source of a validated manifest.

        Returns:
            Tree with one ``<owner>-<repo>.cue`` file per source

        Raises:
            GitHubError: If any source fails; nothing is returned
            ToolExecutionError: If any source fails; nothing is returned
        """
        files = {}
        for source in manifest.github:
            files[export_filename(source)] = self.export_github(source)
        return SchemaTree(files=files)

    def export(self, raw: RawManifest) -> SchemaTree:
        """Validate a raw manifest and export its GitHub sources.

        Raises:
            ManifestValidationError: If the manifest is invalid; nothing is fetched
        """
        return self.export_manifest(load_manifest(raw))
