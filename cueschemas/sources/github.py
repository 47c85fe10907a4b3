"""GitHub-hosted CRD sources.

This module turns a GithubSource into an ordered list of fetch targets and
vendors the CRDs behind them:

1. Repository files → raw content URLs at the effective ref
2. Repository directories → every YAML entry of the directory listing
3. Release assets → release download URLs

Targets keep that order; directory entries keep listing order.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

import requests

from cueschemas.core.config import PipelineConfig
from cueschemas.core.errors import GitHubError
from cueschemas.core.runner import Sandbox, ToolRunner
from cueschemas.core.schema.manifest import GithubSource
from cueschemas.core.schema.vendored import VendoredSchema
from cueschemas.core.toolchain import Toolchain

logger = logging.getLogger(__name__)

YAML_EXTENSIONS = (".yaml", ".yml")

# timoni writes generated CRD modules below this directory of the working module
GEN_DIR = "cue.mod/gen"


def raw_file_url(owner: str, repo: str, ref: str, path: str) -> str:
    """URL of a repository file's raw content at a tag."""
    return f"https://raw.githubusercontent.com/{owner}/{repo}/refs/tags/{ref}/{path.lstrip('/')}"


def release_asset_url(owner: str, repo: str, ref: str, asset: str) -> str:
    """URL of a release asset download."""
    return f"https://github.com/{owner}/{repo}/releases/download/{ref}/{asset}"


def is_yaml(name: str) -> bool:
    return name.endswith(YAML_EXTENSIONS)


@dataclass(frozen=True)
class ContentEntry:
    """One entry of a GitHub directory listing."""
    name: str
    path: str
    download_url: Optional[str] = None


class GitHubClient:
    """Minimal GitHub REST client for directory listings and downloads.

    Example:
        >>> client = GitHubClient(PipelineConfig())
        >>> entries = client.list_directory("fluxcd", "flux2", "manifests/crds", "v2.3.0")
    """

    def __init__(self, config: PipelineConfig, session: Optional[requests.Session] = None):
        """Initialize GitHubClient.

        Args:
            config: Pipeline configuration (API URL, token, timeout)
            session: Optional requests session (created if None)
        """
        self.api_url = config.github_api_url.rstrip("/")
        self.timeout = config.http_timeout
        self._session = session or requests.Session()
        if config.github_token:
            self._session.headers["Authorization"] = f"Bearer {config.github_token}"

    def list_directory(self, owner: str, repo: str, path: str, ref: str) -> List[ContentEntry]:
        """List a repository directory at a ref.

        A path that resolves to a single file yields no entries.

        Raises:
            GitHubError: On network failure or a non-2xx response
        """
        url = f"{self.api_url}/repos/{owner}/{repo}/contents/{quote(path.strip('/'))}"
        logger.info(f"Listing {owner}/{repo}/{path} at {ref}")

        try:
            response = self._session.get(
                url,
                params={"ref": ref},
                headers={"Accept": "application/vnd.github+json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise GitHubError(f"Failed to list {owner}/{repo}/{path} at {ref}: {e}") from e
        except ValueError as e:
            raise GitHubError(f"Invalid listing response for {owner}/{repo}/{path}: {e}") from e

        if not isinstance(payload, list):
            logger.warning(f"{owner}/{repo}/{path} at {ref} is not a directory, skipping")
            return []

        return [
            ContentEntry(
                name=item.get("name", ""),
                path=item.get("path", ""),
                download_url=item.get("download_url"),
            )
            for item in payload
        ]

    def download(self, url: str, dest: Path) -> Path:
        """Download ``url`` to the file ``dest``.

        Raises:
            GitHubError: On network failure or a non-2xx response
        """
        logger.info(f"Downloading {url}")
        try:
            with self._session.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                dest.parent.mkdir(parents=True, exist_ok=True)
                with open(dest, "wb") as f:
                    for chunk in response.iter_content(chunk_size=65536):
                        f.write(chunk)
        except requests.RequestException as e:
            raise GitHubError(f"Failed to download {url}: {e}") from e
        return dest


def build_fetch_targets(source: GithubSource, client: GitHubClient) -> List[str]:
    """Build the ordered list of URLs to fetch for a GitHub source.

    Args:
        source: GitHub source descriptor
        client: Client used for directory listings

    Returns:
        URLs in file, directory, asset order. Empty if the source names nothing.

    Raises:
        GitHubError: If a directory listing fails; no targets are returned then
    """
    ref = source.effective_ref
    targets = [raw_file_url(source.owner, source.repo, ref, f) for f in source.files]

    for directory in source.dirs:
        for entry in client.list_directory(source.owner, source.repo, directory, ref):
            if not is_yaml(entry.name):
                logger.debug(f"Skipping non-YAML entry {entry.path}")
                continue
            if entry.download_url:
                targets.append(entry.download_url)
            else:
                targets.append(raw_file_url(source.owner, source.repo, ref, entry.path))

    targets.extend(release_asset_url(source.owner, source.repo, ref, a) for a in source.assets)

    logger.info(f"{source.describe()}: {len(targets)} fetch targets")
    return targets


class GithubResolver:
    """Vendors CRD schemas from a GitHub source.

    Every fetch target is passed to ``timoni mod vendor crds`` in one shared
    working module. Each generated module one level below ``cue.mod/gen``
    becomes its own VendoredSchema, versioned with the source tag.
    """

    def __init__(self, config: PipelineConfig, runner: ToolRunner, client: GitHubClient):
        self.config = config
        self.toolchain = Toolchain(config)
        self.runner = runner
        self.client = client

    def resolve(self, source: GithubSource) -> List[VendoredSchema]:
        """Vendor every CRD module produced by a GitHub source.

        Returns:
            One VendoredSchema per generated module, sorted by name

        Raises:
            GitHubError: If a directory listing fails
            ToolExecutionError: If cue or timoni fails
        """
        targets = build_fetch_targets(source, self.client)

        with Sandbox(self.runner, prefix="cueschemas-github-") as sandbox:
            sandbox.exec(self.toolchain.cue("mod", "init"))
            for url in targets:
                sandbox.exec(self.toolchain.timoni("mod", "vendor", "crds", "-f", url))

            schemas = [
                VendoredSchema(name=mod, version=source.tag, tree=sandbox.tree(f"{GEN_DIR}/{mod}"))
                for mod in sandbox.entries(GEN_DIR)
            ]

        logger.info(f"{source.describe()}: vendored {[s.name for s in schemas]}")
        return schemas
