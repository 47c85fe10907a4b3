"""Shared fixtures: a fake tool runner and a fake GitHub client.

The fake runner records every command and simulates the files cue and timoni
would write, so pipelines run without the real tools or network.
"""

import json
from pathlib import Path, PurePosixPath
from typing import Callable, Dict, List, Mapping, Optional, Sequence
from urllib.parse import urlparse

import pytest

from cueschemas.core.config import PipelineConfig
from cueschemas.core.errors import GitHubError, ToolExecutionError
from cueschemas.core.runner import ToolRunner
from cueschemas.sources.github import ContentEntry


class FakeToolRunner(ToolRunner):
    """Records commands and fakes the filesystem effects of cue and timoni."""

    def __init__(self, fail_when: Optional[Callable[[List[str]], bool]] = None):
        super().__init__()
        self.calls: List[Dict] = []
        self.fail_when = fail_when
        # CRD module each fetch URL produces; default derives it from the file name
        self.crd_groups: Dict[str, str] = {}

    def commands(self) -> List[List[str]]:
        return [call["args"] for call in self.calls]

    def run(self, args: Sequence[str], cwd: Path, env: Optional[Mapping[str, str]] = None) -> str:
        args = list(args)
        self.calls.append({"args": args, "cwd": Path(cwd), "env": dict(env or {})})

        if self.fail_when is not None and self.fail_when(args):
            raise ToolExecutionError(
                f"{' '.join(args)} exited with status 1: simulated failure",
                command=args, returncode=1, stderr="simulated failure",
            )

        cwd = Path(cwd)
        if args[:3] == ["cue", "mod", "init"]:
            module = args[3] if len(args) > 3 else "cue.example"
            module_file = cwd / "cue.mod" / "module.cue"
            if module_file.exists():
                raise ToolExecutionError("cue.mod/module.cue already exists", command=args, returncode=1)
            self._write(module_file, f'module: "{module}"\nlanguage: version: "v0.9.0"\n')
        elif args[:4] == ["timoni", "mod", "vendor", "k8s"]:
            api_line = args[5]
            self._write(
                cwd / "cue.mod/gen/k8s.io/api/core/v1/types_gen.cue",
                f'// kubernetes {api_line}\npackage v1\n\nimport "k8s.io/apimachinery/pkg/apis/meta/v1"\n',
            )
            self._write(
                cwd / "cue.mod/gen/k8s.io/apimachinery/pkg/apis/meta/v1/types_gen.cue",
                "package v1\n",
            )
        elif args[:3] == ["timoni", "mod", "init"]:
            self._write(
                cwd / args[3] / "cue.mod/pkg/timoni.sh/core/v1alpha1/image.cue",
                'package v1alpha1\n\nimport "timoni.sh/core/v1alpha1/semver"\n',
            )
        elif args[:4] == ["timoni", "mod", "vendor", "crds"]:
            url = args[5]
            stem = PurePosixPath(urlparse(url).path).stem
            group = self.crd_groups.get(url, f"{stem}.example.io")
            self._write(
                cwd / "cue.mod/gen" / group / stem / "v1/types_gen.cue",
                f'// source: {url}\npackage v1\n\nimport "{group}/{stem}/common"\n',
            )
        elif args[:3] == ["cue", "mod", "publish"]:
            module = (cwd / "cue.mod/module.cue").read_text().splitlines()[0].split('"')[1]
            return json.dumps({"module": module, "version": args[3]}) + "\n"
        elif args[:2] == ["cue", "export"]:
            docs = sorted(p.name for p in cwd.iterdir() if p.suffix in (".yaml", ".yml"))
            self._write(cwd / args[-1], "package crds\n\n// " + ",".join(docs) + "\n")
        return ""

    @staticmethod
    def _write(path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


class FakeGitHubClient:
    """In-memory stand-in for GitHubClient."""

    def __init__(self, listings: Optional[Dict[str, List[str]]] = None, fail_listing: bool = False):
        self.listings = listings or {}
        self.fail_listing = fail_listing
        self.listed: List[tuple] = []
        self.downloaded: List[str] = []

    def list_directory(self, owner: str, repo: str, path: str, ref: str) -> List[ContentEntry]:
        self.listed.append((owner, repo, path, ref))
        if self.fail_listing:
            raise GitHubError(f"Failed to list {owner}/{repo}/{path} at {ref}: 404 Not Found")
        return [
            ContentEntry(
                name=name,
                path=f"{path}/{name}",
                download_url=f"https://raw.githubusercontent.com/{owner}/{repo}/{ref}/{path}/{name}",
            )
            for name in self.listings.get(path, [])
        ]

    def download(self, url: str, dest: Path) -> Path:
        self.downloaded.append(url)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(f"# {url}\nkind: CustomResourceDefinition\n")
        return dest


@pytest.fixture
def config() -> PipelineConfig:
    return PipelineConfig(cue_version="v0.10.0", timoni_version="v0.22.0")


@pytest.fixture
def runner() -> FakeToolRunner:
    return FakeToolRunner()


@pytest.fixture
def make_runner() -> Callable[..., FakeToolRunner]:
    return FakeToolRunner


@pytest.fixture
def github_client() -> FakeGitHubClient:
    return FakeGitHubClient()


@pytest.fixture
def make_github_client() -> Callable[..., FakeGitHubClient]:
    return FakeGitHubClient
