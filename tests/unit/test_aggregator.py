"""Tests for VendorAggregator."""

from typing import List

import pytest

from cueschemas.core.errors import (
    GitHubError,
    ManifestValidationError,
    ResolutionError,
    ToolExecutionError,
    VersionError,
)
from cueschemas.core.schema.manifest import GithubSource
from cueschemas.core.schema.vendored import VendoredSchema
from cueschemas.core.tree import SchemaTree
from cueschemas.pipeline.aggregator import VendorAggregator


def _schema(name: str, version: str) -> VendoredSchema:
    return VendoredSchema(name=name, version=version, tree=SchemaTree(files={"x.cue": name}))


class RecordingTimoni:
    """Timoni resolver stand-in."""

    def __init__(self, log: List[str]):
        self.log = log

    def resolve(self) -> VendoredSchema:
        self.log.append("timoni")
        return _schema("timoni.sh", "v0.22.0")


class RecordingKubernetes:
    """Kubernetes resolver stand-in; versions in ``fail`` raise."""

    def __init__(self, log: List[str], fail=()):
        self.log = log
        self.fail = set(fail)

    def resolve(self, version: str) -> VendoredSchema:
        self.log.append(f"k8s:{version}")
        if version in self.fail:
            raise VersionError(f"Invalid semantic version: {version!r}", version=version)
        return _schema("k8s.io", version)


class RecordingGithub:
    """GitHub resolver stand-in returning one schema per asset."""

    def __init__(self, log: List[str], fail_repos=()):
        self.log = log
        self.fail_repos = set(fail_repos)

    def resolve(self, source: GithubSource) -> List[VendoredSchema]:
        self.log.append(f"github:{source.repo}")
        if source.repo in self.fail_repos:
            raise GitHubError(f"Failed to list {source.owner}/{source.repo}")
        return [_schema(f"{a}.{source.repo}.io", source.tag) for a in source.assets]


def _aggregator(log, k8s_fail=(), github_fail=()):
    return VendorAggregator(
        timoni=RecordingTimoni(log),
        kubernetes=RecordingKubernetes(log, fail=k8s_fail),
        github=RecordingGithub(log, fail_repos=github_fail),
    )


MANIFEST = """
kubernetes:
  - version: "1.29.3"
  - version: "1.30.1"
github:
  - owner: o
    repo: first
    tag: v1.0.0
    assets: [a, b]
  - owner: o
    repo: second
    tag: v2.0.0
    assets: [c]
"""


class TestAggregationOrder:
    """Tests for the order of aggregated schemas."""

    def test_timoni_then_kubernetes_then_github(self):
        log: List[str] = []

        schemas = _aggregator(log).vendor(MANIFEST)

        assert [(s.name, s.version) for s in schemas] == [
            ("timoni.sh", "v0.22.0"),
            ("k8s.io", "1.29.3"),
            ("k8s.io", "1.30.1"),
            ("a.first.io", "v1.0.0"),
            ("b.first.io", "v1.0.0"),
            ("c.second.io", "v2.0.0"),
        ]
        assert log == ["timoni", "k8s:1.29.3", "k8s:1.30.1", "github:first", "github:second"]

    @pytest.mark.parametrize("raw", [
        "",
        "kubernetes: []\n",
        "github:\n  - {owner: o, repo: r, tag: v1.0.0}\n",
        MANIFEST,
    ])
    def test_first_schema_always_timoni(self, raw):
        schemas = _aggregator([]).vendor(raw)

        assert schemas[0].name == "timoni.sh"

    def test_empty_manifest_yields_only_timoni(self):
        schemas = _aggregator([]).vendor("")

        assert [s.name for s in schemas] == ["timoni.sh"]


class TestAggregationFailures:
    """Tests for the all-or-nothing failure policy."""

    @pytest.mark.parametrize("raw", [
        "kubernetes: [{version: 1.29}]\n",
        "github:\n  - repo: r\n    tag: v1.0.0\n",
        "kubernetes: [\n",
        "sources: []\n",
    ])
    def test_invalid_manifest_resolves_nothing(self, raw):
        """Test that no resolver runs for an invalid manifest."""
        log: List[str] = []

        with pytest.raises(ManifestValidationError):
            _aggregator(log).vendor(raw)

        assert log == []

    def test_kubernetes_failure_aborts(self):
        log: List[str] = []

        with pytest.raises(ResolutionError) as exc_info:
            _aggregator(log, k8s_fail={"1.30.1"}).vendor(MANIFEST)

        assert exc_info.value.source == "k8s.io@1.30.1"
        assert isinstance(exc_info.value.__cause__, VersionError)
        assert "github:first" not in log

    def test_github_failure_aborts(self):
        log: List[str] = []

        with pytest.raises(ResolutionError) as exc_info:
            _aggregator(log, github_fail={"first"}).vendor(MANIFEST)

        assert exc_info.value.source == "github.com/o/first@v1.0.0"
        assert isinstance(exc_info.value.__cause__, GitHubError)
        assert "github:second" not in log

    def test_timoni_failure_aborts(self):
        class FailingTimoni:
            def resolve(self):
                raise ToolExecutionError("timoni exited with status 1", command=["timoni"], returncode=1)

        aggregator = VendorAggregator(
            timoni=FailingTimoni(), kubernetes=RecordingKubernetes([]), github=RecordingGithub([])
        )

        with pytest.raises(ResolutionError) as exc_info:
            aggregator.vendor(MANIFEST)

        assert exc_info.value.source == "timoni.sh"


class TestFromConfig:
    """Tests for VendorAggregator.from_config() with the fake tool runner."""

    def test_real_resolvers(self, config, runner, make_github_client):
        client = make_github_client(listings={"crds": ["widgets.yaml", "README.md"]})
        raw = """
kubernetes:
  - version: "1.29.3"
github:
  - owner: acme
    repo: widgets
    tag: v0.4.0
    dirs: [crds]
"""
        aggregator = VendorAggregator.from_config(config, runner=runner, client=client)

        schemas = aggregator.vendor(raw)

        assert [(s.name, s.version) for s in schemas] == [
            ("timoni.sh", "v0.22.0"),
            ("k8s.io", "1.29.3"),
            ("widgets.example.io", "v0.4.0"),
        ]
