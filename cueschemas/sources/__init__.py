"""Source resolvers.

One resolver per source kind:
- TimoniResolver: the fixed timoni.sh schema set
- KubernetesResolver: Kubernetes API types for a version
- GithubResolver: CRDs fetched from GitHub files, directories and release assets
"""

from cueschemas.sources.github import GitHubClient, GithubResolver, build_fetch_targets
from cueschemas.sources.kubernetes import KubernetesResolver
from cueschemas.sources.timoni import TimoniResolver

__all__ = [
    "GitHubClient",
    "GithubResolver",
    "KubernetesResolver",
    "TimoniResolver",
    "build_fetch_targets",
]
