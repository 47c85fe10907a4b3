"""Exceptions raised by the vendoring, publishing and export pipelines."""

from typing import Optional, Sequence


class CueSchemasError(Exception):
    """Base class for all cueschemas failures."""


class ConfigError(CueSchemasError):
    """Raised when a configuration value has the wrong type.

    Attributes:
        key: Dotted config key, e.g. ``github.timeout``
    """

    def __init__(self, message: str, key: str) -> None:
        super().__init__(message)
        self.key = key


class ManifestValidationError(CueSchemasError):
    """Raised when a sources manifest does not conform to the manifest schema.

    Raised before any fetch or tool invocation happens. Only the first
    violation is reported.

    Attributes:
        message: Description of the violation
        location: Dotted path of the offending field (e.g. ``github.0.owner``),
                  or None for document-level errors such as invalid YAML
    """

    def __init__(self, message: str, location: Optional[str] = None) -> None:
        super().__init__(message)
        self.location = location


class VersionError(CueSchemasError):
    """Raised when a string is not a valid semantic version.

    Attributes:
        version: The rejected version string
    """

    def __init__(self, message: str, version: str) -> None:
        super().__init__(message)
        self.version = version


class ToolExecutionError(CueSchemasError):
    """Raised when an external tool is missing or exits non-zero.

    Attributes:
        message: Description of the failure
        command: The command line that failed
        returncode: Exit status, or None if the tool could not be started
        stderr: Captured standard error of the tool
    """

    def __init__(
        self,
        message: str,
        command: Sequence[str] = (),
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr


class GitHubError(CueSchemasError):
    """Raised when a GitHub listing or download request fails."""


class ResolutionError(CueSchemasError):
    """Raised when a source cannot be resolved into vendored schemas.

    The underlying failure (VersionError, GitHubError, ToolExecutionError)
    is chained as ``__cause__``.

    Attributes:
        source: Human-readable description of the failing source
    """

    def __init__(self, message: str, source: str) -> None:
        super().__init__(message)
        self.source = source


class RewriteError(CueSchemasError):
    """Raised when a vendored schema cannot be moved under its registry coordinate.

    Attributes:
        schema: Name of the schema being rewritten
    """

    def __init__(self, message: str, schema: str) -> None:
        super().__init__(message)
        self.schema = schema


class PublishError(CueSchemasError):
    """Raised when publishing a schema fails partway through a batch.

    Publishing is sequential and best-effort: everything published before the
    failure stays published, and its tool output is kept on the exception.

    Attributes:
        schema: Name of the schema whose publish failed, or None if the
                registry login failed before any schema was attempted
        output: Concatenated publish output of the schemas published before it
    """

    def __init__(self, message: str, schema: Optional[str], output: str = "") -> None:
        super().__init__(message)
        self.schema = schema
        self.output = output
