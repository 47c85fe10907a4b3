"""Manifest validation.

The validator is the only place raw manifest documents are handled. It parses
YAML, checks the document against the manifest schema and maps it to the
typed Manifest model. Nothing downstream sees untyped data.
"""

import logging
from pathlib import Path
from typing import Any, Union

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from cueschemas.core.errors import ManifestValidationError
from cueschemas.core.schema.manifest import Manifest

logger = logging.getLogger(__name__)

RawManifest = Union[str, bytes]


def _parse_yaml(raw: RawManifest) -> Any:
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ManifestValidationError(f"Manifest is not valid UTF-8: {e}") from e

    yaml = YAML(typ="safe")
    try:
        document = yaml.load(raw)
    except YAMLError as e:
        raise ManifestValidationError(f"Failed to parse YAML: {e}") from e

    # An empty document is an empty manifest
    if document is None:
        return {}
    return document


def _first_violation(error: ValidationError) -> ManifestValidationError:
    detail = error.errors()[0]
    location = ".".join(str(part) for part in detail["loc"]) or None
    message = detail["msg"]
    if location:
        message = f"{location}: {message}"
    return ManifestValidationError(f"Invalid manifest: {message}", location=location)


def load_manifest(raw: RawManifest) -> Manifest:
    """Validate a raw manifest document and map it to the typed model.

    Args:
        raw: Manifest YAML as text or bytes

    Returns:
        Validated Manifest

    Raises:
        ManifestValidationError: On invalid YAML or the first schema violation
    """
    document = _parse_yaml(raw)

    if not isinstance(document, dict):
        raise ManifestValidationError(
            f"Invalid manifest: expected a mapping at the top level, got {type(document).__name__}"
        )

    try:
        manifest = Manifest.model_validate(document)
    except ValidationError as e:
        raise _first_violation(e) from e

    logger.info(
        f"Manifest valid: {len(manifest.kubernetes)} kubernetes, "
        f"{len(manifest.github)} github sources"
    )
    return manifest


def validate_manifest(raw: RawManifest) -> None:
    """Check a raw manifest document without keeping the result.

    Raises:
        ManifestValidationError: On invalid YAML or the first schema violation
    """
    load_manifest(raw)


def read_manifest(path: Union[str, Path]) -> Manifest:
    """Read and validate a manifest file.

    Raises:
        ManifestValidationError: If the file cannot be read or is invalid
    """
    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        raise ManifestValidationError(f"Cannot read manifest {path}: {e}") from e
    return load_manifest(raw)
