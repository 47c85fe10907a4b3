"""Immutable file-tree snapshots.

This module provides the SchemaTree class that stands in for a directory of
CUE files. Every pipeline step takes a SchemaTree in and hands a new one out,
so no step ever edits another step's files.
"""

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from types import MappingProxyType
from typing import List, Mapping


def _normalize(rel_path: str) -> str:
    """Normalize a relative path to POSIX form without leading ``./``."""
    path = PurePosixPath(rel_path.replace("\\", "/"))
    if path.is_absolute() or ".." in path.parts:
        raise ValueError(f"Tree paths must be relative and stay inside the tree: {rel_path!r}")
    return str(path)


@dataclass(frozen=True)
class SchemaTree:
    """Snapshot of a directory of text files.

    Attributes:
        files: Read-only mapping from POSIX relative path to file content.
               Example: ``{"api/core/v1/types_gen.cue": "package v1\\n..."}``

    Example:
        >>> tree = SchemaTree(files={"apps/v1/types_gen.cue": "package v1"})
        >>> tree.entries()
        ['apps']
    """
    files: Mapping[str, str]

    def __post_init__(self) -> None:
        normalized = {_normalize(path): content for path, content in self.files.items()}
        object.__setattr__(self, "files", MappingProxyType(normalized))

    def __len__(self) -> int:
        return len(self.files)

    def entries(self) -> List[str]:
        """List the names one level deep, sorted.

        Returns:
            Sorted list of top-level file and directory names
        """
        return sorted({path.split("/", 1)[0] for path in self.files})

    def with_files(self, files: Mapping[str, str]) -> "SchemaTree":
        """Layer ``files`` on top of this tree.

        Args:
            files: Files to add or replace

        Returns:
            New SchemaTree (original unchanged)
        """
        merged = dict(self.files)
        merged.update(files)
        return SchemaTree(files=merged)

    def write_to_dir(self, dir_path: str) -> None:
        """Write all files below ``dir_path``.

        Creates the directory and any intermediate directories.

        Args:
            dir_path: Directory path where files should be written
        """
        root = Path(dir_path)
        root.mkdir(parents=True, exist_ok=True)

        for rel_path, content in self.files.items():
            file_path = root / rel_path
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding="utf-8")

    @classmethod
    def from_dir(cls, dir_path: str) -> "SchemaTree":
        """Capture every regular file below a directory.

        Args:
            dir_path: Directory to capture

        Returns:
            SchemaTree with all files (empty if the directory does not exist)
        """
        root = Path(dir_path)
        files = {}

        if not root.is_dir():
            return cls(files=files)

        for file_path in sorted(root.rglob("*")):
            if file_path.is_file():
                rel_path = file_path.relative_to(root).as_posix()
                files[rel_path] = file_path.read_text(encoding="utf-8")

        return cls(files=files)
