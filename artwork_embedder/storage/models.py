"""Storage domain models."""

from dataclasses import dataclass
from pathlib import Path

from ..core.config import Paths


@dataclass
class EmbeddingJob:
    """Everything one commit needs to embed a picture into one file."""

    source_path: Path
    artwork_path: Path
    container_family: str
    replace_existing: bool = False

    @property
    def temp_path(self) -> Path:
        """Side file receiving the embedded output."""
        return Paths.temp_path(self.source_path)


@dataclass
class BackupHandle:
    """Verbatim sibling copy of a file taken before any work starts."""

    original_path: Path
    backup_path: Path

    @property
    def exists(self) -> bool:
        """Whether the backup copy is still on disk."""
        return self.backup_path.exists()

    @property
    def filename(self) -> str:
        """Just the backup filename without path."""
        return self.backup_path.name
