"""Processing domain models."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


class FileStatus(Enum):
    """Outcome of running the pipeline on one file."""

    EMBEDDED = "embedded"
    SKIPPED = "skipped"
    FAILED = "failed"

    @property
    def symbol(self) -> str:
        """Short marker used in console output."""
        if self is FileStatus.EMBEDDED:
            return "✓"
        elif self is FileStatus.SKIPPED:
            return "–"
        else:
            return "✗"


@dataclass
class FileResult:
    """Result of processing a single audio file."""

    path: Path
    status: FileStatus
    message: str
    artwork_url: Optional[str] = None
    container_family: Optional[str] = None
    attempt: Optional[str] = None

    @property
    def filename(self) -> str:
        """Just the filename without path."""
        return self.path.name


@dataclass
class BatchSummary:
    """Totals for a directory run."""

    results: List[FileResult] = field(default_factory=list)

    def add(self, result: FileResult) -> None:
        self.results.append(result)

    def count(self, status: FileStatus) -> int:
        return sum(1 for result in self.results if result.status is status)

    @property
    def embedded(self) -> int:
        return self.count(FileStatus.EMBEDDED)

    @property
    def skipped(self) -> int:
        return self.count(FileStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(FileStatus.FAILED)

    @property
    def total(self) -> int:
        return len(self.results)
