"""File services: artwork download, transactional commit and directory walking."""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterator, Optional

import requests

from .models import BackupHandle, EmbeddingJob
from ..core.config import ArtworkConfig, FileConfig, HttpConfig, Paths
from ..core.exceptions import (
    CommitError,
    DownloadError,
    FileOperationError,
    MediaToolError,
)
from ..media.services import MediaTool
from ..media.strategies import EmbeddingStrategy

logger = logging.getLogger(__name__)


class ArtworkDownloader:
    """Streams artwork images to disk."""

    def __init__(self, http: Optional[requests.Session] = None):
        """Initialize with an optional shared HTTP session."""
        self.http = http or requests.Session()

    def download(self, url: str, destination: Path) -> Path:
        """Download ``url`` to ``destination``; partial files are removed on failure."""
        logger.debug("Downloading artwork from %s", url)
        try:
            with self.http.get(url, stream=True, timeout=HttpConfig.TIMEOUT_SECONDS) as response:
                if response.status_code != 200:
                    raise DownloadError(
                        f"Image download failed with status {response.status_code}",
                        url=url,
                    )

                written = 0
                with open(destination, "wb") as handle:
                    for chunk in response.iter_content(chunk_size=HttpConfig.DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            handle.write(chunk)
                            written += len(chunk)

        except requests.RequestException as e:
            destination.unlink(missing_ok=True)
            raise DownloadError("Image download interrupted", url=url, details=str(e))
        except OSError as e:
            destination.unlink(missing_ok=True)
            raise DownloadError("Failed to write image", url=url, details=str(e))

        if written == 0:
            destination.unlink(missing_ok=True)
            raise DownloadError("Image download returned no data", url=url)

        logger.debug("Saved %d bytes to %s", written, destination)
        return destination


class ScratchArea:
    """Process-scoped temporary directory holding the downloaded image."""

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = base_dir
        self.directory: Optional[Path] = None

    @property
    def image_path(self) -> Path:
        """The single scratch image path, creating the directory on first use."""
        if self.directory is None:
            self.directory = Path(
                tempfile.mkdtemp(prefix=ArtworkConfig.SCRATCH_DIR_PREFIX, dir=self.base_dir)
            )
        return self.directory / ArtworkConfig.SCRATCH_IMAGE_NAME

    def clear_image(self) -> None:
        """Remove the scratch image if one was written."""
        if self.directory is not None:
            (self.directory / ArtworkConfig.SCRATCH_IMAGE_NAME).unlink(missing_ok=True)

    def cleanup(self) -> None:
        """Remove the scratch directory and anything left inside it."""
        if self.directory is None:
            return
        try:
            shutil.rmtree(self.directory)
        except OSError as e:
            # Don't fail the main operation if cleanup fails
            logger.warning("Failed to remove scratch directory %s: %s", self.directory, e)
        self.directory = None


class TransactionalCommitter:
    """Backs up, embeds into a side file, validates and swaps it into place.

    The original path is only ever written by the final ``os.replace``. Any
    failure before that point removes the side file and renames the backup
    over the original, so the file on disk is byte-for-byte what it was.
    """

    def __init__(self, media_tool: MediaTool):
        self.media_tool = media_tool

    def commit(self, job: EmbeddingJob, strategy: EmbeddingStrategy) -> str:
        """Embed ``job`` with ``strategy``; returns the attempt label that succeeded."""
        handle = self.create_backup(job.source_path)
        temp_path = job.temp_path

        try:
            label = strategy.apply(self.media_tool, job, temp_path)
            self.validate(temp_path)
            self._swap(temp_path, job.source_path)
        except CommitError as e:
            e.restored = self._rollback(handle, temp_path)
            raise
        except BaseException:
            # Also covers KeyboardInterrupt while ffmpeg is running
            self._rollback(handle, temp_path)
            raise

        self._discard_backup(handle)
        return label

    def create_backup(self, file_path: Path) -> BackupHandle:
        """Copy ``file_path`` to its ``.backup`` sibling and verify the copy."""
        handle = BackupHandle(original_path=file_path, backup_path=Paths.backup_path(file_path))
        try:
            shutil.copy2(file_path, handle.backup_path)
            if handle.backup_path.stat().st_size != file_path.stat().st_size:
                raise OSError("backup size does not match the original")
        except OSError as e:
            handle.backup_path.unlink(missing_ok=True)
            raise CommitError(
                "Failed to create backup",
                file_path=str(file_path),
                stage="backup",
                details=str(e),
            )

        logger.debug("Backup created: %s", handle.backup_path)
        return handle

    def validate(self, output_path: Path) -> None:
        """Ensure the embedded output is non-empty and still has a duration."""
        if not output_path.exists() or output_path.stat().st_size == 0:
            raise CommitError(
                "Embedded output is empty",
                file_path=str(output_path),
                stage="validate",
            )

        try:
            result = self.media_tool.probe(output_path)
        except MediaToolError as e:
            raise CommitError(
                "Embedded output failed validation",
                file_path=str(output_path),
                stage="validate",
                details=e.details or e.message,
            )

        if not result.has_duration:
            raise CommitError(
                "Embedded output is corrupt (no duration)",
                file_path=str(output_path),
                stage="validate",
            )

    def restore(self, handle: BackupHandle) -> bool:
        """Rename the backup over the original; False when that is impossible."""
        if not handle.exists:
            logger.error("Backup missing, cannot restore %s", handle.original_path)
            return False
        try:
            os.replace(handle.backup_path, handle.original_path)
        except OSError as e:
            logger.error(
                "Failed to restore %s; backup kept at %s: %s",
                handle.original_path,
                handle.backup_path,
                e,
            )
            return False

        logger.debug("Restored %s from backup", handle.original_path)
        return True

    def _swap(self, temp_path: Path, target_path: Path) -> None:
        try:
            os.replace(temp_path, target_path)
        except OSError as e:
            raise CommitError(
                "Failed to replace original file",
                file_path=str(target_path),
                stage="commit",
                details=str(e),
            )

    def _rollback(self, handle: BackupHandle, temp_path: Path) -> bool:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Failed to remove %s: %s", temp_path, e)
        return self.restore(handle)

    def _discard_backup(self, handle: BackupHandle) -> None:
        try:
            handle.backup_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Failed to remove backup %s: %s", handle.backup_path, e)


def is_audio_file(path: Path) -> bool:
    """Whether ``path`` has one of the supported audio extensions."""
    return path.suffix.lower() in FileConfig.SUPPORTED_INPUT_FORMATS


def iter_audio_files(directory: Path) -> Iterator[Path]:
    """Yield audio files below ``directory`` recursively, in sorted order."""
    if not directory.is_dir():
        raise FileOperationError(
            f"Directory does not exist: {directory}",
            file_path=str(directory),
            operation="walk",
        )

    def _on_error(error: OSError) -> None:
        raise FileOperationError(
            "Failed to read directory",
            file_path=str(error.filename or directory),
            operation="walk",
            details=error.strerror or str(error),
        )

    for dirpath, dirnames, filenames in os.walk(directory, onerror=_on_error):
        dirnames.sort()
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if is_audio_file(path) and path.is_file():
                yield path
