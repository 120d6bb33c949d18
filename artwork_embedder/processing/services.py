"""Artwork embedding pipeline: per-file orchestration and directory runs."""

import logging
from pathlib import Path
from typing import Callable, Optional

from .models import BatchSummary, FileResult, FileStatus
from ..core.config import ArtworkConfig
from ..core.exceptions import ArtworkEmbedderError, FileOperationError, MediaToolError
from ..media.services import MediaTool, detect_container_family, has_existing_artwork
from ..media.strategies import select_strategy
from ..metadata.services import TagReader, resolve_search_terms
from ..spotify.services import SpotifyService, SpotifyServiceError
from ..storage.models import EmbeddingJob
from ..storage.services import (
    ArtworkDownloader,
    ScratchArea,
    TransactionalCommitter,
    iter_audio_files,
)

logger = logging.getLogger(__name__)

ResultCallback = Callable[[FileResult], None]


class ArtworkPipeline:
    """Runs presence check, lookup, download and transactional embed per file."""

    def __init__(
        self,
        media_tool: MediaTool,
        spotify: SpotifyService,
        downloader: Optional[ArtworkDownloader] = None,
        tag_reader: Optional[TagReader] = None,
        committer: Optional[TransactionalCommitter] = None,
        scratch: Optional[ScratchArea] = None,
        force_overwrite: bool = False,
    ):
        self.media_tool = media_tool
        self.spotify = spotify
        self.downloader = downloader or ArtworkDownloader()
        self.tag_reader = tag_reader or TagReader()
        self.committer = committer or TransactionalCommitter(media_tool)
        self.scratch = scratch or ScratchArea()
        self.force_overwrite = force_overwrite

    def __enter__(self) -> "ArtworkPipeline":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Release the scratch directory."""
        self.scratch.cleanup()

    def process_path(
        self, path: Path, on_result: Optional[ResultCallback] = None
    ) -> BatchSummary:
        """Process a file or a directory.

        A single file's failure propagates to the caller; in a directory each
        failure is recorded and the walk continues.
        """
        if path.is_dir():
            return self.process_directory(path, on_result)
        if not path.exists():
            raise FileOperationError(
                f"Path does not exist: {path}", file_path=str(path), operation="stat"
            )

        summary = BatchSummary()
        result = self.process_file(path)
        summary.add(result)
        if on_result:
            on_result(result)
        return summary

    def process_directory(
        self, directory: Path, on_result: Optional[ResultCallback] = None
    ) -> BatchSummary:
        """Process every audio file below ``directory``, isolating per-file errors."""
        logger.info("Processing directory: %s", directory)
        summary = BatchSummary()

        for path in iter_audio_files(directory):
            try:
                result = self.process_file(path)
            except ArtworkEmbedderError as e:
                logger.error("Error (%s): %s", path, e)
                result = FileResult(path=path, status=FileStatus.FAILED, message=str(e))
            except (OSError, ValueError) as e:
                logger.error("Unexpected error (%s): %s", path, e)
                result = FileResult(path=path, status=FileStatus.FAILED, message=str(e))

            summary.add(result)
            if on_result:
                on_result(result)

        return summary

    def process_file(self, path: Path) -> FileResult:
        """Embed artwork into one file.

        Skips are returned as results; pipeline failures raise an
        ``ArtworkEmbedderError`` after the original file has been restored.
        """
        logger.info("Processing: %s", path)

        replace_existing = False
        try:
            has_artwork = has_existing_artwork(self.media_tool, path)
        except MediaToolError as e:
            logger.warning("Could not check for existing artwork (%s); continuing", e)
            has_artwork = False

        if has_artwork:
            if not self.force_overwrite:
                return self._skip(path, "Existing artwork found (use --force to replace it)")
            logger.info("Existing artwork found; replacing it (force mode)")
            replace_existing = True

        tags = self.tag_reader.read(path)
        logger.info("Artist: %s | Album: %s | Title: %s", tags.artist, tags.album, tags.title)

        terms = resolve_search_terms(tags, path)
        if terms is None:
            return self._skip(path, "No title in tags or filename")
        if not tags.artist:
            logger.warning("No artist tag; searching as '%s'", ArtworkConfig.UNKNOWN_ARTIST)
        if terms.title_from_filename:
            logger.info("Title taken from filename: %s", terms.title)

        try:
            candidate = self.spotify.search_artwork(terms)
        except SpotifyServiceError as e:
            logger.warning("Artwork search failed: %s", e)
            return self._skip(path, f"Artwork search failed: {e}")

        if candidate is None:
            return self._skip(path, f"No artwork found for '{terms.title}' by {terms.artist}")
        logger.info("Artwork found: %s (%s)", candidate.url, candidate.dimensions)

        try:
            image_path = self.downloader.download(candidate.url, self.scratch.image_path)

            family = detect_container_family(self.media_tool, path)
            logger.info("Detected format: %s", family)

            job = EmbeddingJob(
                source_path=path,
                artwork_path=image_path,
                container_family=family,
                replace_existing=replace_existing,
            )
            strategy = select_strategy(family)
            attempt = self.committer.commit(job, strategy)
        finally:
            self.scratch.clear_image()

        return FileResult(
            path=path,
            status=FileStatus.EMBEDDED,
            message="Artwork replaced" if replace_existing else "Artwork embedded",
            artwork_url=candidate.url,
            container_family=family,
            attempt=attempt,
        )

    def _skip(self, path: Path, reason: str) -> FileResult:
        logger.info("Skipping %s: %s", path.name, reason)
        return FileResult(path=path, status=FileStatus.SKIPPED, message=reason)
