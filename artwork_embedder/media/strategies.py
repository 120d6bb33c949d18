"""Per-container embedding strategies.

Each container family maps to an ordered tuple of attempts. An attempt is a
complete remux of the audio track(s) plus the new image; later attempts are
only tried when the previous one failed. Picture codecs differ because the
attached-picture slot of each container accepts different encodings:
ID3 wants a JPEG, FLAC takes the downloaded bytes as-is and MP4 prefers a
copy but falls back to PNG and then JPEG when the muxer rejects it.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .models import RemuxSpec
from .services import MediaTool
from ..core.config import ArtworkConfig, ContainerFamily
from ..core.exceptions import EmbeddingError, MediaToolError
from ..storage.models import EmbeddingJob

logger = logging.getLogger(__name__)

COVER_METADATA = (
    f"title={ArtworkConfig.COVER_TITLE}",
    f"comment={ArtworkConfig.COVER_COMMENT}",
)


@dataclass(frozen=True)
class EmbeddingAttempt:
    """Declarative description of one remux attempt."""

    label: str
    image_codec: str
    output_format: Optional[str] = None  # None: use the detected family
    attached_pic: bool = True
    metadata: Tuple[str, ...] = ()
    extra_args: Tuple[str, ...] = ()

    def build(self, job: EmbeddingJob, output_path: Path) -> RemuxSpec:
        """Concrete remux for ``job`` writing to ``output_path``."""
        stream_maps = ["0:a"]
        if job.replace_existing:
            # Drop any picture already attached to the source
            stream_maps.append("-0:v")
        stream_maps.append("1:0")

        metadata_args: List[str] = []
        for tag in self.metadata:
            metadata_args.extend(["-metadata:s:v:0", tag])

        return RemuxSpec(
            audio_path=job.source_path,
            image_path=job.artwork_path,
            output_path=output_path,
            output_format=self.output_format or job.container_family,
            stream_maps=stream_maps,
            codec_args=["-c:a", "copy", "-c:v", self.image_codec],
            disposition_args=["-disposition:v:0", "attached_pic"] if self.attached_pic else [],
            metadata_args=metadata_args,
            extra_args=list(self.extra_args),
        )


@dataclass(frozen=True)
class EmbeddingStrategy:
    """Ordered fallback chain of attempts for one container family."""

    family: str
    attempts: Tuple[EmbeddingAttempt, ...] = field(default_factory=tuple)

    def apply(self, media_tool: MediaTool, job: EmbeddingJob, output_path: Path) -> str:
        """Run attempts until one succeeds; returns the winning attempt label."""
        failures = []
        for attempt in self.attempts:
            spec = attempt.build(job, output_path)
            logger.debug("Embedding attempt '%s' for %s", attempt.label, job.source_path)
            try:
                media_tool.remux(spec)
                return attempt.label
            except MediaToolError as e:
                logger.debug("Attempt '%s' failed: %s", attempt.label, e.details)
                failures.append((attempt.label, e.details or e.message))

        labels = [label for label, _ in failures]
        last_output = failures[-1][1] if failures else "no embedding attempts defined"
        raise EmbeddingError(
            f"Embedding failed for {self.family} after {len(failures)} attempt(s)",
            file_path=str(job.source_path),
            attempts=labels,
            details=last_output,
        )


MP3_ATTEMPTS = (
    EmbeddingAttempt(
        label="mjpeg",
        image_codec="mjpeg",
        output_format="mp3",
        metadata=COVER_METADATA,
        extra_args=("-id3v2_version", "3"),
    ),
)

MP4_ATTEMPTS = (
    EmbeddingAttempt(
        label="copy",
        image_codec="copy",
        output_format="mp4",
        metadata=COVER_METADATA,
        extra_args=("-movflags", "+faststart"),
    ),
    EmbeddingAttempt(
        label="png",
        image_codec="png",
        output_format="mp4",
        metadata=COVER_METADATA,
        extra_args=("-movflags", "+faststart"),
    ),
    EmbeddingAttempt(
        label="mjpeg",
        image_codec="mjpeg",
        output_format="mp4",
        metadata=COVER_METADATA,
        extra_args=("-movflags", "+faststart"),
    ),
)

FLAC_ATTEMPTS = (
    EmbeddingAttempt(
        label="copy",
        image_codec="copy",
        output_format="flac",
        metadata=(f"comment={ArtworkConfig.COVER_COMMENT}",),
    ),
)

GENERIC_ATTEMPTS = (EmbeddingAttempt(label="copy", image_codec="copy"),)

STRATEGY_TABLE: Dict[str, Tuple[EmbeddingAttempt, ...]] = {
    ContainerFamily.MP3.value: MP3_ATTEMPTS,
    ContainerFamily.MP4.value: MP4_ATTEMPTS,
    ContainerFamily.FLAC.value: FLAC_ATTEMPTS,
}


def select_strategy(container_family: str) -> EmbeddingStrategy:
    """Strategy for ``container_family``, falling back to a generic remux."""
    attempts = STRATEGY_TABLE.get(container_family, GENERIC_ATTEMPTS)
    return EmbeddingStrategy(family=container_family, attempts=attempts)
