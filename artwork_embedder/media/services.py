"""ffprobe/ffmpeg capability plus format and artwork detection."""

import json
import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from .models import ProbeResult, RemuxSpec
from ..core.config import ContainerFamily, MediaToolConfig
from ..core.exceptions import ConfigurationError, MediaToolError

logger = logging.getLogger(__name__)

# First token of ffprobe's format_name -> container family
FORMAT_FAMILIES = {
    "mp3": ContainerFamily.MP3,
    "mov": ContainerFamily.MP4,
    "mp4": ContainerFamily.MP4,
    "m4a": ContainerFamily.MP4,
    "3gp": ContainerFamily.MP4,
    "3g2": ContainerFamily.MP4,
    "mj2": ContainerFamily.MP4,
    "ipod": ContainerFamily.MP4,
    "flac": ContainerFamily.FLAC,
    "wav": ContainerFamily.WAV,
}

EXTENSION_FAMILIES = {
    ".mp3": ContainerFamily.MP3,
    ".m4a": ContainerFamily.MP4,
    ".mp4": ContainerFamily.MP4,
    ".flac": ContainerFamily.FLAC,
    ".wav": ContainerFamily.WAV,
}


class MediaTool(ABC):
    """Probe and remux capability used by the embedding pipeline."""

    @abstractmethod
    def probe(self, path: Path) -> ProbeResult:
        """Report container format, duration and streams of ``path``."""

    @abstractmethod
    def remux(self, spec: RemuxSpec) -> None:
        """Run one remux; raise MediaToolError carrying the tool output on failure."""


class FFmpegTool(MediaTool):
    """MediaTool backed by the ffprobe and ffmpeg binaries."""

    def __init__(
        self,
        ffmpeg_binary: str = MediaToolConfig.FFMPEG_BINARY,
        ffprobe_binary: str = MediaToolConfig.FFPROBE_BINARY,
    ):
        self.ffmpeg_binary = ffmpeg_binary
        self.ffprobe_binary = ffprobe_binary

    def ensure_available(self) -> None:
        """Fail fast when either binary is missing from PATH."""
        for binary in (self.ffmpeg_binary, self.ffprobe_binary):
            if shutil.which(binary) is None:
                raise ConfigurationError(
                    f"{binary} is not installed",
                    parameter=binary,
                    details="install ffmpeg and make sure it is on PATH",
                )

    def probe(self, path: Path) -> ProbeResult:
        command = [
            self.ffprobe_binary,
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_format",
            "-show_streams",
            str(path),
        ]
        completed = self._run(command, self.ffprobe_binary, path, combine_output=False)
        if completed.returncode != 0:
            raise MediaToolError(
                "Probe failed",
                file_path=str(path),
                tool=self.ffprobe_binary,
                details=(completed.stderr or "").strip() or f"exit status {completed.returncode}",
            )

        try:
            payload = json.loads(completed.stdout or "{}")
        except json.JSONDecodeError as e:
            raise MediaToolError(
                "Probe returned invalid JSON",
                file_path=str(path),
                tool=self.ffprobe_binary,
                details=str(e),
            )

        return ProbeResult.from_ffprobe(payload)

    def remux(self, spec: RemuxSpec) -> None:
        command = [self.ffmpeg_binary] + spec.to_args()
        completed = self._run(command, self.ffmpeg_binary, spec.audio_path)
        if completed.returncode != 0:
            raise MediaToolError(
                "Remux failed",
                file_path=str(spec.audio_path),
                tool=self.ffmpeg_binary,
                details=(completed.stdout or "").strip() or f"exit status {completed.returncode}",
            )

    def _run(
        self, command: List[str], tool: str, path: Path, combine_output: bool = True
    ) -> subprocess.CompletedProcess:
        logger.debug("Running: %s", " ".join(command))
        try:
            return subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if combine_output else subprocess.PIPE,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise MediaToolError(
                f"{tool} is not installed or not available in PATH",
                file_path=str(path),
                tool=tool,
                details=str(e),
            )


def detect_container_family(media_tool: MediaTool, path: Path) -> str:
    """Container family of ``path``; degrades to a guess instead of raising."""
    probe_name = ""
    try:
        probe_name = media_tool.probe(path).primary_format
    except MediaToolError as e:
        logger.debug("Format probe failed for %s: %s", path, e)

    family = FORMAT_FAMILIES.get(probe_name)
    if family is not None:
        return family.value

    family = EXTENSION_FAMILIES.get(path.suffix.lower())
    if family is not None:
        return family.value

    return ContainerFamily.MP3.value


def has_existing_artwork(media_tool: MediaTool, path: Path) -> bool:
    """Whether ``path`` already carries an attached front cover.

    Probe failures propagate so callers can tell "no artwork" apart from
    "could not determine".
    """
    result = media_tool.probe(path)
    return any(stream.is_cover_art for stream in result.streams)
