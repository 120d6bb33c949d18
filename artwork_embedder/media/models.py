"""Media domain models."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class ProbeStream:
    """A single stream reported by the prober."""

    index: int
    codec_type: str
    codec_name: Optional[str] = None
    attached_pic: bool = False

    @property
    def is_cover_art(self) -> bool:
        """Image stream flagged as the attached front cover."""
        return self.codec_type == "video" and self.attached_pic

    @classmethod
    def from_ffprobe(cls, payload: Dict[str, Any]) -> "ProbeStream":
        disposition = payload.get("disposition") or {}
        return cls(
            index=int(payload.get("index", 0)),
            codec_type=payload.get("codec_type") or "",
            codec_name=payload.get("codec_name"),
            attached_pic=disposition.get("attached_pic") == 1,
        )


@dataclass
class ProbeResult:
    """Container format and stream list of a probed file."""

    format_name: str = ""
    duration: Optional[str] = None
    streams: List[ProbeStream] = field(default_factory=list)

    @property
    def primary_format(self) -> str:
        """First entry of a comma separated format list such as ``mov,mp4,m4a``."""
        return self.format_name.split(",")[0].strip().lower()

    @property
    def has_duration(self) -> bool:
        """Whether a duration field could be recovered."""
        return bool(self.duration and self.duration.strip() and self.duration != "N/A")

    @classmethod
    def from_ffprobe(cls, payload: Dict[str, Any]) -> "ProbeResult":
        """Build from ``ffprobe -print_format json`` output."""
        fmt = payload.get("format") or {}
        duration = fmt.get("duration")
        return cls(
            format_name=fmt.get("format_name") or "",
            duration=str(duration) if duration is not None else None,
            streams=[ProbeStream.from_ffprobe(s) for s in payload.get("streams") or []],
        )


@dataclass
class RemuxSpec:
    """One complete remux invocation: audio plus a new attached picture."""

    audio_path: Path
    image_path: Path
    output_path: Path
    output_format: str
    stream_maps: List[str] = field(default_factory=list)
    codec_args: List[str] = field(default_factory=list)
    disposition_args: List[str] = field(default_factory=list)
    metadata_args: List[str] = field(default_factory=list)
    extra_args: List[str] = field(default_factory=list)
    overwrite: bool = True

    @property
    def image_codec(self) -> Optional[str]:
        """Codec directive applied to the picture stream."""
        if "-c:v" in self.codec_args:
            position = self.codec_args.index("-c:v")
            if position + 1 < len(self.codec_args):
                return self.codec_args[position + 1]
        return None

    def to_args(self) -> List[str]:
        """Command line arguments for ffmpeg, without the binary."""
        args = ["-i", str(self.audio_path), "-i", str(self.image_path)]
        for stream_map in self.stream_maps:
            args.extend(["-map", stream_map])
        args.extend(self.codec_args)
        args.extend(self.disposition_args)
        args.extend(self.metadata_args)
        args.extend(self.extra_args)
        args.extend(["-f", self.output_format])
        if self.overwrite:
            args.append("-y")
        args.append(str(self.output_path))
        return args
