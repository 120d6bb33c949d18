"""Tests for per-container embedding strategies."""

from pathlib import Path

import pytest

from artwork_embedder.core.exceptions import EmbeddingError
from artwork_embedder.media.strategies import select_strategy
from artwork_embedder.storage.models import EmbeddingJob

from conftest import FakeMediaTool


def make_job(tmp_path: Path, name: str, family: str, replace: bool = False) -> EmbeddingJob:
    source = tmp_path / name
    source.write_bytes(b"audio")
    artwork = tmp_path / "temp_artwork.jpg"
    artwork.write_bytes(b"\xff\xd8jpeg")
    return EmbeddingJob(
        source_path=source,
        artwork_path=artwork,
        container_family=family,
        replace_existing=replace,
    )


def has_pair(args, flag: str, value: str) -> bool:
    return any(args[i] == flag and args[i + 1] == value for i in range(len(args) - 1))


def test_mp3_attempt_arguments(tmp_path: Path) -> None:
    job = make_job(tmp_path, "song.mp3", "mp3")
    tool = FakeMediaTool()

    label = select_strategy("mp3").apply(tool, job, job.temp_path)

    assert label == "mjpeg"
    args = tool.remuxes[0].to_args()
    assert args[:4] == ["-i", str(job.source_path), "-i", str(job.artwork_path)]
    assert args[4:8] == ["-map", "0:a", "-map", "1:0"]
    assert "-0:v" not in args
    for expected in (
        ["-c:a", "copy"],
        ["-c:v", "mjpeg"],
        ["-disposition:v:0", "attached_pic"],
        ["-metadata:s:v:0", "title=Album cover"],
        ["-metadata:s:v:0", "comment=Cover (front)"],
        ["-id3v2_version", "3"],
        ["-f", "mp3"],
    ):
        assert has_pair(args, *expected), expected
    assert args[-2:] == ["-y", str(job.temp_path)]


def test_mp4_falls_back_from_copy_to_png(tmp_path: Path) -> None:
    """A rejected copy is retried as PNG before anything is written."""
    job = make_job(tmp_path, "song.m4a", "mp4")
    tool = FakeMediaTool(format_name="mov,mp4,m4a", failing_codecs={"copy"})

    label = select_strategy("mp4").apply(tool, job, job.temp_path)

    assert label == "png"
    assert [spec.image_codec for spec in tool.remuxes] == ["copy", "png"]
    assert all(spec.output_format == "mp4" for spec in tool.remuxes)
    assert "+faststart" in tool.remuxes[0].to_args()
    assert job.temp_path.exists()


def test_mp4_falls_back_to_jpeg_last(tmp_path: Path) -> None:
    job = make_job(tmp_path, "song.m4a", "mp4")
    tool = FakeMediaTool(failing_codecs={"copy", "png"})

    assert select_strategy("mp4").apply(tool, job, job.temp_path) == "mjpeg"
    assert [spec.image_codec for spec in tool.remuxes] == ["copy", "png", "mjpeg"]


def test_flac_copies_picture(tmp_path: Path) -> None:
    job = make_job(tmp_path, "song.flac", "flac")
    tool = FakeMediaTool(format_name="flac")

    assert select_strategy("flac").apply(tool, job, job.temp_path) == "copy"

    spec = tool.remuxes[0]
    assert spec.image_codec == "copy"
    assert spec.output_format == "flac"
    assert spec.metadata_args == ["-metadata:s:v:0", "comment=Cover (front)"]


def test_generic_remux_uses_detected_format(tmp_path: Path) -> None:
    job = make_job(tmp_path, "song.wav", "wav")
    tool = FakeMediaTool(format_name="wav")

    assert select_strategy("wav").apply(tool, job, job.temp_path) == "copy"

    spec = tool.remuxes[0]
    assert spec.output_format == "wav"
    assert spec.metadata_args == []
    assert spec.extra_args == []


def test_replace_drops_existing_picture_streams(tmp_path: Path) -> None:
    """The job's replace flag alone switches the stream maps."""
    job = make_job(tmp_path, "song.mp3", "mp3", replace=True)
    tool = FakeMediaTool()

    select_strategy("mp3").apply(tool, job, job.temp_path)

    assert tool.remuxes[0].stream_maps == ["0:a", "-0:v", "1:0"]


def test_exhausted_attempts_raise_embedding_error(tmp_path: Path) -> None:
    job = make_job(tmp_path, "song.m4a", "mp4")
    tool = FakeMediaTool(failing_codecs={"copy", "png", "mjpeg"})

    with pytest.raises(EmbeddingError) as exc_info:
        select_strategy("mp4").apply(tool, job, job.temp_path)

    error = exc_info.value
    assert error.attempts == ["copy", "png", "mjpeg"]
    assert error.stage == "embed"
    assert error.details == "Could not write header for mjpeg"
    assert not job.temp_path.exists()
