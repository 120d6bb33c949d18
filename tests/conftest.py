"""Shared test doubles for the media tool, HTTP sessions and Spotify."""

from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from artwork_embedder.core.exceptions import MediaToolError
from artwork_embedder.media.models import ProbeResult, ProbeStream, RemuxSpec
from artwork_embedder.media.services import MediaTool
from artwork_embedder.metadata.models import TrackTags
from artwork_embedder.spotify.models import ArtworkCandidate
from artwork_embedder.storage.services import ScratchArea

COVER_MARKER = b"+COVER"


class FakeMediaTool(MediaTool):
    """Simulates ffprobe/ffmpeg on real files without invoking binaries.

    A remux appends ``COVER_MARKER`` to the audio bytes; probing a file whose
    bytes end with the marker reports an attached picture stream.
    """

    def __init__(
        self,
        format_name: str = "mp3",
        failing_codecs: Optional[set] = None,
        failing_files: Optional[set] = None,
        probe_error_files: Optional[set] = None,
        corrupt_output: bool = False,
    ):
        self.format_name = format_name
        self.failing_codecs = failing_codecs or set()
        self.failing_files = failing_files or set()
        self.probe_error_files = probe_error_files or set()
        self.corrupt_output = corrupt_output
        self.probes: List[Path] = []
        self.remuxes: List[RemuxSpec] = []

    def probe(self, path: Path) -> ProbeResult:
        self.probes.append(path)
        if path.name in self.probe_error_files:
            raise MediaToolError("Probe failed", file_path=str(path), details="Invalid data found")

        is_output = path.name.endswith(".tmp")
        if is_output and self.corrupt_output:
            return ProbeResult(format_name=self.format_name, duration=None)

        streams = [ProbeStream(index=0, codec_type="audio", codec_name="mp3")]
        if path.exists() and path.read_bytes().endswith(COVER_MARKER):
            streams.append(
                ProbeStream(index=1, codec_type="video", codec_name="mjpeg", attached_pic=True)
            )
        return ProbeResult(format_name=self.format_name, duration="12.500000", streams=streams)

    def remux(self, spec: RemuxSpec) -> None:
        self.remuxes.append(spec)
        if spec.audio_path.name in self.failing_files or spec.image_codec in self.failing_codecs:
            raise MediaToolError(
                "Remux failed",
                file_path=str(spec.audio_path),
                tool="ffmpeg",
                details=f"Could not write header for {spec.image_codec}",
            )
        spec.output_path.write_bytes(spec.audio_path.read_bytes() + COVER_MARKER)


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(
        self,
        status_code: int = 200,
        payload: Optional[Dict[str, Any]] = None,
        content: bytes = b"",
        text: str = "",
        chunk_error: Optional[Exception] = None,
    ):
        self.status_code = status_code
        self._payload = payload
        self.content = content
        self.text = text
        self._chunk_error = chunk_error

    def json(self) -> Dict[str, Any]:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.content), chunk_size):
            yield self.content[start : start + chunk_size]
        if self._chunk_error is not None:
            raise self._chunk_error

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc) -> None:
        return None


class FakeHttp:
    """Records requests and replays queued responses in order."""

    def __init__(self, get: Optional[list] = None, post: Optional[list] = None):
        self.headers: Dict[str, str] = {}
        self.get_responses = list(get or [])
        self.post_responses = list(post or [])
        self.get_calls: List[Dict[str, Any]] = []
        self.post_calls: List[Dict[str, Any]] = []

    def get(self, url, **kwargs):
        self.get_calls.append({"url": url, **kwargs})
        response = self.get_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url, **kwargs):
        self.post_calls.append({"url": url, **kwargs})
        response = self.post_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeSpotify:
    """SpotifyService double returning a fixed candidate and recording terms."""

    def __init__(self, candidate: Optional[ArtworkCandidate] = None, error: Exception = None):
        self.candidate = candidate
        self.error = error
        self.searches = []

    def search_artwork(self, terms):
        self.searches.append(terms)
        if self.error is not None:
            raise self.error
        return self.candidate


class FakeDownloader:
    """ArtworkDownloader double writing a fixed JPEG payload."""

    def __init__(self, error: Exception = None):
        self.error = error
        self.urls = []

    def download(self, url: str, destination: Path) -> Path:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        destination.write_bytes(b"\xff\xd8\xff\xe0fakejpeg")
        return destination


class FakeTagReader:
    """TagReader double keyed by filename."""

    def __init__(self, tags: Optional[Dict[str, TrackTags]] = None, default: TrackTags = None):
        self.tags = tags or {}
        self.default = default or TrackTags(artist="Artist", album="Album", title="Title")

    def read(self, file_path: Path) -> TrackTags:
        return self.tags.get(file_path.name, self.default)


def token_response(token: str = "token-1", expires_in: int = 3600) -> FakeResponse:
    return FakeResponse(payload={"access_token": token, "token_type": "Bearer", "expires_in": expires_in})


def search_response(images: List[Dict[str, Any]], name: str = "Song") -> FakeResponse:
    return FakeResponse(
        payload={
            "tracks": {
                "items": [
                    {
                        "name": name,
                        "album": {"name": "Album", "images": images},
                        "artists": [{"name": "Artist"}],
                    }
                ]
            }
        }
    )


@pytest.fixture
def media_tool() -> FakeMediaTool:
    return FakeMediaTool()


@pytest.fixture
def scratch(tmp_path: Path):
    area = ScratchArea(base_dir=tmp_path)
    yield area
    area.cleanup()


@pytest.fixture
def candidate() -> ArtworkCandidate:
    return ArtworkCandidate(url="https://i.scdn.co/image/large", width=640, height=640)


@pytest.fixture
def library(tmp_path: Path) -> Path:
    """Directory with three audio files, a nested folder and a non-audio file."""
    root = tmp_path / "library"
    nested = root / "Album"
    nested.mkdir(parents=True)
    (root / "01 - First.mp3").write_bytes(b"ID3first-audio")
    (nested / "02 - Second.FLAC").write_bytes(b"fLaCsecond-audio")
    (nested / "03 - Third.m4a").write_bytes(b"ftypthird-audio")
    (nested / "cover.txt").write_text("not audio")
    return root
