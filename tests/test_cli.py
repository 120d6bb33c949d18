"""Tests for the command line entry point and its exit statuses."""

from pathlib import Path

import pytest

from artwork_embedder.interface import cli
from artwork_embedder.processing.services import ArtworkPipeline

from conftest import COVER_MARKER, FakeDownloader, FakeMediaTool, FakeSpotify, FakeTagReader


@pytest.fixture
def credentials(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "id")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "secret")
    return monkeypatch


@pytest.fixture
def fake_pipeline(credentials, scratch, candidate):
    """Replace tool discovery and authentication with in-memory fakes."""
    tools = {}

    def build(settings):
        tools["media"] = FakeMediaTool(failing_files={"02 - Second.FLAC", "broken.mp3"})
        return ArtworkPipeline(
            media_tool=tools["media"],
            spotify=FakeSpotify(candidate),
            downloader=FakeDownloader(),
            tag_reader=FakeTagReader(),
            scratch=scratch,
            force_overwrite=settings.force_overwrite,
        )

    credentials.setattr(cli, "build_pipeline", build)
    return tools


def run_cli(args):
    with pytest.raises(SystemExit) as exc_info:
        cli.run(args)
    return exc_info.value.code


def test_help_exits_zero(capsys) -> None:
    assert run_cli(["-h"]) == 0
    assert "--force" in capsys.readouterr().out


def test_missing_argument_exits_one() -> None:
    assert run_cli([]) == 1


def test_unknown_option_exits_one(capsys) -> None:
    assert run_cli(["--bogus", "x"]) == 1
    assert "No such option" in capsys.readouterr().err


def test_missing_credentials_exit_one(monkeypatch, tmp_path: Path, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SPOTIFY_CLIENT_ID", raising=False)
    monkeypatch.delenv("SPOTIFY_CLIENT_SECRET", raising=False)

    assert run_cli([str(tmp_path)]) == 1
    assert "credentials" in capsys.readouterr().out


def test_directory_with_failures_exits_zero(fake_pipeline, library: Path, capsys) -> None:
    assert run_cli([str(library)]) == 0

    out = capsys.readouterr().out
    assert "02 - Second.FLAC" in out
    assert (library / "01 - First.mp3").read_bytes().endswith(COVER_MARKER)


def test_single_file_failure_exits_one(fake_pipeline, tmp_path: Path) -> None:
    song = tmp_path / "broken.mp3"
    song.write_bytes(b"audio")

    assert run_cli([str(song)]) == 1
    assert song.read_bytes() == b"audio"


def test_single_file_success_exits_zero(fake_pipeline, tmp_path: Path) -> None:
    song = tmp_path / "fine.mp3"
    song.write_bytes(b"audio")

    assert run_cli([str(song), "--force"]) == 0
    assert song.read_bytes() == b"audio" + COVER_MARKER


def test_missing_path_exits_one(fake_pipeline, tmp_path: Path) -> None:
    assert run_cli([str(tmp_path / "nowhere")]) == 1
