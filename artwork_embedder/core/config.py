"""Configuration constants and settings for the artwork embedder."""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError


class AppInfo:
    """Application metadata."""

    NAME = "artwork-embedder"
    VERSION = "1.0.0"
    DESCRIPTION = "Embed Spotify cover artwork into local audio files"


class FileConfig:
    """File handling configuration."""

    SUPPORTED_INPUT_FORMATS = [".mp3", ".m4a", ".flac", ".wav"]
    BACKUP_SUFFIX = ".backup"
    TEMP_SUFFIX = ".tmp"


class HttpConfig:
    """HTTP client configuration shared by every remote call."""

    TIMEOUT_SECONDS = 30
    DOWNLOAD_CHUNK_SIZE = 8192
    USER_AGENT = f"{AppInfo.NAME}/{AppInfo.VERSION}"


class SpotifyConfig:
    """Spotify Web API endpoints and search parameters."""

    TOKEN_URL = "https://accounts.spotify.com/api/token"
    SEARCH_URL = "https://api.spotify.com/v1/search"
    SEARCH_TYPE = "track"
    SEARCH_LIMIT = 1
    TOKEN_EXPIRY_MARGIN_SECONDS = 30
    CLIENT_ID_ENV = "SPOTIFY_CLIENT_ID"
    CLIENT_SECRET_ENV = "SPOTIFY_CLIENT_SECRET"


class ArtworkConfig:
    """Artwork search and embedding parameters."""

    UNKNOWN_ARTIST = "Unknown Artist"
    SCRATCH_DIR_PREFIX = "artwork-embedder-"
    SCRATCH_IMAGE_NAME = "temp_artwork.jpg"
    COVER_TITLE = "Album cover"
    COVER_COMMENT = "Cover (front)"


class MediaToolConfig:
    """External media tool binaries."""

    FFMPEG_BINARY = "ffmpeg"
    FFPROBE_BINARY = "ffprobe"


class ContainerFamily(str, Enum):
    """Container families with a dedicated embedding strategy."""

    MP3 = "mp3"
    MP4 = "mp4"
    FLAC = "flac"
    WAV = "wav"


class Paths:
    """Default paths and directories."""

    ENV_FILES = (".env.local", ".env")

    @staticmethod
    def backup_path(path: Path) -> Path:
        """Sibling path holding the pre-image copy of ``path``."""
        return path.with_name(path.name + FileConfig.BACKUP_SUFFIX)

    @staticmethod
    def temp_path(path: Path) -> Path:
        """Sibling path receiving the embedded output for ``path``."""
        return path.with_name(path.name + FileConfig.TEMP_SUFFIX)


@dataclass
class Settings:
    """Runtime settings resolved from the command line and environment."""

    spotify_client_id: str
    spotify_client_secret: str
    force_overwrite: bool = False
    verbose: bool = False

    def validate(self) -> None:
        """Ensure both Spotify credentials are present."""
        if not self.spotify_client_id:
            raise ConfigurationError(
                "Spotify credentials are not configured",
                parameter=SpotifyConfig.CLIENT_ID_ENV,
                details=f"set {SpotifyConfig.CLIENT_ID_ENV} and {SpotifyConfig.CLIENT_SECRET_ENV}",
            )
        if not self.spotify_client_secret:
            raise ConfigurationError(
                "Spotify credentials are not configured",
                parameter=SpotifyConfig.CLIENT_SECRET_ENV,
                details=f"set {SpotifyConfig.CLIENT_ID_ENV} and {SpotifyConfig.CLIENT_SECRET_ENV}",
            )


def load_environment(env_dir: Optional[Path] = None) -> bool:
    """Load the first local env file found; existing variables win."""
    base = env_dir or Path.cwd()
    for name in Paths.ENV_FILES:
        candidate = base / name
        if candidate.is_file():
            return load_dotenv(dotenv_path=candidate, override=False)
    return False


def load_settings(
    force_overwrite: bool = False,
    verbose: bool = False,
    env_dir: Optional[Path] = None,
) -> Settings:
    """Build validated settings from the environment."""
    load_environment(env_dir)

    settings = Settings(
        spotify_client_id=os.getenv(SpotifyConfig.CLIENT_ID_ENV, "").strip(),
        spotify_client_secret=os.getenv(SpotifyConfig.CLIENT_SECRET_ENV, "").strip(),
        force_overwrite=force_overwrite,
        verbose=verbose,
    )
    settings.validate()
    return settings
