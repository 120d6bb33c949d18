"""Tag reading and search term resolution."""

import logging
import re
from pathlib import Path
from typing import Optional

import mutagen
from mutagen import MutagenError

from .models import SearchTerms, TrackTags
from ..core.config import ArtworkConfig
from ..core.exceptions import MetadataError

logger = logging.getLogger(__name__)

# Leading track index: 1-3 digits plus separators, else the bare digits
_INDEX_WITH_SEPARATOR = re.compile(r"^\d{1,3}[\s.\-_]+")
_BARE_INDEX = re.compile(r"^\d{1,3}")

# Easy tag keys first, then raw ID3 frames (WAVE) and MP4 atoms
_TAG_KEYS = {
    "artist": ("artist", "TPE1", "\xa9ART"),
    "album": ("album", "TALB", "\xa9alb"),
    "title": ("title", "TIT2", "\xa9nam"),
}


class TagReader:
    """Reads the artist/album/title triple with mutagen."""

    def read(self, file_path: Path) -> TrackTags:
        """Read tags from ``file_path``; a file without tags yields empty strings."""
        try:
            audio_file = mutagen.File(str(file_path), easy=True)
        except (MutagenError, OSError) as e:
            raise MetadataError(
                "Failed to read tags", file_path=str(file_path), details=str(e)
            )

        if audio_file is None:
            raise MetadataError(
                "Unsupported audio file", file_path=str(file_path), details="unrecognised format"
            )

        tags = audio_file.tags
        if tags is None:
            return TrackTags()

        return TrackTags(
            artist=self._first_value(tags, _TAG_KEYS["artist"]),
            album=self._first_value(tags, _TAG_KEYS["album"]),
            title=self._first_value(tags, _TAG_KEYS["title"]),
        )

    def _first_value(self, tags, keys) -> str:
        for key in keys:
            try:
                value = tags[key]
            except (KeyError, ValueError):
                continue

            # Text frames expose .text; easy tags are plain lists
            if hasattr(value, "text"):
                value = value.text
            if isinstance(value, (list, tuple)):
                value = value[0] if value else ""
            text = str(value)
            if text.strip():
                return text
        return ""


def title_from_filename(file_path: Path) -> str:
    """Derive a song title from a filename such as ``07 - Song_Name.mp3``."""
    stem = Path(file_path).stem

    title = stem
    for pattern in (_INDEX_WITH_SEPARATOR, _BARE_INDEX):
        if pattern.match(title):
            title = pattern.sub("", title, count=1)
            break

    title = title.strip().replace("_", " ")
    logger.debug("Title from filename: '%s' -> '%s'", stem, title)
    return title


def resolve_search_terms(tags: TrackTags, file_path: Path) -> Optional[SearchTerms]:
    """Search terms for a file, or None when no title can be derived."""
    artist = tags.artist or ArtworkConfig.UNKNOWN_ARTIST

    if tags.title:
        return SearchTerms(artist=artist, title=tags.title)

    title = title_from_filename(file_path)
    if not title:
        return None
    return SearchTerms(artist=artist, title=title, title_from_filename=True)
