"""Metadata domain models."""

from dataclasses import dataclass


@dataclass
class TrackTags:
    """Tag triple read from an audio file; missing tags are empty strings."""

    artist: str = ""
    album: str = ""
    title: str = ""


@dataclass
class SearchTerms:
    """Artist/title pair submitted to the remote search."""

    artist: str
    title: str
    title_from_filename: bool = False

    def __post_init__(self):
        """Validate search terms."""
        if not self.title:
            raise ValueError("Title cannot be empty")

    @property
    def query(self) -> str:
        """Spotify field-filter query string."""
        return f"track:{self.title} artist:{self.artist}"
