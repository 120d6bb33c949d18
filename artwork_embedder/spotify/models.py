"""Spotify domain models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ArtworkCandidate:
    """An album image offered by the catalog."""

    url: str
    width: int = 0
    height: int = 0

    @property
    def dimensions(self) -> str:
        """Human-readable ``WxH`` string."""
        return f"{self.width}x{self.height}"

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "ArtworkCandidate":
        return cls(
            url=payload.get("url") or "",
            width=int(payload.get("width") or 0),
            height=int(payload.get("height") or 0),
        )


@dataclass
class TrackMatch:
    """Top track item returned by a search."""

    name: str
    album: str
    artists: List[str] = field(default_factory=list)
    images: List[ArtworkCandidate] = field(default_factory=list)

    @property
    def artist_string(self) -> str:
        """Comma separated artist names."""
        return ", ".join(self.artists) if self.artists else "Unknown"

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "TrackMatch":
        album = item.get("album") or {}
        return cls(
            name=item.get("name") or "",
            album=album.get("name") or "",
            artists=[a.get("name") for a in item.get("artists") or [] if a.get("name")],
            images=[ArtworkCandidate.from_api(img) for img in album.get("images") or []],
        )


@dataclass
class AccessToken:
    """Bearer token with its absolute expiry time."""

    value: str
    expires_at: float

    def is_valid(self, now: float, margin: float = 0.0) -> bool:
        """Token is usable for at least ``margin`` more seconds."""
        return bool(self.value) and now < self.expires_at - margin


def select_best_image(images: List[ArtworkCandidate]) -> Optional[ArtworkCandidate]:
    """Tallest image; the first one listed wins ties."""
    best = None
    for image in images:
        if best is None or image.height > best.height:
            best = image
    return best
