"""Spotify Web API service for locating cover artwork."""

import logging
import time
from typing import Any, Callable, Dict, Optional

import requests

from .models import AccessToken, ArtworkCandidate, TrackMatch, select_best_image
from ..core.config import HttpConfig, SpotifyConfig
from ..core.exceptions import ArtworkEmbedderError
from ..metadata.models import SearchTerms

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LIFETIME = 3600


class SpotifyServiceError(ArtworkEmbedderError):
    """Error with Spotify API operations."""

    def __init__(self, message: str, status_code: int = None, details: str = None):
        super().__init__(message, details)
        self.status_code = status_code


class SpotifySession:
    """Client-credentials session that re-authenticates when the token lapses."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        http: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize with credentials and an optional shared HTTP session."""
        if not client_id or not client_secret:
            raise SpotifyServiceError("Spotify client id and secret are required")

        self.client_id = client_id
        self.client_secret = client_secret
        self.http = http or requests.Session()
        self.http.headers["User-Agent"] = HttpConfig.USER_AGENT
        self._clock = clock
        self._token: Optional[AccessToken] = None

    @property
    def is_authenticated(self) -> bool:
        """Whether a token is held and not about to expire."""
        return self._token is not None and self._token.is_valid(
            self._clock(), SpotifyConfig.TOKEN_EXPIRY_MARGIN_SECONDS
        )

    @property
    def token(self) -> str:
        """A usable access token, fetching a new one when needed."""
        if not self.is_authenticated:
            self.authenticate()
        return self._token.value

    def invalidate(self) -> None:
        """Forget the current token so the next request re-authenticates."""
        self._token = None

    def authenticate(self) -> AccessToken:
        """Fetch a new token with the client-credentials grant."""
        logger.debug("Requesting Spotify access token")
        try:
            response = self.http.post(
                SpotifyConfig.TOKEN_URL,
                data={"grant_type": "client_credentials"},
                auth=(self.client_id, self.client_secret),
                timeout=HttpConfig.TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            raise SpotifyServiceError("Spotify token request failed", details=str(e))

        if response.status_code != 200:
            raise SpotifyServiceError(
                "Spotify authentication failed",
                status_code=response.status_code,
                details=response.text[:200],
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise SpotifyServiceError("Invalid token response", details=str(e))

        value = payload.get("access_token")
        if not value:
            raise SpotifyServiceError("Token response did not include an access token")

        expires_in = int(payload.get("expires_in") or DEFAULT_TOKEN_LIFETIME)
        self._token = AccessToken(value=value, expires_at=self._clock() + expires_in)
        logger.debug("Spotify token valid for %ss", expires_in)
        return self._token


class SpotifyService:
    """Service for searching tracks and choosing their album artwork."""

    def __init__(self, session: SpotifySession):
        """Initialize with an authenticated (or authenticatable) session."""
        self.session = session

    def search_track(self, terms: SearchTerms) -> Optional[TrackMatch]:
        """Top track for the given terms, or None when nothing matches."""
        params = {
            "q": terms.query,
            "type": SpotifyConfig.SEARCH_TYPE,
            "limit": SpotifyConfig.SEARCH_LIMIT,
        }
        logger.debug("Spotify search query: %s", terms.query)
        payload = self._get(SpotifyConfig.SEARCH_URL, params)

        items = (payload.get("tracks") or {}).get("items") or []
        logger.debug("Spotify returned %d item(s)", len(items))
        if not items:
            return None
        return TrackMatch.from_api(items[0])

    def search_artwork(self, terms: SearchTerms) -> Optional[ArtworkCandidate]:
        """Highest resolution image of the top match, or None when not found."""
        match = self.search_track(terms)
        if match is None:
            return None

        logger.debug(
            "Matched '%s' by %s on '%s' (%d image(s))",
            match.name,
            match.artist_string,
            match.album,
            len(match.images),
        )
        best = select_best_image(match.images)
        if best is None or not best.url:
            return None
        return best

    def _get(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        response = self._send(url, params)
        if response.status_code == 401:
            # Token revoked or expired early; retry once with a fresh one
            self.session.invalidate()
            response = self._send(url, params)

        if response.status_code != 200:
            raise SpotifyServiceError(
                "Spotify search failed",
                status_code=response.status_code,
                details=response.text[:200],
            )

        try:
            return response.json()
        except ValueError as e:
            raise SpotifyServiceError("Invalid search response", details=str(e))

    def _send(self, url: str, params: Dict[str, Any]) -> requests.Response:
        headers = {"Authorization": f"Bearer {self.session.token}"}
        try:
            return self.session.http.get(
                url,
                params=params,
                headers=headers,
                timeout=HttpConfig.TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            raise SpotifyServiceError("Spotify search request failed", details=str(e))
