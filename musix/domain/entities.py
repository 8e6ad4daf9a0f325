from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, List, Literal, Optional, TypeVar

T = TypeVar("T")

ResourceType = Literal["track", "album", "artist", "playlist"]
RepeatMode = Literal["off", "track", "context"]
TimeRange = Literal["short_term", "medium_term", "long_term"]


@dataclass(frozen=True)
class Image:
    """Cover art or profile picture. Dimensions are None when unknown."""

    url: str
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass(frozen=True)
class User:
    """Playlist owner."""

    id: str
    display_name: str = ""


@dataclass(frozen=True)
class Artist:
    """Domain entity representing an artist independent of providers.

    ``genres`` and ``images`` are only set when the provider returned a non-empty list.
    """

    id: str
    name: str
    external_url: str
    genres: Optional[List[str]] = None
    images: Optional[List[Image]] = None


@dataclass(frozen=True)
class Album:
    """Domain entity representing an album."""

    id: str
    name: str
    artists: List[Artist]
    release_date: str
    total_tracks: int
    images: List[Image]
    external_url: str


@dataclass(frozen=True)
class Track:
    """Domain entity representing a music track independent of providers."""

    id: str
    name: str
    artists: List[Artist]
    album: Album
    duration_ms: int
    preview_url: Optional[str]
    external_url: str


@dataclass(frozen=True)
class Playlist:
    """Domain entity representing a playlist with its materialized tracks."""

    id: str
    name: str
    description: Optional[str]
    owner: User
    tracks: List[Track]
    images: List[Image]
    external_url: str


@dataclass(frozen=True)
class SimplifiedPlaylist:
    """Playlist as returned by search and listing endpoints (no track list)."""

    id: str
    name: str
    description: Optional[str]
    owner: User
    total_tracks: int
    images: List[Image]
    external_url: str


@dataclass(frozen=True)
class CurrentUser:
    """Profile of the authenticated user."""

    id: str
    display_name: str
    external_url: str
    email: Optional[str] = None
    images: Optional[List[Image]] = None
    product: Optional[Literal["free", "premium"]] = None


@dataclass(frozen=True)
class SearchResult(Generic[T]):
    """One page of search results."""

    items: List[T]
    total: int
    limit: int
    offset: int


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    """One page of a listing endpoint."""

    items: List[T]
    total: int
    limit: int
    offset: int
    has_next: bool

    @classmethod
    def of(cls, items: List[T], total: int, limit: int, offset: int) -> "PaginatedResult[T]":
        """Build a page, deriving ``has_next`` from offset, item count and total."""
        return cls(
            items=items,
            total=total,
            limit=limit,
            offset=offset,
            has_next=offset + len(items) < total,
        )


@dataclass(frozen=True)
class Device:
    """Spotify Connect device."""

    id: Optional[str]
    name: str
    type: str
    is_active: bool
    volume_percent: int


@dataclass(frozen=True)
class PlaybackState:
    """Current playback. ``track`` is None for episodes or when nothing plays."""

    is_playing: bool
    track: Optional[Track]
    progress_ms: int
    duration_ms: int
    device: Device
    shuffle_state: bool
    repeat_state: RepeatMode


@dataclass(frozen=True)
class QueueState:
    currently_playing: Optional[Track]
    queue: List[Track]


@dataclass(frozen=True)
class RecentlyPlayedItem:
    track: Track
    played_at: str


# Request options


@dataclass(frozen=True)
class SearchOptions:
    limit: Optional[int] = None
    offset: Optional[int] = None


@dataclass(frozen=True)
class PlayOptions:
    """Options for starting playback. ``track_ids`` and ``context_uri`` are exclusive."""

    track_ids: Optional[List[str]] = None
    context_uri: Optional[str] = None
    offset_index: Optional[int] = None
    position_ms: Optional[int] = None
    device_id: Optional[str] = None


@dataclass(frozen=True)
class RecommendationSeeds:
    """Seeds for recommendations; at most five across all three lists."""

    track_ids: Optional[List[str]] = None
    artist_ids: Optional[List[str]] = None
    genres: Optional[List[str]] = None


@dataclass(frozen=True)
class RecommendationOptions:
    limit: Optional[int] = None
    target_energy: Optional[float] = None
    target_danceability: Optional[float] = None
    target_valence: Optional[float] = None
    target_tempo: Optional[float] = None


@dataclass(frozen=True)
class TopItemsOptions:
    limit: Optional[int] = None
    offset: Optional[int] = None
    time_range: Optional[TimeRange] = None


@dataclass(frozen=True)
class CreatePlaylistOptions:
    description: Optional[str] = None
    public: Optional[bool] = None
    collaborative: Optional[bool] = None


@dataclass(frozen=True)
class PlaylistDetails:
    name: Optional[str] = None
    description: Optional[str] = None
    public: Optional[bool] = None
