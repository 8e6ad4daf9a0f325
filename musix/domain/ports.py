from __future__ import annotations

from typing import List, Optional, Protocol

from .entities import (
    Album,
    Artist,
    CreatePlaylistOptions,
    CurrentUser,
    Device,
    PaginatedResult,
    PlaybackState,
    Playlist,
    PlaylistDetails,
    PlayOptions,
    QueueState,
    RecentlyPlayedItem,
    RecommendationOptions,
    RecommendationSeeds,
    RepeatMode,
    SearchOptions,
    SearchResult,
    SimplifiedPlaylist,
    TopItemsOptions,
    Track,
)


class ReadOnlyMusicAdapter(Protocol):
    """Port for anonymous (app-level) catalogue access.

    Implementations map provider payloads into domain entities and provider failures
    into ``musix.domain.errors`` types.
    """

    async def get_track(self, track_id: str) -> Track:
        """Return a single track."""

    async def get_tracks(self, track_ids: List[str]) -> List[Track]:
        """Return up to 50 tracks; unknown ids are skipped."""

    async def get_album(self, album_id: str) -> Album:
        """Return a single album."""

    async def get_albums(self, album_ids: List[str]) -> List[Album]:
        """Return up to 20 albums; unknown ids are skipped."""

    async def get_artist(self, artist_id: str) -> Artist:
        """Return a single artist."""

    async def get_artists(self, artist_ids: List[str]) -> List[Artist]:
        """Return up to 50 artists; unknown ids are skipped."""

    async def get_playlist(self, playlist_id: str) -> Playlist:
        """Return a playlist with its available tracks."""

    async def search_tracks(self, query: str, options: Optional[SearchOptions] = None) -> SearchResult[Track]:
        ...

    async def search_albums(self, query: str, options: Optional[SearchOptions] = None) -> SearchResult[Album]:
        ...

    async def search_artists(self, query: str, options: Optional[SearchOptions] = None) -> SearchResult[Artist]:
        ...

    async def search_playlists(
        self, query: str, options: Optional[SearchOptions] = None
    ) -> SearchResult[SimplifiedPlaylist]:
        ...

    async def get_artist_albums(
        self, artist_id: str, options: Optional[SearchOptions] = None
    ) -> PaginatedResult[Album]:
        ...

    async def get_artist_top_tracks(self, artist_id: str, market: str) -> List[Track]:
        ...

    async def get_album_tracks(
        self, album_id: str, options: Optional[SearchOptions] = None
    ) -> PaginatedResult[Track]:
        ...

    async def get_playlist_tracks(
        self, playlist_id: str, options: Optional[SearchOptions] = None
    ) -> PaginatedResult[Track]:
        ...


class AuthenticatedMusicAdapter(ReadOnlyMusicAdapter, Protocol):
    """Port for per-user access: playback, library, playlists and personalization."""

    async def get_current_user(self) -> CurrentUser:
        ...

    # Playback control (Premium only)
    async def play(self, options: Optional[PlayOptions] = None) -> None:
        ...

    async def pause(self) -> None:
        ...

    async def skip_to_next(self) -> None:
        ...

    async def skip_to_previous(self) -> None:
        ...

    async def seek(self, position_ms: int) -> None:
        ...

    async def set_volume(self, percent: int) -> None:
        ...

    async def set_shuffle(self, state: bool) -> None:
        ...

    async def set_repeat(self, state: RepeatMode) -> None:
        ...

    async def get_playback_state(self) -> Optional[PlaybackState]:
        ...

    async def get_available_devices(self) -> List[Device]:
        ...

    async def transfer_playback(self, device_id: str, play: Optional[bool] = None) -> None:
        ...

    async def get_queue(self) -> QueueState:
        ...

    async def add_to_queue(self, track_id: str) -> None:
        ...

    # Library
    async def get_saved_tracks(self, options: Optional[SearchOptions] = None) -> PaginatedResult[Track]:
        ...

    async def save_track(self, track_id: str) -> None:
        ...

    async def remove_saved_track(self, track_id: str) -> None:
        ...

    async def get_saved_albums(self, options: Optional[SearchOptions] = None) -> PaginatedResult[Album]:
        ...

    async def save_album(self, album_id: str) -> None:
        ...

    async def remove_saved_album(self, album_id: str) -> None:
        ...

    async def get_followed_artists(self, options: Optional[SearchOptions] = None) -> PaginatedResult[Artist]:
        ...

    async def follow_artist(self, artist_id: str) -> None:
        ...

    async def unfollow_artist(self, artist_id: str) -> None:
        ...

    async def get_user_playlists(
        self, options: Optional[SearchOptions] = None
    ) -> PaginatedResult[SimplifiedPlaylist]:
        ...

    # Personalization
    async def get_recommendations(
        self, seeds: RecommendationSeeds, options: Optional[RecommendationOptions] = None
    ) -> List[Track]:
        ...

    async def get_related_artists(self, artist_id: str) -> List[Artist]:
        ...

    async def get_new_releases(self, options: Optional[SearchOptions] = None) -> PaginatedResult[Album]:
        ...

    async def get_recently_played(
        self, options: Optional[SearchOptions] = None
    ) -> PaginatedResult[RecentlyPlayedItem]:
        ...

    async def get_top_tracks(self, options: Optional[TopItemsOptions] = None) -> PaginatedResult[Track]:
        ...

    async def get_top_artists(self, options: Optional[TopItemsOptions] = None) -> PaginatedResult[Artist]:
        ...

    # Playlist management
    async def create_playlist(self, name: str, options: Optional[CreatePlaylistOptions] = None) -> Playlist:
        ...

    async def update_playlist_details(self, playlist_id: str, details: PlaylistDetails) -> None:
        ...

    async def add_tracks_to_playlist(self, playlist_id: str, track_ids: List[str]) -> None:
        ...

    async def remove_tracks_from_playlist(self, playlist_id: str, track_ids: List[str]) -> None:
        ...
