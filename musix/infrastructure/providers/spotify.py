import asyncio
import logging
from typing import Any, Callable, List, Optional

import requests
import spotipy
from spotipy.oauth2 import SpotifyClientCredentials

from musix.crosscutting.config import SpotifyConfig
from musix.domain.classification import classify_error
from musix.domain.entities import (
    Album,
    Artist,
    PaginatedResult,
    Playlist,
    SearchOptions,
    SearchResult,
    SimplifiedPlaylist,
    Track,
)
from musix.domain.normalization import MAX_SEARCH_LIMIT, ensure_batch_size, normalize_page
from musix.domain.ports import ReadOnlyMusicAdapter
from musix.infrastructure.providers import spotify_mapping as mapping
from musix.infrastructure.providers.token_refresh import (
    Classifier,
    execute_with_token_refresh,
    spotipy_token_invalidator,
)

logger = logging.getLogger(__name__)

MAX_TRACK_IDS = 50
MAX_ALBUM_IDS = 20
MAX_ARTIST_IDS = 50

REQUESTS_TIMEOUT = 15


class SpotifyProvider(ReadOnlyMusicAdapter):
    """Read-only Spotify catalogue adapter.

    Every call goes through ``execute_with_token_refresh``, so a rejected token is
    cleared and the call retried once; every other failure surfaces as a
    ``musix.domain.errors`` type.
    """

    def __init__(self, client: Any, invalidate_credentials: Optional[Callable[[], None]] = None):
        """Initialize Spotify provider.

        Args:
            client: spotipy.Spotify, or any object exposing the same methods
            invalidate_credentials: Clears the cached token; defaults to expiring
                the token held by the client's auth manager
        """
        self._client = client
        self._invalidate = invalidate_credentials or spotipy_token_invalidator(client)

    async def _call(
        self,
        resource_type: str,
        resource_id: str,
        method_name: str,
        *args: Any,
        classify: Classifier = classify_error,
        **kwargs: Any,
    ) -> Any:
        """Invoke one spotipy method off the event loop, with token recovery."""
        method = getattr(self._client, method_name)

        async def operation() -> Any:
            return await asyncio.to_thread(method, *args, **kwargs)

        return await execute_with_token_refresh(
            operation,
            self._invalidate,
            resource_type,
            resource_id,
            classify=classify,
            operation_name=method_name,
        )

    # Single resources

    async def get_track(self, track_id: str) -> Track:
        data = await self._call("track", track_id, "track", track_id)
        return mapping.to_track(data)

    async def get_album(self, album_id: str) -> Album:
        data = await self._call("album", album_id, "album", album_id)
        return mapping.to_album(data)

    async def get_artist(self, artist_id: str) -> Artist:
        data = await self._call("artist", artist_id, "artist", artist_id)
        return mapping.to_artist(data)

    async def get_playlist(self, playlist_id: str) -> Playlist:
        data = await self._call("playlist", playlist_id, "playlist", playlist_id)
        return mapping.to_playlist(data)

    # Batches

    async def get_tracks(self, track_ids: List[str]) -> List[Track]:
        """Fetch up to 50 tracks in one call. Unknown ids are silently skipped."""
        if not track_ids:
            return []
        ensure_batch_size("get_tracks", track_ids, MAX_TRACK_IDS)

        data = await self._call("track", ",".join(track_ids), "tracks", track_ids)
        return [mapping.to_track(track) for track in data["tracks"] if track is not None]

    async def get_albums(self, album_ids: List[str]) -> List[Album]:
        """Fetch up to 20 albums in one call. Unknown ids are silently skipped."""
        if not album_ids:
            return []
        ensure_batch_size("get_albums", album_ids, MAX_ALBUM_IDS)

        data = await self._call("album", ",".join(album_ids), "albums", album_ids)
        return [mapping.to_album(album) for album in data["albums"] if album is not None]

    async def get_artists(self, artist_ids: List[str]) -> List[Artist]:
        """Fetch up to 50 artists in one call. Unknown ids are silently skipped."""
        if not artist_ids:
            return []
        ensure_batch_size("get_artists", artist_ids, MAX_ARTIST_IDS)

        data = await self._call("artist", ",".join(artist_ids), "artists", artist_ids)
        return [mapping.to_artist(artist) for artist in data["artists"] if artist is not None]

    # Search

    async def _search(self, query, options, search_type, resource_type, convert):
        limit, offset = normalize_page(options, max_limit=MAX_SEARCH_LIMIT)
        data = await self._call(
            resource_type, query, "search", query, limit=limit, offset=offset, type=search_type
        )
        return mapping.to_search_result(data[f"{search_type}s"], convert, limit, offset)

    async def search_tracks(self, query: str, options: Optional[SearchOptions] = None) -> SearchResult[Track]:
        return await self._search(query, options, "track", "track", mapping.to_track)

    async def search_albums(self, query: str, options: Optional[SearchOptions] = None) -> SearchResult[Album]:
        return await self._search(query, options, "album", "album", mapping.to_album)

    async def search_artists(self, query: str, options: Optional[SearchOptions] = None) -> SearchResult[Artist]:
        return await self._search(query, options, "artist", "artist", mapping.to_artist)

    async def search_playlists(
        self, query: str, options: Optional[SearchOptions] = None
    ) -> SearchResult[SimplifiedPlaylist]:
        return await self._search(query, options, "playlist", "playlist", mapping.to_simplified_playlist)

    # Listings

    async def get_artist_albums(
        self, artist_id: str, options: Optional[SearchOptions] = None
    ) -> PaginatedResult[Album]:
        limit, offset = normalize_page(options)
        data = await self._call("artist", artist_id, "artist_albums", artist_id, limit=limit, offset=offset)
        return mapping.to_paginated_result(data, mapping.to_album, limit, offset)

    async def get_album_tracks(
        self, album_id: str, options: Optional[SearchOptions] = None
    ) -> PaginatedResult[Track]:
        """List one page of an album's tracks.

        Album metadata and the track page are fetched concurrently as one operation,
        so a rejected token is cleared and both requests retried at most once. The
        album is converted once and shared by every track of the page.
        """
        limit, offset = normalize_page(options)

        async def operation() -> Any:
            results = await asyncio.gather(
                asyncio.to_thread(self._client.album, album_id),
                asyncio.to_thread(self._client.album_tracks, album_id, limit=limit, offset=offset),
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, BaseException):
                    raise result
            return results

        album_data, page = await execute_with_token_refresh(
            operation,
            self._invalidate,
            "album",
            album_id,
            operation_name="get_album_tracks",
        )
        album = mapping.to_album(album_data)
        return PaginatedResult.of(
            items=[mapping.to_album_track(track, album) for track in page["items"]],
            total=page["total"],
            limit=limit,
            offset=offset,
        )

    async def get_playlist_tracks(
        self, playlist_id: str, options: Optional[SearchOptions] = None
    ) -> PaginatedResult[Track]:
        """List one page of a playlist's tracks, skipping deleted or unavailable ones."""
        limit, offset = normalize_page(options)
        page = await self._call(
            "playlist", playlist_id, "playlist_items", playlist_id,
            limit=limit, offset=offset, additional_types=("track",),
        )
        # has_next follows the provider page size, not the filtered count
        return PaginatedResult(
            items=mapping.playlist_item_tracks(page["items"]),
            total=page["total"],
            limit=limit,
            offset=offset,
            has_next=offset + len(page["items"]) < page["total"],
        )

    async def get_artist_top_tracks(self, artist_id: str, market: str) -> List[Track]:
        data = await self._call("artist", artist_id, "artist_top_tracks", artist_id, country=market)
        return [mapping.to_track(track) for track in data["tracks"]]


def build_spotipy_client(auth_manager: Any) -> spotipy.Spotify:
    """Create a spotipy client that surfaces every HTTP failure to the adapter.

    A plain requests session is passed so spotipy mounts no urllib3 retry adapter:
    429 and 5xx responses reach the classifier with their headers intact.
    """
    return spotipy.Spotify(
        auth_manager=auth_manager,
        requests_session=requests.Session(),
        requests_timeout=REQUESTS_TIMEOUT,
    )


def create_spotify_adapter(
    config: SpotifyConfig,
    client: Any = None,
    invalidate_credentials: Optional[Callable[[], None]] = None,
) -> SpotifyProvider:
    """Create a read-only adapter using the client-credentials flow.

    Authentication happens lazily on the first call. Pass ``client`` to substitute
    the spotipy client (tests, custom transports).
    """
    if client is None:
        auth_manager = SpotifyClientCredentials(
            client_id=config.client_id,
            client_secret=config.client_secret,
        )
        client = build_spotipy_client(auth_manager)
        logger.debug("Created Spotify client-credentials adapter")
    return SpotifyProvider(client, invalidate_credentials)
