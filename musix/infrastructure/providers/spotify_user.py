import logging
from typing import Any, Callable, List, Optional

from spotipy.oauth2 import SpotifyPKCE

from musix.crosscutting.config import SpotifyUserAuthConfig, get_scope_string
from musix.domain.classification import classify_playback_error
from musix.domain.entities import (
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
    SimplifiedPlaylist,
    TopItemsOptions,
    Track,
)
from musix.domain.normalization import (
    ensure_seed_count,
    ensure_single_play_target,
    ensure_volume_percent,
    normalize_page,
    to_track_uri,
    to_track_uris,
)
from musix.domain.ports import AuthenticatedMusicAdapter
from musix.infrastructure.providers import spotify_mapping as mapping
from musix.infrastructure.providers.spotify import SpotifyProvider, build_spotipy_client

logger = logging.getLogger(__name__)

DEFAULT_TIME_RANGE = "medium_term"
ACTIVE_DEVICE = ""  # provider convention: empty device id targets the active device
ME = "me"


class SpotifyUserProvider(SpotifyProvider, AuthenticatedMusicAdapter):
    """Spotify adapter acting on behalf of a signed-in user.

    Adds playback control, library and playlist management and personalization to
    the catalogue operations of ``SpotifyProvider``. Playback-control calls read a
    403 as ``PremiumRequiredError`` and a 404 as ``NoActiveDeviceError``.
    """

    async def _playback(self, target: str, method_name: str, *args: Any, **kwargs: Any) -> Any:
        return await self._call(
            "device", target or "active", method_name, *args,
            classify=classify_playback_error, **kwargs,
        )

    # User profile

    async def get_current_user(self) -> CurrentUser:
        data = await self._call("user", ME, "current_user")
        return mapping.to_current_user(data)

    # Playback control

    async def play(self, options: Optional[PlayOptions] = None) -> None:
        """Start or resume playback.

        Either ``track_ids`` or ``context_uri`` may be given, not both. Without
        options the current context resumes on the active device.
        """
        options = options or PlayOptions()
        ensure_single_play_target(options)

        kwargs = {}
        if options.track_ids is not None:
            kwargs["uris"] = to_track_uris(options.track_ids)
        if options.context_uri is not None:
            kwargs["context_uri"] = options.context_uri
        if options.offset_index is not None:
            kwargs["offset"] = {"position": options.offset_index}
        if options.position_ms is not None:
            kwargs["position_ms"] = options.position_ms

        device_id = options.device_id or ACTIVE_DEVICE
        await self._playback(device_id, "start_playback", device_id=device_id, **kwargs)

    async def pause(self) -> None:
        await self._playback(ACTIVE_DEVICE, "pause_playback", device_id=ACTIVE_DEVICE)

    async def skip_to_next(self) -> None:
        await self._playback(ACTIVE_DEVICE, "next_track", device_id=ACTIVE_DEVICE)

    async def skip_to_previous(self) -> None:
        await self._playback(ACTIVE_DEVICE, "previous_track", device_id=ACTIVE_DEVICE)

    async def seek(self, position_ms: int) -> None:
        await self._playback(ACTIVE_DEVICE, "seek_track", position_ms, device_id=ACTIVE_DEVICE)

    async def set_volume(self, percent: int) -> None:
        ensure_volume_percent(percent)
        await self._playback(ACTIVE_DEVICE, "volume", percent, device_id=ACTIVE_DEVICE)

    async def set_shuffle(self, state: bool) -> None:
        await self._playback(ACTIVE_DEVICE, "shuffle", state, device_id=ACTIVE_DEVICE)

    async def set_repeat(self, state: RepeatMode) -> None:
        await self._playback(ACTIVE_DEVICE, "repeat", state, device_id=ACTIVE_DEVICE)

    async def transfer_playback(self, device_id: str, play: Optional[bool] = None) -> None:
        await self._playback(device_id, "transfer_playback", device_id, force_play=bool(play))

    async def add_to_queue(self, track_id: str) -> None:
        await self._playback(ACTIVE_DEVICE, "add_to_queue", to_track_uri(track_id), device_id=ACTIVE_DEVICE)

    async def get_playback_state(self) -> Optional[PlaybackState]:
        """Current playback, or None when no device is playing anything."""
        data = await self._call("device", "active", "current_playback")
        if not data:
            return None
        return mapping.to_playback_state(data)

    async def get_available_devices(self) -> List[Device]:
        data = await self._call("device", ME, "devices")
        return [mapping.to_device(device) for device in data["devices"]]

    async def get_queue(self) -> QueueState:
        data = await self._call("device", "active", "queue")
        return mapping.to_queue_state(data)

    # Library

    async def get_saved_tracks(self, options: Optional[SearchOptions] = None) -> PaginatedResult[Track]:
        limit, offset = normalize_page(options)
        data = await self._call("track", ME, "current_user_saved_tracks", limit=limit, offset=offset)
        return mapping.to_paginated_result(data, lambda item: mapping.to_track(item["track"]), limit, offset)

    async def save_track(self, track_id: str) -> None:
        await self._call("track", track_id, "current_user_saved_tracks_add", [track_id])

    async def remove_saved_track(self, track_id: str) -> None:
        await self._call("track", track_id, "current_user_saved_tracks_delete", [track_id])

    async def get_saved_albums(self, options: Optional[SearchOptions] = None) -> PaginatedResult[Album]:
        limit, offset = normalize_page(options)
        data = await self._call("album", ME, "current_user_saved_albums", limit=limit, offset=offset)
        return mapping.to_paginated_result(data, lambda item: mapping.to_album(item["album"]), limit, offset)

    async def save_album(self, album_id: str) -> None:
        await self._call("album", album_id, "current_user_saved_albums_add", [album_id])

    async def remove_saved_album(self, album_id: str) -> None:
        await self._call("album", album_id, "current_user_saved_albums_delete", [album_id])

    async def get_followed_artists(self, options: Optional[SearchOptions] = None) -> PaginatedResult[Artist]:
        """List followed artists.

        The provider pages this endpoint by cursor, not offset. The first page is
        fetched and the requested offset is echoed, so ``offset`` and ``has_next``
        are approximate.
        """
        limit, offset = normalize_page(options)
        data = await self._call("artist", ME, "current_user_followed_artists", limit=limit)
        return mapping.to_paginated_result(data["artists"], mapping.to_artist, limit, offset)

    async def follow_artist(self, artist_id: str) -> None:
        await self._call("artist", artist_id, "user_follow_artists", [artist_id])

    async def unfollow_artist(self, artist_id: str) -> None:
        await self._call("artist", artist_id, "user_unfollow_artists", [artist_id])

    async def get_user_playlists(
        self, options: Optional[SearchOptions] = None
    ) -> PaginatedResult[SimplifiedPlaylist]:
        limit, offset = normalize_page(options)
        data = await self._call("playlist", ME, "current_user_playlists", limit=limit, offset=offset)
        return mapping.to_paginated_result(data, mapping.to_simplified_playlist, limit, offset)

    # Playlist management

    async def create_playlist(self, name: str, options: Optional[CreatePlaylistOptions] = None) -> Playlist:
        """Create a playlist owned by the current user.

        The user id is looked up on every call, then the playlist is created.
        """
        options = options or CreatePlaylistOptions()
        user = await self._call("user", ME, "current_user")
        data = await self._call(
            "playlist", name, "user_playlist_create", user["id"], name,
            public=True if options.public is None else options.public,
            collaborative=bool(options.collaborative),
            description=options.description or "",
        )
        return mapping.to_playlist(data)

    async def update_playlist_details(self, playlist_id: str, details: PlaylistDetails) -> None:
        await self._call(
            "playlist", playlist_id, "playlist_change_details", playlist_id,
            name=details.name, public=details.public, description=details.description,
        )

    async def add_tracks_to_playlist(self, playlist_id: str, track_ids: List[str]) -> None:
        if not track_ids:
            return
        await self._call("playlist", playlist_id, "playlist_add_items", playlist_id, to_track_uris(track_ids))

    async def remove_tracks_from_playlist(self, playlist_id: str, track_ids: List[str]) -> None:
        if not track_ids:
            return
        await self._call(
            "playlist", playlist_id, "playlist_remove_all_occurrences_of_items",
            playlist_id, to_track_uris(track_ids),
        )

    # Personalization

    async def get_recommendations(
        self, seeds: RecommendationSeeds, options: Optional[RecommendationOptions] = None
    ) -> List[Track]:
        ensure_seed_count(seeds)
        options = options or RecommendationOptions()

        targets = {
            "target_energy": options.target_energy,
            "target_danceability": options.target_danceability,
            "target_valence": options.target_valence,
            "target_tempo": options.target_tempo,
        }
        kwargs = {key: value for key, value in targets.items() if value is not None}
        if options.limit is not None:
            kwargs["limit"] = options.limit

        data = await self._call(
            "track", "recommendations", "recommendations",
            seed_artists=seeds.artist_ids or None,
            seed_genres=seeds.genres or None,
            seed_tracks=seeds.track_ids or None,
            **kwargs,
        )
        return [mapping.to_track(track) for track in data["tracks"]]

    async def get_related_artists(self, artist_id: str) -> List[Artist]:
        data = await self._call("artist", artist_id, "artist_related_artists", artist_id)
        return [mapping.to_artist(artist) for artist in data["artists"]]

    async def get_new_releases(self, options: Optional[SearchOptions] = None) -> PaginatedResult[Album]:
        limit, offset = normalize_page(options)
        data = await self._call("album", "new-releases", "new_releases", limit=limit, offset=offset)
        return mapping.to_paginated_result(data["albums"], mapping.to_album, limit, offset)

    async def get_recently_played(
        self, options: Optional[SearchOptions] = None
    ) -> PaginatedResult[RecentlyPlayedItem]:
        """Recently played tracks, newest first.

        The provider pages this endpoint by cursor and reports no total; ``has_next``
        mirrors its ``next`` link and ``total`` counts what has been seen so far.
        """
        limit, offset = normalize_page(options)
        data = await self._call("track", ME, "current_user_recently_played", limit=limit)
        items = [mapping.to_recently_played_item(item) for item in data["items"]]
        return PaginatedResult(
            items=items,
            total=data.get("total", offset + len(items)),
            limit=limit,
            offset=offset,
            has_next=data.get("next") is not None,
        )

    async def get_top_tracks(self, options: Optional[TopItemsOptions] = None) -> PaginatedResult[Track]:
        limit, offset = normalize_page(options)
        time_range = (options.time_range if options else None) or DEFAULT_TIME_RANGE
        data = await self._call(
            "track", ME, "current_user_top_tracks", limit=limit, offset=offset, time_range=time_range
        )
        return mapping.to_paginated_result(data, mapping.to_track, limit, offset)

    async def get_top_artists(self, options: Optional[TopItemsOptions] = None) -> PaginatedResult[Artist]:
        limit, offset = normalize_page(options)
        time_range = (options.time_range if options else None) or DEFAULT_TIME_RANGE
        data = await self._call(
            "artist", ME, "current_user_top_artists", limit=limit, offset=offset, time_range=time_range
        )
        return mapping.to_paginated_result(data, mapping.to_artist, limit, offset)


def create_spotify_user_adapter(
    config: SpotifyUserAuthConfig,
    client: Any = None,
    invalidate_credentials: Optional[Callable[[], None]] = None,
) -> SpotifyUserProvider:
    """Create a user adapter using the authorization-code flow with PKCE.

    spotipy runs the browser authorization on the first call that needs a token.
    """
    if client is None:
        auth_manager = SpotifyPKCE(
            client_id=config.client_id,
            redirect_uri=config.redirect_uri,
            scope=get_scope_string(config.scopes),
        )
        client = build_spotipy_client(auth_manager)
        logger.debug("Created Spotify PKCE user adapter")
    return SpotifyUserProvider(client, invalidate_credentials)
