"""Conversion of Spotify Web API payloads into domain entities.

Every function is a pure projection of a well-formed payload. There is no validation
layer: a malformed payload fails with whatever ``KeyError``/``TypeError`` the field
access raises.
"""

from typing import Any, Callable, Dict, List, Optional, TypeVar

from musix.domain.entities import (
    Album,
    Artist,
    CurrentUser,
    Device,
    Image,
    PaginatedResult,
    PlaybackState,
    Playlist,
    QueueState,
    RecentlyPlayedItem,
    SearchResult,
    SimplifiedPlaylist,
    Track,
    User,
)

T = TypeVar("T")

Payload = Dict[str, Any]


def _external_url(payload: Payload) -> str:
    return payload["external_urls"]["spotify"]


def to_image(image: Payload) -> Image:
    return Image(
        url=image["url"],
        width=image.get("width"),
        height=image.get("height"),
    )


def to_images(images: Optional[List[Payload]]) -> List[Image]:
    return [to_image(image) for image in images or []]


def to_artist(artist: Payload) -> Artist:
    """Convert a full or simplified artist.

    Empty genre and image lists collapse to None, as does their absence in the
    simplified shape embedded in tracks and albums.
    """
    genres = artist.get("genres") or []
    images = artist.get("images") or []
    return Artist(
        id=artist["id"],
        name=artist["name"],
        external_url=_external_url(artist),
        genres=list(genres) if len(genres) > 0 else None,
        images=[to_image(image) for image in images] if len(images) > 0 else None,
    )


def to_album(album: Payload) -> Album:
    """Convert a full or simplified album."""
    return Album(
        id=album["id"],
        name=album["name"],
        artists=[to_artist(artist) for artist in album["artists"]],
        release_date=album["release_date"],
        total_tracks=album["total_tracks"],
        images=to_images(album["images"]),
        external_url=_external_url(album),
    )


def to_track(track: Payload) -> Track:
    """Convert a full track, which embeds its simplified album."""
    return to_album_track(track, to_album(track["album"]))


def to_album_track(track: Payload, album: Album) -> Track:
    """Convert a track that carries no album of its own (album listings).

    The caller supplies the album, converted once and shared by every track.
    """
    return Track(
        id=track["id"],
        name=track["name"],
        artists=[to_artist(artist) for artist in track["artists"]],
        album=album,
        duration_ms=track["duration_ms"],
        preview_url=track.get("preview_url"),
        external_url=_external_url(track),
    )


def to_user(owner: Payload) -> User:
    return User(id=owner["id"], display_name=owner.get("display_name") or "")


def playlist_item_tracks(items: List[Payload]) -> List[Track]:
    """Tracks of playlist items in listing order, skipping deleted or unavailable ones."""
    return [to_track(item["track"]) for item in items if item.get("track") is not None]


def to_playlist(playlist: Payload) -> Playlist:
    return Playlist(
        id=playlist["id"],
        name=playlist["name"],
        description=playlist.get("description") or None,
        owner=to_user(playlist["owner"]),
        tracks=playlist_item_tracks(playlist["tracks"]["items"]),
        images=to_images(playlist.get("images")),
        external_url=_external_url(playlist),
    )


def to_simplified_playlist(playlist: Payload) -> SimplifiedPlaylist:
    return SimplifiedPlaylist(
        id=playlist["id"],
        name=playlist["name"],
        description=playlist.get("description") or None,
        owner=to_user(playlist["owner"]),
        total_tracks=playlist["tracks"]["total"],
        images=to_images(playlist.get("images")),
        external_url=_external_url(playlist),
    )


def to_current_user(user: Payload) -> CurrentUser:
    images = user.get("images")
    return CurrentUser(
        id=user["id"],
        display_name=user.get("display_name") or "",
        external_url=_external_url(user),
        email=user.get("email"),
        images=to_images(images) if images is not None else None,
        product=user.get("product"),
    )


def to_device(device: Payload) -> Device:
    return Device(
        id=device.get("id"),
        name=device["name"],
        type=device["type"],
        is_active=device["is_active"],
        volume_percent=device.get("volume_percent") or 0,
    )


def _is_track(item: Optional[Payload]) -> bool:
    return item is not None and item.get("type", "track") == "track"


def to_playback_state(playback: Payload) -> PlaybackState:
    item = playback.get("item")
    is_track = playback.get("currently_playing_type", "track") == "track" and _is_track(item)
    return PlaybackState(
        is_playing=playback["is_playing"],
        track=to_track(item) if is_track else None,
        progress_ms=playback.get("progress_ms") or 0,
        duration_ms=item["duration_ms"] if item else 0,
        device=to_device(playback["device"]),
        shuffle_state=playback["shuffle_state"],
        repeat_state=playback["repeat_state"],
    )


def to_queue_state(queue: Payload) -> QueueState:
    current = queue.get("currently_playing")
    return QueueState(
        currently_playing=to_track(current) if _is_track(current) else None,
        queue=[to_track(item) for item in queue.get("queue") or [] if _is_track(item)],
    )


def to_recently_played_item(item: Payload) -> RecentlyPlayedItem:
    return RecentlyPlayedItem(track=to_track(item["track"]), played_at=item["played_at"])


def to_search_result(
    page: Payload,
    convert: Callable[[Payload], T],
    limit: int,
    offset: int,
) -> SearchResult[T]:
    """Convert a search envelope. Null items (seen in playlist search) are dropped."""
    return SearchResult(
        items=[convert(item) for item in page["items"] if item is not None],
        total=page["total"],
        limit=limit,
        offset=offset,
    )


def to_paginated_result(
    page: Payload,
    convert: Callable[[Payload], T],
    limit: int,
    offset: int,
) -> PaginatedResult[T]:
    return PaginatedResult.of(
        items=[convert(item) for item in page["items"] if item is not None],
        total=page["total"],
        limit=limit,
        offset=offset,
    )
