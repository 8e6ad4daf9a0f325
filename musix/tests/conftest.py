import os
import sys
from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from spotipy.exceptions import SpotifyException


def _ensure_project_root_on_sys_path() -> None:
    here = os.path.dirname(__file__)
    project_root = os.path.abspath(os.path.join(here, "..", ".."))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)


_ensure_project_root_on_sys_path()


@pytest.fixture(autouse=True)
def _clear_spotify_env():
    """Ensure Spotify settings from the developer's shell do not leak into tests."""
    keys = ['SPOTIFY_CLIENT_ID', 'SPOTIFY_CLIENT_SECRET', 'SPOTIFY_REDIRECT_URI', 'SPOTIFY_SCOPES']
    backup = {k: os.environ.get(k) for k in keys}
    for k in keys:
        os.environ.pop(k, None)
    try:
        yield
    finally:
        for k, v in backup.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v


def _urls(kind: str, resource_id: str) -> dict:
    return {'spotify': f'https://open.spotify.com/{kind}/{resource_id}'}


def build_artist(artist_id="0ECwFtbIWEVNwjlrfc6xoL", name="Eagles", **overrides):
    artist = {
        'id': artist_id,
        'name': name,
        'external_urls': _urls('artist', artist_id),
    }
    artist.update(overrides)
    return artist


def build_album(album_id="2widuo17g5CEC66IbzveRu", name="Hotel California", **overrides):
    album = {
        'id': album_id,
        'name': name,
        'release_date': '1976-12-08',
        'total_tracks': 9,
        'images': [
            {'url': 'https://i.scdn.co/image/abc123', 'width': 640, 'height': 640},
            {'url': 'https://i.scdn.co/image/abc456', 'width': 300, 'height': 300},
        ],
        'external_urls': _urls('album', album_id),
        'artists': [build_artist()],
    }
    album.update(overrides)
    return album


def build_track(track_id="4iV5W9uYEdYUVa79Axb7Rh", name="Hotel California", **overrides):
    track = {
        'id': track_id,
        'name': name,
        'duration_ms': 391376,
        'preview_url': 'https://p.scdn.co/mp3-preview/abc123',
        'external_urls': _urls('track', track_id),
        'artists': [build_artist()],
        'album': build_album(),
    }
    track.update(overrides)
    return track


def build_playlist(playlist_id="37i9dQZF1DXcBWIGoYBM5M", tracks=None, **overrides):
    tracks = tracks if tracks is not None else [build_track()]
    playlist = {
        'id': playlist_id,
        'name': "Today's Top Hits",
        'description': 'The hottest tracks right now',
        'owner': {'id': 'spotify', 'display_name': 'Spotify'},
        'images': [{'url': 'https://i.scdn.co/image/pl', 'width': None, 'height': None}],
        'external_urls': _urls('playlist', playlist_id),
        'tracks': {
            'items': [{'track': track} for track in tracks],
            'total': len(tracks),
        },
    }
    playlist.update(overrides)
    return playlist


def build_page(items, total=None, limit=20, offset=0, **extra):
    page = {
        'items': items,
        'total': len(items) if total is None else total,
        'limit': limit,
        'offset': offset,
    }
    page.update(extra)
    return page


def build_error(status: int, message: str = "error", headers=None) -> SpotifyException:
    return SpotifyException(status, -1, message, headers=headers)


@pytest.fixture
def spotify_payloads():
    """Builders for Spotify Web API payloads."""
    return SimpleNamespace(
        artist=build_artist,
        album=build_album,
        track=build_track,
        playlist=build_playlist,
        page=build_page,
        error=build_error,
    )


@pytest.fixture
def spotify_client():
    """Stand-in for spotipy.Spotify; configure per test via return_value/side_effect."""
    return Mock()


@pytest.fixture
def invalidate():
    return Mock()
