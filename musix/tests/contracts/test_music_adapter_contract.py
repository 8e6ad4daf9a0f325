import inspect
from unittest.mock import Mock

import pytest

from musix.domain import errors
from musix.domain.entities import PaginatedResult, SearchResult, Track
from musix.domain.ports import AuthenticatedMusicAdapter, ReadOnlyMusicAdapter
from musix.infrastructure.providers.spotify import SpotifyProvider
from musix.infrastructure.providers.spotify_user import SpotifyUserProvider


def _port_methods(port):
    return sorted(
        name for name, member in vars(port).items()
        if inspect.iscoroutinefunction(member)
    )


READ_ONLY_METHODS = _port_methods(ReadOnlyMusicAdapter)
USER_METHODS = _port_methods(AuthenticatedMusicAdapter)


def test_ports_do_not_overlap():
    assert len(READ_ONLY_METHODS) == 15
    assert not set(READ_ONLY_METHODS) & set(USER_METHODS)


@pytest.mark.parametrize("name", READ_ONLY_METHODS)
def test_read_only_adapter_implements_catalogue(name):
    member = getattr(SpotifyProvider, name)
    assert inspect.iscoroutinefunction(member)
    assert member is not getattr(ReadOnlyMusicAdapter, name)


@pytest.mark.parametrize("name", READ_ONLY_METHODS + USER_METHODS)
def test_user_adapter_implements_every_capability(name):
    member = getattr(SpotifyUserProvider, name)
    assert inspect.iscoroutinefunction(member)
    assert member is not getattr(ReadOnlyMusicAdapter, name, None)
    assert member is not getattr(AuthenticatedMusicAdapter, name, None)


@pytest.mark.parametrize("name", READ_ONLY_METHODS + USER_METHODS)
def test_signatures_match_ports(name):
    port = AuthenticatedMusicAdapter if name in USER_METHODS else ReadOnlyMusicAdapter
    expected = list(inspect.signature(getattr(port, name)).parameters)
    actual = list(inspect.signature(getattr(SpotifyUserProvider, name)).parameters)
    assert actual == expected


def test_read_only_adapter_has_no_user_capabilities():
    for name in USER_METHODS:
        assert not hasattr(SpotifyProvider, name)


def test_error_taxonomy_is_flat():
    taxonomy = [
        errors.AuthenticationError, errors.NotFoundError, errors.RateLimitError,
        errors.NetworkError, errors.SpotifyApiError, errors.ValidationError,
        errors.PremiumRequiredError, errors.NoActiveDeviceError,
    ]
    for error_type in taxonomy:
        assert error_type.__bases__ == (errors.MusixError,)


@pytest.mark.asyncio
async def test_instances_do_not_share_state(spotify_payloads):
    first_client, second_client = Mock(), Mock()
    first_client.search.return_value = {'tracks': spotify_payloads.page([spotify_payloads.track('t1')])}
    second_client.search.return_value = {'tracks': spotify_payloads.page([spotify_payloads.track('t2')])}

    first = SpotifyProvider(first_client)
    second = SpotifyUserProvider(second_client)

    first_result = await first.search_tracks('q')
    second_result = await second.search_tracks('q')

    assert isinstance(first_result, SearchResult)
    assert isinstance(first_result.items[0], Track)
    assert first_result.items[0].id == 't1'
    assert second_result.items[0].id == 't2'


@pytest.mark.asyncio
async def test_listing_pages_report_has_next(spotify_payloads):
    client = Mock()
    client.artist_albums.return_value = spotify_payloads.page(
        [spotify_payloads.album()], total=1
    )

    page = await SpotifyProvider(client).get_artist_albums('a1')

    assert isinstance(page, PaginatedResult)
    assert page.has_next is False
