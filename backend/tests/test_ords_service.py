import asyncio

import aiohttp
import pytest

from bingo import create_app
from bingo.errors import ServiceRejected, ServiceTimeout, ServiceUnavailable
from bingo.services.ords import OrdsDataService

from conftest import TestConfig as BaseConfig


class OrdsConfig(BaseConfig):
    DATA_SERVICE_BACKEND = 'ords'
    ORDS_BASE_URL = 'http://ords.test/ords/bingo_schema/'
    ORDS_AUTH_TYPE = 'basic'
    ORDS_USERNAME = 'bingo'
    ORDS_PASSWORD = 'secret'


@pytest.fixture()
def ords():
    return OrdsDataService('http://ords.test/ords/bingo_schema/', timeout=0.5)


def respond_with(monkeypatch, service, response=None, exc=None):
    calls = []

    async def fake_fetch(method, url, body):
        calls.append((method, url, body))
        if exc is not None:
            raise exc
        return response

    monkeypatch.setattr(service, '_fetch', fake_fetch)
    return calls


def test_success_envelope_is_unwrapped(monkeypatch, ords):
    calls = respond_with(monkeypatch, ords, {'success': True, 'roomCode': 'ABC123'})
    assert ords.create_room('u-a', 'Alice', True) == {'roomCode': 'ABC123'}
    assert calls == [(
        'POST',
        'http://ords.test/ords/bingo_schema/bingo/rooms',
        {'adminId': 'u-a', 'adminName': 'Alice', 'useFreeCenter': 1},
    )]


def test_failure_envelope_raises_rejection(monkeypatch, ords):
    respond_with(monkeypatch, ords, {'success': False, 'error': 'Room not found'})
    with pytest.raises(ServiceRejected) as info:
        ords.get_room('ABC123')
    assert info.value.message == 'Room not found'


def test_timeout_is_bounded_and_reported(monkeypatch, ords):
    respond_with(monkeypatch, ords, exc=asyncio.TimeoutError())
    with pytest.raises(ServiceTimeout):
        ords.draw('ABC123', 'u-a')


def test_transport_errors_become_unavailable(monkeypatch, ords):
    respond_with(monkeypatch, ords, exc=aiohttp.ClientConnectionError('refused'))
    with pytest.raises(ServiceUnavailable):
        ords.start('ABC123', 'u-a')
    respond_with(monkeypatch, ords, ['not', 'an', 'object'])
    with pytest.raises(ServiceUnavailable):
        ords.start('ABC123', 'u-a')


def test_integer_flags_are_normalised(monkeypatch, ords):
    respond_with(monkeypatch, ords, {'success': True, 'players': [
        {'userId': 'u-a', 'displayName': 'Alice', 'isAdmin': 1, 'hasBingo': 0},
    ]})
    assert ords.list_players('ABC123') == [
        {'userId': 'u-a', 'displayName': 'Alice', 'isAdmin': True, 'hasBingo': False}
    ]
    respond_with(monkeypatch, ords, {'success': True, 'valid': 0})
    assert ords.claim('ABC123', 'u-a') == {'valid': False}


def test_path_parameters_are_quoted(monkeypatch, ords):
    calls = respond_with(monkeypatch, ords, {'success': True, 'card': [], 'hasBingo': 1})
    assert ords.get_card('ABC123', 'user 1/2')['hasBingo'] is True
    assert calls[0][1].endswith('/bingo/rooms/ABC123/card/user%201%2F2')


def test_app_uses_ords_backend_and_surfaces_timeouts(monkeypatch):
    app = create_app(OrdsConfig)
    service = app.extensions['bingo_actions'].service
    assert isinstance(service, OrdsDataService)
    assert service.auth is not None
    respond_with(monkeypatch, service, exc=asyncio.TimeoutError())
    res = app.test_client().get('/api/rooms/ABC123')
    assert res.status_code == 504
    assert res.get_json() == {'success': False, 'error': 'The game service did not respond in time'}
