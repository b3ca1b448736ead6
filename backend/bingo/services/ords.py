"""Client for the remote REST data service (Oracle ORDS module ``bingo``)."""

import asyncio
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import aiohttp

from bingo.errors import ServiceRejected, ServiceTimeout, ServiceUnavailable
from .data_service import DataService

logger = logging.getLogger(__name__)


class OrdsDataService(DataService):
    """Forwards every operation to ``{base_url}/bingo/...``.

    Each call runs on its own short-lived event loop so it can be used from
    synchronous Flask and Socket.IO handlers, and is bounded by ``timeout``
    seconds.
    """

    name = 'ords'

    def __init__(self, base_url: str, timeout: float = 10.0, auth_type: str = '',
                 username: str = '', password: str = ''):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.auth = None
        if auth_type == 'basic' and username:
            self.auth = aiohttp.BasicAuth(username, password)

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}/bingo/{endpoint}"

    async def _fetch(self, method: str, url: str, body: Optional[dict]) -> Any:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout, auth=self.auth) as session:
            async with session.request(method, url, json=body) as response:
                return await response.json(content_type=None)

    def _call(self, method: str, endpoint: str, body: Optional[dict] = None) -> Dict[str, Any]:
        url = self._url(endpoint)
        logger.info(f"[ords] {method} {url}")
        try:
            data = asyncio.run(self._fetch(method, url, body))
        except asyncio.TimeoutError:
            logger.warning(f"[ords-timeout] {method} {url} after {self.timeout}s")
            raise ServiceTimeout('The game service did not respond in time')
        except (aiohttp.ClientError, ValueError) as exc:
            logger.error(f"[ords-error] {method} {url}: {exc}")
            raise ServiceUnavailable('The game service is unavailable')
        if not isinstance(data, dict):
            logger.error(f"[ords-error] {method} {url}: unexpected response {data!r}")
            raise ServiceUnavailable('The game service returned an unexpected response')
        if not data.get('success'):
            raise ServiceRejected(data.get('error') or 'The game service rejected the request')
        return {k: v for k, v in data.items() if k != 'success'}

    @staticmethod
    def _code(room_code: str) -> str:
        return quote(room_code, safe='')

    def create_room(self, admin_id, admin_name, use_free_center=True):
        return self._call('POST', 'rooms', {
            'adminId': admin_id,
            'adminName': admin_name,
            'useFreeCenter': 1 if use_free_center else 0,
        })

    def get_room(self, room_code):
        return self._call('GET', f"rooms/{self._code(room_code)}")

    def join_room(self, room_code, user_id, display_name):
        return self._call('POST', f"rooms/{self._code(room_code)}/join", {
            'userId': user_id,
            'displayName': display_name,
        })

    def list_players(self, room_code):
        data = self._call('GET', f"rooms/{self._code(room_code)}/players")
        return [
            {
                'userId': p.get('userId'),
                'displayName': p.get('displayName'),
                'isAdmin': bool(p.get('isAdmin')),
                'hasBingo': bool(p.get('hasBingo')),
            }
            for p in data.get('players') or []
        ]

    def start(self, room_code, admin_id):
        return self._call('POST', f"rooms/{self._code(room_code)}/start", {'adminId': admin_id})

    def draw(self, room_code, admin_id):
        return self._call('POST', f"rooms/{self._code(room_code)}/draw", {'adminId': admin_id})

    def get_card(self, room_code, user_id):
        data = self._call('GET', f"rooms/{self._code(room_code)}/card/{quote(user_id, safe='')}")
        data['hasBingo'] = bool(data.get('hasBingo'))
        return data

    def get_drawn(self, room_code):
        data = self._call('GET', f"rooms/{self._code(room_code)}/drawn")
        return list(data.get('airlines') or [])

    def claim(self, room_code, user_id):
        data = self._call('POST', f"rooms/{self._code(room_code)}/claim", {'userId': user_id})
        data['valid'] = bool(data.get('valid'))
        return data

    def reset(self, room_code, admin_id):
        return self._call('POST', f"rooms/{self._code(room_code)}/reset", {'adminId': admin_id})

    def kick(self, room_code, admin_id, user_id):
        return self._call('POST', f"rooms/{self._code(room_code)}/kick", {
            'adminId': admin_id,
            'userId': user_id,
        })
