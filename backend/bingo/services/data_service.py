from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class DataService(ABC):
    """Request/response contract of the persistent game store.

    Methods return the success payload (without the ``success`` flag) and
    raise :class:`bingo.errors.BingoError` subclasses on failure. A claim
    that does not hold is a normal ``{'valid': False}`` result.
    """

    name = 'abstract'

    @abstractmethod
    def create_room(self, admin_id: str, admin_name: str, use_free_center: bool = True) -> Dict[str, Any]:
        """-> {'roomCode'}"""

    @abstractmethod
    def get_room(self, room_code: str) -> Dict[str, Any]:
        """-> {'roomCode', 'status', 'adminId', ...}"""

    @abstractmethod
    def join_room(self, room_code: str, user_id: str, display_name: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    def list_players(self, room_code: str) -> List[Dict[str, Any]]:
        """-> [{'userId', 'displayName', 'isAdmin', 'hasBingo'}]"""

    @abstractmethod
    def start(self, room_code: str, admin_id: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    def draw(self, room_code: str, admin_id: str) -> Dict[str, Any]:
        """-> {'airlineId', 'airlineName', 'drawOrder'}"""

    @abstractmethod
    def get_card(self, room_code: str, user_id: str) -> Dict[str, Any]:
        """-> {'card': [[{'airline', 'marked', 'free'}]], 'hasBingo'}"""

    @abstractmethod
    def get_drawn(self, room_code: str) -> List[Dict[str, Any]]:
        """-> [{'id', 'name', 'order'}] ordered by draw order"""

    @abstractmethod
    def claim(self, room_code: str, user_id: str) -> Dict[str, Any]:
        """-> {'valid', 'winnerId', 'winnerName'}"""

    @abstractmethod
    def reset(self, room_code: str, admin_id: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    def kick(self, room_code: str, admin_id: str, user_id: str) -> Dict[str, Any]:
        ...


def build_data_service(app) -> DataService:
    backend = (app.config.get('DATA_SERVICE_BACKEND') or 'local').lower()
    if backend == 'ords':
        from .ords import OrdsDataService
        return OrdsDataService(
            base_url=app.config['ORDS_BASE_URL'],
            timeout=float(app.config.get('DATA_SERVICE_TIMEOUT_SEC', 10)),
            auth_type=app.config.get('ORDS_AUTH_TYPE', ''),
            username=app.config.get('ORDS_USERNAME', ''),
            password=app.config.get('ORDS_PASSWORD', ''),
        )
    if backend == 'local':
        from .local import LocalDataService
        return LocalDataService(
            card_size=int(app.config.get('CARD_SIZE', 5)),
            room_code_length=int(app.config.get('ROOM_CODE_LENGTH', 6)),
        )
    raise ValueError(f"Unknown DATA_SERVICE_BACKEND: {backend}")
