"""Game action handlers.

Each player action is validated locally, delegated to the data service and,
only once the data service reports success, mirrored into the room registry
and announced through the gateway. Failures go back to the requester alone.
"""

from typing import Any, Callable, Dict

from flask import current_app

from bingo.errors import (
    AuthorizationError,
    BingoError,
    InvalidStateError,
    NotFoundError,
    ServiceUnavailable,
    ValidationError,
)
from bingo.events import AirlineDrawn, BingoWinner, GameReset, GameStarted, PlayerKicked
from bingo.gateway import RealtimeGateway
from bingo.registry import RoomRegistry, RoomStatus
from bingo.services import DataService


def normalize_room_code(code: Any, length: int = 6) -> str:
    if not isinstance(code, str):
        raise ValidationError('Room code is required')
    code = code.strip().upper()
    if len(code) != length or not code.isalnum():
        raise ValidationError(f'Room code must be {length} letters or digits')
    return code


def _required(value: Any, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'{label} is required')
    return value.strip()


class GameActions:
    def __init__(self, service: DataService, registry: RoomRegistry, gateway: RealtimeGateway,
                 room_code_length: int = 6):
        self.service = service
        self.registry = registry
        self.gateway = gateway
        self.room_code_length = room_code_length

    def _code(self, room_code: Any) -> str:
        return normalize_room_code(room_code, self.room_code_length)

    def _call(self, operation: Callable[..., Any], *args) -> Any:
        try:
            return operation(*args)
        except BingoError:
            raise
        except Exception as exc:
            current_app.logger.exception(f"[service-error] {operation.__name__}{args}: {exc}")
            raise ServiceUnavailable('The game service failed to handle the request')

    def _room(self, room_code: str) -> Dict[str, Any]:
        return self._call(self.service.get_room, room_code)

    @staticmethod
    def _require_admin(room: Dict[str, Any], admin_id: str, action: str) -> None:
        if room.get('adminId') != admin_id:
            raise AuthorizationError(f'Only the room admin can {action}')

    @staticmethod
    def _require_status(room: Dict[str, Any], status: RoomStatus, message: str) -> None:
        if room.get('status') != status.value:
            raise InvalidStateError(message)

    def _cache_status(self, room_code: str, status: RoomStatus) -> None:
        # The room may have emptied out while the data service was busy
        if not self.registry.set_status(room_code, status):
            current_app.logger.debug(f"[cache-skip] room={room_code} not tracked, status={status.value}")

    # ---- actions ----

    def create_room(self, admin_id: Any, admin_name: Any, use_free_center: Any = True) -> Dict[str, Any]:
        admin_name = _required(admin_name, 'Display name')
        admin_id = _required(admin_id, 'Admin id')
        result = self._call(self.service.create_room, admin_id, admin_name, bool(use_free_center))
        room_code = result.get('roomCode')
        if not room_code:
            raise ServiceUnavailable('The game service did not return a room code')
        current_app.logger.info(f"[create] room={room_code} admin={admin_id}")
        return result

    def get_room(self, room_code: Any) -> Dict[str, Any]:
        return self._room(self._code(room_code))

    def join_room(self, room_code: Any, user_id: Any, display_name: Any) -> Dict[str, Any]:
        room_code = self._code(room_code)
        user_id = _required(user_id, 'User id')
        display_name = _required(display_name, 'Display name')
        room = self._room(room_code)
        result = self._call(self.service.join_room, room_code, user_id, display_name)
        current_app.logger.info(f"[join] room={room_code} user={user_id} name={display_name}")
        return {
            'roomCode': room_code,
            'status': result.get('status', room.get('status')),
            'adminId': room.get('adminId'),
            'isAdmin': room.get('adminId') == user_id,
        }

    def list_players(self, room_code: Any) -> Dict[str, Any]:
        return {'players': self._call(self.service.list_players, self._code(room_code))}

    def start_game(self, room_code: Any, admin_id: Any) -> Dict[str, Any]:
        room_code = self._code(room_code)
        admin_id = _required(admin_id, 'Admin id')
        room = self._room(room_code)
        self._require_admin(room, admin_id, 'start the game')
        self._require_status(room, RoomStatus.WAITING, 'The game has already started')
        result = self._call(self.service.start, room_code, admin_id)
        self._cache_status(room_code, RoomStatus.STARTED)
        self.gateway.broadcast(room_code, GameStarted(room_code=room_code))
        current_app.logger.info(f"[start] room={room_code}")
        return result

    def draw(self, room_code: Any, admin_id: Any) -> Dict[str, Any]:
        room_code = self._code(room_code)
        admin_id = _required(admin_id, 'Admin id')
        room = self._room(room_code)
        self._require_admin(room, admin_id, 'draw airlines')
        self._require_status(room, RoomStatus.STARTED, 'The game is not in progress')
        result = self._call(self.service.draw, room_code, admin_id)
        try:
            event = AirlineDrawn(
                airline_id=result['airlineId'],
                airline_name=str(result['airlineName']),
                draw_order=int(result['drawOrder']),
            )
        except (KeyError, TypeError, ValueError):
            current_app.logger.error(f"[draw] room={room_code} malformed draw result {result!r}")
            raise ServiceUnavailable('The game service returned an incomplete draw')
        self.gateway.broadcast(room_code, event)
        current_app.logger.info(f"[draw] room={room_code} order={event.draw_order} airline={event.airline_name}")
        return result

    def get_card(self, room_code: Any, user_id: Any) -> Dict[str, Any]:
        return self._call(self.service.get_card, self._code(room_code), _required(user_id, 'User id'))

    def get_drawn(self, room_code: Any) -> Dict[str, Any]:
        return {'airlines': self._call(self.service.get_drawn, self._code(room_code))}

    def claim_bingo(self, room_code: Any, user_id: Any) -> Dict[str, Any]:
        room_code = self._code(room_code)
        user_id = _required(user_id, 'User id')
        room = self._room(room_code)
        self._require_status(room, RoomStatus.STARTED, 'The game is not in progress')
        result = self._call(self.service.claim, room_code, user_id)
        if not result.get('valid'):
            current_app.logger.info(f"[claim-rejected] room={room_code} user={user_id}")
            return {'valid': False}
        self._cache_status(room_code, RoomStatus.FINISHED)
        self.gateway.broadcast(
            room_code,
            BingoWinner(winner_id=result.get('winnerId') or user_id, winner_name=result.get('winnerName') or ''),
        )
        current_app.logger.info(f"[bingo] room={room_code} winner={result.get('winnerId') or user_id}")
        return result

    def reset_game(self, room_code: Any, admin_id: Any) -> Dict[str, Any]:
        room_code = self._code(room_code)
        admin_id = _required(admin_id, 'Admin id')
        room = self._room(room_code)
        self._require_admin(room, admin_id, 'reset the game')
        result = self._call(self.service.reset, room_code, admin_id)
        self._cache_status(room_code, RoomStatus.WAITING)
        self.gateway.broadcast(room_code, GameReset(room_code=room_code))
        current_app.logger.info(f"[reset] room={room_code}")
        return result

    def kick(self, room_code: Any, admin_id: Any, user_id: Any) -> Dict[str, Any]:
        room_code = self._code(room_code)
        admin_id = _required(admin_id, 'Admin id')
        user_id = _required(user_id, 'User id')
        room = self._room(room_code)
        self._require_admin(room, admin_id, 'kick players')
        if user_id == admin_id:
            raise ValidationError('The admin cannot be kicked')
        players = self._call(self.service.list_players, room_code)
        if not any(p.get('userId') == user_id for p in players):
            raise NotFoundError('That player is not in this room')
        self._call(self.service.kick, room_code, admin_id, user_id)
        self.gateway.broadcast(room_code, PlayerKicked(user_id=user_id))
        evicted = self.gateway.evict_user(room_code, user_id)
        current_app.logger.info(f"[kick] room={room_code} user={user_id} connections={len(evicted)}")
        return {'userId': user_id}
