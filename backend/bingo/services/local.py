"""SQL-backed data service.

Implements the data service contract on the app's own database. When this
backend is selected it is the authoritative rule engine: it deals cards,
sequences draws and validates claims.
"""

import random
from typing import List, Optional, Set

from flask import current_app
from sqlalchemy.exc import IntegrityError

from bingo import db
from bingo.card import Card, Cell
from bingo.errors import AuthorizationError, InvalidStateError, NotFoundError, ValidationError
from bingo.models import Airline, BingoRoom, CardCell, DrawnAirline, RoomPlayer, generate_room_code
from bingo.registry import RoomStatus
from .data_service import DataService

FREE_LABEL = 'FREE'


class LocalDataService(DataService):
    name = 'local'

    def __init__(self, card_size: int = 5, room_code_length: int = 6):
        self.card_size = card_size
        self.room_code_length = room_code_length

    # ---- lookups ----

    def _room(self, room_code: str) -> BingoRoom:
        room = BingoRoom.query.filter_by(room_code=room_code).first()
        if not room:
            raise NotFoundError('Room not found')
        return room

    def _player(self, room: BingoRoom, user_id: str) -> RoomPlayer:
        player = RoomPlayer.query.filter_by(room_id=room.id, user_id=user_id).first()
        if not player:
            raise NotFoundError('Player not found in this room')
        return player

    @staticmethod
    def _require_admin(room: BingoRoom, admin_id: str, action: str) -> None:
        if room.admin_id != admin_id:
            raise AuthorizationError(f'Only the room admin can {action}')

    @staticmethod
    def _require_status(room: BingoRoom, status: RoomStatus, message: str) -> None:
        if room.status != status.value:
            raise InvalidStateError(message)

    @staticmethod
    def _drawn_names(room: BingoRoom) -> Set[str]:
        return {d.airline.name for d in room.draws}

    def _card_for(self, player: RoomPlayer, drawn: Set[str]) -> Optional[Card]:
        if not player.cells:
            return None
        size = max(c.row for c in player.cells) + 1
        grid: List[List[Optional[Cell]]] = [[None] * size for _ in range(size)]
        for c in player.cells:
            grid[c.row][c.col] = Cell(
                label=c.airline_name,
                marked=(not c.is_free) and c.airline_name in drawn,
                free=c.is_free,
            )
        return Card(grid)

    def _deal(self, room: BingoRoom, player: RoomPlayer, pool: List[str]) -> None:
        size = self.card_size
        center = size // 2
        use_free = bool(room.use_free_center)
        needed = size * size - (1 if use_free else 0)
        if len(pool) < needed:
            raise InvalidStateError(f'Need at least {needed} airlines to deal a card, have {len(pool)}')
        names = iter(random.sample(pool, needed))
        player.cells = []
        for r in range(size):
            for c in range(size):
                free = use_free and r == center and c == center
                player.cells.append(CardCell(
                    row=r,
                    col=c,
                    airline_name=FREE_LABEL if free else next(names),
                    is_free=free,
                ))

    @staticmethod
    def _pool() -> List[str]:
        return [a.name for a in Airline.query.order_by(Airline.id).all()]

    # ---- contract ----

    def create_room(self, admin_id, admin_name, use_free_center=True):
        if not admin_id or not admin_name:
            raise ValidationError('Admin id and name are required')
        room = BingoRoom(
            room_code=generate_room_code(self.room_code_length),
            admin_id=admin_id,
            use_free_center=bool(use_free_center),
            status=RoomStatus.WAITING.value,
        )
        room.players.append(RoomPlayer(user_id=admin_id, display_name=admin_name, is_admin=True))
        db.session.add(room)
        db.session.commit()
        current_app.logger.info(f"[create] room={room.room_code} admin={admin_id}")
        return {'roomCode': room.room_code}

    def get_room(self, room_code):
        return self._room(room_code).to_dict()

    def join_room(self, room_code, user_id, display_name):
        room = self._room(room_code)
        if room.status == RoomStatus.FINISHED.value:
            raise InvalidStateError('This game has already finished')
        player = RoomPlayer.query.filter_by(room_id=room.id, user_id=user_id).first()
        if player:
            player.display_name = display_name
        else:
            player = RoomPlayer(user_id=user_id, display_name=display_name, is_admin=(user_id == room.admin_id))
            room.players.append(player)
        if room.status == RoomStatus.STARTED.value and not player.cells:
            self._deal(room, player, self._pool())
        db.session.commit()
        return {'roomCode': room.room_code, 'status': room.status}

    def list_players(self, room_code):
        room = self._room(room_code)
        drawn = self._drawn_names(room)
        players = []
        for p in room.players:
            card = self._card_for(p, drawn)
            players.append({
                'userId': p.user_id,
                'displayName': p.display_name,
                'isAdmin': p.is_admin,
                'hasBingo': bool(card and card.has_bingo()),
            })
        return players

    def start(self, room_code, admin_id):
        room = self._room(room_code)
        self._require_admin(room, admin_id, 'start the game')
        self._require_status(room, RoomStatus.WAITING, 'The game can only be started from the lobby')
        pool = self._pool()
        for player in room.players:
            self._deal(room, player, pool)
        room.status = RoomStatus.STARTED.value
        room.winner_id = None
        db.session.commit()
        return {'roomCode': room.room_code, 'status': room.status}

    def draw(self, room_code, admin_id):
        room = self._room(room_code)
        self._require_admin(room, admin_id, 'draw airlines')
        self._require_status(room, RoomStatus.STARTED, 'The game is not in progress')
        drawn_ids = [d.airline_id for d in room.draws]
        query = Airline.query
        if drawn_ids:
            query = query.filter(~Airline.id.in_(drawn_ids))
        remaining = query.all()
        if not remaining:
            raise InvalidStateError('All airlines have been drawn')
        airline = random.choice(remaining)
        order = len(drawn_ids) + 1
        room.draws.append(DrawnAirline(airline=airline, draw_order=order))
        try:
            db.session.commit()
        except IntegrityError:
            # Another draw for this room committed first
            db.session.rollback()
            raise InvalidStateError('Another draw was just made, try again')
        return {'airlineId': airline.id, 'airlineName': airline.name, 'drawOrder': order}

    def get_card(self, room_code, user_id):
        room = self._room(room_code)
        player = self._player(room, user_id)
        card = self._card_for(player, self._drawn_names(room))
        if card is None:
            raise InvalidStateError('Cards have not been dealt yet')
        return {'card': card.to_payload(), 'hasBingo': card.has_bingo()}

    def get_drawn(self, room_code):
        return [d.to_dict() for d in self._room(room_code).draws]

    def claim(self, room_code, user_id):
        room = self._room(room_code)
        self._require_status(room, RoomStatus.STARTED, 'The game is not in progress')
        player = self._player(room, user_id)
        card = self._card_for(player, self._drawn_names(room))
        if card is None or not card.has_bingo():
            return {'valid': False}
        room.status = RoomStatus.FINISHED.value
        room.winner_id = player.user_id
        db.session.commit()
        return {'valid': True, 'winnerId': player.user_id, 'winnerName': player.display_name}

    def reset(self, room_code, admin_id):
        room = self._room(room_code)
        self._require_admin(room, admin_id, 'reset the game')
        room.draws = []
        for player in room.players:
            player.cells = []
        room.status = RoomStatus.WAITING.value
        room.winner_id = None
        db.session.commit()
        return {'roomCode': room.room_code, 'status': room.status}

    def kick(self, room_code, admin_id, user_id):
        room = self._room(room_code)
        self._require_admin(room, admin_id, 'kick players')
        if user_id == room.admin_id:
            raise ValidationError('The admin cannot be kicked')
        player = self._player(room, user_id)
        room.players.remove(player)
        db.session.commit()
        return {'userId': user_id}
