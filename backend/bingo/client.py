"""Client-side game state synchronisation.

:class:`ClientSyncEngine` keeps a player's local mirror of a room (card,
draw sequence, players, phase) in step with REST responses and pushed
Socket.IO events, and renders a view model from it. Whether the player has
bingo is always worked out from the local card, never taken from the
server.
"""

from __future__ import annotations

import asyncio
import secrets
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import aiohttp

from bingo.card import Card

ApiCall = Callable[[str, str, Optional[dict]], Dict[str, Any]]
Emit = Callable[[str, Optional[dict]], None]

DEFAULT_ROOM_CODE_LENGTH = 6


def generate_user_id() -> str:
    return f"user_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}"


@dataclass(frozen=True)
class DrawnItem:
    id: Any
    name: str
    order: int


class HttpApi:
    """Calls a running server's ``/api`` routes with a bounded timeout."""

    def __init__(self, base_url: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    async def _fetch(self, method: str, path: str, body: Optional[dict]) -> Dict[str, Any]:
        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
            async with session.request(method, f"{self.base_url}/api{path}", json=body) as response:
                return await response.json(content_type=None)

    def __call__(self, method: str, path: str, body: Optional[dict] = None) -> Dict[str, Any]:
        try:
            return asyncio.run(self._fetch(method, path, body))
        except asyncio.TimeoutError:
            return {'success': False, 'error': 'The server did not respond in time'}
        except (aiohttp.ClientError, ValueError) as exc:
            return {'success': False, 'error': f'Request failed: {exc}'}


class ClientSyncEngine:
    def __init__(self, api: ApiCall, emit: Emit, user_id: Optional[str] = None,
                 room_code_length: int = DEFAULT_ROOM_CODE_LENGTH):
        self.api = api
        self.emit = emit
        self._fixed_user_id = user_id
        self.room_code_length = room_code_length
        self.notices: List[str] = []
        self._reset_state()

    def _reset_state(self) -> None:
        self.user_id: Optional[str] = None
        self.display_name: Optional[str] = None
        self.room_code: Optional[str] = None
        self.is_admin = False
        self.game_status = 'WAITING'
        self.card: Optional[Card] = None
        self.drawn: List[DrawnItem] = []
        self.players: List[Dict[str, Any]] = []
        self.has_bingo = False
        self.winner: Optional[Dict[str, Any]] = None
        self.phase = 'landing'
        self.last_error: Optional[str] = None

    # ---- helpers ----

    def _notify(self, message: str) -> None:
        self.notices.append(message)

    def _fail(self, result: Dict[str, Any], fallback: str) -> bool:
        if result.get('success'):
            return False
        self.last_error = result.get('error') or fallback
        self._notify(self.last_error)
        return True

    def _recompute_bingo(self) -> None:
        self.has_bingo = bool(self.card and self.card.has_bingo())

    def _new_identity(self, name: str) -> bool:
        name = (name or '').strip()
        if not name:
            self.last_error = 'Please enter your name'
            self._notify(self.last_error)
            return False
        self.user_id = self._fixed_user_id or generate_user_id()
        self.display_name = name
        return True

    def _join_channel(self) -> None:
        self.emit('join-room', {
            'roomCode': self.room_code,
            'userId': self.user_id,
            'displayName': self.display_name,
            'isAdmin': self.is_admin,
        })

    # ---- actions ----

    def create_room(self, name: str, use_free_center: bool = True) -> bool:
        if not self._new_identity(name):
            return False
        self.is_admin = True
        result = self.api('POST', '/rooms', {
            'adminId': self.user_id,
            'adminName': self.display_name,
            'useFreeCenter': 1 if use_free_center else 0,
        })
        if self._fail(result, 'Failed to create room'):
            return False
        self.room_code = result['roomCode']
        self._join_channel()
        self.phase = 'lobby'
        self.refresh_players()
        return True

    def join_room(self, room_code: str, name: str) -> bool:
        code = (room_code or '').strip().upper()
        if len(code) != self.room_code_length:
            self.last_error = f'Please enter a valid {self.room_code_length}-character code'
            self._notify(self.last_error)
            return False
        if not self._new_identity(name):
            return False
        room = self.api('GET', f'/rooms/{code}', None)
        if self._fail(room, 'Room not found'):
            return False
        joined = self.api('POST', f'/rooms/{code}/join', {
            'userId': self.user_id,
            'displayName': self.display_name,
        })
        if self._fail(joined, 'Failed to join room'):
            return False
        self.room_code = code
        self.is_admin = room.get('adminId') == self.user_id
        self.game_status = joined.get('status') or room.get('status') or 'WAITING'
        self._join_channel()
        if self.game_status == 'STARTED':
            self.load_card()
            self.load_drawn()
            self.phase = 'game'
        else:
            self.phase = 'lobby'
        self.refresh_players()
        return True

    def start_game(self) -> bool:
        result = self.api('POST', f'/rooms/{self.room_code}/start', {'adminId': self.user_id})
        if self._fail(result, 'Failed to start game'):
            return False
        self.game_status = 'STARTED'
        self.load_card()
        self.phase = 'game'
        return True

    def draw(self) -> bool:
        # The airline-drawn broadcast updates the mirror
        result = self.api('POST', f'/rooms/{self.room_code}/draw', {'adminId': self.user_id})
        return not self._fail(result, 'Failed to draw airline')

    def load_card(self) -> bool:
        result = self.api('GET', f'/rooms/{self.room_code}/card/{self.user_id}', None)
        if self._fail(result, 'Failed to load card'):
            return False
        if not result.get('card'):
            self._fail({'success': False}, 'No card has been dealt yet')
            return False
        self.card = Card.from_payload(result['card'])
        # Re-apply draws that may have arrived before the card did
        for item in self.drawn:
            self.card.mark(item.name)
        self._recompute_bingo()
        return True

    def load_drawn(self) -> bool:
        result = self.api('GET', f'/rooms/{self.room_code}/drawn', None)
        if not result.get('success'):
            return False
        self.drawn = sorted(
            (DrawnItem(id=a.get('id'), name=a.get('name'), order=int(a.get('order'))) for a in result.get('airlines') or []),
            key=lambda item: item.order,
        )
        if self.card:
            for item in self.drawn:
                self.card.mark(item.name)
        self._recompute_bingo()
        return True

    def refresh_players(self) -> bool:
        if not self.room_code:
            return False
        result = self.api('GET', f'/rooms/{self.room_code}/players', None)
        if not result.get('success'):
            return False
        self.players = list(result.get('players') or [])
        return True

    def claim_bingo(self) -> Optional[bool]:
        """Announce the claim to the room, then ask the server to validate it.

        Returns the server's verdict, or ``None`` when the request failed.
        Winning state only changes through the ``bingo-winner`` broadcast.
        """
        self.emit('claiming-bingo', {})
        result = self.api('POST', f'/rooms/{self.room_code}/claim', {'userId': self.user_id})
        if self._fail(result, 'Failed to claim bingo'):
            return None
        if not result.get('valid'):
            self._notify('Invalid bingo claim!')
            return False
        return True

    def reset_game(self) -> bool:
        result = self.api('POST', f'/rooms/{self.room_code}/reset', {'adminId': self.user_id})
        return not self._fail(result, 'Failed to reset game')

    def kick(self, user_id: str) -> bool:
        result = self.api('POST', f'/rooms/{self.room_code}/kick', {'adminId': self.user_id, 'userId': user_id})
        return not self._fail(result, 'Failed to kick player')

    def leave(self) -> None:
        if self.room_code:
            self.emit('leave-room', {})
        self._reset_state()

    # ---- pushed events ----

    def handle_event(self, name: str, payload: Optional[Dict[str, Any]] = None) -> None:
        handler = self._handlers().get(name)
        if handler:
            handler(payload or {})

    def pump(self, packets: List[Dict[str, Any]]) -> None:
        """Feed packets in the ``{'name', 'args'}`` shape Socket.IO test clients return."""
        for pkt in packets:
            args = pkt.get('args') or [{}]
            self.handle_event(pkt.get('name'), args[0] if args else {})

    def _handlers(self) -> Dict[str, Callable[[Dict[str, Any]], None]]:
        return {
            'player-joined': self._on_player_joined,
            'player-left': self._on_player_left,
            'player-disconnected': self._on_player_left,
            'game-started': self._on_game_started,
            'airline-drawn': self._on_airline_drawn,
            'player-claiming-bingo': self._on_player_claiming,
            'bingo-winner': self._on_bingo_winner,
            'game-reset': self._on_game_reset,
            'player-kicked': self._on_player_kicked,
            'error': self._on_error,
        }

    def _on_player_joined(self, data):
        self._notify(f"{data.get('displayName')} joined the game")
        self.refresh_players()

    def _on_player_left(self, data):
        self._notify(f"{data.get('displayName')} left the game")
        self.refresh_players()

    def _on_game_started(self, data):
        self._notify('Game started!')
        self.game_status = 'STARTED'
        self.winner = None
        self.load_card()
        self.phase = 'game'

    def _on_airline_drawn(self, data):
        item = DrawnItem(id=data.get('airlineId'), name=data.get('airlineName'), order=int(data.get('drawOrder')))
        if any(d.order == item.order for d in self.drawn):
            return
        self.drawn.append(item)
        self.drawn.sort(key=lambda d: d.order)
        if self.card:
            self.card.mark(item.name)
        self._recompute_bingo()
        self._notify(f"Drawn: {item.name}")

    def _on_player_claiming(self, data):
        self._notify(f"{data.get('displayName')} is claiming BINGO!")

    def _on_bingo_winner(self, data):
        self.game_status = 'FINISHED'
        self.winner = {'winnerId': data.get('winnerId'), 'winnerName': data.get('winnerName')}
        self._recompute_bingo()

    def _on_game_reset(self, data):
        self._notify('Game has been reset')
        self.game_status = 'WAITING'
        self.card = None
        self.drawn = []
        self.winner = None
        self._recompute_bingo()
        self.phase = 'lobby'
        self.refresh_players()

    def _on_player_kicked(self, data):
        if data.get('userId') == self.user_id:
            self._notify('You have been removed from the game')
            self.leave()
        else:
            self.refresh_players()

    def _on_error(self, data):
        self.last_error = data.get('message')
        self._notify(self.last_error or 'Error')

    # ---- rendering ----

    @property
    def can_claim(self) -> bool:
        return self.has_bingo and self.game_status == 'STARTED'

    def render(self) -> Dict[str, Any]:
        winning = set(self.card.winning_cells()) if self.card else set()
        grid = []
        if self.card:
            grid = [
                [
                    {
                        'label': cell.label,
                        'marked': cell.is_covered,
                        'free': cell.free,
                        'winning': (r, c) in winning,
                    }
                    for c, cell in enumerate(row)
                ]
                for r, row in enumerate(self.card.cells)
            ]
        latest = self.drawn[-1].name if self.drawn else None
        view = {
            'screen': self.phase,
            'roomCode': self.room_code,
            'isAdmin': self.is_admin,
            'status': self.game_status,
            'grid': grid,
            'currentAirline': latest,
            'drawn': [{'order': d.order, 'name': d.name} for d in reversed(self.drawn)],
            'players': [
                {'displayName': p.get('displayName'), 'isAdmin': bool(p.get('isAdmin')), 'hasBingo': bool(p.get('hasBingo'))}
                for p in self.players
            ],
            'canClaim': self.can_claim,
            'winner': None,
        }
        if self.winner:
            view['winner'] = {
                'name': self.winner.get('winnerName'),
                'isMe': self.winner.get('winnerId') == self.user_id,
            }
        return view
