"""Realtime event messages.

Every event that crosses the Socket.IO boundary has its own message class.
Inbound payloads are parsed with :func:`parse_inbound`; the gateway only
broadcasts :class:`OutboundEvent` instances.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, Optional, Type


class EventValidationError(ValueError):
    pass


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def _require_str(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise EventValidationError(f"{key} is required")
    return value.strip()


# ---- Inbound ----


@dataclass(frozen=True)
class InboundEvent:
    name: ClassVar[str] = ''

    @classmethod
    def from_payload(cls, data: dict) -> 'InboundEvent':
        return cls()


@dataclass(frozen=True)
class JoinRoom(InboundEvent):
    name: ClassVar[str] = 'join-room'

    room_code: str
    user_id: str
    display_name: str
    is_admin: bool = False

    @classmethod
    def from_payload(cls, data: dict) -> 'JoinRoom':
        return cls(
            room_code=_require_str(data, 'roomCode').upper(),
            user_id=_require_str(data, 'userId'),
            display_name=_require_str(data, 'displayName'),
            is_admin=bool(data.get('isAdmin')),
        )


@dataclass(frozen=True)
class LeaveRoom(InboundEvent):
    name: ClassVar[str] = 'leave-room'


@dataclass(frozen=True)
class ChatMessage(InboundEvent):
    name: ClassVar[str] = 'chat-message'

    message: str

    @classmethod
    def from_payload(cls, data: dict) -> 'ChatMessage':
        return cls(message=_require_str(data, 'message'))


@dataclass(frozen=True)
class ClaimingBingo(InboundEvent):
    name: ClassVar[str] = 'claiming-bingo'


INBOUND_EVENTS: Dict[str, Type[InboundEvent]] = {
    cls.name: cls for cls in (JoinRoom, LeaveRoom, ChatMessage, ClaimingBingo)
}


def parse_inbound(name: str, data: Any) -> InboundEvent:
    cls = INBOUND_EVENTS.get(name)
    if cls is None:
        raise EventValidationError(f"Unknown event: {name}")
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise EventValidationError(f"{name} payload must be an object")
    return cls.from_payload(data)


# ---- Outbound ----


@dataclass(frozen=True)
class OutboundEvent:
    name: ClassVar[str] = ''

    def to_payload(self) -> Dict[str, Any]:
        return {_camel(f.name): getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class PlayerJoined(OutboundEvent):
    name: ClassVar[str] = 'player-joined'

    user_id: str
    display_name: str
    is_admin: bool
    player_count: int


@dataclass(frozen=True)
class PlayerLeft(OutboundEvent):
    name: ClassVar[str] = 'player-left'

    user_id: str
    display_name: str
    player_count: int


@dataclass(frozen=True)
class PlayerDisconnected(OutboundEvent):
    name: ClassVar[str] = 'player-disconnected'

    user_id: str
    display_name: str
    player_count: int


@dataclass(frozen=True)
class GameStarted(OutboundEvent):
    name: ClassVar[str] = 'game-started'

    room_code: str
    status: str = 'STARTED'


@dataclass(frozen=True)
class AirlineDrawn(OutboundEvent):
    name: ClassVar[str] = 'airline-drawn'

    airline_id: Any
    airline_name: str
    draw_order: int


@dataclass(frozen=True)
class PlayerClaimingBingo(OutboundEvent):
    name: ClassVar[str] = 'player-claiming-bingo'

    user_id: str
    display_name: str


@dataclass(frozen=True)
class BingoWinner(OutboundEvent):
    name: ClassVar[str] = 'bingo-winner'

    winner_id: str
    winner_name: str


@dataclass(frozen=True)
class GameReset(OutboundEvent):
    name: ClassVar[str] = 'game-reset'

    room_code: str
    status: str = 'WAITING'


@dataclass(frozen=True)
class PlayerKicked(OutboundEvent):
    name: ClassVar[str] = 'player-kicked'

    user_id: str


@dataclass(frozen=True)
class ChatBroadcast(OutboundEvent):
    name: ClassVar[str] = 'chat-message'

    user_id: str
    display_name: str
    message: str
    timestamp: str


@dataclass(frozen=True)
class Joined(OutboundEvent):
    name: ClassVar[str] = 'joined'

    room_code: str
    player_count: int


@dataclass(frozen=True)
class ErrorEvent(OutboundEvent):
    name: ClassVar[str] = 'error'

    message: str
    event: Optional[str] = None


OUTBOUND_EVENTS: Dict[str, Type[OutboundEvent]] = {
    cls.name: cls
    for cls in (
        PlayerJoined,
        PlayerLeft,
        PlayerDisconnected,
        GameStarted,
        AirlineDrawn,
        PlayerClaimingBingo,
        BingoWinner,
        GameReset,
        PlayerKicked,
        ChatBroadcast,
        Joined,
        ErrorEvent,
    )
}
