"""Realtime gateway on top of Flask-SocketIO.

Each room code maps to one Socket.IO room (``room:<CODE>``). Connection
state lives in :class:`ConnectionContext` records owned by the gateway and
keyed by sid.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from flask_socketio import SocketIO

from .events import (
    JoinRoom,
    OutboundEvent,
    PlayerDisconnected,
    PlayerJoined,
    PlayerLeft,
)
from .registry import Participant, RoomRegistry

logger = logging.getLogger(__name__)


class RoomSwitchError(Exception):
    """Raised when a connection joins a second room without leaving the first."""


@dataclass(frozen=True)
class ConnectionContext:
    sid: str
    room_code: str
    user_id: str
    display_name: str
    is_admin: bool = False

    def participant(self) -> Participant:
        return Participant(
            sid=self.sid,
            user_id=self.user_id,
            display_name=self.display_name,
            is_admin=self.is_admin,
        )


def channel_for(room_code: str) -> str:
    return f"room:{room_code}"


class RealtimeGateway:
    def __init__(self, socketio: SocketIO, registry: RoomRegistry, namespace: str = '/ws'):
        self.socketio = socketio
        self.registry = registry
        self.namespace = namespace
        self._contexts: Dict[str, ConnectionContext] = {}
        self._lock = threading.RLock()
        # Emits go out one at a time so each room sees them in issue order
        self._emit_lock = threading.Lock()

    def context(self, sid: str) -> Optional[ConnectionContext]:
        with self._lock:
            return self._contexts.get(sid)

    def join(self, sid: str, event: JoinRoom) -> ConnectionContext:
        with self._lock:
            current = self._contexts.get(sid)
            if current and current.room_code != event.room_code:
                raise RoomSwitchError(
                    f"Already in room {current.room_code}; leave it before joining {event.room_code}"
                )
            ctx = ConnectionContext(
                sid=sid,
                room_code=event.room_code,
                user_id=event.user_id,
                display_name=event.display_name,
                is_admin=event.is_admin,
            )
            self._contexts[sid] = ctx
            if current:
                # Already subscribed; refresh the entry without a second announcement
                self.registry.add_participant(ctx.room_code, ctx.participant())
                return ctx
            self.socketio.server.enter_room(sid, channel_for(ctx.room_code), namespace=self.namespace)
            count = self.registry.add_participant(ctx.room_code, ctx.participant())

        logger.info(f"[join] room={ctx.room_code} user={ctx.user_id} name={ctx.display_name} players={count}")
        self.broadcast(
            ctx.room_code,
            PlayerJoined(
                user_id=ctx.user_id,
                display_name=ctx.display_name,
                is_admin=ctx.is_admin,
                player_count=count,
            ),
            exclude_sid=sid,
        )
        return ctx

    def leave(self, sid: str) -> Optional[ConnectionContext]:
        ctx = self._detach(sid)
        if ctx:
            self.broadcast(
                ctx.room_code,
                PlayerLeft(
                    user_id=ctx.user_id,
                    display_name=ctx.display_name,
                    player_count=self.registry.participant_count(ctx.room_code),
                ),
            )
        return ctx

    def disconnect(self, sid: str) -> Optional[ConnectionContext]:
        ctx = self._detach(sid, connected=False)
        if ctx:
            self.broadcast(
                ctx.room_code,
                PlayerDisconnected(
                    user_id=ctx.user_id,
                    display_name=ctx.display_name,
                    player_count=self.registry.participant_count(ctx.room_code),
                ),
            )
        return ctx

    def evict_user(self, room_code: str, user_id: str) -> List[ConnectionContext]:
        """Detach every connection of ``user_id`` from ``room_code`` without announcing it."""
        with self._lock:
            sids = [
                c.sid for c in self._contexts.values()
                if c.room_code == room_code and c.user_id == user_id
            ]
        return [ctx for ctx in (self._detach(sid) for sid in sids) if ctx]

    def broadcast(self, room_code: str, event: OutboundEvent, exclude_sid: Optional[str] = None) -> None:
        if not isinstance(event, OutboundEvent):
            raise TypeError(f"Cannot broadcast {type(event).__name__}; expected an OutboundEvent")
        with self._emit_lock:
            self.socketio.emit(
                event.name,
                event.to_payload(),
                to=channel_for(room_code),
                skip_sid=exclude_sid,
                namespace=self.namespace,
            )

    def send(self, sid: str, event: OutboundEvent) -> None:
        if not isinstance(event, OutboundEvent):
            raise TypeError(f"Cannot send {type(event).__name__}; expected an OutboundEvent")
        with self._emit_lock:
            self.socketio.emit(event.name, event.to_payload(), to=sid, namespace=self.namespace)

    def _detach(self, sid: str, connected: bool = True) -> Optional[ConnectionContext]:
        with self._lock:
            ctx = self._contexts.pop(sid, None)
            if ctx is None:
                return None
            self.registry.remove_participant(ctx.room_code, sid)
            if connected:
                # The socket layer drops rooms of a closed connection itself
                self.socketio.server.leave_room(sid, channel_for(ctx.room_code), namespace=self.namespace)
        logger.info(f"[leave] room={ctx.room_code} user={ctx.user_id} connected={connected}")
        return ctx
