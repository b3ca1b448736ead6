"""In-memory room registry.

Tracks which live connections sit in which room so broadcasts can be fanned
out, plus a best-effort copy of each room's lifecycle status. The data
service stays the source of truth for everything else.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional


class RoomStatus(str, Enum):
    WAITING = 'WAITING'
    STARTED = 'STARTED'
    FINISHED = 'FINISHED'


@dataclass(frozen=True)
class Participant:
    sid: str
    user_id: str
    display_name: str
    is_admin: bool = False

    def to_dict(self) -> dict:
        return {
            'userId': self.user_id,
            'displayName': self.display_name,
            'isAdmin': self.is_admin,
        }


@dataclass
class Room:
    code: str
    status: RoomStatus = RoomStatus.WAITING
    # Keyed by sid; dicts keep insertion order
    participants: Dict[str, Participant] = field(default_factory=dict)


class RoomRegistry:
    """Room code -> connected participants and cached status.

    Rooms are created lazily and evicted once their last participant is
    removed. All reads hand out copies.
    """

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.RLock()

    def ensure(self, code: str) -> Room:
        with self._lock:
            room = self._rooms.get(code)
            if room is None:
                room = Room(code=code)
                self._rooms[code] = room
            return self._snapshot(room)

    def get(self, code: str) -> Optional[Room]:
        with self._lock:
            room = self._rooms.get(code)
            return self._snapshot(room) if room else None

    def add_participant(self, code: str, participant: Participant) -> int:
        """Insert or replace the entry for ``participant.sid``; returns the new count."""
        with self._lock:
            room = self._rooms.get(code)
            if room is None:
                room = Room(code=code)
                self._rooms[code] = room
            room.participants[participant.sid] = participant
            return len(room.participants)

    def remove_participant(self, code: str, sid: str) -> Optional[Participant]:
        with self._lock:
            room = self._rooms.get(code)
            if room is None:
                return None
            removed = room.participants.pop(sid, None)
            if not room.participants:
                del self._rooms[code]
            return removed

    def set_status(self, code: str, status: RoomStatus) -> bool:
        with self._lock:
            room = self._rooms.get(code)
            if room is None:
                return False
            room.status = RoomStatus(status)
            return True

    def status(self, code: str) -> Optional[RoomStatus]:
        with self._lock:
            room = self._rooms.get(code)
            return room.status if room else None

    def list_participants(self, code: str) -> List[Participant]:
        with self._lock:
            room = self._rooms.get(code)
            return list(room.participants.values()) if room else []

    def participant_count(self, code: str) -> int:
        with self._lock:
            room = self._rooms.get(code)
            return len(room.participants) if room else 0

    def room_codes(self) -> List[str]:
        with self._lock:
            return list(self._rooms)

    @staticmethod
    def _snapshot(room: Room) -> Room:
        return replace(room, participants=dict(room.participants))
