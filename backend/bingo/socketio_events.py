from datetime import datetime, timezone

from flask import current_app, request

from bingo import socketio
from bingo.actions import normalize_room_code
from bingo.errors import ValidationError
from bingo.events import (
    ChatBroadcast,
    ClaimingBingo,
    ChatMessage,
    ErrorEvent,
    EventValidationError,
    Joined,
    JoinRoom,
    LeaveRoom,
    PlayerClaimingBingo,
    parse_inbound,
)
from bingo.gateway import RealtimeGateway, RoomSwitchError


def _get_sid() -> str:
    return request.sid  # type: ignore[attr-defined]


def register_socketio_handlers(gateway: RealtimeGateway, room_code_length: int = 6) -> None:
    """Register Socket.IO event handlers on the gateway's namespace.

    Handlers close over ``gateway`` so each app instance talks to its own
    registry.
    """

    def reject(event_name: str, message: str) -> None:
        gateway.send(_get_sid(), ErrorEvent(message=message, event=event_name))

    def handle_connect(auth=None):
        current_app.logger.debug(f"[connect] sid={_get_sid()}")

    def handle_disconnect(reason=None):
        ctx = gateway.disconnect(_get_sid())
        if ctx:
            current_app.logger.info(f"[disconnect] room={ctx.room_code} user={ctx.user_id} reason={reason}")

    def handle_join_room(data):
        try:
            event = parse_inbound(JoinRoom.name, data)
            event = JoinRoom(
                room_code=normalize_room_code(event.room_code, room_code_length),
                user_id=event.user_id,
                display_name=event.display_name,
                is_admin=event.is_admin,
            )
            ctx = gateway.join(_get_sid(), event)
        except (EventValidationError, ValidationError, RoomSwitchError) as exc:
            reject(JoinRoom.name, str(exc))
            return
        gateway.send(
            ctx.sid,
            Joined(room_code=ctx.room_code, player_count=gateway.registry.participant_count(ctx.room_code)),
        )

    def handle_leave_room(data=None):
        gateway.leave(_get_sid())

    def handle_chat_message(data):
        try:
            event = parse_inbound(ChatMessage.name, data)
        except EventValidationError as exc:
            reject(ChatMessage.name, str(exc))
            return
        ctx = gateway.context(_get_sid())
        if not ctx:
            reject(ChatMessage.name, 'Join a room first')
            return
        gateway.broadcast(
            ctx.room_code,
            ChatBroadcast(
                user_id=ctx.user_id,
                display_name=ctx.display_name,
                message=event.message,
                timestamp=datetime.now(timezone.utc).isoformat(),
            ),
        )

    def handle_claiming_bingo(data=None):
        ctx = gateway.context(_get_sid())
        if not ctx:
            reject(ClaimingBingo.name, 'Join a room first')
            return
        gateway.broadcast(
            ctx.room_code,
            PlayerClaimingBingo(user_id=ctx.user_id, display_name=ctx.display_name),
            exclude_sid=ctx.sid,
        )

    namespace = gateway.namespace
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event(JoinRoom.name, handle_join_room, namespace=namespace)
    socketio.on_event(LeaveRoom.name, handle_leave_room, namespace=namespace)
    socketio.on_event(ChatMessage.name, handle_chat_message, namespace=namespace)
    socketio.on_event(ClaimingBingo.name, handle_claiming_bingo, namespace=namespace)
