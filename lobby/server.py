from __future__ import annotations

import asyncio
import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import websockets
from websockets.asyncio.server import ServerConnection

from core.game import GameEngine
from core.models import CommandType, RoomConfig, RoomError
from core.rooms import RoomRegistry

LOGGER = logging.getLogger("liars_host")

# LobbyServer glues the room registry to WebSocket clients. Every network
# concern lives here; GameEngine and RoomRegistry stay pure.

Outgoing = List[Tuple[ServerConnection, str]]


@dataclass
class ClientSession:
    player_id: str
    websocket: ServerConnection
    room_code: Optional[str] = None


class LobbyServer:
    def __init__(self, config: Optional[RoomConfig] = None) -> None:
        self.registry = RoomRegistry(config)
        self.sessions: Dict[str, ClientSession] = {}
        # One lock serialises every command so each room sees them in receipt order.
        self.lock = asyncio.Lock()

    async def start(self, host: str = "0.0.0.0", port: int = 8765) -> None:
        async with websockets.serve(self._handle_connection, host, port):
            LOGGER.info("Liar's poker host listening on %s:%s", host, port)
            await asyncio.Future()

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        session = ClientSession(player_id=uuid.uuid4().hex, websocket=websocket)
        async with self.lock:
            self.sessions[session.player_id] = session
        LOGGER.info("Player %s connected", session.player_id)
        await self._send_json(websocket, "welcome", {"player_id": session.player_id})

        try:
            async for raw in websocket:
                await self._dispatch(session, self._decode(raw))
        except websockets.ConnectionClosed:
            pass
        finally:
            await self._handle_disconnect(session)
        LOGGER.info("Player %s disconnected", session.player_id)

    async def _dispatch(self, session: ClientSession, message: Dict[str, object]) -> None:
        msg_type = message.get("type")
        if not msg_type:
            await self._send_error(session.websocket, code="BAD_SCHEMA", msg="type required")
            return
        try:
            command = CommandType(msg_type)
        except ValueError:
            await self._send_error(session.websocket, code="UNKNOWN_TYPE", msg="Unsupported message type")
            return

        if command == CommandType.CREATE_ROOM:
            await self._handle_create(session, message)
        elif command == CommandType.JOIN_ROOM:
            await self._handle_join(session, message)
        elif command == CommandType.CLAIM:
            claim = message.get("claim")
            if not isinstance(claim, str):
                await self._send_error(session.websocket, code="BAD_SCHEMA", msg="claim required")
                return
            await self._run_room_command(
                session, lambda code: self.registry.submit_claim(code, session.player_id, claim)
            )
        elif command == CommandType.START_ROUND:
            await self._run_room_command(session, lambda code: self.registry.start_round(code))
        elif command == CommandType.CHALLENGE:
            await self._run_room_command(session, lambda code: self.registry.challenge(code, session.player_id))
        elif command == CommandType.REVEAL_NEXT:
            await self._run_room_command(
                session, lambda code: self.registry.reveal_next_card(code, session.player_id)
            )
        elif command == CommandType.ACKNOWLEDGE:
            await self._run_room_command(session, lambda code: self.registry.acknowledge(code, session.player_id))

    async def _handle_create(self, session: ClientSession, message: Dict[str, object]) -> None:
        name = message.get("name")
        error: Optional[RoomError] = None
        outgoing: Outgoing = []
        async with self.lock:
            try:
                engine = self.registry.create_room(session.player_id, name if isinstance(name, str) else "")
            except RoomError as exc:
                error = exc
            else:
                # The old room is only left once the new one exists.
                outgoing.extend(self._leave_room_locked(session))
                session.room_code = engine.room_code
                outgoing.append((session.websocket, self._envelope("room", engine.lobby_state())))
                outgoing.extend(self._lobby_messages_locked(engine))
        await self._deliver(outgoing)
        if error is not None:
            await self._send_error(session.websocket, code=error.code, msg=error.msg)

    async def _handle_join(self, session: ClientSession, message: Dict[str, object]) -> None:
        name = message.get("name")
        room_code = message.get("room")
        if not isinstance(room_code, str):
            await self._send_error(session.websocket, code="BAD_SCHEMA", msg="room required")
            return
        error: Optional[RoomError] = None
        outgoing: Outgoing = []
        async with self.lock:
            try:
                engine = self.registry.join_room(room_code, session.player_id, name if isinstance(name, str) else "")
            except RoomError as exc:
                error = exc
            else:
                if session.room_code != engine.room_code:
                    outgoing.extend(self._leave_room_locked(session))
                session.room_code = engine.room_code
                outgoing.append((session.websocket, self._envelope("room", engine.lobby_state())))
                outgoing.extend(self._lobby_messages_locked(engine))
        if error is not None:
            LOGGER.info("Join rejected player=%s room=%s reason=%s", session.player_id, room_code, error.code)
            await self._send_error(session.websocket, code=error.code, msg=error.msg)
            return
        await self._deliver(outgoing)

    async def _run_room_command(self, session: ClientSession, command) -> None:
        async with self.lock:
            engine = self.registry.get(session.room_code)
            if engine is None:
                return
            members = self._room_sessions_locked(engine)
            try:
                events = command(engine.room_code)
            except RoomError as exc:
                LOGGER.warning(
                    "Rejected command room=%s player=%s reason=%s",
                    engine.room_code,
                    session.player_id,
                    exc.code,
                )
                error = exc
            else:
                error = None
                outgoing = self._after_events_locked(engine, members, events)
        if error is not None:
            await self._send_error(session.websocket, code=error.code, msg=error.msg)
            return
        await self._deliver(outgoing)

    async def _handle_disconnect(self, session: ClientSession) -> None:
        async with self.lock:
            self.sessions.pop(session.player_id, None)
            outgoing = self._leave_room_locked(session)
        await self._deliver(outgoing)

    def _leave_room_locked(self, session: ClientSession) -> Outgoing:
        engine = self.registry.get(session.room_code)
        session.room_code = None
        if engine is None:
            return []
        members = [member for member in self._room_sessions_locked(engine) if member is not session]
        events = self.registry.disconnect(engine.room_code, session.player_id)
        return self._after_events_locked(engine, members, events)

    def _after_events_locked(
        self,
        engine: GameEngine,
        members: List[ClientSession],
        events: List[Dict[str, object]],
    ) -> Outgoing:
        if not events:
            return []
        outgoing: Outgoing = []
        for event in events:
            message = self._envelope("event", event)
            outgoing.extend((member.websocket, message) for member in members)

        game_end = next((event for event in events if event.get("ev") == "GAME_END"), None)
        if game_end is not None:
            LOGGER.info("Room %s finished; winner=%s", engine.room_code, game_end.get("winner"))
            message = self._envelope(
                "game_end",
                {"room": engine.room_code, "winner": game_end["winner"], "ranking": game_end["ranking"]},
            )
            for member in members:
                outgoing.append((member.websocket, message))
                if member.room_code == engine.room_code:
                    member.room_code = None
            return outgoing

        if self.registry.get(engine.room_code) is None:
            return outgoing
        outgoing.extend(self._lobby_messages_locked(engine))
        for member in self._room_sessions_locked(engine):
            outgoing.append((member.websocket, self._envelope("state", engine.snapshot_payload(member.player_id))))
        return outgoing

    def _lobby_messages_locked(self, engine: GameEngine) -> Outgoing:
        message = self._envelope("lobby", engine.lobby_state())
        return [(member.websocket, message) for member in self._room_sessions_locked(engine)]

    def _room_sessions_locked(self, engine: GameEngine) -> List[ClientSession]:
        members = (self.sessions.get(player_id) for player_id in engine.player_ids())
        return [member for member in members if member is not None]

    async def _deliver(self, outgoing: Outgoing) -> None:
        if not outgoing:
            return
        await asyncio.gather(*(self._send_raw(socket, message) for socket, message in outgoing))

    async def _send_raw(self, websocket: ServerConnection, message: str) -> None:
        try:
            await websocket.send(message)
        except websockets.ConnectionClosed:
            pass

    async def _send_json(self, websocket: ServerConnection, msg_type: str, payload: Dict[str, object]) -> None:
        await self._send_raw(websocket, self._envelope(msg_type, payload))

    async def _send_error(self, websocket: ServerConnection, code: str, msg: str) -> None:
        await self._send_json(websocket, "error", {"code": code, "msg": msg})

    def _envelope(self, msg_type: str, payload: Dict[str, object]) -> str:
        body = {"type": msg_type, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
        body.update(payload)
        return json.dumps(body)

    def _decode(self, raw: str) -> Dict[str, object]:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        return message if isinstance(message, dict) else {}
