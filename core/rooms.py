from __future__ import annotations

import logging
import random
import string
from typing import Dict, List, Optional

from .game import GameEngine
from .models import RoomConfig, RoomError

LOGGER = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


class RoomRegistry:
    """Owns every live room and routes room-scoped commands to its engine.

    Commands for rooms that no longer exist are ignored and yield no events.
    """

    def __init__(self, config: Optional[RoomConfig] = None, seed: Optional[int] = None) -> None:
        self.config = config or RoomConfig()
        self.rooms: Dict[str, GameEngine] = {}
        self._rng = random.Random(seed)

    def get(self, room_code: Optional[str]) -> Optional[GameEngine]:
        if not room_code:
            return None
        return self.rooms.get(room_code.strip().upper())

    def _new_code(self) -> str:
        while True:
            code = "".join(self._rng.choice(CODE_ALPHABET) for _ in range(self.config.room_code_length))
            if code not in self.rooms:
                return code

    def create_room(self, player_id: str, name: str) -> GameEngine:
        engine = GameEngine(self._new_code(), self.config)
        engine.add_player(player_id, name)
        self.rooms[engine.room_code] = engine
        LOGGER.info("Room %s created by %s", engine.room_code, player_id)
        return engine

    def join_room(self, room_code: str, player_id: str, name: str) -> GameEngine:
        engine = self.get(room_code)
        if engine is None:
            raise RoomError("ROOM_NOT_FOUND", "Game not found")
        engine.add_player(player_id, name)
        LOGGER.info("Player %s joined room %s", player_id, engine.room_code)
        return engine

    def start_round(self, room_code: str, seed: Optional[int] = None) -> List[Dict[str, object]]:
        engine = self.get(room_code)
        if engine is None:
            return []
        return self._settle(engine, engine.start_round(seed))

    def submit_claim(self, room_code: str, player_id: str, claim_text: str) -> List[Dict[str, object]]:
        engine = self.get(room_code)
        if engine is None:
            return []
        return self._settle(engine, engine.submit_claim(player_id, claim_text))

    def challenge(self, room_code: str, player_id: str) -> List[Dict[str, object]]:
        engine = self.get(room_code)
        if engine is None:
            return []
        return self._settle(engine, engine.challenge(player_id))

    def reveal_next_card(self, room_code: str, player_id: str) -> List[Dict[str, object]]:
        engine = self.get(room_code)
        if engine is None:
            return []
        return self._settle(engine, engine.reveal_next_card(player_id))

    def acknowledge(self, room_code: str, player_id: str, seed: Optional[int] = None) -> List[Dict[str, object]]:
        engine = self.get(room_code)
        if engine is None:
            return []
        return self._settle(engine, engine.acknowledge(player_id, seed))

    def disconnect(self, room_code: str, player_id: str) -> List[Dict[str, object]]:
        engine = self.get(room_code)
        if engine is None:
            return []
        return self._settle(engine, engine.remove_player(player_id))

    def _settle(self, engine: GameEngine, events: List[Dict[str, object]]) -> List[Dict[str, object]]:
        # Finished or empty rooms are discarded once their events are produced.
        if engine.ended or not engine.players:
            self.rooms.pop(engine.room_code, None)
            LOGGER.info("Room %s closed", engine.room_code)
        return events
