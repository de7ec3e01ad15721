from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from core.cards import parse_cards
from core.game import GameEngine
from core.models import RoomConfig


def create_engine(players: int = 2, *, room_code: str = "TEST", config: Optional[RoomConfig] = None) -> GameEngine:
    """Instantiate a room with players p0..pN seated in order (p0 hosts and deals)."""
    engine = GameEngine(room_code, config or RoomConfig())
    for idx in range(players):
        engine.add_player(f"p{idx}", f"Player{idx}")
    return engine


def start_round(engine: GameEngine, seed: int = 42) -> None:
    events = engine.start_round(seed=seed)
    assert events and events[0]["ev"] == "ROUND_START"


def rig_round(
    engine: GameEngine,
    hands: Dict[str, Iterable[str]],
    community: Iterable[str],
    revealed: int = 0,
) -> None:
    """Replace the dealt cards with known ones (labels like "10h", "As")."""
    ctx = engine.round
    assert ctx is not None
    ctx.hands = {pid: parse_cards(list(labels)) for pid, labels in hands.items()}
    ctx.community = parse_cards(list(community))
    ctx.revealed = [idx < revealed for idx in range(len(ctx.community))]


def reveal_flop(engine: GameEngine, host_id: str = "p0") -> None:
    for _ in range(engine.config.flop_size):
        engine.reveal_next_card(host_id)


def acknowledge_all(engine: GameEngine, seed: int = 7) -> List[Dict[str, object]]:
    events: List[Dict[str, object]] = []
    for player in list(engine.active_players()):
        events.extend(engine.acknowledge(player.player_id, seed=seed))
    return events
