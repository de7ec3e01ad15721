import pytest

from core.models import RoomConfig, RoomError
from core.rooms import CODE_ALPHABET, RoomRegistry


def make_room(players: int = 2, config: RoomConfig = None):
    registry = RoomRegistry(config, seed=11)
    engine = registry.create_room("p0", "Player0")
    for idx in range(1, players):
        registry.join_room(engine.room_code, f"p{idx}", f"Player{idx}")
    return registry, engine


def test_create_room_assigns_unique_codes():
    registry = RoomRegistry(seed=3)
    codes = {registry.create_room(f"host{idx}", f"Host{idx}").room_code for idx in range(20)}
    assert len(codes) == 20
    assert all(len(code) == 4 and set(code) <= set(CODE_ALPHABET) for code in codes)


def test_creator_hosts_and_deals():
    registry, engine = make_room(1)
    player = engine.players[0]
    assert player.is_host and player.is_dealer
    assert registry.get(engine.room_code) is engine


def test_join_is_case_insensitive():
    registry, engine = make_room(1)
    joined = registry.join_room(engine.room_code.lower(), "p1", "Player1")
    assert joined is engine
    assert engine.player_ids() == ["p0", "p1"]


def test_join_unknown_room():
    registry = RoomRegistry()
    with pytest.raises(RoomError) as excinfo:
        registry.join_room("ZZZZ", "p1", "Player1")
    assert excinfo.value.code == "ROOM_NOT_FOUND"


def test_create_room_requires_name():
    registry = RoomRegistry()
    with pytest.raises(RoomError) as excinfo:
        registry.create_room("p0", " ")
    assert excinfo.value.code == "NAME_REQUIRED"
    assert registry.rooms == {}


def test_commands_for_missing_rooms_are_ignored():
    registry = RoomRegistry()
    assert registry.start_round("NOPE") == []
    assert registry.submit_claim("NOPE", "p0", "Pair of 2s") == []
    assert registry.challenge(None, "p0") == []
    assert registry.reveal_next_card("NOPE", "p0") == []
    assert registry.acknowledge("NOPE", "p0") == []
    assert registry.disconnect("NOPE", "p0") == []


def test_room_is_removed_when_game_ends():
    registry, engine = make_room(2)
    registry.start_round(engine.room_code, seed=4)
    events = registry.disconnect(engine.room_code, "p1")
    assert events[-1]["ev"] == "GAME_END"
    assert registry.get(engine.room_code) is None


def test_room_is_removed_when_everyone_leaves_the_lobby():
    registry, engine = make_room(2)
    registry.disconnect(engine.room_code, "p0")
    assert registry.get(engine.room_code) is engine
    assert engine.players[0].is_host
    registry.disconnect(engine.room_code, "p1")
    assert registry.get(engine.room_code) is None


def test_registry_routes_round_commands():
    registry, engine = make_room(2)
    code = engine.room_code
    assert registry.start_round(code, seed=9)[0]["ev"] == "ROUND_START"
    assert registry.reveal_next_card(code, "p0")[0]["ev"] == "REVEAL"
    assert registry.submit_claim(code, "p0", "Pair of 2s")[0]["ev"] == "CLAIM"
    assert registry.challenge(code, "p1")[0]["ev"] == "CHALLENGE"
    assert registry.acknowledge(code, "p0", seed=5) == [{"ev": "ACK", "player": "p0"}]


def test_registry_shares_config_with_rooms():
    registry, engine = make_room(2, config=RoomConfig(strict_claims=True))
    assert engine.config.strict_claims
    registry.start_round(engine.room_code, seed=1)
    registry.submit_claim(engine.room_code, "p0", "Pair of Ks")
    with pytest.raises(RoomError):
        registry.submit_claim(engine.room_code, "p1", "Pair of 2s")
