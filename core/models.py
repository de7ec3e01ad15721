from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, List, Optional

from .cards import Card


class Phase(str, Enum):
    NO_ROUND = "no-round"
    PLAYING = "playing"
    BS_REVEAL = "bs-reveal"
    GAME_ENDED = "game-ended"


class RevealStage(IntEnum):
    PREFLOP = 0
    FLOP = 1
    TURN = 2
    RIVER = 3


class CommandType(str, Enum):
    CREATE_ROOM = "create_room"
    JOIN_ROOM = "join_room"
    START_ROUND = "start_round"
    CLAIM = "claim"
    CHALLENGE = "challenge"
    REVEAL_NEXT = "reveal_next"
    ACKNOWLEDGE = "acknowledge"


class RoomError(Exception):
    """A command rejected with a reason the issuing player should see."""

    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg


@dataclass
class RoomConfig:
    base_hand_size: int = 2
    elimination_hand_size: int = 6
    board_size: int = 5
    flop_size: int = 3
    min_players: int = 2
    # 5 board cards + 9 players holding at most 5 cards each fits one deck.
    max_players: int = 9
    room_code_length: int = 4
    strict_claims: bool = False


@dataclass
class Player:
    player_id: str
    name: str
    is_host: bool = False
    is_dealer: bool = False
    is_active: bool = True
    extra_cards: int = 0
    base_hand_size: int = 2

    @property
    def effective_hand_size(self) -> int:
        return self.base_hand_size + self.extra_cards

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.player_id,
            "name": self.name,
            "is_host": self.is_host,
            "is_dealer": self.is_dealer,
            "is_active": self.is_active,
            "extra_cards": self.extra_cards,
            "card_count": self.effective_hand_size,
        }


@dataclass
class ChallengeResult:
    challenger_id: str
    claimer_id: Optional[str]
    claim: str
    hand_exists: bool
    loser_id: Optional[str]
    best_hand: str
    hands: Dict[str, List[Card]]
    community: List[Card]
    revealed: List[bool]

    @property
    def challenge_correct(self) -> bool:
        return not self.hand_exists

    def to_dict(self) -> Dict[str, object]:
        return {
            "challenger": self.challenger_id,
            "claimer": self.claimer_id,
            "claim": self.claim,
            "hand_exists": self.hand_exists,
            "challenge_correct": self.challenge_correct,
            "loser": self.loser_id,
            "best_hand": self.best_hand,
            "hands": {pid: [card.to_dict() for card in cards] for pid, cards in self.hands.items()},
            "community": [card.to_dict() for card in self.community],
            "revealed": list(self.revealed),
        }


@dataclass
class Ranking:
    player_id: str
    name: str
    card_count: int
    placement: int = 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.player_id,
            "name": self.name,
            "card_count": self.card_count,
            "placement": self.placement,
        }
