from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

RANKS = ("2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A")
SUITS = ("hearts", "diamonds", "clubs", "spades")
RANK_VALUE = {rank: idx for idx, rank in enumerate(RANKS)}
SUIT_BY_LETTER = {suit[0]: suit for suit in SUITS}


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in RANK_VALUE:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def value(self) -> int:
        return RANK_VALUE[self.rank]

    @property
    def label(self) -> str:
        return f"{self.rank}{self.suit[0]}"

    def to_dict(self) -> Dict[str, str]:
        return {"rank": self.rank, "suit": self.suit}


def rank_value(rank: str) -> int:
    """Ordering index of a rank: "2" is 0 and "A" is 12 (ace high)."""
    try:
        return RANK_VALUE[rank]
    except KeyError:
        raise ValueError(f"Invalid rank: {rank}") from None


def build_deck() -> List[Card]:
    return [Card(rank, suit) for suit in SUITS for rank in RANKS]


def shuffle(deck: List[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """Fisher-Yates shuffle in place, swapping from the last index down to 1."""
    rng = rng or random.Random()
    for idx in range(len(deck) - 1, 0, -1):
        swap = rng.randint(0, idx)
        deck[idx], deck[swap] = deck[swap], deck[idx]
    return deck


def deal(deck: List[Card], count: int) -> List[Card]:
    if len(deck) < count:
        raise ValueError("Not enough cards left in deck")
    cards = deck[:count]
    del deck[:count]
    return cards


def cards_to_dicts(cards: Sequence[Card]) -> List[Dict[str, str]]:
    return [card.to_dict() for card in cards]


def parse_label(label: str) -> Card:
    if len(label) not in (2, 3):
        raise ValueError(f"Invalid card label: {label}")
    suit = SUIT_BY_LETTER.get(label[-1].lower())
    if suit is None:
        raise ValueError(f"Invalid suit: {label[-1]}")
    return Card(label[:-1].upper(), suit)


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]
