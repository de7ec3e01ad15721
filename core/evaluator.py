from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .cards import RANK_VALUE, RANKS, SUITS, Card

ROYAL_RANKS = ("10", "J", "Q", "K", "A")
WHEEL_RANKS = ("A", "2", "3", "4", "5")
ACE = RANK_VALUE["A"]


class HandCategory(str, Enum):
    HIGH_CARD = "high_card"
    PAIR = "pair"
    TWO_PAIR = "two_pair"
    THREE_OF_A_KIND = "three_of_a_kind"
    STRAIGHT = "straight"
    FLUSH = "flush"
    FULL_HOUSE = "full_house"
    FOUR_OF_A_KIND = "four_of_a_kind"
    STRAIGHT_FLUSH = "straight_flush"
    ROYAL_FLUSH = "royal_flush"

    @property
    def strength(self) -> int:
        return _STRENGTH[self]


_STRENGTH = {category: idx for idx, category in enumerate(HandCategory)}


def rank_counts(cards: Iterable[Card]) -> Counter:
    return Counter(card.rank for card in cards)


def group_by_suit(cards: Iterable[Card]) -> Dict[str, List[Card]]:
    groups: Dict[str, List[Card]] = {}
    for card in cards:
        groups.setdefault(card.suit, []).append(card)
    return groups


def _ranks_with_at_least(cards: Iterable[Card], count: int) -> List[str]:
    counts = rank_counts(cards)
    ranks = [rank for rank, seen in counts.items() if seen >= count]
    return sorted(ranks, key=RANK_VALUE.__getitem__, reverse=True)


def highest_pair(cards: Sequence[Card]) -> Optional[str]:
    pairs = _ranks_with_at_least(cards, 2)
    return pairs[0] if pairs else None


def two_highest_pairs(cards: Sequence[Card]) -> Optional[Tuple[str, str]]:
    pairs = _ranks_with_at_least(cards, 2)
    if len(pairs) < 2:
        return None
    return pairs[0], pairs[1]


def highest_trips(cards: Sequence[Card]) -> Optional[str]:
    trips = _ranks_with_at_least(cards, 3)
    return trips[0] if trips else None


def highest_quads(cards: Sequence[Card]) -> Optional[str]:
    quads = _ranks_with_at_least(cards, 4)
    return quads[0] if quads else None


def full_house_ranks(cards: Sequence[Card]) -> Optional[Tuple[str, str]]:
    """Return (trip rank, pair rank) of the best full house, pair rank != trip rank."""
    trips = highest_trips(cards)
    if trips is None:
        return None
    pairs = [rank for rank in _ranks_with_at_least(cards, 2) if rank != trips]
    if not pairs:
        return None
    return trips, pairs[0]


def straight_high(cards: Iterable[Card]) -> Optional[str]:
    """Highest card of the best straight; the wheel (A-2-3-4-5) reports "5"."""
    values = sorted({card.value for card in cards})
    if ACE in values:
        values.insert(0, -1)
    best: Optional[int] = None
    run = 1
    for prev, cur in zip(values, values[1:]):
        if cur == prev + 1:
            run += 1
            if run >= 5:
                best = cur
        else:
            run = 1
    return RANKS[best] if best is not None else None


def has_straight(cards: Iterable[Card]) -> bool:
    return straight_high(cards) is not None


def highest_card(cards: Iterable[Card]) -> Optional[str]:
    best = max(cards, key=lambda card: card.value, default=None)
    return best.rank if best else None


def _flush_groups(cards: Sequence[Card], suit: Optional[str]) -> List[List[Card]]:
    groups = group_by_suit(cards)
    suits = [suit] if suit else list(SUITS)
    return [groups[s] for s in suits if len(groups.get(s, [])) >= 5]


def flush_high(cards: Sequence[Card], suit: Optional[str] = None) -> Optional[str]:
    highs = [highest_card(group) for group in _flush_groups(cards, suit)]
    return max(highs, key=RANK_VALUE.__getitem__, default=None)


def straight_flush_high(cards: Sequence[Card], suit: Optional[str] = None) -> Optional[str]:
    highs = [straight_high(group) for group in _flush_groups(cards, suit)]
    highs = [high for high in highs if high is not None]
    return max(highs, key=RANK_VALUE.__getitem__, default=None)


def has_royal_flush(cards: Sequence[Card], suit: Optional[str] = None) -> bool:
    for group in _flush_groups(cards, suit):
        ranks = {card.rank for card in group}
        if all(rank in ranks for rank in ROYAL_RANKS):
            return True
    return False


def best_category(cards: Sequence[Card]) -> HandCategory:
    """Best poker category that any subset of ``cards`` can form.

    Counts run over the whole pool, which may hold far more than five cards.
    """
    if has_royal_flush(cards):
        return HandCategory.ROYAL_FLUSH
    if straight_flush_high(cards) is not None:
        return HandCategory.STRAIGHT_FLUSH
    if highest_quads(cards) is not None:
        return HandCategory.FOUR_OF_A_KIND
    if full_house_ranks(cards) is not None:
        return HandCategory.FULL_HOUSE
    if flush_high(cards) is not None:
        return HandCategory.FLUSH
    if has_straight(cards):
        return HandCategory.STRAIGHT
    if highest_trips(cards) is not None:
        return HandCategory.THREE_OF_A_KIND
    if two_highest_pairs(cards) is not None:
        return HandCategory.TWO_PAIR
    if highest_pair(cards) is not None:
        return HandCategory.PAIR
    return HandCategory.HIGH_CARD
