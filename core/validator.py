from __future__ import annotations

from typing import Callable, Dict, Optional, Sequence, Union

from .cards import RANK_VALUE, RANKS, Card
from .claims import (
    Claim,
    FlushClaim,
    FourOfAKindClaim,
    FullHouseClaim,
    HighCardClaim,
    PairClaim,
    RoyalFlushClaim,
    StraightClaim,
    StraightFlushClaim,
    ThreeOfAKindClaim,
    TwoPairClaim,
    parse_claim,
)
from .evaluator import (
    WHEEL_RANKS,
    HandCategory,
    best_category,
    flush_high,
    full_house_ranks,
    group_by_suit,
    has_royal_flush,
    highest_card,
    highest_pair,
    highest_quads,
    highest_trips,
    rank_counts,
    straight_flush_high,
    straight_high,
    two_highest_pairs,
)

# Claims name exact ranks and suits, so most categories are checked by
# existence in the pool rather than by comparing against the best hand.


def _value(rank: Optional[str]) -> int:
    return RANK_VALUE.get(rank, -1) if rank else -1


def straight_ranks_ending_at(high: str) -> Optional[tuple]:
    """The five ranks of the straight topped by ``high`` (wheel for "5")."""
    if high == "5":
        return WHEEL_RANKS
    idx = _value(high)
    if idx < 4:
        return None
    return RANKS[idx - 4 : idx + 1]


def straight_exists_with_high(cards: Sequence[Card], high: Optional[str]) -> bool:
    needed = straight_ranks_ending_at(high) if high else None
    if needed is None:
        return False
    present = {card.rank for card in cards}
    return all(rank in present for rank in needed)


def _suits_to_check(cards: Sequence[Card], suit: Optional[str]):
    groups = group_by_suit(cards)
    if suit:
        return [groups.get(suit, [])]
    return list(groups.values())


def flush_exists_with_high(cards: Sequence[Card], high: Optional[str], suit: Optional[str] = None) -> bool:
    if not high:
        return False
    for suited in _suits_to_check(cards, suit):
        if len(suited) >= 5 and highest_card(suited) == high:
            return True
    return False


def straight_flush_exists_with_high(cards: Sequence[Card], high: Optional[str], suit: Optional[str] = None) -> bool:
    if not high:
        return False
    for suited in _suits_to_check(cards, suit):
        if len(suited) >= 5 and straight_exists_with_high(suited, high):
            return True
    return False


def _two_pair_dominates(claim: TwoPairClaim, cards: Sequence[Card]) -> bool:
    pairs = two_highest_pairs(cards)
    if pairs is None:
        return False
    high, low = _value(pairs[0]), _value(pairs[1])
    claimed_high, claimed_low = _value(claim.rank), _value(claim.second_rank)
    return high > claimed_high or (high == claimed_high and low >= claimed_low)


# Per-category rules ---------------------------------------------------


def _count_at_least(rank: Optional[str], cards: Sequence[Card], needed: int) -> bool:
    if not rank:
        return False
    return rank_counts(cards).get(rank, 0) >= needed


def _high_card(claim: HighCardClaim, cards: Sequence[Card]) -> bool:
    return _count_at_least(claim.rank, cards, 1)


def _pair(claim: PairClaim, cards: Sequence[Card]) -> bool:
    return _count_at_least(claim.rank, cards, 2)


def _two_pair(claim: TwoPairClaim, cards: Sequence[Card]) -> bool:
    # Malformed claims (missing ranks, equal ranks) skip the direct check and
    # are judged only by comparison with the pool's two best pairs.
    if claim.rank and claim.second_rank and claim.rank != claim.second_rank:
        if _count_at_least(claim.rank, cards, 2) and _count_at_least(claim.second_rank, cards, 2):
            return True
    return _two_pair_dominates(claim, cards)


def _three_of_a_kind(claim: ThreeOfAKindClaim, cards: Sequence[Card]) -> bool:
    return _count_at_least(claim.rank, cards, 3)


def _four_of_a_kind(claim: FourOfAKindClaim, cards: Sequence[Card]) -> bool:
    return _count_at_least(claim.rank, cards, 4)


def _straight(claim: StraightClaim, cards: Sequence[Card]) -> bool:
    return straight_exists_with_high(cards, claim.rank)


def _flush(claim: FlushClaim, cards: Sequence[Card]) -> bool:
    return flush_exists_with_high(cards, claim.rank, claim.suit)


def _straight_flush(claim: StraightFlushClaim, cards: Sequence[Card]) -> bool:
    return straight_flush_exists_with_high(cards, claim.rank, claim.suit)


def _full_house(claim: FullHouseClaim, cards: Sequence[Card]) -> bool:
    if not claim.rank or not claim.pair_rank or claim.rank == claim.pair_rank:
        return False
    return _count_at_least(claim.rank, cards, 3) and _count_at_least(claim.pair_rank, cards, 2)


def _royal_flush(claim: RoyalFlushClaim, cards: Sequence[Card]) -> bool:
    if not claim.suit:
        return False
    return has_royal_flush(cards, claim.suit)


VALIDATORS: Dict[type, Callable[..., bool]] = {
    HighCardClaim: _high_card,
    PairClaim: _pair,
    TwoPairClaim: _two_pair,
    ThreeOfAKindClaim: _three_of_a_kind,
    FourOfAKindClaim: _four_of_a_kind,
    StraightClaim: _straight,
    FlushClaim: _flush,
    StraightFlushClaim: _straight_flush,
    FullHouseClaim: _full_house,
    RoyalFlushClaim: _royal_flush,
}


def compare_to_best_hand(claim: Claim, cards: Sequence[Card]) -> bool:
    """Generic check: the pool's best category must equal the claimed one and
    its category-specific best ranks must be at least the claimed ranks."""
    category = HandCategory(claim.category)
    if best_category(cards) != category:
        return False

    rank = _value(getattr(claim, "rank", None))
    suit = getattr(claim, "suit", None)
    if category == HandCategory.HIGH_CARD:
        return _value(highest_card(cards)) >= rank
    if category == HandCategory.PAIR:
        return _value(highest_pair(cards)) >= rank
    if category == HandCategory.TWO_PAIR:
        second = getattr(claim, "second_rank", None)
        return _two_pair_dominates(TwoPairClaim(rank=getattr(claim, "rank", None), second_rank=second), cards)
    if category == HandCategory.THREE_OF_A_KIND:
        return _value(highest_trips(cards)) >= rank
    if category == HandCategory.FOUR_OF_A_KIND:
        return _value(highest_quads(cards)) >= rank
    if category == HandCategory.FULL_HOUSE:
        trip, pair = full_house_ranks(cards)
        if _value(trip) < rank:
            return False
        pair_rank = getattr(claim, "pair_rank", None)
        if pair_rank:
            return _value(trip) > rank or _value(pair) >= _value(pair_rank)
        return True
    if category == HandCategory.STRAIGHT:
        return _value(straight_high(cards)) >= rank
    if category == HandCategory.FLUSH:
        return _value(flush_high(cards, suit)) >= rank
    if category == HandCategory.STRAIGHT_FLUSH:
        return _value(straight_flush_high(cards, suit)) >= rank
    return has_royal_flush(cards, suit)


def is_claim_valid(claim: Union[str, Claim, None], cards: Sequence[Card]) -> bool:
    """Decide whether ``claim`` can be formed from ``cards``.

    Text that does not parse is never valid.
    """
    if isinstance(claim, str) or claim is None:
        claim = parse_claim(claim)
        if claim is None:
            return False
    check = VALIDATORS.get(type(claim))
    if check is None:
        return compare_to_best_hand(claim, cards)
    return check(claim, cards)
