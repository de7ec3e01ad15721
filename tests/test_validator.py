import pytest

from core.cards import parse_cards
from core.claims import (
    Claim,
    FlushClaim,
    FullHouseClaim,
    PairClaim,
    RoyalFlushClaim,
    StraightFlushClaim,
    TwoPairClaim,
)
from core.evaluator import HandCategory
from core.validator import (
    compare_to_best_hand,
    flush_exists_with_high,
    is_claim_valid,
    straight_exists_with_high,
    straight_flush_exists_with_high,
)

ROYAL_HEARTS = parse_cards(["10h", "Jh", "Qh", "Kh", "Ah", "2c"])


def test_unparseable_claim_is_never_valid():
    assert not is_claim_valid("I definitely have something", ROYAL_HEARTS)
    assert not is_claim_valid(None, ROYAL_HEARTS)


@pytest.mark.parametrize("suit", ["Hearts", "hearts", "HEARTS"])
def test_royal_flush_needs_matching_suit(suit):
    assert is_claim_valid(f"Royal Flush of {suit}", ROYAL_HEARTS)
    assert not is_claim_valid("Royal Flush of Spades", ROYAL_HEARTS)


def test_royal_flush_without_suit_is_always_invalid():
    assert not is_claim_valid("Royal Flush", ROYAL_HEARTS)
    assert not is_claim_valid(RoyalFlushClaim(suit=None), ROYAL_HEARTS)


def test_high_card_claim_only_needs_the_rank_to_exist():
    pool = parse_cards(["Kd", "2h", "2s", "7c", "9d"])
    assert is_claim_valid("K-high Card", pool)
    assert not is_claim_valid("A-high Card", pool)
    assert is_claim_valid("2-high Card", pool)


def test_pair_claim_counts_the_named_rank():
    pool = parse_cards(["2h", "2s", "7c", "7d", "7h"])
    assert is_claim_valid("Pair of 2s", pool)
    assert is_claim_valid("Pair of 7s", pool)
    assert not is_claim_valid("Pair of Ks", pool)
    assert not is_claim_valid(PairClaim(rank=None), pool)


def test_two_pair_direct_and_dominating_matches():
    pool = parse_cards(["Ah", "As", "9c", "9d", "3h", "3s"])
    assert is_claim_valid("Two Pair of 9s and 3s", pool)
    # Aces and nines beat the claimed kings and fives even though no kings exist.
    assert is_claim_valid("Two Pair of Ks and 5s", pool)
    assert not is_claim_valid("Two Pair of As and 10s", pool)


def test_malformed_two_pair_falls_back_to_comparison():
    two_pairs = parse_cards(["4h", "4s", "6c", "6d"])
    one_pair = parse_cards(["4h", "4s", "6c", "7d"])
    assert is_claim_valid("Two Pair", two_pairs)
    assert not is_claim_valid("Two Pair", one_pair)
    assert is_claim_valid(TwoPairClaim(rank="5", second_rank="5"), two_pairs)
    assert not is_claim_valid(TwoPairClaim(rank="6", second_rank="6"), two_pairs)
    assert not is_claim_valid(TwoPairClaim(rank="6", second_rank="6"), parse_cards(["6h", "6s", "6c", "6d"]))


def test_three_and_four_of_a_kind():
    pool = parse_cards(["Qh", "Qs", "Qd", "5c", "5d", "5h", "5s"])
    assert is_claim_valid("Three of a Kind of Qs", pool)
    assert is_claim_valid("Three of a Kind of 5s", pool)
    assert is_claim_valid("Four of a Kind of 5s", pool)
    assert not is_claim_valid("Four of a Kind of Qs", pool)
    assert not is_claim_valid("Three of a Kind", pool)


def test_straight_claim_requires_exact_high_card():
    pool = parse_cards(["5h", "6d", "7c", "8s", "9h", "10d", "Jc", "Qs", "Kh"])
    assert is_claim_valid("9-high Straight", pool)
    assert is_claim_valid("K-high Straight", pool)
    assert not is_claim_valid("A-high Straight", pool)
    assert not is_claim_valid("4-high Straight", pool)


def test_wheel_straight_claim():
    pool = parse_cards(["Ah", "2d", "3c", "4s", "5h"])
    assert is_claim_valid("5-high Straight", pool)
    assert not is_claim_valid("6-high Straight", pool)
    assert straight_exists_with_high(pool, "5")
    assert not straight_exists_with_high(pool, None)


def test_flush_claim_matches_highest_card_of_suit():
    pool = parse_cards(["2h", "5h", "7h", "9h", "Jh", "Kd"])
    assert is_claim_valid("J-high Hearts Flush", pool)
    assert is_claim_valid("J-high Flush", pool)
    assert not is_claim_valid("K-high Hearts Flush", pool)
    assert not is_claim_valid("J-high Diamonds Flush", pool)
    assert not flush_exists_with_high(pool, None)


def test_straight_flush_claim_is_suit_scoped():
    pool = parse_cards(["5s", "6s", "7s", "8s", "9s", "10h"])
    assert is_claim_valid("9-high Spades Straight Flush", pool)
    assert not is_claim_valid("9-high Hearts Straight Flush", pool)
    assert not is_claim_valid("10-high Spades Straight Flush", pool)
    assert straight_flush_exists_with_high(pool, "9")
    wheel = parse_cards(["As", "2s", "3s", "4s", "5s"])
    assert straight_flush_exists_with_high(wheel, "5", "spades")


def test_bare_straight_flush_claim_is_invalid():
    pool = parse_cards(["5s", "6s", "7s", "8s", "9s"])
    assert not is_claim_valid("Straight Flush", pool)


def test_full_house_claim():
    pool = parse_cards(["Ah", "As", "Ad", "10c", "10d"])
    assert is_claim_valid("As over 10s", pool)
    assert not is_claim_valid("10s over As", pool)
    assert not is_claim_valid(FullHouseClaim(rank="A", pair_rank="A"), pool)
    assert not is_claim_valid(FullHouseClaim(rank="A", pair_rank=None), pool)


def test_structured_claims_are_accepted_directly():
    pool = parse_cards(["Qh", "9h", "7h", "4h", "2h"])
    assert is_claim_valid(FlushClaim(rank="Q", suit="hearts"), pool)
    assert not is_claim_valid(StraightFlushClaim(rank="Q", suit="hearts"), pool)


def test_compare_to_best_hand_requires_same_category():
    pool = parse_cards(["Kh", "Ks", "4c", "7d", "9s"])
    assert compare_to_best_hand(PairClaim(rank="Q"), pool)
    assert compare_to_best_hand(PairClaim(rank="K"), pool)
    assert not compare_to_best_hand(PairClaim(rank="A"), pool)
    assert not compare_to_best_hand(TwoPairClaim(rank="3", second_rank="2"), pool)


def test_unknown_claim_shapes_use_best_hand_comparison():
    class LegacyClaim(Claim):
        category = HandCategory.THREE_OF_A_KIND
        rank = "5"

    pool = parse_cards(["8h", "8s", "8d", "2c", "Jd"])
    assert is_claim_valid(LegacyClaim(), pool)
    assert not is_claim_valid(LegacyClaim(), parse_cards(["4h", "4s", "4d", "2c", "Jd"]))
