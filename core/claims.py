from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Callable, ClassVar, Dict, List, Optional, Tuple

from .cards import RANK_VALUE
from .evaluator import HandCategory

# Claims are free text typed (or picked) by players. The parser turns them into
# one dataclass per category; the rules below are evaluated strictly in order
# because later phrases are substrings of earlier ones ("two pair" / "pair of").

SUIT_PATTERN = re.compile(r"(hearts|diamonds|clubs|spades)", re.IGNORECASE)
OVER_PATTERN = re.compile(r"([0-9A-Za-z]+)s over ([0-9A-Za-z]+)s", re.IGNORECASE)
TWO_PAIR_PATTERN = re.compile(r"two pair of ([0-9A-Za-z]+)s and ([0-9A-Za-z]+)s", re.IGNORECASE)
PAIR_PATTERN = re.compile(r"pair of\s*(\S*)", re.IGNORECASE)
THREE_PATTERN = re.compile(r"three of a kind of ([0-9A-Za-z]+)s", re.IGNORECASE)
FOUR_PATTERN = re.compile(r"four of a kind of ([0-9A-Za-z]+)s", re.IGNORECASE)
HIGH_SPLIT = re.compile(r"-high", re.IGNORECASE)


@dataclass(frozen=True)
class Claim:
    category: ClassVar[HandCategory]

    def to_dict(self) -> Dict[str, object]:
        return {"category": self.category.value, **asdict(self)}


@dataclass(frozen=True)
class HighCardClaim(Claim):
    category: ClassVar[HandCategory] = HandCategory.HIGH_CARD
    rank: Optional[str]


@dataclass(frozen=True)
class PairClaim(Claim):
    category: ClassVar[HandCategory] = HandCategory.PAIR
    rank: Optional[str]


@dataclass(frozen=True)
class TwoPairClaim(Claim):
    category: ClassVar[HandCategory] = HandCategory.TWO_PAIR
    rank: Optional[str]
    second_rank: Optional[str]


@dataclass(frozen=True)
class ThreeOfAKindClaim(Claim):
    category: ClassVar[HandCategory] = HandCategory.THREE_OF_A_KIND
    rank: Optional[str]


@dataclass(frozen=True)
class FourOfAKindClaim(Claim):
    category: ClassVar[HandCategory] = HandCategory.FOUR_OF_A_KIND
    rank: Optional[str]


@dataclass(frozen=True)
class StraightClaim(Claim):
    category: ClassVar[HandCategory] = HandCategory.STRAIGHT
    rank: Optional[str]


@dataclass(frozen=True)
class FlushClaim(Claim):
    category: ClassVar[HandCategory] = HandCategory.FLUSH
    rank: Optional[str]
    suit: Optional[str] = None


@dataclass(frozen=True)
class StraightFlushClaim(Claim):
    category: ClassVar[HandCategory] = HandCategory.STRAIGHT_FLUSH
    rank: Optional[str] = None
    suit: Optional[str] = None


@dataclass(frozen=True)
class FullHouseClaim(Claim):
    category: ClassVar[HandCategory] = HandCategory.FULL_HOUSE
    rank: Optional[str]
    pair_rank: Optional[str]


@dataclass(frozen=True)
class RoyalFlushClaim(Claim):
    category: ClassVar[HandCategory] = HandCategory.ROYAL_FLUSH
    suit: Optional[str] = None


def rank_from_word(word: str) -> str:
    """Strip one trailing "s" and upper-case: "10s" -> "10", "qs" -> "Q"."""
    word = word.strip()
    if word.endswith("s"):
        word = word[:-1]
    return word.upper()


def _suit_in(text: str) -> Optional[str]:
    match = SUIT_PATTERN.search(text)
    return match.group(1).lower() if match else None


def _before_high(text: str) -> str:
    return HIGH_SPLIT.split(text, maxsplit=1)[0]


# Parser rules --------------------------------------------------------
# Each rule is (predicate, extractor). A rule whose extractor yields None
# lets the scan continue with the next rule.


def _implicit_full_house(text: str) -> Optional[Claim]:
    match = OVER_PATTERN.search(text)
    rank, pair_rank = rank_from_word(match.group(1)), rank_from_word(match.group(2))
    if rank == pair_rank:
        return None
    return FullHouseClaim(rank=rank, pair_rank=pair_rank)


def _explicit_full_house(text: str) -> Optional[Claim]:
    match = OVER_PATTERN.search(text)
    if not match:
        return None
    return FullHouseClaim(rank=rank_from_word(match.group(1)), pair_rank=rank_from_word(match.group(2)))


def _two_pair(text: str) -> Optional[Claim]:
    match = TWO_PAIR_PATTERN.search(text)
    if not match:
        return TwoPairClaim(rank=None, second_rank=None)
    first, second = rank_from_word(match.group(1)), rank_from_word(match.group(2))
    if RANK_VALUE.get(first, -1) >= RANK_VALUE.get(second, -1):
        return TwoPairClaim(rank=first, second_rank=second)
    return TwoPairClaim(rank=second, second_rank=first)


def _pair(text: str) -> Optional[Claim]:
    token = PAIR_PATTERN.search(text).group(1)
    return PairClaim(rank=rank_from_word(token) if token else None)


def _of_a_kind(pattern: re.Pattern, claim_type: type) -> Callable[[str], Optional[Claim]]:
    def extract(text: str) -> Optional[Claim]:
        match = pattern.search(text)
        return claim_type(rank=rank_from_word(match.group(1)) if match else None)

    return extract


def _high_straight(text: str) -> Optional[Claim]:
    return StraightClaim(rank=rank_from_word(_before_high(text)))


def _high_flush(text: str) -> Optional[Claim]:
    rank_part, rest = HIGH_SPLIT.split(text, maxsplit=1)
    suit = _suit_in(rest)
    if "straight flush" in rest.lower():
        return StraightFlushClaim(rank=rank_from_word(rank_part), suit=suit)
    return FlushClaim(rank=rank_from_word(rank_part), suit=suit)


def _high_card(text: str) -> Optional[Claim]:
    return HighCardClaim(rank=rank_from_word(_before_high(text)))


def _royal_flush(text: str) -> Optional[Claim]:
    return RoyalFlushClaim(suit=_suit_in(text))


_RULES: List[Tuple[Callable[[str], bool], Callable[[str], Optional[Claim]]]] = [
    (lambda text: OVER_PATTERN.search(text) is not None, _implicit_full_house),
    (lambda text: "full house" in text.lower(), _explicit_full_house),
    (lambda text: "two pair" in text.lower(), _two_pair),
    (lambda text: "pair of" in text.lower(), _pair),
    (lambda text: "three of a kind" in text.lower(), _of_a_kind(THREE_PATTERN, ThreeOfAKindClaim)),
    (lambda text: "four of a kind" in text.lower(), _of_a_kind(FOUR_PATTERN, FourOfAKindClaim)),
    (lambda text: "-high straight" in text.lower(), _high_straight),
    (lambda text: "-high" in text.lower() and "flush" in text.lower(), _high_flush),
    (lambda text: "-high card" in text.lower(), _high_card),
    (
        lambda text: "-high" in text.lower()
        and "straight" not in text.lower()
        and "flush" not in text.lower(),
        _high_card,
    ),
    (lambda text: "straight flush" in text.lower(), lambda text: StraightFlushClaim()),
    (lambda text: "royal flush" in text.lower(), _royal_flush),
]


def parse_claim(text: Optional[str]) -> Optional[Claim]:
    """Parse a claim phrase, returning ``None`` when no rule recognises it."""
    if not text:
        return None
    for applies, extract in _RULES:
        if not applies(text):
            continue
        claim = extract(text)
        if claim is not None:
            return claim
    return None


# Formatting ----------------------------------------------------------


def _suit_word(suit: Optional[str]) -> str:
    return f"{suit.capitalize()} " if suit else ""


def format_claim(claim: Claim) -> str:
    """Render the canonical phrase for a structured claim."""
    if isinstance(claim, HighCardClaim):
        return f"{claim.rank}-high Card"
    if isinstance(claim, PairClaim):
        return f"Pair of {claim.rank}s"
    if isinstance(claim, TwoPairClaim):
        if not claim.rank or not claim.second_rank:
            return "Two Pair"
        return f"Two Pair of {claim.rank}s and {claim.second_rank}s"
    if isinstance(claim, ThreeOfAKindClaim):
        return f"Three of a Kind of {claim.rank}s"
    if isinstance(claim, FourOfAKindClaim):
        return f"Four of a Kind of {claim.rank}s"
    if isinstance(claim, FullHouseClaim):
        return f"{claim.rank}s over {claim.pair_rank}s"
    if isinstance(claim, StraightClaim):
        return f"{claim.rank}-high Straight"
    if isinstance(claim, FlushClaim):
        return f"{claim.rank}-high {_suit_word(claim.suit)}Flush"
    if isinstance(claim, StraightFlushClaim):
        if not claim.rank:
            return "Straight Flush"
        return f"{claim.rank}-high {_suit_word(claim.suit)}Straight Flush"
    if isinstance(claim, RoyalFlushClaim):
        if not claim.suit:
            return "Royal Flush"
        return f"Royal Flush of {claim.suit.capitalize()}"
    raise ValueError(f"Unsupported claim {claim!r}")


# Ordering ------------------------------------------------------------

# Order offered by the claim picker. Flush sits below Straight here, unlike the
# evaluator's poker order.
CLAIM_LADDER = (
    HandCategory.HIGH_CARD,
    HandCategory.PAIR,
    HandCategory.TWO_PAIR,
    HandCategory.THREE_OF_A_KIND,
    HandCategory.FLUSH,
    HandCategory.STRAIGHT,
    HandCategory.FULL_HOUSE,
    HandCategory.FOUR_OF_A_KIND,
    HandCategory.STRAIGHT_FLUSH,
    HandCategory.ROYAL_FLUSH,
)

# Lower high card is the stronger claim for these categories.
REVERSE_RANKED = (HandCategory.FLUSH, HandCategory.STRAIGHT_FLUSH)


def _value(rank: Optional[str]) -> int:
    return RANK_VALUE.get(rank, -1) if rank else -1


def claim_outranks(candidate: Claim, current: Optional[Claim]) -> bool:
    """True when ``candidate`` is a legal raise over ``current``."""
    if current is None:
        return True
    new_step = CLAIM_LADDER.index(candidate.category)
    old_step = CLAIM_LADDER.index(current.category)
    if new_step != old_step:
        return new_step > old_step

    if isinstance(candidate, TwoPairClaim) and isinstance(current, TwoPairClaim):
        new_key = (_value(candidate.rank), _value(candidate.second_rank))
        return new_key > (_value(current.rank), _value(current.second_rank))
    if isinstance(candidate, FullHouseClaim) and isinstance(current, FullHouseClaim):
        new_key = (_value(candidate.rank), _value(candidate.pair_rank))
        return new_key > (_value(current.rank), _value(current.pair_rank))
    if isinstance(candidate, RoyalFlushClaim):
        return False

    new_rank = _value(getattr(candidate, "rank", None))
    old_rank = _value(getattr(current, "rank", None))
    if candidate.category in REVERSE_RANKED:
        if old_rank < 0:
            return new_rank >= 0
        return 0 <= new_rank < old_rank
    return new_rank > old_rank
