"""Liar's poker engine: cards, hand evaluation, claims and room state."""

from .cards import Card, RANKS, SUITS, build_deck, deal, parse_cards, rank_value, shuffle
from .claims import Claim, claim_outranks, format_claim, parse_claim
from .evaluator import HandCategory, best_category
from .game import GameEngine, RoundContext
from .models import CommandType, Phase, Player, RevealStage, RoomConfig, RoomError
from .rooms import RoomRegistry
from .validator import is_claim_valid

__all__ = [
    "Card",
    "RANKS",
    "SUITS",
    "build_deck",
    "deal",
    "parse_cards",
    "rank_value",
    "shuffle",
    "Claim",
    "claim_outranks",
    "format_claim",
    "parse_claim",
    "HandCategory",
    "best_category",
    "GameEngine",
    "RoundContext",
    "CommandType",
    "Phase",
    "Player",
    "RevealStage",
    "RoomConfig",
    "RoomError",
    "RoomRegistry",
    "is_claim_valid",
]
