from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from .cards import Card, build_deck, cards_to_dicts, deal, shuffle
from .claims import claim_outranks, parse_claim
from .evaluator import best_category
from .models import ChallengeResult, Phase, Player, Ranking, RevealStage, RoomConfig, RoomError
from .validator import is_claim_valid

# GameEngine keeps one room's state in memory. No networking lives here, only
# dealing, claims, challenges and turn order. Every mutating call returns the
# events the transport should broadcast.


@dataclass
class RoundContext:
    # Everything that is rebuilt on each deal.
    round_id: str
    seed: Optional[int]
    community: List[Card]
    hands: Dict[str, List[Card]]
    current_turn: Optional[str]
    round_starter: Optional[str]
    revealed: List[bool]
    phase: Phase = Phase.PLAYING
    reveal_stage: RevealStage = RevealStage.PREFLOP
    current_claim: Optional[str] = None
    current_claimer: Optional[str] = None
    result: Optional[ChallengeResult] = None
    acknowledged: Set[str] = field(default_factory=set)

    def revealed_community(self) -> List[Card]:
        return [card for card, shown in zip(self.community, self.revealed) if shown]

    def revealed_count(self) -> int:
        return sum(1 for shown in self.revealed if shown)


class GameEngine:
    """Liar's poker rules for a single room."""

    def __init__(self, room_code: str, config: Optional[RoomConfig] = None) -> None:
        self.room_code = room_code
        self.config = config or RoomConfig()
        self.players: List[Player] = []
        self.round: Optional[RoundContext] = None
        self.round_counter = 0
        self.started = False
        self.ended = False

    # Roster ----------------------------------------------------------

    def add_player(self, player_id: str, name: str) -> Player:
        existing = self.get_player(player_id)
        if existing:
            return existing
        display = (name or "").strip()
        if not display:
            raise RoomError("NAME_REQUIRED", "Player name required")
        if self.started:
            raise RoomError("IN_PROGRESS", "Game is already in progress.")
        if len(self.players) >= self.config.max_players:
            raise RoomError("ROOM_FULL", "Room is full")

        first = not self.players
        player = Player(
            player_id=player_id,
            name=display,
            is_host=first,
            is_dealer=first,
            base_hand_size=self.config.base_hand_size,
        )
        self.players.append(player)
        return player

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def player_ids(self) -> List[str]:
        return [player.player_id for player in self.players]

    def active_players(self) -> List[Player]:
        return [player for player in self.players if player.is_active]

    def _is_eligible(self, player: Player) -> bool:
        return player.effective_hand_size < self.config.elimination_hand_size

    def next_active_player(self, anchor_id: Optional[str], removed_index: int = -1) -> Optional[str]:
        """Next seat after ``anchor_id`` that can still play, wrapping around.

        When the anchor has already left the roster, the scan resumes from the
        seat before its former index so the first step lands on whoever now
        occupies that index.
        """
        if not self.players:
            return None
        start = next(
            (idx for idx, player in enumerate(self.players) if player.player_id == anchor_id),
            removed_index - 1,
        )
        count = len(self.players)
        for step in range(1, count + 1):
            candidate = self.players[(start + step) % count]
            if self._is_eligible(candidate):
                return candidate.player_id
        return None

    @property
    def phase(self) -> Phase:
        if self.ended:
            return Phase.GAME_ENDED
        if self.round is None:
            return Phase.NO_ROUND
        return self.round.phase

    # Round lifecycle -------------------------------------------------

    def can_start_round(self) -> bool:
        return len(self.players) >= self.config.min_players

    def start_round(self, seed: Optional[int] = None) -> List[Dict[str, object]]:
        if self.ended:
            return []
        if self.round is not None:
            raise RoomError("IN_PROGRESS", "Game is already in progress.")
        if not self.can_start_round():
            raise RoomError(
                "NOT_ENOUGH_PLAYERS",
                f"Need at least {self.config.min_players} players to start the game",
            )
        self.started = True
        return self.deal_new_round(seed)

    def deal_new_round(self, seed: Optional[int] = None) -> List[Dict[str, object]]:
        if not self.players:
            raise RuntimeError("Cannot deal to an empty room")
        # Live deals draw from OS entropy; an explicit seed only replays a deal.
        rng = random.SystemRandom() if seed is None else random.Random(seed)
        deck = shuffle(build_deck(), rng)
        community = deal(deck, self.config.board_size)

        hands: Dict[str, List[Card]] = {}
        for player in self.players:
            # Eliminated players keep an explicit empty hand.
            hands[player.player_id] = deal(deck, player.effective_hand_size) if player.is_active else []

        dealer = next((player for player in self.players if player.is_dealer), self.players[0])
        opener = dealer.player_id
        if not dealer.is_active:
            opener = self.next_active_player(dealer.player_id) or opener

        self.round_counter += 1
        self.round = RoundContext(
            round_id=f"{self.room_code}-R{self.round_counter:03d}",
            seed=seed,
            community=community,
            hands=hands,
            current_turn=opener,
            round_starter=opener,
            revealed=[False] * self.config.board_size,
        )
        return [
            {
                "ev": "ROUND_START",
                "round_id": self.round.round_id,
                "dealer": dealer.player_id,
                "turn": opener,
                "hand_sizes": {pid: len(cards) for pid, cards in hands.items()},
            }
        ]

    def reveal_next_card(self, player_id: str) -> List[Dict[str, object]]:
        # Host-paced flop; turn and river come from claim rotation.
        ctx = self.round
        if ctx is None or ctx.phase != Phase.PLAYING:
            return []
        player = self.get_player(player_id)
        if player is None:
            return []
        if not player.is_host:
            raise RoomError("NOT_HOST", "Only the host can reveal the flop")
        revealed = ctx.revealed_count()
        if revealed >= self.config.flop_size:
            return []
        ctx.revealed[revealed] = True
        if revealed + 1 == self.config.flop_size:
            ctx.reveal_stage = RevealStage.FLOP
        return [{"ev": "REVEAL", "index": revealed, "card": ctx.community[revealed].to_dict()}]

    def submit_claim(self, player_id: str, claim_text: str) -> List[Dict[str, object]]:
        ctx = self.round
        if ctx is None or ctx.phase != Phase.PLAYING:
            return []
        if ctx.current_turn != player_id:
            raise RoomError("OUT_OF_TURN", "Not your turn")
        if self.config.strict_claims:
            self._check_claim_raises(ctx, claim_text)

        ctx.current_claim = claim_text
        ctx.current_claimer = player_id
        events: List[Dict[str, object]] = [{"ev": "CLAIM", "player": player_id, "claim": claim_text}]

        next_id = self.next_active_player(player_id)
        if next_id is None or next_id == player_id:
            events.extend(self._end_game())
            return events
        ctx.current_turn = next_id

        # A full rotation back to the round starter reveals the turn, then the river.
        if next_id == ctx.round_starter:
            revealed = ctx.revealed_count()
            if ctx.reveal_stage in (RevealStage.FLOP, RevealStage.TURN) and revealed < self.config.board_size:
                ctx.revealed[revealed] = True
                ctx.reveal_stage = RevealStage(ctx.reveal_stage + 1)
                events.append({"ev": "REVEAL", "index": revealed, "card": ctx.community[revealed].to_dict()})
            ctx.round_starter = ctx.current_turn

        events.append({"ev": "TURN", "player": next_id})
        return events

    def _check_claim_raises(self, ctx: RoundContext, claim_text: str) -> None:
        candidate = parse_claim(claim_text)
        current = parse_claim(ctx.current_claim)
        if candidate is None or current is None:
            return
        if not claim_outranks(candidate, current):
            raise RoomError("CLAIM_TOO_LOW", f"'{claim_text}' does not beat '{ctx.current_claim}'")

    def challenge(self, player_id: str) -> List[Dict[str, object]]:
        ctx = self.round
        if ctx is None or ctx.phase != Phase.PLAYING:
            return []
        if ctx.current_turn != player_id:
            raise RoomError("OUT_OF_TURN", "Not your turn")
        if ctx.current_claim is None:
            raise RoomError("NO_CLAIM", "There is no claim to challenge")

        pool = ctx.revealed_community()
        for cards in ctx.hands.values():
            pool.extend(cards)

        hand_exists = is_claim_valid(ctx.current_claim, pool)
        loser_id = player_id if hand_exists else ctx.current_claimer
        events: List[Dict[str, object]] = []

        loser = self.get_player(loser_id)
        if loser is not None:
            loser.extra_cards += 1
            if loser.effective_hand_size >= self.config.elimination_hand_size:
                loser.is_active = False
            for player in self.players:
                player.is_dealer = player.player_id == loser.player_id

        ctx.result = ChallengeResult(
            challenger_id=player_id,
            claimer_id=ctx.current_claimer,
            claim=ctx.current_claim,
            hand_exists=hand_exists,
            loser_id=loser_id,
            best_hand=best_category(pool).value,
            hands={pid: list(cards) for pid, cards in ctx.hands.items()},
            community=list(ctx.community),
            revealed=list(ctx.revealed),
        )
        ctx.phase = Phase.BS_REVEAL
        ctx.acknowledged = set()

        events.append({"ev": "CHALLENGE", **ctx.result.to_dict()})
        if loser is not None and not loser.is_active:
            events.append({"ev": "ELIMINATED", "player": loser.player_id})
        return events

    def acknowledge(self, player_id: str, seed: Optional[int] = None) -> List[Dict[str, object]]:
        ctx = self.round
        if ctx is None or ctx.phase != Phase.BS_REVEAL:
            return []
        if self.get_player(player_id) is None:
            return []
        ctx.acknowledged.add(player_id)
        events: List[Dict[str, object]] = [{"ev": "ACK", "player": player_id}]
        events.extend(self._maybe_continue(seed))
        return events

    def _maybe_continue(self, seed: Optional[int] = None) -> List[Dict[str, object]]:
        ctx = self.round
        assert ctx is not None
        active = self.active_players()
        if not all(player.player_id in ctx.acknowledged for player in active):
            return []
        if len(active) <= 1:
            return self._end_game()
        return self.deal_new_round(seed)

    def remove_player(self, player_id: str) -> List[Dict[str, object]]:
        index = next((idx for idx, player in enumerate(self.players) if player.player_id == player_id), None)
        if index is None:
            return []
        removed = self.players.pop(index)
        events: List[Dict[str, object]] = [{"ev": "PLAYER_LEFT", "player": player_id}]
        if not self.players:
            self.round = None
            return events

        ctx = self.round
        if ctx is not None:
            ctx.hands.pop(player_id, None)
            if ctx.current_turn == player_id:
                ctx.current_turn = self.next_active_player(player_id, index)
                events.append({"ev": "TURN", "player": ctx.current_turn})
            if ctx.round_starter == player_id:
                ctx.round_starter = self.next_active_player(player_id, index)

        if removed.is_dealer:
            next_dealer = self.get_player(self.next_active_player(player_id, index)) or self.players[0]
            next_dealer.is_dealer = True
        if removed.is_host:
            self.players[0].is_host = True
            events.append({"ev": "HOST", "player": self.players[0].player_id})

        if ctx is not None and ctx.phase == Phase.BS_REVEAL:
            ctx.acknowledged.discard(player_id)
            events.extend(self._maybe_continue())

        if self.started and not self.ended and len(self.active_players()) <= 1:
            events.extend(self._end_game())
        return events

    # Game end --------------------------------------------------------

    def ranking(self) -> List[Ranking]:
        ordered = sorted(self.players, key=lambda player: player.effective_hand_size)
        return [
            Ranking(player.player_id, player.name, player.effective_hand_size, placement=idx + 1)
            for idx, player in enumerate(ordered)
        ]

    def _end_game(self) -> List[Dict[str, object]]:
        survivors = self.active_players()
        winner = survivors[0] if len(survivors) == 1 else None
        self.ended = True
        self.round = None
        return [
            {
                "ev": "GAME_END",
                "winner": {"id": winner.player_id, "name": winner.name} if winner else None,
                "ranking": [entry.to_dict() for entry in self.ranking()],
            }
        ]

    # Payloads --------------------------------------------------------

    def lobby_state(self) -> Dict[str, object]:
        return {
            "room": self.room_code,
            "players": [player.to_dict() for player in self.players],
        }

    def snapshot_payload(self, viewer_id: str) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "room": self.room_code,
            "phase": self.phase.value,
            "players": [player.to_dict() for player in self.players],
        }
        ctx = self.round
        if ctx is None:
            return payload

        show_all = ctx.phase == Phase.BS_REVEAL
        payload.update(
            {
                "round_id": ctx.round_id,
                "community": [
                    card.to_dict() if shown or show_all else None
                    for card, shown in zip(ctx.community, ctx.revealed)
                ],
                "revealed": list(ctx.revealed),
                "reveal_stage": int(ctx.reveal_stage),
                "current_claim": ctx.current_claim,
                "current_claimer": ctx.current_claimer,
                "current_turn": ctx.current_turn,
                "round_starter": ctx.round_starter,
                "you": {"id": viewer_id, "hand": cards_to_dicts(ctx.hands.get(viewer_id, []))},
            }
        )
        if show_all and ctx.result is not None:
            payload["reveal"] = ctx.result.to_dict()
            payload["acknowledged"] = sorted(ctx.acknowledged)
        return payload
