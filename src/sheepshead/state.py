"""
Immutable game data: players, game state, event log, per-round results.

GameState is replaced wholesale on every transition (``dataclasses.replace``), so any
snapshot can be serialized or restored without further bookkeeping.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .deal import next_seat
from .deck import DECK_SIZE, Card, Suit


class Phase(str, Enum):
    DEALING = "DEALING"
    PICKING = "PICKING"
    BURYING = "BURYING"
    CALLING_PARTNER = "CALLING_PARTNER"  # 5 players only
    PLAYING = "PLAYING"
    SCORING = "SCORING"
    GAME_OVER = "GAME_OVER"


# Phases during which all 32 cards are somewhere on the table.
CARD_PHASES = (Phase.PICKING, Phase.BURYING, Phase.CALLING_PARTNER, Phase.PLAYING)


class InvalidStateError(ValueError):
    """A GameState that violates the card or seat invariants."""


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    is_human: bool = False
    hand: Tuple[Card, ...] = ()
    score: int = 0
    is_dealer: bool = False
    is_picker: bool = False
    partner: Optional[str] = None  # picker only, 5 players
    tricks_won: Tuple[Tuple[Card, ...], ...] = ()

    def won_cards(self) -> list[Card]:
        return [c for trick in self.tricks_won for c in trick]


@dataclass(frozen=True)
class GameEvent:
    type: str
    player_id: str
    timestamp: float
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GameResult:
    """Outcome of one scored round, as consumed by the stats collaborator."""

    game_id: str
    round_number: int
    date_played: str
    players: Tuple[str, ...]
    picker: Optional[str]
    partner: Optional[str]
    picker_team_score: int
    defender_team_score: int
    is_leaster: bool
    leaster_winner: Optional[str] = None
    is_doubled: bool = False
    is_solo: bool = False


@dataclass(frozen=True)
class GameState:
    game_id: str
    players: Tuple[Player, ...]
    current_turn: str
    phase: Phase
    blind: Tuple[Card, ...] = ()
    buried: Tuple[Card, ...] = ()
    current_trick: Tuple[Card, ...] = ()
    lead_suit: Optional[Suit] = None
    round_number: int = 0
    trick_number: int = 0
    is_leaster: bool = False
    set_aside: Tuple[Card, ...] = ()
    called_card: Optional[Card] = None
    results: Tuple[GameResult, ...] = ()
    log: Tuple[GameEvent, ...] = ()

    @property
    def num_players(self) -> int:
        return len(self.players)

    def seat_of(self, player_id: str) -> int:
        for i, p in enumerate(self.players):
            if p.id == player_id:
                return i
        raise KeyError(player_id)

    def player(self, player_id: str) -> Player:
        return self.players[self.seat_of(player_id)]

    def has_player(self, player_id: str) -> bool:
        return any(p.id == player_id for p in self.players)

    def current_player(self) -> Player:
        return self.player(self.current_turn)

    def dealer_seat(self) -> int:
        for i, p in enumerate(self.players):
            if p.is_dealer:
                return i
        raise InvalidStateError("No dealer seated")

    def picker(self) -> Optional[Player]:
        for p in self.players:
            if p.is_picker:
                return p
        return None

    def partner_id(self) -> Optional[str]:
        picker = self.picker()
        return picker.partner if picker is not None else None

    def trick_leader_seat(self) -> int:
        """Seat that led the current trick (the player to act if the trick is empty)."""
        return (self.seat_of(self.current_turn) - len(self.current_trick)) % self.num_players

    def trick_order(self) -> list[str]:
        """Player ids in the order they play the current trick."""
        lead = self.trick_leader_seat()
        n = self.num_players
        return [self.players[(lead + i) % n].id for i in range(n)]

    def cards_in_play(self) -> list[Card]:
        cards: list[Card] = []
        for p in self.players:
            cards.extend(p.hand)
            cards.extend(p.won_cards())
        cards.extend(self.blind)
        cards.extend(self.buried)
        cards.extend(self.set_aside)
        cards.extend(self.current_trick)
        return cards


def _turn_problems(state: GameState) -> list[str]:
    """Seat-to-act and hand-size consistency for the card phases."""
    problems: list[str] = []
    if state.phase in (Phase.BURYING, Phase.CALLING_PARTNER):
        picker = state.picker()
        if picker is None or picker.id != state.current_turn:
            problems.append(f"{state.phase.value} but the picker is not to act")
    if state.phase != Phase.PLAYING:
        return problems

    completed = sum(len(p.tricks_won) for p in state.players)
    if completed != state.trick_number:
        problems.append(f"{completed} tricks taken but trick number is {state.trick_number}")
    order = state.trick_order()
    if completed == 0 and state.seat_of(order[0]) != next_seat(state.dealer_seat(), state.num_players):
        problems.append("first trick not led by the seat after the dealer")
    # Seats that already played to the open trick hold one card fewer than the rest.
    played = set(order[: len(state.current_trick)])
    sizes = {len(p.hand) + (1 if p.id in played else 0) for p in state.players}
    if len(sizes) != 1:
        problems.append("hand sizes do not match the seats still to play this trick")
    elif 0 in sizes:
        problems.append("playing with empty hands")
    return problems


def check_invariants(state: GameState) -> list[str]:
    """Return a list of violated invariants (empty when the state is sound)."""
    problems: list[str] = []
    n = state.num_players
    if not 3 <= n <= 5:
        problems.append(f"table size {n} outside 3-5")
        return problems

    ids = [p.id for p in state.players]
    if len(set(ids)) != n:
        problems.append("duplicate player ids")

    dealers = sum(1 for p in state.players if p.is_dealer)
    if dealers != 1:
        problems.append(f"expected exactly one dealer, found {dealers}")

    pickers = [p for p in state.players if p.is_picker]
    if len(pickers) > 1:
        problems.append(f"expected at most one picker, found {len(pickers)}")
    if state.is_leaster and pickers:
        problems.append("leaster round has a picker")
    for p in state.players:
        if p.partner is not None:
            if not p.is_picker:
                problems.append(f"{p.id} has a partner but is not the picker")
            elif n != 5:
                problems.append("partner called outside a 5-player game")
            elif p.partner not in ids:
                problems.append(f"unknown partner {p.partner}")

    if state.phase != Phase.DEALING and state.current_turn not in ids:
        problems.append(f"player to act {state.current_turn!r} is not seated")

    cards = state.cards_in_play()
    if state.phase in CARD_PHASES:
        if len(cards) != DECK_SIZE:
            problems.append(f"card count {len(cards)} != {DECK_SIZE}")
        dupes = [c for c, k in Counter(cards).items() if k > 1]
        if dupes:
            problems.append(f"duplicated cards: {dupes}")
        if len(state.current_trick) >= n:
            problems.append("current trick holds a full round of cards")
        if state.buried and len(state.buried) != 2:
            problems.append(f"buried pile holds {len(state.buried)} cards")
        if state.current_turn in ids and dealers == 1 and len(set(ids)) == n:
            problems.extend(_turn_problems(state))
    elif cards:
        problems.append(f"{len(cards)} cards held during {state.phase.value}")
    return problems


def validate_state(state: GameState) -> GameState:
    problems = check_invariants(state)
    if problems:
        raise InvalidStateError("; ".join(problems))
    return state
