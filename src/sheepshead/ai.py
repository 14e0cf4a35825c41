"""
Heuristic decisions for computer seats: pick/pass, bury, partner call, card play.

Every function is stateless and works on a player's hand plus the public GameState.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .config import RuleSet
from .deck import PLAIN_SUITS, Card, Rank, Suit
from .play import beats, legal_plays, power, winning_index
from .scoring import points_in_cards, team_of
from .state import GameState, Player

# Hand-strength pick thresholds by table size.
PICK_THRESHOLDS = {3: 10, 5: 14}
DEFAULT_PICK_THRESHOLD = 12

# A trump above this power (Jack of hearts and better) is worth leading as picker/partner.
STRONG_LEAD_POWER = 25
VALUABLE_TRICK_POINTS = 10


def evaluate_hand_strength(hand: Iterable[Card]) -> int:
    """
    +3 per trump, with a bonus of +5 per Queen, +3 per Jack, +1 per high Diamond.
    +2 per plain Ace, +1 per plain Ten, -2 per plain suit held as a singleton.
    """
    hand = list(hand)
    score = 0
    for card in hand:
        if card.is_trump():
            score += 3
            p = power(card)
            if p > 27:
                score += 5
            elif p > 23:
                score += 3
            elif p > 18:
                score += 1
        elif card.rank == Rank.ACE:
            score += 2
        elif card.rank == Rank.TEN:
            score += 1
    for suit in PLAIN_SUITS:
        if sum(1 for c in hand if not c.is_trump() and c.suit == suit) == 1:
            score -= 2
    return score


def should_pick(player: Player, state: GameState) -> bool:
    threshold = PICK_THRESHOLDS.get(state.num_players, DEFAULT_PICK_THRESHOLD)
    return evaluate_hand_strength(player.hand) >= threshold


def _bury_key(card: Card) -> tuple[int, int, int]:
    # Plain cards first (cheapest first), then trump from weakest to strongest.
    if card.is_trump():
        return (1, power(card), 0)
    return (0, card.point_value(), power(card))


def choose_bury_cards(cards: Iterable[Card]) -> tuple[Card, Card]:
    """Pick exactly two cards to bury from the picker's hand (blind included)."""
    ordered = sorted(cards, key=_bury_key)
    if len(ordered) < 2:
        raise ValueError("Need at least two cards to bury")
    candidates = ordered[:4]
    zero = [c for c in candidates if c.point_value() == 0]
    if len(zero) >= 2:
        return zero[0], zero[1]
    return candidates[0], candidates[1]


def _call_candidates(hand: Sequence[Card]) -> List[Card]:
    held = set(hand)
    fail_suits = [s for s in PLAIN_SUITS if any(not c.is_trump() and c.suit == s for c in hand)]
    aces = [Card(s, Rank.ACE) for s in PLAIN_SUITS]
    tens = [Card(s, Rank.TEN) for s in PLAIN_SUITS]
    ordered = [Card(s, Rank.ACE) for s in fail_suits] + aces + tens
    seen: List[Card] = []
    for c in ordered:
        if c not in held and c not in seen:
            seen.append(c)
    return seen


def choose_partner(picker: Player, state: GameState) -> tuple[str, Optional[Card]]:
    """
    Call-ace partner selection. Calls the Ace of a plain suit the picker holds a card in
    (then any missing Ace, then a Ten); the partner is whoever holds the called card.
    Returns (partner_id, called_card); partner_id is the picker's own id when going alone.
    """
    for card in _call_candidates(picker.hand):
        if card in state.buried:
            continue
        for p in state.players:
            if p.id != picker.id and card in p.hand:
                return p.id, card
    return picker.id, None


def _is_picker_side(player: Player, state: GameState) -> bool:
    return player.is_picker or (state.partner_id() is not None and player.id == state.partner_id())


def _lowest_power(cards: Sequence[Card]) -> Card:
    return min(cards, key=power)


def _lowest_value(cards: Sequence[Card]) -> Card:
    return min(cards, key=lambda c: (c.point_value(), power(c)))


def choose_lead_card(player: Player, legal: Sequence[Card], state: GameState) -> Card:
    if _is_picker_side(player, state):
        trumps = [c for c in legal if c.is_trump()]
        if trumps:
            strongest = max(trumps, key=power)
            if power(strongest) > STRONG_LEAD_POWER:
                return strongest
        for rank in (Rank.ACE, Rank.TEN):
            for c in legal:
                if not c.is_trump() and c.rank == rank:
                    return c
    else:
        # Lead a singleton plain suit, hoping to trump it on the way back.
        for suit in PLAIN_SUITS:
            in_suit = [c for c in legal if not c.is_trump() and c.suit == suit]
            if len(in_suit) == 1:
                return in_suit[0]
        low = [c for c in legal if not c.is_trump() and c.point_value() == 0]
        if low:
            return _lowest_power(low)
    return _lowest_power(legal)


def choose_follow_card(player: Player, legal: Sequence[Card], state: GameState) -> Card:
    trick = state.current_trick
    lead_suit: Optional[Suit] = state.lead_suit
    best_idx = winning_index(trick, lead_suit)
    best_card = trick[best_idx]
    winner = state.player(state.trick_order()[best_idx])

    picker = state.picker()
    mine = team_of(player, picker)
    if mine is not None and mine == team_of(winner, picker):
        return _lowest_value(legal)

    winning = [c for c in legal if beats(c, best_card, lead_suit)]
    worth_it = _is_picker_side(player, state) or points_in_cards(trick) >= VALUABLE_TRICK_POINTS
    if worth_it and winning:
        return _lowest_power(winning)
    return _lowest_value(legal)


def choose_card_to_play(player: Player, state: GameState, rules: RuleSet | None = None) -> Card:
    rules = rules or RuleSet()
    legal = legal_plays(player.hand, state.current_trick, state.lead_suit, rules.follow_trump)
    if not legal:
        raise ValueError(f"{player.id} has no legal play")
    if len(legal) == 1:
        return legal[0]
    if not state.current_trick:
        return choose_lead_card(player, legal, state)
    return choose_follow_card(player, legal, state)
