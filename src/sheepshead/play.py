"""
Trick-taking: card power, legal moves, trick winner.
Plain suits must be followed when possible; trump beats any plain card; highest trump wins,
else the highest card of the led suit.
"""
from __future__ import annotations

from typing import Sequence

from .deck import Card, Rank, Suit

# Trump power: Queens 31..28, Jacks 27..24 (clubs, spades, hearts, diamonds).
_QUEEN_POWER = {Suit.CLUBS: 31, Suit.SPADES: 30, Suit.HEARTS: 29, Suit.DIAMONDS: 28}
_JACK_POWER = {Suit.CLUBS: 27, Suit.SPADES: 26, Suit.HEARTS: 25, Suit.DIAMONDS: 24}
_DIAMOND_POWER = {
    Rank.ACE: 23,
    Rank.TEN: 22,
    Rank.KING: 21,
    Rank.NINE: 20,
    Rank.EIGHT: 19,
    Rank.SEVEN: 18,
}
# Plain suit power (Queens and Jacks are never plain).
_PLAIN_POWER = {
    Rank.ACE: 7,
    Rank.TEN: 6,
    Rank.KING: 5,
    Rank.NINE: 2,
    Rank.EIGHT: 1,
    Rank.SEVEN: 0,
}


def power(card: Card) -> int:
    """
    Strength of a card for trick comparison.

    Distinct within trump and within each plain suit. Plain suits share the same scale;
    a plain card only wins while following the lead suit, so equal powers never compete.
    """
    if card.rank == Rank.QUEEN:
        return _QUEEN_POWER[card.suit]
    if card.rank == Rank.JACK:
        return _JACK_POWER[card.suit]
    if card.suit == Suit.DIAMONDS:
        return _DIAMOND_POWER[card.rank]
    return _PLAIN_POWER[card.rank]


def lead_suit_for(card: Card) -> Suit | None:
    """Suit a lead card asks for: its suit when plain, None when trump is led."""
    return None if card.is_trump() else card.suit


def has_plain_suit(hand: Sequence[Card], suit: Suit) -> bool:
    return any(not c.is_trump() and c.suit == suit for c in hand)


def has_trump(hand: Sequence[Card]) -> bool:
    return any(c.is_trump() for c in hand)


def is_legal_play(
    card: Card,
    hand: Sequence[Card],
    trick: Sequence[Card],
    lead_suit: Suit | None,
    follow_trump: bool = False,
) -> bool:
    """
    True if ``card`` may be played from ``hand`` onto ``trick``.

    - Leading: any card in hand.
    - A plain suit was led and the hand holds that plain suit: must follow it.
    - follow_trump: when trump was led, a hand holding trump must play trump.
    - Otherwise any card.
    """
    if card not in hand:
        return False
    if not trick:
        return True
    if lead_suit is not None:
        if has_plain_suit(hand, lead_suit):
            return not card.is_trump() and card.suit == lead_suit
        return True
    if follow_trump and trick[0].is_trump() and has_trump(hand):
        return card.is_trump()
    return True


def legal_plays(
    hand: Sequence[Card],
    trick: Sequence[Card],
    lead_suit: Suit | None,
    follow_trump: bool = False,
) -> list[Card]:
    """Cards of ``hand`` that may be played, in hand order."""
    return [c for c in hand if is_legal_play(c, hand, trick, lead_suit, follow_trump)]


def beats(card: Card, best: Card, lead_suit: Suit | None) -> bool:
    """True if ``card`` takes the trick away from the currently winning ``best``."""
    if card.is_trump():
        return not best.is_trump() or power(card) > power(best)
    if best.is_trump():
        return False
    return card.suit == lead_suit and best.suit == lead_suit and power(card) > power(best)


def winning_index(trick: Sequence[Card], lead_suit: Suit | None) -> int:
    """Position (0 = leader) of the card currently winning ``trick``."""
    if not trick:
        raise ValueError("Empty trick has no winner")
    best = 0
    for i in range(1, len(trick)):
        if beats(trick[i], trick[best], lead_suit):
            best = i
    return best


def trick_winner(
    trick: Sequence[Card],
    lead_suit: Suit | None,
    order: Sequence[str],
) -> str:
    """
    Id of the player who wins ``trick``.
    order: player ids in the order they played, starting from the leader.
    """
    return order[winning_index(trick, lead_suit)]
