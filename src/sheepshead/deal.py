"""
Distribution (deal) for 3, 4 and 5 players.
3p: 10 each, blind 2. 4p: black sevens set aside, 7 each, blind 2. 5p: 6 each, blind 2.
Cards go out one at a time, starting with the seat after the dealer.
"""
from __future__ import annotations

from typing import NamedTuple

from .deck import Card, Rank, Suit, make_deck_32

# num_players -> (cards per player, blind size)
DEAL_TABLE = {
    3: (10, 2),
    4: (7, 2),
    5: (6, 2),
}

# 4 players: the two black sevens (0 points) leave the deck so the blind stays at 2.
SET_ASIDE_4P = (Card(Suit.CLUBS, Rank.SEVEN), Card(Suit.SPADES, Rank.SEVEN))

BURY_COUNT = 2


class Deal(NamedTuple):
    """Result of a deal. hands[i] belongs to seat i."""
    hands: tuple[tuple[Card, ...], ...]
    blind: tuple[Card, ...]
    set_aside: tuple[Card, ...]
    dealer: int


def cards_per_player(num_players: int) -> int:
    if num_players not in DEAL_TABLE:
        raise ValueError(f"Unsupported table size: {num_players} (expected 3-5 players)")
    return DEAL_TABLE[num_players][0]


def set_aside_for(num_players: int) -> tuple[Card, ...]:
    return SET_ASIDE_4P if num_players == 4 else ()


def next_seat(seat: int, num_players: int) -> int:
    """Play goes seat 0 -> 1 -> ... -> n-1 -> 0."""
    return (seat + 1) % num_players


def first_to_act(dealer: int, num_players: int) -> int:
    """The seat after the dealer is offered the blind first and leads the first trick."""
    return next_seat(dealer, num_players)


def next_dealer(dealer: int, num_players: int) -> int:
    return next_seat(dealer, num_players)


def play_order(first: int, num_players: int) -> list[int]:
    """Seats in turn order starting from ``first``."""
    return [(first + i) % num_players for i in range(num_players)]


def deal(deck: list[Card] | None, num_players: int, dealer: int = 0) -> Deal:
    """
    Deal ``deck`` (already shuffled, or the fresh deck if None) round-robin from the
    seat after ``dealer``. Undealt cards become the blind.
    """
    if deck is None:
        deck = make_deck_32()
    per_player = cards_per_player(num_players)
    aside = set_aside_for(num_players)
    remaining = [c for c in deck if c not in aside]

    hands: list[list[Card]] = [[] for _ in range(num_players)]
    order = play_order(first_to_act(dealer, num_players), num_players)
    idx = 0
    for _ in range(per_player):
        for seat in order:
            hands[seat].append(remaining[idx])
            idx += 1

    return Deal(
        hands=tuple(tuple(h) for h in hands),
        blind=tuple(remaining[idx:]),
        set_aside=tuple(c for c in deck if c in aside),
        dealer=dealer,
    )
