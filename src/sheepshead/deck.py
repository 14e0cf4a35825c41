"""
Sheepshead deck: 32 cards (7 through Ace in four suits).
Trump = all Queens, all Jacks, every Diamond (14 cards). Card values total 120.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from enum import IntEnum


class Suit(IntEnum):
    """Clubs, Spades, Hearts, Diamonds. Order is also the Queen/Jack trump order."""
    CLUBS = 0
    SPADES = 1
    HEARTS = 2
    DIAMONDS = 3


class Rank(IntEnum):
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14


# Plain suits ("fail") in the order the AI scans them.
PLAIN_SUITS = (Suit.CLUBS, Suit.SPADES, Suit.HEARTS)

CARD_VALUES = {
    Rank.ACE: 11,
    Rank.TEN: 10,
    Rank.KING: 4,
    Rank.QUEEN: 3,
    Rank.JACK: 2,
    Rank.NINE: 0,
    Rank.EIGHT: 0,
    Rank.SEVEN: 0,
}

SUIT_CODES = {Suit.CLUBS: "C", Suit.SPADES: "S", Suit.HEARTS: "H", Suit.DIAMONDS: "D"}
RANK_CODES = {
    Rank.SEVEN: "7",
    Rank.EIGHT: "8",
    Rank.NINE: "9",
    Rank.TEN: "10",
    Rank.JACK: "J",
    Rank.QUEEN: "Q",
    Rank.KING: "K",
    Rank.ACE: "A",
}
_SUIT_BY_CODE = {v: k for k, v in SUIT_CODES.items()}
_RANK_BY_CODE = {v: k for k, v in RANK_CODES.items()}

DECK_SIZE = 32
TOTAL_POINTS = 120


@dataclass(frozen=True)
class Card:
    """A single card. Equal iff suit and rank match."""

    suit: Suit
    rank: Rank

    def is_trump(self) -> bool:
        return self.rank in (Rank.QUEEN, Rank.JACK) or self.suit == Suit.DIAMONDS

    def point_value(self) -> int:
        return CARD_VALUES[self.rank]

    @property
    def code(self) -> str:
        """Compact code used for serialization, e.g. "QC" or "10D"."""
        return RANK_CODES[self.rank] + SUIT_CODES[self.suit]

    @classmethod
    def from_code(cls, code: str) -> "Card":
        code = code.strip().upper()
        if len(code) < 2:
            raise ValueError(f"Invalid card code: {code!r}")
        rank = _RANK_BY_CODE.get(code[:-1])
        suit = _SUIT_BY_CODE.get(code[-1])
        if rank is None or suit is None:
            raise ValueError(f"Invalid card code: {code!r}")
        return cls(suit=suit, rank=rank)

    def __str__(self) -> str:
        return f"{RANK_CODES[self.rank]}{'♣♠♥♦'[self.suit]}"

    def __repr__(self) -> str:
        return str(self)


def make_deck_32() -> list[Card]:
    """Build the 32-card deck in suit-major order (unshuffled)."""
    return [Card(suit=s, rank=r) for s in Suit for r in Rank]


def shuffle_deck(deck: list[Card], rng: random.Random | None = None) -> list[Card]:
    """Return a uniformly shuffled copy of ``deck`` (Fisher-Yates)."""
    if rng is None:
        rng = random.Random()
    shuffled = list(deck)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def cards_point_total(cards) -> int:
    """Total card points in a set of cards (120 for the full deck)."""
    return sum(c.point_value() for c in cards)


def cards_from_codes(codes) -> tuple[Card, ...]:
    return tuple(Card.from_code(c) for c in codes)


def cards_to_codes(cards) -> list[str]:
    return [c.code for c in cards]
