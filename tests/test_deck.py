"""Tests for the 32-card deck."""
import random

import pytest

from sheepshead.deck import (
    DECK_SIZE,
    TOTAL_POINTS,
    Card,
    Rank,
    Suit,
    cards_from_codes,
    cards_point_total,
    cards_to_codes,
    make_deck_32,
    shuffle_deck,
)


def test_deck_has_32_distinct_cards_worth_120():
    deck = make_deck_32()
    assert len(deck) == DECK_SIZE
    assert len(set(deck)) == DECK_SIZE
    assert cards_point_total(deck) == TOTAL_POINTS


def test_fourteen_trump():
    trump = [c for c in make_deck_32() if c.is_trump()]
    assert len(trump) == 14
    assert all(c.suit == Suit.DIAMONDS or c.rank in (Rank.QUEEN, Rank.JACK) for c in trump)


def test_point_values():
    assert Card(Suit.HEARTS, Rank.ACE).point_value() == 11
    assert Card(Suit.CLUBS, Rank.TEN).point_value() == 10
    assert Card(Suit.SPADES, Rank.KING).point_value() == 4
    assert Card(Suit.CLUBS, Rank.QUEEN).point_value() == 3
    assert Card(Suit.DIAMONDS, Rank.JACK).point_value() == 2
    assert Card(Suit.DIAMONDS, Rank.NINE).point_value() == 0


def test_card_codes():
    assert Card(Suit.DIAMONDS, Rank.TEN).code == "10D"
    assert Card.from_code("qc") == Card(Suit.CLUBS, Rank.QUEEN)
    codes = ["7S", "AH", "JD"]
    assert cards_to_codes(cards_from_codes(codes)) == codes


@pytest.mark.parametrize("bad", ["", "Q", "1C", "QX", "11D"])
def test_bad_card_codes_raise(bad):
    with pytest.raises(ValueError):
        Card.from_code(bad)


def test_shuffle_is_a_permutation_and_seeded():
    deck = make_deck_32()
    a = shuffle_deck(deck, random.Random(5))
    b = shuffle_deck(deck, random.Random(5))
    assert a == b
    assert sorted(a, key=lambda c: (c.suit, c.rank)) == sorted(deck, key=lambda c: (c.suit, c.rank))
    assert deck == make_deck_32()  # input untouched
    assert a != deck
