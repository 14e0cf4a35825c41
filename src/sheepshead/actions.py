"""
Player and session actions accepted by the state machine.

Each action is a small frozen dataclass; ``game.apply_action`` dispatches on its type to
one handler per variant. ``player_id`` is the actor; session actions have none.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .deck import Card


@dataclass(frozen=True)
class StartRound:
    """
    Shuffle and deal a new round (from DEALING or SCORING).
    seed: shuffle seed; drawn from the engine rng when None. The seed used is logged so
    the deal can be reproduced.
    """

    seed: Optional[int] = None


@dataclass(frozen=True)
class Pick:
    player_id: str


@dataclass(frozen=True)
class Pass:
    player_id: str


@dataclass(frozen=True)
class Bury:
    player_id: str
    cards: Tuple[Card, ...]


@dataclass(frozen=True)
class CallPartner:
    player_id: str
    partner_id: str
    called_card: Optional[Card] = None


@dataclass(frozen=True)
class PlayCard:
    player_id: str
    card: Card


@dataclass(frozen=True)
class EndGame:
    """Close the game from SCORING."""


Action = Union[StartRound, Pick, Pass, Bury, CallPartner, PlayCard, EndGame]


def actor_of(action: Action) -> Optional[str]:
    return getattr(action, "player_id", None)
