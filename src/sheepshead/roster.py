"""
Table setup: who sits where before the first round is dealt.

A roster is one human plus computer opponents; the ruleset supports 3-5 seats.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

MIN_PLAYERS = 3
MAX_PLAYERS = 5

AI_NAMES = ("Hilde", "Otto", "Greta", "Fritz", "Lotte", "Emil", "Ida")


@dataclass(frozen=True)
class RosterEntry:
    id: str
    name: str
    is_human: bool = False


def validate_roster(roster: Sequence[RosterEntry], require_human: bool = True) -> None:
    """Raise ValueError unless the roster is a playable table."""
    n = len(roster)
    if not MIN_PLAYERS <= n <= MAX_PLAYERS:
        raise ValueError(f"Sheepshead needs {MIN_PLAYERS}-{MAX_PLAYERS} players, got {n}")
    ids = [e.id for e in roster]
    if any(not pid for pid in ids):
        raise ValueError("Every player needs a non-empty id")
    if len(set(ids)) != n:
        raise ValueError(f"Duplicate player ids in roster: {ids}")
    humans = sum(1 for e in roster if e.is_human)
    if require_human and humans != 1:
        raise ValueError(f"Expected exactly one human player, found {humans}")


def build_roster(
    num_players: int,
    human_name: str | None = "You",
    ai_names: Sequence[str] = AI_NAMES,
) -> List[RosterEntry]:
    """
    Seat one human (``human_name``; None for an all-computer table) in seat 0 and fill the
    remaining seats with computer players.
    """
    roster: List[RosterEntry] = []
    if human_name is not None:
        roster.append(RosterEntry(id="human", name=human_name, is_human=True))
    i = 0
    while len(roster) < num_players:
        name = ai_names[i] if i < len(ai_names) else f"AI {i + 1}"
        roster.append(RosterEntry(id=f"ai{i + 1}", name=name))
        i += 1
    validate_roster(roster, require_human=human_name is not None)
    return roster
