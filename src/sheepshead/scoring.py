"""
Round scoring: card points, teams, picker-team win check, leaster winner.
120 card points per round; buried cards count for the picker team; the picker team needs 61.
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import NamedTuple, Optional, Sequence

from .deck import Card, cards_point_total
from .deal import first_to_act, play_order
from .state import GameResult, GameState, Player

PICKER_WIN_THRESHOLD = 61

LEASTER_TIE_EARLIEST_SEAT = "earliest_seat"
LEASTER_TIE_RULES = (LEASTER_TIE_EARLIEST_SEAT,)


class Team(str, Enum):
    PICKER = "picker"
    DEFENDERS = "defenders"


class RoundScore(NamedTuple):
    picker_team_points: int
    defender_team_points: int
    winning_team: Optional[Team]  # None for a leaster
    leaster_winner: Optional[str]
    player_points: tuple[tuple[str, int], ...]  # trick points per player id, seat order


def points_in_cards(cards: Sequence[Card]) -> int:
    """Total points in a set of cards (120 for the whole deck)."""
    return cards_point_total(cards)


def team_of(player: Player, picker: Optional[Player]) -> Optional[Team]:
    """Picker and the picker's partner form one team; None when nobody picked."""
    if picker is None:
        return None
    if player.id == picker.id or (picker.partner is not None and player.id == picker.partner):
        return Team.PICKER
    return Team.DEFENDERS


def picker_team_wins(picker_team_points: int) -> bool:
    """61+ wins for the picker; a 60/60 split goes to the defenders."""
    return picker_team_points >= PICKER_WIN_THRESHOLD


def trick_points_by_player(state: GameState) -> list[tuple[str, int]]:
    return [(p.id, points_in_cards(p.won_cards())) for p in state.players]


def leaster_winner(state: GameState, tie_rule: str = LEASTER_TIE_EARLIEST_SEAT) -> Optional[str]:
    """
    Player with the most trick points. Ties go to the tied player who comes first in
    play order starting from the seat after the dealer.
    """
    if tie_rule not in LEASTER_TIE_RULES:
        raise ValueError(f"Unknown leaster tie rule: {tie_rule}")
    points = dict(trick_points_by_player(state))
    order = play_order(first_to_act(state.dealer_seat(), state.num_players), state.num_players)
    best_id: Optional[str] = None
    best_pts = -1
    for seat in order:
        pid = state.players[seat].id
        if points[pid] > best_pts:
            best_pts = points[pid]
            best_id = pid
    return best_id


def score_round(state: GameState, tie_rule: str = LEASTER_TIE_EARLIEST_SEAT) -> RoundScore:
    """Score the round held in ``state`` (all tricks played, before round fields are reset)."""
    per_player = trick_points_by_player(state)
    if state.is_leaster or state.picker() is None:
        return RoundScore(
            picker_team_points=0,
            defender_team_points=0,
            winning_team=None,
            leaster_winner=leaster_winner(state, tie_rule),
            player_points=tuple(per_player),
        )

    picker = state.picker()
    points = dict(per_player)
    picker_pts = points_in_cards(state.buried)
    defender_pts = 0
    for p in state.players:
        if team_of(p, picker) == Team.PICKER:
            picker_pts += points[p.id]
        else:
            defender_pts += points[p.id]
    winner = Team.PICKER if picker_team_wins(picker_pts) else Team.DEFENDERS
    return RoundScore(
        picker_team_points=picker_pts,
        defender_team_points=defender_pts,
        winning_team=winner,
        leaster_winner=None,
        player_points=tuple(per_player),
    )


def score_deltas(state: GameState, score: RoundScore) -> dict[str, int]:
    """
    Per-player score increments: every player gains their team's card points.
    Leaster: only the winner gains, by their own trick points.
    """
    if score.winning_team is None:
        points = dict(score.player_points)
        return {
            p.id: (points[p.id] if p.id == score.leaster_winner else 0)
            for p in state.players
        }
    picker = state.picker()
    deltas: dict[str, int] = {}
    for p in state.players:
        if team_of(p, picker) == Team.PICKER:
            deltas[p.id] = score.picker_team_points
        else:
            deltas[p.id] = score.defender_team_points
    return deltas


def game_result(state: GameState, score: RoundScore) -> GameResult:
    """Build the stats-facing result of the round scored by ``score``."""
    picker = state.picker()
    partner = picker.partner if picker is not None else None
    return GameResult(
        game_id=state.game_id,
        round_number=state.round_number,
        date_played=datetime.now(timezone.utc).isoformat(),
        players=tuple(p.id for p in state.players),
        picker=picker.id if picker is not None else None,
        partner=partner,
        picker_team_score=score.picker_team_points,
        defender_team_score=score.defender_team_points,
        is_leaster=score.winning_team is None,
        leaster_winner=score.leaster_winner,
        is_solo=picker is not None and partner is None,
    )
