"""
Lifetime per-player statistics built from round results.

``update_player_stats`` is pure: it takes the current stats mapping and one GameResult and
returns a new mapping. The controller feeds it every result of a finished game.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple

from .scoring import picker_team_wins
from .state import GameResult


@dataclass(frozen=True)
class PlayerStats:
    player_id: str
    games_played: int = 0
    wins: int = 0
    losses: int = 0
    picker_wins: int = 0
    picker_losses: int = 0
    defender_wins: int = 0
    defender_losses: int = 0
    partner_wins: int = 0
    solo_wins: int = 0
    solo_losses: int = 0
    leaster_wins: int = 0
    schneiders: int = 0  # own team held the other team to 0 points
    schneidereds: int = 0  # own team scored 0 points
    total_points_won: int = 0
    total_points_lost: int = 0


class LeaderboardEntry(NamedTuple):
    player_id: str
    player_name: str
    win_percentage: float
    total_games: int
    picker_win_percentage: float
    average_points_per_game: float


def stats_to_dict(s: PlayerStats) -> Dict[str, Any]:
    return asdict(s)


def stats_from_dict(d: Mapping[str, Any]) -> PlayerStats:
    counters = {k: int(v) for k, v in d.items() if k != "player_id" and k in PlayerStats.__dataclass_fields__}
    return PlayerStats(player_id=str(d["player_id"]), **counters)


def _bump(s: PlayerStats, **deltas: int) -> PlayerStats:
    return replace(s, **{k: getattr(s, k) + v for k, v in deltas.items()})


def _update_leaster(s: PlayerStats, result: GameResult) -> PlayerStats:
    if s.player_id == result.leaster_winner:
        return _bump(s, wins=1, leaster_wins=1)
    return _bump(s, losses=1)


def _update_team_round(s: PlayerStats, result: GameResult) -> PlayerStats:
    picker_team = {result.picker, result.partner} - {None}
    picker_won = picker_team_wins(result.picker_team_score)
    on_picker_team = s.player_id in picker_team
    own = result.picker_team_score if on_picker_team else result.defender_team_score
    other = result.defender_team_score if on_picker_team else result.picker_team_score
    won = picker_won == on_picker_team

    if won:
        s = _bump(s, wins=1, total_points_won=own)
    else:
        s = _bump(s, losses=1, total_points_lost=other)

    if s.player_id == result.picker:
        s = _bump(s, picker_wins=1) if won else _bump(s, picker_losses=1)
        if result.is_solo:
            s = _bump(s, solo_wins=1) if won else _bump(s, solo_losses=1)
    elif s.player_id == result.partner:
        if won:
            s = _bump(s, partner_wins=1)
    else:
        s = _bump(s, defender_wins=1) if won else _bump(s, defender_losses=1)

    if other == 0:
        s = _bump(s, schneiders=1)
    if own == 0:
        s = _bump(s, schneidereds=1)
    return s


def update_player_stats(stats: Mapping[str, PlayerStats], result: GameResult) -> Dict[str, PlayerStats]:
    """Fold one round result into ``stats`` (player id -> PlayerStats)."""
    updated = dict(stats)
    for pid in result.players:
        s = _bump(updated.get(pid, PlayerStats(player_id=pid)), games_played=1)
        if result.is_leaster:
            s = _update_leaster(s, result)
        else:
            s = _update_team_round(s, result)
        updated[pid] = s
    return updated


def update_player_stats_many(
    stats: Mapping[str, PlayerStats],
    results: Iterable[GameResult],
) -> Dict[str, PlayerStats]:
    updated = dict(stats)
    for r in results:
        updated = update_player_stats(updated, r)
    return updated


def leaderboard(stats: Mapping[str, PlayerStats], names: Mapping[str, str] | None = None) -> List[LeaderboardEntry]:
    """Entries sorted by win percentage, then by games played."""
    names = names or {}
    entries: List[LeaderboardEntry] = []
    for pid, s in stats.items():
        games = s.games_played
        picks = s.picker_wins + s.picker_losses
        entries.append(
            LeaderboardEntry(
                player_id=pid,
                player_name=names.get(pid, pid),
                win_percentage=100.0 * s.wins / games if games else 0.0,
                total_games=games,
                picker_win_percentage=100.0 * s.picker_wins / picks if picks else 0.0,
                average_points_per_game=s.total_points_won / games if games else 0.0,
            )
        )
    entries.sort(key=lambda e: (-e.win_percentage, -e.total_games, e.player_id))
    return entries
