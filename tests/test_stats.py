"""Tests for lifetime player statistics and the leaderboard."""
from sheepshead.state import GameResult
from sheepshead.stats import (
    PlayerStats,
    leaderboard,
    stats_from_dict,
    stats_to_dict,
    update_player_stats,
    update_player_stats_many,
)

PLAYERS = ("a", "b", "c", "d", "e")


def _result(picker="a", partner="b", picker_score=70, leaster_winner=None) -> GameResult:
    is_leaster = leaster_winner is not None
    return GameResult(
        game_id="g",
        round_number=1,
        date_played="2024-01-01T00:00:00+00:00",
        players=PLAYERS,
        picker=None if is_leaster else picker,
        partner=None if is_leaster else partner,
        picker_team_score=0 if is_leaster else picker_score,
        defender_team_score=0 if is_leaster else 120 - picker_score,
        is_leaster=is_leaster,
        leaster_winner=leaster_winner,
        is_solo=not is_leaster and partner is None,
    )


def test_picker_team_win():
    stats = update_player_stats({}, _result())
    assert stats["a"].wins == 1 and stats["a"].picker_wins == 1
    assert stats["b"].wins == 1 and stats["b"].partner_wins == 1
    assert stats["c"].losses == 1 and stats["c"].defender_losses == 1
    assert stats["a"].total_points_won == 70
    assert stats["c"].total_points_lost == 70
    assert all(s.games_played == 1 for s in stats.values())


def test_defenders_win_at_sixty():
    stats = update_player_stats({}, _result(picker_score=60))
    assert stats["a"].picker_losses == 1
    assert stats["d"].defender_wins == 1
    assert stats["d"].total_points_won == 60


def test_solo_and_schneider():
    stats = update_player_stats({}, _result(partner=None, picker_score=120))
    assert stats["a"].solo_wins == 1
    assert stats["a"].schneiders == 1
    assert stats["b"].schneidereds == 1
    assert stats["b"].defender_losses == 1


def test_leaster():
    stats = update_player_stats({}, _result(leaster_winner="c"))
    assert stats["c"].wins == 1 and stats["c"].leaster_wins == 1
    assert stats["a"].losses == 1
    assert stats["a"].picker_losses == 0


def test_update_is_pure():
    before = {"a": PlayerStats("a", games_played=4)}
    after = update_player_stats(before, _result())
    assert before["a"].games_played == 4
    assert after["a"].games_played == 5


def test_many_and_leaderboard():
    stats = update_player_stats_many({}, [_result(), _result(picker="c", partner="d"), _result(leaster_winner="e")])
    board = leaderboard(stats, {"a": "Alice"})
    by_id = {e.player_id: e for e in board}
    assert by_id["a"].player_name == "Alice"
    assert by_id["b"].player_name == "b"
    assert by_id["a"].total_games == 3
    assert by_id["c"].picker_win_percentage == 100.0
    assert by_id["b"].picker_win_percentage == 0.0
    assert board == sorted(board, key=lambda e: (-e.win_percentage, -e.total_games, e.player_id))


def test_dict_round_trip_ignores_unknown_keys():
    s = PlayerStats("a", wins=3, schneiders=1)
    d = stats_to_dict(s)
    d["future_counter"] = 9
    assert stats_from_dict(d) == s
