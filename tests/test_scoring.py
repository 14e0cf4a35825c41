"""Tests for round scoring, teams and the leaster."""
from sheepshead.deck import cards_from_codes, make_deck_32
from sheepshead.scoring import (
    Team,
    game_result,
    leaster_winner,
    picker_team_wins,
    score_deltas,
    score_round,
    team_of,
)
from sheepshead.state import GameState, Phase, Player


def _tricks(*tricks: str):
    return tuple(cards_from_codes(t.split()) for t in tricks)


def _state(players, buried="", is_leaster=False) -> GameState:
    return GameState(
        game_id="g",
        players=tuple(players),
        current_turn=players[0].id,
        phase=Phase.PLAYING,
        buried=cards_from_codes(buried.split()),
        is_leaster=is_leaster,
        round_number=1,
    )


def _three_handed(picker_tricks, defender_tricks, buried="10C 10S"):
    return _state(
        [
            Player("p0", "Zero", is_dealer=True, is_picker=True, tricks_won=_tricks(*picker_tricks)),
            Player("p1", "One", tricks_won=_tricks(*defender_tricks)),
            Player("p2", "Two"),
        ],
        buried=buried,
    )


def test_threshold():
    assert not picker_team_wins(60)
    assert picker_team_wins(61)


def test_sixty_goes_to_defenders():
    state = _three_handed(["AC AS AH", "KC QC 7C"], ["10H 7S 8S"])
    score = score_round(state)
    assert score.picker_team_points == 60  # 40 in tricks + 20 buried
    assert score.defender_team_points == 10
    assert score.winning_team == Team.DEFENDERS


def test_sixty_one_goes_to_picker():
    state = _three_handed(["AC AS AH", "KC QC JC"], ["10H 7S 8S"])
    score = score_round(state)
    assert score.picker_team_points == 62
    assert score.winning_team == Team.PICKER


def test_deltas_give_each_player_their_team_points():
    state = _three_handed(["AC AS AH", "KC QC JC"], ["10H 7S 8S"])
    score = score_round(state)
    assert score_deltas(state, score) == {"p0": 62, "p1": 10, "p2": 10}


def test_partner_counts_for_picker_team():
    players = [
        Player("p0", "Zero", is_dealer=True),
        Player("p1", "One", is_picker=True, partner="p3", tricks_won=_tricks("AC AS AH QC QS")),
        Player("p2", "Two", tricks_won=_tricks("7C 8C 9C 7S 8S")),
        Player("p3", "Three", tricks_won=_tricks("10C 10S 10H KH KC")),
        Player("p4", "Four"),
    ]
    state = _state(players, buried="9D 8D")
    score = score_round(state)
    assert score.picker_team_points == 39 + 38
    assert score.defender_team_points == 0
    picker = state.picker()
    assert team_of(state.player("p3"), picker) == Team.PICKER
    assert team_of(state.player("p2"), picker) == Team.DEFENDERS
    assert team_of(state.player("p2"), None) is None

    result = game_result(state, score)
    assert result.picker == "p1"
    assert result.partner == "p3"
    assert not result.is_solo
    assert not result.is_leaster


def test_solo_result():
    state = _three_handed(["AC AS AH", "KC QC JC"], ["10H 7S 8S"])
    result = game_result(state, score_round(state))
    assert result.is_solo
    assert result.picker_team_score == 62
    assert result.players == ("p0", "p1", "p2")


def test_leaster_most_points_wins():
    players = [
        Player("p0", "Zero", is_dealer=True, tricks_won=_tricks("7C 8C 9C")),
        Player("p1", "One", tricks_won=_tricks("AC 7S 8S")),
        Player("p2", "Two", tricks_won=_tricks("KC 9S 7H")),
    ]
    state = _state(players, is_leaster=True)
    score = score_round(state)
    assert score.winning_team is None
    assert score.leaster_winner == "p1"
    assert score_deltas(state, score) == {"p0": 0, "p1": 11, "p2": 0}
    assert game_result(state, score).is_leaster


def test_leaster_tie_goes_to_earliest_seat_after_dealer():
    players = [
        Player("p0", "Zero", tricks_won=_tricks("KC 7C 8C")),
        Player("p1", "One", is_dealer=True),
        Player("p2", "Two", tricks_won=_tricks("KS 7S 8S")),
    ]
    state = _state(players, is_leaster=True)
    # Play order after dealer p1 is p2, p0, p1.
    assert leaster_winner(state) == "p2"


def test_five_handed_schneider_when_picker_takes_every_trick():
    buried = cards_from_codes(["7C", "8C"])
    rest = [c for c in make_deck_32() if c not in buried]
    tricks = tuple(tuple(rest[i:i + 5]) for i in range(0, 30, 5))
    players = [
        Player("p0", "Zero", is_dealer=True),
        Player("p1", "One", is_picker=True, partner="p2", tricks_won=tricks),
        Player("p2", "Two"),
        Player("p3", "Three"),
        Player("p4", "Four"),
    ]
    state = _state(players, buried="7C 8C")
    score = score_round(state)
    assert (score.picker_team_points, score.defender_team_points) == (120, 0)
    assert score.winning_team == Team.PICKER
