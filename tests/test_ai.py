"""Tests for the heuristic computer player."""
import pytest

from sheepshead.actions import Bury, CallPartner, Pass, Pick, PlayCard, StartRound
from sheepshead.agents import HeuristicAgent, RandomAgent
from sheepshead.ai import (
    choose_bury_cards,
    choose_card_to_play,
    choose_partner,
    evaluate_hand_strength,
    should_pick,
)
from sheepshead.deck import cards_from_codes
from sheepshead.game import apply_action, new_game
from sheepshead.play import legal_plays
from sheepshead.roster import build_roster
from sheepshead.state import GameState, Phase, Player, check_invariants


def _hand(codes: str):
    return cards_from_codes(codes.split())


def test_hand_strength():
    # Three trump (QC +8, JD +6, 7D +3), plain ace +2, ten singleton +1 -2.
    assert evaluate_hand_strength(_hand("QC JD 7D AH KH 10S")) == 8 + 6 + 3 + 2 + 1 - 2
    assert evaluate_hand_strength(_hand("7C 8S 9H")) == -6


def test_strong_hand_picks_weak_hand_passes():
    state = GameState(game_id="g", players=tuple(Player(f"p{i}", f"P{i}") for i in range(5)),
                      current_turn="p0", phase=Phase.PICKING)
    assert should_pick(Player("p0", "P0", hand=_hand("QC QS JC JD AD 10D")), state)
    assert not should_pick(Player("p0", "P0", hand=_hand("7C 8C 9S 7H 8H KS")), state)


def test_bury_prefers_cheap_plain_cards():
    assert set(choose_bury_cards(_hand("QC QS 7C 8S AH AD 10D KD"))) == set(_hand("7C 8S"))


def test_bury_with_only_trump_buries_weakest():
    assert set(choose_bury_cards(_hand("QC QS QH QD JC JS 7D 8D"))) == set(_hand("7D 8D"))


def test_bury_needs_two_cards():
    with pytest.raises(ValueError):
        choose_bury_cards(_hand("QC"))


def test_partner_is_holder_of_called_ace():
    players = (
        Player("p0", "P0", is_dealer=True, hand=_hand("AC 7S")),
        Player("p1", "P1", is_picker=True, hand=_hand("QC 7C")),
        Player("p2", "P2", hand=_hand("AS 8S")),
        Player("p3", "P3", hand=_hand("AH")),
        Player("p4", "P4"),
    )
    state = GameState(game_id="g", players=players, current_turn="p1", phase=Phase.CALLING_PARTNER)
    partner, called = choose_partner(players[1], state)
    # The picker holds a club, so the Ace of clubs is called first.
    assert called == _hand("AC")[0]
    assert partner == "p0"


def test_partner_goes_alone_when_nothing_to_call():
    players = (
        Player("p0", "P0", is_dealer=True, is_picker=True,
               hand=_hand("AC AS AH 10C 10S 10H")),
        Player("p1", "P1"),
        Player("p2", "P2"),
        Player("p3", "P3"),
        Player("p4", "P4"),
    )
    state = GameState(game_id="g", players=players, current_turn="p0", phase=Phase.CALLING_PARTNER)
    assert choose_partner(players[0], state) == ("p0", None)


def test_defender_takes_valuable_trick():
    players = (
        Player("p0", "P0", is_dealer=True, is_picker=True),
        Player("p1", "P1", hand=_hand("QC 7D")),
        Player("p2", "P2"),
    )
    # p0 picked and led the Ace of hearts; p1 is void in hearts.
    state = GameState(
        game_id="g", players=players, current_turn="p1", phase=Phase.PLAYING,
        current_trick=_hand("AH"), lead_suit=_hand("AH")[0].suit,
    )
    assert choose_card_to_play(players[1], state) == _hand("7D")[0]


def test_teammate_winning_gets_cheap_card():
    players = (
        Player("p0", "P0", is_dealer=True, is_picker=True),
        Player("p1", "P1", hand=_hand("10C 7C")),
        Player("p2", "P2"),
    )
    # p2 led the Ace of clubs and is winning; p1 defends alongside p2.
    state = GameState(
        game_id="g", players=players, current_turn="p1", phase=Phase.PLAYING,
        current_trick=_hand("AC 9C"), lead_suit=_hand("AC")[0].suit,
    )
    assert choose_card_to_play(players[1], state) == _hand("7C")[0]


@pytest.mark.parametrize("num_players", [3, 4, 5])
def test_heuristic_agent_always_acts_legally(num_players):
    agent = HeuristicAgent()
    for seed in range(6):
        state = apply_action(new_game(build_roster(num_players, human_name=None)), StartRound(seed=seed))
        while state.phase != Phase.SCORING:
            action = agent.next_action(state, state.current_turn)
            if isinstance(action, PlayCard):
                player = state.current_player()
                assert action.card in legal_plays(player.hand, state.current_trick, state.lead_suit)
            nxt = apply_action(state, action)
            assert nxt is not state, f"rejected {action!r}"
            state = nxt
            assert check_invariants(state) == []


def test_heuristic_agent_action_types():
    agent = HeuristicAgent()
    state = apply_action(new_game(build_roster(5, human_name=None)), StartRound(seed=2))
    assert isinstance(agent.next_action(state, state.current_turn), (Pick, Pass))
    state = apply_action(state, Pick(state.current_turn))
    assert isinstance(agent.next_action(state, state.current_turn), Bury)
    state = apply_action(state, agent.next_action(state, state.current_turn))
    assert isinstance(agent.next_action(state, state.current_turn), CallPartner)


def test_agents_refuse_outside_player_phases():
    state = new_game(build_roster(3))
    with pytest.raises(ValueError):
        HeuristicAgent().next_action(state, state.current_turn)
    with pytest.raises(ValueError):
        RandomAgent(seed=0).next_action(state, state.current_turn)
