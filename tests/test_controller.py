"""Tests for the session controller: autoplay, persistence, game end."""
import logging
import random

import pytest

from sheepshead.actions import Pass, Pick, PlayCard
from sheepshead.agents import RandomAgent
from sheepshead.config import GameConfig
from sheepshead.controller import GameController
from sheepshead.persistence import MemoryStorage, load_game_history, load_game_state, load_player_stats
from sheepshead.roster import build_roster
from sheepshead.state import Phase


def _controller(storage=None, **cfg) -> GameController:
    config = GameConfig(think_delay=0.0, seed=5, **cfg)
    return GameController(storage or MemoryStorage(), config, sleep=lambda _: None)


def test_autoplay_stops_at_the_human():
    c = _controller(num_players=5)
    # Human in seat 0 deals and is never offered the blind, so they first act in play.
    state = c.new_game(build_roster(5))
    assert state.phase == Phase.PLAYING
    assert state.current_player().is_human


def test_each_transition_is_saved():
    storage = MemoryStorage()
    c = _controller(storage)
    c.new_game(build_roster(5))
    assert load_game_state(storage) == c.state


def test_think_delay_is_observed():
    delays = []
    c = GameController(MemoryStorage(), GameConfig(think_delay=0.25, seed=1), sleep=delays.append)
    c.new_game(build_roster(3, human_name=None))
    assert delays and all(d == 0.25 for d in delays)


def test_rejected_human_action_changes_nothing():
    c = _controller()
    state = c.new_game(build_roster(5))
    other = next(p.id for p in state.players if not p.is_human)
    assert not c.apply(Pick(other))
    assert c.state is state


def test_human_action_is_followed_by_autoplay():
    c = _controller(num_players=3)
    state = c.new_game(build_roster(3), dealer_index=2)
    # The seat after dealer 2 is the human, offered the blind first.
    assert state.phase == Phase.PICKING
    assert state.current_turn == "human"
    state = c.dispatch(Pass("human"))
    # Whether a computer picks or everyone passes, the human leads the first trick.
    assert state.phase == Phase.PLAYING
    assert state.current_turn == "human"


def test_play_to_end_records_history_and_stats():
    storage = MemoryStorage()
    c = _controller(storage, num_players=4, rounds_per_game=3)
    c.new_game(build_roster(4, human_name=None))
    final = c.play_to_end()
    assert final.phase == Phase.GAME_OVER
    assert final.round_number == 3
    history = load_game_history(storage)
    assert len(history) == 3
    stats = load_player_stats(storage)
    assert set(stats) == {"ai1", "ai2", "ai3", "ai4"}
    assert all(s.games_played == 3 for s in stats.values())
    assert load_game_state(storage).phase == Phase.GAME_OVER


def test_stats_accumulate_across_games():
    storage = MemoryStorage()
    for _ in range(2):
        c = _controller(storage, num_players=3, rounds_per_game=1)
        c.new_game(build_roster(3, human_name=None))
        c.play_to_end()
    assert all(s.games_played == 2 for s in load_player_stats(storage).values())
    assert len(load_game_history(storage)) == 2


def test_resume_continues_saved_game():
    storage = MemoryStorage()
    c = _controller(storage, num_players=5)
    state = c.new_game(build_roster(5))
    resumed = _controller(storage, num_players=5)
    assert resumed.resume() == state
    assert _controller(MemoryStorage()).resume() is None


def test_advance_only_between_rounds():
    c = _controller()
    c.new_game(build_roster(5, human_name=None), dealer_index=1)
    assert c.state.phase == Phase.SCORING
    c.advance()
    assert c.state.round_number == 2
    with pytest.raises(RuntimeError):
        GameController(MemoryStorage()).apply(Pass("ai1"))


class _FlakyStorage(MemoryStorage):
    def save(self, key, value):
        raise OSError("read-only")


def test_storage_failure_does_not_stop_play(caplog):
    c = _controller(_FlakyStorage(), num_players=3, rounds_per_game=1)
    with caplog.at_level(logging.WARNING):
        c.new_game(build_roster(3, human_name=None))
        final = c.play_to_end()
    assert final.phase == Phase.GAME_OVER
    assert "without a saved copy" in caplog.text


class _StubbornAgent:
    def next_action(self, state, player_id):
        return PlayCard(player_id, state.blind[0]) if state.blind else Pass("nobody")


def test_rejected_agent_action_stalls_autoplay():
    agents = {pid: _StubbornAgent() for pid in ("ai1", "ai2", "ai3")}
    c = GameController(MemoryStorage(), GameConfig(think_delay=0.0), agents=agents, sleep=lambda _: None)
    state = c.new_game(build_roster(3, human_name=None))
    assert state.phase == Phase.PICKING
    with pytest.raises(RuntimeError):
        c.play_to_end()


def test_custom_agents_are_used():
    agents = {pid: RandomAgent(seed=i) for i, pid in enumerate(("ai1", "ai2", "ai3"))}
    c = GameController(
        MemoryStorage(), GameConfig(think_delay=0.0, rounds_per_game=2), agents=agents,
        sleep=lambda _: None, rng=random.Random(3),
    )
    c.new_game(build_roster(3, human_name=None))
    assert c.play_to_end().phase == Phase.GAME_OVER
    assert c.agents["ai1"] is agents["ai1"]


def test_driving_without_a_game_raises():
    c = _controller()
    with pytest.raises(RuntimeError):
        c.drive_ai()
    with pytest.raises(RuntimeError):
        c.play_to_end()
