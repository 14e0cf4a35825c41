"""
Session controller: owns the authoritative GameState for one table.

Every accepted action is persisted through the storage collaborator before control
returns. After each transition, computer seats are driven in a loop: the agent is asked
for its action after ``think_delay`` seconds (``sleep`` is injectable, tests pass zero).
"""
from __future__ import annotations

import logging
import random
import time
from typing import Callable, Dict, List, Optional, Sequence

from .actions import Action, EndGame, StartRound
from .agents import Agent, HeuristicAgent
from .config import GameConfig
from .game import apply_action, new_game
from .persistence import (
    Storage,
    append_game_history,
    load_game_state,
    load_player_stats,
    save_game_state,
    save_player_stats,
)
from .roster import RosterEntry
from .state import GameResult, GameState, Phase
from .stats import update_player_stats_many

logger = logging.getLogger(__name__)

AI_PHASES = (Phase.PICKING, Phase.BURYING, Phase.CALLING_PARTNER, Phase.PLAYING)


class GameController:
    """
    Drives one game: applies actions, persists each new state, lets computer seats act.

    Usage:
        controller = GameController(MemoryStorage(), GameConfig(think_delay=0))
        controller.new_game(build_roster(5))
        controller.dispatch(Pick("human"))
    """

    def __init__(
        self,
        storage: Storage,
        config: GameConfig | None = None,
        agents: Dict[str, Agent] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self.storage = storage
        self.config = config or GameConfig()
        self.agents: Dict[str, Agent] = dict(agents or {})
        self.sleep = sleep
        self.rng = rng or random.Random(self.config.seed)
        self.state: Optional[GameState] = None

    # ---- Setup ----

    def new_game(self, roster: Sequence[RosterEntry], dealer_index: int = 0) -> GameState:
        """Seat the roster, deal round one, and let computer seats act."""
        state = new_game(roster, dealer_index=dealer_index)
        for p in state.players:
            if not p.is_human and p.id not in self.agents:
                self.agents[p.id] = HeuristicAgent(rules=self.config.rules)
        self._commit(state)
        return self.dispatch(StartRound())

    def resume(self) -> Optional[GameState]:
        """Adopt the saved game if one exists and is sound."""
        state = load_game_state(self.storage)
        if state is None:
            return None
        for p in state.players:
            if not p.is_human and p.id not in self.agents:
                self.agents[p.id] = HeuristicAgent(rules=self.config.rules)
        self.state = state
        logger.info("Resumed game %s in round %d (%s)", state.game_id, state.round_number, state.phase.value)
        return self.drive_ai()

    # ---- Transitions ----

    def _commit(self, state: GameState) -> None:
        self.state = state
        if not save_game_state(self.storage, state):
            logger.warning("Continuing game %s without a saved copy", state.game_id)

    def apply(self, action: Action) -> bool:
        """Apply one action without driving computer seats. True when accepted."""
        if self.state is None:
            raise RuntimeError("No game in progress")
        before = self.state
        after = apply_action(before, action, self.config.rules, self.rng)
        if after is before:
            logger.debug("Action rejected: %r", action)
            return False
        self._commit(after)
        if after.phase == Phase.GAME_OVER and before.phase != Phase.GAME_OVER:
            self._record_finished_game(after)
        return True

    def dispatch(self, action: Action) -> GameState:
        """Apply ``action`` then let computer seats play until a human must act."""
        self.apply(action)
        return self.drive_ai()

    def _ai_to_act(self) -> Optional[Agent]:
        state = self.state
        if state is None or state.phase not in AI_PHASES:
            return None
        return self.agents.get(state.current_turn) if not state.current_player().is_human else None

    def drive_ai(self) -> GameState:
        """Apply computer actions until a human is to act or the round stops for scoring."""
        if self.state is None:
            raise RuntimeError("No game in progress")
        agent = self._ai_to_act()
        while agent is not None:
            self.sleep(self.config.think_delay)
            player_id = self.state.current_turn
            action = agent.next_action(self.state, player_id)
            if not self.apply(action):
                logger.error("Agent for %s produced a rejected action %r; stopping autoplay", player_id, action)
                break
            agent = self._ai_to_act()
        return self.state

    # ---- Between rounds ----

    def rounds_remaining(self) -> int:
        if self.state is None:
            return 0
        return max(0, self.config.rounds_per_game - self.state.round_number)

    def advance(self) -> GameState:
        """From SCORING: deal the next round, or end the game once all rounds are played."""
        if self.state is None or self.state.phase != Phase.SCORING:
            raise RuntimeError("advance() is only valid between rounds")
        if self.rounds_remaining() > 0:
            return self.dispatch(StartRound())
        return self.dispatch(EndGame())

    def end_game(self) -> GameState:
        return self.dispatch(EndGame())

    def _record_finished_game(self, state: GameState) -> None:
        results: List[GameResult] = list(state.results)
        append_game_history(self.storage, results)
        stats = update_player_stats_many(load_player_stats(self.storage), results)
        save_player_stats(self.storage, stats)
        logger.info(
            "Game %s over after %d rounds: %s",
            state.game_id,
            len(results),
            ", ".join(f"{p.name}={p.score}" for p in state.players),
        )

    def play_to_end(self) -> GameState:
        """Run an all-computer game to GAME_OVER."""
        if self.state is None:
            raise RuntimeError("No game in progress")
        while self.state.phase != Phase.GAME_OVER:
            if self.state.phase == Phase.SCORING:
                self.advance()
                continue
            if self._ai_to_act() is None:
                raise RuntimeError(f"{self.state.current_turn} has no agent to act for them")
            before = self.state
            self.drive_ai()
            if self.state is before:
                raise RuntimeError(f"Autoplay stalled on {before.current_turn} in {before.phase.value}")
        return self.state
