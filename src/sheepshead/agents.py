"""
Computer players and the generic agent interface.

The small ``Agent`` protocol defines the contract used by the controller:
``next_action(state, player_id) -> action``. ``HeuristicAgent`` wraps the decisions in
``sheepshead.ai``; ``RandomAgent`` chooses uniformly among legal actions.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Protocol

from .actions import Action, Bury, CallPartner, Pass, Pick, PlayCard
from .ai import choose_bury_cards, choose_card_to_play, choose_partner, should_pick
from .config import RuleSet
from .game import legal_actions
from .state import GameState, Phase


class Agent(Protocol):
    """Decision policy for one seat."""

    def next_action(self, state: GameState, player_id: str) -> Action:
        """
        Choose the action for ``player_id``, who must be the player to act.

        Implementations must return an action that ``apply_action`` accepts; the controller
        stops driving a seat whose action is rejected.
        """


@dataclass
class HeuristicAgent:
    """
    Rule-of-thumb player.

    Usage:
        agent = HeuristicAgent()
        action = agent.next_action(state, "ai1")
    """

    rules: RuleSet = field(default_factory=RuleSet)

    def next_action(self, state: GameState, player_id: str) -> Action:
        player = state.player(player_id)
        if state.phase == Phase.PICKING:
            return Pick(player_id) if should_pick(player, state) else Pass(player_id)
        if state.phase == Phase.BURYING:
            return Bury(player_id, choose_bury_cards(player.hand))
        if state.phase == Phase.CALLING_PARTNER:
            partner_id, called = choose_partner(player, state)
            return CallPartner(player_id, partner_id, called)
        if state.phase == Phase.PLAYING:
            return PlayCard(player_id, choose_card_to_play(player, state, self.rules))
        raise ValueError(f"No decision for {player_id} in phase {state.phase.value}")


@dataclass
class RandomAgent:
    """Baseline that samples uniformly among legal actions."""

    seed: int | None = None
    rules: RuleSet = field(default_factory=RuleSet)

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)

    def next_action(self, state: GameState, player_id: str) -> Action:
        options = legal_actions(state, player_id, self.rules)
        if not options:
            raise ValueError(f"No legal actions available for {player_id}")
        return self._rng.choice(options)


__all__ = ["Agent", "HeuristicAgent", "RandomAgent"]
