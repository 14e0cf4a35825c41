"""Sheepshead rules engine (3-5 players, call-ace partner, leaster on all-pass)."""

__version__ = "0.1.0"

from .deck import Card, Rank, Suit, make_deck_32, shuffle_deck
from .deal import deal, Deal, first_to_act, next_dealer
from .play import legal_plays, is_legal_play, power, trick_winner
from .state import GameResult, GameState, InvalidStateError, Phase, Player, validate_state
from .actions import Bury, CallPartner, EndGame, Pass, Pick, PlayCard, StartRound
from .scoring import points_in_cards, score_round, leaster_winner
from .config import GameConfig, RuleSet
from .roster import RosterEntry, build_roster
from .game import apply_action, legal_actions, new_game
from .controller import GameController
from .persistence import JsonFileStorage, MemoryStorage
