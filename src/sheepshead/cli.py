"""
Command-line interface for playing and simulating Sheepshead.

Usage examples (after ``pip install -e .``):

    sheepshead play --players 5 --rounds 3
    sheepshead simulate --players 3 --games 10 --seed 7
    sheepshead stats
"""
from __future__ import annotations

import argparse
import logging
import random
from dataclasses import replace
from typing import Callable, Optional

from .actions import Action, Bury, CallPartner, Pass, Pick, PlayCard
from .ai import choose_bury_cards, choose_card_to_play, choose_partner
from .config import GameConfig, RuleSet, load_config
from .controller import GameController
from .deck import Card
from .persistence import JsonFileStorage, clear_game_data, load_game_history, load_player_stats
from .play import legal_plays
from .roster import MAX_PLAYERS, build_roster
from .scoring import picker_team_wins
from .state import GameEvent, GameState, Phase
from .stats import leaderboard

logger = logging.getLogger(__name__)

InputFn = Callable[[str], str]


class QuitGame(Exception):
    """The human asked to leave; the game stays saved for ``play --resume``."""


# ---- Shared options ----


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON config file; command-line flags override its values.",
    )
    parser.add_argument(
        "--players",
        type=int,
        default=None,
        help="Table size, 3-5 (default 5).",
    )
    parser.add_argument(
        "--rounds",
        type=int,
        default=None,
        help="Rounds per game (default 5).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the shuffles, for reproducible games.",
    )
    parser.add_argument(
        "--save-dir",
        type=str,
        default=None,
        help="Directory holding the saved game, stats and history.",
    )
    parser.add_argument(
        "--follow-trump",
        action="store_true",
        help="A trump lead must be followed with trump when possible.",
    )


def _build_config(args: argparse.Namespace) -> GameConfig:
    cfg = load_config(args.config) if getattr(args, "config", None) else GameConfig()
    overrides = {}
    if getattr(args, "players", None) is not None:
        overrides["num_players"] = args.players
    if getattr(args, "rounds", None) is not None:
        overrides["rounds_per_game"] = args.rounds
    if getattr(args, "seed", None) is not None:
        overrides["seed"] = args.seed
    if getattr(args, "save_dir", None) is not None:
        overrides["save_dir"] = args.save_dir
    if getattr(args, "think_delay", None) is not None:
        overrides["think_delay"] = args.think_delay
    if getattr(args, "follow_trump", False):
        overrides["rules"] = replace(cfg.rules, follow_trump=True)
    return replace(cfg, **overrides)


def _roster_names() -> dict[str, str]:
    """Display names for every seat id the CLI hands out, all-computer tables included."""
    names = {e.id: e.name for e in build_roster(MAX_PLAYERS, human_name=None)}
    names.update((e.id, e.name) for e in build_roster(MAX_PLAYERS))
    return names


# ---- Interactive play ----


def _format_cards(cards) -> str:
    return " ".join(str(c) for c in cards) or "-"


def _print_table(state: GameState) -> None:
    scores = ", ".join(f"{p.name} {p.score}" for p in state.players)
    print(f"Round {state.round_number} | {state.phase.value} | {scores}")
    if state.current_trick:
        order = state.trick_order()
        played = ", ".join(
            f"{state.player(pid).name}: {c}" for pid, c in zip(order, state.current_trick)
        )
        print(f"  Trick {state.trick_number + 1}: {played}")


def _describe(state: GameState, event: GameEvent) -> Optional[str]:
    name = state.player(event.player_id).name if state.has_player(event.player_id) else ""
    if event.type == "PICKED_BLIND":
        return f"{name} picks up the blind."
    if event.type == "ALL_PASSED":
        return "Everyone passed: playing a leaster."
    if event.type == "CALLED_PARTNER":
        called = event.data.get("calledCard")
        return f"{name} calls {called}." if called else f"{name} goes alone."
    if event.type == "TRICK_COMPLETED":
        cards = " ".join(event.data.get("cards", []))
        return f"  {name} takes trick {event.data.get('trickNumber')} ({cards}, {event.data.get('points')} pts)"
    return None


def _print_events(state: GameState, start: int) -> int:
    """Print what happened since log index ``start``; returns the new index."""
    for event in state.log[start:]:
        line = _describe(state, event)
        if line:
            print(line)
    return len(state.log)


def _ask(input_fn: InputFn, prompt: str) -> str:
    try:
        answer = input_fn(prompt).strip()
    except EOFError:
        raise QuitGame() from None
    if answer.lower() in ("q", "quit"):
        raise QuitGame()
    return answer


def _parse_codes(text: str) -> Optional[list[Card]]:
    try:
        return [Card.from_code(tok) for tok in text.replace(",", " ").split()]
    except ValueError:
        return None


def _ask_pick(state: GameState, player_id: str, input_fn: InputFn) -> Action:
    while True:
        answer = _ask(input_fn, "Pick up the blind? [y/N] ").lower()
        if answer in ("y", "yes"):
            return Pick(player_id)
        if answer in ("", "n", "no"):
            return Pass(player_id)
        print("Please answer y or n.")


def _ask_bury(state: GameState, player_id: str, input_fn: InputFn) -> Action:
    hand = state.player(player_id).hand
    suggestion = choose_bury_cards(hand)
    print(f"  Your hand: {_format_cards(hand)}")
    while True:
        answer = _ask(
            input_fn,
            f"Bury two cards by code [Enter for {' '.join(c.code for c in suggestion)}] ",
        )
        if not answer:
            return Bury(player_id, suggestion)
        cards = _parse_codes(answer)
        if cards is None or len(cards) != 2 or len(set(cards)) != 2 or any(c not in hand for c in cards):
            print("Name two different cards from your hand, e.g. 7C 8S.")
            continue
        return Bury(player_id, tuple(cards))


def _ask_call(state: GameState, player_id: str, input_fn: InputFn) -> Action:
    picker = state.player(player_id)
    _, suggested = choose_partner(picker, state)
    default = suggested.code if suggested is not None else "alone"
    while True:
        answer = _ask(input_fn, f"Call a card for your partner, or 'alone' [Enter for {default}] ")
        if not answer:
            answer = default
        if answer.lower() == "alone":
            return CallPartner(player_id, player_id)
        cards = _parse_codes(answer)
        if not cards or len(cards) != 1:
            print("Name one card, e.g. AC.")
            continue
        called = cards[0]
        if called in picker.hand:
            print("You cannot call a card you hold.")
            continue
        holder = next((p.id for p in state.players if called in p.hand), None)
        # A called card that was buried or set aside leaves the picker alone.
        return CallPartner(player_id, holder or player_id, called)


def _ask_card(state: GameState, player_id: str, rules: RuleSet, input_fn: InputFn) -> Action:
    player = state.player(player_id)
    legal = legal_plays(player.hand, state.current_trick, state.lead_suit, rules.follow_trump)
    suggestion = choose_card_to_play(player, state, rules)
    print(f"  Your hand: {_format_cards(player.hand)}")
    for i, c in enumerate(legal, start=1):
        print(f"    {i}) {c}")
    while True:
        answer = _ask(input_fn, f"Play which card? [Enter for {suggestion}] ")
        if not answer:
            return PlayCard(player_id, suggestion)
        if answer.isdigit() and 1 <= int(answer) <= len(legal):
            return PlayCard(player_id, legal[int(answer) - 1])
        cards = _parse_codes(answer)
        if cards and len(cards) == 1 and cards[0] in legal:
            return PlayCard(player_id, cards[0])
        print("That card cannot be played now.")


def ask_human_action(state: GameState, player_id: str, rules: RuleSet, input_fn: InputFn = input) -> Action:
    """Prompt the human at the table for the action their phase calls for."""
    if state.phase == Phase.PICKING:
        return _ask_pick(state, player_id, input_fn)
    if state.phase == Phase.BURYING:
        return _ask_bury(state, player_id, input_fn)
    if state.phase == Phase.CALLING_PARTNER:
        return _ask_call(state, player_id, input_fn)
    if state.phase == Phase.PLAYING:
        return _ask_card(state, player_id, rules, input_fn)
    raise ValueError(f"Nothing to ask in phase {state.phase.value}")


def _print_round_summary(state: GameState) -> None:
    result = state.results[-1]
    if result.is_leaster:
        winner = state.player(result.leaster_winner).name if result.leaster_winner else "nobody"
        print(f"Leaster! {winner} takes it.")
    else:
        side = "Picker team" if picker_team_wins(result.picker_team_score) else "Defenders"
        print(
            f"Picker team {result.picker_team_score} - defenders {result.defender_team_score}: "
            f"{side} win."
        )
    for p in state.players:
        print(f"  {p.name}: {p.score}")


def run_interactive(controller: GameController, input_fn: InputFn = input) -> GameState:
    """Play until GAME_OVER or the human quits; returns the last state."""
    state = controller.state
    if state is None:
        raise RuntimeError("No game in progress")
    # Replay the current round so far, including computer moves before the first prompt.
    seen = max((i for i, e in enumerate(state.log) if e.type == "ROUND_STARTED"), default=0)
    try:
        while state.phase != Phase.GAME_OVER:
            seen = _print_events(state, seen)
            if state.phase == Phase.SCORING:
                _print_round_summary(state)
                if controller.rounds_remaining() > 0:
                    _ask(input_fn, "Press Enter for the next round (q to quit) ")
                state = controller.advance()
                continue
            _print_table(state)
            player = state.current_player()
            if not player.is_human:
                raise RuntimeError(f"Waiting on {player.id}, who has no agent")
            action = ask_human_action(state, player.id, controller.config.rules, input_fn)
            before = state
            state = controller.dispatch(action)
            if state is before:
                print("That move is not allowed.")
    except QuitGame:
        print("Game saved. Continue later with 'sheepshead play --resume'.")
        return controller.state
    print("Final scores:")
    for p in sorted(state.players, key=lambda p: -p.score):
        print(f"  {p.name}: {p.score}")
    return state


def _add_play_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "play",
        help="Play at a table against computer opponents.",
    )
    _add_config_arguments(parser)
    parser.add_argument(
        "--name",
        type=str,
        default="You",
        help="Your name at the table.",
    )
    parser.add_argument(
        "--think-delay",
        type=float,
        default=None,
        help="Seconds each computer player pauses before acting.",
    )
    parser.add_argument(
        "--resume",
        action="store_true",
        help="Continue the saved game instead of starting a new one.",
    )
    parser.set_defaults(func=_cmd_play)


def _cmd_play(args: argparse.Namespace, input_fn: InputFn = input) -> None:
    cfg = _build_config(args)
    controller = GameController(JsonFileStorage(cfg.save_dir), cfg)
    if args.resume and controller.resume() is not None:
        print("Resuming saved game.")
    else:
        if args.resume:
            print("No saved game found; starting a new one.")
        controller.new_game(build_roster(cfg.num_players, human_name=args.name))
    run_interactive(controller, input_fn)


# ---- Simulation ----


def _add_simulate_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "simulate",
        help="Play full games between computer players.",
    )
    _add_config_arguments(parser)
    parser.add_argument(
        "--games",
        type=int,
        default=1,
        help="Number of games to play.",
    )
    parser.set_defaults(func=_cmd_simulate)


def _cmd_simulate(args: argparse.Namespace) -> None:
    cfg = replace(_build_config(args), think_delay=0.0)
    storage = JsonFileStorage(cfg.save_dir)
    rng = random.Random(cfg.seed)
    roster = build_roster(cfg.num_players, human_name=None)
    names = {e.id: e.name for e in roster}
    logger.info("Simulating %d game(s) at a %d-player table", args.games, cfg.num_players)
    for game in range(1, args.games + 1):
        controller = GameController(storage, cfg, sleep=lambda _: None, rng=rng)
        controller.new_game(roster, dealer_index=(game - 1) % cfg.num_players)
        final = controller.play_to_end()
        scores = ", ".join(f"{names[p.id]}={p.score}" for p in final.players)
        print(f"[game {game}/{args.games}] {scores}")
    _print_leaderboard(storage, names)


# ---- Stats ----


def _print_leaderboard(storage: JsonFileStorage, names: dict[str, str]) -> None:
    entries = leaderboard(load_player_stats(storage), names)
    if not entries:
        print("No games recorded yet.")
        return
    print(f"{'Player':<12} {'Games':>5} {'Win %':>6} {'Pick win %':>10} {'Avg pts':>8}")
    for e in entries:
        print(
            f"{e.player_name:<12} {e.total_games:>5} {e.win_percentage:>6.1f} "
            f"{e.picker_win_percentage:>10.1f} {e.average_points_per_game:>8.1f}"
        )


def _add_stats_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "stats",
        help="Show the leaderboard built from recorded games.",
    )
    parser.add_argument("--config", type=str, default=None, help="JSON config file.")
    parser.add_argument("--save-dir", type=str, default=None, help="Directory holding saved data.")
    parser.set_defaults(func=_cmd_stats)


def _cmd_stats(args: argparse.Namespace) -> None:
    cfg = _build_config(args)
    storage = JsonFileStorage(cfg.save_dir)
    _print_leaderboard(storage, _roster_names())
    print(f"Rounds recorded: {len(load_game_history(storage))}")


def _add_reset_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "reset",
        help="Delete the saved game, stats and history.",
    )
    parser.add_argument("--config", type=str, default=None, help="JSON config file.")
    parser.add_argument("--save-dir", type=str, default=None, help="Directory holding saved data.")
    parser.set_defaults(func=_cmd_reset)


def _cmd_reset(args: argparse.Namespace) -> None:
    cfg = _build_config(args)
    clear_game_data(JsonFileStorage(cfg.save_dir))
    print(f"Cleared saved data in {cfg.save_dir}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sheepshead", description="Sheepshead card game.")
    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Log engine activity (-v for info, -vv for debug).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_play_parser(subparsers)
    _add_simulate_parser(subparsers)
    _add_stats_parser(subparsers)
    _add_reset_parser(subparsers)
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
