"""
Round orchestration as a pure state machine: deal → pick → bury → call → play → score.

``apply_action(state, action)`` is the single entry point for every player and session
action. It returns a new GameState, or the very same object when the action is illegal
(wrong phase, wrong actor, or a rule violation). Trick and round resolution cascade from
the last card of a trick inside an explicit loop.
"""
from __future__ import annotations

import itertools
import logging
import random
import time
import uuid
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Sequence

from .actions import Action, Bury, CallPartner, EndGame, Pass, Pick, PlayCard, StartRound, actor_of
from .config import RuleSet
from .deal import BURY_COUNT, deal, first_to_act, next_dealer, next_seat
from .deck import cards_to_codes, make_deck_32, shuffle_deck
from .play import is_legal_play, lead_suit_for, legal_plays, trick_winner
from .roster import RosterEntry, validate_roster
from .scoring import Team, game_result, points_in_cards, score_deltas, score_round
from .state import GameEvent, GameState, Phase, Player

logger = logging.getLogger(__name__)


class IllegalActionError(ValueError):
    """Raised inside handlers; apply_action turns it into a no-op."""


def _event(state: GameState, type_: str, player_id: str = "", **data: Any) -> tuple[GameEvent, ...]:
    return state.log + (GameEvent(type=type_, player_id=player_id, timestamp=time.time(), data=data),)


def _with_player(state: GameState, seat: int, **changes: Any) -> tuple[Player, ...]:
    players = list(state.players)
    players[seat] = replace(players[seat], **changes)
    return tuple(players)


def _remove_cards(hand: Sequence, cards: Sequence) -> tuple:
    remaining = list(hand)
    for c in cards:
        remaining.remove(c)
    return tuple(remaining)


def new_game(
    roster: Sequence[RosterEntry],
    dealer_index: int = 0,
    game_id: str | None = None,
) -> GameState:
    """Seat the roster (scores at 0, ``dealer_index`` deals first). Phase DEALING."""
    validate_roster(roster, require_human=False)
    if not 0 <= dealer_index < len(roster):
        raise ValueError(f"dealer_index {dealer_index} outside the table")
    gid = game_id or str(uuid.uuid4())
    players = tuple(
        Player(id=e.id, name=e.name, is_human=e.is_human, is_dealer=(i == dealer_index))
        for i, e in enumerate(roster)
    )
    state = GameState(
        game_id=gid,
        players=players,
        current_turn=players[dealer_index].id,
        phase=Phase.DEALING,
    )
    return replace(state, log=_event(state, "GAME_STARTED", gameId=gid))


# ---- Handlers: one per action variant ----


def _start_round(state: GameState, action: StartRound, rules: RuleSet, rng: random.Random) -> GameState:
    seed = action.seed if action.seed is not None else rng.randrange(2**32)
    n = state.num_players
    dealer = state.dealer_seat()
    dealt = deal(shuffle_deck(make_deck_32(), random.Random(seed)), n, dealer)
    players = tuple(
        replace(p, hand=dealt.hands[i], tricks_won=(), is_picker=False, partner=None)
        for i, p in enumerate(state.players)
    )
    first = players[first_to_act(dealer, n)].id
    new_state = replace(
        state,
        players=players,
        current_turn=first,
        phase=Phase.PICKING,
        blind=dealt.blind,
        buried=(),
        current_trick=(),
        lead_suit=None,
        round_number=state.round_number + 1,
        trick_number=0,
        is_leaster=False,
        set_aside=dealt.set_aside,
        called_card=None,
    )
    return replace(
        new_state,
        log=_event(
            new_state,
            "ROUND_STARTED",
            roundNumber=new_state.round_number,
            dealer=players[dealer].id,
            seed=seed,
        ),
    )


def _pick(state: GameState, action: Pick, rules: RuleSet, rng: random.Random) -> GameState:
    seat = state.seat_of(action.player_id)
    player = state.players[seat]
    new_state = replace(
        state,
        players=_with_player(state, seat, is_picker=True, hand=player.hand + state.blind),
        blind=(),
        phase=Phase.BURYING,
    )
    return replace(new_state, log=_event(new_state, "PICKED_BLIND", action.player_id))


def _pass(state: GameState, action: Pass, rules: RuleSet, rng: random.Random) -> GameState:
    seat = state.seat_of(action.player_id)
    dealer = state.dealer_seat()
    log = _event(state, "PASSED_BLIND", action.player_id)
    nxt_seat = next_seat(seat, state.num_players)
    if nxt_seat == dealer:
        # The blind would come back around to the dealer: everyone has passed.
        first = state.players[first_to_act(dealer, state.num_players)].id
        new_state = replace(
            state, current_turn=first, phase=Phase.PLAYING, is_leaster=True, log=log
        )
        return replace(new_state, log=_event(new_state, "ALL_PASSED", action.player_id, isLeaster=True))
    nxt = state.players[nxt_seat].id
    return replace(state, current_turn=nxt, log=log)


def _bury(state: GameState, action: Bury, rules: RuleSet, rng: random.Random) -> GameState:
    seat = state.seat_of(action.player_id)
    picker = state.players[seat]
    if not picker.is_picker:
        raise IllegalActionError(f"{picker.id} is not the picker")
    cards = tuple(action.cards)
    if len(cards) != BURY_COUNT or len(set(cards)) != BURY_COUNT:
        raise IllegalActionError(f"must bury exactly {BURY_COUNT} distinct cards, got {list(cards)}")
    if any(c not in picker.hand for c in cards):
        raise IllegalActionError(f"cannot bury cards not in hand: {list(cards)}")

    players = _with_player(state, seat, hand=_remove_cards(picker.hand, cards))
    if state.num_players == 5:
        phase, turn = Phase.CALLING_PARTNER, picker.id
    else:
        phase = Phase.PLAYING
        turn = state.players[first_to_act(state.dealer_seat(), state.num_players)].id
    new_state = replace(state, players=players, buried=cards, phase=phase, current_turn=turn)
    return replace(
        new_state,
        log=_event(new_state, "BURIED_CARDS", picker.id, cards=cards_to_codes(cards)),
    )


def _call_partner(state: GameState, action: CallPartner, rules: RuleSet, rng: random.Random) -> GameState:
    seat = state.seat_of(action.player_id)
    picker = state.players[seat]
    if not picker.is_picker:
        raise IllegalActionError(f"{picker.id} is not the picker")
    if not state.has_player(action.partner_id):
        raise IllegalActionError(f"unknown partner {action.partner_id!r}")
    # Calling oneself means going alone.
    partner = None if action.partner_id == picker.id else action.partner_id
    first = state.players[first_to_act(state.dealer_seat(), state.num_players)].id
    new_state = replace(
        state,
        players=_with_player(state, seat, partner=partner),
        called_card=action.called_card,
        phase=Phase.PLAYING,
        current_turn=first,
    )
    return replace(
        new_state,
        log=_event(
            new_state,
            "CALLED_PARTNER",
            picker.id,
            partnerId=partner,
            calledCard=action.called_card.code if action.called_card is not None else None,
        ),
    )


def _play_card(state: GameState, action: PlayCard, rules: RuleSet, rng: random.Random) -> GameState:
    seat = state.seat_of(action.player_id)
    player = state.players[seat]
    card = action.card
    if not is_legal_play(card, player.hand, state.current_trick, state.lead_suit, rules.follow_trump):
        raise IllegalActionError(f"{card} is not a legal play for {player.id}")

    lead_suit = lead_suit_for(card) if not state.current_trick else state.lead_suit
    new_state = replace(
        state,
        players=_with_player(state, seat, hand=_remove_cards(player.hand, [card])),
        current_trick=state.current_trick + (card,),
        lead_suit=lead_suit,
        current_turn=state.players[next_seat(seat, state.num_players)].id,
    )
    return replace(new_state, log=_event(new_state, "PLAYED_CARD", player.id, card=card.code))


def _end_game(state: GameState, action: EndGame, rules: RuleSet, rng: random.Random) -> GameState:
    new_state = replace(state, phase=Phase.GAME_OVER)
    return replace(
        new_state,
        log=_event(
            new_state,
            "GAME_ENDED",
            finalScores=[{"id": p.id, "score": p.score} for p in state.players],
        ),
    )


# ---- Cascades ----


def _resolve_trick(state: GameState, rules: RuleSet) -> GameState:
    order = state.trick_order()
    winner = trick_winner(state.current_trick, state.lead_suit, order)
    seat = state.seat_of(winner)
    trick = state.current_trick
    players = _with_player(state, seat, tricks_won=state.players[seat].tricks_won + (trick,))
    new_state = replace(
        state,
        players=players,
        current_trick=(),
        lead_suit=None,
        current_turn=winner,
        trick_number=state.trick_number + 1,
    )
    logger.debug("Trick %d won by %s: %s", new_state.trick_number, winner, list(trick))
    return replace(
        new_state,
        log=_event(
            new_state,
            "TRICK_COMPLETED",
            winner,
            trickNumber=new_state.trick_number,
            cards=cards_to_codes(trick),
            points=points_in_cards(trick),
        ),
    )


def _finish_round(state: GameState, rules: RuleSet) -> GameState:
    score = score_round(state, rules.leaster_tie)
    result = game_result(state, score)
    deltas = score_deltas(state, score)
    n = state.num_players
    dealer = next_dealer(state.dealer_seat(), n)
    players = tuple(
        replace(
            p,
            score=p.score + deltas[p.id],
            is_dealer=(i == dealer),
            is_picker=False,
            partner=None,
            hand=(),
            tricks_won=(),
        )
        for i, p in enumerate(state.players)
    )
    logger.info(
        "Round %d scored: picker team %d, defenders %d, winner %s",
        state.round_number,
        score.picker_team_points,
        score.defender_team_points,
        score.winning_team.value if score.winning_team is not None else f"leaster:{score.leaster_winner}",
    )
    new_state = replace(
        state,
        players=players,
        current_turn=players[dealer].id,
        phase=Phase.SCORING,
        blind=(),
        buried=(),
        current_trick=(),
        lead_suit=None,
        trick_number=0,
        is_leaster=False,
        set_aside=(),
        called_card=None,
        results=state.results + (result,),
    )
    return replace(
        new_state,
        log=_event(
            new_state,
            "ROUND_COMPLETED",
            roundNumber=state.round_number,
            pickerTeamScore=score.picker_team_points,
            defenderTeamScore=score.defender_team_points,
            isPickerTeamWinner=score.winning_team == Team.PICKER,
            isLeaster=score.winning_team is None,
            leasterWinner=score.leaster_winner,
        ),
    )


def _next_cascade(state: GameState) -> Optional[Callable[[GameState, RuleSet], GameState]]:
    """The transition implied by ``state``, if any."""
    if state.phase != Phase.PLAYING:
        return None
    if len(state.current_trick) == state.num_players:
        return _resolve_trick
    if not state.current_trick and all(not p.hand for p in state.players):
        return _finish_round
    return None


def run_cascades(state: GameState, rules: RuleSet) -> GameState:
    step = _next_cascade(state)
    while step is not None:
        state = step(state, rules)
        step = _next_cascade(state)
    return state


# ---- Dispatch ----

_HANDLERS: Dict[type, Callable[..., GameState]] = {
    StartRound: _start_round,
    Pick: _pick,
    Pass: _pass,
    Bury: _bury,
    CallPartner: _call_partner,
    PlayCard: _play_card,
    EndGame: _end_game,
}

_VALID_PHASES: Dict[type, tuple[Phase, ...]] = {
    StartRound: (Phase.DEALING, Phase.SCORING),
    Pick: (Phase.PICKING,),
    Pass: (Phase.PICKING,),
    Bury: (Phase.BURYING,),
    CallPartner: (Phase.CALLING_PARTNER,),
    PlayCard: (Phase.PLAYING,),
    EndGame: (Phase.SCORING,),
}


def apply_action(
    state: GameState,
    action: Action,
    rules: RuleSet | None = None,
    rng: random.Random | None = None,
) -> GameState:
    """
    Apply ``action`` to ``state`` and any transitions it implies.

    Illegal actions leave the state untouched: the same object is returned, so callers can
    test ``new is state`` and retry with corrected input.
    """
    rules = rules or RuleSet()
    rng = rng or random.Random()
    handler = _HANDLERS.get(type(action))
    try:
        if handler is None:
            raise IllegalActionError(f"unknown action {action!r}")
        if state.phase not in _VALID_PHASES[type(action)]:
            raise IllegalActionError(f"{type(action).__name__} not allowed in {state.phase.value}")
        actor = actor_of(action)
        if actor is not None and actor != state.current_turn:
            raise IllegalActionError(f"not {actor}'s turn (waiting on {state.current_turn})")
        new_state = handler(state, action, rules, rng)
    except IllegalActionError as exc:
        logger.debug("Rejected %s: %s", type(action).__name__, exc)
        return state
    logger.debug("Applied %s -> %s", type(action).__name__, new_state.phase.value)
    return run_cascades(new_state, rules)


def legal_actions(state: GameState, player_id: str, rules: RuleSet | None = None) -> List[Action]:
    """Every action ``player_id`` may take right now (empty when it is not their turn)."""
    rules = rules or RuleSet()
    if state.phase in (Phase.DEALING, Phase.SCORING, Phase.GAME_OVER):
        return []
    if player_id != state.current_turn:
        return []
    player = state.player(player_id)
    if state.phase == Phase.PICKING:
        return [Pick(player_id), Pass(player_id)]
    if state.phase == Phase.BURYING:
        return [Bury(player_id, pair) for pair in itertools.combinations(player.hand, BURY_COUNT)]
    if state.phase == Phase.CALLING_PARTNER:
        return [CallPartner(player_id, p.id) for p in state.players]
    return [
        PlayCard(player_id, c)
        for c in legal_plays(player.hand, state.current_trick, state.lead_suit, rules.follow_trump)
    ]
