"""
Game state, stats and history serialization plus the storage collaborator.

States are exported to JSON-compatible dicts (cards as compact codes such as "QC") and
restored only if they pass the engine invariants. Storages are best-effort: a missing or
unparseable entry loads as None, and save failures are logged rather than raised.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from .deck import Card, Suit, cards_from_codes, cards_to_codes
from .state import GameEvent, GameResult, GameState, InvalidStateError, Phase, Player, validate_state
from .stats import PlayerStats, stats_from_dict, stats_to_dict

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

GAME_STATE_KEY = "sheepshead_game_state"
PLAYER_STATS_KEY = "sheepshead_player_stats"
GAME_HISTORY_KEY = "sheepshead_game_history"
ALL_KEYS = (GAME_STATE_KEY, PLAYER_STATS_KEY, GAME_HISTORY_KEY)


class Storage(Protocol):
    def save(self, key: str, value: Any) -> None:
        """Persist a JSON-compatible value under ``key``."""

    def load(self, key: str) -> Optional[Any]:
        """Return the stored value, or None when absent or unreadable."""

    def clear(self, key: str) -> None:
        """Forget ``key``."""


class JsonFileStorage:
    """One ``<key>.json`` file per key inside ``directory``."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        return self.directory / f"{Path(key).name}.json"

    def save(self, key: str, value: Any) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(value, f, indent=2)
        tmp.replace(path)

    def load(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable %s: %s", path, exc)
            return None

    def clear(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()


class MemoryStorage:
    """In-process storage holding serialized JSON text (so values are copied, not shared)."""

    def __init__(self) -> None:
        self.data: Dict[str, str] = {}

    def save(self, key: str, value: Any) -> None:
        self.data[key] = json.dumps(value)

    def load(self, key: str) -> Optional[Any]:
        raw = self.data.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            logger.warning("Ignoring unreadable %s: %s", key, exc)
            return None

    def clear(self, key: str) -> None:
        self.data.pop(key, None)


# ---- GameState <-> dict ----


def _player_to_dict(p: Player) -> Dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "is_human": p.is_human,
        "hand": cards_to_codes(p.hand),
        "score": p.score,
        "is_dealer": p.is_dealer,
        "is_picker": p.is_picker,
        "partner": p.partner,
        "tricks_won": [cards_to_codes(t) for t in p.tricks_won],
    }


def _player_from_dict(d: Dict[str, Any]) -> Player:
    return Player(
        id=str(d["id"]),
        name=str(d["name"]),
        is_human=bool(d.get("is_human", False)),
        hand=cards_from_codes(d.get("hand", [])),
        score=int(d.get("score", 0)),
        is_dealer=bool(d.get("is_dealer", False)),
        is_picker=bool(d.get("is_picker", False)),
        partner=d.get("partner"),
        tricks_won=tuple(cards_from_codes(t) for t in d.get("tricks_won", [])),
    )


def _event_to_dict(e: GameEvent) -> Dict[str, Any]:
    return {"type": e.type, "player_id": e.player_id, "timestamp": e.timestamp, "data": dict(e.data)}


def _event_from_dict(d: Dict[str, Any]) -> GameEvent:
    return GameEvent(
        type=str(d["type"]),
        player_id=str(d.get("player_id", "")),
        timestamp=float(d.get("timestamp", 0.0)),
        data=dict(d.get("data", {})),
    )


def result_to_dict(r: GameResult) -> Dict[str, Any]:
    return {
        "game_id": r.game_id,
        "round_number": r.round_number,
        "date_played": r.date_played,
        "players": list(r.players),
        "picker": r.picker,
        "partner": r.partner,
        "picker_team_score": r.picker_team_score,
        "defender_team_score": r.defender_team_score,
        "is_leaster": r.is_leaster,
        "leaster_winner": r.leaster_winner,
        "is_doubled": r.is_doubled,
        "is_solo": r.is_solo,
    }


def result_from_dict(d: Dict[str, Any]) -> GameResult:
    return GameResult(
        game_id=str(d["game_id"]),
        round_number=int(d.get("round_number", 0)),
        date_played=str(d.get("date_played", "")),
        players=tuple(d.get("players", [])),
        picker=d.get("picker"),
        partner=d.get("partner"),
        picker_team_score=int(d.get("picker_team_score", 0)),
        defender_team_score=int(d.get("defender_team_score", 0)),
        is_leaster=bool(d.get("is_leaster", False)),
        leaster_winner=d.get("leaster_winner"),
        is_doubled=bool(d.get("is_doubled", False)),
        is_solo=bool(d.get("is_solo", False)),
    )


def state_to_dict(state: GameState) -> Dict[str, Any]:
    """Serialize a GameState to a JSON-compatible dict."""
    return {
        "schema_version": SCHEMA_VERSION,
        "game_id": state.game_id,
        "players": [_player_to_dict(p) for p in state.players],
        "current_turn": state.current_turn,
        "phase": state.phase.value,
        "blind": cards_to_codes(state.blind),
        "buried": cards_to_codes(state.buried),
        "current_trick": cards_to_codes(state.current_trick),
        "lead_suit": state.lead_suit.name if state.lead_suit is not None else None,
        "round_number": state.round_number,
        "trick_number": state.trick_number,
        "is_leaster": state.is_leaster,
        "set_aside": cards_to_codes(state.set_aside),
        "called_card": state.called_card.code if state.called_card is not None else None,
        "results": [result_to_dict(r) for r in state.results],
        "log": [_event_to_dict(e) for e in state.log],
    }


def state_from_dict(d: Dict[str, Any]) -> GameState:
    """
    Deserialize and validate a GameState.

    Raises:
        InvalidStateError: wrong schema version, missing fields, bad values, or a state
            that breaks the card/seat invariants.
    """
    if d.get("schema_version") != SCHEMA_VERSION:
        raise InvalidStateError(f"unsupported schema_version {d.get('schema_version')!r}")
    try:
        lead = d.get("lead_suit")
        called = d.get("called_card")
        state = GameState(
            game_id=str(d["game_id"]),
            players=tuple(_player_from_dict(p) for p in d["players"]),
            current_turn=str(d["current_turn"]),
            phase=Phase(d["phase"]),
            blind=cards_from_codes(d.get("blind", [])),
            buried=cards_from_codes(d.get("buried", [])),
            current_trick=cards_from_codes(d.get("current_trick", [])),
            lead_suit=Suit[lead] if lead is not None else None,
            round_number=int(d.get("round_number", 0)),
            trick_number=int(d.get("trick_number", 0)),
            is_leaster=bool(d.get("is_leaster", False)),
            set_aside=cards_from_codes(d.get("set_aside", [])),
            called_card=Card.from_code(called) if called is not None else None,
            results=tuple(result_from_dict(r) for r in d.get("results", [])),
            log=tuple(_event_from_dict(e) for e in d.get("log", [])),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise InvalidStateError(f"malformed game state: {exc}") from exc
    return validate_state(state)


def state_to_json(state: GameState) -> str:
    return json.dumps(state_to_dict(state), indent=2)


def state_from_json(s: str) -> GameState:
    try:
        data = json.loads(s)
    except ValueError as exc:
        raise InvalidStateError(f"unparseable game state: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidStateError("game state must be a JSON object")
    return state_from_dict(data)


# ---- Storage helpers ----


def save_game_state(storage: Storage, state: GameState) -> bool:
    """Best-effort save; returns False (and logs) on failure."""
    try:
        storage.save(GAME_STATE_KEY, state_to_dict(state))
    except Exception:
        logger.exception("Failed to save game state")
        return False
    return True


def load_game_state(storage: Storage) -> Optional[GameState]:
    """The saved game, or None when absent, corrupt, or failing the invariants."""
    try:
        data = storage.load(GAME_STATE_KEY)
    except Exception:
        logger.exception("Failed to load game state")
        return None
    if data is None:
        return None
    if not isinstance(data, dict):
        logger.warning("Discarding saved game state: not a JSON object")
        return None
    try:
        return state_from_dict(data)
    except InvalidStateError as exc:
        logger.warning("Discarding saved game state: %s", exc)
        return None


def save_player_stats(storage: Storage, stats: Dict[str, PlayerStats]) -> bool:
    try:
        storage.save(PLAYER_STATS_KEY, [stats_to_dict(s) for s in stats.values()])
    except Exception:
        logger.exception("Failed to save player stats")
        return False
    return True


def load_player_stats(storage: Storage) -> Dict[str, PlayerStats]:
    data = storage.load(PLAYER_STATS_KEY)
    if not isinstance(data, list):
        return {}
    stats: Dict[str, PlayerStats] = {}
    for entry in data:
        try:
            s = stats_from_dict(entry)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed stats entry: %s", exc)
            continue
        stats[s.player_id] = s
    return stats


def load_game_history(storage: Storage) -> List[GameResult]:
    data = storage.load(GAME_HISTORY_KEY)
    if not isinstance(data, list):
        return []
    history: List[GameResult] = []
    for entry in data:
        try:
            history.append(result_from_dict(entry))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed history entry: %s", exc)
    return history


def append_game_history(storage: Storage, results: List[GameResult]) -> bool:
    history = load_game_history(storage) + list(results)
    try:
        storage.save(GAME_HISTORY_KEY, [result_to_dict(r) for r in history])
    except Exception:
        logger.exception("Failed to save game history")
        return False
    return True


def clear_game_data(storage: Storage) -> None:
    for key in ALL_KEYS:
        try:
            storage.clear(key)
        except OSError as exc:
            logger.warning("Failed to clear %s: %s", key, exc)


__all__ = [
    "SCHEMA_VERSION",
    "GAME_STATE_KEY",
    "PLAYER_STATS_KEY",
    "GAME_HISTORY_KEY",
    "Storage",
    "JsonFileStorage",
    "MemoryStorage",
    "state_to_dict",
    "state_from_dict",
    "state_to_json",
    "state_from_json",
    "save_game_state",
    "load_game_state",
    "save_player_stats",
    "load_player_stats",
    "load_game_history",
    "append_game_history",
    "clear_game_data",
]
