"""
Game and rule configuration.

``GameConfig`` is what the CLI and controller consume; ``RuleSet`` holds the rule choices
the engine needs at transition time. Both round-trip through plain JSON dicts.
"""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .scoring import LEASTER_TIE_EARLIEST_SEAT, LEASTER_TIE_RULES


@dataclass(frozen=True)
class RuleSet:
    """Rule choices left open by the base ruleset."""

    # Must a trump lead be followed with trump when the hand holds trump?
    follow_trump: bool = False
    leaster_tie: str = LEASTER_TIE_EARLIEST_SEAT

    def __post_init__(self) -> None:
        if self.leaster_tie not in LEASTER_TIE_RULES:
            raise ValueError(
                f"leaster_tie must be one of {list(LEASTER_TIE_RULES)}, got {self.leaster_tie!r}"
            )


@dataclass
class GameConfig:
    """Session configuration."""

    num_players: int = 5
    rounds_per_game: int = 5
    think_delay: float = 0.5  # seconds an AI seat "thinks" before acting
    save_dir: str = "~/.sheepshead"
    seed: Optional[int] = None
    rules: RuleSet = field(default_factory=RuleSet)

    def __post_init__(self) -> None:
        if not 3 <= self.num_players <= 5:
            raise ValueError(f"num_players must be 3-5, got {self.num_players}")
        if self.rounds_per_game < 1:
            raise ValueError("rounds_per_game must be at least 1")
        if self.think_delay < 0:
            raise ValueError("think_delay cannot be negative")


def config_to_dict(cfg: GameConfig) -> Dict[str, Any]:
    return asdict(cfg)


def config_from_dict(d: Dict[str, Any]) -> GameConfig:
    rules = d.get("rules") or {}
    seed = d.get("seed")
    return GameConfig(
        num_players=int(d.get("num_players", 5)),
        rounds_per_game=int(d.get("rounds_per_game", 5)),
        think_delay=float(d.get("think_delay", 0.5)),
        save_dir=str(d.get("save_dir", "~/.sheepshead")),
        seed=int(seed) if seed is not None else None,
        rules=RuleSet(
            follow_trump=bool(rules.get("follow_trump", False)),
            leaster_tie=str(rules.get("leaster_tie", LEASTER_TIE_EARLIEST_SEAT)),
        ),
    )


def load_config(path: Path | str) -> GameConfig:
    """Read a JSON config file; missing keys take their defaults."""
    with Path(path).open("r", encoding="utf-8") as f:
        return config_from_dict(json.load(f))


def save_config(cfg: GameConfig, path: Path | str) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(config_to_dict(cfg), f, indent=2)
