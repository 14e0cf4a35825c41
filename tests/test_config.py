"""Tests for configuration, rules and rosters."""
from pathlib import Path

import pytest

from sheepshead.config import GameConfig, RuleSet, config_from_dict, config_to_dict, load_config, save_config
from sheepshead.roster import RosterEntry, build_roster, validate_roster


def test_defaults():
    cfg = GameConfig()
    assert cfg.num_players == 5
    assert cfg.rules == RuleSet()
    assert not cfg.rules.follow_trump


@pytest.mark.parametrize(
    "kwargs",
    [{"num_players": 2}, {"num_players": 6}, {"rounds_per_game": 0}, {"think_delay": -1}],
)
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        GameConfig(**kwargs)


def test_save_and_load(tmp_path: Path):
    cfg = GameConfig(num_players=3, rounds_per_game=2, seed=4, rules=RuleSet(follow_trump=True))
    path = tmp_path / "conf" / "sheepshead.json"
    save_config(cfg, path)
    assert load_config(path) == cfg


def test_missing_keys_take_defaults():
    cfg = config_from_dict({"num_players": 4})
    assert cfg.num_players == 4
    assert cfg.rounds_per_game == GameConfig().rounds_per_game
    assert config_from_dict(config_to_dict(cfg)) == cfg


def test_build_roster():
    roster = build_roster(4, human_name="Ann")
    assert [e.id for e in roster] == ["human", "ai1", "ai2", "ai3"]
    assert roster[0].is_human and roster[0].name == "Ann"
    assert not any(e.is_human for e in build_roster(3, human_name=None))


def test_validate_roster():
    with pytest.raises(ValueError):
        build_roster(6)
    with pytest.raises(ValueError):
        validate_roster([RosterEntry("a", "A", True), RosterEntry("a", "B"), RosterEntry("c", "C")])
    with pytest.raises(ValueError):
        validate_roster([RosterEntry("a", "A"), RosterEntry("b", "B"), RosterEntry("c", "C")])
    validate_roster([RosterEntry("a", "A"), RosterEntry("b", "B"), RosterEntry("c", "C")], require_human=False)


def test_unknown_leaster_tie_rule_fails_at_load(tmp_path: Path):
    with pytest.raises(ValueError):
        RuleSet(leaster_tie="split")
    with pytest.raises(ValueError):
        config_from_dict({"rules": {"leaster_tie": "split"}})
    path = tmp_path / "bad.json"
    path.write_text('{"rules": {"leaster_tie": "split"}}', encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)
