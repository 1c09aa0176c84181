import json

import pytest

from config.loader import apply_overrides, load_settings
from config.settings import (
    BatterySettings,
    ConfigurationError,
    NBackConfig,
    ReactionTimeConfig,
    StroopConfig,
)
from data.models import TestType


class TestLoadSettings:
    def test_defaults_without_file(self, tmp_path):
        settings = load_settings(tmp_path / "missing.json", environ={})
        assert settings == BatterySettings()

    def test_file_overrides(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(
            json.dumps(
                {
                    "reaction": {"rounds": 5, "max_delay_ms": 3000},
                    "stroop": {"words": ["RED", "BLUE"], "colors": ["red", "blue"]},
                    "seed": 99,
                }
            ),
            encoding="utf-8",
        )
        settings = load_settings(path, environ={})
        assert settings.reaction.rounds == 5
        assert settings.reaction.max_delay_ms == 3000
        assert settings.reaction.min_delay_ms == 800
        assert settings.stroop.words == ("RED", "BLUE")
        assert settings.seed == 99

    def test_broken_file_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_settings(path, environ={}) == BatterySettings()

    def test_environment_overrides(self, tmp_path):
        settings = load_settings(
            None, environ={"CLARITY_SEED": "12", "CLARITY_RESULTS_PATH": str(tmp_path / "r.jsonl")}
        )
        assert settings.seed == 12
        assert settings.results_path == str(tmp_path / "r.jsonl")

    def test_bad_seed_is_ignored(self):
        assert load_settings(None, environ={"CLARITY_SEED": "abc"}).seed is None

    def test_unknown_keys_are_skipped(self):
        settings = apply_overrides(BatterySettings(), {"nback": {"n": 3, "speed": "fast"}})
        assert settings.nback.n == 3


class TestValidation:
    def test_defaults_are_valid(self):
        settings = BatterySettings()
        for test_type in TestType:
            settings.for_test(test_type).validate()

    def test_long_wait_preset(self):
        config = ReactionTimeConfig.long_wait()
        assert (config.min_delay_ms, config.max_delay_ms) == (2000, 5000)

    def test_inverted_delay_range(self):
        with pytest.raises(ConfigurationError):
            ReactionTimeConfig(min_delay_ms=2000, max_delay_ms=1000).validate()

    def test_match_probability_range(self):
        with pytest.raises(ConfigurationError):
            NBackConfig(match_probability=1.5).validate()

    def test_single_letter_alphabet(self):
        with pytest.raises(ConfigurationError):
            NBackConfig(letters=("A",)).validate()


class TestInvalidSections:
    def _load(self, tmp_path, payload):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return load_settings(path, environ={})

    def test_inverted_delay_range_keeps_defaults(self, tmp_path):
        settings = self._load(tmp_path, {"reaction": {"min_delay_ms": 3000}})
        assert settings.reaction == ReactionTimeConfig()
        settings.reaction.validate()

    def test_string_count_keeps_defaults(self, tmp_path):
        settings = self._load(tmp_path, {"stroop": {"total_trials": "20"}})
        assert settings.stroop == StroopConfig()
        settings.stroop.validate()

    def test_bad_section_does_not_spoil_good_ones(self, tmp_path):
        settings = self._load(
            tmp_path,
            {"nback": {"match_probability": 2}, "memory": {"start_length": 4}},
        )
        assert settings.nback == NBackConfig()
        assert settings.memory.start_length == 4

    def test_wrong_item_types_in_a_list(self, tmp_path):
        settings = self._load(tmp_path, {"stroop": {"colors": [1, 2, 3, 4]}})
        assert settings.stroop == StroopConfig()

    def test_int_accepted_for_probability(self, tmp_path):
        settings = self._load(tmp_path, {"flexibility": {"switch_rate": 1}})
        assert settings.flexibility.switch_rate == 1.0

    def test_optional_window_accepts_int(self, tmp_path):
        settings = self._load(tmp_path, {"reaction": {"response_window_ms": 1500}})
        assert settings.reaction.response_window_ms == 1500

    def test_boolean_is_not_a_count(self, tmp_path):
        settings = self._load(tmp_path, {"reaction": {"rounds": True}})
        assert settings.reaction.rounds == 8


class TestStroopColorLimit:
    def test_too_many_colors(self):
        colors = tuple(f"c{i}" for i in range(10))
        words = tuple(c.upper() for c in colors)
        with pytest.raises(ConfigurationError):
            StroopConfig(words=words, colors=colors).validate()
