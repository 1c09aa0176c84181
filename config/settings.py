from dataclasses import dataclass, field
from typing import Optional, Tuple


class ConfigurationError(ValueError):
    pass


@dataclass(frozen=True)
class WindowConfig:
    width: int = 1280
    height: int = 720
    fps: int = 60
    title: str = "Mental Clarity"


@dataclass(frozen=True)
class ReactionTimeConfig:
    rounds: int = 8
    min_delay_ms: int = 800
    max_delay_ms: int = 2500
    feedback_ms: int = 0
    response_window_ms: Optional[int] = None

    @classmethod
    def long_wait(cls) -> "ReactionTimeConfig":
        return cls(min_delay_ms=2000, max_delay_ms=5000)

    def validate(self) -> None:
        if self.rounds < 1:
            raise ConfigurationError("rounds must be at least 1")
        if self.min_delay_ms < 0:
            raise ConfigurationError("min_delay_ms must be non-negative")
        if self.min_delay_ms > self.max_delay_ms:
            raise ConfigurationError(
                f"min_delay_ms ({self.min_delay_ms}) is greater than max_delay_ms ({self.max_delay_ms})"
            )
        _check_window(self.response_window_ms)
        _check_non_negative("feedback_ms", self.feedback_ms)


@dataclass(frozen=True)
class StroopConfig:
    total_trials: int = 20
    words: Tuple[str, ...] = ("RED", "BLUE", "GREEN", "YELLOW")
    colors: Tuple[str, ...] = ("red", "blue", "green", "yellow")
    response_window_ms: Optional[int] = None

    def validate(self) -> None:
        _check_count("total_trials", self.total_trials)
        if len(self.words) != len(self.colors):
            raise ConfigurationError("every color word needs a matching display color")
        if len(set(self.colors)) < 2:
            raise ConfigurationError("at least two distinct colors are needed for word/color mismatch")
        if len(self.colors) > 9:
            raise ConfigurationError("at most 9 colors fit on the digit answer keys")
        _check_window(self.response_window_ms)


@dataclass(frozen=True)
class NBackConfig:
    total_trials: int = 25
    n: int = 2
    letters: Tuple[str, ...] = ("A", "B", "C", "D", "E", "F", "G", "H")
    match_probability: float = 0.3
    display_ms: int = 2000
    gap_ms: int = 200

    def validate(self) -> None:
        _check_count("total_trials", self.total_trials)
        _check_count("n", self.n)
        if len(set(self.letters)) < 2:
            raise ConfigurationError("at least two distinct letters are needed to avoid accidental matches")
        _check_probability("match_probability", self.match_probability)
        _check_count("display_ms", self.display_ms)
        _check_non_negative("gap_ms", self.gap_ms)


@dataclass(frozen=True)
class WorkingMemoryConfig:
    start_length: int = 3
    max_mistakes: int = 2
    fade_ms: int = 300
    base_display_ms: int = 2000
    per_digit_ms: int = 500
    round_pause_ms: int = 1000
    max_sequence_length: Optional[int] = None

    def reveal_ms(self, length: int) -> int:
        return self.fade_ms + self.base_display_ms + self.per_digit_ms * length + self.fade_ms

    def validate(self) -> None:
        _check_count("start_length", self.start_length)
        _check_count("max_mistakes", self.max_mistakes)
        _check_non_negative("fade_ms", self.fade_ms)
        _check_non_negative("base_display_ms", self.base_display_ms)
        _check_non_negative("per_digit_ms", self.per_digit_ms)
        _check_non_negative("round_pause_ms", self.round_pause_ms)
        if self.max_sequence_length is not None and self.max_sequence_length < self.start_length:
            raise ConfigurationError("max_sequence_length must not be below start_length")


@dataclass(frozen=True)
class FlexibilityConfig:
    total_trials: int = 20
    switch_rate: float = 0.5
    min_number: int = 1
    max_number: int = 20
    shapes: Tuple[str, str] = ("circle", "square")
    response_window_ms: Optional[int] = None

    def validate(self) -> None:
        _check_count("total_trials", self.total_trials)
        _check_probability("switch_rate", self.switch_rate)
        if self.min_number > self.max_number:
            raise ConfigurationError("min_number is greater than max_number")
        if len(self.shapes) != 2 or self.shapes[0] == self.shapes[1]:
            raise ConfigurationError("shape rule needs exactly two distinct shapes")
        _check_window(self.response_window_ms)


@dataclass(frozen=True)
class BatterySettings:
    reaction: ReactionTimeConfig = field(default_factory=ReactionTimeConfig)
    stroop: StroopConfig = field(default_factory=StroopConfig)
    nback: NBackConfig = field(default_factory=NBackConfig)
    memory: WorkingMemoryConfig = field(default_factory=WorkingMemoryConfig)
    flexibility: FlexibilityConfig = field(default_factory=FlexibilityConfig)
    seed: Optional[int] = None
    results_path: str = "data/clarity_results.jsonl"

    def for_test(self, test_type):
        return getattr(self, test_type.value)


def _check_count(name: str, value: int) -> None:
    if value < 1:
        raise ConfigurationError(f"{name} must be at least 1, got {value}")


def _check_non_negative(name: str, value: int) -> None:
    if value < 0:
        raise ConfigurationError(f"{name} must be non-negative, got {value}")


def _check_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be within [0, 1], got {value}")


def _check_window(value: Optional[int]) -> None:
    if value is not None and value < 1:
        raise ConfigurationError(f"response_window_ms must be positive, got {value}")
