import random
from dataclasses import dataclass
from typing import List, Tuple

from config.settings import FlexibilityConfig, NBackConfig, StroopConfig
from data.models import TestType, Trial


RULE_NUMBER = "number"
RULE_SHAPE = "shape"

SIDE_LEFT = "left"
SIDE_RIGHT = "right"


@dataclass(frozen=True)
class StroopStimulus:
    word: str
    display_color: str


@dataclass(frozen=True)
class NBackStimulus:
    letter: str
    is_match: bool


@dataclass(frozen=True)
class FlexibilityStimulus:
    rule: str
    value: object


def sample_onset_delay(rng: random.Random, min_delay_ms: int, max_delay_ms: int) -> int:
    return rng.randint(min_delay_ms, max_delay_ms)


def generate_stroop(config: StroopConfig, rng: random.Random) -> List[Trial]:
    trials: List[Trial] = []
    for i in range(config.total_trials):
        word_index = rng.randrange(len(config.words))
        color_index = rng.randrange(len(config.colors))
        # the ink must never name the word's own color
        while config.colors[color_index] == config.colors[word_index]:
            color_index = rng.randrange(len(config.colors))
        stimulus = StroopStimulus(word=config.words[word_index], display_color=config.colors[color_index])
        trials.append(Trial(index=i, stimulus=stimulus, expected_response=stimulus.display_color, round_index=i))
    return trials


def generate_n_back(config: NBackConfig, rng: random.Random) -> List[Trial]:
    letters: List[str] = []
    trials: List[Trial] = []
    n = config.n
    for i in range(config.total_trials):
        is_match = False
        if i >= n and rng.random() < config.match_probability:
            letter = letters[i - n]
            is_match = True
        else:
            letter = rng.choice(config.letters)
            if i >= n:
                while letter == letters[i - n]:
                    letter = rng.choice(config.letters)
        letters.append(letter)
        stimulus = NBackStimulus(letter=letter, is_match=is_match)
        trials.append(Trial(index=i, stimulus=stimulus, expected_response=is_match, round_index=i))
    return trials


def generate_digit_sequence(rng: random.Random, length: int) -> Tuple[int, ...]:
    return tuple(rng.randint(1, 9) for _ in range(length))


def flexibility_answer(rule: str, value: object, shapes: Tuple[str, str]) -> str:
    if rule == RULE_NUMBER:
        return SIDE_RIGHT if int(value) % 2 == 0 else SIDE_LEFT
    if rule == RULE_SHAPE:
        return SIDE_LEFT if value == shapes[0] else SIDE_RIGHT
    raise ValueError(f"Unsupported rule: {rule}")


def generate_flexibility(config: FlexibilityConfig, rng: random.Random) -> List[Trial]:
    trials: List[Trial] = []
    current_rule = rng.choice((RULE_NUMBER, RULE_SHAPE))

    for i in range(config.total_trials):
        if i > 0 and rng.random() < config.switch_rate:
            current_rule = RULE_SHAPE if current_rule == RULE_NUMBER else RULE_NUMBER

        if current_rule == RULE_NUMBER:
            value = rng.randint(config.min_number, config.max_number)
        else:
            value = rng.choice(config.shapes)

        is_switch = i > 0 and current_rule != trials[i - 1].stimulus.rule
        trials.append(
            Trial(
                index=i,
                stimulus=FlexibilityStimulus(rule=current_rule, value=value),
                expected_response=flexibility_answer(current_rule, value, config.shapes),
                round_index=i,
                is_switch=is_switch,
            )
        )
    return trials


def generate(test_type: TestType, config, rng: random.Random) -> List[Trial]:
    """
    Pre-planned trial sequence for a test.

    Reaction Time and Working Memory build their trials while the session
    runs (random onset delay per trial, fresh digits per round), so they get
    an empty plan here.
    """
    if test_type == TestType.STROOP:
        return generate_stroop(config, rng)
    if test_type == TestType.N_BACK:
        return generate_n_back(config, rng)
    if test_type == TestType.COGNITIVE_FLEXIBILITY:
        return generate_flexibility(config, rng)
    if test_type in (TestType.REACTION_TIME, TestType.WORKING_MEMORY):
        return []
    raise ValueError(f"Unsupported test type: {test_type}")
