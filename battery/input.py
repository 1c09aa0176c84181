from collections import deque
from typing import Any, Deque, Dict, Optional, Sequence

import pygame

from battery.tasks.n_back import MATCH, NO_MATCH
from battery.tasks.reaction_time import STIMULUS_GO
from battery.trial_generator import SIDE_LEFT, SIDE_RIGHT
from config.settings import StroopConfig
from data.models import TestType


def color_keys(colors: Sequence[str]) -> Dict[int, str]:
    """
    Answer keys for a color set: digit 1..n by position, plus the color's
    initial when no other color shares it.
    """
    keys: Dict[int, str] = {}
    for position, color in enumerate(colors, start=1):
        keys[getattr(pygame, f"K_{position}")] = color
        keys[getattr(pygame, f"K_KP{position}")] = color
    initials = [c[:1].lower() for c in colors]
    for color, initial in zip(colors, initials):
        key = getattr(pygame, f"K_{initial}", None)
        if key is not None and initial.isalpha() and initials.count(initial) == 1:
            keys[key] = color
    return keys


SELECT_KEYS = {
    pygame.K_1: TestType.REACTION_TIME,
    pygame.K_2: TestType.WORKING_MEMORY,
    pygame.K_3: TestType.COGNITIVE_FLEXIBILITY,
    pygame.K_4: TestType.STROOP,
    pygame.K_5: TestType.N_BACK,
}

DIGIT_KEYS = {getattr(pygame, f"K_{d}"): d for d in range(1, 10)}
DIGIT_KEYS.update({getattr(pygame, f"K_KP{d}"): d for d in range(1, 10)})

COLOR_KEYS = color_keys(StroopConfig().colors)

MATCH_KEYS = {
    pygame.K_m: MATCH,
    pygame.K_n: NO_MATCH,
}

SIDE_KEYS = {
    pygame.K_f: SIDE_LEFT,
    pygame.K_LEFT: SIDE_LEFT,
    pygame.K_j: SIDE_RIGHT,
    pygame.K_RIGHT: SIDE_RIGHT,
}


def response_for_key(test_type: TestType, key: int, config=None) -> Optional[Any]:
    """
    Translate a key press into the response the running test expects.

    Stroop keys follow the configured colors, so config should be the
    running session's configuration.
    """
    if test_type == TestType.REACTION_TIME:
        return STIMULUS_GO if key == pygame.K_SPACE else None
    if test_type == TestType.STROOP:
        if config is None:
            return COLOR_KEYS.get(key)
        return color_keys(config.colors).get(key)
    if test_type == TestType.N_BACK:
        return MATCH_KEYS.get(key)
    if test_type == TestType.WORKING_MEMORY:
        return DIGIT_KEYS.get(key)
    if test_type == TestType.COGNITIVE_FLEXIBILITY:
        return SIDE_KEYS.get(key)
    return None


class InputManager:
    """
    Buffer between pygame events and the battery.

    Key presses are queued in arrival order so several digits typed within
    one frame all reach the Working Memory test.
    """

    def __init__(self) -> None:
        self._keys: Deque[int] = deque()

    def process_pygame_event(self, event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        self._keys.append(event.key)

    def poll_key(self) -> Optional[int]:
        if not self._keys:
            return None
        return self._keys.popleft()

    def reset(self) -> None:
        self._keys.clear()
