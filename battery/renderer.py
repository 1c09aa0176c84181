from typing import List, Optional, Tuple

import pygame

from battery.registry import TEST_REGISTRY
from battery.state_machine import (
    PHASE_FEEDBACK,
    PHASE_REVEAL,
    PHASE_STIMULUS,
    PHASE_WAITING,
    TrialLoop,
)
from battery.trial_generator import RULE_NUMBER
from data.models import NormalizedResult, TestType


class Renderer:
    """
    Draws whatever the controller is in. Holds no test state and never
    touches the engine beyond reading it.
    """

    def __init__(self, screen: pygame.Surface) -> None:
        self.screen = screen
        self.w, self.h = screen.get_size()

        self.font_big = pygame.font.SysFont(None, 72)
        self.font_mid = pygame.font.SysFont(None, 42)
        self.font_small = pygame.font.SysFont(None, 28)

        self.center = (self.w // 2, self.h // 2)
        self.bg_color = (15, 15, 20)
        self.ui_color = (230, 230, 230)
        self.wait_color = (255, 107, 107)
        self.ready_color = (46, 204, 113)
        self.color_map = {
            "red": (255, 107, 107),
            "blue": (78, 205, 196),
            "green": (149, 225, 211),
            "yellow": (255, 230, 109),
        }

    def clear(self, color: Optional[Tuple[int, int, int]] = None) -> None:
        self.screen.fill(color or self.bg_color)

    def present(self) -> None:
        pygame.display.flip()

    def draw_selection(self, last_record: Optional[dict] = None) -> None:
        self.clear()
        self._text("Mental Clarity Tests", self.font_big, self.h * 0.15)
        if last_record:
            self._text(
                f"Last: {last_record.get('testName', '')}  {last_record.get('score', 0)}"
                f"  ({last_record.get('tier', '')})",
                self.font_small,
                self.h * 0.23,
            )
        y = self.h * 0.32
        for number, (test_type, entry) in enumerate(TEST_REGISTRY.items(), start=1):
            self._text(f"{number}. {entry['label']}", self.font_mid, y)
            self._text(entry["description"], self.font_small, y + 32)
            y += 80
        self._text("Press 1-5 to start, Esc to close", self.font_small, self.h * 0.92)

    def draw_test(self, engine: TrialLoop) -> None:
        test_type = engine.session.test_type
        phase = engine.phase
        trial = engine.current_trial

        if test_type == TestType.REACTION_TIME:
            self.clear(self.ready_color if phase == PHASE_STIMULUS else self.wait_color)
            label = "Tap!" if phase == PHASE_STIMULUS else "Wait for green..."
            self._text(label, self.font_big, self.h * 0.5)
            self._text("SPACE to tap", self.font_small, self.h * 0.9)
        else:
            self.clear()
            if trial is not None and phase in (PHASE_REVEAL, PHASE_STIMULUS, PHASE_FEEDBACK):
                self._draw_stimulus(test_type, phase, trial.stimulus, engine)
            self._text(self._hint(test_type), self.font_small, self.h * 0.9)

        self._text(
            f"{TEST_REGISTRY[test_type]['label']}  |  trial {len(engine.session.trials)}",
            self.font_small,
            24,
        )

    def draw_results(self, result: NormalizedResult, tier: str, feedback: str) -> None:
        self.clear()
        self._text("Test Complete!", self.font_big, self.h * 0.15)
        self._text(result.test_name, self.font_mid, self.h * 0.27)
        self._text("Your Clarity Score", self.font_small, self.h * 0.38)
        self._text(str(result.score), self.font_big, self.h * 0.46)
        lines: List[str] = []
        if result.average_reaction > 0:
            lines.append(f"Average reaction: {round(result.average_reaction)} ms")
        if result.accuracy > 0:
            lines.append(f"Accuracy: {result.accuracy}%")
        lines.append(f"Performance level: {tier}")
        lines.append(feedback)
        y = self.h * 0.58
        for line in lines:
            self._text(line, self.font_mid, y)
            y += 44
        self._text("R - test again, Esc - done", self.font_small, self.h * 0.92)

    def _draw_stimulus(self, test_type: TestType, phase: str, stimulus, engine: TrialLoop) -> None:
        if test_type == TestType.STROOP:
            color = self._ink(stimulus.display_color)
            self._text(stimulus.word, self.font_big, self.h * 0.45, color)
        elif test_type == TestType.N_BACK:
            if phase != PHASE_FEEDBACK:
                self._text(stimulus.letter, self.font_big, self.h * 0.45)
        elif test_type == TestType.WORKING_MEMORY:
            if phase == PHASE_REVEAL:
                self._text("  ".join(str(d) for d in stimulus), self.font_big, self.h * 0.45)
            elif phase == PHASE_STIMULUS:
                typed = "  ".join(str(d) for d in engine.strategy.entry) or "Enter the sequence"
                self._text(typed, self.font_mid, self.h * 0.45)
        elif test_type == TestType.COGNITIVE_FLEXIBILITY:
            if stimulus.rule == RULE_NUMBER:
                rule_text = "Numbers: odd -> left, even -> right"
                self._text(str(stimulus.value), self.font_big, self.h * 0.45)
            else:
                rule_text = "Shapes: circle -> left, square -> right"
                self._draw_shape(stimulus.value)
            self._text(rule_text, self.font_mid, self.h * 0.2)

    def _ink(self, name: str) -> Tuple[int, int, int]:
        if name in self.color_map:
            return self.color_map[name]
        try:
            color = pygame.Color(name)
        except ValueError:
            return self.ui_color
        return (color.r, color.g, color.b)

    def _draw_shape(self, shape: str) -> None:
        size = min(self.w, self.h) // 8
        if shape == "circle":
            pygame.draw.circle(self.screen, self.ui_color, self.center, size)
        else:
            rect = pygame.Rect(0, 0, size * 2, size * 2)
            rect.center = self.center
            pygame.draw.rect(self.screen, self.ui_color, rect)

    def _hint(self, test_type: TestType) -> str:
        return {
            TestType.STROOP: "Color initial or 1-9 - pick the ink color",
            TestType.N_BACK: "M - match, N - no match",
            TestType.WORKING_MEMORY: "1-9 to enter, Backspace to clear",
            TestType.COGNITIVE_FLEXIBILITY: "F / Left - left, J / Right - right",
        }.get(test_type, "")

    def _text(self, text: str, font: pygame.font.Font, y: float, color=None) -> None:
        surf = font.render(text, True, color or self.ui_color)
        rect = surf.get_rect(center=(self.center[0], int(y)))
        self.screen.blit(surf, rect)
