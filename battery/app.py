import logging
import time

import pygame

from battery.controller import STATUS_COMPLETED, STATUS_SELECTING, STATUS_TAKING, BatteryController
from battery.input import SELECT_KEYS, InputManager, response_for_key
from battery.renderer import Renderer
from battery.scheduler import FrameScheduler
from battery.scoring import feedback_message
from config.settings import BatterySettings, ConfigurationError, WindowConfig
from data.logger import JsonlLogger
from data.models import NormalizedResult

logger = logging.getLogger(__name__)


class BatteryApp:
    """Desktop host: pygame loop around a BatteryController."""

    def __init__(self, window: WindowConfig, settings: BatterySettings) -> None:
        pygame.init()
        self.screen = pygame.display.set_mode((window.width, window.height))
        pygame.display.set_caption(window.title)
        self.clock = pygame.time.Clock()
        self.window = window

        self.input = InputManager()
        self.renderer = Renderer(self.screen)
        self.scheduler = FrameScheduler(start_ms=pygame.time.get_ticks(), fire_at_due_time=False)
        self.results_logger = JsonlLogger(settings.results_path)
        self.session_id = f"s{int(time.time())}"
        self.last_record = self.results_logger.latest()
        self.controller = BatteryController(
            self.scheduler,
            on_test_complete=self._on_test_complete,
            settings=settings,
        )
        self.running = True

    def run(self) -> None:
        while self.running:
            self.clock.tick(self.window.fps)
            self.scheduler.update(pygame.time.get_ticks())

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                self.input.process_pygame_event(event)

            key = self.input.poll_key()
            while key is not None and self.running:
                self._handle_key(key)
                key = self.input.poll_key()

            self._render()

        # dismissing the window mid-test must not leave timers behind
        self.controller.close()
        pygame.quit()

    def _handle_key(self, key: int) -> None:
        status = self.controller.status

        if key == pygame.K_ESCAPE:
            if status == STATUS_SELECTING:
                self.running = False
            else:
                self.controller.restart()
            return

        if status == STATUS_SELECTING:
            test_type = SELECT_KEYS.get(key)
            if test_type is not None:
                self.input.reset()
                try:
                    self.controller.select_test(test_type)
                except ConfigurationError as exc:
                    logger.warning("Cannot start %s: %s", test_type.value, exc)
            return

        if status == STATUS_COMPLETED:
            if key == pygame.K_r:
                self.controller.restart()
            return

        if status == STATUS_TAKING:
            if key == pygame.K_BACKSPACE:
                self.controller.clear_input()
                return
            session = self.controller.session
            response = response_for_key(self.controller.selected_test, key, session.configuration)
            if response is not None:
                self.controller.respond(response)

    def _on_test_complete(self, result: NormalizedResult) -> None:
        raw = self.controller.raw_result
        record = {
            "timestamp": int(time.time()),
            "session_id": self.session_id,
            "test_type": self.controller.selected_test.value,
            **result.to_dict(),
            "tier": self.controller.tier,
            "partial": bool(raw.partial) if raw is not None else False,
        }
        try:
            self.results_logger.write(record)
        except OSError:
            logger.exception("Could not save %s result to %s", result.test_name, self.results_logger.path)
            return
        self.last_record = record
        logger.info("Saved %s result to %s", result.test_name, self.results_logger.path)

    def _render(self) -> None:
        status = self.controller.status
        if status == STATUS_TAKING and self.controller.engine is not None:
            self.renderer.draw_test(self.controller.engine)
        elif status == STATUS_COMPLETED and self.controller.result is not None:
            self.renderer.draw_results(
                self.controller.result,
                self.controller.tier,
                feedback_message(self.controller.raw_result),
            )
        else:
            self.renderer.draw_selection(self.last_record)
        self.renderer.present()
