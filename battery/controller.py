import logging
import random
from typing import Any, Callable, List, Optional

from battery.registry import TEST_REGISTRY, build_strategy
from battery.scheduler import FrameScheduler
from battery.scoring import normalize, performance_tier
from battery.state_machine import TrialLoop
from config.settings import BatterySettings
from data.models import NormalizedResult, RawResult, TestSession, TestType

logger = logging.getLogger(__name__)

STATUS_SELECTING = "selecting"
STATUS_TAKING = "taking"
STATUS_COMPLETED = "completed"


class InvalidTransitionError(RuntimeError):
    pass


class BatteryController:
    """
    selecting -> taking -> completed, back to selecting on restart()/close().

    Owns at most one TrialLoop. The normalized result goes to
    on_test_complete exactly once per finished test.
    """

    def __init__(
        self,
        scheduler: FrameScheduler,
        on_test_complete: Optional[Callable[[NormalizedResult], None]] = None,
        settings: Optional[BatterySettings] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.scheduler = scheduler
        self.on_test_complete = on_test_complete
        self.settings = settings or BatterySettings()
        self.rng = random.Random(seed if seed is not None else self.settings.seed)

        self.status: str = STATUS_SELECTING
        self.selected_test: Optional[TestType] = None
        self.engine: Optional[TrialLoop] = None
        self.raw_result: Optional[RawResult] = None
        self.result: Optional[NormalizedResult] = None

    @property
    def session(self) -> Optional[TestSession]:
        return self.engine.session if self.engine is not None else None

    @property
    def tier(self) -> Optional[str]:
        return performance_tier(self.result.score) if self.result is not None else None

    def available_tests(self) -> List[TestType]:
        if self.status != STATUS_SELECTING:
            return []
        return list(TEST_REGISTRY)

    def select_test(self, test_type: TestType, config=None) -> TrialLoop:
        if self.status != STATUS_SELECTING:
            raise InvalidTransitionError(f"Cannot start a test while {self.status}")

        test_type = TestType(test_type)
        config = config if config is not None else self.settings.for_test(test_type)
        config.validate()

        self.selected_test = test_type
        self.raw_result = None
        self.result = None
        self.engine = TrialLoop(
            build_strategy(test_type, config),
            self.scheduler,
            on_complete=self._on_raw_complete,
            rng=self.rng,
        )
        self.status = STATUS_TAKING
        logger.info("Selected %s", test_type.value)
        self.engine.start()
        return self.engine

    def respond(self, response: Any) -> bool:
        if self.status != STATUS_TAKING or self.engine is None:
            return False
        return self.engine.respond(response)

    def clear_input(self) -> None:
        if self.status == STATUS_TAKING and self.engine is not None:
            self.engine.clear_input()

    def restart(self) -> None:
        if self.engine is not None:
            self.engine.abort()
        self.engine = None
        self.selected_test = None
        self.raw_result = None
        self.result = None
        self.status = STATUS_SELECTING

    def close(self) -> None:
        self.restart()

    def _on_raw_complete(self, raw: RawResult) -> None:
        if self.status != STATUS_TAKING or self.result is not None:
            return
        self.raw_result = raw
        self.result = normalize(raw)
        self.status = STATUS_COMPLETED
        logger.info("%s complete: score=%d tier=%s", self.result.test_name, self.result.score, self.tier)
        if self.on_test_complete is not None:
            self.on_test_complete(self.result)
