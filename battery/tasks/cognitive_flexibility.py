from typing import Optional

from battery.scoring import switch_cost
from battery.tasks.base import TestStrategy, summarize_choice_session
from config.settings import FlexibilityConfig
from data.models import RawResult, TestSession, TestType


class CognitiveFlexibilityTest(TestStrategy):
    test_type = TestType.COGNITIVE_FLEXIBILITY

    def __init__(self, config: Optional[FlexibilityConfig] = None) -> None:
        super().__init__(config or FlexibilityConfig())

    def is_session_complete(self, session: TestSession) -> bool:
        return len(session.final_trials()) >= self.config.total_trials

    def compute_raw_result(self, session: TestSession) -> RawResult:
        return summarize_choice_session(session, switch_cost_ms=switch_cost(session.final_trials()))
