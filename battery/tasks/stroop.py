from typing import Optional

from battery.tasks.base import TestStrategy, summarize_choice_session
from config.settings import StroopConfig
from data.models import RawResult, TestSession, TestType


class StroopTest(TestStrategy):
    test_type = TestType.STROOP

    def __init__(self, config: Optional[StroopConfig] = None) -> None:
        super().__init__(config or StroopConfig())

    def is_session_complete(self, session: TestSession) -> bool:
        return len(session.final_trials()) >= self.config.total_trials

    def compute_raw_result(self, session: TestSession) -> RawResult:
        return summarize_choice_session(session)
