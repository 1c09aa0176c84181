from typing import Any, Optional

from battery.tasks.base import TestStrategy, summarize_choice_session
from config.settings import NBackConfig
from data.models import RawResult, TestSession, TestType, Trial

MATCH = True
NO_MATCH = False


class NBackTest(TestStrategy):
    """
    Letters stay on screen for display_ms whether or not the user answers;
    only the first judgment per letter counts. No answer by the end of the
    window is recorded as a timeout with an implicit "no match".
    """

    test_type = TestType.N_BACK
    advance_on_response = False
    counts_early_responses = True

    def __init__(self, config: Optional[NBackConfig] = None) -> None:
        super().__init__(config or NBackConfig())

    def response_window_ms(self, trial: Trial) -> Optional[int]:
        return self.config.display_ms

    def inter_trial_ms(self, session: TestSession, trial: Trial) -> int:
        return self.config.gap_ms

    def implicit_response(self, trial: Trial) -> Any:
        return NO_MATCH

    def is_session_complete(self, session: TestSession) -> bool:
        return len(session.final_trials()) >= self.config.total_trials

    def compute_raw_result(self, session: TestSession) -> RawResult:
        return summarize_choice_session(session)
