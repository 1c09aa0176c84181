from __future__ import annotations

import random
from typing import Any, List, Optional, Tuple

from battery import trial_generator
from battery.scoring import accuracy_pct, summarize_latencies
from battery.timing import default_classify
from data.models import OUTCOME_FALSE_START, OUTCOME_TIMEOUT, RawResult, TestSession, TestType, Trial


class TestStrategy:
    """
    Per-test policy plugged into TrialLoop.

    The four core hooks are generate_trials, classify_response,
    is_session_complete and compute_raw_result; the rest tune timing and
    have neutral defaults. One instance serves one session.
    """

    __test__ = False

    test_type: TestType
    advance_on_response: bool = True
    restart_on_false_start: bool = False
    counts_early_responses: bool = False

    def __init__(self, config) -> None:
        self.config = config
        self.plan: List[Trial] = []

    def begin(self, session: TestSession, rng: random.Random) -> None:
        self.plan = self.generate_trials(rng)

    def generate_trials(self, rng: random.Random) -> List[Trial]:
        return trial_generator.generate(self.test_type, self.config, rng)

    def next_trial(self, session: TestSession, rng: random.Random) -> Optional[Trial]:
        position = len(session.trials)
        if position >= len(self.plan):
            return None
        return self.plan[position]

    def retry_trial(self, session: TestSession, trial: Trial) -> Trial:
        return Trial(
            index=len(session.trials),
            stimulus=trial.stimulus,
            expected_response=trial.expected_response,
            round_index=trial.round_index,
            is_switch=trial.is_switch,
        )

    def onset_delay_ms(self, session: TestSession, trial: Trial, rng: random.Random) -> int:
        return 0

    def reveal_ms(self, trial: Trial) -> int:
        return 0

    def response_window_ms(self, trial: Trial) -> Optional[int]:
        return getattr(self.config, "response_window_ms", None)

    def inter_trial_ms(self, session: TestSession, trial: Trial) -> int:
        return 0

    def collect_response(self, trial: Trial, response: Any) -> Tuple[bool, Any]:
        return True, response

    def clear_input(self, trial: Trial) -> None:
        pass

    def classify_response(self, trial: Trial, response: Any) -> str:
        return default_classify(trial, response)

    def implicit_response(self, trial: Trial) -> Any:
        return None

    def on_trial_final(self, session: TestSession, trial: Trial) -> None:
        pass

    def is_session_complete(self, session: TestSession) -> bool:
        raise NotImplementedError

    def compute_raw_result(self, session: TestSession) -> RawResult:
        raise NotImplementedError


def summarize_choice_session(session: TestSession, **extra) -> RawResult:
    """Raw result for the tests scored by accuracy (Stroop, N-Back, Flexibility)."""
    final = session.final_trials()
    correct = sum(1 for t in final if t.is_credited)
    latencies = summarize_latencies(t.latency_ms for t in final)
    return RawResult(
        test_type=session.test_type,
        trials_attempted=len(final),
        trials_correct=correct,
        accuracy=accuracy_pct(correct, len(final)),
        avg_time_ms=_as_float(latencies["mean"]),
        best_time_ms=latencies["best"],
        median_time_ms=_as_float(latencies["median"]),
        time_sd_ms=_as_float(latencies["sd"]),
        false_starts=session.false_starts + sum(1 for t in final if t.outcome == OUTCOME_FALSE_START),
        timeouts=sum(1 for t in final if t.outcome == OUTCOME_TIMEOUT),
        **extra,
    )


def _as_float(value) -> Optional[float]:
    return float(value) if value is not None else None
