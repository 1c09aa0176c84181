import random
from typing import Optional

from battery.scoring import summarize_latencies
from battery.tasks.base import TestStrategy
from battery.trial_generator import sample_onset_delay
from config.settings import ReactionTimeConfig
from data.models import (
    OUTCOME_CORRECT,
    OUTCOME_FALSE_START,
    OUTCOME_TIMEOUT,
    RawResult,
    TestSession,
    TestType,
    Trial,
)

STIMULUS_GO = "go"


def tap_points(reaction_ms: int) -> int:
    base = max(0, 1000 - reaction_ms)
    if reaction_ms < 200:
        return base + 100
    if reaction_ms < 250:
        return base + 50
    if reaction_ms < 300:
        return base + 20
    return base


class ReactionTimeTest(TestStrategy):
    """
    waiting -> ready -> tap, repeated until `rounds` taps landed on a ready
    stimulus. A tap while waiting is a false start: it is logged as its own
    trial and the same round starts over with a fresh delay.
    """

    test_type = TestType.REACTION_TIME
    restart_on_false_start = True

    def __init__(self, config: Optional[ReactionTimeConfig] = None) -> None:
        super().__init__(config or ReactionTimeConfig())

    def next_trial(self, session: TestSession, rng: random.Random) -> Optional[Trial]:
        return Trial(
            index=len(session.trials),
            stimulus=STIMULUS_GO,
            round_index=self.rounds_completed(session),
        )

    def onset_delay_ms(self, session: TestSession, trial: Trial, rng: random.Random) -> int:
        return sample_onset_delay(rng, self.config.min_delay_ms, self.config.max_delay_ms)

    def inter_trial_ms(self, session: TestSession, trial: Trial) -> int:
        if trial.outcome == OUTCOME_CORRECT and not self.is_session_complete(session):
            return self.config.feedback_ms
        return 0

    def rounds_completed(self, session: TestSession) -> int:
        return sum(1 for t in session.trials if t.outcome == OUTCOME_CORRECT)

    def is_session_complete(self, session: TestSession) -> bool:
        return self.rounds_completed(session) >= self.config.rounds

    def compute_raw_result(self, session: TestSession) -> RawResult:
        taps = [t for t in session.trials if t.outcome == OUTCOME_CORRECT and t.latency_ms is not None]
        stats = summarize_latencies(t.latency_ms for t in taps)
        return RawResult(
            test_type=self.test_type,
            trials_attempted=len(session.final_trials()),
            trials_correct=len(taps),
            accuracy=None,
            avg_time_ms=float(stats["mean"]) if stats["mean"] is not None else None,
            best_time_ms=stats["best"],
            median_time_ms=float(stats["median"]) if stats["median"] is not None else None,
            time_sd_ms=stats["sd"],
            false_starts=sum(1 for t in session.trials if t.outcome == OUTCOME_FALSE_START),
            timeouts=sum(1 for t in session.trials if t.outcome == OUTCOME_TIMEOUT),
            points=sum(tap_points(t.latency_ms) for t in taps),
        )
