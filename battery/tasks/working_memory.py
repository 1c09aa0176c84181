import random
from typing import Any, List, Optional, Tuple

from battery.scoring import accuracy_pct
from battery.tasks.base import TestStrategy
from battery.trial_generator import generate_digit_sequence
from config.settings import WorkingMemoryConfig
from data.models import RawResult, TestSession, TestType, Trial


class WorkingMemoryTest(TestStrategy):
    """
    One trial per round: show a digit sequence, hide it, collect the digits
    one by one. A correct round makes the next sequence one digit longer, a
    wrong one is retried at the same length. The session ends on the
    max_mistakes-th wrong round (counted over the whole session).

    max_level only counts sequences actually recalled, so failing every
    round scores 0 rather than crediting the starting length.
    """

    test_type = TestType.WORKING_MEMORY

    def __init__(self, config: Optional[WorkingMemoryConfig] = None) -> None:
        super().__init__(config or WorkingMemoryConfig())
        self.level = self.config.start_length
        self.max_level = 0
        self.mistakes = 0
        self.points = 0
        self.entry: List[int] = []

    def next_trial(self, session: TestSession, rng: random.Random) -> Optional[Trial]:
        cap = self.config.max_sequence_length
        if cap is not None and self.level > cap:
            return None
        sequence = generate_digit_sequence(rng, self.level)
        self.entry = []
        return Trial(
            index=len(session.trials),
            stimulus=sequence,
            expected_response=sequence,
            round_index=len(session.trials),
        )

    def onset_delay_ms(self, session: TestSession, trial: Trial, rng: random.Random) -> int:
        return self.config.round_pause_ms if trial.round_index > 0 else 0

    def reveal_ms(self, trial: Trial) -> int:
        return self.config.reveal_ms(len(trial.stimulus))

    def collect_response(self, trial: Trial, response: Any) -> Tuple[bool, Any]:
        try:
            digit = int(response)
        except (TypeError, ValueError):
            return False, None
        if not 1 <= digit <= 9:
            return False, None

        self.entry.append(digit)
        if len(self.entry) < len(trial.expected_response):
            return False, digit
        answer = tuple(self.entry)
        self.entry = []
        return True, answer

    def clear_input(self, trial: Trial) -> None:
        self.entry = []

    def on_trial_final(self, session: TestSession, trial: Trial) -> None:
        if trial.is_credited:
            length = len(trial.expected_response)
            self.points += length * 10
            self.max_level = max(self.max_level, length)
            self.level = length + 1
        else:
            self.mistakes += 1

    def is_session_complete(self, session: TestSession) -> bool:
        return self.mistakes >= self.config.max_mistakes

    def compute_raw_result(self, session: TestSession) -> RawResult:
        final = session.final_trials()
        return RawResult(
            test_type=self.test_type,
            trials_attempted=len(final),
            trials_correct=sum(1 for t in final if t.is_credited),
            accuracy=accuracy_pct(self.max_level, self.max_level + self.mistakes),
            max_level=self.max_level,
            mistakes=self.mistakes,
            points=self.points,
        )
