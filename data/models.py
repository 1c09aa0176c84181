from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class TestType(str, Enum):
    __test__ = False

    REACTION_TIME = "reaction"
    STROOP = "stroop"
    N_BACK = "nback"
    WORKING_MEMORY = "memory"
    COGNITIVE_FLEXIBILITY = "flexibility"


OUTCOME_CORRECT = "correct"
OUTCOME_INCORRECT = "incorrect"
OUTCOME_FALSE_START = "false_start"
OUTCOME_TIMEOUT = "timeout"

STATUS_NOT_STARTED = "not_started"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"
STATUS_ABORTED = "aborted"


@dataclass
class Trial:
    """
    One stimulus presentation.

    Timing Capture is the only writer of presented_at_ms / responded_at_ms /
    user_response / outcome; outcome is written once.
    """
    index: int
    stimulus: Any
    expected_response: Any = None
    round_index: int = 0
    is_switch: bool = False

    presented_at_ms: Optional[int] = None
    responded_at_ms: Optional[int] = None
    user_response: Any = None
    outcome: Optional[str] = None

    @property
    def is_final(self) -> bool:
        return self.outcome is not None

    @property
    def is_presented(self) -> bool:
        return self.presented_at_ms is not None

    @property
    def latency_ms(self) -> Optional[int]:
        if self.presented_at_ms is None or self.responded_at_ms is None:
            return None
        return self.responded_at_ms - self.presented_at_ms

    @property
    def is_credited(self) -> bool:
        if self.outcome == OUTCOME_CORRECT:
            return True
        # implicit answer substituted on timeout (N-Back "no match")
        return (
            self.outcome == OUTCOME_TIMEOUT
            and self.user_response is not None
            and self.user_response == self.expected_response
        )


@dataclass
class TestSession:
    __test__ = False

    test_type: "TestType"
    configuration: Any
    trials: List[Trial] = field(default_factory=list)
    status: str = STATUS_NOT_STARTED
    phase: str = "instructions"
    false_starts: int = 0
    started_at_ms: Optional[int] = None
    finished_at_ms: Optional[int] = None

    def final_trials(self) -> List[Trial]:
        return [t for t in self.trials if t.is_final]

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_IN_PROGRESS


@dataclass(frozen=True)
class RawResult:
    test_type: "TestType"
    trials_attempted: int = 0
    trials_correct: int = 0
    accuracy: Optional[float] = None
    avg_time_ms: Optional[float] = None
    best_time_ms: Optional[int] = None
    median_time_ms: Optional[float] = None
    time_sd_ms: Optional[float] = None
    max_level: Optional[int] = None
    mistakes: int = 0
    false_starts: int = 0
    timeouts: int = 0
    points: int = 0
    switch_cost_ms: Optional[float] = None
    partial: bool = False

    @classmethod
    def empty(cls, test_type: "TestType", partial: bool = True) -> "RawResult":
        return cls(test_type=test_type, accuracy=0.0, partial=partial)


@dataclass(frozen=True)
class NormalizedResult:
    score: int
    average_reaction: float
    accuracy: float
    test_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "averageReaction": self.average_reaction,
            "accuracy": self.accuracy,
            "testName": self.test_name,
        }
