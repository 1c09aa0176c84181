"""Clarity score normalisation and summary metrics shared by all tests."""
import math
import statistics
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional

from data.models import (
    OUTCOME_FALSE_START,
    OUTCOME_TIMEOUT,
    NormalizedResult,
    RawResult,
    TestType,
    Trial,
)


TEST_NAMES: Dict[TestType, str] = {
    TestType.REACTION_TIME: "Reaction Time Test",
    TestType.WORKING_MEMORY: "Working Memory Test",
    TestType.COGNITIVE_FLEXIBILITY: "Cognitive Flexibility Test",
    TestType.STROOP: "Stroop Test",
    TestType.N_BACK: "N-Back Test",
}
DEFAULT_TEST_NAME = "Mental Clarity Test"

# lower bound of each band, checked from the top
PERFORMANCE_TIERS = (
    (800, "Elite"),
    (600, "Strong"),
    (400, "Good"),
    (200, "Developing"),
    (0, "Building"),
)


def display_name(test_type: Optional[TestType]) -> str:
    return TEST_NAMES.get(test_type, DEFAULT_TEST_NAME)


def round_half_up(value: float, digits: int = 0) -> float:
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def accuracy_pct(correct: int, attempted: int) -> float:
    if attempted <= 0:
        return 0.0
    pct = round_half_up(correct / attempted * 100, 1)
    return max(0.0, min(100.0, pct))


def summarize_latencies(latencies: Iterable[Optional[int]]) -> Dict[str, Optional[float]]:
    """
    Mean / best / median / SD over the latencies that exist.

    Returns None for every metric when nothing was answered.
    """
    values: List[int] = [v for v in latencies if v is not None]
    if not values:
        return {"mean": None, "best": None, "median": None, "sd": None}
    return {
        "mean": statistics.mean(values),
        "best": min(values),
        "median": statistics.median(values),
        "sd": statistics.stdev(values) if len(values) > 1 else 0.0,
    }


def switch_cost(trials: Iterable[Trial]) -> Optional[float]:
    switch_rts = []
    repeat_rts = []
    for trial in trials:
        if trial.latency_ms is None or trial.outcome in (OUTCOME_FALSE_START, OUTCOME_TIMEOUT):
            continue
        if trial.is_switch:
            switch_rts.append(trial.latency_ms)
        else:
            repeat_rts.append(trial.latency_ms)
    if not switch_rts or not repeat_rts:
        return None
    return (sum(switch_rts) / len(switch_rts)) - (sum(repeat_rts) / len(repeat_rts))


def performance_tier(score: int) -> str:
    for lower, label in PERFORMANCE_TIERS:
        if score >= lower:
            return label
    return PERFORMANCE_TIERS[-1][1]


def clarity_score(raw: RawResult) -> int:
    if raw.test_type == TestType.REACTION_TIME:
        if raw.avg_time_ms is None or math.isnan(raw.avg_time_ms):
            return 0
        return int(max(0, 1000 - round_half_up(raw.avg_time_ms)))
    if raw.test_type == TestType.WORKING_MEMORY:
        return max(0, int(raw.max_level or 0)) * 100
    accuracy = _clean_accuracy(raw.accuracy)
    return int(round_half_up(accuracy * 10))


def normalize(raw: RawResult) -> NormalizedResult:
    """
    Map a raw result onto the uniform shape reported to the caller.

    Pure: the same raw result always gives an equal NormalizedResult.
    """
    average = raw.avg_time_ms
    if average is None or math.isnan(average):
        average = 0.0
    return NormalizedResult(
        score=clarity_score(raw),
        average_reaction=float(average),
        accuracy=_clean_accuracy(raw.accuracy),
        test_name=display_name(raw.test_type),
    )


def feedback_message(raw: RawResult) -> str:
    if raw.test_type == TestType.REACTION_TIME:
        avg = raw.avg_time_ms
        if avg is None:
            return "Nice warm-up!"
        if avg < 300:
            return "Lightning fast!"
        if avg < 400:
            return "Great reflexes!"
        return "Good job!"

    if raw.test_type == TestType.WORKING_MEMORY:
        level = raw.max_level or 0
        if level >= 8:
            return "Outstanding!"
        if level >= 6:
            return "Great job!"
        return "Good effort!"

    accuracy = _clean_accuracy(raw.accuracy)
    if raw.test_type == TestType.COGNITIVE_FLEXIBILITY:
        if accuracy >= 90:
            return "Excellent!"
        if accuracy >= 75:
            return "Well done!"
        return "Good try!"

    top = "Excellent memory!" if raw.test_type == TestType.N_BACK else "Excellent focus!"
    if accuracy >= 85:
        return top
    if accuracy >= 70:
        return "Good job!"
    return "Keep practicing!"


def _clean_accuracy(value: Optional[float]) -> float:
    if value is None or math.isnan(value):
        return 0.0
    return max(0.0, min(100.0, float(value)))
