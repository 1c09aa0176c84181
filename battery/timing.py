from typing import Any, Callable, Optional

from data.models import (
    OUTCOME_CORRECT,
    OUTCOME_FALSE_START,
    OUTCOME_INCORRECT,
    OUTCOME_TIMEOUT,
    Trial,
)

Classifier = Callable[[Trial, Any], str]


def mark_presented(trial: Trial, now_ms: int) -> None:
    if trial.is_final or trial.is_presented:
        return
    trial.presented_at_ms = now_ms


def default_classify(trial: Trial, response: Any) -> str:
    if trial.expected_response is None:
        return OUTCOME_CORRECT
    return OUTCOME_CORRECT if response == trial.expected_response else OUTCOME_INCORRECT


def record_response(
    trial: Trial,
    response: Any,
    now_ms: int,
    classify: Optional[Classifier] = None,
) -> Optional[str]:
    """
    Finalize a trial from a user response and return its outcome.

    A response before the stimulus was presented is a false start. Returns
    None (and changes nothing) when the trial already has an outcome.
    """
    if trial.is_final:
        return None

    if not trial.is_presented:
        trial.user_response = response
        trial.responded_at_ms = now_ms
        trial.outcome = OUTCOME_FALSE_START
        return trial.outcome

    classify = classify or default_classify
    outcome = classify(trial, response)
    trial.user_response = response
    trial.responded_at_ms = max(now_ms, trial.presented_at_ms)
    trial.outcome = outcome
    return outcome


def record_timeout(trial: Trial, implicit_response: Any = None) -> Optional[str]:
    if trial.is_final:
        return None
    trial.user_response = implicit_response
    trial.outcome = OUTCOME_TIMEOUT
    return trial.outcome
