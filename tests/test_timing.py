from battery.timing import mark_presented, record_response, record_timeout
from data.models import (
    OUTCOME_CORRECT,
    OUTCOME_FALSE_START,
    OUTCOME_INCORRECT,
    OUTCOME_TIMEOUT,
    Trial,
)


def _trial(expected="red"):
    return Trial(index=0, stimulus="stim", expected_response=expected)


class TestRecordResponse:
    def test_correct_response_records_latency(self):
        trial = _trial()
        mark_presented(trial, 1000)
        assert record_response(trial, "red", 1350) == OUTCOME_CORRECT
        assert trial.latency_ms == 350
        assert trial.user_response == "red"

    def test_wrong_response_is_incorrect(self):
        trial = _trial()
        mark_presented(trial, 0)
        assert record_response(trial, "blue", 200) == OUTCOME_INCORRECT
        assert not trial.is_credited

    def test_any_response_accepted_when_nothing_expected(self):
        trial = _trial(expected=None)
        mark_presented(trial, 0)
        assert record_response(trial, "anything", 10) == OUTCOME_CORRECT

    def test_response_before_presentation_is_false_start(self):
        trial = _trial()
        assert record_response(trial, "red", 500) == OUTCOME_FALSE_START
        assert trial.latency_ms is None

    def test_outcome_is_written_once(self):
        trial = _trial()
        mark_presented(trial, 0)
        record_response(trial, "blue", 100)
        assert record_response(trial, "red", 200) is None
        assert trial.outcome == OUTCOME_INCORRECT
        assert trial.responded_at_ms == 100
        assert record_timeout(trial, implicit_response="red") is None

    def test_custom_classifier(self):
        trial = _trial(expected=(1, 2, 3))
        mark_presented(trial, 0)
        outcome = record_response(trial, (1, 2, 3), 10, classify=lambda t, r: OUTCOME_INCORRECT)
        assert outcome == OUTCOME_INCORRECT

    def test_responded_at_untouched_until_final(self):
        trial = _trial()
        mark_presented(trial, 0)
        assert trial.responded_at_ms is None
        assert not trial.is_final

    def test_presentation_time_is_not_overwritten(self):
        trial = _trial()
        mark_presented(trial, 10)
        mark_presented(trial, 99)
        assert trial.presented_at_ms == 10


class TestRecordTimeout:
    def test_timeout_without_substitution(self):
        trial = _trial()
        mark_presented(trial, 0)
        assert record_timeout(trial) == OUTCOME_TIMEOUT
        assert trial.latency_ms is None
        assert not trial.is_credited

    def test_implicit_no_match_is_credited_when_right(self):
        trial = _trial(expected=False)
        mark_presented(trial, 0)
        record_timeout(trial, implicit_response=False)
        assert trial.outcome == OUTCOME_TIMEOUT
        assert trial.is_credited

    def test_implicit_no_match_on_a_match_is_not_credited(self):
        trial = _trial(expected=True)
        mark_presented(trial, 0)
        record_timeout(trial, implicit_response=False)
        assert not trial.is_credited
