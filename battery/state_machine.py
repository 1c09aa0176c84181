import logging
import random
from dataclasses import replace
from typing import Any, Callable, Optional

from battery import timing
from battery.scheduler import FrameScheduler, TimerHandle
from data.models import (
    STATUS_ABORTED,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_NOT_STARTED,
    RawResult,
    TestSession,
    Trial,
)

logger = logging.getLogger(__name__)


PHASE_INSTRUCTIONS = "instructions"  # test selected, nothing shown yet
PHASE_WAITING = "waiting"            # pre-stimulus delay, responses are early
PHASE_REVEAL = "reveal"              # stimulus on screen, responses not accepted yet
PHASE_STIMULUS = "stimulus"          # responses accepted
PHASE_FEEDBACK = "feedback"          # trial is final, pause before the next one
PHASE_RESULTS = "results"


class TrialLoop:
    """
    Runs one test session: a timed loop of trials driven by a strategy.

    A trial goes WAITING -> REVEAL -> STIMULUS -> FEEDBACK, skipping the
    phases whose duration is zero, and the loop asks the strategy for the
    next trial until strategy.is_session_complete() says stop.

    Time only moves through the injected scheduler. At most one timer is
    pending at any moment, so trial i+1 cannot be shown before trial i has
    its outcome, and abort() only has one handle to cancel.

    on_complete(raw_result) is called once when the session reaches RESULTS.
    It is not called after abort().
    """

    def __init__(
        self,
        strategy,
        scheduler: FrameScheduler,
        on_complete: Optional[Callable[[RawResult], None]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.strategy = strategy
        self.scheduler = scheduler
        self.on_complete = on_complete
        self.rng = rng or random.Random()

        self.session = TestSession(test_type=strategy.test_type, configuration=strategy.config)
        self.trial: Optional[Trial] = None
        self.raw_result: Optional[RawResult] = None
        self._timer: Optional[TimerHandle] = None

    # --------------------------
    # state
    # --------------------------

    @property
    def phase(self) -> str:
        return self.session.phase

    @property
    def current_trial(self) -> Optional[Trial]:
        return self.trial

    @property
    def current_round(self) -> int:
        return self.trial.round_index if self.trial is not None else 0

    def is_finished(self) -> bool:
        return self.session.status in (STATUS_COMPLETED, STATUS_ABORTED)

    # --------------------------
    # commands
    # --------------------------

    def start(self) -> bool:
        if self.session.status != STATUS_NOT_STARTED:
            return False
        self.session.status = STATUS_IN_PROGRESS
        self.session.started_at_ms = self.scheduler.now_ms
        logger.info("Starting %s session", self.session.test_type.value)
        try:
            self.strategy.begin(self.session, self.rng)
        except Exception:
            logger.exception("Could not plan trials for %s", self.session.test_type.value)
            self._finish(partial=True)
            return True
        self._advance()
        return True

    def respond(self, response: Any) -> bool:
        """
        Feed one user input. Returns True if the input was taken by the
        current trial (including a false start), False if it was ignored.
        """
        if not self.session.is_active or self.trial is None:
            return False

        trial = self.trial
        phase = self.phase

        if phase == PHASE_WAITING and self.strategy.restart_on_false_start:
            self._false_start(trial, response)
            return True

        if phase == PHASE_STIMULUS and not trial.is_final:
            return self._accept(trial, response)

        if phase in (PHASE_WAITING, PHASE_FEEDBACK) and self.strategy.counts_early_responses:
            self.session.false_starts += 1
            logger.debug("Early response outside the stimulus window (trial %s)", trial.index)
            return False

        logger.debug("Ignoring response in phase %s", phase)
        return False

    def clear_input(self) -> None:
        if self.session.is_active and self.phase == PHASE_STIMULUS and self.trial is not None:
            self.strategy.clear_input(self.trial)

    def abort(self) -> bool:
        if self.session.status not in (STATUS_NOT_STARTED, STATUS_IN_PROGRESS):
            return False
        self._cancel_timer()
        self.session.status = STATUS_ABORTED
        self.session.phase = PHASE_RESULTS
        self.session.finished_at_ms = self.scheduler.now_ms
        logger.info("Aborted %s session after %d trials", self.session.test_type.value, len(self.session.trials))
        return True

    # --------------------------
    # trial flow
    # --------------------------

    def _advance(self) -> None:
        self._timer = None
        if not self.session.is_active:
            return
        try:
            if self.strategy.is_session_complete(self.session):
                self._finish()
                return
            trial = self.strategy.next_trial(self.session, self.rng)
        except Exception:
            logger.exception("Trial generation failed for %s", self.session.test_type.value)
            self._finish(partial=True)
            return

        if trial is None:
            self._finish()
            return
        self._begin_trial(trial)

    def _begin_trial(self, trial: Trial) -> None:
        trial.index = len(self.session.trials)
        self.session.trials.append(trial)
        self.trial = trial

        delay_ms = self.strategy.onset_delay_ms(self.session, trial, self.rng)
        if delay_ms > 0:
            self.session.phase = PHASE_WAITING
            self._timer = self.scheduler.schedule_after(delay_ms, self._reveal)
        else:
            self._reveal()

    def _reveal(self) -> None:
        self._timer = None
        if not self.session.is_active:
            return
        reveal_ms = self.strategy.reveal_ms(self.trial)
        if reveal_ms > 0:
            self.session.phase = PHASE_REVEAL
            self._timer = self.scheduler.schedule_after(reveal_ms, self._present)
        else:
            self._present()

    def _present(self) -> None:
        self._timer = None
        if not self.session.is_active:
            return
        timing.mark_presented(self.trial, self.scheduler.now_ms)
        self.session.phase = PHASE_STIMULUS
        window_ms = self.strategy.response_window_ms(self.trial)
        if window_ms is not None:
            self._timer = self.scheduler.schedule_after(window_ms, self._close_window)

    def _close_window(self) -> None:
        self._timer = None
        if not self.session.is_active:
            return
        trial = self.trial
        if trial.is_final:
            # answered inside the window, the stimulus just ran its full time
            self._enter_feedback(trial)
            return
        timing.record_timeout(trial, self.strategy.implicit_response(trial))
        logger.debug("Trial %s timed out", trial.index)
        self._finalize(trial)

    def _accept(self, trial: Trial, response: Any) -> bool:
        try:
            complete, value = self.strategy.collect_response(trial, response)
            if not complete:
                return value is not None
            outcome = timing.record_response(
                trial, value, self.scheduler.now_ms, classify=self.strategy.classify_response
            )
        except Exception:
            logger.exception("Could not classify response for trial %s", trial.index)
            self._finish(partial=True)
            return False

        if outcome is None:
            return False
        if self.strategy.advance_on_response:
            self._cancel_timer()
            self._finalize(trial)
        else:
            self._notify_final(trial)
        return True

    def _false_start(self, trial: Trial, response: Any) -> None:
        self._cancel_timer()
        timing.record_response(trial, response, self.scheduler.now_ms)
        logger.debug("False start on round %s", trial.round_index)
        if not self._notify_final(trial):
            return
        self._begin_trial(self.strategy.retry_trial(self.session, trial))

    def _finalize(self, trial: Trial) -> None:
        if self._notify_final(trial):
            self._enter_feedback(trial)

    def _notify_final(self, trial: Trial) -> bool:
        try:
            self.strategy.on_trial_final(self.session, trial)
        except Exception:
            logger.exception("Trial bookkeeping failed for trial %s", trial.index)
            self._finish(partial=True)
            return False
        return True

    def _enter_feedback(self, trial: Trial) -> None:
        gap_ms = self.strategy.inter_trial_ms(self.session, trial)
        if gap_ms > 0:
            self.session.phase = PHASE_FEEDBACK
            self._timer = self.scheduler.schedule_after(gap_ms, self._advance)
        else:
            self._advance()

    def _finish(self, partial: bool = False) -> None:
        if self.session.status != STATUS_IN_PROGRESS:
            return
        self._cancel_timer()
        self.session.status = STATUS_COMPLETED
        self.session.phase = PHASE_RESULTS
        self.session.finished_at_ms = self.scheduler.now_ms

        try:
            raw = self.strategy.compute_raw_result(self.session)
        except Exception:
            logger.exception("Could not summarize %s session", self.session.test_type.value)
            raw = RawResult.empty(self.session.test_type)
        if partial and not raw.partial:
            raw = replace(raw, partial=True)
        self.raw_result = raw

        logger.info(
            "Finished %s session: %d trials, accuracy=%s, avg=%s ms",
            self.session.test_type.value,
            len(self.session.trials),
            raw.accuracy,
            raw.avg_time_ms,
        )
        if self.on_complete is not None:
            try:
                self.on_complete(raw)
            except Exception:
                logger.exception("Completion callback failed for %s", self.session.test_type.value)

    def _cancel_timer(self) -> None:
        self.scheduler.cancel(self._timer)
        self._timer = None
