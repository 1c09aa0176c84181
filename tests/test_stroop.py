import random

from battery.scoring import normalize
from battery.state_machine import PHASE_STIMULUS, TrialLoop
from battery.tasks.stroop import StroopTest
from config.settings import StroopConfig
from data.models import OUTCOME_INCORRECT, OUTCOME_TIMEOUT, STATUS_COMPLETED


def _wrong_color(trial, config):
    return next(c for c in config.colors if c != trial.expected_response)


class TestStroopSession:
    def _start(self, scheduler, config=None):
        results = []
        engine = TrialLoop(StroopTest(config), scheduler, on_complete=results.append, rng=random.Random(11))
        engine.start()
        return engine, results

    def test_perfect_run(self, scheduler):
        engine, results = self._start(scheduler)
        while not engine.is_finished():
            scheduler.advance(450)
            engine.respond(engine.current_trial.expected_response)

        raw = results[0]
        assert raw.trials_attempted == 20
        assert raw.accuracy == 100.0
        assert raw.avg_time_ms == 450.0
        assert normalize(raw).score == 1000

    def test_half_wrong(self, scheduler):
        config = StroopConfig(total_trials=10)
        engine, results = self._start(scheduler, config)
        for i in range(10):
            trial = engine.current_trial
            engine.respond(trial.expected_response if i % 2 == 0 else _wrong_color(trial, config))

        raw = results[0]
        assert raw.trials_correct == 5
        assert raw.accuracy == 50.0
        assert normalize(raw).score == 500
        assert engine.session.trials[1].outcome == OUTCOME_INCORRECT

    def test_first_stimulus_is_shown_immediately(self, scheduler):
        engine, _ = self._start(scheduler)
        assert engine.phase == PHASE_STIMULUS
        assert engine.current_trial.presented_at_ms == 0

    def test_one_outcome_per_trial(self, scheduler):
        engine, _ = self._start(scheduler, StroopConfig(total_trials=3))
        engine.respond("red")
        engine.respond("blue")
        engine.respond("green")
        assert engine.session.status == STATUS_COMPLETED
        assert len(engine.session.trials) == 3
        assert not engine.respond("red")

    def test_response_window(self, scheduler):
        engine, results = self._start(scheduler, StroopConfig(total_trials=2, response_window_ms=1500))
        scheduler.advance(1500)
        assert engine.session.trials[0].outcome == OUTCOME_TIMEOUT
        engine.respond(engine.current_trial.expected_response)

        raw = results[0]
        assert raw.timeouts == 1
        assert raw.accuracy == 50.0
