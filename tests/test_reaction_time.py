import random

from battery.state_machine import PHASE_RESULTS, PHASE_STIMULUS, PHASE_WAITING, TrialLoop
from battery.tasks.reaction_time import STIMULUS_GO, ReactionTimeTest, tap_points
from config.settings import ReactionTimeConfig
from data.models import OUTCOME_CORRECT, OUTCOME_FALSE_START, OUTCOME_TIMEOUT, STATUS_COMPLETED
from tests.helpers import run_until_stimulus


def _engine(scheduler, config=None, results=None):
    return TrialLoop(
        ReactionTimeTest(config),
        scheduler,
        on_complete=results.append if results is not None else None,
        rng=random.Random(3),
    )


def _tap_after(scheduler, engine, latency_ms):
    run_until_stimulus(scheduler, engine)
    scheduler.advance(latency_ms)
    return engine.respond(STIMULUS_GO)


class TestReactionTimeSession:
    def test_eight_steady_taps(self, scheduler):
        results = []
        engine = _engine(scheduler, results=results)
        engine.start()
        for _ in range(8):
            assert _tap_after(scheduler, engine, 300)

        assert engine.session.status == STATUS_COMPLETED
        assert engine.phase == PHASE_RESULTS
        assert len(results) == 1
        raw = results[0]
        assert raw.avg_time_ms == 300.0
        assert raw.best_time_ms == 300
        assert raw.trials_correct == 8
        assert raw.accuracy is None
        assert raw.points == 8 * 700

    def test_starts_in_waiting(self, scheduler):
        engine = _engine(scheduler)
        engine.start()
        assert engine.phase == PHASE_WAITING
        assert not engine.current_trial.is_presented

    def test_delay_within_configured_range(self, scheduler):
        engine = _engine(scheduler, ReactionTimeConfig(min_delay_ms=800, max_delay_ms=2500))
        engine.start()
        assert 800 <= scheduler.next_due_ms() <= 2500

    def test_false_start_repeats_the_round(self, scheduler):
        engine = _engine(scheduler)
        engine.start()
        scheduler.advance(100)
        assert engine.respond(STIMULUS_GO)

        assert engine.session.trials[0].outcome == OUTCOME_FALSE_START
        assert engine.current_round == 0
        assert engine.phase == PHASE_WAITING
        assert scheduler.pending() == 1

        _tap_after(scheduler, engine, 250)
        assert engine.session.trials[1].outcome == OUTCOME_CORRECT
        assert engine.current_round == 1

    def test_false_starts_are_counted(self, scheduler):
        results = []
        engine = _engine(scheduler, ReactionTimeConfig(rounds=2), results)
        engine.start()
        engine.respond(STIMULUS_GO)
        engine.respond(STIMULUS_GO)
        _tap_after(scheduler, engine, 200)
        _tap_after(scheduler, engine, 400)

        raw = results[0]
        assert raw.false_starts == 2
        assert raw.trials_correct == 2
        assert raw.avg_time_ms == 300.0

    def test_response_window_times_out(self, scheduler):
        engine = _engine(scheduler, ReactionTimeConfig(rounds=2, response_window_ms=1000))
        engine.start()
        run_until_stimulus(scheduler, engine)
        scheduler.advance(1000)

        assert engine.session.trials[0].outcome == OUTCOME_TIMEOUT
        assert engine.current_round == 0

    def test_feedback_pause_between_rounds(self, scheduler):
        engine = _engine(scheduler, ReactionTimeConfig(rounds=2, feedback_ms=500))
        engine.start()
        _tap_after(scheduler, engine, 300)
        assert engine.phase == "feedback"
        scheduler.advance(500)
        assert engine.phase == PHASE_WAITING

    def test_stimulus_shown_after_delay(self, scheduler):
        engine = _engine(scheduler)
        engine.start()
        run_until_stimulus(scheduler, engine)
        assert engine.phase == PHASE_STIMULUS
        assert engine.current_trial.presented_at_ms == scheduler.now_ms

    def test_abort_stops_everything(self, scheduler):
        results = []
        engine = _engine(scheduler, results=results)
        engine.start()
        assert engine.abort()
        assert scheduler.pending() == 0
        scheduler.advance(10_000)
        assert results == []
        assert not engine.respond(STIMULUS_GO)


class TestTapPoints:
    def test_bonus_bands(self):
        assert tap_points(150) == 850 + 100
        assert tap_points(220) == 780 + 50
        assert tap_points(280) == 720 + 20
        assert tap_points(300) == 700
        assert tap_points(1500) == 0


class TestReactionTimeRawResult:
    def test_no_taps_gives_no_average(self, scheduler):
        engine = _engine(scheduler)
        raw = engine.strategy.compute_raw_result(engine.session)
        assert raw.avg_time_ms is None
        assert raw.points == 0
