import random

from battery.scoring import normalize
from battery.state_machine import TrialLoop
from battery.tasks.cognitive_flexibility import CognitiveFlexibilityTest
from battery.trial_generator import SIDE_LEFT, SIDE_RIGHT
from config.settings import FlexibilityConfig


class TestCognitiveFlexibilitySession:
    def _start(self, scheduler, config=None):
        results = []
        engine = TrialLoop(
            CognitiveFlexibilityTest(config), scheduler, on_complete=results.append, rng=random.Random(21)
        )
        engine.start()
        return engine, results

    def test_perfect_run(self, scheduler):
        engine, results = self._start(scheduler)
        while not engine.is_finished():
            scheduler.advance(500)
            engine.respond(engine.current_trial.expected_response)

        raw = results[0]
        assert raw.trials_attempted == 20
        assert raw.accuracy == 100.0
        assert normalize(raw).score == 1000
        assert normalize(raw).test_name == "Cognitive Flexibility Test"

    def test_wrong_side_is_incorrect(self, scheduler):
        engine, results = self._start(scheduler, FlexibilityConfig(total_trials=4))
        for _ in range(4):
            trial = engine.current_trial
            engine.respond(SIDE_LEFT if trial.expected_response == SIDE_RIGHT else SIDE_RIGHT)
        assert results[0].accuracy == 0.0
        assert normalize(results[0]).score == 0

    def test_switch_cost(self, scheduler):
        engine, results = self._start(scheduler, FlexibilityConfig(total_trials=6, switch_rate=1.0))
        while not engine.is_finished():
            trial = engine.current_trial
            scheduler.advance(600 if trial.is_switch else 400)
            engine.respond(trial.expected_response)
        assert results[0].switch_cost_ms == 200.0
