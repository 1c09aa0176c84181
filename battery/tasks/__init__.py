from battery.tasks.cognitive_flexibility import CognitiveFlexibilityTest
from battery.tasks.n_back import NBackTest
from battery.tasks.reaction_time import ReactionTimeTest
from battery.tasks.stroop import StroopTest
from battery.tasks.working_memory import WorkingMemoryTest

__all__ = ["CognitiveFlexibilityTest", "NBackTest", "ReactionTimeTest", "StroopTest", "WorkingMemoryTest"]
