# Registry of the tests offered by the battery.
# Each entry carries the metadata shown on the selection screen and the
# strategy class that runs the test.

from typing import Dict

from battery.scoring import display_name
from battery.tasks import (
    CognitiveFlexibilityTest,
    NBackTest,
    ReactionTimeTest,
    StroopTest,
    WorkingMemoryTest,
)
from data.models import TestType

TEST_REGISTRY: Dict[TestType, dict] = {
    TestType.REACTION_TIME: {
        "label": display_name(TestType.REACTION_TIME),
        "section": "Reaction & Speed",
        "description": "Measure how quickly you can respond to visual stimuli",
        "instructions": (
            "Wait for the green circle to appear. "
            "Tap it as quickly as possible! "
            "Tapping before it appears is a false start and the round starts over."
        ),
        "strategy": ReactionTimeTest,
    },
    TestType.WORKING_MEMORY: {
        "label": display_name(TestType.WORKING_MEMORY),
        "section": "Memory",
        "description": "Test your ability to hold and manipulate information",
        "instructions": (
            "Memorize the sequence of numbers that appears on screen. "
            "After they disappear, enter them in the correct order. "
            "The sequence gets longer each round. "
            "The test ends after 2 mistakes."
        ),
        "strategy": WorkingMemoryTest,
    },
    TestType.COGNITIVE_FLEXIBILITY: {
        "label": display_name(TestType.COGNITIVE_FLEXIBILITY),
        "section": "Cognitive Flexibility",
        "description": "Switch between different rules and mental sets",
        "instructions": (
            "You'll switch between two rules. "
            "Numbers: odd -> left, even -> right. "
            "Shapes: circle -> left, square -> right. "
            "The rule will change randomly, watch the rule at the top!"
        ),
        "strategy": CognitiveFlexibilityTest,
    },
    TestType.STROOP: {
        "label": display_name(TestType.STROOP),
        "section": "Attention",
        "description": "Measure selective attention and cognitive control",
        "instructions": (
            "You'll see color words displayed in different colors. "
            "Select the COLOR, not the word! "
            "Focus and ignore what you read."
        ),
        "strategy": StroopTest,
    },
    TestType.N_BACK: {
        "label": display_name(TestType.N_BACK),
        "section": "Attention",
        "description": "Test working memory and sustained attention",
        "instructions": (
            "Letters appear one at a time. "
            "Press MATCH if the letter is the same as the one 2 steps ago, "
            "NO MATCH if it's different. "
            "No answer counts as NO MATCH."
        ),
        "strategy": NBackTest,
    },
}


def build_strategy(test_type: TestType, config=None):
    entry = TEST_REGISTRY.get(TestType(test_type))
    if entry is None:
        raise ValueError(f"Unknown test type: {test_type}")
    return entry["strategy"](config)
