# Shared helpers for the InkModeler test suite.

# Imports:

from inkmodeler.events import EventType
from inkmodeler.events import RawInput
from inkmodeler.params import ModelerParams
from inkmodeler.position import ModelState


# Constants:

#: Interval between samples at the suggested output rate
DEFAULT_INTERVAL = 1.0 / 180


# Helper functions:

def suggested_params(**changes):
    """Suggested params, with some fields replaced"""
    return ModelerParams.suggested()._replace(**changes)


def down(x, y, time, **stylus):
    return RawInput(EventType.DOWN, x, y, time, **stylus)


def move(x, y, time, **stylus):
    return RawInput(EventType.MOVE, x, y, time, **stylus)


def up(x, y, time, **stylus):
    return RawInput(EventType.UP, x, y, time, **stylus)


def state(pos, vel, acc, time):
    return ModelState(pos, vel, acc, time)


# Mixins:

class StateAssertions (object):
    """Approximate comparison of ModelStates

    Reference values are given to four decimal places. Accelerations
    can run to the tens of thousands, so the tolerance grows with the
    magnitude of the expected value.

    """

    TOLERANCE = 5e-4

    def assertValueNear(self, actual, expected, what):
        tol = max(self.TOLERANCE, 1e-5 * abs(expected))
        self.assertLessEqual(
            abs(actual - expected), tol,
            msg="%s: %r != %r (tolerance %r)" % (what, actual, expected, tol),
        )

    def assertPairNear(self, actual, expected, what):
        self.assertValueNear(actual[0], expected[0], what + ".x")
        self.assertValueNear(actual[1], expected[1], what + ".y")

    def assertStateNear(self, actual, expected):
        self.assertPairNear(actual.position, expected.position, "position")
        self.assertPairNear(actual.velocity, expected.velocity, "velocity")
        self.assertPairNear(actual.acceleration, expected.acceleration,
                            "acceleration")
        self.assertValueNear(actual.time, expected.time, "time")

    def assertStatesNear(self, actual, expected):
        self.assertEqual(len(actual), len(expected))
        for a, e in zip(actual, expected):
            self.assertStateNear(a, e)
