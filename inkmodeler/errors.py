# This file is part of InkModeler.
# Copyright (C) 2024 by the InkModeler Development Team.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.


"""Error classes raised by the stroke modeler"""


class ModelerError (Exception):
    """Base class for everything the modeler raises on bad input

    The stringification of a ModelerError should always be presentable
    to the caller directly. When a call raises one of these, the
    modeler's committed state is exactly what it was before the call,
    so the caller may carry on feeding events, or reset() and start a
    fresh stroke.

    """


class OrderError (ModelerError):
    """An event's time does not strictly follow the last modeled sample

    Also covers malformed event values: non-finite coordinates,
    timestamps or stylus values, negative timestamps, pressure outside
    [0, 1], and integration steps of zero or negative length.

    """

    def __init__(self, msg, time=None, previous_time=None):
        super().__init__(msg)
        self.time = time
        self.previous_time = previous_time


class SequenceError (ModelerError):
    """An event's type is not allowed in the current stroke state

    Raised for MOVE or UP events with no stroke in progress, and for
    DOWN events while a stroke is already in progress (unless the
    modeler was configured to restart strokes on DOWN).

    """

    def __init__(self, msg, event_type=None, state=None):
        super().__init__(msg)
        self.event_type = event_type
        self.state = state


class ParamError (ModelerError, ValueError):
    """Invalid configuration values

    The `problems` attribute lists each failed check as a separate
    string; the message joins them.

    """

    def __init__(self, problems):
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        msg = "Invalid modeler parameters: " + "; ".join(self.problems)
        super().__init__(msg)
