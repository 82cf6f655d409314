# This file is part of InkModeler.
# Copyright (C) 2024 by the InkModeler Development Team.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Raw input events and modeled results"""

## Imports

import collections
import enum


## Event types

class EventType (enum.Enum):
    """Position of a raw event within its stroke"""

    DOWN = "down"  # stylus touches the surface
    MOVE = "move"
    UP = "up"  # stylus leaves the surface, completing the stroke


## Record types

_RAW_INPUT_FIELDS = (
    "event_type", "x", "y", "time", "pressure", "tilt", "orientation",
)


class RawInput (collections.namedtuple("RawInput", _RAW_INPUT_FIELDS)):
    """Recorded raw event data, as fed to the modeler

    * event_type: an `EventType`
    * x, y: float coordinates, in whatever space the host uses
    * time: non-negative float timestamp in seconds; must strictly
      increase
    * pressure: float in [0.0, 1.0], or None if not reported
    * tilt: float in [0, pi/2] radians, or None if not reported
    * orientation: float in [0, 2*pi) radians, or None if not reported

    The modeler rejects non-finite values and a pressure outside its
    range. Tilt and orientation ranges are not checked: they are
    interpolated as given.

    >>> ev = RawInput(EventType.DOWN, 1.0, 2.0, 0.5, pressure=0.3)
    >>> ev.position
    (1.0, 2.0)
    >>> ev.tilt is None
    True

    """

    __slots__ = ()

    def __new__(cls, event_type, x, y, time, pressure=None, tilt=None,
                orientation=None):
        return super().__new__(
            cls, event_type, float(x), float(y), float(time),
            pressure, tilt, orientation,
        )

    @property
    def position(self):
        return (self.x, self.y)


_RESULT_FIELDS = (
    "position", "velocity", "acceleration", "time",
    "pressure", "tilt", "orientation",
)


class Result (collections.namedtuple("Result", _RESULT_FIELDS)):
    """One modeled output sample

    * position, velocity, acceleration: (x, y) float pairs
    * time: float timestamp in seconds
    * pressure, tilt, orientation: interpolated stylus state, or None
      where the raw events did not report it

    """

    __slots__ = ()

    @classmethod
    def from_state(cls, state, stylus):
        """Combine a position model state with a stylus state"""
        return cls(
            state.position, state.velocity, state.acceleration, state.time,
            stylus.pressure, stylus.tilt, stylus.orientation,
        )
