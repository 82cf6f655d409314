# This file is part of InkModeler.
# Copyright (C) 2024 by the InkModeler Development Team.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Spring-drag model of the pen tip

The pen tip is modeled as a mass connected by a spring to a moving
anchor, the dewobbled and resampled input position. As the anchor
moves, it drags the tip along behind it, while a drag force
proportional to the tip's velocity damps the motion. The result trails
the input slightly but is free of the sharp kinks of raw input.

"""

## Imports

import collections
import logging

from .errors import OrderError

logger = logging.getLogger(__name__)


## Model state

_STATE_FIELDS = ("position", "velocity", "acceleration", "time")


class ModelState (collections.namedtuple("ModelState", _STATE_FIELDS)):
    """Integrator memory: (x, y) position, velocity, acceleration + time"""

    __slots__ = ()

    @classmethod
    def at_rest(cls, position, time):
        return cls(
            (float(position[0]), float(position[1])),
            (0.0, 0.0),
            (0.0, 0.0),
            float(time),
        )


def spring_drag_step(state, anchor, time, spring_mass_constant,
                     drag_constant):
    """One forward Euler step of the spring-drag system

    :param ModelState state: State before the step
    :param tuple anchor: (x, y) position the spring pulls towards
    :param float time: Time at the end of the step
    :param float spring_mass_constant: Mass over spring constant
    :param float drag_constant: Velocity damping per unit time
    :returns: The state after the step
    :rtype: ModelState

    Acceleration is computed from the previous position and velocity,
    then velocity is advanced, then position with the new velocity.

    >>> s = ModelState.at_rest((0.0, 0.0), 0.0)
    >>> s = spring_drag_step(s, (1.0, 0.0), 1.0 / 180, 11.0 / 32400, 72.0)
    >>> [round(v, 4) for v in s.position + s.velocity]
    [0.0909, 0.0, 16.3636, 0.0]

    """
    dt = time - state.time
    if not dt > 0.0:
        raise OrderError(
            "Position model step of %r seconds; time must increase" % (dt,),
            time=time, previous_time=state.time,
        )
    (px, py), (vx, vy) = state.position, state.velocity
    ax = (anchor[0] - px) / spring_mass_constant - drag_constant * vx
    ay = (anchor[1] - py) / spring_mass_constant - drag_constant * vy
    vx += dt * ax
    vy += dt * ay
    px += dt * vx
    py += dt * vy
    return ModelState((px, py), (vx, vy), (ax, ay), time)


## Class defs

class PositionModeler (object):
    """Stateful wrapper around `spring_drag_step()` for one stroke"""

    def __init__(self, params):
        self._spring_mass = params.position_modeler_spring_mass_constant
        self._drag = params.position_modeler_drag_constant
        self._state = None

    @property
    def state(self):
        """The committed ModelState, or None before the first reset"""
        return self._state

    def reset(self, position, time):
        """Start a stroke at rest at the given position"""
        self._state = ModelState.at_rest(position, time)
        return self._state

    def clear(self):
        self._state = None

    def step(self, anchor, time):
        """Advance the model to `time`, pulled towards `anchor`"""
        self._state = self.peek(self._state, anchor, time)
        return self._state

    def peek(self, state, anchor, time):
        """Like `step()`, but from an arbitrary state and uncommitted"""
        return spring_drag_step(state, anchor, time,
                                self._spring_mass, self._drag)
