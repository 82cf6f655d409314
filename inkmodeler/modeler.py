# This file is part of InkModeler.
# Copyright (C) 2024 by the InkModeler Development Team.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Stroke modeler: raw stylus events in, smooth modeled samples out

Each raw event passes through a fixed pipeline of stages:

1. the wobble smoother removes low-speed jitter;
2. the resampler inserts points so outputs are dense enough in time;
3. the position modeler drags a simulated pen tip along the points;
4. the stylus state modeler looks up pressure, tilt and orientation
   for each modeled position.

When the stroke ends, the predictor lets the pen tip catch up with the
final raw position. The same predictor answers `predict()` calls during
the stroke, without touching the committed state.

>>> from inkmodeler.events import RawInput, EventType
>>> modeler = StrokeModeler()
>>> first, = modeler.update(RawInput(EventType.DOWN, 0.0, 0.0, 0.0,
...                                  pressure=0.5))
>>> first.position, first.velocity, first.pressure
((0.0, 0.0), (0.0, 0.0), 0.5)
>>> modeler.state
'active'
>>> results = modeler.update(RawInput(EventType.UP, 1.0, 0.0, 0.02))
>>> all(a.time < b.time for a, b in zip(results, results[1:]))
True
>>> modeler.state
'idle'

"""

## Imports

import logging

from .errors import ParamError
from .events import EventType
from .events import Result
from .params import ModelerParams
from .params import PredictorKind
from .position import PositionModeler
from .prediction import make_predictor
from .resampler import Resampler
from .stylus import StylusStateModeler
from .validation import IDLE
from .validation import StreamValidator
from .wobble import WobbleSmoother

logger = logging.getLogger(__name__)


## Helpers

def _checked_params(params):
    if params is None:
        return ModelerParams.suggested()
    if not isinstance(params, ModelerParams):
        raise ParamError("expected ModelerParams, got %s"
                         % (type(params).__name__,))
    return params.validate()


## Class defs

class StrokeModeler (object):
    """Streaming stroke modeler for one input device

    Instances are not thread-safe; feed each one from a single thread.

    :param ModelerParams params: Tuning parameters. If None,
      `ModelerParams.suggested()` is used.
    :raises ParamError: if the params fail validation

    """

    def __init__(self, params=None):
        self._setup(_checked_params(params))

    def _setup(self, params):
        self._params = params
        self._validator = StreamValidator(params.restart_on_down)
        self._wobble = WobbleSmoother(params)
        self._resampler = Resampler(params)
        self._position = PositionModeler(params)
        self._stylus = StylusStateModeler(params)
        self._predictor = make_predictor(params)
        if params.predictor is PredictorKind.STROKE_END:
            self._catch_up = self._predictor
        else:
            # stroke ends always use the catch-up model
            self._catch_up = make_predictor(
                params._replace(predictor=PredictorKind.STROKE_END),
            )
        self._last_raw_position = None

    @property
    def params(self):
        return self._params

    @property
    def state(self):
        """Either "idle" between strokes or "active" during one"""
        return self._validator.state

    def reset(self):
        """Abandon any stroke in progress

        The params are kept. The next event must be a DOWN.

        """
        if self._validator.state != IDLE:
            logger.debug("Reset with a stroke in progress; abandoning it")
        self._validator.reset()
        self._reset_stages()

    def reset_with_params(self, params):
        """Abandon any stroke in progress and switch to new params

        :raises ParamError: if the params fail validation, in which case
          the old params and state are kept

        """
        self._setup(_checked_params(params))
        logger.debug("Modeler reset with new params")

    def _reset_stages(self):
        self._wobble.reset()
        self._resampler.reset()
        self._position.clear()
        self._stylus.reset()
        self._predictor.reset()
        self._last_raw_position = None

    def update(self, raw_input):
        """Feed one raw input event

        :param RawInput raw_input: The next event of the stream
        :returns: New modeled samples, in time order
        :rtype: list of Result
        :raises OrderError: if the event's time does not strictly follow
          the last modeled sample's time, or its values are not finite
        :raises SequenceError: if the event type is not allowed in the
          current state

        At most `sampling_max_outputs_per_call` samples are returned;
        any excess is dropped with a warning. Nothing is changed if an
        error is raised.

        """
        self._validator.check(raw_input)
        if raw_input.event_type is EventType.DOWN:
            results = self._start_stroke(raw_input)
        else:
            results = self._continue_stroke(raw_input)
            if raw_input.event_type is EventType.UP:
                results = self._capped(results, self._end_stroke(raw_input))
        self._validator.commit(raw_input, results[-1].time)
        return results

    def _start_stroke(self, event):
        if self._validator.state != IDLE:
            logger.debug("DOWN during a stroke at t=%r; restarting",
                         event.time)
        else:
            logger.debug("Stroke started at t=%r", event.time)
        self._reset_stages()
        self._wobble.smooth(event)
        self._resampler.start(event.x, event.y, event.time)
        state = self._position.reset(event.position, event.time)
        self._stylus.update(event)
        self._predictor.update(event)
        self._last_raw_position = event.position
        return [Result.from_state(state, self._stylus.query(event.x, event.y))]

    def _continue_stroke(self, event):
        self._stylus.update(event)
        x, y = self._wobble.smooth(event)
        states = [
            self._position.step((px, py), t)
            for px, py, t in self._resampler.resample(x, y, event.time)
        ]
        self._predictor.update(event)
        self._last_raw_position = event.position
        return self._results(states)

    def _end_stroke(self, event):
        state = self._position.state
        tail = self._catch_up.predict(state, event.position)
        if not tail:
            tail = [state._replace(time=state.time
                                   + self._params.target_interval)]
        logger.debug("Stroke ended at t=%r with %d catch-up samples",
                     event.time, len(tail))
        return self._results(tail)

    def _capped(self, results, tail):
        """Join resampled results and the catch-up tail, within the cap

        Resampled results are dropped before tail samples, so that the
        stroke still ends at the last catch-up sample.

        """
        cap = self._params.sampling_max_outputs_per_call
        total = len(results) + len(tail)
        if total <= cap:
            return results + tail
        logger.warning(
            "%d samples for one event, "
            "truncating to sampling_max_outputs_per_call=%d",
            total, cap,
        )
        tail = tail[-cap:]
        return results[:cap - len(tail)] + tail

    def _results(self, states):
        return [
            Result.from_state(s, self._stylus.query(*s.position))
            for s in states
        ]

    def predict(self):
        """Predicted samples from the committed state onwards

        Calling this any number of times in a row returns the same
        samples, and later `update()` calls behave exactly as if it had
        never been called.

        :returns: Predicted samples, possibly none
        :rtype: list of Result

        """
        if self._validator.state == IDLE:
            return []
        states = self._predictor.predict(self._position.state,
                                         self._last_raw_position)
        return self._results(states)


def _test():
    import doctest
    doctest.testmod()


if __name__ == '__main__':
    _test()
