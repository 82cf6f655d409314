# This file is part of InkModeler.
# Copyright (C) 2024 by the InkModeler Development Team.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Pressure, tilt and orientation for modeled positions

Modeled positions don't line up with raw input positions, so the
stylus state reported with each result is looked up geometrically: the
modeled position is projected onto the nearest segment of the recent
raw input polyline, and each attribute is interpolated at the same
fraction along that segment.

"""

## Imports

import collections
import logging
import math

import numpy as np

from .helpers import interp
from .helpers import interp_angle
from .ringbuffer import RingBuffer

logger = logging.getLogger(__name__)


## Module constants

_X, _Y, _PRESSURE, _TILT, _ORIENTATION = range(5)
_WIDTH = 5

_COLUMN_NAMES = {
    _PRESSURE: "pressure",
    _TILT: "tilt",
    _ORIENTATION: "orientation",
}


## Stylus state record

class StylusState (
        collections.namedtuple("StylusState",
                               ("pressure", "tilt", "orientation"))):
    """Auxiliary stylus attributes; None where unknown"""

    __slots__ = ()


UNKNOWN_STYLUS_STATE = StylusState(None, None, None)


def _to_column(value):
    return math.nan if value is None else float(value)


def _from_column(value, tracked):
    if not tracked:
        return None
    return float(value)


## Class defs

class StylusStateModeler (object):
    """Nearest-segment interpolator over the last few raw samples

    >>> from inkmodeler.events import RawInput, EventType
    >>> class _Params (object):
    ...     stylus_state_modeler_max_input_samples = 10
    >>> m = StylusStateModeler(_Params())
    >>> m.update(RawInput(EventType.DOWN, 0.0, 0.0, 0.0, pressure=0.2))
    >>> m.update(RawInput(EventType.MOVE, 2.0, 0.0, 0.1, pressure=0.6))
    >>> round(m.query(0.5, 1.0).pressure, 6)
    0.3
    >>> m.query(0.5, 1.0).tilt is None
    True

    """

    def __init__(self, params):
        self._window = RingBuffer(
            params.stylus_state_modeler_max_input_samples,
            width=_WIDTH,
        )
        self._reset_tracking()

    def _reset_tracking(self):
        self._tracked = {
            _PRESSURE: True,
            _TILT: True,
            _ORIENTATION: True,
        }

    def reset(self):
        self._window.clear()
        self._reset_tracking()

    def __len__(self):
        return len(self._window)

    def update(self, event):
        """Record the stylus state of a raw input event

        An attribute the event does not report stops being tracked
        until the next reset, since interpolating between known and
        unknown values has no meaning.

        """
        row = (
            event.x, event.y,
            _to_column(event.pressure),
            _to_column(event.tilt),
            _to_column(event.orientation),
        )
        for column in self._tracked:
            if math.isnan(row[column]) and self._tracked[column]:
                logger.debug("Raw input has no %s; not tracking it for "
                             "the rest of the stroke", _COLUMN_NAMES[column])
                self._tracked[column] = False
        self._window.append(row)

    def _state_from_row(self, row):
        return StylusState(
            _from_column(row[_PRESSURE], self._tracked[_PRESSURE]),
            _from_column(row[_TILT], self._tracked[_TILT]),
            _from_column(row[_ORIENTATION], self._tracked[_ORIENTATION]),
        )

    def query(self, x, y):
        """Interpolated stylus state at a modeled position

        :param float x: Modeled x coordinate
        :param float y: Modeled y coordinate
        :rtype: StylusState

        """
        count = len(self._window)
        if count == 0:
            return UNKNOWN_STYLUS_STATE
        if count == 1:
            return self._state_from_row(self._window.first())

        rows = self._window.rows()
        starts = rows[:-1, _X:_Y + 1]
        ends = rows[1:, _X:_Y + 1]
        segs = ends - starts
        seg_len2 = np.einsum("ij,ij->i", segs, segs)
        proj = np.einsum("ij,ij->i", np.array((x, y)) - starts, segs)
        ratios = np.zeros_like(seg_len2)
        np.divide(proj, seg_len2, out=ratios, where=seg_len2 > 0.0)
        ratios = np.clip(ratios, 0.0, 1.0)
        nearest = starts + ratios[:, np.newaxis] * segs
        dists = np.hypot(nearest[:, 0] - x, nearest[:, 1] - y)
        # argmin picks the oldest segment on ties
        i = int(np.argmin(dists))
        r = float(ratios[i])
        start, end = rows[i], rows[i + 1]

        def _lerp(column):
            if not self._tracked[column]:
                return None
            return interp(float(start[column]), float(end[column]), r)

        orientation = None
        if self._tracked[_ORIENTATION]:
            orientation = interp_angle(float(start[_ORIENTATION]),
                                       float(end[_ORIENTATION]), r)
        return StylusState(_lerp(_PRESSURE), _lerp(_TILT), orientation)
