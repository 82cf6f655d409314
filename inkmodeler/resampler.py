# This file is part of InkModeler.
# Copyright (C) 2024 by the InkModeler Development Team.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Streaming linear upsampler"""

## Imports

import logging
import math

from .helpers import interp2

logger = logging.getLogger(__name__)


## Class defs

class Resampler (object):
    """Inserts linearly interpolated points to reach a minimum rate

    The only state kept is the previously emitted point. Feeding a new
    point emits enough evenly spaced points along the segment from the
    previous one, ending with the new point itself, that consecutive
    times are strictly less than ``1 / min_output_rate`` apart.

    >>> class _Params (object):
    ...     sampling_min_output_rate = 100.0
    ...     sampling_max_outputs_per_call = 20
    >>> r = Resampler(_Params())
    >>> r.start(0.0, 0.0, 0.0)
    [(0.0, 0.0, 0.0)]
    >>> [round(t, 6) for x, y, t in r.resample(3.0, 0.0, 0.025)]
    [0.008333, 0.016667, 0.025]
    >>> r.resample(4.0, 0.0, 0.03)
    [(4.0, 0.0, 0.03)]

    """

    def __init__(self, params):
        self._rate = params.sampling_min_output_rate
        self._max_outputs = params.sampling_max_outputs_per_call
        self._last = None

    def reset(self):
        self._last = None

    def start(self, x, y, time):
        """Begin a new stroke; the first point passes through as-is"""
        self._last = (x, y, time)
        return [self._last]

    def step_count(self, time):
        """Number of points the next `resample()` call will emit"""
        gap = time - self._last[2]
        # floor + 1 rather than ceil keeps every gap strictly below the
        # target interval, even when the gap is an exact multiple of it
        return int(math.floor(gap * self._rate)) + 1

    def resample(self, x, y, time):
        """Emit the upsampled points leading up to (x, y, time)

        :returns: List of (x, y, time) tuples, ending with the new point
        :rtype: list

        """
        x0, y0, t0 = self._last
        n = self.step_count(time)
        if n > self._max_outputs:
            logger.warning(
                "Gap of %.4fs needs %d resampled points, "
                "truncating to sampling_max_outputs_per_call=%d",
                time - t0, n, self._max_outputs,
            )
            n = self._max_outputs
        points = []
        for k in range(1, n):
            frac = k / n
            px, py = interp2((x0, y0), (x, y), frac)
            points.append((px, py, t0 + frac * (time - t0)))
        points.append((x, y, time))
        self._last = (x, y, time)
        return points
