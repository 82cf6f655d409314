# This file is part of InkModeler.
# Copyright (C) 2024 by the InkModeler Development Team.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Speed-adaptive moving average for raw positions ("dewobbling")

Tablet hardware jitters by a small, roughly constant amount. At low
speeds that jitter dominates the motion and shows up as wobbly ink, so
slow input is replaced with its time-weighted moving average. At high
speeds the jitter is negligible and the lag of an average would be
noticeable, so fast input passes through untouched. Between the speed
floor and ceiling the two are blended linearly.

"""

## Imports

import logging
import math

from .helpers import interp2
from .helpers import normalize01
from .ringbuffer import RingBuffer

logger = logging.getLogger(__name__)


## Module constants

# Columns of the window arena
_X, _Y, _WX, _WY, _DIST, _DUR, _TIME = range(7)
_WIDTH = 7

# Durations below this count as an empty window
_MIN_DURATION_SUM = 1e-12


## Class defs

class WobbleSmoother (object):
    """Windowed, speed-adaptive position filter

    The window holds the raw samples of the last `timeout` seconds.
    Running sums of duration-weighted position, travelled distance and
    duration are kept alongside it, so each sample costs O(1)
    amortized regardless of how many samples the window holds.

    Each stored sample carries the duration and distance back to its
    predecessor, so the oldest sample in the window still accounts for
    the interval leading up to it.

    """

    def __init__(self, params):
        self._timeout = params.wobble_smoother_timeout
        self._speed_floor = params.wobble_smoother_speed_floor
        self._speed_ceiling = params.wobble_smoother_speed_ceiling
        capacity = max(
            2,
            int(math.ceil(2.0 * params.sampling_min_output_rate
                          * params.wobble_smoother_timeout)),
        )
        self._window = RingBuffer(capacity, width=_WIDTH, grow=True)
        self._clear_sums()

    def _clear_sums(self):
        self._weighted_x = 0.0
        self._weighted_y = 0.0
        self._distance_sum = 0.0
        self._duration_sum = 0.0

    def reset(self):
        self._window.clear()
        self._clear_sums()

    def __len__(self):
        return len(self._window)

    @property
    def average_speed(self):
        """Mean speed over the current window, 0 if it spans no time"""
        if self._duration_sum < _MIN_DURATION_SUM:
            return 0.0
        return self._distance_sum / self._duration_sum

    def smooth(self, event):
        """Feed a raw event, returning its dewobbled (x, y) position

        :param event: The raw input; its time must follow the previous
          event's. Validation is the caller's job.
        :type event: inkmodeler.events.RawInput
        :returns: The filtered position
        :rtype: tuple

        """
        x, y, t = event.x, event.y, event.time
        if not len(self._window):
            self._window.append((x, y, 0.0, 0.0, 0.0, 0.0, t))
            return (x, y)

        last = self._window.last()
        duration = t - float(last[_TIME])
        dist = math.hypot(x - float(last[_X]), y - float(last[_Y]))
        wx, wy = x * duration, y * duration
        self._window.append((x, y, wx, wy, dist, duration, t))
        self._weighted_x += wx
        self._weighted_y += wy
        self._distance_sum += dist
        self._duration_sum += duration

        horizon = t - self._timeout
        while self._window.first()[_TIME] < horizon:
            front = self._window.popleft()
            self._weighted_x -= float(front[_WX])
            self._weighted_y -= float(front[_WY])
            self._distance_sum -= float(front[_DIST])
            self._duration_sum -= float(front[_DUR])
        if len(self._window) == 1:
            # Only the new sample is left; drop accumulated rounding
            # error along with the evicted contributions.
            self._weighted_x, self._weighted_y = wx, wy
            self._distance_sum, self._duration_sum = dist, duration

        if self._duration_sum < _MIN_DURATION_SUM:
            return (x, y)
        avg_x = self._weighted_x / self._duration_sum
        avg_y = self._weighted_y / self._duration_sum
        blend = normalize01(self._speed_floor, self._speed_ceiling,
                            self.average_speed)
        if blend >= 1.0:
            return (x, y)
        if blend <= 0.0:
            return (avg_x, avg_y)
        return interp2((avg_x, avg_y), (x, y), blend)
