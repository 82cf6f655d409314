# This file is part of InkModeler.
# Copyright (C) 2024 by the InkModeler Development Team.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Predictors: synthetic samples ahead of the committed model state

The spring-drag model trails the raw input. A predictor produces
samples that fill the gap between the committed model state and where
the stylus really is, either when the stroke ends or on demand, so that
hosts can draw "wet" ink ahead of the committed stroke.

Predictors never modify the committed model state: they work on
copies, and their output is recomputed from scratch on every call.

"""

## Imports

import collections
import logging
import math

import numpy as np

from .helpers import distance
from .helpers import interp
from .helpers import nearest_point_on_segment
from .helpers import normalize01
from .params import PredictorKind
from .position import ModelState
from .position import spring_drag_step

logger = logging.getLogger(__name__)


## Interface

class Predictor (object):
    """Base class for predictors

    Subclasses override `predict()`, and `reset()` and `update()` if
    they keep state of their own.

    """

    def reset(self):
        """Forget everything about the current stroke"""

    def update(self, event):
        """Observe a raw input event committed to the model"""

    def predict(self, state, anchor):
        """Predicted model states following `state`

        :param ModelState state: The committed model state
        :param tuple anchor: The latest raw (x, y) input position
        :returns: New ModelStates with strictly increasing times, all
          later than `state.time`. May be empty.
        :rtype: list

        """
        raise NotImplementedError


def make_predictor(params):
    """Construct the predictor selected by `params.predictor`"""
    if params.predictor is PredictorKind.KALMAN:
        return KalmanPredictor(params)
    return StrokeEndPredictor(params)


## Catch-up

class StrokeEndPredictor (Predictor):
    """Lets the model catch up with a fixed anchor

    The spring-drag system is iterated with the latest raw position as
    a stationary anchor, one target interval at a time. Iteration
    stops when a step makes no real progress, when the tip arrives
    within the stopping distance of the anchor, or after the maximum
    number of accepted samples. A step that would carry the tip past
    the anchor is retried with half the time step; retries don't count
    towards the maximum.

    """

    def __init__(self, params):
        self._spring_mass = params.position_modeler_spring_mass_constant
        self._drag = params.position_modeler_drag_constant
        self._interval = params.target_interval
        self._stop_distance = params.sampling_end_of_stroke_stopping_distance
        self._max_iterations = params.sampling_end_of_stroke_max_iterations

    def predict(self, state, anchor):
        dt = self._interval
        previous = state
        out = []
        while len(out) < self._max_iterations:
            time = previous.time + dt
            if not time > previous.time:
                # halved below the timestamp resolution
                break
            candidate = spring_drag_step(previous, anchor, time,
                                         self._spring_mass, self._drag)
            moved = distance(previous.position, candidate.position)
            if moved < self._stop_distance:
                break
            r = nearest_point_on_segment(previous.position,
                                         candidate.position, anchor)
            if r < 1.0:
                dt *= 0.5
                continue
            out.append(candidate)
            previous = candidate
            if distance(candidate.position, anchor) < self._stop_distance:
                break
        return out


## Kalman forward model

def _transition(dt):
    """Constant-jerk state transition matrix for one step of `dt`"""
    return np.array([
        [1.0, dt, dt * dt / 2.0, dt ** 3 / 6.0],
        [0.0, 1.0, dt, dt * dt / 2.0],
        [0.0, 0.0, 1.0, dt],
        [0.0, 0.0, 0.0, 1.0],
    ])


def _process_noise(dt, variance):
    """Process noise from a random jerk of the given variance"""
    g = np.array([[dt ** 3 / 6.0], [dt * dt / 2.0], [dt], [1.0]])
    return variance * (g @ g.T)


class KalmanPredictor (Predictor):
    """Forward predictor driven by a constant-jerk Kalman filter

    Both axes share one filter structure: the state is a ``(4, 2)``
    array whose rows are position, velocity, acceleration and jerk and
    whose columns are x and y. With identical noise models on both axes
    the covariance matrix is shared too.

    A prediction is a cubic connector from the committed model state
    to the filter's estimate, followed by an extrapolation of the
    estimate whose length is scaled by how much the estimate can be
    trusted. The predictor declines (returns an empty list) until the
    filter has seen enough samples to be stable.

    """

    # Initial variance of the unobserved derivatives
    _INITIAL_VARIANCE = 1e3

    def __init__(self, params):
        self._params = params.kalman_params
        self._interval = params.target_interval
        self._max_outputs = params.sampling_max_outputs_per_call
        self._deltas = collections.deque(
            maxlen=self._params.max_time_samples,
        )
        self.reset()

    def reset(self):
        self._x = None
        self._p = None
        self._deltas.clear()
        self._last_time = None
        self._last_position = None
        self._sample_count = 0

    def update(self, event):
        position = np.array(event.position)
        if self._x is None:
            self._x = np.zeros((4, 2))
            self._x[0] = position
            self._p = np.diag([
                self._params.measurement_noise,
                self._INITIAL_VARIANCE,
                self._INITIAL_VARIANCE,
                self._INITIAL_VARIANCE,
            ])
        else:
            self._deltas.append(event.time - self._last_time)
            dt = sum(self._deltas) / len(self._deltas)
            f = _transition(dt)
            x = f @ self._x
            p = f @ self._p @ f.T + _process_noise(
                dt, self._params.process_noise,
            )
            # Measurement is position only, so H = [1 0 0 0]
            residual = position - x[0]
            s = p[0, 0] + self._params.measurement_noise
            gain = p[:, 0:1] / s
            self._x = x + gain @ residual[np.newaxis, :]
            self._p = p - gain @ p[0:1, :]
        self._last_time = event.time
        self._last_position = (event.x, event.y)
        self._sample_count += 1

    def confidence(self):
        """How far to trust the extrapolation, in [0, 1]"""
        kp = self._params
        est_pos, est_vel, est_acc, est_jerk = self._x
        sample_conf = min(
            1.0, self._sample_count / kp.confidence_desired_number_of_samples,
        )
        error = distance(est_pos, self._last_position)
        error_conf = 1.0 - normalize01(
            0.0, kp.confidence_max_estimation_distance, error,
        )
        speed = math.hypot(*est_vel)
        speed_conf = normalize01(
            kp.confidence_min_travel_speed,
            kp.confidence_max_travel_speed,
            speed,
        )
        t = kp.prediction_interval
        curved = self._extrapolate(t)[0]
        straight = est_pos + est_vel * t
        deviation = distance(curved, straight)
        linearity_conf = interp(
            1.0, kp.confidence_baseline_linearity_confidence,
            normalize01(0.0, kp.confidence_max_linear_deviation, deviation),
        )
        return sample_conf * error_conf * speed_conf * linearity_conf

    def _extrapolate(self, t):
        """Position, velocity, acceleration of the estimate `t` ahead"""
        kp = self._params
        p, v, a, j = self._x
        a = a * kp.acceleration_weight
        j = j * kp.jerk_weight
        pos = p + v * t + a * (t * t / 2.0) + j * (t ** 3 / 6.0)
        vel = v + a * t + j * (t * t / 2.0)
        acc = a + j * t
        return pos, vel, acc

    def _connector(self, state, count):
        """Cubic Hermite segment from `state` to the estimate"""
        duration = count * self._interval
        p0 = np.array(state.position)
        v0 = np.array(state.velocity) * duration
        p1 = self._x[0]
        v1 = self._x[1] * duration
        out = []
        for k in range(1, count + 1):
            s = k / count
            s2, s3 = s * s, s * s * s
            pos = ((2 * s3 - 3 * s2 + 1) * p0 + (s3 - 2 * s2 + s) * v0
                   + (-2 * s3 + 3 * s2) * p1 + (s3 - s2) * v1)
            vel = ((6 * s2 - 6 * s) * p0 + (3 * s2 - 4 * s + 1) * v0
                   + (-6 * s2 + 6 * s) * p1 + (3 * s2 - 2 * s) * v1)
            acc = ((12 * s - 6) * p0 + (6 * s - 4) * v0
                   + (-12 * s + 6) * p1 + (6 * s - 2) * v1)
            out.append(ModelState(
                _pair(pos),
                _pair(vel / duration),
                _pair(acc / (duration * duration)),
                state.time + k * self._interval,
            ))
        return out

    def predict(self, state, anchor):
        kp = self._params
        if self._sample_count < kp.min_stable_iteration:
            return []
        est_pos, est_vel = self._x[0], self._x[1]
        speed = math.hypot(*est_vel)
        gap = distance(state.position, est_pos)
        catchup_speed = max(speed, kp.min_catchup_velocity)
        count = int(math.ceil(gap / (catchup_speed * self._interval)))
        count = max(1, min(count, self._max_outputs))
        out = self._connector(state, count)
        if speed < kp.min_catchup_velocity:
            return out

        horizon = kp.prediction_interval * self.confidence()
        steps = min(int(horizon / self._interval), self._max_outputs)
        start_time = out[-1].time
        for k in range(1, steps + 1):
            t = k * self._interval
            pos, vel, acc = self._extrapolate(t)
            out.append(ModelState(_pair(pos), _pair(vel), _pair(acc),
                                  start_time + t))
        return out


def _pair(arr):
    return (float(arr[0]), float(arr[1]))
