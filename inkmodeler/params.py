# This file is part of InkModeler.
# Copyright (C) 2024 by the InkModeler Development Team.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Modeler tuning parameters

Parameters are immutable records. Construct them with keyword
arguments, start from `suggested()` and `_replace()` what you need, or
build them from a settings mapping with `from_dict()`. Nothing is
validated until the params reach a modeler, or until `validate()` is
called explicitly.

>>> params = ModelerParams.suggested()
>>> params.sampling_min_output_rate
180.0
>>> params.validate() is params
True
>>> bad = params._replace(wobble_smoother_speed_floor=2.0)
>>> bad.problems()
['wobble_smoother_speed_floor should be strictly smaller than wobble_smoother_speed_ceiling']

"""

## Imports

import collections
import collections.abc
import enum
import logging
import math
import numbers

from .errors import ParamError

logger = logging.getLogger(__name__)


## Constants

#: Hard upper bound on end-of-stroke iterations, limiting the size of
#: a single catch-up tail.
MAX_END_OF_STROKE_ITERATIONS = 1000


class PredictorKind (enum.Enum):
    """Which predictor serves `predict()` calls"""

    STROKE_END = "stroke_end"
    KALMAN = "kalman"


## Helpers

def _is_number(value):
    return (isinstance(value, numbers.Real)
            and not isinstance(value, bool)
            and math.isfinite(value))


def _is_count(value):
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _check(checks):
    """Run (passed, message) pairs, returning the failed messages"""
    return [msg for passed, msg in checks if not passed]


def _positive(params, name):
    value = getattr(params, name)
    return (_is_number(value) and value > 0, "%s should be positive" % name)


def _positive_count(params, name):
    value = getattr(params, name)
    return (_is_count(value) and value > 0,
            "%s should be a positive integer" % name)


def _coerce(name, value, input_type):
    """Convert one settings value, raising ParamError on failure"""
    if input_type is int:
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not _is_count(value):
            raise ParamError("%s: expected an integer, got %r" % (name, value))
        return value
    if input_type is bool:
        if not isinstance(value, bool):
            raise ParamError("%s: expected true or false, got %r"
                             % (name, value))
        return value
    if isinstance(input_type, type) and isinstance(value, input_type):
        return value
    if not isinstance(input_type, type):
        # nested section parser, raises ParamError itself
        return input_type(value)
    try:
        return input_type(value)
    except (TypeError, ValueError):
        raise ParamError("%s: invalid value %r" % (name, value))


def _from_mapping(cls, mapping, types, section):
    """Build a params record from a flat mapping

    Missing keys take their suggested value, unknown keys are logged
    and ignored.

    """
    kwargs = cls.suggested()._asdict()
    for key, value in mapping.items():
        if key not in types:
            logger.warning("Ignoring unknown %s setting %r", section, key)
            continue
        kwargs[key] = _coerce(key, value, types[key])
    return cls(**kwargs)


## Kalman predictor parameters

_KALMAN_FIELDS = collections.OrderedDict([
    ("process_noise", float),
    ("measurement_noise", float),
    ("min_stable_iteration", int),
    ("max_time_samples", int),
    ("min_catchup_velocity", float),
    ("acceleration_weight", float),
    ("jerk_weight", float),
    ("prediction_interval", float),
    ("confidence_desired_number_of_samples", int),
    ("confidence_max_estimation_distance", float),
    ("confidence_min_travel_speed", float),
    ("confidence_max_travel_speed", float),
    ("confidence_max_linear_deviation", float),
    ("confidence_baseline_linearity_confidence", float),
])


class KalmanPredictorParams (
        collections.namedtuple("KalmanPredictorParams", _KALMAN_FIELDS)):
    """Tuning for the Kalman-filter forward predictor

    * process_noise, measurement_noise: filter noise variances
    * min_stable_iteration: updates needed before predicting at all
    * max_time_samples: raw time deltas averaged to get the filter's dt
    * min_catchup_velocity: below this estimated speed, only the
      connector to the estimate is emitted
    * acceleration_weight, jerk_weight: weights of the higher-order
      terms in the extrapolation
    * prediction_interval: seconds of extrapolation at full confidence
    * confidence_*: shape the confidence that scales the extrapolation

    """

    __slots__ = ()

    @classmethod
    def suggested(cls):
        return cls(
            process_noise=1.0,
            measurement_noise=1.0,
            min_stable_iteration=4,
            max_time_samples=20,
            min_catchup_velocity=0.02,
            acceleration_weight=0.5,
            jerk_weight=0.1,
            prediction_interval=0.02,
            confidence_desired_number_of_samples=20,
            confidence_max_estimation_distance=1.5,
            confidence_min_travel_speed=1.0,
            confidence_max_travel_speed=5.0,
            confidence_max_linear_deviation=10.0,
            confidence_baseline_linearity_confidence=0.4,
        )

    @classmethod
    def from_dict(cls, mapping):
        return _from_mapping(cls, mapping, _KALMAN_FIELDS, "kalman")

    def to_dict(self):
        return dict(self._asdict())

    def problems(self):
        """List of human-readable reasons why these params are invalid"""
        baseline = self.confidence_baseline_linearity_confidence
        return _check([
            _positive(self, "process_noise"),
            _positive(self, "measurement_noise"),
            _positive_count(self, "min_stable_iteration"),
            _positive_count(self, "max_time_samples"),
            _positive(self, "min_catchup_velocity"),
            (_is_number(self.acceleration_weight),
             "acceleration_weight should be finite"),
            (_is_number(self.jerk_weight), "jerk_weight should be finite"),
            _positive(self, "prediction_interval"),
            _positive_count(self, "confidence_desired_number_of_samples"),
            _positive(self, "confidence_max_estimation_distance"),
            _positive(self, "confidence_min_travel_speed"),
            _positive(self, "confidence_max_travel_speed"),
            (_is_number(self.confidence_min_travel_speed)
             and _is_number(self.confidence_max_travel_speed)
             and (self.confidence_min_travel_speed
                  < self.confidence_max_travel_speed),
             "confidence_min_travel_speed should be strictly smaller than "
             "confidence_max_travel_speed"),
            _positive(self, "confidence_max_linear_deviation"),
            (_is_number(baseline) and 0.0 <= baseline <= 1.0,
             "confidence_baseline_linearity_confidence should be in [0, 1]"),
        ])

    def validate(self):
        """Return self if valid, otherwise raise ParamError"""
        problems = self.problems()
        if problems:
            raise ParamError(problems)
        return self


## Modeler parameters

def _kalman_setting(value):
    if isinstance(value, KalmanPredictorParams):
        return value
    if not isinstance(value, collections.abc.Mapping):
        raise ParamError("kalman_params: expected a mapping, got %r"
                         % (value,))
    return KalmanPredictorParams.from_dict(value)


_MODELER_FIELDS = collections.OrderedDict([
    ("wobble_smoother_timeout", float),
    ("wobble_smoother_speed_floor", float),
    ("wobble_smoother_speed_ceiling", float),
    ("position_modeler_spring_mass_constant", float),
    ("position_modeler_drag_constant", float),
    ("sampling_min_output_rate", float),
    ("sampling_end_of_stroke_stopping_distance", float),
    ("sampling_end_of_stroke_max_iterations", int),
    ("sampling_max_outputs_per_call", int),
    ("stylus_state_modeler_max_input_samples", int),
    ("predictor", PredictorKind),
    ("kalman_params", _kalman_setting),
    ("restart_on_down", bool),
])


class ModelerParams (
        collections.namedtuple("ModelerParams", _MODELER_FIELDS)):
    """All parameters for the stroke modeler

    Wobble smoothing:

    * wobble_smoother_timeout: length in seconds of the moving-average
      window. About 2.5 / input rate is a good starting point.
    * wobble_smoother_speed_floor, wobble_smoother_speed_ceiling: at or
      below the floor speed the moving average is used outright; at or
      above the ceiling the raw position is used.

    Position modeling:

    * position_modeler_spring_mass_constant: mass of the pen tip
      divided by the spring constant
    * position_modeler_drag_constant: fraction of the velocity removed
      from the acceleration per unit time

    Sampling:

    * sampling_min_output_rate: minimum number of outputs per second;
      slower input is upsampled to this rate
    * sampling_end_of_stroke_stopping_distance: catch-up stops once a
      step moves less than this, or lands this close to the anchor
    * sampling_end_of_stroke_max_iterations: cap on catch-up samples
    * sampling_max_outputs_per_call: cap on resampled points per update

    Stylus state:

    * stylus_state_modeler_max_input_samples: number of raw samples
      searched when interpolating pressure, tilt and orientation

    Prediction:

    * predictor: a `PredictorKind`
    * kalman_params: `KalmanPredictorParams`, used by the Kalman
      predictor only
    * restart_on_down: if true, a DOWN while a stroke is in progress
      starts a new stroke instead of raising SequenceError

    """

    __slots__ = ()

    @classmethod
    def suggested(cls):
        return cls(
            wobble_smoother_timeout=0.04,
            wobble_smoother_speed_floor=1.31,
            wobble_smoother_speed_ceiling=1.44,
            position_modeler_spring_mass_constant=11.0 / 32400.0,
            position_modeler_drag_constant=72.0,
            sampling_min_output_rate=180.0,
            sampling_end_of_stroke_stopping_distance=0.001,
            sampling_end_of_stroke_max_iterations=20,
            sampling_max_outputs_per_call=20,
            stylus_state_modeler_max_input_samples=10,
            predictor=PredictorKind.STROKE_END,
            kalman_params=KalmanPredictorParams.suggested(),
            restart_on_down=False,
        )

    @classmethod
    def from_dict(cls, mapping):
        """Build params from a settings mapping

        >>> p = ModelerParams.from_dict({
        ...     "sampling_min_output_rate": 240,
        ...     "predictor": "kalman",
        ...     "kalman_params": {"jerk_weight": 0.0},
        ... })
        >>> p.sampling_min_output_rate, p.predictor.name
        (240.0, 'KALMAN')
        >>> p.kalman_params.jerk_weight
        0.0

        """
        return _from_mapping(cls, mapping, _MODELER_FIELDS, "modeler")

    def to_dict(self):
        """Plain mapping suitable for JSON serialization"""
        data = dict(self._asdict())
        data["predictor"] = self.predictor.value
        data["kalman_params"] = self.kalman_params.to_dict()
        return data

    @property
    def target_interval(self):
        """Largest allowed gap between consecutive outputs, in seconds"""
        return 1.0 / self.sampling_min_output_rate

    def problems(self):
        """List of human-readable reasons why these params are invalid"""
        floor = self.wobble_smoother_speed_floor
        ceiling = self.wobble_smoother_speed_ceiling
        iterations = self.sampling_end_of_stroke_max_iterations
        problems = _check([
            _positive(self, "wobble_smoother_timeout"),
            _positive(self, "wobble_smoother_speed_floor"),
            _positive(self, "wobble_smoother_speed_ceiling"),
            (_is_number(floor) and _is_number(ceiling) and floor < ceiling,
             "wobble_smoother_speed_floor should be strictly smaller than "
             "wobble_smoother_speed_ceiling"),
            _positive(self, "position_modeler_spring_mass_constant"),
            _positive(self, "position_modeler_drag_constant"),
            _positive(self, "sampling_min_output_rate"),
            _positive(self, "sampling_end_of_stroke_stopping_distance"),
            _positive_count(self, "sampling_end_of_stroke_max_iterations"),
            (not _is_count(iterations)
             or iterations <= MAX_END_OF_STROKE_ITERATIONS,
             "sampling_end_of_stroke_max_iterations should be at most %d"
             % MAX_END_OF_STROKE_ITERATIONS),
            _positive_count(self, "sampling_max_outputs_per_call"),
            _positive_count(self, "stylus_state_modeler_max_input_samples"),
            (isinstance(self.predictor, PredictorKind),
             "predictor should be a PredictorKind"),
        ])
        if self.predictor is PredictorKind.KALMAN:
            if isinstance(self.kalman_params, KalmanPredictorParams):
                problems.extend(
                    "kalman_params." + p for p in self.kalman_params.problems()
                )
            else:
                problems.append("kalman_params should be "
                                "KalmanPredictorParams")
        return problems

    def validate(self):
        """Return self if valid, otherwise raise ParamError"""
        problems = self.problems()
        if problems:
            raise ParamError(problems)
        return self
