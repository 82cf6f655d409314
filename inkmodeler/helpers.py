# This file is part of InkModeler.
# Copyright (C) 2024 by the InkModeler Development Team.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Small geometry and interpolation helpers shared by the stages"""

## Imports

import math


## Scalar helpers

def clamp(x, lo, hi):
    if x < lo:
        return lo
    if x > hi:
        return hi
    return x


def normalize01(start, end, value):
    """Position of `value` between `start` and `end`, clamped to [0, 1]

    >>> normalize01(1.0, 2.0, 1.5)
    0.5
    >>> normalize01(7.0, 3.0, 4.0)
    0.75
    >>> normalize01(-1.0, 1.0, 2.0)
    1.0

    A degenerate range acts as a step function.

    >>> normalize01(1.0, 1.0, 1.0)
    0.0
    >>> normalize01(1.0, 1.0, 2.0)
    1.0

    """
    if start == end:
        return 1.0 if value > start else 0.0
    return clamp((value - start) / (end - start), 0.0, 1.0)


def interp(start, end, amount):
    """Linear interpolation, with `amount` clamped to [0, 1]

    >>> interp(5.0, 10.0, 0.2)
    6.0
    >>> interp(10.0, -2.0, 0.75)
    1.0
    >>> interp(-1.0, 2.0, -3.0)
    -1.0
    >>> interp(5.0, 7.0, 20.0)
    7.0

    """
    return start + (end - start) * clamp(amount, 0.0, 1.0)


def interp2(start, end, amount):
    """Linear interpolation between two (x, y) pairs

    >>> interp2((1.0, 2.0), (3.0, 5.0), 0.5)
    (2.0, 3.5)
    >>> interp2((7.0, 9.0), (25.0, 30.0), -0.1)
    (7.0, 9.0)

    """
    return (
        interp(start[0], end[0], amount),
        interp(start[1], end[1], amount),
    )


def interp_angle(start, end, amount):
    """Interpolate between two angles (radians) along the shorter arc

    The result is normalized to [0, 2*pi).

    >>> round(interp_angle(0.25, 0.75, 0.5), 6)
    0.5
    >>> two_pi = 2 * math.pi
    >>> round(interp_angle(two_pi - 0.25, 0.25, 0.75), 6)
    0.125
    >>> round(interp_angle(0.1, two_pi - 0.3, 0.5), 6) == round(two_pi - 0.1, 6)
    True

    """
    two_pi = 2 * math.pi
    delta = math.fmod(end - start, two_pi)
    if delta > math.pi:
        delta -= two_pi
    elif delta < -math.pi:
        delta += two_pi
    angle = math.fmod(start + delta * clamp(amount, 0.0, 1.0), two_pi)
    if angle < 0.0:
        angle += two_pi
    # fmod can leave a tiny negative residue that rounds up to 2*pi
    if angle >= two_pi:
        angle = 0.0
    return angle


## Vector helpers

def distance(p0, p1):
    """Euclidean distance between two (x, y) pairs

    >>> distance((0.0, 0.0), (3.0, 4.0))
    5.0

    """
    return math.hypot(p1[0] - p0[0], p1[1] - p0[1])


def nearest_point_on_segment(start, end, point):
    """Ratio along a segment of the point nearest to `point`

    :param tuple start: Segment start (x, y)
    :param tuple end: Segment end (x, y)
    :param tuple point: Query point (x, y)
    :returns: r in [0, 1] such that (1-r)*start + r*end is nearest
    :rtype: float

    >>> nearest_point_on_segment((0.0, 0.0), (1.0, 0.0), (0.25, 0.5))
    0.25
    >>> nearest_point_on_segment((3.0, 4.0), (5.0, 6.0), (-1.0, -1.0))
    0.0
    >>> nearest_point_on_segment((20.0, 10.0), (10.0, 5.0), (2.0, 2.0))
    1.0
    >>> nearest_point_on_segment((0.0, 5.0), (5.0, 0.0), (3.0, 3.0))
    0.5

    Degenerate segments always give zero.

    >>> nearest_point_on_segment((1.0, 1.0), (1.0, 1.0), (5.0, 5.0))
    0.0

    """
    seg_x = end[0] - start[0]
    seg_y = end[1] - start[1]
    seg_len2 = seg_x * seg_x + seg_y * seg_y
    if seg_len2 == 0.0:
        return 0.0
    proj = (point[0] - start[0]) * seg_x + (point[1] - start[1]) * seg_y
    return clamp(proj / seg_len2, 0.0, 1.0)


def is_finite_point(*values):
    """True if every value given is a finite number

    >>> is_finite_point(1.0, 2.0, 0.5)
    True
    >>> is_finite_point(1.0, float("nan"))
    False

    """
    return all(math.isfinite(v) for v in values)


## Module testing

def _test():
    import doctest
    doctest.testmod()


if __name__ == '__main__':
    _test()
