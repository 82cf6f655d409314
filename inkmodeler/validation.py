# This file is part of InkModeler.
# Copyright (C) 2024 by the InkModeler Development Team.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Input stream well-formedness checks"""

## Imports

import logging

from .errors import OrderError
from .errors import SequenceError
from .events import EventType
from .helpers import is_finite_point

logger = logging.getLogger(__name__)


## Stroke states

IDLE = "idle"
ACTIVE = "active"


## Class defs

class StreamValidator (object):
    """Tracks the stroke state machine and checks events against it

    Checking and committing are separate steps, so that an event can be
    vetted before any pipeline stage sees it, and only recorded once
    every stage has accepted it.

    Event times must also strictly follow the last modeled sample, which
    can lie beyond the UP event of the previous stroke. That holds
    across strokes until `reset()`, so output times never go backwards.

    >>> from inkmodeler.events import RawInput
    >>> v = StreamValidator()
    >>> down = RawInput(EventType.DOWN, 0, 0, 1.0)
    >>> v.check(down)
    >>> v.commit(down, 1.0)
    >>> v.state
    'active'
    >>> v.check(RawInput(EventType.MOVE, 1, 0, 1.0))
    Traceback (most recent call last):
    ...
    inkmodeler.errors.OrderError: Event time 1.0 is not after the last modeled time 1.0

    """

    def __init__(self, restart_on_down=False):
        self.restart_on_down = restart_on_down
        self.reset()

    def reset(self):
        self._state = IDLE
        self._last_time = None

    @property
    def state(self):
        return self._state

    def check(self, event):
        """Raise if `event` may not be fed next; never changes state"""
        error = self._find_error(event)
        if error is not None:
            logger.debug("Rejecting %r: %s", event, error)
            raise error

    def _find_error(self, event):
        if not isinstance(event.event_type, EventType):
            return SequenceError(
                "Unknown event type %r" % (event.event_type,),
                event_type=event.event_type, state=self._state,
            )
        if not is_finite_point(event.x, event.y, event.time):
            return OrderError(
                "Event has non-finite position or time: (%r, %r) at %r"
                % (event.x, event.y, event.time),
                time=event.time, previous_time=self._last_time,
            )
        if event.time < 0.0:
            return OrderError(
                "Event time %r is negative" % (event.time,),
                time=event.time, previous_time=self._last_time,
            )
        for name in ("pressure", "tilt", "orientation"):
            value = getattr(event, name)
            if value is not None and not is_finite_point(value):
                return OrderError(
                    "Event %s %r is not finite; use None if the device "
                    "does not report it" % (name, value),
                    time=event.time, previous_time=self._last_time,
                )
        if event.pressure is not None and not 0.0 <= event.pressure <= 1.0:
            return OrderError(
                "Event pressure %r is outside [0, 1]" % (event.pressure,),
                time=event.time, previous_time=self._last_time,
            )
        if self._state == IDLE:
            if event.event_type is not EventType.DOWN:
                return SequenceError(
                    "%s event with no stroke in progress"
                    % (event.event_type.name,),
                    event_type=event.event_type, state=self._state,
                )
        elif event.event_type is EventType.DOWN and not self.restart_on_down:
            return SequenceError(
                "DOWN event while a stroke is already in progress",
                event_type=event.event_type, state=self._state,
            )
        if self._last_time is not None and not event.time > self._last_time:
            return OrderError(
                "Event time %r is not after the last modeled time %r"
                % (event.time, self._last_time),
                time=event.time, previous_time=self._last_time,
            )
        return None

    def commit(self, event, output_time):
        """Record an accepted event and the time of its last output"""
        if event.event_type is EventType.UP:
            self._state = IDLE
        else:
            self._state = ACTIVE
        self._last_time = output_time
