# This file is part of InkModeler.
# Copyright (C) 2024 by the InkModeler Development Team.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Fixed-capacity ring buffers of float records"""

## Imports

import logging

import numpy as np

logger = logging.getLogger(__name__)


## Class defs

class RingBuffer (object):
    """Ring buffer of fixed-width float rows, backed by a numpy arena

    Rows are stored in a preallocated ``(capacity, width)`` array; the
    buffer tracks the index of the oldest row and the row count, so
    appending and dropping from the front are O(1).

    >>> buf = RingBuffer(3, width=2)
    >>> for i in range(4):
    ...     buf.append((i, 10 * i))
    >>> len(buf)
    3
    >>> buf.first().tolist(), buf.last().tolist()
    ([1.0, 10.0], [3.0, 30.0])
    >>> buf.popleft().tolist()
    [1.0, 10.0]
    >>> buf.rows().tolist()
    [[2.0, 20.0], [3.0, 30.0]]

    With `grow` set, a full buffer doubles its arena instead of
    overwriting the oldest row. This keeps time-bounded windows exact
    when the input rate is higher than expected.

    >>> buf = RingBuffer(2, width=1, grow=True)
    >>> for i in range(5):
    ...     buf.append((i,))
    >>> len(buf), buf.capacity
    (5, 8)
    >>> buf[0].tolist(), buf[-1].tolist()
    ([0.0], [4.0])

    """

    def __init__(self, capacity, width=1, grow=False):
        capacity = int(capacity)
        if capacity < 1:
            raise ValueError("capacity must be at least 1, got %r"
                             % (capacity,))
        self._arena = np.zeros((capacity, width), dtype="float64")
        self._head = 0
        self._count = 0
        self._grow = grow

    @property
    def capacity(self):
        return self._arena.shape[0]

    @property
    def width(self):
        return self._arena.shape[1]

    def __len__(self):
        return self._count

    def _index(self, i):
        if i < 0:
            i += self._count
        if not 0 <= i < self._count:
            raise IndexError("ring buffer index out of range")
        return (self._head + i) % self.capacity

    def __getitem__(self, i):
        """Row `i` counting from the oldest, as a read-only view"""
        row = self._arena[self._index(i)]
        row = row.view()
        row.flags.writeable = False
        return row

    def first(self):
        return self[0]

    def last(self):
        return self[-1]

    def append(self, row):
        """Append a row, dropping the oldest (or growing) when full"""
        if self._count == self.capacity:
            if self._grow:
                self._resize(2 * self.capacity)
            else:
                self._head = (self._head + 1) % self.capacity
                self._count -= 1
        tail = (self._head + self._count) % self.capacity
        self._arena[tail] = row
        self._count += 1

    def popleft(self):
        """Remove and return a copy of the oldest row"""
        if not self._count:
            raise IndexError("pop from an empty ring buffer")
        row = self._arena[self._head].copy()
        self._head = (self._head + 1) % self.capacity
        self._count -= 1
        return row

    def clear(self):
        self._head = 0
        self._count = 0

    def rows(self):
        """All rows, oldest first, as a new ``(len, width)`` array"""
        idx = (self._head + np.arange(self._count)) % self.capacity
        return self._arena[idx]

    def _resize(self, capacity):
        logger.debug("Growing ring buffer from %d to %d rows",
                     self.capacity, capacity)
        arena = np.zeros((capacity, self.width), dtype="float64")
        arena[:self._count] = self.rows()
        self._arena = arena
        self._head = 0
