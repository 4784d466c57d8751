"""
Delay Buffer and Output-Rate Throttling

A sensor samples its truth every tick but reports with a latency and at a
slower cadence. This module models both with two small pieces:

RingIndex, a position in a fixed-size ring whose arithmetic always wraps,
so history lookups like ``cursor - delay - 1`` can never go negative.
DelayBuffer, a ring of past samples written every tick, sized
max(1, floor(2 * delay / step_period)) and read ``delay_ticks`` samples
behind the most recent write.
OutputThrottle, the tick counter that decides when the externally visible
output is allowed to change.
"""

from dataclasses import dataclass

import numpy as np

from .math_utils import eps


@dataclass(frozen=True)
class RingIndex:
    """
    Index into a ring of ``capacity`` slots.

    Adding or subtracting an integer wraps into [0, capacity).
    """
    value: int
    capacity: int

    def __post_init__(self):
        if self.capacity < 1:
            raise ValueError("capacity must be >= 1.")
        object.__setattr__(self, "value", int(self.value) % self.capacity)

    def __add__(self, offset):
        return RingIndex(self.value + int(offset), self.capacity)

    def __sub__(self, offset):
        return RingIndex(self.value - int(offset), self.capacity)

    def __index__(self):
        return self.value

    def __int__(self):
        return self.value


def buffer_capacity(delay, step_period):
    """
    Ring size for a given output delay.

    capacity = max(1, floor(2 * delay / step_period))

    :param delay:       Output delay [s], >= 0.
    :param step_period: Sensor update period [s], > 0.
    :return: Number of slots.
    """
    return max(1, int(np.floor(2.0 * delay / step_period + eps)))


def delay_in_ticks(delay, step_period):
    """
    Output delay rounded to whole sensor ticks.

    Half ticks round up (0.25 s at 0.1 s steps is 3 ticks, 0.35 s is 4), with
    the same eps tolerance as buffer_capacity so that 0.3 / 0.1 is 3.
    """
    return int(np.floor(delay / step_period + 0.5 + eps))


class DelayBuffer:
    """
    Fixed-capacity history of samples with a constant read-back lag.

    push() writes at the cursor and then advances it, so ``cursor - 1`` is
    always the most recent sample and ``cursor - delay_ticks - 1`` is the
    sample written ``delay_ticks`` pushes earlier. Every slot is pre-filled
    with ``initial_value`` so reads before the ring has been filled return
    the power-on output.

    Each slot can also carry an opaque tag written in the same push as the
    sample (the orchestrator stores the tick's validity there), so a
    delayed read returns a sample and the tag that was judged with it.

    :param delay:         Output delay [s].
    :param step_period:   Sensor update period [s].
    :param initial_value: Array-like used to fill every slot.
    :param initial_tag:   Tag stored alongside initial_value.
    :raises ValueError: For a non-positive step period, a negative delay, or
                        a delay that does not fit inside the ring.
    """
    def __init__(self, delay, step_period, initial_value, initial_tag=None):
        self.delay = float(delay)              # [s]
        self.step_period = float(step_period)  # [s]
        if self.step_period <= 0.0:
            raise ValueError("step_period must be > 0.")
        if self.delay < 0.0:
            raise ValueError("output_delay must be >= 0.")

        self.capacity = buffer_capacity(self.delay, self.step_period)
        self.delay_ticks = delay_in_ticks(self.delay, self.step_period)
        if self.delay_ticks >= self.capacity:
            raise ValueError(
                f"output_delay of {self.delay} s ({self.delay_ticks} ticks) does not fit in a "
                f"{self.capacity}-slot buffer at step_period {self.step_period} s."
            )

        self.reset(initial_value, initial_tag)

    def reset(self, value, tag=None):
        """Fill every slot with (value, tag) and move the cursor back to slot 0."""
        value = np.asarray(value, dtype=float)
        self._slots = [(value.copy(), tag) for _ in range(self.capacity)]
        self.cursor = RingIndex(0, self.capacity)

    def push(self, sample, tag=None):
        """Write a sample (and its tag) at the cursor and advance the cursor by one slot."""
        self._slots[self.cursor] = (np.array(sample, dtype=float), tag)
        self.cursor = self.cursor + 1

    def latest(self):
        return self._slots[self.cursor - 1][0].copy()

    def delayed(self):
        """Sample written ``delay_ticks`` pushes before the most recent one."""
        return self.delayed_record()[0]

    def delayed_record(self):
        """(sample, tag) pair from the delayed slot; the sample is a copy."""
        sample, tag = self._slots[self.cursor - self.delay_ticks - 1]
        return sample.copy(), tag

    def slot(self, index):
        return self._slots[RingIndex(index, self.capacity)][0].copy()


class OutputThrottle:
    """
    Tick counter for the output cadence.

    step() increments the counter modulo ``interval`` and returns True on
    wraparound to zero, i.e. on every interval-th call.

    :param interval: Output interval in sensor ticks, >= 1.
    """
    def __init__(self, interval):
        self.interval = int(interval)
        if self.interval < 1:
            raise ValueError("output_interval must be >= 1.")
        self.count = 0

    def step(self):
        self.count = (self.count + 1) % self.interval
        return self.count == 0
