"""
Sensor Orchestrator

Wires the pipeline stages of one sensor together and runs them once per
tick, in the same order for every sensor type:

    1. evaluate visibility against the current truth state
    2. synthesize a noisy sample, or substitute the synthesizer's sentinel
       when nothing is visible
    3. judge validity from this tick's criteria and push the sample into
       the delay buffer together with that judgement
    4. on an output-interval boundary, refresh the reported measurement,
       validity flag and visible targets from one delayed buffer slot

Because the judgement travels through the buffer with its sample, the
reported flag and visible count always describe the same tick as the
reported measurement, whatever the output delay.

Concrete sensors (StarTracker, GnssReceiver) build one orchestrator and
delegate to it. Everything read from outside (measurement, validity,
visible_count) is a copy or immutable, so reading between ticks has no
side effects.
"""

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickRecord:
    """
    Judgement of one tick, stored in the delay buffer next to its sample.

    :param validity:      ValidityFlag judged from the tick's criteria.
    :param visible_count: Number of visible targets at that tick.
    :param targets:       Per-target records (TargetInfo) at that tick.
    """
    validity: object
    visible_count: int = 0
    targets: tuple = ()


class SensorOrchestrator:
    """
    Per-tick driver shared by all sensor types.

    :param name:             Sensor label used in log messages.
    :param visibility_model: VisibilityModel evaluated every tick.
    :param environment:      Snapshot handed to the visibility model
                             (celestial positions or target catalog).
    :param truth_sample:     Callable mapping a TrueState to the exact
                             quantity the sensor measures.
    :param synthesizer:      Noise model with perturb() and a sentinel.
    :param delay_buffer:     DelayBuffer written every tick. Its slots are
                             reset to the power-on output at construction.
    :param throttle:         OutputThrottle deciding refresh ticks.
    :param aggregator:       JudgementAggregator for the validity flag.
    :param prescaler:        Run on every prescaler-th clock count, >= 1.
    """
    def __init__(
        self,
        name,
        visibility_model,
        environment,
        truth_sample,
        synthesizer,
        delay_buffer,
        throttle,
        aggregator,
        prescaler=1,
    ):
        self.name = str(name)
        self.visibility_model = visibility_model
        self.environment = environment
        self.truth_sample = truth_sample
        self.synthesizer = synthesizer
        self.delay_buffer = delay_buffer
        self.throttle = throttle
        self.aggregator = aggregator
        self.prescaler = int(prescaler)
        if self.prescaler < 1:
            raise ValueError("prescaler must be >= 1.")

        # Power-on: every slot holds the initial output judged invalid.
        self._measurement = delay_buffer.latest()
        self._reported = TickRecord(validity=aggregator.initial_flag())
        delay_buffer.reset(self._measurement, tag=self._reported)

        self.tick_count = 0

    @property
    def measurement(self):
        return self._measurement.copy()

    @property
    def validity(self):
        return self._reported.validity

    @property
    def visible_count(self):
        return self._reported.visible_count

    @property
    def visible_targets(self):
        return self._reported.targets

    def tick(self, true_state):
        """
        Run one sensor update.

        :param true_state: TrueState of the current tick.
        :return: True when the externally visible output was refreshed.
        """
        result = self.visibility_model.evaluate(true_state, self.environment)

        if result.visible:
            sample = self.synthesizer.perturb(self.truth_sample(true_state))
        else:
            sample = np.array(self.synthesizer.sentinel, dtype=float)

        record = TickRecord(
            validity=self.aggregator.judge(result.criteria),
            visible_count=int(result.visible_count),
            targets=tuple(result.targets),
        )
        self.delay_buffer.push(sample, tag=record)
        self.tick_count += 1

        if not self.throttle.step():
            return False

        self._refresh()
        return True

    def _refresh(self):
        measurement, record = self.delay_buffer.delayed_record()
        if record.validity.invalid != self._reported.validity.invalid:
            logger.debug(
                "%s validity changed to %s at tick %d (criteria bits 0b%s)",
                self.name,
                "invalid" if record.validity.invalid else "valid",
                self.tick_count,
                format(record.validity.bits, "b"),
            )
        self._measurement = measurement
        self._reported = record

    def on_clock(self, time_count, truth_provider):
        """
        Clock hook for an external scheduler.

        Runs a tick only when time_count is a multiple of the prescaler, and
        reads the truth provider exactly once for that tick.

        :param time_count:     Base clock count.
        :param truth_provider: Object with a true_state() method.
        :return: True if a tick ran.
        """
        if int(time_count) % self.prescaler != 0:
            return False
        self.tick(truth_provider.true_state())
        return True
