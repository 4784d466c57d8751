"""
Star Tracker Sensor Model

Emulates a star tracker reporting the inertial to component attitude
quaternion. Every tick the true attitude is rotated through the mount,
perturbed by an along-sight and a cross-boresight error, and written into a
delay buffer; the reported quaternion and error flag refresh once per
output interval.

The tracker is blinded when the sun, earth limb or moon falls inside its
exclusion angle, or when the body rate exceeds the capture-rate limit.
While blinded the buffer receives the zero quaternion, so a downstream
consumer can tell "no attitude" apart from "noisy attitude".

The primary entry points are:
    StarTracker.tick()      One sensor update from a TrueState.
    StarTracker.header()    Telemetry column names.
    StarTracker.value()     Telemetry values matching header().
"""

import logging

import numpy as np

from .Config import StarTrackerConfig
from .delay_buffer import DelayBuffer, OutputThrottle
from .environment import EARTH_EQUATORIAL_RADIUS
from .judgement import JudgementAggregator
from .log_fields import flatten_values, quaternion_fields, scalar_fields
from .noise import AttitudeNoise
from .orchestrator import SensorOrchestrator
from .quaternion import IDENTITY_QUATERNION, _as_quaternion, quaternion_multiply
from .visibility import ExclusionConeModel

logger = logging.getLogger(__name__)

STAR_TRACKER_CRITERIA = ("sun", "earth", "moon", "capture_rate")


def _exclusion_angle(config, name):
    angle_deg = float(getattr(config, name))
    if not (0.0 <= angle_deg <= 180.0):
        raise ValueError(f"{name} must be in the range [0, 180] deg.")
    return float(np.deg2rad(angle_deg))


class StarTracker:
    """
    Star tracker built from a StarTrackerConfig (or any object exposing the
    same attributes).

    :param config:      Class or instance with StarTrackerConfig-compatible attributes.
    :param celestial:   Provider of body-frame sun/earth/moon positions,
                        any object with position_from_spacecraft_b(name).
    :param random_seed: Optional seed overriding config.random_seed.
    """
    def __init__(self, config=StarTrackerConfig, celestial=None, random_seed=None):
        if celestial is None or not hasattr(celestial, "position_from_spacecraft_b"):
            raise TypeError("celestial must provide a position_from_spacecraft_b(name) method.")

        # ---------- identification ----------
        self.component_id = int(getattr(config, "component_id", 0))
        self.quaternion_b2c = _as_quaternion(getattr(config, "quaternion_b2c", IDENTITY_QUATERNION), "quaternion_b2c")

        # ---------- exclusion model ----------
        self.sun_exclusion_angle = _exclusion_angle(config, "sun_exclusion_angle_deg")      # [rad]
        self.earth_exclusion_angle = _exclusion_angle(config, "earth_exclusion_angle_deg")  # [rad]
        self.moon_exclusion_angle = _exclusion_angle(config, "moon_exclusion_angle_deg")    # [rad]
        self.capture_rate_limit = float(np.deg2rad(config.capture_rate_limit_deg_s))       # [rad/s]
        visibility_model = ExclusionConeModel(
            self.quaternion_b2c,
            self.sun_exclusion_angle,
            self.earth_exclusion_angle,
            self.moon_exclusion_angle,
            self.capture_rate_limit,
            earth_radius=float(getattr(config, "earth_radius", EARTH_EQUATORIAL_RADIUS)),
        )

        # ---------- noise model ----------
        self.random_seed = random_seed if random_seed is not None else getattr(config, "random_seed", None)
        noise = AttitudeNoise(
            float(config.sigma_orthogonal),
            float(config.sigma_sight),
            seed=self.random_seed,
        )

        # ---------- timing model ----------
        delay_buffer = DelayBuffer(config.output_delay, config.step_period, initial_value=IDENTITY_QUATERNION)
        throttle = OutputThrottle(config.output_interval)

        self._pipeline = SensorOrchestrator(
            name=f"stt{self.component_id}",
            visibility_model=visibility_model,
            environment=celestial,
            truth_sample=self._true_quaternion_i2c,
            synthesizer=noise,
            delay_buffer=delay_buffer,
            throttle=throttle,
            aggregator=JudgementAggregator(STAR_TRACKER_CRITERIA),
            prescaler=getattr(config, "prescaler", 1),
        )

        logger.info(
            "Star tracker %d created. buffer=%d slots, delay=%d ticks, interval=%d ticks",
            self.component_id,
            delay_buffer.capacity,
            delay_buffer.delay_ticks,
            throttle.interval,
        )

    def _true_quaternion_i2c(self, true_state):
        return quaternion_multiply(true_state.quaternion_i2b, self.quaternion_b2c)

    @property
    def pipeline(self):
        return self._pipeline

    @property
    def measured_quaternion_i2c(self):
        return self._pipeline.measurement

    @property
    def validity(self):
        return self._pipeline.validity

    @property
    def error_flag(self):
        return self._pipeline.validity.invalid

    def tick(self, true_state):
        """
        One sensor update.

        :param true_state: TrueState of the current tick.
        :return: True when the reported quaternion and flag were refreshed.
        """
        return self._pipeline.tick(true_state)

    def on_clock(self, time_count, truth_provider):
        return self._pipeline.on_clock(time_count, truth_provider)

    def header(self):
        prefix = f"stt{self.component_id}_"
        return (
            quaternion_fields(prefix + "measured_quaternion", "i2c")
            + scalar_fields(prefix + "error_flag")
            + scalar_fields(prefix + "criteria_bits")
        )

    def value(self):
        """
        Telemetry row matching header(). criteria_bits has bit i set when
        STAR_TRACKER_CRITERIA[i] (sun, earth, moon, capture_rate) fired.
        """
        validity = self._pipeline.validity
        return flatten_values(self._pipeline.measurement, float(validity.invalid), float(validity.bits))
