"""
GNSS Receiver Sensor Model

Emulates a GNSS receiver reporting the spacecraft inertial position. The
antenna geometry decides each tick whether any navigation satellite is
receivable; if so the true position is corrupted by per-axis Gaussian
noise, otherwise the exact zero vector is written to the delay buffer to
signal that no fix is available.

Two antenna models are supported (GnssReceiverConfig.antenna_model):
    "cone"        cone field of view around the antenna boresight plus
                  earth occlusion, evaluated per catalog satellite.
    "hemisphere"  the antenna receives whenever it faces away from the
                  earth; satellites are not enumerated.
"""

import logging

import numpy as np

from .Config import GnssReceiverConfig
from .delay_buffer import DelayBuffer, OutputThrottle
from .judgement import JudgementAggregator
from .log_fields import flatten_values, scalar_fields, vector_fields
from .noise import PositionNoise
from .orchestrator import SensorOrchestrator
from .quaternion import IDENTITY_QUATERNION, _as_quaternion
from .visibility import ConeOcclusionModel, HemisphereModel, OccludingSphere

logger = logging.getLogger(__name__)

GNSS_CRITERIA = ("no_visible_target",)
ANTENNA_MODELS = ("cone", "hemisphere")


class GnssReceiver:
    """
    GNSS receiver built from a GnssReceiverConfig (or any object exposing the
    same attributes).

    :param config:      Class or instance with GnssReceiverConfig-compatible attributes.
    :param catalog:     Satellite catalog with count, identifier(index) and
                        position_i(index). Only read by the "cone" model.
    :param random_seed: Optional seed overriding config.random_seed.
    """
    def __init__(self, config=GnssReceiverConfig, catalog=None, random_seed=None):
        # ---------- identification ----------
        self.component_id = int(getattr(config, "component_id", 0))
        self.antenna_model = str(getattr(config, "antenna_model", "cone")).lower()
        if self.antenna_model not in ANTENNA_MODELS:
            raise ValueError(f"antenna_model must be one of {ANTENNA_MODELS}, got {self.antenna_model!r}.")
        self.quaternion_b2c = _as_quaternion(getattr(config, "quaternion_b2c", IDENTITY_QUATERNION), "quaternion_b2c")

        # ---------- antenna geometry ----------
        if self.antenna_model == "cone":
            if catalog is None:
                raise TypeError("the cone antenna model requires a satellite catalog.")
            half_width_deg = float(config.half_width_deg)
            if not (0.0 < half_width_deg <= 180.0):
                raise ValueError("half_width_deg must be in the range (0, 180].")
            visibility_model = ConeOcclusionModel(
                self.quaternion_b2c,
                getattr(config, "antenna_position_b", (0.0, 0.0, 0.0)),
                np.deg2rad(half_width_deg),
                getattr(config, "compatible_systems", "G"),
                occluder=OccludingSphere(getattr(config, "occluding_radius", 6378137.0)),
            )
        else:
            visibility_model = HemisphereModel(self.quaternion_b2c)

        # ---------- noise model ----------
        self.random_seed = random_seed if random_seed is not None else getattr(config, "random_seed", None)
        noise = PositionNoise(config.noise_std, seed=self.random_seed)

        # ---------- timing model ----------
        delay_buffer = DelayBuffer(config.output_delay, config.step_period, initial_value=PositionNoise.sentinel)
        throttle = OutputThrottle(config.output_interval)

        self._pipeline = SensorOrchestrator(
            name=f"gnss{self.component_id}",
            visibility_model=visibility_model,
            environment=catalog,
            truth_sample=lambda true_state: true_state.position_i,
            synthesizer=noise,
            delay_buffer=delay_buffer,
            throttle=throttle,
            aggregator=JudgementAggregator(GNSS_CRITERIA),
            prescaler=getattr(config, "prescaler", 1),
        )

        logger.info(
            "GNSS receiver %d created (%s antenna). buffer=%d slots, delay=%d ticks, interval=%d ticks",
            self.component_id,
            self.antenna_model,
            delay_buffer.capacity,
            delay_buffer.delay_ticks,
            throttle.interval,
        )

    @property
    def pipeline(self):
        return self._pipeline

    @property
    def position_eci(self):
        return self._pipeline.measurement

    @property
    def validity(self):
        return self._pipeline.validity

    @property
    def is_visible(self):
        return self._pipeline.validity.valid

    @property
    def visible_count(self):
        return self._pipeline.visible_count

    @property
    def visible_targets(self):
        """Per-satellite records of the tick behind the reported position."""
        return self._pipeline.visible_targets

    def tick(self, true_state):
        return self._pipeline.tick(true_state)

    def on_clock(self, time_count, truth_provider):
        return self._pipeline.on_clock(time_count, truth_provider)

    def header(self):
        prefix = f"gnss{self.component_id}_"
        return (
            vector_fields(prefix + "position", "eci", "m")
            + scalar_fields(prefix + "visible_flag")
            + scalar_fields(prefix + "visible_num")
        )

    def value(self):
        return flatten_values(self._pipeline.measurement, float(self.is_visible), float(self.visible_count))
