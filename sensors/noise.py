"""
Stochastic Measurement Synthesis

Each physically distinct error axis owns its own numpy Generator, seeded
once at construction from a child of a single SeedSequence. Identical seeds
and identical truth inputs therefore give bit-identical measurement
sequences, and adding a draw on one axis never shifts the stream of
another.

Synthesizers:
    AttitudeNoise   star tracker error model: rotation about the line of
                    sight (along-sight error) followed by a tilt of the
                    line of sight about a random cross axis (cross-boresight
                    error).
    PositionNoise   independent Gaussian noise per inertial axis.
"""

import numpy as np

from .math_utils import _as_vector3
from .quaternion import ZERO_QUATERNION, _as_quaternion, quaternion_from_axis_angle, quaternion_multiply
from .visibility import STAR_TRACKER_SIGHT_C


def spawn_seeds(seed, count):
    """
    Derive ``count`` independent child seeds from one seed source.

    :param seed:  int, None, or numpy.random.SeedSequence. None draws fresh
                  OS entropy, which gives a non-reproducible sensor.
    :param count: Number of child seeds.
    :return: List of SeedSequence children.
    """
    if not isinstance(seed, np.random.SeedSequence):
        seed = np.random.SeedSequence(seed)
    return seed.spawn(count)


class GaussianNoise:
    """
    Zero-mean (by default) Gaussian source for a single error axis.

    :param std:  1-sigma standard deviation, must be >= 0.
    :param seed: Seed for this axis' generator.
    :param mean: Mean of the distribution.
    """
    def __init__(self, std, seed, mean=0.0):
        self.std = float(std)
        if self.std < 0.0:
            raise ValueError("noise standard deviation must be >= 0.")
        self.mean = float(mean)
        self.rng = np.random.default_rng(seed)

    def sample(self):
        return float(self.rng.normal(self.mean, self.std))


class UniformPhase:
    """Uniform angle source on [0, 2*pi)."""
    def __init__(self, seed):
        self.rng = np.random.default_rng(seed)

    def sample(self):
        return 2.0 * np.pi * float(self.rng.random())


class AttitudeNoise:
    """
    Star tracker attitude error model.

    Composition, read left to right as successive frame changes:

        q_measured = q_i2c * q_sight * q_ortho

    q_sight rotates about the line of sight (+X) by N(0, sigma_sight).
    q_ortho rotates by N(0, sigma_ortho) about the cross axis
    cos(phi) * Y + sin(phi) * Z, with phi uniform on [0, 2*pi).

    :param sigma_ortho: Cross-boresight error 1-sigma [rad].
    :param sigma_sight: Along-sight (roll) error 1-sigma [rad].
    :param seed:        Seed source; three independent children are spawned.
    """
    sentinel = ZERO_QUATERNION

    def __init__(self, sigma_ortho, sigma_sight, seed=None):
        phase_seed, ortho_seed, sight_seed = spawn_seeds(seed, 3)
        self.rotation_phase = UniformPhase(phase_seed)
        self.orthogonal_noise = GaussianNoise(sigma_ortho, ortho_seed)
        self.sight_noise = GaussianNoise(sigma_sight, sight_seed)

    def perturb(self, quaternion_i2c):
        """
        :param quaternion_i2c: True attitude of the sensor frame [x, y, z, w].
        :return: Noisy attitude quaternion.
        """
        q_true = _as_quaternion(quaternion_i2c, "quaternion_i2c")
        q_sight = quaternion_from_axis_angle(STAR_TRACKER_SIGHT_C, self.sight_noise.sample())

        phase = self.rotation_phase.sample()
        ortho_axis = np.array([0.0, np.cos(phase), np.sin(phase)], dtype=float)
        q_ortho = quaternion_from_axis_angle(ortho_axis, self.orthogonal_noise.sample())

        return quaternion_multiply(quaternion_multiply(q_true, q_sight), q_ortho)


class PositionNoise:
    """
    Additive per-axis Gaussian noise on an inertial position.

    :param noise_std: Per-axis 1-sigma [m], 3 elements.
    :param seed:      Seed source; one child per axis is spawned.
    """
    sentinel = np.zeros(3, dtype=float)

    def __init__(self, noise_std, seed=None):
        noise_std = _as_vector3(noise_std, "noise_std")
        self.axes = [GaussianNoise(std, axis_seed) for std, axis_seed in zip(noise_std, spawn_seeds(seed, 3))]

    def perturb(self, position_i):
        position_i = _as_vector3(position_i, "position_i")
        return position_i + np.array([axis.sample() for axis in self.axes], dtype=float)
