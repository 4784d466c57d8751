"""
Truth State and Environment Snapshots

This module defines the read-only inputs every sensor consumes each tick:

TrueState, the noise-free spacecraft state (inertial position, inertial to
body attitude quaternion, body angular velocity).
CelestialSnapshot, the positions of the sun, earth and moon relative to the
spacecraft, expressed in the body frame.
GnssCatalog, the navigation satellite catalog seen by a GNSS receiver:
identifier strings and inertial positions, addressed by index.

Propagating these quantities is the job of the surrounding simulation. The
classes here only hold a snapshot and expose the accessors the sensors call,
so tests and callers can build them directly from numbers.
"""

from dataclasses import dataclass, field

import numpy as np

from .math_utils import _as_vector3
from .quaternion import IDENTITY_QUATERNION, _as_quaternion

EARTH_EQUATORIAL_RADIUS = 6378136.6  # [m]
CELESTIAL_BODIES = ("SUN", "EARTH", "MOON")


@dataclass(frozen=True)
class TrueState:
    """
    Exact spacecraft state at one simulation tick.

    Inputs are coerced to float arrays and the quaternion is normalized in
    __post_init__, so instances are always safe to hand to a sensor.

    :param position_i:     Spacecraft position in the inertial frame [m].
    :param quaternion_i2b: Attitude quaternion inertial -> body [x, y, z, w].
    :param omega_b:        Angular velocity in the body frame [rad/s].
    """
    position_i: np.ndarray = field(default_factory=lambda: np.zeros(3))
    quaternion_i2b: np.ndarray = field(default_factory=lambda: IDENTITY_QUATERNION.copy())
    omega_b: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        # object.__setattr__ is required because the dataclass is frozen.
        object.__setattr__(self, "position_i", _as_vector3(self.position_i, "position_i"))
        object.__setattr__(self, "quaternion_i2b", _as_quaternion(self.quaternion_i2b, "quaternion_i2b"))
        object.__setattr__(self, "omega_b", _as_vector3(self.omega_b, "omega_b"))


class StaticTruthProvider:
    """
    Minimal truth-state provider returning whatever state it was last given.

    Stands in for the dynamics propagator in tests and examples.
    """
    def __init__(self, state=None):
        self.state = state if state is not None else TrueState()

    def true_state(self):
        return self.state


class CelestialSnapshot:
    """
    Celestial body positions relative to the spacecraft, body frame.

    :param positions_b: Mapping of body name ("SUN", "EARTH", "MOON") to the
                        vector from the spacecraft to the body centre [m].
    """
    def __init__(self, positions_b=None):
        self._positions_b = {}
        for name, position in (positions_b or {}).items():
            self._positions_b[str(name).upper()] = _as_vector3(position, f"{name} position")

    def position_from_spacecraft_b(self, name):
        """
        Vector from the spacecraft to a body centre in the body frame [m].

        :raises KeyError: If the body was never provided.
        """
        return self._positions_b[str(name).upper()]


@dataclass(frozen=True)
class GnssSatellite:
    identifier: str          # e.g. "G01", "R07"; the first character is the system
    position_i: np.ndarray   # [m] inertial position

    def __post_init__(self):
        object.__setattr__(self, "identifier", str(self.identifier))
        object.__setattr__(self, "position_i", _as_vector3(self.position_i, "position_i"))


class GnssCatalog:
    """
    Indexed container of navigation satellites.

    Mirrors the accessor contract a receiver needs: a count, the identifier
    at an index and the inertial position at an index.
    """
    def __init__(self, satellites=None):
        self.satellites = []
        for satellite in satellites or []:
            self.add(satellite)

    def add(self, satellite):
        """
        Append a satellite, given either as a GnssSatellite or an
        (identifier, position_i) pair.
        """
        if not isinstance(satellite, GnssSatellite):
            identifier, position = satellite
            satellite = GnssSatellite(identifier, position)
        self.satellites.append(satellite)
        return satellite

    @property
    def count(self):
        return len(self.satellites)

    def identifier(self, index):
        return self.satellites[index].identifier

    def position_i(self, index):
        return self.satellites[index].position_i
