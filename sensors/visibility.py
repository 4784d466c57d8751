"""
Line-of-Sight and Occlusion Geometry

This module decides, once per tick, whether a sensor can see what it needs
to see. It contains the following components:

VisibilityResult and TargetInfo dataclasses carrying the outcome of one
evaluation (aggregate flag, visible count, per-target records and the
per-criterion signals consumed by the judgement stage).
OccludingSphere, the closest-approach line-of-sight test against a
spherical body (the earth for GNSS antennas).
A closed set of geometry models, one class per sensor pattern:
    ExclusionConeModel   star tracker blinding by sun, earth and moon plus
                         the capture-rate limit.
    ConeOcclusionModel   receiver antenna cone with sphere occlusion over a
                         catalog of targets.
    HemisphereModel      simplest antenna model: visible whenever the
                         antenna points away from the occluding body.

A sensor holds exactly one model and calls its evaluate() method once per
tick. Models keep no state between ticks.
"""

from dataclasses import dataclass, field

import numpy as np

from .environment import CELESTIAL_BODIES, EARTH_EQUATORIAL_RADIUS
from .math_utils import _angle_between, _as_vector3, _closest_approach, _normalize, _within_cone, eps
from .quaternion import _as_quaternion, frame_conversion, inverse_frame_conversion

STAR_TRACKER_SIGHT_C = np.array([1.0, 0.0, 0.0], dtype=float)  # line of sight, component frame
ANTENNA_BORESIGHT_C = np.array([0.0, 0.0, 1.0], dtype=float)   # antenna normal, component frame


@dataclass(frozen=True)
class TargetInfo:
    """
    Line-of-sight record of one visible target, antenna component frame.

    :param identifier: Catalog identifier of the target.
    :param azimuth:    atan2(y, x) of the line of sight [rad].
    :param elevation:  Angle of the line of sight above the x-y plane [rad].
    :param distance:   Antenna to target distance [m].
    """
    identifier: str
    azimuth: float
    elevation: float
    distance: float


@dataclass(frozen=True)
class VisibilityResult:
    """
    Outcome of one visibility evaluation.

    :param visible:       Aggregate flag; False means the sensor has nothing usable.
    :param visible_count: Number of catalog targets that passed every test.
    :param targets:       Per-target records for the visible targets.
    :param criteria:      Ordered mapping criterion name -> True when that
                          criterion invalidates the measurement.
    """
    visible: bool
    visible_count: int = 0
    targets: tuple = ()
    criteria: dict = field(default_factory=dict)


class OccludingSphere:
    """
    Spherical body that can block a line of sight.

    Blocking test for an observer and a target, both expressed relative to
    the same origin as the sphere centre:

        1. If dot(observer - centre, target - centre) > 0 both points lie on
           the same outward hemisphere and the body cannot be in between.
        2. Otherwise the sphere centre is projected onto the observer-target
           line; the line of sight is blocked when the closest-approach
           point lies strictly inside the radius.

    When step 1 fails the projection always lands between observer and
    target, so testing the infinite line is equivalent to testing the
    segment.

    :param radius: Sphere radius [m].
    :param center: Sphere centre [m]; the inertial origin by default.
    """
    def __init__(self, radius=EARTH_EQUATORIAL_RADIUS, center=(0.0, 0.0, 0.0)):
        self.radius = float(radius)  # [m]
        if self.radius <= eps:
            raise ValueError("Occluding sphere radius must be > 0.")
        self.center = _as_vector3(center, "center")  # [m]

    def blocks(self, observer, target):
        """
        :param observer: Observer position [m].
        :param target:   Target position [m].
        :return: True if the sphere hides the target from the observer.
        """
        observer_rel = observer - self.center
        target_rel = target - self.center
        if float(np.dot(observer_rel, target_rel)) > 0.0:
            return False  # outward hemisphere, occlusion impossible

        closest, _ = _closest_approach(observer_rel, target_rel, np.zeros(3))
        return float(np.linalg.norm(closest)) < self.radius


class VisibilityModel:
    """
    Base class of the geometry models.

    Subclasses override evaluate(); the second argument is whatever
    environment snapshot the model needs (celestial positions for the
    exclusion model, a target catalog for antenna models).
    """
    def evaluate(self, true_state, environment):
        """
        :param true_state:  TrueState of the current tick.
        :param environment: Model specific environment snapshot.
        :return: VisibilityResult.
        :raises NotImplementedError: Must be overridden by subclasses.
        """
        raise NotImplementedError


class ExclusionConeModel(VisibilityModel):
    """
    Star tracker blinding model.

    The sight axis (+X of the component frame) is rotated into the body
    frame through the mount quaternion and compared with the sun, earth and
    moon directions supplied in the body frame. The earth test subtracts
    the apparent angular radius atan2(earth_radius, range), so a close
    earth blinds at a wider separation than a distant one.

    Criteria (True = invalidating):
        sun, earth, moon    separation strictly below the exclusion angle
        capture_rate        |omega_b| strictly above the capture-rate limit

    :param quaternion_b2c:         Mount quaternion body -> component.
    :param sun_exclusion_angle:    [rad]
    :param earth_exclusion_angle:  [rad], applied to the earth limb
    :param moon_exclusion_angle:   [rad]
    :param capture_rate_limit:     [rad/s]
    :param earth_radius:           [m] radius used for the apparent size
    """
    def __init__(
        self,
        quaternion_b2c,
        sun_exclusion_angle,
        earth_exclusion_angle,
        moon_exclusion_angle,
        capture_rate_limit,
        earth_radius=EARTH_EQUATORIAL_RADIUS,
    ):
        self.quaternion_b2c = _as_quaternion(quaternion_b2c, "quaternion_b2c")
        self.sun_exclusion_angle = float(sun_exclusion_angle)
        self.earth_exclusion_angle = float(earth_exclusion_angle)
        self.moon_exclusion_angle = float(moon_exclusion_angle)
        self.capture_rate_limit = float(capture_rate_limit)
        self.earth_radius = float(earth_radius)
        if self.earth_radius <= 0.0:
            raise ValueError("earth_radius must be > 0.")
        if self.capture_rate_limit < 0.0:
            raise ValueError("capture_rate_limit must be >= 0.")
        # The mount never changes, so the body-frame sight axis is fixed.
        self.sight_b = _normalize(inverse_frame_conversion(self.quaternion_b2c, STAR_TRACKER_SIGHT_C), "sight axis")

    def sun_angle(self, sun_b):
        return _angle_between(sun_b, self.sight_b)

    def moon_angle(self, moon_b):
        return _angle_between(moon_b, self.sight_b)

    def earth_edge_angle(self, earth_b):
        """
        Angle between the sight axis and the earth limb [rad].

        Negative when the sight axis points inside the earth disk.
        """
        earth_b = _as_vector3(earth_b, "earth_b")
        earth_size = float(np.arctan2(self.earth_radius, np.linalg.norm(earth_b)))  # apparent half-size
        return _angle_between(earth_b, self.sight_b) - earth_size

    def evaluate(self, true_state, environment):
        sun_b, earth_b, moon_b = (environment.position_from_spacecraft_b(name) for name in CELESTIAL_BODIES)
        criteria = {
            "sun": self.sun_angle(sun_b) < self.sun_exclusion_angle,
            "earth": self.earth_edge_angle(earth_b) < self.earth_exclusion_angle,
            "moon": self.moon_angle(moon_b) < self.moon_exclusion_angle,
            "capture_rate": float(np.linalg.norm(true_state.omega_b)) > self.capture_rate_limit,
        }
        return VisibilityResult(visible=not any(criteria.values()), criteria=criteria)


class _AntennaModel(VisibilityModel):
    """Shared mount handling for antenna models (boresight is +Z of the component frame)."""
    def __init__(self, quaternion_b2c):
        self.quaternion_b2c = _as_quaternion(quaternion_b2c, "quaternion_b2c")
        self.boresight_b = _normalize(inverse_frame_conversion(self.quaternion_b2c, ANTENNA_BORESIGHT_C), "antenna boresight")

    def boresight_i(self, true_state):
        return inverse_frame_conversion(true_state.quaternion_i2b, self.boresight_b)


class ConeOcclusionModel(_AntennaModel):
    """
    Receiver antenna cone with sphere occlusion.

    For every catalog entry whose identifier starts with one of the
    compatible system letters, the line of sight from the antenna (spacecraft
    position plus the rotated mount offset) to the target is tested for
    cone membership and occlusion. Both tests are evaluated for each target
    and a target counts only when it is inside the cone and not occluded.
    A target exactly on the cone surface is outside.

    :param quaternion_b2c:     Mount quaternion body -> component.
    :param antenna_position_b: Antenna offset from the spacecraft centre, body frame [m].
    :param half_angle:         Cone half angle [rad], in (0, pi].
    :param compatible_systems: String of accepted identifier prefixes, e.g. "G" or "GE".
    :param occluder:           OccludingSphere; the earth by default.
    """
    def __init__(self, quaternion_b2c, antenna_position_b, half_angle, compatible_systems, occluder=None):
        super().__init__(quaternion_b2c)
        self.antenna_position_b = _as_vector3(antenna_position_b, "antenna_position_b")  # [m]
        self.half_angle = float(half_angle)  # [rad]
        if not (0.0 < self.half_angle <= np.pi):
            raise ValueError("half_angle must be in the range (0, pi].")
        self._cos_half_angle = float(np.cos(self.half_angle))  # precomputed for cone gating
        self.compatible_systems = str(compatible_systems)
        self.occluder = occluder if occluder is not None else OccludingSphere()

    def is_compatible(self, identifier):
        return bool(identifier) and identifier[0] in self.compatible_systems

    def antenna_position_i(self, true_state):
        offset_i = inverse_frame_conversion(true_state.quaternion_i2b, self.antenna_position_b)
        return true_state.position_i + offset_i

    def _target_info(self, identifier, antenna_to_target_i, quaternion_i2b):
        antenna_to_target_b = frame_conversion(quaternion_i2b, antenna_to_target_i)
        los_c = frame_conversion(self.quaternion_b2c, antenna_to_target_b)
        distance = float(np.linalg.norm(los_c))
        azimuth = float(np.arctan2(los_c[1], los_c[0]))
        elevation = float(np.arctan2(los_c[2], np.hypot(los_c[0], los_c[1])))
        return TargetInfo(identifier=identifier, azimuth=azimuth, elevation=elevation, distance=distance)

    def evaluate(self, true_state, environment):
        if not all(hasattr(environment, attr) for attr in ("count", "identifier", "position_i")):
            raise TypeError("catalog must provide count, identifier(index) and position_i(index).")

        boresight_i = self.boresight_i(true_state)
        antenna_i = self.antenna_position_i(true_state)

        targets = []
        for index in range(environment.count):
            identifier = environment.identifier(index)
            if not self.is_compatible(identifier):
                continue

            target_i = _as_vector3(environment.position_i(index), "target position")
            antenna_to_target = target_i - antenna_i
            distance = float(np.linalg.norm(antenna_to_target))
            if distance <= eps:
                continue  # co-located target has no line of sight

            in_cone = _within_cone(antenna_to_target / distance, boresight_i, self._cos_half_angle)
            occluded = self.occluder.blocks(antenna_i, target_i)
            if in_cone and not occluded:
                targets.append(self._target_info(identifier, antenna_to_target, true_state.quaternion_i2b))

        visible_count = len(targets)
        return VisibilityResult(
            visible=visible_count > 0,
            visible_count=visible_count,
            targets=tuple(targets),
            criteria={"no_visible_target": visible_count == 0},
        )


class HemisphereModel(_AntennaModel):
    """
    Simplest antenna model.

    Signals are receivable whenever the antenna boresight has a positive
    component along the spacecraft position vector, i.e. the antenna faces
    away from the earth. Individual targets are not enumerated, so
    visible_count stays zero.

    :param quaternion_b2c: Mount quaternion body -> component.
    """
    def evaluate(self, true_state, environment):
        visible = float(np.dot(true_state.position_i, self.boresight_i(true_state))) > 0.0
        return VisibilityResult(visible=visible, criteria={"no_visible_target": not visible})
