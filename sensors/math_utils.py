"""
Math Utilities Module

This module provides helper functions for the vector operations shared by
the sensor observation pipeline: input coercion to flat 3-vectors, safe
normalization, angle between two directions, and the closest-approach test
used by the occlusion geometry.

All functions here treat their inputs as plain array-likes and return numpy
float64 arrays or Python floats, so the sensor classes never have to care
whether a caller handed them lists, tuples or arrays.
"""

import numpy as np

# Small numerical tolerance to prevent division by zero and handle
# degenerate edge cases like near-zero vector norms.
eps = 1e-12  # [dimensionless]


def _as_vector3(value, name):
    """
    Validate and convert an input into a flat 3-element float vector.

    Takes any array-like input (list, tuple, numpy array, etc.) and
    converts it to a 1D numpy array of exactly 3 elements with float64
    dtype. Raises a ValueError if the result does not have exactly 3
    elements.

    :param value: Array-like input to convert into a 3D vector.
    :param name:  Human-readable parameter name, shown in error messages.

    :return: numpy array of shape (3,) with dtype float64.
    :raises ValueError: If the input does not contain exactly 3 elements.
    """
    # Convert the input to a numpy float array and flatten it to 1D
    vec = np.asarray(value, dtype=float).reshape(-1)

    # Check that the flattened array has exactly 3 elements
    if vec.size != 3:
        raise ValueError(f"{name} must be a 3D vector.")

    return vec


def _normalize(vec, name="vector"):
    """
    Normalize a vector to unit length.

    A vector whose norm is below eps has no direction; this is always a
    configuration problem (degenerate boresight, zero mount axis) and is
    reported with a ValueError instead of being silently replaced.

    :param vec:  Input vector (array-like, any dimension).
    :param name: Human-readable parameter name, shown in error messages.

    :return: Unit-length numpy vector in the same direction as the input.
    :raises ValueError: If the input has near-zero norm.
    """
    vec = np.asarray(vec, dtype=float)
    norm = np.linalg.norm(vec)
    if norm < eps:
        raise ValueError(f"{name} must be non-zero.")
    return vec / norm


def _angle_between(vec1, vec2):
    """
    Angle between two (not necessarily unit) vectors.

    The cosine is clipped to [-1, 1] before acos so that rounding on
    nearly parallel vectors cannot produce NaN.

    :param vec1: First vector.
    :param vec2: Second vector.
    :return: Angle in radians, range [0, pi].
    """
    u1 = _normalize(vec1, "vec1")
    u2 = _normalize(vec2, "vec2")
    cos_theta = float(np.clip(np.dot(u1, u2), -1.0, 1.0))
    return float(np.arccos(cos_theta))


def _within_cone(direction, axis, cos_half_angle):
    """
    Strict cone membership test on unit vectors.

    A direction lying exactly on the cone surface (dot == cos_half_angle)
    is outside the cone.

    :param direction:      Unit line-of-sight vector.
    :param axis:           Unit cone axis.
    :param cos_half_angle: Cosine of the cone half angle.
    :return: True if the direction is strictly inside the cone.
    """
    return float(np.dot(direction, axis)) > cos_half_angle


def _closest_approach(origin, target, point):
    """
    Closest point to ``point`` on the infinite line through origin and target.

        u = (target - origin) / |target - origin|
        closest = origin + dot(point - origin, u) * u

    :param origin: Line start [m].
    :param target: Second point on the line [m].
    :param point:  Point to project [m].
    :return: (closest_point, along_line_distance) where the distance is
             measured from origin along u [m].
    """
    u = _normalize(target - origin, "line direction")
    t = float(np.dot(point - origin, u))
    return origin + t * u, t
