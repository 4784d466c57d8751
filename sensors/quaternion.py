"""
Quaternion helpers for frame conversion.

Quaternions are plain numpy arrays in scalar-last order ``[x, y, z, w]``.
A quaternion ``q_a2b`` describes the orientation of frame B relative to
frame A and converts vector components between the two frames:

    v_b = conj(q_a2b) * v_a * q_a2b      (frame_conversion)
    v_a = q_a2b * v_b * conj(q_a2b)      (inverse_frame_conversion)

With this convention frame changes chain by Hamilton product in reading
order, q_a2c = q_a2b * q_b2c, so a star tracker's measured attitude is
simply q_i2b * q_b2c * q_sight * q_ortho.
"""

import numpy as np

from .math_utils import _as_vector3, _normalize, eps

IDENTITY_QUATERNION = np.array([0.0, 0.0, 0.0, 1.0], dtype=float)
ZERO_QUATERNION = np.zeros(4, dtype=float)


def _as_quaternion(value, name):
    """
    Validate and convert an input into a unit quaternion ``[x, y, z, w]``.

    :param value: Array-like with 4 elements.
    :param name:  Human-readable parameter name, shown in error messages.
    :return: numpy array of shape (4,), normalized to unit length.
    :raises ValueError: If the input does not have 4 elements or has zero norm.
    """
    q = np.asarray(value, dtype=float).reshape(-1)
    if q.size != 4:
        raise ValueError(f"{name} must be a quaternion with 4 elements [x, y, z, w].")
    norm = np.linalg.norm(q)
    if norm < eps:
        raise ValueError(f"{name} must be non-zero.")
    return q / norm


def quaternion_from_axis_angle(axis, angle):
    """
    Rotation of ``angle`` radians about ``axis``.

        q = [sin(angle/2) * n, cos(angle/2)]

    :param axis:  Rotation axis (normalized internally).
    :param angle: Rotation angle [rad].
    :return: Unit quaternion [x, y, z, w].
    """
    n = _normalize(_as_vector3(axis, "axis"), "axis")
    half_angle = 0.5 * float(angle)
    return np.concatenate((np.sin(half_angle) * n, [np.cos(half_angle)]))


def quaternion_conjugate(q):
    q = np.asarray(q, dtype=float)
    return np.array([-q[0], -q[1], -q[2], q[3]], dtype=float)


def quaternion_multiply(q1, q2):
    """
    Hamilton product q1 * q2 for scalar-last quaternions.

    :param q1: Left operand [x, y, z, w].
    :param q2: Right operand [x, y, z, w].
    :return: Product quaternion [x, y, z, w].
    """
    x1, y1, z1, w1 = np.asarray(q1, dtype=float)
    x2, y2, z2, w2 = np.asarray(q2, dtype=float)
    return np.array(
        [
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        ],
        dtype=float,
    )


def _rotate(q, v):
    # Rodrigues form of q * v * conj(q): t = 2 (u x v), v' = v + w t + u x t
    u = q[:3]
    t = 2.0 * np.cross(u, v)
    return v + q[3] * t + np.cross(u, t)


def frame_conversion(q_a2b, v_a):
    """
    Express a frame-A vector in frame B.

    :param q_a2b: Quaternion from frame A to frame B.
    :param v_a:   Vector components in frame A.
    :return: Vector components in frame B.
    """
    return _rotate(quaternion_conjugate(q_a2b), _as_vector3(v_a, "v_a"))


def inverse_frame_conversion(q_a2b, v_b):
    """
    Express a frame-B vector in frame A.

    :param q_a2b: Quaternion from frame A to frame B.
    :param v_b:   Vector components in frame B.
    :return: Vector components in frame A.
    """
    return _rotate(np.asarray(q_a2b, dtype=float), _as_vector3(v_b, "v_b"))


def quaternion_angle(q1, q2):
    """
    Rotation angle between two attitudes, in [0, pi].

    :param q1: First quaternion.
    :param q2: Second quaternion.
    :return: Angle of the relative rotation conj(q1) * q2 [rad].
    """
    dq = quaternion_multiply(quaternion_conjugate(q1), q2)
    w = float(np.clip(abs(dq[3]) / max(np.linalg.norm(dq), eps), 0.0, 1.0))
    return 2.0 * float(np.arccos(w))
