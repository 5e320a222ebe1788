"""
Lunar Lander Simulation - Quaternion Operations

This module implements the quaternion algebra used to carry the lander's
orientation between the body frame and the landing-zone frame.

Quaternion Convention: [w, x, y, z] where w is the scalar component.
Rotations act body -> landing-zone frame: v_world = R(q) @ v_body.
"""

import numpy as np

from . import constants as C


def quaternion_normalize(q: np.ndarray) -> np.ndarray:
    """
    Normalize a quaternion to unit length.

    Args:
        q: Quaternion [w, x, y, z]

    Returns:
        Normalized quaternion; identity if q is near zero. Non-finite input
        stays non-finite so state validation can reject it.
    """
    norm = np.linalg.norm(q)
    if not np.isfinite(norm):
        return np.full(4, np.nan)
    if norm < C.ZERO_TOLERANCE:
        return np.array([1.0, 0.0, 0.0, 0.0])
    return q / norm


def quaternion_multiply(q1: np.ndarray, q2: np.ndarray) -> np.ndarray:
    """
    Hamilton product q1 * q2 (apply q2 first, then q1).

    Args:
        q1: First quaternion [w, x, y, z]
        q2: Second quaternion [w, x, y, z]

    Returns:
        Product quaternion [w, x, y, z]
    """
    w1, x1, y1, z1 = q1
    w2, x2, y2, z2 = q2

    return np.array([
        w1*w2 - x1*x2 - y1*y2 - z1*z2,
        w1*x2 + x1*w2 + y1*z2 - z1*y2,
        w1*y2 - x1*z2 + y1*w2 + z1*x2,
        w1*z2 + x1*y2 - y1*x2 + z1*w2
    ])


def quaternion_from_axis_angle(axis: np.ndarray, angle: float) -> np.ndarray:
    """
    Quaternion for a rotation of `angle` radians about `axis`.

    Args:
        axis: Rotation axis (normalized internally)
        angle: Rotation angle (rad)
    """
    axis = np.asarray(axis, dtype=np.float64)
    norm = np.linalg.norm(axis)
    if norm < C.ZERO_TOLERANCE:
        return np.array([1.0, 0.0, 0.0, 0.0])
    half = 0.5 * angle
    xyz = axis / norm * np.sin(half)
    return np.array([np.cos(half), xyz[0], xyz[1], xyz[2]])


def quaternion_from_euler_xyz(angles: np.ndarray) -> np.ndarray:
    """
    Quaternion for intrinsic X-then-Y-then-Z Euler angles.

    q = qx(a) * qy(b) * qz(c)

    Used to turn one tick of body angular velocity (omega * dt) into an
    orientation increment.

    Args:
        angles: [a, b, c] rotations about X, Y, Z (rad)

    Returns:
        Quaternion [w, x, y, z]
    """
    a, b, c = angles
    qx = quaternion_from_axis_angle(np.array([1.0, 0.0, 0.0]), a)
    qy = quaternion_from_axis_angle(np.array([0.0, 1.0, 0.0]), b)
    qz = quaternion_from_axis_angle(np.array([0.0, 0.0, 1.0]), c)
    return quaternion_multiply(quaternion_multiply(qx, qy), qz)


def quaternion_to_rotation_matrix(q: np.ndarray) -> np.ndarray:
    """
    Convert a quaternion to a rotation matrix R(q).

    The rotation matrix transforms vectors from body frame to world frame:
    v_world = R(q) @ v_body

    Args:
        q: Unit quaternion [w, x, y, z]

    Returns:
        3x3 rotation matrix
    """
    w, x, y, z = quaternion_normalize(q)

    xx, yy, zz = x*x, y*y, z*z
    xy, xz, yz = x*y, x*z, y*z
    wx, wy, wz = w*x, w*y, w*z

    return np.array([
        [1 - 2*(yy + zz),     2*(xy - wz),     2*(xz + wy)],
        [    2*(xy + wz), 1 - 2*(xx + zz),     2*(yz - wx)],
        [    2*(xz - wy),     2*(yz + wx), 1 - 2*(xx + yy)]
    ])


def rotate_vector_by_quaternion(v: np.ndarray, q: np.ndarray) -> np.ndarray:
    """
    Rotate a vector from body frame to world frame.

    Args:
        v: Vector to rotate [3]
        q: Quaternion [w, x, y, z]

    Returns:
        Rotated vector [3]
    """
    R = quaternion_to_rotation_matrix(q)
    return R @ v


def angle_between(a: np.ndarray, b: np.ndarray) -> float:
    """
    Angle between two vectors in radians, in [0, pi].

    Returns 0 if either vector is degenerate.
    """
    na = np.linalg.norm(a)
    nb = np.linalg.norm(b)
    if na < C.ZERO_TOLERANCE or nb < C.ZERO_TOLERANCE:
        return 0.0
    cos_angle = np.clip(np.dot(a, b) / (na * nb), -1.0, 1.0)
    return float(np.arccos(cos_angle))


def compute_tilt(q: np.ndarray) -> float:
    """
    Tilt from upright: angle between body +Z in world frame and world +Z.

    Args:
        q: Orientation quaternion [w, x, y, z]

    Returns:
        Tilt angle (rad)
    """
    up = rotate_vector_by_quaternion(C.BODY_Z_AXIS, q)
    return angle_between(up, C.WORLD_UP)
