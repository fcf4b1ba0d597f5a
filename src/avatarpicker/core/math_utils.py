"""NumPy-backed transform helpers.

Vectors are plain numpy arrays; quaternions are [x, y, z, w] arrays.
Matrices are 4x4 numpy arrays acting on column vectors.
"""

import numpy as np
from numpy.typing import NDArray

# Type aliases
Vec3 = NDArray[np.float64]
Mat4 = NDArray[np.float64]
Quat = NDArray[np.float64]  # [x, y, z, w]


def vec3(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> Vec3:
    return np.array([x, y, z], dtype=np.float64)


def quat(x: float = 0.0, y: float = 0.0, z: float = 0.0, w: float = 1.0) -> Quat:
    return np.array([x, y, z, w], dtype=np.float64)


def quat_identity() -> Quat:
    return quat()


def quat_normalize(q: Quat) -> Quat:
    length = np.linalg.norm(q)
    if length < 1e-12:
        return quat_identity()
    return q / length


def quat_from_axis_angle(axis: Vec3, angle: float) -> Quat:
    axis = np.asarray(axis, dtype=np.float64)
    axis = axis / max(np.linalg.norm(axis), 1e-12)
    s = np.sin(angle / 2.0)
    return quat(axis[0] * s, axis[1] * s, axis[2] * s, np.cos(angle / 2.0))


def mat4_identity() -> Mat4:
    return np.eye(4, dtype=np.float64)


def mat3_from_quaternion(q: Quat) -> NDArray[np.float64]:
    x, y, z, w = quat_normalize(np.asarray(q, dtype=np.float64))
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
        [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
    ], dtype=np.float64)


def mat4_compose(position: Vec3, quaternion: Quat, scale: Vec3) -> Mat4:
    """Compose a TRS matrix from position, quaternion rotation and scale."""
    m = mat4_identity()
    m[:3, :3] = mat3_from_quaternion(quaternion) * np.asarray(scale, dtype=np.float64)
    m[:3, 3] = position
    return m


def mat4_inverse(m: Mat4) -> Mat4:
    return np.linalg.inv(m)


def quat_from_mat3(r: NDArray[np.float64]) -> Quat:
    """Convert a pure rotation matrix to a quaternion."""
    trace = r[0, 0] + r[1, 1] + r[2, 2]
    if trace > 0:
        s = 0.5 / np.sqrt(trace + 1.0)
        q = quat((r[2, 1] - r[1, 2]) * s, (r[0, 2] - r[2, 0]) * s,
                 (r[1, 0] - r[0, 1]) * s, 0.25 / s)
    elif r[0, 0] > r[1, 1] and r[0, 0] > r[2, 2]:
        s = 2.0 * np.sqrt(1.0 + r[0, 0] - r[1, 1] - r[2, 2])
        q = quat(0.25 * s, (r[0, 1] + r[1, 0]) / s,
                 (r[0, 2] + r[2, 0]) / s, (r[2, 1] - r[1, 2]) / s)
    elif r[1, 1] > r[2, 2]:
        s = 2.0 * np.sqrt(1.0 + r[1, 1] - r[0, 0] - r[2, 2])
        q = quat((r[0, 1] + r[1, 0]) / s, 0.25 * s,
                 (r[1, 2] + r[2, 1]) / s, (r[0, 2] - r[2, 0]) / s)
    else:
        s = 2.0 * np.sqrt(1.0 + r[2, 2] - r[0, 0] - r[1, 1])
        q = quat((r[0, 2] + r[2, 0]) / s, (r[1, 2] + r[2, 1]) / s,
                 0.25 * s, (r[1, 0] - r[0, 1]) / s)
    return quat_normalize(q)


def mat4_decompose(m: Mat4) -> tuple[Vec3, Quat, Vec3]:
    """Split a TRS matrix into position, quaternion and scale."""
    position = m[:3, 3].copy()
    scale = np.linalg.norm(m[:3, :3], axis=0)
    rotation = m[:3, :3] / np.maximum(scale, 1e-12)
    return position, quat_from_mat3(rotation), scale
