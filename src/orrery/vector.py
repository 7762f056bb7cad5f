'''3D vector algebra and rotation helpers used by the element conversions
and by display code that needs to line drawing planes up with a direction'''

import numpy as np
from typing import NamedTuple


class RotationAngles(NamedTuple):
    """
    Euler-like angles (radians) produced by angular_mapping

    The composed rotation is rot_z(phi) @ rot_y(theta) @ rot_z(psi)
    """
    theta: float
    phi: float
    psi: float


def cross(a, b) -> np.ndarray:
    """Cross product a x b"""
    return np.cross(np.asarray(a, dtype=float), np.asarray(b, dtype=float))


def dot(a, b) -> float:
    """Dot product a . b"""
    return float(np.dot(np.asarray(a, dtype=float), np.asarray(b, dtype=float)))


def magnitude(v) -> float:
    """Euclidean norm of v"""
    return float(np.linalg.norm(np.asarray(v, dtype=float)))


def unit(v) -> np.ndarray:
    """
    Unit vector along v

    A zero-length input returns the zero vector; callers that need a real
    direction must check the magnitude first.
    """
    v = np.asarray(v, dtype=float)
    mag = np.linalg.norm(v)
    if mag == 0:
        return np.zeros_like(v)
    return v / mag


def clamp_unit(x: float) -> float:
    """Clamp x into [-1, 1] so it is always a valid acos/asin argument"""
    return min(max(x, -1.0), 1.0)


# ========== ELEMENTARY ROTATIONS ==========
def rot_x(angle: float) -> np.ndarray:
    """Right-handed rotation matrix about the x-axis"""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([
        [1, 0,  0],
        [0, c, -s],
        [0, s,  c]
    ])


def rot_y(angle: float) -> np.ndarray:
    """Right-handed rotation matrix about the y-axis"""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([
        [ c, 0, s],
        [ 0, 1, 0],
        [-s, 0, c]
    ])


def rot_z(angle: float) -> np.ndarray:
    """Right-handed rotation matrix about the z-axis"""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([
        [c, -s, 0],
        [s,  c, 0],
        [0,  0, 1]
    ])


def rotation_matrix(angles: RotationAngles) -> np.ndarray:
    """Compose RotationAngles into rot_z(phi) @ rot_y(theta) @ rot_z(psi)"""
    return rot_z(angles.phi) @ rot_y(angles.theta) @ rot_z(angles.psi)


def angular_mapping(z_new, x_new=(0.0, 0.0, 0.0)) -> RotationAngles:
    """
    Find the rotation angles that carry the canonical axes onto a new frame.

    The returned angles describe a rotation by phi about z, then theta
    about y, then psi about z, stacked the way a display layer applies
    them (see rotation_matrix). The composed matrix maps the z-axis onto
    the direction of z_new.

    Parameters
    ----------
    z_new : array-like
        Desired direction of the new z-axis. Need not be unit length.
    x_new : array-like, optional
        Desired direction of the new x-axis. Only its component
        perpendicular to z_new matters. Pass the zero vector (default)
        when the in-plane orientation is irrelevant, in which case psi = 0.

    Returns
    -------
    RotationAngles
        (theta, phi, psi) in radians

    Raises
    ------
    ValueError
        If z_new is the zero vector
    """
    z_hat = unit(z_new)
    if not np.any(z_hat):
        raise ValueError("z_new must be a non-zero vector")

    # polar and azimuthal angles of the new z-axis
    theta = np.arccos(clamp_unit(z_hat[2]))
    phi = np.arctan2(z_hat[1], z_hat[0])

    # in-plane twist: express x_new in the frame reached after phi and theta
    x_new = np.asarray(x_new, dtype=float)
    partial = rot_z(phi) @ rot_y(theta)
    x1 = partial[:, 0]
    y1 = partial[:, 1]
    xx = np.dot(x_new, x1)
    xy = np.dot(x_new, y1)
    if xx == 0 and xy == 0:
        psi = 0.0
    else:
        psi = np.arctan2(xy, xx)

    return RotationAngles(float(theta), float(phi), float(psi))
