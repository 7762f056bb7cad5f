'''Conversions between osculating elements and Cartesian states, plus the
planar sampling used to draw orbits

All functions here are pure: they read their arguments and the read-only
trig tables, and return new arrays or value objects.'''

import numpy as np
from .config import config
from .orbital_elements import OrbitalElements, CartesianState, TWO_PI
from .utils import InvalidElements, DegenerateOrbit
from .vector import clamp_unit, rot_x, rot_z

# cosine and sine of every integer degree, shared by all ring sampling
_DEGREES = np.arange(360)
COS_TABLE = np.cos(np.radians(_DEGREES))
SIN_TABLE = np.sin(np.radians(_DEGREES))
COS_TABLE.flags.writeable = False
SIN_TABLE.flags.writeable = False


# ========== ELEMENTS -> STATE ==========
def elements_to_state(el: OrbitalElements) -> CartesianState:
    """
    Convert osculating elements to a Cartesian state.

    Parameters
    ----------
    el : OrbitalElements
        Elements to convert. Checked even if built with validate=False.

    Returns
    -------
    CartesianState
        Position and velocity in the frame the elements refer to

    Raises
    ------
    InvalidElements
        If mu < 0, a < 0, e is outside [0, 1) or i is outside [0, 180] deg
    """
    el.check()
    a, e, i, Omega, w, f = el.elements
    mu = el.mu

    # distance from the focus
    p = a * (1 - e**2)
    rmag = p / (1 + e * np.cos(f))

    # radial unit vector: rotations by Omega, i and the argument of latitude
    u = w + f
    rhat = np.array([
        np.cos(u) * np.cos(Omega) - np.cos(i) * np.sin(Omega) * np.sin(u),
        np.cos(u) * np.sin(Omega) + np.cos(i) * np.cos(Omega) * np.sin(u),
        np.sin(i) * np.sin(u)
    ])
    r = rmag * rhat

    # orbit normal and the in-plane direction of motion
    hhat = np.array([np.sin(Omega) * np.sin(i), -np.cos(Omega) * np.sin(i), np.cos(i)])
    thetahat = np.cross(hhat, rhat)

    h = np.sqrt(mu * p)
    if h == 0:
        # no central mass or a collapsed orbit: nothing moves
        return CartesianState(r, np.zeros(3))

    thetadot = h / rmag**2
    rdot = e * mu * np.sin(f) / h
    v = rmag * thetadot * thetahat + rdot * rhat
    return CartesianState(r, v)


# ========== STATE -> ELEMENTS ==========
def state_to_elements(state: CartesianState, mu=None) -> OrbitalElements:
    """
    Convert a Cartesian state to osculating elements.

    Conventions for the singular cases:

    - equatorial orbits (i within config.PRECISION of 0 or 180 deg) report
      Omega = 0 and measure w from the x-axis
    - circular orbits (e < config.PRECISION) report e = 0, w = 0 and the
      argument of latitude as the true anomaly

    Parameters
    ----------
    state : CartesianState
        Position and velocity relative to the central body
    mu : float, optional
        Gravitational parameter of the central body.
        Defaults to config.DEFAULT_MU

    Returns
    -------
    OrbitalElements
        Elements with Omega, w and f wrapped into [0, 360) degrees

    Raises
    ------
    DegenerateOrbit
        If r x v vanishes (radial or stationary body)
    InvalidElements
        If mu <= 0 or the state is not bound (e >= 1)
    """
    mu = float(config.DEFAULT_MU if mu is None else mu)
    if not mu > 0:
        raise InvalidElements(f"mu must be > 0 to convert a state, got {mu}")

    r, v = state
    rnorm = np.linalg.norm(r)
    vnorm = np.linalg.norm(v)
    if rnorm == 0:
        raise DegenerateOrbit("Position is at the central body (|r| = 0)")

    hvec = np.cross(r, v)
    hnorm = np.linalg.norm(hvec)
    if hnorm <= config.PRECISION * rnorm * vnorm:
        raise DegenerateOrbit(
            "Angular momentum r x v is zero: radial or stationary trajectory")

    # P = (v^2 - mu/r) r - (v . r) v points at periapsis with |P| = mu e
    A = np.dot(v, v) - mu / rnorm
    B = np.dot(v, r)
    P = A * r - B * v
    e = np.linalg.norm(P) / mu
    if e >= 1:
        raise InvalidElements(f"State is not bound to the central body (e = {e})")

    p = hnorm**2 / mu
    a = p / (1 - e**2)

    i = np.arccos(clamp_unit(hvec[2] / hnorm))
    equatorial = i < config.PRECISION or np.pi - i < config.PRECISION

    if equatorial:
        Omega = 0.0
    else:
        # atan2(hy, hx) is the azimuth of h; the node lies 90 deg ahead
        Omega = np.mod(np.arctan2(hvec[1], hvec[0]) + np.pi / 2, TWO_PI)

    # node line and the in-plane direction 90 deg ahead of it
    nhat = np.array([np.cos(Omega), np.sin(Omega), 0.0])
    bhat = np.cross(hvec / hnorm, nhat)

    if e < config.PRECISION:
        # no periapsis: true anomaly becomes the argument of latitude
        e = 0.0
        a = p
        w = 0.0
        f = np.arctan2(np.dot(r, bhat), np.dot(r, nhat))
        return OrbitalElements.from_radians(a, e, i, Omega, w, f, mu=mu)

    if equatorial:
        # atan2(P_y, P_x) for prograde orbits, mirrored for retrograde
        w = np.arctan2(np.dot(P, bhat), np.dot(P, nhat))
    else:
        C = np.cos(Omega) * P[0] + np.sin(Omega) * P[1]
        w = np.arccos(clamp_unit(C / (mu * e)))
        if P[2] < 0 and abs(P[2]) >= config.PRECISION * mu * e:
            w = -w

    f = np.arccos(clamp_unit((p / rnorm - 1) / e))
    # moving towards the focus means past apoapsis
    if B < 0:
        f = -f

    return OrbitalElements.from_radians(a, e, i, Omega, w, f, mu=mu)


# ========== PLANAR SAMPLING ==========
def position_in_plane(el: OrbitalElements, f_deg=None,
                      cos_table=COS_TABLE, sin_table=SIN_TABLE) -> np.ndarray:
    """
    Position in the orbital plane, periapsis along +x.

    Inclination, node and argument of periapsis are ignored; see
    orient_to_inertial for the rotation into the reference frame.

    Parameters
    ----------
    el : OrbitalElements
        Supplies a and e (and f when f_deg is not given)
    f_deg : float, optional
        True anomaly [deg]. Defaults to the element's own f.
        Whole degrees are read from the trig tables; anything else is
        evaluated directly.
    cos_table, sin_table : np.ndarray, optional
        Precomputed cosine/sine of 0..359 degrees

    Returns
    -------
    np.ndarray
        (x, y, 0)

    Raises
    ------
    InvalidElements
        If the elements are outside their domain
    """
    el.check()
    if f_deg is None:
        f_deg = el.f_deg
    f_deg = float(f_deg) % 360.0
    if f_deg.is_integer():
        idx = int(f_deg)
        cosf, sinf = cos_table[idx], sin_table[idx]
    else:
        f = np.radians(f_deg)
        cosf, sinf = np.cos(f), np.sin(f)

    radius = el.semi_latus_rectum() / (1 + el.e * cosf)
    return np.array([radius * cosf, radius * sinf, 0.0])


def sample_ring(el: OrbitalElements, cos_table=COS_TABLE, sin_table=SIN_TABLE) -> np.ndarray:
    """
    Sample the full orbit ellipse at every integer degree of true anomaly.

    Returns
    -------
    np.ndarray
        Shape (360, 3); row k is position_in_plane(el, k)
    """
    el.check()
    radius = el.semi_latus_rectum() / (1 + el.e * cos_table)
    return np.column_stack([radius * cos_table, radius * sin_table,
                            np.zeros_like(cos_table)])


def orbit_rotation(el: OrbitalElements) -> np.ndarray:
    """Rotation matrix Rz(Omega) @ Rx(i) @ Rz(w) from the orbital plane to the reference frame"""
    return rot_z(el.Omega) @ rot_x(el.i) @ rot_z(el.w)


def orient_to_inertial(points, el: OrbitalElements) -> np.ndarray:
    """
    Rotate planar points into the reference frame of the elements.

    Parameters
    ----------
    points : array-like
        A single point of shape (3,) or an array of shape (N, 3),
        e.g. from position_in_plane or sample_ring
    el : OrbitalElements
        Supplies Omega, i and w

    Returns
    -------
    np.ndarray
        Rotated point(s), same shape as the input
    """
    points = np.asarray(points, dtype=float)
    if points.ndim not in (1, 2) or points.shape[-1] != 3:
        raise ValueError(f"Points must have shape (3,) or (N, 3), got {points.shape}")
    return points @ orbit_rotation(el).T
