'''Osculating element and Cartesian state value types
Angles enter and leave in degrees; everything inside is radians'''

import numpy as np
from .config import config
from .utils import InvalidElements, validation_error

TWO_PI = 2 * np.pi


#define osculating element class
class OrbitalElements:
    """
    Osculating elements of one body on a bound two-body orbit

    Elements are stored as [a, e, i, Omega, w, f] with angles in radians,
    together with the gravitational parameter mu of the central body.
    OrbitalElements is immutable; create a new instance to change it.

    Parameters
    ----------
    a : float
        Semi-major axis (any length unit consistent with mu)
    e : float
        Eccentricity, 0 <= e < 1
    i : float
        Inclination [deg], 0 <= i <= 180
    Omega : float
        Longitude of ascending node [deg], wrapped into [0, 360)
    w : float
        Argument of periapsis [deg], wrapped into [0, 360)
    f : float
        True anomaly [deg], wrapped into [0, 360)
    mu : float, optional
        Gravitational parameter G*M of the central body.
        Defaults to config.DEFAULT_MU
    validate : bool, optional
        Whether to check the element domain (default True)

    Examples
    --------
    >>> OrbitalElements(a=1.0, e=0.1, i=30, Omega=45, w=90, f=10, mu=1.0)
    """
    _NAMES = ('a', 'e', 'i', 'Omega', 'w', 'f')

    # ========== CONSTRUCTION ==========
    def __init__(self, a, e, i, Omega, w, f, mu=None, validate=True):
        angles = np.radians([i, Omega, w, f])
        self._init_from_radians(a, e, *angles, mu=mu, validate=validate)

    def _init_from_radians(self, a, e, i, Omega, w, f, mu=None, validate=True):
        self._mu = float(config.DEFAULT_MU if mu is None else mu)
        elements = np.array([a, e, i, Omega, w, f], dtype=float)
        # wrap the three periodic angles, leave inclination alone
        elements[3:] = np.mod(elements[3:], TWO_PI)
        # np.mod can round a tiny negative angle up to exactly 2*pi
        elements[3:][elements[3:] >= TWO_PI] = 0.0
        self._elements = elements
        # Ensure immutability of elements array
        self._elements.flags.writeable = False
        if validate:
            self._validate()

    # alternate constructors
    @classmethod
    def from_radians(cls, a, e, i, Omega, w, f, mu=None, validate=True):
        """
        Create elements from angles already in radians

        Used by the conversions so that computed angles never make an
        extra trip through degrees.
        """
        obj = cls.__new__(cls)
        obj._init_from_radians(a, e, i, Omega, w, f, mu=mu, validate=validate)
        return obj

    @classmethod
    def from_array(cls, elements, mu=None, degrees=True, validate=True):
        """
        Create elements from a 6-element sequence [a, e, i, Omega, w, f]

        Args:
            elements: 6-element array-like
            mu: Gravitational parameter (optional, defaults to config.DEFAULT_MU)
            degrees: Whether the angles are in degrees (default True)
            validate: Whether to check the element domain

        Returns:
            OrbitalElements instance
        """
        elements = np.asarray(elements, dtype=float)
        if elements.shape != (6,):
            raise ValueError(
                f"Orbital elements must be a 6-element vector, got shape {elements.shape}")
        if degrees:
            return cls(*elements, mu=mu, validate=validate)
        return cls.from_radians(*elements, mu=mu, validate=validate)

    # ========== VALIDATION ==========
    def check(self):
        """
        Raise InvalidElements if the elements are outside their domain

        Unlike construction-time validation this always raises, regardless
        of config.STRICT_VALIDATION.
        """
        problem = self._find_problem()
        if problem is not None:
            raise InvalidElements(problem)

    def _validate(self):
        problem = self._find_problem()
        if problem is not None:
            validation_error(problem, InvalidElements)

    def _find_problem(self):
        """Return a description of the first domain violation, or None"""
        a, e, i, _, _, _ = self._elements
        if not np.all(np.isfinite(self._elements)) or not np.isfinite(self._mu):
            return "Elements contain NaN or Inf"
        if self._mu < 0:
            return f"mu must be >= 0, got {self._mu}"
        if a < 0:
            return f"a must be >= 0, got {a}"
        if e < 0 or e >= 1:
            return f"e must be in [0, 1) (parabolic and hyperbolic orbits are not supported), got {e}"
        if i < 0 or i > np.pi:
            return f"i must be within 0 and 180 degrees, got {np.degrees(i)}"
        return None

    # ========== PROPERTY ACCESS ==========
    @property
    def elements(self):
        """Read-only array [a, e, i, Omega, w, f], angles in radians"""
        return self._elements

    @property
    def mu(self):
        """Gravitational parameter of the central body"""
        return self._mu

    @property
    def a(self):
        """Semi-major axis"""
        return self._elements[0]

    @property
    def e(self):
        """Eccentricity"""
        return self._elements[1]

    @property
    def i(self):
        """Inclination [rad]"""
        return self._elements[2]

    @property
    def Omega(self):
        """Longitude of ascending node [rad]"""
        return self._elements[3]

    @property
    def w(self):
        """Argument of periapsis [rad]"""
        return self._elements[4]

    @property
    def f(self):
        """True anomaly [rad]"""
        return self._elements[5]

    @property
    def i_deg(self):
        return np.degrees(self._elements[2])

    @property
    def Omega_deg(self):
        return np.degrees(self._elements[3])

    @property
    def w_deg(self):
        return np.degrees(self._elements[4])

    @property
    def f_deg(self):
        return np.degrees(self._elements[5])

    def degrees(self):
        """Elements as a new array [a, e, i, Omega, w, f] with angles in degrees"""
        out = self._elements.copy()
        out[2:] = np.degrees(out[2:])
        return out

    # ========== ORBITAL PROPERTIES ==========
    def semi_latus_rectum(self):
        """p = a(1 - e^2)"""
        return self.a * (1 - self.e**2)

    def specific_angular_momentum(self):
        """
        Calculate specific angular momentum magnitude

        Returns h = sqrt(mu * a * (1 - e^2))
        """
        return np.sqrt(self._mu * self.semi_latus_rectum())

    def specific_energy(self):
        """Calculate specific orbital energy (energy per unit mass)"""
        if self.a == 0:
            raise ValueError("Specific energy undefined for a = 0")
        return -self._mu / (2 * self.a)

    def mean_motion(self):
        """
        Calculate mean motion (n = sqrt(mu/a^3))

        Returns
        -------
        float
            Mean motion [rad per time unit of mu]

        Raises
        ------
        ValueError
            If a = 0
        """
        if self.a == 0:
            raise ValueError("Mean motion undefined for a = 0")
        return np.sqrt(self._mu / self.a**3)

    def orbital_period(self):
        """
        Calculate orbital period

        Returns period in the time unit of mu
        """
        if self._mu == 0:
            raise ValueError("Orbital period undefined for mu = 0")
        return 2 * np.pi * np.sqrt(self.a**3 / self._mu)

    # ========== UTILITY METHODS ==========
    def replace(self, **kwargs):
        """
        Return a copy with some fields changed

        Angles are given in degrees, like the constructor.

        >>> kep.replace(f=90)
        """
        values = dict(zip(self._NAMES, self.degrees()))
        mu = kwargs.pop('mu', self._mu)
        for key in kwargs:
            if key not in values:
                raise TypeError(f"Unknown orbital element '{key}'")
        values.update(kwargs)
        return OrbitalElements(**values, mu=mu)

    # ========== SPECIAL METHODS ==========
    def __len__(self):
        return 6

    def __getitem__(self, key):
        return self._elements[key]

    def __iter__(self):
        return iter(self._elements)

    def __repr__(self):
        a, e, i, Omega, w, f = self.degrees().tolist()
        return (f"OrbitalElements(a={a!r}, e={e!r}, i={i!r}, Omega={Omega!r}, "
                f"w={w!r}, f={f!r}, mu={self._mu!r})")

    def __str__(self):
        #Human-readable representation
        a, e, i, Omega, w, f = self.degrees()
        return (f"Osculating Elements:\n"
                f"  a     = {a:12.6f}\n"
                f"  e     = {e:12.6f}\n"
                f"  i     = {i:12.4f}°\n"
                f"  Omega = {Omega:12.4f}°\n"
                f"  ω     = {w:12.4f}°\n"
                f"  f     = {f:12.4f}°\n"
                f"  mu    = {self._mu:12.6g}")

    def __eq__(self, other):
        #Check equality with tolerance
        if not isinstance(other, OrbitalElements):
            return False
        return (np.isclose(self._mu, other._mu,
                           rtol=config.EQUALITY_RTOL, atol=config.EQUALITY_ATOL) and
                np.allclose(self._elements, other._elements,
                            rtol=config.EQUALITY_RTOL,
                            atol=config.EQUALITY_ATOL))

    __hash__ = None


#define Cartesian state class
class CartesianState:
    """
    Position and velocity of one body relative to the central body

    Parameters
    ----------
    position : array-like
        3-element position vector
    velocity : array-like
        3-element velocity vector

    Supports unpacking: ``r, v = state``
    """

    def __init__(self, position, velocity):
        position = np.array(position, dtype=float)
        velocity = np.array(velocity, dtype=float)
        if position.shape != (3,) or velocity.shape != (3,):
            raise ValueError(
                f"Position and velocity must be 3-vectors, got shapes "
                f"{position.shape} and {velocity.shape}")
        if not (np.all(np.isfinite(position)) and np.all(np.isfinite(velocity))):
            raise ValueError("State contains NaN or Inf")
        position.flags.writeable = False
        velocity.flags.writeable = False
        self._position = position
        self._velocity = velocity

    @classmethod
    def from_array(cls, state):
        """Create a state from [x, y, z, vx, vy, vz]"""
        state = np.asarray(state, dtype=float)
        if state.shape != (6,):
            raise ValueError(f"State must be a 6-element vector, got shape {state.shape}")
        return cls(state[:3], state[3:])

    @property
    def position(self):
        """Position vector r"""
        return self._position

    @property
    def velocity(self):
        """Velocity vector v"""
        return self._velocity

    def as_array(self):
        """State as a new array [x, y, z, vx, vy, vz]"""
        return np.concatenate([self._position, self._velocity])

    def __iter__(self):
        return iter((self._position, self._velocity))

    def __repr__(self):
        return (f"CartesianState(position={self._position.tolist()}, "
                f"velocity={self._velocity.tolist()})")

    def __str__(self):
        r, v = self._position, self._velocity
        return (f"Cartesian State:\n"
                f"  r = [{r[0]:12.6f}, {r[1]:12.6f}, {r[2]:12.6f}]\n"
                f"  v = [{v[0]:12.6f}, {v[1]:12.6f}, {v[2]:12.6f}]")

    def __eq__(self, other):
        if not isinstance(other, CartesianState):
            return False
        return np.allclose(self.as_array(), other.as_array(),
                           rtol=config.EQUALITY_RTOL, atol=config.EQUALITY_ATOL)

    __hash__ = None
