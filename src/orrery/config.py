"""
Global Configuration for Orrery Package
=======================================

This module provides package-wide configuration settings that users can modify
to control numerical tolerances, snapping thresholds and validation behavior.

Examples
--------
View current configuration:

>>> import orrery
>>> print(orrery.config)

Modify settings:

>>> orrery.config.EQUALITY_RTOL = 1e-10  # Looser equality checks
>>> orrery.config.DEFAULT_MU = 2.959122082855911e-4  # AU^3/day^2 (Sun)

Reset to defaults:

>>> orrery.config.reset()

Temporarily modify settings:

>>> with orrery.temp_config(STRICT_VALIDATION=False):
...     # Bad elements warn instead of raising for this block only
...     orrery.OrbitalElements(a=-1, e=0.1, i=10, Omega=0, w=0, f=0)

Notes
-----
These settings affect package-wide behavior. Modifying them will impact
all subsequent operations until changed again or reset.
"""

from dataclasses import dataclass
from contextlib import contextmanager


@dataclass
class OrreryConfig:
    """
    Global configuration for Orrery package.

    Attributes
    ----------
    PRECISION : float
        Threshold below which inclination (rad) is treated as equatorial and
        eccentricity as circular when converting Cartesian states.
        Default: 1e-14
    EQUALITY_RTOL : float
        Relative tolerance for floating-point equality comparisons.
        Default: 1e-12
    EQUALITY_ATOL : float
        Absolute tolerance for floating-point equality comparisons.
        Default: 1e-14
    DEFAULT_MU : float
        Gravitational parameter used when none is given. Simulation output
        is usually in G = 1 units with a unit-mass primary.
        Default: 1.0
    STRICT_VALIDATION : bool
        If True, element validation failures raise exceptions.
        If False, validation failures issue warnings.
        Default: True
    """

    # Snapping threshold for equatorial/circular orbits
    PRECISION: float = 1e-14

    # Numerical tolerance for equality comparisons
    EQUALITY_RTOL: float = 1e-12
    EQUALITY_ATOL: float = 1e-14

    # Physical defaults
    DEFAULT_MU: float = 1.0

    # Validation behavior
    STRICT_VALIDATION: bool = True

    def reset(self):
        """
        Reset all configuration values to package defaults.

        Examples
        --------
        >>> import orrery
        >>> orrery.config.PRECISION = 1e-10  # Modify
        >>> orrery.config.reset()  # Back to defaults
        >>> orrery.config.PRECISION
        1e-14
        """
        defaults = OrreryConfig()
        for key in self.__dataclass_fields__:
            setattr(self, key, getattr(defaults, key))

    def __repr__(self):
        """Return formatted string showing all configuration values."""
        lines = ["OrreryConfig:"]
        lines.append("  Numerical Tolerances:")
        lines.append(f"    PRECISION = {self.PRECISION}")
        lines.append(f"    EQUALITY_RTOL = {self.EQUALITY_RTOL}")
        lines.append(f"    EQUALITY_ATOL = {self.EQUALITY_ATOL}")
        lines.append("  Defaults:")
        lines.append(f"    DEFAULT_MU = {self.DEFAULT_MU}")
        lines.append("  Behavior:")
        lines.append(f"    STRICT_VALIDATION = {self.STRICT_VALIDATION}")
        return "\n".join(lines)


# Global configuration instance
config = OrreryConfig()


@contextmanager
def temp_config(**kwargs):
    """
    Context manager for temporarily modifying configuration values.

    Configuration is automatically restored when the context exits,
    even if an exception occurs.

    Parameters
    ----------
    **kwargs
        Configuration attributes to temporarily modify.

    Examples
    --------
    >>> import orrery
    >>> with orrery.temp_config(PRECISION=1e-8):
    ...     # Near-circular states snap to e = 0 more eagerly
    ...     kep = orrery.state_to_elements(state, mu=1.0)
    >>> # Original config restored here
    >>> orrery.config.PRECISION
    1e-14

    Raises
    ------
    AttributeError
        If an invalid configuration attribute is specified.
    """
    old_values = {}
    for key, value in kwargs.items():
        if not hasattr(config, key):
            raise AttributeError(
                f"OrreryConfig has no attribute '{key}'. "
                f"Valid attributes: {list(config.__dataclass_fields__.keys())}"
            )
        old_values[key] = getattr(config, key)
        setattr(config, key, value)

    try:
        yield config
    finally:
        for key, value in old_values.items():
            setattr(config, key, value)
