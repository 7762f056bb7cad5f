"""
Exceptions and validation helpers for the Orrery package.
"""

import warnings
from typing import Type
from .config import config


class OrreryError(Exception):
    """Base class for errors raised by the Orrery package."""


class InvalidElements(OrreryError, ValueError):
    """
    Orbital elements outside their physical domain.

    Raised for mu < 0, a < 0, e outside [0, 1), inclination outside
    [0, 180] degrees, non-finite values, or a Cartesian state that is
    not bound to the central body.
    """


class DegenerateOrbit(OrreryError, ValueError):
    """
    Cartesian state with no orbital plane.

    Raised when the specific angular momentum r x v vanishes, i.e. the
    body moves along a radial line or is at rest.
    """


def validation_error(message: str, error_class: Type[Exception] = ValueError):
    """
    Raise error or warn based on config.STRICT_VALIDATION.

    This function provides consistent validation behavior across the package.
    When STRICT_VALIDATION is True (default), raises the specified exception.
    When False, issues a UserWarning instead.

    Parameters
    ----------
    message : str
        Validation error message
    error_class : Type[Exception], optional
        Exception class to raise if STRICT_VALIDATION is True.
        Default: ValueError

    Raises
    ------
    Exception (of type error_class)
        If config.STRICT_VALIDATION is True

    Warns
    -----
    UserWarning
        If config.STRICT_VALIDATION is False

    Examples
    --------
    >>> from orrery.utils import validation_error, InvalidElements
    >>> from orrery import config
    >>> config.STRICT_VALIDATION = True
    >>> validation_error("e must be in [0, 1)", InvalidElements)  # Raises

    >>> config.STRICT_VALIDATION = False
    >>> validation_error("e must be in [0, 1)", InvalidElements)  # Warns
    """
    if config.STRICT_VALIDATION:
        raise error_class(message)
    else:
        warnings.warn(message, UserWarning, stacklevel=2)
