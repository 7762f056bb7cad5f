"""
Orrery: Orbital Element Conversions for N-Body Viewers

A Python package that turns n-body simulation output into display-ready
coordinates: osculating elements <-> Cartesian states, orbit rings sampled
per degree of true anomaly, and the rotations that place them in 3D.
"""

# Core classes
from .orbital_elements import OrbitalElements, OrbitalElements as OE, CartesianState
from .orbit import OrbitRecord, RecordSource, OrbitData

# Conversions
from .conversions import (elements_to_state, state_to_elements, position_in_plane,
                          sample_ring, orient_to_inertial, COS_TABLE, SIN_TABLE)

# Vector helpers
from .vector import angular_mapping, RotationAngles

# Errors and configuration
from .utils import OrreryError, InvalidElements, DegenerateOrbit
from .config import config, temp_config

# Package metadata
__version__ = "0.1.0"

# Define what gets imported with "from orrery import *"
__all__ = [
    # Classes
    "OrbitalElements",
    "CartesianState",
    "OrbitRecord",
    "RecordSource",
    "OrbitData",
    "RotationAngles",
    # Abbreviations
    "OE",
    # Functions
    "elements_to_state",
    "state_to_elements",
    "position_in_plane",
    "sample_ring",
    "orient_to_inertial",
    "angular_mapping",
    # Tables
    "COS_TABLE",
    "SIN_TABLE",
    # Errors
    "OrreryError",
    "InvalidElements",
    "DegenerateOrbit",
    # Configuration
    "config",
    "temp_config",
]
