'''OrbitRecord: one body at one instant, as loaded from simulation output,
with lazily computed display coordinates'''

import warnings
import numpy as np
from enum import Enum
from typing import Dict, List, Optional

from .config import config
from .orbital_elements import OrbitalElements, CartesianState
from .conversions import (elements_to_state, state_to_elements, position_in_plane,
                          sample_ring, orient_to_inertial)
from .utils import OrreryError


# which representation a record was loaded from
class RecordSource(Enum):
    ELEMENTS = 'osc'    # [a;e;i;Omega;w;f]
    STATE = 'xyz'       # [x;y;z;vx;vy;vz]


class OrbitRecord:
    """
    One body at one simulation instant.

    A record holds either osculating elements or a Cartesian state as its
    source of truth. The other representation, the position in the orbital
    plane and the 360-point ring are derived on first request and cached
    until the source is replaced with update().

    Parameters
    ----------
    elements : OrbitalElements, optional
        Source elements
    state : CartesianState, optional
        Source state. Exactly one of elements or state must be given.
    mu : float, optional
        Gravitational parameter of a state source (default
        config.DEFAULT_MU). With elements it may be omitted and must
        otherwise equal elements.mu.
    time : float, optional
        Simulation time of the record (default 0)
    particle_id : int, optional
        Identifier of the body in the simulation
    """

    def __init__(self, elements: Optional[OrbitalElements] = None,
                 state: Optional[CartesianState] = None,
                 mu: Optional[float] = None,
                 time: float = 0.0,
                 particle_id: Optional[int] = None):
        if (elements is None) == (state is None):
            raise ValueError("OrbitRecord needs exactly one of elements or state")
        if elements is not None:
            if mu is not None and float(mu) != elements.mu:
                raise ValueError(
                    f"mu={mu} disagrees with elements.mu={elements.mu}; "
                    f"use elements.replace(mu=...) to change it")
            mu = elements.mu
        elif mu is None:
            mu = config.DEFAULT_MU
        self._mu = float(mu)
        self._time = float(time)
        self._particle_id = particle_id
        self._set_source(elements, state)

    # alternate constructors matching what simulation readers produce
    @classmethod
    def from_elements(cls, a, e, i, Omega, w, f, mu=None, time=0.0,
                      particle_id=None, validate=True):
        """
        Create a record from osculating elements (angles in degrees)

        Returns:
            OrbitRecord instance
        """
        el = OrbitalElements(a, e, i, Omega, w, f, mu=mu, validate=validate)
        return cls(elements=el, time=time, particle_id=particle_id)

    @classmethod
    def from_state(cls, position, velocity, mu=None, time=0.0, particle_id=None):
        """
        Create a record from a position and velocity

        Returns:
            OrbitRecord instance
        """
        return cls(state=CartesianState(position, velocity), mu=mu,
                   time=time, particle_id=particle_id)

    def _set_source(self, elements, state):
        if elements is not None:
            self._source = RecordSource.ELEMENTS
        else:
            self._source = RecordSource.STATE
        self._elements = elements
        self._state = state
        self._clear_cache()

    def _clear_cache(self):
        self._pos_in_plane = None
        self._ring = None

    def update(self, elements: Optional[OrbitalElements] = None,
               state: Optional[CartesianState] = None):
        """
        Replace the source representation and drop every derived value.

        Parameters
        ----------
        elements : OrbitalElements, optional
        state : CartesianState, optional
            Exactly one must be given. New elements also bring their mu.
        """
        if (elements is None) == (state is None):
            raise ValueError("update() needs exactly one of elements or state")
        if elements is not None:
            self._mu = float(elements.mu)
        self._set_source(elements, state)

    # ========== PROPERTY ACCESS ==========
    @property
    def source(self) -> RecordSource:
        """Representation the record was loaded from"""
        return self._source

    @property
    def time(self) -> float:
        return self._time

    @property
    def particle_id(self):
        return self._particle_id

    @property
    def mu(self) -> float:
        """Gravitational parameter of the central body"""
        return self._mu

    @property
    def elements(self) -> OrbitalElements:
        """Osculating elements, converted from the state on first access"""
        if self._elements is None:
            self._elements = state_to_elements(self._state, self._mu)
        return self._elements

    @property
    def state(self) -> CartesianState:
        """Cartesian state, converted from the elements on first access"""
        if self._state is None:
            self._state = elements_to_state(self._elements)
        return self._state

    @property
    def has_coords(self) -> bool:
        """Whether the position in the orbital plane has been computed"""
        return self._pos_in_plane is not None

    @property
    def has_orbit(self) -> bool:
        """Whether the orbit ring has been computed"""
        return self._ring is not None

    @property
    def position_in_plane(self) -> np.ndarray:
        """Position in the orbital plane (computed on first access)"""
        if self._pos_in_plane is None:
            self.calculate_position()
        return self._pos_in_plane

    @property
    def ring(self) -> np.ndarray:
        """(360, 3) orbit outline in the orbital plane (computed on first access)"""
        if self._ring is None:
            self.calculate_orbit()
        return self._ring

    # ========== DISPLAY COORDINATES ==========
    def calculate_position(self) -> np.ndarray:
        """Compute and cache the position in the orbital plane"""
        pos = position_in_plane(self.elements)
        pos.flags.writeable = False
        self._pos_in_plane = pos
        return pos

    def calculate_orbit(self) -> np.ndarray:
        """
        Compute and cache the orbit ring together with the current position

        Returns
        -------
        np.ndarray
            Shape (360, 3), row k at true anomaly k degrees
        """
        ring = sample_ring(self.elements)
        ring.flags.writeable = False
        self._ring = ring
        self.calculate_position()
        return ring

    def inertial_position(self) -> np.ndarray:
        """Position in the orbital plane rotated into the reference frame"""
        return orient_to_inertial(self.position_in_plane, self.elements)

    def inertial_ring(self) -> np.ndarray:
        """Orbit ring rotated into the reference frame"""
        return orient_to_inertial(self.ring, self.elements)

    # ========== SPECIAL METHODS ==========
    def __repr__(self):
        source = self._elements if self._source == RecordSource.ELEMENTS else self._state
        return (f"OrbitRecord({source!r}, time={self._time!r}, "
                f"particle_id={self._particle_id!r})")

    # ========== BATCH OPERATIONS ==========
    class Batch:
        """
        Batch operations on collections of OrbitRecords.

        Methods accept a list of records, or OrbitData (particle ID ->
        list of records, one per frame) where noted.
        """
        @staticmethod
        def to_states(records):
            """Cartesian states of multiple records"""
            return [r.state for r in records]

        @staticmethod
        def to_elements(records):
            """Osculating elements of multiple records"""
            return [r.elements for r in records]

        @staticmethod
        def calculate_positions(records):
            """Planar positions of multiple records, shape (n, 3)"""
            return np.array([r.calculate_position() for r in records])

        @staticmethod
        def calculate_orbits(records):
            """Orbit rings of multiple records, shape (n, 360, 3)"""
            return np.array([r.calculate_orbit() for r in records])

        @staticmethod
        def prepare(orbit_data, full_orbit=False, skip_invalid=False):
            """
            Compute display coordinates for every record of every particle.

            Parameters
            ----------
            orbit_data : OrbitData
                Particle ID -> list of records
            full_orbit : bool, optional
                Compute the whole ring (True) or only the position (False)
            skip_invalid : bool, optional
                If True, records that fail to convert are dropped with a
                warning. If False (default) the first failure propagates.

            Returns
            -------
            OrbitData
                The records that were prepared, keyed like the input
            """
            prepared = {}
            for pid, records in orbit_data.items():
                kept = []
                for record in records:
                    try:
                        if full_orbit:
                            record.calculate_orbit()
                        else:
                            record.calculate_position()
                    except OrreryError as err:
                        if not skip_invalid:
                            raise
                        warnings.warn(
                            f"Skipping particle {pid} at t={record.time}: {err}",
                            UserWarning, stacklevel=2)
                        continue
                    kept.append(record)
                prepared[pid] = kept
            return prepared

        @staticmethod
        def bounds(orbit_data):
            """
            Extent of the planar positions of every record in OrbitData.

            Positions are computed on demand, so this is usually called
            after prepare().

            Returns
            -------
            minimum, maximum, center : ndarray, shape (3,)
                Component-wise minimum and maximum and their midpoint

            Raises
            ------
            ValueError
                If orbit_data holds no records
            """
            positions = [r.position_in_plane for records in orbit_data.values()
                         for r in records]
            if not positions:
                raise ValueError("Cannot compute bounds of empty OrbitData")
            positions = np.array(positions)
            minimum = positions.min(axis=0)
            maximum = positions.max(axis=0)
            return minimum, maximum, (minimum + maximum) / 2

        @staticmethod
        def to_dataframe(records):
            """
            Convert list of OrbitRecords to pandas DataFrame.

            Parameters
            ----------
            records : list of OrbitRecord

            Returns
            -------
            pd.DataFrame
                Columns ['time', 'particle_id', 'a', 'e', 'i', 'Omega',
                'w', 'f', 'mu'], angles in degrees
            """
            # pandas isn't needed unless this function is used
            try:
                import pandas as pd
            except ImportError:
                raise ImportError("pandas required for to_dataframe()")
            rows = []
            for r in records:
                rows.append([r.time, r.particle_id, *r.elements.degrees(), r.mu])
            return pd.DataFrame(rows, columns=DATAFRAME_COLUMNS)

        @staticmethod
        def from_dataframe(df, mu=None, validate=True):
            """
            Create OrbitRecords from a pandas DataFrame of elements.

            Parameters
            ----------
            df : pd.DataFrame
                Must contain columns a, e, i, Omega, w, f (degrees).
                Optional columns: time, particle_id, mu.
            mu : float, optional
                Used when df has no mu column
            validate : bool, optional, defaults to True

            Returns
            -------
            list of OrbitRecord
            """
            missing = [c for c in ELEMENT_COLUMNS if c not in df.columns]
            if missing:
                raise ValueError(f"DataFrame is missing element columns: {missing}")
            records = []
            for _, row in df.iterrows():
                row_mu = row['mu'] if 'mu' in df.columns else mu
                pid = row['particle_id'] if 'particle_id' in df.columns else None
                if pid is not None and float(pid).is_integer():
                    pid = int(pid)
                records.append(OrbitRecord.from_elements(
                    *(row[c] for c in ELEMENT_COLUMNS), mu=row_mu,
                    time=row['time'] if 'time' in df.columns else 0.0,
                    particle_id=pid, validate=validate))
            return records

        @staticmethod
        def group_by_particle(records):
            """Group records into OrbitData, keeping their order within each particle"""
            data = {}
            for r in records:
                data.setdefault(r.particle_id, []).append(r)
            return data


ELEMENT_COLUMNS = ['a', 'e', 'i', 'Omega', 'w', 'f']
DATAFRAME_COLUMNS = ['time', 'particle_id'] + ELEMENT_COLUMNS + ['mu']

# particle ID -> that particle's records, one per frame
OrbitData = Dict[int, List[OrbitRecord]]
