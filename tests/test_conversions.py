"""
Test suite for the element <-> state conversions.

Tests include:
1. Roundtrip conversions (osc->xyz->osc and xyz->osc->xyz)
2. Checks against independent two-body relations (vis-viva, perifocal frame)
3. Equatorial, circular, retrograde and radial edge cases
4. acos clamping
5. Planar positions, ring sampling and rotation into the reference frame
"""

import pytest
import numpy as np

from orrery import (OrbitalElements, CartesianState, elements_to_state,
                    state_to_elements, position_in_plane, sample_ring,
                    orient_to_inertial, InvalidElements, DegenerateOrbit,
                    COS_TABLE, SIN_TABLE, temp_config)
from orrery.conversions import orbit_rotation


# =============================================================================
# Test Configuration
# =============================================================================

RTOL = 1e-12
ATOL = 1e-12

# For angular comparisons (degrees)
ANGLE_ATOL = 1e-9

# Well-conditioned orbits: no angle near 0 or 180 deg where acos loses digits
GENERAL_ORBITS = {
    "low_e_prograde": (1.0, 0.1, 30.0, 40.0, 60.0, 100.0, 1.0),
    "jupiter_like": (5.2, 0.048, 1.3, 100.5, 273.9, 20.0, 2.959122e-4),
    "high_e_retrograde": (2.5, 0.6, 120.0, 300.0, 45.0, 200.0, 3.0),
    "mercury_like": (0.387, 0.2056, 7.0, 48.3, 29.1, 250.0, 1.0),
    "near_parabolic_polar": (10.0, 0.9, 89.0, 10.0, 170.0, 300.0, 0.5),
}


def angle_diff(x, y):
    """Signed difference x - y wrapped into [-180, 180) degrees"""
    return (x - y + 180.0) % 360.0 - 180.0


def make_elements(a, e, i, Omega, w, f, mu):
    return OrbitalElements(a=a, e=e, i=i, Omega=Omega, w=w, f=f, mu=mu)


# =============================================================================
# Test Roundtrip Conversions
# =============================================================================

class TestRoundtripConversions:
    """Test that conversions are self-consistent (A->B->A should equal A)."""

    @pytest.mark.parametrize("name", GENERAL_ORBITS)
    def test_osc_to_xyz_to_osc(self, name):
        """Elements survive a trip through the Cartesian state."""
        a, e, i, Omega, w, f, mu = GENERAL_ORBITS[name]
        el = make_elements(a, e, i, Omega, w, f, mu)

        back = state_to_elements(elements_to_state(el), mu)

        assert np.isclose(back.a, a, rtol=1e-10), f"{name}: a {back.a} vs {a}"
        assert np.isclose(back.e, e, atol=ATOL), f"{name}: e {back.e} vs {e}"
        assert back.mu == mu
        assert abs(angle_diff(back.i_deg, i)) < ANGLE_ATOL
        assert abs(angle_diff(back.Omega_deg, Omega)) < ANGLE_ATOL
        assert abs(angle_diff(back.w_deg, w)) < ANGLE_ATOL
        assert abs(angle_diff(back.f_deg, f)) < ANGLE_ATOL

    @pytest.mark.parametrize("name", GENERAL_ORBITS)
    def test_xyz_to_osc_to_xyz(self, name):
        """A state survives a trip through the elements."""
        el = make_elements(*GENERAL_ORBITS[name])
        state = elements_to_state(el)

        state_final = elements_to_state(state_to_elements(state, el.mu))

        assert np.allclose(state_final.position, state.position, rtol=RTOL, atol=ATOL)
        assert np.allclose(state_final.velocity, state.velocity, rtol=RTOL, atol=ATOL)

    @pytest.mark.parametrize("name", GENERAL_ORBITS)
    def test_reported_angles_normalized(self, name):
        """Omega, w and f come back inside [0, 360)."""
        el = make_elements(*GENERAL_ORBITS[name])
        back = state_to_elements(elements_to_state(el), el.mu)
        for angle in (back.Omega_deg, back.w_deg, back.f_deg):
            assert 0.0 <= angle < 360.0


# =============================================================================
# Test Against Independent Relations
# =============================================================================

class TestTwoBodyRelations:
    """Compare elements_to_state with textbook two-body results."""

    def test_unit_circular_orbit(self):
        """a=1, e=0, all angles 0, mu=1 gives r=(1,0,0), v=(0,1,0)."""
        el = OrbitalElements(a=1, e=0, i=0, Omega=0, w=0, f=0, mu=1)
        r, v = elements_to_state(el)
        assert np.allclose(r, [1, 0, 0], atol=1e-9)
        assert np.allclose(v, [0, 1, 0], atol=1e-9)

    @pytest.mark.parametrize("name", GENERAL_ORBITS)
    def test_vis_viva(self, name):
        """|v|^2 = mu (2/r - 1/a)."""
        el = make_elements(*GENERAL_ORBITS[name])
        r, v = elements_to_state(el)
        rmag = np.linalg.norm(r)
        expected = el.mu * (2 / rmag - 1 / el.a)
        assert np.isclose(np.dot(v, v), expected, rtol=1e-12)

    @pytest.mark.parametrize("name", GENERAL_ORBITS)
    def test_matches_perifocal_frame(self, name):
        """Radial/tangential velocity split agrees with the perifocal-frame formula."""
        el = make_elements(*GENERAL_ORBITS[name])
        a, e, _, _, _, f = el.elements
        p = a * (1 - e**2)
        rmag = p / (1 + e * np.cos(f))
        # perifocal position and velocity, rotated by Rz(Omega) Rx(i) Rz(w)
        r_pf = np.array([rmag * np.cos(f), rmag * np.sin(f), 0])
        v_pf = np.sqrt(el.mu / p) * np.array([-np.sin(f), e + np.cos(f), 0])
        DCM = orbit_rotation(el)

        r, v = elements_to_state(el)
        assert np.allclose(r, DCM @ r_pf, rtol=RTOL, atol=ATOL)
        assert np.allclose(v, DCM @ v_pf, rtol=1e-11, atol=ATOL)

    def test_angular_momentum_magnitude(self):
        """|r x v| = sqrt(mu a (1 - e^2))."""
        el = make_elements(*GENERAL_ORBITS["high_e_retrograde"])
        r, v = elements_to_state(el)
        assert np.isclose(np.linalg.norm(np.cross(r, v)),
                          el.specific_angular_momentum(), rtol=1e-12)

    def test_zero_mu_gives_zero_velocity(self):
        """No central mass: the body sits still instead of producing NaN."""
        el = OrbitalElements(a=1, e=0.2, i=10, Omega=0, w=0, f=30, mu=0)
        r, v = elements_to_state(el)
        assert np.all(np.isfinite(r))
        assert np.array_equal(v, np.zeros(3))

    def test_zero_axis_collapses_to_origin(self):
        """a = 0 places the body at the focus with no velocity."""
        el = OrbitalElements(a=0, e=0.0, i=0, Omega=0, w=0, f=0, mu=1)
        r, v = elements_to_state(el)
        assert np.array_equal(r, np.zeros(3))
        assert np.array_equal(v, np.zeros(3))


# =============================================================================
# Test Edge Cases
# =============================================================================

class TestEquatorialOrbits:
    """Inclination 0 or 180 deg: the node is undefined."""

    def test_prograde_equatorial_reports_zero_node(self):
        """i=0 -> Omega=0 by convention, and w absorbs the original node."""
        el = OrbitalElements(a=1.5, e=0.3, i=0, Omega=75, w=30, f=50, mu=1)
        state = elements_to_state(el)

        back = state_to_elements(state, mu=1)

        assert back.Omega_deg == 0.0
        assert back.i_deg == 0.0
        assert abs(angle_diff(back.w_deg, 105.0)) < ANGLE_ATOL
        assert abs(angle_diff(back.f_deg, 50.0)) < ANGLE_ATOL

        state_final = elements_to_state(back)
        assert np.allclose(state_final.position, state.position, rtol=RTOL, atol=ATOL)
        assert np.allclose(state_final.velocity, state.velocity, rtol=RTOL, atol=ATOL)

    def test_retrograde_equatorial(self):
        """i=180: Omega=0 and the state still round-trips."""
        el = OrbitalElements(a=1.0, e=0.2, i=180, Omega=0, w=30, f=40, mu=1)
        state = elements_to_state(el)

        back = state_to_elements(state, mu=1)

        assert back.Omega_deg == 0.0
        assert abs(back.i_deg - 180.0) < 1e-6
        state_final = elements_to_state(back)
        assert np.allclose(state_final.position, state.position, rtol=RTOL, atol=1e-12)
        assert np.allclose(state_final.velocity, state.velocity, rtol=RTOL, atol=1e-12)


class TestCircularOrbits:
    """Eccentricity below PRECISION: periapsis is undefined."""

    def test_tiny_eccentricity_snaps_to_zero(self):
        """e slightly below 1e-14 comes back as exactly 0."""
        el = OrbitalElements(a=1, e=5e-15, i=20, Omega=10, w=40, f=60, mu=1)
        back = state_to_elements(elements_to_state(el), mu=1)
        assert back.e == 0.0

    def test_circular_reports_argument_of_latitude(self):
        """e=0 -> w=0 and f = w + f of the input."""
        el = OrbitalElements(a=2.0, e=0.0, i=45, Omega=30, w=20, f=50, mu=1)
        back = state_to_elements(elements_to_state(el), mu=1)

        assert back.e == 0.0
        assert back.w == 0.0
        assert np.isclose(back.a, 2.0, rtol=1e-12)
        assert abs(angle_diff(back.Omega_deg, 30.0)) < ANGLE_ATOL
        assert abs(angle_diff(back.f_deg, 70.0)) < ANGLE_ATOL

    def test_unit_circular_state(self):
        """r=(1,0,0), v=(0,1,0), mu=1 is the unit circular equatorial orbit."""
        state = CartesianState([1, 0, 0], [0, 1, 0])
        back = state_to_elements(state, mu=1)
        assert np.allclose(back.degrees(), [1, 0, 0, 0, 0, 0], atol=1e-12)

    def test_circular_equatorial_roundtrip(self):
        """Circular equatorial state converts back to the same state."""
        el = OrbitalElements(a=3.0, e=0.0, i=0, Omega=0, w=0, f=123, mu=2.0)
        state = elements_to_state(el)
        state_final = elements_to_state(state_to_elements(state, 2.0))
        assert np.allclose(state_final.as_array(), state.as_array(), rtol=RTOL, atol=1e-12)


class TestDegenerateStates:
    """States that do not define an orbit raise instead of producing NaN."""

    def test_radial_velocity(self):
        """r parallel to v -> DegenerateOrbit."""
        state = CartesianState([1, 2, 3], [2, 4, 6])
        with pytest.raises(DegenerateOrbit):
            state_to_elements(state, mu=1)

    def test_zero_velocity(self):
        """v = 0 -> DegenerateOrbit."""
        state = CartesianState([1, 0, 0], [0, 0, 0])
        with pytest.raises(DegenerateOrbit):
            state_to_elements(state, mu=1)

    def test_body_at_origin(self):
        """r = 0 -> DegenerateOrbit."""
        state = CartesianState([0, 0, 0], [0, 1, 0])
        with pytest.raises(DegenerateOrbit):
            state_to_elements(state, mu=1)

    def test_degenerate_is_value_error(self):
        """Callers catching ValueError also catch DegenerateOrbit."""
        with pytest.raises(ValueError):
            state_to_elements(CartesianState([1, 0, 0], [3, 0, 0]), mu=1)

    def test_unbound_state(self):
        """Above escape speed -> InvalidElements (only ellipses are supported)."""
        state = CartesianState([1, 0, 0], [0, 2, 0])
        with pytest.raises(InvalidElements, match="not bound"):
            state_to_elements(state, mu=1)

    @pytest.mark.parametrize("mu", [0.0, -1.0])
    def test_nonpositive_mu(self, mu):
        """A state cannot be converted without a positive mu."""
        state = CartesianState([1, 0, 0], [0, 1, 0])
        with pytest.raises(InvalidElements):
            state_to_elements(state, mu=mu)


class TestClamping:
    """acos arguments that overshoot [-1, 1] by rounding must not produce NaN."""

    def test_periapsis_on_node_at_periapsis(self):
        """w=0 and f=0 put both acos arguments at 1 +/- rounding."""
        el = OrbitalElements(a=1, e=0.5, i=30, Omega=40, w=0, f=0, mu=1)
        back = state_to_elements(elements_to_state(el), mu=1)

        assert np.all(np.isfinite(back.elements))
        assert abs(angle_diff(back.w_deg, 0.0)) < 1e-5
        assert abs(angle_diff(back.f_deg, 0.0)) < 1e-5

    def test_apoapsis(self):
        """f=180 puts the true anomaly argument at -1 +/- rounding."""
        el = OrbitalElements(a=1, e=0.5, i=30, Omega=40, w=60, f=180, mu=1)
        back = state_to_elements(elements_to_state(el), mu=1)

        assert np.all(np.isfinite(back.elements))
        assert abs(angle_diff(back.f_deg, 180.0)) < 1e-5

    def test_equatorial_within_precision(self):
        """i below PRECISION is treated as equatorial."""
        with temp_config(PRECISION=1e-6):
            el = OrbitalElements(a=1, e=0.3, i=1e-6, Omega=50, w=10, f=30, mu=1)
            back = state_to_elements(elements_to_state(el), mu=1)
        assert back.Omega == 0.0


class TestValidation:
    """elements_to_state always validates its input."""

    @pytest.mark.parametrize("kwargs", [
        dict(a=-1, e=0.1, i=10, mu=1),
        dict(a=1, e=1.0, i=10, mu=1),
        dict(a=1, e=-0.1, i=10, mu=1),
        dict(a=1, e=0.1, i=181, mu=1),
        dict(a=1, e=0.1, i=-1, mu=1),
        dict(a=1, e=0.1, i=10, mu=-1),
    ])
    def test_invalid_elements_raise(self, kwargs):
        """Unvalidated bad elements are still rejected by the converter."""
        el = OrbitalElements(Omega=0, w=0, f=0, validate=False, **kwargs)
        with pytest.raises(InvalidElements):
            elements_to_state(el)

    def test_invalid_raises_even_when_lenient(self):
        """STRICT_VALIDATION only affects construction, not conversion."""
        with temp_config(STRICT_VALIDATION=False):
            with pytest.warns(UserWarning):
                el = OrbitalElements(a=1, e=1.5, i=10, Omega=0, w=0, f=0)
            with pytest.raises(InvalidElements):
                elements_to_state(el)


# =============================================================================
# Test Planar Sampling
# =============================================================================

class TestTrigTables:
    """Process-wide cosine/sine tables."""

    def test_table_shape(self):
        assert COS_TABLE.shape == (360,)
        assert SIN_TABLE.shape == (360,)

    def test_tables_are_read_only(self):
        with pytest.raises(ValueError):
            COS_TABLE[0] = 2.0

    def test_table_values(self):
        assert COS_TABLE[0] == 1.0
        assert SIN_TABLE[0] == 0.0
        assert np.isclose(COS_TABLE[60], 0.5)
        assert np.isclose(SIN_TABLE[270], -1.0)


class TestPositionInPlane:
    """Planar position ignoring i, Omega and w."""

    def test_periapsis_and_apoapsis(self):
        el = OrbitalElements(a=2, e=0.5, i=50, Omega=10, w=20, f=0, mu=1)
        assert np.allclose(position_in_plane(el, 0), [1.0, 0, 0])
        assert np.allclose(position_in_plane(el, 180), [-3.0, 0, 0], atol=1e-12)

    def test_ignores_orientation(self):
        """Changing i, Omega, w does not move the planar point."""
        el1 = OrbitalElements(a=2, e=0.3, i=0, Omega=0, w=0, f=75, mu=1)
        el2 = OrbitalElements(a=2, e=0.3, i=100, Omega=200, w=300, f=75, mu=1)
        assert np.array_equal(position_in_plane(el1), position_in_plane(el2))

    def test_defaults_to_own_true_anomaly(self):
        el = OrbitalElements(a=1, e=0.1, i=0, Omega=0, w=0, f=33.3, mu=1)
        assert np.allclose(position_in_plane(el), position_in_plane(el, 33.3))

    def test_fractional_degree_full_precision(self):
        """Non-integral anomalies are evaluated directly, not truncated."""
        el = OrbitalElements(a=1, e=0.2, i=0, Omega=0, w=0, f=0, mu=1)
        f = np.radians(45.5)
        radius = 0.96 / (1 + 0.2 * np.cos(f))
        expected = [radius * np.cos(f), radius * np.sin(f), 0]
        assert np.allclose(position_in_plane(el, 45.5), expected, rtol=1e-14)
        assert not np.allclose(position_in_plane(el, 45.5), position_in_plane(el, 45))

    def test_wraps_anomaly(self):
        el = OrbitalElements(a=1, e=0.2, i=0, Omega=0, w=0, f=0, mu=1)
        assert np.array_equal(position_in_plane(el, 400), position_in_plane(el, 40))

    def test_custom_tables(self):
        """Caller-supplied tables are used for whole degrees."""
        el = OrbitalElements(a=1, e=0.0, i=0, Omega=0, w=0, f=0, mu=1)
        cos_t = np.zeros(360)
        sin_t = np.ones(360)
        assert np.allclose(position_in_plane(el, 10, cos_t, sin_t), [0, 1, 0])

    def test_rejects_invalid_elements(self):
        el = OrbitalElements(a=1, e=2.0, i=0, Omega=0, w=0, f=0, validate=False)
        with pytest.raises(InvalidElements):
            position_in_plane(el)


class TestSampleRing:
    """360-point orbit outline."""

    def test_unit_circle(self):
        """a=1, e=0: every point at radius 1, index 0 at (1,0,0), 90 at (0,1,0)."""
        el = OrbitalElements(a=1, e=0, i=0, Omega=0, w=0, f=0, mu=1)
        ring = sample_ring(el)

        assert ring.shape == (360, 3)
        assert np.allclose(np.linalg.norm(ring, axis=1), 1.0, rtol=1e-15)
        assert np.allclose(ring[0], [1, 0, 0], atol=1e-15)
        assert np.allclose(ring[90], [0, 1, 0], atol=1e-15)
        assert np.all(ring[:, 2] == 0)

    def test_ellipse_extremes(self):
        el = OrbitalElements(a=1, e=0.5, i=0, Omega=0, w=0, f=0, mu=1)
        ring = sample_ring(el)
        radii = np.linalg.norm(ring, axis=1)
        assert np.argmin(radii) == 0
        assert np.argmax(radii) == 180
        assert np.isclose(radii[0], 0.5)
        assert np.isclose(radii[180], 1.5)

    def test_rows_match_position_in_plane(self):
        el = OrbitalElements(a=4, e=0.7, i=10, Omega=20, w=30, f=40, mu=1)
        ring = sample_ring(el)
        for deg in (0, 45, 90, 179, 270, 359):
            assert np.allclose(ring[deg], position_in_plane(el, deg), rtol=1e-15, atol=1e-15)


class TestOrientToInertial:
    """Rotation of planar points by Omega, i and w."""

    def test_planar_position_matches_state(self):
        """Rotated planar position equals elements_to_state position."""
        el = OrbitalElements(a=2, e=0.3, i=40, Omega=70, w=110, f=25, mu=1.5)
        rotated = orient_to_inertial(position_in_plane(el), el)
        assert np.allclose(rotated, elements_to_state(el).position, rtol=RTOL, atol=ATOL)

    def test_ring_lies_in_orbit_plane(self):
        """Every rotated ring point is perpendicular to the angular momentum."""
        el = OrbitalElements(a=2, e=0.3, i=40, Omega=70, w=110, f=25, mu=1.5)
        r, v = elements_to_state(el)
        hhat = np.cross(r, v) / np.linalg.norm(np.cross(r, v))
        ring = orient_to_inertial(sample_ring(el), el)
        assert ring.shape == (360, 3)
        assert np.allclose(ring @ hhat, 0, atol=1e-12)

    def test_identity_orientation(self):
        el = OrbitalElements(a=1, e=0.1, i=0, Omega=0, w=0, f=0, mu=1)
        ring = sample_ring(el)
        assert np.allclose(orient_to_inertial(ring, el), ring)

    def test_bad_shape(self):
        el = OrbitalElements(a=1, e=0.1, i=0, Omega=0, w=0, f=0, mu=1)
        with pytest.raises(ValueError):
            orient_to_inertial(np.zeros((4, 2)), el)
