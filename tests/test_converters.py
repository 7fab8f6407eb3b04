"""Tests the conversion of particle state into output quantities."""

import pytest
import numpy as np

from swiftmfv import (
    SchemeConfig,
    SimulationContext,
    allocate_gparts,
    allocate_particles,
    link_gparts,
)
from swiftmfv.converters import (
    box_wrap,
    kick_factors,
    convert_u,
    convert_A,
    convert_Etot,
    convert_part_pos,
    convert_part_vel,
    convert_part_potential,
)
from swiftmfv.fields import hydro_write_particles


@pytest.mark.parametrize(
    "x", [-3.0, -1.0, -0.25, -1e-12, 0.0, 0.3, 0.999999, 1.0, 1.5, 2.75, 1e6 + 0.5]
)
def test_box_wrap_range(x):
    """Wrapped coordinates always land inside the box."""
    wrapped = box_wrap(x, 1.0)

    assert 0.0 <= wrapped < 1.0
    assert box_wrap(wrapped, 1.0) == wrapped


def test_box_wrap_values():
    """Wrapping shifts by whole box lengths only."""
    dim = np.array([1.0, 2.0, 4.0])
    x = np.array([[-0.25, 2.5, 4.0], [0.5, 1.0, -8.5]])

    assert np.allclose(box_wrap(x, dim), [[0.75, 0.5, 0.0], [0.5, 1.0, 3.5]])


def test_position_periodic(context, particles):
    """Periodic positions are wrapped, the particles are not touched."""
    parts, xparts = particles
    before = parts.copy()

    positions = convert_part_pos(context, parts, xparts)

    assert np.allclose(
        positions,
        [[0.5, 0.5, 0.5], [0.75, 0.5, 0.0], [0.75, 0.0, 0.999], [0.1, 0.2, 0.3]],
    )
    assert np.all((positions >= 0.0) & (positions < 1.0))
    assert np.array_equal(parts, before)


def test_position_not_periodic(particles):
    """Without periodicity the stored position is returned as is."""
    parts, xparts = particles
    context = SimulationContext(ti_current=0, time_base=1.0)

    assert np.array_equal(convert_part_pos(context, parts, xparts), parts["x"])


def test_periodic_needs_dimensions():
    with pytest.raises(AttributeError):
        SimulationContext(ti_current=0, time_base=1.0, periodic=True)


def test_internal_energy_and_entropy(context, particles):
    """P = 2/3, rho = 1 and gamma = 5/3 give u = 1 and A = 2/3."""
    parts, xparts = particles

    assert np.allclose(convert_u(context, parts, xparts), 1.0)
    assert np.allclose(convert_A(context, parts, xparts), 2.0 / 3.0)


def test_empty_particles_have_no_energy(context):
    """Zero density gives zero internal energy and entropy, never NaN."""
    parts, xparts = allocate_particles(2)
    parts["primitives"]["P"] = 1.0

    assert np.array_equal(convert_u(context, parts, xparts), [0.0, 0.0])
    assert np.array_equal(convert_A(context, parts, xparts), [0.0, 0.0])


def test_total_energy_adds_kinetic_energy(context):
    """|p|^2 / 2m = 25 / 10 is added to the stored energy."""
    parts, xparts = allocate_particles(1)
    parts["conserved"]["mass"] = 5.0
    parts["conserved"]["momentum"] = [3.0, 4.0, 0.0]
    parts["conserved"]["energy"] = 7.0

    assert convert_Etot(context, parts, xparts) == pytest.approx([9.5])


def test_total_energy_evolved_directly(particles):
    """When the scheme evolves the total energy it is written unchanged."""
    parts, xparts = particles
    context = SimulationContext(
        ti_current=0, time_base=1.0, scheme=SchemeConfig(total_energy=True)
    )

    assert np.allclose(
        convert_Etot(context, parts, xparts), parts["conserved"]["energy"]
    )


def test_kick_factors_without_cosmology():
    """Bin [100, 200] seen from 250 is kicked from 150: 100 ticks of 0.01."""
    context = SimulationContext(ti_current=250, time_base=0.01)

    dt_kick_grav, dt_kick_hydro = kick_factors(context, 100, 200)

    assert dt_kick_grav == pytest.approx(1.0)
    assert dt_kick_hydro == pytest.approx(1.0)


def test_velocity_at_mid_step(context, particles):
    """At the middle of the step the velocity is the last kicked one."""
    parts, xparts = particles

    # Bin 3 at ti_current = 40 spans [32, 48]
    assert np.allclose(convert_part_vel(context, parts, xparts), xparts["v_full"])


def test_velocity_drifted(particles):
    """Away from the middle of the step the hydro acceleration is applied."""
    parts, xparts = particles
    context = SimulationContext(ti_current=44, time_base=0.01)

    # Bin 3 at ti_current = 44 spans [32, 48], midpoint 40
    expected = xparts["v_full"] + 0.5 * 0.04

    assert np.allclose(convert_part_vel(context, parts, xparts), expected)


def test_velocity_with_gravity(particles):
    """Coupled particles also get the gravitational acceleration."""
    parts, xparts = particles
    gparts = allocate_gparts(parts.shape[0])
    link_gparts(parts, gparts)
    gparts["a_grav"] = [0.0, 0.0, -10.0]
    parts["gpart"][0] = -1

    context = SimulationContext(ti_current=44, time_base=0.01, gparts=gparts)
    velocities = convert_part_vel(context, parts, xparts)

    assert np.allclose(velocities[0], xparts["v_full"][0] + 0.02)
    assert np.allclose(
        velocities[1:, 2], xparts["v_full"][1:, 2] + 0.02 - 10.0 * 0.04
    )


def test_velocity_cosmological_scaling(particles, cosmology):
    """Cosmological velocities are converted with a^-2."""
    parts, xparts = particles
    parts["a_hydro"] = 0.0

    ti_current = 1 << 50
    context = SimulationContext(
        ti_current=ti_current, time_base=cosmology.time_base, cosmology=cosmology
    )

    assert context.a == pytest.approx(cosmology.scale_factor(ti_current))
    assert np.allclose(
        convert_part_vel(context, parts, xparts),
        xparts["v_full"] * context.a2_inv,
        rtol=1e-6,
    )


def test_potential_without_gravity(context, particles):
    """Particles without a gravity counterpart have zero potential."""
    parts, xparts = particles

    assert np.array_equal(convert_part_potential(context, parts, xparts), [0.0] * 4)

    gparts = allocate_gparts(4)
    gparts["potential"] = -3.0
    context = SimulationContext(ti_current=0, time_base=1.0, gparts=gparts)

    assert np.array_equal(convert_part_potential(context, parts, xparts), [0.0] * 4)


def test_potential_with_gravity(particles):
    """Coupled particles report the potential of their gravity particle."""
    parts, xparts = particles
    gparts = allocate_gparts(6)
    link_gparts(parts, gparts)
    gparts["potential"] = -np.arange(6)
    parts["gpart"][3] = -1

    context = SimulationContext(ti_current=0, time_base=1.0, gparts=gparts)

    assert np.array_equal(
        convert_part_potential(context, parts, xparts), [0.0, -1.0, -2.0, 0.0]
    )


def test_single_record_matches_array(context, particles):
    """Converting one particle gives the same row as converting them all."""
    parts, xparts = particles

    for field in hydro_write_particles():
        everything = field.extract(context, parts, xparts)

        for index in range(parts.shape[0]):
            single = field.extract(
                context, parts[index : index + 1], xparts[index : index + 1]
            )
            assert np.array_equal(single[0], everything[index])

            if hasattr(field, "convert_single"):
                assert np.array_equal(
                    field.convert_single(context, parts[index], xparts[index]),
                    np.atleast_1d(everything[index]),
                )


def test_massless_particle_total_energy(context):
    """Particles without mass carry no kinetic energy."""
    parts, xparts = allocate_particles(1)
    parts["conserved"]["momentum"] = [1.0, 0.0, 0.0]
    parts["conserved"]["energy"] = 3.0

    assert np.array_equal(convert_Etot(context, parts, xparts), [3.0])


def test_kick_factors_with_cosmology(cosmology):
    """Cosmological kicks integrate the expansion from the step midpoint."""
    ti_begin = 1 << 40
    ti_end = ti_begin + (1 << 30)
    ti_current = ti_begin + (1 << 29) + (1 << 27)
    ti_mid = (ti_begin + ti_end) // 2

    context = SimulationContext(
        ti_current=ti_current, time_base=cosmology.time_base, cosmology=cosmology
    )

    dt_kick_grav, dt_kick_hydro = kick_factors(context, ti_begin, ti_end)

    assert dt_kick_grav == pytest.approx(
        cosmology.get_grav_kick_factor(ti_begin, ti_current)
        - cosmology.get_grav_kick_factor(ti_begin, ti_mid)
    )
    assert dt_kick_hydro == pytest.approx(
        cosmology.get_hydro_kick_factor(ti_begin, ti_current)
        - cosmology.get_hydro_kick_factor(ti_begin, ti_mid)
    )
    assert dt_kick_grav > 0.0
    assert dt_kick_hydro > 0.0
    assert dt_kick_grav != pytest.approx(dt_kick_hydro)


def test_velocity_drifted_with_cosmology(particles, cosmology):
    """Both accelerations are applied with their own kick factor, then a^-2."""
    parts, xparts = particles
    parts["time_bin"] = 50
    xparts["v_full"] = 0.0
    gparts = allocate_gparts(parts.shape[0])
    link_gparts(parts, gparts)
    gparts["a_grav"] = [0.0, -4.0, 2.0]

    # Bin 50 spans 2^51 ticks; a quarter of the step past its midpoint
    dti = 1 << 51
    ti_begin = 0
    ti_current = ti_begin + dti // 2 + dti // 4

    context = SimulationContext(
        ti_current=ti_current,
        time_base=cosmology.time_base,
        cosmology=cosmology,
        gparts=gparts,
    )
    dt_kick_grav, dt_kick_hydro = kick_factors(context, ti_begin, ti_begin + dti)

    expected = (
        xparts["v_full"]
        + parts["a_hydro"] * dt_kick_hydro
        + gparts["a_grav"] * dt_kick_grav
    ) * context.a2_inv

    velocities = convert_part_vel(context, parts, xparts)

    assert dt_kick_hydro > 0.0
    assert np.allclose(velocities, expected, rtol=1e-5)
    assert not np.allclose(
        velocities, parts["a_hydro"] * dt_kick_hydro * context.a2_inv, rtol=1e-5
    )
