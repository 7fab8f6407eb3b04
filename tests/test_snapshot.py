"""Tests reading and writing particle fields to hdf5."""

import pytest
import h5py
import numpy as np
import unyt

from swiftmfv import (
    FieldNotFoundError,
    MFVSnapshot,
    hydro_read_particles,
    hydro_write_particles,
    allocate_particles,
    load_parameters,
    read_snapshot,
    write_snapshot,
)
from swiftmfv.snapshot import read_fields, write_fields, read_units, write_units
from swiftmfv.metadata.unit import generate_dimensions
from swiftmfv.parameters import decode
from swiftmfv.units import cosmo_units

from .helper import write_initial_conditions


def test_read_all_fields(particles, in_memory_file):
    parts, xparts = particles
    group = write_initial_conditions(in_memory_file, parts, xparts)

    new_parts, new_xparts = allocate_particles(parts.shape[0])
    read = read_fields(group, hydro_read_particles(), new_parts, new_xparts)

    assert read == [field.name for field in hydro_read_particles()]
    assert np.array_equal(new_parts["x"], parts["x"])
    assert np.array_equal(new_parts["id"], parts["id"])
    assert np.array_equal(new_parts["a_hydro"], parts["a_hydro"])
    assert np.array_equal(new_parts["primitives"]["rho"], parts["primitives"]["rho"])


def test_missing_optional_field_is_skipped(particles, in_memory_file):
    """Without Accelerations in the file the particles keep theirs."""
    parts, xparts = particles
    group = write_initial_conditions(
        in_memory_file, parts, xparts, skip=("Accelerations",)
    )

    new_parts, new_xparts = allocate_particles(parts.shape[0])
    new_parts["a_hydro"] = 7.0

    read = read_fields(group, hydro_read_particles(), new_parts, new_xparts)

    assert "Accelerations" not in read
    assert np.all(new_parts["a_hydro"] == 7.0)
    assert np.array_equal(new_parts["conserved"]["mass"], parts["conserved"]["mass"])


def test_missing_compulsory_field(particles, in_memory_file):
    parts, xparts = particles
    group = write_initial_conditions(in_memory_file, parts, xparts, skip=("Masses",))

    with pytest.raises(FieldNotFoundError, match="Masses"):
        read_fields(group, hydro_read_particles(), *allocate_particles(4))


def test_wrong_number_of_particles(particles, in_memory_file):
    parts, xparts = particles
    group = write_initial_conditions(in_memory_file, parts, xparts)

    with pytest.raises(AttributeError):
        read_fields(group, hydro_read_particles(), *allocate_particles(3))


def test_read_with_unit_conversion(particles, in_memory_file):
    """Initial conditions in cgs are converted into the internal units."""
    parts, xparts = particles
    group = write_initial_conditions(in_memory_file, parts, xparts)

    new_parts, new_xparts = allocate_particles(parts.shape[0])
    read_fields(
        group,
        hydro_read_particles(),
        new_parts,
        new_xparts,
        ic_units=unyt.unit_systems.cgs_unit_system,
        internal_units=cosmo_units,
    )

    cm_in_mpc = float((1.0 * unyt.cm).to(unyt.Mpc).value)

    assert np.allclose(new_parts["x"], parts["x"] * cm_in_mpc)
    assert np.array_equal(new_parts["id"], parts["id"])


def test_units_round_trip(in_memory_file):
    write_units(in_memory_file, cosmo_units)
    units = read_units(in_memory_file)

    assert units["length"] == unyt.Mpc
    assert float((1.0 * units["mass"]).to(unyt.Solar_Mass).value) == pytest.approx(
        1e10, rel=1e-5
    )


def test_write_fields(context, particles, in_memory_file):
    """Every field is written with its type, shape and unit metadata."""
    parts, xparts = particles
    group = in_memory_file.create_group("PartType0")

    write_fields(group, hydro_write_particles(), context, parts, xparts)

    for field in hydro_write_particles():
        dataset = group[field.name]

        assert dataset.dtype == field.dtype
        assert dataset.shape == (parts.shape[0],) + field.shape
        assert decode(dataset.attrs["Description"]) == field.description
        assert dataset.compression is None

    assert group["Coordinates"].attrs["U_L exponent"][0] == 1.0
    assert group["Coordinates"].attrs["a-scale exponent"][0] == 1.0
    assert group["Velocities"].attrs["U_t exponent"][0] == -1.0
    assert group["Entropy"].attrs["U_M exponent"][0] == pytest.approx(-2.0 / 3.0)
    assert np.all(group["Coordinates"][...] >= 0.0)
    assert np.allclose(group["InternalEnergy"][...], 1.0)


def test_snapshot_round_trip(
    tmp_path, context, particles, hydro_properties, parameters
):
    """Write a snapshot and read the particles back."""
    parts, xparts = particles
    filename = tmp_path / "snapshot_0000.hdf5"

    write_snapshot(
        filename, context, parts, xparts, hydro_properties, parameters=parameters
    )

    snapshot = MFVSnapshot(filename)
    assert snapshot.n_gas == 4
    assert snapshot.scale_factor == 1.0
    assert snapshot.header["Flag_Entropy_ICs"][0] == 0
    assert decode(snapshot.hydro_scheme["Particle movement"]) == (
        "Particles move with flow velocity."
    )
    assert snapshot.parameters.get_param("SPH:resolution_eta") == 1.2348

    new_parts, new_xparts = read_snapshot(filename, context.scheme)

    assert np.array_equal(new_parts["id"], parts["id"])
    assert np.allclose(new_parts["x"], np.mod(parts["x"], 1.0))
    # Internal energy u = 1 becomes the particle energy m u
    assert np.allclose(new_parts["conserved"]["energy"], parts["conserved"]["mass"])
    assert np.allclose(new_parts["primitives"]["P"], parts["primitives"]["P"])
    assert np.allclose(
        new_parts["conserved"]["momentum"],
        parts["conserved"]["mass"][:, None] * new_parts["v"],
    )
    assert np.array_equal(new_xparts["v_full"], new_parts["v"])


def test_load_parameters(tmp_path, context, particles, hydro_properties, parameters):
    parts, xparts = particles
    filename = tmp_path / "snapshot_0001.hdf5"

    write_snapshot(filename, context, parts, xparts, hydro_properties)

    with pytest.raises(KeyError):
        load_parameters(filename)

    assert MFVSnapshot(filename).parameters is None


def test_external_handle_left_open(tmp_path, context, particles, hydro_properties):
    """A handle passed in is used but not closed."""
    parts, xparts = particles
    filename = tmp_path / "snapshot_0002.hdf5"
    write_snapshot(filename, context, parts, xparts, hydro_properties)

    with h5py.File(filename, "r") as handle:
        snapshot = MFVSnapshot(filename, handle=handle)
        assert not snapshot.handle_manager

        snapshot.read_particles(context.scheme)
        assert handle

    snapshot = MFVSnapshot(filename)
    assert snapshot.handle_manager

    with snapshot.open_file() as handle:
        assert handle.mode == "r"


def test_read_field_in_cgs(tmp_path, context, particles, hydro_properties):
    """Single fields come back in cgs with the units of their tag."""
    parts, xparts = particles
    filename = tmp_path / "snapshot_0003.hdf5"
    write_snapshot(filename, context, parts, xparts, hydro_properties)

    snapshot = MFVSnapshot(filename)
    dimensions = generate_dimensions(snapshot.gamma)

    masses = snapshot.read_field("Masses")
    assert masses.units.dimensions == dimensions["mass"]
    assert np.allclose(masses.to(unyt.Solar_Mass).value, 2e10, rtol=1e-5)

    entropy = snapshot.read_field("Entropy")
    assert entropy.units.dimensions == dimensions["entropy"]

    with pytest.raises(FieldNotFoundError):
        snapshot.read_field("Temperatures")


def test_unknown_unit_attribute(in_memory_file):
    write_units(in_memory_file, cosmo_units)
    in_memory_file["Units"].attrs.create("Unit luminosity in cgs (U_Lum)", [1.0])

    with pytest.warns(UserWarning, match="U_Lum"):
        units = read_units(in_memory_file)

    assert units["length"] == unyt.Mpc


def test_cgs_units_round_trip(in_memory_file):
    """Unit systems without a current unit store U_I = 1."""
    write_units(in_memory_file, unyt.unit_systems.cgs_unit_system)

    assert in_memory_file["Units"].attrs["Unit current in cgs (U_I)"][0] == 1.0
    assert in_memory_file["Units"].attrs["Unit length in cgs (U_L)"][0] == 1.0

    units = read_units(in_memory_file)

    assert units["length"] == unyt.cm
    assert units["mass"] == unyt.g
    assert units["time"] == unyt.s


def test_read_cgs_initial_conditions(tmp_path, particles):
    """Initial conditions carrying cgs units are converted on read."""
    parts, xparts = particles
    filename = tmp_path / "ics_cgs.hdf5"

    with h5py.File(filename, "w") as handle:
        write_initial_conditions(
            handle, parts, xparts, unit_system=unyt.unit_systems.cgs_unit_system
        )

    new_parts, _ = read_snapshot(filename, internal_units=cosmo_units)

    cm_in_mpc = float((1.0 * unyt.cm).to(unyt.Mpc).value)

    assert np.allclose(new_parts["x"], parts["x"] * cm_in_mpc)
    assert np.array_equal(new_parts["id"], parts["id"])


def test_write_snapshot_in_cgs(tmp_path, context, particles, hydro_properties):
    parts, xparts = particles
    filename = tmp_path / "snapshot_cgs.hdf5"

    write_snapshot(
        filename,
        context,
        parts,
        xparts,
        hydro_properties,
        unit_system=unyt.unit_systems.cgs_unit_system,
    )

    snapshot = MFVSnapshot(filename)
    assert snapshot.units["length"] == unyt.cm
    assert np.allclose(snapshot.read_field("Masses").to(unyt.g).value, 2.0)
