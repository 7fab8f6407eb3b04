"""
Contains helper functions for the test routines.
"""

import h5py
import numpy as np
import unyt

from swiftmfv.fields import hydro_read_particles
from swiftmfv.snapshot import write_units


def create_in_memory_hdf5(filename="f1"):
    """
    Creates an in-memory hdf5 file object.
    """

    return h5py.File(filename, driver="core", mode="a", backing_store=False)


def write_initial_conditions(
    handle: h5py.File,
    parts: np.ndarray,
    xparts: np.ndarray,
    skip: tuple[str, ...] = (),
    unit_system: unyt.UnitSystem | None = None,
) -> h5py.Group:
    """
    Write the readable fields of ``parts`` into a ``PartType0`` group.

    Parameters
    ----------
    handle : h5py.File
        File to write to.

    parts : np.ndarray
        Particles providing the data.

    xparts : np.ndarray
        Their extended state.

    skip : tuple[str, ...], optional
        Names of the fields to leave out.

    unit_system : unyt.UnitSystem, optional
        If given, a ``Units`` group is written too.

    Returns
    -------
    h5py.Group
        The particle group.
    """
    group = handle.create_group("PartType0")

    for field in hydro_read_particles():
        if field.name in skip:
            continue

        group.create_dataset(field.name, data=field.extract(None, parts, xparts))

    if unit_system is not None:
        write_units(handle, unit_system)

    return group
