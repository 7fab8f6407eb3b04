"""
swiftmfv: particle field I/O for the GIZMO meshless finite-volume
hydrodynamics scheme.

Describes which particle quantities are read from initial conditions and
written to snapshots, converts the internal particle state (comoving,
half-step velocities, conserved variables) into output quantities, and
derives the scheme's numerical properties from the run-time parameters.
"""

from pathlib import Path

from .__version__ import __version__
from .errors import MissingParameterError, FieldNotFoundError
from .parameters import SWIFTParameters
from .kernels import Kernel
from .scheme import SchemeConfig
from .hydro_properties import HydroProperties, derive_kernel_properties
from .cosmology import Cosmology
from .engine import SimulationContext
from .particles import allocate_particles, allocate_gparts, link_gparts
from .fields import (
    FieldDescriptor,
    OffsetField,
    ConvertedField,
    hydro_read_particles,
    hydro_write_particles,
)
from .flavour import hydro_flavour, hydro_write_flavour, write_entropy_flag
from .snapshot import MFVSnapshot, read_snapshot, write_snapshot

import swiftmfv.converters as converters
import swiftmfv.metadata as metadata
import swiftmfv.timeline as timeline
import swiftmfv.units as units

name = "swiftmfv"


def load_parameters(filename: str | Path) -> SWIFTParameters:
    """
    Load the run-time parameters stored in a snapshot.

    Parameters
    ----------
    filename : str or Path
        Snapshot to read from.

    Returns
    -------
    SWIFTParameters
        The parameters of the run that wrote the snapshot.

    Raises
    ------
    KeyError
        If the snapshot does not store its parameters.
    """
    import h5py

    with h5py.File(filename, "r") as handle:
        if "Parameters" not in handle:
            raise KeyError(f"{filename} does not contain a Parameters group.")

        return SWIFTParameters.from_hdf5(handle)
