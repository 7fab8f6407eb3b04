"""Test fixtures."""

import pytest
import h5py
import numpy as np
from collections.abc import Generator

from swiftmfv import (
    SWIFTParameters,
    SchemeConfig,
    SimulationContext,
    HydroProperties,
    Cosmology,
    allocate_particles,
)

from .helper import create_in_memory_hdf5

n_test_part = 4


@pytest.fixture
def parameters() -> SWIFTParameters:
    """
    Fixture provides a parameter file with the SPH and time sections.

    Returns
    -------
    SWIFTParameters
        The parameters.
    """
    return SWIFTParameters(
        {
            "SPH": {
                "resolution_eta": 1.2348,
                "delta_neighbours": 0.1,
                "CFL_condition": 0.1,
            },
            "TimeIntegration": {"time_begin": 0.0, "time_end": 1.0},
            "Cosmology": {
                "h": 0.6777,
                "a_begin": 0.0078125,
                "a_end": 1.0,
                "Omega_cdm": 0.2587481,
                "Omega_lambda": 0.693,
                "Omega_b": 0.0482519,
            },
        }
    )


@pytest.fixture
def scheme() -> SchemeConfig:
    """
    Fixture provides the default scheme configuration.

    Returns
    -------
    SchemeConfig
        The scheme.
    """
    return SchemeConfig()


@pytest.fixture
def hydro_properties(parameters, scheme) -> HydroProperties:
    """
    Fixture provides hydro properties derived from the test parameters.

    Returns
    -------
    HydroProperties
        The properties.
    """
    return HydroProperties.from_parameters(parameters, scheme)


@pytest.fixture
def particles() -> tuple[np.ndarray, np.ndarray]:
    """
    Fixture provides a handful of particles with distinct, simple values.

    Returns
    -------
    tuple[np.ndarray, np.ndarray]
        The ``parts`` and ``xparts`` arrays.
    """
    parts, xparts = allocate_particles(n_test_part)

    index = np.arange(n_test_part)

    parts["id"] = index + 1
    parts["x"] = np.array(
        [[0.5, 0.5, 0.5], [-0.25, 1.5, 0.0], [2.75, -3.0, 0.999], [0.1, 0.2, 0.3]]
    )
    parts["v"] = 1.0
    parts["a_hydro"] = 0.5
    parts["h"] = 0.1
    parts["time_bin"] = 3
    parts["conserved"]["mass"] = 2.0
    parts["conserved"]["momentum"] = [[3.0, 4.0, 0.0]] * n_test_part
    parts["conserved"]["energy"] = index + 10.0
    parts["primitives"]["rho"] = 1.0
    parts["primitives"]["P"] = 2.0 / 3.0

    xparts["v_full"] = [[1.0, 2.0, 3.0]] * n_test_part

    return parts, xparts


@pytest.fixture
def context(scheme) -> SimulationContext:
    """
    Fixture provides a periodic, non-cosmological context in a unit box.

    Returns
    -------
    SimulationContext
        The context.
    """
    return SimulationContext(
        ti_current=40, time_base=0.01, scheme=scheme, periodic=True, dim=[1.0] * 3
    )


@pytest.fixture
def cosmology(parameters) -> Cosmology:
    """
    Fixture provides a Planck-like cosmology.

    Returns
    -------
    Cosmology
        The cosmology at the start of the run.
    """
    return Cosmology.from_parameters(parameters)


@pytest.fixture
def in_memory_file() -> Generator[h5py.File, None, None]:
    """
    Fixture provides an in-memory hdf5 file object.

    Yields
    ------
    out : Generator[h5py.File, None, None]
        The open file, discarded after the test.
    """
    handle = create_in_memory_hdf5("in_memory.hdf5")

    yield handle

    handle.close()
