"""
Descriptive metadata about the hydrodynamics scheme.

The attributes written here end up in the ``HydroScheme`` group of every
snapshot so that readers can tell how the data was produced.
"""

import h5py

from swiftmfv.scheme import (
    SchemeConfig,
    gradient_implementations,
    cell_slope_limiter_implementations,
    face_slope_limiter_implementations,
    riemann_solver_implementations,
    particle_movement_descriptions,
)


def hydro_flavour(scheme: SchemeConfig) -> dict[str, str]:
    """
    Describe the active scheme as a set of named strings.

    Parameters
    ----------
    scheme : SchemeConfig
        The scheme in use.

    Returns
    -------
    dict[str, str]
        Attribute name to description, in the order they are written.
    """
    return {
        "Gradient reconstruction model": gradient_implementations[scheme.gradients],
        "Cell wide slope limiter model": cell_slope_limiter_implementations[
            scheme.cell_slope_limiter
        ],
        "Piecewise slope limiter model": face_slope_limiter_implementations[
            scheme.face_slope_limiter
        ],
        "Riemann solver type": riemann_solver_implementations[scheme.riemann_solver],
        "Particle movement": particle_movement_descriptions[scheme.fix_particles],
    }


def hydro_write_flavour(group: h5py.Group, scheme: SchemeConfig) -> None:
    """
    Write the scheme description into ``group`` as string attributes.

    Parameters
    ----------
    group : h5py.Group
        Group to attach the attributes to, usually ``HydroScheme``.

    scheme : SchemeConfig
        The scheme in use.
    """
    for name, value in hydro_flavour(scheme).items():
        group.attrs.create(name, value.encode("utf-8"))

    return


def write_entropy_flag() -> bool:
    """
    Whether the ``InternalEnergy`` field holds an entropy instead.

    Never the case for this scheme, which always writes the internal energy.
    """
    return False
