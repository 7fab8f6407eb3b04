"""
Contains unit systems that may be useful to astronomers. In particular,
it contains the cosmo_units which can be considered Gadget-oid default units,
with.

+ Unit length = Mpc
+ Unit velocity = km/s
+ Unit mass = 10^10 Msun
+ Unit temperature = K

Also contains the conversion between the unit systems of two files, used
when reading initial conditions written in units other than the internal
ones.
"""

import unyt

from swiftmfv.metadata.unit.unit_fields import get_unit_exponents
from swiftmfv.metadata.unit.unit_types import unit_attributes

try:
    # Need to do this first otherwise the `unyt` system freaks out about
    # us upgrading msun from a symbol
    cosmo_units = unyt.UnitSystem(
        "cosmological",
        unyt.Mpc,
        unyt.unyt_quantity(1e10, units=unyt.Solar_Mass),
        unyt.unyt_quantity(1.0, units=unyt.s * unyt.Mpc / unyt.km).to(unyt.Gyr),
    )
except RuntimeError:
    # We've already done that, oops.
    cosmo_units = unyt.unit_systems.cosmological


def base_unit_in_cgs(unit_system: unyt.UnitSystem, dimension: str) -> float:
    """
    Get the size of one base unit of ``unit_system`` in cgs.

    Parameters
    ----------
    unit_system : unyt.UnitSystem
        The unit system to inspect.

    dimension : str
        One of ``mass``, ``length``, ``time``, ``current`` or ``temperature``.

    Returns
    -------
    float
        The conversion factor to the corresponding cgs base unit. Systems
        without a base unit for ``dimension`` (e.g. no current in cgs) give 1.
    """
    if dimension == "current":
        dim = unyt.dimensions.current_mks
    else:
        dim = getattr(unyt.dimensions, dimension)

    our_unit = unit_system.base_units.get(dim)
    if our_unit is None:
        return 1.0

    cgs_unit = unit_attributes[dimension][1]

    return float(unyt.unit_object.Unit(our_unit).get_conversion_factor(cgs_unit)[0])


def units_conversion_factor(
    from_units: unyt.UnitSystem,
    to_units: unyt.UnitSystem,
    unit_tag: str,
    gamma: float = 5.0 / 3.0,
) -> float:
    """
    Factor converting a quantity tagged ``unit_tag`` between unit systems.

    Parameters
    ----------
    from_units : unyt.UnitSystem
        The unit system the quantity is expressed in.

    to_units : unyt.UnitSystem
        The unit system we want the quantity expressed in.

    unit_tag : str
        A unit-conversion tag, e.g. ``"speed"``.

    gamma : float, optional
        Adiabatic index, only used by gamma-dependent tags.

    Returns
    -------
    float
        Multiply values in ``from_units`` by this to get ``to_units``.
    """
    factor = 1.0

    for dimension, exponent in get_unit_exponents(unit_tag, gamma).items():
        if exponent != 0:
            factor *= (
                base_unit_in_cgs(from_units, dimension)
                / base_unit_in_cgs(to_units, dimension)
            ) ** exponent

    return factor
