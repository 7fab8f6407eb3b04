"""
The ``Units`` group of a snapshot.

Every base unit is stored as a length 1 array holding its size in the cgs
unit of the same dimension, under the attribute names below.
"""

import unyt
from numpy import log

# Dimension: (attribute name, cgs unit the stored value is expressed in)
unit_attributes = {
    "mass": ("Unit mass in cgs (U_M)", unyt.g),
    "length": ("Unit length in cgs (U_L)", unyt.cm),
    "time": ("Unit time in cgs (U_t)", unyt.s),
    "current": ("Unit current in cgs (U_I)", unyt.A),
    "temperature": ("Unit temperature in cgs (U_T)", unyt.K),
}

# Units that initial conditions and snapshots are commonly expressed in,
# cgs first.
named_base_units = {
    "mass": [unyt.g, unyt.Solar_Mass],
    "length": [unyt.cm, unyt.kpc, unyt.Mpc],
    "time": [unyt.s, unyt.Myr, unyt.Gyr],
    "current": [unyt.A],
    "temperature": [unyt.K],
}


def dimension_of_attribute(name: str) -> str:
    """
    Find the dimension stored under a ``Units`` attribute.

    Parameters
    ----------
    name : str
        Attribute name, e.g. ``"Unit length in cgs (U_L)"``.

    Returns
    -------
    str
        The dimension, e.g. ``"length"``.

    Raises
    ------
    KeyError
        If the attribute is not one of ``unit_attributes``.
    """
    for dimension, (attribute, _) in unit_attributes.items():
        if attribute == name:
            return dimension

    raise KeyError(f"Unknown unit attribute {name}.")


def base_unit_from_cgs(
    value: float, dimension: str
) -> unyt.Unit | unyt.unyt_quantity:
    """
    Express a stored base unit in the closest of ``named_base_units``.

    Stored values are only trusted to 5 significant figures, which is what
    parameter files usually give.

    Parameters
    ----------
    value : float
        Size of the base unit in cgs.

    dimension : str
        One of the keys of ``unit_attributes``.

    Returns
    -------
    unyt.Unit or unyt.unyt_quantity
        The named unit itself when the stored value matches it, otherwise a
        multiple of it, e.g. ``1e10 Msun``.
    """
    quantity = unyt.unyt_quantity(value, unit_attributes[dimension][1])

    closest = min(
        named_base_units[dimension],
        key=lambda unit: abs(log(float(quantity.to(unit).value))),
    )
    multiple = float(f"{float(quantity.to(closest).value):.5g}")

    if multiple == 1.0:
        return closest

    return unyt.unyt_quantity(multiple, closest)
