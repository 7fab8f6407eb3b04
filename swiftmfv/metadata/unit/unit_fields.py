"""
Define the unit-conversion tags attached to particle fields.

Each tag names a physical kind of quantity and maps it onto exponents of
the five base units (mass, length, time, current, temperature). The tags are
what a field descriptor carries; the dataset layer turns them into conversion
factors and ``unyt`` units when reading or writing.
"""

from unyt import g, cm, s, A, K, Unit, dimensionless

unit_conversions = {
    "no_units": {},
    "mass": {"mass": 1},
    "length": {"length": 1},
    "time": {"time": 1},
    "speed": {"length": 1, "time": -1},
    "acceleration": {"length": 1, "time": -2},
    "energy_per_unit_mass": {"length": 2, "time": -2},
    "density": {"mass": 1, "length": -3},
    "pressure": {"mass": 1, "length": -1, "time": -2},
    "energy": {"mass": 1, "length": 2, "time": -2},
    "potential": {"length": 2, "time": -2},
    "temperature": {"temperature": 1},
}

# The entropic function P / rho^gamma has gamma-dependent dimensions.
gamma_dependent_conversions = ("entropy",)


def get_unit_exponents(unit_tag: str, gamma: float = 5.0 / 3.0) -> dict[str, float]:
    """
    Get the base-unit exponents for a unit-conversion tag.

    Parameters
    ----------
    unit_tag : str
        The tag, e.g. ``"speed"``.

    gamma : float, optional
        Adiabatic index, only used by gamma-dependent tags.

    Returns
    -------
    dict[str, float]
        Exponent of each base dimension that appears in the tag.

    Raises
    ------
    KeyError
        If the tag is not known.
    """
    if unit_tag == "entropy":
        return {"mass": 1.0 - gamma, "length": 3.0 * gamma - 1.0, "time": -2.0}

    try:
        return dict(unit_conversions[unit_tag])
    except KeyError:
        raise KeyError(f"Unknown unit conversion tag {unit_tag}.")


def generate_units(
    mass: Unit,
    length: Unit,
    time: Unit,
    current: Unit,
    temperature: Unit,
    gamma: float = 5.0 / 3.0,
) -> dict[str, Unit]:
    """
    Generate the unit for every unit-conversion tag.

    Parameters
    ----------
    mass : Unit
        The mass unit.

    length : Unit
        The length unit.

    time : Unit
        The time unit.

    current : Unit
        The current unit.

    temperature : Unit
        The temperature unit.

    gamma : float, optional
        Adiabatic index used for the entropy tag.

    Returns
    -------
    dict[str, Unit]
        Dictionary mapping each tag to its unit.
    """
    base = {
        "mass": mass,
        "length": length,
        "time": time,
        "current": current,
        "temperature": temperature,
    }

    units = {}

    for unit_tag in [*unit_conversions.keys(), *gamma_dependent_conversions]:
        unit = dimensionless

        for dimension, exponent in get_unit_exponents(unit_tag, gamma).items():
            unit = unit * base[dimension] ** exponent

        units[unit_tag] = unit

    return units


def generate_dimensions(gamma: float = 5.0 / 3.0) -> dict:
    """
    Get the dimensions for the above.

    Parameters
    ----------
    gamma : float, optional
        Adiabatic index used for the entropy tag.

    Returns
    -------
    dict
        Dictionary specifying dimensions for each tag.
    """
    units = generate_units(g, cm, s, A, K, gamma=gamma)

    dimensions = {}

    for unit_tag, unit in units.items():
        try:
            dimensions[unit_tag] = unit.dimensions
        except AttributeError:
            # Units that have "none" dimensions
            dimensions[unit_tag] = 1

    return dimensions
