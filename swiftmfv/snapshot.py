"""
Reading and writing particle fields to HDF5 snapshots.

The field lists from :mod:`swiftmfv.fields` describe *what* is stored; the
functions here do the storing. Files follow the layout of SWIFT snapshots
(``Header``, ``Units``, ``HydroScheme``, ``Parameters`` and ``PartType0``
groups) so that they can be inspected with the usual tools.
"""

import unyt
import h5py
import warnings
import numpy as np

from pathlib import Path

from swiftmfv import metadata
from swiftmfv._handle_provider import HandleProvider
from swiftmfv.engine import SimulationContext
from swiftmfv.errors import FieldNotFoundError
from swiftmfv.fields import FieldDescriptor, hydro_read_particles, hydro_write_particles
from swiftmfv.flavour import hydro_write_flavour, write_entropy_flag
from swiftmfv.hydro_properties import HydroProperties
from swiftmfv.parameters import SWIFTParameters
from swiftmfv.particles import allocate_particles, hydro_first_init_part
from swiftmfv.scheme import SchemeConfig
from swiftmfv.units import cosmo_units, base_unit_in_cgs, units_conversion_factor

particle_group_name = "PartType0"


def get_a_exponent(name: str, gamma: float) -> float:
    """
    Power of the scale factor turning a written field into a physical one.

    Parameters
    ----------
    name : str
        Dataset name.

    gamma : float
        Adiabatic index.

    Returns
    -------
    float
        The exponent; 0 for fields that are already physical.
    """
    a_exponents = {
        "Coordinates": 1.0,
        "SmoothingLength": 1.0,
        "Density": -3.0,
        "InternalEnergy": -3.0 * (gamma - 1.0),
        "Pressure": -3.0 * gamma,
        "Potential": -1.0,
    }

    return a_exponents.get(name, 0.0)


def get_field_attributes(
    field: FieldDescriptor,
    unit_system: unyt.UnitSystem,
    scale_factor: float = 1.0,
    gamma: float = 5.0 / 3.0,
) -> dict:
    """
    Return a dictionary containing the attributes to attach to a dataset.

    Parameters
    ----------
    field : FieldDescriptor
        The field being written.

    unit_system : unyt.UnitSystem
        Unit system the data is expressed in.

    scale_factor : float, optional
        The cosmological scale factor of the dataset.

    gamma : float, optional
        Adiabatic index.

    Returns
    -------
    dict
        Dictionary containing the attributes applying to the dataset.
    """
    exponents = metadata.unit.get_unit_exponents(field.units, gamma)

    cgs_factor = 1.0
    for dimension, exponent in exponents.items():
        cgs_factor *= base_unit_in_cgs(unit_system, dimension) ** exponent

    a_exp = get_a_exponent(field.name, gamma)

    return {
        "Conversion factor to CGS (not including cosmological corrections)": [
            cgs_factor
        ],
        "Conversion factor to physical CGS (including cosmological corrections)": [
            cgs_factor * scale_factor**a_exp
        ],
        "Description": field.description.encode("utf-8"),
        "U_I exponent": [exponents.get("current", 0.0)],
        "U_L exponent": [exponents.get("length", 0.0)],
        "U_M exponent": [exponents.get("mass", 0.0)],
        "U_T exponent": [exponents.get("temperature", 0.0)],
        "U_t exponent": [exponents.get("time", 0.0)],
        "a-scale exponent": [a_exp],
        "h-scale exponent": [0.0],
    }


def read_fields(
    group: h5py.Group,
    fields: list[FieldDescriptor],
    parts: np.ndarray,
    xparts: np.ndarray,
    ic_units: unyt.UnitSystem | None = None,
    internal_units: unyt.UnitSystem | None = None,
    gamma: float = 5.0 / 3.0,
) -> list[str]:
    """
    Read the described fields from ``group`` into the particles.

    Compulsory fields must be present. Optional fields that are missing are
    skipped and the particles keep whatever they held before.

    Parameters
    ----------
    group : h5py.Group
        The particle group, e.g. ``PartType0``.

    fields : list[FieldDescriptor]
        The fields to read, usually ``hydro_read_particles()``.

    parts : np.ndarray
        Particles, modified in place.

    xparts : np.ndarray
        Extended particle state, modified in place.

    ic_units : unyt.UnitSystem, optional
        Unit system of the data in the file.

    internal_units : unyt.UnitSystem, optional
        Unit system to convert to. Conversion only happens when both unit
        systems are given.

    gamma : float, optional
        Adiabatic index, needed to convert gamma-dependent units.

    Returns
    -------
    list[str]
        Names of the fields that were actually read.

    Raises
    ------
    FieldNotFoundError
        If a compulsory field is absent.

    AttributeError
        If a dataset does not have one entry per particle.
    """
    read = []

    for field in fields:
        if field.name not in group:
            if field.compulsory:
                raise FieldNotFoundError(
                    f"Compulsory field {field.name} not found in {group.name}."
                )
            continue

        values = group[field.name][...]

        if values.shape[0] != parts.shape[0]:
            raise AttributeError(
                f"Dataset {field.name} has {values.shape[0]} entries, "
                f"expected {parts.shape[0]}."
            )

        if ic_units is not None and internal_units is not None:
            factor = units_conversion_factor(
                ic_units, internal_units, field.units, gamma
            )
            if factor != 1.0:
                values = values * factor

        field.assign(parts, xparts, values)
        read.append(field.name)

    return read


def write_fields(
    group: h5py.Group,
    fields: list[FieldDescriptor],
    context: SimulationContext,
    parts: np.ndarray,
    xparts: np.ndarray,
    unit_system: unyt.UnitSystem = cosmo_units,
) -> None:
    """
    Write the described fields of all particles into ``group``.

    Parameters
    ----------
    group : h5py.Group
        The particle group to write into.

    fields : list[FieldDescriptor]
        The fields to write, usually ``hydro_write_particles()``.

    context : SimulationContext
        The global state used by converted fields.

    parts : np.ndarray
        The particles.

    xparts : np.ndarray
        Their extended state.

    unit_system : unyt.UnitSystem, optional
        Unit system the particle data is expressed in.
    """
    for field in fields:
        data = field.extract(context, parts, xparts)

        dataset = group.create_dataset(field.name, data=data)

        attributes = get_field_attributes(
            field,
            unit_system,
            scale_factor=context.a,
            gamma=context.scheme.gamma,
        )
        for name, value in attributes.items():
            dataset.attrs.create(name, value)

    return


def write_units(handle: h5py.File, unit_system: unyt.UnitSystem) -> None:
    """
    Writes the unit information to file.

    Parameters
    ----------
    handle : h5py.File
        hdf5 file to write units to

    unit_system : unyt.UnitSystem
        The unit system the data is expressed in.
    """
    units = handle.create_group("Units")

    for dimension, (name, _) in metadata.unit.unit_attributes.items():
        # We use the array because this is how swift outputs it, as a length
        # 1 array (rather than as a single float).
        units.attrs.create(
            name, np.array([base_unit_in_cgs(unit_system, dimension)])
        )

    return


def read_units(handle: h5py.File) -> unyt.UnitSystem:
    """
    Build a ``unyt`` unit system from the ``Units`` group of a file.

    Parameters
    ----------
    handle : h5py.File
        Open file.

    Returns
    -------
    unyt.UnitSystem
        The unit system the file's data is expressed in.
    """
    base = {}

    for name, value in handle["Units"].attrs.items():
        try:
            dimension = metadata.unit.dimension_of_attribute(name)
        except KeyError:
            warnings.warn(f"Ignoring unknown unit attribute {name} in Units group.")
            continue

        base[dimension] = metadata.unit.base_unit_from_cgs(value[0], dimension)

    return unyt.UnitSystem(
        f"swiftmfv_{Path(handle.filename).stem}",
        base["length"],
        base["mass"],
        base["time"],
        temperature_unit=base.get("temperature", unyt.K),
        current_mks_unit=base.get("current", unyt.A),
    )


def write_snapshot(
    filename: str | Path,
    context: SimulationContext,
    parts: np.ndarray,
    xparts: np.ndarray,
    hydro_properties: HydroProperties,
    unit_system: unyt.UnitSystem = cosmo_units,
    parameters: SWIFTParameters | None = None,
) -> None:
    """
    Write a complete snapshot of the gas particles.

    Parameters
    ----------
    filename : str or Path
        File to write to; overwritten if it exists.

    context : SimulationContext
        The global state at the time of the output.

    parts : np.ndarray
        The particles.

    xparts : np.ndarray
        Their extended state.

    hydro_properties : HydroProperties
        Properties of the scheme, stored in the ``HydroScheme`` group.

    unit_system : unyt.UnitSystem, optional
        Unit system the particle data is expressed in.

    parameters : SWIFTParameters, optional
        Run-time parameters, stored in the ``Parameters`` group.
    """
    n_part = parts.shape[0]
    number_of_particles = [n_part, 0, 0, 0, 0, 0, 0]

    attrs = {
        "BoxSize": np.array(context.dim),
        "NumPart_Total": number_of_particles,
        "NumPart_Total_HighWord": [0] * 7,
        "NumPart_ThisFile": number_of_particles,
        "NumFilesPerSnapshot": [1],
        "Flag_Entropy_ICs": [int(write_entropy_flag())],
        "Dimension": [3],
        "Time": [context.time],
        "Scale-factor": [context.a],
        "Redshift": [1.0 / context.a - 1.0],
    }

    with h5py.File(filename, "w") as handle:
        header = handle.create_group("Header")
        for name, value in attrs.items():
            header.attrs.create(name, value)

        write_units(handle, unit_system)

        hydro_group = handle.create_group("HydroScheme")
        hydro_properties.write_attributes(hydro_group)
        hydro_write_flavour(hydro_group, context.scheme)

        if parameters is not None:
            parameters.write_attributes(handle.create_group("Parameters"))

        write_fields(
            handle.create_group(particle_group_name),
            hydro_write_particles(),
            context,
            parts,
            xparts,
            unit_system=unit_system,
        )

    return


class MFVSnapshot(HandleProvider):
    """
    Read access to a snapshot (or initial conditions) file.

    Parameters
    ----------
    filename : str or Path
        Name of file to read from.

    handle : h5py.File, optional
        The h5py file handle, optional. Will open a new handle with the
        filename if required.
    """

    def __init__(self, filename: str | Path, handle: h5py.File | None = None) -> None:
        super().__init__(filename, handle=handle)

        with self.open_file() as handle:
            self.header = dict(handle["Header"].attrs) if "Header" in handle else {}
            self.hydro_scheme = (
                dict(handle["HydroScheme"].attrs) if "HydroScheme" in handle else None
            )
            self.units = read_units(handle) if "Units" in handle else None
            self.parameters = (
                SWIFTParameters.from_hdf5(handle) if "Parameters" in handle else None
            )
            self.n_gas = self._count_particles(handle)

        return

    def __str__(self) -> str:
        return f"Snapshot {self.filename} with {self.n_gas} gas particles"

    def __repr__(self) -> str:
        return f"MFVSnapshot({str(self.filename)!r})"

    def _count_particles(self, handle: h5py.File) -> int:
        try:
            return int(self.header["NumPart_ThisFile"][0])
        except KeyError:
            pass

        group = handle.get(particle_group_name)
        if group is None:
            return 0

        for dataset in group.values():
            return dataset.shape[0]

        return 0

    @property
    def gamma(self) -> float:
        try:
            return float(self.hydro_scheme["Adiabatic index"][0])
        except (KeyError, TypeError):
            return 5.0 / 3.0

    def read_field(self, name: str) -> unyt.unyt_array:
        """
        Read a single gas particle dataset in physical cgs units.

        Parameters
        ----------
        name : str
            Dataset name, e.g. ``"Coordinates"``.

        Returns
        -------
        unyt.unyt_array
            The data, converted with the factors stored alongside it.

        Raises
        ------
        FieldNotFoundError
            If the dataset is not present.
        """
        known = {
            field.name: field
            for field in hydro_read_particles() + hydro_write_particles()
        }

        with self.open_file() as handle:
            try:
                dataset = handle[particle_group_name][name]
            except KeyError:
                raise FieldNotFoundError(
                    f"Field {name} not found in {self.filename}."
                )

            factor = dataset.attrs.get(
                "Conversion factor to physical CGS (including cosmological corrections)",
                [1.0],
            )[0]
            values = dataset[...] * factor

        try:
            units = metadata.unit.generate_units(
                unyt.g, unyt.cm, unyt.s, unyt.A, unyt.K, gamma=self.gamma
            )[known[name].units]
        except KeyError:
            units = unyt.dimensionless

        return unyt.unyt_array(values, units=units, name=name)

    @property
    def scale_factor(self) -> float:
        try:
            return float(self.header["Scale-factor"][0])
        except KeyError:
            return 1.0

    def read_particles(
        self,
        scheme: SchemeConfig | None = None,
        internal_units: unyt.UnitSystem | None = None,
        first_init: bool = True,
    ) -> tuple[np.ndarray, np.ndarray]:
        """
        Read the gas particles.

        Parameters
        ----------
        scheme : SchemeConfig, optional
            The scheme the particles will be used with.

        internal_units : unyt.UnitSystem, optional
            Unit system to convert the data to. Requires the file to have a
            ``Units`` group.

        first_init : bool, optional
            Whether to convert the read quantities into conserved variables.

        Returns
        -------
        tuple[np.ndarray, np.ndarray]
            The ``parts`` and ``xparts`` arrays.

        Raises
        ------
        FieldNotFoundError
            If a compulsory field is absent.
        """
        scheme = scheme if scheme is not None else SchemeConfig()
        parts, xparts = allocate_particles(self.n_gas)

        with self.open_file() as handle:
            try:
                group = handle[particle_group_name]
            except KeyError:
                raise FieldNotFoundError(
                    f"No {particle_group_name} group in {self.filename}."
                )

            read_fields(
                group,
                hydro_read_particles(),
                parts,
                xparts,
                ic_units=self.units,
                internal_units=internal_units,
                gamma=scheme.gamma,
            )

        if first_init:
            hydro_first_init_part(
                parts, xparts, gamma=scheme.gamma, total_energy=scheme.total_energy
            )

        return parts, xparts


def read_snapshot(
    filename: str | Path,
    scheme: SchemeConfig | None = None,
    internal_units: unyt.UnitSystem | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Read the gas particles of a snapshot or initial conditions file.

    Parameters
    ----------
    filename : str or Path
        File to read from.

    scheme : SchemeConfig, optional
        The scheme the particles will be used with.

    internal_units : unyt.UnitSystem, optional
        Unit system to convert the data to.

    Returns
    -------
    tuple[np.ndarray, np.ndarray]
        The ``parts`` and ``xparts`` arrays.
    """
    with h5py.File(filename, "r") as handle:
        snapshot = MFVSnapshot(filename, handle=handle)
        parts, xparts = snapshot.read_particles(
            scheme=scheme, internal_units=internal_units
        )

    return parts, xparts
