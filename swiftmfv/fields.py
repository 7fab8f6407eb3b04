"""
Descriptions of the particle fields read from and written to datasets.

A field is either copied straight out of the particle arrays
(:class:`OffsetField`) or computed by a converter function
(:class:`ConvertedField`). Both expose ``extract``, so the dataset layer
writes them without knowing which kind it has.
"""

import numpy as np

from typing import Callable

from swiftmfv import converters
from swiftmfv.engine import SimulationContext
from swiftmfv.metadata.unit.unit_fields import unit_conversions

importances = ("compulsory", "optional")


def get_field(array: np.ndarray, path: tuple[str, ...]) -> np.ndarray:
    """
    Walk a nested field path into a structured array (or record).

    Parameters
    ----------
    array : np.ndarray
        Structured array or record.

    path : tuple[str, ...]
        Field names, outermost first, e.g. ``("conserved", "mass")``.

    Returns
    -------
    np.ndarray
        A view of the requested field.
    """
    for name in path:
        array = array[name]

    return array


class FieldDescriptor(object):
    """
    Shared description of a dataset field.

    Descriptors are immutable once created.

    Parameters
    ----------
    name : str
        Name of the dataset, e.g. ``"Coordinates"``.

    dtype : np.dtype
        Element type stored in the dataset.

    dimension : int
        Number of elements per particle, 1 or 3.

    units : str
        Unit-conversion tag, see ``swiftmfv.metadata.unit.unit_fields``.

    importance : str, optional
        ``"compulsory"`` or ``"optional"``; only meaningful when reading.

    description : str, optional
        Human-readable description written alongside the data.
    """

    def __init__(
        self,
        name: str,
        dtype: np.dtype,
        dimension: int,
        units: str,
        importance: str = "compulsory",
        description: str = "",
    ) -> None:
        if dimension not in (1, 3):
            raise AttributeError(f"Field {name} must have 1 or 3 elements.")

        if importance not in importances:
            raise AttributeError(
                f"Importance of field {name} must be one of {importances}."
            )

        if units not in unit_conversions and units != "entropy":
            raise AttributeError(f"Unknown unit conversion {units} for field {name}.")

        self.name = name
        self.dtype = np.dtype(dtype)
        self.dimension = dimension
        self.units = units
        self.importance = importance
        self.description = description

        return

    def __setattr__(self, name: str, value: object) -> None:
        if name in self.__dict__:
            raise AttributeError(
                f"Field descriptors are immutable, cannot reset {name}."
            )

        super().__setattr__(name, value)

    def _key(self) -> tuple:
        return (self.name, self.dtype, self.dimension, self.units, self.importance)

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other._key() == self._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.name!r}, {self.dtype}, "
            f"{self.dimension}, {self.units!r}, {self.importance!r})"
        )

    @property
    def compulsory(self) -> bool:
        return self.importance == "compulsory"

    @property
    def shape(self) -> tuple[int, ...]:
        """Per-particle shape of the data, ``()`` or ``(3,)``."""
        return () if self.dimension == 1 else (self.dimension,)

    def _finalise(self, values: np.ndarray, n_part: int) -> np.ndarray:
        return np.asarray(values).reshape((n_part,) + self.shape).astype(self.dtype)

    def extract(
        self, context: SimulationContext, parts: np.ndarray, xparts: np.ndarray
    ) -> np.ndarray:
        """
        Compute the values to store for all particles.

        Parameters
        ----------
        context : SimulationContext
            The global state.

        parts : np.ndarray
            The particles.

        xparts : np.ndarray
            Their extended state.

        Returns
        -------
        np.ndarray
            Array of shape ``(N,)`` or ``(N, 3)`` and type ``self.dtype``.
        """
        raise NotImplementedError

    def assign(self, parts: np.ndarray, xparts: np.ndarray, values: np.ndarray) -> None:
        """
        Store values read from a dataset into the particles.

        Parameters
        ----------
        parts : np.ndarray
            The particles, modified in place.

        xparts : np.ndarray
            Their extended state, modified in place.

        values : np.ndarray
            Values read from the dataset.
        """
        raise AttributeError(f"Field {self.name} cannot be read back into particles.")


class OffsetField(FieldDescriptor):
    """
    A field copied directly from (or into) the particle arrays.

    Parameters
    ----------
    name : str
        Name of the dataset.

    dtype : np.dtype
        Element type stored in the dataset.

    dimension : int
        Number of elements per particle.

    units : str
        Unit-conversion tag.

    path : tuple[str, ...]
        Field path into the particle dtype, e.g. ``("conserved", "mass")``.

    importance : str, optional
        ``"compulsory"`` or ``"optional"``.

    source : str, optional
        ``"parts"`` or ``"xparts"``, the array the path refers to.

    description : str, optional
        Human-readable description.
    """

    def __init__(
        self,
        name: str,
        dtype: np.dtype,
        dimension: int,
        units: str,
        path: tuple[str, ...],
        importance: str = "compulsory",
        source: str = "parts",
        description: str = "",
    ) -> None:
        super().__init__(
            name,
            dtype,
            dimension,
            units,
            importance=importance,
            description=description,
        )

        if source not in ("parts", "xparts"):
            raise AttributeError(f"Field {name} must come from parts or xparts.")

        self.path = tuple(path)
        self.source = source

        return

    def _key(self) -> tuple:
        return super()._key() + (self.path, self.source)

    def _select(self, parts: np.ndarray, xparts: np.ndarray) -> np.ndarray:
        return parts if self.source == "parts" else xparts

    def extract(
        self, context: SimulationContext, parts: np.ndarray, xparts: np.ndarray
    ) -> np.ndarray:
        values = get_field(self._select(parts, xparts), self.path)

        return self._finalise(values, parts.shape[0])

    def assign(self, parts: np.ndarray, xparts: np.ndarray, values: np.ndarray) -> None:
        array = self._select(parts, xparts)

        target = get_field(array, self.path[:-1])
        target[self.path[-1]] = np.asarray(values).reshape(
            (array.shape[0],) + self.shape
        )

        return


class ConvertedField(FieldDescriptor):
    """
    A field computed from the particle state by a converter function.

    Parameters
    ----------
    name : str
        Name of the dataset.

    dtype : np.dtype
        Element type stored in the dataset.

    dimension : int
        Number of elements per particle.

    units : str
        Unit-conversion tag.

    converter : Callable
        Function ``(context, p, xp) -> values``.

    description : str, optional
        Human-readable description.
    """

    def __init__(
        self,
        name: str,
        dtype: np.dtype,
        dimension: int,
        units: str,
        converter: Callable,
        description: str = "",
    ) -> None:
        super().__init__(name, dtype, dimension, units, description=description)

        self.converter = converter

        return

    def _key(self) -> tuple:
        return super()._key() + (self.converter,)

    def extract(
        self, context: SimulationContext, parts: np.ndarray, xparts: np.ndarray
    ) -> np.ndarray:
        return self._finalise(self.converter(context, parts, xparts), parts.shape[0])

    def convert_single(
        self, context: SimulationContext, p: np.void, xp: np.void
    ) -> np.ndarray:
        """
        Convert one particle.

        Parameters
        ----------
        context : SimulationContext
            The global state.

        p : np.void
            The particle record.

        xp : np.void
            Its extended state.

        Returns
        -------
        np.ndarray
            Vector of ``self.dimension`` elements.
        """
        return np.asarray(self.converter(context, p, xp)).reshape(
            self.dimension
        ).astype(self.dtype)


def hydro_read_particles() -> list[FieldDescriptor]:
    """
    The fields read from initial conditions, in reading order.

    Returns
    -------
    list[FieldDescriptor]
        Eight descriptors; accelerations and densities are optional.
    """
    return [
        OffsetField("Coordinates", np.float64, 3, "length", ("x",)),
        OffsetField("Velocities", np.float32, 3, "speed", ("v",)),
        OffsetField("Masses", np.float32, 1, "mass", ("conserved", "mass")),
        OffsetField("SmoothingLength", np.float32, 1, "length", ("h",)),
        OffsetField(
            "InternalEnergy",
            np.float32,
            1,
            "energy_per_unit_mass",
            ("conserved", "energy"),
        ),
        OffsetField("ParticleIDs", np.uint64, 1, "no_units", ("id",)),
        OffsetField(
            "Accelerations",
            np.float32,
            3,
            "acceleration",
            ("a_hydro",),
            importance="optional",
        ),
        OffsetField(
            "Density",
            np.float32,
            1,
            "density",
            ("primitives", "rho"),
            importance="optional",
        ),
    ]


def hydro_write_particles() -> list[FieldDescriptor]:
    """
    The fields written to snapshots, in writing order.

    Returns
    -------
    list[FieldDescriptor]
        Eleven descriptors.
    """
    return [
        ConvertedField(
            "Coordinates",
            np.float64,
            3,
            "length",
            converters.convert_part_pos,
            description="Co-moving positions of the particles",
        ),
        ConvertedField(
            "Velocities",
            np.float32,
            3,
            "speed",
            converters.convert_part_vel,
            description="Peculiar velocities of the particles",
        ),
        OffsetField(
            "Masses",
            np.float32,
            1,
            "mass",
            ("conserved", "mass"),
            description="Masses of the particles",
        ),
        OffsetField(
            "SmoothingLength",
            np.float32,
            1,
            "length",
            ("h",),
            description="Co-moving smoothing lengths of the particles",
        ),
        ConvertedField(
            "InternalEnergy",
            np.float32,
            1,
            "energy_per_unit_mass",
            converters.convert_u,
            description="Co-moving thermal energies per unit mass of the particles",
        ),
        OffsetField(
            "ParticleIDs",
            np.uint64,
            1,
            "no_units",
            ("id",),
            description="Unique IDs of the particles",
        ),
        OffsetField(
            "Density",
            np.float32,
            1,
            "density",
            ("primitives", "rho"),
            description="Co-moving mass densities of the particles",
        ),
        ConvertedField(
            "Entropy",
            np.float32,
            1,
            "entropy",
            converters.convert_A,
            description="Co-moving entropies of the particles",
        ),
        OffsetField(
            "Pressure",
            np.float32,
            1,
            "pressure",
            ("primitives", "P"),
            description="Co-moving pressures of the particles",
        ),
        ConvertedField(
            "TotEnergy",
            np.float32,
            1,
            "energy",
            converters.convert_Etot,
            description="Total energies of the particles",
        ),
        ConvertedField(
            "Potential",
            np.float32,
            1,
            "potential",
            converters.convert_part_potential,
            description="Co-moving gravitational potentials of the particles",
        ),
    ]
