"""
The global simulation state seen by the output layer.

A ``SimulationContext`` is a read-only snapshot taken once per output: the
conversion functions only ever read from it, so one context can be shared
between any number of workers converting disjoint particles.
"""

import numpy as np

from swiftmfv.cosmology import Cosmology
from swiftmfv.parameters import SWIFTParameters
from swiftmfv.scheme import SchemeConfig
from swiftmfv.timeline import max_nr_timesteps


class SimulationContext(object):
    """
    Snapshot of the global simulation state.

    Parameters
    ----------
    ti_current : int
        The current integer time.

    time_base : float
        Duration of one integer time tick. In cosmological runs this is the
        increment in ``log(a)`` per tick.

    scheme : SchemeConfig, optional
        The hydrodynamics scheme in use.

    periodic : bool, optional
        Whether the domain is periodic.

    dim : array-like, optional
        Extent of the (periodic) domain along each axis.

    cosmology : Cosmology, optional
        Expansion history. If given, the run is cosmological and the
        cosmology is evaluated at ``ti_current``.

    gparts : np.ndarray, optional
        The gravity particles that hydro particles may refer to.

    time_begin : float, optional
        Time corresponding to integer time 0 in non-cosmological runs.
    """

    def __init__(
        self,
        ti_current: int,
        time_base: float,
        scheme: SchemeConfig | None = None,
        periodic: bool = False,
        dim: list | np.ndarray | None = None,
        cosmology: Cosmology | None = None,
        gparts: np.ndarray | None = None,
        time_begin: float = 0.0,
    ) -> None:
        if periodic and dim is None:
            raise AttributeError("A periodic domain needs its dimensions.")

        self._ti_current = int(ti_current)
        self._time_base = float(time_base)
        self._scheme = scheme if scheme is not None else SchemeConfig()
        self._periodic = bool(periodic)
        self._dim = (
            np.array(dim, dtype=np.float64) if dim is not None else np.zeros(3)
        )
        self._dim.flags.writeable = False
        self._cosmology = (
            cosmology.update(ti_current) if cosmology is not None else None
        )
        self._gparts = gparts
        self._time_begin = float(time_begin)

        return

    @classmethod
    def from_parameters(
        cls,
        params: SWIFTParameters,
        ti_current: int,
        scheme: SchemeConfig | None = None,
        with_cosmology: bool = False,
        periodic: bool = False,
        dim: list | np.ndarray | None = None,
        gparts: np.ndarray | None = None,
    ) -> "SimulationContext":
        """
        Set up the time base from the ``TimeIntegration`` section.

        Non-cosmological runs spread ``TimeIntegration:time_begin`` to
        ``TimeIntegration:time_end`` over the integer timeline; cosmological
        runs take their time base from the ``Cosmology`` section.

        Parameters
        ----------
        params : SWIFTParameters
            The run-time parameters.

        ti_current : int
            The current integer time.

        scheme : SchemeConfig, optional
            The hydrodynamics scheme in use.

        with_cosmology : bool, optional
            Whether the run is cosmological.

        periodic : bool, optional
            Whether the domain is periodic.

        dim : array-like, optional
            Extent of the domain.

        gparts : np.ndarray, optional
            The gravity particles.

        Returns
        -------
        SimulationContext
            The context at ``ti_current``.
        """
        scheme = scheme if scheme is not None else SchemeConfig()

        if with_cosmology:
            cosmology = Cosmology.from_parameters(params, gamma=scheme.gamma)
            time_base = cosmology.time_base
            time_begin = 0.0
        else:
            cosmology = None
            time_begin = params.get_param("TimeIntegration:time_begin")
            time_end = params.get_param("TimeIntegration:time_end")
            time_base = (time_end - time_begin) / float(max_nr_timesteps)

        return cls(
            ti_current=ti_current,
            time_base=time_base,
            scheme=scheme,
            periodic=periodic,
            dim=dim,
            cosmology=cosmology,
            gparts=gparts,
            time_begin=time_begin,
        )

    def __repr__(self) -> str:
        return (
            f"SimulationContext(ti_current={self.ti_current}, "
            f"time_base={self.time_base}, periodic={self.periodic}, "
            f"with_cosmology={self.with_cosmology})"
        )

    @property
    def ti_current(self) -> int:
        return self._ti_current

    @property
    def time_base(self) -> float:
        return self._time_base

    @property
    def scheme(self) -> SchemeConfig:
        return self._scheme

    @property
    def periodic(self) -> bool:
        return self._periodic

    @property
    def dim(self) -> np.ndarray:
        return self._dim

    @property
    def cosmology(self) -> Cosmology | None:
        return self._cosmology

    @property
    def with_cosmology(self) -> bool:
        return self._cosmology is not None

    @property
    def gparts(self) -> np.ndarray | None:
        return self._gparts

    @property
    def a(self) -> float:
        """Current scale factor; 1 without cosmology."""
        return self._cosmology.a if self.with_cosmology else 1.0

    @property
    def a2_inv(self) -> float:
        """Inverse square of the current scale factor; 1 without cosmology."""
        return self._cosmology.a2_inv if self.with_cosmology else 1.0

    @property
    def time(self) -> float:
        """
        Current time in internal units, or the scale factor for
        cosmological runs.
        """
        if self.with_cosmology:
            return self.a

        return self._time_begin + self.ti_current * self.time_base
