"""
Expansion history of the simulated universe on the integer timeline.

In a cosmological run the integer timeline is uniform in ``log(a)``: tick
``ti`` corresponds to ``a = a_begin * exp(ti * time_base)``. The kick and
drift operators then need integrals of the expansion history over an
interval of ticks, which are tabulated once here.
"""

import copy

import numpy as np
import unyt

from swiftmfv.parameters import SWIFTParameters
from swiftmfv.timeline import max_nr_timesteps
from swiftmfv.units import cosmo_units

table_length = 10000

kick_kinds = ("drift", "gravity", "hydro")


class Cosmology(object):
    """
    A w0waCDM cosmology between ``a_begin`` and ``a_end``.

    Parameters
    ----------
    h : float
        Dimensionless Hubble parameter.

    a_begin : float
        Scale factor at the start of the run (integer time 0).

    a_end : float
        Scale factor at the end of the run (``max_nr_timesteps``).

    Omega_m : float
        Matter density parameter (cold dark matter plus baryons).

    Omega_lambda : float
        Dark energy density parameter.

    Omega_b : float, optional
        Baryon density parameter, stored for reference.

    Omega_r : float, optional
        Radiation density parameter.

    w_0 : float, optional
        Dark energy equation of state at ``a = 1``.

    w_a : float, optional
        Evolution of the dark energy equation of state.

    gamma : float, optional
        Adiabatic index of the gas, used by the hydro kick.

    internal_units : unyt.UnitSystem, optional
        Unit system in which the Hubble constant is expressed.
    """

    def __init__(
        self,
        h: float,
        a_begin: float,
        a_end: float,
        Omega_m: float,
        Omega_lambda: float,
        Omega_b: float = 0.0,
        Omega_r: float = 0.0,
        w_0: float = -1.0,
        w_a: float = 0.0,
        gamma: float = 5.0 / 3.0,
        internal_units: unyt.UnitSystem = cosmo_units,
    ) -> None:
        if not 0.0 < a_begin < a_end:
            raise AttributeError(
                f"Need 0 < a_begin < a_end, got a_begin={a_begin}, a_end={a_end}."
            )

        self.h = h
        self.a_begin = a_begin
        self.a_end = a_end
        self.Omega_m = Omega_m
        self.Omega_lambda = Omega_lambda
        self.Omega_b = Omega_b
        self.Omega_r = Omega_r
        self.Omega_k = 1.0 - (Omega_m + Omega_r + Omega_lambda)
        self.w_0 = w_0
        self.w_a = w_a
        self.gamma = gamma

        self.H0 = float(
            unyt.unyt_quantity(100.0 * h, "km/s/Mpc")
            .to(1 / internal_units["time"])
            .value
        )

        self.time_base = np.log(a_end / a_begin) / float(max_nr_timesteps)

        self._build_tables()
        self._set_scale_factor(0)

        return

    @classmethod
    def from_parameters(
        cls,
        params: SWIFTParameters,
        gamma: float = 5.0 / 3.0,
        internal_units: unyt.UnitSystem = cosmo_units,
    ) -> "Cosmology":
        """
        Build the cosmology from the ``Cosmology`` section of the parameters.

        Parameters
        ----------
        params : SWIFTParameters
            The run-time parameters.

        gamma : float, optional
            Adiabatic index of the gas.

        internal_units : unyt.UnitSystem, optional
            The internal unit system.

        Returns
        -------
        Cosmology
            The cosmology at the start of the run.

        Raises
        ------
        MissingParameterError
            If a compulsory cosmological parameter is missing.
        """
        Omega_b = params.get_param("Cosmology:Omega_b")

        if "Cosmology:Omega_cdm" in params:
            Omega_m = params.get_param("Cosmology:Omega_cdm") + Omega_b
        else:
            Omega_m = params.get_param("Cosmology:Omega_m")

        return cls(
            h=params.get_param("Cosmology:h"),
            a_begin=params.get_param("Cosmology:a_begin"),
            a_end=params.get_param("Cosmology:a_end"),
            Omega_m=Omega_m,
            Omega_lambda=params.get_param("Cosmology:Omega_lambda"),
            Omega_b=Omega_b,
            Omega_r=params.get_opt_param("Cosmology:Omega_r", 0.0),
            w_0=params.get_opt_param("Cosmology:w_0", -1.0),
            w_a=params.get_opt_param("Cosmology:w_a", 0.0),
            gamma=gamma,
            internal_units=internal_units,
        )

    def __repr__(self) -> str:
        return (
            f"Cosmology(h={self.h}, Omega_m={self.Omega_m}, "
            f"Omega_lambda={self.Omega_lambda}, a={self.a:.4g})"
        )

    def E(self, a: float | np.ndarray) -> float | np.ndarray:
        """
        Dimensionless Hubble rate ``H(a) / H0``.

        Parameters
        ----------
        a : float or np.ndarray
            Scale factor(s).

        Returns
        -------
        float or np.ndarray
            The expansion rate relative to today.
        """
        a_inv = 1.0 / a
        dark_energy = np.exp(
            3.0 * ((a - 1.0) * self.w_a - (1.0 + self.w_0 + self.w_a) * np.log(a))
        )

        return np.sqrt(
            self.Omega_r * a_inv**4
            + self.Omega_m * a_inv**3
            + self.Omega_k * a_inv**2
            + self.Omega_lambda * dark_energy
        )

    def _integrands(self, a: np.ndarray) -> dict[str, np.ndarray]:
        H = self.H0 * self.E(a)
        a_inv = 1.0 / a

        return {
            "drift": a_inv**3 / H,
            "gravity": a_inv**2 / H,
            "hydro": a ** (-3.0 * (self.gamma - 1.0)) * a_inv / H,
        }

    def _build_tables(self) -> None:
        """
        Tabulate the cumulative integrals from ``a_begin``, uniformly in
        ``log(a)`` so that the table is uniform in integer time too.
        """
        self._table_x = np.linspace(0.0, 1.0, table_length)
        a = self.a_begin * np.exp(self._table_x * np.log(self.a_end / self.a_begin))

        self._tables = {}

        for kind, integrand in self._integrands(a).items():
            segments = 0.5 * (integrand[1:] + integrand[:-1]) * np.diff(a)
            self._tables[kind] = np.concatenate([[0.0], np.cumsum(segments)])

        return

    def _set_scale_factor(self, ti_current: int) -> None:
        self.ti_current = int(ti_current)
        self.a = float(self.scale_factor(ti_current))
        self.a_inv = 1.0 / self.a
        self.a2_inv = self.a_inv * self.a_inv
        self.z = self.a_inv - 1.0

        return

    def scale_factor(self, ti: int | np.ndarray) -> float | np.ndarray:
        """
        Scale factor at integer time(s) ``ti``.

        Parameters
        ----------
        ti : int or np.ndarray
            Integer time(s).

        Returns
        -------
        float or np.ndarray
            The scale factor.
        """
        return self.a_begin * np.exp(np.asarray(ti, dtype=np.float64) * self.time_base)

    def update(self, ti_current: int) -> "Cosmology":
        """
        The same cosmology, evaluated at integer time ``ti_current``.

        The tables are shared; the current instance is left untouched.

        Parameters
        ----------
        ti_current : int
            The new current integer time.

        Returns
        -------
        Cosmology
            A copy with ``a``, ``a_inv``, ``a2_inv`` and ``z`` updated.
        """
        updated = copy.copy(self)
        updated._set_scale_factor(ti_current)

        return updated

    def kick_factor(
        self, kind: str, ti_begin: int | np.ndarray, ti_end: int | np.ndarray
    ) -> float | np.ndarray:
        """
        Integral of the expansion history between two integer times.

        Parameters
        ----------
        kind : str
            One of ``"drift"``, ``"gravity"`` or ``"hydro"``.

        ti_begin : int or np.ndarray
            Start of the interval.

        ti_end : int or np.ndarray
            End of the interval.

        Returns
        -------
        float or np.ndarray
            The factor multiplying an acceleration (or velocity for the
            drift) over the interval.

        Raises
        ------
        KeyError
            If ``kind`` is not known.
        """
        try:
            table = self._tables[kind]
        except KeyError:
            raise KeyError(f"Unknown kick factor {kind}, choose one of {kick_kinds}.")

        x_begin = np.asarray(ti_begin, dtype=np.float64) / float(max_nr_timesteps)
        x_end = np.asarray(ti_end, dtype=np.float64) / float(max_nr_timesteps)

        return np.interp(x_end, self._table_x, table) - np.interp(
            x_begin, self._table_x, table
        )

    def get_grav_kick_factor(self, ti_begin, ti_end):
        return self.kick_factor("gravity", ti_begin, ti_end)

    def get_hydro_kick_factor(self, ti_begin, ti_end):
        return self.kick_factor("hydro", ti_begin, ti_end)

    def get_drift_factor(self, ti_begin, ti_end):
        return self.kick_factor("drift", ti_begin, ti_end)
