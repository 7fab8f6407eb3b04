"""
Numerical properties of the hydrodynamics scheme.

These are derived once from the parameter file at start-up: the target
number of neighbours follows from the resolution parameter eta and the
kernel, and the limit on the smoothing length change per step from the
maximal allowed change in particle volume.
"""

import h5py
import numpy as np

from swiftmfv.parameters import SWIFTParameters, decode
from swiftmfv.scheme import SchemeConfig

default_max_iterations = 30
default_volume_change = 2.0


def derive_kernel_properties(
    eta: float,
    kernel_gamma3: float,
    delta_neighbours: float,
    max_smoothing_iterations: int = default_max_iterations,
    max_volume_change: float = default_volume_change,
) -> dict:
    """
    Derive the scheme constants from the resolution parameters.

    Parameters
    ----------
    eta : float
        Resolution parameter; the smoothing length in units of the mean
        inter-particle separation.

    kernel_gamma3 : float
        Kernel normalisation, the cube of the ratio of compact support
        radius to smoothing length.

    delta_neighbours : float
        Tolerance on the number of neighbours.

    max_smoothing_iterations : int, optional
        Maximal number of iterations used to converge the smoothing length.

    max_volume_change : float, optional
        Maximal factor by which a particle volume may change in one step.

    Returns
    -------
    dict
        With keys ``eta_neighbours``, ``target_neighbours``,
        ``delta_neighbours``, ``max_smoothing_iterations`` and
        ``log_max_h_change``.
    """
    return {
        "eta_neighbours": eta,
        "target_neighbours": 4.0 * np.pi * kernel_gamma3 * eta**3 / 3.0,
        "delta_neighbours": delta_neighbours,
        "max_smoothing_iterations": int(max_smoothing_iterations),
        "log_max_h_change": np.log(max_volume_change ** (1.0 / 3.0)),
    }


class HydroProperties(object):
    """
    Properties of the hydrodynamics scheme, fixed for the run.

    Parameters
    ----------
    scheme : SchemeConfig
        The scheme (kernel and adiabatic index) these properties belong to.

    eta_neighbours : float
        Resolution parameter eta.

    delta_neighbours : float
        Tolerance on the number of neighbours.

    CFL_condition : float
        Courant-Friedrich-Levy number used for the time-step.

    max_smoothing_iterations : int, optional
        Maximal number of smoothing length iterations in the ghost task.

    max_volume_change : float, optional
        Maximal change of particle volume over one time-step.
    """

    def __init__(
        self,
        scheme: SchemeConfig,
        eta_neighbours: float,
        delta_neighbours: float,
        CFL_condition: float,
        max_smoothing_iterations: int = default_max_iterations,
        max_volume_change: float = default_volume_change,
    ) -> None:
        self.scheme = scheme
        self.CFL_condition = CFL_condition

        derived = derive_kernel_properties(
            eta=eta_neighbours,
            kernel_gamma3=scheme.kernel.gamma3,
            delta_neighbours=delta_neighbours,
            max_smoothing_iterations=max_smoothing_iterations,
            max_volume_change=max_volume_change,
        )

        self.eta_neighbours = derived["eta_neighbours"]
        self.target_neighbours = derived["target_neighbours"]
        self.delta_neighbours = derived["delta_neighbours"]
        self.max_smoothing_iterations = derived["max_smoothing_iterations"]
        self.log_max_h_change = derived["log_max_h_change"]

        return

    @classmethod
    def from_parameters(
        cls, params: SWIFTParameters, scheme: SchemeConfig
    ) -> "HydroProperties":
        """
        Read the properties from the ``SPH`` section of the parameters.

        Parameters
        ----------
        params : SWIFTParameters
            The run-time parameters.

        scheme : SchemeConfig
            The scheme in use.

        Returns
        -------
        HydroProperties
            The derived properties.

        Raises
        ------
        MissingParameterError
            If ``SPH:resolution_eta``, ``SPH:delta_neighbours`` or
            ``SPH:CFL_condition`` is missing.
        """
        return cls(
            scheme=scheme,
            eta_neighbours=params.get_param("SPH:resolution_eta"),
            delta_neighbours=params.get_param("SPH:delta_neighbours"),
            max_smoothing_iterations=params.get_opt_param(
                "SPH:max_ghost_iterations", default_max_iterations, kind=int
            ),
            CFL_condition=params.get_param("SPH:CFL_condition"),
            max_volume_change=params.get_opt_param(
                "SPH:max_volume_change", default_volume_change
            ),
        )

    @property
    def max_volume_change(self) -> float:
        return float(np.exp(self.log_max_h_change) ** 3)

    def summary(self) -> list[str]:
        """
        Human-readable description of the properties, one line per entry.

        Returns
        -------
        list[str]
            Lines suitable for an operator log.
        """
        lines = [
            f"Adiabatic index gamma: {self.scheme.gamma:f}.",
            f"Hydrodynamic scheme: {self.scheme.name}.",
            (
                f"Hydrodynamic kernel: {self.scheme.kernel.long_name} with "
                f"{self.target_neighbours:.2f} +/- {self.delta_neighbours:.2f} "
                f"neighbours (eta={self.eta_neighbours:f})."
            ),
            f"Hydrodynamic integration: CFL parameter: {self.CFL_condition:.4f}.",
            (
                "Hydrodynamic integration: Max change of volume: "
                f"{self.max_volume_change:.2f} "
                f"(max|dlog(h)/dt|={self.log_max_h_change:f})."
            ),
        ]

        if self.max_smoothing_iterations != default_max_iterations:
            lines.append(
                "Maximal iterations in ghost task set to "
                f"{self.max_smoothing_iterations} "
                f"(default is {default_max_iterations})"
            )

        return lines

    def __str__(self) -> str:
        return "\n".join(self.summary())

    def attributes(self) -> dict:
        """
        The properties as they are stored in a snapshot.

        Returns
        -------
        dict
            Attribute name to value. Numbers are length 1 arrays, strings are
            bytes, matching what SWIFT writes.
        """
        return {
            "Adiabatic index": np.array([self.scheme.gamma], dtype=np.float32),
            "Scheme": self.scheme.name.encode("utf-8"),
            "Kernel function": self.scheme.kernel.long_name.encode("utf-8"),
            "Kernel target N_ngb": np.array(
                [self.target_neighbours], dtype=np.float32
            ),
            "Kernel delta N_ngb": np.array([self.delta_neighbours], dtype=np.float32),
            "Kernel eta": np.array([self.eta_neighbours], dtype=np.float32),
            "CFL parameter": np.array([self.CFL_condition], dtype=np.float32),
            "Volume log(max(delta h))": np.array(
                [self.log_max_h_change], dtype=np.float32
            ),
            "Volume max change time-step": np.array(
                [self.max_volume_change], dtype=np.float32
            ),
            "Max ghost iterations": np.array(
                [self.max_smoothing_iterations], dtype=np.float32
            ),
        }

    def write_attributes(self, group: h5py.Group) -> None:
        """
        Persist the properties as attributes of ``group``.

        Parameters
        ----------
        group : h5py.Group
            Group to attach the attributes to, usually ``HydroScheme``.
        """
        for name, value in self.attributes().items():
            group.attrs.create(name, value)

        return


def hydro_info(attributes: dict) -> str:
    r"""
    Format the hydro scheme attributes read back from a snapshot.

    Formatting is as:

    Scheme
    Kernel function
    $\eta$ = Kernel eta (Kernel target N_ngb $N_{ngb}$)
    $C_{\rm CFL}$ = CFL parameter

    Parameters
    ----------
    attributes : dict
        Attributes of the ``HydroScheme`` group.

    Returns
    -------
    str
        Hydro scheme information.
    """

    def format_float(param: str) -> str:
        return f"{attributes[param][0]:4.2f}"

    return (
        f"{decode(attributes['Scheme'])}\n"
        f"{decode(attributes['Kernel function'])}\n"
        rf"$\eta$ = {format_float('Kernel eta')} "
        rf"({format_float('Kernel target N_ngb')} $N_{{ngb}}$)"
        "\n"
        rf"$C_{{\rm CFL}}$ = {format_float('CFL parameter')}"
    )
