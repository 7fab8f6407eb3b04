"""
Smoothing kernels available to the hydrodynamics scheme.

Values follow the Dehnen & Aly 2012 conventions for three dimensions:
``kernel_gamma`` is the ratio of the compact support radius H to the
smoothing length h.
"""

from numpy import float32

kernel_names = {
    "cubic_spline": "Cubic spline (M4)",
    "quartic_spline": "Quartic spline (M5)",
    "quintic_spline": "Quintic spline (M6)",
    "wendland_c2": "Wendland-C2",
    "wendland_c4": "Wendland-C4",
    "wendland_c6": "Wendland-C6",
}

kernel_gammas = {
    "cubic_spline": float32(1.825742),
    "quartic_spline": float32(2.018932),
    "quintic_spline": float32(2.195775),
    "wendland_c2": float32(1.936492),
    "wendland_c4": float32(2.207940),
    "wendland_c6": float32(2.449490),
}


class Kernel(object):
    """
    A smoothing kernel, identified by its short name.

    Parameters
    ----------
    name : str
        One of the keys of ``kernel_names``, e.g. ``"cubic_spline"``.

    Raises
    ------
    AttributeError
        If the kernel is not known.
    """

    def __init__(self, name: str = "cubic_spline") -> None:
        if name not in kernel_names:
            raise AttributeError(
                f"Kernel {name} not known, choose one of {list(kernel_names)}."
            )

        self.name = name

        return

    def __str__(self) -> str:
        return self.long_name

    def __repr__(self) -> str:
        return f"Kernel({self.name!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Kernel) and other.name == self.name

    def __hash__(self) -> int:
        return hash(self.name)

    @property
    def long_name(self) -> str:
        return kernel_names[self.name]

    @property
    def gamma(self) -> float:
        """Ratio of the compact support radius to the smoothing length."""
        return float(kernel_gammas[self.name])

    @property
    def gamma3(self) -> float:
        """
        Cube of ``gamma``: the normalisation turning eta^3 into a number of
        neighbours inside the compact support.
        """
        return self.gamma**3
