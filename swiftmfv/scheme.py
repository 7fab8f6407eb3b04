"""
Configuration of the meshless finite-volume hydrodynamics scheme.

These choices are made once, at start-up, and stay fixed for the run.
"""

from swiftmfv.kernels import Kernel

scheme_name = "GIZMO MFV (Hopkins 2015)"

gradient_implementations = {
    "sph": "SPH gradients (Price 2012)",
    "gizmo": "GIZMO gradients (Hopkins 2015)",
    "none": "No gradients (first order scheme)",
}

riemann_solver_implementations = {
    "exact": "Exact Riemann solver (Toro 2009)",
    "hllc": "HLLC Riemann solver (Toro 2009)",
    "trrs": "Two Rarefaction Riemann Solver (Toro 2009)",
    "trivial": "Trivial Riemann solver",
}

cell_slope_limiter_implementations = {
    True: "Cell wide slope limiter (Springel 2010)",
    False: "No cell wide slope limiter",
}

face_slope_limiter_implementations = {
    True: "GIZMO piecewise slope limiter (Hopkins 2015)",
    False: "No piecewise slope limiter",
}

particle_movement_descriptions = {
    True: "Fixed particles.",
    False: "Particles move with flow velocity.",
}


class SchemeConfig(object):
    """
    The options of the hydrodynamics scheme in use.

    Parameters
    ----------
    gradients : str, optional
        Gradient reconstruction, one of ``"sph"``, ``"gizmo"``, ``"none"``.

    riemann_solver : str, optional
        One of ``"exact"``, ``"hllc"``, ``"trrs"``, ``"trivial"``.

    cell_slope_limiter : bool, optional
        Whether the cell wide slope limiter is active.

    face_slope_limiter : bool, optional
        Whether the piecewise (per-face) slope limiter is active.

    fix_particles : bool, optional
        If ``True`` the particles do not move with the flow.

    total_energy : bool, optional
        If ``True`` the conserved energy variable already holds the total
        (internal plus kinetic) energy.

    kernel : Kernel or str, optional
        The smoothing kernel.

    gamma : float, optional
        The adiabatic index of the gas.

    Raises
    ------
    AttributeError
        If one of the string options is not recognised.
    """

    def __init__(
        self,
        gradients: str = "gizmo",
        riemann_solver: str = "exact",
        cell_slope_limiter: bool = True,
        face_slope_limiter: bool = True,
        fix_particles: bool = False,
        total_energy: bool = False,
        kernel: Kernel | str = "cubic_spline",
        gamma: float = 5.0 / 3.0,
    ) -> None:
        if gradients not in gradient_implementations:
            raise AttributeError(
                f"Gradient model {gradients} not known, choose one of "
                f"{list(gradient_implementations)}."
            )

        if riemann_solver not in riemann_solver_implementations:
            raise AttributeError(
                f"Riemann solver {riemann_solver} not known, choose one of "
                f"{list(riemann_solver_implementations)}."
            )

        if gamma <= 1.0:
            raise AttributeError(f"Adiabatic index must exceed 1, got {gamma}.")

        self.gradients = gradients
        self.riemann_solver = riemann_solver
        self.cell_slope_limiter = bool(cell_slope_limiter)
        self.face_slope_limiter = bool(face_slope_limiter)
        self.fix_particles = bool(fix_particles)
        self.total_energy = bool(total_energy)
        self.kernel = kernel if isinstance(kernel, Kernel) else Kernel(kernel)
        self.gamma = float(gamma)

        return

    def __repr__(self) -> str:
        return (
            f"SchemeConfig(gradients={self.gradients!r}, "
            f"riemann_solver={self.riemann_solver!r}, "
            f"cell_slope_limiter={self.cell_slope_limiter}, "
            f"face_slope_limiter={self.face_slope_limiter}, "
            f"fix_particles={self.fix_particles}, "
            f"total_energy={self.total_energy}, "
            f"kernel={self.kernel.name!r}, gamma={self.gamma})"
        )

    @property
    def name(self) -> str:
        return scheme_name
