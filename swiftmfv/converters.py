"""
Conversion of the internal particle state into output quantities.

Every converter has the signature ``convert(context, p, xp)`` where ``p`` and
``xp`` are either a single particle record and its extended state, or whole
arrays of them. Scalar quantities come back with shape ``(N,)`` for arrays
and as a length 1 vector for a single record; vector quantities come back
with a trailing axis of 3.

The converters never modify their inputs and never fail: each branch
(periodic or not, cosmological or not, coupled to gravity or not) has a
defined result.
"""

import numpy as np

from swiftmfv.engine import SimulationContext
from swiftmfv.particles import (
    hydro_get_comoving_internal_energy,
    hydro_get_comoving_entropy,
    hydro_get_drifted_velocities,
    gravity_get_comoving_potential,
)
from swiftmfv.timeline import get_integer_time_begin, get_integer_time_end


def box_wrap(x: float | np.ndarray, dim: float | np.ndarray) -> np.ndarray:
    """
    Wrap coordinates into the periodic interval ``[0, dim)``.

    Parameters
    ----------
    x : float or np.ndarray
        Coordinate(s), possibly negative or beyond the box.

    dim : float or np.ndarray
        Box size, broadcast against ``x``.

    Returns
    -------
    np.ndarray
        Wrapped coordinates. Values already inside the box are returned
        unchanged.
    """
    x = np.asarray(x, dtype=np.float64)
    dim = np.asarray(dim, dtype=np.float64)

    wrapped = x - np.floor(x / dim) * dim
    # Rounding can land exactly on either edge
    wrapped = np.where(wrapped < 0.0, wrapped + dim, wrapped)
    wrapped = np.where(wrapped >= dim, wrapped - dim, wrapped)

    return np.where((x >= 0.0) & (x < dim), x, wrapped)


def kick_factors(
    context: SimulationContext,
    ti_begin: int | np.ndarray,
    ti_end: int | np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Kick factors from the middle of a step to the current time.

    Velocities are stored at the middle of each particle's step; these
    factors bring them to ``context.ti_current``.

    Parameters
    ----------
    context : SimulationContext
        The global state.

    ti_begin : int or np.ndarray
        Start of the particle's step.

    ti_end : int or np.ndarray
        End of the particle's step. May equal ``ti_begin``.

    Returns
    -------
    tuple[np.ndarray, np.ndarray]
        ``(dt_kick_grav, dt_kick_hydro)``.
    """
    ti_begin = np.asarray(ti_begin, dtype=np.int64)
    ti_end = np.asarray(ti_end, dtype=np.int64)
    ti_current = np.int64(context.ti_current)

    ti_mid = (ti_begin + ti_end) // 2

    if context.with_cosmology:
        cosmo = context.cosmology

        dt_kick_grav = cosmo.get_grav_kick_factor(
            ti_begin, ti_current
        ) - cosmo.get_grav_kick_factor(ti_begin, ti_mid)
        dt_kick_hydro = cosmo.get_hydro_kick_factor(
            ti_begin, ti_current
        ) - cosmo.get_hydro_kick_factor(ti_begin, ti_mid)
    else:
        dt_kick_grav = (ti_current - ti_mid) * context.time_base
        dt_kick_hydro = (ti_current - ti_mid) * context.time_base

    return np.asarray(dt_kick_grav), np.asarray(dt_kick_hydro)


def convert_u(context: SimulationContext, p, xp) -> np.ndarray:
    return np.atleast_1d(hydro_get_comoving_internal_energy(p, context.scheme.gamma))


def convert_A(context: SimulationContext, p, xp) -> np.ndarray:
    return np.atleast_1d(hydro_get_comoving_entropy(p, context.scheme.gamma))


def convert_Etot(context: SimulationContext, p, xp) -> np.ndarray:
    """
    Total energy of the particle(s).

    When the scheme evolves the total energy it is stored directly;
    otherwise the conserved energy is the internal energy only and the
    kinetic energy ``|p|^2 / 2m`` is added back.
    """
    energy = np.asarray(p["conserved"]["energy"], dtype=np.float64)

    if not context.scheme.total_energy:
        momentum = np.asarray(p["conserved"]["momentum"], dtype=np.float64)
        mass = np.asarray(p["conserved"]["mass"], dtype=np.float64)

        with np.errstate(divide="ignore", invalid="ignore"):
            kinetic = np.where(
                mass > 0.0, 0.5 * np.sum(momentum * momentum, axis=-1) / mass, 0.0
            )

        energy = energy + kinetic

    return np.atleast_1d(energy.astype(np.float32))


def convert_part_pos(context: SimulationContext, p, xp) -> np.ndarray:
    x = np.asarray(p["x"], dtype=np.float64)

    if context.periodic:
        return box_wrap(x, context.dim)

    return x.copy()


def convert_part_vel(context: SimulationContext, p, xp) -> np.ndarray:
    """
    Peculiar velocity of the particle(s) at the current time.

    Velocities are extrapolated from the middle of the particle's step to
    the current time using the kick factors, then converted from the
    internal comoving velocity to the peculiar one (a factor ``a^-2``; unity
    without cosmology).
    """
    time_bin = np.asarray(p["time_bin"])

    ti_begin = get_integer_time_begin(context.ti_current, time_bin)
    ti_end = get_integer_time_end(context.ti_current, time_bin)

    dt_kick_grav, dt_kick_hydro = kick_factors(context, ti_begin, ti_end)

    v = hydro_get_drifted_velocities(
        p, xp, dt_kick_hydro, dt_kick_grav, gparts=context.gparts
    )

    if context.with_cosmology:
        v = (v * context.a2_inv).astype(np.float32)

    return v


def convert_part_potential(context: SimulationContext, p, xp) -> np.ndarray:
    return np.atleast_1d(gravity_get_comoving_potential(context.gparts, p["gpart"]))
