"""
Particle storage and the accessors the output layer relies on.

Particles live in numpy structured arrays. A hydro particle refers to its
gravity counterpart only through the index stored in ``gpart`` (``-1`` when
the particle is not coupled to gravity); the gravity particles themselves
are owned by a separate array.

The accessors are written so that they accept either a single record or a
whole array of records.
"""

import numpy as np

conserved_dtype = np.dtype(
    [("mass", np.float32), ("momentum", np.float32, (3,)), ("energy", np.float32)]
)

primitives_dtype = np.dtype(
    [("rho", np.float32), ("v", np.float32, (3,)), ("P", np.float32)]
)

part_dtype = np.dtype(
    [
        ("id", np.uint64),
        ("gpart", np.int64),
        ("x", np.float64, (3,)),
        ("v", np.float32, (3,)),
        ("a_hydro", np.float32, (3,)),
        ("h", np.float32),
        ("time_bin", np.int8),
        ("conserved", conserved_dtype),
        ("primitives", primitives_dtype),
    ]
)

xpart_dtype = np.dtype([("x_diff", np.float32, (3,)), ("v_full", np.float32, (3,))])

gpart_dtype = np.dtype(
    [
        ("id_or_neg_offset", np.int64),
        ("x", np.float64, (3,)),
        ("v_full", np.float32, (3,)),
        ("a_grav", np.float32, (3,)),
        ("mass", np.float32),
        ("potential", np.float32),
        ("time_bin", np.int8),
    ]
)


def allocate_particles(n_part: int) -> tuple[np.ndarray, np.ndarray]:
    """
    Allocate zeroed hydro particles and their extended state.

    Parameters
    ----------
    n_part : int
        Number of particles.

    Returns
    -------
    tuple[np.ndarray, np.ndarray]
        The ``parts`` and ``xparts`` arrays, of equal length. No particle is
        coupled to gravity.
    """
    parts = np.zeros(n_part, dtype=part_dtype)
    parts["gpart"] = -1

    xparts = np.zeros(n_part, dtype=xpart_dtype)

    return parts, xparts


def allocate_gparts(n_gpart: int) -> np.ndarray:
    """
    Allocate zeroed gravity particles.

    Parameters
    ----------
    n_gpart : int
        Number of gravity particles.

    Returns
    -------
    np.ndarray
        The ``gparts`` array.
    """
    return np.zeros(n_gpart, dtype=gpart_dtype)


def link_gparts(parts: np.ndarray, gparts: np.ndarray) -> None:
    """
    Couple the first ``len(parts)`` gravity particles to the hydro particles.

    Parameters
    ----------
    parts : np.ndarray
        Hydro particles, modified in place.

    gparts : np.ndarray
        Gravity particles, modified in place.

    Raises
    ------
    AttributeError
        If there are fewer gravity particles than hydro particles.
    """
    n_part = parts.shape[0]

    if gparts.shape[0] < n_part:
        raise AttributeError(
            f"Cannot link {n_part} particles to {gparts.shape[0]} gravity particles."
        )

    parts["gpart"] = np.arange(n_part)
    # Negative offsets point back into the hydro particle array
    gparts["id_or_neg_offset"][:n_part] = -np.arange(n_part)
    gparts["x"][:n_part] = parts["x"]
    gparts["mass"][:n_part] = parts["conserved"]["mass"]

    return


def gravity_lookup(
    gparts: np.ndarray | None, index: int | np.ndarray, field: str
) -> np.ndarray:
    """
    Gather ``field`` from the gravity particles at ``index``.

    Particles with a negative index (or when there are no gravity particles
    at all) get zeros.

    Parameters
    ----------
    gparts : np.ndarray or None
        The gravity particles.

    index : int or np.ndarray
        Index (or indices) into ``gparts``.

    field : str
        Name of the ``gpart_dtype`` field.

    Returns
    -------
    np.ndarray
        Gathered values, shaped like ``index`` plus the field's own shape.
    """
    index = np.asarray(index, dtype=np.int64)
    subshape = gpart_dtype[field].shape

    if gparts is None or gparts.shape[0] == 0:
        return np.zeros(index.shape + subshape, dtype=gpart_dtype[field].base)

    coupled = index >= 0
    values = gparts[field][np.where(coupled, index, 0)]

    mask = coupled.reshape(coupled.shape + (1,) * len(subshape))

    return np.where(mask, values, 0).astype(gpart_dtype[field].base)


def hydro_get_comoving_internal_energy(
    p: np.void | np.ndarray, gamma: float
) -> np.ndarray:
    """
    Comoving specific internal energy, ``P / ((gamma - 1) rho)``.

    Particles with no density have no internal energy.
    """
    rho = np.asarray(p["primitives"]["rho"], dtype=np.float64)
    P = np.asarray(p["primitives"]["P"], dtype=np.float64)

    with np.errstate(divide="ignore", invalid="ignore"):
        u = np.where(rho > 0.0, P / ((gamma - 1.0) * rho), 0.0)

    return u.astype(np.float32)


def hydro_get_comoving_entropy(p: np.void | np.ndarray, gamma: float) -> np.ndarray:
    """Comoving entropic function, ``P / rho^gamma``; zero without density."""
    rho = np.asarray(p["primitives"]["rho"], dtype=np.float64)
    P = np.asarray(p["primitives"]["P"], dtype=np.float64)

    with np.errstate(divide="ignore", invalid="ignore"):
        A = np.where(rho > 0.0, P / np.power(rho, gamma), 0.0)

    return A.astype(np.float32)


def hydro_get_drifted_velocities(
    p: np.void | np.ndarray,
    xp: np.void | np.ndarray,
    dt_kick_hydro: float | np.ndarray,
    dt_kick_grav: float | np.ndarray,
    gparts: np.ndarray | None = None,
) -> np.ndarray:
    """
    Extrapolate the velocity from the last kick to the current time.

    Parameters
    ----------
    p : np.void or np.ndarray
        Particle(s).

    xp : np.void or np.ndarray
        Extended particle state, matching ``p``.

    dt_kick_hydro : float or np.ndarray
        Kick factor applied to the hydrodynamical acceleration.

    dt_kick_grav : float or np.ndarray
        Kick factor applied to the gravitational acceleration.

    gparts : np.ndarray, optional
        Gravity particles; only particles coupled to one get the
        gravitational term.

    Returns
    -------
    np.ndarray
        Drifted velocities, shape ``(..., 3)``.
    """
    dt_kick_hydro = np.expand_dims(np.asarray(dt_kick_hydro, dtype=np.float64), -1)
    dt_kick_grav = np.expand_dims(np.asarray(dt_kick_grav, dtype=np.float64), -1)

    a_grav = gravity_lookup(gparts, p["gpart"], "a_grav")

    v = (
        np.asarray(xp["v_full"], dtype=np.float64)
        + np.asarray(p["a_hydro"], dtype=np.float64) * dt_kick_hydro
        + a_grav * dt_kick_grav
    )

    return v.astype(np.float32)


def gravity_get_comoving_potential(
    gparts: np.ndarray | None, index: int | np.ndarray
) -> np.ndarray:
    """Comoving potential of the gravity particle(s) at ``index``; 0 if absent."""
    return gravity_lookup(gparts, index, "potential")


def hydro_first_init_part(
    parts: np.ndarray, xparts: np.ndarray, gamma: float, total_energy: bool = False
) -> None:
    """
    Turn freshly read initial conditions into conserved variables.

    The ``InternalEnergy`` dataset is read into ``conserved.energy`` as a
    specific energy; here it becomes the energy of the particle, the
    momentum is set from the velocity, and the primitive velocity and
    pressure are initialised. The pressure is only set where a density was
    read.

    Parameters
    ----------
    parts : np.ndarray
        Particles, modified in place.

    xparts : np.ndarray
        Extended particle state, modified in place.

    gamma : float
        Adiabatic index.

    total_energy : bool, optional
        Whether the conserved energy holds the total energy.
    """
    conserved = parts["conserved"]
    primitives = parts["primitives"]

    mass = conserved["mass"].astype(np.float64)
    u = conserved["energy"].astype(np.float64)
    v = parts["v"].astype(np.float64)

    primitives["v"] = v
    conserved["momentum"] = mass[:, None] * v

    energy = mass * u
    if total_energy:
        energy += 0.5 * mass * np.sum(v * v, axis=-1)
    conserved["energy"] = energy

    rho = primitives["rho"].astype(np.float64)
    primitives["P"] = np.where(rho > 0.0, (gamma - 1.0) * rho * u, primitives["P"])

    xparts["v_full"] = parts["v"]

    return
