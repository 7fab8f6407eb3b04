"""
The integer timeline.

Time is discretised into ``max_nr_timesteps`` integer ticks. A particle in
time-bin ``n`` takes steps of ``2^(n+1)`` ticks, so a particle's step always
starts and ends on a multiple of its step size. Bin 0 is used before a
particle has been assigned a step and has zero width.

All functions accept scalars or arrays of bins.
"""

import numpy as np

num_time_bins = 56
max_nr_timesteps = np.int64(1) << num_time_bins


def get_integer_timestep(time_bin: int | np.ndarray) -> np.int64 | np.ndarray:
    """
    Length of a step in time-bin ``time_bin``, in integer ticks.

    Parameters
    ----------
    time_bin : int or np.ndarray
        The time-bin(s).

    Returns
    -------
    np.int64 or np.ndarray
        ``2^(time_bin + 1)``, or 0 for bins <= 0.
    """
    time_bin = np.asarray(time_bin, dtype=np.int64)

    shift = np.maximum(time_bin, 0) + 1

    return np.where(time_bin <= 0, np.int64(0), np.left_shift(np.int64(1), shift))


def get_integer_time_begin(
    ti_current: int, time_bin: int | np.ndarray
) -> np.int64 | np.ndarray:
    """
    Integer time at which the current step of time-bin ``time_bin`` began.

    Parameters
    ----------
    ti_current : int
        The current integer time.

    time_bin : int or np.ndarray
        The time-bin(s).

    Returns
    -------
    np.int64 or np.ndarray
        Start of the step, 0 for bins of zero width.
    """
    dti = get_integer_timestep(time_bin)
    safe_dti = np.where(dti == 0, np.int64(1), dti)

    previous = np.int64(max(int(ti_current) - 1, 0))

    return np.where(dti == 0, np.int64(0), dti * (previous // safe_dti))


def get_integer_time_end(
    ti_current: int, time_bin: int | np.ndarray
) -> np.int64 | np.ndarray:
    """
    Integer time at which the current step of time-bin ``time_bin`` ends.

    Parameters
    ----------
    ti_current : int
        The current integer time.

    time_bin : int or np.ndarray
        The time-bin(s).

    Returns
    -------
    np.int64 or np.ndarray
        End of the step, 0 for bins of zero width.
    """
    dti = get_integer_timestep(time_bin)
    safe_dti = np.where(dti == 0, np.int64(1), dti)

    ti_current = np.int64(ti_current)
    mod = ti_current % safe_dti

    end = np.where(mod == 0, ti_current, ti_current - mod + safe_dti)

    return np.where(dti == 0, np.int64(0), end)
