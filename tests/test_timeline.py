"""Tests the integer timeline helpers."""

import numpy as np

from swiftmfv.timeline import (
    max_nr_timesteps,
    get_integer_timestep,
    get_integer_time_begin,
    get_integer_time_end,
)


def test_max_nr_timesteps():
    assert max_nr_timesteps == 2**56


def test_timestep():
    """Bin n takes steps of 2^(n+1) ticks; bin 0 has no width."""
    assert get_integer_timestep(0) == 0
    assert get_integer_timestep(-2) == 0
    assert get_integer_timestep(1) == 4
    assert np.array_equal(get_integer_timestep([0, 3, 10]), [0, 16, 2048])


def test_begin_and_end_inside_step():
    """ti = 40 sits inside the bin 3 step [32, 48]."""
    assert get_integer_time_begin(40, 3) == 32
    assert get_integer_time_end(40, 3) == 48


def test_begin_and_end_on_boundary():
    """At the end of a step we are still in that step."""
    assert get_integer_time_begin(48, 3) == 32
    assert get_integer_time_end(48, 3) == 48


def test_start_of_time():
    assert get_integer_time_begin(0, 3) == 0
    assert get_integer_time_end(0, 3) == 0


def test_zero_width_bin():
    assert get_integer_time_begin(1234, 0) == 0
    assert get_integer_time_end(1234, 0) == 0


def test_arrays_of_bins():
    begin = get_integer_time_begin(40, np.array([0, 1, 2, 3], dtype=np.int8))
    end = get_integer_time_end(40, np.array([0, 1, 2, 3], dtype=np.int8))

    assert np.array_equal(begin, [0, 36, 32, 32])
    assert np.array_equal(end, [0, 40, 40, 48])
